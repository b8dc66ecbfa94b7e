"""
Predictive detectors over the monthly frame: precursor words, active
signals, and the symptom → emotion lag.

Each detector is a pure function that inspects the monthly frame and
returns structured records. No side effects.
"""

import logging
from functools import reduce
from typing import Dict, List, Mapping, Tuple

import numpy as np
import pandas as pd

from summit.config import PrecursorParams, SummitConfig
from summit.lexicon import Category, count
from summit.models import (
    ActiveSignal,
    PrecursorWord,
    PredictiveIndicators,
    SymptomCorrelation,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Precursor words
# ---------------------------------------------------------------------------

def _bump(scores: Mapping[str, float], word: str, p: PrecursorParams) -> Dict[str, float]:
    """Return a new score map with one more hit recorded for ``word``."""
    updated = dict(scores)
    if word in updated:
        updated[word] = min(p.correlation_cap, round(updated[word] + p.correlation_step, 2))
    else:
        updated[word] = p.initial_correlation
    return updated


def mine_precursor_words(df: pd.DataFrame, cfg: SummitConfig) -> Tuple[PrecursorWord, ...]:
    """
    Terms present in the month *before* each sharp rise in negative ratio.

    A rise is a month-over-month increase above ``spike_delta``. The first hit
    for a term scores ``initial_correlation``; each later hit adds
    ``correlation_step`` up to ``correlation_cap``. Top ``top_n`` by score.
    """
    p = cfg.precursor
    candidates = tuple(dict.fromkeys(cfg.lexicon.terms(Category.PRECURSOR_CANDIDATE)))
    ratios = df["negative_ratio"].to_numpy(dtype=np.float64)
    texts = df["text"].tolist()

    hits = [
        word
        for i in range(1, len(df))
        if ratios[i] - ratios[i - 1] > p.spike_delta
        for word in candidates
        if count(texts[i - 1], (word,)) > 0
    ]
    scores = reduce(lambda acc, word: _bump(acc, word, p), hits, {})

    ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)[: p.top_n]
    return tuple(
        PrecursorWord(word=word, lead_days=p.lead_days, correlation=score)
        for word, score in ranked
    )


# ---------------------------------------------------------------------------
# Active signals
# ---------------------------------------------------------------------------

def detect_active_signals(
    df: pd.DataFrame,
    precursors: Tuple[PrecursorWord, ...],
    cfg: SummitConfig,
) -> Tuple[ActiveSignal, ...]:
    """
    Latest month against the previous one. Every rule is independent;
    any number may fire together.
    """
    if len(df) < 2:
        return ()

    st = cfg.signals
    latest = df.iloc[-1]
    prev = df.iloc[-2]
    signals: List[ActiveSignal] = []

    symptoms, prev_symptoms = int(latest["physical_symptom_count"]), int(prev["physical_symptom_count"])
    if symptoms >= prev_symptoms * st.symptom_growth and symptoms >= st.symptom_min:
        signals.append(ActiveSignal(
            signal="physical symptoms increasing",
            severity="warning" if symptoms >= st.symptom_warning else "caution",
            evidence=f"{prev_symptoms} → {symptoms} mentions",
        ))

    fp, prev_fp = float(latest["first_person_rate"]), float(prev["first_person_rate"])
    if abs(fp - prev_fp) > prev_fp * st.first_person_change:
        signals.append(ActiveSignal(
            signal="more self-reference" if fp > prev_fp else "less self-reference",
            severity="watch",
            evidence=f"first-person rate {prev_fp:.1f} → {fp:.1f} per 1000 chars",
        ))

    sl, prev_sl = float(latest["avg_sentence_length"]), float(prev["avg_sentence_length"])
    if sl < prev_sl * st.sentence_collapse:
        signals.append(ActiveSignal(
            signal="sentences shortening",
            severity="caution",
            evidence=f"average sentence length {prev_sl:.0f} → {sl:.0f} chars",
        ))

    entries, prev_entries = int(latest["entry_count"]), int(prev["entry_count"])
    if entries < prev_entries * st.entry_collapse and prev_entries >= st.entry_min_previous:
        signals.append(ActiveSignal(
            signal="writing frequency dropping",
            severity="caution",
            evidence=f"{prev_entries} → {entries} entries",
        ))

    sm, prev_sm = float(latest["self_monitor_rate"]), float(prev["self_monitor_rate"])
    if prev_sm > st.monitor_before and sm < st.monitor_after:
        signals.append(ActiveSignal(
            signal="self-monitoring words disappearing",
            severity="watch",
            evidence=f"self-monitoring rate {prev_sm:.1f} → {sm:.1f} per 1000 chars",
        ))

    latest_text = latest["text"]
    for p in precursors[: st.precursor_top]:
        if count(latest_text, (p.word,)) > 0:
            signals.append(ActiveSignal(
                signal=f"precursor word '{p.word}' present",
                severity="caution" if p.correlation > st.precursor_caution else "watch",
                evidence=f"appeared before past negative spikes (correlation {p.correlation:.1f})",
            ))

    return tuple(signals)


# ---------------------------------------------------------------------------
# Symptom → emotion lag
# ---------------------------------------------------------------------------

def detect_symptom_lag(df: pd.DataFrame, cfg: SummitConfig) -> Tuple[SymptomCorrelation, ...]:
    """
    Months with symptom counts above ``symptom_multiplier`` × the series mean
    (excluding the final two months), followed by a rise in negative ratio
    the month after.
    """
    sl = cfg.symptom_lag
    n = len(df)
    if n < sl.min_months:
        return ()

    symptoms = df["physical_symptom_count"].to_numpy(dtype=np.float64)
    ratios = df["negative_ratio"].to_numpy(dtype=np.float64)
    cutoff = symptoms.mean() * sl.symptom_multiplier

    # The last two months never qualify
    heavy = [i for i in range(n - 2) if symptoms[i] > cutoff]
    if len(heavy) < sl.min_qualifying:
        return ()

    avg_delta = float(np.mean([ratios[i + 1] - ratios[i] for i in heavy]))
    if avg_delta <= sl.min_delta:
        return ()

    return (SymptomCorrelation(
        symptom="physical symptoms",
        lag_days=sl.lag_days,
        strength=min(1.0, round(avg_delta * sl.strength_scale, 2)),
    ),)


def calc_predictive_indicators(df: pd.DataFrame, cfg: SummitConfig) -> PredictiveIndicators:
    """Precursors, active signals, and symptom lag in one record."""
    if df.empty:
        logger.debug("predictive indicators skipped: no months")
        return PredictiveIndicators()

    precursors = mine_precursor_words(df, cfg)
    return PredictiveIndicators(
        precursor_words=precursors,
        active_signals=detect_active_signals(df, precursors, cfg),
        symptom_correlations=detect_symptom_lag(df, cfg),
    )
