"""
Day-granularity predictive context.

Works on the daily frame directly (independent of the monthly path):
precursor words in the days before negative spikes, the lag between
sleep disruption and the following days' negativity, and same-day
co-occurrence of sensory symptoms with interpersonal terms.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from summit.config import SummitConfig
from summit.lexicon import Category, count
from summit.models import (
    CoOccurrence,
    DailyPrecursorWord,
    DailyPredictiveContext,
    SleepCorrelation,
)

logger = logging.getLogger(__name__)


def spike_threshold(ratios: np.ndarray, percentile: float) -> Optional[float]:
    """Percentile of the strictly positive daily ratios; None if there are none."""
    positive = ratios[ratios > 0]
    if len(positive) == 0:
        return None
    return float(np.percentile(positive, percentile))


def _unique(terms: Sequence[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(terms))


# ---------------------------------------------------------------------------
# Spike precursors
# ---------------------------------------------------------------------------

def find_spike_precursors(
    daily: pd.DataFrame,
    threshold: float,
    cfg: SummitConfig,
) -> Tuple[DailyPrecursorWord, ...]:
    """
    Tally candidate terms over the ``lookback_days`` calendar days before
    every day at or above the spike threshold. Ranked by that tally.
    """
    dc = cfg.daily
    candidates = _unique(cfg.lexicon.terms(Category.PRECURSOR_CANDIDATE))
    days = daily["day"]
    texts = daily["text"].tolist()
    ratios = daily["negative_ratio"].to_numpy(dtype=np.float64)

    corpus = {w: sum(count(t, (w,)) for t in texts) for w in candidates}
    before: Dict[str, int] = {w: 0 for w in candidates}

    lookback = pd.Timedelta(days=dc.lookback_days)
    for i in np.flatnonzero(ratios >= threshold):
        day = days.iloc[i]
        window = daily.loc[(days >= day - lookback) & (days < day), "text"]
        for text in window:
            for w in candidates:
                before[w] += count(text, (w,))

    ranked = sorted(
        (w for w in candidates if before[w] > 0),
        key=lambda w: before[w],
        reverse=True,
    )[: dc.top_n]
    return tuple(
        DailyPrecursorWord(
            word=w,
            before_spike_count=before[w],
            corpus_count=corpus[w],
            lead_days=dc.lookback_days,
        )
        for w in ranked
    )


# ---------------------------------------------------------------------------
# Sleep disruption → following days
# ---------------------------------------------------------------------------

def _following_means(daily: pd.DataFrame, window_days: int) -> List[Optional[float]]:
    """Mean negative ratio of the recorded days in (d, d + window_days], per day."""
    days = daily["day"]
    ratios = daily["negative_ratio"].astype(np.float64)
    span = pd.Timedelta(days=window_days)

    means: List[Optional[float]] = []
    for day in days:
        following = ratios[(days > day) & (days <= day + span)]
        means.append(float(following.mean()) if len(following) else None)
    return means


def detect_sleep_correlation(daily: pd.DataFrame, cfg: SummitConfig) -> Optional[SleepCorrelation]:
    """
    Compare the following days' negativity after sleep-disrupted days with
    that after other days. Emitted only for a clear positive gap with
    enough samples on both sides.
    """
    dc = cfg.daily
    sleep_terms = cfg.lexicon.terms(Category.SLEEP_DISRUPTION)
    disrupted_flags = [count(t, sleep_terms) > 0 for t in daily["text"]]

    disrupted: List[float] = []
    baseline: List[float] = []
    for flag, value in zip(disrupted_flags, _following_means(daily, dc.sleep_window)):
        if value is None:
            continue
        (disrupted if flag else baseline).append(value)

    if len(disrupted) < dc.sleep_min_samples or len(baseline) < dc.sleep_min_samples:
        return None

    disrupted_mean = float(np.mean(disrupted))
    baseline_mean = float(np.mean(baseline))
    diff = disrupted_mean - baseline_mean
    if diff <= dc.sleep_min_diff:
        return None

    return SleepCorrelation(
        lag_days=dc.sleep_lag_days,
        strength=min(1.0, round(diff * dc.sleep_strength_scale, 2)),
        disrupted_mean=round(disrupted_mean, 3),
        baseline_mean=round(baseline_mean, 3),
        disrupted_samples=len(disrupted),
        baseline_samples=len(baseline),
    )


# ---------------------------------------------------------------------------
# Sensory symptoms ↔ interpersonal terms
# ---------------------------------------------------------------------------

def detect_sensory_interpersonal(daily: pd.DataFrame, cfg: SummitConfig) -> Tuple[CoOccurrence, ...]:
    """
    For each sensory symptom seen on enough days, the share of those days
    that also mention any interpersonal term, paired with the interpersonal
    term present on the most of those days.
    """
    dc = cfg.daily
    texts = daily["text"].tolist()
    people = _unique(cfg.lexicon.terms(Category.INTERPERSONAL))

    results: List[CoOccurrence] = []
    for symptom in _unique(cfg.lexicon.terms(Category.SENSORY_SYMPTOM)):
        symptom_days = [t for t in texts if symptom in t]
        if len(symptom_days) < dc.cooccurrence_min_days:
            continue

        co_days = [t for t in symptom_days if any(p in t for p in people)]
        rate = len(co_days) / len(symptom_days)
        if rate <= dc.cooccurrence_min_rate:
            continue

        per_person = [(p, sum(1 for t in co_days if p in t)) for p in people]
        top_person = max(per_person, key=lambda pc: pc[1])[0]

        results.append(CoOccurrence(
            symptom=symptom,
            interpersonal_term=top_person,
            rate=round(rate, 2),
            symptom_days=len(symptom_days),
            co_days=len(co_days),
        ))

    return tuple(results)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def calc_daily_context(daily: pd.DataFrame, cfg: SummitConfig) -> DailyPredictiveContext:
    """Full daily context, or the default empty context below ``min_days`` days."""
    dc = cfg.daily
    n = len(daily)
    if n < dc.min_days:
        logger.debug("daily context skipped: %d days < %d", n, dc.min_days)
        return DailyPredictiveContext()

    ratios = daily["negative_ratio"].to_numpy(dtype=np.float64)
    threshold = spike_threshold(ratios, dc.spike_percentile)
    precursors = find_spike_precursors(daily, threshold, cfg) if threshold is not None else ()

    return DailyPredictiveContext(
        day_count=n,
        spike_threshold=round(threshold, 4) if threshold is not None else None,
        precursor_words=precursors,
        sleep_correlation=detect_sleep_correlation(daily, cfg),
        sensory_interpersonal=detect_sensory_interpersonal(daily, cfg),
    )
