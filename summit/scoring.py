"""
Composite scores: the current-state snapshot and the yearly stability index.

Both read the monthly frame and return typed records. The current state
contrasts the last few months against everything before them and is absent
(None) when either side is too short.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from summit.config import SummitConfig
from summit.models import CurrentState, StabilityIndex
from summit.trends import _ols_slope, population_std

logger = logging.getLogger(__name__)


def classify_trend(slope: float, cfg: SummitConfig) -> str:
    """Map the recent OLS slope of the negative ratio to a direction label."""
    cs = cfg.current_state
    if slope < cs.improving_slope:
        return "improving"
    if slope > cs.worsening_slope:
        return "worsening"
    return "stable"


def compute_stability_score(
    recent_neg_ratio: float,
    avg_symptoms: float,
    volatility: float,
    avg_entries: float,
    cfg: SummitConfig,
) -> int:
    """Sum of four floored terms, capped at 100 (see StabilityWeights)."""
    sw = cfg.stability
    negativity = max(0.0, sw.negativity_max - sw.negativity_slope * recent_neg_ratio)
    symptoms = max(0.0, sw.symptom_max - sw.symptom_slope * avg_symptoms)
    steadiness = max(0.0, sw.volatility_max - sw.volatility_slope * volatility)
    volume = max(0.0, min(sw.volume_max, sw.volume_per_entry * avg_entries))
    return int(round(min(100.0, negativity + symptoms + steadiness + volume)))


def classify_risk(
    recent_neg_ratio: float,
    avg_symptoms: float,
    trend: str,
    cfg: SummitConfig,
) -> str:
    """
    First match wins:
        elevated - heavy negativity or frequent physical symptoms
        moderate - noticeable negativity or a worsening trend
        low      - everything else
    """
    cs = cfg.current_state
    if recent_neg_ratio > cs.elevated_neg_ratio or avg_symptoms > cs.elevated_symptoms:
        return "elevated"
    if recent_neg_ratio > cs.moderate_neg_ratio or trend == "worsening":
        return "moderate"
    return "low"


def calc_current_state(df: pd.DataFrame, cfg: SummitConfig) -> Optional[CurrentState]:
    """
    Snapshot of the last ``recent_months`` months against all prior months.

    Returns None unless both windows hold at least three months.
    """
    cs = cfg.current_state
    n = len(df)
    if n < cs.recent_months or n - cs.recent_months < cs.min_historical_months:
        logger.debug("current state skipped: %d months", n)
        return None

    recent = df.iloc[-cs.recent_months:]
    historical = df.iloc[:-cs.recent_months]

    recent_ratios = recent["negative_ratio"].to_numpy(dtype=np.float64)
    recent_neg = float(recent_ratios.mean())
    avg_symptoms = float(recent["physical_symptom_count"].mean())
    avg_entries = float(recent["entry_count"].mean())

    slope = _ols_slope(recent_ratios)
    trend = classify_trend(slope, cfg)
    stability = compute_stability_score(
        recent_neg, avg_symptoms, population_std(recent_ratios), avg_entries, cfg,
    )

    last_ma = recent["negative_ratio_ma3"].iloc[-1] if "negative_ratio_ma3" in recent else np.nan
    recent_ma = recent_neg if pd.isna(last_ma) else float(last_ma)

    def mean(frame: pd.DataFrame, col: str, digits: int) -> float:
        return round(float(frame[col].mean()), digits)

    return CurrentState(
        recent_neg_ratio=round(recent_neg, 3),
        recent_neg_ratio_ma=round(recent_ma, 3),
        recent_self_denial=mean(recent, "self_denial_count", 2),
        recent_avg_sentence_length=mean(recent, "avg_sentence_length", 1),
        recent_first_person_rate=mean(recent, "first_person_rate", 2),
        recent_physical_symptoms=round(avg_symptoms, 1),
        recent_work_word_rate=mean(recent, "work_word_rate", 2),
        historical_neg_ratio=mean(historical, "negative_ratio", 3),
        historical_self_denial=mean(historical, "self_denial_count", 2),
        historical_avg_sentence_length=mean(historical, "avg_sentence_length", 1),
        historical_first_person_rate=mean(historical, "first_person_rate", 2),
        historical_physical_symptoms=mean(historical, "physical_symptom_count", 1),
        trend_slope=round(slope, 4),
        neg_ratio_trend=trend,
        overall_stability=stability,
        risk_level=classify_risk(recent_neg, avg_symptoms, trend, cfg),
    )


# ---------------------------------------------------------------------------
# Yearly stability index
# ---------------------------------------------------------------------------

def calc_stability_by_year(df: pd.DataFrame) -> Tuple[StabilityIndex, ...]:
    """
    Per calendar year, from that year's months:

        positive score   = (1 − mean neg ratio) · 40
        volatility score = max(0, 30 − 150σ)        σ = population std of neg ratio
        denial score     = max(0, 30 − 3 · mean self-denial count)

    Score is the rounded sum, clamped to [0, 100].
    """
    if df.empty:
        return ()

    years = df["month"].str.slice(0, 4)
    results: List[StabilityIndex] = []

    for year, months in df.groupby(years, sort=True):
        ratios = months["negative_ratio"].to_numpy(dtype=np.float64)
        positive_ratio = 1.0 - float(ratios.mean())
        volatility = population_std(ratios)
        denial_avg = float(months["self_denial_count"].mean())

        raw = (
            positive_ratio * 40.0
            + max(0.0, 30.0 - volatility * 150.0)
            + max(0.0, 30.0 - denial_avg * 3.0)
        )
        results.append(StabilityIndex(
            year=str(year),
            score=int(round(float(np.clip(raw, 0.0, 100.0)))),
            positive_ratio=round(positive_ratio, 3),
            volatility=round(volatility, 3),
            self_denial_avg=round(denial_avg, 2),
        ))

    return tuple(results)
