"""
Trend and seasonal signals over the monthly frame.

Moving averages and seasonal baselines are column transforms (frame in,
frame with new columns out). Trend shifts and seasonal cross statistics
are read-only scans that return typed records.

All functions are pure transforms with no I/O.
"""

import logging
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd

from summit.config import SummitConfig
from summit.models import SeasonalStat, ShiftMetrics, ShiftType, TrendShift
from summit.stats import chi_square_2x2, proportion_z_test

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Series primitives
# ---------------------------------------------------------------------------

def _ols_slope(y: np.ndarray) -> float:
    """
    Ordinary least-squares slope for evenly-spaced data.

    Uses the closed-form solution:  slope = Σ(x_c · y_c) / Σ(x_c²)
    where x_c and y_c are mean-centered.
    """
    n = len(y)
    if n < 2:
        return 0.0
    x = np.arange(n, dtype=np.float64)
    x_c = x - x.mean()
    y_c = y - y.mean()
    denom = np.dot(x_c, x_c)
    if denom == 0.0:
        return 0.0
    return float(np.dot(x_c, y_c) / denom)


def population_std(values) -> float:
    """Population standard deviation (ddof=0); 0.0 below two points."""
    arr = np.asarray(values, dtype=np.float64)
    if len(arr) < 2:
        return 0.0
    return float(np.std(arr, ddof=0))


def moving_average(series: pd.Series, window: int) -> pd.Series:
    """
    Mean of the non-missing values in [i-window+1, i].

    Positions with i < window-1 are NaN (absent), not partial averages.
    """
    ma = series.rolling(window, min_periods=1).mean()
    return ma.where(np.arange(len(series)) >= window - 1)


# ---------------------------------------------------------------------------
# Column transforms
# ---------------------------------------------------------------------------

def compute_moving_averages(df: pd.DataFrame, cfg: SummitConfig) -> pd.DataFrame:
    """Add 3- and 6-month moving averages of the negative ratio."""
    w = cfg.windows
    ratios = df["negative_ratio"].astype(np.float64)
    df["negative_ratio_ma3"] = moving_average(ratios, w.ma_short)
    df["negative_ratio_ma6"] = moving_average(ratios, w.ma_long)
    return df


def compute_seasonal_baseline(df: pd.DataFrame, cfg: SummitConfig) -> pd.DataFrame:
    """
    Same-calendar-month mean of the negative ratio across years.

    Only filled where at least ``seasonal_min_years`` such months exist;
    seasonal_deviation = negative_ratio − baseline.
    """
    ratios = df["negative_ratio"].astype(np.float64)
    calendar_month = df["month"].str.slice(5, 7)

    baseline = ratios.groupby(calendar_month).transform("mean")
    n_years = ratios.groupby(calendar_month).transform("count")
    baseline = baseline.where(n_years >= cfg.windows.seasonal_min_years)

    df["seasonal_baseline"] = baseline
    df["seasonal_deviation"] = ratios - baseline
    return df


# ---------------------------------------------------------------------------
# Trend shifts
# ---------------------------------------------------------------------------

def _describe_shift(
    shift_type: ShiftType,
    diff: float,
    vocab_shift: float,
    rates: Dict[str, float],
    cfg: SummitConfig,
) -> str:
    parts: List[str] = []

    if shift_type is ShiftType.DETERIORATION:
        parts.append(f"Negative ratio up {round(abs(diff) * 100)}pt")
    elif shift_type is ShiftType.RECOVERY:
        parts.append(f"Negative ratio down {round(abs(diff) * 100)}pt")

    if vocab_shift > cfg.trend_shift.vocab_shift_threshold:
        if rates["fp_after"] > rates["fp_before"] * 1.3:
            parts.append("more first-person references (turning inward)")
        elif rates["fp_after"] < rates["fp_before"] * 0.7:
            parts.append("fewer first-person references (turning outward or into a role)")
        if rates["sm_after"] < rates["sm_before"] * 0.5:
            parts.append("self-monitoring words fading")
        elif rates["sm_after"] > rates["sm_before"] * 1.5:
            parts.append("more self-monitoring words")
        if abs(rates["sl_after"] - rates["sl_before"]) > 10:
            parts.append(
                "longer sentences" if rates["sl_after"] > rates["sl_before"] else "shorter sentences"
            )

    return "; ".join(parts) or "change detected"


def detect_trend_shifts(df: pd.DataFrame, cfg: SummitConfig) -> Tuple[TrendShift, ...]:
    """
    Compare each 3-month window with the following 3 months.

        diff      = mean(after) − mean(before)   (negative ratio)
        threshold = max(0.05, 0.8σ)              (σ over the full series)

    diff > threshold → deterioration, diff < −threshold → recovery,
    otherwise a vocabulary-shift score above its threshold → vocabulary_shift.
    A window whose start lies within ``merge_gap`` months of the previous
    same-type shift's end extends that shift instead of opening a new one.
    """
    ts = cfg.trend_shift
    n = len(df)
    if n < ts.min_months:
        logger.debug("trend shifts skipped: %d months < %d", n, ts.min_months)
        return ()

    months = df["month"].tolist()
    neg = df["negative_ratio"].to_numpy(dtype=np.float64)
    fp = df["first_person_rate"].to_numpy(dtype=np.float64)
    sl = df["avg_sentence_length"].to_numpy(dtype=np.float64)
    sm = df["self_monitor_rate"].to_numpy(dtype=np.float64)

    sigma = population_std(neg)
    threshold = max(ts.min_threshold, sigma * ts.sigma_multiplier)
    w = ts.window

    shifts: List[dict] = []

    for i in range(w, n - w + 1):
        before = slice(i - w, i)
        after = slice(i, i + w)

        avg_before = float(neg[before].mean())
        avg_after = float(neg[after].mean())
        diff = avg_after - avg_before

        rates = {
            "fp_before": float(fp[before].mean()), "fp_after": float(fp[after].mean()),
            "sl_before": float(sl[before].mean()), "sl_after": float(sl[after].mean()),
            "sm_before": float(sm[before].mean()), "sm_after": float(sm[after].mean()),
        }
        vocab_shift = (
            abs(rates["fp_after"] - rates["fp_before"]) / max(rates["fp_before"], ts.rate_floor)
            + abs(rates["sl_after"] - rates["sl_before"]) / max(rates["sl_before"], ts.sentence_floor)
            + abs(rates["sm_after"] - rates["sm_before"]) / max(rates["sm_before"], ts.rate_floor)
        )

        if abs(diff) <= threshold and vocab_shift <= ts.vocab_shift_threshold:
            continue

        if diff > threshold:
            shift_type = ShiftType.DETERIORATION
        elif diff < -threshold:
            shift_type = ShiftType.RECOVERY
        elif vocab_shift > ts.vocab_shift_threshold:
            shift_type = ShiftType.VOCABULARY_SHIFT
        else:
            shift_type = ShiftType.PLATEAU

        magnitude = abs(diff) / sigma if sigma > 0 else 0.0

        last = shifts[-1] if shifts else None
        if last is not None and last["type"] is shift_type and i - last["end"] <= ts.merge_gap:
            last["end"] = i + w - 1
            last["magnitude"] = max(last["magnitude"], magnitude)
            continue

        shifts.append({
            "start": i - w,
            "end": i + w - 1,
            "type": shift_type,
            "magnitude": magnitude,
            "metrics": ShiftMetrics(
                neg_ratio_before=round(avg_before, 3),
                neg_ratio_after=round(avg_after, 3),
                vocab_shift_score=round(vocab_shift, 2),
                sentence_length_change=round(rates["sl_after"] - rates["sl_before"], 1),
                first_person_change=round(rates["fp_after"] - rates["fp_before"], 2),
            ),
            "description": _describe_shift(shift_type, diff, vocab_shift, rates, cfg),
        })

    return tuple(
        TrendShift(
            start_month=months[s["start"]],
            end_month=months[s["end"]],
            type=s["type"],
            magnitude=round(s["magnitude"], 2),
            metrics=s["metrics"],
            description=s["description"],
        )
        for s in shifts
    )


# ---------------------------------------------------------------------------
# Seasonal cross statistics
# ---------------------------------------------------------------------------

SEASONS = {
    "spring": ("03", "04", "05"),
    "summer": ("06", "07", "08"),
    "autumn": ("09", "10", "11"),
    "winter": ("12", "01", "02"),
}


def season_of(month: str) -> str:
    """Meteorological season of a YYYY-MM key."""
    cm = month[5:7]
    for season, members in SEASONS.items():
        if cm in members:
            return season
    raise ValueError(f"Not a YYYY-MM month key: {month!r}")


def calc_seasonal_stats(df: pd.DataFrame, cfg: SummitConfig) -> Tuple[SeasonalStat, ...]:
    """
    Per-season averages, each tested against all other seasons pooled:
    a 2×2 chi-square on (negative, positive) counts and a z-test on the
    negative share of emotion words.
    """
    if df.empty:
        return ()

    seasons = df["month"].map(season_of)
    total_neg = int(df["negative_count"].sum())
    total_pos = int(df["positive_count"].sum())

    results: List[SeasonalStat] = []
    for season in SEASONS:
        part = df[seasons == season]
        if part.empty:
            continue

        neg = int(part["negative_count"].sum())
        pos = int(part["positive_count"].sum())
        rest_neg = total_neg - neg
        rest_pos = total_pos - pos

        results.append(SeasonalStat(
            season=season,
            month_count=len(part),
            entry_count=int(part["entry_count"].sum()),
            avg_negative_ratio=round(float(part["negative_ratio"].mean()), 3),
            avg_sentence_length=round(float(part["avg_sentence_length"].mean()), 1),
            avg_work_word_rate=round(float(part["work_word_rate"].mean()), 2),
            avg_physical_symptoms=round(float(part["physical_symptom_count"].mean()), 1),
            avg_first_person_rate=round(float(part["first_person_rate"].mean()), 2),
            avg_self_monitor_rate=round(float(part["self_monitor_rate"].mean()), 2),
            negative_count=neg,
            positive_count=pos,
            chi_square=chi_square_2x2(neg, pos, rest_neg, rest_pos, cfg.significance),
            proportion_test=proportion_z_test(
                neg, neg + pos, rest_neg, rest_neg + rest_pos, cfg.significance,
            ),
        ))

    return tuple(results)
