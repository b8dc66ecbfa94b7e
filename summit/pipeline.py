"""
Pipeline orchestration: validate → aggregate → signal → score → detect → narrate.

All analytical logic is delegated to aggregate, trends, scoring, detectors,
daily, vocabulary and elevation. The pipeline itself only validates caller
input and wires stages together. No I/O, no state shared between calls.
"""

import logging
from datetime import date, datetime
from typing import Iterable, List, Mapping, Optional, Union

import pandas as pd

from summit.aggregate import (
    daily_frame,
    daily_records,
    entries_frame,
    monthly_frame,
    monthly_records,
    yearly_frame,
)
from summit.config import SummitConfig
from summit.daily import calc_daily_context
from summit.detectors import calc_predictive_indicators
from summit.elevation import calc_elevation, calc_resilience
from summit.models import AnalysisResult, Entry
from summit.scoring import calc_current_state, calc_stability_by_year
from summit.trends import (
    calc_seasonal_stats,
    compute_moving_averages,
    compute_seasonal_baseline,
    detect_trend_shifts,
)
from summit.vocabulary import (
    calc_vocabulary_depth,
    interpret_depth_change,
    interpret_first_person_shift,
    period_label,
    split_early_late,
)

logger = logging.getLogger(__name__)

RawEntry = Union[Entry, Mapping]


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

def parse_date(value) -> Optional[date]:
    """Calendar date from a date, datetime or ISO string; None when unusable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    parsed = pd.to_datetime(value.strip(), errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def validate_entries(entries: Iterable[RawEntry]) -> List[Entry]:
    """
    Normalize caller input into Entry records.

    Raises ValueError for structurally invalid entries (not a mapping or
    Entry, missing content, non-text content). Malformed dates are not an
    error: they become None and drop out of date-keyed views.
    """
    if entries is None:
        raise ValueError("entries must be an iterable of entries, got None")

    clean: List[Entry] = []
    for i, raw in enumerate(entries):
        if isinstance(raw, Entry):
            entry_id, raw_date, content = raw.id, raw.date, raw.content
        elif isinstance(raw, Mapping):
            if "content" not in raw:
                raise ValueError(f"Entry {i} is missing 'content'")
            entry_id, raw_date, content = raw.get("id", str(i)), raw.get("date"), raw["content"]
        else:
            raise ValueError(f"Entry {i} must be a mapping or Entry, got {type(raw).__name__}")

        if not isinstance(content, str):
            raise ValueError(f"Entry {i} content must be text, got {type(content).__name__}")

        clean.append(Entry(id=str(entry_id), date=parse_date(raw_date), content=content))

    return clean


# ---------------------------------------------------------------------------
# Core analysis (pure function, no I/O)
# ---------------------------------------------------------------------------

def analyze_entries(
    entries: Iterable[RawEntry],
    cfg: SummitConfig | None = None,
) -> AnalysisResult:
    """
    Run every stage over one entry collection.

    Stateless. Identical input produces identical output.
    """
    if cfg is None:
        cfg = SummitConfig()

    clean = validate_entries(entries)
    edf = entries_frame(clean)
    logger.info("analyzing %d entries (%d dated)", len(clean), len(edf))

    # Stage 1: Aggregate
    monthly = monthly_frame(edf, cfg.lexicon)
    daily = daily_frame(edf, cfg.lexicon)
    yearly = yearly_frame(monthly)

    # Stage 2: Monthly signals
    if not monthly.empty:
        monthly = compute_moving_averages(monthly, cfg)
        monthly = compute_seasonal_baseline(monthly, cfg)

    # Stage 3: Trends and seasons
    trend_shifts = detect_trend_shifts(monthly, cfg)
    seasonal = calc_seasonal_stats(monthly, cfg)

    # Stage 4: Scores and predictive signals
    current_state = calc_current_state(monthly, cfg)
    predictive = calc_predictive_indicators(monthly, cfg)
    daily_context = calc_daily_context(daily, cfg)

    # Stage 5: Vocabulary depth, early half vs late half
    vocabulary = depth = first_person = None
    halves = split_early_late(clean)
    if halves is not None:
        early_entries, late_entries = halves
        early = calc_vocabulary_depth(early_entries, period_label(early_entries), cfg.lexicon)
        late = calc_vocabulary_depth(late_entries, period_label(late_entries), cfg.lexicon)
        vocabulary = (early, late)
        depth = interpret_depth_change(early, late, cfg)
        first_person = interpret_first_person_shift(early, late, cfg)

    # Stage 6: Elevation and resilience
    scales = cfg.elevation
    elevation = {
        "yearly": calc_elevation(yearly, "year", scales.yearly),
        "monthly": calc_elevation(monthly, "month", scales.monthly),
        "daily": calc_elevation(daily, "date", scales.daily),
    }
    resilience = {
        name: calc_resilience(points, scales.recovery_fraction)
        for name, points in elevation.items()
    }

    logger.info(
        "analysis done: %d months, %d days, %d trend shifts",
        len(monthly), len(daily), len(trend_shifts),
    )

    return AnalysisResult(
        monthly=monthly_records(monthly),
        daily=daily_records(daily),
        stability_by_year=calc_stability_by_year(monthly),
        trend_shifts=trend_shifts,
        seasonal=seasonal,
        current_state=current_state,
        predictive=predictive,
        daily_context=daily_context,
        vocabulary=vocabulary,
        depth_interpretation=depth,
        first_person_interpretation=first_person,
        elevation=elevation,
        resilience=resilience,
    )
