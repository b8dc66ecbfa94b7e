"""
Elevation: a narrative, cumulative metaphor over an aggregated series.

This is a deterministic transform, not a measurement. Each period climbs
(or slides) by a bounded amount built from writing volume, distance of the
negative ratio from neutral, self-denial/symptom burden, and the change
from the previous period. Resilience is read off the resulting sequence.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from summit.config import ElevationScale
from summit.models import ElevationPoint, ResilienceMetrics, SlideRun


# ---------------------------------------------------------------------------
# Climb
# ---------------------------------------------------------------------------

def compute_climb(
    entry_count: int,
    negative_ratio: float,
    burden: float,
    prev_ratio: Optional[float],
    scale: ElevationScale,
) -> float:
    """One period's signed climb, clamped to [climb_min, climb_max]."""
    volume = min(scale.volume_cap, max(0.0, entry_count * scale.volume_per_entry))
    ratio_term = scale.ratio_weight * (scale.neutral_ratio - negative_ratio)
    penalty = min(scale.burden_cap, max(0.0, burden * scale.burden_per_count))

    delta_term = 0.0
    if prev_ratio is not None:
        improvement = prev_ratio - negative_ratio
        delta_term = float(np.sign(improvement)) * min(
            scale.delta_cap, abs(improvement) * scale.delta_weight,
        )

    raw = volume + ratio_term - penalty + delta_term
    return round(float(np.clip(raw, scale.climb_min, scale.climb_max)), 1)


def calc_elevation(
    df: pd.DataFrame,
    period_column: str,
    scale: ElevationScale,
) -> Tuple[ElevationPoint, ...]:
    """
    elevation[0] = baseline + climb[0]
    elevation[i] = elevation[i-1] + climb[i]

    ``df`` is any aggregated frame (yearly, monthly or daily) with
    entry_count, negative_ratio, self_denial_count and physical_symptom_count.
    """
    points: List[ElevationPoint] = []
    cumulative = scale.baseline
    prev_ratio: Optional[float] = None

    for row in df.to_dict("records"):
        ratio = float(row["negative_ratio"])
        burden = float(row["self_denial_count"]) + float(row["physical_symptom_count"])
        climb = compute_climb(int(row["entry_count"]), ratio, burden, prev_ratio, scale)

        cumulative = round(cumulative + climb, 1)
        points.append(ElevationPoint(
            period=str(row[period_column]),
            cumulative_elevation=cumulative,
            climb=climb,
            is_slide=climb < 0,
        ))
        prev_ratio = ratio

    return tuple(points)


# ---------------------------------------------------------------------------
# Resilience
# ---------------------------------------------------------------------------

def _slide_runs(climbs: Sequence[float]) -> List[Tuple[int, int]]:
    """Index ranges [start, end] of contiguous negative climbs."""
    runs: List[Tuple[int, int]] = []
    start = None
    for i, climb in enumerate(climbs):
        if climb < 0 and start is None:
            start = i
        elif climb >= 0 and start is not None:
            runs.append((start, i - 1))
            start = None
    if start is not None:
        runs.append((start, len(climbs) - 1))
    return runs


def _recovery_periods(climbs: Sequence[float], end: int, target: float) -> Optional[int]:
    """Periods after ``end`` until positive climb accumulates to ``target``."""
    recovered = 0.0
    for k in range(end + 1, len(climbs)):
        if climbs[k] > 0:
            recovered += climbs[k]
        if recovered >= target:
            return k - end
    return None


def calc_resilience(
    points: Sequence[ElevationPoint],
    recovery_fraction: float = 0.5,
) -> ResilienceMetrics:
    """
    Slide runs and how quickly the sequence climbs back out of them.

    recovery_periods: periods until positive climb after the run reaches
                      ``recovery_fraction`` of the run depth (None if never)
    recovery_ratio:   min(1, total positive climb / total slide depth)
    """
    climbs = [p.climb for p in points]
    runs = _slide_runs(climbs)
    if not runs:
        return ResilienceMetrics()

    slides: List[SlideRun] = []
    for start, end in runs:
        depth = round(sum(-climbs[k] for k in range(start, end + 1)), 1)
        slides.append(SlideRun(
            start_period=points[start].period,
            end_period=points[end].period,
            depth=depth,
            recovery_periods=_recovery_periods(climbs, end, depth * recovery_fraction),
        ))

    total_depth = round(sum(s.depth for s in slides), 1)
    positive_total = sum(c for c in climbs if c > 0)
    recovered = [s.recovery_periods for s in slides if s.recovery_periods is not None]

    return ResilienceMetrics(
        deepest_slide=max(slides, key=lambda s: s.depth),
        avg_recovery_periods=round(float(np.mean(recovered)), 2) if recovered else None,
        recovery_ratio=round(min(1.0, positive_total / total_depth), 3),
        slide_count=len(slides),
        total_slide_depth=total_depth,
    )
