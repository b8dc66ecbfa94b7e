"""
Centralized configuration for all thresholds, windows, and scales.

Every tunable constant lives here. The lexicon tables are configuration too:
swap them through ``SummitConfig(lexicon=...)`` for tests or another language.
"""

from dataclasses import dataclass, field

from summit.lexicon import DEFAULT_LEXICON, Lexicon


# ---------------------------------------------------------------------------
# Rolling / seasonal windows
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WindowParams:
    """Moving-average windows and the seasonal-baseline gate."""

    ma_short: int = 3
    ma_long: int = 6
    seasonal_min_years: int = 2


# ---------------------------------------------------------------------------
# Trend shift detection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TrendShiftParams:
    """
    Thresholds for before/after window comparison over the monthly series.

    threshold = max(min_threshold, sigma_multiplier * σ)
    """

    min_months: int = 4
    window: int = 3
    min_threshold: float = 0.05
    sigma_multiplier: float = 0.8
    vocab_shift_threshold: float = 1.5
    merge_gap: int = 3

    # Floors for the "before" denominators of the vocabulary-shift score
    rate_floor: float = 0.01
    sentence_floor: float = 1.0


# ---------------------------------------------------------------------------
# Statistical tests
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SignificanceParams:
    """Significance level and sample-size safeguards."""

    alpha: float = 0.05
    min_expected: float = 5.0    # chi-square: every expected cell must reach this
    min_sample: int = 30         # z-test: both samples must reach this


# ---------------------------------------------------------------------------
# Current state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StabilityWeights:
    """
    Composite stability (0-100). Each term is floored at 0:

        negativity = negativity_max - negativity_slope * recent_neg_ratio
        symptoms   = symptom_max    - symptom_slope    * avg_symptoms
        volatility = volatility_max - volatility_slope * std(recent_neg_ratio)
        volume     = min(volume_max, volume_per_entry * avg_entries)
    """

    negativity_max: float = 40.0
    negativity_slope: float = 80.0
    symptom_max: float = 20.0
    symptom_slope: float = 2.0
    volatility_max: float = 20.0
    volatility_slope: float = 100.0
    volume_max: float = 20.0
    volume_per_entry: float = 2.0

    def __post_init__(self):
        total = self.negativity_max + self.symptom_max + self.volatility_max + self.volume_max
        if abs(total - 100.0) > 1e-9:
            raise ValueError(f"Stability term maxima must sum to 100, got {total}")


@dataclass(frozen=True)
class CurrentStateParams:
    """Recent/historical split, slope labels, and the risk ladder."""

    recent_months: int = 3
    min_historical_months: int = 3
    improving_slope: float = -0.02
    worsening_slope: float = 0.02

    elevated_neg_ratio: float = 0.6
    elevated_symptoms: float = 5.0
    moderate_neg_ratio: float = 0.4


# ---------------------------------------------------------------------------
# Predictive indicators
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PrecursorParams:
    """Monthly precursor-word mining."""

    spike_delta: float = 0.15
    initial_correlation: float = 0.3
    correlation_step: float = 0.2
    correlation_cap: float = 1.0
    top_n: int = 10
    lead_days: int = 30


@dataclass(frozen=True)
class SignalThresholds:
    """Latest-vs-previous month rules for active signals."""

    symptom_growth: float = 1.5
    symptom_min: int = 3
    symptom_warning: int = 5
    first_person_change: float = 0.5
    sentence_collapse: float = 0.6
    entry_collapse: float = 0.3
    entry_min_previous: int = 5
    monitor_before: float = 0.5
    monitor_after: float = 0.1
    precursor_top: int = 5
    precursor_caution: float = 0.6


@dataclass(frozen=True)
class SymptomLagParams:
    """Symptom-heavy month → next-month negative ratio delta."""

    min_months: int = 4
    symptom_multiplier: float = 1.5
    min_delta: float = 0.03
    min_qualifying: int = 2
    strength_scale: float = 10.0
    lag_days: int = 30


# ---------------------------------------------------------------------------
# Daily predictive context
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DailyContextParams:
    """Day-granularity spike, sleep and co-occurrence parameters."""

    min_days: int = 10
    spike_percentile: float = 80.0
    lookback_days: int = 3
    top_n: int = 15

    sleep_window: int = 3
    sleep_lag_days: int = 2
    sleep_min_diff: float = 0.03
    sleep_min_samples: int = 3
    sleep_strength_scale: float = 5.0

    cooccurrence_min_days: int = 2
    cooccurrence_min_rate: float = 0.3


# ---------------------------------------------------------------------------
# Interpretation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InterpretationThresholds:
    """Relative/absolute change gates for the depth and first-person readers."""

    frequency_change: float = 0.15
    depth_change: float = 0.05
    first_person_gate: float = 0.30
    task_growth: float = 0.30
    other_growth: float = 0.30
    monitor_collapse: float = 0.50


# ---------------------------------------------------------------------------
# Elevation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ElevationScale:
    """
    Narrative climb per period:

        climb = volume_bonus + ratio_term - burden_penalty + delta_term
        clamped to [climb_min, climb_max]

    volume_bonus   = min(volume_cap, volume_per_entry * entries)
    ratio_term     = ratio_weight * (neutral_ratio - negative_ratio)
    burden_penalty = min(burden_cap, burden_per_count * (self_denial + symptoms))
    delta_term     = ±min(delta_cap, delta_weight * |prev_ratio - ratio|)
    """

    baseline: float = 1000.0
    volume_per_entry: float = 2.0
    volume_cap: float = 20.0
    neutral_ratio: float = 0.5
    ratio_weight: float = 60.0
    burden_per_count: float = 2.0
    burden_cap: float = 20.0
    delta_weight: float = 40.0
    delta_cap: float = 15.0
    climb_min: float = -50.0
    climb_max: float = 80.0

    def __post_init__(self):
        if self.climb_min >= self.climb_max:
            raise ValueError(
                f"climb_min must be below climb_max, got [{self.climb_min}, {self.climb_max}]"
            )


YEARLY_SCALE = ElevationScale(
    volume_per_entry=0.5, volume_cap=80.0,
    ratio_weight=300.0,
    burden_per_count=0.5, burden_cap=60.0,
    delta_weight=200.0, delta_cap=50.0,
    climb_min=-150.0, climb_max=300.0,
)

MONTHLY_SCALE = ElevationScale()

DAILY_SCALE = ElevationScale(
    volume_per_entry=5.0, volume_cap=5.0,
    ratio_weight=20.0,
    burden_per_count=1.0, burden_cap=5.0,
    delta_weight=10.0, delta_cap=5.0,
    climb_min=-15.0, climb_max=20.0,
)


@dataclass(frozen=True)
class ElevationScales:
    """One scale per granularity."""

    yearly: ElevationScale = YEARLY_SCALE
    monthly: ElevationScale = MONTHLY_SCALE
    daily: ElevationScale = DAILY_SCALE
    recovery_fraction: float = 0.5


# ---------------------------------------------------------------------------
# Top-level config aggregate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SummitConfig:
    """Complete engine configuration. Pass to pipeline to override defaults."""

    lexicon: Lexicon = field(default_factory=lambda: DEFAULT_LEXICON)
    windows: WindowParams = field(default_factory=WindowParams)
    trend_shift: TrendShiftParams = field(default_factory=TrendShiftParams)
    significance: SignificanceParams = field(default_factory=SignificanceParams)
    stability: StabilityWeights = field(default_factory=StabilityWeights)
    current_state: CurrentStateParams = field(default_factory=CurrentStateParams)
    precursor: PrecursorParams = field(default_factory=PrecursorParams)
    signals: SignalThresholds = field(default_factory=SignalThresholds)
    symptom_lag: SymptomLagParams = field(default_factory=SymptomLagParams)
    daily: DailyContextParams = field(default_factory=DailyContextParams)
    interpretation: InterpretationThresholds = field(default_factory=InterpretationThresholds)
    elevation: ElevationScales = field(default_factory=ElevationScales)
