"""
Typed output records.

Every record is an immutable dataclass. A value that cannot be computed yet
(too little history, no slides, no data) is ``None``, never NaN or 0.
"""

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class Entry:
    """A diary entry as supplied by the storage layer."""

    id: str
    date: Optional[date]
    content: str


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MonthlyRecord:
    month: str
    entry_count: int
    text_length: int
    negative_count: int
    positive_count: int
    negative_ratio: float
    avg_sentence_length: float
    first_person_rate: float
    other_person_rate: float
    task_word_rate: float
    self_monitor_rate: float
    work_word_rate: float
    existential_rate: float
    dignity_rate: float
    physical_symptom_count: int
    self_denial_count: int
    top_emotion_words: Tuple[Tuple[str, int], ...] = ()
    negative_ratio_ma3: Optional[float] = None
    negative_ratio_ma6: Optional[float] = None
    seasonal_baseline: Optional[float] = None
    seasonal_deviation: Optional[float] = None


@dataclass(frozen=True)
class DailyRecord:
    date: str
    entry_count: int
    text_length: int
    negative_count: int
    positive_count: int
    negative_ratio: float
    avg_sentence_length: float
    first_person_rate: float
    other_person_rate: float
    self_monitor_rate: float
    physical_symptom_count: int
    self_denial_count: int


@dataclass(frozen=True)
class StabilityIndex:
    """Yearly stability score (0-100)."""

    year: str
    score: int
    positive_ratio: float
    volatility: float
    self_denial_avg: float


# ---------------------------------------------------------------------------
# Trend shifts
# ---------------------------------------------------------------------------

class ShiftType(str, Enum):
    DETERIORATION = "deterioration"
    RECOVERY = "recovery"
    PLATEAU = "plateau"
    VOCABULARY_SHIFT = "vocabulary_shift"


@dataclass(frozen=True)
class ShiftMetrics:
    neg_ratio_before: float
    neg_ratio_after: float
    vocab_shift_score: float
    sentence_length_change: float
    first_person_change: float


@dataclass(frozen=True)
class TrendShift:
    start_month: str
    end_month: str
    type: ShiftType
    magnitude: float
    metrics: ShiftMetrics
    description: str


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatisticalTest:
    """
    Result of a significance test.

    ``is_significant`` is False whenever ``reference_only`` is set, whatever
    the p-value says.
    """

    test: str
    statistic: float
    p_value: float
    effect_size: float
    effect_size_name: str
    is_significant: bool
    reference_only: bool
    min_expected: Optional[float] = None


@dataclass(frozen=True)
class SeasonalStat:
    season: str
    month_count: int
    entry_count: int
    avg_negative_ratio: float
    avg_sentence_length: float
    avg_work_word_rate: float
    avg_physical_symptoms: float
    avg_first_person_rate: float
    avg_self_monitor_rate: float
    negative_count: int
    positive_count: int
    chi_square: StatisticalTest
    proportion_test: StatisticalTest


# ---------------------------------------------------------------------------
# Current state and predictive indicators
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CurrentState:
    recent_neg_ratio: float
    recent_neg_ratio_ma: float
    recent_self_denial: float
    recent_avg_sentence_length: float
    recent_first_person_rate: float
    recent_physical_symptoms: float
    recent_work_word_rate: float
    historical_neg_ratio: float
    historical_self_denial: float
    historical_avg_sentence_length: float
    historical_first_person_rate: float
    historical_physical_symptoms: float
    trend_slope: float
    neg_ratio_trend: str             # improving | stable | worsening
    overall_stability: int           # 0-100
    risk_level: str                  # low | moderate | elevated


@dataclass(frozen=True)
class PrecursorWord:
    word: str
    lead_days: int
    correlation: float


@dataclass(frozen=True)
class ActiveSignal:
    signal: str
    severity: str                    # watch | caution | warning
    evidence: str


@dataclass(frozen=True)
class SymptomCorrelation:
    symptom: str
    lag_days: int
    strength: float


@dataclass(frozen=True)
class PredictiveIndicators:
    precursor_words: Tuple[PrecursorWord, ...] = ()
    active_signals: Tuple[ActiveSignal, ...] = ()
    symptom_correlations: Tuple[SymptomCorrelation, ...] = ()


# ---------------------------------------------------------------------------
# Daily predictive context
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DailyPrecursorWord:
    word: str
    before_spike_count: int
    corpus_count: int
    lead_days: int


@dataclass(frozen=True)
class SleepCorrelation:
    lag_days: int
    strength: float
    disrupted_mean: float
    baseline_mean: float
    disrupted_samples: int
    baseline_samples: int


@dataclass(frozen=True)
class CoOccurrence:
    symptom: str
    interpersonal_term: str
    rate: float
    symptom_days: int
    co_days: int


@dataclass(frozen=True)
class DailyPredictiveContext:
    day_count: int = 0
    spike_threshold: Optional[float] = None
    precursor_words: Tuple[DailyPrecursorWord, ...] = ()
    sleep_correlation: Optional[SleepCorrelation] = None
    sensory_interpersonal: Tuple[CoOccurrence, ...] = ()


# ---------------------------------------------------------------------------
# Vocabulary depth and interpretation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VocabularyDepthProfile:
    period: str
    entry_count: int
    text_length: int
    light_neg_count: int
    deep_neg_count: int
    first_person_count: int
    other_person_count: int
    question_count: int
    exclamation_count: int
    light_neg_rate: float
    deep_neg_rate: float
    first_person_rate: float
    other_person_rate: float
    task_word_rate: float
    work_word_rate: float
    self_monitor_rate: float
    question_rate: float
    exclamation_rate: float
    avg_sentence_length: float
    depth_ratio: float
    subject_ratio: float

    @property
    def negative_rate(self) -> float:
        return self.light_neg_rate + self.deep_neg_rate


class DepthPattern(str, Enum):
    FREQUENCY_DOWN_DEPTH_UP = "frequency_down_depth_up"
    FREQUENCY_DOWN_DEPTH_DOWN = "frequency_down_depth_down"
    FREQUENCY_UP_DEPTH_UP = "frequency_up_depth_up"
    STABLE = "stable"
    OTHER = "other"


class FirstPersonPattern(str, Enum):
    INSUFFICIENT_DATA = "insufficient_data"
    ROLE_PERSONIFICATION = "role_personification"
    OUTWARD_ADAPTATION = "outward_adaptation"
    REDUCED_SELF_DISCLOSURE = "reduced_self_disclosure"
    MULTIPLE_HYPOTHESES = "multiple_hypotheses"
    INCREASE = "increase"


def _require_reading(pattern: Enum, description: str, alternative_reading: str):
    if not description or not alternative_reading:
        raise ValueError(
            f"{pattern.value} interpretation needs both a description and an alternative reading"
        )


@dataclass(frozen=True)
class DepthInterpretation:
    """Every pattern, ``stable`` included, carries two readings."""

    pattern: DepthPattern
    frequency_change: float
    depth_change: float
    description: str
    alternative_reading: str
    evidence: Tuple[str, ...] = ()

    def __post_init__(self):
        _require_reading(self.pattern, self.description, self.alternative_reading)


@dataclass(frozen=True)
class FirstPersonShiftInterpretation:
    """Only ``insufficient_data`` may omit the alternative reading."""

    pattern: FirstPersonPattern
    first_person_change: float
    description: str
    alternative_reading: str = ""
    evidence: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.pattern is not FirstPersonPattern.INSUFFICIENT_DATA:
            _require_reading(self.pattern, self.description, self.alternative_reading)


# ---------------------------------------------------------------------------
# Elevation and resilience
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ElevationPoint:
    period: str
    cumulative_elevation: float
    climb: float
    is_slide: bool


@dataclass(frozen=True)
class SlideRun:
    start_period: str
    end_period: str
    depth: float
    recovery_periods: Optional[int] = None


@dataclass(frozen=True)
class ResilienceMetrics:
    deepest_slide: Optional[SlideRun] = None
    avg_recovery_periods: Optional[float] = None
    recovery_ratio: Optional[float] = None
    slide_count: int = 0
    total_slide_depth: float = 0.0


# ---------------------------------------------------------------------------
# Pipeline result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AnalysisResult:
    monthly: Tuple[MonthlyRecord, ...] = ()
    daily: Tuple[DailyRecord, ...] = ()
    stability_by_year: Tuple[StabilityIndex, ...] = ()
    trend_shifts: Tuple[TrendShift, ...] = ()
    seasonal: Tuple[SeasonalStat, ...] = ()
    current_state: Optional[CurrentState] = None
    predictive: PredictiveIndicators = field(default_factory=PredictiveIndicators)
    daily_context: DailyPredictiveContext = field(default_factory=DailyPredictiveContext)
    vocabulary: Optional[Tuple[VocabularyDepthProfile, VocabularyDepthProfile]] = None
    depth_interpretation: Optional[DepthInterpretation] = None
    first_person_interpretation: Optional[FirstPersonShiftInterpretation] = None
    elevation: Dict[str, Tuple[ElevationPoint, ...]] = field(default_factory=dict)
    resilience: Dict[str, ResilienceMetrics] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return asdict(self)
