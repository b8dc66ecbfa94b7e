"""Summit v1.0 - Standalone test suite (no pytest dependency)."""
import sys
import traceback
from dataclasses import replace
from pathlib import Path

import pandas as pd

sys.path.insert(0, str(Path(__file__).parent))

from summit.config import ElevationScale, StabilityWeights, SummitConfig
from summit.lexicon import (
    DEFAULT_LEXICON, Category, Lexicon, avg_sentence_length, count, rate, ratio,
    split_sentences,
)
from summit.models import (
    AnalysisResult, DailyPredictiveContext, DepthInterpretation, DepthPattern,
    ElevationPoint, FirstPersonPattern, PrecursorWord, ResilienceMetrics,
    ShiftType, VocabularyDepthProfile,
)
from summit.aggregate import (
    daily_frame, entries_frame, monthly_frame, monthly_records, yearly_frame,
)
from summit.stats import chi_square_2x2, normal_cdf, proportion_z_test
from summit.trends import (
    calc_seasonal_stats, compute_moving_averages, compute_seasonal_baseline,
    detect_trend_shifts, season_of,
)
from summit.scoring import (
    calc_current_state, calc_stability_by_year, classify_trend, compute_stability_score,
)
from summit.detectors import (
    detect_active_signals, detect_symptom_lag, mine_precursor_words,
)
from summit.daily import calc_daily_context
from summit.vocabulary import (
    calc_vocabulary_depth, interpret_depth_change, interpret_first_person_shift,
    split_early_late,
)
from summit.elevation import calc_elevation, calc_resilience, compute_climb
from summit.pipeline import analyze_entries, validate_entries

CFG = SummitConfig()

passed = 0
failed = 0


def test(name, fn):
    global passed, failed
    try:
        fn()
        print(f"  ✓ {name}")
        passed += 1
    except Exception as e:
        print(f"  ✗ {name}: {e}")
        traceback.print_exc()
        failed += 1


def approx(a, b, tol=0.01):
    assert abs(a - b) < tol, f"{a} != {b} (tol={tol})"


def month_keys(n, start_year=2023):
    return [f"{start_year + i // 12}-{i % 12 + 1:02d}" for i in range(n)]


def monthly_df(ratios, months=None, **columns):
    """Monthly frame with neutral defaults; override any column by keyword."""
    n = len(ratios)
    data = {
        "month": months or month_keys(n),
        "text": [""] * n,
        "entry_count": [5] * n,
        "text_length": [1000] * n,
        "negative_count": [int(round(r * 10)) for r in ratios],
        "positive_count": [10 - int(round(r * 10)) for r in ratios],
        "negative_ratio": list(ratios),
        "avg_sentence_length": [20.0] * n,
        "first_person_rate": [5.0] * n,
        "other_person_rate": [2.0] * n,
        "task_word_rate": [1.0] * n,
        "self_monitor_rate": [1.0] * n,
        "work_word_rate": [1.0] * n,
        "existential_rate": [0.0] * n,
        "dignity_rate": [0.0] * n,
        "physical_symptom_count": [0] * n,
        "self_denial_count": [0] * n,
        "top_emotion_words": [()] * n,
    }
    data.update({k: list(v) for k, v in columns.items()})
    return pd.DataFrame(data)


def daily_from(texts, start="2024-03-01"):
    """Daily frame with one entry per consecutive day."""
    days = pd.date_range(start, periods=len(texts), freq="D")
    raw = [{"id": str(i), "date": d.strftime("%Y-%m-%d"), "content": t}
           for i, (d, t) in enumerate(zip(days, texts))]
    return daily_frame(entries_frame(validate_entries(raw)), CFG.lexicon)


def profile(**kw):
    base = dict(
        period="p", entry_count=10, text_length=1000,
        light_neg_count=0, deep_neg_count=0, first_person_count=0,
        other_person_count=0, question_count=0, exclamation_count=0,
        light_neg_rate=0.0, deep_neg_rate=0.0, first_person_rate=10.0,
        other_person_rate=2.0, task_word_rate=1.0, work_word_rate=1.0,
        self_monitor_rate=2.0, question_rate=0.0, exclamation_rate=0.0,
        avg_sentence_length=20.0, depth_ratio=0.0, subject_ratio=0.0,
    )
    base.update(kw)
    return VocabularyDepthProfile(**base)


def points_from(climbs):
    out, elevation = [], 1000.0
    for i, c in enumerate(climbs):
        elevation += c
        out.append(ElevationPoint(period=f"p{i}", cumulative_elevation=elevation,
                                  climb=c, is_slide=c < 0))
    return out


TEMPLATES = (
    "今日は仕事で疲れた。上司に怒られて辛い。眠れない夜だった。",
    "友達とカフェに行って楽しい時間だった。感謝している。",
    "頭痛がひどい。不安で何もできない。自分が嫌になる。",
    "散歩して気分が明るい。調子も安定している。嬉しい。",
    "残業続きで限界。逃げたい。私はどうすればいいのか？",
    "家族と話して安心した。希望が持てる！",
)


def synthetic_entries(months=18):
    entries = []
    for m in range(months):
        year, month = 2022 + m // 12, m % 12 + 1
        for k in range(4):
            entries.append({
                "id": f"{m}-{k}",
                "date": f"{year}-{month:02d}-{1 + 7 * k:02d}",
                "content": TEMPLATES[(m * 3 + k) % len(TEMPLATES)],
            })
    entries.append({"id": "undated", "date": None, "content": "辛い"})
    entries.append({"id": "bad-date", "date": "someday", "content": "辛い"})
    return entries


# ═══════════════════════════════════════════════════════════════════════
# CONFIG
# ═══════════════════════════════════════════════════════════════════════
print("\n[Config]")

def t_stability_sum():
    sw = CFG.stability
    approx(sw.negativity_max + sw.symptom_max + sw.volatility_max + sw.volume_max, 100.0, 1e-9)
test("stability term maxima sum to 100", t_stability_sum)

def t_bad_stability():
    try:
        StabilityWeights(negativity_max=50.0)
        raise RuntimeError("Should have raised ValueError")
    except ValueError:
        pass
test("invalid stability weights raise ValueError", t_bad_stability)

def t_bad_scale():
    try:
        ElevationScale(climb_min=10.0, climb_max=5.0)
        raise RuntimeError("Should have raised ValueError")
    except ValueError:
        pass
test("inverted elevation clamp raises ValueError", t_bad_scale)

def t_scales_differ():
    e = CFG.elevation
    assert e.yearly.climb_max > e.monthly.climb_max > e.daily.climb_max
test("elevation clamp differs by granularity", t_scales_differ)

def t_lexicon_complete():
    for c in Category:
        assert len(CFG.lexicon.terms(c)) > 0, f"Empty category: {c}"
test("default lexicon covers every category", t_lexicon_complete)

def t_lexicon_missing():
    try:
        Lexicon({Category.NEGATIVE: ("辛い",)})
        raise RuntimeError("Should have raised ValueError")
    except ValueError:
        pass
test("lexicon missing categories raises ValueError", t_lexicon_missing)


# ═══════════════════════════════════════════════════════════════════════
# LEXICON & COUNTER
# ═══════════════════════════════════════════════════════════════════════
print("\n[Lexicon]")

def t_count_repeats():
    assert count("不安で不安", ("不安",)) == 2
test("count sums repeated occurrences", t_count_repeats)

def t_count_overlap():
    # "死" and "死にたい" both match the same span; both are counted
    assert count("死にたい", ("死にたい", "死")) == 2
test("cross-term overlaps are counted for each term", t_count_overlap)

def t_rate_empty():
    for c in Category:
        assert rate("", DEFAULT_LEXICON.terms(c)) == 0.0
test("rate of empty text is 0 for every category", t_rate_empty)

def t_rate_nonneg():
    for text in ["", "あ", "辛い辛い", "私は楽しい。", TEMPLATES[0]]:
        for c in Category:
            assert rate(text, DEFAULT_LEXICON.terms(c)) >= 0.0
test("rates are never negative", t_rate_nonneg)

def t_density():
    chunk = "不安" + "あ" * 98
    approx(rate(chunk, ("不安",)), 10.0, 1e-9)
    approx(rate(chunk * 3, ("不安",)), rate(chunk, ("不安",)), 1e-9)
test("equal density gives equal rate across lengths", t_density)

def t_ratio():
    assert ratio(0, 0) == 0.0
    approx(ratio(3, 1), 0.75, 1e-9)
test("ratio handles zero totals", t_ratio)

def t_sentences():
    text = "今日は晴れ。明日は雨！\n\nそうか？"
    assert split_sentences(text) == ["今日は晴れ", "明日は雨", "そうか"]
    approx(avg_sentence_length(text), 4.0, 1e-9)
    assert avg_sentence_length("") == 0.0
test("sentence split drops empty fragments", t_sentences)

def t_lexicon_replace():
    lx = DEFAULT_LEXICON.replace(negative=["雨"])
    assert lx.terms(Category.NEGATIVE) == ("雨",)
    assert lx.terms(Category.POSITIVE) == DEFAULT_LEXICON.terms(Category.POSITIVE)
test("lexicon categories are swappable", t_lexicon_replace)


# ═══════════════════════════════════════════════════════════════════════
# TEMPORAL AGGREGATOR
# ═══════════════════════════════════════════════════════════════════════
print("\n[Aggregator]")

RAW = [
    {"id": "a", "date": "2024-02-01", "content": "楽しい"},
    {"id": "b", "date": "2024-01-05", "content": "不安"},
    {"id": "c", "date": "2024-01-20", "content": "嬉しい"},
    {"id": "d", "date": None, "content": "辛い"},
    {"id": "e", "date": "not-a-date", "content": "辛い"},
]

def t_monthly_grouping():
    df = monthly_frame(entries_frame(validate_entries(RAW)), CFG.lexicon)
    assert df["month"].tolist() == ["2024-01", "2024-02"]
    jan = df.iloc[0]
    assert jan["text"] == "不安\n嬉しい"
    assert jan["entry_count"] == 2
    approx(jan["negative_ratio"], 0.5, 1e-9)
    approx(df.iloc[1]["negative_ratio"], 0.0, 1e-9)
test("monthly buckets sorted, undated/malformed dropped", t_monthly_grouping)

def t_daily_grouping():
    df = daily_frame(entries_frame(validate_entries(RAW)), CFG.lexicon)
    assert df["date"].tolist() == ["2024-01-05", "2024-01-20", "2024-02-01"]
test("daily buckets keyed by date", t_daily_grouping)

def t_yearly_pooling():
    df = monthly_df([0.5, 0.0], months=["2023-01", "2024-01"])
    y = yearly_frame(df)
    assert y["year"].tolist() == ["2023", "2024"]
    approx(y.iloc[0]["negative_ratio"], 0.5, 1e-9)
test("yearly frame pools counts per year", t_yearly_pooling)

def t_records_absent_not_nan():
    recs = monthly_records(compute_moving_averages(monthly_df([0.1, 0.2, 0.3]), CFG))
    assert recs[0].negative_ratio_ma3 is None
    assert recs[0].seasonal_baseline is None
    approx(recs[2].negative_ratio_ma3, 0.2, 1e-9)
test("absent values become None in records", t_records_absent_not_nan)


# ═══════════════════════════════════════════════════════════════════════
# STATISTICAL TESTS
# ═══════════════════════════════════════════════════════════════════════
print("\n[Statistics]")

def t_cdf_values():
    approx(normal_cdf(0.0), 0.5, 1e-7)
    approx(normal_cdf(1.96), 0.975, 1e-4)
    approx(normal_cdf(-1.0) + normal_cdf(1.0), 1.0, 1e-7)
test("normal CDF approximation", t_cdf_values)

def t_chi_scenario_d():
    r = chi_square_2x2(2, 3, 1, 1)
    assert r.reference_only is True
    assert r.is_significant is False
    assert r.min_expected < 5
test("chi-square small counts → reference only", t_chi_scenario_d)

def t_chi_safeguard_overrides_p():
    r = chi_square_2x2(4, 0, 0, 4)
    assert r.p_value < 0.05, f"raw p should be small, got {r.p_value}"
    assert r.is_significant is False
test("chi-square safeguard wins over small p-value", t_chi_safeguard_overrides_p)

def t_chi_significant():
    r = chi_square_2x2(80, 20, 20, 80)
    approx(r.statistic, 72.0, 1e-6)
    approx(r.effect_size, 0.6, 1e-4)
    assert r.is_significant and not r.reference_only
test("chi-square large counts significant", t_chi_significant)

def t_chi_empty():
    r = chi_square_2x2(0, 0, 0, 0)
    assert r.p_value == 1.0 and not r.is_significant
test("chi-square with no data is neutral", t_chi_empty)

def t_z_small():
    r = proportion_z_test(10, 20, 5, 20)
    assert r.reference_only and not r.is_significant
    approx(r.effect_size, 0.5236, 1e-3)
test("z-test below 30 samples → reference only", t_z_small)

def t_z_large():
    r = proportion_z_test(60, 100, 30, 100)
    approx(r.statistic, 4.264, 0.01)
    assert r.is_significant
test("z-test large samples significant", t_z_large)


# ═══════════════════════════════════════════════════════════════════════
# TREND & SEASONAL
# ═══════════════════════════════════════════════════════════════════════
print("\n[Trend & Seasonal]")

def t_ma_gating():
    df = compute_moving_averages(monthly_df([0.1, 0.2, 0.3, 0.4, 0.5, 0.6]), CFG)
    ma3, ma6 = df["negative_ratio_ma3"], df["negative_ratio_ma6"]
    assert ma3.iloc[:2].isna().all()
    assert ma3.iloc[2:].notna().all()
    approx(ma3.iloc[2], 0.2, 1e-9)
    assert ma6.iloc[:5].isna().all()
    approx(ma6.iloc[5], 0.35, 1e-9)
test("MA3 absent for i<2, present after", t_ma_gating)

def t_seasonal_baseline():
    df = monthly_df([0.2, 0.4, 0.5], months=["2022-01", "2023-01", "2023-02"])
    df = compute_seasonal_baseline(df, CFG)
    approx(df["seasonal_baseline"].iloc[0], 0.3, 1e-9)
    approx(df["seasonal_deviation"].iloc[0], -0.1, 1e-9)
    approx(df["seasonal_deviation"].iloc[1], 0.1, 1e-9)
    assert pd.isna(df["seasonal_baseline"].iloc[2])
test("seasonal baseline needs two same-month records", t_seasonal_baseline)

def t_scenario_a():
    assert detect_trend_shifts(monthly_df([0.2] * 6), CFG) == ()
test("flat series → no trend shifts", t_scenario_a)

def t_too_short():
    assert detect_trend_shifts(monthly_df([0.1, 0.9, 0.1]), CFG) == ()
test("fewer than 4 months → no trend shifts", t_too_short)

def t_deterioration():
    shifts = detect_trend_shifts(monthly_df([0.1, 0.1, 0.1, 0.6, 0.6, 0.6]), CFG)
    assert len(shifts) == 1
    s = shifts[0]
    assert s.type is ShiftType.DETERIORATION
    assert (s.start_month, s.end_month) == ("2023-01", "2023-06")
    approx(s.magnitude, 2.0, 1e-9)
    approx(s.metrics.neg_ratio_after, 0.6, 1e-9)
test("deterioration detected with σ magnitude", t_deterioration)

def t_merge():
    shifts = detect_trend_shifts(monthly_df([0.1, 0.1, 0.1, 0.6, 0.6, 0.6, 0.6]), CFG)
    assert len(shifts) == 1, f"Expected merged shift, got {len(shifts)}"
    assert shifts[0].start_month == "2023-01"
    assert shifts[0].end_month == "2023-07"
    approx(shifts[0].magnitude, 2.02, 0.01)
test("adjacent same-type shifts merge", t_merge)

def t_no_merge_across_types():
    ratios = [0.1, 0.1, 0.1, 0.6, 0.6, 0.6, 0.1, 0.1, 0.1]
    types = [s.type for s in detect_trend_shifts(monthly_df(ratios), CFG)]
    assert types == [ShiftType.DETERIORATION, ShiftType.RECOVERY], f"Got: {types}"
test("different shift types stay separate", t_no_merge_across_types)

def t_vocab_shift():
    df = monthly_df([0.2] * 6, first_person_rate=[5, 5, 5, 15, 15, 15])
    shifts = detect_trend_shifts(df, CFG)
    assert len(shifts) == 1
    assert shifts[0].type is ShiftType.VOCABULARY_SHIFT
    assert shifts[0].magnitude == 0.0
    assert "first-person" in shifts[0].description
test("vocabulary shift without ratio change", t_vocab_shift)

def t_season_of():
    assert season_of("2023-12") == "winter"
    assert season_of("2023-03") == "spring"
    assert season_of("2023-09") == "autumn"
test("meteorological seasons", t_season_of)

def t_seasonal_stats():
    df = monthly_df([0.2, 0.6, 0.4], months=["2023-01", "2023-04", "2023-05"])
    stats = calc_seasonal_stats(df, CFG)
    assert [s.season for s in stats] == ["spring", "winter"]
    spring = stats[0]
    assert spring.month_count == 2
    approx(spring.avg_negative_ratio, 0.5, 1e-9)
    assert spring.chi_square.reference_only and not spring.chi_square.is_significant
    assert spring.proportion_test.reference_only
test("seasonal stats carry safeguarded tests", t_seasonal_stats)


# ═══════════════════════════════════════════════════════════════════════
# CURRENT STATE
# ═══════════════════════════════════════════════════════════════════════
print("\n[Current State]")

def t_scenario_b():
    assert calc_current_state(monthly_df([0.2] * 5), CFG) is None
test("5 months → no current state", t_scenario_b)

def t_current_worsening():
    df = compute_moving_averages(monthly_df([0.2, 0.2, 0.2, 0.3, 0.5, 0.7]), CFG)
    cs = calc_current_state(df, CFG)
    assert cs is not None
    assert cs.neg_ratio_trend == "worsening"
    assert cs.risk_level == "moderate"
    assert cs.overall_stability == 34, f"Got {cs.overall_stability}"
    approx(cs.recent_neg_ratio, 0.5, 1e-9)
    approx(cs.recent_neg_ratio_ma, 0.5, 1e-9)
    approx(cs.historical_neg_ratio, 0.2, 1e-9)
test("worsening trend, moderate risk, composite score", t_current_worsening)

def t_current_elevated():
    cs = calc_current_state(monthly_df([0.5, 0.5, 0.5, 0.9, 0.8, 0.7]), CFG)
    assert cs.neg_ratio_trend == "improving"
    assert cs.risk_level == "elevated"
test("high recent negativity → elevated risk", t_current_elevated)

def t_current_symptoms():
    df = monthly_df([0.1] * 6, physical_symptom_count=[0, 0, 0, 6, 6, 6])
    assert calc_current_state(df, CFG).risk_level == "elevated"
test("frequent symptoms → elevated risk", t_current_symptoms)

def t_stability_bounds():
    assert compute_stability_score(0.0, 0.0, 0.0, 50.0, CFG) == 100
    assert compute_stability_score(1.0, 20.0, 1.0, 0.0, CFG) == 0
test("stability score bounded to [0, 100]", t_stability_bounds)

def t_trend_labels():
    assert classify_trend(-0.05, CFG) == "improving"
    assert classify_trend(0.05, CFG) == "worsening"
    assert classify_trend(0.01, CFG) == "stable"
test("slope labels", t_trend_labels)

def t_stability_by_year():
    idx = calc_stability_by_year(monthly_df([0.2, 0.4], months=["2022-01", "2022-02"]))
    assert len(idx) == 1 and idx[0].year == "2022"
    assert idx[0].score == 73, f"Got {idx[0].score}"
test("yearly stability index", t_stability_by_year)


# ═══════════════════════════════════════════════════════════════════════
# PREDICTIVE INDICATORS
# ═══════════════════════════════════════════════════════════════════════
print("\n[Predictive]")

def t_precursor_mining():
    df = monthly_df([0.1, 0.5, 0.1, 0.6],
                    text=["頭痛がする。仕事が多い", "", "頭痛", ""])
    words = mine_precursor_words(df, CFG)
    assert [w.word for w in words] == ["頭痛", "仕事"], f"Got {[w.word for w in words]}"
    approx(words[0].correlation, 0.5, 1e-9)
    approx(words[1].correlation, 0.3, 1e-9)
    assert all(w.lead_days == 30 for w in words)
test("precursor words scored from pre-spike months", t_precursor_mining)

def t_precursor_cap():
    df = monthly_df([0.1, 0.5] * 6, text=["不安", ""] * 6)
    words = mine_precursor_words(df, CFG)
    assert words[0].word == "不安"
    approx(words[0].correlation, 1.0, 1e-9)
test("precursor correlation capped at 1.0", t_precursor_cap)

def t_signals_fire():
    df = monthly_df([0.3, 0.3],
                    physical_symptom_count=[2, 6],
                    entry_count=[10, 2],
                    avg_sentence_length=[30.0, 10.0],
                    self_monitor_rate=[1.0, 0.0])
    signals = {s.signal: s.severity for s in detect_active_signals(df, (), CFG)}
    assert signals == {
        "physical symptoms increasing": "warning",
        "sentences shortening": "caution",
        "writing frequency dropping": "caution",
        "self-monitoring words disappearing": "watch",
    }, f"Got {signals}"
test("independent signals fire together", t_signals_fire)

def t_signals_quiet():
    assert detect_active_signals(monthly_df([0.3, 0.3]), (), CFG) == ()
test("no signals for identical months", t_signals_quiet)

def t_signal_precursor():
    df = monthly_df([0.3, 0.3], text=["", "頭痛がする"])
    strong = detect_active_signals(df, (PrecursorWord("頭痛", 30, 0.7),), CFG)
    weak = detect_active_signals(df, (PrecursorWord("頭痛", 30, 0.5),), CFG)
    assert strong[0].severity == "caution"
    assert weak[0].severity == "watch"
test("precursor word in latest month", t_signal_precursor)

def t_first_person_signal():
    df = monthly_df([0.3, 0.3], first_person_rate=[4.0, 9.0])
    signals = detect_active_signals(df, (), CFG)
    assert [s.signal for s in signals] == ["more self-reference"]
test("first-person jump → watch", t_first_person_signal)

def t_symptom_lag():
    df = monthly_df([0.1, 0.3, 0.1, 0.3, 0.3, 0.3],
                    physical_symptom_count=[10, 0, 10, 0, 0, 0])
    corr = detect_symptom_lag(df, CFG)
    assert len(corr) == 1
    assert corr[0].lag_days == 30
    approx(corr[0].strength, 1.0, 1e-9)
test("symptom-heavy months followed by rising negativity", t_symptom_lag)

def t_symptom_lag_weak():
    df = monthly_df([0.1, 0.12, 0.1, 0.12, 0.12, 0.12],
                    physical_symptom_count=[10, 0, 10, 0, 0, 0])
    assert detect_symptom_lag(df, CFG) == ()
test("small follow-up deltas → no lag correlation", t_symptom_lag_weak)

def t_symptom_lag_tail_excluded():
    # index 3 is second-to-last: heavy, but never qualifies
    df = monthly_df([0.2, 0.5, 0.5, 0.2, 0.5],
                    physical_symptom_count=[10, 0, 0, 10, 0])
    assert detect_symptom_lag(df, CFG) == ()
    # same heavy month one step earlier does qualify
    df = monthly_df([0.2, 0.5, 0.2, 0.5, 0.5, 0.5],
                    physical_symptom_count=[10, 0, 10, 0, 0, 0])
    assert len(detect_symptom_lag(df, CFG)) == 1
test("final two months never count as symptom-heavy", t_symptom_lag_tail_excluded)


# ═══════════════════════════════════════════════════════════════════════
# DAILY PREDICTIVE CONTEXT
# ═══════════════════════════════════════════════════════════════════════
print("\n[Daily Context]")

FILLER = "楽しい一日"

def t_scenario_e():
    ctx = calc_daily_context(daily_from([FILLER] * 9), CFG)
    assert ctx == DailyPredictiveContext()
test("fewer than 10 days → default empty context", t_scenario_e)

def t_spike_precursors():
    texts = [FILLER] * 12
    texts[2] = "頭痛。楽しい"
    texts[3] = "残業。楽しい"
    texts[4] = "不安"
    texts[7] = "頭痛。楽しい"
    texts[9] = "不安"
    ctx = calc_daily_context(daily_from(texts), CFG)
    assert ctx.day_count == 12
    approx(ctx.spike_threshold, 1.0, 1e-9)
    got = [(w.word, w.before_spike_count, w.corpus_count) for w in ctx.precursor_words]
    assert got == [("頭痛", 2, 2), ("残業", 1, 1)], f"Got {got}"
    assert ctx.sleep_correlation is None
    assert ctx.sensory_interpersonal == ()
test("precursors tallied over 3 days before spikes", t_spike_precursors)

def t_sleep_correlation():
    texts = [FILLER] * 12
    for i in (0, 4, 8):
        texts[i] = "眠れない。楽しい"
    for i in (1, 5, 9):
        texts[i] = "辛い"
    sc = calc_daily_context(daily_from(texts), CFG).sleep_correlation
    assert sc is not None
    assert sc.lag_days == 2
    assert (sc.disrupted_samples, sc.baseline_samples) == (3, 8)
    approx(sc.strength, 0.83, 0.011)
test("sleep disruption followed by negativity", t_sleep_correlation)

def t_cooccurrence():
    texts = [FILLER] * 12
    texts[0] = "耳鳴り。上司と話した"
    texts[1] = "耳鳴り。上司と話した"
    texts[2] = "耳鳴り。楽しい"
    texts[3] = "めまい。楽しい"
    texts[4] = "めまい。楽しい"
    co = calc_daily_context(daily_from(texts), CFG).sensory_interpersonal
    assert len(co) == 1, f"Got {co}"
    assert (co[0].symptom, co[0].interpersonal_term) == ("耳鳴り", "上司")
    assert (co[0].symptom_days, co[0].co_days) == (3, 2)
    approx(co[0].rate, 0.67, 1e-9)
test("sensory symptom paired with interpersonal term", t_cooccurrence)


# ═══════════════════════════════════════════════════════════════════════
# VOCABULARY DEPTH & INTERPRETER
# ═══════════════════════════════════════════════════════════════════════
print("\n[Vocabulary]")

def t_profile_counts():
    entries = validate_entries([{"id": "1", "date": "2024-01-01", "content": "私は疲れた。死にたい？"}])
    p = calc_vocabulary_depth(entries, "x", CFG.lexicon)
    assert (p.light_neg_count, p.deep_neg_count, p.first_person_count) == (1, 1, 1)
    assert p.question_count == 1
    approx(p.depth_ratio, 0.5, 1e-9)
    assert p.subject_ratio == 0.0
test("depth profile counts and ratios", t_profile_counts)

def t_split_halves():
    entries = validate_entries([
        {"id": "c", "date": "2024-03-01", "content": "c"},
        {"id": "a", "date": "2024-01-01", "content": "a"},
        {"id": "x", "date": None, "content": "x"},
        {"id": "d", "date": "2024-04-01", "content": "d"},
        {"id": "b", "date": "2024-02-01", "content": "b"},
    ])
    early, late = split_early_late(entries)
    assert [e.id for e in early] == ["a", "b"]
    assert [e.id for e in late] == ["c", "d"]
    assert split_early_late(entries[:1]) is None
test("early/late split by date", t_split_halves)

def t_scenario_c():
    a = profile(light_neg_count=20, light_neg_rate=20.0, depth_ratio=0.0)
    b = profile(light_neg_count=2, deep_neg_count=6, light_neg_rate=2.0,
                deep_neg_rate=6.0, depth_ratio=0.75)
    r = interpret_depth_change(a, b, CFG)
    assert r.pattern is DepthPattern.FREQUENCY_DOWN_DEPTH_UP
    approx(r.frequency_change, -0.6, 1e-9)
    approx(r.depth_change, 0.75, 1e-9)
    assert r.alternative_reading
test("fewer but deeper negatives, with alternative reading", t_scenario_c)

def t_depth_patterns():
    base = profile(light_neg_rate=10.0, deep_neg_rate=10.0, depth_ratio=0.5)
    cases = {
        DepthPattern.STABLE: profile(light_neg_rate=10.0, deep_neg_rate=10.0, depth_ratio=0.5),
        DepthPattern.FREQUENCY_DOWN_DEPTH_DOWN: profile(light_neg_rate=8.0, deep_neg_rate=2.0, depth_ratio=0.2),
        DepthPattern.FREQUENCY_UP_DEPTH_UP: profile(light_neg_rate=10.0, deep_neg_rate=20.0, depth_ratio=0.67),
        DepthPattern.OTHER: profile(light_neg_rate=25.0, deep_neg_rate=5.0, depth_ratio=0.17),
    }
    for expected, later in cases.items():
        r = interpret_depth_change(base, later, CFG)
        assert r.pattern is expected, f"{expected}: got {r.pattern}"
        assert r.description and r.alternative_reading
test("every depth pattern carries two readings", t_depth_patterns)

def t_reading_enforced():
    try:
        DepthInterpretation(pattern=DepthPattern.STABLE, frequency_change=0.0,
                            depth_change=0.0, description="x", alternative_reading="")
        raise RuntimeError("Should have raised ValueError")
    except ValueError:
        pass
test("missing alternative reading is rejected", t_reading_enforced)

def t_first_person_gate():
    r = interpret_first_person_shift(profile(), profile(first_person_rate=11.0), CFG)
    assert r.pattern is FirstPersonPattern.INSUFFICIENT_DATA
test("small first-person change → insufficient data", t_first_person_gate)

def t_first_person_increase():
    r = interpret_first_person_shift(profile(), profile(first_person_rate=20.0), CFG)
    assert r.pattern is FirstPersonPattern.INCREASE
    assert r.alternative_reading
test("first-person increase → two-sided result", t_first_person_increase)

def t_first_person_decrease_branches():
    early = profile()
    cases = {
        FirstPersonPattern.ROLE_PERSONIFICATION: profile(first_person_rate=5.0, task_word_rate=3.0),
        FirstPersonPattern.OUTWARD_ADAPTATION: profile(first_person_rate=5.0, other_person_rate=4.0),
        FirstPersonPattern.REDUCED_SELF_DISCLOSURE: profile(first_person_rate=5.0, self_monitor_rate=0.5),
        FirstPersonPattern.MULTIPLE_HYPOTHESES: profile(first_person_rate=5.0),
    }
    for expected, late in cases.items():
        r = interpret_first_person_shift(early, late, CFG)
        assert r.pattern is expected, f"{expected}: got {r.pattern}"
        assert r.alternative_reading and r.evidence
test("first-person decrease hypotheses in order", t_first_person_decrease_branches)


# ═══════════════════════════════════════════════════════════════════════
# ELEVATION & RESILIENCE
# ═══════════════════════════════════════════════════════════════════════
print("\n[Elevation]")

def t_elevation_recurrence():
    df = monthly_df([0.1, 0.7, 0.9, 0.3, 0.2, 0.8], self_denial_count=[0, 3, 8, 1, 0, 5])
    pts = calc_elevation(df, "month", CFG.elevation.monthly)
    assert len(pts) == 6
    for i in range(1, len(pts)):
        approx(pts[i].cumulative_elevation, pts[i - 1].cumulative_elevation + pts[i].climb, 1e-6)
        assert pts[i].is_slide == (pts[i].climb < 0)
test("elevation[i] = elevation[i-1] + climb[i]", t_elevation_recurrence)

def t_climb_clamped():
    scale = ElevationScale(climb_min=-10.0, climb_max=10.0)
    assert compute_climb(0, 1.0, 100.0, 0.0, scale) == -10.0
    assert compute_climb(1000, 0.0, 0.0, 1.0, scale) == 10.0
    assert compute_climb(5, 0.5, 0.0, None, scale) == 10.0
test("climb clamped to the granularity range", t_climb_clamped)

def t_resilience():
    m = calc_resilience(points_from([10, -5, -5, 3, 3, 4, -2, 10]))
    assert m.slide_count == 2
    approx(m.total_slide_depth, 12.0, 1e-9)
    assert (m.deepest_slide.start_period, m.deepest_slide.end_period) == ("p1", "p2")
    assert m.deepest_slide.recovery_periods == 2
    approx(m.avg_recovery_periods, 1.5, 1e-9)
    approx(m.recovery_ratio, 1.0, 1e-9)
test("slide runs, recovery periods and ratio", t_resilience)

def t_resilience_no_slides():
    m = calc_resilience(points_from([5, 10, 0]))
    assert m == ResilienceMetrics()
    assert m.recovery_ratio is None and m.slide_count == 0
test("no slides → recovery ratio absent", t_resilience_no_slides)

def t_resilience_unrecovered():
    m = calc_resilience(points_from([5, -10, 2]))
    assert m.deepest_slide.recovery_periods is None
    assert m.avg_recovery_periods is None
    approx(m.recovery_ratio, 0.7, 1e-9)
test("never-recovered slide → recovery periods absent", t_resilience_unrecovered)

def t_resilience_counts_earlier_climb():
    m = calc_resilience(points_from([10, -10]))
    assert m.deepest_slide.recovery_periods is None
    approx(m.recovery_ratio, 1.0, 1e-9)
    approx(calc_resilience(points_from([4, -10, 2])).recovery_ratio, 0.6, 1e-9)
test("recovery ratio counts climb before the first slide", t_resilience_counts_earlier_climb)


# ═══════════════════════════════════════════════════════════════════════
# INTEGRATION
# ═══════════════════════════════════════════════════════════════════════
print("\n[Integration]")

ENTRIES = synthetic_entries()

def t_full_result():
    r = analyze_entries(ENTRIES)
    assert isinstance(r, AnalysisResult)
    assert len(r.monthly) == 18
    assert sum(m.entry_count for m in r.monthly) == 72
    assert r.current_state is not None
    assert 0 <= r.current_state.overall_stability <= 100
    assert r.daily_context.day_count == 72
    assert r.vocabulary is not None and r.depth_interpretation is not None
    assert set(r.elevation) == {"yearly", "monthly", "daily"}
    assert [s.year for s in r.stability_by_year] == ["2022", "2023"]
test("full analysis populates every stage", t_full_result)

def t_record_bounds():
    r = analyze_entries(ENTRIES)
    for m in r.monthly:
        assert 0.0 <= m.negative_ratio <= 1.0
        for rate_value in (m.first_person_rate, m.other_person_rate, m.task_word_rate,
                           m.self_monitor_rate, m.work_word_rate):
            assert rate_value >= 0.0
    assert r.monthly[0].negative_ratio_ma3 is None and r.monthly[1].negative_ratio_ma3 is None
    assert all(m.negative_ratio_ma3 is not None for m in r.monthly[2:])
test("rates non-negative, ratio in [0,1], MA gating", t_record_bounds)

def t_elevation_in_pipeline():
    r = analyze_entries(ENTRIES)
    for points in r.elevation.values():
        for i in range(1, len(points)):
            approx(points[i].cumulative_elevation,
                   points[i - 1].cumulative_elevation + points[i].climb, 1e-6)
    for metrics in r.resilience.values():
        if metrics.slide_count == 0:
            assert metrics.recovery_ratio is None
        else:
            assert 0.0 <= metrics.recovery_ratio <= 1.0
test("elevation recurrence and resilience bounds", t_elevation_in_pipeline)

def t_deterministic():
    assert repr(analyze_entries(ENTRIES)) == repr(analyze_entries(ENTRIES))
test("identical input → identical output", t_deterministic)

def t_order_independent():
    forward = analyze_entries(ENTRIES)
    backward = analyze_entries(list(reversed(ENTRIES)))
    assert forward.monthly == backward.monthly
test("monthly records independent of input order", t_order_independent)

def t_empty_input():
    r = analyze_entries([])
    assert r.monthly == () and r.current_state is None
    assert r.daily_context == DailyPredictiveContext()
    assert r.vocabulary is None
test("empty input → empty result, no error", t_empty_input)

def t_bad_content():
    for bad in ([{"id": "1", "date": "2024-01-01", "content": 42}],
                [{"id": "1", "date": "2024-01-01"}],
                ["just a string"]):
        try:
            analyze_entries(bad)
            raise RuntimeError("Should have raised ValueError")
        except ValueError:
            pass
test("structurally invalid entries raise ValueError", t_bad_content)

def t_custom_lexicon():
    cfg = replace(CFG, lexicon=DEFAULT_LEXICON.replace(negative=["雨"], positive=["晴れ"]))
    r = analyze_entries([{"id": "1", "date": "2024-05-01", "content": "雨のち晴れ、また雨"}], cfg)
    assert (r.monthly[0].negative_count, r.monthly[0].positive_count) == (2, 1)
test("custom lexicon injection works", t_custom_lexicon)

def t_to_dict():
    r = analyze_entries(ENTRIES)
    d = r.to_dict()
    assert d["monthly"][0]["month"] == "2022-01"
    assert d["current_state"]["overall_stability"] == r.current_state.overall_stability
    assert d["elevation"]["monthly"][0]["period"] == "2022-01"
    assert d["resilience"]["daily"]["slide_count"] == r.resilience["daily"].slide_count
    assert d["daily_context"]["day_count"] == 72
test("result converts to nested plain dicts", t_to_dict)


# ═══════════════════════════════════════════════════════════════════════
# SUMMARY
# ═══════════════════════════════════════════════════════════════════════
print(f"\n{'=' * 58}")
print(f"  {passed} passed, {failed} failed")
print(f"{'=' * 58}")

sys.exit(1 if failed else 0)
