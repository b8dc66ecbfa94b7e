"""
Vocabulary depth profiles and their interpretation.

A profile summarizes one period of writing. The two interpreters compare an
earlier profile with a later one and never settle on a single verdict:
every result names its primary reading together with the opposite,
equally plausible one.
"""

from typing import List, Optional, Sequence, Tuple

from summit.config import SummitConfig
from summit.lexicon import (
    Category,
    Lexicon,
    avg_sentence_length,
    count,
    per_thousand,
    ratio,
)
from summit.models import (
    DepthInterpretation,
    DepthPattern,
    Entry,
    FirstPersonPattern,
    FirstPersonShiftInterpretation,
    VocabularyDepthProfile,
)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

def calc_vocabulary_depth(
    entries: Sequence[Entry],
    period: str,
    lexicon: Lexicon,
) -> VocabularyDepthProfile:
    """Counts and per-1000-char rates for one period of entries."""
    text = "\n".join(e.content for e in entries)
    length = len(text)

    light = count(text, lexicon.terms(Category.LIGHT_NEGATIVE))
    deep = count(text, lexicon.terms(Category.DEEP_NEGATIVE))
    first = count(text, lexicon.terms(Category.FIRST_PERSON))
    other = count(text, lexicon.terms(Category.OTHER_PERSON))
    questions = text.count("？") + text.count("?")
    exclamations = text.count("！") + text.count("!")

    return VocabularyDepthProfile(
        period=period,
        entry_count=len(entries),
        text_length=length,
        light_neg_count=light,
        deep_neg_count=deep,
        first_person_count=first,
        other_person_count=other,
        question_count=questions,
        exclamation_count=exclamations,
        light_neg_rate=per_thousand(light, length),
        deep_neg_rate=per_thousand(deep, length),
        first_person_rate=per_thousand(first, length),
        other_person_rate=per_thousand(other, length),
        task_word_rate=per_thousand(count(text, lexicon.terms(Category.TASK)), length),
        work_word_rate=per_thousand(count(text, lexicon.terms(Category.WORK)), length),
        self_monitor_rate=per_thousand(count(text, lexicon.terms(Category.SELF_MONITOR)), length),
        question_rate=per_thousand(questions, length),
        exclamation_rate=per_thousand(exclamations, length),
        avg_sentence_length=round(avg_sentence_length(text), 1),
        depth_ratio=ratio(deep, light),
        subject_ratio=ratio(other, first),
    )


def split_early_late(entries: Sequence[Entry]) -> Optional[Tuple[List[Entry], List[Entry]]]:
    """Dated entries in date order, cut at the midpoint. None below two entries."""
    dated = sorted((e for e in entries if e.date is not None), key=lambda e: e.date)
    if len(dated) < 2:
        return None
    mid = len(dated) // 2
    return dated[:mid], dated[mid:]


def period_label(entries: Sequence[Entry]) -> str:
    return f"{entries[0].date.isoformat()}..{entries[-1].date.isoformat()}"


def relative_change(before: float, after: float) -> float:
    """(after − before) / before; from a zero baseline, +1.0 if anything appeared."""
    if before > 0:
        return (after - before) / before
    return 1.0 if after > 0 else 0.0


# ---------------------------------------------------------------------------
# Depth-change interpreter
# ---------------------------------------------------------------------------

_DEPTH_READINGS = {
    DepthPattern.FREQUENCY_DOWN_DEPTH_UP: (
        "Negative words became rarer but heavier: fewer complaints overall, "
        "yet a larger share of them are severe.",
        "Everyday irritations may simply have stopped being written down, so "
        "what remains is the serious material. The writer may be calmer and "
        "keeping the journal for what matters most.",
    ),
    DepthPattern.FREQUENCY_DOWN_DEPTH_DOWN: (
        "Negative words became both rarer and milder, consistent with recovery.",
        "Distress may have moved out of the journal. Avoidance, suppression or "
        "numbness can lower frequency and depth just as well as healing can.",
    ),
    DepthPattern.FREQUENCY_UP_DEPTH_UP: (
        "Negative words became more frequent and more severe, consistent with "
        "deepening distress.",
        "The writer may have found the safety to name things plainly. More and "
        "heavier words can be honest processing rather than decline.",
    ),
    DepthPattern.STABLE: (
        "Frequency and depth of negative words are essentially unchanged.",
        "Steady numbers can hide a change in what the words are about; an "
        "unchanged vocabulary may mean a settled state or a stuck one.",
    ),
}


def classify_depth_change(frequency_change: float, depth_change: float, cfg: SummitConfig) -> DepthPattern:
    it = cfg.interpretation
    freq_down = frequency_change < -it.frequency_change
    freq_up = frequency_change > it.frequency_change
    depth_up = depth_change > it.depth_change
    depth_down = depth_change < -it.depth_change

    if freq_down and depth_up:
        return DepthPattern.FREQUENCY_DOWN_DEPTH_UP
    if freq_down and depth_down:
        return DepthPattern.FREQUENCY_DOWN_DEPTH_DOWN
    if freq_up and depth_up:
        return DepthPattern.FREQUENCY_UP_DEPTH_UP
    if not (freq_down or freq_up or depth_up or depth_down):
        return DepthPattern.STABLE
    return DepthPattern.OTHER


def interpret_depth_change(
    early: VocabularyDepthProfile,
    late: VocabularyDepthProfile,
    cfg: SummitConfig,
) -> DepthInterpretation:
    """
    frequency_change: relative change of the total negative rate
    depth_change:     absolute change of the depth ratio
    """
    frequency_change = relative_change(early.negative_rate, late.negative_rate)
    depth_change = late.depth_ratio - early.depth_ratio
    pattern = classify_depth_change(frequency_change, depth_change, cfg)

    evidence = (
        f"negative terms {early.negative_rate:.1f} → {late.negative_rate:.1f} "
        f"per 1000 chars ({frequency_change:+.0%})",
        f"depth ratio {early.depth_ratio:.0%} → {late.depth_ratio:.0%}",
    )

    if pattern is DepthPattern.OTHER:
        freq_word = "fell" if frequency_change < 0 else "rose"
        depth_word = "deepened" if depth_change > 0 else "lightened"
        description = (
            f"Negative-word frequency {freq_word} ({frequency_change:+.0%}) while depth "
            f"{depth_word} ({depth_change:+.2f}); the two measures do not move together."
        )
        alternative = (
            "Mixed movement often reflects a change of topic or writing habit rather "
            "than of wellbeing; neither direction is improvement or decline on its own."
        )
    else:
        description, alternative = _DEPTH_READINGS[pattern]

    return DepthInterpretation(
        pattern=pattern,
        frequency_change=round(frequency_change, 4),
        depth_change=round(depth_change, 4),
        description=description,
        alternative_reading=alternative,
        evidence=evidence,
    )


# ---------------------------------------------------------------------------
# First-person shift interpreter
# ---------------------------------------------------------------------------

def interpret_first_person_shift(
    early: VocabularyDepthProfile,
    late: VocabularyDepthProfile,
    cfg: SummitConfig,
) -> FirstPersonShiftInterpretation:
    """
    Read a change in self-reference. Below the gate nothing is said.
    A decrease is explained by the first matching companion change:
    task/work growth, then other-person growth, then a self-monitoring
    collapse; otherwise several hypotheses are kept open.
    """
    it = cfg.interpretation
    change = relative_change(early.first_person_rate, late.first_person_rate)
    fp_evidence = (
        f"first-person rate {early.first_person_rate:.1f} → {late.first_person_rate:.1f} "
        f"per 1000 chars ({change:+.0%})"
    )

    if abs(change) <= it.first_person_gate:
        return FirstPersonShiftInterpretation(
            pattern=FirstPersonPattern.INSUFFICIENT_DATA,
            first_person_change=round(change, 4),
            description="insufficient data",
            evidence=(fp_evidence,),
        )

    if change > 0:
        return FirstPersonShiftInterpretation(
            pattern=FirstPersonPattern.INCREASE,
            first_person_change=round(change, 4),
            description="Self-reference increased: more of the writing is about the self.",
            alternative_reading=(
                "This can be rumination and withdrawal, or deeper reflection and "
                "self-understanding; the same numbers fit both."
            ),
            evidence=(fp_evidence,),
        )

    task_change = relative_change(
        early.task_word_rate + early.work_word_rate,
        late.task_word_rate + late.work_word_rate,
    )
    other_change = relative_change(early.other_person_rate, late.other_person_rate)
    monitor_change = relative_change(early.self_monitor_rate, late.self_monitor_rate)

    if task_change >= it.task_growth:
        pattern = FirstPersonPattern.ROLE_PERSONIFICATION
        description = (
            "Self-reference fell while task and work words grew: the writer may be "
            "speaking through a role rather than as themself."
        )
        alternative = (
            "Life may simply be busier. Writing about tasks instead of feelings can be "
            "healthy engagement rather than a loss of self."
        )
        evidence = (fp_evidence, f"task/work words {task_change:+.0%}")
    elif other_change > it.other_growth:
        pattern = FirstPersonPattern.OUTWARD_ADAPTATION
        description = (
            "Self-reference fell while references to other people grew: attention "
            "turned outward, possibly toward adapting to others."
        )
        alternative = (
            "More attention to others can mean richer relationships and connection, "
            "not self-neglect."
        )
        evidence = (fp_evidence, f"other-person references {other_change:+.0%}")
    elif monitor_change <= -it.monitor_collapse:
        pattern = FirstPersonPattern.REDUCED_SELF_DISCLOSURE
        description = (
            "Self-reference and self-monitoring words fell together: the writer may be "
            "disclosing less about their inner state."
        )
        alternative = (
            "Checking on one's condition less often can mean there is less to worry "
            "about; stability often sounds quiet."
        )
        evidence = (fp_evidence, f"self-monitoring words {monitor_change:+.0%}")
    else:
        pattern = FirstPersonPattern.MULTIPLE_HYPOTHESES
        description = (
            "Self-reference fell without one clear companion change; role focus, "
            "outward attention and reduced disclosure all remain possible."
        )
        alternative = (
            "It may be a change of style or subject matter with no bearing on wellbeing."
        )
        evidence = (
            fp_evidence,
            f"task/work words {task_change:+.0%}",
            f"other-person references {other_change:+.0%}",
            f"self-monitoring words {monitor_change:+.0%}",
        )

    return FirstPersonShiftInterpretation(
        pattern=pattern,
        first_person_change=round(change, 4),
        description=description,
        alternative_reading=alternative,
        evidence=evidence,
    )
