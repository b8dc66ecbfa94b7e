"""
Lexicon tables and the occurrence counter.

Matching is plain substring counting per term, summed independently across
the terms of a category. A span matched by two different terms is counted
twice; downstream thresholds were tuned against that behavior.

All functions are pure: no I/O and no side effects.
"""

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, List, Mapping, Tuple


class Category(str, Enum):
    """Named term categories. Static configuration, never derived from entries."""

    NEGATIVE = "negative"
    POSITIVE = "positive"
    LIGHT_NEGATIVE = "light_negative"
    DEEP_NEGATIVE = "deep_negative"
    SELF_DENIAL = "self_denial"
    PHYSICAL_SYMPTOM = "physical_symptom"
    WORK = "work"
    FIRST_PERSON = "first_person"
    OTHER_PERSON = "other_person"
    SELF_MONITOR = "self_monitor"
    TASK = "task"
    EXISTENTIAL = "existential"
    DIGNITY = "dignity"
    SLEEP_DISRUPTION = "sleep_disruption"
    SENSORY_SYMPTOM = "sensory_symptom"
    INTERPERSONAL = "interpersonal"
    PRECURSOR_CANDIDATE = "precursor_candidate"


# ---------------------------------------------------------------------------
# Default term tables (Japanese)
# ---------------------------------------------------------------------------

NEGATIVE_TERMS = (
    "辛い", "つらい", "苦しい", "悲しい", "寂しい", "怖い",
    "不安", "孤独", "絶望", "死にたい", "消えたい", "無理",
    "嫌だ", "嫌い", "最悪", "地獄", "痛い", "泣", "涙",
    "疲れ", "限界", "逃げたい", "しんどい", "だるい", "憂鬱",
    "鬱", "落ち込", "暗い", "重い", "苦手", "怒り", "腹が立つ",
    "イライラ", "ストレス", "後悔", "失敗", "惨め", "情けない",
)

POSITIVE_TERMS = (
    "嬉しい", "楽しい", "幸せ", "好き", "感謝", "ありがとう",
    "笑", "元気", "希望", "安心", "心地よい", "穏やか",
    "面白い", "素敵", "美しい", "温かい", "優しい", "喜び",
    "達成", "成功", "前向き", "光", "明るい", "自由",
)

LIGHT_NEGATIVE_TERMS = (
    "疲れ", "だるい", "面倒", "嫌だ", "苦手", "イライラ", "ストレス",
    "重い", "暗い", "落ち込", "後悔", "失敗",
)

DEEP_NEGATIVE_TERMS = (
    "死にたい", "消えたい", "絶望", "無理", "限界", "逃げたい",
    "生きてる意味", "価値がない", "自分なんか", "無価値",
    "地獄", "惨め", "情けない",
)

SELF_DENIAL_TERMS = (
    "自分が嫌", "自分なんか", "価値がない", "どうせ", "無価値",
    "存在意義", "生きてる意味", "いらない人間", "迷惑",
    "ダメな", "何もできない", "役に立たない", "自己嫌悪",
    "自分のせい", "自分が悪い", "能力がない", "才能がない",
)

PHYSICAL_SYMPTOM_TERMS = (
    "頭痛", "偏頭痛", "吐き気", "めまい", "動悸", "息苦しい",
    "不眠", "眠れない", "体が重い", "食欲がない", "食欲不振",
    "引き攣", "痙攣", "震え", "過呼吸", "幻嗅", "幻聴",
    "耳鳴り", "肩こり", "腰痛", "胃痛", "腹痛", "下痢",
    "蕁麻疹", "発疹", "微熱", "倦怠感", "脱力", "手汗",
    "冷や汗", "顔が引き攣", "体が固まる", "声が出ない",
    "過食", "拒食", "寝すぎ", "早朝覚醒", "中途覚醒",
)

WORK_TERMS = (
    "仕事", "職場", "上司", "同僚", "部下", "会議", "締切",
    "残業", "出勤", "退勤", "業務", "プロジェクト", "タスク",
    "報告", "資料", "納期", "評価", "面談", "異動", "転職",
    "給料", "昇進", "降格", "クビ", "解雇", "ミス", "失注",
    "クレーム", "研修", "出張",
)

FIRST_PERSON_TERMS = (
    "私", "わたし", "あたし", "僕", "ぼく", "俺", "おれ", "自分",
)

OTHER_PERSON_TERMS = (
    "あの人", "この人", "その人", "友達", "友人", "家族",
    "母", "父", "兄", "姉", "弟", "妹", "夫", "妻", "彼",
    "彼女", "先生", "医者", "カウンセラー", "子供", "こども",
)

SELF_MONITOR_TERMS = (
    "調子", "体調", "気分", "状態", "コンディション", "具合",
    "波", "浮き沈み", "安定", "不安定", "回復", "悪化",
)

TASK_TERMS = (
    "やること", "やらなきゃ", "やらないと", "予定", "計画",
    "目標", "TODO", "やりたい", "やろう", "決めた", "始める",
)

EXISTENTIAL_TERMS = (
    "生きる意味", "生きてる意味", "存在", "なぜ生きる", "意味がない",
    "虚しい", "空っぽ", "消えたい", "死",
)

DIGNITY_TERMS = (
    "尊厳", "誇り", "自分らしさ", "人として", "見下され", "馬鹿にされ",
    "屈辱", "恥", "認められ",
)

SLEEP_DISRUPTION_TERMS = (
    "眠れない", "不眠", "寝られない", "寝付けない", "寝不足",
    "夜中に目が覚め", "早朝覚醒", "中途覚醒", "徹夜", "悪夢",
)

SENSORY_SYMPTOM_TERMS = (
    "幻嗅", "幻聴", "耳鳴り", "めまい", "まぶしい", "音がうるさい",
    "匂い", "手汗", "冷や汗", "震え",
)

INTERPERSONAL_TERMS = (
    "上司", "同僚", "友達", "家族", "母", "父", "夫", "妻",
    "彼氏", "彼女", "会議", "面談", "電話", "飲み会", "人混み",
)

PRECURSOR_CANDIDATE_TERMS = PHYSICAL_SYMPTOM_TERMS[:15] + (
    "不安", "眠れない", "疲れ", "だるい", "イライラ", "ストレス",
    "仕事", "残業", "締切",
)


# ---------------------------------------------------------------------------
# Lexicon container
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Lexicon:
    """Immutable mapping from Category to its term tuple."""

    tables: Mapping[Category, Tuple[str, ...]]

    def __post_init__(self):
        missing = [c.value for c in Category if c not in self.tables]
        if missing:
            raise ValueError(f"Lexicon is missing categories: {missing}")
        object.__setattr__(
            self, "tables",
            MappingProxyType({c: tuple(self.tables[c]) for c in Category}),
        )

    def terms(self, category: Category) -> Tuple[str, ...]:
        return self.tables[category]

    def replace(self, **overrides: Iterable[str]) -> "Lexicon":
        """Return a copy with some categories swapped, keyed by Category value."""
        tables = dict(self.tables)
        for name, terms in overrides.items():
            tables[Category(name)] = tuple(terms)
        return Lexicon(tables)

    def __hash__(self):
        return hash(tuple(self.tables.items()))


DEFAULT_LEXICON = Lexicon({
    Category.NEGATIVE: NEGATIVE_TERMS,
    Category.POSITIVE: POSITIVE_TERMS,
    Category.LIGHT_NEGATIVE: LIGHT_NEGATIVE_TERMS,
    Category.DEEP_NEGATIVE: DEEP_NEGATIVE_TERMS,
    Category.SELF_DENIAL: SELF_DENIAL_TERMS,
    Category.PHYSICAL_SYMPTOM: PHYSICAL_SYMPTOM_TERMS,
    Category.WORK: WORK_TERMS,
    Category.FIRST_PERSON: FIRST_PERSON_TERMS,
    Category.OTHER_PERSON: OTHER_PERSON_TERMS,
    Category.SELF_MONITOR: SELF_MONITOR_TERMS,
    Category.TASK: TASK_TERMS,
    Category.EXISTENTIAL: EXISTENTIAL_TERMS,
    Category.DIGNITY: DIGNITY_TERMS,
    Category.SLEEP_DISRUPTION: SLEEP_DISRUPTION_TERMS,
    Category.SENSORY_SYMPTOM: SENSORY_SYMPTOM_TERMS,
    Category.INTERPERSONAL: INTERPERSONAL_TERMS,
    Category.PRECURSOR_CANDIDATE: PRECURSOR_CANDIDATE_TERMS,
})


# ---------------------------------------------------------------------------
# Counter
# ---------------------------------------------------------------------------

def count(text: str, terms: Iterable[str]) -> int:
    """Sum of non-overlapping substring occurrences of each term."""
    if not text:
        return 0
    return sum(text.count(term) for term in terms if term)


def rate(text: str, terms: Iterable[str]) -> float:
    """Occurrences per 1,000 characters; 0.0 for empty text."""
    if not text:
        return 0.0
    return count(text, terms) / max(1, len(text)) * 1000.0


def per_thousand(n: float, length: int) -> float:
    """Normalize an existing count by text length (per 1,000 characters)."""
    if length <= 0:
        return 0.0
    return n / length * 1000.0


def ratio(a: float, b: float) -> float:
    """a / (a + b), or 0.0 when both are zero."""
    total = a + b
    if total <= 0:
        return 0.0
    return a / total


# ---------------------------------------------------------------------------
# Sentences
# ---------------------------------------------------------------------------

_SENTENCE_BREAK = re.compile(r"[。．！？!?\n]+")


def split_sentences(text: str) -> List[str]:
    """Split on sentence-terminal punctuation and newlines, dropping blanks."""
    return [s for s in _SENTENCE_BREAK.split(text) if s.strip()]


def avg_sentence_length(text: str) -> float:
    sentences = split_sentences(text)
    if not sentences:
        return 0.0
    return sum(len(s) for s in sentences) / len(sentences)


def top_terms(text: str, terms: Iterable[str], n: int = 10) -> Tuple[Tuple[str, int], ...]:
    """Most frequent terms present in text, as (term, count) pairs."""
    hits = [(term, text.count(term)) for term in dict.fromkeys(terms)]
    hits = [h for h in hits if h[1] > 0]
    hits.sort(key=lambda h: h[1], reverse=True)
    return tuple(hits[:n])
