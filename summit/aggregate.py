"""
Temporal aggregation: entries → monthly / daily / yearly frames → records.

Entries without a usable date are dropped from every view. Each bucket's
contents are joined (input order preserved) and run through the counter once
per category. Frames come out sorted chronologically; downstream stages
never re-sort.
"""

import math
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from summit.lexicon import (
    Category,
    Lexicon,
    avg_sentence_length,
    count,
    per_thousand,
    ratio,
    top_terms,
)
from summit.models import DailyRecord, Entry, MonthlyRecord


# Rate columns: name → category
RATE_COLUMNS = {
    "first_person_rate": Category.FIRST_PERSON,
    "other_person_rate": Category.OTHER_PERSON,
    "task_word_rate": Category.TASK,
    "self_monitor_rate": Category.SELF_MONITOR,
    "work_word_rate": Category.WORK,
    "existential_rate": Category.EXISTENTIAL,
    "dignity_rate": Category.DIGNITY,
}

COUNT_COLUMNS = {
    "negative_count": Category.NEGATIVE,
    "positive_count": Category.POSITIVE,
    "physical_symptom_count": Category.PHYSICAL_SYMPTOM,
    "self_denial_count": Category.SELF_DENIAL,
}

BUCKET_COLUMNS = (
    ["text", "entry_count", "text_length"]
    + list(COUNT_COLUMNS)
    + ["negative_ratio", "avg_sentence_length"]
    + list(RATE_COLUMNS)
    + ["top_emotion_words"]
)


# ---------------------------------------------------------------------------
# Entry frame
# ---------------------------------------------------------------------------

def entries_frame(entries: Iterable[Entry]) -> pd.DataFrame:
    """Dated entries as a frame, in input order. Unparseable dates are dropped."""
    rows = [{"id": e.id, "date": e.date, "content": e.content} for e in entries]
    df = pd.DataFrame(rows, columns=["id", "date", "content"])
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df = df.dropna(subset=["date"])
    df.reset_index(drop=True, inplace=True)
    return df


# ---------------------------------------------------------------------------
# Per-bucket text metrics
# ---------------------------------------------------------------------------

def text_metrics(text: str, lexicon: Lexicon) -> Dict[str, object]:
    """Every count and rate the downstream stages read from one bucket of text."""
    length = len(text)
    row: Dict[str, object] = {"text": text, "text_length": length}

    for col, category in COUNT_COLUMNS.items():
        row[col] = count(text, lexicon.terms(category))

    row["negative_ratio"] = ratio(row["negative_count"], row["positive_count"])
    row["avg_sentence_length"] = avg_sentence_length(text)

    for col, category in RATE_COLUMNS.items():
        row[col] = per_thousand(count(text, lexicon.terms(category)), length)

    emotion_terms = lexicon.terms(Category.NEGATIVE) + lexicon.terms(Category.POSITIVE)
    row["top_emotion_words"] = top_terms(text, emotion_terms, 10)
    return row


def _bucket(df: pd.DataFrame, key: pd.Series, lexicon: Lexicon, name: str) -> pd.DataFrame:
    if df.empty:
        return pd.DataFrame(columns=[name] + BUCKET_COLUMNS)

    grouped = df.groupby(key, sort=True)
    texts = grouped["content"].agg(lambda s: "\n".join(s))
    sizes = grouped.size()

    rows: List[Dict[str, object]] = []
    for bucket, text in texts.items():
        row = {name: bucket, "entry_count": int(sizes[bucket])}
        row.update(text_metrics(text, lexicon))
        rows.append(row)

    out = pd.DataFrame(rows, columns=[name] + BUCKET_COLUMNS)
    out.sort_values(name, inplace=True)
    out.reset_index(drop=True, inplace=True)
    return out


def monthly_frame(entries_df: pd.DataFrame, lexicon: Lexicon) -> pd.DataFrame:
    """One row per calendar month (YYYY-MM)."""
    key = entries_df["date"].dt.strftime("%Y-%m") if not entries_df.empty else None
    return _bucket(entries_df, key, lexicon, "month")


def daily_frame(entries_df: pd.DataFrame, lexicon: Lexicon) -> pd.DataFrame:
    """One row per calendar day (YYYY-MM-DD), plus a ``day`` Timestamp column."""
    key = entries_df["date"].dt.strftime("%Y-%m-%d") if not entries_df.empty else None
    df = _bucket(entries_df, key, lexicon, "date")
    df["day"] = pd.to_datetime(df["date"])
    return df


def yearly_frame(monthly: pd.DataFrame) -> pd.DataFrame:
    """Pool monthly counts per calendar year; the ratio is recomputed from pooled counts."""
    cols = ["year", "entry_count", "negative_count", "positive_count",
            "physical_symptom_count", "self_denial_count", "negative_ratio"]
    if monthly.empty:
        return pd.DataFrame(columns=cols)

    year = monthly["month"].str.slice(0, 4).rename("year")
    sums = monthly.groupby(year, sort=True)[
        ["entry_count", "negative_count", "positive_count",
         "physical_symptom_count", "self_denial_count"]
    ].sum()
    sums["negative_ratio"] = [
        ratio(n, p) for n, p in zip(sums["negative_count"], sums["positive_count"])
    ]
    return sums.reset_index()[cols]


# ---------------------------------------------------------------------------
# Frame → records
# ---------------------------------------------------------------------------

def _optional(value) -> Optional[float]:
    if value is None:
        return None
    value = float(value)
    return None if math.isnan(value) else value


def _words(value) -> Tuple[Tuple[str, int], ...]:
    return tuple((str(w), int(c)) for w, c in value)


def monthly_records(df: pd.DataFrame) -> Tuple[MonthlyRecord, ...]:
    records = []
    for row in df.to_dict("records"):
        records.append(MonthlyRecord(
            month=row["month"],
            entry_count=int(row["entry_count"]),
            text_length=int(row["text_length"]),
            negative_count=int(row["negative_count"]),
            positive_count=int(row["positive_count"]),
            negative_ratio=float(row["negative_ratio"]),
            avg_sentence_length=float(row["avg_sentence_length"]),
            first_person_rate=float(row["first_person_rate"]),
            other_person_rate=float(row["other_person_rate"]),
            task_word_rate=float(row["task_word_rate"]),
            self_monitor_rate=float(row["self_monitor_rate"]),
            work_word_rate=float(row["work_word_rate"]),
            existential_rate=float(row["existential_rate"]),
            dignity_rate=float(row["dignity_rate"]),
            physical_symptom_count=int(row["physical_symptom_count"]),
            self_denial_count=int(row["self_denial_count"]),
            top_emotion_words=_words(row["top_emotion_words"]),
            negative_ratio_ma3=_optional(row.get("negative_ratio_ma3")),
            negative_ratio_ma6=_optional(row.get("negative_ratio_ma6")),
            seasonal_baseline=_optional(row.get("seasonal_baseline")),
            seasonal_deviation=_optional(row.get("seasonal_deviation")),
        ))
    return tuple(records)


def daily_records(df: pd.DataFrame) -> Tuple[DailyRecord, ...]:
    return tuple(
        DailyRecord(
            date=row["date"],
            entry_count=int(row["entry_count"]),
            text_length=int(row["text_length"]),
            negative_count=int(row["negative_count"]),
            positive_count=int(row["positive_count"]),
            negative_ratio=float(row["negative_ratio"]),
            avg_sentence_length=float(row["avg_sentence_length"]),
            first_person_rate=float(row["first_person_rate"]),
            other_person_rate=float(row["other_person_rate"]),
            self_monitor_rate=float(row["self_monitor_rate"]),
            physical_symptom_count=int(row["physical_symptom_count"]),
            self_denial_count=int(row["self_denial_count"]),
        )
        for row in df.to_dict("records")
    )
