"""
SUMMIT v1.0 - Deterministic Journal Analytics Core

Turns a collection of dated diary entries into layered, typed metrics:
lexicon signals, monthly/daily aggregates, trend and seasonal statistics,
current-state and predictive signals, vocabulary-depth readings, and the
elevation/resilience narrative.

Architecture:
    lexicon     - Term categories and the occurrence counter
    config      - All thresholds, windows and scales (single source of truth)
    aggregate   - Entries → monthly / daily / yearly frames → records
    stats       - Normal CDF, chi-square and proportion z-test
    trends      - Moving averages, seasonal baselines, trend shifts, seasonal stats
    scoring     - Current-state snapshot, yearly stability index
    detectors   - Precursor words, active signals, symptom lag
    daily       - Day-granularity predictive context
    vocabulary  - Depth profiles and dual-reading interpreters
    elevation   - Elevation transform and resilience metrics
    pipeline    - Orchestration: validate → aggregate → signal → score → detect

Public API:
    analyze_entries(entries, cfg=None) → AnalysisResult
"""

from summit.config import SummitConfig
from summit.models import AnalysisResult, Entry
from summit.pipeline import analyze_entries

__version__ = "1.0.0"

__all__ = ["analyze_entries", "AnalysisResult", "Entry", "SummitConfig"]
