"""Descriptive statistics and correlations over the trailing window.

Report-friendly analytics for small personal datasets:
- Descriptives (n, mean, sample sd, min, max) per metric
- Pearson correlations with pairwise deletion over a fixed pair set
- Highlight sentences for the strongest sufficiently-sampled pairs
"""

import datetime as dt
import logging
import math
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np
import pandas as pd

from lifebalance.analytics.frame import METRIC_COLUMNS, records_frame
from lifebalance.models import DailyRecord
from lifebalance.numeric import format_number, round_dp

logger = logging.getLogger(__name__)

# lbi against every other metric, then wearable vs self-report
CORRELATION_PAIRS = [
    ("lbi", "recovery"),
    ("lbi", "sleep_hours"),
    ("lbi", "strain"),
    ("lbi", "mood"),
    ("lbi", "energy"),
    ("lbi", "stress_count"),
    ("recovery", "mood"),
    ("sleep_hours", "mood"),
    ("strain", "mood"),
    ("recovery", "stress_count"),
    ("sleep_hours", "stress_count"),
    ("strain", "stress_count"),
]

MIN_CORRELATION_N = 3
HIGHLIGHT_MIN_N = 7
HIGHLIGHT_MIN_R = 0.35
MAX_HIGHLIGHTS = 4

NO_HIGHLIGHTS = (
    "Not enough data yet for robust correlations. Log more days "
    "(wearables + check-ins) to unlock stronger analytics."
)


@dataclass
class Descriptive:
    """Summary statistics for one metric; values are None when n = 0."""

    n: int
    mean: float | None = None
    sd: float | None = None
    min: float | None = None
    max: float | None = None

    def to_dict(self) -> dict:
        return {"n": self.n, "mean": self.mean, "sd": self.sd, "min": self.min, "max": self.max}


@dataclass
class CorrelationRow:
    """Pearson r between two metrics; r is None when undefined."""

    a: str
    b: str
    n: int
    r: float | None = None

    def to_dict(self) -> dict:
        return {"a": self.a, "b": self.b, "n": self.n, "r": self.r}


@dataclass
class AnalyticsSummary:
    """Analytics over the trailing window.

    Attributes:
        generated_at: When the summary was built
        window_days: Requested trailing window (in records)
        n_days_total: Records in the window
        n_days_with_lbi: Records with an index
        n_days_with_wearable: Records with wearable metrics
        n_days_with_check_in: Records with a check-in
        descriptives: Per-metric statistics, in METRIC_COLUMNS order
        correlations: One row per CORRELATION_PAIRS entry, in order
        highlights: Highlight sentences (never empty)
    """

    generated_at: dt.datetime
    window_days: int
    n_days_total: int
    n_days_with_lbi: int
    n_days_with_wearable: int
    n_days_with_check_in: int
    descriptives: dict[str, Descriptive]
    correlations: list[CorrelationRow]
    highlights: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "generated_at": self.generated_at.isoformat(),
            "window_days": self.window_days,
            "n_days_total": self.n_days_total,
            "n_days_with_lbi": self.n_days_with_lbi,
            "n_days_with_wearable": self.n_days_with_wearable,
            "n_days_with_check_in": self.n_days_with_check_in,
            "descriptives": {k: d.to_dict() for k, d in self.descriptives.items()},
            "correlations": [c.to_dict() for c in self.correlations],
            "highlights": list(self.highlights),
        }


def describe(values: pd.Series) -> Descriptive:
    """Describe non-missing values; sd is the sample sd (0 when n = 1)."""
    xs = values.dropna().to_numpy(dtype=float)
    n = len(xs)
    if n == 0:
        return Descriptive(n=0)

    sd = float(np.std(xs, ddof=1)) if n > 1 else 0.0
    return Descriptive(
        n=n,
        mean=round_dp(float(xs.mean())),
        sd=round_dp(sd),
        min=round_dp(float(xs.min())),
        max=round_dp(float(xs.max())),
    )


def pearson(a: np.ndarray, b: np.ndarray) -> float | None:
    """Pearson r, or None for n < 3 or zero variance."""
    if len(a) != len(b) or len(a) < MIN_CORRELATION_N:
        return None

    da = a - a.mean()
    db = b - b.mean()
    denom = math.sqrt(float((da * da).sum()) * float((db * db).sum()))
    if not math.isfinite(denom) or denom == 0:
        return None
    return float((da * db).sum()) / denom


def correlate(df: pd.DataFrame, a: str, b: str) -> CorrelationRow:
    """Correlate two columns over the rows where both are present."""
    paired = df[[a, b]].dropna()
    r = pearson(paired[a].to_numpy(dtype=float), paired[b].to_numpy(dtype=float))
    return CorrelationRow(
        a=a,
        b=b,
        n=len(paired),
        r=round_dp(r, 3) if r is not None else None,
    )


def highlight_sentence(row: CorrelationRow) -> str:
    """Render a correlation as a plain sentence.

    Example:
        >>> highlight_sentence(CorrelationRow("lbi", "recovery", 12, 0.71))
        'lbi vs recovery: strong positive relationship (r=0.71, n=12).'
    """
    magnitude = abs(row.r)
    if magnitude >= 0.6:
        strength = "strong"
    elif magnitude >= 0.45:
        strength = "moderate"
    else:
        strength = "mild"
    direction = "positive" if row.r > 0 else "negative"
    return (
        f"{row.a} vs {row.b}: {strength} {direction} relationship "
        f"(r={format_number(row.r)}, n={row.n})."
    )


def build_highlights(correlations: list[CorrelationRow]) -> list[str]:
    usable = [
        c for c in correlations
        if c.r is not None and c.n >= HIGHLIGHT_MIN_N and abs(c.r) >= HIGHLIGHT_MIN_R
    ]
    usable.sort(key=lambda c: abs(c.r), reverse=True)
    if not usable:
        return [NO_HIGHLIGHTS]
    return [highlight_sentence(c) for c in usable[:MAX_HIGHLIGHTS]]


def build_summary(
    records: Iterable[DailyRecord],
    window_days: int = 30,
    now: dt.datetime | None = None,
) -> AnalyticsSummary:
    """Build the analytics summary over the last `window_days` records.

    Args:
        records: Daily records in any order
        window_days: Number of most recent records (by date) to analyse
        now: Generation timestamp (defaults to the current UTC time)

    Returns:
        AnalyticsSummary; empty windows produce n = 0 descriptives,
        undefined correlations and the fallback highlight
    """
    if window_days < 1:
        raise ValueError(f"window_days ({window_days}) must be >= 1")

    df = records_frame(records).tail(window_days).reset_index(drop=True)

    descriptives = {column: describe(df[column]) for column in METRIC_COLUMNS}
    correlations = [correlate(df, a, b) for a, b in CORRELATION_PAIRS]

    logger.debug(
        "Analytics over %d records: %d defined correlations",
        len(df),
        sum(1 for c in correlations if c.r is not None),
    )

    return AnalyticsSummary(
        generated_at=now or dt.datetime.now(dt.timezone.utc),
        window_days=window_days,
        n_days_total=len(df),
        n_days_with_lbi=int(df["lbi"].notna().sum()),
        n_days_with_wearable=int(df["has_wearable"].sum()),
        n_days_with_check_in=int(df["has_check_in"].sum()),
        descriptives=descriptives,
        correlations=correlations,
        highlights=build_highlights(correlations),
    )
