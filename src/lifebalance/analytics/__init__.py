"""Analytics over the stored history.

Modules:
    - frame: Records → per-date pandas DataFrame
    - summary: Descriptives, correlations, highlights
    - report: CSV / Markdown renderers
    - consistency: Stability + regularity score over a trailing window
"""

from lifebalance.analytics.frame import records_frame
from lifebalance.analytics.summary import (
    AnalyticsSummary,
    CorrelationRow,
    Descriptive,
    build_summary,
)
from lifebalance.analytics.report import to_csv, to_markdown
from lifebalance.analytics.consistency import (
    ConsistencyResult,
    compute_consistency,
    slice_up_to,
)

__all__ = [
    "records_frame",
    "AnalyticsSummary",
    "CorrelationRow",
    "Descriptive",
    "build_summary",
    "to_csv",
    "to_markdown",
    "ConsistencyResult",
    "compute_consistency",
    "slice_up_to",
]
