"""Flatten daily records into a pandas DataFrame.

One row per date, ascending, with the numeric signals analytics and
exports work on. Missing signals are NaN.
"""

from typing import Iterable

import pandas as pd

from lifebalance.models import DailyRecord

METRIC_COLUMNS = [
    "lbi",
    "recovery",
    "sleep_hours",
    "strain",
    "mood",
    "energy",
    "stress_count",
]


def records_frame(records: Iterable[DailyRecord]) -> pd.DataFrame:
    """Build the per-date metric frame.

    `stress_count` is NaN when a check-in captured no indicators, so it
    never contributes a neutral 0 to statistics.
    """
    rows = []
    for record in sorted(records, key=lambda r: r.date):
        rows.append(
            {
                "date": record.date,
                "lbi": record.lbi,
                "recovery": record.recovery,
                "sleep_hours": record.sleep_hours,
                "strain": record.strain,
                "mood": record.mood,
                "energy": record.energy,
                "stress_count": record.stress_count_or_none,
                "has_check_in": record.has_check_in,
                "has_wearable": record.has_wearable,
            }
        )

    df = pd.DataFrame(
        rows,
        columns=["date", *METRIC_COLUMNS, "has_check_in", "has_wearable"],
    )
    df[METRIC_COLUMNS] = df[METRIC_COLUMNS].astype("float64")
    return df
