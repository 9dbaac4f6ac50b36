"""Supervised dataset builder for next-day drop risk.

Each row pairs day t (features) with day t+1 (labels):
- Features: six signals at t, z-scored against a trailing window of up to
  14 qualifying records ending at t (mean and population sd, sd floored)
- Labels: whether the index / recovery at t+1 falls below
  window mean − k × window sd

Rows are dropped, never defaulted, when a window holds fewer than the
minimum samples or a signal is missing at t.
"""

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Iterable

import numpy as np
import pandas as pd

from lifebalance.models import DailyRecord

logger = logging.getLogger(__name__)

FEATURE_NAMES = (
    "recovery_z",
    "sleep_hours_z",
    "strain_z",
    "mood_z",
    "stress_z",
    "lbi_z",
)

# Raw signal behind each feature, in FEATURE_NAMES order
SIGNAL_COLUMNS = ("recovery", "sleep_hours", "strain", "mood", "stress", "lbi")

DEFAULT_WINDOW_DAYS = 14
DEFAULT_K = 0.75
MIN_WINDOW_SAMPLES = 7
SD_FLOOR = 1e-3
MAX_GAP_DAYS = 3


@dataclass
class FeatureRow:
    """One supervised example.

    Attributes:
        date: Day t the features describe
        x: Z-scored features in FEATURE_NAMES order
        y_lbi_drop: 1 if the index dropped at t+1
        y_recovery_drop: 1 if recovery dropped at t+1
    """

    date: dt.date
    x: np.ndarray
    y_lbi_drop: int
    y_recovery_drop: int


def _signal_frame(records: list[DailyRecord]) -> pd.DataFrame:
    rows = []
    for r in records:
        indicators = r.check_in.stress_indicators if r.check_in else None
        rows.append(
            {
                "date": r.date,
                "recovery": r.recovery,
                "sleep_hours": r.sleep_hours,
                "strain": r.strain,
                "mood": (r.mood - 1) / 3 if r.mood is not None else None,
                "stress": indicators.fraction if indicators is not None else None,
                "lbi": r.lbi,
            }
        )
    df = pd.DataFrame(rows, columns=["date", *SIGNAL_COLUMNS])
    df[list(SIGNAL_COLUMNS)] = df[list(SIGNAL_COLUMNS)].astype("float64")
    return df


def build_dataset(
    records: Iterable[DailyRecord],
    window_days: int = DEFAULT_WINDOW_DAYS,
    k: float = DEFAULT_K,
) -> list[FeatureRow]:
    """Build feature rows from the stored history.

    Args:
        records: Daily records in any order; only days with wearable data
            and an index qualify
        window_days: Trailing window length in qualifying records
        k: Drop threshold in window standard deviations

    Returns:
        Feature rows in ascending date order (possibly empty)

    Example:
        >>> rows = build_dataset(repository.list())
        >>> rows[-1].x.shape
        (6,)
    """
    if window_days < 1:
        raise ValueError(f"window_days ({window_days}) must be >= 1")

    qualifying = sorted(
        (r for r in records if r.has_wearable and r.lbi is not None),
        key=lambda r: r.date,
    )
    if len(qualifying) < 2:
        return []

    df = _signal_frame(qualifying)
    signals = df[list(SIGNAL_COLUMNS)]

    min_samples = min(MIN_WINDOW_SAMPLES, window_days)
    rolling = signals.rolling(window=window_days, min_periods=min_samples)
    means = rolling.mean()
    sds = rolling.std(ddof=0).clip(lower=SD_FLOOR)

    z = (signals - means) / sds

    rows = []
    for i in range(len(df) - 1):
        gap = (df["date"].iloc[i + 1] - df["date"].iloc[i]).days
        if gap < 1 or gap > MAX_GAP_DAYS:
            continue

        x = z.iloc[i].to_numpy(dtype=float)
        if np.isnan(x).any():
            continue

        lbi_threshold = means["lbi"].iloc[i] - k * sds["lbi"].iloc[i]
        recovery_threshold = means["recovery"].iloc[i] - k * sds["recovery"].iloc[i]

        rows.append(
            FeatureRow(
                date=df["date"].iloc[i],
                x=x,
                y_lbi_drop=int(signals["lbi"].iloc[i + 1] < lbi_threshold),
                y_recovery_drop=int(signals["recovery"].iloc[i + 1] < recovery_threshold),
            )
        )

    logger.debug(
        "Built %d feature rows from %d qualifying records", len(rows), len(qualifying)
    )
    return rows
