"""Baseline system: rolling average of recent indices + calibration state.

Implements the personal plan baseline:
- Mean of the last W scored days (W = 7 by default)
- Minimum of 3 scored days before a baseline exists
- Calibration states: CALIBRATING until the window is full, then STABLE

This is the plan baseline only. The ML subsystem z-scores features against
its own 14-day rolling window (see lifebalance.ml.dataset); the two are
configured independently.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from lifebalance.models import DailyRecord
from lifebalance.numeric import round_half_up


class BaselineStatus(Enum):
    """Baseline calibration states."""

    CALIBRATING = "calibrating"  # days_used < target_days
    STABLE = "stable"            # days_used ≥ target_days


@dataclass
class BaselineMeta:
    """Baseline value with its calibration metadata.

    Attributes:
        baseline: Rounded mean index, or None with fewer than min_days scored days
        days_used: Scored days that went into the mean
        target_days: Window size the baseline is calibrating towards
        status: CALIBRATING or STABLE
    """

    baseline: int | None
    days_used: int
    target_days: int
    status: BaselineStatus

    def to_dict(self) -> dict:
        return {
            "baseline": self.baseline,
            "days_used": self.days_used,
            "target_days": self.target_days,
            "status": self.status.value,
        }


class Baseline:
    """Plan baseline over the trailing scored days.

    Args:
        window_days: Number of most recent scored days averaged (default: 7)
        min_days: Minimum scored days for a defined baseline (default: 3)

    Example:
        >>> baseline = Baseline(window_days=7)
        >>> baseline.compute(records)  # None until 3 days are scored
        68
    """

    def __init__(self, window_days: int = 7, min_days: int = 3) -> None:
        if min_days < 1:
            raise ValueError(f"min_days ({min_days}) must be >= 1")
        if window_days < min_days:
            raise ValueError(
                f"window_days ({window_days}) must be >= min_days ({min_days})"
            )

        self.window_days = window_days
        self.min_days = min_days

    def recent_scores(self, records: Iterable[DailyRecord]) -> list[int]:
        """Indices of the last `window_days` scored records, oldest first."""
        scored = sorted(
            (r for r in records if r.lbi is not None),
            key=lambda r: r.date,
        )
        return [r.lbi for r in scored[-self.window_days:]]

    def compute(self, records: Iterable[DailyRecord]) -> int | None:
        """Rounded mean of the trailing scored days, or None if too few.

        Args:
            records: Daily records in any order; unscored days are ignored

        Returns:
            Integer baseline, or None with fewer than `min_days` scored days
        """
        return self.compute_meta(records).baseline

    def compute_meta(self, records: Iterable[DailyRecord]) -> BaselineMeta:
        """Baseline plus days used, target and calibration status."""
        scores = self.recent_scores(records)
        days_used = len(scores)

        baseline = None
        if days_used >= self.min_days:
            baseline = round_half_up(sum(scores) / days_used)

        status = (
            BaselineStatus.STABLE
            if days_used >= self.window_days
            else BaselineStatus.CALIBRATING
        )

        return BaselineMeta(
            baseline=baseline,
            days_used=days_used,
            target_days=self.window_days,
            status=status,
        )
