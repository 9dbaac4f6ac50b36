"""Tests for Baseline: rolling mean of recent indices + calibration state."""

from datetime import date, timedelta

import pytest

from lifebalance.engine.baseline import Baseline, BaselineStatus
from lifebalance.models import DailyRecord


def make_records(scores: list, start: date = date(2026, 1, 1)) -> list[DailyRecord]:
    """One record per day; None leaves the day unscored."""
    return [
        DailyRecord(date=start + timedelta(days=i), lbi=score)
        for i, score in enumerate(scores)
    ]


class TestBaselineInit:
    """Test Baseline initialization."""

    def test_defaults(self) -> None:
        baseline = Baseline()
        assert baseline.window_days == 7
        assert baseline.min_days == 3

    def test_window_smaller_than_min_rejected(self) -> None:
        with pytest.raises(ValueError, match="window_days"):
            Baseline(window_days=2, min_days=3)

    def test_min_days_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="min_days"):
            Baseline(window_days=7, min_days=0)


class TestBaselineCompute:
    """Test the baseline value."""

    def test_three_equal_days(self) -> None:
        """3 days at 70 → 70."""
        assert Baseline().compute(make_records([70, 70, 70])) == 70

    def test_too_few_days(self) -> None:
        assert Baseline().compute(make_records([70, 70])) is None

    def test_empty(self) -> None:
        assert Baseline().compute([]) is None

    def test_uses_last_window_only(self) -> None:
        """10 days 10..100 → mean of the last 7 (40..100) = 70."""
        records = make_records([10, 20, 30, 40, 50, 60, 70, 80, 90, 100])
        assert Baseline().compute(records) == 70

    def test_unscored_days_ignored(self) -> None:
        records = make_records([60, None, 70, None, 80])
        assert Baseline().compute(records) == 70

    def test_input_order_irrelevant(self) -> None:
        records = make_records([10, 20, 30, 40, 50, 60, 70, 80, 90, 100])
        assert Baseline().compute(list(reversed(records))) == 70

    def test_rounds_half_up(self) -> None:
        """Mean 70.5 → 71."""
        assert Baseline(window_days=2, min_days=2).compute(make_records([70, 71])) == 71

    def test_rounds_down_below_half(self) -> None:
        assert Baseline().compute(make_records([70, 70, 71])) == 70


class TestBaselineMeta:
    """Test calibration metadata."""

    def test_calibrating(self) -> None:
        meta = Baseline().compute_meta(make_records([60, 62, 64]))

        assert meta.baseline == 62
        assert meta.days_used == 3
        assert meta.target_days == 7
        assert meta.status is BaselineStatus.CALIBRATING

    def test_stable_when_window_full(self) -> None:
        meta = Baseline().compute_meta(make_records([60] * 9))

        assert meta.days_used == 7
        assert meta.status is BaselineStatus.STABLE

    def test_undefined_still_reports_days(self) -> None:
        meta = Baseline().compute_meta(make_records([60]))
        assert meta.baseline is None
        assert meta.days_used == 1

    def test_to_dict(self) -> None:
        data = Baseline().compute_meta(make_records([70, 70, 70])).to_dict()
        assert data == {
            "baseline": 70,
            "days_used": 3,
            "target_days": 7,
            "status": "calibrating",
        }
