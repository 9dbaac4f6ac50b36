"""Tests for analytics summary: descriptives, correlations, highlights."""

from datetime import date, datetime, timedelta, timezone

import numpy as np
import pandas as pd
import pytest

from lifebalance.analytics.frame import METRIC_COLUMNS, records_frame
from lifebalance.analytics.summary import (
    CORRELATION_PAIRS,
    NO_HIGHLIGHTS,
    CorrelationRow,
    build_highlights,
    build_summary,
    describe,
    highlight_sentence,
    pearson,
)
from lifebalance.models import CheckIn, DailyRecord, WearableMetrics

START = date(2026, 1, 1)
NOW = datetime(2026, 2, 1, 12, 0, tzinfo=timezone.utc)


def linear_history(n: int) -> list[DailyRecord]:
    """Index tracks recovery exactly; sleep is constant."""
    return [
        DailyRecord(
            date=START + timedelta(days=i),
            lbi=50 + i,
            wearable=WearableMetrics(recovery=50 + i, sleep_hours=7.0),
        )
        for i in range(n)
    ]


class TestRecordsFrame:
    """Test record flattening."""

    def test_columns_and_order(self) -> None:
        records = linear_history(3)
        df = records_frame(list(reversed(records)))

        assert list(df["date"]) == [r.date for r in records]
        for column in METRIC_COLUMNS:
            assert df[column].dtype == np.float64

    def test_stress_count_missing_without_indicators(self) -> None:
        df = records_frame([DailyRecord(date=START, check_in=CheckIn(mood=3))])
        assert pd.isna(df.loc[0, "stress_count"])
        assert df.loc[0, "mood"] == 3.0

    def test_empty(self) -> None:
        assert len(records_frame([])) == 0


class TestDescribe:
    """Test descriptive statistics."""

    def test_basic(self) -> None:
        d = describe(pd.Series([60.0, 70.0, 80.0]))
        assert (d.n, d.mean, d.sd, d.min, d.max) == (3, 70.0, 10.0, 60.0, 80.0)

    def test_single_value_sd_zero(self) -> None:
        d = describe(pd.Series([55.0]))
        assert d.n == 1
        assert d.sd == 0.0

    def test_empty(self) -> None:
        d = describe(pd.Series([np.nan, np.nan]))
        assert d.n == 0
        assert d.mean is None

    def test_rounded_to_two_places(self) -> None:
        d = describe(pd.Series([1.0, 2.0, 2.0]))
        assert d.mean == 1.67
        assert d.sd == 0.58


class TestPearson:
    """Test Pearson correlation."""

    def test_perfect_positive(self) -> None:
        assert pearson(np.array([1.0, 2.0, 3.0]), np.array([2.0, 4.0, 6.0])) == pytest.approx(1.0)

    def test_perfect_negative(self) -> None:
        assert pearson(np.array([1.0, 2.0, 3.0]), np.array([3.0, 2.0, 1.0])) == pytest.approx(-1.0)

    def test_too_few_points(self) -> None:
        assert pearson(np.array([1.0, 2.0]), np.array([1.0, 2.0])) is None

    def test_zero_variance(self) -> None:
        assert pearson(np.array([1.0, 1.0, 1.0]), np.array([1.0, 2.0, 3.0])) is None


class TestHighlights:
    """Test highlight selection and phrasing."""

    def test_sentence(self) -> None:
        row = CorrelationRow("lbi", "recovery", 12, 0.71)
        assert highlight_sentence(row) == (
            "lbi vs recovery: strong positive relationship (r=0.71, n=12)."
        )

    def test_moderate_negative(self) -> None:
        row = CorrelationRow("lbi", "stress_count", 9, -0.5)
        assert "moderate negative" in highlight_sentence(row)

    def test_small_samples_excluded(self) -> None:
        assert build_highlights([CorrelationRow("lbi", "mood", 6, 0.9)]) == [NO_HIGHLIGHTS]

    def test_weak_correlations_excluded(self) -> None:
        assert build_highlights([CorrelationRow("lbi", "mood", 20, 0.2)]) == [NO_HIGHLIGHTS]

    def test_sorted_and_capped(self) -> None:
        rows = [CorrelationRow("a", str(i), 10, 0.4 + i * 0.1) for i in range(5)]
        highlights = build_highlights(rows)

        assert len(highlights) == 4
        assert highlights[0].startswith("a vs 4:")


class TestBuildSummary:
    """Test the assembled summary."""

    def test_empty_history(self) -> None:
        summary = build_summary([], now=NOW)

        assert summary.n_days_total == 0
        assert all(d.n == 0 for d in summary.descriptives.values())
        assert all(c.r is None for c in summary.correlations)
        assert summary.highlights == [NO_HIGHLIGHTS]

    def test_invalid_window(self) -> None:
        with pytest.raises(ValueError, match="window_days"):
            build_summary([], window_days=0)

    def test_correlation_rows_in_fixed_order(self) -> None:
        summary = build_summary(linear_history(8), now=NOW)
        assert [(c.a, c.b) for c in summary.correlations] == CORRELATION_PAIRS

    def test_linear_history(self) -> None:
        summary = build_summary(linear_history(8), now=NOW)
        by_pair = {(c.a, c.b): c for c in summary.correlations}

        assert by_pair[("lbi", "recovery")].r == 1.0
        assert by_pair[("lbi", "recovery")].n == 8
        assert by_pair[("lbi", "sleep_hours")].r is None
        assert summary.highlights == [
            "lbi vs recovery: strong positive relationship (r=1, n=8)."
        ]

    def test_window_keeps_latest_records(self) -> None:
        summary = build_summary(linear_history(10), window_days=5, now=NOW)

        assert summary.n_days_total == 5
        assert summary.descriptives["lbi"].min == 55.0
        assert summary.descriptives["lbi"].max == 59.0

    def test_counts(self) -> None:
        records = linear_history(3) + [
            DailyRecord(date=START + timedelta(days=3), check_in=CheckIn(mood=2))
        ]
        summary = build_summary(records, now=NOW)

        assert summary.n_days_with_lbi == 3
        assert summary.n_days_with_wearable == 3
        assert summary.n_days_with_check_in == 1
        assert summary.descriptives["stress_count"].n == 0

    def test_to_dict(self) -> None:
        data = build_summary(linear_history(3), now=NOW).to_dict()

        assert data["generated_at"] == "2026-02-01T12:00:00+00:00"
        assert data["window_days"] == 30
        assert list(data["descriptives"]) == METRIC_COLUMNS
        assert len(data["correlations"]) == len(CORRELATION_PAIRS)
