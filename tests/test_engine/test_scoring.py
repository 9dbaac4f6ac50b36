"""Tests for Scoring system: wearable + check-in → Life Balance Index."""

import math

import pytest

from lifebalance.engine.scoring import (
    REASONS,
    compute_score,
    confidence_from_completeness,
    mood_score,
    sleep_score,
    stress_score,
)
from lifebalance.models import CheckIn, Classification, Confidence, StressIndicators


class TestSubscores:
    """Test per-signal subscore mappings."""

    def test_sleep_linear_between_bounds(self) -> None:
        """7.4h maps to 60."""
        assert sleep_score(7.4) == pytest.approx(60.0)

    def test_sleep_clamped(self) -> None:
        """Below 5h is 0, above 9h is 100."""
        assert sleep_score(4.0) == 0.0
        assert sleep_score(10.0) == 100.0

    def test_mood_scale(self) -> None:
        """Mood 1..4 maps onto 0..100."""
        assert mood_score(1) == 0.0
        assert mood_score(4) == 100.0
        assert mood_score(2) == pytest.approx(33.333, abs=1e-3)

    def test_stress_default_is_neutral(self) -> None:
        """No indicators captured → 50."""
        assert stress_score(None) == 50.0

    def test_stress_inverts_count(self) -> None:
        """Two of five active indicators → 60."""
        indicators = StressIndicators(muscle_tension=True, racing_thoughts=True)
        assert stress_score(indicators) == pytest.approx(60.0)

    def test_stress_none_active(self) -> None:
        """Captured but empty indicators → 100."""
        assert stress_score(StressIndicators()) == 100.0


class TestConfidence:
    """Test completeness-based confidence buckets."""

    def test_complete_inputs_high(self) -> None:
        assert confidence_from_completeness(True, 50, 7) is Confidence.HIGH

    def test_missing_check_in_medium(self) -> None:
        assert confidence_from_completeness(False, 50, 7) is Confidence.MEDIUM

    def test_missing_check_in_and_bad_sleep_low(self) -> None:
        assert confidence_from_completeness(False, 50, 0) is Confidence.LOW

    def test_implausible_values_penalised(self) -> None:
        """Out-of-range recovery and sleep each subtract 0.25."""
        assert confidence_from_completeness(True, 150, 20) is Confidence.MEDIUM

    def test_nan_sleep_penalised(self) -> None:
        assert confidence_from_completeness(False, 50, math.nan) is Confidence.LOW


class TestComputeScore:
    """Test the composite index."""

    def test_wearable_only_example(self) -> None:
        """Recovery 62, 7.4h sleep, strain 11.2, no check-in → 55 medium."""
        result = compute_score(recovery=62, sleep_hours=7.4, strain=11.2)

        assert result.lbi == 55
        assert result.confidence is Confidence.MEDIUM
        assert result.classification is Classification.BALANCED
        assert result.reason == REASONS["no_check_in"]

    def test_subscores_reported(self) -> None:
        result = compute_score(recovery=62, sleep_hours=7.4)
        assert result.subscores.as_dict() == {
            "recovery": 62,
            "sleep": 60,
            "mood": 33,
            "stress": 50,
        }

    def test_full_inputs(self) -> None:
        """Great mood and no stress lift the subjective layer."""
        check_in = CheckIn(mood=4, stress_indicators=StressIndicators())
        result = compute_score(recovery=80, sleep_hours=8, check_in=check_in)

        assert result.lbi == 84
        assert result.confidence is Confidence.HIGH
        assert result.classification is Classification.BALANCED
        assert result.reason == REASONS[Classification.BALANCED]

    def test_mismatch_penalty(self) -> None:
        """High strain on a low-recovery day costs 6 points."""
        without = compute_score(recovery=35, sleep_hours=7)
        with_strain = compute_score(recovery=35, sleep_hours=7, strain=16)

        assert without.lbi == 42
        assert with_strain.lbi == 36

    def test_no_penalty_when_recovery_ok(self) -> None:
        a = compute_score(recovery=60, sleep_hours=7)
        b = compute_score(recovery=60, sleep_hours=7, strain=20)
        assert a.lbi == b.lbi

    def test_under_recovered_by_recovery(self) -> None:
        result = compute_score(recovery=35, sleep_hours=8)
        assert result.classification is Classification.UNDER_RECOVERED

    def test_under_recovered_by_sleep(self) -> None:
        """6h sleep scores 25, below the 35 threshold."""
        result = compute_score(recovery=70, sleep_hours=6.0)
        assert result.classification is Classification.UNDER_RECOVERED

    def test_overloaded_by_stress(self) -> None:
        check_in = CheckIn(
            mood=3,
            stress_indicators=StressIndicators(
                muscle_tension=True, racing_thoughts=True, irritability=True
            ),
        )
        result = compute_score(recovery=70, sleep_hours=8, check_in=check_in)

        assert result.classification is Classification.OVERLOADED
        assert result.reason == REASONS[Classification.OVERLOADED]

    def test_overloaded_by_low_mood(self) -> None:
        result = compute_score(recovery=70, sleep_hours=8, check_in=CheckIn(mood=2))
        assert result.classification is Classification.OVERLOADED

    def test_recovery_outranks_mental_load(self) -> None:
        """Under-recovered wins over overloaded."""
        result = compute_score(recovery=30, sleep_hours=8, check_in=CheckIn(mood=1))
        assert result.classification is Classification.UNDER_RECOVERED

    def test_out_of_range_inputs_clamped(self) -> None:
        """Recovery 150 is clamped for scoring but lowers confidence."""
        result = compute_score(recovery=150, sleep_hours=7)

        assert 0 <= result.lbi <= 100
        assert result.subscores.recovery == 100
        assert result.confidence is Confidence.LOW

    def test_nan_inputs_never_raise(self) -> None:
        result = compute_score(recovery=60, sleep_hours=math.nan)

        assert result.subscores.sleep == 0
        assert result.confidence is Confidence.LOW

    def test_to_dict(self) -> None:
        data = compute_score(recovery=62, sleep_hours=7.4).to_dict()
        assert data["lbi"] == 55
        assert data["classification"] == "balanced"
        assert data["confidence"] == "medium"
        assert set(data["subscores"]) == {"recovery", "sleep", "mood", "stress"}
