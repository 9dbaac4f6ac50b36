"""Tests for PlanGenerator: deterministic rules → daily plan."""

from datetime import date

import pytest

from lifebalance.engine.plan import (
    ACTION_BREATHING,
    ACTION_PUSH,
    BASE_ACTIONS,
    FALLBACK_EXPLANATION,
    FOCUS,
    LOW_CONFIDENCE_CAVEAT,
    LOW_CONFIDENCE_TRIGGER,
    TRIGGERS,
    PlanGenerator,
    generate_plan,
    is_balance_drop,
    narration_context,
    narration_prompt,
)
from lifebalance.models import (
    CheckIn,
    Classification,
    Confidence,
    PlanCategory,
    StressIndicators,
    WearableMetrics,
)

DAY = date(2026, 1, 5)

HIGH_STRESS = StressIndicators(muscle_tension=True, racing_thoughts=True, avoidance=True)


@pytest.fixture
def generator() -> PlanGenerator:
    return PlanGenerator()


class TestCategorize:
    """Test priority-ordered category rules."""

    def test_under_recovered_is_recovery(self, generator) -> None:
        assert generator.categorize(80, None, Classification.UNDER_RECOVERED) is PlanCategory.RECOVERY

    def test_low_lbi_is_recovery(self, generator) -> None:
        assert generator.categorize(45, None, Classification.BALANCED) is PlanCategory.RECOVERY

    def test_just_above_low_is_normal(self, generator) -> None:
        assert generator.categorize(46, None, Classification.BALANCED) is PlanCategory.NORMAL

    def test_below_baseline_is_recovery(self, generator) -> None:
        """Δ = −10 triggers recovery."""
        assert generator.categorize(60, 70, Classification.BALANCED) is PlanCategory.RECOVERY

    def test_slightly_below_baseline_is_normal(self, generator) -> None:
        assert generator.categorize(61, 70, Classification.BALANCED) is PlanCategory.NORMAL

    def test_overloaded_alone_is_normal(self, generator) -> None:
        assert generator.categorize(70, 68, Classification.OVERLOADED) is PlanCategory.NORMAL


class TestRecoveryPlans:
    """Test recovery plan content."""

    def test_low_lbi_without_baseline(self, generator) -> None:
        """LBI 40, no baseline → RECOVERY with the first two base actions."""
        plan = generator.generate(DAY, 40, None, Classification.BALANCED, Confidence.MEDIUM)

        assert plan.category is PlanCategory.RECOVERY
        assert plan.focus == FOCUS[PlanCategory.RECOVERY]
        assert plan.actions == list(BASE_ACTIONS[PlanCategory.RECOVERY][:2])
        assert plan.explanation == FALLBACK_EXPLANATION

    def test_low_signals_keep_base_actions_first(self, generator) -> None:
        """Low sleep and recovery add reasons but never displace base actions."""
        wearable = WearableMetrics(recovery=40, sleep_hours=6.0)
        plan = generator.generate(
            DAY, 38, None, Classification.UNDER_RECOVERED, Confidence.MEDIUM, wearable=wearable
        )

        assert plan.actions == [
            "10–20 min easy walk (zone 1/2) + sunlight early",
            "Protein-forward meals + 2L water (aim steady, not perfect)",
        ]
        assert plan.explanation == "Plan logic: Sleep hours are low. Recovery is low."

    def test_candidates_are_base_actions(self, generator) -> None:
        wearable = WearableMetrics(recovery=40, sleep_hours=6.0, strain=16)
        check_in = CheckIn(mood=2, stress_indicators=HIGH_STRESS)
        plan = generator.generate(
            DAY, 38, None, Classification.UNDER_RECOVERED, Confidence.MEDIUM,
            wearable=wearable, check_in=check_in,
        )

        assert plan.candidate_actions == list(BASE_ACTIONS[PlanCategory.RECOVERY])
        assert ACTION_BREATHING not in plan.candidate_actions

    def test_high_strain_and_stress(self, generator) -> None:
        wearable = WearableMetrics(recovery=60, sleep_hours=7.5, strain=16)
        check_in = CheckIn(mood=2, stress_indicators=HIGH_STRESS)
        plan = generator.generate(
            DAY, 42, None, Classification.OVERLOADED, Confidence.HIGH,
            wearable=wearable, check_in=check_in,
        )

        assert plan.actions == list(BASE_ACTIONS[PlanCategory.RECOVERY][:2])
        assert plan.explanation == (
            "Plan logic: Strain is high relative to recovery. "
            "Multiple stress indicators were selected."
        )

    def test_below_baseline_explanation(self, generator) -> None:
        plan = generator.generate(DAY, 55, 70, Classification.BALANCED, Confidence.HIGH)

        assert plan.category is PlanCategory.RECOVERY
        assert plan.explanation == (
            "Plan logic: LBI is below your baseline by 15. (Δ vs baseline: -15)"
        )


class TestNormalPlans:
    """Test normal plan content."""

    def test_above_baseline_push_appended(self, generator) -> None:
        """LBI 80 vs baseline 65 → push action appended after the base actions."""
        plan = generator.generate(DAY, 80, 65, Classification.BALANCED, Confidence.HIGH)

        assert plan.category is PlanCategory.NORMAL
        assert plan.actions == list(BASE_ACTIONS[PlanCategory.NORMAL][:2])
        assert plan.candidate_actions[-1] == ACTION_PUSH
        assert len(plan.candidate_actions) == 6
        assert plan.explanation == (
            "Plan logic: LBI is above your baseline by 15. (Δ vs baseline: +15)"
        )

    def test_high_stress_breathing(self, generator) -> None:
        check_in = CheckIn(mood=3, stress_indicators=HIGH_STRESS)
        plan = generator.generate(
            DAY, 70, 68, Classification.OVERLOADED, Confidence.HIGH, check_in=check_in
        )

        assert plan.actions == list(BASE_ACTIONS[PlanCategory.NORMAL][:2])
        assert plan.candidate_actions[5:] == [ACTION_BREATHING]
        assert "Stress indicators suggest mental load is high." in plan.explanation

    def test_push_before_breathing(self, generator) -> None:
        check_in = CheckIn(mood=3, stress_indicators=HIGH_STRESS)
        plan = generator.generate(
            DAY, 80, 65, Classification.OVERLOADED, Confidence.HIGH, check_in=check_in
        )
        assert plan.candidate_actions[5:] == [ACTION_PUSH, ACTION_BREATHING]

    def test_fallback_explanation(self, generator) -> None:
        plan = generator.generate(DAY, 60, None, Classification.BALANCED, Confidence.MEDIUM)
        assert plan.explanation == FALLBACK_EXPLANATION


class TestTriggersAndConfidence:
    """Test triggers and low-confidence handling."""

    def test_default_triggers(self, generator) -> None:
        plan = generator.generate(DAY, 60, None, Classification.BALANCED, Confidence.HIGH)
        assert plan.triggers == list(TRIGGERS)

    def test_low_confidence_trigger_first(self, generator) -> None:
        plan = generator.generate(DAY, 60, None, Classification.BALANCED, Confidence.LOW)

        assert plan.triggers[0] == LOW_CONFIDENCE_TRIGGER
        assert len(plan.triggers) == 3
        assert plan.explanation.endswith(LOW_CONFIDENCE_CAVEAT)

    def test_bounds(self, generator) -> None:
        plan = generator.generate(DAY, 30, 70, Classification.UNDER_RECOVERED, Confidence.LOW)
        assert len(plan.actions) <= 2
        assert len(plan.triggers) <= 3


class TestHelpers:
    """Test module-level helpers."""

    def test_generate_plan_shortcut(self) -> None:
        plan = generate_plan(DAY, 80, 65, Classification.BALANCED, Confidence.HIGH)
        assert plan.candidate_actions[-1] == ACTION_PUSH

    def test_balance_drop(self) -> None:
        """More than 15% below baseline."""
        assert is_balance_drop(59, 70) is True
        assert is_balance_drop(60, 70) is False
        assert is_balance_drop(10, None) is False

    def test_narration_prompt_by_category(self) -> None:
        plan = generate_plan(DAY, 40, None, Classification.BALANCED, Confidence.MEDIUM)
        assert "low-demand day" in narration_prompt(plan)

    def test_narration_context(self) -> None:
        plan = generate_plan(DAY, 40, None, Classification.BALANCED, Confidence.MEDIUM)
        context = narration_context(plan)

        assert "Date: 2026-01-05" in context
        assert "baseline: calibrating" in context
        assert "Category: RECOVERY" in context
