"""Plan generator: deterministic rules → daily action plan.

Priority-ordered rules pick one of two categories, then a fixed, ordered
candidate list is truncated to the first two actions.

Category rules (first match wins):
    1. RECOVERY: classification is under-recovered
    2. RECOVERY: LBI ≤ 45
    3. RECOVERY: LBI − baseline ≤ −10 (baseline defined)
    4. NORMAL: no prior rule matched

Design Principles:
    - Deterministic: Explicit conditional logic, no ML
    - Order is a contract: candidates are authored in priority order and
      truncated without re-sorting
    - Bounded: at most 2 actions and 3 triggers
    - Explainable: every triggered rule contributes a reason clause
"""

import datetime as dt

from lifebalance.models import (
    CheckIn,
    Classification,
    Confidence,
    Plan,
    PlanCategory,
    WearableMetrics,
)

MAX_ACTIONS = 2
MAX_TRIGGERS = 3

FOCUS = {
    PlanCategory.RECOVERY: "Reduce load and prioritise recovery to stabilise energy and mood.",
    PlanCategory.NORMAL: "Maintain momentum with structured work blocks and movement.",
}

# Authoring order; conditional additions are appended after these
BASE_ACTIONS = {
    PlanCategory.RECOVERY: (
        "10–20 min easy walk (zone 1/2) + sunlight early",
        "Protein-forward meals + 2L water (aim steady, not perfect)",
        "One recovery block: stretch/foam roll 10 min OR hot shower wind-down",
        "Cap caffeine by 2pm; no late stimulants",
        "Early night: target +45–90 min vs usual bedtime",
    ),
    PlanCategory.NORMAL: (
        "Pick 1 priority task and complete a 45–60 min deep work block",
        "Movement snack: 2 x 8 min walk breaks or 20 min incline walk",
        "Keep meals consistent; avoid long gaps (stabilises energy)",
        "End-of-day reset: 10 min tidy + plan tomorrow’s top 1",
        "Optional: light social connection (message/call 1 person)",
    ),
}

ACTION_BREATHING = "Add a 5-min breathing reset between tasks (box breathing 4-4-4-4)"
ACTION_PUSH = "Add one extra hard thing: 20 min focused sprint or slightly harder training"

TRIGGERS = (
    "If you feel wired/anxious → 90 seconds slow exhale breathing",
    "If you procrastinate 10+ mins → start with a 5-min timer",
    "If afternoon crash hits → water + 10-min walk before caffeine",
)
LOW_CONFIDENCE_TRIGGER = "Low confidence today: complete check-in to improve accuracy"

FALLBACK_EXPLANATION = (
    "Plan logic: your signals are stable enough to maintain a normal day structure."
)
LOW_CONFIDENCE_CAVEAT = " Confidence is low due to missing signals."

NARRATION_PROMPTS = {
    PlanCategory.RECOVERY: (
        "Write 2 short sentences explaining why a low-demand day is recommended, "
        "based on recovery/sleep and check-in signals. Keep it supportive and practical."
    ),
    PlanCategory.NORMAL: (
        "Write 2 short sentences reinforcing a normal training day and one priority "
        "task, based on steady balance signals."
    ),
}


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def is_balance_drop(lbi: int, baseline: int | None) -> bool:
    """True when today's index is more than 15% below the baseline."""
    if baseline is None:
        return False
    return lbi < baseline * 0.85


class PlanGenerator:
    """Rule engine producing the daily plan.

    Thresholds:
        - Low LBI: ≤ 45
        - Baseline delta: ≤ −10 (recovery) / ≥ +10 (push bonus)
        - Low sleep: < 6.5h
        - Low recovery: < 45
        - High strain: ≥ 15
        - High stress: ≥ 3 active indicators
    """

    LOW_LBI = 45
    BELOW_BASELINE_DELTA = -10
    ABOVE_BASELINE_DELTA = 10
    LOW_SLEEP_HOURS = 6.5
    LOW_RECOVERY = 45
    HIGH_STRAIN = 15
    HIGH_STRESS_COUNT = 3

    def categorize(
        self,
        lbi: int,
        baseline: int | None,
        classification: Classification,
    ) -> PlanCategory:
        """Pick the plan category using the priority-ordered rules."""
        if classification is Classification.UNDER_RECOVERED:
            return PlanCategory.RECOVERY
        if lbi <= self.LOW_LBI:
            return PlanCategory.RECOVERY
        if baseline is not None and lbi - baseline <= self.BELOW_BASELINE_DELTA:
            return PlanCategory.RECOVERY
        return PlanCategory.NORMAL

    def generate(
        self,
        date: dt.date,
        lbi: int,
        baseline: int | None,
        classification: Classification,
        confidence: Confidence,
        wearable: WearableMetrics | None = None,
        check_in: CheckIn | None = None,
    ) -> Plan:
        """Generate the plan for one day.

        Args:
            date: Day the plan is for
            lbi: Today's index
            baseline: Plan baseline, or None while calibrating
            classification: Scoring classification
            confidence: Scoring confidence
            wearable: Today's wearable metrics, if any
            check_in: Today's check-in, if any

        Returns:
            Plan with ≤ 2 actions and ≤ 3 triggers
        """
        category = self.categorize(lbi, baseline, classification)

        stress_count = check_in.stress_count if check_in is not None else 0
        high_stress = stress_count >= self.HIGH_STRESS_COUNT
        low_sleep = wearable is not None and wearable.sleep_hours < self.LOW_SLEEP_HOURS
        low_recovery = wearable is not None and wearable.recovery < self.LOW_RECOVERY
        high_strain = (
            wearable is not None
            and wearable.strain is not None
            and wearable.strain >= self.HIGH_STRAIN
        )

        delta = None if baseline is None else lbi - baseline
        below_baseline = delta is not None and delta <= self.BELOW_BASELINE_DELTA
        above_baseline = delta is not None and delta >= self.ABOVE_BASELINE_DELTA

        candidates = list(BASE_ACTIONS[category])
        why: list[str] = []

        if category is PlanCategory.RECOVERY:
            # Recovery base actions already cover these signals
            if low_sleep:
                why.append("Sleep hours are low.")
            if low_recovery:
                why.append("Recovery is low.")
            if high_strain:
                why.append("Strain is high relative to recovery.")
            if high_stress:
                why.append("Multiple stress indicators were selected.")
            if below_baseline:
                why.append(f"LBI is below your baseline by {abs(delta)}.")
        else:
            if above_baseline:
                candidates.append(ACTION_PUSH)
                why.append(f"LBI is above your baseline by {delta}.")
            if high_stress:
                candidates.append(ACTION_BREATHING)
                why.append("Stress indicators suggest mental load is high.")

        candidates = _dedupe(candidates)

        triggers = list(TRIGGERS)
        if confidence is Confidence.LOW:
            triggers.insert(0, LOW_CONFIDENCE_TRIGGER)

        caveat = LOW_CONFIDENCE_CAVEAT if confidence is Confidence.LOW else ""
        if why:
            framing = ""
            if delta is not None:
                framing = f" (Δ vs baseline: {'+' if delta >= 0 else ''}{delta})"
            explanation = f"Plan logic: {' '.join(why)}{framing}{caveat}"
        else:
            explanation = f"{FALLBACK_EXPLANATION}{caveat}"

        return Plan(
            date=date,
            lbi=lbi,
            baseline=baseline,
            confidence=confidence,
            category=category,
            focus=FOCUS[category],
            actions=candidates[:MAX_ACTIONS],
            triggers=triggers[:MAX_TRIGGERS],
            explanation=explanation,
            candidate_actions=candidates,
        )


def generate_plan(
    date: dt.date,
    lbi: int,
    baseline: int | None,
    classification: Classification,
    confidence: Confidence,
    wearable: WearableMetrics | None = None,
    check_in: CheckIn | None = None,
) -> Plan:
    """Module-level shortcut for PlanGenerator().generate(...)."""
    return PlanGenerator().generate(
        date=date,
        lbi=lbi,
        baseline=baseline,
        classification=classification,
        confidence=confidence,
        wearable=wearable,
        check_in=check_in,
    )


def narration_prompt(plan: Plan) -> str:
    """Prompt handed to the narrator for this plan."""
    return NARRATION_PROMPTS[plan.category]


def narration_context(plan: Plan) -> str:
    """Plain-text plan context handed to the narrator alongside the prompt."""
    baseline = "calibrating" if plan.baseline is None else str(plan.baseline)
    lines = [
        f"Date: {plan.date.isoformat()}",
        f"LBI: {plan.lbi} (baseline: {baseline}, confidence: {plan.confidence.value})",
        f"Category: {plan.category.value}",
        f"Focus: {plan.focus}",
        f"Actions: {'; '.join(plan.actions)}",
        plan.explanation,
    ]
    return "\n".join(lines)
