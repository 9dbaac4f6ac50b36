"""Scoring system: wearable + check-in signals → Life Balance Index.

Implements the daily composite index:
- Objective spine (70%): recovery and sleep
- Subjective layer (30%): mood and stress indicators
- Mismatch penalty when strain is high on a low-recovery day
- Classification: under-recovered / overloaded / balanced
- Confidence bucket from input completeness

The scorer is a pure function. It never raises: out-of-range or missing
inputs lower the confidence and fall back to neutral defaults instead.
"""

import math
from dataclasses import dataclass

from lifebalance.models import CheckIn, Classification, Confidence, StressIndicators
from lifebalance.numeric import clamp, round_half_up

# Objective/subjective split and the within-layer weights
OBJECTIVE_WEIGHT = 0.7
SUBJECTIVE_WEIGHT = 0.3

# Sleep hours mapped linearly onto [0, 100] between these bounds
SLEEP_FLOOR_HOURS = 5.0
SLEEP_CEILING_HOURS = 9.0

DEFAULT_MOOD = 2
DEFAULT_STRESS_SCORE = 50.0

MISMATCH_STRAIN = 15.0
MISMATCH_RECOVERY = 40.0
MISMATCH_PENALTY = 6.0

UNDER_RECOVERED_RECOVERY = 40.0
UNDER_RECOVERED_SLEEP_SCORE = 35.0
OVERLOADED_STRESS_COUNT = 3
OVERLOADED_MOOD = 2

REASONS = {
    "no_check_in": "Complete a check-in to improve accuracy.",
    Classification.UNDER_RECOVERED: "Low recovery and/or sleep are pulling your balance down.",
    Classification.OVERLOADED: "Stress indicators and/or mood suggest mental overload.",
    Classification.BALANCED: "Your balance looks steady today.",
}


@dataclass(frozen=True)
class Subscores:
    """Per-signal scores in [0, 100], rounded to integers."""

    recovery: int
    sleep: int
    mood: int
    stress: int

    def as_dict(self) -> dict[str, int]:
        return {
            "recovery": self.recovery,
            "sleep": self.sleep,
            "mood": self.mood,
            "stress": self.stress,
        }


@dataclass(frozen=True)
class ScoreResult:
    """Result of scoring a single day.

    Attributes:
        lbi: Life Balance Index, integer in [0, 100]
        classification: balanced / overloaded / under-recovered
        confidence: high / medium / low
        reason: One-sentence natural-language reason
        subscores: Recovery, sleep, mood and stress subscores
    """

    lbi: int
    classification: Classification
    confidence: Confidence
    reason: str
    subscores: Subscores

    def to_dict(self) -> dict:
        return {
            "lbi": self.lbi,
            "classification": self.classification.value,
            "confidence": self.confidence.value,
            "reason": self.reason,
            "subscores": self.subscores.as_dict(),
        }


def sleep_score(hours: float) -> float:
    """Map sleep hours onto [0, 100]: 5h → 0, 9h → 100, clamped outside.

    Example:
        >>> sleep_score(7.4)
        60.0
    """
    h = clamp(hours, SLEEP_FLOOR_HOURS, SLEEP_CEILING_HOURS)
    return (h - SLEEP_FLOOR_HOURS) / (SLEEP_CEILING_HOURS - SLEEP_FLOOR_HOURS) * 100.0


def mood_score(mood: int) -> float:
    """Map mood 1..4 onto [0, 100]."""
    return (clamp(mood, 1, 4) - 1) / 3 * 100.0


def stress_score(indicators: StressIndicators | None) -> float:
    """Invert the stress indicator count into a [0, 100] "goodness" score.

    Returns the neutral default of 50 when no indicators were captured.
    """
    if indicators is None:
        return DEFAULT_STRESS_SCORE
    return 100.0 - indicators.count / 5 * 100.0


def confidence_from_completeness(
    has_check_in: bool,
    recovery: float,
    sleep_hours: float,
) -> Confidence:
    """Bucket input completeness into a confidence level.

    Starts at 1.0 and subtracts 0.35 without a check-in, 0.25 for
    implausible sleep (≤ 0 or > 14h) and 0.25 for recovery outside [0, 100].
    """
    c = 1.0
    if not has_check_in:
        c -= 0.35
    if not math.isfinite(sleep_hours) or sleep_hours <= 0 or sleep_hours > 14:
        c -= 0.25
    if not math.isfinite(recovery) or recovery < 0 or recovery > 100:
        c -= 0.25

    if c >= 0.75:
        return Confidence.HIGH
    if c >= 0.45:
        return Confidence.MEDIUM
    return Confidence.LOW


def _finite_or_zero(value: float | None) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    return float(value)


def compute_score(
    recovery: float,
    sleep_hours: float,
    strain: float | None = None,
    check_in: CheckIn | None = None,
) -> ScoreResult:
    """Compute the Life Balance Index for one day.

    Formula:
        objective  = 0.5 × recovery + 0.5 × sleep_score
        subjective = 0.5 × mood_score + 0.5 × stress_score
        raw        = 0.7 × objective + 0.3 × subjective  (− 6 on mismatch)

    Args:
        recovery: Wearable recovery, nominally 0–100
        sleep_hours: Hours slept
        strain: Optional day strain, nominally 0–21
        check_in: Optional self-report; mood defaults to 2 without one

    Returns:
        ScoreResult with an integer index in [0, 100]

    Example:
        >>> compute_score(recovery=62, sleep_hours=7.4, strain=11.2).lbi
        55
    """
    recovery_raw = recovery if recovery is not None else math.nan
    sleep_raw = sleep_hours if sleep_hours is not None else math.nan

    rec = clamp(_finite_or_zero(recovery_raw), 0.0, 100.0)
    sleep = sleep_score(_finite_or_zero(sleep_raw))

    has_check_in = check_in is not None
    mood = check_in.mood if check_in is not None else DEFAULT_MOOD
    mood_s = mood_score(mood)
    stress_s = stress_score(check_in.stress_indicators if check_in is not None else None)

    objective = 0.5 * rec + 0.5 * sleep
    subjective = 0.5 * mood_s + 0.5 * stress_s
    score = OBJECTIVE_WEIGHT * objective + SUBJECTIVE_WEIGHT * subjective

    if strain is not None and math.isfinite(strain):
        if clamp(strain, 0.0, 21.0) >= MISMATCH_STRAIN and rec <= MISMATCH_RECOVERY:
            score -= MISMATCH_PENALTY

    lbi = int(round_half_up(clamp(score, 0.0, 100.0)))
    confidence = confidence_from_completeness(
        has_check_in,
        float(recovery_raw),
        float(sleep_raw),
    )

    # Priority-ordered: recovery signals outrank mental load
    if rec <= UNDER_RECOVERED_RECOVERY or sleep <= UNDER_RECOVERED_SLEEP_SCORE:
        classification = Classification.UNDER_RECOVERED
    elif has_check_in and (
        check_in.stress_count >= OVERLOADED_STRESS_COUNT or mood <= OVERLOADED_MOOD
    ):
        classification = Classification.OVERLOADED
    else:
        classification = Classification.BALANCED

    reason = REASONS["no_check_in"] if not has_check_in else REASONS[classification]

    return ScoreResult(
        lbi=lbi,
        classification=classification,
        confidence=confidence,
        reason=reason,
        subscores=Subscores(
            recovery=round_half_up(rec),
            sleep=round_half_up(sleep),
            mood=round_half_up(mood_s),
            stress=round_half_up(stress_s),
        ),
    )
