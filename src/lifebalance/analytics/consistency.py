"""Consistency score: how stable and regular the recent history is.

Stability components map a sample standard deviation onto 0–100 against
fixed domain maxima (lower spread → higher score). Regularity components
are the share of days carrying each input family.

Weights:
    sleep 0.25 · recovery 0.25 · mood 0.20 · check-in 0.15 · wearable 0.15
"""

import datetime as dt
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from lifebalance.models import DailyRecord
from lifebalance.numeric import clamp, round_half_up

SLEEP_MAX_SD = 1.5
RECOVERY_MAX_SD = 20.0
MOOD_MAX_SD = 1.2

COMPONENT_WEIGHTS = {
    "sleep_consistency": 0.25,
    "recovery_consistency": 0.25,
    "mood_stability": 0.20,
    "check_in_regularity": 0.15,
    "wearable_regularity": 0.15,
}

MIN_MEANINGFUL_DAYS = 7
MIN_REGULARITY = 60


def sample_sd(values: list[float]) -> float:
    """Sample standard deviation; 0 for fewer than 2 values."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values, ddof=1))


def stability_score(sd: float, max_sd: float) -> int:
    """Map a spread onto [0, 100]; 50 for a non-positive maximum."""
    if max_sd <= 0:
        return 50
    return round_half_up(100 * (1 - clamp(sd / max_sd, 0.0, 1.0)))


@dataclass
class ConsistencyComponents:
    sleep_consistency: int
    recovery_consistency: int
    mood_stability: int
    check_in_regularity: int
    wearable_regularity: int

    def as_dict(self) -> dict[str, int]:
        return {
            "sleep_consistency": self.sleep_consistency,
            "recovery_consistency": self.recovery_consistency,
            "mood_stability": self.mood_stability,
            "check_in_regularity": self.check_in_regularity,
            "wearable_regularity": self.wearable_regularity,
        }


@dataclass
class ConsistencyResult:
    """Consistency score with its components and advisory notes."""

    score: int
    components: ConsistencyComponents
    days: int
    notes: list[str] = field(default_factory=list)

    def format(self) -> str:
        lines = [f"Consistency: {self.score}/100 over {self.days} days"]
        for name, value in self.components.as_dict().items():
            lines.append(f"  {name.replace('_', ' ')}: {value}")
        lines.extend(f"Note: {note}" for note in self.notes)
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "components": self.components.as_dict(),
            "days": self.days,
            "notes": list(self.notes),
        }


def slice_up_to(
    records: Iterable[DailyRecord],
    end_date: dt.date,
    days: int = 14,
) -> list[DailyRecord]:
    """Last `days` records dated on or before `end_date`, ascending.

    The window counts records, not calendar days, so gaps in the history
    reach further back. `days` ≤ 0 returns every record up to `end_date`.
    """
    eligible = sorted((r for r in records if r.date <= end_date), key=lambda r: r.date)
    if days <= 0:
        return eligible
    return eligible[-days:]


def compute_consistency(records: Iterable[DailyRecord]) -> ConsistencyResult:
    """Compute the consistency score over an already-windowed record list.

    Args:
        records: Window of daily records (see slice_up_to)

    Returns:
        ConsistencyResult with a score in [0, 100]
    """
    window = sorted(records, key=lambda r: r.date)
    n = len(window)

    sleep = [r.sleep_hours for r in window if r.sleep_hours is not None]
    recovery = [r.recovery for r in window if r.recovery is not None]
    mood = [float(r.mood) for r in window if r.mood is not None]

    check_ins = sum(1 for r in window if r.has_check_in)
    wearables = sum(1 for r in window if r.has_wearable)

    components = ConsistencyComponents(
        sleep_consistency=stability_score(sample_sd(sleep), SLEEP_MAX_SD),
        recovery_consistency=stability_score(sample_sd(recovery), RECOVERY_MAX_SD),
        mood_stability=stability_score(sample_sd(mood), MOOD_MAX_SD),
        check_in_regularity=round_half_up(check_ins / n * 100) if n else 0,
        wearable_regularity=round_half_up(wearables / n * 100) if n else 0,
    )

    values = components.as_dict()
    raw = sum(COMPONENT_WEIGHTS[name] * values[name] for name in COMPONENT_WEIGHTS)
    score = int(clamp(round_half_up(raw), 0, 100))

    notes = []
    if n < MIN_MEANINGFUL_DAYS:
        notes.append("Consistency is most meaningful with at least 7 days of data.")
    if components.check_in_regularity < MIN_REGULARITY:
        notes.append("Check-ins are missing often; stability estimates are less reliable.")
    if components.wearable_regularity < MIN_REGULARITY:
        notes.append("Wearable days are missing often; sleep/recovery consistency may be biased.")

    return ConsistencyResult(score=score, components=components, days=n, notes=notes)
