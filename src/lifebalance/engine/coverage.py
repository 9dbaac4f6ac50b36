"""Signal coverage: which inputs informed a day and how they split.

Weights describe how much each signal family matters when interpreting a
day. They are presentation weights for coverage, not the scoring weights.
"""

from dataclasses import dataclass, field
from typing import Literal

from lifebalance.models import CheckIn, Confidence, WearableMetrics
from lifebalance.numeric import round_half_up

Source = Literal["wearable", "check-in"]

SIGNAL_WEIGHTS = {
    "wearable_recovery": 0.40,
    "wearable_sleep": 0.25,
    "wearable_strain": 0.10,
    "checkin_mood": 0.15,
    "checkin_stress": 0.10,
}

SIGNAL_LABELS: dict[str, tuple[str, Source]] = {
    "wearable_recovery": ("Recovery", "wearable"),
    "wearable_sleep": ("Sleep", "wearable"),
    "wearable_strain": ("Strain / activity", "wearable"),
    "checkin_mood": ("Mood", "check-in"),
    "checkin_stress": ("Stress indicators", "check-in"),
}

PHYSIOLOGICAL_SIGNALS = ("wearable_recovery", "wearable_sleep", "wearable_strain")
MENTAL_SIGNALS = ("checkin_mood", "checkin_stress")


@dataclass
class SignalUsage:
    key: str
    label: str
    source: Source
    weight_pct: int | None = None

    def to_dict(self) -> dict:
        data = {"key": self.key, "label": self.label, "source": self.source}
        if self.weight_pct is not None:
            data["weight_pct"] = self.weight_pct
        return data


@dataclass
class CoverageSummary:
    """Used/missing signals and the physiological vs mental split.

    Attributes:
        used_signals: Present signals with their weight in percent
        missing_signals: Absent signals
        coverage_pct: Share of total weight that was present
        physiological_pct: Wearable share of the present weight
        mental_pct: Check-in share of the present weight
        notes: Missing-input and low-confidence notes
    """

    used_signals: list[SignalUsage]
    missing_signals: list[SignalUsage]
    coverage_pct: int
    physiological_pct: int
    mental_pct: int
    notes: list[str] = field(default_factory=list)

    def format(self) -> str:
        lines = [
            f"Coverage: {self.coverage_pct}% "
            f"(physiological {self.physiological_pct}% / mental {self.mental_pct}%)"
        ]
        if self.used_signals:
            used = ", ".join(f"{s.label} {s.weight_pct}%" for s in self.used_signals)
            lines.append(f"Used: {used}")
        if self.missing_signals:
            lines.append(f"Missing: {', '.join(s.label for s in self.missing_signals)}")
        lines.extend(f"Note: {note}" for note in self.notes)
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "used_signals": [s.to_dict() for s in self.used_signals],
            "missing_signals": [s.to_dict() for s in self.missing_signals],
            "coverage_pct": self.coverage_pct,
            "physiological_pct": self.physiological_pct,
            "mental_pct": self.mental_pct,
            "notes": list(self.notes),
        }


def compute_coverage(
    wearable: WearableMetrics | None,
    check_in: CheckIn | None,
    confidence: Confidence | None = None,
) -> CoverageSummary:
    """Summarise which signals were available for a day.

    Args:
        wearable: Day's wearable metrics, if any
        check_in: Day's check-in, if any
        confidence: Scoring confidence, when the day was scored

    Returns:
        CoverageSummary; the physiological/mental split only counts
        present signals (both 0 when nothing is present)
    """
    present = {
        "wearable_recovery": wearable is not None,
        "wearable_sleep": wearable is not None,
        "wearable_strain": wearable is not None and wearable.strain is not None,
        "checkin_mood": check_in is not None,
        "checkin_stress": check_in is not None and check_in.stress_indicators is not None,
    }

    used, missing = [], []
    for key, is_present in present.items():
        label, source = SIGNAL_LABELS[key]
        if is_present:
            used.append(
                SignalUsage(key, label, source, round_half_up(SIGNAL_WEIGHTS[key] * 100))
            )
        else:
            missing.append(SignalUsage(key, label, source))

    total_weight = sum(SIGNAL_WEIGHTS.values())
    used_weight = sum(SIGNAL_WEIGHTS[s.key] for s in used)

    physiological = sum(SIGNAL_WEIGHTS[k] for k in PHYSIOLOGICAL_SIGNALS if present[k])
    mental = sum(SIGNAL_WEIGHTS[k] for k in MENTAL_SIGNALS if present[k])
    denom = (physiological + mental) or 1.0

    notes = []
    if wearable is None:
        notes.append("No wearable data detected for this day.")
    if check_in is None:
        notes.append("No check-in detected for this day.")
    if confidence is Confidence.LOW:
        notes.append("Low confidence: missing signals reduce interpretation strength.")

    return CoverageSummary(
        used_signals=used,
        missing_signals=missing,
        coverage_pct=round_half_up(used_weight / total_weight * 100),
        physiological_pct=round_half_up(physiological / denom * 100),
        mental_pct=round_half_up(mental / denom * 100),
        notes=notes,
    )
