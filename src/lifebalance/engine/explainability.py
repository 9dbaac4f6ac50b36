"""Explainability for a single day.

Produces human-readable output explaining:
1. The strongest subscore drivers behind the index
2. How the day compares with the personal baseline
3. Which inputs were available (accuracy reasons)
4. What-if counterfactuals for small, realistic changes

Design Principles:
    - Transparency: drivers mirror the scoring subscores exactly
    - No silent failures: missing data produces an explicit placeholder driver
    - Human-readable: output is written for the person whose day it is
    - Bounded: at most 3 drivers and 3 counterfactuals
"""

import datetime as dt
import math
from dataclasses import dataclass, field
from typing import Literal

from lifebalance.engine.scoring import compute_score
from lifebalance.models import MOOD_EMOJI, CheckIn, DailyRecord, WearableMetrics
from lifebalance.numeric import clamp, round_half_up

Direction = Literal["up", "down"]
Strength = Literal["mild", "moderate", "strong"]

# Subscores are compared against a neutral reference
DRIVER_REFERENCE = 60
MAX_DRIVERS = 3
MAX_COUNTERFACTUALS = 3

# Stand-ins used by counterfactuals when no wearable data exists
NEUTRAL_RECOVERY = 50.0
NEUTRAL_SLEEP_HOURS = 7.0
EXTRA_SLEEP_HOURS = 0.75

DRIVER_LABELS = {
    "recovery": "Recovery",
    "sleep": "Sleep",
    "mood": "Mood",
    "stress": "Stress",
}


def strength_from_delta(delta: float) -> Strength:
    """Bucket |delta|: ≥ 25 strong, ≥ 12 moderate, else mild."""
    d = abs(delta)
    if d >= 25:
        return "strong"
    if d >= 12:
        return "moderate"
    return "mild"


def format_hours(hours: float) -> str:
    """Format fractional hours as "7h 30m" (or "7h" on the hour)."""
    whole = math.floor(hours)
    minutes = round_half_up((hours - whole) * 60)
    if minutes == 60:
        whole, minutes = whole + 1, 0
    return f"{whole}h" if minutes == 0 else f"{whole}h {minutes}m"


def _signed(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)


@dataclass
class Driver:
    """One signal pushing the index up or down."""

    label: str
    direction: Direction
    strength: Strength
    detail: str | None = None

    def __str__(self) -> str:
        arrow = "↑" if self.direction == "up" else "↓"
        text = f"{arrow} {self.label} ({self.strength})"
        return f"{text}: {self.detail}" if self.detail else text

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "direction": self.direction,
            "strength": self.strength,
            "detail": self.detail,
        }


@dataclass
class AccuracyReason:
    """Whether one input family was available for the day."""

    ok: bool
    label: str
    detail: str

    def __str__(self) -> str:
        return f"[{'x' if self.ok else ' '}] {self.label}: {self.detail}"

    def to_dict(self) -> dict:
        return {"ok": self.ok, "label": self.label, "detail": self.detail}


@dataclass
class Counterfactual:
    """Approximate index change under a single hypothetical change."""

    label: str
    delta: int
    detail: str

    def __str__(self) -> str:
        return f"{self.label}: {_signed(self.delta)} ({self.detail})"

    def to_dict(self) -> dict:
        return {"label": self.label, "delta": self.delta, "detail": self.detail}


@dataclass
class DayExplanation:
    """Complete explanation for a single day.

    Attributes:
        date: Day being explained
        lbi: Index, clamped to [0, 100]
        baseline: Baseline the day is framed against (None while calibrating)
        delta: Rounded lbi − baseline, or None without a baseline
        drivers: Up to 3 subscore drivers, strongest first
        baseline_driver: Above/below baseline framing (None when delta is 0 or undefined)
        accuracy_reasons: Wearable / check-in / baseline availability
        context_tags: Context tags from the day's check-in
    """

    date: dt.date
    lbi: int
    baseline: int | None
    delta: int | None
    drivers: list[Driver]
    baseline_driver: Driver | None
    accuracy_reasons: list[AccuracyReason]
    context_tags: list[str] = field(default_factory=list)

    def format_header(self) -> str:
        """Format the index line.

        Example:
            LBI 62 (baseline 68, Δ -6)
        """
        if self.baseline is None:
            return f"LBI {self.lbi} (baseline: calibrating)"
        return f"LBI {self.lbi} (baseline {self.baseline}, Δ {_signed(self.delta)})"

    def format_drivers(self) -> str:
        lines = ["Drivers:"]
        lines.extend(f"  {d}" for d in self.drivers)
        if self.baseline_driver is not None:
            lines.append(f"  {self.baseline_driver}")
        return "\n".join(lines)

    def format_accuracy(self) -> str:
        lines = ["Accuracy:"]
        lines.extend(f"  {r}" for r in self.accuracy_reasons)
        return "\n".join(lines)

    def format_full(self) -> str:
        """Format the complete explanation.

        Example:
            === LifeBalance: 2026-01-05 ===

            LBI 62 (baseline 68, Δ -6)

            Drivers:
              ↓ Sleep (strong): Sleep: 5h 45m.
              ...
        """
        lines = [f"=== LifeBalance: {self.date.isoformat()} ===", ""]
        lines.append(self.format_header())
        lines.append("")
        lines.append(self.format_drivers())
        lines.append("")
        lines.append(self.format_accuracy())
        if self.context_tags:
            lines.append("")
            lines.append(f"Context: {', '.join(self.context_tags)}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "lbi": self.lbi,
            "baseline": self.baseline,
            "delta": self.delta,
            "drivers": [d.to_dict() for d in self.drivers],
            "baseline_driver": (
                self.baseline_driver.to_dict() if self.baseline_driver else None
            ),
            "accuracy_reasons": [r.to_dict() for r in self.accuracy_reasons],
            "context_tags": list(self.context_tags),
        }


class Explainer:
    """Builds day explanations from a stored record.

    Subscores are recomputed with the scoring engine so drivers always agree
    with how the index was produced. Missing wearable values count as 0.
    """

    def explain_day(
        self,
        date: dt.date,
        lbi: int,
        baseline: int | None,
        record: DailyRecord | None,
    ) -> DayExplanation:
        """Explain one day.

        Args:
            date: Day being explained
            lbi: Index for the day
            baseline: Baseline to frame the day against, or None
            record: Stored record, or None when nothing was saved

        Returns:
            DayExplanation with drivers, baseline framing and accuracy reasons

        Example:
            >>> explanation = Explainer().explain_day(day, 62, 68, record)
            >>> print(explanation.format_full())
        """
        wearable = record.wearable if record is not None else None
        check_in = record.check_in if record is not None else None

        delta = None if baseline is None else round_half_up(lbi - baseline)

        if record is None:
            drivers = [
                Driver(
                    label="No data saved for this day",
                    detail="Add a check-in and/or import wearable data to generate an explanation.",
                    direction="down",
                    strength="strong",
                )
            ]
        elif wearable is None and check_in is None:
            drivers = [
                Driver(
                    label="Not enough inputs to compute drivers",
                    detail="Add at least a check-in or wearable data.",
                    direction="down",
                    strength="moderate",
                )
            ]
        else:
            drivers = self._subscore_drivers(wearable, check_in)

        baseline_driver = None
        if record is not None and delta is not None and delta != 0:
            baseline_driver = Driver(
                label="Above baseline" if delta > 0 else "Below baseline",
                detail=f"Change vs baseline: {_signed(delta)}.",
                direction="up" if delta > 0 else "down",
                strength=strength_from_delta(delta),
            )

        return DayExplanation(
            date=date,
            lbi=round_half_up(clamp(lbi, 0, 100)),
            baseline=baseline,
            delta=delta,
            drivers=drivers,
            baseline_driver=baseline_driver,
            accuracy_reasons=self.accuracy_reasons(wearable, check_in, baseline),
            context_tags=list(check_in.context_tags) if check_in else [],
        )

    def _subscore_drivers(
        self,
        wearable: WearableMetrics | None,
        check_in: CheckIn | None,
    ) -> list[Driver]:
        result = compute_score(
            recovery=wearable.recovery if wearable else 0.0,
            sleep_hours=wearable.sleep_hours if wearable else 0.0,
            strain=wearable.strain if wearable else None,
            check_in=check_in,
        )

        deltas = [
            (key, value - DRIVER_REFERENCE)
            for key, value in result.subscores.as_dict().items()
        ]
        deltas.sort(key=lambda item: abs(item[1]), reverse=True)

        drivers = []
        for key, delta in deltas[:MAX_DRIVERS]:
            drivers.append(
                Driver(
                    label=DRIVER_LABELS[key],
                    detail=self._detail(key, wearable, check_in),
                    direction="up" if delta >= 0 else "down",
                    strength=strength_from_delta(delta),
                )
            )
        return drivers

    @staticmethod
    def _detail(
        key: str,
        wearable: WearableMetrics | None,
        check_in: CheckIn | None,
    ) -> str | None:
        if key == "recovery" and wearable is not None:
            return f"Wearable recovery: {round_half_up(wearable.recovery)}/100."
        if key == "sleep" and wearable is not None:
            return f"Sleep: {format_hours(wearable.sleep_hours)}."
        if key == "mood" and check_in is not None:
            return f"Mood check-in: {MOOD_EMOJI[check_in.mood]} {check_in.mood}/4."
        if key == "stress" and check_in is not None:
            return f"Stress indicators selected: {check_in.stress_count}."
        return None

    @staticmethod
    def accuracy_reasons(
        wearable: WearableMetrics | None,
        check_in: CheckIn | None,
        baseline: int | None,
    ) -> list[AccuracyReason]:
        """Three fixed availability checks: wearable, check-in, baseline."""
        return [
            AccuracyReason(
                ok=wearable is not None,
                label="Wearable signals present",
                detail=(
                    "Recovery and sleep were available for this day."
                    if wearable is not None
                    else "Import wearables to improve accuracy (sleep/recovery/strain)."
                ),
            ),
            AccuracyReason(
                ok=check_in is not None,
                label="Daily check-in present",
                detail=(
                    "Mood and stress indicators were captured."
                    if check_in is not None
                    else "Add a quick check-in to improve emotional context."
                ),
            ),
            AccuracyReason(
                ok=baseline is not None,
                label="Baseline available",
                detail=(
                    f"Baseline used: {baseline}."
                    if baseline is not None
                    else "Baseline needs at least 3 recent days with an LBI score."
                ),
            ),
        ]


def _index_for(
    wearable: WearableMetrics | None,
    check_in: CheckIn | None,
    sleep_hours: float | None = None,
) -> int:
    recovery = wearable.recovery if wearable else NEUTRAL_RECOVERY
    if sleep_hours is None:
        sleep_hours = wearable.sleep_hours if wearable else NEUTRAL_SLEEP_HOURS
    return compute_score(
        recovery=recovery,
        sleep_hours=sleep_hours,
        strain=wearable.strain if wearable else None,
        check_in=check_in,
    ).lbi


def build_counterfactuals(
    wearable: WearableMetrics | None,
    check_in: CheckIn | None,
) -> list[Counterfactual]:
    """What-if deltas for small changes to the day's inputs.

    Perturbations (each applied alone against the same base index):
        - Sleep +45 min (wearable days only, capped at 12h)
        - First active stress indicator switched off (≥ 1 active)
        - Mood one level higher (mood < 4)

    Without wearable data the base uses recovery 50 and 7h sleep. Zero
    deltas are dropped; the rest are sorted by |delta|, top 3 kept.

    Returns:
        Up to 3 Counterfactual items, largest effect first
    """
    base = _index_for(wearable, check_in)
    items: list[Counterfactual] = []

    if wearable is not None:
        alt = _index_for(
            wearable,
            check_in,
            sleep_hours=clamp(wearable.sleep_hours + EXTRA_SLEEP_HOURS, 0.0, 12.0),
        )
        items.append(
            Counterfactual(
                label="If you slept ~45 min more",
                delta=alt - base,
                detail="Approximate impact based on your current sleep contribution to the score.",
            )
        )

    if check_in is not None:
        if check_in.stress_count > 0:
            relieved = check_in.model_copy(
                update={"stress_indicators": check_in.stress_indicators.without_first_active()}
            )
            items.append(
                Counterfactual(
                    label="If stress indicators were 1 lower",
                    delta=_index_for(wearable, relieved) - base,
                    detail="Shows the approximate effect of reducing acute stress signals in the check-in.",
                )
            )

        if check_in.mood < 4:
            happier = check_in.model_copy(update={"mood": check_in.mood + 1})
            items.append(
                Counterfactual(
                    label="If mood improved by one level",
                    delta=_index_for(wearable, happier) - base,
                    detail="Approximate impact of mood on your score.",
                )
            )

    items = [i for i in items if i.delta != 0]
    items.sort(key=lambda i: abs(i.delta), reverse=True)
    return items[:MAX_COUNTERFACTUALS]
