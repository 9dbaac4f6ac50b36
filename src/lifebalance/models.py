"""Domain data model for LifeBalance.

Pydantic models for everything that is persisted (daily records, check-ins,
wearable metrics, plans) plus the enums shared by scoring, planning and
explainability. Engine-internal results stay as dataclasses next to the
code that produces them.

Optional signals are explicit: a day may have a check-in, wearable metrics,
both, or neither. `DailyRecord` exposes total accessors so callers never
have to coalesce missing values themselves.
"""

import datetime as dt
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Classification(Enum):
    """Daily state label assigned by the scoring engine."""

    BALANCED = "balanced"
    OVERLOADED = "overloaded"
    UNDER_RECOVERED = "under-recovered"


class Confidence(Enum):
    """Input completeness bucket attached to every score and plan."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PlanCategory(Enum):
    """Plan category chosen by the rule engine."""

    RECOVERY = "RECOVERY"
    NORMAL = "NORMAL"


class WearableSource(Enum):
    """Where a day's wearable metrics came from."""

    NORMALIZED_CSV = "normalized_csv"
    WHOOP_EXPORT = "whoop_export"
    APPLE_HEALTH_EXPORT = "apple_health_export"


ContextTag = Literal[
    "illness",
    "travel",
    "late_meal",
    "alcohol",
    "acute_stress",
    "menstrual_cycle",
]

# Declaration order matters: counterfactuals switch off the first active one.
STRESS_INDICATOR_NAMES = (
    "muscle_tension",
    "racing_thoughts",
    "irritability",
    "avoidance",
    "restlessness",
)

MOOD_EMOJI = {1: "😖", 2: "😐", 3: "🙂", 4: "😄"}


class StressIndicators(BaseModel):
    """Observable stress indicators selected in a check-in."""

    model_config = ConfigDict(frozen=True)

    muscle_tension: bool = False
    racing_thoughts: bool = False
    irritability: bool = False
    avoidance: bool = False
    restlessness: bool = False

    @property
    def count(self) -> int:
        """Number of active indicators, in [0, 5]."""
        return sum(1 for name in STRESS_INDICATOR_NAMES if getattr(self, name))

    @property
    def fraction(self) -> float:
        """Active share of all indicators, in [0, 1]."""
        return self.count / len(STRESS_INDICATOR_NAMES)

    def without_first_active(self) -> "StressIndicators":
        """Copy with the first active indicator switched off."""
        for name in STRESS_INDICATOR_NAMES:
            if getattr(self, name):
                return self.model_copy(update={name: False})
        return self


class CheckIn(BaseModel):
    """Self-reported daily check-in on an anchored 4-point scale."""

    mood: int = Field(..., ge=1, le=4)
    energy: int | None = Field(default=None, ge=1, le=4)
    stress_indicators: StressIndicators | None = None

    caffeine_after_2pm: bool | None = None
    alcohol: bool | None = None
    deep_work_mins: Literal[0, 15, 30, 60, 90, 120] | None = None

    context_tags: list[ContextTag] = Field(default_factory=list)
    notes: str | None = None

    @property
    def stress_count(self) -> int:
        """Active stress indicators; 0 when none were captured."""
        if self.stress_indicators is None:
            return 0
        return self.stress_indicators.count


class WearableMetrics(BaseModel):
    """Physiological signals for one day."""

    recovery: float = Field(..., ge=0, le=100)
    sleep_hours: float = Field(..., ge=0, le=24)
    strain: float | None = Field(default=None, ge=0, le=21)
    hrv: float | None = None
    resting_hr: float | None = None


class LbiMeta(BaseModel):
    """Scoring metadata persisted next to the index."""

    classification: Classification
    confidence: Confidence
    reason: str


class DailyRecord(BaseModel):
    """Everything known about one calendar day."""

    date: dt.date
    check_in: CheckIn | None = None
    wearable: WearableMetrics | None = None
    wearable_source: WearableSource | None = None
    lbi: int | None = Field(default=None, ge=0, le=100)
    lbi_meta: LbiMeta | None = None

    @property
    def has_check_in(self) -> bool:
        return self.check_in is not None

    @property
    def has_wearable(self) -> bool:
        return self.wearable is not None

    @property
    def has_lbi(self) -> bool:
        return self.lbi is not None

    @property
    def recovery(self) -> float | None:
        return self.wearable.recovery if self.wearable else None

    @property
    def sleep_hours(self) -> float | None:
        return self.wearable.sleep_hours if self.wearable else None

    @property
    def strain(self) -> float | None:
        return self.wearable.strain if self.wearable else None

    @property
    def mood(self) -> int | None:
        return self.check_in.mood if self.check_in else None

    @property
    def energy(self) -> int | None:
        return self.check_in.energy if self.check_in else None

    @property
    def stress_count(self) -> int:
        """Active stress indicators; 0 without a check-in."""
        return self.check_in.stress_count if self.check_in else 0

    @property
    def stress_count_or_none(self) -> int | None:
        """Active stress indicators, or None when none were captured."""
        if self.check_in is None or self.check_in.stress_indicators is None:
            return None
        return self.check_in.stress_indicators.count


class Plan(BaseModel):
    """Daily action plan, recomputed and overwritten whenever inputs change."""

    date: dt.date
    lbi: int = Field(..., ge=0, le=100)
    baseline: int | None = None
    confidence: Confidence
    category: PlanCategory
    focus: str
    actions: list[str] = Field(default_factory=list, max_length=2)
    triggers: list[str] = Field(default_factory=list, max_length=3)
    explanation: str
    candidate_actions: list[str] = Field(default_factory=list)


class WearableDay(BaseModel):
    """One imported day of wearable metrics."""

    date: dt.date
    wearable: WearableMetrics
    source: WearableSource = WearableSource.NORMALIZED_CSV
