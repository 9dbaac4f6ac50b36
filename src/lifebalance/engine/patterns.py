"""Pattern mining over the scored history.

Simple summary-statistic comparisons, not inference:
- Mood buckets vs index
- Sleep above/below the median vs index
- Recovery above/below the median vs index
- Low-stress (0–1 indicators) vs high-stress (3+) days
"""

from dataclasses import dataclass
from typing import Callable, Iterable

from lifebalance.engine.explainability import format_hours
from lifebalance.models import MOOD_EMOJI, DailyRecord
from lifebalance.numeric import round_half_up

MIN_USABLE_DAYS = 5
MIN_SPLIT_DAYS = 6
MIN_GROUP_SIZE = 2
MIN_MOOD_SPREAD = 6
MAX_PATTERNS = 6

NOT_ENOUGH_HISTORY = (
    "Not enough history yet",
    "Log a few more days (wearables + check-ins) to unlock pattern insights.",
)
NO_PATTERNS = (
    "No strong patterns detected yet",
    "Keep logging consistently for a clearer signal (more days + more complete inputs).",
)


@dataclass
class PatternInsight:
    """One observed pattern in the history."""

    title: str
    detail: str

    def __str__(self) -> str:
        return f"{self.title}: {self.detail}"

    def to_dict(self) -> dict:
        return {"title": self.title, "detail": self.detail}


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def _signed(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)


def _upper_median(values: list[float]) -> float:
    ordered = sorted(values)
    return ordered[len(ordered) // 2]


def _mood_pattern(usable: list[DailyRecord]) -> PatternInsight | None:
    by_mood: dict[int, list[int]] = {1: [], 2: [], 3: [], 4: []}
    for record in usable:
        if record.mood is not None:
            by_mood[record.mood].append(record.lbi)

    buckets = [
        (mood, round_half_up(_mean(values)), len(values))
        for mood, values in sorted(by_mood.items())
        if len(values) >= MIN_GROUP_SIZE
    ]
    if len(buckets) < 2:
        return None

    low_mood, low_mean, low_n = buckets[0]
    high_mood, high_mean, high_n = buckets[-1]
    diff = high_mean - low_mean
    if abs(diff) < MIN_MOOD_SPREAD:
        return None

    return PatternInsight(
        title="Mood is linked with your LBI",
        detail=(
            f"On mood {MOOD_EMOJI[high_mood]} days your average LBI was {high_mean} "
            f"(n={high_n}). On mood {MOOD_EMOJI[low_mood]} days it was {low_mean} "
            f"(n={low_n}). Difference: {_signed(diff)}."
        ),
    )


def _median_split_pattern(
    usable: list[DailyRecord],
    signal: Callable[[DailyRecord], float | None],
    title: str,
    describe: Callable[[float], str],
    label: str,
) -> PatternInsight | None:
    pairs = [(signal(r), r.lbi) for r in usable if signal(r) is not None]
    if len(pairs) < MIN_SPLIT_DAYS:
        return None

    median = _upper_median([value for value, _ in pairs])
    low = [lbi for value, lbi in pairs if value <= median]
    high = [lbi for value, lbi in pairs if value > median]
    if len(low) < MIN_GROUP_SIZE or len(high) < MIN_GROUP_SIZE:
        return None

    diff = round_half_up(_mean(high) - _mean(low))
    return PatternInsight(
        title=title,
        detail=(
            f"When {label} was above your median ({describe(median)}), average LBI was "
            f"{round_half_up(_mean(high))}. When it was at/below median, it was "
            f"{round_half_up(_mean(low))}. Difference: {_signed(diff)}."
        ),
    )


def _stress_pattern(usable: list[DailyRecord]) -> PatternInsight | None:
    with_check_in = [r for r in usable if r.has_check_in]
    if len(with_check_in) < MIN_SPLIT_DAYS:
        return None

    high = [r.lbi for r in with_check_in if r.stress_count >= 3]
    low = [r.lbi for r in with_check_in if r.stress_count <= 1]
    if len(high) < MIN_GROUP_SIZE or len(low) < MIN_GROUP_SIZE:
        return None

    diff = round_half_up(_mean(low) - _mean(high))
    return PatternInsight(
        title="Stress indicators matter",
        detail=(
            f"On low-stress days (0–1 indicators) average LBI was "
            f"{round_half_up(_mean(low))}. On high-stress days (3+ indicators) it was "
            f"{round_half_up(_mean(high))}. Difference: {_signed(diff)}."
        ),
    )


def build_patterns(records: Iterable[DailyRecord]) -> list[PatternInsight]:
    """Mine simple patterns from records with an index.

    Args:
        records: Daily records in any order; unscored days are ignored

    Returns:
        1–6 insights; a single placeholder when history is short or
        nothing stands out
    """
    usable = [r for r in records if r.lbi is not None]
    if len(usable) < MIN_USABLE_DAYS:
        return [PatternInsight(*NOT_ENOUGH_HISTORY)]

    candidates = [
        _mood_pattern(usable),
        _median_split_pattern(
            usable,
            lambda r: r.sleep_hours,
            title="More sleep tends to align with higher scores",
            describe=format_hours,
            label="sleep",
        ),
        _median_split_pattern(
            usable,
            lambda r: r.recovery,
            title="Recovery is associated with your LBI",
            describe=lambda m: str(round_half_up(m)),
            label="recovery",
        ),
        _stress_pattern(usable),
    ]
    items = [item for item in candidates if item is not None]

    if not items:
        return [PatternInsight(*NO_PATTERNS)]
    return items[:MAX_PATTERNS]
