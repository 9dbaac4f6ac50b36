"""Demo data: a short synthetic history for trying the engine without a wearable.

Recovery is simulated to fall after high strain and short sleep, and check-ins
lean towards stress indicators and lower mood on those days, so the insight
and pattern views have something to find.
"""

import datetime as dt
import logging

import numpy as np

from lifebalance.engine.scoring import compute_score
from lifebalance.models import (
    STRESS_INDICATOR_NAMES,
    CheckIn,
    DailyRecord,
    LbiMeta,
    StressIndicators,
    WearableMetrics,
)
from lifebalance.numeric import clamp, round_dp, round_half_up
from lifebalance.storage.repository import Repository

logger = logging.getLogger(__name__)

# Per-indicator probabilities, in STRESS_INDICATOR_NAMES order
STRESSED_PROBS = (0.6, 0.5, 0.45, 0.4, 0.5)
CALM_PROBS = (0.2, 0.15, 0.15, 0.12, 0.18)

DEEP_WORK_CHOICES = (0, 15, 30, 60, 90, 120)


def _demo_day(rng: np.random.Generator) -> tuple[WearableMetrics, CheckIn]:
    sleep_hours = round_dp(rng.uniform(5.2, 8.8), 1)
    strain = round_dp(rng.uniform(6, 18), 1)
    recovery = round_half_up(
        clamp(
            100 - (strain - 8) * 4 - (7.5 - sleep_hours) * 10 + rng.uniform(-8, 8),
            5,
            95,
        )
    )

    stressed = recovery < 45 or sleep_hours < 6.3 or strain > 14
    probs = STRESSED_PROBS if stressed else CALM_PROBS
    indicators = StressIndicators(
        **{name: bool(rng.random() < p) for name, p in zip(STRESS_INDICATOR_NAMES, probs)}
    )

    mood = int(rng.integers(1, 5))
    if stressed:
        mood = min(mood, 3)

    check_in = CheckIn(
        mood=mood,
        energy=int(rng.integers(1, 5)),
        stress_indicators=indicators,
        caffeine_after_2pm=bool(rng.random() < 0.25),
        alcohol=bool(rng.random() < 0.15),
        deep_work_mins=int(rng.choice(DEEP_WORK_CHOICES)),
    )
    wearable = WearableMetrics(recovery=recovery, sleep_hours=sleep_hours, strain=strain)
    return wearable, check_in


def seed_demo(
    repository: Repository,
    days: int = 14,
    seed: int | None = None,
    today: dt.date | None = None,
) -> list[DailyRecord]:
    """Replace the store with `days` synthetic days ending today.

    Existing records, plans and the model are deleted first. Every seeded
    day carries wearable metrics, a check-in and its scored index.

    Args:
        repository: Target repository
        days: Number of days to generate, ending at `today`
        seed: Random seed for a reproducible history
        today: Last seeded day (default: the current date)

    Returns:
        Seeded records, ascending by date

    Raises:
        ValueError: If days < 1
    """
    if days < 1:
        raise ValueError(f"days must be >= 1, got {days}")

    rng = np.random.default_rng(seed)
    today = today or dt.date.today()

    repository.delete_all()

    records = []
    for offset in range(days - 1, -1, -1):
        date = today - dt.timedelta(days=offset)
        wearable, check_in = _demo_day(rng)
        score = compute_score(
            recovery=wearable.recovery,
            sleep_hours=wearable.sleep_hours,
            strain=wearable.strain,
            check_in=check_in,
        )
        records.append(
            repository.upsert(
                date,
                wearable=wearable,
                check_in=check_in,
                lbi=score.lbi,
                lbi_meta=LbiMeta(
                    classification=score.classification,
                    confidence=score.confidence,
                    reason=score.reason,
                ),
            )
        )

    logger.info("Seeded %d demo days ending %s", days, today.isoformat())
    return records
