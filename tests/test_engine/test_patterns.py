"""Tests for pattern mining over the scored history."""

from datetime import date, timedelta

from lifebalance.engine.patterns import NO_PATTERNS, NOT_ENOUGH_HISTORY, build_patterns
from lifebalance.models import CheckIn, DailyRecord, StressIndicators, WearableMetrics

START = date(2026, 1, 1)


def day(i: int, lbi: int | None, **fields) -> DailyRecord:
    return DailyRecord(date=START + timedelta(days=i), lbi=lbi, **fields)


class TestPlaceholders:
    """Test placeholder insights."""

    def test_short_history(self) -> None:
        records = [day(i, 60) for i in range(4)]
        patterns = build_patterns(records)

        assert len(patterns) == 1
        assert patterns[0].title == NOT_ENOUGH_HISTORY[0]

    def test_unscored_days_do_not_count(self) -> None:
        records = [day(i, 60) for i in range(4)] + [day(10, None)]
        assert build_patterns(records)[0].title == NOT_ENOUGH_HISTORY[0]

    def test_nothing_stands_out(self) -> None:
        records = [day(i, 60) for i in range(5)]
        patterns = build_patterns(records)

        assert len(patterns) == 1
        assert patterns[0].title == NO_PATTERNS[0]


class TestPatterns:
    """Test individual pattern detectors."""

    def test_sleep_median_split(self) -> None:
        """Upper median 7.5h; above-median days average 73 vs 56.5."""
        sleeps = [6.0, 6.5, 7.0, 7.5, 8.0, 8.5]
        lbis = [50, 52, 54, 70, 72, 74]
        records = [
            day(i, lbi, wearable=WearableMetrics(recovery=60, sleep_hours=s))
            for i, (s, lbi) in enumerate(zip(sleeps, lbis))
        ]
        patterns = build_patterns(records)

        assert [p.title for p in patterns] == ["More sleep tends to align with higher scores"]
        assert "(7h 30m)" in patterns[0].detail
        assert "Difference: +17." in patterns[0].detail

    def test_mood_buckets(self) -> None:
        """Mood 4 days average 71, mood 1 days 41."""
        moods = [(1, 40), (1, 42), (4, 70), (4, 72), (2, 50)]
        records = [
            day(i, lbi, check_in=CheckIn(mood=mood))
            for i, (mood, lbi) in enumerate(moods)
        ]
        patterns = build_patterns(records)

        assert patterns[0].title == "Mood is linked with your LBI"
        assert "Difference: +30." in patterns[0].detail
        assert "(n=2)" in patterns[0].detail

    def test_small_mood_spread_ignored(self) -> None:
        moods = [(2, 60), (2, 62), (3, 63), (3, 64), (3, 60)]
        records = [
            day(i, lbi, check_in=CheckIn(mood=mood))
            for i, (mood, lbi) in enumerate(moods)
        ]
        assert build_patterns(records)[0].title == NO_PATTERNS[0]

    def test_stress_split(self) -> None:
        calm = StressIndicators()
        tense = StressIndicators(muscle_tension=True, racing_thoughts=True, irritability=True)
        rows = [(calm, 70), (calm, 72), (calm, 74), (tense, 50), (tense, 52), (tense, 54)]
        records = [
            day(i, lbi, check_in=CheckIn(mood=3, stress_indicators=indicators))
            for i, (indicators, lbi) in enumerate(rows)
        ]
        titles = [p.title for p in build_patterns(records)]

        assert "Stress indicators matter" in titles

    def test_to_dict(self) -> None:
        data = build_patterns([])[0].to_dict()
        assert set(data) == {"title", "detail"}
