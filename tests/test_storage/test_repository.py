"""Tests for the record repository."""

import json
from datetime import date, datetime, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError

from lifebalance.models import (
    CheckIn,
    Classification,
    Confidence,
    LbiMeta,
    Plan,
    PlanCategory,
    StressIndicators,
    WearableDay,
    WearableMetrics,
    WearableSource,
)
from lifebalance.storage import (
    MODEL_KEY,
    PLAN_KEY_PREFIX,
    RECORDS_KEY,
    InMemoryKeyValueStore,
    RecordRepository,
    SQLiteKeyValueStore,
)
from lifebalance.storage.repository import CORRUPT_SUFFIX

DAY = date(2026, 1, 5)


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def repo(store) -> RecordRepository:
    return RecordRepository(store)


def make_plan(day: date, lbi: int = 60) -> Plan:
    return Plan(
        date=day,
        lbi=lbi,
        baseline=None,
        confidence=Confidence.MEDIUM,
        category=PlanCategory.NORMAL,
        focus="Focus",
        actions=["one", "two"],
        triggers=["t"],
        explanation="Plan logic: test.",
    )


class TestRecords:
    """Test record upsert and retrieval."""

    def test_get_missing(self, repo) -> None:
        assert repo.get(DAY) is None
        assert repo.list() == []

    def test_upsert_creates(self, repo) -> None:
        record = repo.upsert(DAY, check_in=CheckIn(mood=3))

        assert record.date == DAY
        assert repo.get(DAY).mood == 3

    def test_upsert_merges_fields(self, repo) -> None:
        repo.upsert(DAY, check_in=CheckIn(mood=3))
        repo.upsert(DAY, wearable=WearableMetrics(recovery=70, sleep_hours=7.5))

        record = repo.get(DAY)
        assert record.mood == 3
        assert record.recovery == 70

    def test_upsert_replaces_check_in(self, repo) -> None:
        repo.upsert(
            DAY,
            check_in=CheckIn(mood=1, stress_indicators=StressIndicators(avoidance=True)),
        )
        repo.upsert(DAY, check_in=CheckIn(mood=4))

        record = repo.get(DAY)
        assert record.mood == 4
        assert record.check_in.stress_indicators is None

    def test_upsert_encodes_enums_and_models(self, repo) -> None:
        repo.upsert(
            DAY,
            lbi=55,
            lbi_meta=LbiMeta(
                classification=Classification.BALANCED,
                confidence=Confidence.MEDIUM,
                reason="ok",
            ),
            wearable_source=WearableSource.WHOOP_EXPORT,
        )
        record = repo.get(DAY)

        assert record.lbi_meta.classification is Classification.BALANCED
        assert record.wearable_source is WearableSource.WHOOP_EXPORT

    def test_none_clears_field(self, repo) -> None:
        repo.upsert(DAY, check_in=CheckIn(mood=3))
        repo.upsert(DAY, check_in=None)
        assert repo.get(DAY).check_in is None

    def test_unknown_field_rejected(self, repo) -> None:
        with pytest.raises(ValueError, match="Unknown record fields: colour"):
            repo.upsert(DAY, colour="blue")

    def test_invalid_value_rejected(self, repo) -> None:
        with pytest.raises(ValidationError):
            repo.upsert(DAY, lbi=150)

    def test_list_sorted(self, repo) -> None:
        for d in (date(2026, 1, 3), date(2026, 1, 1), date(2026, 1, 2)):
            repo.upsert(d, lbi=50)
        assert [r.date for r in repo.list()] == [
            date(2026, 1, 1),
            date(2026, 1, 2),
            date(2026, 1, 3),
        ]

    def test_single_key_layout(self, repo, store) -> None:
        repo.upsert(DAY, lbi=50)
        payload = json.loads(store.get(RECORDS_KEY))
        assert list(payload) == ["2026-01-05"]


class TestCorruption:
    """Test recovery from damaged payloads."""

    def test_invalid_json_backed_up(self, repo, store) -> None:
        store.set(RECORDS_KEY, "{not json")

        assert repo.list() == []
        assert store.get(f"{RECORDS_KEY}{CORRUPT_SUFFIX}") == "{not json"

    def test_non_object_backed_up(self, repo, store) -> None:
        store.set(RECORDS_KEY, "[1, 2]")
        assert repo.get(DAY) is None
        assert store.get(f"{RECORDS_KEY}{CORRUPT_SUFFIX}") == "[1, 2]"

    def test_upsert_after_corruption(self, repo, store) -> None:
        store.set(RECORDS_KEY, "garbage")
        repo.upsert(DAY, lbi=60)
        assert repo.get(DAY).lbi == 60

    def test_invalid_record_skipped(self, repo, store) -> None:
        store.set(
            RECORDS_KEY,
            json.dumps({"2026-01-05": {"lbi": 500}, "2026-01-06": {"lbi": 60}}),
        )
        assert [r.date for r in repo.list()] == [date(2026, 1, 6)]

    def test_invalid_record_replaced_on_upsert(self, repo, store) -> None:
        store.set(RECORDS_KEY, json.dumps({"2026-01-05": {"lbi": 500}}))
        record = repo.upsert(DAY, check_in=CheckIn(mood=2))
        assert record.lbi is None
        assert record.mood == 2


class TestImport:
    def test_import_wearable_days(self, repo) -> None:
        repo.upsert(DAY, check_in=CheckIn(mood=3))
        count = repo.import_wearable_days(
            [
                WearableDay(date=DAY, wearable=WearableMetrics(recovery=80, sleep_hours=8)),
                WearableDay(
                    date=date(2026, 1, 6),
                    wearable=WearableMetrics(recovery=60, sleep_hours=7),
                ),
            ]
        )

        assert count == 2
        record = repo.get(DAY)
        assert record.mood == 3
        assert record.recovery == 80
        assert record.wearable_source is WearableSource.NORMALIZED_CSV


class TestPlansAndModel:
    """Test plan and model blob storage."""

    def test_plan_round_trip(self, repo) -> None:
        plan = make_plan(DAY)
        repo.save_plan(plan)
        assert repo.get_plan(DAY) == plan

    def test_plan_overwritten(self, repo) -> None:
        repo.save_plan(make_plan(DAY, lbi=60))
        repo.save_plan(make_plan(DAY, lbi=40))
        assert repo.get_plan(DAY).lbi == 40
        assert len(repo.list_plans()) == 1

    def test_list_plans_last_days(self, repo) -> None:
        for day in (date(2026, 1, 1), date(2026, 1, 3), date(2026, 1, 2)):
            repo.save_plan(make_plan(day))

        assert [p.date for p in repo.list_plans()] == [
            date(2026, 1, 1),
            date(2026, 1, 2),
            date(2026, 1, 3),
        ]
        assert [p.date for p in repo.list_plans(2)] == [date(2026, 1, 2), date(2026, 1, 3)]
        assert repo.list_plans(0) == []

    def test_corrupt_plan_skipped(self, repo, store) -> None:
        repo.save_plan(make_plan(DAY))
        store.set(f"{PLAN_KEY_PREFIX}2026-01-06", "oops")

        assert [p.date for p in repo.list_plans()] == [DAY]

    def test_model_blob(self, repo) -> None:
        assert repo.get_model_blob() is None
        repo.set_model_blob({"version": 1})
        assert repo.get_model_blob() == {"version": 1}

    def test_delete_all(self, repo, store) -> None:
        repo.upsert(DAY, lbi=50)
        repo.save_plan(make_plan(DAY))
        repo.set_model_blob({"version": 1})

        repo.delete_all()

        assert repo.list() == []
        assert repo.list_plans() == []
        assert store.get(MODEL_KEY) is None


class TestSQLiteBacked:
    def test_records_persist(self, tmp_path: Path) -> None:
        path = tmp_path / "lb.db"
        RecordRepository(SQLiteKeyValueStore(path)).upsert(DAY, lbi=61)
        assert RecordRepository(SQLiteKeyValueStore(path)).get(DAY).lbi == 61
