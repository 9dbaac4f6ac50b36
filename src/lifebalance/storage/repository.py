"""Record repository: per-date daily records, plans and the model blob.

All daily records live as one JSON object under a single key, mapping ISO
dates to record payloads. Plans are stored one key per date. Writes are
read-merge-write; concurrent writers are last-writer-wins.

Corrupt payloads (unparseable JSON or a non-object) are copied to
`<key>:corrupt_backup` and treated as empty, so a damaged store never
blocks the daily flow.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ValidationError

from lifebalance.models import DailyRecord, Plan, WearableDay
from lifebalance.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

RECORDS_KEY = "life_balance_daily_records_v1"
PLAN_KEY_PREFIX = "life_balance_plan_v1:"
MODEL_KEY = "life_balance_ml_models_v1"
CORRUPT_SUFFIX = ":corrupt_backup"

UPSERT_FIELDS = frozenset(DailyRecord.model_fields) - {"date"}


class Repository(ABC):
    """Storage interface the engines and processor depend on."""

    @abstractmethod
    def get(self, date: dt.date) -> DailyRecord | None:
        """Record for one date, or None."""

    @abstractmethod
    def list(self) -> list[DailyRecord]:
        """All records, ascending by date."""

    @abstractmethod
    def upsert(self, date: dt.date, **fields: Any) -> DailyRecord:
        """Merge the given fields into the date's record and persist it."""

    @abstractmethod
    def delete_all(self) -> None:
        """Remove every record, plan and model."""

    @abstractmethod
    def get_model_blob(self) -> dict | None:
        """Persisted model payload, or None."""

    @abstractmethod
    def set_model_blob(self, blob: dict) -> None:
        """Replace the persisted model payload."""

    @abstractmethod
    def save_plan(self, plan: Plan) -> None:
        """Persist a plan, overwriting any plan for the same date."""

    @abstractmethod
    def get_plan(self, date: dt.date) -> Plan | None:
        """Plan for one date, or None."""

    @abstractmethod
    def list_plans(self, days: int | None = None) -> list[Plan]:
        """Stored plans ascending by date; the last `days` when given."""


def _encode(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dt.date):
        return value.isoformat()
    return value


class RecordRepository(Repository):
    """Repository over any KeyValueStore.

    Args:
        store: Key-value backend (SQLite in production, in-memory in tests)

    Example:
        >>> repo = RecordRepository(InMemoryKeyValueStore())
        >>> repo.upsert(date(2026, 1, 5), check_in=CheckIn(mood=3))
        >>> repo.get(date(2026, 1, 5)).mood
        3
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    # ── Raw payloads ───────────────────────────────────────────

    def _quarantine(self, key: str, raw: str, reason: str) -> None:
        self.store.set(f"{key}{CORRUPT_SUFFIX}", raw)
        logger.warning(
            "Corrupt payload under %s (%s); copied to %s%s",
            key,
            reason,
            key,
            CORRUPT_SUFFIX,
        )

    def _read_object(self, key: str) -> dict | None:
        """JSON object stored under `key`; None if absent or corrupt."""
        raw = self.store.get(key)
        if raw is None:
            return None

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            self._quarantine(key, raw, f"invalid JSON: {e.msg}")
            return None

        if not isinstance(parsed, dict):
            self._quarantine(key, raw, f"expected object, got {type(parsed).__name__}")
            return None
        return parsed

    def _load_records(self) -> dict[str, dict]:
        return self._read_object(RECORDS_KEY) or {}

    def _save_records(self, payloads: dict[str, dict]) -> None:
        self.store.set(RECORDS_KEY, json.dumps(payloads, sort_keys=True))

    @staticmethod
    def _validate(key: str, payload: Any) -> DailyRecord | None:
        if not isinstance(payload, dict):
            logger.warning("Skipping stored record %s: not an object", key)
            return None
        try:
            return DailyRecord.model_validate({"date": key, **payload})
        except ValidationError as e:
            logger.warning(
                "Skipping stored record %s: %d validation errors", key, e.error_count()
            )
            return None

    # ── Records ────────────────────────────────────────────────

    def get(self, date: dt.date) -> DailyRecord | None:
        key = date.isoformat()
        payload = self._load_records().get(key)
        if payload is None:
            return None
        return self._validate(key, payload)

    def list(self) -> list[DailyRecord]:
        records = []
        for key, payload in self._load_records().items():
            record = self._validate(key, payload)
            if record is not None:
                records.append(record)
        records.sort(key=lambda r: r.date)
        return records

    def upsert(self, date: dt.date, **fields: Any) -> DailyRecord:
        """Merge fields into the stored record for `date`.

        Args:
            date: Record date
            **fields: Any DailyRecord field except `date`; None clears a field

        Returns:
            The merged, validated record

        Raises:
            ValueError: On unknown field names
            ValidationError: If the merged record is invalid
        """
        unknown = set(fields) - UPSERT_FIELDS
        if unknown:
            raise ValueError(f"Unknown record fields: {', '.join(sorted(unknown))}")

        key = date.isoformat()
        payloads = self._load_records()

        existing = payloads.get(key)
        if existing is not None and self._validate(key, existing) is None:
            existing = None

        merged = {**(existing or {}), **{k: _encode(v) for k, v in fields.items()}}
        merged["date"] = key
        record = DailyRecord.model_validate(merged)

        payloads[key] = record.model_dump(mode="json")
        self._save_records(payloads)
        return record

    def import_wearable_days(self, days: Iterable[WearableDay]) -> int:
        """Bulk-merge imported wearable days in a single write.

        Returns:
            Number of days written
        """
        payloads = self._load_records()
        count = 0
        for day in days:
            key = day.date.isoformat()
            existing = payloads.get(key)
            if existing is not None and self._validate(key, existing) is None:
                existing = None
            merged = {
                **(existing or {}),
                "date": key,
                "wearable": day.wearable.model_dump(mode="json"),
                "wearable_source": day.source.value,
            }
            payloads[key] = DailyRecord.model_validate(merged).model_dump(mode="json")
            count += 1

        self._save_records(payloads)
        logger.info("Imported %d wearable days", count)
        return count

    def delete_all(self) -> None:
        self.store.delete(RECORDS_KEY)
        self.store.delete(MODEL_KEY)
        for key in self.store.keys(PLAN_KEY_PREFIX):
            self.store.delete(key)

    # ── Model blob ─────────────────────────────────────────────

    def get_model_blob(self) -> dict | None:
        return self._read_object(MODEL_KEY)

    def set_model_blob(self, blob: dict) -> None:
        self.store.set(MODEL_KEY, json.dumps(blob))

    # ── Plans ──────────────────────────────────────────────────

    def save_plan(self, plan: Plan) -> None:
        self.store.set(f"{PLAN_KEY_PREFIX}{plan.date.isoformat()}", plan.model_dump_json())

    def _read_plan(self, key: str) -> Plan | None:
        payload = self._read_object(key)
        if payload is None:
            return None
        try:
            return Plan.model_validate(payload)
        except ValidationError as e:
            logger.warning("Skipping stored plan %s: %d validation errors", key, e.error_count())
            return None

    def get_plan(self, date: dt.date) -> Plan | None:
        return self._read_plan(f"{PLAN_KEY_PREFIX}{date.isoformat()}")

    def list_plans(self, days: int | None = None) -> list[Plan]:
        keys = [
            k for k in self.store.keys(PLAN_KEY_PREFIX) if not k.endswith(CORRUPT_SUFFIX)
        ]
        keys.sort()
        if days is not None:
            keys = keys[-days:] if days > 0 else []

        plans = []
        for key in keys:
            plan = self._read_plan(key)
            if plan is not None:
                plans.append(plan)
        return plans
