"""Audit snapshot: what is actually stored, for debugging a user's data."""

import datetime as dt
from dataclasses import dataclass, field

from lifebalance.storage.repository import (
    CORRUPT_SUFFIX,
    PLAN_KEY_PREFIX,
    RecordRepository,
)

MAX_LISTED_KEYS = 50


def _latest(dates: list[dt.date]) -> str | None:
    return max(dates).isoformat() if dates else None


@dataclass
class AuditSnapshot:
    """Counts, latest dates and sample payloads of the store."""

    generated_at: dt.datetime
    counts: dict[str, int]
    latest: dict[str, str | None]
    plan_keys: list[str] = field(default_factory=list)
    corrupt_keys: list[str] = field(default_factory=list)
    model_stored: bool = False
    model_trained_at: str | None = None
    latest_record: dict | None = None
    latest_plan: dict | None = None

    def format(self) -> str:
        lines = [f"=== LifeBalance store audit ({self.generated_at.isoformat()}) ==="]
        for name, count in self.counts.items():
            latest = self.latest.get(name) or "—"
            lines.append(f"  {name:<10} {count:>4}  latest: {latest}")

        if self.model_stored:
            lines.append(f"Risk model: stored (trained {self.model_trained_at or 'unknown'})")
        else:
            lines.append("Risk model: not stored")

        if self.corrupt_keys:
            lines.append("Quarantined payloads:")
            lines.extend(f"  - {key}" for key in self.corrupt_keys)
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "generated_at": self.generated_at.isoformat(),
            "counts": dict(self.counts),
            "latest": dict(self.latest),
            "plan_keys": list(self.plan_keys),
            "corrupt_keys": list(self.corrupt_keys),
            "model_stored": self.model_stored,
            "model_trained_at": self.model_trained_at,
            "latest_record": self.latest_record,
            "latest_plan": self.latest_plan,
        }


def audit_snapshot(
    repository: RecordRepository,
    now: dt.datetime | None = None,
) -> AuditSnapshot:
    """Summarise the repository's stored records, plans and model.

    Args:
        repository: Repository to inspect
        now: Snapshot timestamp (default: current UTC time)

    Returns:
        AuditSnapshot with per-family counts and latest dates, up to
        MAX_LISTED_KEYS plan keys, quarantined keys and sample payloads
    """
    records = repository.list()
    plans = repository.list_plans()

    check_in_dates = [r.date for r in records if r.has_check_in]
    wearable_dates = [r.date for r in records if r.has_wearable]
    scored_dates = [r.date for r in records if r.lbi is not None]
    plan_dates = [p.date for p in plans]

    plan_keys = sorted(
        (k for k in repository.store.keys(PLAN_KEY_PREFIX) if not k.endswith(CORRUPT_SUFFIX)),
        reverse=True,
    )
    corrupt_keys = sorted(k for k in repository.store.keys() if k.endswith(CORRUPT_SUFFIX))

    blob = repository.get_model_blob()
    trained_at = blob.get("trained_at") if blob is not None else None

    return AuditSnapshot(
        generated_at=now or dt.datetime.now(dt.timezone.utc),
        counts={
            "records": len(records),
            "check_ins": len(check_in_dates),
            "wearables": len(wearable_dates),
            "scored": len(scored_dates),
            "plans": len(plans),
        },
        latest={
            "records": _latest([r.date for r in records]),
            "check_ins": _latest(check_in_dates),
            "wearables": _latest(wearable_dates),
            "scored": _latest(scored_dates),
            "plans": _latest(plan_dates),
        },
        plan_keys=plan_keys[:MAX_LISTED_KEYS],
        corrupt_keys=corrupt_keys,
        model_stored=blob is not None,
        model_trained_at=str(trained_at) if trained_at is not None else None,
        latest_record=records[-1].model_dump(mode="json") if records else None,
        latest_plan=plans[-1].model_dump(mode="json") if plans else None,
    )
