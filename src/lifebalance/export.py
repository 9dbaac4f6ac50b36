"""Research exports: flat daily table (CSV / Parquet) and a full JSON dump.

Layout:
    daily CSV / Parquet: one row per stored date, plan fields joined by date
    research JSON: {exported_at, days, records, plans}
"""

import datetime as dt
import json
import logging
from pathlib import Path
from typing import Iterable

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from lifebalance.models import STRESS_INDICATOR_NAMES, DailyRecord, Plan

logger = logging.getLogger(__name__)

DAILY_COLUMNS = [
    "date",
    "wearable_source",
    "recovery",
    "sleep_hours",
    "strain",
    "hrv",
    "rhr",
    "mood",
    "energy",
    *(f"stress_{name}" for name in STRESS_INDICATOR_NAMES),
    "caffeine_after_2pm",
    "alcohol",
    "deep_work_mins",
    "context_tags",
    "notes",
    "lbi",
    "classification",
    "baseline",
    "confidence",
    "category",
]


def _daily_row(record: DailyRecord, plan: Plan | None) -> dict:
    w = record.wearable
    ci = record.check_in
    indicators = ci.stress_indicators if ci else None

    row = {
        "date": record.date,
        "wearable_source": record.wearable_source.value if record.wearable_source else None,
        "recovery": w.recovery if w else None,
        "sleep_hours": w.sleep_hours if w else None,
        "strain": w.strain if w else None,
        "hrv": w.hrv if w else None,
        "rhr": w.resting_hr if w else None,
        "mood": ci.mood if ci else None,
        "energy": ci.energy if ci else None,
        "caffeine_after_2pm": ci.caffeine_after_2pm if ci else None,
        "alcohol": ci.alcohol if ci else None,
        "deep_work_mins": ci.deep_work_mins if ci else None,
        "context_tags": ";".join(ci.context_tags) if ci and ci.context_tags else None,
        "notes": ci.notes if ci else None,
        "lbi": record.lbi,
        "classification": (
            record.lbi_meta.classification.value if record.lbi_meta else None
        ),
        "baseline": plan.baseline if plan else None,
        "confidence": (
            record.lbi_meta.confidence.value if record.lbi_meta
            else plan.confidence.value if plan
            else None
        ),
        "category": plan.category.value if plan else None,
    }
    for name in STRESS_INDICATOR_NAMES:
        row[f"stress_{name}"] = getattr(indicators, name) if indicators else None
    return row


def daily_frame(
    records: Iterable[DailyRecord],
    plans: Iterable[Plan] = (),
) -> pd.DataFrame:
    """Flat per-date table of records joined with their plans.

    Args:
        records: Daily records in any order
        plans: Stored plans; matched to records by date

    Returns:
        DataFrame with DAILY_COLUMNS, ascending by date
    """
    plan_by_date = {p.date: p for p in plans}
    rows = [
        _daily_row(r, plan_by_date.get(r.date))
        for r in sorted(records, key=lambda r: r.date)
    ]
    return pd.DataFrame(rows, columns=DAILY_COLUMNS)


def export_daily_csv(
    records: Iterable[DailyRecord],
    plans: Iterable[Plan],
    path: str | Path,
) -> Path:
    """Write the flat daily table as CSV (missing values left empty)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = daily_frame(records, plans)
    df.to_csv(path, index=False)
    logger.info("Exported %d days to %s", len(df), path)
    return path


def export_daily_parquet(
    records: Iterable[DailyRecord],
    plans: Iterable[Plan],
    path: str | Path,
) -> Path:
    """Write the flat daily table as Parquet."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = daily_frame(records, plans)

    table = pa.Table.from_pandas(df, preserve_index=False)
    pq.write_table(
        table,
        path,
        compression="snappy",
        use_dictionary=True,
        write_statistics=True,
    )
    logger.info("Exported %d days to %s", len(df), path)
    return path


def research_payload(
    records: Iterable[DailyRecord],
    plans: Iterable[Plan],
    days: int,
    now: dt.datetime | None = None,
) -> dict:
    """JSON-ready research dump of the given records and plans."""
    return {
        "exported_at": (now or dt.datetime.now(dt.timezone.utc)).isoformat(),
        "days": days,
        "records": [r.model_dump(mode="json") for r in sorted(records, key=lambda r: r.date)],
        "plans": [p.model_dump(mode="json") for p in sorted(plans, key=lambda p: p.date)],
    }


def export_research_json(
    records: Iterable[DailyRecord],
    plans: Iterable[Plan],
    path: str | Path,
    days: int,
    now: dt.datetime | None = None,
) -> Path:
    """Write the research dump as indented JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = research_payload(records, plans, days, now=now)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Exported research JSON (%d records) to %s", len(payload["records"]), path)
    return path


def last_days(records: list[DailyRecord], days: int) -> list[DailyRecord]:
    """The most recent `days` records by date."""
    ordered = sorted(records, key=lambda r: r.date)
    return ordered[-days:] if days > 0 else []


def plans_for(records: Iterable[DailyRecord], plans: Iterable[Plan]) -> list[Plan]:
    """Plans dated on one of the given records' dates, ascending."""
    dates = {r.date for r in records}
    return sorted((p for p in plans if p.date in dates), key=lambda p: p.date)
