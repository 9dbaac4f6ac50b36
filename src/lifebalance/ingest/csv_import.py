"""Normalized wearable CSV importer.

Schema (header row required, column names case-insensitive):
    date,sleep_hours,recovery,strain,hrv,rhr

- date: dd-mmm-yy (e.g. 01-Jan-26); years 70–99 → 19xx, 00–69 → 20xx
- sleep_hours: decimal hours in [0, 24] (required)
- recovery: 0–100 (required)
- strain: optional, 0–21
- hrv, rhr: optional

Bad rows produce structured errors and are skipped; the rest of the file
still imports. A header missing a required column rejects the file.
"""

import csv
import datetime as dt
import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path

from lifebalance.models import WearableDay, WearableMetrics, WearableSource
from lifebalance.numeric import format_number

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("date", "sleep_hours", "recovery")

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

DATE_PATTERN = re.compile(
    r"^([0-3]\d)-(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)-(\d{2})$"
)

INVALID_DATE = "Invalid date. Expected dd-mmm-yy (e.g. 01-Jan-26)."
MISSING_NUMBER = "Missing or non-numeric value."


@dataclass
class RowError:
    """One import problem. Rows are 1-based; the header is row 1."""

    row: int
    field: str
    message: str

    def __str__(self) -> str:
        return f"row {self.row} [{self.field}]: {self.message}"

    def to_dict(self) -> dict:
        return {"row": self.row, "field": self.field, "message": self.message}


@dataclass
class ImportResult:
    """Parsed days (ascending, one per date) plus row errors."""

    days: list[WearableDay] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def parse_dd_mmm_yy(value: str) -> dt.date | None:
    """Parse a dd-mmm-yy date, or None when malformed or not a real date.

    Example:
        >>> parse_dd_mmm_yy("01-Jan-26")
        datetime.date(2026, 1, 1)
        >>> parse_dd_mmm_yy("31-Feb-26") is None
        True
    """
    match = DATE_PATTERN.match(value.strip().lower())
    if match is None:
        return None

    day, month, yy = int(match.group(1)), MONTHS[match.group(2)], int(match.group(3))
    year = 1900 + yy if yy >= 70 else 2000 + yy
    try:
        return dt.date(year, month, day)
    except ValueError:
        return None


def _to_number(value: str) -> float | None:
    text = value.strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _bounded(
    row: int,
    name: str,
    value: float,
    low: float,
    high: float,
    errors: list[RowError],
) -> float | None:
    if value < low:
        errors.append(RowError(row, name, f"Value must be ≥ {format_number(low)}."))
        return None
    if value > high:
        errors.append(RowError(row, name, f"Value must be ≤ {format_number(high)}."))
        return None
    return value


def _required(
    row: int,
    name: str,
    raw: str,
    low: float,
    high: float,
    errors: list[RowError],
) -> float | None:
    number = _to_number(raw)
    if number is None:
        errors.append(RowError(row, name, MISSING_NUMBER))
        return None
    return _bounded(row, name, number, low, high, errors)


def parse_normalized_wearable_csv(text: str) -> ImportResult:
    """Parse normalized wearable CSV text.

    Args:
        text: Full CSV contents (LF, CRLF or CR line endings)

    Returns:
        ImportResult; duplicate dates keep the last occurrence
    """
    lines = [
        line.strip()
        for line in text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    ]
    lines = [line for line in lines if line]

    if not lines:
        return ImportResult(errors=[RowError(1, "csv", "CSV is empty.")])

    rows = list(csv.reader(lines))
    header = [column.strip().lower() for column in rows[0]]

    missing = [c for c in REQUIRED_COLUMNS if c not in header]
    if missing:
        return ImportResult(
            errors=[
                RowError(1, "header", f"Missing required column: {column}")
                for column in missing
            ]
        )

    index = {name: header.index(name) for name in header[::-1]}

    def cell(cols: list[str], name: str) -> str:
        i = index.get(name)
        if i is None or i >= len(cols):
            return ""
        return cols[i]

    errors: list[RowError] = []
    by_date: dict[dt.date, WearableMetrics] = {}

    for offset, cols in enumerate(rows[1:], start=2):
        date = parse_dd_mmm_yy(cell(cols, "date"))
        if date is None:
            errors.append(RowError(offset, "date", INVALID_DATE))
            continue

        sleep_hours = _required(offset, "sleep_hours", cell(cols, "sleep_hours"), 0, 24, errors)
        recovery = _required(offset, "recovery", cell(cols, "recovery"), 0, 100, errors)
        if sleep_hours is None or recovery is None:
            continue

        strain = _to_number(cell(cols, "strain"))
        if strain is not None and _bounded(offset, "strain", strain, 0, 21, errors) is None:
            continue

        by_date[date] = WearableMetrics(
            recovery=recovery,
            sleep_hours=sleep_hours,
            strain=strain,
            hrv=_to_number(cell(cols, "hrv")),
            resting_hr=_to_number(cell(cols, "rhr")),
        )

    days = [
        WearableDay(date=date, wearable=metrics, source=WearableSource.NORMALIZED_CSV)
        for date, metrics in sorted(by_date.items())
    ]

    logger.info("Parsed %d wearable days with %d row errors", len(days), len(errors))
    return ImportResult(days=days, errors=errors)


def read_wearable_csv(path: str | Path) -> ImportResult:
    """Read and parse a normalized wearable CSV file (UTF-8, BOM tolerated)."""
    return parse_normalized_wearable_csv(Path(path).read_text(encoding="utf-8-sig"))
