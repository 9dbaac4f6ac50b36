"""Wearable data importers."""

from lifebalance.ingest.csv_import import (
    ImportResult,
    RowError,
    parse_dd_mmm_yy,
    parse_normalized_wearable_csv,
    read_wearable_csv,
)

__all__ = [
    "ImportResult",
    "RowError",
    "parse_dd_mmm_yy",
    "parse_normalized_wearable_csv",
    "read_wearable_csv",
]
