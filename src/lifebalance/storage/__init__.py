"""Persistence for daily records, plans and models.

Modules:
    - kv: SQLite and in-memory key-value backends
    - repository: Repository interface + JSON-over-KV implementation
    - audit: Snapshot of what is stored
"""

from lifebalance.storage.audit import AuditSnapshot, audit_snapshot
from lifebalance.storage.kv import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SQLiteKeyValueStore,
)
from lifebalance.storage.repository import (
    MODEL_KEY,
    PLAN_KEY_PREFIX,
    RECORDS_KEY,
    RecordRepository,
    Repository,
)

__all__ = [
    "AuditSnapshot",
    "audit_snapshot",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SQLiteKeyValueStore",
    "MODEL_KEY",
    "PLAN_KEY_PREFIX",
    "RECORDS_KEY",
    "RecordRepository",
    "Repository",
]
