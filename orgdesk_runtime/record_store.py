# file: orgdesk_runtime/record_store.py
"""
Record stores — synchronous row storage behind the Remote Data Gateway.

A record store speaks snake_case rows (plain dicts) and named collections.
Expected failures (constraint violations, missing tables, connection
problems) are raised as RecordStoreError; the gateway turns them into
error strings.

MemoryRecordStore is the in-process implementation used by the tests and
for offline development. The PostgreSQL implementation lives in
backend/postgres_record_store.py.
"""

from __future__ import annotations

import copy
import threading
import uuid
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from orgdesk_kernel.constants import UID_WIDTH
from orgdesk_kernel.registry import COLLECTIONS, OWNED_CHILDREN, SINGLETONS

Row = Dict[str, Any]


class RecordStoreError(Exception):
    """Expected failure reported by a record store."""


class RecordStore(Protocol):
    def select_all(self, collection: str) -> List[Row]: ...

    def insert(self, collection: str, row: Row) -> Row: ...

    def insert_many(self, collection: str, rows: List[Row]) -> List[Row]: ...

    def update(self, collection: str, record_id: str, changes: Row) -> Optional[Row]: ...

    def delete(self, collection: str, record_id: str) -> None: ...

    def delete_where(self, collection: str, column: str, value: Any) -> int: ...

    def first(self, collection: str) -> Optional[Row]: ...


# Columns that must be unique within their collection.
_UNIQUE_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "company_number": ("phone_number",),
}


@dataclass
class _Failure:
    error: str
    remaining: int
    unexpected: bool


class MemoryRecordStore:
    """
    Thread-safe in-memory record store.

      - ids are uuid4 strings, display codes (uid) are per-collection
        counters zero-padded to three digits
      - unique columns are enforced (company_number.phone_number)
      - deleting a parent removes its owned children when cascade=True
      - fail() injects failures for the next matching calls
      - every call is appended to ``calls`` as (operation, collection)
    """

    def __init__(self, cascade: bool = True) -> None:
        self._cascade = cascade
        self._lock = threading.Lock()
        self._tables: Dict[str, Dict[str, Row]] = defaultdict(dict)
        self._uid_counters: Dict[str, int] = defaultdict(int)
        self._failures: Dict[Tuple[str, str], _Failure] = {}
        self.calls: List[Tuple[str, str]] = []

    # ------------------------------------------------------------------
    # Test / development helpers
    # ------------------------------------------------------------------

    def seed(self, collection: str, rows: Iterable[Row]) -> List[Row]:
        """Insert rows directly (no call log, no failure injection)."""
        with self._lock:
            self._check_collection(collection)
            return [self._insert_row(collection, row) for row in rows]

    def fail(
        self,
        operation: str,
        collection: str,
        error: str = "simulated failure",
        times: int = 1,
        unexpected: bool = False,
    ) -> None:
        """
        Make the next *times* calls of *operation* on *collection* fail.
        With unexpected=True a RuntimeError is raised instead of a
        RecordStoreError.
        """
        self._failures[(operation, collection)] = _Failure(error, times, unexpected)

    def rows(self, collection: str) -> List[Row]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._tables[collection].values()]

    def count_calls(self, operation: Optional[str] = None) -> int:
        return sum(1 for op, _ in self.calls if operation is None or op == operation)

    def reset_calls(self) -> None:
        self.calls.clear()

    # ------------------------------------------------------------------
    # RecordStore protocol
    # ------------------------------------------------------------------

    def select_all(self, collection: str) -> List[Row]:
        with self._lock:
            self._enter("select_all", collection)
            return [copy.deepcopy(r) for r in self._tables[collection].values()]

    def insert(self, collection: str, row: Row) -> Row:
        with self._lock:
            self._enter("insert", collection)
            return copy.deepcopy(self._insert_row(collection, row))

    def insert_many(self, collection: str, rows: List[Row]) -> List[Row]:
        """All-or-nothing: every row is checked before any is stored."""
        with self._lock:
            self._enter("insert_many", collection)
            staged: List[Row] = []
            for row in rows:
                self._check_unique(collection, row, staged=staged)
                staged.append(row)
            return [copy.deepcopy(self._insert_row(collection, row)) for row in rows]

    def update(self, collection: str, record_id: str, changes: Row) -> Optional[Row]:
        with self._lock:
            self._enter("update", collection)
            table = self._tables[collection]
            if record_id not in table:
                return None
            changes = {k: v for k, v in changes.items() if k != "id"}
            self._check_unique(collection, changes, exclude_id=record_id)
            table[record_id].update(copy.deepcopy(changes))
            return copy.deepcopy(table[record_id])

    def delete(self, collection: str, record_id: str) -> None:
        with self._lock:
            self._enter("delete", collection)
            self._delete_row(collection, record_id)

    def delete_where(self, collection: str, column: str, value: Any) -> int:
        with self._lock:
            self._enter("delete_where", collection)
            doomed = [
                rid for rid, r in self._tables[collection].items()
                if r.get(column) == value
            ]
            for rid in doomed:
                self._delete_row(collection, rid)
            return len(doomed)

    def first(self, collection: str) -> Optional[Row]:
        with self._lock:
            self._enter("first", collection)
            for row in self._tables[collection].values():
                return copy.deepcopy(row)
            return None

    # ------------------------------------------------------------------
    # Internals (lock held)
    # ------------------------------------------------------------------

    def _enter(self, operation: str, collection: str) -> None:
        self.calls.append((operation, collection))
        self._check_collection(collection)
        failure = self._failures.get((operation, collection))
        if failure is None:
            return
        failure.remaining -= 1
        if failure.remaining <= 0:
            del self._failures[(operation, collection)]
        if failure.unexpected:
            raise RuntimeError(failure.error)
        raise RecordStoreError(failure.error)

    @staticmethod
    def _check_collection(collection: str) -> None:
        if collection not in COLLECTIONS and collection not in SINGLETONS:
            raise RecordStoreError(f'relation "{collection}" does not exist')

    def _check_unique(
        self,
        collection: str,
        row: Row,
        exclude_id: Optional[str] = None,
        staged: Iterable[Row] = (),
    ) -> None:
        columns = _UNIQUE_COLUMNS.get(collection, ())
        if not columns:
            return
        existing = [
            r for rid, r in self._tables[collection].items() if rid != exclude_id
        ]
        existing.extend(staged)
        for column in columns:
            if column not in row:
                continue
            if any(r.get(column) == row[column] for r in existing):
                raise RecordStoreError(
                    f"duplicate key value violates unique constraint "
                    f'"{collection}_{column}_key"'
                )

    def _insert_row(self, collection: str, row: Row) -> Row:
        stored = copy.deepcopy(dict(row))
        self._check_unique(collection, stored)
        if not stored.get("id"):
            stored["id"] = str(uuid.uuid4())
        spec = COLLECTIONS.get(collection)
        if spec is not None and spec.has_uid:
            uid = str(stored.get("uid") or "")
            if not uid:
                self._uid_counters[collection] += 1
                stored["uid"] = str(self._uid_counters[collection]).zfill(UID_WIDTH)
            elif uid.isdigit():
                self._uid_counters[collection] = max(self._uid_counters[collection], int(uid))
        self._tables[collection][stored["id"]] = stored
        return stored

    def _delete_row(self, collection: str, record_id: str) -> None:
        if self._tables[collection].pop(record_id, None) is None:
            return
        if not self._cascade or collection not in OWNED_CHILDREN:
            return
        child, fk = OWNED_CHILDREN[collection]
        doomed = [
            rid for rid, r in self._tables[child].items() if r.get(fk) == record_id
        ]
        for rid in doomed:
            self._delete_row(child, rid)
