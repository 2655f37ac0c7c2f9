# file: orgdesk_runtime/gateway.py
"""
Remote Data Gateway — uniform async CRUD over named collections.

Every operation returns a GatewayResult (or an error string for deletes)
instead of raising. Record stores are synchronous and run on worker
threads, so concurrent calls do not block the event loop.

Key convention: rows coming back from the store and field maps going to
it are normalised with to_snake_keys, so callers may pass either
convention. Records handed back are kernel dataclasses.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, Optional, Sequence, Tuple, TypeVar

from orgdesk_kernel.domain_types import record_from_row, to_plain
from orgdesk_kernel.keycase import to_snake_keys
from orgdesk_kernel.registry import COLLECTIONS, SINGLETONS

from .record_store import RecordStore, RecordStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

NOT_FOUND = "Record not found"


@dataclass(frozen=True)
class GatewayResult(Generic[T]):
    data: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _outbound(fields: Mapping[str, Any]) -> dict:
    """Field map for the store: snake_case keys, plain values, no id."""
    row = to_snake_keys(to_plain(dict(fields)))
    row.pop("id", None)
    return row


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class RemoteGateway:
    """Async facade over a synchronous RecordStore."""

    def __init__(self, record_store: RecordStore) -> None:
        self._store = record_store

    @property
    def record_store(self) -> RecordStore:
        return self._store

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    async def list_all(self, collection: str) -> GatewayResult[Tuple[Any, ...]]:
        spec = COLLECTIONS[collection]

        def run() -> Tuple[Any, ...]:
            rows = self._store.select_all(collection)
            return tuple(record_from_row(spec.record_type, to_snake_keys(r)) for r in rows)

        return await self._call("list", collection, run)

    async def create_one(self, collection: str, fields: Mapping[str, Any]) -> GatewayResult[Any]:
        spec = COLLECTIONS[collection]
        row = _outbound(fields)

        def run() -> Any:
            return record_from_row(spec.record_type, to_snake_keys(self._store.insert(collection, row)))

        return await self._call("create", collection, run)

    async def create_many(
        self, collection: str, rows: Sequence[Mapping[str, Any]],
    ) -> GatewayResult[Tuple[Any, ...]]:
        """Bulk insert into one collection; all rows or none."""
        spec = COLLECTIONS[collection]
        if not rows:
            return GatewayResult(data=())
        outbound = [_outbound(r) for r in rows]

        def run() -> Tuple[Any, ...]:
            created = self._store.insert_many(collection, outbound)
            return tuple(record_from_row(spec.record_type, to_snake_keys(r)) for r in created)

        return await self._call("create", collection, run)

    async def update_one(
        self, collection: str, record_id: str, fields: Mapping[str, Any],
    ) -> GatewayResult[Any]:
        spec = COLLECTIONS[collection]
        changes = _outbound(fields)

        def run() -> Any:
            row = self._store.update(collection, record_id, changes)
            if row is None:
                raise RecordStoreError(NOT_FOUND)
            return record_from_row(spec.record_type, to_snake_keys(row))

        return await self._call("update", collection, run)

    async def delete_one(self, collection: str, record_id: str) -> Optional[str]:
        result = await self._call(
            "delete", collection, lambda: self._store.delete(collection, record_id),
        )
        return result.error

    async def delete_where(self, collection: str, column: str, value: Any) -> Optional[str]:
        """Delete every row of *collection* whose *column* equals *value*."""
        result = await self._call(
            "delete", collection,
            lambda: self._store.delete_where(collection, column, value),
        )
        return result.error

    # ------------------------------------------------------------------
    # Singletons
    # ------------------------------------------------------------------

    async def get_singleton(self, collection: str) -> GatewayResult[Any]:
        """The singleton record, or data=None when no row exists yet."""
        spec = SINGLETONS[collection]

        def run() -> Any:
            row = self._store.first(collection)
            if row is None:
                return None
            return record_from_row(spec.record_type, to_snake_keys(row))

        return await self._call("get", collection, run)

    async def upsert_singleton(self, collection: str, fields: Mapping[str, Any]) -> GatewayResult[Any]:
        """
        Update the existing singleton row in place, or insert the first one.
        The row's identity never changes once created.
        """
        spec = SINGLETONS[collection]
        changes = _outbound(fields)

        def run() -> Any:
            existing = self._store.first(collection)
            if existing is None:
                row = self._store.insert(collection, changes)
            else:
                row = self._store.update(collection, str(existing["id"]), changes)
                if row is None:
                    raise RecordStoreError(NOT_FOUND)
            return record_from_row(spec.record_type, to_snake_keys(row))

        return await self._call("upsert", collection, run)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _call(self, operation: str, collection: str, fn: Callable[[], T]) -> GatewayResult[T]:
        try:
            data = await asyncio.to_thread(fn)
        except RecordStoreError as exc:
            logger.warning(
                "%s %s failed: %s", operation, collection, exc,
                extra={"collection": collection},
            )
            return GatewayResult(error=_describe(exc))
        except Exception as exc:
            logger.exception(
                "Unexpected error during %s %s", operation, collection,
                extra={"collection": collection},
            )
            return GatewayResult(error=_describe(exc))
        return GatewayResult(data=data)
