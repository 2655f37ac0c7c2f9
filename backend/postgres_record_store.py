# file: backend/postgres_record_store.py
"""
Supabase (PostgreSQL) Record Store.

Same interface as MemoryRecordStore, PostgreSQL storage via pg8000.

Stateless: no in-memory caching. Every read hits the DB.
Thread-safe via connection-per-operation pattern, so the gateway can run
calls on worker threads concurrently.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, List, Optional, Sequence

import pg8000.exceptions
import pg8000.native

from orgdesk_kernel.registry import COLLECTIONS, SINGLETONS
from orgdesk_runtime.record_store import RecordStoreError, Row

logger = logging.getLogger(__name__)

_UID_TABLES = [spec.name for spec in COLLECTIONS.values() if spec.has_uid]


def _uid_column(table: str) -> str:
    return f"uid TEXT NOT NULL DEFAULT LPAD(nextval('{table}_uid_seq')::text, 3, '0')"


_INIT_SQL = "".join(
    f"CREATE SEQUENCE IF NOT EXISTS {table}_uid_seq;\n" for table in _UID_TABLES
) + f"""
CREATE TABLE IF NOT EXISTS department (
    id          TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    {_uid_column('department')},
    name        TEXT NOT NULL,
    manager_id  TEXT,
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS function (
    id             TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    {_uid_column('function')},
    name           TEXT NOT NULL,
    department_id  TEXT NOT NULL,
    type           TEXT NOT NULL DEFAULT 'Internal',
    email          TEXT,
    phone          TEXT,
    created_at     TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS responsibility (
    id                    TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    {_uid_column('responsibility')},
    name                  TEXT NOT NULL,
    description           TEXT NOT NULL DEFAULT '',
    function_id           TEXT NOT NULL,
    sop_link              TEXT NOT NULL DEFAULT '',
    is_compliance_tagged  BOOLEAN NOT NULL DEFAULT FALSE,
    compliance_tag_id     TEXT,
    created_at            TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS grade (
    id          TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    level       INTEGER NOT NULL,
    name        TEXT NOT NULL,
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS staff (
    id                       TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    {_uid_column('staff')},
    first_name               TEXT NOT NULL,
    last_name                TEXT NOT NULL,
    department_id            TEXT NOT NULL,
    grade_id                 TEXT,
    primary_function_id      TEXT NOT NULL,
    secondary_function_id    TEXT,
    additional_function_ids  TEXT[] NOT NULL DEFAULT '{{}}',
    created_at               TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS cross_functional_team (
    id                       TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    {_uid_column('cross_functional_team')},
    name                     TEXT NOT NULL,
    purpose                  TEXT NOT NULL DEFAULT '',
    reporting_department_id  TEXT NOT NULL,
    lead_id                  TEXT,
    created_at               TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS team_member (
    id          TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    team_id     TEXT NOT NULL REFERENCES cross_functional_team(id) ON DELETE CASCADE,
    staff_id    TEXT NOT NULL,
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS workflow (
    id                   TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    {_uid_column('workflow')},
    name                 TEXT NOT NULL,
    description          TEXT NOT NULL DEFAULT '',
    owner_department_id  TEXT NOT NULL,
    status               TEXT NOT NULL DEFAULT 'Draft',
    created_at           TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS workflow_step (
    id                 TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    workflow_id        TEXT NOT NULL REFERENCES workflow(id) ON DELETE CASCADE,
    responsibility_id  TEXT NOT NULL,
    step_order         INTEGER NOT NULL,
    created_at         TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE(workflow_id, step_order)
);

CREATE TABLE IF NOT EXISTS compliance_tag (
    id          TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    name        TEXT NOT NULL,
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS company_number (
    id            TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    phone_number  TEXT NOT NULL UNIQUE,
    created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS company_number_allocation (
    id                 TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    company_number_id  TEXT NOT NULL REFERENCES company_number(id) ON DELETE CASCADE,
    assign_to_type     TEXT NOT NULL,
    staff_id           TEXT,
    function_id        TEXT,
    department_id      TEXT,
    created_at         TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS app_user (
    id          TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    username    TEXT NOT NULL,
    email       TEXT NOT NULL,
    role        TEXT NOT NULL DEFAULT 'Staff',
    staff_id    TEXT,
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS company_profile (
    id          TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    name        TEXT NOT NULL DEFAULT '',
    location    TEXT NOT NULL DEFAULT '',
    website     TEXT NOT NULL DEFAULT '',
    logo_url    TEXT NOT NULL DEFAULT '',
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS app_settings (
    id                       TEXT PRIMARY KEY DEFAULT gen_random_uuid()::text,
    email_domain             TEXT NOT NULL DEFAULT 'company.com',
    email_format             TEXT NOT NULL DEFAULT 'firstname.L',
    max_manager_grade_level  INTEGER NOT NULL DEFAULT 1,
    created_at               TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""

# Column → SQL type for parameters whose type pg8000 cannot infer
# (an empty list has no element type).
_CASTS = {"additional_function_ids": "text[]"}


def _columns_of(table: str) -> frozenset:
    spec = COLLECTIONS.get(table) or SINGLETONS.get(table)
    if spec is None:
        raise RecordStoreError(f'relation "{table}" does not exist')
    return frozenset(f.name for f in dataclasses.fields(spec.record_type))


def _check_columns(table: str, columns) -> None:
    known = _columns_of(table)
    for column in columns:
        if column not in known:
            raise RecordStoreError(
                f'column "{column}" of relation "{table}" does not exist'
            )


def _placeholder(column: str, param: str) -> str:
    cast = _CASTS.get(column)
    return f"CAST(:{param} AS {cast})" if cast else f":{param}"


def _error_message(exc: Exception) -> str:
    # pg8000 puts the server's error fields in args[0]; "M" is the message.
    if exc.args and isinstance(exc.args[0], dict):
        return exc.args[0].get("M") or str(exc)
    return str(exc) or exc.__class__.__name__


class PostgresRecordStore:
    """
    PostgreSQL-backed record store for Supabase.

    Table and column names come from the collection registry only, never
    from callers, so identifiers can be interpolated safely; values are
    always bound parameters.
    """

    def __init__(self, database_url: str, ensure_schema: bool = True, ssl: bool = True) -> None:
        self._database_url = database_url
        self._ssl = ssl
        if ensure_schema:
            self._ensure_schema()

    def _get_conn(self):
        # Manual parser: urlparse chokes on special chars ([], @) in passwords
        url = self._database_url
        # Strip scheme (postgresql:// or postgres://)
        url = url.split("://", 1)[1]
        # Split at LAST @ to separate credentials from host (password may contain @)
        at_idx = url.rfind("@")
        credentials = url[:at_idx]
        host_part = url[at_idx + 1:]
        # Split credentials at FIRST : to get user and password
        colon_idx = credentials.find(":")
        user = credentials[:colon_idx]
        password = credentials[colon_idx + 1:]
        # Split host_part into host:port/database
        host_port, _, database = host_part.partition("/")
        database = database.split("?", 1)[0]
        host, _, port_str = host_port.partition(":")
        try:
            return pg8000.native.Connection(
                user=user,
                password=password,
                host=host,
                port=int(port_str or 5432),
                database=database or "postgres",
                ssl_context=self._ssl or None,
            )
        except (pg8000.exceptions.Error, OSError) as exc:
            raise RecordStoreError(f"connection failed: {_error_message(exc)}") from exc

    def _run(self, sql: str, **params: Any) -> List[Row]:
        """Run one statement on a fresh connection; rows come back as dicts."""
        conn = self._get_conn()
        try:
            rows = conn.run(sql, **params)
            if not conn.columns:
                return []
            names = [c["name"] for c in conn.columns]
            return [dict(zip(names, row)) for row in rows or []]
        except pg8000.exceptions.Error as exc:
            logger.debug("Statement failed: %s", sql)
            raise RecordStoreError(_error_message(exc)) from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            # pg8000 native runs one statement per .run(), so execute them sequentially
            for stmt in _INIT_SQL.split(";"):
                if stmt.strip():
                    conn.run(stmt)
        except pg8000.exceptions.Error as exc:
            raise RecordStoreError(_error_message(exc)) from exc
        finally:
            conn.close()
        logger.info("Database schema ensured")

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def select_all(self, collection: str) -> List[Row]:
        _columns_of(collection)
        return self._run(f'SELECT * FROM "{collection}" ORDER BY created_at, id')

    def first(self, collection: str) -> Optional[Row]:
        _columns_of(collection)
        rows = self._run(f'SELECT * FROM "{collection}" ORDER BY created_at, id LIMIT 1')
        return rows[0] if rows else None

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def insert(self, collection: str, row: Row) -> Row:
        return self.insert_many(collection, [row])[0]

    def insert_many(self, collection: str, rows: Sequence[Row]) -> List[Row]:
        """One multi-row INSERT, so the rows land together or not at all."""
        if not rows:
            return []
        columns = sorted({c for r in rows for c in r if c != "id"})
        _check_columns(collection, columns)
        if not columns:
            values_sql = ", ".join("(DEFAULT)" for _ in rows)
            sql = f'INSERT INTO "{collection}" (id) VALUES {values_sql} RETURNING *'
            return self._run(sql)

        params: Dict[str, Any] = {}
        tuples = []
        for i, row in enumerate(rows):
            slots = []
            for j, column in enumerate(columns):
                name = f"p{i}_{j}"
                params[name] = row.get(column)
                slots.append(_placeholder(column, name))
            tuples.append("(" + ", ".join(slots) + ")")
        column_sql = ", ".join(f'"{c}"' for c in columns)
        sql = (
            f'INSERT INTO "{collection}" ({column_sql}) '
            f'VALUES {", ".join(tuples)} RETURNING *'
        )
        return self._run(sql, **params)

    def update(self, collection: str, record_id: str, changes: Row) -> Optional[Row]:
        changes = {k: v for k, v in changes.items() if k != "id"}
        _check_columns(collection, changes)
        if not changes:
            rows = self._run(f'SELECT * FROM "{collection}" WHERE id = :id', id=record_id)
            return rows[0] if rows else None
        params = {f"p{i}": v for i, v in enumerate(changes.values())}
        assignments = ", ".join(
            f'"{column}" = {_placeholder(column, f"p{i}")}'
            for i, column in enumerate(changes)
        )
        rows = self._run(
            f'UPDATE "{collection}" SET {assignments} WHERE id = :id RETURNING *',
            id=record_id, **params,
        )
        return rows[0] if rows else None

    def delete(self, collection: str, record_id: str) -> None:
        _columns_of(collection)
        self._run(f'DELETE FROM "{collection}" WHERE id = :id', id=record_id)

    def delete_where(self, collection: str, column: str, value: Any) -> int:
        _check_columns(collection, [column])
        rows = self._run(
            f'DELETE FROM "{collection}" WHERE "{column}" = :value RETURNING id',
            value=value,
        )
        return len(rows)
