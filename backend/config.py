# file: backend/config.py
"""
Backend configuration.

Values come from the process environment; a ``backend/.env`` file is
loaded first when it exists, without overriding variables already set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

ENV_PATH = os.path.join(os.path.dirname(__file__), ".env")

RECORD_STORE_POSTGRES = "postgres"
RECORD_STORE_MEMORY = "memory"


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    database_url: str = ""
    frontend_url: str = "http://localhost:3000"
    record_store: str = RECORD_STORE_POSTGRES
    ensure_schema: bool = True
    database_ssl: bool = True
    log_level: str = "INFO"
    log_format: str = "readable"

    @property
    def json_logs(self) -> bool:
        return self.log_format.lower() == "json"

    @classmethod
    def from_env(cls, env_path: str = ENV_PATH) -> "Settings":
        if os.path.exists(env_path):
            load_dotenv(env_path)
        record_store = os.environ.get("RECORD_STORE", RECORD_STORE_POSTGRES).strip().lower()
        if record_store not in (RECORD_STORE_POSTGRES, RECORD_STORE_MEMORY):
            raise ValueError(
                f"RECORD_STORE must be {RECORD_STORE_POSTGRES!r} or {RECORD_STORE_MEMORY!r}, "
                f"got {record_store!r}"
            )
        return cls(
            database_url=os.environ.get("DATABASE_URL", ""),
            frontend_url=os.environ.get("FRONTEND_URL", "http://localhost:3000"),
            record_store=record_store,
            ensure_schema=_flag(os.environ.get("ENSURE_SCHEMA", "true")),
            database_ssl=_flag(os.environ.get("DATABASE_SSL", "true")),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            log_format=os.environ.get("LOG_FORMAT", "readable"),
        )
