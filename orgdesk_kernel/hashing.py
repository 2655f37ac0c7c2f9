"""
Organisation Dashboard Kernel — Canonical Hashing

Deterministic canonical serialization + SHA-256 hashing of a snapshot.
Clients use the hash as a change token: equal snapshots hash equal
regardless of the order records arrived in.

Rules:
  - Every collection sorted by id
  - Record fields in dataclass order, enums as their values
  - UTF-8 JSON, no whitespace
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict

from .domain_types import AppState, record_to_row
from .registry import COLLECTIONS

KERNEL_VERSION = 1


def canonical_serialize(state: AppState) -> bytes:
    obj = _build_canonical_dict(state)
    return json.dumps(obj, ensure_ascii=True, separators=(",", ":"), sort_keys=False).encode("utf-8")


def canonical_hash(state: AppState) -> str:
    """SHA-256 of canonical serialization. Lowercase hex string."""
    return hashlib.sha256(canonical_serialize(state)).hexdigest()


def _build_canonical_dict(state: AppState) -> Dict[str, Any]:
    out: Dict[str, Any] = {"kernel_version": KERNEL_VERSION}
    for spec in COLLECTIONS.values():
        records = sorted(getattr(state, spec.state_field), key=lambda r: r.id)
        out[spec.state_field] = [record_to_row(r) for r in records]
    out["company_profile"] = record_to_row(state.company_profile)
    out["app_settings"] = record_to_row(state.app_settings)
    return out
