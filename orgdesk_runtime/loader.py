# file: orgdesk_runtime/loader.py
"""
Initial Load Reconciler.

Fetches every collection and both singletons concurrently. Either all
calls succeed and a complete snapshot is built, or every failure is
folded into one message and no snapshot exists. retry() always re-runs
the whole fan-out.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import List, Optional

from orgdesk_kernel.domain_types import AppState
from orgdesk_kernel.registry import COLLECTIONS, SINGLETONS
from orgdesk_kernel.state import create_initial_state

from .gateway import GatewayResult, RemoteGateway

logger = logging.getLogger(__name__)


class LoadStatus(str, Enum):
    LOADING = "loading"
    FAILED = "failed"
    READY = "ready"


class InitialLoadReconciler:

    def __init__(self, gateway: RemoteGateway) -> None:
        self._gateway = gateway
        self._status = LoadStatus.LOADING
        self._state: Optional[AppState] = None
        self._error: Optional[str] = None
        self.attempts = 0

    @property
    def status(self) -> LoadStatus:
        return self._status

    @property
    def state(self) -> Optional[AppState]:
        """The loaded snapshot; None unless status is READY."""
        return self._state

    @property
    def error(self) -> Optional[str]:
        return self._error

    async def load(self) -> LoadStatus:
        self._status = LoadStatus.LOADING
        self._state = None
        self._error = None
        self.attempts += 1

        lists = list(COLLECTIONS.values())
        singles = list(SINGLETONS.values())
        results = await asyncio.gather(
            *(self._gateway.list_all(spec.name) for spec in lists),
            *(self._gateway.get_singleton(spec.name) for spec in singles),
            return_exceptions=True,
        )
        results = [_as_result(r) for r in results]

        errors: List[str] = [
            f"{spec.label}: {result.error}"
            for spec, result in zip(lists + singles, results)
            if not result.ok
        ]
        if errors:
            self._error = "Failed to load: " + "; ".join(errors)
            self._status = LoadStatus.FAILED
            logger.warning("Initial load failed (attempt %d): %s", self.attempts, self._error)
            return self._status

        list_results = results[:len(lists)]
        profile, settings = (r.data for r in results[len(lists):])
        self._state = create_initial_state(
            company_profile=profile,
            app_settings=settings,
            **{spec.state_field: r.data for spec, r in zip(lists, list_results)},
        )
        self._status = LoadStatus.READY
        logger.info(
            "Initial load complete (attempt %d): %s",
            self.attempts,
            ", ".join(f"{spec.state_field}={len(r.data)}" for spec, r in zip(lists, list_results)),
        )
        return self._status

    async def retry(self) -> LoadStatus:
        return await self.load()


def _as_result(value) -> GatewayResult:
    if isinstance(value, BaseException):
        logger.error("Unexpected error during initial load", exc_info=value)
        return GatewayResult(error=str(value) or value.__class__.__name__)
    return value
