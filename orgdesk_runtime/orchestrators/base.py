# file: orgdesk_runtime/orchestrators/base.py
"""
Shared orchestration shape.

Every write operation follows the same order:
  1. validate the form (invalid → no call, no notification)
  2. business-rule guard (rejected → error notification, no call)
  3. saving flag (second call while one is outstanding → busy, no call)
  4. gateway call(s)
  5. failure → error notification, snapshot untouched
     success → dispatch, success notification

Nothing raises past an orchestrator: unexpected exceptions are logged,
notified and returned as a failed outcome.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional

from orgdesk_kernel.actions import BaseAction
from orgdesk_kernel.store import Store

from ..gateway import GatewayResult, RemoteGateway
from ..notifications import NotificationKind, Notifier
from ..two_phase import NO_RECORD, TwoPhaseResult

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error"
BUSY_MESSAGE = "A save is already in progress"


class OutcomeStatus(str, Enum):
    SAVED = "saved"
    PARTIAL = "partial"
    FAILED = "failed"
    REJECTED = "rejected"
    INVALID = "invalid"
    BUSY = "busy"


@dataclass(frozen=True)
class MutationOutcome:
    status: OutcomeStatus
    message: str = ""
    record: Any = None

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.SAVED

    @classmethod
    def invalid(cls, message: str) -> "MutationOutcome":
        return cls(OutcomeStatus.INVALID, message)


class BaseOrchestrator:
    """Holds the collaborators and the per-screen saving flag."""

    def __init__(self, gateway: RemoteGateway, store: Store, notifier: Notifier) -> None:
        self._gateway = gateway
        self._store = store
        self._notifier = notifier
        self._saving = False

    @property
    def saving(self) -> bool:
        return self._saving

    @property
    def state(self):
        return self._store.state

    # -- Saving flag --------------------------------------------------------

    async def _submit(
        self, label: str, body: Callable[[], Awaitable[MutationOutcome]],
    ) -> MutationOutcome:
        if self._saving:
            logger.info("Ignoring %s: a save is already in progress", label)
            return MutationOutcome(OutcomeStatus.BUSY, BUSY_MESSAGE)
        self._saving = True
        try:
            return await body()
        except Exception as exc:
            logger.exception("Unexpected error during %s", label)
            return self._fail(f"Failed to {label}: {str(exc) or exc.__class__.__name__}")
        finally:
            self._saving = False

    # -- Outcomes -----------------------------------------------------------

    def _fail(self, message: str) -> MutationOutcome:
        self._notifier.notify(message, NotificationKind.ERROR)
        return MutationOutcome(OutcomeStatus.FAILED, message)

    def _reject(self, message: str) -> MutationOutcome:
        self._notifier.notify(message, NotificationKind.ERROR)
        return MutationOutcome(OutcomeStatus.REJECTED, message)

    def _commit(self, action: BaseAction, message: str, record: Any = None) -> MutationOutcome:
        self._store.dispatch(action)
        self._notifier.notify(message, NotificationKind.SUCCESS)
        return MutationOutcome(OutcomeStatus.SAVED, message, record)

    def _commit_partial(self, action: BaseAction, message: str, record: Any = None) -> MutationOutcome:
        self._store.dispatch(action)
        self._notifier.notify(message, NotificationKind.ERROR)
        return MutationOutcome(OutcomeStatus.PARTIAL, message, record)

    # -- Single-record helpers ----------------------------------------------

    async def _create(
        self,
        collection: str,
        fields: Mapping[str, Any],
        make_action: Callable[[Any], BaseAction],
        verb: str,
        success: str,
    ) -> MutationOutcome:
        result = await self._gateway.create_one(collection, fields)
        return self._finish(result, make_action, verb, success)

    async def _update(
        self,
        collection: str,
        record_id: str,
        fields: Mapping[str, Any],
        make_action: Callable[[Any], BaseAction],
        verb: str,
        success: str,
    ) -> MutationOutcome:
        result = await self._gateway.update_one(collection, record_id, fields)
        return self._finish(result, make_action, verb, success)

    async def _delete(
        self,
        collection: str,
        record_id: str,
        action: BaseAction,
        verb: str,
        success: str,
    ) -> MutationOutcome:
        error = await self._gateway.delete_one(collection, record_id)
        if error:
            return self._fail(f"Failed to {verb}: {error}")
        return self._commit(action, success)

    def _finish(
        self,
        result: GatewayResult,
        make_action: Callable[[Any], BaseAction],
        verb: str,
        success: str,
    ) -> MutationOutcome:
        if not result.ok or result.data is None:
            return self._fail(f"Failed to {verb}: {result.error or UNKNOWN_ERROR}")
        return self._commit(make_action(result.data), success, result.data)

    # -- Parent + children --------------------------------------------------

    def _finish_two_phase(
        self,
        result: TwoPhaseResult,
        make_action: Callable[[Any, tuple], BaseAction],
        entity: str,
        children_noun: str,
        creating: bool,
    ) -> MutationOutcome:
        """
        Translate a two-phase write into dispatch + notification:
          parent failed   → failed, nothing dispatched
          clear failed    → failed, nothing dispatched
          insert failed   → partial, parent dispatched with no children
          complete        → saved, parent and children dispatched
        """
        done = "created" if creating else "updated"
        if result.parent_error is not None:
            verb = "create" if creating else "update"
            error = result.parent_error if result.parent_error != NO_RECORD else UNKNOWN_ERROR
            return self._fail(f"Failed to {verb} {entity.lower()}: {error}")
        if result.clear_error is not None:
            return self._fail(
                f"{entity} {done}, but failed to update {children_noun}: {result.clear_error}"
            )
        if result.children_error is not None:
            return self._commit_partial(
                make_action(result.parent, ()),
                f"{entity} {done}, but failed to add {children_noun}: {result.children_error}",
                result.parent,
            )
        return self._commit(
            make_action(result.parent, result.children), f"{entity} {done}", result.parent,
        )


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()
