# file: orgdesk_runtime/two_phase.py
"""
Two-phase write — parent row first, then the parent's child rows.

There is no transaction spanning both collections. The steps run
strictly in sequence:

  1. parent_write()                 — failure: nothing else is attempted
  2. clear_children(parent)         — updates only; failure: stop, no insert
  3. insert_children(parent)        — failure: parent stands, children empty

The caller decides what to dispatch from the returned TwoPhaseResult.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple

from .gateway import GatewayResult

NO_RECORD = "No record returned"

ParentWrite = Callable[[], Awaitable[GatewayResult[Any]]]
ChildInsert = Callable[[Any], Awaitable[GatewayResult[Tuple[Any, ...]]]]
ChildClear = Callable[[Any], Awaitable[Optional[str]]]


@dataclass(frozen=True)
class TwoPhaseResult:
    parent: Any = None
    children: Tuple[Any, ...] = ()
    parent_error: Optional[str] = None
    clear_error: Optional[str] = None
    children_error: Optional[str] = None

    @property
    def complete(self) -> bool:
        return self.parent is not None and not (
            self.parent_error or self.clear_error or self.children_error
        )


async def write_with_children(
    parent_write: ParentWrite,
    insert_children: ChildInsert,
    clear_children: Optional[ChildClear] = None,
) -> TwoPhaseResult:
    parent_result = await parent_write()
    if not parent_result.ok or parent_result.data is None:
        return TwoPhaseResult(parent_error=parent_result.error or NO_RECORD)
    parent = parent_result.data

    if clear_children is not None:
        clear_error = await clear_children(parent)
        if clear_error:
            return TwoPhaseResult(parent=parent, clear_error=clear_error)

    children_result = await insert_children(parent)
    if not children_result.ok:
        return TwoPhaseResult(parent=parent, children_error=children_result.error)
    return TwoPhaseResult(parent=parent, children=tuple(children_result.data or ()))
