"""
Step-list editing for the workflow form.

Drafts are immutable tuples of StepDraft. Every operation returns a new
tuple whose step orders are exactly 1..N.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from .domain_types import AppState


@dataclass(frozen=True)
class StepDraft:
    responsibility_id: str
    step_order: int = 0


Drafts = Tuple[StepDraft, ...]


def renumber(drafts: Iterable[StepDraft]) -> Drafts:
    """Keep list order, rewrite step_order to 1..N."""
    return tuple(
        StepDraft(d.responsibility_id, i)
        for i, d in enumerate(drafts, start=1)
    )


def drafts_for_workflow(state: AppState, workflow_id: str) -> Drafts:
    """Current steps of a workflow as drafts, in step order."""
    return renumber(
        StepDraft(s.responsibility_id, s.step_order)
        for s in state.steps_of(workflow_id)
    )


def add_step(drafts: Drafts, responsibility_id: str) -> Drafts:
    if not responsibility_id:
        return renumber(drafts)
    return renumber(tuple(drafts) + (StepDraft(responsibility_id),))


def remove_step(drafts: Drafts, index: int) -> Drafts:
    if not 0 <= index < len(drafts):
        return renumber(drafts)
    return renumber(d for i, d in enumerate(drafts) if i != index)


def move_step(drafts: Drafts, index: int, direction: int) -> Drafts:
    """Swap the step at *index* with its neighbour *direction* places away."""
    target = index + direction
    items = list(drafts)
    if not (0 <= index < len(items) and 0 <= target < len(items)):
        return renumber(items)
    items[index], items[target] = items[target], items[index]
    return renumber(items)
