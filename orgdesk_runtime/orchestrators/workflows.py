# file: orgdesk_runtime/orchestrators/workflows.py
"""Workflow manager: workflow row plus its ordered step rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from orgdesk_kernel import actions as a
from orgdesk_kernel.domain_types import WorkflowStatus
from orgdesk_kernel.workflow_steps import StepDraft, renumber

from ..two_phase import write_with_children
from .base import BaseOrchestrator, MutationOutcome, is_blank


@dataclass(frozen=True)
class WorkflowForm:
    name: str
    owner_department_id: str
    description: str = ""
    status: WorkflowStatus = WorkflowStatus.DRAFT
    steps: Tuple[StepDraft, ...] = ()

    def missing(self) -> Optional[str]:
        if is_blank(self.name):
            return "Workflow name is required"
        if not self.owner_department_id:
            return "Select an owner department"
        if any(not s.responsibility_id for s in self.steps):
            return "Every step needs a responsibility"
        return None

    def fields(self) -> dict:
        return {
            "name": self.name.strip(),
            "description": (self.description or "").strip(),
            "owner_department_id": self.owner_department_id,
            "status": WorkflowStatus(self.status),
        }


class WorkflowOrchestrator(BaseOrchestrator):

    def _insert_steps(self, form: WorkflowForm):
        async def insert(workflow):
            rows = [
                {
                    "workflow_id": workflow.id,
                    "responsibility_id": d.responsibility_id,
                    "step_order": d.step_order,
                }
                for d in renumber(form.steps)
            ]
            return await self._gateway.create_many("workflow_step", rows)
        return insert

    async def add(self, form: WorkflowForm) -> MutationOutcome:
        problem = form.missing()
        if problem:
            return MutationOutcome.invalid(problem)

        async def body() -> MutationOutcome:
            result = await write_with_children(
                lambda: self._gateway.create_one("workflow", form.fields()),
                self._insert_steps(form),
            )
            return self._finish_two_phase(
                result, lambda wf, steps: a.AddWorkflow(wf, tuple(steps)),
                "Workflow", "steps", creating=True,
            )

        return await self._submit("create workflow", body)

    async def update(self, workflow_id: str, form: WorkflowForm) -> MutationOutcome:
        """Update the workflow row, then replace its whole step list."""
        problem = form.missing()
        if problem:
            return MutationOutcome.invalid(problem)

        async def clear(workflow) -> Optional[str]:
            return await self._gateway.delete_where("workflow_step", "workflow_id", workflow_id)

        async def body() -> MutationOutcome:
            result = await write_with_children(
                lambda: self._gateway.update_one("workflow", workflow_id, form.fields()),
                self._insert_steps(form),
                clear,
            )
            return self._finish_two_phase(
                result, lambda wf, steps: a.UpdateWorkflow(wf, tuple(steps)),
                "Workflow", "steps", creating=False,
            )

        return await self._submit("update workflow", body)

    async def delete(self, workflow_id: str) -> MutationOutcome:
        async def body() -> MutationOutcome:
            return await self._delete(
                "workflow", workflow_id, a.DeleteWorkflow(workflow_id),
                "delete workflow", "Workflow deleted",
            )

        return await self._submit("delete workflow", body)
