# file: orgdesk_runtime/orchestrators/functions.py
"""Function screen: add, edit and delete organisational functions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from orgdesk_kernel import actions as a
from orgdesk_kernel.domain_types import FunctionType
from orgdesk_kernel.guards import check_function_delete

from .base import BaseOrchestrator, MutationOutcome, is_blank


@dataclass(frozen=True)
class FunctionForm:
    name: str
    department_id: str
    type: FunctionType = FunctionType.INTERNAL
    email: Optional[str] = None
    phone: Optional[str] = None

    def missing(self) -> Optional[str]:
        if is_blank(self.name):
            return "Function name is required"
        if not self.department_id:
            return "Select a department"
        return None

    def fields(self) -> dict:
        return {
            "name": self.name.strip(),
            "department_id": self.department_id,
            "type": FunctionType(self.type),
            "email": (self.email or "").strip() or None,
            "phone": (self.phone or "").strip() or None,
        }


class FunctionOrchestrator(BaseOrchestrator):

    async def add(self, form: FunctionForm) -> MutationOutcome:
        problem = form.missing()
        if problem:
            return MutationOutcome.invalid(problem)

        async def body() -> MutationOutcome:
            return await self._create(
                "function", form.fields(), lambda f: a.AddFunction(f),
                "add function", "Function added",
            )

        return await self._submit("add function", body)

    async def update(self, function_id: str, form: FunctionForm) -> MutationOutcome:
        problem = form.missing()
        if problem:
            return MutationOutcome.invalid(problem)

        async def body() -> MutationOutcome:
            return await self._update(
                "function", function_id, form.fields(), lambda f: a.UpdateFunction(f),
                "update function", "Function updated",
            )

        return await self._submit("update function", body)

    async def delete(self, function_id: str) -> MutationOutcome:
        rejection = check_function_delete(self.state, function_id)
        if rejection:
            return self._reject(rejection)

        async def body() -> MutationOutcome:
            return await self._delete(
                "function", function_id, a.DeleteFunction(function_id),
                "delete function", "Function deleted",
            )

        return await self._submit("delete function", body)
