# file: orgdesk_runtime/orchestrators/responsibilities.py
"""Responsibility screen: add, edit, delete and transfer between functions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from orgdesk_kernel import actions as a
from orgdesk_kernel.guards import check_responsibility_delete

from .base import UNKNOWN_ERROR, BaseOrchestrator, MutationOutcome, is_blank


@dataclass(frozen=True)
class ResponsibilityForm:
    name: str
    function_id: str
    description: str = ""
    sop_link: str = ""
    is_compliance_tagged: bool = False
    compliance_tag_id: Optional[str] = None

    def missing(self) -> Optional[str]:
        if is_blank(self.name):
            return "Responsibility name is required"
        if not self.function_id:
            return "Select a function"
        return None

    def fields(self) -> dict:
        # An untagged responsibility never keeps a tag reference.
        return {
            "name": self.name.strip(),
            "description": (self.description or "").strip(),
            "function_id": self.function_id,
            "sop_link": (self.sop_link or "").strip(),
            "is_compliance_tagged": bool(self.is_compliance_tagged),
            "compliance_tag_id": (
                self.compliance_tag_id or None if self.is_compliance_tagged else None
            ),
        }


class ResponsibilityOrchestrator(BaseOrchestrator):

    async def add(self, form: ResponsibilityForm) -> MutationOutcome:
        problem = form.missing()
        if problem:
            return MutationOutcome.invalid(problem)

        async def body() -> MutationOutcome:
            return await self._create(
                "responsibility", form.fields(), lambda r: a.AddResponsibility(r),
                "add responsibility", "Responsibility added",
            )

        return await self._submit("add responsibility", body)

    async def update(self, responsibility_id: str, form: ResponsibilityForm) -> MutationOutcome:
        problem = form.missing()
        if problem:
            return MutationOutcome.invalid(problem)

        async def body() -> MutationOutcome:
            return await self._update(
                "responsibility", responsibility_id, form.fields(),
                lambda r: a.UpdateResponsibility(r),
                "update responsibility", "Responsibility updated",
            )

        return await self._submit("update responsibility", body)

    async def delete(self, responsibility_id: str) -> MutationOutcome:
        rejection = check_responsibility_delete(self.state, responsibility_id)
        if rejection:
            return self._reject(rejection)

        async def body() -> MutationOutcome:
            return await self._delete(
                "responsibility", responsibility_id,
                a.DeleteResponsibility(responsibility_id),
                "delete responsibility", "Responsibility deleted",
            )

        return await self._submit("delete responsibility", body)

    async def transfer(
        self,
        responsibility_id: str,
        new_function_id: str,
        department_id: Optional[str] = None,
    ) -> MutationOutcome:
        """
        Move a responsibility to another function. When *department_id*
        is given the target must be one of that department's functions.
        """
        if not any(r.id == responsibility_id for r in self.state.responsibilities):
            return MutationOutcome.invalid("Select a responsibility")
        allowed = [
            f for f in self.state.functions
            if department_id is None or f.department_id == department_id
        ]
        if not new_function_id or not any(f.id == new_function_id for f in allowed):
            return MutationOutcome.invalid("Select a function")

        async def body() -> MutationOutcome:
            result = await self._gateway.update_one(
                "responsibility", responsibility_id, {"function_id": new_function_id},
            )
            if not result.ok or result.data is None:
                return self._fail(
                    f"Failed to transfer responsibility: {result.error or UNKNOWN_ERROR}"
                )
            return self._commit(
                a.TransferResponsibility(responsibility_id, new_function_id),
                "Responsibility transferred",
                result.data,
            )

        return await self._submit("transfer responsibility", body)
