# file: orgdesk_runtime/orchestrators/staff.py
"""Staff screen: add, edit and delete staff members."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from orgdesk_kernel import actions as a
from orgdesk_kernel.guards import check_staff_delete

from .base import BaseOrchestrator, MutationOutcome, is_blank


@dataclass(frozen=True)
class StaffForm:
    first_name: str
    last_name: str
    department_id: str
    primary_function_id: str
    grade_id: Optional[str] = None
    secondary_function_id: Optional[str] = None
    additional_function_ids: Tuple[str, ...] = ()

    def missing(self) -> Optional[str]:
        if is_blank(self.first_name) or is_blank(self.last_name):
            return "First and last name are required"
        if not self.department_id:
            return "Select a department"
        if not self.primary_function_id:
            return "Select a primary function"
        return None

    def fields(self) -> dict:
        return {
            "first_name": self.first_name.strip(),
            "last_name": self.last_name.strip(),
            "department_id": self.department_id,
            "grade_id": self.grade_id or None,
            "primary_function_id": self.primary_function_id,
            "secondary_function_id": self.secondary_function_id or None,
            "additional_function_ids": list(self.additional_function_ids),
        }


class StaffOrchestrator(BaseOrchestrator):

    async def add(self, form: StaffForm) -> MutationOutcome:
        problem = form.missing()
        if problem:
            return MutationOutcome.invalid(problem)

        async def body() -> MutationOutcome:
            return await self._create(
                "staff", form.fields(), lambda s: a.AddStaff(s),
                "add staff", "Staff member added",
            )

        return await self._submit("add staff", body)

    async def update(self, staff_id: str, form: StaffForm) -> MutationOutcome:
        problem = form.missing()
        if problem:
            return MutationOutcome.invalid(problem)

        async def body() -> MutationOutcome:
            return await self._update(
                "staff", staff_id, form.fields(), lambda s: a.UpdateStaff(s),
                "update staff", "Staff member updated",
            )

        return await self._submit("update staff", body)

    async def delete(self, staff_id: str) -> MutationOutcome:
        rejection = check_staff_delete(self.state, staff_id)
        if rejection:
            return self._reject(rejection)

        async def body() -> MutationOutcome:
            return await self._delete(
                "staff", staff_id, a.DeleteStaff(staff_id),
                "delete staff", "Staff member deleted",
            )

        return await self._submit("delete staff", body)
