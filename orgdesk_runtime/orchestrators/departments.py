# file: orgdesk_runtime/orchestrators/departments.py
"""Department screen: add, rename, delete and manager assignment."""

from __future__ import annotations

from typing import Optional

from orgdesk_kernel import actions as a
from orgdesk_kernel.guards import can_manage, check_department_delete

from .base import UNKNOWN_ERROR, BaseOrchestrator, MutationOutcome, is_blank

NOT_ELIGIBLE_MANAGER = "Select a staff member at or under the manager grade threshold"


class DepartmentOrchestrator(BaseOrchestrator):

    async def add(self, name: str, manager_id: Optional[str] = None) -> MutationOutcome:
        if is_blank(name):
            return MutationOutcome.invalid("Department name is required")
        fields = {"name": name.strip(), "manager_id": manager_id or None}

        async def body() -> MutationOutcome:
            return await self._create(
                "department", fields, lambda d: a.AddDepartment(d),
                "add department", "Department added",
            )

        return await self._submit("add department", body)

    async def update(self, department_id: str, name: str) -> MutationOutcome:
        if is_blank(name) or not department_id:
            return MutationOutcome.invalid("Department name is required")

        async def body() -> MutationOutcome:
            return await self._update(
                "department", department_id, {"name": name.strip()},
                lambda d: a.UpdateDepartment(d),
                "update department", "Department updated",
            )

        return await self._submit("update department", body)

    async def delete(self, department_id: str) -> MutationOutcome:
        rejection = check_department_delete(self.state, department_id)
        if rejection:
            return self._reject(rejection)

        async def body() -> MutationOutcome:
            return await self._delete(
                "department", department_id, a.DeleteDepartment(department_id),
                "delete department", "Department deleted",
            )

        return await self._submit("delete department", body)

    async def assign_manager(self, department_id: str, staff_id: Optional[str]) -> MutationOutcome:
        """Set or clear (staff_id=None) a department's manager."""
        if not any(d.id == department_id for d in self.state.departments):
            return MutationOutcome.invalid("Select a department")
        staff_id = staff_id or None
        if staff_id is not None and not any(s.id == staff_id for s in self.state.staff):
            return MutationOutcome.invalid("Select a staff member")
        if staff_id is not None and not can_manage(self.state, staff_id):
            return MutationOutcome.invalid(NOT_ELIGIBLE_MANAGER)

        async def body() -> MutationOutcome:
            result = await self._gateway.update_one(
                "department", department_id, {"manager_id": staff_id},
            )
            if not result.ok or result.data is None:
                return self._fail(f"Failed to assign manager: {result.error or UNKNOWN_ERROR}")
            return self._commit(a.AssignManager(department_id, staff_id), "Manager updated", result.data)

        return await self._submit("assign manager", body)
