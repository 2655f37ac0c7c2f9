# file: orgdesk_runtime/orchestrators/users.py
"""User management: role changes."""

from __future__ import annotations

from orgdesk_kernel import actions as a
from orgdesk_kernel.domain_types import UserRole

from .base import UNKNOWN_ERROR, BaseOrchestrator, MutationOutcome


class UserOrchestrator(BaseOrchestrator):

    async def update_role(self, user_id: str, role: UserRole) -> MutationOutcome:
        if not any(u.id == user_id for u in self.state.users):
            return MutationOutcome.invalid("Select a user")
        try:
            role = UserRole(role)
        except ValueError:
            return MutationOutcome.invalid("Select a role")

        async def body() -> MutationOutcome:
            result = await self._gateway.update_one("app_user", user_id, {"role": role})
            if not result.ok or result.data is None:
                return self._fail(f"Failed to update role: {result.error or UNKNOWN_ERROR}")
            return self._commit(a.UpdateUserRole(user_id, role), "Role updated", result.data)

        return await self._submit("update role", body)
