# file: orgdesk_runtime/orchestrators/teams.py
"""Cross-functional team screen: team row plus its member rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from orgdesk_kernel import actions as a

from ..two_phase import write_with_children
from .base import BaseOrchestrator, MutationOutcome, is_blank


@dataclass(frozen=True)
class TeamForm:
    name: str
    reporting_department_id: str
    purpose: str = ""
    lead_id: Optional[str] = None
    member_ids: Tuple[str, ...] = ()

    def missing(self) -> Optional[str]:
        if is_blank(self.name):
            return "Team name is required"
        if not self.reporting_department_id:
            return "Select a reporting department"
        return None

    def fields(self) -> dict:
        return {
            "name": self.name.strip(),
            "purpose": (self.purpose or "").strip(),
            "reporting_department_id": self.reporting_department_id,
            "lead_id": self.lead_id or None,
        }

    def unique_member_ids(self) -> Tuple[str, ...]:
        return tuple(dict.fromkeys(m for m in self.member_ids if m))


class TeamOrchestrator(BaseOrchestrator):

    def _insert_members(self, form: TeamForm):
        async def insert(team):
            rows = [{"team_id": team.id, "staff_id": sid} for sid in form.unique_member_ids()]
            return await self._gateway.create_many("team_member", rows)
        return insert

    async def add(self, form: TeamForm) -> MutationOutcome:
        problem = form.missing()
        if problem:
            return MutationOutcome.invalid(problem)

        async def body() -> MutationOutcome:
            result = await write_with_children(
                lambda: self._gateway.create_one("cross_functional_team", form.fields()),
                self._insert_members(form),
            )
            return self._finish_two_phase(
                result, lambda team, members: a.AddTeam(team, tuple(members)),
                "Team", "members", creating=True,
            )

        return await self._submit("create team", body)

    async def update(self, team_id: str, form: TeamForm) -> MutationOutcome:
        """Update the team row, then replace its whole member set."""
        problem = form.missing()
        if problem:
            return MutationOutcome.invalid(problem)

        async def clear(team) -> Optional[str]:
            return await self._gateway.delete_where("team_member", "team_id", team_id)

        async def body() -> MutationOutcome:
            result = await write_with_children(
                lambda: self._gateway.update_one("cross_functional_team", team_id, form.fields()),
                self._insert_members(form),
                clear,
            )
            return self._finish_two_phase(
                result, lambda team, members: a.UpdateTeam(team, tuple(members)),
                "Team", "members", creating=False,
            )

        return await self._submit("update team", body)

    async def delete(self, team_id: str) -> MutationOutcome:
        # Member rows go with the team: remote cascade, local DeleteTeam.
        async def body() -> MutationOutcome:
            return await self._delete(
                "cross_functional_team", team_id, a.DeleteTeam(team_id),
                "delete team", "Team deleted",
            )

        return await self._submit("delete team", body)
