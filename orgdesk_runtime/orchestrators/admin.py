# file: orgdesk_runtime/orchestrators/admin.py
"""
Admin screens: grades, compliance tags, the company number pool with its
allocations, and the two singleton settings records.
"""

from __future__ import annotations

import dataclasses
from typing import List, Optional

from orgdesk_kernel import actions as a
from orgdesk_kernel.constants import MAX_NUMBER_RANGE, RANGE_SUFFIX_WIDTH
from orgdesk_kernel.domain_types import AssignToType, EmailFormat, allocation_targets
from orgdesk_kernel.guards import (
    check_company_number_delete,
    check_compliance_tag_delete,
    check_grade_delete,
)

from ..notifications import NotificationKind
from .base import (
    UNKNOWN_ERROR,
    BaseOrchestrator,
    MutationOutcome,
    OutcomeStatus,
    is_blank,
)

INVALID_RANGE = f"Invalid range (max {MAX_NUMBER_RANGE} numbers at a time)"


def _as_int(value) -> Optional[int]:
    """Form value as an int, or None when it is missing or not a number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Grades
# ---------------------------------------------------------------------------

class GradeOrchestrator(BaseOrchestrator):

    @staticmethod
    def _check(name: str, level: Optional[int]) -> Optional[str]:
        if is_blank(name):
            return "Grade name is required"
        if level is None or level < 0:
            return "Grade level must be 0 or higher"
        return None

    async def add(self, name: str, level: Optional[int]) -> MutationOutcome:
        level = _as_int(level)
        problem = self._check(name, level)
        if problem:
            return MutationOutcome.invalid(problem)

        async def body() -> MutationOutcome:
            return await self._create(
                "grade", {"name": name.strip(), "level": level},
                lambda g: a.AddGrade(g), "add grade", "Grade added",
            )

        return await self._submit("add grade", body)

    async def update(self, grade_id: str, name: str, level: Optional[int]) -> MutationOutcome:
        level = _as_int(level)
        problem = self._check(name, level)
        if problem:
            return MutationOutcome.invalid(problem)

        async def body() -> MutationOutcome:
            return await self._update(
                "grade", grade_id, {"name": name.strip(), "level": level},
                lambda g: a.UpdateGrade(g), "update grade", "Grade updated",
            )

        return await self._submit("update grade", body)

    async def delete(self, grade_id: str) -> MutationOutcome:
        rejection = check_grade_delete(self.state, grade_id)
        if rejection:
            return self._reject(rejection)

        async def body() -> MutationOutcome:
            return await self._delete(
                "grade", grade_id, a.DeleteGrade(grade_id), "delete grade", "Grade deleted",
            )

        return await self._submit("delete grade", body)


# ---------------------------------------------------------------------------
# Compliance tags
# ---------------------------------------------------------------------------

class ComplianceTagOrchestrator(BaseOrchestrator):

    async def add(self, name: str) -> MutationOutcome:
        if is_blank(name):
            return MutationOutcome.invalid("Tag name is required")

        async def body() -> MutationOutcome:
            return await self._create(
                "compliance_tag", {"name": name.strip()},
                lambda t: a.AddComplianceTag(t), "add tag", "Compliance tag added",
            )

        return await self._submit("add tag", body)

    async def update(self, tag_id: str, name: str) -> MutationOutcome:
        if is_blank(name):
            return MutationOutcome.invalid("Tag name is required")

        async def body() -> MutationOutcome:
            return await self._update(
                "compliance_tag", tag_id, {"name": name.strip()},
                lambda t: a.UpdateComplianceTag(t), "update tag", "Compliance tag updated",
            )

        return await self._submit("update tag", body)

    async def delete(self, tag_id: str) -> MutationOutcome:
        rejection = check_compliance_tag_delete(self.state, tag_id)
        if rejection:
            return self._reject(rejection)

        async def body() -> MutationOutcome:
            return await self._delete(
                "compliance_tag", tag_id, a.DeleteComplianceTag(tag_id),
                "delete tag", "Compliance tag deleted",
            )

        return await self._submit("delete tag", body)


# ---------------------------------------------------------------------------
# Company numbers and allocations
# ---------------------------------------------------------------------------

class CompanyNumberOrchestrator(BaseOrchestrator):

    async def add_number(self, phone_number: str) -> MutationOutcome:
        if is_blank(phone_number):
            return MutationOutcome.invalid("Phone number is required")

        async def body() -> MutationOutcome:
            return await self._create(
                "company_number", {"phone_number": phone_number.strip()},
                lambda n: a.AddCompanyNumbers((n,)), "add number", "Number added",
            )

        return await self._submit("add number", body)

    async def add_range(self, prefix: str, start: int, end: int) -> MutationOutcome:
        """
        Create prefix + zero-padded suffix for every value in start..end.
        Creates run one after another; the successes land in one dispatch.
        """
        start, end = _as_int(start), _as_int(end)
        if is_blank(prefix) or start is None or end is None:
            return MutationOutcome.invalid("Prefix, start and end are required")
        if start > end or end - start > MAX_NUMBER_RANGE - 1:
            return self._reject(INVALID_RANGE)
        prefix = prefix.strip()

        async def body() -> MutationOutcome:
            created: List = []
            failed: List[str] = []
            for i in range(start, end + 1):
                phone_number = f"{prefix}{str(i).zfill(RANGE_SUFFIX_WIDTH)}"
                result = await self._gateway.create_one(
                    "company_number", {"phone_number": phone_number},
                )
                if result.ok and result.data is not None:
                    created.append(result.data)
                else:
                    failed.append(phone_number)

            if created:
                self._store.dispatch(a.AddCompanyNumbers(tuple(created)))
            if not failed:
                message = f"Added {len(created)} numbers"
                self._notifier.notify(message, NotificationKind.SUCCESS)
                return MutationOutcome(OutcomeStatus.SAVED, message, tuple(created))

            message = f"Added {len(created)} numbers. {len(failed)} failed (possibly duplicates)."
            if not created:
                return self._fail(message)
            self._notifier.notify(message, NotificationKind.SUCCESS)
            return MutationOutcome(OutcomeStatus.PARTIAL, message, tuple(created))

        return await self._submit("add numbers", body)

    async def delete_number(self, company_number_id: str) -> MutationOutcome:
        rejection = check_company_number_delete(self.state, company_number_id)
        if rejection:
            return self._reject(rejection)

        async def body() -> MutationOutcome:
            return await self._delete(
                "company_number", company_number_id,
                a.DeleteCompanyNumber(company_number_id), "delete", "Number deleted",
            )

        return await self._submit("delete number", body)

    async def allocate(
        self, company_number_id: str, assign_to_type: AssignToType, target_id: str,
    ) -> MutationOutcome:
        state = self.state
        if not any(n.id == company_number_id for n in state.company_numbers):
            return MutationOutcome.invalid("Select a number")
        if any(al.company_number_id == company_number_id for al in state.company_number_allocations):
            return MutationOutcome.invalid("This number is already allocated")
        try:
            assign_to_type = AssignToType(assign_to_type)
        except ValueError:
            return MutationOutcome.invalid("Select what to assign the number to")
        candidates = {
            AssignToType.STAFF: state.staff,
            AssignToType.FUNCTION: state.functions,
            AssignToType.DEPARTMENT: state.departments,
        }[assign_to_type]
        if not target_id or not any(r.id == target_id for r in candidates):
            return MutationOutcome.invalid(f"Select a {assign_to_type.value.lower()}")

        fields = {
            "company_number_id": company_number_id,
            "assign_to_type": assign_to_type,
            **allocation_targets(assign_to_type, target_id),
        }

        async def body() -> MutationOutcome:
            return await self._create(
                "company_number_allocation", fields, lambda al: a.AllocateNumber(al),
                "allocate number", "Number allocated",
            )

        return await self._submit("allocate number", body)

    async def release(self, allocation_id: str) -> MutationOutcome:
        async def body() -> MutationOutcome:
            return await self._delete(
                "company_number_allocation", allocation_id, a.ReleaseNumber(allocation_id),
                "release number", "Number released",
            )

        return await self._submit("release number", body)


# ---------------------------------------------------------------------------
# Singletons
# ---------------------------------------------------------------------------

class SettingsOrchestrator(BaseOrchestrator):
    """Company profile and app settings. Saves upsert the single row."""

    async def _save(self, collection: str, fields: dict, make_action, success: str) -> MutationOutcome:
        async def body() -> MutationOutcome:
            result = await self._gateway.upsert_singleton(collection, fields)
            if not result.ok or result.data is None:
                return self._fail(f"Failed to save: {result.error or UNKNOWN_ERROR}")
            return self._commit(make_action(dataclasses.asdict(result.data)), success, result.data)

        return await self._submit(f"save {collection}", body)

    async def save_company_profile(
        self, name: str, location: str = "", website: str = "", logo_url: str = "",
    ) -> MutationOutcome:
        fields = {
            "name": (name or "").strip(),
            "location": (location or "").strip(),
            "website": (website or "").strip(),
            "logo_url": (logo_url or "").strip(),
        }
        return await self._save(
            "company_profile", fields,
            lambda changes: a.UpdateCompanyProfile(changes), "Company profile saved",
        )

    async def save_email_format(self, email_domain: str, email_format: EmailFormat) -> MutationOutcome:
        if is_blank(email_domain):
            return MutationOutcome.invalid("Email domain is required")
        try:
            email_format = EmailFormat(email_format)
        except ValueError:
            return MutationOutcome.invalid("Select an email format")
        fields = {
            "email_domain": email_domain.strip(),
            "email_format": email_format,
            "max_manager_grade_level": self.state.app_settings.max_manager_grade_level,
        }
        return await self._save(
            "app_settings", fields,
            lambda changes: a.UpdateAppSettings(changes), "Email format settings saved",
        )

    async def save_manager_threshold(self, max_manager_grade_level: int) -> MutationOutcome:
        max_manager_grade_level = _as_int(max_manager_grade_level)
        if max_manager_grade_level is None or max_manager_grade_level < 0:
            return MutationOutcome.invalid("Threshold must be 0 or higher")
        current = self.state.app_settings
        fields = {
            "email_domain": current.email_domain,
            "email_format": current.email_format,
            "max_manager_grade_level": max_manager_grade_level,
        }
        return await self._save(
            "app_settings", fields,
            lambda changes: a.UpdateAppSettings(changes), "Manager threshold updated",
        )
