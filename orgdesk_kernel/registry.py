"""
Organisation Dashboard Kernel — Collection Registry

Fixed mapping between record-store collection names, record types,
AppState fields and the labels used when reporting load failures.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from .domain_types import (
    AppSettings,
    CompanyNumber,
    CompanyNumberAllocation,
    CompanyProfile,
    ComplianceTag,
    CrossFunctionalTeam,
    Department,
    Grade,
    OrgFunction,
    Responsibility,
    Staff,
    TeamMember,
    User,
    Workflow,
    WorkflowStep,
)


@dataclass(frozen=True)
class CollectionSpec:
    name: str          # record-store collection / table name
    record_type: type
    state_field: str   # attribute on AppState
    label: str         # human label in aggregated errors
    has_uid: bool = False


COLLECTIONS: Dict[str, CollectionSpec] = {
    spec.name: spec
    for spec in (
        CollectionSpec("department", Department, "departments", "departments", True),
        CollectionSpec("function", OrgFunction, "functions", "functions", True),
        CollectionSpec("responsibility", Responsibility, "responsibilities", "responsibilities", True),
        CollectionSpec("grade", Grade, "grades", "grades"),
        CollectionSpec("staff", Staff, "staff", "staff", True),
        CollectionSpec("cross_functional_team", CrossFunctionalTeam, "teams", "teams", True),
        CollectionSpec("team_member", TeamMember, "team_members", "team members"),
        CollectionSpec("workflow", Workflow, "workflows", "workflows", True),
        CollectionSpec("workflow_step", WorkflowStep, "workflow_steps", "workflow steps"),
        CollectionSpec("compliance_tag", ComplianceTag, "compliance_tags", "compliance tags"),
        CollectionSpec("company_number", CompanyNumber, "company_numbers", "company numbers"),
        CollectionSpec(
            "company_number_allocation", CompanyNumberAllocation,
            "company_number_allocations", "allocations",
        ),
        CollectionSpec("app_user", User, "users", "users"),
    )
}

SINGLETONS: Dict[str, CollectionSpec] = {
    spec.name: spec
    for spec in (
        CollectionSpec("company_profile", CompanyProfile, "company_profile", "company profile"),
        CollectionSpec("app_settings", AppSettings, "app_settings", "app settings"),
    )
}

# Parent collection → (child collection, foreign-key column).
# Children are deleted together with their parent, remotely and locally.
OWNED_CHILDREN: Dict[str, Tuple[str, str]] = {
    "cross_functional_team": ("team_member", "team_id"),
    "workflow": ("workflow_step", "workflow_id"),
    "company_number": ("company_number_allocation", "company_number_id"),
}


def spec_for(collection: str) -> CollectionSpec:
    """Look up a list or singleton collection. Raises KeyError if unknown."""
    if collection in COLLECTIONS:
        return COLLECTIONS[collection]
    if collection in SINGLETONS:
        return SINGLETONS[collection]
    raise KeyError(f"Unknown collection {collection!r}")
