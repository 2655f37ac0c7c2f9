"""
Organisation Dashboard Kernel
Pure, I/O-free core: domain records, transition requests, the transition
function and the single-writer store that owns the current snapshot.
"""

from .domain_types import (
    AppSettings, AppState, AssignToType, CompanyNumber, CompanyNumberAllocation,
    CompanyProfile, ComplianceTag, CrossFunctionalTeam, Department,
    DepartmentStatus, EmailFormat, FunctionType, Grade, OrgFunction,
    Responsibility, Staff, TeamMember, User, UserRole, Workflow,
    WorkflowStatus, WorkflowStep, allocation_targets, record_from_row,
    record_to_row,
)
from .actions import ALL_ACTION_TYPES, BaseAction
from .registry import COLLECTIONS, OWNED_CHILDREN, SINGLETONS, CollectionSpec, spec_for
from .keycase import camel_to_snake, snake_to_camel, to_camel_keys, to_snake_keys
from .transitions import apply_action
from .store import Store
from .state import DEFAULT_APP_SETTINGS, DEFAULT_COMPANY_PROFILE, create_initial_state
from .invariants import (
    DanglingReference,
    InvariantViolationError,
    assert_invariants,
    find_dangling_references,
    validate_invariants,
)
from .hashing import canonical_hash, canonical_serialize
from .diagnostics import compute_diagnostics, department_status

__all__ = [
    "AppSettings",
    "AppState",
    "AssignToType",
    "CompanyNumber",
    "CompanyNumberAllocation",
    "CompanyProfile",
    "ComplianceTag",
    "CrossFunctionalTeam",
    "Department",
    "DepartmentStatus",
    "EmailFormat",
    "FunctionType",
    "Grade",
    "OrgFunction",
    "Responsibility",
    "Staff",
    "TeamMember",
    "User",
    "UserRole",
    "Workflow",
    "WorkflowStatus",
    "WorkflowStep",
    "allocation_targets",
    "record_from_row",
    "record_to_row",
    "ALL_ACTION_TYPES",
    "BaseAction",
    "COLLECTIONS",
    "OWNED_CHILDREN",
    "SINGLETONS",
    "CollectionSpec",
    "spec_for",
    "camel_to_snake",
    "snake_to_camel",
    "to_camel_keys",
    "to_snake_keys",
    "apply_action",
    "Store",
    "DEFAULT_APP_SETTINGS",
    "DEFAULT_COMPANY_PROFILE",
    "create_initial_state",
    "DanglingReference",
    "InvariantViolationError",
    "assert_invariants",
    "find_dangling_references",
    "validate_invariants",
    "canonical_hash",
    "canonical_serialize",
    "compute_diagnostics",
    "department_status",
]
