# file: orgdesk_runtime/orchestrators/__init__.py
"""Per-screen mutation orchestrators."""

from .base import BaseOrchestrator, MutationOutcome, OutcomeStatus
from .departments import DepartmentOrchestrator
from .functions import FunctionForm, FunctionOrchestrator
from .responsibilities import ResponsibilityForm, ResponsibilityOrchestrator
from .staff import StaffForm, StaffOrchestrator
from .teams import TeamForm, TeamOrchestrator
from .workflows import WorkflowForm, WorkflowOrchestrator
from .admin import (
    CompanyNumberOrchestrator,
    ComplianceTagOrchestrator,
    GradeOrchestrator,
    SettingsOrchestrator,
)
from .users import UserOrchestrator

__all__ = [
    "BaseOrchestrator",
    "MutationOutcome",
    "OutcomeStatus",
    "DepartmentOrchestrator",
    "FunctionForm",
    "FunctionOrchestrator",
    "ResponsibilityForm",
    "ResponsibilityOrchestrator",
    "StaffForm",
    "StaffOrchestrator",
    "TeamForm",
    "TeamOrchestrator",
    "WorkflowForm",
    "WorkflowOrchestrator",
    "CompanyNumberOrchestrator",
    "ComplianceTagOrchestrator",
    "GradeOrchestrator",
    "SettingsOrchestrator",
    "UserOrchestrator",
]
