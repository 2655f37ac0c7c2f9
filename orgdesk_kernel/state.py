"""
Organisation Dashboard Kernel — State Construction
"""

from typing import Iterable, Optional

from .constants import (
    DEFAULT_EMAIL_DOMAIN,
    DEFAULT_EMAIL_FORMAT,
    DEFAULT_MAX_MANAGER_GRADE_LEVEL,
)
from .domain_types import AppSettings, AppState, CompanyProfile
from .registry import COLLECTIONS

# Used when the singleton row does not exist remotely yet (first setup).
DEFAULT_COMPANY_PROFILE = CompanyProfile()
DEFAULT_APP_SETTINGS = AppSettings(
    email_domain=DEFAULT_EMAIL_DOMAIN,
    email_format=DEFAULT_EMAIL_FORMAT,
    max_manager_grade_level=DEFAULT_MAX_MANAGER_GRADE_LEVEL,
)


def create_initial_state(
    company_profile: Optional[CompanyProfile] = None,
    app_settings: Optional[AppSettings] = None,
    **collections: Iterable,
) -> AppState:
    """
    Build a snapshot from per-collection records keyed by AppState field
    name (``departments=[...]``, ``team_members=[...]``, ...). Missing
    collections are empty; missing singletons take the defaults.
    """
    known = {spec.state_field for spec in COLLECTIONS.values()}
    unknown = sorted(set(collections) - known)
    if unknown:
        raise TypeError(f"Unknown collection field(s): {unknown}")
    return AppState(
        company_profile=company_profile or DEFAULT_COMPANY_PROFILE,
        app_settings=app_settings or DEFAULT_APP_SETTINGS,
        **{name: tuple(records) for name, records in collections.items()},
    )
