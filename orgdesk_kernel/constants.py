"""
Organisation Dashboard Kernel — Default Values

All magic numbers live here as module-level defaults.
"""

from .domain_types import EmailFormat

# --- AppSettings singleton defaults ---
DEFAULT_EMAIL_DOMAIN: str = "company.com"
DEFAULT_EMAIL_FORMAT: EmailFormat = EmailFormat.FIRSTNAME_L
DEFAULT_MAX_MANAGER_GRADE_LEVEL: int = 1

# --- Company number ranges ---
MAX_NUMBER_RANGE: int = 1000
RANGE_SUFFIX_WIDTH: int = 4

# --- Display codes ---
UID_WIDTH: int = 3

# Label rendered for references that no longer resolve.
UNKNOWN_LABEL: str = "Unknown"
