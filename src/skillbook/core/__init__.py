"""Skillbook core -- errors, settings and logging shared by every layer.

Architecture::

    errors.py     Structured error hierarchy (SkillbookError and subclasses)
    settings.py   Pydantic settings + .skillbook.yaml loading
    logging.py    structlog configuration
"""

from skillbook.core.errors import (
    AmbiguousSkillError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    FrontmatterError,
    ReferenceNotFoundError,
    ScaffoldError,
    SkillbookError,
    SkillNotFoundError,
)
from skillbook.core.settings import SkillbookSettings, load_settings

__all__ = [
    "AmbiguousSkillError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "FrontmatterError",
    "ReferenceNotFoundError",
    "ScaffoldError",
    "SkillbookError",
    "SkillNotFoundError",
    "SkillbookSettings",
    "load_settings",
]
