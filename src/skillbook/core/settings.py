"""
Settings for skillbook.

Every convention the linter and scaffolder enforce (standard categories,
forbidden dependency terms, required repository files) is a setting rather
than a constant, so a corpus with different house rules only needs a
``.skillbook.yaml`` or a few ``SKILLBOOK_*`` environment variables.

Load order (last wins)::

    field defaults  →  SKILLBOOK_* env / .env  →  .skillbook.yaml  →  explicit overrides

Examples:
    >>> from skillbook.core.settings import load_settings
    >>> settings = load_settings(root="path/to/corpus")
    >>> settings.skills_path
    PosixPath('path/to/corpus/skills')

Tags:
    settings, configuration, pydantic, environment, skillbook
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from skillbook.core.errors import ConfigError

CONFIG_FILENAME = ".skillbook.yaml"

DEFAULT_CATEGORIES = ["security", "quality", "code", "data", "delivery", "operations", "meta"]


class SkillbookSettings(BaseSettings):
    """Skillbook configuration.

    All fields can be set via ``SKILLBOOK_*`` environment variables (list
    fields take JSON, e.g. ``SKILLBOOK_FORBIDDEN_TERMS='["ccsetup"]'``).
    """

    model_config = SettingsConfigDict(
        env_prefix="SKILLBOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Layout ───────────────────────────────────────────────────
    root: Path = Field(default=Path("."), description="Corpus repository root")
    skills_dir: str = Field(default="skills", description="Skills directory, relative to root")
    template_path: str = Field(
        default=".templates/knowledge-skill/SKILL.md",
        description="SKILL.md template used by 'skillbook new', relative to root",
    )

    # ── Conventions ──────────────────────────────────────────────
    valid_categories: list[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    forbidden_terms: list[str] = Field(default_factory=lambda: ["ccsetup", "x-workflows"])
    required_files: list[str] = Field(default_factory=lambda: [".claude/rules.md"])
    credential_categories: list[str] = Field(default_factory=lambda: ["security"])
    extra_languages: list[str] = Field(default_factory=list)
    disabled_rules: list[str] = Field(default_factory=list)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="WARNING")
    log_format: str = Field(default="auto", description="auto, json or console")

    @property
    def skills_path(self) -> Path:
        return self.root / self.skills_dir

    @property
    def template_file(self) -> Path:
        return self.root / self.template_path

    @property
    def json_logs(self) -> bool | None:
        """Map ``log_format`` onto ``configure_logging(json_format=...)``."""
        fmt = self.log_format.lower()
        if fmt == "json":
            return True
        if fmt == "console":
            return False
        return None


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file: {exc}", cause=exc).with_context(
            path=str(path)
        )
    except OSError as exc:
        raise ConfigError(f"Cannot read config file: {exc}", cause=exc).with_context(
            path=str(path)
        )

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping").with_context(path=str(path))
    return {str(key).replace("-", "_"): value for key, value in data.items()}


def load_settings(
    root: Path | str | None = None,
    config_file: Path | str | None = None,
    **overrides: Any,
) -> SkillbookSettings:
    """Build settings for a corpus.

    Args:
        root: Corpus root. Defaults to ``SKILLBOOK_ROOT`` or the cwd.
        config_file: Explicit YAML config. When omitted, ``<root>/.skillbook.yaml``
            is used if it exists. An explicit file that does not exist is an error.
        **overrides: Field values that win over everything else. ``None``
            values are ignored so CLI options can be passed straight through.

    Raises:
        ConfigError: Unreadable config file or a value that fails validation.
    """
    try:
        base_root = Path(root) if root is not None else SkillbookSettings().root
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}", cause=exc)

    data: dict[str, Any] = {}
    if config_file is not None:
        path = Path(config_file)
        if not path.is_file():
            raise ConfigError("Config file not found").with_context(path=str(path))
        data.update(_read_config_file(path))
    elif (base_root / CONFIG_FILENAME).is_file():
        data.update(_read_config_file(base_root / CONFIG_FILENAME))

    data["root"] = base_root
    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return SkillbookSettings(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}", cause=exc)


__all__ = ["SkillbookSettings", "load_settings", "CONFIG_FILENAME", "DEFAULT_CATEGORIES"]
