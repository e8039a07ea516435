"""
Shared pytest fixtures for skillbook tests.

This module provides:
- A ``corpus_root`` fixture with a small, lint-clean corpus
- Environment and global-state isolation between tests

Corpus builders live in ``tests._support`` so tests can extend a fixture
corpus with extra skills.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import structlog

from skillbook.lint import clear_custom_rules
from tests._support import build_clean_corpus


@pytest.fixture
def corpus_root(tmp_path: Path) -> Path:
    """A lint-clean corpus: data/redis-patterns, data/postgres-patterns, security/secrets-management."""
    return build_clean_corpus(tmp_path / "repo")


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch):
    """Drop SKILLBOOK_* variables and reset global state between tests."""
    for key in list(os.environ):
        if key.startswith("SKILLBOOK_"):
            monkeypatch.delenv(key, raising=False)
    yield
    clear_custom_rules()
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
