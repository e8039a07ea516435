"""
Test support utilities for skillbook tests.

Builders that lay out skill corpora on disk. They are plain functions
rather than fixtures so tests can add skills to a fixture corpus.
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any

import yaml


def frontmatter(**fields: Any) -> str:
    """Render a ``---`` delimited YAML block; ``allowed_tools`` → ``allowed-tools``."""
    data = {key.replace("_", "-"): value for key, value in fields.items()}
    return "---\n" + yaml.safe_dump(data, sort_keys=False) + "---\n"


def write_skill(
    root: Path,
    category: str,
    name: str,
    body: str = "",
    *,
    references: dict[str, str] | None = None,
    meta: dict[str, Any] | None = None,
    raw: str | None = None,
) -> Path:
    """Create ``skills/<category>/<name>/SKILL.md`` and return the skill directory.

    Args:
        root: Corpus root.
        category: Category directory.
        name: Skill directory (and default frontmatter name).
        body: Markdown after the frontmatter (dedented).
        references: ``{relative path: content}`` files to create in the skill.
        meta: Frontmatter fields that replace the defaults.
        raw: Whole SKILL.md text, for malformed frontmatter.
    """
    skill_dir = root / "skills" / category / name
    skill_dir.mkdir(parents=True, exist_ok=True)

    if raw is None:
        fields: dict[str, Any] = {
            "name": name,
            "description": f"Patterns for {name}.",
            "license": "MIT",
            "metadata": {"author": "tests", "version": "1.0.0", "category": category},
        }
        fields.update(meta or {})
        raw = frontmatter(**fields) + "\n" + textwrap.dedent(body).lstrip("\n")
    (skill_dir / "SKILL.md").write_text(raw, encoding="utf-8")

    for relative, content in (references or {}).items():
        path = skill_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
    return skill_dir


def make_repo(root: Path) -> Path:
    """Create the repository files every corpus must carry."""
    (root / ".claude").mkdir(parents=True, exist_ok=True)
    (root / ".claude" / "rules.md").write_text("# Rules\n", encoding="utf-8")
    (root / "skills").mkdir(exist_ok=True)
    return root


REDIS_BODY = """
# Redis Patterns

## Overview

Caching and streaming patterns for Redis.

```python
cache.set("key", "value", ex=60)
```

## When to Load References

- **Caching strategies**: [caching](references/caching.md)
- Load [streams](references/streams.md) when consuming event logs
"""

CACHING_REF = """
# Caching Strategies

Cache-aside keeps reads fast.

```redis
SET user:1 "{...}" EX 60
```
"""

STREAMS_REF = """
# Streams

Consumer groups, see also [caching](caching.md).
"""

POSTGRES_BODY = """
# Postgres Patterns

Indexing and partitioning.

```sql
CREATE INDEX idx_users_email ON users (email);
```
"""

SECRETS_BODY = """
# Secrets Management

Store secrets in a vault, never in the repository.

```bash
export API_KEY=<your-api-key>
```
"""


def build_clean_corpus(root: Path) -> Path:
    """A lint-clean corpus with two categories and three skills."""
    make_repo(root)
    write_skill(
        root,
        "data",
        "redis-patterns",
        REDIS_BODY,
        references={
            "references/caching.md": CACHING_REF,
            "references/streams.md": STREAMS_REF,
        },
    )
    write_skill(root, "data", "postgres-patterns", POSTGRES_BODY)
    write_skill(root, "security", "secrets-management", SECRETS_BODY)
    return root
