"""Pytest fixtures for Postkeeper tests."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from postkeeper.config import Config, reset_config
from postkeeper.container import Container, reset_container

SAMPLE_POST = """\
---
title: Integer casting pitfalls
date: 2024-03-01T09:30:00+01:00
tags: [c, integers, casting]
draft: false
summary: Why (unsigned char)-1 is not what you think.
---
Converting between signed and unsigned types is a classic trap.

```c
int x = -1;
unsigned char c = (unsigned char)x;  /* 255 */
```
"""

DRAFT_POST = """\
---
title: Designing C APIs that return errors
date: 2024-05-12T18:00:00Z
tags: [c, api-design]
draft: true
---
Work in progress.
"""

BROKEN_POST = """\
---
title: ""
date: 2024-01-01
draft: "yes"
---
Body.
"""


@pytest.fixture
def temp_content_dir() -> Generator[Path, None, None]:
    """Create a temporary content directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_content_dir: Path) -> Generator[Config, None, None]:
    """Create a test configuration."""
    config = Config(
        content_dir=temp_content_dir,
        extension=".md",
        lock_timeout=1.0,
        max_tags_per_post=5,
        max_summary_length=80,
    )
    yield config


@pytest.fixture
def container(test_config: Config) -> Generator[Container, None, None]:
    """Create a test container with isolated dependencies."""
    reset_config()
    reset_container()

    container = Container.create(test_config)
    yield container

    container.close()
    reset_container()
    reset_config()


@pytest.fixture
def populated_dir(temp_content_dir: Path) -> Path:
    """A content directory holding a published post, a draft and a broken file."""
    (temp_content_dir / "integer-casting.md").write_text(SAMPLE_POST, encoding="utf-8")
    (temp_content_dir / "c-api-errors.md").write_text(DRAFT_POST, encoding="utf-8")
    (temp_content_dir / "broken.md").write_text(BROKEN_POST, encoding="utf-8")
    return temp_content_dir


@pytest.fixture(autouse=True)
def set_test_env(temp_content_dir: Path) -> Generator[None, None, None]:
    """Set environment variables for tests."""
    old_env = os.environ.get("POSTKEEPER_CONTENT_DIR")
    os.environ["POSTKEEPER_CONTENT_DIR"] = str(temp_content_dir)
    yield
    if old_env:
        os.environ["POSTKEEPER_CONTENT_DIR"] = old_env
    else:
        os.environ.pop("POSTKEEPER_CONTENT_DIR", None)


@pytest.fixture
def sample_text() -> str:
    """A valid published post document."""
    return SAMPLE_POST


@pytest.fixture
def draft_text() -> str:
    """A valid draft post document."""
    return DRAFT_POST


@pytest.fixture
def broken_text() -> str:
    """A document with several malformed fields."""
    return BROKEN_POST
