"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest
from treemirror.backend.memory import MemoryBackend


@pytest.fixture
def memory_backend() -> MemoryBackend:
    """Empty in-memory backend."""
    return MemoryBackend()


@pytest.fixture
def populated_backend() -> MemoryBackend:
    """In-memory backend holding an empty directory ``a`` and a file ``b``."""
    backend = MemoryBackend()
    backend.populate(["a/", "b"])
    return backend


@pytest.fixture
def nested_backend() -> MemoryBackend:
    """In-memory backend with a few levels of nesting."""
    backend = MemoryBackend()
    backend.populate(
        [
            "docs/",
            "docs/guide/",
            "docs/guide/intro.md",
            "docs/readme.txt",
            "src/",
            "src/main.py",
            "notes.txt",
        ]
    )
    return backend


@pytest.fixture
def local_root(tmp_path: Path) -> Path:
    """Directory on disk with an empty directory ``a`` and a file ``b``."""
    root = tmp_path / "storage"
    root.mkdir()
    (root / "a").mkdir()
    (root / "b").write_text("ignored content")
    return root
