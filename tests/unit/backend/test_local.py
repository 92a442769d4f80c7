"""Unit tests for LocalBackend.

Tests enumeration, create-if-absent semantics, and removal against a
temporary directory on disk.
"""

import asyncio
from pathlib import Path

import pytest
from treemirror.backend.base import DirectoryHandle, HandleKind
from treemirror.backend.local import LocalBackend
from treemirror.core.errors import (
    BackendUnavailableError,
    EntryNotFoundError,
    EntryTypeMismatchError,
)


async def _list(handle: DirectoryHandle) -> list[tuple[str, HandleKind]]:
    return [(name, child.kind) async for name, child in handle.entries()]


class TestLocalBackend:
    """Tests for LocalBackend."""

    def test_entries_sorted_by_name(self, local_root: Path) -> None:
        """Entries are classified and sorted by name."""
        (local_root / "0-first").write_text("")

        async def scenario() -> list[tuple[str, HandleKind]]:
            root = await LocalBackend(local_root).get_root()
            return await _list(root)

        assert asyncio.run(scenario()) == [
            ("0-first", HandleKind.FILE),
            ("a", HandleKind.DIRECTORY),
            ("b", HandleKind.FILE),
        ]

    def test_symlink_to_directory_is_a_file(self, local_root: Path) -> None:
        """Symlinks are never followed as directories."""
        (local_root / "link").symlink_to(local_root / "a")

        async def scenario() -> list[tuple[str, HandleKind]]:
            root = await LocalBackend(local_root).get_root()
            return await _list(root)

        assert ("link", HandleKind.FILE) in asyncio.run(scenario())

    def test_create_directory_idempotent(self, local_root: Path) -> None:
        """Creating an existing directory succeeds."""

        async def scenario() -> None:
            root = await LocalBackend(local_root).get_root()
            await root.get_or_create_directory("x")
            await root.get_or_create_directory("x")

        asyncio.run(scenario())

        assert (local_root / "x").is_dir()

    def test_create_file_keeps_content(self, local_root: Path) -> None:
        """Creating an existing file leaves its bytes alone."""

        async def scenario() -> None:
            root = await LocalBackend(local_root).get_root()
            await root.get_or_create_file("b")
            await root.get_or_create_file("new")

        asyncio.run(scenario())

        assert (local_root / "b").read_text() == "ignored content"
        assert (local_root / "new").read_text() == ""

    def test_type_mismatch(self, local_root: Path) -> None:
        """Creating a directory over a file raises."""

        async def scenario() -> None:
            root = await LocalBackend(local_root).get_root()
            await root.get_or_create_directory("b")

        with pytest.raises(EntryTypeMismatchError):
            asyncio.run(scenario())

    def test_remove_root_keeps_root(self, local_root: Path) -> None:
        """Removing the root deletes its contents only."""
        (local_root / "a" / "deep").mkdir()
        (local_root / "a" / "deep" / "file").write_text("x")

        async def scenario() -> None:
            root = await LocalBackend(local_root).get_root()
            await root.remove_recursive()

        asyncio.run(scenario())

        assert local_root.is_dir()
        assert list(local_root.iterdir()) == []

    def test_remove_subdirectory(self, local_root: Path) -> None:
        """Removing a subdirectory deletes it entirely."""

        async def scenario() -> None:
            root = await LocalBackend(local_root).get_root()
            a = await root.get_or_create_directory("a")
            await a.remove_recursive()

        asyncio.run(scenario())

        assert not (local_root / "a").exists()
        assert (local_root / "b").exists()

    def test_vanished_directory_raises(self, local_root: Path) -> None:
        """Listing a directory deleted after its handle was taken raises."""

        async def scenario() -> None:
            root = await LocalBackend(local_root).get_root()
            a = await root.get_or_create_directory("a")
            (local_root / "a").rmdir()
            await _list(a)

        with pytest.raises(EntryNotFoundError):
            asyncio.run(scenario())

    def test_missing_root_unavailable(self, tmp_path: Path) -> None:
        """A missing root directory makes the backend unavailable."""
        backend = LocalBackend(tmp_path / "missing")

        assert backend.is_available() is False
        with pytest.raises(BackendUnavailableError):
            asyncio.run(backend.get_root())
