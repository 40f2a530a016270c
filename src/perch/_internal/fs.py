"""Filesystem provider protocol and the default local implementation.

The walker, matcher discovery, and asset indexer never touch ``os`` or
``pathlib`` directly — they go through a :class:`FileSystem` so tests can
hand in an in-memory tree.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol

type EntryKind = Literal["file", "dir", "other"]


@dataclass(frozen=True, slots=True)
class DirEntry:
    """One entry of a directory listing.

    ``kind`` describes what the entry points to: a symlink to a directory
    has ``kind="dir"`` and ``is_symlink=True``.
    """

    name: str
    kind: EntryKind
    is_symlink: bool = False


class FileSystem(Protocol):
    """Protocol for directory-tree providers.

    No base class required. Anything with these four methods works.
    """

    def is_dir(self, path: Path) -> bool: ...

    def list_dir(self, path: Path) -> list[DirEntry]: ...

    def file_size(self, path: Path) -> int: ...

    def real_path(self, path: Path) -> Path: ...


class LocalFileSystem:
    """:class:`FileSystem` backed by the real disk. Follows symlinks."""

    __slots__ = ()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def list_dir(self, path: Path) -> list[DirEntry]:
        entries: list[DirEntry] = []
        for item in path.iterdir():
            if item.is_dir():
                kind: EntryKind = "dir"
            elif item.is_file():
                kind = "file"
            else:
                # Broken symlinks, sockets, fifos
                kind = "other"
            entries.append(DirEntry(name=item.name, kind=kind, is_symlink=item.is_symlink()))
        return entries

    def file_size(self, path: Path) -> int:
        return path.stat().st_size

    def real_path(self, path: Path) -> Path:
        return path.resolve()


def relative_path(path: Path, start: Path) -> str:
    """``/``-separated path of *path* relative to *start* (may climb with ``..``)."""
    return os.path.relpath(path, start).replace(os.sep, "/")
