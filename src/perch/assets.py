"""Static asset indexing.

Lists every file under the assets directory with its size and content
type so a static file server can answer without touching the disk for
metadata.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from typing import TYPE_CHECKING

from perch._internal.fs import FileSystem, LocalFileSystem
from perch.pages.walker import walk

if TYPE_CHECKING:
    from perch.config import ManifestConfig

# Only the interpreter's built-in table; system mime.types files are not read
_TYPES = mimetypes.MimeTypes()


@dataclass(frozen=True, slots=True)
class Asset:
    """A static file.

    Attributes:
        file: Path relative to the assets directory.
        size: Size in bytes.
        type: Content type, ``""`` when the extension is unknown.
    """

    file: str
    size: int
    type: str


def content_type(filename: str) -> str:
    """Return the content type for *filename*'s extension, or ``""``."""
    guessed, _ = _TYPES.guess_type(filename)
    return guessed or ""


def index_assets(config: ManifestConfig, fs: FileSystem | None = None) -> tuple[Asset, ...]:
    """Index every file under ``config.assets_dir``, recursively.

    Nothing is filtered: dotfiles and ``_``-prefixed files are assets too.
    """
    fs = fs or LocalFileSystem()
    root = config.resolve(config.assets_dir)
    return tuple(
        Asset(
            file=entry.path,
            size=fs.file_size(root / entry.path),
            type=content_type(entry.name),
        )
        for entry in walk(root, fs, filtered=False)
        if not entry.is_dir
    )
