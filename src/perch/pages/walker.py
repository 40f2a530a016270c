"""Filtered, depth-first traversal of a route source directory.

Entries are visited in name order so discovery order — and therefore
the component list and sort tie-breaks — is deterministic for a given
tree.  Symbolic links are followed as if the linked-to tree lived at the
link's location.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from perch._internal.fs import FileSystem, LocalFileSystem

logger = logging.getLogger("perch.walker")

# Dependency lockfiles that can end up next to route files
LOCKFILES = frozenset(
    {
        "Cargo.lock",
        "Gemfile.lock",
        "Pipfile.lock",
        "bun.lock",
        "bun.lockb",
        "composer.lock",
        "npm-shrinkwrap.json",
        "package-lock.json",
        "pnpm-lock.yaml",
        "poetry.lock",
        "uv.lock",
        "yarn.lock",
    }
)

# The one dot-directory that carries routes
WELL_KNOWN = ".well-known"


@dataclass(frozen=True, slots=True)
class WalkEntry:
    """A file or directory found under the walk root.

    Attributes:
        path: ``/``-joined path relative to the walk root.
        name: Final path component.
        is_dir: True for directories (including symlinked ones).
        depth: Number of directories between the root and this entry.
    """

    path: str
    name: str
    is_dir: bool
    depth: int

    @property
    def parent(self) -> str:
        """Relative path of the containing directory (``""`` for the root)."""
        head, _, _ = self.path.rpartition("/")
        return head


def is_ignored(name: str, *, is_dir: bool) -> bool:
    """Return True if an entry should be neither collected nor descended into."""
    if name.startswith("_"):
        return True
    if name.startswith("."):
        return not (is_dir and name == WELL_KNOWN)
    return name in LOCKFILES


def walk(
    root: str | Path,
    fs: FileSystem | None = None,
    *,
    filtered: bool = True,
) -> Iterator[WalkEntry]:
    """Yield every non-ignored file and directory under *root*.

    A missing root yields nothing.

    Args:
        root: Directory to walk.
        fs: Filesystem provider. Defaults to the local disk.
        filtered: Apply the private/hidden/lockfile rules. The asset
            indexer turns this off.
    """
    fs = fs or LocalFileSystem()
    root = Path(root)
    if not fs.is_dir(root):
        logger.debug("Walk root %s does not exist, nothing to discover", root)
        return

    yield from _walk_directory(
        fs,
        root,
        prefix="",
        depth=0,
        ancestors=(fs.real_path(root),),
        filtered=filtered,
    )


def _walk_directory(
    fs: FileSystem,
    directory: Path,
    *,
    prefix: str,
    depth: int,
    ancestors: tuple[Path, ...],
    filtered: bool,
) -> Iterator[WalkEntry]:
    for entry in sorted(fs.list_dir(directory), key=lambda e: e.name):
        if entry.kind == "other":
            continue

        is_dir = entry.kind == "dir"
        if filtered and is_ignored(entry.name, is_dir=is_dir):
            logger.debug("Skipping %s%s", prefix, entry.name)
            continue

        rel = f"{prefix}{entry.name}"
        yield WalkEntry(path=rel, name=entry.name, is_dir=is_dir, depth=depth)

        if not is_dir:
            continue

        child = directory / entry.name
        real = fs.real_path(child)
        if real in ancestors:
            # Symlink back into the current descent path
            logger.debug("Not following symlink loop at %s", rel)
            continue

        yield from _walk_directory(
            fs,
            child,
            prefix=f"{rel}/",
            depth=depth + 1,
            ancestors=(*ancestors, real),
            filtered=filtered,
        )
