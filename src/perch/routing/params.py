"""Parameter matcher discovery.

A route parameter can name a matcher — ``[id=integer]`` — implemented by
a module in the matchers directory (``src/params/integer.js``).  This
module builds the name -> module path map the bundler and the runtime
consume.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import TYPE_CHECKING

from perch._internal.fs import FileSystem, LocalFileSystem, relative_path
from perch.errors import MatcherError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from perch.config import ManifestConfig

_MATCHER_NAME_RE = re.compile(r"^[A-Za-z0-9_]+$")


def discover_matchers(config: ManifestConfig, fs: FileSystem | None = None) -> Mapping[str, str]:
    """Map matcher names to module paths for every module in the matchers directory.

    Only files directly inside the directory with a configured module
    extension count.  A missing directory means no matchers.

    Raises:
        MatcherError: A name has characters outside ``[A-Za-z0-9_]``, or
            two modules (e.g. ``foo.js`` and ``foo.ts``) share a name.
    """
    fs = fs or LocalFileSystem()
    directory = config.resolve(config.matchers_dir)
    if not fs.is_dir(directory):
        return MappingProxyType({})

    matchers: dict[str, str] = {}
    for entry in sorted(fs.list_dir(directory), key=lambda e: e.name):
        if entry.kind != "file":
            continue

        ext = next((e for e in config.module_extensions if entry.name.endswith(e)), None)
        if ext is None:
            continue

        name = entry.name[: -len(ext)]
        file = relative_path(directory / entry.name, config.working_dir)

        if not _MATCHER_NAME_RE.match(name):
            msg = (
                "Matcher names can only have underscores and alphanumeric "
                f'characters — "{file}" is invalid'
            )
            raise MatcherError(msg)

        if name in matchers:
            msg = f"Duplicate matchers {matchers[name]} and {file}"
            raise MatcherError(msg)

        matchers[name] = file

    return MappingProxyType(matchers)
