"""Filesystem route discovery and manifest assembly.

Walks the routes directory once and classifies each file:

- ``+layout[-name][@parent]<ext>`` — default or named layout
- ``+layout.server<mod>``          — data module for the default layout
- ``+error<ext>``                  — error boundary for the directory
- ``+page[@layout]<ext>``          — page at the directory's URL
- ``+page.server<mod>``            — data module for that page
- ``+server<mod>``                 — endpoint at the directory's URL
- ``<name>[@layout]<ext>``         — page at ``<dir>/<name>`` (``index`` = the directory)
- ``<name><mod>``                  — endpoint at ``<dir>/<name>``

``<ext>`` is a component extension, ``<mod>`` a module extension.  Other
files are ignored.  Bracketed names become URL parameters: ``[slug]``,
``[...rest]``, ``[id=matcher]``.

Any invalid definition aborts the compile; a partial manifest is never
returned.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from perch._internal.fs import FileSystem, LocalFileSystem, relative_path
from perch.assets import index_assets
from perch.config import ManifestConfig
from perch.errors import RouteDefinitionError
from perch.manifest import Manifest
from perch.pages.layouts import LayoutGraph
from perch.pages.walker import WalkEntry, walk
from perch.routing.params import discover_matchers
from perch.routing.pattern import compile_route
from perch.routing.route import EndpointRoute, PageNode, PageRoute, RouteEntry
from perch.routing.sort import sort_routes

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

logger = logging.getLogger("perch.discovery")

type FileKind = Literal["layout", "layout_server", "error", "page", "page_server", "endpoint"]

# +layout, +layout@parent, +layout-name, +layout-name@parent
_LAYOUT_RE = re.compile(r"^\+layout(?:-([^@]*))?(?:@(.*))?$")

# +page, +page@layout
_PAGE_RE = re.compile(r"^\+page(?:@(.*))?$")

_LAYOUT_NAME_RE = re.compile(r"^[\w-]+$")


@dataclass(frozen=True, slots=True)
class RouteFile:
    """A classified file from the routes directory.

    Attributes:
        kind: What the file contributes to the manifest.
        directory: Containing directory relative to the routes root.
        file: Path relative to the working directory.
        logical: File name without its extension; files sharing
            ``(directory, logical)`` under different extensions shadow
            each other.
        rank: Index of the file's extension in its configured list.
        route_id: Route id for pages and endpoints.
        layout: Layout name (layouts) or requested layout (pages).
        parent: ``@parent`` of a layout declaration.
    """

    kind: FileKind
    directory: str
    file: str
    logical: str
    rank: int
    route_id: str = ""
    layout: str | None = None
    parent: str | None = None


def _match_extension(name: str, extensions: tuple[str, ...]) -> tuple[str, int] | None:
    """Return ``(name without extension, extension index)`` for the first match."""
    for rank, ext in enumerate(extensions):
        if name.endswith(ext) and len(name) > len(ext):
            return name[: -len(ext)], rank
    return None


def _join(directory: str, name: str) -> str:
    return f"{directory}/{name}" if directory else name


def _check_layout_name(name: str | None, file: str) -> None:
    if name is not None and not _LAYOUT_NAME_RE.match(name):
        msg = (
            f"Invalid layout name {name!r} in {file} — layout names can only "
            "contain alphanumeric characters, underscores and dashes"
        )
        raise RouteDefinitionError(msg)


def classify(entry: WalkEntry, config: ManifestConfig, *, file: str) -> RouteFile | None:
    """Classify one walked file, or return ``None`` if it defines nothing.

    Args:
        entry: The file as yielded by the walker.
        config: Supplies the component and module extensions.
        file: The file's path relative to the working directory.

    Raises:
        RouteDefinitionError: The file lives in a directory whose name
            carries a layout reference, uses a reserved ``+`` name, or
            names a layout badly.
    """
    directory = entry.parent

    if component := _match_extension(entry.name, config.extensions):
        _check_directory(directory, file)
        base, rank = component
        return _classify_component(directory, base, rank, file)

    if module := _match_extension(entry.name, config.module_extensions):
        _check_directory(directory, file)
        base, rank = module
        return _classify_module(directory, base, rank, file)

    logger.debug("Ignoring %s — not a component or module", file)
    return None


def _check_directory(directory: str, file: str) -> None:
    if "@" in directory:
        msg = f"Invalid route {file} - named layouts are not allowed in directories"
        raise RouteDefinitionError(msg)


def _classify_component(directory: str, base: str, rank: int, file: str) -> RouteFile:
    if base.startswith("+"):
        if layout_match := _LAYOUT_RE.match(base):
            name, parent = layout_match.groups()
            _check_layout_name(name, file)
            _check_layout_name(parent, file)
            return RouteFile(
                "layout", directory, file, base, rank, layout=name, parent=parent
            )

        if base == "+error":
            return RouteFile("error", directory, file, base, rank)

        if page_match := _PAGE_RE.match(base):
            layout = page_match.group(1)
            _check_layout_name(layout, file)
            route_id = directory if layout is None else f"{directory}@{layout}"
            return RouteFile("page", directory, file, base, rank, route_id=route_id, layout=layout)

        msg = f"Files prefixed with + are reserved (saw {file})"
        raise RouteDefinitionError(msg)

    stem, at, layout = base.partition("@")
    if at:
        _check_layout_name(layout, file)
    route_id = directory if stem == "index" else _join(directory, stem)
    if at:
        route_id = f"{route_id}@{layout}"
    return RouteFile(
        "page", directory, file, base, rank, route_id=route_id, layout=layout if at else None
    )


def _classify_module(directory: str, base: str, rank: int, file: str) -> RouteFile:
    if base.startswith("+"):
        kinds: dict[str, FileKind] = {
            "+layout.server": "layout_server",
            "+page.server": "page_server",
            "+server": "endpoint",
        }
        kind = kinds.get(base)
        if kind is None:
            msg = f"Files prefixed with + are reserved (saw {file})"
            raise RouteDefinitionError(msg)
        return RouteFile(kind, directory, file, base, rank, route_id=directory)

    if base == "index":
        route_id = directory
    elif base.startswith("index."):
        # index.json.js inside blog/ serves /blog.json
        route_id = f"{directory}{base[len('index') :]}"
    else:
        route_id = _join(directory, base)
    return RouteFile("endpoint", directory, file, base, rank, route_id=route_id)


def _drop_shadowed(files: list[RouteFile]) -> list[RouteFile]:
    """Keep one file per logical name, preferring the earlier extension."""
    best: dict[tuple[str, str, bool], RouteFile] = {}
    for rf in files:
        key = (rf.directory, rf.logical, rf.kind in ("layout", "error", "page"))
        current = best.get(key)
        if current is None or rf.rank < current.rank:
            if current is not None:
                logger.warning("%s shadows %s", rf.file, current.file)
            best[key] = rf
        else:
            logger.warning("%s shadows %s", current.file, rf.file)

    kept = {id(rf) for rf in best.values()}
    return [rf for rf in files if id(rf) in kept]


def _nested_roots(root: Path, config: ManifestConfig) -> tuple[str, ...]:
    """Matcher and asset directories that sit inside the routes root."""
    nested: list[str] = []
    for directory in (config.matchers_dir, config.assets_dir):
        rel = relative_path(config.resolve(directory), root)
        if rel not in (".", "..") and not rel.startswith("../"):
            nested.append(rel)
    return tuple(nested)


def _collect(root: Path, config: ManifestConfig, fs: FileSystem) -> list[RouteFile]:
    cwd = config.working_dir
    excluded = _nested_roots(root, config)
    files: list[RouteFile] = []
    for entry in walk(root, fs):
        if entry.is_dir:
            continue
        if any(entry.path.startswith(f"{prefix}/") for prefix in excluded):
            logger.debug("Skipping %s — inside the matchers or assets directory", entry.path)
            continue
        rf = classify(entry, config, file=relative_path(root / entry.path, cwd))
        if rf is not None:
            files.append(rf)
    return _drop_shadowed(files)


class _ComponentList:
    """Insertion-ordered set of component paths."""

    __slots__ = ("_index",)

    def __init__(self) -> None:
        self._index: dict[str, int] = {}

    def add(self, component: str | None) -> None:
        if component is not None and component not in self._index:
            self._index[component] = len(self._index)

    def to_tuple(self) -> tuple[str, ...]:
        return tuple(self._index)


def _build_graph(files: list[RouteFile], config: ManifestConfig) -> LayoutGraph:
    cwd = config.working_dir
    graph = LayoutGraph(
        default_layout=relative_path(config.default_layout, cwd),
        default_error=relative_path(config.default_error, cwd),
    )
    for rf in files:
        if rf.kind == "layout":
            graph.declare_layout(rf.directory, name=rf.layout, parent=rf.parent, file=rf.file)
        elif rf.kind == "error":
            graph.set_error(rf.directory, rf.file)
        elif rf.kind == "layout_server":
            graph.set_layout_server(rf.directory, rf.file)
    graph.validate()
    return graph


def _check_unique(routes: Iterable[tuple[RouteEntry, str]]) -> None:
    seen: dict[str, str] = {}
    for route, file in routes:
        first = seen.get(route.id)
        if first is not None:
            msg = f"Duplicate route {route.id or '/'}: {first} and {file}"
            raise RouteDefinitionError(msg)
        seen[route.id] = file


def _check_matchers(route: RouteEntry, file: str, matchers: Mapping[str, str]) -> None:
    for param in route.params:
        if param.matcher is not None and param.matcher not in matchers:
            msg = f'{file} references unknown matcher "{param.matcher}"'
            raise RouteDefinitionError(msg)


def _page_servers(files: list[RouteFile]) -> dict[str, str]:
    servers = {rf.directory: rf.file for rf in files if rf.kind == "page_server"}
    page_dirs = {rf.directory for rf in files if rf.kind == "page" and rf.logical.startswith("+page")}
    for directory, server in servers.items():
        if directory not in page_dirs:
            msg = f"{server} has no sibling +page component"
            raise RouteDefinitionError(msg)
    return servers


def compile_manifest(config: ManifestConfig | None = None, *, fs: FileSystem | None = None) -> Manifest:
    """Compile the routes directory into a :class:`Manifest`.

    A missing or empty routes directory is not an error: the manifest
    then has no routes and only the default layout and error components.

    Args:
        config: Manifest configuration. Defaults to ``ManifestConfig()``.
        fs: Filesystem provider. Defaults to the local disk.

    Raises:
        ConfigurationError: The configuration or a matcher is invalid.
        RouteDefinitionError: A route, layout, or parameter is invalid.
    """
    config = config or ManifestConfig()
    config.validate()
    fs = fs or LocalFileSystem()

    matchers = discover_matchers(config, fs)
    routes_root = config.resolve(config.routes_dir)
    files = _collect(routes_root, config, fs)
    graph = _build_graph(files, config)

    components = _ComponentList()
    root_chain = graph.resolve("", layout=None, referrer=str(routes_root))
    for entry in root_chain.layouts:
        components.add(entry.component)
    for error in root_chain.errors:
        components.add(error)
    for rf in files:
        if rf.kind in ("layout", "error"):
            components.add(rf.file)

    servers = _page_servers(files)
    built: list[tuple[RouteEntry, str]] = []

    for rf in files:
        if rf.kind == "page":
            pattern, params = compile_route(rf.route_id, source=rf.file)
            chain = graph.resolve(rf.directory, layout=rf.layout, referrer=rf.file)
            server = servers.get(rf.directory) if rf.logical.startswith("+page") else None
            route: RouteEntry = PageRoute(
                id=rf.route_id,
                pattern=pattern,
                params=params,
                layouts=chain.layouts,
                errors=chain.errors,
                page=PageNode(component=rf.file, server=server),
            )
            for entry in chain.layouts:
                components.add(entry.component)
            for error in chain.errors:
                components.add(error)
            components.add(rf.file)
        elif rf.kind == "endpoint":
            pattern, params = compile_route(rf.route_id, endpoint=True, source=rf.file)
            route = EndpointRoute(id=rf.route_id, pattern=pattern, params=params, file=rf.file)
        else:
            continue

        _check_matchers(route, rf.file, matchers)
        built.append((route, rf.file))

    _check_unique(built)
    routes = sort_routes([route for route, _ in built])
    assets = index_assets(config, fs)

    manifest = Manifest(
        components=components.to_tuple(),
        routes=tuple(routes),
        assets=assets,
        matchers=matchers,
    )
    logger.info(
        "Compiled %d routes, %d components, %d assets, %d matchers",
        len(manifest.routes),
        len(manifest.components),
        len(manifest.assets),
        len(manifest.matchers),
    )
    return manifest
