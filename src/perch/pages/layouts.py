"""Named-layout graph and layout chain resolution.

Every directory in the routes tree has a *default* layout node, backed by
its ``+layout`` file when there is one.  Directories may also declare
*named* layouts (``+layout-<name>``).  Each node has at most one parent:

    +layout                  parent: enclosing directory's default chain
    +layout@<p>              parent: named layout <p>
    +layout-<name>           parent: enclosing directory's default chain
    +layout-<name>@default   parent: this directory's default chain
    +layout-<name>@<p>       parent: named layout <p>

Named layouts are looked up from the referring directory upwards, so a
directory can shadow an ancestor's layout of the same name.  Resolution
walks parent links with an explicit stack; revisiting a node that is
still on the stack is a cycle and the stack is the cycle.
"""

import logging
from collections.abc import Iterator

from perch.errors import LayoutCycleError, LayoutError
from perch.pages.types import (
    DirectoryScope,
    LayoutDecl,
    LayoutEntry,
    LayoutLevel,
    ResolvedChain,
)

logger = logging.getLogger("perch.layouts")

DEFAULT = "default"

# (directory, layout name); DEFAULT names the directory's unnamed layout
type LayoutKey = tuple[str, str]


def _parent_dir(directory: str) -> str | None:
    if not directory:
        return None
    head, _, _ = directory.rpartition("/")
    return head


def _lineage(directory: str) -> Iterator[str]:
    """Yield *directory* and each ancestor up to the routes root."""
    current: str | None = directory
    while current is not None:
        yield current
        current = _parent_dir(current)


class LayoutGraph:
    """The layout declarations of one routes tree, and their resolution.

    Usage::

        graph = LayoutGraph(default_layout="layout.svelte", default_error="error.svelte")
        graph.declare_layout("", name=None, parent=None, file="src/routes/+layout.svelte")
        graph.declare_layout("", name="auth", parent=None, file="src/routes/+layout-auth.svelte")
        graph.validate()
        chain = graph.resolve("login", layout="auth", referrer="src/routes/login/+page@auth.svelte")

    Built fresh for every compile; resolved chains are memoised for the
    lifetime of the graph only.
    """

    __slots__ = ("_default_error", "_default_layout", "_resolved", "_scopes")

    def __init__(self, *, default_layout: str, default_error: str) -> None:
        self._default_layout = default_layout
        self._default_error = default_error
        self._scopes: dict[str, DirectoryScope] = {}
        self._resolved: dict[LayoutKey, tuple[LayoutLevel, ...]] = {}

    # -- Building ----------------------------------------------------------

    def scope(self, directory: str) -> DirectoryScope:
        """Return the scope for *directory*, creating an empty one if needed."""
        scope = self._scopes.get(directory)
        if scope is None:
            scope = self._scopes[directory] = DirectoryScope(path=directory)
        return scope

    def declare_layout(
        self,
        directory: str,
        *,
        name: str | None,
        parent: str | None,
        file: str,
    ) -> LayoutDecl:
        """Register a ``+layout`` file.

        Args:
            directory: Directory relative to the routes root.
            name: Layout name, ``None`` for the directory's default layout.
            parent: The ``@parent`` part of the file name, if any.
            file: The layout file, named in error messages.

        Raises:
            LayoutError: *name* is ``"default"``, or the directory already
                declares a layout with this name.
        """
        if name == DEFAULT:
            msg = f'{file} cannot use reserved "{DEFAULT}" name'
            raise LayoutError(msg)

        scope = self.scope(directory)
        existing = scope.default if name is None else scope.named.get(name)
        if existing is not None:
            msg = f"Duplicate layout {file} already defined at {existing.file}"
            raise LayoutError(msg)

        decl = LayoutDecl(name=name or DEFAULT, parent=parent, file=file)
        if name is None:
            scope.default = decl
        else:
            scope.named[name] = decl
        return decl

    def set_error(self, directory: str, file: str) -> None:
        self.scope(directory).error = file

    def set_layout_server(self, directory: str, file: str) -> None:
        self.scope(directory).layout_server = file

    # -- Resolution --------------------------------------------------------

    def validate(self) -> None:
        """Resolve every declared layout so cycles and dangling parents surface.

        Layouts nobody uses are still checked.
        """
        for directory, scope in self._scopes.items():
            if scope.default is not None:
                self._resolve((directory, DEFAULT))
            for name in scope.named:
                self._resolve((directory, name))

    def resolve(self, directory: str, *, layout: str | None, referrer: str) -> ResolvedChain:
        """Resolve the layout and error chain for a page in *directory*.

        Args:
            directory: The page's directory relative to the routes root.
            layout: Named layout requested by the page, ``None`` for the
                directory's default chain.
            referrer: The page file, named in error messages.

        Raises:
            LayoutError: *layout* is not declared here or in any ancestor.
            LayoutCycleError: The chain loops back on itself.
        """
        if layout is None or layout == DEFAULT:
            key: LayoutKey = (directory, DEFAULT)
        else:
            key = self._lookup(directory, layout, referrer)
        return ResolvedChain.from_levels(self._resolve(key))

    def _lookup(self, directory: str, name: str, referrer: str) -> LayoutKey:
        for candidate in _lineage(directory):
            scope = self._scopes.get(candidate)
            if scope is not None and name in scope.named:
                return (candidate, name)
        msg = f'{referrer} references missing layout "{name}"'
        raise LayoutError(msg)

    def _decl(self, key: LayoutKey) -> LayoutDecl | None:
        directory, name = key
        scope = self._scopes.get(directory)
        if scope is None:
            return None
        return scope.default if name == DEFAULT else scope.named[name]

    def _parent(self, key: LayoutKey) -> LayoutKey | None:
        directory, name = key
        decl = self._decl(key)
        enclosing = _parent_dir(directory)
        inherited = None if enclosing is None else (enclosing, DEFAULT)

        if decl is None or decl.parent is None:
            return inherited
        if decl.parent == DEFAULT:
            # A default layout can't be its own parent
            return inherited if name == DEFAULT else (directory, DEFAULT)
        return self._lookup(directory, decl.parent, decl.file)

    def _level(self, key: LayoutKey) -> LayoutLevel:
        directory, name = key
        scope = self._scopes.get(directory) or DirectoryScope(path=directory)
        is_root = not directory

        error = scope.error or (self._default_error if is_root else None)

        if name != DEFAULT:
            return LayoutLevel(layout=LayoutEntry(scope.named[name].file), error=error)

        if scope.default is not None:
            component: str | None = scope.default.file
        elif is_root or scope.layout_server is not None:
            # Passthrough layout so the root (or a layout server) has a component
            component = self._default_layout
        else:
            component = None

        layout = None if component is None else LayoutEntry(component, server=scope.layout_server)
        return LayoutLevel(layout=layout, error=error)

    def _label(self, key: LayoutKey) -> str:
        decl = self._decl(key)
        if decl is not None:
            return decl.file
        directory, _ = key
        return f"{directory}/+layout" if directory else "+layout"

    def _resolve(self, start: LayoutKey) -> tuple[LayoutLevel, ...]:
        stack: list[LayoutKey] = []
        on_stack: set[LayoutKey] = set()
        key: LayoutKey | None = start

        while key is not None and key not in self._resolved:
            if key in on_stack:
                cycle = [*stack[stack.index(key) :], key]
                raise LayoutCycleError(tuple(self._label(k) for k in cycle))
            stack.append(key)
            on_stack.add(key)
            key = self._parent(key)

        levels = self._resolved[key] if key is not None else ()
        for pending in reversed(stack):
            levels = (*levels, self._level(pending))
            self._resolved[pending] = levels

        logger.debug("Resolved layout %s/%s (%d levels)", start[0], start[1], len(levels))
        return levels
