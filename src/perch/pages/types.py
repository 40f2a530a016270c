"""Data models for filesystem-based layout resolution.

Immutable frozen dataclasses representing the layouts, error boundaries,
and directory scopes discovered in the routes directory.  Built once per
compile and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class LayoutEntry:
    """A layout component in a page's layout chain.

    Attributes:
        component: Layout template path (relative to the working directory).
        server: ``+layout.server`` module backing the layout, if any.
            Only default layouts carry one.
    """

    component: str
    server: str | None = None


@dataclass(frozen=True, slots=True)
class LayoutDecl:
    """A ``+layout`` file as declared on disk.

    ``name`` is ``"default"`` for the directory's unnamed layout.
    ``parent`` is the ``@parent`` written in the file name, or ``None``
    when the file name has no ``@`` part.
    """

    name: str
    parent: str | None
    file: str


@dataclass(slots=True)
class DirectoryScope:
    """Everything a single routes directory contributes to layout resolution.

    Mutable while the walk fills it in; frozen into the resolver's graph
    afterwards.

    Attributes:
        path: Directory path relative to the routes root (``""`` for root).
        default: The directory's unnamed layout, if declared.
        named: Named layouts declared in this directory, by name.
        error: Error boundary component for this directory.
        layout_server: ``+layout.server`` module for the default layout.
    """

    path: str
    default: LayoutDecl | None = None
    named: dict[str, LayoutDecl] = field(default_factory=dict)
    error: str | None = None
    layout_server: str | None = None


@dataclass(frozen=True, slots=True)
class LayoutLevel:
    """One resolved level of a layout chain, outermost first.

    ``layout`` is ``None`` for directories on the default chain that
    declare no layout; ``error`` is ``None`` where the level's directory
    declares no error boundary.
    """

    layout: LayoutEntry | None
    error: str | None


@dataclass(frozen=True, slots=True)
class ResolvedChain:
    """Layouts and error boundaries for one page, ready for the manifest."""

    layouts: tuple[LayoutEntry, ...] = ()
    errors: tuple[str | None, ...] = ()

    @classmethod
    def from_levels(cls, levels: tuple[LayoutLevel, ...]) -> ResolvedChain:
        """Compact layouts; keep error slots positional, trimming trailing gaps."""
        layouts = tuple(level.layout for level in levels if level.layout is not None)
        errors = [level.error for level in levels]
        while errors and errors[-1] is None:
            errors.pop()
        return cls(layouts=layouts, errors=tuple(errors))
