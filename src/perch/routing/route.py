"""Route part, parameter, and manifest entry frozen dataclasses."""

import re
from dataclasses import dataclass, field
from typing import Literal

from perch.pages.types import LayoutEntry

type PartKind = Literal["static", "param", "rest"]


@dataclass(frozen=True, slots=True)
class RoutePart:
    """A parsed piece of one route id segment.

    Static:   ``about``     (kind="static", content="about")
    Param:    ``[slug]``    (kind="param", name="slug")
    Matched:  ``[id=int]``  (kind="param", name="id", matcher="int")
    Rest:     ``[...path]`` (kind="rest", name="path")
    """

    kind: PartKind
    content: str
    name: str | None = None
    matcher: str | None = None

    @property
    def dynamic(self) -> bool:
        return self.kind != "static"


# One ``/``-delimited segment: alternating static/dynamic parts, always
# starting and ending with a (possibly empty) static part
type Segment = tuple[RoutePart, ...]


@dataclass(frozen=True, slots=True)
class RouteParam:
    """A dynamic parameter captured by a route pattern, in capture order."""

    name: str
    matcher: str | None = None
    rest: bool = False


def _exec(pattern: re.Pattern[str], params: tuple[RouteParam, ...], path: str) -> dict[str, str] | None:
    match = pattern.match(path)
    if match is None:
        return None
    return {param.name: value or "" for param, value in zip(params, match.groups(), strict=True)}


@dataclass(frozen=True, slots=True)
class PageNode:
    """The leaf of a page route: its component and optional data module."""

    component: str
    server: str | None = None


@dataclass(frozen=True, slots=True)
class PageRoute:
    """A page: rendered through its layout chain, guarded by error boundaries.

    Attributes:
        id: Route id (e.g. ``blog/[slug]``), unique per manifest.
        pattern: Anchored regex matched against the URL pathname.
        params: Parameters in capture-group order.
        layouts: Layout components, outermost first.
        errors: Error boundaries, outermost first; ``None`` marks a level
            without its own boundary.
        page: The page component and its server module.
    """

    id: str
    pattern: re.Pattern[str]
    params: tuple[RouteParam, ...]
    layouts: tuple[LayoutEntry, ...]
    errors: tuple[str | None, ...]
    page: PageNode
    type: Literal["page"] = field(default="page", init=False)

    def match(self, path: str) -> dict[str, str] | None:
        """Return captured parameters if *path* matches, else ``None``."""
        return _exec(self.pattern, self.params, path)


@dataclass(frozen=True, slots=True)
class EndpointRoute:
    """An endpoint: a single handler module, no view component."""

    id: str
    pattern: re.Pattern[str]
    params: tuple[RouteParam, ...]
    file: str
    type: Literal["endpoint"] = field(default="endpoint", init=False)

    def match(self, path: str) -> dict[str, str] | None:
        """Return captured parameters if *path* matches, else ``None``."""
        return _exec(self.pattern, self.params, path)


# Consumers switch on ``.type``
type RouteEntry = PageRoute | EndpointRoute
