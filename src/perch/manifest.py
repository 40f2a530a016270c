"""The compiled route manifest.

Consumed by the dispatch layer (``routes``, in order), the bundler
(``components`` and ``matchers``), and the static file server
(``assets``).  Frozen and rebuilt from scratch on every compile.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from perch.assets import Asset
from perch.routing.route import RouteEntry, RouteParam


def _params_dict(params: tuple[RouteParam, ...]) -> list[dict[str, Any]]:
    return [{"name": p.name, "matcher": p.matcher, "rest": p.rest} for p in params]


def route_to_dict(route: RouteEntry) -> dict[str, Any]:
    """JSON-ready form of a route entry. Patterns become regex source."""
    data: dict[str, Any] = {
        "type": route.type,
        "id": route.id,
        "pattern": route.pattern.pattern,
        "params": _params_dict(route.params),
    }
    if route.type == "endpoint":
        data["file"] = route.file
        return data

    data["layouts"] = [{"component": lay.component, "server": lay.server} for lay in route.layouts]
    data["errors"] = list(route.errors)
    data["page"] = {"component": route.page.component, "server": route.page.server}
    return data


@dataclass(frozen=True, slots=True)
class Manifest:
    """Everything the runtime and bundler need to know about the routes tree.

    Attributes:
        components: Every view component referenced, each once, in
            discovery order.
        routes: Pages and endpoints in match order.
        assets: Static files under the assets directory.
        matchers: Parameter matcher name -> module path.
    """

    components: tuple[str, ...] = ()
    routes: tuple[RouteEntry, ...] = ()
    assets: tuple[Asset, ...] = ()
    matchers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def component_index(self, component: str) -> int:
        """Position of *component* in ``components``."""
        return self.components.index(component)

    def find(self, route_id: str) -> RouteEntry | None:
        """Return the route with id *route_id*, if any."""
        return next((r for r in self.routes if r.id == route_id), None)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form of the whole manifest."""
        return {
            "components": list(self.components),
            "routes": [route_to_dict(route) for route in self.routes],
            "assets": [{"file": a.file, "size": a.size, "type": a.type} for a in self.assets],
            "matchers": dict(self.matchers),
        }
