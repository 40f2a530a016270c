"""Perch — compile a routes directory into a route manifest.

Turns a tree of route files into an ordered, immutable routing table:
pages with their layout and error-boundary chains, endpoints with their
handler modules, static asset metadata, and parameter matchers.

Basic usage::

    from perch import ManifestConfig, compile_manifest

    manifest = compile_manifest(ManifestConfig(routes_dir="src/routes"))
    for route in manifest.routes:
        if route.match("/blog/hello-world") is not None:
            ...
"""

__version__ = "0.1.0"
__all__ = [
    "Asset",
    "ConfigurationError",
    "EndpointRoute",
    "LayoutCycleError",
    "LayoutEntry",
    "LayoutError",
    "Manifest",
    "ManifestConfig",
    "MatcherError",
    "PageNode",
    "PageRoute",
    "PerchError",
    "RouteDefinitionError",
    "RouteParam",
    "compile_manifest",
    "sort_routes",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "compile_manifest":
        from perch.pages.discovery import compile_manifest

        return compile_manifest

    if name == "ManifestConfig":
        from perch.config import ManifestConfig

        return ManifestConfig

    if name == "Manifest":
        from perch.manifest import Manifest

        return Manifest

    if name == "Asset":
        from perch.assets import Asset

        return Asset

    if name == "LayoutEntry":
        from perch.pages.types import LayoutEntry

        return LayoutEntry

    if name in ("EndpointRoute", "PageNode", "PageRoute", "RouteParam"):
        from perch.routing import route as _route

        return getattr(_route, name)

    if name == "sort_routes":
        from perch.routing.sort import sort_routes

        return sort_routes

    if name in (
        "ConfigurationError",
        "LayoutCycleError",
        "LayoutError",
        "MatcherError",
        "PerchError",
        "RouteDefinitionError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
