"""Generated client manifest.

Renders a compiled :class:`~perch.manifest.Manifest` into a JavaScript
module the client runtime imports: lazy component and matcher imports
plus the route table, with layouts and errors as indices into the
component list.

Rendered with kida; the template lives in this module.
"""

import json
import logging
from pathlib import Path
from typing import Any

from kida import Environment

from perch._internal.fs import relative_path
from perch.config import ManifestConfig
from perch.manifest import Manifest
from perch.routing.route import RouteEntry

logger = logging.getLogger("perch.generated")

MANIFEST_FILENAME = "manifest.js"

MANIFEST_TEMPLATE = """\
// Generated by perch — do not edit.

export const components = [
{% for component in components %}
\t() => import({{ component }}),
{% end %}
];

export const matchers = {
{% for matcher in matchers %}
\t{{ matcher.name }}: () => import({{ matcher.path }}),
{% end %}
};

export const routes = [
{% for route in routes %}
\t{{ route }},
{% end %}
];
"""

_env = Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True)


def js_regex(source: str) -> str:
    """Turn Python regex source into a JavaScript regex literal."""
    return "/" + source.replace("/", "\\/") + "/"


def _import_path(path: str, cwd: Path, out_dir: Path) -> str:
    rel = relative_path(cwd / path, out_dir)
    if not rel.startswith("."):
        rel = f"./{rel}"
    return json.dumps(rel)


def _route_literal(route: RouteEntry, manifest: Manifest, cwd: Path, out_dir: Path) -> str:
    fields: list[tuple[str, Any]] = [
        ("type", json.dumps(route.type)),
        ("id", json.dumps(route.id)),
        ("pattern", js_regex(route.pattern.pattern)),
        ("params", json.dumps([[p.name, p.matcher, p.rest] for p in route.params])),
    ]

    if route.type == "endpoint":
        fields.append(("file", f"() => import({_import_path(route.file, cwd, out_dir)})"))
    else:
        layouts = [manifest.component_index(entry.component) for entry in route.layouts]
        errors = [None if e is None else manifest.component_index(e) for e in route.errors]
        fields.append(("layouts", json.dumps(layouts)))
        fields.append(("errors", json.dumps(errors)))
        fields.append(("page", str(manifest.component_index(route.page.component))))
        if route.page.server is not None:
            fields.append(("server", f"() => import({_import_path(route.page.server, cwd, out_dir)})"))

    return "{ " + ", ".join(f"{key}: {value}" for key, value in fields) + " }"


def render_manifest(manifest: Manifest, config: ManifestConfig | None = None) -> str:
    """Render *manifest* as the text of the generated JavaScript module."""
    config = config or ManifestConfig()
    cwd = config.working_dir
    out_dir = config.resolve(config.output_dir)

    context = {
        "components": [_import_path(c, cwd, out_dir) for c in manifest.components],
        "matchers": [
            {"name": name, "path": _import_path(path, cwd, out_dir)}
            for name, path in manifest.matchers.items()
        ],
        "routes": [_route_literal(route, manifest, cwd, out_dir) for route in manifest.routes],
    }
    return _env.from_string(MANIFEST_TEMPLATE).render(context)


def write_manifest(manifest: Manifest, config: ManifestConfig | None = None) -> Path:
    """Write the generated module into ``config.output_dir``.

    The file is only rewritten when its content changes, so file
    watchers downstream don't fire on no-op syncs.

    Returns:
        Path of the generated file.
    """
    config = config or ManifestConfig()
    out_dir = config.resolve(config.output_dir)
    target = out_dir / MANIFEST_FILENAME
    text = render_manifest(manifest, config)

    if target.is_file() and target.read_text(encoding="utf-8") == text:
        logger.debug("%s is up to date", target)
        return target

    out_dir.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")
    logger.info("Wrote %s (%d routes)", target, len(manifest.routes))
    return target
