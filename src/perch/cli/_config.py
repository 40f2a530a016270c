"""Command-line options -> ManifestConfig, and compile error reporting.

Shared by ``perch routes``, ``perch check``, and ``perch sync``.
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import Any

from perch.config import ManifestConfig
from perch.errors import PerchError
from perch.manifest import Manifest

logger = logging.getLogger("perch.cli")

# argparse dest -> ManifestConfig field
_FIELDS = {
    "cwd": "cwd",
    "routes": "routes_dir",
    "assets": "assets_dir",
    "params": "matchers_dir",
    "out": "output_dir",
}


def config_from_args(args: argparse.Namespace) -> ManifestConfig:
    """Build a config from parsed options; unset options keep their defaults."""
    overrides: dict[str, Any] = {}
    for dest, field_name in _FIELDS.items():
        value = getattr(args, dest, None)
        if value is not None:
            overrides[field_name] = value

    if getattr(args, "ext", None):
        overrides["extensions"] = tuple(args.ext)
    if getattr(args, "module_ext", None):
        overrides["module_extensions"] = tuple(args.module_ext)

    return replace(ManifestConfig(), **overrides)


def configure_logging(args: argparse.Namespace) -> None:
    level = logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def compile_or_exit(args: argparse.Namespace) -> tuple[Manifest, ManifestConfig]:
    """Compile the manifest, or print the error and exit 1."""
    from perch.pages.discovery import compile_manifest

    configure_logging(args)
    config = config_from_args(args)
    try:
        manifest = compile_manifest(config)
    except PerchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    return manifest, config
