"""``perch check`` — routes directory validation command.

Compiles the manifest and reports the first error.  Exits with code 1
if the routes directory is invalid.
"""

import argparse

from perch.cli._config import compile_or_exit


def run_check(args: argparse.Namespace) -> None:
    manifest, _ = compile_or_exit(args)
    pages = sum(1 for route in manifest.routes if route.type == "page")
    endpoints = len(manifest.routes) - pages
    print(f"OK: {len(manifest.routes)} routes ({pages} pages, {endpoints} endpoints)")
