"""Perch CLI — compile, inspect, and write route manifests.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import sys


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    """Options shared by every subcommand that compiles a manifest."""
    parser.add_argument("--cwd", default=None, help="Project directory (default: current)")
    parser.add_argument("--routes", default=None, help="Routes directory")
    parser.add_argument("--assets", default=None, help="Static assets directory")
    parser.add_argument("--params", default=None, help="Parameter matchers directory")
    parser.add_argument(
        "--ext",
        action="append",
        default=None,
        help="Component extension, in priority order (repeatable, default: .svelte)",
    )
    parser.add_argument(
        "--module-ext",
        action="append",
        default=None,
        help="Module extension, in priority order (repeatable, default: .js .ts)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log discovery details")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch — compile a routes directory into a route manifest.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- perch routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List routes in match order")
    _add_config_arguments(routes_parser)

    # -- perch check ------------------------------------------------------
    check_parser = subparsers.add_parser("check", help="Validate the routes directory")
    _add_config_arguments(check_parser)

    # -- perch sync -------------------------------------------------------
    sync_parser = subparsers.add_parser("sync", help="Write the generated manifest module")
    _add_config_arguments(sync_parser)
    sync_parser.add_argument("--out", default=None, help="Output directory for generated files")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from perch.cli._routes import run_routes

        run_routes(args)
    elif args.command == "check":
        from perch.cli._check import run_check

        run_check(args)
    elif args.command == "sync":
        from perch.cli._sync import run_sync

        run_sync(args)
