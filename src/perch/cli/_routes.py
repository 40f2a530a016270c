"""``perch routes`` — list compiled routes.

Compiles the routes directory and prints every route in match order
with its type, id, and pattern.
"""

import argparse

from perch.cli._config import compile_or_exit


def run_routes(args: argparse.Namespace) -> None:
    """Print a table of TYPE, ID, and PATTERN in match order."""
    manifest, _ = compile_or_exit(args)

    routes = manifest.routes
    if not routes:
        print("No routes found.")
        return

    # Build rows: (type, id, pattern)
    rows: list[tuple[str, str, str]] = [
        (route.type, f"/{route.id}", route.pattern.pattern) for route in routes
    ]

    # Column widths
    max_type = max(max(len(r[0]) for r in rows), 4)  # "TYPE" header
    max_id = max(max(len(r[1]) for r in rows), 2)  # "ID" header

    # Print table
    fmt = f"{{:<{max_type}}}  {{:<{max_id}}}  {{}}"
    print(fmt.format("TYPE", "ID", "PATTERN"))
    sep_len = max_type + max_id + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for route_type, route_id, pattern in rows:
        print(fmt.format(route_type, route_id, pattern))
