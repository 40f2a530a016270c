"""``perch sync`` — write the generated manifest module."""

import argparse

from perch.cli._config import compile_or_exit


def run_sync(args: argparse.Namespace) -> None:
    """Compile the manifest and write ``manifest.js`` to the output directory."""
    from perch.generated import write_manifest

    manifest, config = compile_or_exit(args)
    target = write_manifest(manifest, config)
    print(f"Wrote {target}")
