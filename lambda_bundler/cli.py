"""CLI entry point: lambda-bundle.

Examples:
    lambda-bundle                          # bundle from `build` to `lambda`
    lambda-bundle -f                       # same, removing `lambda` first
    lambda-bundle -i dist -o package -vv   # custom dirs, very verbose
    lambda-bundle -e aws-sdk -e other-pkg  # exclude two packages
    lambda-bundle -e ''                    # exclude nothing
"""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path

import click

from lambda_bundler.core.logging import setup_logging
from lambda_bundler.engine import bundle
from lambda_bundler.exceptions import BundlerError
from lambda_bundler.models import BundleResult
from lambda_bundler.strategies import DEFAULT_STRATEGY, STRATEGY_REGISTRY

# Defaults (overridable via env vars)
_DEFAULT_INPUT_DIR = os.environ.get("LAMBDA_BUNDLER_INPUT_DIR", "build")
_DEFAULT_OUTPUT_DIR = os.environ.get("LAMBDA_BUNDLER_OUTPUT_DIR", "lambda")
_DEFAULT_EXCLUDE = os.environ.get("LAMBDA_BUNDLER_EXCLUDE", "aws-sdk")

_SPLIT_RE = re.compile(r"[\s,]+")


def _parse_exclusions(values: tuple[str, ...]) -> list[str]:
    """Flatten ``-e`` values; each may hold several comma/space separated names.

    An empty value (``-e ''``) contributes nothing, so it disables exclusions.
    """
    names: list[str] = []
    for value in values:
        for name in _SPLIT_RE.split(value.strip()):
            if name and name not in names:
                names.append(name)
    return names


def _print_summary(result: BundleResult) -> None:
    click.echo(f"Bundled {result.package_count} package(s) into {result.output_dir}")
    click.echo(f"  {result.files_copied} file(s), {result.bytes_copied} byte(s) copied")
    for placement in result.placements:
        marker = " (unhoisted)" if placement.unhoisted else ""
        destination = placement.destination.relative_to(result.output_dir)
        click.echo(f"  {placement.request.render()} -> {destination}{marker}")


@click.command()
@click.option(
    "-i", "--input-dir",
    default=_DEFAULT_INPUT_DIR,
    show_default=True,
    type=click.Path(path_type=Path),
    help="Input directory to bundle",
)
@click.option(
    "-o", "--output-dir",
    default=_DEFAULT_OUTPUT_DIR,
    show_default=True,
    type=click.Path(path_type=Path),
    help="Output directory for bundle",
)
@click.option(
    "-e", "--exclude-packages",
    multiple=True,
    default=[_DEFAULT_EXCLUDE],
    show_default=True,
    help="Packages to exclude from bundling (repeatable; -e '' excludes nothing)",
)
@click.option(
    "-m", "--manifest",
    default=None,
    type=click.Path(path_type=Path),
    help="Root package.json (default: <input-dir>/package.json)",
)
@click.option(
    "-f", "--force",
    is_flag=True,
    help="Force mode, which deletes the output directory before running",
)
@click.option(
    "-s", "--strategy",
    default=DEFAULT_STRATEGY,
    show_default=True,
    type=click.Choice(sorted(STRATEGY_REGISTRY)),
    help="How a package's dependencies are discovered",
)
@click.option(
    "--no-preserve-symlinks",
    is_flag=True,
    help="Canonicalize symlinked package paths instead of keeping their link location",
)
@click.option("-v", "--verbose", count=True, help="Enable verbose output (multiple v for more)")
def main(
    input_dir: Path,
    output_dir: Path,
    exclude_packages: tuple[str, ...],
    manifest: Path | None,
    force: bool,
    strategy: str,
    no_preserve_symlinks: bool,
    verbose: int,
) -> None:
    """Bundle a package and its dependencies into a self-contained directory."""
    setup_logging(verbose)

    try:
        result = bundle(
            input_dir,
            output_dir,
            _parse_exclusions(exclude_packages),
            force,
            manifest_path=manifest,
            strategy=strategy,
            preserve_symlinks=not no_preserve_symlinks,
        )
    except BundlerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    _print_summary(result)


if __name__ == "__main__":
    main()
