"""Ancestor-directory package resolution (Node's node_modules lookup)."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import structlog

from lambda_bundler.exceptions import PackageNotFoundError
from lambda_bundler.manifest import MANIFEST_FILENAME, is_valid_package_name
from lambda_bundler.models import ResolvedPackage

log = structlog.get_logger("lambda_bundler.resolver")

NODE_MODULES = "node_modules"


class PackageResolver:
    """Locate a package's manifest the way Node searches ``node_modules``.

    Resolution starts from the importing package's directory (or from
    *base_dir* for top-level dependencies) and walks up to the filesystem
    root; the nearest ``node_modules/<name>/package.json`` wins, so a copy
    nested under the importer shadows one hoisted further up.
    """

    def __init__(self, base_dir: Path, *, preserve_symlinks: bool = True) -> None:
        self.preserve_symlinks = preserve_symlinks
        self.base_dir = self._absolute(base_dir)

    def search_paths(self, start: Path) -> Iterator[Path]:
        """Yield candidate ``node_modules`` directories, nearest first."""
        directory = self._absolute(start)
        for candidate in (directory, *directory.parents):
            if candidate.name == NODE_MODULES:
                continue
            yield candidate / NODE_MODULES

    def resolve(self, package_name: str, import_context: Path | None = None) -> ResolvedPackage:
        """Resolve *package_name* as imported from *import_context*.

        Raises:
            PackageNotFoundError: no search path contains the package, or
                *package_name* is not a bare or scoped package name.
        """
        if not is_valid_package_name(package_name):
            log.warning("resolver.invalid_name", package=package_name)
            raise PackageNotFoundError(package_name, [], reason="not a valid package name")

        start = import_context if import_context is not None else self.base_dir
        searched: list[Path] = []
        for search_path in self.search_paths(start):
            searched.append(search_path)
            candidate = search_path.joinpath(*package_name.split("/"), MANIFEST_FILENAME)
            if candidate.is_file():
                resolved = self._absolute(candidate)
                log.debug(
                    "resolver.hit",
                    package=package_name,
                    context=str(start),
                    manifest=str(resolved),
                )
                return ResolvedPackage(resolved_manifest_path=resolved)

        log.debug("resolver.miss", package=package_name, context=str(start), searched=len(searched))
        raise PackageNotFoundError(package_name, searched)

    def _absolute(self, path: Path) -> Path:
        if self.preserve_symlinks:
            return Path(os.path.abspath(path))
        return Path(os.path.realpath(path))
