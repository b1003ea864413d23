"""Dependencies as declared in a package's package.json."""

from __future__ import annotations

from collections.abc import Collection
from pathlib import Path

from lambda_bundler.manifest import list_dependencies
from lambda_bundler.strategies.registry import register_strategy


class ManifestDeclaredStrategy:
    name = "manifest"

    def list_dependencies(
        self, package_dir: Path, manifest_path: Path, exclusions: Collection[str]
    ) -> list[str]:
        return list_dependencies(manifest_path, exclusions)


register_strategy(ManifestDeclaredStrategy())
