"""Data models for the bundling engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from lambda_bundler.exceptions import render_chain


@dataclass(frozen=True)
class DependencyRequest:
    """A unit of work in the traversal queue."""

    package_name: str
    import_context: Path | None = None  # None: search from the bundle input directory
    dependency_chain: tuple[str, ...] = ()

    def child(self, package_name: str, import_context: Path) -> DependencyRequest:
        """Build the request for one of this package's own dependencies."""
        return DependencyRequest(
            package_name=package_name,
            import_context=import_context,
            dependency_chain=(*self.dependency_chain, self.package_name),
        )

    def render(self) -> str:
        location = os.path.relpath(self.import_context) if self.import_context else "root"
        return f"{render_chain(self.dependency_chain, self.package_name)} ({location})"


@dataclass(frozen=True)
class ResolvedPackage:
    """Outcome of resolving a package name from an import context."""

    resolved_manifest_path: Path

    @property
    def package_directory(self) -> Path:
        return self.resolved_manifest_path.parent


@dataclass(frozen=True)
class Placement:
    """One package directory copied into the output tree."""

    request: DependencyRequest
    source: Path
    destination: Path
    unhoisted: bool = False


@dataclass
class BundleResult:
    """Result of a completed bundling run."""

    input_dir: Path
    output_dir: Path
    strategy: str
    placements: list[Placement] = field(default_factory=list)
    files_copied: int = 0
    bytes_copied: int = 0

    @property
    def package_count(self) -> int:
        return len(self.placements)

    @property
    def unhoisted(self) -> list[Placement]:
        return [p for p in self.placements if p.unhoisted]
