"""Custom exceptions for lambda-bundler.

Every error is fatal to a bundling run; nothing in the engine retries or
skips a failing dependency.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lambda_bundler.models import DependencyRequest


class BundlerError(Exception):
    """Base exception for all bundler errors."""


class InvalidInputError(BundlerError):
    """Raised when the input directory is missing or not a directory."""


class OutputAlreadyExistsError(BundlerError):
    """Raised when the output directory exists and force mode is off."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir
        super().__init__(
            f"Output directory {output_dir} already exists (use --force to replace it)"
        )


class ManifestError(BundlerError):
    """Base for package manifest failures."""

    def __init__(self, manifest_path: Path, message: str):
        self.manifest_path = manifest_path
        super().__init__(message)


class ManifestNotFoundError(ManifestError):
    """Raised when a manifest path does not exist or is not a regular file."""


class ManifestUnreadableError(ManifestError):
    """Raised when a manifest file exists but cannot be read."""


class ManifestInvalidError(ManifestError):
    """Raised when a manifest is not a JSON object or has a malformed dependency map."""


def render_chain(dependency_chain: Sequence[str], package_name: str) -> str:
    """Render ``a#b#name``, the diagnostic form of a dependency chain."""
    return "#".join([*dependency_chain, package_name])


class PackageNotFoundError(BundlerError):
    """Raised when no ``node_modules`` search path contains the package."""

    def __init__(
        self,
        package_name: str,
        search_paths: Sequence[Path],
        dependency_chain: Sequence[str] = (),
        reason: str | None = None,
    ):
        self.package_name = package_name
        self.search_paths = list(search_paths)
        self.dependency_chain = tuple(dependency_chain)
        self.reason = reason
        detail = reason or f"searched {len(self.search_paths)} locations"
        super().__init__(
            f"Failed to resolve package path for {render_chain(self.dependency_chain, package_name)}"
            f" ({detail})"
        )

    def with_chain(self, dependency_chain: Sequence[str]) -> PackageNotFoundError:
        """Return a copy annotated with the chain that requested the package."""
        return PackageNotFoundError(
            self.package_name, self.search_paths, dependency_chain, self.reason
        )


class UnresolvableConflictError(BundlerError):
    """Raised when two packages need the same destination and unhoisting cannot help."""

    def __init__(
        self,
        destination: Path,
        request: DependencyRequest,
        claimed_by: DependencyRequest,
        reason: str,
    ):
        self.destination = destination
        self.request = request
        self.claimed_by = claimed_by
        super().__init__(
            f"Bundle destination conflict at {destination}: targeted by {request.render()}, "
            f"but already claimed by {claimed_by.render()} ({reason})"
        )


class UnknownStrategyError(BundlerError):
    """Raised when a dependency strategy name is not registered."""

    def __init__(self, name: str, available: Sequence[str]):
        self.name = name
        self.available = list(available)
        super().__init__(
            f"Unknown dependency strategy '{name}'. Available: {', '.join(self.available)}"
        )
