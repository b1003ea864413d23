"""lambda-bundler: flatten a workspace package's node_modules into a deployable bundle."""

__version__ = "0.1.0"

from lambda_bundler.engine import DEFAULT_EXCLUSIONS, BundleEngine, TraversalState, bundle
from lambda_bundler.exceptions import (
    BundlerError,
    InvalidInputError,
    ManifestError,
    ManifestInvalidError,
    ManifestNotFoundError,
    ManifestUnreadableError,
    OutputAlreadyExistsError,
    PackageNotFoundError,
    UnknownStrategyError,
    UnresolvableConflictError,
)
from lambda_bundler.manifest import list_dependencies, read_manifest
from lambda_bundler.models import BundleResult, DependencyRequest, Placement, ResolvedPackage
from lambda_bundler.resolver import PackageResolver

__all__ = [
    "DEFAULT_EXCLUSIONS",
    "BundleEngine",
    "BundleResult",
    "BundlerError",
    "DependencyRequest",
    "InvalidInputError",
    "ManifestError",
    "ManifestInvalidError",
    "ManifestNotFoundError",
    "ManifestUnreadableError",
    "OutputAlreadyExistsError",
    "PackageNotFoundError",
    "PackageResolver",
    "Placement",
    "ResolvedPackage",
    "TraversalState",
    "UnknownStrategyError",
    "UnresolvableConflictError",
    "bundle",
    "list_dependencies",
    "read_manifest",
]
