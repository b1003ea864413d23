"""BundleEngine — breadth-first dependency traversal and flat-tree placement.

The engine copies the input directory into the output directory, then walks
the dependency graph breadth-first:

    resolve -> (skip if seen) -> place + copy -> enqueue sub-dependencies

Every resolved package lands at ``<output>/node_modules/<name>`` unless that
slot is already claimed by a *different* physical package. In that case the
package is unhoisted under its dependent's own destination. A second
collision at the unhoisted slot is fatal; deeper nesting is never attempted.
"""

from __future__ import annotations

import os
import shutil
from collections import deque
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from lambda_bundler.copier import CopyStats, TreeCopier, copy_tree
from lambda_bundler.exceptions import (
    InvalidInputError,
    OutputAlreadyExistsError,
    PackageNotFoundError,
    UnresolvableConflictError,
)
from lambda_bundler.manifest import MANIFEST_FILENAME
from lambda_bundler.models import BundleResult, DependencyRequest, Placement
from lambda_bundler.resolver import NODE_MODULES, PackageResolver
from lambda_bundler.strategies import DEFAULT_STRATEGY, get_strategy

log = structlog.get_logger("lambda_bundler.engine")

DEFAULT_EXCLUSIONS: tuple[str, ...] = ("aws-sdk",)


@dataclass(frozen=True)
class BundledDirectory:
    package_directory: Path
    unhoisted_for: Path | None = None  # import context the copy was nested for


@dataclass(frozen=True)
class DestinationClaim:
    request: DependencyRequest
    package_directory: Path


@dataclass
class TraversalState:
    """Mutable bookkeeping for a single bundling run."""

    resolved_set: set[Path] = field(default_factory=set)
    bundled_directories: list[BundledDirectory] = field(default_factory=list)
    directory_to_destination: dict[Path, Path] = field(default_factory=dict)
    destination_claims: dict[Path, DestinationClaim] = field(default_factory=dict)

    def is_bundled(self, package_directory: Path) -> bool:
        """True if *package_directory* was copied to its primary (non-unhoisted) slot."""
        return any(
            entry.package_directory == package_directory and entry.unhoisted_for is None
            for entry in self.bundled_directories
        )

    def claim(
        self,
        destination: Path,
        request: DependencyRequest,
        package_directory: Path,
        unhoisted_for: Path | None,
    ) -> None:
        self.destination_claims[destination] = DestinationClaim(request, package_directory)
        self.directory_to_destination[package_directory] = destination
        self.bundled_directories.append(BundledDirectory(package_directory, unhoisted_for))


def _package_path(base: Path, package_name: str) -> Path:
    # Scoped names (@scope/pkg) become two path segments.
    return base.joinpath(NODE_MODULES, *package_name.split("/"))


def _relative(path: Path) -> str:
    return os.path.relpath(path)


def _tally(result: BundleResult, stats: CopyStats) -> None:
    result.files_copied += stats.files_copied
    result.bytes_copied += stats.bytes_copied


class BundleEngine:
    """Build a self-contained ``node_modules`` bundle for one input directory.

    Each call to :meth:`run` uses fresh traversal state, so an engine can be
    re-run safely (with ``force=True``) against the same output directory.
    """

    def __init__(
        self,
        input_dir: Path,
        output_dir: Path,
        *,
        exclusions: Collection[str] = DEFAULT_EXCLUSIONS,
        force: bool = False,
        manifest_path: Path | None = None,
        strategy: str = DEFAULT_STRATEGY,
        copier: TreeCopier = copy_tree,
        preserve_symlinks: bool = True,
    ) -> None:
        self.input_dir = Path(os.path.abspath(input_dir))
        self.output_dir = Path(os.path.abspath(output_dir))
        self.exclusions = frozenset(exclusions)
        self.force = force
        self.manifest_path = (
            Path(os.path.abspath(manifest_path))
            if manifest_path is not None
            else self.input_dir / MANIFEST_FILENAME
        )
        self.strategy = get_strategy(strategy)
        self.copier = copier
        self.resolver = PackageResolver(self.input_dir, preserve_symlinks=preserve_symlinks)

    # ── public API ───────────────────────────────────────────────────────

    def run(self) -> BundleResult:
        """Execute one bundling run.

        Raises:
            BundlerError: any failure; the output directory must then be
                treated as invalid (no rollback is attempted).
        """
        self._check_preconditions()

        log.info("bundle.check_dependencies", manifest=_relative(self.manifest_path))
        root_dependencies = self.strategy.list_dependencies(
            self.input_dir, self.manifest_path, self.exclusions
        )

        result = BundleResult(
            input_dir=self.input_dir,
            output_dir=self.output_dir,
            strategy=self.strategy.name,
        )
        _tally(result, self._prepare_output())

        state = TraversalState()
        queue: deque[DependencyRequest] = deque(
            DependencyRequest(package_name=name) for name in root_dependencies
        )

        while queue:
            request = queue.popleft()
            children = self._process(request, state, result)
            queue.extend(children)

        log.info(
            "bundle.complete",
            output=_relative(self.output_dir),
            packages=result.package_count,
            unhoisted=len(result.unhoisted),
            files=result.files_copied,
            bytes=result.bytes_copied,
        )
        return result

    # ── phases ───────────────────────────────────────────────────────────

    def _check_preconditions(self) -> None:
        if not self.input_dir.exists():
            raise InvalidInputError(f"Input directory {self.input_dir} does not exist")
        if not self.input_dir.is_dir():
            raise InvalidInputError(f"Input directory {self.input_dir} is not a directory")
        if self.output_dir == self.input_dir or self.output_dir in self.input_dir.parents:
            raise InvalidInputError(
                f"Output directory {self.output_dir} must not contain the input directory"
            )
        if (self.output_dir.exists() or self.output_dir.is_symlink()) and not self.force:
            raise OutputAlreadyExistsError(self.output_dir)

    def _prepare_output(self) -> CopyStats:
        if self.output_dir.is_symlink() or self.output_dir.is_file():
            log.info("bundle.remove_output", output=_relative(self.output_dir))
            self.output_dir.unlink()
        elif self.output_dir.exists():
            log.info("bundle.remove_output", output=_relative(self.output_dir))
            shutil.rmtree(self.output_dir)

        log.info("bundle.create_output", output=_relative(self.output_dir))
        self.output_dir.mkdir(parents=True)

        log.info(
            "bundle.copy_input",
            source=_relative(self.input_dir),
            destination=_relative(self.output_dir),
        )
        return self.copier(self.input_dir, self.output_dir, exclude=[self.output_dir])

    def _process(
        self,
        request: DependencyRequest,
        state: TraversalState,
        result: BundleResult,
    ) -> Iterable[DependencyRequest]:
        """Resolve, place and expand one request; return its child requests."""
        try:
            resolved = self.resolver.resolve(request.package_name, request.import_context)
        except PackageNotFoundError as exc:
            raise exc.with_chain(request.dependency_chain) from exc

        manifest_path = resolved.resolved_manifest_path
        if manifest_path in state.resolved_set:
            log.debug("bundle.already_resolved", dependency=request.render())
            return ()

        log.info("bundle.dependency", dependency=request.render())
        package_dir = resolved.package_directory

        if state.is_bundled(package_dir):
            log.info("bundle.already_bundled", source=_relative(package_dir))
        else:
            placement, stats = self._place(request, package_dir, state)
            result.placements.append(placement)
            _tally(result, stats)

        subdependencies = self.strategy.list_dependencies(
            package_dir, manifest_path, self.exclusions
        )
        state.resolved_set.add(manifest_path)

        if subdependencies:
            log.info(
                "bundle.subdependencies",
                dependency=request.package_name,
                names=subdependencies,
            )
        return [request.child(name, package_dir) for name in subdependencies]

    def _place(
        self,
        request: DependencyRequest,
        package_dir: Path,
        state: TraversalState,
    ) -> tuple[Placement, CopyStats]:
        destination = _package_path(self.output_dir, request.package_name)
        unhoisted_for: Path | None = None

        claim = state.destination_claims.get(destination)
        if claim is not None and claim.package_directory != package_dir:
            destination = self._unhoisted_destination(request, package_dir, destination, claim, state)
            unhoisted_for = request.import_context

        state.claim(destination, request, package_dir, unhoisted_for)
        log.info(
            "bundle.copy",
            source=_relative(package_dir),
            destination=_relative(destination),
            unhoisted=unhoisted_for is not None,
        )
        stats = self.copier(package_dir, destination)
        placement = Placement(
            request=request,
            source=package_dir,
            destination=destination,
            unhoisted=unhoisted_for is not None,
        )
        return placement, stats

    def _unhoisted_destination(
        self,
        request: DependencyRequest,
        package_dir: Path,
        default_destination: Path,
        claim: DestinationClaim,
        state: TraversalState,
    ) -> Path:
        dependent_destination = (
            state.directory_to_destination.get(request.import_context)
            if request.import_context is not None
            else None
        )
        if dependent_destination is None:
            raise UnresolvableConflictError(
                default_destination,
                request,
                claim.request,
                "the dependent has no bundle destination to nest under",
            )

        nested = _package_path(dependent_destination, request.package_name)
        nested_claim = state.destination_claims.get(nested)
        if nested_claim is not None and nested_claim.package_directory != package_dir:
            raise UnresolvableConflictError(
                nested,
                request,
                nested_claim.request,
                "the unhoisted destination is claimed as well",
            )

        log.info(
            "bundle.unhoist",
            dependency=request.render(),
            conflicts_with=claim.request.render(),
            destination=_relative(nested),
        )
        return nested


def bundle(
    input_dir: Path,
    output_dir: Path,
    exclusions: Collection[str] = DEFAULT_EXCLUSIONS,
    force: bool = False,
    *,
    manifest_path: Path | None = None,
    strategy: str = DEFAULT_STRATEGY,
    copier: TreeCopier = copy_tree,
    preserve_symlinks: bool = True,
) -> BundleResult:
    """Bundle *input_dir* and its resolved dependencies into *output_dir*."""
    engine = BundleEngine(
        input_dir,
        output_dir,
        exclusions=exclusions,
        force=force,
        manifest_path=manifest_path,
        strategy=strategy,
        copier=copier,
        preserve_symlinks=preserve_symlinks,
    )
    return engine.run()
