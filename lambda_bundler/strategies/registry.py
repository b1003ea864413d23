"""Strategy registry — pluggable discovery of a package's dependency names."""

from __future__ import annotations

from collections.abc import Collection
from pathlib import Path
from typing import Protocol, runtime_checkable

from lambda_bundler.exceptions import UnknownStrategyError


@runtime_checkable
class DependencyStrategy(Protocol):
    """Interface that every dependency strategy must satisfy."""

    name: str

    def list_dependencies(
        self, package_dir: Path, manifest_path: Path, exclusions: Collection[str]
    ) -> list[str]: ...


STRATEGY_REGISTRY: dict[str, DependencyStrategy] = {}

DEFAULT_STRATEGY = "manifest"


def register_strategy(strategy: DependencyStrategy) -> None:
    """Register a strategy instance by its name."""
    STRATEGY_REGISTRY[strategy.name] = strategy


def get_strategy(name: str) -> DependencyStrategy:
    try:
        return STRATEGY_REGISTRY[name]
    except KeyError:
        raise UnknownStrategyError(name, sorted(STRATEGY_REGISTRY)) from None
