"""Dependency strategies — auto-registered on import."""

from lambda_bundler.strategies import (
    manifest_declared,  # noqa: F401
    source_scanned,  # noqa: F401
)
from lambda_bundler.strategies.registry import (
    DEFAULT_STRATEGY,
    STRATEGY_REGISTRY,
    DependencyStrategy,
    get_strategy,
    register_strategy,
)

__all__ = [
    "DEFAULT_STRATEGY",
    "STRATEGY_REGISTRY",
    "DependencyStrategy",
    "get_strategy",
    "register_strategy",
]
