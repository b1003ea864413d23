"""Shared pytest fixtures for lambda-bundler tests."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
import structlog


def write_package(
    node_modules: Path,
    name: str,
    dependencies: dict[str, str] | None = None,
    files: dict[str, str] | None = None,
    version: str = "1.0.0",
) -> Path:
    """Create ``node_modules/<name>`` with a package.json and optional files."""
    package_dir = node_modules.joinpath(*name.split("/"))
    package_dir.mkdir(parents=True, exist_ok=True)
    manifest: dict = {"name": name, "version": version}
    if dependencies is not None:
        manifest["dependencies"] = dependencies
    (package_dir / "package.json").write_text(json.dumps(manifest))
    for rel, content in (files or {"index.js": f"module.exports = '{name}@{version}';\n"}).items():
        target = package_dir / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
    return package_dir


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Monorepo root: ``<tmp>/repo`` with hoisted ``node_modules`` and ``packages/app``."""
    root = tmp_path / "repo"
    (root / "node_modules").mkdir(parents=True)
    return root


@pytest.fixture
def app_dir(workspace: Path) -> Path:
    """The package being bundled, with one source file and an empty manifest."""
    app = workspace / "packages" / "app"
    app.mkdir(parents=True)
    (app / "index.js").write_text("exports.handler = async () => 'ok';\n")
    (app / "package.json").write_text(json.dumps({"name": "app", "version": "0.0.1"}))
    return app


def set_app_dependencies(app_dir: Path, dependencies: dict[str, str]) -> None:
    (app_dir / "package.json").write_text(
        json.dumps({"name": "app", "version": "0.0.1", "dependencies": dependencies})
    )


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    return tmp_path / "lambda"


@pytest.fixture
def make_package():
    return write_package


@pytest.fixture
def set_deps():
    return set_app_dependencies


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo CLI/logging configuration so handlers never outlive a test's streams."""
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()
