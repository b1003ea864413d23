"""Tests for package.json reading — pure filesystem, no network."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from lambda_bundler.exceptions import (
    ManifestError,
    ManifestInvalidError,
    ManifestNotFoundError,
    ManifestUnreadableError,
)
from lambda_bundler.manifest import (
    PackageManifest,
    is_valid_package_name,
    list_dependencies,
    read_manifest,
)


def _write(tmp_path: Path, payload) -> Path:
    path = tmp_path / "package.json"
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload))
    return path


class TestListDependencies:
    def test_returns_declared_names_in_order(self, tmp_path: Path):
        path = _write(tmp_path, {"dependencies": {"zeta": "^1", "alpha": "2.0.0", "mid": "*"}})
        assert list_dependencies(path) == ["zeta", "alpha", "mid"]

    def test_no_dependencies_field(self, tmp_path: Path):
        path = _write(tmp_path, {"name": "x", "devDependencies": {"jest": "*"}})
        assert list_dependencies(path) == []

    def test_null_dependencies_treated_as_absent(self, tmp_path: Path):
        path = _write(tmp_path, {"dependencies": None})
        assert list_dependencies(path) == []

    def test_empty_dependencies(self, tmp_path: Path):
        path = _write(tmp_path, {"dependencies": {}})
        assert list_dependencies(path) == []

    def test_exclusions_filtered(self, tmp_path: Path):
        path = _write(tmp_path, {"dependencies": {"aws-sdk": "*", "left-pad": "*"}})
        assert list_dependencies(path, {"aws-sdk"}) == ["left-pad"]

    def test_exclusion_not_declared_is_harmless(self, tmp_path: Path):
        path = _write(tmp_path, {"dependencies": {"left-pad": "*"}})
        assert list_dependencies(path, ["aws-sdk"]) == ["left-pad"]

    def test_scoped_names_kept_verbatim(self, tmp_path: Path):
        path = _write(tmp_path, {"dependencies": {"@aws-sdk/client-s3": "^3"}})
        assert list_dependencies(path) == ["@aws-sdk/client-s3"]

    @pytest.mark.parametrize(
        "extra",
        [{"version": 1}, {"name": 42}, {"name": None, "version": ["1", "0"]}],
    )
    def test_non_string_name_or_version_tolerated(self, tmp_path: Path, extra):
        path = _write(tmp_path, {**extra, "dependencies": {"a": "*", "b": "^2"}})
        assert list_dependencies(path) == ["a", "b"]


class TestManifestErrors:
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ManifestNotFoundError) as exc_info:
            list_dependencies(tmp_path / "package.json")
        assert "does not exist" in str(exc_info.value)

    def test_directory_is_not_a_file(self, tmp_path: Path):
        (tmp_path / "package.json").mkdir()
        with pytest.raises(ManifestNotFoundError, match="is not a file"):
            list_dependencies(tmp_path / "package.json")

    def test_invalid_json(self, tmp_path: Path):
        path = _write(tmp_path, "{not json")
        with pytest.raises(ManifestInvalidError):
            list_dependencies(path)

    @pytest.mark.parametrize("payload", ["[]", "42", '"text"', "null"])
    def test_non_object_root(self, tmp_path: Path, payload: str):
        path = _write(tmp_path, payload)
        with pytest.raises(ManifestInvalidError):
            list_dependencies(path)

    @pytest.mark.parametrize("deps", [["left-pad"], "left-pad", 3, True])
    def test_dependencies_not_a_mapping(self, tmp_path: Path, deps):
        path = _write(tmp_path, {"dependencies": deps})
        with pytest.raises(ManifestInvalidError, match="dependencies"):
            list_dependencies(path)

    def test_non_string_version_spec(self, tmp_path: Path):
        path = _write(tmp_path, {"dependencies": {"left-pad": 1}})
        with pytest.raises(ManifestInvalidError):
            list_dependencies(path)

    @pytest.mark.parametrize(
        "name",
        ["../../repo/packages/lib", "..", "./local", "/abs/pkg", "a/b", "@scope/..", "@scope", ""],
    )
    def test_path_like_dependency_name(self, tmp_path: Path, name: str):
        path = _write(tmp_path, {"dependencies": {"ok": "*", name: "*"}})
        with pytest.raises(ManifestInvalidError, match="not a package name"):
            list_dependencies(path)

    def test_undecodable_file(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_bytes(b'{"dependencies": {"\xff\xfe": "*"}}')
        with pytest.raises(ManifestUnreadableError):
            list_dependencies(path)

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="permission bits are ignored for root",
    )
    def test_permission_denied(self, tmp_path: Path):
        path = _write(tmp_path, {"dependencies": {}})
        path.chmod(0)
        try:
            with pytest.raises(ManifestUnreadableError):
                list_dependencies(path)
        finally:
            path.chmod(0o644)

    def test_errors_carry_path_and_share_base(self, tmp_path: Path):
        path = _write(tmp_path, "[]")
        with pytest.raises(ManifestError) as exc_info:
            list_dependencies(path)
        assert exc_info.value.manifest_path == path


class TestReadManifest:
    def test_extra_fields_allowed(self, tmp_path: Path):
        path = _write(
            tmp_path,
            {"name": "pkg", "version": "1.2.3", "main": "lib/index.js", "scripts": {"x": "y"}},
        )
        manifest = read_manifest(path)
        assert isinstance(manifest, PackageManifest)
        assert manifest.model_extra["name"] == "pkg"
        assert manifest.model_extra["version"] == "1.2.3"
        assert manifest.dependencies is None


class TestPackageNames:
    @pytest.mark.parametrize(
        "name", ["left-pad", "lodash.merge", "@aws-sdk/client-s3", "@s/pkg.js", "_private"]
    )
    def test_valid(self, name: str):
        assert is_valid_package_name(name)

    @pytest.mark.parametrize(
        "name", ["", ".", "..", "../x", "a/b", "@s/../x", "@s/..", "/x", "a\\b", "@s/"]
    )
    def test_invalid(self, name: str):
        assert not is_valid_package_name(name)
