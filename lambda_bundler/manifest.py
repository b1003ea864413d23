"""Package manifest (package.json) reading and validation."""

from __future__ import annotations

import re
from collections.abc import Collection
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

from lambda_bundler.exceptions import (
    ManifestInvalidError,
    ManifestNotFoundError,
    ManifestUnreadableError,
)

log = structlog.get_logger("lambda_bundler.manifest")

MANIFEST_FILENAME = "package.json"

# A bare name or @scope/name; no separators beyond the scope slash.
_PACKAGE_NAME_RE = re.compile(r"^(?:@[^/\\]+/)?[^/\\@][^/\\]*$")


class PackageManifest(BaseModel):
    """The subset of package.json the bundler cares about.

    Only ``dependencies`` is validated; every other field (``name``,
    ``version``, ...) is kept as-is in ``model_extra``. Version specs are
    never evaluated.
    """

    model_config = ConfigDict(extra="allow")

    dependencies: dict[str, str] | None = None


def is_valid_package_name(package_name: str) -> bool:
    """True for ``name`` or ``@scope/name`` with no ``.``/``..`` path segments."""
    if not _PACKAGE_NAME_RE.match(package_name):
        return False
    return all(segment not in (".", "..") for segment in package_name.split("/"))


def read_manifest(manifest_path: Path) -> PackageManifest:
    """Load and validate a manifest file.

    Raises:
        ManifestNotFoundError: path is missing or not a regular file.
        ManifestUnreadableError: the file could not be read as UTF-8 text.
        ManifestInvalidError: content is not a JSON object or ``dependencies``
            is not a name -> version-spec mapping.
    """
    if not manifest_path.exists():
        raise ManifestNotFoundError(
            manifest_path, f"Package file '{manifest_path}' does not exist"
        )
    if not manifest_path.is_file():
        raise ManifestNotFoundError(
            manifest_path, f"Package file '{manifest_path}' is not a file"
        )

    try:
        raw = manifest_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestUnreadableError(
            manifest_path, f"Failed to read package file '{manifest_path}': {exc}"
        ) from exc

    try:
        return PackageManifest.model_validate_json(raw)
    except ValidationError as exc:
        raise ManifestInvalidError(
            manifest_path, f"Invalid package specification at '{manifest_path}': {_summarize(exc)}"
        ) from exc


def list_dependencies(manifest_path: Path, exclusions: Collection[str] = ()) -> list[str]:
    """Return declared dependency names in declaration order, minus *exclusions*."""
    manifest = read_manifest(manifest_path)
    if not manifest.dependencies:
        return []

    invalid = [name for name in manifest.dependencies if not is_valid_package_name(name)]
    if invalid:
        raise ManifestInvalidError(
            manifest_path,
            f"Invalid package specification at '{manifest_path}': "
            f"dependency name '{invalid[0]}' is not a package name",
        )

    names = [name for name in manifest.dependencies if name not in exclusions]
    skipped = len(manifest.dependencies) - len(names)
    if skipped:
        log.debug("manifest.excluded", manifest=str(manifest_path), count=skipped)
    return names


def _summarize(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    return f"{location}: {first['msg']}"
