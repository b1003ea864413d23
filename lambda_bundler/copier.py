"""Recursive directory copy used to materialize bundle contents."""

from __future__ import annotations

import os
import shutil
from collections.abc import Collection
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import structlog

from lambda_bundler.resolver import NODE_MODULES

log = structlog.get_logger("lambda_bundler.copier")


@dataclass
class CopyStats:
    files_copied: int = 0
    bytes_copied: int = 0


class TreeCopier(Protocol):
    def __call__(
        self, source_dir: Path, dest_dir: Path, *, exclude: Collection[Path] = ()
    ) -> CopyStats: ...


def copy_tree(source_dir: Path, dest_dir: Path, *, exclude: Collection[Path] = ()) -> CopyStats:
    """Copy *source_dir* into *dest_dir*, skipping every ``node_modules`` directory.

    Each package's own dependencies are resolved and placed separately, so
    nested ``node_modules`` are never copied. Symlinks below the root are
    skipped; *source_dir* itself may be a symlink. Absolute paths in
    *exclude* are pruned from the walk.
    """
    excluded = {Path(os.path.abspath(p)) for p in exclude}
    source_root = Path(os.path.abspath(source_dir))
    stats = CopyStats()

    dest_dir.mkdir(parents=True, exist_ok=True)

    for root_str, dirs, files in os.walk(source_root, topdown=True):
        root_path = Path(root_str)
        rel_root = root_path.relative_to(source_root)

        keep_dirs: list[str] = []
        for name in sorted(dirs):
            path = root_path / name
            if name == NODE_MODULES or path in excluded:
                continue
            if path.is_symlink():
                log.debug("copier.skip_symlink", path=str(path))
                continue
            keep_dirs.append(name)
        dirs[:] = keep_dirs

        out_dir = dest_dir / rel_root
        out_dir.mkdir(parents=True, exist_ok=True)

        for name in sorted(files):
            src_path = root_path / name
            if src_path in excluded:
                continue
            if src_path.is_symlink():
                log.debug("copier.skip_symlink", path=str(src_path))
                continue
            shutil.copy2(src_path, out_dir / name)
            stats.files_copied += 1
            stats.bytes_copied += src_path.stat().st_size
            log.debug("copier.file", path=str(rel_root / name))

    return stats
