"""Dependencies found by scanning JavaScript sources for module references.

Only string-literal specifiers are recognized; computed ``require(expr)``
calls are invisible to this strategy.
"""

from __future__ import annotations

import os
import re
from collections.abc import Collection, Iterator
from pathlib import Path

import structlog

from lambda_bundler.manifest import is_valid_package_name
from lambda_bundler.resolver import NODE_MODULES
from lambda_bundler.strategies.registry import register_strategy

log = structlog.get_logger("lambda_bundler.strategies.source_scan")

SOURCE_SUFFIXES = frozenset({".js", ".cjs", ".mjs"})

# require('module')
_REQUIRE_RE = re.compile(r"""\brequire\s*\(\s*['"]([^'"]+)['"]\s*\)""")

# import x from 'module' / import { a } from 'module' / export { a } from 'module'
_FROM_RE = re.compile(r"""\b(?:import|export)\b[^'";]*?\bfrom\s*['"]([^'"]+)['"]""", re.DOTALL)

# import 'module'  (side-effect)
_SIDE_EFFECT_IMPORT_RE = re.compile(r"""^\s*import\s*['"]([^'"]+)['"]""", re.MULTILINE)

# import('module')
_DYNAMIC_IMPORT_RE = re.compile(r"""\bimport\s*\(\s*['"]([^'"]+)['"]\s*\)""")

_PATTERNS = (_REQUIRE_RE, _FROM_RE, _SIDE_EFFECT_IMPORT_RE, _DYNAMIC_IMPORT_RE)

NODE_BUILTINS = frozenset(
    {
        "assert", "async_hooks", "buffer", "child_process", "cluster", "console",
        "constants", "crypto", "dgram", "diagnostics_channel", "dns", "domain",
        "events", "fs", "http", "http2", "https", "inspector", "module", "net",
        "os", "path", "perf_hooks", "process", "punycode", "querystring",
        "readline", "repl", "stream", "string_decoder", "sys", "timers", "tls",
        "trace_events", "tty", "url", "util", "v8", "vm", "wasi",
        "worker_threads", "zlib",
    }
)


def package_name_from_specifier(specifier: str) -> str | None:
    """Reduce an import specifier to the package it names.

    Returns None for relative/absolute paths and Node core modules.
    ``lodash/fp`` -> ``lodash``; ``@aws/client/x`` -> ``@aws/client``.
    """
    if not specifier or specifier.startswith((".", "/")) or specifier.startswith("node:"):
        return None
    parts = specifier.split("/")
    if specifier.startswith("@"):
        if len(parts) < 2 or not parts[1]:
            return None
        name = "/".join(parts[:2])
    else:
        name = parts[0]
    if name in NODE_BUILTINS or not is_valid_package_name(name):
        return None
    return name


def scan_source(content: str) -> set[str]:
    """Return the package names referenced by one JavaScript source text."""
    names: set[str] = set()
    for pattern in _PATTERNS:
        for match in pattern.finditer(content):
            name = package_name_from_specifier(match.group(1))
            if name is not None:
                names.add(name)
    return names


def _iter_sources(package_dir: Path) -> Iterator[Path]:
    for root_str, dirs, files in os.walk(package_dir, topdown=True):
        dirs[:] = sorted(d for d in dirs if d != NODE_MODULES)
        for name in sorted(files):
            path = Path(root_str) / name
            if path.suffix in SOURCE_SUFFIXES:
                yield path


class SourceScannedStrategy:
    name = "source-scan"

    def list_dependencies(
        self, package_dir: Path, manifest_path: Path, exclusions: Collection[str]
    ) -> list[str]:
        names: set[str] = set()
        for source in _iter_sources(package_dir):
            try:
                content = source.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                log.warning("source_scan.unreadable", path=str(source), exc_info=True)
                continue
            names.update(scan_source(content))
        return sorted(name for name in names if name not in exclusions)


register_strategy(SourceScannedStrategy())
