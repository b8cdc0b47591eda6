from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from agent_audit.discovery.ignore import IgnoreSpec, load_ignore_file, parse_ignore_lines
from agent_audit.discovery.patterns import name_matches_any

logger = logging.getLogger(__name__)

MAX_FILE_BYTES = 10 * 1024 * 1024

IGNORED_DIR_NAMES = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    ".tox",
    "coverage",
}

VENDORED_DIR_NAMES = {
    "node_modules",
    "vendor",
    "third_party",
    "dist",
    "build",
}

IGNORED_FILE_SUFFIXES = {
    ".pyc",
    ".pyo",
}


@dataclass
class DiscoveryDiagnostics:
    warnings: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.info("discovery warning: %s", message)


def _warn_oserror(diagnostics: DiscoveryDiagnostics, context: str, error: OSError) -> None:
    diagnostics.warn(f"{context}: {error.__class__.__name__}: {error}")


def _is_ignored_file(rel: Path, *, include_vendored: bool) -> bool:
    directories = rel.parts[:-1]
    if any(part in IGNORED_DIR_NAMES for part in directories):
        return True
    if not include_vendored and any(part in VENDORED_DIR_NAMES for part in directories):
        return True
    return any(rel.name.endswith(suffix) for suffix in IGNORED_FILE_SUFFIXES)


def _iter_matches(root: Path, pattern: str, diagnostics: DiscoveryDiagnostics) -> list[Path]:
    context = f"failed scanning pattern '{pattern}' under '{root}'"
    matches: list[Path] = []
    try:
        iterator = root.glob(pattern)
    except OSError as error:
        _warn_oserror(diagnostics, context, error)
        return matches

    while True:
        try:
            path = next(iterator)
        except StopIteration:
            break
        except OSError as error:
            _warn_oserror(diagnostics, context, error)
            break
        matches.append(path)
    return matches


def _candidate_files(
    root: Path,
    patterns: tuple[str, ...],
    diagnostics: DiscoveryDiagnostics,
    *,
    include_vendored: bool,
) -> list[Path]:
    candidates: set[Path] = set()
    for pattern in patterns:
        candidates.update(_iter_matches(root, pattern, diagnostics))

    files: list[Path] = []
    for file_path in sorted(candidates, key=lambda item: str(item)):
        if _is_ignored_file(file_path.relative_to(root), include_vendored=include_vendored):
            continue
        try:
            if not file_path.is_file():
                continue
            size = file_path.stat().st_size
        except OSError as error:
            _warn_oserror(diagnostics, f"failed reading file metadata '{file_path}'", error)
            continue
        if size > MAX_FILE_BYTES:
            diagnostics.warn(f"skipping large file '{file_path}' ({size} bytes)")
            continue
        files.append(file_path)
    return files


def discover_files(
    root: str | Path,
    globs: Iterable[str],
    *,
    exclude: Iterable[str] = (),
    include_vendored: bool = False,
    diagnostics: DiscoveryDiagnostics | None = None,
) -> list[Path]:
    """Return sorted absolute paths under ``root`` matching any of ``globs``.

    A single file is returned as-is when its name matches. Exclude globs and
    the project's ``.agentauditignore`` are applied to paths relative to ``root``.
    """
    diagnostics = diagnostics or DiscoveryDiagnostics()
    patterns = tuple(globs)
    try:
        base = Path(root).expanduser().resolve()
    except OSError as error:
        _warn_oserror(diagnostics, f"failed resolving '{root}'", error)
        return []

    if base.is_file():
        return [base] if name_matches_any(base.name, patterns) else []
    if not base.is_dir():
        diagnostics.warn(f"'{base}' is not a file or directory")
        return []

    excluded = parse_ignore_lines(list(exclude))
    ignore_file: IgnoreSpec = load_ignore_file(base)

    selected: list[Path] = []
    for file_path in _candidate_files(base, patterns, diagnostics, include_vendored=include_vendored):
        relative = file_path.relative_to(base).as_posix()
        if excluded.is_ignored(relative) or ignore_file.is_ignored(relative):
            continue
        selected.append(file_path)
    return selected
