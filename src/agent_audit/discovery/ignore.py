"""``.agentauditignore`` support.

Gitignore-like lines: ``#`` comments, blank lines, ``!`` negation, trailing
``/`` for directories, and ``*``/``**``/``?`` globs. The last matching line
decides whether a path is ignored.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".agentauditignore"


@lru_cache(maxsize=512)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a ``**``-aware ignore glob to a regex over posix relative paths."""
    index = 0
    parts: list[str] = []
    while index < len(pattern):
        if pattern.startswith("**/", index):
            parts.append("(?:[^/]*/)*")
            index += 3
        elif pattern.startswith("**", index):
            parts.append(".*")
            index += 2
        elif pattern[index] == "*":
            parts.append("[^/]*")
            index += 1
        elif pattern[index] == "?":
            parts.append("[^/]")
            index += 1
        else:
            parts.append(re.escape(pattern[index]))
            index += 1
    return re.compile("".join(parts) + r"\Z")


def glob_match(relative: str, pattern: str) -> bool:
    return glob_to_regex(pattern).match(relative) is not None


@dataclass(frozen=True)
class IgnoreRule:
    pattern: str
    negated: bool = False
    directory: bool = False

    def matches(self, relative: str) -> bool:
        pattern = self.pattern
        anchored = pattern.startswith("/")
        if anchored:
            pattern = pattern[1:]
        elif "/" not in pattern:
            pattern = f"**/{pattern}"
        if self.directory:
            return glob_match(relative, f"{pattern}/**")
        return glob_match(relative, pattern) or glob_match(relative, f"{pattern}/**")


@dataclass(frozen=True)
class IgnoreSpec:
    rules: tuple[IgnoreRule, ...] = field(default_factory=tuple)

    def is_ignored(self, relative: str) -> bool:
        ignored = False
        for rule in self.rules:
            if rule.matches(relative):
                ignored = not rule.negated
        return ignored

    def __bool__(self) -> bool:
        return bool(self.rules)


def parse_ignore_lines(lines: list[str] | tuple[str, ...]) -> IgnoreSpec:
    rules: list[IgnoreRule] = []
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        negated = line.startswith("!")
        if negated:
            line = line[1:]
        directory = line.endswith("/")
        line = line.rstrip("/")
        if not line:
            continue
        rules.append(IgnoreRule(pattern=line, negated=negated, directory=directory))
    return IgnoreSpec(rules=tuple(rules))


def load_ignore_file(root: Path) -> IgnoreSpec:
    path = root / IGNORE_FILE_NAME
    if not path.is_file():
        return IgnoreSpec()
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        logger.info("ignoring unreadable %s: %s", path, error)
        return IgnoreSpec()
    return parse_ignore_lines(text.splitlines())
