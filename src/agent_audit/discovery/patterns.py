from __future__ import annotations

from fnmatch import fnmatchcase

PROMPT_GLOBS: tuple[str, ...] = (
    "**/*prompt*",
    "**/*system*",
    "**/*instruction*",
    "**/.cursorrules",
    "**/*.md",
    "**/*.txt",
    "**/*.json",
    "**/*.yaml",
    "**/*.yml",
    "**/*.ts",
    "**/*.js",
    "**/*.py",
)

CONFIG_GLOBS: tuple[str, ...] = (
    "**/*.json",
    "**/*.yaml",
    "**/*.yml",
    "**/.env*",
    "**/config.*",
)

SOURCE_GLOBS: tuple[str, ...] = (
    "**/*.js",
    "**/*.ts",
    "**/*.mjs",
    "**/*.cjs",
    "**/*.py",
    "**/*.sh",
)


def name_matches_any(name: str, patterns: tuple[str, ...] | list[str]) -> bool:
    """Match a bare file name against the final segment of ``**/``-style globs."""
    return any(fnmatchcase(name, pattern.rsplit("/", 1)[-1]) for pattern in patterns)
