from __future__ import annotations

from pathlib import Path

import agent_audit.discovery.finder as finder_module
from agent_audit.discovery.finder import DiscoveryDiagnostics, discover_files
from agent_audit.discovery.ignore import glob_match, load_ignore_file, parse_ignore_lines
from agent_audit.discovery.patterns import CONFIG_GLOBS, PROMPT_GLOBS, name_matches_any


def _write(root: Path, relative: str, content: str = "x\n") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _relative(root: Path, paths: list[Path]) -> list[str]:
    return [path.relative_to(root.resolve()).as_posix() for path in paths]


def test_glob_match_double_star() -> None:
    assert glob_match("AGENTS.md", "**/*.md")
    assert glob_match("docs/guide/intro.md", "**/*.md")
    assert glob_match("prompts/system_prompt.txt", "**/*prompt*")
    assert not glob_match("docs/intro.md", "*.md")
    assert glob_match(".env.local", "**/.env*")


def test_name_matches_any_uses_final_segment() -> None:
    assert name_matches_any("mcp.json", CONFIG_GLOBS)
    assert name_matches_any(".env.production", CONFIG_GLOBS)
    assert name_matches_any("system_prompt.txt", PROMPT_GLOBS)
    assert not name_matches_any("logo.png", PROMPT_GLOBS)


def test_discover_expands_each_glob_once_per_file(tmp_path: Path) -> None:
    _write(tmp_path, "system_prompt.md")
    _write(tmp_path, ".env")
    _write(tmp_path, "deep/nested/config.toml")
    _write(tmp_path, "prompts/readme.png")

    found = discover_files(tmp_path, (*PROMPT_GLOBS, *CONFIG_GLOBS))

    assert _relative(tmp_path, found) == [".env", "deep/nested/config.toml", "system_prompt.md"]


def test_discover_filters_by_globs_and_sorts(tmp_path: Path) -> None:
    _write(tmp_path, "b.md")
    _write(tmp_path, "a/config.yaml")
    _write(tmp_path, "image.png")

    found = discover_files(tmp_path, PROMPT_GLOBS)

    assert _relative(tmp_path, found) == ["a/config.yaml", "b.md"]


def test_discover_skips_tooling_and_vendored_directories(tmp_path: Path) -> None:
    _write(tmp_path, ".git/config.json")
    _write(tmp_path, ".venv/lib/site.py")
    _write(tmp_path, "node_modules/pkg/index.js")
    _write(tmp_path, "src/index.js")

    assert _relative(tmp_path, discover_files(tmp_path, PROMPT_GLOBS)) == ["src/index.js"]
    assert _relative(tmp_path, discover_files(tmp_path, PROMPT_GLOBS, include_vendored=True)) == [
        "node_modules/pkg/index.js",
        "src/index.js",
    ]


def test_exclude_globs(tmp_path: Path) -> None:
    _write(tmp_path, "examples/demo.md")
    _write(tmp_path, "prompt.md")

    found = discover_files(tmp_path, PROMPT_GLOBS, exclude=["examples/"])

    assert _relative(tmp_path, found) == ["prompt.md"]


def test_ignore_file_with_negation(tmp_path: Path) -> None:
    _write(tmp_path, ".agentauditignore", "# generated\n*.log.md\nfixtures/\n!fixtures/keep.md\n")
    _write(tmp_path, "run.log.md")
    _write(tmp_path, "fixtures/drop.md")
    _write(tmp_path, "fixtures/keep.md")
    _write(tmp_path, "prompt.md")

    found = discover_files(tmp_path, ("**/*.md",))

    assert _relative(tmp_path, found) == ["fixtures/keep.md", "prompt.md"]


def test_negation_restores_file_pattern() -> None:
    spec = parse_ignore_lines(["*.md", "!keep.md"])
    assert spec.is_ignored("notes/drop.md")
    assert not spec.is_ignored("notes/keep.md")
    assert not spec.is_ignored("notes/keep.txt")


def test_anchored_and_directory_rules() -> None:
    spec = parse_ignore_lines(["/build.md", "cache/"])
    assert spec.is_ignored("build.md")
    assert not spec.is_ignored("docs/build.md")
    assert spec.is_ignored("app/cache/data.json")
    assert not spec.is_ignored("app/cache.json")


def test_missing_ignore_file_is_empty(tmp_path: Path) -> None:
    assert not load_ignore_file(tmp_path)


def test_single_file_target(tmp_path: Path) -> None:
    target = _write(tmp_path, "mcp.json", "{}")
    _write(tmp_path, "other.json", "{}")

    assert discover_files(target, CONFIG_GLOBS) == [target.resolve()]
    assert discover_files(target, ("**/*.py",)) == []


def test_missing_target_is_reported(tmp_path: Path) -> None:
    diagnostics = DiscoveryDiagnostics()
    assert discover_files(tmp_path / "missing", PROMPT_GLOBS, diagnostics=diagnostics) == []
    assert "is not a file or directory" in diagnostics.warnings[0]


def test_large_files_are_skipped_with_warning(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(finder_module, "MAX_FILE_BYTES", 16)
    _write(tmp_path, "big.md", "y" * 64)
    _write(tmp_path, "small.md", "ok\n")
    diagnostics = DiscoveryDiagnostics()

    found = discover_files(tmp_path, PROMPT_GLOBS, diagnostics=diagnostics)

    assert _relative(tmp_path, found) == ["small.md"]
    assert any("skipping large file" in warning for warning in diagnostics.warnings)
