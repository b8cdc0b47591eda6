from __future__ import annotations

from pathlib import Path

import pytest

from agent_audit.config import load_settings
from agent_audit.models.findings import ScanContext, Severity


@pytest.fixture
def isolated(tmp_path: Path, monkeypatch) -> Path:
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for name in ("AGENT_AUDIT_CONTEXT", "AGENT_AUDIT_EXCLUDE", "AGENT_AUDIT_INCLUDE_VENDORED"):
        monkeypatch.delenv(name, raising=False)
    return workdir


def test_defaults(isolated: Path) -> None:
    settings = load_settings()
    assert settings.context is ScanContext.APP
    assert settings.exclude == []
    assert settings.include_vendored is False
    assert settings.scanners == []
    assert settings.min_severity is Severity.INFO
    assert settings.fail_on is None


def test_project_toml(isolated: Path) -> None:
    (isolated / "agent-audit.toml").write_text(
        'context = "framework"\n'
        'exclude = ["examples/**", "docs/**"]\n'
        'scanners = "secret-leak-scanner, mcp-config-auditor"\n'
        'fail_on = "high"\n'
        "include_vendored = true\n",
        encoding="utf-8",
    )
    settings = load_settings()
    assert settings.context is ScanContext.FRAMEWORK
    assert settings.exclude == ["examples/**", "docs/**"]
    assert settings.scanners == ["secret-leak-scanner", "mcp-config-auditor"]
    assert settings.fail_on is Severity.HIGH
    assert settings.include_vendored is True


def test_home_config_is_a_fallback(isolated: Path, tmp_path: Path) -> None:
    config = tmp_path / "home" / ".config" / "agent-audit" / "config.toml"
    config.parent.mkdir(parents=True)
    config.write_text('context = "skill"\n', encoding="utf-8")
    assert load_settings().context is ScanContext.SKILL


def test_environment_overrides_toml(isolated: Path, monkeypatch) -> None:
    (isolated / "agent-audit.toml").write_text(
        'context = "framework"\nexclude = ["docs/**"]\ninclude_vendored = true\n', encoding="utf-8"
    )
    monkeypatch.setenv("AGENT_AUDIT_CONTEXT", "skill")
    monkeypatch.setenv("AGENT_AUDIT_EXCLUDE", "vendor/**, build/**")
    monkeypatch.setenv("AGENT_AUDIT_INCLUDE_VENDORED", "no")

    settings = load_settings()
    assert settings.context is ScanContext.SKILL
    assert settings.exclude == ["vendor/**", "build/**"]
    assert settings.include_vendored is False


def test_cli_values_win(isolated: Path, monkeypatch) -> None:
    monkeypatch.setenv("AGENT_AUDIT_CONTEXT", "skill")
    monkeypatch.setenv("AGENT_AUDIT_INCLUDE_VENDORED", "1")
    settings = load_settings(
        context=ScanContext.FRAMEWORK,
        exclude=["tmp/**"],
        include_vendored=False,
        min_severity=Severity.MEDIUM,
    )
    assert settings.context is ScanContext.FRAMEWORK
    assert settings.exclude == ["tmp/**"]
    assert settings.include_vendored is False
    assert settings.min_severity is Severity.MEDIUM


def test_unreadable_toml_is_ignored(isolated: Path) -> None:
    (isolated / "agent-audit.toml").write_text("context = [unterminated\n", encoding="utf-8")
    assert load_settings().context is ScanContext.APP
