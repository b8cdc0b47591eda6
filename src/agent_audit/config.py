from __future__ import annotations

import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from agent_audit.models.findings import ScanContext, Severity

TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    context: ScanContext = ScanContext.APP
    exclude: list[str] = Field(default_factory=list)
    include_vendored: bool = False
    scanners: list[str] = Field(default_factory=list)
    min_severity: Severity = Severity.INFO
    fail_on: Severity | None = None


def _load_config_file() -> dict[str, object]:
    candidates = [Path.cwd() / "agent-audit.toml", Path.home() / ".config/agent-audit/config.toml"]
    for candidate in candidates:
        if not candidate.exists():
            continue
        try:
            return tomllib.loads(candidate.read_text(encoding="utf-8"))
        except Exception:
            continue
    return {}


def _read_list(payload: dict[str, object], key: str) -> list[str]:
    value = payload.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return _split_csv(value)
    if isinstance(value, list):
        return [str(item) for item in value]
    return [str(value)]


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _env_flag(name: str) -> bool | None:
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip().lower() in TRUE_VALUES


def load_settings(
    *,
    context: ScanContext | None = None,
    exclude: list[str] | None = None,
    include_vendored: bool | None = None,
    scanners: list[str] | None = None,
    min_severity: Severity | None = None,
    fail_on: Severity | None = None,
) -> Settings:
    """Merge CLI values, ``AGENT_AUDIT_*`` environment and the TOML config file, in that order."""
    payload: dict[str, object] = _load_config_file()

    env_exclude = os.getenv("AGENT_AUDIT_EXCLUDE")
    env_vendored = _env_flag("AGENT_AUDIT_INCLUDE_VENDORED")
    cfg_vendored = payload.get("include_vendored", False)

    return Settings(
        context=context or os.getenv("AGENT_AUDIT_CONTEXT") or payload.get("context", ScanContext.APP),
        exclude=exclude or (_split_csv(env_exclude) if env_exclude else _read_list(payload, "exclude")),
        include_vendored=(
            include_vendored
            if include_vendored is not None
            else env_vendored if env_vendored is not None else bool(cfg_vendored)
        ),
        scanners=scanners or _read_list(payload, "scanners"),
        min_severity=min_severity or payload.get("min_severity", Severity.INFO),
        fail_on=fail_on or payload.get("fail_on"),
    )
