from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class Severity(StrEnum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    INFO = "info"


class Confidence(StrEnum):
    DEFINITE = "definite"
    LIKELY = "likely"
    POSSIBLE = "possible"


class ScanContext(StrEnum):
    """How strictly findings are graded.

    ``app`` is the default. ``framework`` enables framework-aware downgrades for
    projects that legitimately ship shell, file and credential plumbing. ``skill``
    is the strict mode used for third-party skills and plugins: no context
    downgrades are applied.
    """

    APP = "app"
    FRAMEWORK = "framework"
    SKILL = "skill"


SEVERITY_RANK = {
    Severity.INFO: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


def severity_rank(value: Severity) -> int:
    return SEVERITY_RANK[value]


class Finding(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    scanner: str
    severity: Severity
    title: str
    description: str
    file: str | None = None
    line: int | None = None
    recommendation: str
    confidence: Confidence | None = None
    rule_id: str | None = None

    @property
    def location(self) -> str:
        if not self.file:
            return "n/a"
        if self.line:
            return f"{self.file}:{self.line}"
        return self.file
