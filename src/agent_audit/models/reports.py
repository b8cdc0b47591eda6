from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from agent_audit.models.findings import Finding, ScanContext


class ScanOptions(BaseModel):
    exclude: list[str] = Field(default_factory=list)
    context: ScanContext = ScanContext.APP
    include_vendored: bool = False


class ScanResult(BaseModel):
    scanner: str
    findings: list[Finding] = Field(default_factory=list)
    scanned_files: int = 0
    duration: int = 0
    notes: list[str] = Field(default_factory=list)


class DimensionScores(BaseModel):
    code_safety: int = 100
    config_safety: int = 100
    defense_score: int = 100
    environment_safety: int = 100


class ReportSummary(BaseModel):
    total_findings: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    info: int = 0
    score: int = 100
    grade: str = "A+"
    dimensions: DimensionScores = Field(default_factory=DimensionScores)
    scanned_files: int = 0
    duration: int = 0


class ScanReport(BaseModel):
    version: str
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    target: str
    context: ScanContext = ScanContext.APP
    results: list[ScanResult] = Field(default_factory=list)
    summary: ReportSummary = Field(default_factory=ReportSummary)

    def all_findings(self) -> list[Finding]:
        return [finding for result in self.results for finding in result.findings]
