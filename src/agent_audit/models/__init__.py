"""Domain models."""

from agent_audit.models.findings import Confidence, Finding, ScanContext, Severity, severity_rank
from agent_audit.models.reports import DimensionScores, ReportSummary, ScanOptions, ScanReport, ScanResult
from agent_audit.models.roles import FileContext, FileRole

__all__ = [
    "Confidence",
    "DimensionScores",
    "FileContext",
    "FileRole",
    "Finding",
    "ReportSummary",
    "ScanContext",
    "ScanOptions",
    "ScanReport",
    "ScanResult",
    "Severity",
    "severity_rank",
]
