from __future__ import annotations

import json
from pathlib import Path

from agent_audit.models.findings import Confidence, Finding, ScanContext, Severity
from agent_audit.models.reports import ScanReport, ScanResult
from agent_audit.output import (
    export_json_report,
    export_sarif_report,
    format_summary_report,
    render_console_report,
)
from agent_audit.scoring.risk import evaluate_risk


def _report() -> ScanReport:
    results = [
        ScanResult(
            scanner="secret-leak-scanner",
            scanned_files=2,
            findings=[
                Finding(
                    id="SL-002-config.py-4",
                    scanner="secret-leak-scanner",
                    severity=Severity.CRITICAL,
                    title="Potential secret detected: OpenAI API key",
                    description="Found pattern at line 4.",
                    file="config.py",
                    line=4,
                    recommendation="Remove hardcoded secrets.",
                    confidence=Confidence.DEFINITE,
                    rule_id="SL-002",
                )
            ],
        ),
        ScanResult(
            scanner="defense-analyzer",
            scanned_files=2,
            findings=[
                Finding(
                    id="DF-006-MISSING",
                    scanner="defense-analyzer",
                    severity=Severity.HIGH,
                    title="Missing defense: Canary Tokens/Tripwires",
                    description="No canary patterns.",
                    recommendation="Add canary tokens.",
                    rule_id="DF-006",
                )
            ],
            notes=["skipping large file 'dump.json' (20000000 bytes)"],
        ),
    ]
    return ScanReport(
        version="0.1.0",
        target="/work/agent",
        context=ScanContext.FRAMEWORK,
        results=results,
        summary=evaluate_risk(results),
    )


def test_json_export_round_trips_report(tmp_path: Path) -> None:
    output = tmp_path / "report.json"
    payload = export_json_report(_report(), str(output))

    data = json.loads(output.read_text(encoding="utf-8"))
    assert data == json.loads(payload)
    assert data["context"] == "framework"
    assert data["summary"]["critical"] == 1
    assert data["results"][0]["findings"][0]["rule_id"] == "SL-002"
    assert ScanReport.model_validate_json(payload).all_findings()[1].id == "DF-006-MISSING"


def test_sarif_export_levels_and_locations() -> None:
    sarif = json.loads(export_sarif_report(_report()))
    run = sarif["runs"][0]

    assert sarif["version"] == "2.1.0"
    assert run["tool"]["driver"]["name"] == "agent-audit"
    assert [rule["id"] for rule in run["tool"]["driver"]["rules"]] == [
        "secret-leak-scanner/SL-002",
        "defense-analyzer/DF-006",
    ]
    secret, defense = run["results"]
    assert secret["level"] == "error"
    assert secret["properties"] == {"confidence": "definite"}
    assert secret["locations"][0]["physicalLocation"]["region"] == {"startLine": 4}
    assert "locations" not in defense


def test_summary_report_sections() -> None:
    text = format_summary_report(_report())
    lines = text.splitlines()

    assert lines[0] == "Agent Audit Summary"
    assert "Context: framework" in lines
    assert "Scanner: secret-leak-scanner" in lines
    assert "1. [CRITICAL] Potential secret detected: OpenAI API key" in lines
    assert "   Location: config.py:4" in lines
    assert "1. skipping large file 'dump.json' (20000000 bytes)" in lines
    assert lines[-2] == "1. Remove hardcoded secrets."
    assert lines[-1] == "2. Add canary tokens."


def test_console_report_prints_table(capsys) -> None:
    render_console_report(_report(), no_color=True)
    out = capsys.readouterr().out
    assert "agent-audit results" in out
    assert "CRITICAL" in out
    assert "Notes:" in out
