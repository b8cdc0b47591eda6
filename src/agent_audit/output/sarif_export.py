from __future__ import annotations

from pathlib import Path

from agent_audit.models.reports import ScanReport

LEVEL_MAP = {
    "critical": "error",
    "high": "error",
    "medium": "warning",
    "info": "note",
}


def export_sarif_report(report: ScanReport, output: str | None = None) -> str:
    results: list[dict[str, object]] = []
    rules: dict[str, dict[str, object]] = {}

    for finding in report.all_findings():
        rule_id = f"{finding.scanner}/{finding.rule_id or finding.id}"
        rules.setdefault(
            rule_id,
            {
                "id": rule_id,
                "name": finding.title,
                "shortDescription": {"text": finding.title},
                "help": {"text": finding.recommendation},
            },
        )
        result: dict[str, object] = {
            "ruleId": rule_id,
            "level": LEVEL_MAP[finding.severity.value],
            "message": {"text": finding.description},
        }
        if finding.confidence:
            result["properties"] = {"confidence": finding.confidence.value}
        if finding.file:
            region = {"startLine": finding.line or 1}
            result["locations"] = [
                {
                    "physicalLocation": {
                        "artifactLocation": {"uri": finding.file},
                        "region": region,
                    }
                }
            ]
        results.append(result)

    sarif = {
        "$schema": "https://json.schemastore.org/sarif-2.1.0.json",
        "version": "2.1.0",
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": "agent-audit",
                        "version": report.version,
                        "rules": list(rules.values()),
                    }
                },
                "results": results,
            }
        ],
    }

    import json

    payload = json.dumps(sarif, indent=2)
    if output:
        Path(output).write_text(payload, encoding="utf-8")
    return payload
