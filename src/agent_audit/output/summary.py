from __future__ import annotations

from collections import OrderedDict

from rich.console import Console

from agent_audit.models.findings import Finding, severity_rank
from agent_audit.models.reports import ScanReport, ScanResult


def _top_findings(result: ScanResult, limit: int = 5) -> list[Finding]:
    return sorted(
        result.findings,
        key=lambda item: (-severity_rank(item.severity), item.title.lower()),
    )[:limit]


def _recommended_actions(report: ScanReport, limit: int = 3) -> list[str]:
    ordered: OrderedDict[str, None] = OrderedDict()
    findings = sorted(report.all_findings(), key=lambda item: -severity_rank(item.severity))
    for finding in findings[:10]:
        if finding.recommendation:
            ordered[finding.recommendation] = None
    return list(ordered.keys())[:limit]


def format_summary_report(report: ScanReport) -> str:
    summary = report.summary
    dimensions = summary.dimensions
    lines: list[str] = []
    lines.append("Agent Audit Summary")
    lines.append(f"Target: {report.target}")
    lines.append(f"Context: {report.context.value}")
    lines.append(f"Score: {summary.score}/100 (grade {summary.grade})")
    lines.append(
        "Dimensions: "
        f"code={dimensions.code_safety}, "
        f"config={dimensions.config_safety}, "
        f"defense={dimensions.defense_score}, "
        f"environment={dimensions.environment_safety}"
    )
    lines.append(
        "Overall: "
        f"critical={summary.critical}, "
        f"high={summary.high}, "
        f"medium={summary.medium}, "
        f"info={summary.info}"
    )

    for result in report.results:
        lines.append("")
        lines.append(f"Scanner: {result.scanner}")
        lines.append(f"Files scanned: {result.scanned_files}, findings: {len(result.findings)}")

        if result.notes:
            lines.append("Notes:")
            for note_index, note in enumerate(result.notes, start=1):
                lines.append(f"{note_index}. {note}")

        top_findings = _top_findings(result)
        if not top_findings:
            lines.append("Top findings: none")
        else:
            lines.append("Top findings:")
            for finding_index, finding in enumerate(top_findings, start=1):
                lines.append(f"{finding_index}. [{finding.severity.value.upper()}] {finding.title}")
                lines.append(f"   Location: {finding.location}")

    actions = _recommended_actions(report)
    lines.append("")
    if not actions:
        lines.append("Recommended actions: none")
    else:
        lines.append("Recommended actions:")
        for action_index, action in enumerate(actions, start=1):
            lines.append(f"{action_index}. {action}")

    return "\n".join(lines)


def render_summary_report(report: ScanReport, *, no_color: bool = False) -> str:
    payload = format_summary_report(report)
    Console(no_color=no_color).print(payload, markup=False, soft_wrap=True)
    return payload
