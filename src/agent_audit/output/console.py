from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from agent_audit.models.findings import Severity
from agent_audit.models.reports import ScanReport

SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.INFO: "dim",
}


def render_console_report(report: ScanReport, *, no_color: bool = False) -> None:
    console = Console(no_color=no_color)
    table = Table(title="agent-audit results")
    table.add_column("Severity")
    table.add_column("Scanner")
    table.add_column("Finding")
    table.add_column("Location")
    table.add_column("Confidence")

    for result in report.results:
        for finding in result.findings:
            table.add_row(
                f"[{SEVERITY_STYLES[finding.severity]}]{finding.severity.value.upper()}[/]",
                finding.scanner,
                escape(finding.title),
                escape(finding.location),
                finding.confidence.value if finding.confidence else "-",
            )

    summary = report.summary
    console.print(table)
    console.print(f"Target: {escape(report.target)} (context={report.context.value})")
    console.print(
        f"Score: {summary.score}/100 ({summary.grade}) | "
        f"critical={summary.critical} high={summary.high} medium={summary.medium} info={summary.info}"
    )
    console.print(f"Scanned files: {summary.scanned_files} in {summary.duration} ms")

    noted = [result for result in report.results if result.notes]
    if noted:
        console.print("Notes:")
        for result in noted:
            console.print(f"- {result.scanner}")
            for note in result.notes:
                console.print(f"  - {escape(note)}")
