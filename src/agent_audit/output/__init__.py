"""Output renderers."""

from agent_audit.output.console import render_console_report
from agent_audit.output.json_export import export_json_report
from agent_audit.output.sarif_export import export_sarif_report
from agent_audit.output.summary import format_summary_report, render_summary_report

__all__ = [
    "export_json_report",
    "export_sarif_report",
    "format_summary_report",
    "render_console_report",
    "render_summary_report",
]
