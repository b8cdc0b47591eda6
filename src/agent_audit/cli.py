from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from agent_audit import __version__
from agent_audit.config import load_settings
from agent_audit.models.findings import ScanContext, Severity, severity_rank
from agent_audit.models.reports import ScanOptions, ScanReport
from agent_audit.output.console import render_console_report
from agent_audit.output.json_export import export_json_report
from agent_audit.output.sarif_export import export_sarif_report
from agent_audit.output.summary import render_summary_report
from agent_audit.patterns import (
    CHANNEL_REGISTRY,
    DEFENSE_REGISTRY,
    INJECTION_REGISTRY,
    MCP_REGISTRY,
    PERMISSION_REGISTRY,
    RED_TEAM_REGISTRY,
    SECRET_REGISTRY,
    SKILL_REGISTRY,
)
from agent_audit.pipeline import resolve_scanners, run_scan
from agent_audit.scanners import available_scanners, create_scanner
from agent_audit.scoring.risk import evaluate_risk

app = typer.Typer(
    help=(
        "Audit agent and LLM codebases for prompt injection, leaked secrets, over-broad tool "
        "permissions and missing defenses."
    ),
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)


@app.callback(invoke_without_command=True)
def callback(
    version: bool = typer.Option(False, "--version", help="Show version and exit.", is_eager=True)
) -> None:
    if version:
        console.print(__version__)
        raise typer.Exit()


@app.command()
def scanners() -> None:
    names = available_scanners()
    if not names:
        console.print("No scanners are currently registered.")
        return
    console.print("Available scanners:")
    for name in names:
        scanner = create_scanner(name)
        console.print(f"- {name:<24} {scanner.description}")


@app.command()
def rules() -> None:
    table = Table(title="agent-audit pattern registries")
    table.add_column("Registry")
    table.add_column("Entries", justify="right")
    table.add_column("Content")

    permission_rules = (
        len(PERMISSION_REGISTRY.dangerous_grants)
        + len(PERMISSION_REGISTRY.wildcards)
        + len(PERMISSION_REGISTRY.filesystem_tools)
    )
    boundaries = PERMISSION_REGISTRY.boundaries
    rows = [
        ("defense", len(DEFENSE_REGISTRY.categories), "defense categories"),
        ("red team", len(RED_TEAM_REGISTRY.vectors), "attack vectors"),
        ("injection", len(INJECTION_REGISTRY.rules), f"attack rules in {len(INJECTION_REGISTRY.rules.groups())} groups"),
        ("secrets", len(SECRET_REGISTRY.secrets), "secret value rules"),
        ("sensitive paths", len(SECRET_REGISTRY.sensitive_paths), "sensitive path rules"),
        ("credentials", len(SECRET_REGISTRY.credentials), "hardcoded credential rules"),
        ("skills", len(SKILL_REGISTRY.checks), "skill/plugin code checks"),
        ("channels", len(CHANNEL_REGISTRY.channels), "channel definitions"),
        ("permissions", permission_rules, "grant, wildcard and filesystem rules"),
        (
            "boundaries",
            len(boundaries.allowlist) + len(boundaries.denylist) + len(boundaries.confirmation),
            "allowlist, denylist and confirmation synonyms",
        ),
        ("mcp", len(MCP_REGISTRY.description_poisoning), "tool description poisoning rules"),
    ]
    for name, count, content in rows:
        table.add_row(name, str(count), content)
    console.print(table)


@app.command()
def scan(
    path: str = typer.Argument(..., help="File or directory to audit."),
    scanner: list[str] = typer.Option([], "--scanner", help="Scanner slug, repeat for multiple (default: all)."),
    context: ScanContext | None = typer.Option(None, help="Scan context (env: AGENT_AUDIT_CONTEXT)."),
    exclude: list[str] = typer.Option([], "--exclude", help="Glob to exclude, repeat for multiple."),
    include_vendored: bool | None = typer.Option(
        None, "--include-vendored", help="Also scan node_modules, vendor, dist and build directories."
    ),
    jobs: int = typer.Option(4, min=1, help="Maximum concurrent scanners."),
    min_severity: Severity | None = typer.Option(None, help="Minimum severity to include."),
    fail_on: Severity | None = typer.Option(None, help="Exit non-zero if any finding >= severity."),
    format: str = typer.Option("table", help="table|json|sarif|summary"),
    output: str | None = typer.Option(None, help="Optional output file path."),
    no_color: bool = typer.Option(False, help="Disable color output."),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logs."),
) -> None:
    _configure_logging(verbose)

    target = Path(path).expanduser()
    if not target.exists():
        console.print(f"Path not found: {path}")
        raise typer.Exit(code=2)

    settings = load_settings(
        context=context,
        exclude=exclude or None,
        include_vendored=include_vendored,
        scanners=scanner or None,
        min_severity=min_severity,
        fail_on=fail_on,
    )

    try:
        selected = resolve_scanners(settings.scanners)
    except ValueError as exc:
        console.print(str(exc))
        raise typer.Exit(code=2) from exc

    options = ScanOptions(
        exclude=settings.exclude,
        context=settings.context,
        include_vendored=settings.include_vendored,
    )
    logger.info(
        "scan config: target=%s scanners=%s jobs=%s context=%s exclude=%s",
        target,
        len(selected),
        jobs,
        options.context.value,
        options.exclude,
    )

    report = run_scan(target, selected, options=options, jobs=jobs)

    if settings.min_severity != Severity.INFO:
        _apply_min_severity_filter(report, settings.min_severity)

    if format == "json":
        payload = export_json_report(report, output)
        if not output:
            console.print(payload, markup=False, soft_wrap=True)
    elif format == "sarif":
        payload = export_sarif_report(report, output)
        if not output:
            console.print(payload, markup=False, soft_wrap=True)
    elif format == "summary":
        payload = render_summary_report(report, no_color=no_color)
        if output:
            Path(output).write_text(payload, encoding="utf-8")
    else:
        render_console_report(report, no_color=no_color)
        if output:
            Path(output).write_text(export_json_report(report), encoding="utf-8")

    if settings.fail_on and _has_failures(report, settings.fail_on):
        raise typer.Exit(code=1)


def _configure_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _apply_min_severity_filter(report: ScanReport, min_severity: Severity) -> None:
    report.results = [
        result.model_copy(
            update={
                "findings": [
                    finding
                    for finding in result.findings
                    if severity_rank(finding.severity) >= severity_rank(min_severity)
                ]
            }
        )
        for result in report.results
    ]
    report.summary = evaluate_risk(report.results)


def _has_failures(report: object, threshold: Severity) -> bool:
    if not isinstance(report, ScanReport):
        return False
    return any(severity_rank(finding.severity) >= severity_rank(threshold) for finding in report.all_findings())
