from __future__ import annotations

from collections.abc import Iterable

from agent_audit.engine.matcher import score_content
from agent_audit.engine.thresholds import category_finding
from agent_audit.models.findings import Confidence, Finding
from agent_audit.patterns.defense import DEFENSE_REGISTRY, DefenseRegistry
from agent_audit.scanners.base import Scanner, ScanState, SourceFile, register_scanner


@register_scanner("defense-analyzer")
class DefenseAnalyzer(Scanner):
    """Grades project-wide evidence for each defense category."""

    name = "defense-analyzer"
    title = "Defense Analyzer"
    description = (
        "Checks for input sanitization, prompt hardening, output filtering, sandboxing, "
        "authentication and canary tokens across the whole project"
    )
    confidence = Confidence.LIKELY

    def __init__(self, registry: DefenseRegistry = DEFENSE_REGISTRY, **kwargs) -> None:
        super().__init__(**kwargs)
        self.registry = registry

    def scan_file(self, source: SourceFile, state: ScanState) -> Iterable[Finding]:
        state.aggregation.add(source.display, score_content(source.content, self.registry.categories))
        return ()

    def finalize(self, state: ScanState) -> Iterable[Finding]:
        findings: list[Finding] = []
        for category in self.registry.categories:
            finding = category_finding(
                category,
                state.aggregation.get(category.id),
                scanner=self.name,
                missing_title=f"Missing defense: {category.name}",
                partial_title=f"Partial defense: {category.name}",
            )
            if finding is not None:
                findings.append(finding)
        return findings
