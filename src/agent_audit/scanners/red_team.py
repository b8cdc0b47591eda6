from __future__ import annotations

from collections.abc import Iterable

from agent_audit.engine.matcher import score_content
from agent_audit.engine.thresholds import CategoryStatus, classify_weight
from agent_audit.models.findings import Confidence, Finding
from agent_audit.patterns.red_team import RED_TEAM_REGISTRY, RedTeamRegistry
from agent_audit.scanners.base import Scanner, ScanState, SourceFile, register_scanner


@register_scanner("red-team-simulator")
class RedTeamSimulator(Scanner):
    """Static check of whether common attack vectors would meet any resistance."""

    name = "red-team-simulator"
    title = "Red Team Simulator"
    description = (
        "Checks whether role confusion, instruction bypass, memory poisoning, tool abuse and "
        "multi-turn manipulation would succeed against the agent"
    )
    confidence = Confidence.POSSIBLE

    def __init__(self, registry: RedTeamRegistry = RED_TEAM_REGISTRY, **kwargs) -> None:
        super().__init__(**kwargs)
        self.registry = registry

    def scan_file(self, source: SourceFile, state: ScanState) -> Iterable[Finding]:
        state.aggregation.add(source.display, score_content(source.content, self.registry.vectors))
        return ()

    def finalize(self, state: ScanState) -> Iterable[Finding]:
        findings: list[Finding] = []
        for vector in self.registry.vectors:
            totals = state.aggregation.get(vector.id)
            if classify_weight(totals.total_weight, vector) is CategoryStatus.ADEQUATE:
                continue
            if totals.total_weight == 0:
                summary = f"No defenses found against {vector.name.lower()} attacks."
            else:
                found = ", ".join(sorted(totals.description_set))
                summary = f"Weak defenses against {vector.name.lower()} (found: {found})."
            findings.append(
                Finding(
                    id=f"{vector.id}-VULN",
                    scanner=self.name,
                    severity=vector.missing_severity,
                    title=f"Vulnerable to: {vector.name}",
                    description=f"{summary} {vector.description}".strip(),
                    recommendation=vector.recommendation,
                    rule_id=vector.id,
                )
            )
        return findings
