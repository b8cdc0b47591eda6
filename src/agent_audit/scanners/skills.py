from __future__ import annotations

from collections.abc import Iterable

from agent_audit.engine.matcher import first_match_line
from agent_audit.models.findings import Confidence, Finding, Severity
from agent_audit.patterns.skills import SKILL_REGISTRY, SkillRegistry
from agent_audit.scanners.base import Scanner, ScanState, SourceFile, register_scanner


@register_scanner("skill-auditor")
class SkillAuditor(Scanner):
    """Whole-file code checks for third-party skills, plugins and tools.

    Checks can span lines, so each one reports the line where its first match
    starts rather than every matching line.
    """

    name = "skill-auditor"
    title = "Skill Auditor"
    description = "Scans skills, plugins and tools for data exfiltration, shell injection and privilege escalation"
    confidence = Confidence.LIKELY
    markdown_is_doc = True

    def __init__(self, registry: SkillRegistry = SKILL_REGISTRY, **kwargs) -> None:
        super().__init__(**kwargs)
        self.registry = registry
        self.globs = registry.file_globs

    def scan_file(self, source: SourceFile, state: ScanState) -> Iterable[Finding]:
        findings: list[Finding] = []
        for check in self.registry.checks:
            line = first_match_line(source.content, check.rule.pattern)
            if line is None:
                continue
            findings.append(
                Finding(
                    id=f"{check.id}-{source.display}-{line}",
                    scanner=self.name,
                    severity=check.rule.severity or Severity.MEDIUM,
                    title=check.rule.description,
                    description=f"{check.detail} Found in {source.display} near line {line}.",
                    file=source.display,
                    line=line,
                    recommendation=check.recommendation,
                    rule_id=check.id,
                )
            )
        return findings
