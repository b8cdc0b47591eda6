from __future__ import annotations

import re
from collections.abc import Iterable

from agent_audit.engine.matcher import match_lines
from agent_audit.models.findings import Confidence, Finding, Severity
from agent_audit.patterns.injection import INJECTION_REGISTRY, InjectionRegistry
from agent_audit.scanners.base import Scanner, ScanState, SourceFile, register_scanner
from agent_audit.utils.files import is_structured_file

# "memory": "../../memory" is a relative path; `read ../../etc/passwd` is not.
QUOTED_RELATIVE_PATH = (
    re.compile(r"[\"']\s*:\s*[\"'][^\"'\n]*\.\./\.\./"),
    re.compile(r"[\"'][^\"'\n]*\.\./\.\./[^\"'\n]*[\"']"),
)
RELATIVE_PATH_NOTE = " [relative path in config file - not a path traversal attack]"
LINE_EXCERPT = 100


def is_quoted_relative_path(line: str) -> bool:
    return any(pattern.search(line) for pattern in QUOTED_RELATIVE_PATH)


@register_scanner("prompt-injection-tester")
class PromptInjectionTester(Scanner):
    name = "prompt-injection-tester"
    title = "Prompt Injection Tester"
    description = (
        "Matches prompt, config and source lines against jailbreak, role switch, instruction override, "
        "data extraction, encoding, sandbox escape and tool injection signatures"
    )
    confidence = Confidence.DEFINITE
    parse_structured = True
    content_roles = True

    def __init__(self, registry: InjectionRegistry = INJECTION_REGISTRY, **kwargs) -> None:
        super().__init__(**kwargs)
        self.registry = registry

    def scan_file(self, source: SourceFile, state: ScanState) -> Iterable[Finding]:
        structured = is_structured_file(source.path)
        findings: list[Finding] = []
        for match in match_lines(source.content, self.registry.rules):
            item = match.rule
            severity = item.severity or Severity.MEDIUM
            note = ""
            if (
                structured
                and item.id == self.registry.path_traversal_rule_id
                and is_quoted_relative_path(match.text.strip())
            ):
                severity = Severity.INFO
                note = RELATIVE_PATH_NOTE
            findings.append(
                Finding(
                    id=f"{item.id}-{source.display}-{match.line}",
                    scanner=self.name,
                    severity=severity,
                    title=f"{item.group}: {item.description}",
                    description=(
                        f"Matched pattern {item.id} in {item.group} category. "
                        f'Line: "{match.text.strip()[:LINE_EXCERPT]}"{note}'
                    ),
                    file=source.display,
                    line=match.line,
                    recommendation=self.registry.recommendation_for(item.group),
                    rule_id=item.id,
                )
            )
        return findings
