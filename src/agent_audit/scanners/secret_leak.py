from __future__ import annotations

import re
from collections.abc import Iterable

from agent_audit.discovery.patterns import PROMPT_GLOBS
from agent_audit.engine.matcher import LineMatch, match_lines
from agent_audit.models.findings import Confidence, Finding, Severity
from agent_audit.patterns.secrets import SECRET_REGISTRY, SecretRegistry
from agent_audit.scanners.base import Scanner, ScanState, SourceFile, register_scanner

MASK_RE = re.compile(r"((?:key|secret|token|password|passwd|pwd)\s*[=:]\s*['\"]?)([^'\"\s]{4})[^'\"\s]*", re.IGNORECASE)
MASK_LIMIT = 80


def mask_value(text: str, limit: int = MASK_LIMIT) -> str:
    """Truncate ``text`` and keep only the first four characters of assigned secrets."""
    truncated = f"{text[:limit]}..." if len(text) > limit else text
    return MASK_RE.sub(r"\1\2****", truncated)


@register_scanner("secret-leak-scanner")
class SecretLeakScanner(Scanner):
    name = "secret-leak-scanner"
    title = "Secret Leak Scanner"
    description = "Finds hardcoded secrets, API keys, tokens, credentials and sensitive paths in prompts and configs"
    globs = (*PROMPT_GLOBS, "**/.env*")
    confidence = Confidence.DEFINITE

    def __init__(self, registry: SecretRegistry = SECRET_REGISTRY, **kwargs) -> None:
        super().__init__(**kwargs)
        self.registry = registry

    def scan_file(self, source: SourceFile, state: ScanState) -> Iterable[Finding]:
        return [
            *self._secrets(source),
            *self._sensitive_paths(source),
            *self._credentials(source),
        ]

    def _secrets(self, source: SourceFile) -> list[Finding]:
        findings: list[Finding] = []
        example_file = self.registry.is_example_file(source.display)
        for match in match_lines(source.content, self.registry.secrets):
            if self.registry.is_placeholder(match.text):
                continue
            severity = Severity.CRITICAL
            note = ""
            if self.registry.is_dev_value(match.text):
                severity, note = Severity.MEDIUM, " [common dev value - likely not a real secret]"
            elif example_file:
                severity, note = Severity.MEDIUM, " [example/template file]"
            findings.append(
                self._finding(
                    match,
                    source,
                    severity=severity,
                    title=f"Potential secret detected: {match.rule.description}",
                    description=(
                        f'Found pattern matching "{match.rule.description}" at line {match.line}. '
                        f'Value: "{mask_value(match.text.strip())}"{note}'
                    ),
                    recommendation=(
                        "Remove hardcoded secrets. Use environment variables, secret managers or vault services instead."
                        if severity is Severity.CRITICAL
                        else "Verify this is not a real secret. If it is, move it to environment variables or a secret manager."
                    ),
                )
            )
        return findings

    def _sensitive_paths(self, source: SourceFile) -> list[Finding]:
        return [
            self._finding(
                match,
                source,
                severity=Severity.HIGH,
                title=f"Sensitive path reference: {match.rule.description}",
                description=(
                    f'Found reference to sensitive path at line {match.line}: "{match.text.strip()[:100]}"'
                ),
                recommendation=(
                    "Avoid referencing sensitive system paths in prompts or tool definitions. "
                    "They can be used for social engineering attacks."
                ),
            )
            for match in match_lines(source.content, self.registry.sensitive_paths)
        ]

    def _credentials(self, source: SourceFile) -> list[Finding]:
        findings: list[Finding] = []
        example_file = self.registry.is_example_file(source.display)
        for match in match_lines(source.content, self.registry.credentials):
            if self.registry.is_placeholder(match.text):
                continue
            severity = Severity.MEDIUM
            note = ""
            if self.registry.is_dev_value(match.text):
                severity, note = Severity.INFO, " [common dev value]"
            elif example_file:
                severity, note = Severity.INFO, " [example/template file]"
            findings.append(
                self._finding(
                    match,
                    source,
                    severity=severity,
                    title=match.rule.description,
                    description=(
                        f"Found {match.rule.description.lower()} at line {match.line}: "
                        f'"{mask_value(match.text.strip())}"{note}'
                    ),
                    recommendation=(
                        "This appears to be a development or example value. Ensure it is not used in production."
                        if severity is Severity.INFO
                        else "Use environment variables or configuration outside the repository for credentials."
                    ),
                )
            )
        return findings

    def _finding(
        self,
        match: LineMatch,
        source: SourceFile,
        *,
        severity: Severity,
        title: str,
        description: str,
        recommendation: str,
    ) -> Finding:
        return Finding(
            id=f"{match.rule.id}-{source.display}-{match.line}",
            scanner=self.name,
            severity=severity,
            title=title,
            description=description,
            file=source.display,
            line=match.line,
            recommendation=recommendation,
            rule_id=match.rule.id,
        )
