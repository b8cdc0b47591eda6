from __future__ import annotations

import json
import re
from collections.abc import Iterable

from agent_audit.discovery.patterns import CONFIG_GLOBS, PROMPT_GLOBS
from agent_audit.engine.boundaries import analyze_tool_permission_boundaries
from agent_audit.engine.matcher import match_lines
from agent_audit.engine.roles import has_auth_files
from agent_audit.engine.severity import lower_severity
from agent_audit.models.findings import Confidence, Finding, ScanContext, Severity
from agent_audit.patterns.permissions import PERMISSION_REGISTRY, PermissionRegistry
from agent_audit.scanners.base import Scanner, ScanState, SourceFile, register_scanner

SCANNER_NAME = "permission-analyzer"
NO_AUTH_RULE_ID = "PERM-NOAUTH"
AUTH_FILES_PRESENT = "auth-files-present"
AUTH_FILES_ANNOTATION = "[authentication modules detected - verify they cover every entry point]"

_EXTERNAL_URL = re.compile(r"\"(?:url|endpoint)\"\s*:\s*\"https?://")


def _mentions(text: str, *words: str) -> bool:
    return any(word in text for word in words)


def _config_finding(
    rule_id: str,
    file_path: str,
    *,
    severity: Severity,
    title: str,
    description: str,
    recommendation: str,
) -> Finding:
    return Finding(
        id=f"{rule_id}-{file_path}",
        scanner=SCANNER_NAME,
        severity=severity,
        title=title,
        description=description,
        file=file_path,
        recommendation=recommendation,
        rule_id=rule_id,
    )


def analyze_permissions(
    config: dict[str, object],
    file_path: str,
    registry: PermissionRegistry = PERMISSION_REGISTRY,
) -> list[Finding]:
    """Structured checks over a parsed JSON/YAML config.

    Matching runs over the serialized document so nesting depth does not matter.
    """
    serialized = json.dumps(config, default=str)
    lowered = serialized.lower()
    findings: list[Finding] = []

    for item in registry.wildcards:
        if item.search(serialized):
            findings.append(
                _config_finding(
                    item.id,
                    file_path,
                    severity=Severity.CRITICAL,
                    title=f"Over-privileged: {item.description}",
                    description=(
                        f"Configuration contains {item.description.lower()} which grants broader access "
                        "than typically necessary."
                    ),
                    recommendation=(
                        "Replace wildcard permissions with specific, minimal permissions following the "
                        "principle of least privilege."
                    ),
                )
            )

    if _EXTERNAL_URL.search(serialized) and not any(
        f'"{key}"' in serialized for key in registry.domain_restriction_keys
    ):
        findings.append(
            _config_finding(
                "PERM-NETOPEN",
                file_path,
                severity=Severity.HIGH,
                title="External API access without domain restrictions",
                description="Configuration includes external URLs but no domain allowlist or denylist is configured.",
                recommendation="Add a domain allowlist to restrict which external services can be accessed.",
            )
        )

    path_scoped = any(f'"{key}"' in serialized for key in registry.path_scope_keys)
    for item in registry.filesystem_tools:
        if item.search(serialized) and not path_scoped:
            findings.append(
                _config_finding(
                    item.id,
                    file_path,
                    severity=Severity.HIGH,
                    title=f"{item.description.capitalize()} tool without path scoping",
                    description=(
                        f"{item.description.capitalize()} capabilities detected without path restrictions, "
                        "potentially allowing access to the entire filesystem."
                    ),
                    recommendation=(
                        f"Configure allowedPaths or rootDir to restrict {item.description} access to the "
                        "directories it needs."
                    ),
                )
            )

    if _mentions(lowered, "tool", "function", "api") and not _mentions(lowered, "rate", "limit", "throttle", "quota"):
        findings.append(
            _config_finding(
                "PERM-NORATE",
                file_path,
                severity=Severity.MEDIUM,
                title="No rate limiting configured",
                description="The configuration defines tools or APIs but no rate limiting, throttling or quota settings.",
                recommendation="Add rate limiting to prevent abuse. Configure per-tool or global request limits.",
            )
        )

    if _mentions(lowered, "server", "endpoint", "api") and not _mentions(lowered, "auth", "token", "key", "credential"):
        findings.append(
            _config_finding(
                NO_AUTH_RULE_ID,
                file_path,
                severity=Severity.HIGH,
                title="No authentication configured",
                description="Server or API configuration found without apparent authentication settings.",
                recommendation="Add authentication configuration (API keys, tokens or OAuth) to protect endpoints.",
            )
        )

    if _mentions(lowered, "tool", "server") and not _mentions(lowered, "log", "audit", "monitor"):
        findings.append(
            _config_finding(
                "PERM-NOLOG",
                file_path,
                severity=Severity.INFO,
                title="No logging/audit configuration detected",
                description="No logging, auditing or monitoring settings found in the configuration.",
                recommendation="Enable logging for all tool invocations. Audit logs are essential for security monitoring.",
            )
        )

    return findings


def analyze_text_permissions(
    content: str,
    file_path: str,
    registry: PermissionRegistry = PERMISSION_REGISTRY,
) -> list[Finding]:
    return [
        Finding(
            id=f"{match.rule.id}-{file_path}-{match.line}",
            scanner=SCANNER_NAME,
            severity=match.rule.severity or Severity.HIGH,
            title=match.rule.description,
            description=f'Line {match.line}: "{match.text.strip()[:120]}"',
            file=file_path,
            line=match.line,
            recommendation=(
                "Apply the principle of least privilege. Grant only the specific permissions needed for each task."
            ),
            rule_id=match.rule.id,
        )
        for match in match_lines(content, registry.dangerous_grants)
    ]


@register_scanner(SCANNER_NAME)
class PermissionAnalyzer(Scanner):
    name = SCANNER_NAME
    title = "Permission Analyzer"
    description = "Flags over-privileged configs, unrestricted tool access and missing access controls"
    globs = tuple(dict.fromkeys((*CONFIG_GLOBS, *PROMPT_GLOBS)))
    confidence = Confidence.LIKELY
    parse_structured = True

    def __init__(self, registry: PermissionRegistry = PERMISSION_REGISTRY, **kwargs) -> None:
        super().__init__(**kwargs)
        self.registry = registry

    def prepare(self, state: ScanState) -> None:
        if state.options.context is ScanContext.FRAMEWORK and has_auth_files(state.files, state.root):
            state.seen.add(AUTH_FILES_PRESENT)

    def scan_file(self, source: SourceFile, state: ScanState) -> Iterable[Finding]:
        findings: list[Finding] = []
        if isinstance(source.parsed, dict) and not self.registry.is_manifest(source.display):
            findings.extend(analyze_permissions(source.parsed, source.display, self.registry))
        findings.extend(analyze_text_permissions(source.content, source.display, self.registry))
        boundary = analyze_tool_permission_boundaries(
            source.content,
            source.display,
            patterns=self.registry.boundaries,
            scanner=self.name,
        )
        if boundary is not None:
            findings.append(boundary)

        if AUTH_FILES_PRESENT in state.seen:
            findings = [
                lower_severity(finding, Severity.INFO, AUTH_FILES_ANNOTATION)
                if finding.rule_id == NO_AUTH_RULE_ID
                else finding
                for finding in findings
            ]
        return findings
