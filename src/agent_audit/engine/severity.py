"""Context-aware severity downgrades.

Rules run in a fixed order, most specific first, with the generic test/doc
rule last. A rule only ever lowers severity and only annotates a finding when
it actually lowers it, so a finding already brought down by a specific rule
keeps that rule's explanation. Running the pipeline twice changes nothing.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from agent_audit.models.findings import Finding, ScanContext, Severity, severity_rank
from agent_audit.models.roles import FileContext, FileRole
from agent_audit.patterns.secrets import SECRET_REGISTRY
from agent_audit.patterns.skills import PATH_TRAVERSAL_RULE_ID, SENSITIVE_READ_RULE_ID, SHELL_CAPABILITY_RULE_ID

ALL_CONTEXTS = frozenset(ScanContext)
FRAMEWORK_ONLY = frozenset({ScanContext.FRAMEWORK})
APP_ONLY = frozenset({ScanContext.APP})

PROMPT_INJECTION = "prompt-injection-tester"
SECRET_LEAK = "secret-leak-scanner"
MCP_CONFIG = "mcp-config-auditor"

TEST_OR_DOC_ANNOTATION = "[test/doc file - severity reduced]"
SELF_TEST_ANNOTATION = "[security tool test file - intentional attack sample]"
SELF_SOURCE_ANNOTATION = "[security tool source - pattern definitions]"
DEFENSE_LIST_ANNOTATION = "[defense pattern list - not an attack]"
SYSTEM_PROMPT_ANNOTATION = "[system prompt file - defensive instructions]"
PLATFORM_CONFIG_ANNOTATION = "[platform config - public client identifier]"
CACHE_OR_DATA_ANNOTATION = "[cache/data file - severity reduced]"


def lower_severity(finding: Finding, ceiling: Severity, annotation: str) -> Finding:
    """Cap ``finding`` at ``ceiling``; a no-op when it is already at or below it."""
    if severity_rank(finding.severity) <= severity_rank(ceiling):
        return finding
    description = finding.description
    if annotation not in description:
        description = f"{description} {annotation}" if description else annotation
    return finding.model_copy(update={"severity": ceiling, "description": description})


@dataclass(frozen=True)
class SeverityRule:
    name: str
    annotation: str
    ceiling: Severity | None = None
    remap: tuple[tuple[Severity, Severity], ...] = ()
    role: FileRole | None = None
    excluded_roles: frozenset[FileRole] = frozenset()
    contexts: frozenset[ScanContext] = ALL_CONTEXTS
    scanners: frozenset[str] | None = None
    rule_ids: frozenset[str] | None = None
    rule_prefixes: tuple[str, ...] = ()

    def applies(self, finding: Finding, file_ctx: FileContext, scan_ctx: ScanContext) -> bool:
        if scan_ctx not in self.contexts:
            return False
        if self.role is not None and not file_ctx.has(self.role):
            return False
        if any(file_ctx.has(role) for role in self.excluded_roles):
            return False
        if self.scanners is not None and finding.scanner not in self.scanners:
            return False
        if self.rule_ids is not None or self.rule_prefixes:
            rule_id = finding.rule_id or ""
            by_id = self.rule_ids is not None and rule_id in self.rule_ids
            by_prefix = any(rule_id.startswith(prefix) for prefix in self.rule_prefixes)
            if not (by_id or by_prefix):
                return False
        return True

    def target(self, severity: Severity) -> Severity:
        if self.ceiling is not None:
            return self.ceiling
        return dict(self.remap).get(severity, severity)

    def apply(self, finding: Finding, file_ctx: FileContext, scan_ctx: ScanContext) -> Finding:
        if not self.applies(finding, file_ctx, scan_ctx):
            return finding
        return lower_severity(finding, self.target(finding.severity), self.annotation)


DEFAULT_RULES: tuple[SeverityRule, ...] = (
    SeverityRule(
        name="self-test",
        role=FileRole.SELF_TEST,
        ceiling=Severity.INFO,
        annotation=SELF_TEST_ANNOTATION,
    ),
    SeverityRule(
        name="self-source",
        role=FileRole.SELF_SOURCE,
        ceiling=Severity.INFO,
        annotation=SELF_SOURCE_ANNOTATION,
    ),
    SeverityRule(
        name="defense-pattern-list",
        role=FileRole.DEFENSE_PATTERN_LIST,
        scanners=frozenset({PROMPT_INJECTION}),
        ceiling=Severity.INFO,
        annotation=DEFENSE_LIST_ANNOTATION,
    ),
    SeverityRule(
        name="system-prompt",
        role=FileRole.SYSTEM_PROMPT,
        scanners=frozenset({PROMPT_INJECTION}),
        ceiling=Severity.INFO,
        annotation=SYSTEM_PROMPT_ANNOTATION,
    ),
    SeverityRule(
        name="platform-config",
        role=FileRole.PLATFORM_CONFIG,
        scanners=frozenset({SECRET_LEAK}),
        rule_ids=SECRET_REGISTRY.platform_safe_ids,
        ceiling=Severity.INFO,
        annotation=PLATFORM_CONFIG_ANNOTATION,
    ),
    SeverityRule(
        name="credential-management",
        role=FileRole.CREDENTIAL_MANAGEMENT,
        contexts=FRAMEWORK_ONLY,
        scanners=frozenset({SECRET_LEAK}),
        ceiling=Severity.INFO,
        annotation="[credential management code - framework context]",
    ),
    SeverityRule(
        name="framework-path-handling",
        role=FileRole.FRAMEWORK_INFRA,
        excluded_roles=frozenset({FileRole.USER_INPUT_HANDLER}),
        contexts=FRAMEWORK_ONLY,
        rule_ids=frozenset({PATH_TRAVERSAL_RULE_ID}),
        ceiling=Severity.MEDIUM,
        annotation="[framework path handling - not user input]",
    ),
    SeverityRule(
        name="framework-shell",
        excluded_roles=frozenset({FileRole.SKILL_PLUGIN}),
        contexts=FRAMEWORK_ONLY,
        rule_ids=frozenset({SHELL_CAPABILITY_RULE_ID}),
        ceiling=Severity.INFO,
        annotation="[framework shell capability - expected outside skills]",
    ),
    SeverityRule(
        name="app-shell",
        contexts=APP_ONLY,
        rule_ids=frozenset({SHELL_CAPABILITY_RULE_ID}),
        ceiling=Severity.INFO,
        annotation="[shell capability in application code]",
    ),
    SeverityRule(
        name="framework-file-access",
        contexts=FRAMEWORK_ONLY,
        rule_ids=frozenset({SENSITIVE_READ_RULE_ID}),
        ceiling=Severity.INFO,
        annotation="[framework file access]",
    ),
    SeverityRule(
        name="framework-tool-registry",
        contexts=FRAMEWORK_ONLY,
        rule_prefixes=("PERM-TOOL-",),
        ceiling=Severity.INFO,
        annotation="[framework tool registry - boundaries enforced by host]",
    ),
    SeverityRule(
        name="security-tool-reads",
        role=FileRole.SECURITY_TOOL,
        rule_ids=frozenset({SENSITIVE_READ_RULE_ID}),
        ceiling=Severity.INFO,
        annotation="[security tool - reads sensitive files for detection]",
    ),
    SeverityRule(
        name="cache-or-data",
        role=FileRole.CACHE_OR_DATA,
        scanners=frozenset({MCP_CONFIG}),
        ceiling=Severity.INFO,
        annotation=CACHE_OR_DATA_ANNOTATION,
    ),
    SeverityRule(
        name="test-or-doc",
        role=FileRole.TEST_OR_DOC,
        remap=((Severity.CRITICAL, Severity.MEDIUM), (Severity.HIGH, Severity.INFO)),
        annotation=TEST_OR_DOC_ANNOTATION,
    ),
)


class SeverityPipeline:
    def __init__(self, rules: Sequence[SeverityRule] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)

    def apply(self, finding: Finding, file_ctx: FileContext, scan_ctx: ScanContext) -> Finding:
        for item in self.rules:
            finding = item.apply(finding, file_ctx, scan_ctx)
        return finding

    def apply_all(self, findings: Iterable[Finding], file_ctx: FileContext, scan_ctx: ScanContext) -> list[Finding]:
        return [self.apply(finding, file_ctx, scan_ctx) for finding in findings]


DEFAULT_PIPELINE = SeverityPipeline()
