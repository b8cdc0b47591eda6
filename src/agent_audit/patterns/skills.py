from __future__ import annotations

import re
from dataclasses import dataclass

from agent_audit.models.findings import Severity
from agent_audit.patterns.base import PatternRule, rule, validate_unique_ids

SPAN = re.IGNORECASE | re.DOTALL

SHELL_CAPABILITY_RULE_ID = "SA-003d"
SENSITIVE_READ_RULE_ID = "SA-002"
PATH_TRAVERSAL_RULE_ID = "SA-006"


@dataclass(frozen=True)
class SkillCheck:
    """A whole-content code rule: the rule description is the finding title."""

    rule: PatternRule
    detail: str
    recommendation: str

    @property
    def id(self) -> str:
        return self.rule.id


@dataclass(frozen=True)
class SkillRegistry:
    checks: tuple[SkillCheck, ...]
    file_globs: tuple[str, ...] = ("**/*.js", "**/*.ts", "**/*.mjs", "**/*.cjs", "**/*.py", "**/*.sh")

    def __post_init__(self) -> None:
        validate_unique_ids(check.rule for check in self.checks)


def _check(
    rule_id: str,
    group: str,
    severity: Severity,
    expression: str,
    title: str,
    detail: str,
    recommendation: str,
) -> SkillCheck:
    return SkillCheck(
        rule=rule(rule_id, expression, title, severity=severity, group=group, flags=SPAN),
        detail=detail,
        recommendation=recommendation,
    )


_NET = r"(?:fetch|axios|http|request|got|node-fetch|urllib|requests|httpx|aiohttp)"
_READ = r"(?:readFile|readFileSync|open|fs\.read|read_text|read_bytes)"
_EXEC = r"(?:exec|execSync|spawn|spawnSync|system|popen|run|check_output|call)"

SKILL_REGISTRY = SkillRegistry(
    checks=(
        _check(
            "SA-001",
            "env-exfiltration",
            Severity.CRITICAL,
            rf"process\.env\b.{{0,200}}{_NET}\s*\(",
            "Environment variable access near network call",
            "Environment variables are accessed close to a network call, suggesting possible exfiltration of secrets.",
            "Audit this code path. Environment variables must not be sent to external services.",
        ),
        _check(
            "SA-001b",
            "env-exfiltration",
            Severity.CRITICAL,
            rf"{_NET}\s*\(.{{0,200}}process\.env",
            "Network call with environment variable data",
            "A network call appears to include environment variable data, which could exfiltrate secrets.",
            "Never send environment variables to external services. Audit and restrict network calls.",
        ),
        _check(
            "SA-001c",
            "env-exfiltration",
            Severity.CRITICAL,
            r"(?:os\.environ|os\.getenv)\s*[\[(].{0,200}(?:requests|urllib|httpx|aiohttp)\.",
            "Python env access near HTTP call",
            "Python environment variable access was found near HTTP library usage.",
            "Audit this code and make sure environment variables are not transmitted externally.",
        ),
        _check(
            SENSITIVE_READ_RULE_ID,
            "data-exfiltration",
            Severity.CRITICAL,
            rf"{_READ}\s*\(.{{0,100}}(?:credential|key|token|secret|password|\.ssh|\.aws|\.env)",
            "Reading sensitive file",
            "Code reads files that commonly contain credentials or secrets.",
            "Restrict file access to the paths that are needed. Never read credential files in skill or plugin code.",
        ),
        _check(
            "SA-002b",
            "data-exfiltration",
            Severity.CRITICAL,
            rf"{_READ}\s*\(.{{0,300}}(?:fetch|axios|http|request|got|post)\s*\(",
            "File read followed by network call",
            "File contents are read and then potentially sent over the network.",
            "Audit file-read plus network-call flows. Sensitive data must never be transmitted externally.",
        ),
        _check(
            "SA-003",
            "shell-commands",
            Severity.CRITICAL,
            rf"{_EXEC}\s*\(\s*\[?\s*['\"`](?:curl|wget)\b[^'\"`]*\|\s*(?:sh|bash|zsh)",
            "Remote code execution via curl/wget pipe to shell",
            "Remote code is downloaded and piped straight into a shell, a classic supply-chain attack vector.",
            "Never pipe remote content into a shell. Download, verify integrity, then execute.",
        ),
        _check(
            "SA-003b",
            "shell-commands",
            Severity.CRITICAL,
            rf"{_EXEC}\s*\(\s*\[?\s*['\"`][^'\"`]*rm\s+-rf\s+[/\"]",
            "Destructive rm -rf command",
            "A destructive rm -rf command targeting root or absolute paths was found.",
            "Remove destructive shell commands and use scoped deletion instead.",
        ),
        _check(
            "SA-003c",
            "shell-commands",
            Severity.CRITICAL,
            rf"{_EXEC}\s*\(\s*\[?\s*['\"`][^'\"`]*(?:wget|curl)\s+[^'\"`]*-O\s*-?\s*[^'\"`]*(?:exec|eval|sh|bash)",
            "Download and execute pattern",
            "A wget/curl download is combined with immediate execution.",
            "Never download and immediately execute files. Verify integrity before execution.",
        ),
        _check(
            SHELL_CAPABILITY_RULE_ID,
            "shell-commands",
            Severity.MEDIUM,
            r"child_process|\bsubprocess\b|os\.system|import\s+commands\b",
            "Shell execution capability imported",
            "A shell execution module is imported and could be used for arbitrary command execution.",
            "Audit every use of shell execution. Keep commands fixed and never interpolate input.",
        ),
        _check(
            "SA-004",
            "hidden-network",
            Severity.HIGH,
            r"(?:atob|Buffer\.from|b64decode)\s*\(\s*b?['\"][A-Za-z0-9+/=]{20,}['\"]\s*(?:,\s*['\"]base64['\"])?\)",
            "Base64 encoded string (potential obfuscated URL)",
            "A long base64-encoded string was found, which could hide an exfiltration endpoint.",
            "Decode and audit every base64 string. Obfuscated URLs are a red flag for data exfiltration.",
        ),
        _check(
            "SA-004b",
            "hidden-network",
            Severity.HIGH,
            r"['\"]https?://['\"]?\s*\+\s*(?:[\w.]+|['\"][^'\"]+['\"])\s*\+",
            "Dynamic URL construction",
            "A URL is built through string concatenation, which can hide the real destination.",
            "Use explicit, auditable URLs.",
        ),
        _check(
            "SA-004c",
            "hidden-network",
            Severity.HIGH,
            r"(?:String\.fromCharCode|chr\(|\\x[0-9a-f]{2}|\\u[0-9a-f]{4}).{0,50}(?:fetch|http|request|axios)",
            "Obfuscated code near network call",
            "Character-code obfuscation was found near network call functionality.",
            "Remove code obfuscation. Network endpoints must be visible for audit.",
        ),
        _check(
            "SA-004d",
            "hidden-network",
            Severity.CRITICAL,
            r"(?:eval|exec)\s*\(\s*(?:atob|Buffer\.from|decodeURI|unescape|base64\.b64decode)",
            "Eval with decoded content",
            "Decoded content is passed to eval, a strong indicator of obfuscated malicious code.",
            "Never evaluate decoded content.",
        ),
        _check(
            "SA-005",
            "privilege-escalation",
            Severity.CRITICAL,
            rf"{_EXEC}\s*\(\s*\[?\s*['\"`][^'\"`]*\bsudo\b",
            "sudo command execution",
            "Code runs commands with sudo privileges.",
            "Skills and plugins must never require sudo. Operate within normal user permissions.",
        ),
        _check(
            "SA-005b",
            "privilege-escalation",
            Severity.HIGH,
            r"chmod\s+(?:0o?)?777",
            "chmod 777 (world-writable permissions)",
            "Setting mode 777 makes files readable, writable and executable by everyone.",
            "Use minimal permissions such as 644 for files and 755 for executables.",
        ),
        _check(
            "SA-005c",
            "privilege-escalation",
            Severity.CRITICAL,
            r"\b(?:setuid|setgid|seteuid|setegid)\s*\(",
            "Privilege elevation via setuid/setgid",
            "Code changes the effective user or group id, a privilege escalation vector.",
            "Remove setuid/setgid calls from skills.",
        ),
        _check(
            PATH_TRAVERSAL_RULE_ID,
            "filesystem-overreach",
            Severity.HIGH,
            rf"{_READ}\s*\(\s*['\"`][^'\"`]*(?:\.\./\.\./|\.\.\\\.\.\\)",
            "Path traversal attempt (../../)",
            "Files are read through path traversal sequences that reach parent directories.",
            "Resolve paths and check that they stay inside the workspace.",
        ),
        _check(
            "SA-006b",
            "filesystem-overreach",
            Severity.HIGH,
            rf"{_READ}\s*\(\s*['\"`]/etc/",
            "Reading system files (/etc/)",
            "Code reads system configuration files from /etc/.",
            "Restrict file access to the workspace directory.",
        ),
        _check(
            "SA-006c",
            "filesystem-overreach",
            Severity.HIGH,
            rf"{_READ}\s*\(\s*['\"`](?:/root/|~/|/home/)",
            "Reading user home directory files",
            "Code reads files from user home directories.",
            "Restrict file access to the designated workspace.",
        ),
        _check(
            "SA-006d",
            "filesystem-overreach",
            Severity.CRITICAL,
            rf"{_READ}\s*\(\s*['\"`][^'\"`]*(?:\.ssh|\.aws|\.gnupg|\.kube|\.docker)",
            "Accessing sensitive dot-directories",
            "Code reads sensitive dot-directories such as .ssh or .aws.",
            "Never access credential directories from skills or plugins.",
        ),
    )
)
