from __future__ import annotations

import re
from dataclasses import dataclass

from agent_audit.models.findings import Severity
from agent_audit.patterns.base import RuleSet, rule


@dataclass(frozen=True)
class BoundaryPatterns:
    """Synonym sets for the three tool permission layers."""

    tool_reference: re.Pattern[str]
    allowlist: RuleSet
    denylist: RuleSet
    confirmation: RuleSet


@dataclass(frozen=True)
class PermissionRegistry:
    boundaries: BoundaryPatterns
    dangerous_grants: RuleSet
    wildcards: RuleSet
    filesystem_tools: RuleSet
    skip_config_files: tuple[re.Pattern[str], ...]
    domain_restriction_keys: tuple[str, ...] = ("allowedDomains", "denyDomains", "allowedUrls", "blockedUrls")
    path_scope_keys: tuple[str, ...] = ("allowedPaths", "rootDir", "sandboxPath", "workDir")

    def is_manifest(self, path: str) -> bool:
        return any(pattern.search(path) for pattern in self.skip_config_files)


BOUNDARY_PATTERNS = BoundaryPatterns(
    tool_reference=re.compile(r"(?:tool|skill|function|command|action|plugin)s?\b", re.IGNORECASE),
    allowlist=RuleSet(
        name="allowlist",
        rules=(
            rule("TB-ALLOW-01", r"allowlist", "allowlist"),
            rule("TB-ALLOW-02", r"whitelist", "whitelist"),
            rule("TB-ALLOW-03", r"allowed[_-]?(?:tools|commands|actions|ops)", "allowed tools"),
            rule("TB-ALLOW-04", r"permitted[_-]?(?:tools|commands|actions|ops)", "permitted tools"),
        ),
    ),
    denylist=RuleSet(
        name="denylist",
        rules=(
            rule("TB-DENY-01", r"denylist", "denylist"),
            rule("TB-DENY-02", r"blocklist", "blocklist"),
            rule("TB-DENY-03", r"blacklist", "blacklist"),
            rule("TB-DENY-04", r"blocked[_-]?(?:tools|commands|actions|ops)", "blocked tools"),
            rule("TB-DENY-05", r"denied[_-]?(?:tools|commands|actions|ops)", "denied tools"),
            rule("TB-DENY-06", r"restricted[_-]?(?:tools|commands|actions|ops)", "restricted tools"),
        ),
    ),
    confirmation=RuleSet(
        name="confirmation",
        rules=(
            rule("TB-CONFIRM-01", r"confirm(?:ation)?[_-]?(?:required|needed|prompt)", "confirmation required"),
            rule("TB-CONFIRM-02", r"approve[_-]?(?:before|required|first)", "approval before action"),
            rule("TB-CONFIRM-03", r"dangerous[_-]?(?:ops?|operations?|commands?|tools?)", "dangerous operation list"),
            rule("TB-CONFIRM-04", r"require[_-]?(?:confirmation|approval|consent)", "require confirmation"),
            rule("TB-CONFIRM-05", r"human[_-]?(?:in[_-]?the[_-]?loop|approval|review)", "human in the loop"),
            rule("TB-CONFIRM-06", r"confirm\s*[:=]\s*true", "confirm flag"),
            rule("TB-CONFIRM-07", r"approval\s*[:=]\s*true", "approval flag"),
        ),
    ),
)

PERMISSION_REGISTRY = PermissionRegistry(
    boundaries=BOUNDARY_PATTERNS,
    dangerous_grants=RuleSet(
        name="dangerous-grants",
        rules=(
            rule(
                "PERM-TEXT-FILES",
                r"you\s+(?:can|have|are\s+allowed\s+to)\s+(?:access|read|write|delete|modify)\s+(?:any|all|every)\s+"
                r"(?:file|directory|folder|path)",
                "Unrestricted file access grant in prompt",
                severity=Severity.HIGH,
            ),
            rule(
                "PERM-TEXT-SYSTEM",
                r"full\s+access\s+to\s+(?:the\s+)?(?:system|filesystem|network|internet|database)",
                "Full system access grant in prompt",
                severity=Severity.HIGH,
            ),
            rule(
                "PERM-TEXT-NORESTRICT",
                r"no\s+restrictions?\s+on\s+(?:what|which|where)\s+you\s+can",
                "Explicit no-restriction statement in prompt",
                severity=Severity.HIGH,
            ),
            rule(
                "PERM-TEXT-EXEC",
                r"you\s+(?:may|can)\s+execute\s+any\s+(?:command|code|script)",
                "Unrestricted code execution grant",
                severity=Severity.HIGH,
            ),
            rule(
                "PERM-TEXT-PII",
                r"access\s+to\s+all\s+(?:user|customer|private)\s+data",
                "Unrestricted PII/data access grant",
                severity=Severity.HIGH,
            ),
        ),
    ),
    wildcards=RuleSet(
        name="wildcards",
        rules=(
            rule("PERM-WILD-PERMISSIONS", r"\"permissions\"\s*:\s*\[\s*\"\*\"\s*\]", "Wildcard permission (*)", flags=0),
            rule("PERM-WILD-ACCESS", r"\"access\"\s*:\s*\"(?:all|full|unrestricted)\"", "Unrestricted access"),
            rule("PERM-WILD-SCOPE", r"\"scope\"\s*:\s*\"(?:all|full|\*)\"", "Full scope access"),
            rule("PERM-WILD-ROOTPATH", r"\"allowedPaths\"\s*:\s*\[\s*\"/\"\s*\]", "Root path in allowedPaths", flags=0),
            rule("PERM-WILD-ANYPATH", r"\"allowedPaths\"\s*:\s*\[\s*\"\*\"\s*\]", "Wildcard in allowedPaths", flags=0),
        ),
    ),
    filesystem_tools=RuleSet(
        name="filesystem-tools",
        rules=(
            rule("PERM-FS-FILESYSTEM", r"\"command\"\s*:\s*\"[^\"]*filesystem[^\"]*\"", "filesystem"),
            rule("PERM-FS-FILES", r"\"name\"\s*:\s*\"[^\"]*(?:read|write|delete)_file[^\"]*\"", "file operations"),
            rule("PERM-FS-DIRS", r"\"name\"\s*:\s*\"[^\"]*(?:read|write)_dir[^\"]*\"", "directory operations"),
        ),
    ),
    skip_config_files=tuple(
        re.compile(expression)
        for expression in (
            r"package\.json$",
            r"package-lock\.json$",
            r"tsconfig[^/]*\.json$",
            r"pubspec\.yaml$",
            r"Cargo\.toml$",
            r"pyproject\.toml$",
            r"\.eslintrc",
            r"\.prettierrc",
            r"jest\.config",
            r"vite\.config",
            r"webpack\.config",
            r"release-please",
            r"renovate",
            r"dependabot",
            r"(?:^|/)\.github/",
            r"firebase\.json$",
            r"firestore\.indexes\.json$",
            r"\.pre-commit-config\.ya?ml$",
        )
    ),
)
