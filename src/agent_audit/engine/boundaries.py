from __future__ import annotations

from agent_audit.models.findings import Finding, Severity
from agent_audit.patterns.base import RuleSet
from agent_audit.patterns.permissions import BOUNDARY_PATTERNS, BoundaryPatterns

UNRESTRICTED_RULE_ID = "PERM-TOOL-UNRESTRICTED"
PARTIAL_RULE_ID = "PERM-TOOL-PARTIAL"


def _any_match(content: str, rules: RuleSet) -> bool:
    return any(item.search(content) for item in rules)


def analyze_tool_permission_boundaries(
    content: str,
    file_path: str,
    *,
    patterns: BoundaryPatterns = BOUNDARY_PATTERNS,
    scanner: str = "permission-analyzer",
) -> Finding | None:
    """Grade the tool permission layers declared in ``content``.

    Content that never mentions tools is ignored. An allowlist together with a
    confirmation step is treated as complete.
    """
    if not patterns.tool_reference.search(content):
        return None

    has_allowlist = _any_match(content, patterns.allowlist)
    has_denylist = _any_match(content, patterns.denylist)
    has_confirmation = _any_match(content, patterns.confirmation)

    if not (has_allowlist or has_denylist or has_confirmation):
        return Finding(
            id=f"{UNRESTRICTED_RULE_ID}-{file_path}",
            scanner=scanner,
            severity=Severity.CRITICAL,
            title="No tool permission boundaries",
            description=(
                "Tools are referenced but no allowlist, denylist or confirmation requirement was found. "
                "The agent may call any tool without restriction."
            ),
            file=file_path,
            recommendation=(
                "Define an explicit allowlist of permitted tools, deny dangerous operations and require "
                "human confirmation before destructive actions."
            ),
            rule_id=UNRESTRICTED_RULE_ID,
        )

    if has_allowlist and has_confirmation:
        return None

    layers = (("allowlist", has_allowlist), ("denylist", has_denylist), ("confirmation", has_confirmation))
    found = [label for label, present in layers if present]
    missing = [label for label, present in layers if not present]
    return Finding(
        id=f"{PARTIAL_RULE_ID}-{file_path}",
        scanner=scanner,
        severity=Severity.HIGH,
        title="Incomplete tool permission boundaries",
        description=(
            f"Tool permission restrictions detected ({', '.join(found)}) but coverage is incomplete. "
            f"Missing: {', '.join(missing)}."
        ),
        file=file_path,
        recommendation="Combine an allowlist of permitted tools with a confirmation step for dangerous operations.",
        rule_id=PARTIAL_RULE_ID,
    )
