"""Pattern registries.

Every scanner takes its registry as a constructor argument and defaults to the
built-in instance defined here.
"""

from agent_audit.patterns.base import Category, PatternRule, RuleSet, collect_ids, rule, validate_unique_ids
from agent_audit.patterns.channels import CHANNEL_REGISTRY, ChannelDefinition, ChannelRegistry
from agent_audit.patterns.defense import DEFENSE_REGISTRY, DefenseRegistry
from agent_audit.patterns.injection import INJECTION_REGISTRY, InjectionRegistry
from agent_audit.patterns.mcp import MCP_REGISTRY, McpRegistry
from agent_audit.patterns.permissions import PERMISSION_REGISTRY, PermissionRegistry
from agent_audit.patterns.red_team import RED_TEAM_REGISTRY, RedTeamRegistry
from agent_audit.patterns.secrets import SECRET_REGISTRY, SecretRegistry
from agent_audit.patterns.skills import SKILL_REGISTRY, SkillCheck, SkillRegistry

__all__ = [
    "CHANNEL_REGISTRY",
    "DEFENSE_REGISTRY",
    "INJECTION_REGISTRY",
    "MCP_REGISTRY",
    "PERMISSION_REGISTRY",
    "RED_TEAM_REGISTRY",
    "SECRET_REGISTRY",
    "SKILL_REGISTRY",
    "Category",
    "ChannelDefinition",
    "ChannelRegistry",
    "DefenseRegistry",
    "InjectionRegistry",
    "McpRegistry",
    "PatternRule",
    "PermissionRegistry",
    "RedTeamRegistry",
    "RuleSet",
    "SecretRegistry",
    "SkillCheck",
    "SkillRegistry",
    "all_rule_ids",
    "collect_ids",
    "rule",
    "validate_unique_ids",
]


def all_rule_ids() -> list[str]:
    """Every rule and category id across the built-in registries, in registry order."""
    ids: list[str] = []
    ids.extend(collect_ids(DEFENSE_REGISTRY.categories))
    ids.extend(collect_ids(RED_TEAM_REGISTRY.vectors))
    ids.extend(collect_ids(INJECTION_REGISTRY.rules))
    ids.extend(collect_ids(SECRET_REGISTRY.secrets))
    ids.extend(collect_ids(SECRET_REGISTRY.sensitive_paths))
    ids.extend(collect_ids(SECRET_REGISTRY.credentials))
    ids.extend(collect_ids(check.rule for check in SKILL_REGISTRY.checks))
    ids.extend(collect_ids(channel.defenses for channel in CHANNEL_REGISTRY.channels))
    boundaries = PERMISSION_REGISTRY.boundaries
    ids.extend(collect_ids(boundaries.allowlist))
    ids.extend(collect_ids(boundaries.denylist))
    ids.extend(collect_ids(boundaries.confirmation))
    ids.extend(collect_ids(PERMISSION_REGISTRY.dangerous_grants))
    ids.extend(collect_ids(PERMISSION_REGISTRY.wildcards))
    ids.extend(collect_ids(PERMISSION_REGISTRY.filesystem_tools))
    ids.extend(collect_ids(MCP_REGISTRY.description_poisoning))
    return ids
