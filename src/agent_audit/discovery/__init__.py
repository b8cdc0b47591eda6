from agent_audit.discovery.finder import DiscoveryDiagnostics, discover_files
from agent_audit.discovery.patterns import CONFIG_GLOBS, PROMPT_GLOBS, SOURCE_GLOBS

__all__ = ["CONFIG_GLOBS", "PROMPT_GLOBS", "SOURCE_GLOBS", "DiscoveryDiagnostics", "discover_files"]
