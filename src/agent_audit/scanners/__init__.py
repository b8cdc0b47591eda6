"""Built-in scanners.

Importing this package registers every scanner under its slug.
"""

from agent_audit.scanners.base import Scanner, ScanState, SourceFile, available_scanners, create_scanner, register_scanner
from agent_audit.scanners.channels import ChannelSurfaceAuditor
from agent_audit.scanners.defense import DefenseAnalyzer
from agent_audit.scanners.mcp_config import McpConfigAuditor
from agent_audit.scanners.permissions import PermissionAnalyzer
from agent_audit.scanners.prompt_injection import PromptInjectionTester
from agent_audit.scanners.red_team import RedTeamSimulator
from agent_audit.scanners.secret_leak import SecretLeakScanner
from agent_audit.scanners.skills import SkillAuditor

__all__ = [
    "ChannelSurfaceAuditor",
    "DefenseAnalyzer",
    "McpConfigAuditor",
    "PermissionAnalyzer",
    "PromptInjectionTester",
    "RedTeamSimulator",
    "ScanState",
    "Scanner",
    "SecretLeakScanner",
    "SkillAuditor",
    "SourceFile",
    "available_scanners",
    "create_scanner",
    "register_scanner",
]
