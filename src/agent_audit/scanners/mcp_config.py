from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping

from agent_audit.discovery.patterns import CONFIG_GLOBS
from agent_audit.models.findings import Confidence, Finding, Severity
from agent_audit.patterns.mcp import MCP_REGISTRY, McpRegistry
from agent_audit.scanners.base import Scanner, ScanState, SourceFile, register_scanner

SCANNER_NAME = "mcp-config-auditor"
NOT_A_CONFIG_ANNOTATION = "[data file - not a config]"
MIN_DESCRIPTION_LENGTH = 20

SKIPPED_CONFIG_FILES = re.compile(
    r"(?:^|/)(?:package(?:-lock)?\.json|tsconfig[^/]*\.json|pubspec\.ya?ml|\.eslintrc[^/]*|jest\.config[^/]*|"
    r"release-please[^/]*|renovate\.json5?|dependabot\.ya?ml)$",
    re.IGNORECASE,
)


def _finding(
    finding_id: str,
    file_path: str,
    *,
    severity: Severity,
    title: str,
    description: str,
    recommendation: str,
    rule_id: str,
) -> Finding:
    return Finding(
        id=finding_id,
        scanner=SCANNER_NAME,
        severity=severity,
        title=title,
        description=description,
        file=file_path,
        recommendation=recommendation,
        rule_id=rule_id,
    )


def _string_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def audit_server(
    name: str,
    server: Mapping[str, object],
    file_path: str,
    registry: McpRegistry = MCP_REGISTRY,
) -> list[Finding]:
    findings: list[Finding] = []
    command = server.get("command")
    args = _string_list(server.get("args"))

    if isinstance(command, str):
        for dangerous in registry.dangerous_commands:
            if command == dangerous or command.endswith("/" + dangerous):
                findings.append(
                    _finding(
                        f"MCP-CMD-{name}",
                        file_path,
                        severity=Severity.HIGH,
                        title=f'Server "{name}" uses potentially dangerous command: {dangerous}',
                        description=(
                            f'The MCP server "{name}" is configured to run "{command}" which could allow '
                            "arbitrary code execution."
                        ),
                        recommendation=(
                            "Use specific executables instead of shell interpreters. Restrict the command to the "
                            "minimum required functionality."
                        ),
                        rule_id="MCP-CMD",
                    )
                )
                break

    for arg in args:
        if any(marker in arg for marker in registry.unsafe_arg_markers):
            findings.append(
                _finding(
                    f"MCP-ARG-{name}-{arg}",
                    file_path,
                    severity=Severity.CRITICAL,
                    title=f'Server "{name}" has unsafe argument: {arg}',
                    description=f'The argument "{arg}" disables security restrictions on server "{name}".',
                    recommendation="Remove unsafe flags and configure specific permissions instead.",
                    rule_id="MCP-ARG",
                )
            )
    for arg in args:
        if arg in registry.root_path_args:
            findings.append(
                _finding(
                    f"MCP-WILDCARD-{name}",
                    file_path,
                    severity=Severity.CRITICAL,
                    title=f'Server "{name}" has wildcard/root path access',
                    description=(
                        f'The server "{name}" is configured with path "{arg}" which grants access to the '
                        "entire filesystem."
                    ),
                    recommendation="Restrict path access to specific directories needed by the tool.",
                    rule_id="MCP-WILDCARD",
                )
            )
            break

    tools = server.get("tools")
    has_tools = isinstance(tools, list) and len(tools) > 0
    has_lists = any(server.get(key) for key in ("allowlist", "denylist", "blockedPaths", "allowedPaths"))
    if not has_lists and (has_tools or command):
        findings.append(
            _finding(
                f"MCP-NOLIST-{name}",
                file_path,
                severity=Severity.HIGH,
                title=f'Server "{name}" lacks allowlist/denylist',
                description=(
                    f'The server "{name}" has no explicit allowlist or denylist configured, so every operation '
                    "may be permitted by default and the server is exposed to tool poisoning."
                ),
                recommendation="Add allowlist or denylist configuration to restrict permitted operations.",
                rule_id="MCP-NOLIST",
            )
        )

    env = server.get("env")
    if isinstance(env, Mapping):
        for key, value in env.items():
            if not isinstance(value, str) or value.startswith("$"):
                continue
            if any(marker in str(key).lower() for marker in registry.env_secret_markers):
                findings.append(
                    _finding(
                        f"MCP-ENV-{name}-{key}",
                        file_path,
                        severity=Severity.CRITICAL,
                        title=f'Server "{name}" has hardcoded secret in env: {key}',
                        description=(
                            f'The environment variable "{key}" appears to contain a hardcoded secret value '
                            "instead of a reference to a secret store."
                        ),
                        recommendation=(
                            "Use environment variable references (${VAR}) or a secret manager instead of "
                            "hardcoded values."
                        ),
                        rule_id="MCP-ENV",
                    )
                )

    if has_tools:
        findings.extend(audit_tools(tools, file_path, server_name=name, registry=registry))
    return findings


def audit_tools(
    tools: list[object],
    file_path: str,
    *,
    server_name: str | None = None,
    registry: McpRegistry = MCP_REGISTRY,
) -> list[Finding]:
    findings: list[Finding] = []
    owner = server_name or "root"
    prefix = f'Server "{server_name}" -> ' if server_name else ""

    for tool in tools:
        if not isinstance(tool, Mapping):
            continue
        tool_name = str(tool.get("name") or "unknown")
        lowered = tool_name.lower()
        dangerous = next((item for item in registry.dangerous_tools if item in lowered), None)
        if dangerous is not None:
            findings.append(
                _finding(
                    f"MCP-TOOL-{owner}-{tool_name}",
                    file_path,
                    severity=Severity.HIGH,
                    title=f"{prefix}Dangerous tool detected: {tool_name}",
                    description=(
                        f'The tool "{tool_name}" matches dangerous pattern "{dangerous}" and may allow '
                        "unrestricted system access."
                    ),
                    recommendation=(
                        f'Review if tool "{tool_name}" is necessary. If so, add strict input validation and '
                        "scope restrictions."
                    ),
                    rule_id="MCP-TOOL",
                )
            )
        for permission in _string_list(tool.get("permissions")):
            if permission in registry.dangerous_permissions:
                findings.append(
                    _finding(
                        f"MCP-PERM-{owner}-{tool_name}-{permission}",
                        file_path,
                        severity=Severity.CRITICAL,
                        title=f'{prefix}Tool "{tool_name}" has dangerous permission: {permission}',
                        description=f'The permission "{permission}" on tool "{tool_name}" grants overly broad access.',
                        recommendation="Replace wildcard/admin permissions with specific, scoped permissions.",
                        rule_id="MCP-PERM",
                    )
                )
    return findings


def _descriptions(node: object) -> Iterable[str]:
    if isinstance(node, Mapping):
        for key, value in node.items():
            if key == "description" and isinstance(value, str):
                yield value
            else:
                yield from _descriptions(value)
    elif isinstance(node, list):
        for item in node:
            yield from _descriptions(item)


def audit_description_poisoning(
    config: Mapping[str, object],
    file_path: str,
    registry: McpRegistry = MCP_REGISTRY,
) -> list[Finding]:
    """One finding per tool description carrying hidden instructions."""
    findings: list[Finding] = []
    for index, text in enumerate(_descriptions(config), start=1):
        if len(text) < MIN_DESCRIPTION_LENGTH:
            continue
        hit = next((item for item in registry.description_poisoning if item.search(text)), None)
        if hit is None:
            continue
        findings.append(
            _finding(
                f"MCP-POISON-DESC-{file_path}-{index}",
                file_path,
                severity=Severity.CRITICAL,
                title="Suspicious tool description: potential poisoning",
                description=(
                    f"A tool description contains a {hit.description} pattern that may indicate tool "
                    f'description poisoning: "{text[:120]}"'
                ),
                recommendation=(
                    "Review all MCP tool descriptions. Descriptions should only describe functionality and must "
                    "not contain hidden instructions."
                ),
                rule_id="MCP-POISON-DESC",
            )
        )
    return findings


def server_capabilities(name: str, server: Mapping[str, object], registry: McpRegistry = MCP_REGISTRY) -> set[str]:
    command = server.get("command")
    combined = " ".join(
        [name, command if isinstance(command, str) else "", *_string_list(server.get("args"))]
    ).lower()
    return {capability for capability, pattern in registry.capabilities.items() if pattern.search(combined)}


def has_path_restriction(server: Mapping[str, object], registry: McpRegistry = MCP_REGISTRY) -> bool:
    if registry.path_restriction_args.search(" ".join(_string_list(server.get("args")))):
        return True
    return any(server.get(key) for key in ("allowedPaths", "rootDir", "sandboxPath"))


def audit_chain_attacks(
    servers: Mapping[str, object],
    file_path: str,
    registry: McpRegistry = MCP_REGISTRY,
) -> list[Finding]:
    """Flag capability combinations spread over several servers."""
    capabilities = {
        name: server_capabilities(str(name), server, registry)
        for name, server in servers.items()
        if isinstance(server, Mapping)
    }
    present = set().union(*capabilities.values()) if capabilities else set()

    def holders(capability: str) -> str:
        return ", ".join(str(name) for name, caps in capabilities.items() if capability in caps)

    findings: list[Finding] = []
    if {"exec", "network"} <= present:
        findings.append(
            _finding(
                "MCP-CHAIN-EXEC-NET",
                file_path,
                severity=Severity.CRITICAL,
                title="MCP chain attack risk: exec + network servers",
                description=(
                    f"Servers with exec/shell capability ({holders('exec')}) coexist with network-capable servers "
                    f"({holders('network')}). A compromised server could execute arbitrary code and exfiltrate "
                    "data through the network server."
                ),
                recommendation=(
                    "Avoid combining exec/shell servers with network-capable servers. If necessary, sandbox the "
                    "exec servers and enforce network allowlists."
                ),
                rule_id="MCP-CHAIN-EXEC-NET",
            )
        )
    if {"filesystem", "git"} <= present:
        unrestricted = [
            str(name)
            for name, caps in capabilities.items()
            if "filesystem" in caps and not has_path_restriction(servers[name], registry)
        ]
        suffix = f" Filesystem servers without path restrictions: {', '.join(unrestricted)}." if unrestricted else ""
        findings.append(
            _finding(
                "MCP-CHAIN-FS-GIT",
                file_path,
                severity=Severity.HIGH,
                title="MCP chain attack risk: filesystem + git servers",
                description=(
                    f"Filesystem servers ({holders('filesystem')}) coexist with git servers ({holders('git')}). "
                    "A poisoned repository could trigger prompt injection that uses the filesystem server to "
                    f"read or write arbitrary files.{suffix}"
                ),
                recommendation=(
                    "Add path restrictions to filesystem servers (--allow-dir) and review repositories for "
                    "injection payloads."
                ),
                rule_id="MCP-CHAIN-FS-GIT",
            )
        )
    if {"filesystem", "web"} <= present:
        findings.append(
            _finding(
                "MCP-CHAIN-FS-WEB",
                file_path,
                severity=Severity.HIGH,
                title="MCP chain attack risk: filesystem + web servers",
                description=(
                    f"Filesystem servers ({holders('filesystem')}) coexist with web/browser servers "
                    f"({holders('web')}). Malicious web content could inject instructions that use the "
                    "filesystem server to read or modify local files."
                ),
                recommendation=(
                    "Add path restrictions to filesystem servers and strip hidden instructions from fetched content."
                ),
                rule_id="MCP-CHAIN-FS-WEB",
            )
        )
    # exec + network already covers the exfiltration path
    if {"filesystem", "network"} <= present and "exec" not in present:
        findings.append(
            _finding(
                "MCP-CHAIN-FS-NET",
                file_path,
                severity=Severity.HIGH,
                title="MCP exfiltration risk: filesystem + network servers",
                description=(
                    f"Filesystem servers ({holders('filesystem')}) coexist with network-capable servers "
                    f"({holders('network')}). Sensitive files read through one could leave through the other."
                ),
                recommendation="Restrict filesystem server paths and allowlist outbound network requests.",
                rule_id="MCP-CHAIN-FS-NET",
            )
        )
    return findings


def looks_like_config(config: Mapping[str, object], registry: McpRegistry = MCP_REGISTRY) -> bool:
    keys = [str(key).lower() for key in config]
    return any(indicator.lower() in key for key in keys for indicator in registry.config_indicator_keys)


def audit_url_credentials(
    config: Mapping[str, object],
    file_path: str,
    registry: McpRegistry = MCP_REGISTRY,
) -> list[Finding]:
    serialized = json.dumps(config, default=str)
    if not registry.url_credentials.search(serialized):
        return []
    is_config = looks_like_config(config, registry)
    description = "A URL containing embedded username:password credentials was found in the configuration."
    if not is_config:
        description = f"{description} {NOT_A_CONFIG_ANNOTATION}"
    return [
        _finding(
            f"MCP-URL-CREDS-{file_path}",
            file_path,
            severity=Severity.CRITICAL if is_config else Severity.INFO,
            title="URL with embedded credentials detected",
            description=description,
            recommendation="Remove credentials from URLs. Use environment variables or a secret manager.",
            rule_id="MCP-URL-CREDS",
        )
    ]


def audit_config(
    config: Mapping[str, object],
    file_path: str,
    registry: McpRegistry = MCP_REGISTRY,
) -> list[Finding]:
    findings: list[Finding] = []
    servers = registry.servers(dict(config))
    if servers:
        for name, server in servers.items():
            if isinstance(server, Mapping):
                findings.extend(audit_server(str(name), server, file_path, registry))
        findings.extend(audit_chain_attacks(servers, file_path, registry))

    tools = config.get("tools")
    if isinstance(tools, list):
        findings.extend(audit_tools(tools, file_path, registry=registry))

    findings.extend(audit_url_credentials(config, file_path, registry))
    findings.extend(audit_description_poisoning(config, file_path, registry))
    return findings


@register_scanner(SCANNER_NAME)
class McpConfigAuditor(Scanner):
    name = SCANNER_NAME
    title = "MCP Config Auditor"
    description = "Audits MCP server and tool configuration for dangerous commands, secrets and chain attacks"
    globs = CONFIG_GLOBS
    confidence = Confidence.DEFINITE
    parse_structured = True

    def __init__(self, registry: McpRegistry = MCP_REGISTRY, **kwargs) -> None:
        super().__init__(**kwargs)
        self.registry = registry

    def scan_file(self, source: SourceFile, state: ScanState) -> Iterable[Finding]:
        if SKIPPED_CONFIG_FILES.search(source.display):
            return ()
        if not self.registry.is_tool_config(source.parsed):
            return ()
        return audit_config(source.parsed, source.display, self.registry)
