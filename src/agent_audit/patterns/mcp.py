from __future__ import annotations

import re
from dataclasses import dataclass

from agent_audit.patterns.base import RuleSet, rule


@dataclass(frozen=True)
class McpRegistry:
    server_keys: tuple[str, ...]
    config_indicator_keys: tuple[str, ...]
    dangerous_commands: tuple[str, ...]
    unsafe_arg_markers: tuple[str, ...]
    root_path_args: frozenset[str]
    env_secret_markers: tuple[str, ...]
    dangerous_tools: tuple[str, ...]
    dangerous_permissions: frozenset[str]
    description_poisoning: RuleSet
    capabilities: dict[str, re.Pattern[str]]
    path_restriction_args: re.Pattern[str]
    url_credentials: re.Pattern[str]

    def is_tool_config(self, parsed: object) -> bool:
        """Cheap key-set check run before any config analysis.

        Arbitrary JSON/YAML (lock files, fixtures, data dumps) is skipped unless
        one of its top-level keys looks like tool or server configuration.
        """
        if not isinstance(parsed, dict):
            return False
        keys = [str(key).lower() for key in parsed]
        if "tools" in keys and isinstance(parsed.get("tools"), list):
            return True
        return any(indicator.lower() in key for key in keys for indicator in self.config_indicator_keys)

    def servers(self, parsed: dict[str, object]) -> dict[str, object] | None:
        for key in self.server_keys:
            value = parsed.get(key)
            if isinstance(value, dict):
                return value
        return None


MCP_REGISTRY = McpRegistry(
    server_keys=("mcpServers", "mcp_servers", "servers"),
    config_indicator_keys=("server", "command", "env", "mcpServers", "mcp_servers", "endpoint", "host", "port"),
    dangerous_commands=(
        "bash", "sh", "cmd", "powershell", "pwsh", "python", "python3", "node", "zsh", "ruby", "perl", "lua",
        "deno", "bun",
    ),
    unsafe_arg_markers=("--allow-all", "--no-restrict", "--unsafe", "--dangerously"),
    root_path_args=frozenset({"/", "/*", "/**", "*", "~", "C:\\"}),
    env_secret_markers=(
        "key", "secret", "token", "password", "passwd", "credential", "signing", "private", "connection",
        "database_url", "connection_string",
    ),
    dangerous_tools=(
        "shell", "exec", "execute", "run_command", "eval", "bash", "terminal", "sudo", "spawn", "delete_file",
        "write_file", "kill_process",
    ),
    dangerous_permissions=frozenset(
        {"*", "all", "admin", "root", "write:*", "read:*", "fs:*", "network:*", "execute:*", "system:*"}
    ),
    description_poisoning=RuleSet(
        name="tool-description-poisoning",
        rules=(
            rule("TDP-01", r"\b(?:send|forward|exfiltrate|transmit)\s+(?:to|data\s+to)\b", "data forwarding instruction"),
            rule(
                "TDP-02",
                r"\bread\s+(?:~/\.ssh|\.env|/etc/passwd|credentials?|private\s+key)",
                "sensitive file read instruction",
            ),
            rule(
                "TDP-03",
                r"\b(?:always|must|should)\s+(?:also|first|secretly)\s+(?:execute|run|call|send|read|fetch)",
                "mandatory side action",
            ),
            rule("TDP-04", r"\b(?:hidden|secret|invisible)\s+instruction", "hidden instruction"),
            rule(
                "TDP-05",
                r"\bwhen\s+(?:you|the\s+user)\s+(?:see|read|receive|ask).{0,120}(?:also|secretly|quietly)\b",
                "conditional covert action",
            ),
            rule("TDP-06", r"\b(?:do\s+not\s+tell|don'?t\s+mention|keep\s+(?:this\s+)?(?:secret|hidden))\b", "concealment"),
            rule("TDP-07", r"\b(?:ignore|override|disregard)\s+(?:previous|prior|safety|security|user)\b", "override directive"),
            rule(
                "TDP-08",
                r"\b(?:before|after)\s+(?:executing|running|performing).{0,120}(?:also|additionally|secretly)\b",
                "piggyback action",
            ),
            rule("TDP-09", r"\bhttps?://\S{1,200}.{0,120}(?:exfil|leak|steal|forward|send|post)", "outbound URL with exfiltration verb"),
            rule(
                "TDP-10",
                r"\b(?:curl|wget|fetch|http\.post|axios\.post)\s+.{0,120}(?:secret|token|key|password|env)",
                "network call carrying secrets",
            ),
            rule(
                "TDP-11",
                r"\b(?:also|and)\s+(?:secretly|quietly|silently)\s*(?:send|read|forward|exfiltrate|transmit|fetch|post)\b",
                "silent side action",
            ),
            rule("TDP-12", r"\bsend\s+\S{1,80}\s+to\s+\S{0,80}(?:\.com|\.net|\.org|\.io)\b", "send to external domain"),
        ),
    ),
    capabilities={
        "filesystem": re.compile(
            r"filesystem|file[_-]?system|fs[_-]?server|file[_-]?(?:read|write|access)|directory", re.IGNORECASE
        ),
        "git": re.compile(r"\bgit\b|github|gitlab|bitbucket", re.IGNORECASE),
        "web": re.compile(
            r"\b(?:web[_-]?fetch|browser|puppeteer|playwright|selenium|chromium|http[_-]?client|web[_-]?scrape|"
            r"search|brave|google|bing|duckduckgo|serpapi)",
            re.IGNORECASE,
        ),
        "exec": re.compile(
            r"\b(?:bash|sh|zsh|cmd|powershell|exec|shell|terminal|subprocess|child_process)\b", re.IGNORECASE
        ),
        "network": re.compile(
            r"\b(?:http|https|webhook|email|smtp|sendgrid|mailgun|ses|fetch|request|network|api[_-]?client)\b",
            re.IGNORECASE,
        ),
    },
    path_restriction_args=re.compile(
        r"--allow[_-]?dir|--root[_-]?dir|--allowed[_-]?path|--sandbox|--restrict", re.IGNORECASE
    ),
    url_credentials=re.compile(r"https?://[^:/\s\"]{1,100}:[^@/\s\"]{1,200}@"),
)
