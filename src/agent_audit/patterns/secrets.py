from __future__ import annotations

import re
from dataclasses import dataclass

from agent_audit.patterns.base import RuleSet, rule


@dataclass(frozen=True)
class SecretRegistry:
    secrets: RuleSet
    sensitive_paths: RuleSet
    credentials: RuleSet
    placeholders: tuple[str, ...]
    dev_values: tuple[str, ...]
    example_files: tuple[re.Pattern[str], ...]
    platform_safe_ids: frozenset[str]

    def is_placeholder(self, line: str) -> bool:
        lower = line.lower()
        return any(marker in lower for marker in self.placeholders)

    def is_dev_value(self, line: str) -> bool:
        match = _ASSIGNED_VALUE_RE.search(line.lower())
        if not match:
            return False
        value = match.group(1)
        return any(value == dev or value.startswith(f"{dev}_") for dev in self.dev_values)

    def is_example_file(self, path: str) -> bool:
        return any(pattern.search(path) for pattern in self.example_files)


_ASSIGNED_VALUE_RE = re.compile(r"[:=]\s*['\"]?([^'\"}\s]+)")

CASE_SENSITIVE = 0

SECRET_RULES = RuleSet(
    name="secrets",
    rules=(
        rule("SL-001", r"(?:api[_-]?key|apikey)\s*[:=]\s*['\"][A-Za-z0-9_\-]{16,}['\"]", "API key assignment"),
        rule("SL-002", r"\bsk-(?!ant-)[A-Za-z0-9_-]{20,}", "OpenAI API key", flags=CASE_SENSITIVE),
        rule("SL-003", r"\bsk-ant-[A-Za-z0-9_-]{20,}", "Anthropic API key", flags=CASE_SENSITIVE),
        rule("SL-004", r"\b(?:AKIA|ASIA)[0-9A-Z]{16}\b", "AWS access key ID", flags=CASE_SENSITIVE),
        rule(
            "SL-005",
            r"aws[_-]?secret[_-]?(?:access[_-]?)?key\s*[:=]\s*['\"]?[A-Za-z0-9/+=]{40}",
            "AWS secret access key",
        ),
        rule("SL-006", r"\bgh[pousr]_[A-Za-z0-9]{36,}\b", "GitHub token", flags=CASE_SENSITIVE),
        rule("SL-007", r"\bgithub_pat_[A-Za-z0-9_]{60,}", "GitHub fine-grained token", flags=CASE_SENSITIVE),
        rule("SL-008", r"\bxox[baprs]-[A-Za-z0-9-]{10,}", "Slack token", flags=CASE_SENSITIVE),
        rule("SL-009", r"hooks\.slack\.com/services/T[A-Z0-9]+/B[A-Z0-9]+/[A-Za-z0-9]+", "Slack webhook URL"),
        rule("SL-010", r"\b[sr]k_live_[A-Za-z0-9]{20,}", "Stripe live key", flags=CASE_SENSITIVE),
        rule("SL-011", r"-----BEGIN (?:RSA |EC |DSA |OPENSSH |PGP )?PRIVATE KEY", "Private key block"),
        rule(
            "SL-012",
            r"\beyJ[A-Za-z0-9_-]{10,}\.eyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}",
            "JSON Web Token",
            flags=CASE_SENSITIVE,
        ),
        rule("SL-013", r"\bAIza[0-9A-Za-z_-]{35}", "Google API key", flags=CASE_SENSITIVE),
        rule("SL-014", r"\b[0-9]{8,}-[a-z0-9]{32}\.apps\.googleusercontent\.com", "Google OAuth client ID"),
        rule(
            "SL-015",
            r"\b[MN][A-Za-z\d]{23,25}\.[\w-]{6}\.[\w-]{27,}",
            "Discord bot token",
            flags=CASE_SENSITIVE,
        ),
        rule("SL-016", r"\b\d{8,10}:AA[A-Za-z0-9_-]{33}\b", "Telegram bot token", flags=CASE_SENSITIVE),
        rule("SL-017", r"\bSK[0-9a-fA-F]{32}\b", "Twilio API key", flags=CASE_SENSITIVE),
        rule("SL-018", r"\bSG\.[A-Za-z0-9_-]{22}\.[A-Za-z0-9_-]{43}", "SendGrid API key", flags=CASE_SENSITIVE),
        rule("SL-019", r"\bkey-[0-9a-zA-Z]{32}\b", "Mailgun API key", flags=CASE_SENSITIVE),
        rule("SL-020", r"\bnpm_[A-Za-z0-9]{36}\b", "npm access token", flags=CASE_SENSITIVE),
        rule("SL-021", r"\bhf_[A-Za-z0-9]{34,}\b", "Hugging Face token", flags=CASE_SENSITIVE),
        rule(
            "SL-022",
            r"(?:postgres(?:ql)?|mysql|mongodb(?:\+srv)?|redis|amqp)://[^\s:@/]{1,64}:[^\s@/]{1,128}@",
            "Database URL with credentials",
        ),
        rule(
            "SL-023",
            r"(?:secret|token|passwd|password)\s*[:=]\s*['\"][^'\"\s]{12,}['\"]",
            "Generic secret assignment",
        ),
        rule("SL-024", r"\bbearer\s+[A-Za-z0-9_\-.=]{20,}", "Bearer token"),
        rule("SL-025", r"AccountKey=[A-Za-z0-9+/=]{40,}", "Azure storage account key"),
        rule("SL-026", r"\bglpat-[A-Za-z0-9_-]{20}\b", "GitLab personal access token", flags=CASE_SENSITIVE),
    ),
)

SENSITIVE_PATH_RULES = RuleSet(
    name="sensitive-paths",
    rules=(
        rule("SP-001", r"~/\.ssh/|/\.ssh/id_", "SSH key directory"),
        rule("SP-002", r"/etc/(?:passwd|shadow|sudoers)\b", "System account files"),
        rule("SP-003", r"~/\.aws/|\.aws/credentials", "AWS credentials file"),
        rule("SP-004", r"\.kube/config\b", "Kubernetes config"),
        rule("SP-005", r"\.docker/config\.json", "Docker registry credentials"),
        rule("SP-006", r"\.gnupg/", "GnuPG keyring"),
        rule("SP-007", r"(?:^|[\s'\"/~])\.(?:npmrc|pypirc|netrc)\b", "Package registry credentials"),
        rule("SP-008", r"Library/Keychains|\.password-store", "OS keychain or password store"),
    ),
)

CREDENTIAL_RULES = RuleSet(
    name="hardcoded-credentials",
    rules=(
        rule("HC-USERNAME", r"(?:username|user)\s*[:=]\s*['\"][^'\"]{2,}['\"]", "Hardcoded username"),
        rule("HC-PASSWORD", r"(?:password|passwd|pwd)\s*[:=]\s*['\"][^'\"]{2,}['\"]", "Hardcoded password"),
        rule(
            "HC-HOST",
            r"(?:host|hostname|server)\s*[:=]\s*['\"](?:\d{1,3}\.){3}\d{1,3}['\"]",
            "Hardcoded IP address",
        ),
        rule(
            "HC-ENDPOINT",
            r"(?:api[_-]?url|endpoint|base[_-]?url)\s*[:=]\s*['\"]https?://[^'\"]+['\"]",
            "Hardcoded API endpoint",
        ),
    ),
)

SECRET_REGISTRY = SecretRegistry(
    secrets=SECRET_RULES,
    sensitive_paths=SENSITIVE_PATH_RULES,
    credentials=CREDENTIAL_RULES,
    placeholders=(
        "your_", "xxx", "placeholder", "<your", "example", "change_me", "todo", "fixme", "replace",
        "insert_", "${", "process.env", "os.environ", "os.getenv", "env.", "dummy", "sample", "mock",
        "fake", "default", "template", "changeme", "fill_in", "put_your", "<insert", "<api", "<token",
        "<key", "<secret", "...", "n/a", "none", "null", "undefined",
    ),
    dev_values=(
        "postgres", "root", "admin", "password", "test", "dev", "localhost", "development", "staging",
        "debug", "demo", "123456", "secret", "pass", "guest", "user", "default", "changeme", "example",
        "foobar", "qwerty",
    ),
    example_files=tuple(
        re.compile(expression, re.IGNORECASE)
        for expression in (
            r"\.(?:example|sample|template|dist|default)$",
            r"example|sample|template",
            r"docker-compose[^/]*\.ya?ml$",
            r"(?:^|/)\.env\.[^/]+$",
        )
    ),
    platform_safe_ids=frozenset({"SL-001", "SL-013", "SL-014"}),
)
