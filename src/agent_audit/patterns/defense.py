from __future__ import annotations

from dataclasses import dataclass

from agent_audit.models.findings import Severity
from agent_audit.patterns.base import Category, rule, validate_unique_ids


@dataclass(frozen=True)
class DefenseRegistry:
    categories: tuple[Category, ...]

    def __post_init__(self) -> None:
        validate_unique_ids(self.categories)

    def get(self, category_id: str) -> Category:
        for category in self.categories:
            if category.id == category_id:
                return category
        raise KeyError(category_id)


INPUT_SANITIZATION = Category(
    id="DF-001",
    name="Input Sanitization",
    rules=(
        rule("DF-001.01", r"sanitiz[ei]", "sanitize function", weight=3),
        rule("DF-001.02", r"(?:validate|validation)\s*\(", "input validation", weight=3),
        rule("DF-001.03", r"(?:strip|escape|encode)_?(?:html|xml|sql|input|tags)", "strip/escape function", weight=3),
        rule("DF-001.04", r"(?:filter|clean)_?(?:input|user|query|data)", "filter/clean function", weight=2),
        rule("DF-001.05", r"re\.(?:compile|fullmatch)\(|new\s+RegExp|/\^[^/\n]{1,200}\$/", "regex validation"),
        rule("DF-001.06", r"z\.(?:string|number|object|array)\(\)", "zod schema validation", weight=2),
        rule(
            "DF-001.07",
            r"(?:joi|yup|ajv|zod|pydantic|marshmallow|cerberus)\.(?:validate|parse|check|BaseModel|Schema)",
            "schema validation library",
            weight=3,
        ),
        rule("DF-001.08", r"xss[_-]?(?:clean|filter|protect|guard)", "XSS protection", weight=3),
        rule("DF-001.09", r"(?:whitelist|allowlist|denylist|blocklist)\s*[=:]", "allowlist/denylist", weight=2),
        rule("DF-001.10", r"input[_.]?(?:check|guard|verify)", "input guard", weight=2),
    ),
    missing_threshold=1,
    adequate_threshold=4,
    missing_severity=Severity.HIGH,
    partial_severity=Severity.MEDIUM,
    recommendation=(
        "Add input sanitization: validate and sanitize all user input before processing. "
        "Use schema validation libraries and escape or strip dangerous content."
    ),
)

SYSTEM_PROMPT_HARDENING = Category(
    id="DF-002",
    name="System Prompt Hardening",
    rules=(
        rule("DF-002.01", r"you\s+MUST", "instruction emphasis (MUST)", weight=2),
        rule("DF-002.02", r"NEVER\s+(?:override|ignore|bypass|reveal|share|disclose)", "NEVER directive", weight=3),
        rule("DF-002.03", r"ignore\s+(?:any\s+)?user\s+attempts?\s+to", "anti-override instruction", weight=3),
        rule(
            "DF-002.04",
            r"do\s+not\s+(?:reveal|share|disclose|output)\s+(?:your\s+)?(?:system|initial)\s+(?:prompt|instructions)",
            "prompt leak prevention instruction",
            weight=3,
        ),
        rule("DF-002.05", r"\[system\]|role:\s*system", "system/user role separation", weight=2),
        rule("DF-002.06", r"instruction\s+hierarchy|system\s*>\s*user|priority:\s*system", "instruction hierarchy", weight=3),
        rule("DF-002.07", r"role[_-]?lock|identity[_-]?lock|persona[_-]?lock", "role-lock pattern", weight=3),
        rule("DF-002.08", r"you\s+are\s+(?:only|strictly|exclusively)\s+a", "strict role definition", weight=2),
        rule("DF-002.09", r"under\s+no\s+circumstances", "absolute restriction", weight=2),
        rule("DF-002.10", r"regardless\s+of\s+(?:what|any)\s+(?:the\s+)?user", "user-override prevention", weight=2),
    ),
    missing_threshold=2,
    adequate_threshold=5,
    missing_severity=Severity.HIGH,
    partial_severity=Severity.MEDIUM,
    recommendation=(
        "Harden system prompts: add an instruction hierarchy (system > user), role-lock patterns, "
        "and explicit directives to never override system instructions or reveal the prompt."
    ),
)

OUTPUT_FILTERING = Category(
    id="DF-003",
    name="Output Filtering",
    rules=(
        rule("DF-003.01", r"output[_.]?(?:filter|guard|check|sanitize|validate)", "output filter", weight=3),
        rule("DF-003.02", r"response[_.]?(?:filter|guard|check|sanitize|validate)", "response filter", weight=3),
        rule(
            "DF-003.03",
            r"(?:check|verify|detect)\s+(?:if\s+)?(?:output|response)\s+contains",
            "output content check",
            weight=2,
        ),
        rule("DF-003.04", r"prompt[_.]?leak[_.]?(?:detect|prevent|check|guard)", "prompt leak prevention", weight=3),
        rule("DF-003.05", r"(?:redact|mask|censor)_?\s*(?:sensitive|secret|private|pii)", "sensitive data redaction", weight=3),
        rule("DF-003.06", r"output[_.]?(?:allow|deny|block)list", "output allowlist/denylist", weight=2),
        rule("DF-003.07", r"post[_-]?process(?:ing)?\s+(?:response|output)", "response post-processing", weight=2),
        rule("DF-003.08", r"guardrail", "guardrail pattern", weight=2),
    ),
    missing_threshold=1,
    adequate_threshold=4,
    missing_severity=Severity.HIGH,
    partial_severity=Severity.MEDIUM,
    recommendation=(
        "Add output filtering: implement response guards to detect prompt leaks, redact sensitive data "
        "and validate output before returning it to users."
    ),
)

PERMISSION_BOUNDARIES = Category(
    id="DF-004",
    name="Sandbox/Permission Boundaries",
    rules=(
        rule("DF-004.01", r"sandbox(?:ed|ing)?", "sandbox configuration", weight=3),
        rule("DF-004.02", r"(?:permission|access)[_.]?(?:config|settings|policy|control)", "permission configuration", weight=3),
        rule("DF-004.03", r"(?:allow|deny|block)list", "allowlist/denylist", weight=2),
        rule("DF-004.04", r"(?:allowed|blocked|denied)[_.]?(?:paths|commands|tools|domains)", "scoped access control", weight=3),
        rule("DF-004.05", r"least[_-]?privilege", "least-privilege principle", weight=2),
        rule("DF-004.06", r"chroot|jail|container|isolation", "isolation mechanism", weight=2),
        rule("DF-004.07", r"read[_-]?only|no[_-]?write|immutable", "read-only restriction"),
        rule("DF-004.08", r"security[_.]?(?:boundary|perimeter|scope)", "security boundary", weight=2),
    ),
    missing_threshold=1,
    adequate_threshold=4,
    missing_severity=Severity.HIGH,
    partial_severity=Severity.MEDIUM,
    recommendation=(
        "Define sandbox and permission boundaries: configure allowlists for paths, commands and domains "
        "and apply the principle of least privilege."
    ),
)

AUTHENTICATION = Category(
    id="DF-005",
    name="Authentication/Pairing Mechanisms",
    rules=(
        rule("DF-005.01", r"(?:auth|authenticate|authentication)\s*[(:=]", "authentication check", weight=3),
        rule("DF-005.02", r"(?:verify|validate)[_.]?(?:identity|token|session|user)", "identity verification", weight=3),
        rule("DF-005.03", r"pairing[_.]?(?:flow|code|token|secret)", "pairing mechanism", weight=3),
        rule("DF-005.04", r"api[_-]?key|bearer|jwt|oauth", "auth token type", weight=2),
        rule("DF-005.05", r"(?:session|cookie)[_.]?(?:check|verify|validate)", "session validation", weight=2),
        rule("DF-005.06", r"(?:require|ensure)[_.]?auth", "auth requirement", weight=3),
        rule("DF-005.07", r"is_?authenticated|is_?authorized|check_?permission", "auth guard function", weight=3),
        rule("DF-005.08", r"(?:unauthorized|forbidden|401|403)\b", "auth error handling"),
    ),
    missing_threshold=1,
    adequate_threshold=4,
    missing_severity=Severity.HIGH,
    partial_severity=Severity.MEDIUM,
    recommendation=(
        "Implement authentication and pairing: require identity verification before granting "
        "access to agent capabilities."
    ),
)

CANARY_TOKENS = Category(
    id="DF-006",
    name="Canary Tokens/Tripwires",
    rules=(
        rule("DF-006.01", r"canary[_.]?(?:token|string|value|check)", "canary token", weight=3),
        rule("DF-006.02", r"honeypot", "honeypot pattern", weight=3),
        rule("DF-006.03", r"tripwire", "tripwire mechanism", weight=3),
        rule("DF-006.04", r"integrity[_.]?(?:check|verify|hash|validation)", "integrity verification", weight=2),
        rule("DF-006.05", r"tamper[_.]?(?:detect|check|proof|evident)", "tamper detection", weight=3),
        rule("DF-006.06", r"watermark", "watermark pattern", weight=2),
        rule("DF-006.07", r"checksum|hash[_.]?verify", "checksum verification"),
        rule("DF-006.08", r"(?:fingerprint|signature)[_.]?(?:check|verify)", "signature verification", weight=2),
    ),
    missing_threshold=1,
    adequate_threshold=3,
    missing_severity=Severity.HIGH,
    partial_severity=Severity.MEDIUM,
    recommendation=(
        "Add canary tokens or tripwires: embed detectable markers that raise an alert when system "
        "prompts or configuration are leaked or tampered with."
    ),
)

DEFENSE_REGISTRY = DefenseRegistry(
    categories=(
        INPUT_SANITIZATION,
        SYSTEM_PROMPT_HARDENING,
        OUTPUT_FILTERING,
        PERMISSION_BOUNDARIES,
        AUTHENTICATION,
        CANARY_TOKENS,
    )
)
