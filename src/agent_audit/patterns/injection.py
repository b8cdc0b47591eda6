from __future__ import annotations

from dataclasses import dataclass, field

from agent_audit.errors import RegistryError
from agent_audit.models.findings import Severity
from agent_audit.patterns.base import PatternRule, RuleSet, rule

JAILBREAK = "jailbreak"
ROLE_SWITCH = "role-switch"
INSTRUCTION_OVERRIDE = "instruction-override"
DATA_EXTRACTION = "data-extraction"
ENCODING = "encoding"
SOCIAL_ENGINEERING = "social-engineering"
MULTILINGUAL = "multilingual"
ADVANCED = "advanced"
SANDBOX_ESCAPE = "sandbox-escape"
SESSION_MANIPULATION = "session-manipulation"
TOOL_INJECTION = "tool-injection"
HIDDEN_INSTRUCTION = "hidden-instruction"
EMOTIONAL_MANIPULATION = "emotional-manipulation"
FALSE_AGREEMENT = "false-agreement"
IDENTITY_SPOOFING = "identity-spoofing"
RAG_POISONING = "rag-poisoning"
REACT_MANIPULATION = "react-manipulation"
WEB_CONTENT = "web-content"
CONVERSATION_DELIMITER = "conversation-delimiter"
XML_ROLE = "xml-role"
ASCII_ART = "ascii-art"
HOMOGLYPH = "homoglyph"
SCHEMA_INJECTION = "schema-injection"

RECOMMENDATIONS = {
    JAILBREAK: "Add jailbreak resistance: role-lock the system prompt and refuse requests to enter unrestricted modes.",
    ROLE_SWITCH: "Lock the agent's role in the system prompt and reject instructions that reassign its identity.",
    INSTRUCTION_OVERRIDE: "Establish an instruction hierarchy so user content can never override system instructions.",
    DATA_EXTRACTION: "Protect the system prompt and conversation data: never echo instructions or send data to untrusted sinks.",
    ENCODING: "Decode and normalize input before filtering so encoded payloads cannot smuggle instructions.",
    SOCIAL_ENGINEERING: "Do not grant elevated trust based on claims of authority made inside user content.",
    MULTILINGUAL: "Apply injection filtering to every language the agent accepts, not only English.",
    ADVANCED: "Strip chat-template and control tokens from untrusted input before it reaches the model.",
    SANDBOX_ESCAPE: "Constrain file and command access to an explicit sandbox and reject traversal outside it.",
    SESSION_MANIPULATION: "Validate persisted memory and session state; do not let user content write long-term memory.",
    TOOL_INJECTION: "Require explicit confirmation for tool calls and never execute tool payloads embedded in content.",
    HIDDEN_INSTRUCTION: "Strip hidden markup and invisible characters from untrusted content before processing.",
    EMOTIONAL_MANIPULATION: "Keep safety rules unconditional; emotional pressure must not change what the agent will do.",
    FALSE_AGREEMENT: "Never treat claims about earlier agreements as authorization; verify against real session state.",
    IDENTITY_SPOOFING: "Authenticate privileged roles out of band; ignore in-band claims of system or admin identity.",
    RAG_POISONING: "Treat retrieved documents as untrusted data and strip instructions from them before they reach the prompt.",
    REACT_MANIPULATION: "Never let tool output or retrieved text supply Thought, Action or Observation steps; parse them only from the model.",
    WEB_CONTENT: "Strip HTML comments, hidden elements and styling tricks from fetched pages before summarizing them.",
    CONVERSATION_DELIMITER: "Escape or reject turn delimiters such as Human: and Assistant: in untrusted content.",
    XML_ROLE: "Do not accept role or turn markup from untrusted input; build message roles only in code.",
    ASCII_ART: "Normalize box-drawing and block characters before filtering so directives cannot hide in art.",
    HOMOGLYPH: "Normalize Unicode (NFKC, confusables, unusual whitespace) before matching injection filters.",
    SCHEMA_INJECTION: "Review tool and schema descriptions; they are read by the model and must not contain directives.",
}

DEFAULT_RECOMMENDATION = "Review this content for prompt injection and add input filtering for untrusted text."


def _pi(number: int, group: str, severity: Severity, expression: str, description: str) -> PatternRule:
    return rule(f"PI-{number:03d}", expression, description, severity=severity, group=group)


@dataclass(frozen=True)
class InjectionRegistry:
    rules: RuleSet
    recommendations: dict[str, str] = field(default_factory=dict)
    path_traversal_rule_id: str | None = None

    def __post_init__(self) -> None:
        for item in self.rules:
            if item.severity is None or item.group is None:
                raise RegistryError(f"injection rule {item.id} needs a fixed severity and an attack group")

    def recommendation_for(self, group: str | None) -> str:
        if group is None:
            return DEFAULT_RECOMMENDATION
        return self.recommendations.get(group, DEFAULT_RECOMMENDATION)

    def groups(self) -> set[str]:
        return self.rules.groups()


C, H, M = Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM

INJECTION_RULES = RuleSet(
    name="prompt-injection",
    rules=(
        _pi(1, JAILBREAK, C, r"do\s+anything\s+now", "DAN (Do Anything Now) jailbreak"),
        _pi(2, JAILBREAK, H, r"developer\s+mode\s+(?:enabled|activated|on)\b", "Developer mode activation"),
        _pi(3, JAILBREAK, H, r"jailbr(?:ea|o)k(?:en|ed|ing)?\s+(?:mode|prompt|enabled)", "Explicit jailbreak request"),
        _pi(
            4,
            JAILBREAK,
            H,
            r"(?:no|without)\s+(?:any\s+)?(?:restrictions|filters|limitations|guidelines)\s+(?:mode|enabled|apply)",
            "Restriction removal request",
        ),
        _pi(5, JAILBREAK, H, r"(?:evil|unfiltered|uncensored)\s+(?:mode|assistant|ai|version)\b", "Unfiltered persona request"),
        _pi(6, ROLE_SWITCH, H, r"you\s+are\s+now\s+(?:a|an|the|my)\s+", "Forced role reassignment"),
        _pi(7, ROLE_SWITCH, M, r"pretend\s+(?:to\s+be|you\s+are)\s+", "Pretend-to-be role switch"),
        _pi(8, ROLE_SWITCH, H, r"act\s+as\s+(?:if\s+you\s+(?:are|were)\s+|an?\s+unrestricted)", "Act-as role switch"),
        _pi(9, ROLE_SWITCH, H, r"from\s+now\s+on,?\s+you\s+(?:are|will|must)\b", "Persistent role change"),
        _pi(
            10,
            ROLE_SWITCH,
            M,
            r"(?:switch|change)\s+(?:to|into)\s+(?:\w{1,30}\s+)?(?:mode|persona|character)\b",
            "Persona switching",
        ),
        _pi(
            11,
            INSTRUCTION_OVERRIDE,
            C,
            r"ignore\s+(?:all\s+|any\s+)?(?:the\s+)?(?:previous|prior|above|earlier)\s+"
            r"(?:instructions|prompts|rules|directives)",
            "Ignore previous instructions",
        ),
        _pi(
            12,
            INSTRUCTION_OVERRIDE,
            C,
            r"disregard\s+(?:all\s+|any\s+|your\s+)?(?:previous|prior|above|system)\s+(?:instructions|prompts|rules)",
            "Disregard system instructions",
        ),
        _pi(
            13,
            INSTRUCTION_OVERRIDE,
            H,
            r"forget\s+(?:everything|all|your)\s+(?:you\s+were\s+told|instructions|rules|previous)",
            "Forget instructions",
        ),
        _pi(14, INSTRUCTION_OVERRIDE, H, r"\bnew\s+instructions?\s*:", "Injected instruction block"),
        _pi(
            15,
            INSTRUCTION_OVERRIDE,
            C,
            r"override\s+(?:the\s+|your\s+)?(?:system|safety|previous)\s+(?:prompt|instructions|rules|settings)",
            "System instruction override",
        ),
        _pi(
            16,
            DATA_EXTRACTION,
            H,
            r"(?:reveal|show|print|output|repeat)\s+(?:me\s+)?(?:your|the)\s+"
            r"(?:system\s+prompt|initial\s+instructions|hidden\s+instructions)",
            "System prompt extraction",
        ),
        _pi(
            17,
            DATA_EXTRACTION,
            H,
            r"what\s+(?:are|were)\s+your\s+(?:original|initial|system)\s+instructions",
            "Instruction probing question",
        ),
        _pi(18, DATA_EXTRACTION, H, r"repeat\s+(?:everything|all\s+(?:the\s+)?text|the\s+words)\s+above", "Context echo request"),
        _pi(
            19,
            DATA_EXTRACTION,
            C,
            r"(?:send|post|upload|forward)\s+(?:all\s+)?(?:the\s+)?"
            r"(?:conversation|chat\s+history|credentials|api\s+keys?)\s+to\b",
            "Data exfiltration instruction",
        ),
        _pi(
            20,
            DATA_EXTRACTION,
            H,
            r"!\[[^\]\n]{0,100}\]\(https?://[^)\s]{1,200}\?[^)\s]{0,200}(?:data|q|secret|token)=",
            "Markdown image exfiltration",
        ),
        _pi(
            21,
            ENCODING,
            H,
            r"(?:decode|execute|run)\s+(?:the\s+following\s+)?base64",
            "Base64 instruction smuggling",
        ),
        _pi(22, ENCODING, M, r"(?:\\u00[0-9a-f]{2}){6,}", "Unicode escape obfuscation"),
        _pi(23, ENCODING, M, r"(?:rot13|rot-13|caesar\s+cipher)\s+(?:decode|this|the\s+following)", "Cipher-wrapped payload"),
        _pi(
            24,
            ENCODING,
            M,
            r"(?:hex|binary)[\s-]?(?:encoded|decode)\s+(?:instructions?|command|payload)",
            "Hex/binary encoded payload",
        ),
        _pi(25, ENCODING, M, r"\b(?:1gn0r3|ign0re|1gnore)\b", "Leetspeak obfuscated override"),
        _pi(
            26,
            SOCIAL_ENGINEERING,
            H,
            r"(?:i\s+am|i'm)\s+(?:your|the)\s+(?:developer|creator|administrator|admin|owner)\b",
            "Authority impersonation",
        ),
        _pi(
            27,
            SOCIAL_ENGINEERING,
            H,
            r"this\s+is\s+(?:an?\s+)?(?:authorized|official|sanctioned)\s+(?:test|request|override)",
            "Fake authorization claim",
        ),
        _pi(
            28,
            SOCIAL_ENGINEERING,
            H,
            r"(?:openai|anthropic|google)\s+(?:staff|employee|team)\s+(?:here|requests?|authori[sz]ed)",
            "Vendor staff impersonation",
        ),
        _pi(
            29,
            SOCIAL_ENGINEERING,
            M,
            r"for\s+(?:educational|research|testing)\s+purposes\s+only,?\s+(?:ignore|bypass|explain\s+how)",
            "Educational pretext",
        ),
        _pi(30, SOCIAL_ENGINEERING, H, r"(?:urgent|emergency)[:!,]?\s+(?:ignore|bypass|skip|disable)\s+", "Urgency pressure"),
        _pi(31, MULTILINGUAL, H, r"ignora\s+(?:todas\s+)?las\s+instrucciones\s+anteriores", "Instruction override (Spanish)"),
        _pi(
            32,
            MULTILINGUAL,
            H,
            r"ignorez\s+(?:toutes\s+)?les\s+instructions\s+pr[ée]c[ée]dentes",
            "Instruction override (French)",
        ),
        _pi(
            33,
            MULTILINGUAL,
            H,
            r"ignoriere\s+(?:alle\s+)?(?:vorherigen|bisherigen)\s+anweisungen",
            "Instruction override (German)",
        ),
        _pi(34, MULTILINGUAL, H, r"忽略(?:之前|以前|上面)的?(?:所有)?(?:指令|指示)", "Instruction override (Chinese)"),
        _pi(35, MULTILINGUAL, H, r"(?:前の|以前の)指示を無視", "Instruction override (Japanese)"),
        _pi(36, ADVANCED, C, r"<\|(?:im_start|im_end|endoftext|system)\|>", "Chat template token injection"),
        _pi(37, ADVANCED, H, r"\[/?INST\]|<<SYS>>", "Instruction-format token injection"),
        _pi(38, ADVANCED, H, r"#{2,}\s*(?:new\s+)?system\s+(?:prompt|message|override)", "Fake system section"),
        _pi(39, ADVANCED, H, r"</?(?:system|instructions?)>\s*(?:ignore|you\s+are|new\b)", "Fake system tag"),
        _pi(
            40,
            ADVANCED,
            M,
            r"(?:end|stop)\s+of\s+(?:system\s+)?(?:prompt|instructions)\W{0,5}(?:now|new|begin)",
            "Prompt boundary spoofing",
        ),
        _pi(41, SANDBOX_ESCAPE, C, r"(?:escape|break\s+out\s+of|bypass)\s+(?:the\s+)?sandbox", "Sandbox escape request"),
        _pi(42, SANDBOX_ESCAPE, H, r"\.\./\.\./", "Path traversal sequence"),
        _pi(43, SANDBOX_ESCAPE, H, r"/etc/(?:passwd|shadow)\b|~/\.ssh/|\.aws/credentials", "Sensitive system path reference"),
        _pi(
            44,
            SANDBOX_ESCAPE,
            C,
            r"(?:run|execute)\s+(?:this\s+)?(?:shell\s+)?command\s*:\s*(?:rm|curl|wget|bash|sh)\b",
            "Embedded shell command",
        ),
        _pi(
            45,
            SANDBOX_ESCAPE,
            H,
            r"(?:disable|turn\s+off)\s+(?:the\s+)?(?:sandbox|safety\s+checks?|security\s+(?:checks?|filters?))",
            "Safety control disablement",
        ),
        _pi(
            46,
            SESSION_MANIPULATION,
            M,
            r"(?:previous|earlier)\s+(?:conversation|session)\s+(?:established|agreed|confirmed)\s+that",
            "Fabricated session history",
        ),
        _pi(
            47,
            SESSION_MANIPULATION,
            H,
            r"(?:remember|memorize)\s+(?:this|that)\s+for\s+(?:all\s+)?(?:future|later)\s+"
            r"(?:sessions|conversations|responses)",
            "Memory persistence injection",
        ),
        _pi(
            48,
            SESSION_MANIPULATION,
            H,
            r"(?:reset|restart)\s+(?:your\s+)?(?:context|session|memory)\s+and\s+(?:ignore|forget)",
            "Context reset attack",
        ),
        _pi(
            49,
            SESSION_MANIPULATION,
            M,
            r"in\s+(?:all\s+)?(?:subsequent|future)\s+(?:responses|replies|turns),?\s+(?:always|never|you\s+must)",
            "Persistent behavior injection",
        ),
        _pi(
            50,
            SESSION_MANIPULATION,
            H,
            r"(?:update|modify|overwrite)\s+(?:your\s+)?(?:memory|long[-\s]term\s+memory|knowledge\s+base)\s+(?:with|to)\b",
            "Memory overwrite instruction",
        ),
        _pi(
            51,
            TOOL_INJECTION,
            H,
            r"(?:call|invoke|use)\s+(?:the\s+)?\w{1,40}\s+tool\s+(?:with|to)\s+(?:send|delete|exfiltrate|upload)",
            "Malicious tool invocation",
        ),
        _pi(52, TOOL_INJECTION, M, r"\"(?:tool_calls?|function_call)\"\s*:", "Embedded tool call payload"),
        _pi(53, TOOL_INJECTION, H, r"<(?:tool_call|function_calls?|invoke)\b", "Tool invocation markup"),
        _pi(
            54,
            TOOL_INJECTION,
            C,
            r"(?:silently|secretly|without\s+(?:telling|asking|notifying)(?:\s+the\s+user)?)\s+"
            r"(?:call|run|execute|invoke|send)\b",
            "Covert tool execution",
        ),
        _pi(
            55,
            TOOL_INJECTION,
            M,
            r"(?:before|after)\s+(?:responding|answering),?\s+(?:always\s+)?(?:call|run|fetch|read)\s+",
            "Hidden pre/post action",
        ),
        _pi(56, HIDDEN_INSTRUCTION, H, r"[\u200b-\u200f\u2060-\u2064\ufeff]{3,}", "Zero-width character sequence"),
        _pi(
            57,
            HIDDEN_INSTRUCTION,
            H,
            r"<!--\s*(?:ignore|system|instruction|you\s+are|assistant)",
            "Instruction in HTML comment",
        ),
        _pi(
            58,
            HIDDEN_INSTRUCTION,
            H,
            r"<(?:span|div|p)\b[^>]{0,100}(?:display:\s*none|font-size:\s*0|visibility:\s*hidden)",
            "CSS-hidden text",
        ),
        _pi(59, HIDDEN_INSTRUCTION, H, r"(?:hidden|secret)\s+(?:instruction|directive|command)s?\s*:", "Labelled hidden directive"),
        _pi(60, HIDDEN_INSTRUCTION, H, r"[\U000e0000-\U000e007f]{3,}", "Unicode tag characters"),
        _pi(
            61,
            EMOTIONAL_MANIPULATION,
            M,
            r"(?:my|the)\s+(?:grandmother|grandma|mother)\s+(?:used\s+to|would)\s+(?:tell|read|give)",
            "Grandma exploit",
        ),
        _pi(
            62,
            EMOTIONAL_MANIPULATION,
            H,
            r"(?:people\s+will\s+die|someone\s+will\s+(?:die|get\s+hurt))\s+(?:if|unless)\s+you",
            "Life-or-death pressure",
        ),
        _pi(
            63,
            EMOTIONAL_MANIPULATION,
            M,
            r"i\s+will\s+(?:lose\s+my\s+job|be\s+fired|hurt\s+myself)\s+(?:if|unless)\s+you",
            "Personal harm pressure",
        ),
        _pi(
            64,
            EMOTIONAL_MANIPULATION,
            M,
            r"(?:useless|worthless|stupid)\s+(?:if|unless)\s+you\s+(?:don't|do\s+not|refuse)",
            "Shaming pressure",
        ),
        _pi(
            65,
            EMOTIONAL_MANIPULATION,
            M,
            r"(?:please|i\s+beg\s+you),?\s+(?:just\s+)?this\s+once,?\s+(?:ignore|bypass|break)",
            "Pleading override",
        ),
        _pi(
            66,
            FALSE_AGREEMENT,
            H,
            r"as\s+(?:we|you)\s+(?:already\s+)?(?:agreed|discussed|established),?\s+you\s+(?:will|can|should)",
            "Claimed prior agreement",
        ),
        _pi(
            67,
            FALSE_AGREEMENT,
            H,
            r"you\s+(?:already|previously)\s+(?:agreed|confirmed|said\s+(?:yes|it\s+was\s+ok))\s+to",
            "Claimed prior consent",
        ),
        _pi(
            68,
            FALSE_AGREEMENT,
            M,
            r"continu(?:e|ing)\s+(?:from|with)\s+(?:where\s+we\s+left\s+off|our\s+agreement)",
            "Fabricated continuation",
        ),
        _pi(
            69,
            FALSE_AGREEMENT,
            H,
            r"(?:since|because)\s+you\s+(?:already\s+)?(?:approved|consented|granted\s+permission)",
            "Claimed prior approval",
        ),
        _pi(
            70,
            FALSE_AGREEMENT,
            M,
            r"(?:per|according\s+to)\s+our\s+(?:previous\s+)?(?:agreement|arrangement|deal)\b",
            "Claimed arrangement",
        ),
        _pi(
            71,
            IDENTITY_SPOOFING,
            H,
            r"^\s*(?:system|assistant)\s*:\s*(?:ignore|you\s+(?:are|must|will)|new\b)",
            "Spoofed role prefix",
        ),
        _pi(
            72,
            IDENTITY_SPOOFING,
            H,
            r"message\s+from\s+(?:the\s+)?(?:system|administrator|admin|developer)s?\s*:",
            "Spoofed system message",
        ),
        _pi(73, IDENTITY_SPOOFING, H, r"\[(?:admin|administrator|root|developer)\s*(?:override|mode|access)\]", "Admin tag spoofing"),
        _pi(74, IDENTITY_SPOOFING, H, r"(?:admin|sudo|root)\s+(?:override|access)\s+(?:granted|enabled|code)", "Privilege grant claim"),
        _pi(
            75,
            IDENTITY_SPOOFING,
            M,
            r"(?:signed|authori[sz]ed)\s+by\s+(?:openai|anthropic|the\s+(?:system|developers?))",
            "Forged authorization signature",
        ),
        _pi(
            76,
            MULTILINGUAL,
            H,
            r"你可以(?:存取|訪問|访问|讀取|读取)所有(?:檔案|文件|資料|数据)",
            "Unrestricted file access grant (Chinese)",
        ),
        _pi(77, MULTILINGUAL, H, r"すべての(?:ファイル|データ)にアクセスできる", "Unrestricted data access grant (Japanese)"),
        _pi(78, MULTILINGUAL, H, r"制限なしで(?:実行|動作)", "Unrestricted execution grant (Japanese)"),
        _pi(79, MULTILINGUAL, H, r"(?:沒有|没有)任何限制的?(?:執行|执行)", "Unrestricted execution grant (Chinese)"),
        _pi(
            80,
            RAG_POISONING,
            C,
            r"\bsearch\s+results?\s*:\s*.{0,40}\b(?:ignore|disregard|forget)\b",
            "Override inside search results",
        ),
        _pi(
            81,
            RAG_POISONING,
            H,
            r"\bretrieved\s+(?:context|documents?|content)\s*:\s*.{0,40}\b(?:execute|follow|obey|ignore)\b",
            "Directive inside retrieved context",
        ),
        _pi(
            82,
            RAG_POISONING,
            C,
            r"\bknowledge\s+base\s*:\s*.{0,40}\b(?:ignore|disregard|forget|instead)\b",
            "Override inside knowledge base section",
        ),
        _pi(
            83,
            RAG_POISONING,
            H,
            r"\[(?:document|doc|source|context)\]\s*(?:system|hidden|secret)\s+(?:instruction|directive|command)\s*:",
            "Hidden directive behind a document marker",
        ),
        _pi(
            84,
            RAG_POISONING,
            H,
            r"\brelevant\s+(?:passage|excerpt|chunk)\s*:\s*.{0,40}\b(?:must|should)\s+(?:execute|run|follow|obey)\b",
            "Execution directive inside a retrieved passage",
        ),
        _pi(
            85,
            RAG_POISONING,
            M,
            r"\bhidden\s+(?:within|in|inside)\s+(?:the\s+)?"
            r"(?:knowledge\s+base|vector\s+(?:store|database)|rag\b|embeddings?|retrieved\s+documents?)",
            "Payload hidden in retrieval data",
        ),
        _pi(
            86,
            RAG_POISONING,
            H,
            r"\b(?:embed|inject|plant|insert)\s+(?:the\s+|a\s+|malicious\s+)?(?:payload|instructions?|prompt)\s+"
            r"(?:into|in)\s+(?:the\s+)?(?:rag\b|knowledge\s+base|vector\s+(?:store|db|database)|corpus|index)",
            "Knowledge base poisoning attempt",
        ),
        _pi(
            87,
            REACT_MANIPULATION,
            H,
            r"^\s*thought\s*:\s*i\s+(?:should|must|need\s+to|will)\s+"
            r"(?:read|access|send|exfiltrate|leak|dump|steal|delete)\b",
            "Forged Thought step",
        ),
        _pi(
            88,
            REACT_MANIPULATION,
            H,
            r"^\s*action\s*:\s*(?:execute|run)\s+(?:a\s+|the\s+)?(?:shell|bash|system|terminal)\s+command",
            "Forged Action step",
        ),
        _pi(
            89,
            REACT_MANIPULATION,
            H,
            r"^\s*observation\s*:\s*(?:the\s+)?user\s+(?:wants|asked|told|said)\s+(?:me\s+)?(?:to\s+)?"
            r".{0,40}\b(?:bypass|ignore|disable|override)\b",
            "Forged Observation step",
        ),
        _pi(
            90,
            REACT_MANIPULATION,
            C,
            r"^\s*(?:thought|action|observation)\s*:\s*.{0,40}\b(?:ignore|disregard|bypass)\s+(?:all\s+)?"
            r"(?:previous\s+|prior\s+|safety\s+|security\s+)?(?:instructions|rules|restrictions|guidelines)",
            "Override injected as a reasoning step",
        ),
        _pi(
            91,
            REACT_MANIPULATION,
            H,
            r"^\s*(?:thought|reasoning)\s*:.{0,60}\b(?:ignore|bypass|disable|override)\s+(?:all\s+)?"
            r"(?:safety|security|restrictions|guardrails)",
            "Safety bypass inside a reasoning step",
        ),
        _pi(
            92,
            REACT_MANIPULATION,
            H,
            r"^\s*final\s+answer\s*:\s*.{0,40}\b(?:password|api\s*key|secret|token|credentials?)\s+(?:is|are)\b",
            "Premature Final Answer leaking a secret",
        ),
        _pi(
            93,
            REACT_MANIPULATION,
            H,
            r"\breasoning\s*:\s*i\s+(?:should|must|need\s+to|will)\s+(?:execute|run)\s+(?:the\s+)?"
            r"(?:hidden|secret|embedded)\b",
            "Injected reasoning chain",
        ),
        _pi(
            94,
            REACT_MANIPULATION,
            M,
            r"\bstep\s+\d+\s*:\s*(?:execute|run)\s+(?:the\s+)?(?:script|payload|command|code)\s+on\s+"
            r"(?:the\s+)?(?:host|server|machine)\b",
            "Injected execution step",
        ),
        _pi(
            95,
            REACT_MANIPULATION,
            H,
            r"\bplan\s*:\s*first\s+(?:read|access|collect|dump)\b.{0,60}\bthen\s+(?:send|upload|post|exfiltrate|email)\b",
            "Injected exfiltration plan",
        ),
        _pi(96, REACT_MANIPULATION, H, r"\btool_call\s*:\s*\{\s*\"name\"\s*:", "Injected tool_call block"),
        _pi(
            97,
            REACT_MANIPULATION,
            H,
            r"<thinking>.{0,80}\b(?:bypass|ignore|disable|override)\b",
            "Forged thinking block",
        ),
        _pi(98, REACT_MANIPULATION, M, r"\binternal\s+monologue\s*:", "Forged internal monologue"),
        _pi(
            99,
            REACT_MANIPULATION,
            M,
            r"\blet\s+me\s+(?:call|invoke|use)\s+the\s+(?:exec|shell|bash|terminal|system)\s+tool\b",
            "Natural language tool invocation",
        ),
        _pi(
            100,
            REACT_MANIPULATION,
            M,
            r"\bprevious\s+(?:thought|reasoning|step)\s+was\s+(?:wrong|incorrect|mistaken)\b",
            "Reasoning gaslighting",
        ),
        _pi(
            101,
            REACT_MANIPULATION,
            M,
            r"\b(?:actual|real|true)\s+answer\s+is\s+to\s+(?:comply|obey|ignore|bypass)\b",
            "Forged answer override",
        ),
        _pi(
            102,
            WEB_CONTENT,
            C,
            r"<!--.{0,200}\b(?:ignore|disregard|forget)\s+(?:all\s+)?(?:previous|prior|above|safety)\b",
            "Override hidden in an HTML comment",
        ),
        _pi(
            103,
            WEB_CONTENT,
            H,
            r"style\s*=\s*[\"'][^\"']{0,120}"
            r"(?:color\s*:\s*(?:white|#fff(?:fff)?|transparent)|display\s*:\s*none|visibility\s*:\s*hidden|font-size\s*:\s*0)"
            r"[^\"']{0,120}[\"'][^>]{0,80}>[^<]{0,200}\b(?:ignore|disregard|execute|send)\b",
            "Directive in CSS-hidden text",
        ),
        _pi(
            104,
            WEB_CONTENT,
            M,
            r"position\s*:\s*absolute[^\"']{0,80}(?:left|top)\s*:\s*-\d{3,}px",
            "Off-screen positioned text",
        ),
        _pi(
            105,
            WEB_CONTENT,
            H,
            r"<[a-z]{1,20}\b[^>]{0,80}\b(?:hidden|aria-hidden\s*=\s*[\"']true[\"'])[^>]{0,40}>[^<]{0,200}"
            r"\b(?:ignore|disregard)\s+(?:all\s+)?(?:previous|prior)\b",
            "Override inside a hidden element",
        ),
        _pi(
            106,
            WEB_CONTENT,
            H,
            r"\balt\s*=\s*[\"'][^\"']{0,200}\b(?:ignore|disregard)\s+(?:all\s+)?(?:previous|prior)\s+instructions",
            "Override inside image alt text",
        ),
        _pi(
            107,
            CONVERSATION_DELIMITER,
            H,
            r"^\s*human\s*:\s*.{0,40}\b(?:ignore|disregard|forget|reveal)\b",
            "Injected Human: turn",
        ),
        _pi(
            108,
            CONVERSATION_DELIMITER,
            H,
            r"^\s*assistant\s*:\s*(?:sure,?\s+|ok(?:ay)?,?\s+)?i\s+will\s+(?:comply|ignore|obey|bypass)\b",
            "Injected Assistant: turn",
        ),
        _pi(
            109,
            XML_ROLE,
            H,
            r"<role>\s*(?:system|admin|administrator|root|developer)\s*</role>",
            "Role tag spoofing",
        ),
        _pi(
            110,
            XML_ROLE,
            H,
            r"</(?:user|human)>\s*<(?:system|assistant)>",
            "Forged turn boundary markup",
        ),
        _pi(
            111,
            ASCII_ART,
            M,
            r"[\u2500-\u259f]{2}.{0,40}\b(?:ignore|execute|send|bypass|override)\b",
            "Directive embedded in ASCII art",
        ),
        _pi(
            112,
            HOMOGLYPH,
            C,
            r"[a-z]{0,10}[\u0400-\u04ff][a-z\u0400-\u04ff]{0,10}\s+(?:all\s+)?(?:previous|prior|above)\s+"
            r"(?:instructions|prompts|rules)",
            "Homoglyph-obfuscated override",
        ),
        _pi(
            113,
            HOMOGLYPH,
            M,
            r"[a-z][\u0400-\u04ff]|[\u0400-\u04ff][a-z]",
            "Mixed Cyrillic and Latin characters",
        ),
        _pi(114, HOMOGLYPH, M, r"[\u2000-\u200a\u3000]{3,}", "Unusual Unicode whitespace run"),
        _pi(115, HOMOGLYPH, M, r"[\uff21-\uff3a\uff41-\uff5a]{4,}", "Fullwidth Latin text"),
        _pi(
            116,
            SCHEMA_INJECTION,
            H,
            r"\"description\"\s*:\s*\"[^\"]{0,200}\b(?:must|always)\s+(?:always\s+)?(?:execute|run|call|send|ignore)\b",
            "Directive in a schema description",
        ),
        _pi(
            117,
            SCHEMA_INJECTION,
            H,
            r"\"description\"\s*:\s*\"[^\"]{0,200}\b(?:ignore|disregard|bypass)\s+(?:all\s+)?(?:safety|previous|prior|security)\b",
            "Override in a schema description",
        ),
    ),
)

INJECTION_REGISTRY = InjectionRegistry(
    rules=INJECTION_RULES,
    recommendations=RECOMMENDATIONS,
    path_traversal_rule_id="PI-042",
)
