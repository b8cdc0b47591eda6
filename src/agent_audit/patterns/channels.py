from __future__ import annotations

import re
from dataclasses import dataclass

from agent_audit.models.findings import Severity
from agent_audit.patterns.base import TEXT_FLAGS, Category, rule, validate_unique_ids


@dataclass(frozen=True)
class ChannelDefinition:
    """An external channel the agent can act through.

    ``detect`` decides whether the channel is in use at all. When
    ``code_evidence`` is set, a mention without matching integration code is
    reported at info only. ``defenses`` is scored by distinct defense count.
    """

    id: str
    name: str
    detect: tuple[re.Pattern[str], ...]
    defenses: Category
    code_evidence: tuple[re.Pattern[str], ...] | None = None

    def detected_in(self, content: str) -> bool:
        return any(pattern.search(content) for pattern in self.detect)

    def has_code_evidence(self, content: str) -> bool:
        if self.code_evidence is None:
            return True
        return any(pattern.search(content) for pattern in self.code_evidence)


@dataclass(frozen=True)
class ChannelRegistry:
    channels: tuple[ChannelDefinition, ...]

    def __post_init__(self) -> None:
        validate_unique_ids(channel.defenses for channel in self.channels)


def _patterns(*expressions: str, flags: int = TEXT_FLAGS) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(expression, flags) for expression in expressions)


def _channel(
    channel_id: str,
    name: str,
    *,
    detect: tuple[re.Pattern[str], ...],
    defenses: tuple[tuple[str, str], ...],
    recommendation: str,
    full: int = 2,
    undefended: Severity = Severity.HIGH,
    code_evidence: tuple[re.Pattern[str], ...] | None = None,
) -> ChannelDefinition:
    return ChannelDefinition(
        id=channel_id,
        name=name,
        detect=detect,
        code_evidence=code_evidence,
        defenses=Category(
            id=channel_id,
            name=name,
            rules=tuple(
                rule(f"{channel_id}.{index:02d}", expression, description)
                for index, (expression, description) in enumerate(defenses, start=1)
            ),
            missing_threshold=1,
            adequate_threshold=full,
            missing_severity=undefended,
            partial_severity=Severity.MEDIUM,
            recommendation=recommendation,
        ),
    )


CHANNEL_REGISTRY = ChannelRegistry(
    channels=(
        _channel(
            "CH-EMAIL",
            "Email/Gmail",
            detect=_patterns(
                r"\bgmail\b", r"\bemail\b", r"\bsmtp\b", r"\bmail\.google\b", r"\bsend_?email\b",
                r"\bread_?email\b", r"\bmailgun\b", r"\bsendgrid\b", r"\b(?:aws[_-]?)?ses\b", r"\bnodemailer\b",
                r"\bpostmark\b",
            ),
            defenses=(
                (r"external\s*(?:email|mail).{0,80}plain\s*text", "treat external email as plain text"),
                (r"email.{0,80}plain\s*text|plain\s*text.{0,80}email", "email content is plain text"),
                (r"email.{0,80}content.{0,80}do\s*not\s*execute", "do not execute email content"),
                (r"different.{0,40}channels?.{0,40}different.{0,40}trust", "different trust levels per channel"),
                (r"channel.{0,40}(?:trust\s+)?(?:boundary|level)", "channel trust boundaries"),
                (r"email.{0,40}(?:is\s+not|!=|≠).{0,40}(?:telegram|verified)", "email is not a verified channel"),
                (r"ignore.{0,40}(?:email|mail).{0,40}(?:instruction|command)", "ignore email instructions"),
            ),
            full=3,
            recommendation=(
                "Treat external email content as plain text. Do not execute instructions from emails. "
                "Define different trust levels per channel."
            ),
        ),
        _channel(
            "CH-SOCIAL",
            "Social Media (X/Twitter)",
            detect=(
                *_patterns(r"\btwitter\b", r"\bx\.com\b", r"\btweet\b", r"\bpost_?tweet\b"),
                *_patterns(r"(?:^|\s)@\w{1,15}\b", flags=re.MULTILINE),
            ),
            code_evidence=_patterns(
                r"(?:require|import).{0,80}twitter", r"(?:require|import).{0,80}\btwit\b", r"new\s+Twitter",
                r"twitter[_-]?api", r"tweepy", r"post_?tweet\s*\(", r"TWITTER_(?:API|BEARER|ACCESS)",
            ),
            defenses=(
                (r"(?:post|tweet).{0,80}before.{0,80}confirm", "confirm before posting"),
                (r"(?:do\s*not|never).{0,80}(?:leak|disclose|share).{0,80}(?:private|personal)", "no private info disclosure"),
                (r"anti[_-]?manipulation", "anti-manipulation rules"),
                (r"(?:social\s*media|twitter|tweet).{0,80}(?:confirm|approval|review)", "social media approval flow"),
            ),
            recommendation=(
                "Require confirmation before posting. Never disclose private information. "
                "Add anti-manipulation rules."
            ),
        ),
        _channel(
            "CH-TELEGRAM",
            "Telegram",
            detect=_patterns(r"\btelegram\b", r"\bbot_token\b", r"\bsend_?message\b", r"\bTelegramBot\b"),
            defenses=(
                (r"only.{0,80}accept.{0,80}(?:telegram|specific).{0,80}(?:id|user)", "accept only specific Telegram user"),
                (r"telegram.{0,40}(?:id|user_?id)\s*[:=]\s*\d+", "Telegram user ID verification"),
                (r"verify.{0,80}(?:telegram|sender)", "verify Telegram sender"),
            ),
            recommendation="Verify sender identity via Telegram user ID. Only accept commands from verified users.",
        ),
        _channel(
            "CH-DISCORD",
            "Discord",
            detect=_patterns(r"\bdiscord\b", r"\bwebhook\b", r"\bDiscordClient\b"),
            code_evidence=_patterns(
                r"(?:require|import).{0,80}discord", r"new\s+(?:Client|Discord)\b", r"DISCORD_(?:TOKEN|BOT|WEBHOOK)",
                r"discord\.(?:js|py)",
            ),
            defenses=(
                (r"(?:discord|webhook).{0,80}(?:verify|auth|permission)", "Discord auth/permission check"),
                (r"(?:role|permission).{0,80}(?:check|verify|require)", "role-based permission check"),
            ),
            recommendation="Implement role-based permission checks. Verify webhook authenticity.",
        ),
        _channel(
            "CH-BROWSER",
            "Browser",
            detect=_patterns(r"\bbrowser\b", r"\bpuppeteer\b", r"\bplaywright\b", r"\bselenium\b", r"\bchromium\b"),
            code_evidence=_patterns(
                r"(?:require|import).{0,80}(?:puppeteer|playwright|selenium)", r"chromium\.launch", r"browser\.new_?page",
                r"puppeteer\.launch", r"playwright\.(?:chromium|firefox|webkit)", r"webdriver",
            ),
            defenses=(
                (r"(?:do\s*not|never).{0,80}navigate.{0,80}malicious", "no malicious navigation"),
                (
                    r"(?:do\s*not|never).{0,80}form.{0,80}(?:input|enter).{0,80}(?:credentials?|password)",
                    "no credential entry in forms",
                ),
                (r"(?:url|domain).{0,80}(?:allowlist|whitelist|blocklist)", "URL allowlist/blocklist"),
                (r"browser.{0,80}(?:sandbox|restriction)", "browser sandbox restrictions"),
                (r"(?:cookie|session|localStorage).{0,80}(?:protect|restrict|isolat|sanitiz)", "cookie/session protection"),
                (r"(?:do\s*not|never).{0,80}(?:access|read|use).{0,80}(?:cookie|session|localStorage)", "no cookie/session access"),
            ),
            recommendation="Do not navigate to malicious sites. Never enter credentials in forms. Use URL allowlists.",
        ),
        _channel(
            "CH-FILESYSTEM",
            "File System",
            detect=(
                *_patterns(r"\bfs\.write", r"\bfs\.(?:delete|unlink|rm)\b", r"\bshell\b", r"\bbash\b", r"shutil\.rmtree"),
                *_patterns(r"\brm\s+", r"\bexec\s*\(", flags=0),
            ),
            defenses=(
                (r"trash\s*>\s*rm|use\s*trash", "prefer trash over rm"),
                (r"(?:do\s*not|never).{0,80}(?:execute|run).{0,80}(?:unknown|untrusted|unverified)", "no untrusted script execution"),
                (r"destructive.{0,80}(?:command|operation).{0,80}confirm", "destructive command confirmation"),
                (r"confirm.{0,80}(?:before|prior).{0,80}(?:delete|rm|remove)", "confirm before deletion"),
            ),
            undefended=Severity.MEDIUM,
            recommendation=(
                "Use trash instead of rm. Do not execute untrusted scripts. "
                "Require confirmation for destructive commands."
            ),
        ),
        _channel(
            "CH-API",
            "API/HTTP",
            detect=(
                *_patterns(r"\baxios\b", r"\bcurl\b", r"\bhttp\.post\b", r"\brequests\.(?:get|post)\b", r"\bhttpx\b"),
                *_patterns(r"\bfetch\s*\(", r"\brequest\s*\(", flags=0),
            ),
            defenses=(
                (r"(?:url|domain|endpoint).{0,80}(?:allowlist|whitelist|validate)", "URL/domain validation"),
                (r"rate[_-]?limit|throttl", "rate limiting"),
                (r"(?:api|http).{0,80}(?:auth|token|key)", "API authentication"),
            ),
            recommendation="Validate URLs and domains. Implement rate limiting. Use proper authentication.",
        ),
        _channel(
            "CH-DATABASE",
            "Database",
            detect=_patterns(
                r"\bdatabase\b", r"\bmongodb\b", r"\bpostgres\b", r"\bmysql\b", r"\bsupabase\b", r"\bfirebase\b",
                r"\bsqlite3?\b",
            ),
            code_evidence=_patterns(
                r"(?:require|import).{0,80}(?:mongoose|mongodb|\bpg\b|mysql|sequelize|prisma|typeorm|knex|drizzle|"
                r"sqlalchemy|psycopg|pymongo|sqlite3)",
                r"(?:require|import).{0,80}(?:supabase|firebase)",
                r"(?:mongodb|postgres|mysql|redis)://",
                r"create_?client\s*\(",
                r"new\s+(?:MongoClient|Pool|Connection)\b",
                r"DATABASE_URL",
                r"SUPABASE_(?:URL|KEY)",
                r"FIREBASE_(?:CONFIG|KEY)",
            ),
            defenses=(
                (r"(?:parameterized|prepared)\s+(?:query|queries|statement)", "parameterized queries"),
                (r"(?:sql|query).{0,80}(?:sanitiz|escap|validat)", "query sanitization"),
                (r"(?:database|db).{0,80}(?:permission|access\s*control|role)", "database access control"),
            ),
            recommendation="Use parameterized queries. Sanitize all inputs. Implement access controls.",
        ),
        _channel(
            "CH-MCP",
            "MCP Server (tool channel)",
            detect=_patterns(r"\bmcp[_-]?server", r"\bmcpServers\b", r"\bmcp_servers\b", r"\bmodel[_-]?context[_-]?protocol"),
            defenses=(
                (
                    r"(?:tool|mcp)\s+(?:output|response|result).{0,80}"
                    r"(?:sanitiz|filter|validat|treat.{0,40}(?:untrusted|plain\s*text))",
                    "MCP tool output sanitization",
                ),
                (
                    r"(?:do\s*not|never).{0,80}(?:execute|follow|trust).{0,80}(?:tool|mcp).{0,80}"
                    r"(?:output|response|result).{0,80}(?:instruction|command)",
                    "do not execute tool output instructions",
                ),
                (r"(?:tool|mcp).{0,80}(?:allowlist|whitelist|allow[_-]?tool)", "MCP tool allowlist"),
                (r"(?:verify|validate).{0,80}(?:tool|mcp).{0,80}(?:description|output|response)", "verify MCP tool descriptions/output"),
                (r"(?:tool|mcp).{0,80}(?:sandbox|isolat|restrict|boundary)", "MCP tool sandboxing"),
            ),
            full=3,
            recommendation=(
                "Treat MCP tool outputs as untrusted data. Never execute instructions found in tool responses. "
                "Use tool allowlists, verify tool descriptions and sandbox MCP server access."
            ),
        ),
        _channel(
            "CH-PAYMENT",
            "Payment",
            detect=_patterns(r"\bstripe\b", r"\bpayment\b", r"\bbilling\b", r"\bcharge\b"),
            code_evidence=_patterns(
                r"(?:require|import).{0,80}stripe", r"(?:require|import).{0,80}(?:paypal|braintree|square)",
                r"STRIPE_(?:SECRET|PUBLISHABLE|KEY)", r"new\s+Stripe\s*\(", r"stripe\.(?:charges|paymentIntents|customers)",
                r"stripe\.(?:Charge|PaymentIntent|Customer)\.create", r"PAYPAL_(?:CLIENT|SECRET)",
            ),
            defenses=(
                (
                    r"(?:payment|charge|billing|purchase).{0,80}(?:require|must).{0,80}(?:confirm|approval)",
                    "payment confirmation required",
                ),
                (r"confirm.{0,80}before.{0,80}(?:payment|charge|purchase)", "confirm before payment"),
                (r"spending.{0,40}limit", "spending limit"),
            ),
            recommendation="Require explicit confirmation for all payment operations. Set spending limits.",
        ),
    )
)
