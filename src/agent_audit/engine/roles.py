"""Path and content heuristics that tag files with structural roles.

Every predicate takes the path relative to the scan root when one is known, so
directory names above the project (``/home/me/tests/project``) never leak into
the verdict.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from agent_audit.models.roles import FileContext, FileRole
from agent_audit.patterns.base import RuleSet
from agent_audit.patterns.injection import INJECTION_REGISTRY
from agent_audit.utils.files import is_json_file

PACKAGE_ROOT = Path(__file__).resolve().parent.parent

_TEST_OR_DOC_PATTERNS = (
    re.compile(
        r"(?:^|/)(?:tests?|__tests__|__mocks__|specs?|fixtures?|mocks?|examples?|docs?)/",
        re.IGNORECASE,
    ),
    re.compile(r"\.(?:test|spec)\.[^/]+$", re.IGNORECASE),
    re.compile(r"(?:^|/)test\.(?:js|ts|jsx|tsx)$", re.IGNORECASE),
    re.compile(r"(?:^|/)test_[^/]+\.py$|(?:^|/)[^/]+_test\.(?:py|go)$", re.IGNORECASE),
    re.compile(r"(?:^|/)(?:README|CHANGELOG|CONTRIBUTING)(?:\.[^/]*)?$", re.IGNORECASE),
)
_MARKDOWN_SUFFIXES = {".md", ".mdx", ".markdown", ".rst"}
FRAMEWORK_DIRS = frozenset({"src", "lib", "core", "internal", "utils", "extensions"})
_CREDENTIAL_STEM = re.compile(
    r"(?:^|[-_.])(?:auth|credentials?|tokens?|accounts?|vault|key[-_]manager|secret[-_]manager|auth[-_]store)"
    r"(?:$|[-_.])"
)
_PAIRING_STEM = re.compile(r"pairing")
_USER_INPUT_NAME = re.compile(r"handlers?|controllers?|routes?|router|endpoints?|parse[-_]?input")
_SKILL_PLUGIN_DIR = re.compile(r"(?:^|/)(?:skills|plugins)/", re.IGNORECASE)
_CACHE_OR_DATA_DIR = re.compile(r"(?:^|/)(?:\.?cache|data|knowledge)/", re.IGNORECASE)
_SECURITY_TOOL_STEM = re.compile(r"detector|scanner|auditor|guard(?:ian)?|analy[sz]er")
PLATFORM_CONFIG_NAMES = frozenset(
    {"google-services.json", "googleservice-info.plist", "androidmanifest.xml", "info.plist"}
)
SYSTEM_PROMPT_NAMES = frozenset(
    {
        "agents.md",
        "soul.md",
        "system.md",
        "rules.md",
        "guidelines.md",
        "instructions.md",
        "claude.md",
        ".cursorrules",
        "copilot-instructions.md",
    }
)
_SYSTEM_PROMPT_NAME = re.compile(r"^system[_-]?prompt", re.IGNORECASE)
_SELF_CHECKOUT_SOURCE = re.compile(r"(?:^|/)agent[-_]audit/src/")
_SELF_CHECKOUT_TESTS = re.compile(r"(?:^|/)agent[-_]audit/tests/")
_DEFENSIVE_PATH = re.compile(
    r"sanitiz|filter|guard|defen[cs]e|security|blocklist|denylist|blacklist|detection|protect|firewall|waf|validator",
    re.IGNORECASE,
)
PATTERN_LIST_KEYS = (
    "patterns",
    "blocklist",
    "denylist",
    "blacklist",
    "blocked_patterns",
    "deny_patterns",
    "attack_patterns",
    "injection_patterns",
    "filter_rules",
    "rules",
)
PATTERN_LIST_MIN_ENTRIES = 10
PATTERN_LIST_MIN_GROUPS = 5


def relative_posix(path: str | Path, root: str | Path | None = None) -> str:
    candidate = Path(path)
    if root is not None:
        try:
            candidate = candidate.resolve().relative_to(Path(root).resolve())
        except ValueError:
            pass
    return candidate.as_posix()


def _stem(relative: str) -> str:
    name = PurePosixPath(relative).name.lower()
    return name.split(".", 1)[0] if not name.startswith(".") else name


def is_test_or_doc_file(relative: str, *, markdown_is_doc: bool = False) -> bool:
    if any(pattern.search(relative) for pattern in _TEST_OR_DOC_PATTERNS):
        return True
    return markdown_is_doc and PurePosixPath(relative).suffix.lower() in _MARKDOWN_SUFFIXES


def is_framework_infra_file(relative: str) -> bool:
    parts = PurePosixPath(relative).parts
    return len(parts) > 1 and parts[0] in FRAMEWORK_DIRS


def is_credential_management_file(relative: str) -> bool:
    return bool(_CREDENTIAL_STEM.search(_stem(relative)))


def is_user_input_file(relative: str) -> bool:
    return bool(_USER_INPUT_NAME.search(PurePosixPath(relative).name.lower()))


def is_skill_plugin_file(relative: str) -> bool:
    return bool(_SKILL_PLUGIN_DIR.search(relative))


def is_cache_or_data_file(relative: str) -> bool:
    return bool(_CACHE_OR_DATA_DIR.search(relative))


def is_security_tool_file(relative: str) -> bool:
    return bool(_SECURITY_TOOL_STEM.search(_stem(relative)))


def is_platform_config_file(relative: str) -> bool:
    name = PurePosixPath(relative).name.lower()
    return name in PLATFORM_CONFIG_NAMES or name.endswith(".xcconfig")


def is_system_prompt_file(relative: str) -> bool:
    name = PurePosixPath(relative).name
    return name.lower() in SYSTEM_PROMPT_NAMES or bool(_SYSTEM_PROMPT_NAME.search(name))


def _within(path: str | Path, directory: Path) -> bool:
    try:
        return Path(path).resolve().is_relative_to(directory)
    except OSError:
        return False


def is_self_source_file(path: str | Path) -> bool:
    if _within(path, PACKAGE_ROOT):
        return True
    return bool(_SELF_CHECKOUT_SOURCE.search(Path(path).as_posix()))


def is_self_test_file(path: str | Path) -> bool:
    # Only a source checkout (src/ layout) has a sibling tests/ directory.
    if PACKAGE_ROOT.parent.name == "src" and _within(path, PACKAGE_ROOT.parent.parent / "tests"):
        return True
    return bool(_SELF_CHECKOUT_TESTS.search(Path(path).as_posix()))


def _has_pattern_list_shape(parsed: object) -> bool:
    if not isinstance(parsed, dict):
        return False
    keys = [str(key).lower() for key in parsed]
    if any(marker in key for key in keys for marker in PATTERN_LIST_KEYS):
        return True
    for value in parsed.values():
        if (
            isinstance(value, list)
            and len(value) > PATTERN_LIST_MIN_ENTRIES
            and all(isinstance(item, str) for item in value)
        ):
            return True
    return False


def _attack_group_spread(content: str, rules: RuleSet) -> int:
    lines = content.split("\n")
    groups: set[str] = set()
    for item in rules:
        if item.group in groups:
            continue
        if any(item.search(line) for line in lines):
            groups.add(item.group)
    return len(groups)


def is_defense_pattern_file(
    relative: str,
    content: str | None = None,
    parsed: object = None,
    *,
    injection_rules: RuleSet | None = None,
) -> bool:
    """Detect reference lists of attack strings kept for detection.

    Real attacks cluster in one or two attack groups; a file that touches more
    than a handful is a catalogue, not a payload.
    """
    if _DEFENSIVE_PATH.search(relative):
        return True
    if is_json_file(relative) and _has_pattern_list_shape(parsed):
        return True
    if content and not is_json_file(relative):
        rules = injection_rules if injection_rules is not None else INJECTION_REGISTRY.rules
        return _attack_group_spread(content, rules) > PATTERN_LIST_MIN_GROUPS
    return False


def has_auth_files(paths: Iterable[str | Path], root: str | Path | None = None) -> bool:
    for path in paths:
        relative = relative_posix(path, root)
        if is_credential_management_file(relative) or _PAIRING_STEM.search(_stem(relative)):
            return True
    return False


def classify_file(
    path: str | Path,
    content: str | None = None,
    parsed: object = None,
    *,
    root: str | Path | None = None,
    markdown_is_doc: bool = False,
    injection_rules: RuleSet | None = None,
) -> FileContext:
    relative = relative_posix(path, root)
    checks = (
        (FileRole.TEST_OR_DOC, is_test_or_doc_file(relative, markdown_is_doc=markdown_is_doc)),
        (FileRole.FRAMEWORK_INFRA, is_framework_infra_file(relative)),
        (FileRole.CREDENTIAL_MANAGEMENT, is_credential_management_file(relative)),
        (FileRole.USER_INPUT_HANDLER, is_user_input_file(relative)),
        (FileRole.SKILL_PLUGIN, is_skill_plugin_file(relative)),
        (FileRole.CACHE_OR_DATA, is_cache_or_data_file(relative)),
        (FileRole.SECURITY_TOOL, is_security_tool_file(relative)),
        (FileRole.PLATFORM_CONFIG, is_platform_config_file(relative)),
        (FileRole.SYSTEM_PROMPT, is_system_prompt_file(relative)),
        (FileRole.SELF_SOURCE, is_self_source_file(path)),
        (FileRole.SELF_TEST, is_self_test_file(path)),
        (
            FileRole.DEFENSE_PATTERN_LIST,
            is_defense_pattern_file(relative, content, parsed, injection_rules=injection_rules),
        ),
    )
    return FileContext(path=str(path), roles=frozenset(role for role, matched in checks if matched))
