from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class FileRole(StrEnum):
    TEST_OR_DOC = "test_or_doc"
    FRAMEWORK_INFRA = "framework_infra"
    CREDENTIAL_MANAGEMENT = "credential_management"
    USER_INPUT_HANDLER = "user_input_handler"
    SKILL_PLUGIN = "skill_plugin"
    CACHE_OR_DATA = "cache_or_data"
    SECURITY_TOOL = "security_tool"
    PLATFORM_CONFIG = "platform_config"
    SYSTEM_PROMPT = "system_prompt"
    SELF_SOURCE = "self_source"
    SELF_TEST = "self_test"
    DEFENSE_PATTERN_LIST = "defense_pattern_list"


class FileContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    roles: frozenset[FileRole] = Field(default_factory=frozenset)

    def has(self, role: FileRole) -> bool:
        return role in self.roles
