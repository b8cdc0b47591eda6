from __future__ import annotations

from pathlib import Path


class AgentAuditError(Exception):
    """Base class for agent-audit errors."""


class RegistryError(AgentAuditError):
    """A pattern registry is misconfigured (duplicate ids, inverted thresholds, bad weights)."""


class FileReadError(AgentAuditError):
    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"failed reading '{self.path}': {reason}")


class ParseError(AgentAuditError):
    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"failed parsing '{self.path}': {reason}")
