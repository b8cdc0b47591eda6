from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from agent_audit.errors import RegistryError
from agent_audit.models.findings import Severity

TEXT_FLAGS = re.IGNORECASE


@dataclass(frozen=True)
class PatternRule:
    id: str
    pattern: re.Pattern[str]
    description: str
    weight: int = 1
    severity: Severity | None = None
    group: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise RegistryError("pattern rule id must not be empty")
        if self.weight <= 0:
            raise RegistryError(f"rule {self.id}: weight must be a positive integer, got {self.weight}")

    def search(self, text: str) -> re.Match[str] | None:
        return self.pattern.search(text)


def rule(
    rule_id: str,
    expression: str,
    description: str,
    *,
    weight: int = 1,
    severity: Severity | None = None,
    group: str | None = None,
    flags: int = TEXT_FLAGS,
) -> PatternRule:
    return PatternRule(
        id=rule_id,
        pattern=re.compile(expression, flags),
        description=description,
        weight=weight,
        severity=severity,
        group=group,
    )


@dataclass(frozen=True)
class Category:
    """A weighted multi-signal domain.

    ``total < missing_threshold`` is MISSING, ``total >= adequate_threshold`` is
    ADEQUATE, anything in between is PARTIAL.
    """

    id: str
    name: str
    rules: tuple[PatternRule, ...]
    missing_threshold: int
    adequate_threshold: int
    missing_severity: Severity
    partial_severity: Severity
    recommendation: str
    description: str = ""

    def __post_init__(self) -> None:
        if self.missing_threshold < 0:
            raise RegistryError(f"category {self.id}: missing threshold must not be negative")
        if self.missing_threshold > self.adequate_threshold:
            raise RegistryError(
                f"category {self.id}: missing threshold {self.missing_threshold} "
                f"exceeds adequate threshold {self.adequate_threshold}"
            )
        validate_unique_ids(self.rules)

    @property
    def max_weight(self) -> int:
        return sum(item.weight for item in self.rules)


@dataclass(frozen=True)
class RuleSet:
    """Named, ordered collection of single-signal rules."""

    name: str
    rules: tuple[PatternRule, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        validate_unique_ids(self.rules)

    def __iter__(self):
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def groups(self) -> set[str]:
        return {item.group for item in self.rules if item.group}


def validate_unique_ids(items: Iterable[PatternRule | Category]) -> None:
    seen: set[str] = set()
    for item in items:
        if item.id in seen:
            raise RegistryError(f"duplicate rule id: {item.id}")
        seen.add(item.id)


def collect_ids(items: Iterable[PatternRule | Category]) -> list[str]:
    ids: list[str] = []
    for item in items:
        ids.append(item.id)
        if isinstance(item, Category):
            ids.extend(collect_ids(item.rules))
    return ids
