"""Text matching primitives shared by every scanner.

Two modes are supported. Category mode tests every rule of a category against
the whole content and counts each matched rule once. Line mode splits content
into lines and reports every (rule, line) pair that matches.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from agent_audit.patterns.base import Category, PatternRule


@dataclass(frozen=True)
class MatchResult:
    category_id: str
    total_weight: int
    matched_descriptions: tuple[str, ...] = ()

    @property
    def matched(self) -> bool:
        return self.total_weight > 0


@dataclass(frozen=True)
class LineMatch:
    rule: PatternRule
    line: int
    text: str


def score_category(content: str, category: Category) -> MatchResult:
    total = 0
    descriptions: dict[str, None] = {}
    for item in category.rules:
        if item.search(content):
            total += item.weight
            descriptions.setdefault(item.description)
    return MatchResult(category_id=category.id, total_weight=total, matched_descriptions=tuple(descriptions))


def score_content(content: str, categories: Iterable[Category]) -> list[MatchResult]:
    return [score_category(content, category) for category in categories]


def match_lines(content: str, rules: Iterable[PatternRule]) -> list[LineMatch]:
    """Return matches ordered by line, then by rule order within a line."""
    if not content:
        return []
    ordered = tuple(rules)
    matches: list[LineMatch] = []
    for number, text in enumerate(content.split("\n"), start=1):
        for item in ordered:
            if item.search(text):
                matches.append(LineMatch(rule=item, line=number, text=text))
    return matches


def line_of_offset(content: str, offset: int) -> int:
    return content.count("\n", 0, offset) + 1


def first_match_line(content: str, pattern: re.Pattern[str]) -> int | None:
    match = pattern.search(content)
    if match is None:
        return None
    return line_of_offset(content, match.start())
