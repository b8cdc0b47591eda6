from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from agent_audit.engine.matcher import MatchResult


@dataclass
class CategoryTotals:
    """Scan-wide totals for one category.

    Weight is additive across files. Descriptions are kept once each, in first
    seen order.
    """

    total_weight: int = 0
    matched_descriptions: list[str] = field(default_factory=list)
    contributing_files: list[str] = field(default_factory=list)

    def absorb(self, weight: int, descriptions: Iterable[str], files: Iterable[str]) -> None:
        self.total_weight += weight
        for description in descriptions:
            if description not in self.matched_descriptions:
                self.matched_descriptions.append(description)
        for file_path in files:
            if file_path not in self.contributing_files:
                self.contributing_files.append(file_path)

    @property
    def description_set(self) -> frozenset[str]:
        return frozenset(self.matched_descriptions)


class AggregationMap:
    def __init__(self) -> None:
        self._totals: dict[str, CategoryTotals] = {}

    def add(self, file_path: str, results: Iterable[MatchResult]) -> None:
        for result in results:
            if result.total_weight <= 0:
                continue
            totals = self._totals.setdefault(result.category_id, CategoryTotals())
            totals.absorb(result.total_weight, result.matched_descriptions, (file_path,))

    def get(self, category_id: str) -> CategoryTotals:
        """Totals for ``category_id``; a category never matched has weight 0."""
        return self._totals.get(category_id) or CategoryTotals()

    def total(self, category_id: str) -> int:
        return self.get(category_id).total_weight

    def items(self) -> Iterator[tuple[str, CategoryTotals]]:
        return iter(self._totals.items())

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._totals

    def __len__(self) -> int:
        return len(self._totals)
