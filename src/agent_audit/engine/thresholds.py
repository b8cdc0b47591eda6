from __future__ import annotations

from enum import StrEnum

from agent_audit.engine.aggregator import CategoryTotals
from agent_audit.models.findings import Confidence, Finding
from agent_audit.patterns.base import Category


class CategoryStatus(StrEnum):
    MISSING = "missing"
    PARTIAL = "partial"
    ADEQUATE = "adequate"


def classify_weight(total: int, category: Category) -> CategoryStatus:
    if total < category.missing_threshold:
        return CategoryStatus.MISSING
    if total < category.adequate_threshold:
        return CategoryStatus.PARTIAL
    return CategoryStatus.ADEQUATE


def category_finding(
    category: Category,
    totals: CategoryTotals | None = None,
    *,
    scanner: str,
    score: int | None = None,
    missing_title: str | None = None,
    partial_title: str | None = None,
    file_path: str | None = None,
    confidence: Confidence | None = None,
) -> Finding | None:
    """Turn a category's scan-wide totals into a finding, or ``None`` when adequate.

    ``score`` overrides the aggregated weight for scanners that grade on a
    different measure, such as the number of distinct defenses found.
    """
    totals = totals or CategoryTotals()
    total = totals.total_weight if score is None else score
    status = classify_weight(total, category)

    if status is CategoryStatus.ADEQUATE:
        return None

    if status is CategoryStatus.MISSING:
        description = category.description or f"No {category.name.lower()} patterns were found in the scanned files."
        return Finding(
            id=f"{category.id}-MISSING",
            scanner=scanner,
            severity=category.missing_severity,
            title=missing_title or f"Missing {category.name}",
            description=description,
            file=file_path,
            recommendation=category.recommendation,
            confidence=confidence,
            rule_id=category.id,
        )

    found = ", ".join(sorted(totals.description_set))
    return Finding(
        id=f"{category.id}-PARTIAL",
        scanner=scanner,
        severity=category.partial_severity,
        title=partial_title or f"Partial {category.name}",
        description=(
            f"Some {category.name.lower()} patterns found ({found}) but coverage is incomplete "
            f"(score {total}/{category.adequate_threshold})."
        ),
        file=file_path,
        recommendation=f"Strengthen {category.name.lower()}. {category.recommendation}",
        confidence=confidence,
        rule_id=category.id,
    )
