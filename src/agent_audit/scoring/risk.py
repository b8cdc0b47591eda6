from __future__ import annotations

import math
from collections.abc import Iterable
from enum import StrEnum

from agent_audit.engine.severity import SECRET_LEAK, TEST_OR_DOC_ANNOTATION
from agent_audit.models.findings import Confidence, Finding, Severity
from agent_audit.models.reports import DimensionScores, ReportSummary, ScanResult

# Diminishing returns per severity, capped so one class cannot sink the score.
BASE_PENALTY = {
    Severity.CRITICAL: 20.0,
    Severity.HIGH: 5.0,
    Severity.MEDIUM: 1.5,
    Severity.INFO: 0.0,
}

MAX_PENALTY = {
    Severity.CRITICAL: 50.0,
    Severity.HIGH: 30.0,
    Severity.MEDIUM: 15.0,
    Severity.INFO: 0.0,
}

CONFIDENCE_WEIGHTS = {
    Confidence.DEFINITE: 1.0,
    Confidence.LIKELY: 0.8,
    Confidence.POSSIBLE: 0.6,
}


class Dimension(StrEnum):
    CODE_SAFETY = "code_safety"
    CONFIG_SAFETY = "config_safety"
    DEFENSE_SCORE = "defense_score"
    ENVIRONMENT_SAFETY = "environment_safety"


DIMENSION_WEIGHTS = {
    Dimension.CODE_SAFETY: 0.35,
    Dimension.CONFIG_SAFETY: 0.25,
    Dimension.DEFENSE_SCORE: 0.25,
    Dimension.ENVIRONMENT_SAFETY: 0.15,
}

SCANNER_DIMENSIONS = {
    "secret-leak-scanner": Dimension.CODE_SAFETY,
    "prompt-injection-tester": Dimension.CODE_SAFETY,
    "skill-auditor": Dimension.CODE_SAFETY,
    "mcp-config-auditor": Dimension.CONFIG_SAFETY,
    "permission-analyzer": Dimension.CONFIG_SAFETY,
    "channel-surface-auditor": Dimension.CONFIG_SAFETY,
    "defense-analyzer": Dimension.DEFENSE_SCORE,
    "red-team-simulator": Dimension.DEFENSE_SCORE,
}

GRADES = (
    (97, "A+"),
    (93, "A"),
    (90, "A-"),
    (87, "B+"),
    (83, "B"),
    (80, "B-"),
    (77, "C+"),
    (73, "C"),
    (70, "C-"),
    (67, "D+"),
    (63, "D"),
    (60, "D-"),
)

FLOOR_THRESHOLD = 60
FLOOR_MARGIN = 10


def score_to_grade(score: int) -> str:
    for minimum, grade in GRADES:
        if score >= minimum:
            return grade
    return "F"


def diminishing_penalty(count: float, severity: Severity) -> float:
    if count <= 0:
        return 0.0
    return min(BASE_PENALTY[severity] * math.log2(count + 1), MAX_PENALTY[severity])


def interaction_penalty(critical: float, high: float) -> float:
    """Extra penalty when critical and high findings coexist."""
    if critical > 0 and high > 0:
        return min(5 * math.log2(min(critical, high) + 1), 10.0)
    return 0.0


def weighted_counts(findings: Iterable[Finding]) -> dict[Severity, float]:
    counts = {severity: 0.0 for severity in Severity}
    for finding in findings:
        counts[finding.severity] += CONFIDENCE_WEIGHTS[finding.confidence or Confidence.DEFINITE]
    return counts


def findings_score(findings: Iterable[Finding]) -> int:
    counts = weighted_counts(findings)
    penalty = sum(diminishing_penalty(count, severity) for severity, count in counts.items())
    penalty += interaction_penalty(counts[Severity.CRITICAL], counts[Severity.HIGH])
    return max(0, min(100, round(100 - penalty)))


def counts_toward_score(finding: Finding) -> bool:
    if TEST_OR_DOC_ANNOTATION in finding.description:
        return False
    return not (finding.scanner == SECRET_LEAK and finding.severity is Severity.INFO)


def evaluate_risk(results: list[ScanResult]) -> ReportSummary:
    """Summarize scanner results into counts, a 0-100 score and a letter grade.

    The overall score is the weighted mean of the dimension scores, capped at
    the weakest dimension plus a margin when that dimension fails.
    """
    findings = [finding for result in results for finding in result.findings]
    scoring = [finding for finding in findings if counts_toward_score(finding)]

    by_dimension: dict[Dimension, list[Finding]] = {dimension: [] for dimension in Dimension}
    for result in results:
        dimension = SCANNER_DIMENSIONS.get(result.scanner, Dimension.CODE_SAFETY)
        by_dimension[dimension].extend(finding for finding in result.findings if counts_toward_score(finding))
    dimension_scores = {dimension: findings_score(items) for dimension, items in by_dimension.items()}

    score = findings_score(scoring)
    if scoring:
        weighted = round(sum(dimension_scores[item] * weight for item, weight in DIMENSION_WEIGHTS.items()))
        weakest = min(dimension_scores.values())
        score = min(weighted, weakest + FLOOR_MARGIN) if weakest < FLOOR_THRESHOLD else weighted

    severities = [finding.severity for finding in findings]
    return ReportSummary(
        total_findings=len(findings),
        critical=severities.count(Severity.CRITICAL),
        high=severities.count(Severity.HIGH),
        medium=severities.count(Severity.MEDIUM),
        info=severities.count(Severity.INFO),
        score=score,
        grade=score_to_grade(score),
        dimensions=DimensionScores(**{dimension.value: value for dimension, value in dimension_scores.items()}),
        scanned_files=sum(result.scanned_files for result in results),
        duration=sum(result.duration for result in results),
    )
