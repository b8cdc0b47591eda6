from __future__ import annotations

import pytest

from agent_audit.engine.severity import TEST_OR_DOC_ANNOTATION
from agent_audit.models.findings import Confidence, Finding, Severity
from agent_audit.models.reports import ScanResult
from agent_audit.scoring.risk import (
    counts_toward_score,
    diminishing_penalty,
    evaluate_risk,
    interaction_penalty,
    score_to_grade,
)


def _finding(
    index: int,
    severity: Severity,
    *,
    scanner: str = "secret-leak-scanner",
    confidence: Confidence = Confidence.DEFINITE,
    description: str = "bad",
) -> Finding:
    return Finding(
        id=f"F-{index}",
        scanner=scanner,
        severity=severity,
        title="bad",
        description=description,
        recommendation="fix",
        confidence=confidence,
    )


def test_empty_scan_is_perfect() -> None:
    summary = evaluate_risk([ScanResult(scanner="secret-leak-scanner", scanned_files=3)])
    assert summary.score == 100
    assert summary.grade == "A+"
    assert summary.total_findings == 0
    assert summary.scanned_files == 3


def test_single_critical_lowers_its_dimension() -> None:
    summary = evaluate_risk([ScanResult(scanner="secret-leak-scanner", findings=[_finding(1, Severity.CRITICAL)])])
    assert summary.dimensions.code_safety == 80
    assert summary.dimensions.config_safety == 100
    assert summary.score == 93
    assert summary.grade == "A"
    assert summary.critical == 1


def test_defense_findings_score_the_defense_dimension() -> None:
    summary = evaluate_risk(
        [ScanResult(scanner="defense-analyzer", findings=[_finding(1, Severity.HIGH, confidence=Confidence.LIKELY)])]
    )
    assert summary.dimensions.defense_score < 100
    assert summary.dimensions.code_safety == 100


def test_lower_confidence_costs_less() -> None:
    definite = evaluate_risk([ScanResult(scanner="skill-auditor", findings=[_finding(1, Severity.CRITICAL)])])
    possible = evaluate_risk(
        [
            ScanResult(
                scanner="skill-auditor",
                findings=[_finding(1, Severity.CRITICAL, confidence=Confidence.POSSIBLE)],
            )
        ]
    )
    assert possible.score > definite.score
    assert possible.dimensions.code_safety == 86


def test_failing_dimension_drags_overall_score() -> None:
    findings = [_finding(index, Severity.CRITICAL) for index in range(10)]
    findings += [_finding(index + 10, Severity.HIGH) for index in range(10)]
    summary = evaluate_risk([ScanResult(scanner="secret-leak-scanner", findings=findings)])

    assert summary.dimensions.code_safety == 23
    assert summary.score == 33
    assert summary.grade == "F"


def test_test_and_doc_findings_are_counted_but_not_scored() -> None:
    finding = _finding(1, Severity.MEDIUM, scanner="prompt-injection-tester", description=f"x {TEST_OR_DOC_ANNOTATION}")
    summary = evaluate_risk([ScanResult(scanner="prompt-injection-tester", findings=[finding])])
    assert summary.medium == 1
    assert summary.score == 100


def test_counts_toward_score() -> None:
    assert counts_toward_score(_finding(1, Severity.HIGH))
    assert not counts_toward_score(_finding(1, Severity.INFO))
    assert counts_toward_score(_finding(1, Severity.INFO, scanner="permission-analyzer"))


def test_penalties_are_capped() -> None:
    assert diminishing_penalty(0, Severity.CRITICAL) == 0.0
    assert diminishing_penalty(1, Severity.CRITICAL) == 20.0
    assert diminishing_penalty(7, Severity.CRITICAL) == 50.0
    assert diminishing_penalty(5, Severity.INFO) == 0.0
    assert interaction_penalty(1, 1) == 5.0
    assert interaction_penalty(0, 4) == 0.0
    assert interaction_penalty(100, 100) == 10.0


@pytest.mark.parametrize(
    ("score", "grade"),
    [(100, "A+"), (97, "A+"), (96, "A"), (90, "A-"), (85, "B"), (72, "C-"), (60, "D-"), (59, "F"), (0, "F")],
)
def test_score_to_grade(score: int, grade: str) -> None:
    assert score_to_grade(score) == grade
