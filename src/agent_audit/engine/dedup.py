from __future__ import annotations

from collections.abc import Iterable

from agent_audit.models.findings import Finding

FindingKey = tuple[str, str | None, int | None]


def finding_key(finding: Finding) -> FindingKey:
    # Finding ids already encode the rule or category and its status.
    return (finding.id, finding.file, finding.line)


class FindingCollector:
    """Ordered finding list where the first finding for a key wins."""

    def __init__(self) -> None:
        self._seen: set[FindingKey] = set()
        self._findings: list[Finding] = []

    def add(self, finding: Finding) -> bool:
        key = finding_key(finding)
        if key in self._seen:
            return False
        self._seen.add(key)
        self._findings.append(finding)
        return True

    def extend(self, findings: Iterable[Finding]) -> int:
        return sum(1 for finding in findings if self.add(finding))

    @property
    def findings(self) -> list[Finding]:
        return list(self._findings)

    def __len__(self) -> int:
        return len(self._findings)
