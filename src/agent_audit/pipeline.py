from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from agent_audit import __version__
from agent_audit.models.reports import ScanOptions, ScanReport, ScanResult
from agent_audit.scanners import Scanner, available_scanners, create_scanner
from agent_audit.scoring.risk import evaluate_risk

logger = logging.getLogger(__name__)


def resolve_scanners(names: Sequence[str] = ()) -> list[Scanner]:
    """Instantiate the named scanners, or every registered one when ``names`` is empty."""
    selected = list(dict.fromkeys(names)) or available_scanners()
    return [create_scanner(name) for name in selected]


def run_scan(
    target: str | Path,
    scanners: Sequence[Scanner],
    *,
    options: ScanOptions | None = None,
    jobs: int = 4,
) -> ScanReport:
    return asyncio.run(run_scan_async(target, scanners, options=options, jobs=jobs))


async def run_scan_async(
    target: str | Path,
    scanners: Sequence[Scanner],
    *,
    options: ScanOptions | None = None,
    jobs: int = 4,
) -> ScanReport:
    options = options or ScanOptions()
    resolved = Path(target).expanduser().resolve()
    max_jobs = max(1, jobs)
    semaphore = asyncio.Semaphore(max_jobs)

    async def _bounded_scan(scanner: Scanner) -> ScanResult:
        async with semaphore:
            logger.info("Running %s on %s", scanner.name, resolved)
            try:
                return await asyncio.to_thread(scanner.scan, resolved, options)
            except Exception as exc:
                logger.exception("Unhandled scanner failure for %s", scanner.name)
                return ScanResult(scanner=scanner.name, notes=[f"Internal scanner failure: {exc}"])

    tasks = [asyncio.create_task(_bounded_scan(scanner)) for scanner in scanners]
    results = await asyncio.gather(*tasks)

    summary = evaluate_risk(results)
    logger.info(
        "Finished %s: scanners=%s findings=%s score=%s grade=%s",
        resolved,
        len(results),
        summary.total_findings,
        summary.score,
        summary.grade,
    )
    return ScanReport(
        version=__version__,
        target=str(resolved),
        context=options.context,
        results=list(results),
        summary=summary,
    )
