from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from agent_audit.discovery.finder import DiscoveryDiagnostics, discover_files
from agent_audit.discovery.patterns import PROMPT_GLOBS
from agent_audit.engine.aggregator import AggregationMap
from agent_audit.engine.dedup import FindingCollector
from agent_audit.engine.roles import classify_file, relative_posix
from agent_audit.engine.severity import DEFAULT_PIPELINE, SeverityPipeline
from agent_audit.errors import FileReadError, ParseError
from agent_audit.models.findings import Confidence, Finding
from agent_audit.models.reports import ScanOptions, ScanResult
from agent_audit.models.roles import FileContext
from agent_audit.utils.files import is_structured_file, parse_structured, read_text

logger = logging.getLogger(__name__)


@dataclass
class ScanState:
    """Mutable state for one scan invocation, discarded when it returns."""

    root: Path
    options: ScanOptions
    files: list[Path] = field(default_factory=list)
    aggregation: AggregationMap = field(default_factory=AggregationMap)
    seen: set[str] = field(default_factory=set)
    sightings: dict[str, list[str]] = field(default_factory=dict)
    diagnostics: DiscoveryDiagnostics = field(default_factory=DiscoveryDiagnostics)

    def sighting(self, key: str, location: str) -> None:
        locations = self.sightings.setdefault(key, [])
        if location not in locations:
            locations.append(location)


@dataclass(frozen=True)
class SourceFile:
    path: Path
    display: str
    content: str
    context: FileContext
    parsed: object = None
    parse_error: ParseError | None = None

    @property
    def lines(self) -> list[str]:
        return self.content.split("\n")


class Scanner(ABC):
    name: str = "unknown"
    title: str = "Unknown"
    description: str = ""
    globs: tuple[str, ...] = PROMPT_GLOBS
    confidence: Confidence | None = None
    parse_structured: bool = False
    markdown_is_doc: bool = False
    content_roles: bool = False

    def __init__(self, pipeline: SeverityPipeline = DEFAULT_PIPELINE) -> None:
        self.pipeline = pipeline

    @abstractmethod
    def scan_file(self, source: SourceFile, state: ScanState) -> Iterable[Finding]:
        raise NotImplementedError

    def prepare(self, state: ScanState) -> None:
        """Hook run after discovery and before the first file is read."""

    def finalize(self, state: ScanState) -> Iterable[Finding]:
        return ()

    def discover(self, root: Path, options: ScanOptions, diagnostics: DiscoveryDiagnostics) -> list[Path]:
        return discover_files(
            root,
            self.globs,
            exclude=options.exclude,
            include_vendored=options.include_vendored,
            diagnostics=diagnostics,
        )

    def scan(self, root: str | Path, options: ScanOptions | None = None) -> ScanResult:
        started = time.perf_counter()
        options = options or ScanOptions()
        target = Path(root).expanduser().resolve()
        base = target if target.is_dir() else target.parent
        state = ScanState(root=base, options=options)
        state.files = self.discover(target, options, state.diagnostics)
        self.prepare(state)

        collector = FindingCollector()
        scanned = 0
        for path in state.files:
            try:
                content = read_text(path)
            except FileReadError as error:
                logger.info("skipping unreadable file: %s", error)
                continue
            scanned += 1
            source = self._load(path, content, state)
            for finding in self.scan_file(source, state):
                collector.add(self._finish(self.pipeline.apply(finding, source.context, options.context)))

        collector.extend(self._finish(finding) for finding in self.finalize(state))
        duration = int((time.perf_counter() - started) * 1000)
        logger.info(
            "%s finished: files=%s scanned=%s findings=%s",
            self.name,
            len(state.files),
            scanned,
            len(collector),
        )
        return ScanResult(
            scanner=self.name,
            findings=collector.findings,
            scanned_files=scanned,
            duration=duration,
            notes=list(state.diagnostics.warnings),
        )

    def _load(self, path: Path, content: str, state: ScanState) -> SourceFile:
        parsed: object = None
        parse_error: ParseError | None = None
        if self.parse_structured and is_structured_file(path):
            try:
                parsed = parse_structured(path, content)
            except ParseError as error:
                logger.info("structured checks skipped: %s", error)
                parse_error = error
        context = classify_file(
            path,
            content if self.content_roles else None,
            parsed,
            root=state.root,
            markdown_is_doc=self.markdown_is_doc,
        )
        return SourceFile(
            path=path,
            display=relative_posix(path, state.root),
            content=content,
            context=context,
            parsed=parsed,
            parse_error=parse_error,
        )

    def _finish(self, finding: Finding) -> Finding:
        if finding.confidence is None and self.confidence is not None:
            return finding.model_copy(update={"confidence": self.confidence})
        return finding


_REGISTRY: dict[str, Callable[[], Scanner]] = {}


def register_scanner(name: str) -> Callable[[type[Scanner]], type[Scanner]]:
    def decorator(cls: type[Scanner]) -> type[Scanner]:
        _REGISTRY[name] = cls
        return cls

    return decorator


def create_scanner(name: str) -> Scanner:
    if name not in _REGISTRY:
        msg = f"Unsupported scanner: {name}. Available: {', '.join(sorted(_REGISTRY))}"
        raise ValueError(msg)
    return _REGISTRY[name]()


def available_scanners() -> list[str]:
    return sorted(_REGISTRY)
