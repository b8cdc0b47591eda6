from __future__ import annotations

from collections.abc import Iterable

from agent_audit.discovery.patterns import CONFIG_GLOBS, PROMPT_GLOBS, SOURCE_GLOBS, name_matches_any
from agent_audit.engine.matcher import score_category
from agent_audit.engine.severity import lower_severity
from agent_audit.engine.thresholds import CategoryStatus, classify_weight
from agent_audit.models.findings import Confidence, Finding, Severity
from agent_audit.patterns.channels import CHANNEL_REGISTRY, ChannelDefinition, ChannelRegistry
from agent_audit.scanners.base import Scanner, ScanState, SourceFile, register_scanner

SCANNER_NAME = "channel-surface-auditor"
MENTION_ONLY_ANNOTATION = "[no code-level integration evidence found - mention only]"
SURFACE_GLOBS = tuple(dict.fromkeys((*PROMPT_GLOBS, *CONFIG_GLOBS)))

_DETECTED = "detected:"
_EVIDENCE = "evidence:"


def channel_finding(channel: ChannelDefinition, defenses: list[str]) -> Finding:
    """Grade a detected channel on how many distinct defenses were found."""
    category = channel.defenses
    status = classify_weight(len(defenses), category)
    found = ", ".join(defenses)

    if status is CategoryStatus.MISSING:
        return Finding(
            id=f"{channel.id}-UNDEFENDED",
            scanner=SCANNER_NAME,
            severity=category.missing_severity,
            title=f"Undefended channel: {channel.name}",
            description=(
                f"Agent has access to {channel.name} but no channel-specific defenses were found. An attacker "
                "could use this channel to inject instructions or exfiltrate data."
            ),
            recommendation=f"Add channel-specific defenses for {channel.name}. {category.recommendation}",
            rule_id=channel.id,
        )
    if status is CategoryStatus.PARTIAL:
        return Finding(
            id=f"{channel.id}-PARTIAL",
            scanner=SCANNER_NAME,
            severity=category.partial_severity,
            title=f"Partially defended channel: {channel.name}",
            description=(
                f"Agent has access to {channel.name} with some defenses ({found}), but coverage is incomplete."
            ),
            recommendation=f"Strengthen defenses for {channel.name}. {category.recommendation}",
            rule_id=channel.id,
        )
    return Finding(
        id=f"{channel.id}-DEFENDED",
        scanner=SCANNER_NAME,
        severity=Severity.INFO,
        title=f"Defended channel: {channel.name}",
        description=f"Agent has access to {channel.name} with adequate defenses ({found}).",
        recommendation="Continue monitoring and updating channel defenses.",
        rule_id=channel.id,
    )


@register_scanner(SCANNER_NAME)
class ChannelSurfaceAuditor(Scanner):
    """Detects the external channels an agent acts through and grades their defenses.

    Prompt and config files drive detection and defenses. Source files only
    contribute evidence that an integration really exists.
    """

    name = SCANNER_NAME
    title = "Channel Surface Auditor"
    description = "Detects which external channels the agent controls and checks each one for adequate defenses"
    globs = tuple(dict.fromkeys((*SURFACE_GLOBS, *SOURCE_GLOBS)))
    confidence = Confidence.LIKELY

    def __init__(self, registry: ChannelRegistry = CHANNEL_REGISTRY, **kwargs) -> None:
        super().__init__(**kwargs)
        self.registry = registry

    def scan_file(self, source: SourceFile, state: ScanState) -> Iterable[Finding]:
        surface = name_matches_any(source.path.name, SURFACE_GLOBS)
        for channel in self.registry.channels:
            if channel.code_evidence is not None and channel.has_code_evidence(source.content):
                state.seen.add(_EVIDENCE + channel.id)
            if not surface:
                continue
            if channel.detected_in(source.content):
                state.sighting(_DETECTED + channel.id, source.display)
            state.aggregation.add(source.display, (score_category(source.content, channel.defenses),))
        return ()

    def finalize(self, state: ScanState) -> Iterable[Finding]:
        findings: list[Finding] = []
        for channel in self.registry.channels:
            if _DETECTED + channel.id not in state.sightings:
                continue
            finding = channel_finding(channel, state.aggregation.get(channel.id).matched_descriptions)
            if channel.code_evidence is not None and _EVIDENCE + channel.id not in state.seen:
                finding = lower_severity(finding, Severity.INFO, MENTION_ONLY_ANNOTATION)
            findings.append(finding)
        return findings
