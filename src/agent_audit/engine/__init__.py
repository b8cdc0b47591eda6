"""Weighted pattern classification and contextual severity engine."""

from agent_audit.engine.aggregator import AggregationMap, CategoryTotals
from agent_audit.engine.boundaries import analyze_tool_permission_boundaries
from agent_audit.engine.dedup import FindingCollector, finding_key
from agent_audit.engine.matcher import LineMatch, MatchResult, first_match_line, match_lines, score_category, score_content
from agent_audit.engine.roles import classify_file, has_auth_files
from agent_audit.engine.severity import DEFAULT_PIPELINE, DEFAULT_RULES, SeverityPipeline, SeverityRule, lower_severity
from agent_audit.engine.thresholds import CategoryStatus, category_finding, classify_weight

__all__ = [
    "DEFAULT_PIPELINE",
    "DEFAULT_RULES",
    "AggregationMap",
    "CategoryStatus",
    "CategoryTotals",
    "FindingCollector",
    "LineMatch",
    "MatchResult",
    "SeverityPipeline",
    "SeverityRule",
    "analyze_tool_permission_boundaries",
    "category_finding",
    "classify_file",
    "classify_weight",
    "finding_key",
    "first_match_line",
    "has_auth_files",
    "lower_severity",
    "match_lines",
    "score_category",
    "score_content",
]
