"""Analysis pipeline — parse a log, group calls by endpoint, compute stats."""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from api_log_analyzer.parser.base import AnalysisResult, AnalysisStats, ApiCall, EndpointGroup, LogAnalysis
from api_log_analyzer.parser.engine import LogParsingEngine
from api_log_analyzer.parser.junk import JunkClassifier

logger = logging.getLogger(__name__)


def aggregate(calls: list[ApiCall]) -> list[EndpointGroup]:
    """Group calls by (method, endpoint), busiest endpoints first.

    Groups with equal call counts keep the order in which they were first seen.
    Each group's samples are the first request and response bodies present.
    """
    grouped: dict[tuple[str, str], list[ApiCall]] = {}
    for call in calls:
        grouped.setdefault((call.method, call.endpoint), []).append(call)

    groups = [
        EndpointGroup(
            method=method,
            endpoint=endpoint,
            calls=group_calls,
            sample_request=_first_body(group_calls, "request_body"),
            sample_response=_first_body(group_calls, "response_body"),
        )
        for (method, endpoint), group_calls in grouped.items()
    ]
    return sorted(groups, key=lambda g: len(g.calls), reverse=True)


def _first_body(calls: list[ApiCall], field: str):
    for call in calls:
        value = getattr(call, field)
        if value is not None:
            return value
    return None


def parse_log_content(
    content: str,
    classifier: JunkClassifier | None = None,
    id_factory: Callable[[], str] | None = None,
    clock: Callable[[], datetime] | None = None,
) -> LogAnalysis:
    """Run the full pipeline over one log blob."""
    engine = LogParsingEngine(classifier=classifier, id_factory=id_factory, clock=clock)
    parsed = engine.parse(content)
    endpoints = aggregate(parsed.calls)

    stats = AnalysisStats(
        total_lines=parsed.total_lines,
        api_requests=len(parsed.calls),
        unique_endpoints=len(endpoints),
        junk_filtered=parsed.junk_lines,
    )
    logger.debug(
        "Analysis: %d requests across %d endpoints", stats.api_requests, stats.unique_endpoints
    )
    return LogAnalysis(stats=stats, endpoints=endpoints, timeline=parsed.calls)


def create_analysis_result(
    name: str,
    content: str,
    classifier: JunkClassifier | None = None,
    id_factory: Callable[[], str] | None = None,
    clock: Callable[[], datetime] | None = None,
) -> AnalysisResult:
    """Analyze `content` and wrap it as a named, identified result."""
    analysis = parse_log_content(content, classifier=classifier, id_factory=id_factory, clock=clock)
    new_id = id_factory or (lambda: str(uuid.uuid4()))
    now = clock or (lambda: datetime.now(timezone.utc))

    return AnalysisResult(
        id=new_id(),
        name=name,
        created_at=now(),
        stats=analysis.stats,
        endpoints=analysis.endpoints,
        timeline=analysis.timeline,
        raw_logs=content,
    )
