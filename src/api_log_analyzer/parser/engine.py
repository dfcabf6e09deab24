"""Log parsing engine — turns raw console output into ordered API calls.

Bodies are frequently wrapped across several lines by the logging framework
with no end marker, so a pending body is re-parsed after every appended line
and dropped as soon as a line stops looking like JSON.
"""

import json
import logging
import math
import re
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from typing import Any, NamedTuple

from .base import ApiCall, PartialCall
from .junk import JunkClassifier
from .lines import (
    extract_endpoint,
    has_marker,
    is_request_body_line,
    is_response_body_line,
    parse_body_line,
    parse_request_line,
    parse_response_line,
)

logger = logging.getLogger(__name__)

JSON_CONTINUATION_RE = re.compile(r'^[{\["}\],:]')


class ParserState(Enum):
    IDLE = "idle"
    AWAITING_REQUEST_BODY = "awaiting_request_body"
    AWAITING_RESPONSE_BODY = "awaiting_response_body"


class ParsedLog(NamedTuple):
    calls: list[ApiCall]
    total_lines: int
    junk_lines: int


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant: {name}")


def _parse_finite_float(text: str) -> float:
    # 1e400 overflows to inf, which no JSON encoder can write back
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def try_parse_json(text: str) -> tuple[bool, Any]:
    """Parse `text` as a standalone JSON value. Returns (ok, value)."""
    try:
        return True, json.loads(text, parse_constant=_reject_constant, parse_float=_parse_finite_float)
    except (ValueError, RecursionError):
        return False, None


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LogParsingEngine:
    """Scans log text line by line and reassembles request/response pairs."""

    def __init__(
        self,
        classifier: JunkClassifier | None = None,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.classifier = classifier or JunkClassifier()
        self.id_factory = id_factory or _new_id
        self.clock = clock or _utcnow

    def parse(self, content: str) -> ParsedLog:
        # lone surrogates cannot pass pydantic string validation
        content = content.encode("utf-8", "replace").decode("utf-8")
        lines = content.split("\n")
        calls: list[ApiCall] = []
        junk_count = 0
        current: PartialCall | None = None
        state = ParserState.IDLE
        buffer = ""

        for line in lines:
            trimmed = line.strip()

            request = parse_request_line(trimmed)
            if request:
                if current and current.is_complete():
                    calls.append(current.to_call())
                current = PartialCall(
                    id=self.id_factory(),
                    method=request.method,
                    url=request.url,
                    endpoint=extract_endpoint(request.url),
                    timestamp=self.clock(),
                )
                state = ParserState.IDLE
                buffer = ""
                continue

            if is_request_body_line(trimmed):
                payload = parse_body_line(trimmed)
                if payload and current:
                    ok, value = try_parse_json(payload)
                    if ok:
                        current.request_body = value
                    else:
                        state = ParserState.AWAITING_REQUEST_BODY
                        buffer = payload
                continue

            response = parse_response_line(trimmed)
            if response:
                if current:
                    current.status_code = response.status_code
                    if buffer:
                        ok, value = try_parse_json(buffer)
                        if ok:
                            _assign_body(current, state, value)
                        else:
                            logger.debug("Dropping unterminated body before response to %s", current.url)
                buffer = ""
                state = ParserState.IDLE
                continue

            if is_response_body_line(trimmed):
                payload = parse_body_line(trimmed)
                if payload and current:
                    ok, value = try_parse_json(payload)
                    if ok:
                        current.response_body = value
                    else:
                        state = ParserState.AWAITING_RESPONSE_BODY
                        buffer = payload
                continue

            if state is not ParserState.IDLE and trimmed:
                if JSON_CONTINUATION_RE.match(trimmed):
                    buffer += trimmed
                    ok, value = try_parse_json(buffer)
                    if ok:
                        if current:
                            _assign_body(current, state, value)
                        buffer = ""
                        state = ParserState.IDLE
                else:
                    logger.debug("Abandoning %s after non-JSON line", state.value)
                    buffer = ""
                    state = ParserState.IDLE
                continue

            if not has_marker(trimmed) and self.classifier.is_junk(trimmed):
                junk_count += 1

        if current and current.is_complete():
            calls.append(current.to_call())

        logger.debug("Parsed %d lines: %d calls, %d junk", len(lines), len(calls), junk_count)
        return ParsedLog(calls=calls, total_lines=len(lines), junk_lines=junk_count)


def _assign_body(call: PartialCall, state: ParserState, value: Any) -> None:
    if state is ParserState.AWAITING_RESPONSE_BODY:
        call.response_body = value
    else:
        call.request_body = value
