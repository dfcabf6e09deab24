"""Data models for API traffic extracted from console logs.

The parsing engine builds `PartialCall` objects while it scans a log and
emits frozen `ApiCall` records; downstream stages only ever read them.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")


class ApiCall(BaseModel):
    """A single request/response exchange recovered from the log."""

    model_config = ConfigDict(frozen=True)

    id: str
    method: str  # GET / POST / PUT / DELETE / PATCH
    url: str
    endpoint: str  # path component of url
    request_body: Any = None
    response_body: Any = None
    status_code: int | None = None
    timestamp: datetime  # capture time, not log time


class PartialCall(BaseModel):
    """A call still being filled in by the parsing engine."""

    id: str | None = None
    method: str | None = None
    url: str | None = None
    endpoint: str | None = None
    request_body: Any = None
    response_body: Any = None
    status_code: int | None = None
    timestamp: datetime | None = None

    def is_complete(self) -> bool:
        """True when every identity field needed to emit the call is set."""
        return bool(self.id and self.method and self.url and self.endpoint) and self.timestamp is not None

    def to_call(self) -> ApiCall:
        return ApiCall(**self.model_dump())


class EndpointGroup(BaseModel):
    """All calls sharing one (method, endpoint) key."""

    model_config = ConfigDict(frozen=True)

    method: str
    endpoint: str
    calls: list[ApiCall]
    sample_request: Any = None
    sample_response: Any = None


class AnalysisStats(BaseModel):
    total_lines: int
    api_requests: int
    unique_endpoints: int
    junk_filtered: int


class LogAnalysis(BaseModel):
    """Output of a single pass over a log: counters, groups and the call timeline."""

    stats: AnalysisStats
    endpoints: list[EndpointGroup]
    timeline: list[ApiCall]


class AnalysisResult(BaseModel):
    """A named, identified analysis as handed to the UI and the store."""

    id: str
    name: str
    created_at: datetime
    stats: AnalysisStats
    endpoints: list[EndpointGroup]
    timeline: list[ApiCall]
    raw_logs: str | None = None
