"""Line-level recognizers for request, response and body log lines.

Request and response lines are emitted by the app's HTTP logger as:

    📤 [REQUEST] POST https://api.example.com/v1/users
    📤 [REQUEST] Body: {"name": "Ada"}
    📥 [RESPONSE] 201 https://api.example.com/v1/users
    📥 [RESPONSE] Body: {"id": 7}
"""

import re
from typing import NamedTuple
from urllib.parse import urlsplit

OUTGOING = "\U0001F4E4"  # 📤
INCOMING = "\U0001F4E5"  # 📥
REQUEST_TAG = "[REQUEST]"
RESPONSE_TAG = "[RESPONSE]"
BODY_TAG = "Body:"

REQUEST_RE = re.compile(OUTGOING + r"\s*\[REQUEST\]\s*(GET|POST|PUT|DELETE|PATCH)\s+(.+)")
RESPONSE_RE = re.compile(INCOMING + r"\s*\[RESPONSE\]\s*([0-9]+)\s+(.+)")
BODY_RE = re.compile(
    OUTGOING + r"\s*\[REQUEST\]\s*Body:\s*(.+)|" + INCOMING + r"\s*\[RESPONSE\]\s*Body:\s*(.+)"
)
URL_PATH_RE = re.compile(r"https?://[^/]+(/[^\s?]*)")


class RequestStart(NamedTuple):
    method: str
    url: str


class ResponseStart(NamedTuple):
    status_code: int
    url: str


def parse_request_line(line: str) -> RequestStart | None:
    match = REQUEST_RE.search(line)
    if match:
        return RequestStart(method=match.group(1), url=match.group(2).strip())
    return None


def parse_response_line(line: str) -> ResponseStart | None:
    match = RESPONSE_RE.search(line)
    if match:
        return ResponseStart(status_code=int(match.group(1)), url=match.group(2).strip())
    return None


def parse_body_line(line: str) -> str | None:
    """Return the payload text after a `Body:` tag, without parsing it."""
    match = BODY_RE.search(line)
    if match:
        return match.group(1) or match.group(2)
    return None


def is_request_body_line(line: str) -> bool:
    return OUTGOING in line and REQUEST_TAG in line and BODY_TAG in line


def is_response_body_line(line: str) -> bool:
    return INCOMING in line and RESPONSE_TAG in line and BODY_TAG in line


def has_marker(line: str) -> bool:
    return OUTGOING in line or INCOMING in line


def extract_endpoint(url: str) -> str:
    """Return the path of an absolute URL, falling back to the raw string."""
    try:
        parts = urlsplit(url)
    except ValueError:
        parts = None
    if parts and parts.scheme and parts.netloc:
        return parts.path or "/"

    match = URL_PATH_RE.search(url)
    return match.group(1) if match else url
