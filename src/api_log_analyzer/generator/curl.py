"""cURL command generator for captured API calls."""

import json
from typing import Any

from api_log_analyzer.parser.base import ApiCall

BODY_METHODS = ("POST", "PUT", "PATCH")


def escape_for_shell(text: str) -> str:
    """Escape text for a single-quoted shell argument: ' becomes '\\''."""
    return text.replace("'", "'\\''")


def generate_curl(method: str, url: str, request_body: Any = None) -> str:
    """Build a multi-line curl command for one request."""
    parts = ["curl"]

    # GET is curl's default
    if method != "GET":
        parts.append(f"-X {method}")

    parts.append("-H 'Content-Type: application/json'")
    parts.append("-H 'Accept: application/json'")

    if request_body is not None and method in BODY_METHODS:
        body_json = json.dumps(request_body, ensure_ascii=False, separators=(",", ":"))
        parts.append(f"-d '{escape_for_shell(body_json)}'")

    parts.append(f"'{escape_for_shell(url)}'")
    return " \\\n  ".join(parts)


def curl_for_call(call: ApiCall) -> str:
    return generate_curl(call.method, call.url, call.request_body)
