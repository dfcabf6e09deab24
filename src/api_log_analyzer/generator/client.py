"""TypeScript client generator — typed request functions from endpoint samples."""

import re
from collections.abc import Callable
from datetime import datetime, timezone

from api_log_analyzer.generator.types import render_declaration
from api_log_analyzer.parser.base import EndpointGroup

BANNER = "// " + "=" * 77

DEFAULT_CLIENT_NAME = "apiClient"
DEFAULT_CLIENT_IMPORT = "./apiClient"

FUNCTION_PREFIXES = {
    "GET": "fetch",
    "POST": "create",
    "PUT": "update",
    "PATCH": "patch",
    "DELETE": "delete",
}

NO_BODY_METHODS = ("GET", "DELETE")


def to_type_name(endpoint: str) -> str:
    """Convert /api/users/123/profile to UsersProfile."""
    parts = [
        re.sub(r"[^a-zA-Z0-9]", "", p)
        for p in endpoint.split("/")
        if p and not re.fullmatch(r"[0-9]+", p) and p != "api"
    ]
    return "".join(p[:1].upper() + p[1:] for p in parts) or "Unknown"


def to_function_name(method: str, endpoint: str) -> str:
    prefix = FUNCTION_PREFIXES.get(method, method.lower())
    return f"{prefix}{to_type_name(endpoint)}"


class _NameRegistry:
    """Hands out unique names: Users, Users2, Users3, ..."""

    def __init__(self):
        self._counts: dict[str, int] = {}

    def claim(self, base: str) -> str:
        count = self._counts.get(base, 0)
        self._counts[base] = count + 1
        return base if count == 0 else f"{base}{count + 1}"


def _ts_string(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


class ClientGenerator:
    """Generates a TypeScript API client module from endpoint groups."""

    def __init__(
        self,
        client_name: str = DEFAULT_CLIENT_NAME,
        client_import: str = DEFAULT_CLIENT_IMPORT,
        clock: Callable[[], datetime] | None = None,
    ):
        self.client_name = client_name
        self.client_import = client_import
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def generate(self, groups: list[EndpointGroup]) -> str:
        """Render the whole client module as one string."""
        type_names = _NameRegistry()
        function_names = _NameRegistry()

        sections = [self._render_header(len(groups))]
        for group in groups:
            type_name = type_names.claim(to_type_name(group.endpoint))
            function_name = function_names.claim(to_function_name(group.method, group.endpoint))
            sections.append(self._render_endpoint(group, type_name, function_name))

        return "\n".join(sections)

    def _render_header(self, endpoint_count: int) -> str:
        return (
            "// Auto-generated TypeScript API Client\n"
            f"// Generated on {self.clock().isoformat()}\n"
            f"// Total endpoints: {endpoint_count}\n"
            "\n"
            f"import {{ {self.client_name} }} from {_ts_string(self.client_import)};\n"
        )

    def _render_endpoint(self, group: EndpointGroup, type_name: str, function_name: str) -> str:
        lines = [
            BANNER,
            f"// {group.method} {group.endpoint}",
            f"// Called {len(group.calls)} time(s)",
            BANNER,
            "",
        ]

        has_request = group.sample_request is not None
        has_response = group.sample_response is not None
        request_type = f"{type_name}Request"
        response_type = f"{type_name}Response" if has_response else "void"

        if has_request:
            lines.extend([render_declaration(request_type, group.sample_request), ""])
        if has_response:
            lines.extend([render_declaration(response_type, group.sample_response), ""])

        takes_data = has_request and group.method not in NO_BODY_METHODS
        params = f"data: {request_type}" if takes_data else ""

        lines.append(f"export async function {function_name}({params}): Promise<{response_type}> {{")
        lines.append(f"  const response = await {self.client_name}.request({{")
        lines.append(f"    method: '{group.method}',")
        lines.append(f"    url: {_ts_string(group.endpoint)},")
        if takes_data:
            lines.append("    data,")
        lines.append("  });")
        lines.append(f"  return response{' as ' + response_type if has_response else ''};")
        lines.append("}")
        lines.append("\n")
        return "\n".join(lines)
