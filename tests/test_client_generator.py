from datetime import datetime, timezone

from api_log_analyzer.generator.client import ClientGenerator, to_function_name, to_type_name
from api_log_analyzer.parser.base import ApiCall, EndpointGroup

TS = datetime(2024, 5, 2, 10, 0, tzinfo=timezone.utc)


def _group(method: str, endpoint: str, sample_request=None, sample_response=None, count: int = 1) -> EndpointGroup:
    calls = [
        ApiCall(id=f"{method}{endpoint}{i}", method=method, url=f"https://x.test{endpoint}", endpoint=endpoint, timestamp=TS)
        for i in range(count)
    ]
    return EndpointGroup(
        method=method, endpoint=endpoint, calls=calls,
        sample_request=sample_request, sample_response=sample_response,
    )


def _gen() -> ClientGenerator:
    return ClientGenerator(clock=lambda: TS)


class TestNaming:
    def test_type_name_drops_api_and_numeric_segments(self):
        assert to_type_name("/api/users/123/profile") == "UsersProfile"

    def test_type_name_strips_punctuation(self):
        assert to_type_name("/v1/order-items/{id}") == "V1OrderitemsId"

    def test_type_name_placeholder(self):
        assert to_type_name("/") == "Unknown"
        assert to_type_name("/api/42") == "Unknown"

    def test_function_prefixes(self):
        assert to_function_name("GET", "/users") == "fetchUsers"
        assert to_function_name("POST", "/users") == "createUsers"
        assert to_function_name("PUT", "/users") == "updateUsers"
        assert to_function_name("PATCH", "/users") == "patchUsers"
        assert to_function_name("DELETE", "/users") == "deleteUsers"
        assert to_function_name("HEAD", "/users") == "headUsers"


class TestHeader:
    def test_header_and_import(self):
        code = _gen().generate([_group("GET", "/a"), _group("GET", "/b")])
        assert code.startswith("// Auto-generated TypeScript API Client\n")
        assert f"// Generated on {TS.isoformat()}" in code
        assert "// Total endpoints: 2" in code
        assert "import { apiClient } from './apiClient';" in code

    def test_custom_client(self):
        gen = ClientGenerator(client_name="http", client_import="@/lib/http", clock=lambda: TS)
        code = gen.generate([_group("GET", "/a")])
        assert "import { http } from '@/lib/http';" in code
        assert "await http.request({" in code


class TestEndpointSections:
    def test_banner_and_call_count(self):
        code = _gen().generate([_group("GET", "/api/users", count=3)])
        assert "// GET /api/users\n// Called 3 time(s)" in code
        assert code.count("// " + "=" * 77) == 2

    def test_post_with_request_and_response(self):
        code = _gen().generate([_group("POST", "/api/users", {"name": "Ada"}, {"id": 7})])
        assert "export interface UsersRequest {\n  name: string;\n}" in code
        assert "export interface UsersResponse {\n  id: number;\n}" in code
        assert "export async function createUsers(data: UsersRequest): Promise<UsersResponse> {" in code
        assert "    method: 'POST',\n    url: '/api/users',\n    data,\n  });" in code
        assert "  return response as UsersResponse;" in code

    def test_get_never_takes_request_parameter(self):
        code = _gen().generate([_group("GET", "/search", {"q": "x"}, None)])
        assert "export interface SearchRequest" in code
        assert "export async function fetchSearch(): Promise<void> {" in code
        assert "    data," not in code
        assert "  return response;" in code

    def test_post_without_samples(self):
        code = _gen().generate([_group("POST", "/ping")])
        assert "interface" not in code
        assert "export async function createPing(): Promise<void> {" in code

    def test_endpoint_with_quote_is_escaped(self):
        code = _gen().generate([_group("GET", "/it's")])
        assert "url: '/it\\'s'," in code


class TestDeduplication:
    def test_colliding_get_endpoints(self):
        code = _gen().generate([
            _group("GET", "/api/users", None, {"id": 1}),
            _group("GET", "/users", None, {"id": 2}),
        ])
        assert "export interface UsersResponse" in code
        assert "export interface Users2Response" in code
        assert "export async function fetchUsers(): Promise<UsersResponse>" in code
        assert "export async function fetchUsers2(): Promise<Users2Response>" in code

    def test_third_collision(self):
        code = _gen().generate([_group("GET", "/a"), _group("GET", "/api/a"), _group("GET", "/a/1")])
        assert "fetchA()" in code
        assert "fetchA2()" in code
        assert "fetchA3()" in code

    def test_function_names_follow_base_type_name(self):
        code = _gen().generate([
            _group("GET", "/users", None, {"id": 1}),
            _group("POST", "/users", {"n": 1}, None),
        ])
        assert "export interface Users2Request" in code
        assert "export async function createUsers(data: Users2Request): Promise<void>" in code

    def test_generation_is_stateless(self):
        gen = _gen()
        groups = [_group("GET", "/a")]
        assert gen.generate(groups) == gen.generate(groups)
