import itertools
import json
from datetime import datetime, timezone

from api_log_analyzer.parser.engine import LogParsingEngine, try_parse_json
from api_log_analyzer.parser.junk import JunkClassifier

TS = datetime(2024, 5, 2, 10, 0, tzinfo=timezone.utc)


def _engine() -> LogParsingEngine:
    counter = itertools.count(1)
    return LogParsingEngine(
        classifier=JunkClassifier(),
        id_factory=lambda: f"call-{next(counter)}",
        clock=lambda: TS,
    )


def _pair(method: str, url: str, status: int, request=None, response=None) -> list[str]:
    lines = [f"📤 [REQUEST] {method} {url}"]
    if request is not None:
        lines.append(f"📤 [REQUEST] Body: {json.dumps(request)}")
    lines.append(f"📥 [RESPONSE] {status} {url}")
    if response is not None:
        lines.append(f"📥 [RESPONSE] Body: {json.dumps(response)}")
    return lines


class TestTryParseJson:
    def test_valid_values(self):
        assert try_parse_json('{"a": 1}') == (True, {"a": 1})
        assert try_parse_json("false") == (True, False)
        assert try_parse_json("null") == (True, None)

    def test_invalid_values(self):
        assert try_parse_json('{"a": ') == (False, None)
        assert try_parse_json("NaN") == (False, None)

    def test_deep_nesting_does_not_raise(self):
        ok, _ = try_parse_json("[" * 100000 + "]" * 100000)
        assert ok is False

    def test_out_of_range_float_rejected(self):
        assert try_parse_json('{"n": 1e400}') == (False, None)
        assert try_parse_json("-1e999") == (False, None)
        assert try_parse_json("1e308") == (True, 1e308)

    def test_out_of_range_body_stays_absent(self):
        lines = [
            "📤 [REQUEST] POST https://x.test/m",
            "📤 [REQUEST] Body: {\"n\": 1e400}",
            "📥 [RESPONSE] 200 https://x.test/m",
            "📥 [RESPONSE] Body: [1e999]",
        ]
        (call,) = _engine().parse("\n".join(lines)).calls
        assert call.request_body is None
        assert call.response_body is None


class TestSingleLineBodies:
    def test_pairs_in_order(self):
        log = "\n".join(
            _pair("POST", "https://x.test/api/users", 201, {"name": "Ada"}, {"id": 7})
            + _pair("GET", "https://x.test/api/users/7", 200, None, {"id": 7, "name": "Ada"})
            + _pair("DELETE", "https://x.test/api/users/7", 204)
        )
        result = _engine().parse(log)

        assert [c.method for c in result.calls] == ["POST", "GET", "DELETE"]
        post, get, delete = result.calls
        assert post.id == "call-1"
        assert post.endpoint == "/api/users"
        assert post.request_body == {"name": "Ada"}
        assert post.response_body == {"id": 7}
        assert post.status_code == 201
        assert post.timestamp == TS
        assert get.request_body is None
        assert get.response_body == {"id": 7, "name": "Ada"}
        assert delete.status_code == 204
        assert delete.response_body is None

    def test_request_without_response(self):
        result = _engine().parse("📤 [REQUEST] GET https://x.test/ping")
        assert len(result.calls) == 1
        assert result.calls[0].status_code is None

    def test_falsy_json_body_is_kept(self):
        log = "\n".join(_pair("PUT", "https://x.test/flag", 200, False, 0))
        call = _engine().parse(log).calls[0]
        assert call.request_body is False
        assert call.response_body == 0

    def test_body_without_current_call_is_ignored(self):
        log = '📤 [REQUEST] Body: {"a": 1}\n📥 [RESPONSE] 200 https://x.test/a'
        result = _engine().parse(log)
        assert result.calls == []
        assert result.junk_lines == 0


class TestMultiLineBodies:
    def test_request_body_reassembled(self):
        log = "\n".join([
            "📤 [REQUEST] POST https://x.test/orders",
            "📤 [REQUEST] Body: {",
            '  "items": [',
            '    {"sku": "A1", "qty": 2}',
            "  ],",
            '  "note": "gift"',
            "}",
            "📥 [RESPONSE] 201 https://x.test/orders",
        ])
        call = _engine().parse(log).calls[0]
        assert call.request_body == {"items": [{"sku": "A1", "qty": 2}], "note": "gift"}
        assert call.status_code == 201

    def test_response_body_reassembled(self):
        log = "\n".join([
            "📤 [REQUEST] GET https://x.test/orders/1",
            "📥 [RESPONSE] 200 https://x.test/orders/1",
            "📥 [RESPONSE] Body: [",
            '"a",',
            '"b"',
            "]",
        ])
        call = _engine().parse(log).calls[0]
        assert call.response_body == ["a", "b"]

    def test_non_json_line_abandons_body(self):
        log = "\n".join([
            "📤 [REQUEST] POST https://x.test/orders",
            "📤 [REQUEST] Body: {",
            '"note": "gift",',
            "Keyboard will show",
            "}",
            "📥 [RESPONSE] 201 https://x.test/orders",
        ])
        call = _engine().parse(log).calls[0]
        assert call.request_body is None
        assert call.status_code == 201

    def test_response_start_retries_pending_request_body(self):
        log = "\n".join([
            "📤 [REQUEST] POST https://x.test/orders",
            '📤 [REQUEST] Body: {"a": 1',
            "📥 [RESPONSE] 201 https://x.test/orders",
        ])
        call = _engine().parse(log).calls[0]
        assert call.request_body is None
        assert call.status_code == 201

    def test_unterminated_body_does_not_leak_into_next_call(self):
        log = "\n".join([
            "📤 [REQUEST] POST https://x.test/a",
            '📤 [REQUEST] Body: {"a": 1,',
            "📤 [REQUEST] GET https://x.test/b",
            "}",
            "📥 [RESPONSE] 200 https://x.test/b",
        ])
        first, second = _engine().parse(log).calls
        assert first.request_body is None
        assert second.request_body is None
        assert second.status_code == 200


class TestCounters:
    def test_total_lines_matches_split(self):
        for text in ("", "a", "a\n", "a\nb\n\n", "\n\n\n"):
            assert _engine().parse(text).total_lines == len(text.split("\n"))

    def test_junk_lines_do_not_change_calls(self):
        pairs = _pair("GET", "https://x.test/a", 200, None, {"ok": True}) + _pair(
            "POST", "https://x.test/b", 201, {"k": "v"}, None
        )
        clean = _engine().parse("\n".join(pairs))

        noisy_lines = []
        for line in pairs:
            noisy_lines.extend([line, "viewDidLoad", "-----", "nil"])
        noisy = _engine().parse("\n".join(noisy_lines))

        assert noisy.calls == clean.calls
        assert clean.junk_lines == 0
        assert noisy.junk_lines == 3 * len(pairs)

    def test_marker_lines_never_counted_as_junk(self):
        log = "📤 garbage\n📥 x\nok"
        result = _engine().parse(log)
        assert result.calls == []
        assert result.junk_lines == 1

    def test_arbitrary_input_does_not_raise(self):
        weird = "\x00\x01📤📥[REQUEST]Body:{\n]\n" + "📤 [REQUEST] GET \udcff\n" + "{" * 5000
        result = _engine().parse(weird)
        assert result.total_lines == 4
        assert len(result.calls) == 1
        assert result.junk_lines == 1


class TestReentrancy:
    def test_parse_twice_gives_independent_results(self):
        engine = _engine()
        log = "\n".join(_pair("GET", "https://x.test/a", 200))
        first = engine.parse(log)
        second = engine.parse(log)
        assert len(first.calls) == 1
        assert len(second.calls) == 1
        assert first.calls[0].id != second.calls[0].id
