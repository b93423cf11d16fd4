"""Tests for the backend frame parser and SSE encoding."""

import json

from duckproxy.core.sse import DONE, SKIP, BackendEvent, encode_sse, parse_event, strip_prefix


class TestStripPrefix:
    """Tests for data prefix handling."""

    def test_strips_prefix_and_whitespace(self):
        assert strip_prefix('  data:  {"a": 1}  ') == '{"a": 1}'

    def test_prefix_without_space(self):
        assert strip_prefix("data:[DONE]") == "[DONE]"

    def test_returns_none_without_prefix(self):
        assert strip_prefix("event: ping") is None
        assert strip_prefix("") is None


class TestParseEvent:
    """Tests for parsing one backend frame."""

    def test_parses_role_and_message(self):
        event = parse_event('data: {"role":"assistant","message":"Hel","created":1,"model":"m"}')
        assert event == BackendEvent(role="assistant", message="Hel")

    def test_message_only(self):
        assert parse_event('data: {"message":"lo"}') == BackendEvent(role=None, message="lo")

    def test_sentinel(self):
        assert parse_event("data: [DONE]") is DONE
        assert parse_event("data: [DONE]\r") is DONE

    def test_invalid_json_is_skipped(self):
        assert parse_event("data: {not json") is SKIP

    def test_blank_and_unprefixed_lines_are_skipped(self):
        assert parse_event("") is SKIP
        assert parse_event("   ") is SKIP
        assert parse_event('{"message": "no prefix"}') is SKIP

    def test_non_object_payload_is_skipped(self):
        assert parse_event("data: [1, 2, 3]") is SKIP
        assert parse_event('data: "text"') is SKIP

    def test_non_string_fields_are_ignored(self):
        event = parse_event('data: {"role": 5, "message": null}')
        assert event == BackendEvent(role=None, message=None)

    def test_unicode_message(self):
        assert parse_event('data: {"message":"Grüße 👋"}') == BackendEvent(message="Grüße 👋")


class TestEncodeSse:
    """Tests for outbound event encoding."""

    def test_encodes_dict_as_json_event(self):
        encoded = encode_sse({"content": "é"})
        assert encoded.startswith(b"data: ")
        assert encoded.endswith(b"\n\n")
        assert json.loads(encoded[len(b"data: "):].decode("utf-8")) == {"content": "é"}
        assert "é".encode("utf-8") in encoded

    def test_encodes_string_verbatim(self):
        assert encode_sse("[DONE]") == b"data: [DONE]\n\n"
