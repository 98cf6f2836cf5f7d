"""
Tests for JSON-RPC message parsing and envelope helpers, including
property-based checks that malformed input always maps to ProtocolError.
"""

import json

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from thebrain_mcp.core.config import MCPConfig
from thebrain_mcp.core.exceptions import ProtocolError
from thebrain_mcp.mcp import protocol
from thebrain_mcp.mcp.adapters.api_adapter import TheBrainAPIAdapter
from thebrain_mcp.mcp.server import MCPServer

from conftest import FakeSession


json_scalars = st.none() | st.booleans() | st.integers() | st.floats(allow_nan=False) | st.text()
KNOWN_METHODS = (
    protocol.INITIALIZE,
    protocol.LIST_TOOLS,
    protocol.CALL_TOOL,
    protocol.LIST_RESOURCES,
    protocol.READ_RESOURCE,
)

json_values = st.recursive(
    json_scalars,
    lambda children: st.lists(children, max_size=3)
    | st.dictionaries(st.text(max_size=5), children, max_size=3),
    max_leaves=10,
)


class TestParseMessage:

    def test_valid_message_is_returned_unchanged(self):
        message = {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}}
        assert protocol.parse_message(json.dumps(message)) == message

    def test_id_is_optional(self):
        message = protocol.parse_message('{"jsonrpc": "2.0", "method": "tools/list"}')
        assert "id" not in message

    @pytest.mark.parametrize(
        "raw, message",
        [
            ("", "Invalid JSON"),
            ("{", "Invalid JSON"),
            ("null", "Message must be a map"),
            ('"text"', "Message must be a map"),
            ('{"method": "initialize"}', "Invalid JSON-RPC version"),
            ('{"jsonrpc": 2.0, "method": "initialize"}', "Invalid JSON-RPC version"),
            ('{"jsonrpc": "2.0"}', "Method must be a string"),
            ('{"jsonrpc": "2.0", "method": null}', "Method must be a string"),
        ],
    )
    def test_rejections(self, raw, message):
        with pytest.raises(ProtocolError) as exc_info:
            protocol.parse_message(raw)
        assert exc_info.value.message.startswith(message)

    def test_version_checked_before_method(self):
        with pytest.raises(ProtocolError) as exc_info:
            protocol.parse_message('{"jsonrpc": "1.0", "method": 3}')
        assert exc_info.value.message == "Invalid JSON-RPC version"


class TestEnvelopes:

    def test_success_response(self):
        assert protocol.success_response(3, {"ok": True}) == {
            "jsonrpc": "2.0", "id": 3, "result": {"ok": True},
        }

    def test_error_response_without_data(self):
        envelope = protocol.error_response(None, -32601, "Method not found: x")
        assert envelope == {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": -32601, "message": "Method not found: x"},
        }

    def test_error_response_with_data(self):
        envelope = protocol.error_response(1, -32000, "Thought not found", {"status_code": 404})
        assert envelope["error"]["data"] == {"status_code": 404}

    def test_resource_descriptor(self):
        descriptor = protocol.resource_descriptor({"id": 7, "name": "Seven", "notes": "short"})
        assert descriptor == {
            "uri": "thought://thought/7",
            "name": "Seven",
            "description": "short",
            "mimeType": "text/plain",
        }

    def test_resource_descriptor_non_string_notes(self):
        descriptor = protocol.resource_descriptor({"id": 8, "name": "Eight", "notes": 3.5})
        assert descriptor["description"] == "3.5"

    @pytest.mark.parametrize(
        "results, expected",
        [
            ([{"id": "1"}], [{"id": "1"}]),
            ({"thoughts": [{"id": "1"}]}, [{"id": "1"}]),
            ({"data": [{"id": "2"}]}, [{"id": "2"}]),
            ({"other": 1}, []),
            ("text", []),
        ],
    )
    def test_extract_thoughts(self, results, expected):
        assert protocol.extract_thoughts(results) == expected


class TestMalformedInputProperties:
    """Whatever arrives on the wire, the router answers with one envelope."""

    @given(st.text())
    @settings(max_examples=100, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_arbitrary_text_never_raises(self, raw):
        server = MCPServer(_adapter())
        line = server.handle_line(raw)

        if not raw.strip():
            assert line is None
            return
        response = json.loads(line)
        assert response["jsonrpc"] == "2.0"
        assert ("result" in response) != ("error" in response)

    @given(json_values.filter(lambda v: not isinstance(v, dict)))
    @settings(max_examples=100, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_non_object_json_is_a_protocol_error(self, value):
        with pytest.raises(ProtocolError) as exc_info:
            protocol.parse_message(json.dumps(value))
        assert exc_info.value.message == "Message must be a map"

    @given(json_values.filter(lambda v: not isinstance(v, str)))
    @settings(max_examples=100, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_non_string_method_is_a_protocol_error(self, method):
        raw = json.dumps({"jsonrpc": "2.0", "id": 1, "method": method})
        with pytest.raises(ProtocolError) as exc_info:
            protocol.parse_message(raw)
        assert exc_info.value.message == "Method must be a string"

    @given(st.text(min_size=1).filter(lambda m: m not in KNOWN_METHODS))
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_unknown_methods_are_method_not_found(self, method):
        server = MCPServer(_adapter())
        response = json.loads(server.handle_line(json.dumps(
            {"jsonrpc": "2.0", "id": 1, "method": method}
        )))
        assert response["error"]["code"] == -32601
        assert response["error"]["message"] == f"Method not found: {method}"


def _adapter():
    return TheBrainAPIAdapter(
        config=MCPConfig(api_key="k", brain_id="b"), session=FakeSession()
    )
