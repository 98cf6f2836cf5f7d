import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

import pytest


# Ensure local src/ package imports work without editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from thebrain_mcp.core.config import BridgeConfig, MCPConfig, reset_config  # noqa: E402
from thebrain_mcp.mcp.adapters.api_adapter import TheBrainAPIAdapter  # noqa: E402
from thebrain_mcp.mcp.server import MCPServer  # noqa: E402


class DummyResponse:
    """Mock HTTP response for testing."""

    def __init__(self, status_code: int = 200, data: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._data = data
        if text is not None:
            self.text = text
        elif data is not None:
            self.text = json.dumps(data)
        else:
            self.text = ""
        self.content = self.text.encode("utf-8")

    def json(self):
        if self._data is None:
            return json.loads(self.text)
        return self._data


class FakeSession:
    """
    Stand-in for requests.Session.

    ``responder`` is either a DummyResponse returned for every call, or a
    callable receiving (method, url, params, json) and returning one.
    Every call is recorded in ``calls``.
    """

    def __init__(self, responder: Union[DummyResponse, Callable[..., DummyResponse]] = None):
        self.responder = responder or DummyResponse(200, {})
        self.calls: List[dict] = []
        self.closed = False

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append(
            {"method": method, "url": url, "params": params, "json": json, "timeout": timeout}
        )
        if callable(self.responder) and not isinstance(self.responder, DummyResponse):
            return self.responder(method, url, params, json)
        return self.responder

    def close(self):
        self.closed = True

    def calls_for(self, method: str) -> List[dict]:
        return [c for c in self.calls if c["method"] == method]


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Isolate tests from THEBRAIN_* variables and the config singleton."""
    for key in list(os.environ):
        if key.startswith("THEBRAIN_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def mcp_config():
    return MCPConfig(
        api_base_url="https://api.example.com",
        api_key="test-key",
        brain_id="brain-1",
        timeout_seconds=5,
    )


@pytest.fixture
def bridge_config(mcp_config):
    return BridgeConfig(mcp=mcp_config)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def adapter(mcp_config, fake_session):
    return TheBrainAPIAdapter(config=mcp_config, session=fake_session)


@pytest.fixture
def server(adapter, mcp_config):
    return MCPServer(adapter, config=mcp_config)


def make_request(method: str, params: Optional[dict] = None, request_id: Any = 1) -> str:
    message = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        message["params"] = params
    return json.dumps(message)


def call_tool(name: str, arguments: Optional[dict] = None, request_id: Any = 1) -> str:
    params = {"name": name}
    if arguments is not None:
        params["arguments"] = arguments
    return make_request("tools/call", params, request_id)
