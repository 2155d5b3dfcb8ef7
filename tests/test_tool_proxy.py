import asyncio
from contextlib import asynccontextmanager

import pytest
from mcp.shared.exceptions import McpError
from mcp.types import CallToolResult, ErrorData, TextContent

from sketchstack.errors import InvalidRequestError, ToolProxyError, UpstreamTimeoutError, UpstreamUnavailableError
from sketchstack.tool_proxy import client as client_module
from sketchstack.tool_proxy.client import StdioToolClient, first_text, is_transient
from sketchstack.tool_proxy.registry import ToolProxyRegistry, validate_envelope


class FakeSession:
    results = []
    calls = []

    def __init__(self, read, write):
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def initialize(self):
        pass

    async def call_tool(self, name, arguments):
        FakeSession.calls.append((name, arguments))
        outcome = FakeSession.results.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@asynccontextmanager
async def fake_stdio_client(params):
    yield ("read", "write")


@pytest.fixture
def fake_server(monkeypatch):
    FakeSession.results = []
    FakeSession.calls = []
    monkeypatch.setattr(client_module, "stdio_client", fake_stdio_client)
    monkeypatch.setattr(client_module, "ClientSession", FakeSession)
    return FakeSession


def _client(**kwargs):
    sleeps = []

    async def sleep(seconds):
        sleeps.append(seconds)

    options = dict(timeout_seconds=5, max_retries=2, retry_delay_seconds=2.0, sleep=sleep)
    options.update(kwargs)
    return StdioToolClient("drawio", "npx", ["@drawio/mcp"], **options), sleeps


def _text_result(text, is_error=False):
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def test_call_tool_returns_json_ready_result(fake_server):
    fake_server.results.append(_text_result("opened"))
    client, _ = _client()
    result = asyncio.run(client.call_tool("open_drawio_xml", {"content": "<x/>"}))
    assert result["content"] == [{"type": "text", "text": "opened"}]
    assert first_text(result) == "opened"
    assert fake_server.calls == [("open_drawio_xml", {"content": "<x/>"})]


def test_retries_with_fixed_delay(fake_server):
    fake_server.results.extend([ConnectionError("pipe closed"), _text_result("ok")])
    client, sleeps = _client()
    assert first_text(asyncio.run(client.call_tool("open_drawio_xml"))) == "ok"
    assert sleeps == [2.0]


def test_exhausted_retries_raise_unavailable(fake_server):
    fake_server.results.extend([ConnectionError("pipe closed")] * 2)
    client, sleeps = _client()
    with pytest.raises(UpstreamUnavailableError) as excinfo:
        asyncio.run(client.call_tool("open_drawio_xml"))
    assert excinfo.value.attempts == 2
    assert "pipe closed" in str(excinfo.value)
    assert sleeps == [2.0]


def test_slow_server_times_out(monkeypatch):
    async def hang(self, tool_name, arguments):
        await asyncio.sleep(1)

    monkeypatch.setattr(StdioToolClient, "_call_once", hang)
    client, _ = _client(timeout_seconds=0.01, max_retries=1)
    with pytest.raises(UpstreamTimeoutError):
        asyncio.run(client.call_tool("open_drawio_xml"))


def test_tool_error_is_not_retried(fake_server):
    fake_server.results.append(_text_result("bad xml", is_error=True))
    client, sleeps = _client()
    with pytest.raises(ToolProxyError, match="bad xml"):
        asyncio.run(client.call_tool("open_drawio_xml"))
    assert sleeps == []


def test_programming_errors_are_not_retried(fake_server):
    fake_server.results.append(AttributeError("'CallToolResult' object has no attribute 'x'"))
    client, sleeps = _client()
    with pytest.raises(AttributeError):
        asyncio.run(client.call_tool("open_drawio_xml"))
    assert sleeps == []
    assert len(fake_server.calls) == 1


def test_error_flag_is_read_from_serialized_result(fake_server):
    class DumpOnlyResult:
        def model_dump(self, **kwargs):
            assert kwargs["by_alias"] is True
            return {"content": [{"type": "text", "text": "render failed"}], "isError": True}

    fake_server.results.append(DumpOnlyResult())
    client, sleeps = _client()
    with pytest.raises(ToolProxyError, match="render failed"):
        asyncio.run(client.call_tool("open_drawio_xml"))
    assert sleeps == []


def test_transient_error_classification():
    assert is_transient(ConnectionError("pipe closed"))
    assert is_transient(asyncio.TimeoutError())
    assert is_transient(McpError(ErrorData(code=-32000, message="Connection closed")))
    assert not is_transient(AttributeError("isError"))
    assert not is_transient(TypeError("bad arguments"))


def test_envelope_validation():
    good = {"method": "tools/call", "params": {"name": "open_drawio_xml", "arguments": {}}}
    assert validate_envelope(good) is good
    for bad in ({}, {"method": "tools/call"}, {"method": "tools/call", "params": {"name": ""}}, []):
        with pytest.raises(InvalidRequestError):
            validate_envelope(bad)


def test_share_without_text_content_fails():
    class EmptyClient:
        async def call_tool(self, tool_name, arguments=None):
            return {"content": []}

    registry = ToolProxyRegistry()
    registry.register("excalidraw", EmptyClient())
    with pytest.raises(ToolProxyError):
        asyncio.run(registry.share_excalidraw({"type": "excalidraw"}))
