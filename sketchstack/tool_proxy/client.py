"""Stdio client for an external MCP tool server (draw.io, Excalidraw).

Every call runs in its own server session: the subprocess is started, the
session initialized, the tool called and everything torn down again inside the
task that enforces the timeout. A retry therefore always starts a fresh server.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import anyio
from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client
from mcp.shared.exceptions import McpError

from sketchstack.errors import ToolProxyError, UpstreamTimeoutError, UpstreamUnavailableError


logger = logging.getLogger(__name__)

# Failures of the server process or its pipes. Only these are retried.
TRANSIENT_ERRORS = (
    OSError,
    EOFError,
    asyncio.TimeoutError,
    McpError,
    anyio.ClosedResourceError,
    anyio.BrokenResourceError,
    anyio.EndOfStream,
)


class StdioToolClient:
    def __init__(
        self,
        name: str,
        command: str,
        args: Optional[List[str]] = None,
        *,
        timeout_seconds: float = 30.0,
        max_retries: int = 2,
        retry_delay_seconds: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.name = name
        self.params = StdioServerParameters(command=command, args=list(args or []))
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(1, max_retries)
        self.retry_delay_seconds = retry_delay_seconds
        self._sleep = sleep

    async def _call_once(self, tool_name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Starting %s tool server: %s %s", self.name, self.params.command, " ".join(self.params.args))
        async with stdio_client(self.params) as (read, write):
            async with ClientSession(read, write) as session:
                await session.initialize()
                result = await session.call_tool(tool_name, arguments)
        payload = result.model_dump(mode="json", by_alias=True, exclude_none=True)
        if payload.get("isError"):
            raise ToolProxyError(f"{self.name} tool '{tool_name}' failed: {first_text(payload) or 'unknown error'}")
        return payload

    async def call_tool(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Call ``tool_name`` and return the MCP result as a JSON-ready dict."""
        arguments = arguments or {}
        last_error: Optional[BaseException] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                return await asyncio.wait_for(self._call_once(tool_name, arguments), self.timeout_seconds)
            except ToolProxyError:
                raise
            except Exception as exc:
                if not is_transient(exc):
                    raise
                last_error = exc
                logger.warning(
                    "%s tool call %s attempt %d/%d failed: %s",
                    self.name, tool_name, attempt, self.max_retries, _describe(exc),
                )
                if attempt < self.max_retries:
                    await self._sleep(self.retry_delay_seconds)

        message = f"{self.name} tool '{tool_name}' failed after {self.max_retries} attempts: {_describe(last_error)}"
        if isinstance(last_error, asyncio.TimeoutError):
            raise UpstreamTimeoutError(message, attempts=self.max_retries, last_error=str(last_error))
        raise UpstreamUnavailableError(message, attempts=self.max_retries, last_error=str(last_error))


def first_text(result: Dict[str, Any]) -> Optional[str]:
    """Text of the first ``text`` content item of a tool result, if any."""
    for item in result.get("content") or []:
        if isinstance(item, dict) and item.get("type") == "text":
            return item.get("text")
    return None


def is_transient(exc: BaseException) -> bool:
    """True for connection-level failures, including task groups made only of them."""
    nested = getattr(exc, "exceptions", None)
    if isinstance(nested, (list, tuple)) and nested:
        return all(is_transient(inner) for inner in nested)
    return isinstance(exc, TRANSIENT_ERRORS)


def _describe(exc: Optional[BaseException]) -> str:
    return str(exc) or type(exc).__name__
