"""Registry of tool-server clients and the JSON-RPC envelope the HTTP proxy accepts."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Protocol

from jsonschema import Draft202012Validator

from sketchstack.errors import InvalidRequestError, ToolProxyError, UnknownToolServerError
from sketchstack.utils.config import settings

from .client import StdioToolClient, first_text


logger = logging.getLogger(__name__)

DRAWIO_SERVER = "drawio"
EXCALIDRAW_SERVER = "excalidraw"

TOOL_CALL_ENVELOPE_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["method", "params"],
    "properties": {
        "jsonrpc": {"const": "2.0"},
        "id": {"type": ["string", "integer", "null"]},
        "method": {"const": "tools/call"},
        "params": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "arguments": {"type": "object"},
            },
        },
    },
}

_envelope_validator = Draft202012Validator(TOOL_CALL_ENVELOPE_SCHEMA)


class ToolClient(Protocol):
    async def call_tool(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]: ...


def validate_envelope(envelope: Any) -> Dict[str, Any]:
    """Raise InvalidRequestError listing every schema violation of a tool-call envelope."""
    errors = sorted(_envelope_validator.iter_errors(envelope), key=lambda e: [str(p) for p in e.path])
    if errors:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.path) or '<root>'}: {err.message}" for err in errors
        )
        raise InvalidRequestError(f"Invalid tool call envelope: {details}")
    return envelope


class ToolProxyRegistry:
    def __init__(self) -> None:
        self._clients: Dict[str, ToolClient] = {}

    def register(self, name: str, client: ToolClient) -> None:
        self._clients[name] = client

    def get(self, name: str) -> Optional[ToolClient]:
        return self._clients.get(name)

    def names(self) -> List[str]:
        return list(self._clients)

    async def call(self, server: str, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        client = self.get(server)
        if client is None:
            raise UnknownToolServerError(server)
        logger.info("Proxying %s to %s tool server", tool_name, server)
        return await client.call_tool(tool_name, arguments or {})

    async def dispatch(self, server: str, envelope: Any) -> Dict[str, Any]:
        """Handle one JSON-RPC ``tools/call`` envelope and wrap the result."""
        if self.get(server) is None:
            raise UnknownToolServerError(server)
        envelope = validate_envelope(envelope)
        params = envelope["params"]
        result = await self.call(server, params["name"], params.get("arguments"))
        return {"jsonrpc": "2.0", "id": envelope.get("id"), "result": result}

    async def open_drawio_xml(self, xml: str, *, lightbox: bool = False, dark: str = "auto") -> Dict[str, Any]:
        return await self.call(DRAWIO_SERVER, "open_drawio_xml", {"content": xml, "lightbox": lightbox, "dark": dark})

    async def share_excalidraw(self, scene: Dict[str, Any]) -> str:
        """Upload a scene through the Excalidraw server and return the share URL it answers with."""
        result = await self.call(EXCALIDRAW_SERVER, "export_to_excalidraw", {"json": json.dumps(scene)})
        url = first_text(result)
        if not url:
            raise ToolProxyError("excalidraw tool 'export_to_excalidraw' returned no share URL")
        return url


def build_default_registry() -> ToolProxyRegistry:
    registry = ToolProxyRegistry()
    common = dict(
        timeout_seconds=settings.mcp_timeout_seconds,
        max_retries=settings.mcp_max_retries,
        retry_delay_seconds=settings.mcp_retry_delay_seconds,
    )
    registry.register(
        DRAWIO_SERVER,
        StdioToolClient(DRAWIO_SERVER, settings.drawio_mcp_command, settings.drawio_mcp_args, **common),
    )
    registry.register(
        EXCALIDRAW_SERVER,
        StdioToolClient(EXCALIDRAW_SERVER, settings.excalidraw_mcp_command, settings.excalidraw_mcp_args, **common),
    )
    return registry
