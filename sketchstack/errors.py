"""Error taxonomy surfaced by the pipeline and the HTTP API.

Every error carries a short machine-checkable ``kind`` and the HTTP status the
API answers with. The message is the human-readable detail.
"""
from __future__ import annotations

from typing import Optional


class SketchStackError(Exception):
    kind = "internal_error"
    status_code = 500


class InvalidRequestError(SketchStackError):
    kind = "invalid_request"
    status_code = 400


class PlanValidationError(SketchStackError):
    """Model output never matched the schema within the repair budget."""

    kind = "validation_error"
    status_code = 500

    def __init__(self, message: str, *, attempts: int, last_error: str):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class UpstreamUnavailableError(SketchStackError):
    """An external collaborator (chat endpoint, tool server) kept failing."""

    kind = "upstream_unavailable"
    status_code = 500

    def __init__(self, message: str, *, attempts: int = 1, last_error: Optional[str] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class UpstreamTimeoutError(UpstreamUnavailableError):
    kind = "upstream_timeout"


class SessionNotFoundError(SketchStackError):
    kind = "session_not_found"
    status_code = 404

    def __init__(self, session_id: Optional[str]):
        super().__init__(f"Session not found: {session_id}. Generate a diagram first.")
        self.session_id = session_id


class UnsupportedFormatError(SketchStackError):
    kind = "unsupported_format"
    status_code = 400

    def __init__(self, export_format: str):
        super().__init__(f"Unsupported format: {export_format}")
        self.export_format = export_format


class PresetNotFoundError(SketchStackError):
    kind = "preset_not_found"
    status_code = 404

    def __init__(self, name: str):
        super().__init__(f"Preset not found: {name}")
        self.name = name


class ToolProxyError(SketchStackError):
    """The tool server answered, but reported the call as failed."""

    kind = "tool_proxy_error"
    status_code = 500


class UnknownToolServerError(SketchStackError):
    kind = "unknown_server"
    status_code = 404

    def __init__(self, server: str):
        super().__init__(f"Unknown tool server: {server}")
        self.server = server
