"""REST API server."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, List

from fastapi import Body, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from sketchstack import __version__
from sketchstack.agents.architect_agent import ArchitectAgent
from sketchstack.diagram.cloud_icons import CLOUD_PROVIDERS
from sketchstack.errors import SketchStackError
from sketchstack.models.architecture_plan import ARCHITECTURE_STYLES, COMPONENT_TYPES
from sketchstack.models.diagram_plan import LAYER_ORDER
from sketchstack.orchestrator.workflow import ArchitectureWorkflow
from sketchstack.presets import get_preset, list_presets
from sketchstack.schemas import (
    ConfigResponse,
    DiagramResponse,
    ExportLinksResponse,
    GenerateRequest,
    OpenInDrawioResponse,
    PresetResponse,
    PresetSummary,
    RefineRequest,
    SessionRequest,
    ShareResponse,
    ToolCallResponse,
)
from sketchstack.services.session_service import SessionService
from sketchstack.services.session_store import InMemorySessionStore
from sketchstack.tool_proxy.registry import ToolProxyRegistry, build_default_registry
from sketchstack.utils.config import settings
from sketchstack.utils.openai_client import ChatClient


logger = logging.getLogger(__name__)

app = FastAPI(title="SketchStack API", version=__version__)


@lru_cache(maxsize=1)
def get_session_service() -> SessionService:
    workflow = ArchitectureWorkflow(ArchitectAgent(ChatClient()))
    store = InMemorySessionStore(
        ttl_seconds=settings.session_ttl_seconds,
        max_entries=settings.session_max_entries,
    )
    return SessionService(workflow, store)


@lru_cache(maxsize=1)
def get_tool_registry() -> ToolProxyRegistry:
    return build_default_registry()


def _error(status_code: int, kind: str, details: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": kind, "details": details})


@app.exception_handler(SketchStackError)
async def sketchstack_error_handler(request: Request, exc: SketchStackError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s: %s", request.method, request.url.path, exc.kind, exc)
    return _error(exc.status_code, exc.kind, str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body') or 'body'}: {err.get('msg')}"
        for err in exc.errors()
    )
    return _error(400, "invalid_request", details)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "internal_error", str(exc) or type(exc).__name__)


@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__}


@app.post("/api/generate", response_model=DiagramResponse)
def generate_api(payload: GenerateRequest, service: SessionService = Depends(get_session_service)):
    record = service.create(payload.description or "", payload.cloud_provider, payload.architecture_style)
    return DiagramResponse.from_record(record)


@app.post("/api/refine", response_model=DiagramResponse)
def refine_api(payload: RefineRequest, service: SessionService = Depends(get_session_service)):
    record = service.refine(payload.session_id or "", payload.instruction or "", payload.cloud_provider)
    return DiagramResponse.from_record(record)


@app.get("/api/export/{export_format}")
def export_api(
    export_format: str,
    session_id: str = Query("", alias="sessionId"),
    service: SessionService = Depends(get_session_service),
):
    result = service.export(session_id, export_format)
    if result.filename is None:
        return ExportLinksResponse(
            format=result.format,
            message=result.message or "",
            drawio_url=result.share_url or "",
            viewer_url=result.viewer_url or "",
        )
    headers = {"Content-Disposition": f'attachment; filename="{result.filename}"'}
    if isinstance(result.content, str):
        return Response(content=result.content, media_type=result.media_type, headers=headers)
    return JSONResponse(content=result.content, headers=headers)


@app.get("/api/presets", response_model=List[PresetSummary])
def presets_api():
    return list_presets()


@app.get("/api/presets/{name}", response_model=PresetResponse)
def preset_detail_api(name: str):
    return get_preset(name)


@app.get("/api/config", response_model=ConfigResponse)
def config_api():
    return ConfigResponse(
        architecture_styles=list(ARCHITECTURE_STYLES),
        cloud_providers=list(CLOUD_PROVIDERS),
        layers=[layer.value for layer in LAYER_ORDER],
        component_types=list(COMPONENT_TYPES),
        default_model=settings.llm_model,
    )


@app.post("/api/open-in-drawio", response_model=OpenInDrawioResponse)
async def open_in_drawio_api(
    payload: SessionRequest,
    service: SessionService = Depends(get_session_service),
    registry: ToolProxyRegistry = Depends(get_tool_registry),
):
    record = service.get(payload.session_id)
    result = await registry.open_drawio_xml(record.drawio_xml)
    return OpenInDrawioResponse(result=result)


@app.post("/api/excalidraw/share", response_model=ShareResponse)
async def excalidraw_share_api(
    payload: SessionRequest,
    service: SessionService = Depends(get_session_service),
    registry: ToolProxyRegistry = Depends(get_tool_registry),
):
    record = service.get(payload.session_id)
    url = await registry.share_excalidraw(record.excalidraw_scene)
    return ShareResponse(url=url)


@app.post("/api/mcp/{server}", response_model=ToolCallResponse)
async def tool_proxy_api(
    server: str,
    envelope: Dict[str, Any] = Body(...),
    registry: ToolProxyRegistry = Depends(get_tool_registry),
):
    return await registry.dispatch(server, envelope)
