"""Pydantic schemas for API."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from sketchstack.services.session_store import SessionRecord


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateRequest(CamelModel):
    description: Optional[str] = None
    cloud_provider: Optional[str] = None
    architecture_style: Optional[str] = None


class RefineRequest(CamelModel):
    session_id: Optional[str] = None
    instruction: Optional[str] = None
    cloud_provider: Optional[str] = None


class SessionRequest(CamelModel):
    session_id: str


class DiagramResponse(CamelModel):
    session_id: str
    architecture_plan: Dict[str, Any]
    diagram_plan: Dict[str, Any]
    rendered_document: str
    excalidraw_scene: Dict[str, Any]
    share_url: str
    viewer_url: str

    @classmethod
    def from_record(cls, record: SessionRecord) -> "DiagramResponse":
        return cls(
            session_id=record.id,
            architecture_plan=record.architecture_plan.model_dump(mode="json", by_alias=True),
            diagram_plan=record.diagram_plan.model_dump(mode="json", by_alias=True),
            rendered_document=record.drawio_xml,
            excalidraw_scene=record.excalidraw_scene,
            share_url=record.share_url,
            viewer_url=record.viewer_url,
        )


class ExportLinksResponse(CamelModel):
    format: str
    message: str
    drawio_url: str
    viewer_url: str


class ConfigResponse(CamelModel):
    architecture_styles: List[str]
    cloud_providers: List[str]
    layers: List[str]
    component_types: List[str]
    default_model: str


class PresetSummary(CamelModel):
    id: str
    name: str


class PresetResponse(CamelModel):
    id: str
    name: str
    description: str
    cloud_provider: str
    architecture_style: str


class ShareResponse(CamelModel):
    url: str


class ToolCallResponse(BaseModel):
    jsonrpc: str = "2.0"
    id: Optional[Any] = None
    result: Dict[str, Any]


class OpenInDrawioResponse(BaseModel):
    success: bool = True
    result: Dict[str, Any]
