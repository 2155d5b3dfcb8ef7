"""Session orchestration: generate, refine and export diagrams keyed by session id."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from sketchstack.errors import InvalidRequestError, SessionNotFoundError, UnsupportedFormatError
from sketchstack.models.architecture_plan import ArchitectureStyle, normalize_style
from sketchstack.orchestrator.workflow import ArchitectureWorkflow, WorkflowResult
from sketchstack.services.session_store import SessionRecord, SessionStore, new_session_id


logger = logging.getLogger(__name__)

DRAWIO_FILENAME = "architecture.drawio"
EXCALIDRAW_FILENAME = "architecture.excalidraw"

DOCUMENT_FORMATS = ("xml", "drawio")
SCENE_FORMATS = ("excalidraw",)
IMAGE_FORMATS = ("png", "svg", "pdf")
EXPORT_FORMATS = DOCUMENT_FORMATS + SCENE_FORMATS + IMAGE_FORMATS


@dataclass
class ExportResult:
    format: str
    media_type: str = "application/json"
    filename: Optional[str] = None
    content: Any = None
    message: Optional[str] = None
    share_url: Optional[str] = None
    viewer_url: Optional[str] = None


def _checked_style(style: Optional[str]) -> Optional[ArchitectureStyle]:
    if not style:
        return None
    try:
        return ArchitectureStyle(normalize_style(style))
    except ValueError:
        raise InvalidRequestError(f"Unknown architecture style: {style}") from None


class SessionService:
    def __init__(self, workflow: ArchitectureWorkflow, store: SessionStore) -> None:
        self.workflow = workflow
        self.store = store

    def get(self, session_id: str) -> SessionRecord:
        record = self.store.get(session_id) if session_id else None
        if record is None:
            raise SessionNotFoundError(session_id)
        return record

    def create(
        self,
        description: str,
        cloud_provider: Optional[str] = None,
        style: Optional[str] = None,
    ) -> SessionRecord:
        if not description or not description.strip():
            raise InvalidRequestError("Description is required")
        override = _checked_style(style)

        result = self.workflow.generate(description, cloud_provider, override)
        record = SessionRecord(
            id=new_session_id(),
            architecture_plan=result.architecture_plan,
            diagram_plan=result.diagram_plan,
            drawio_xml=result.artifacts.drawio_xml,
            excalidraw_scene=result.artifacts.excalidraw_scene,
            cloud_provider=result.cloud_provider,
            description=description,
            share_url=result.artifacts.share_url,
            viewer_url=result.artifacts.viewer_url,
        )
        self.store.put(record)
        logger.info("Created session %s (%d nodes)", record.id, len(record.diagram_plan.nodes))
        return record

    def refine(self, session_id: str, instruction: str, cloud_provider: Optional[str] = None) -> SessionRecord:
        if not instruction or not instruction.strip():
            raise InvalidRequestError("Instruction is required")
        self.get(session_id)

        with self.store.lock(session_id):
            record = self.get(session_id)
            provider = cloud_provider or record.cloud_provider
            result = self.workflow.refine(record.architecture_plan, instruction, provider)
            self._apply(record, result)
            self.store.put(record)

        logger.info("Refined session %s (%d nodes)", record.id, len(record.diagram_plan.nodes))
        return record

    @staticmethod
    def _apply(record: SessionRecord, result: WorkflowResult) -> None:
        record.architecture_plan = result.architecture_plan
        record.diagram_plan = result.diagram_plan
        record.drawio_xml = result.artifacts.drawio_xml
        record.excalidraw_scene = result.artifacts.excalidraw_scene
        record.share_url = result.artifacts.share_url
        record.viewer_url = result.artifacts.viewer_url
        record.cloud_provider = result.cloud_provider
        record.updated_at = time.time()

    def export(self, session_id: str, export_format: str) -> ExportResult:
        fmt = (export_format or "").lower()
        if fmt not in EXPORT_FORMATS:
            raise UnsupportedFormatError(export_format)
        record = self.get(session_id)

        if fmt in DOCUMENT_FORMATS:
            return ExportResult(
                format=fmt,
                media_type="application/xml",
                filename=DRAWIO_FILENAME,
                content=record.drawio_xml,
            )
        if fmt in SCENE_FORMATS:
            return ExportResult(format=fmt, filename=EXCALIDRAW_FILENAME, content=record.excalidraw_scene)
        return ExportResult(
            format=fmt,
            message=f"To export as {fmt.upper()}, open the diagram in draw.io and use File > Export As > {fmt.upper()}",
            share_url=record.share_url,
            viewer_url=record.viewer_url,
        )
