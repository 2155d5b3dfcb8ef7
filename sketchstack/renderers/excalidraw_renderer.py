"""Render a positioned diagram graph as an Excalidraw scene."""
from __future__ import annotations

import logging
import random
import string
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from sketchstack.diagram.layout_engine import DEFAULT_LAYOUT, LayoutConfig, layout
from sketchstack.models.architecture_plan import ComponentType as T
from sketchstack.models.diagram_plan import DiagramEdge, DiagramPlan, PositionedNode


logger = logging.getLogger(__name__)

SCENE_TYPE = "excalidraw"
SCENE_VERSION = 2
SCENE_SOURCE = "https://excalidraw.com"
APP_STATE = {"viewBackgroundColor": "#ffffff", "gridSize": 20}

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_LENGTH = 9


@dataclass(frozen=True)
class ShapeStyle:
    background: str
    stroke: str
    shape: str


GATEWAY = ShapeStyle("#eef2ff", "#6366f1", "rectangle")
SERVICE = ShapeStyle("#ffffff", "#64748b", "rectangle")
DATABASE = ShapeStyle("#f0fdf4", "#22c55e", "ellipse")
QUEUE = ShapeStyle("#fef3c7", "#f59e0b", "rectangle")
CACHE = ShapeStyle("#fff7ed", "#ea580c", "ellipse")
STORAGE = ShapeStyle("#eff6ff", "#3b82f6", "rectangle")
OTHER = ShapeStyle("#f8fafc", "#94a3b8", "rectangle")

SHAPE_STYLES: Dict[T, ShapeStyle] = {
    T.API_GATEWAY: GATEWAY,
    T.LOAD_BALANCER: GATEWAY,
    T.PROXY: GATEWAY,
    T.SERVICE_MESH: GATEWAY,
    T.WAF: GATEWAY,
    T.CDN: GATEWAY,
    T.DNS: GATEWAY,
    T.FRONTEND: SERVICE,
    T.BACKEND: SERVICE,
    T.SERVERLESS_FUNCTION: SERVICE,
    T.CONTAINER: SERVICE,
    T.ML_MODEL: SERVICE,
    T.SCHEDULER: SERVICE,
    T.AUTH: SERVICE,
    T.DATABASE: DATABASE,
    T.VECTOR_DB: DATABASE,
    T.SEARCH: DATABASE,
    T.QUEUE: QUEUE,
    T.STREAM_PROCESSOR: QUEUE,
    T.NOTIFICATION: QUEUE,
    T.CACHE: CACHE,
    T.STORAGE: STORAGE,
    T.SECRET_MANAGER: STORAGE,
    T.MONITORING: OTHER,
    T.LOGGING: OTHER,
    T.OTHER: OTHER,
}


def shape_style(component_type: Any) -> ShapeStyle:
    return SHAPE_STYLES.get(T.coerce(component_type), OTHER)


def _now_ms() -> int:
    return int(time.time() * 1000)


class _ElementFactory:
    """Stamps ids, seeds and timestamps onto scene elements."""

    def __init__(self, rng: random.Random, clock: Callable[[], int]):
        self._rng = rng
        self._clock = clock

    def new_id(self) -> str:
        return "".join(self._rng.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))

    def base(self, element_id: str, element_type: str, x: float, y: float, width: float, height: float) -> Dict[str, Any]:
        return {
            "id": element_id,
            "type": element_type,
            "x": x,
            "y": y,
            "width": width,
            "height": height,
            "angle": 0,
            "strokeColor": "#1e293b",
            "backgroundColor": "transparent",
            "fillStyle": "solid",
            "strokeWidth": 1,
            "strokeStyle": "solid",
            "roughness": 1,
            "opacity": 100,
            "groupIds": [],
            "seed": self._rng.randint(0, 99_999),
            "version": 1,
            "versionNonce": self._rng.randint(0, 2**31 - 1),
            "isDeleted": False,
            "boundElements": [],
            "updated": self._clock(),
        }


def render_excalidraw_scene(
    nodes: Sequence[PositionedNode],
    edges: Sequence[DiagramEdge],
    *,
    rng: Optional[random.Random] = None,
    clock: Optional[Callable[[], int]] = None,
    config: Optional[LayoutConfig] = None,
) -> Dict[str, Any]:
    """Build the scene. Pass a seeded ``rng`` and a fixed ``clock`` for reproducible output."""
    config = config or DEFAULT_LAYOUT
    factory = _ElementFactory(rng or random.Random(), clock or _now_ms)
    elements: List[Dict[str, Any]] = []
    shapes: Dict[str, Dict[str, Any]] = {}

    for node in nodes:
        style = shape_style(node.type)
        shape_id = factory.new_id()
        text_id = factory.new_id()

        shape = factory.base(shape_id, style.shape, node.x, node.y, config.node_width, config.node_height)
        shape.update(
            {
                "strokeColor": style.stroke,
                "backgroundColor": style.background,
                "strokeWidth": 2,
                "roundness": {"type": 3},
                "boundElements": [{"id": text_id, "type": "text"}],
            }
        )

        label = factory.base(text_id, "text", node.x + 10, node.y + 20, config.node_width - 20, 20)
        label.update(
            {
                "text": node.label,
                "originalText": node.label,
                "fontSize": 16,
                "fontFamily": 1,
                "textAlign": "center",
                "verticalAlign": "middle",
                "containerId": shape_id,
            }
        )

        shapes.setdefault(node.id, shape)
        elements.extend([shape, label])

    for edge in edges:
        source = shapes.get(edge.from_)
        target = shapes.get(edge.to)
        if source is None or target is None:
            logger.debug("Dropping edge %s -> %s: endpoint not in diagram", edge.from_, edge.to)
            continue

        start_x = source["x"] + source["width"] / 2
        start_y = source["y"] + source["height"] / 2
        end_x = target["x"] + target["width"] / 2
        end_y = target["y"] + target["height"] / 2

        arrow_id = factory.new_id()
        arrow = factory.base(arrow_id, "arrow", start_x, start_y, end_x - start_x, end_y - start_y)
        arrow.update(
            {
                "strokeColor": "#64748b",
                "strokeWidth": 2,
                "points": [[0, 0], [end_x - start_x, end_y - start_y]],
                "startBinding": {"elementId": source["id"], "focus": 0.1, "gap": 1},
                "endBinding": {"elementId": target["id"], "focus": 0.1, "gap": 1},
                "startArrowhead": None,
                "endArrowhead": "arrow",
            }
        )
        source["boundElements"].append({"id": arrow_id, "type": "arrow"})
        if target is not source:
            target["boundElements"].append({"id": arrow_id, "type": "arrow"})
        elements.append(arrow)

        if edge.label:
            text = factory.base(factory.new_id(), "text", (start_x + end_x) / 2, (start_y + end_y) / 2, 100, 20)
            text.update(
                {
                    "strokeColor": "#475569",
                    "backgroundColor": "#ffffff",
                    "text": edge.label,
                    "originalText": edge.label,
                    "fontSize": 12,
                    "fontFamily": 1,
                    "textAlign": "center",
                    "verticalAlign": "middle",
                    "containerId": None,
                }
            )
            elements.append(text)

    return {
        "type": SCENE_TYPE,
        "version": SCENE_VERSION,
        "source": SCENE_SOURCE,
        "elements": elements,
        "appState": dict(APP_STATE),
    }


def build_excalidraw_scene(
    plan: DiagramPlan,
    *,
    rng: Optional[random.Random] = None,
    clock: Optional[Callable[[], int]] = None,
    config: Optional[LayoutConfig] = None,
) -> Dict[str, Any]:
    config = config or DEFAULT_LAYOUT
    return render_excalidraw_scene(layout(plan.nodes, plan.edges, config), plan.edges, rng=rng, clock=clock, config=config)
