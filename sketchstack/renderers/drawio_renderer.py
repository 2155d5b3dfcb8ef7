"""Render a positioned diagram graph as a draw.io (mxGraph) XML document.

Layout of the document:
  - cells 0 and 1 are the root and the default parent;
  - one swimlane container per active layer, sized to its nodes;
  - one cell per node (two for provider icons: the icon and a caption),
    positioned relative to its layer container;
  - one connector per edge whose endpoints both resolve.
Cell ids grow monotonically from 2 in that order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
from xml.sax.saxutils import escape

from sketchstack.diagram.cloud_icons import NEUTRAL, icon_style, is_provider_shape
from sketchstack.diagram.layers import active_layers
from sketchstack.diagram.layout_engine import DEFAULT_LAYOUT, LayoutConfig, layout
from sketchstack.models.diagram_plan import DiagramEdge, DiagramPlan, Layer, PositionedNode


logger = logging.getLogger(__name__)

LAYER_PAD_X = 20
LAYER_PAD_TOP = 30
LAYER_PAD_BOTTOM = 20
ICON_SIZE = 60
CAPTION_HEIGHT = 20

LAYER_STYLE = (
    "swimlane;startSize=25;fillColor=#f8fafc;strokeColor=#e2e8f0;fontColor=#64748b;fontStyle=1;"
    "fontSize=12;rounded=1;shadow=0;opacity=100;spacingLeft=10;"
)
BOX_SUFFIX = "fillColor=#ffffff;strokeColor=#94a3b8;strokeWidth=1.5;fontColor=#0f172a;shadow=1;"
ICON_SUFFIX = "fontColor=#0f172a;"
NODE_SUFFIX = "whiteSpace=wrap;html=1;fontSize=11;fontFamily=Helvetica;"
CAPTION_STYLE = (
    "text;html=1;align=center;verticalAlign=top;resizable=0;points=[];autosize=1;"
    "strokeColor=none;fillColor=none;fontSize=10;fontColor=#475569;"
)
EDGE_STYLE = (
    "edgeStyle=orthogonalEdgeStyle;rounded=1;orthogonalLoop=1;jettySize=auto;html=1;curved=1;"
    "strokeWidth=2;fontSize=10;fontColor=#475569;strokeColor=#64748b;labelBackgroundColor=#f8fafc;"
)

SIDE_RIGHT = "exitX=1;exitY=0.5;entryX=0;entryY=0.5;"
SIDE_LEFT = "exitX=0;exitY=0.5;entryX=1;entryY=0.5;"
LOOP_BOTTOM = "exitX=0.5;exitY=1;entryX=0.5;entryY=1;"
LOOP_TOP = "exitX=0.5;exitY=0;entryX=0.5;entryY=0;"
DOWNWARD = "exitX=0.5;exitY=1;entryX=0.5;entryY=0;"
UPWARD = "exitX=0.5;exitY=0;entryX=0.5;entryY=1;"

HEADER = (
    '<mxGraphModel dx="1422" dy="794" grid="1" gridSize="10" guides="1" tooltips="1" connect="1" '
    'arrows="1" fold="1" page="1" pageScale="1" pageWidth="1600" pageHeight="1200" math="0" shadow="1">'
)


def esc_xml(value: object) -> str:
    return escape(str(value), {'"': "&quot;", "'": "&apos;"})


@dataclass(frozen=True)
class LayerBox:
    x: int
    y: int
    width: int
    height: int


def layer_box(members: Sequence[PositionedNode], config: LayoutConfig) -> LayerBox:
    min_x = min(n.x for n in members) - LAYER_PAD_X
    min_y = min(n.y for n in members) - LAYER_PAD_TOP
    max_x = max(n.x + config.node_width for n in members) + LAYER_PAD_X
    max_y = max(n.y + config.node_height for n in members) + LAYER_PAD_BOTTOM
    return LayerBox(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)


def edge_routing(source: PositionedNode, target: PositionedNode, config: LayoutConfig) -> str:
    """Exit/entry anchors for a connector, chosen from the endpoints' relative placement."""
    if source.layer == target.layer:
        adjacent = abs(source.x - target.x) < (config.node_width + config.horizontal_spacing * 1.5)
        if adjacent:
            return SIDE_RIGHT if source.x < target.x else SIDE_LEFT
        # Long jumps inside a row loop around the nodes in between.
        return LOOP_BOTTOM if source.x < target.x else LOOP_TOP
    return DOWNWARD if source.y < target.y else UPWARD


def edge_label(edge: DiagramEdge) -> str:
    label = esc_xml(edge.label) if edge.label else ""
    protocol = f" [{esc_xml(edge.protocol)}]" if edge.protocol else ""
    return f"{label}{protocol}".strip()


def _vertex(cell_id: int, value: str, style: str, parent: int, x: int, y: int, width: int, height: int) -> str:
    return (
        f'    <mxCell id="{cell_id}" value="{value}" style="{style}" vertex="1" parent="{parent}">'
        f'\n      <mxGeometry x="{x}" y="{y}" width="{width}" height="{height}" as="geometry"/>'
        f"\n    </mxCell>"
    )


def render_drawio_xml(
    nodes: Sequence[PositionedNode],
    edges: Sequence[DiagramEdge],
    cloud_provider: str = NEUTRAL,
    config: Optional[LayoutConfig] = None,
) -> str:
    config = config or DEFAULT_LAYOUT
    cells: List[str] = []
    next_id = 2

    boxes: Dict[Layer, LayerBox] = {}
    layer_cell: Dict[Layer, int] = {}
    for layer in active_layers(nodes):
        box = layer_box([n for n in nodes if n.layer == layer], config)
        boxes[layer] = box
        layer_cell[layer] = next_id
        cells.append(
            _vertex(next_id, f"{esc_xml(layer.value)} Layer", LAYER_STYLE, 1, box.x, box.y, box.width, box.height)
        )
        next_id += 1

    node_cell: Dict[str, int] = {}
    node_by_id: Dict[str, PositionedNode] = {}
    for node in nodes:
        style = icon_style(node.type, cloud_provider)
        style += BOX_SUFFIX if "shape=mxgraph." not in style else ICON_SUFFIX
        provider_shape = is_provider_shape(node.type, cloud_provider)
        width = ICON_SIZE if provider_shape else config.node_width
        height = ICON_SIZE if provider_shape else config.node_height

        box = boxes[node.layer]
        rel_x = node.x - box.x
        rel_y = node.y - box.y
        parent = layer_cell[node.layer]

        node_cell.setdefault(node.id, next_id)
        node_by_id.setdefault(node.id, node)
        cells.append(
            _vertex(next_id, esc_xml(node.label), f"{style}{NODE_SUFFIX}", parent, rel_x, rel_y, width, height)
        )
        next_id += 1

        if provider_shape:
            cells.append(
                _vertex(
                    next_id,
                    esc_xml(node.label),
                    CAPTION_STYLE,
                    parent,
                    rel_x - 10,
                    rel_y + height + 2,
                    width + 20,
                    CAPTION_HEIGHT,
                )
            )
            next_id += 1

    for edge in edges:
        source = node_by_id.get(edge.from_)
        target = node_by_id.get(edge.to)
        if source is None or target is None:
            logger.debug("Dropping edge %s -> %s: endpoint not in diagram", edge.from_, edge.to)
            continue
        style = EDGE_STYLE + edge_routing(source, target, config)
        cells.append(
            f'    <mxCell id="{next_id}" value="{edge_label(edge)}" style="{style}" edge="1" parent="1" '
            f'source="{node_cell[edge.from_]}" target="{node_cell[edge.to]}">'
            f'\n      <mxGeometry relative="1" as="geometry"/>'
            f"\n    </mxCell>"
        )
        next_id += 1

    body = "\n".join(cells)
    return (
        f"{HEADER}\n"
        f"  <root>\n"
        f'    <mxCell id="0"/>\n'
        f'    <mxCell id="1" parent="0"/>\n'
        f"{body}\n"
        f"  </root>\n"
        f"</mxGraphModel>"
    )


def build_drawio_xml(
    plan: DiagramPlan,
    cloud_provider: str = NEUTRAL,
    config: Optional[LayoutConfig] = None,
) -> str:
    config = config or DEFAULT_LAYOUT
    return render_drawio_xml(layout(plan.nodes, plan.edges, config), plan.edges, cloud_provider, config)
