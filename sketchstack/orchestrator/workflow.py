"""Pipeline orchestration: extraction → validation → diagram plan → layout → render."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from sketchstack.agents.architect_agent import ArchitectAgent
from sketchstack.diagram.cloud_icons import normalize_provider
from sketchstack.diagram.layers import layer_of
from sketchstack.diagram.layout_engine import DEFAULT_LAYOUT, LayoutConfig, layout
from sketchstack.models.architecture_plan import ArchitecturePlan, ArchitectureStyle, normalize_style
from sketchstack.models.diagram_plan import DiagramEdge, DiagramNode, DiagramPlan
from sketchstack.renderers.drawio_renderer import render_drawio_xml
from sketchstack.renderers.excalidraw_renderer import render_excalidraw_scene
from sketchstack.utils.drawio_encode import drawio_editor_url, drawio_viewer_url


logger = logging.getLogger(__name__)


@dataclass
class RenderedArtifacts:
    drawio_xml: str
    excalidraw_scene: Dict[str, Any]
    share_url: str
    viewer_url: str


@dataclass
class WorkflowResult:
    architecture_plan: ArchitecturePlan
    diagram_plan: DiagramPlan
    artifacts: RenderedArtifacts
    cloud_provider: str = "neutral"


def apply_style_override(plan: ArchitecturePlan, style: Optional[str | ArchitectureStyle]) -> ArchitecturePlan:
    if not style:
        logger.info("Using detected style %s", plan.architecture_style.value)
        return plan
    override = ArchitectureStyle(normalize_style(style))
    logger.info("Style overridden to %s", override.value)
    return plan.model_copy(update={"architecture_style": override})


def derive_diagram_plan(plan: ArchitecturePlan) -> DiagramPlan:
    """One node per component, one edge per relationship. Edges are copied verbatim, dangling or not."""
    nodes = [
        DiagramNode(id=comp.id, label=comp.name, type=comp.type, layer=layer_of(comp.type))
        for comp in plan.components
    ]
    edges = [
        DiagramEdge(from_=rel.from_, to=rel.to, label=rel.label or "", protocol=rel.protocol or "")
        for rel in plan.relationships
    ]
    logger.info("Diagram plan: %d nodes, %d edges", len(nodes), len(edges))
    return DiagramPlan(nodes=nodes, edges=edges)


def render(
    diagram_plan: DiagramPlan,
    cloud_provider: str = "neutral",
    *,
    config: Optional[LayoutConfig] = None,
    rng: Optional[random.Random] = None,
    clock: Optional[Callable[[], int]] = None,
) -> RenderedArtifacts:
    config = config or DEFAULT_LAYOUT
    positioned = layout(diagram_plan.nodes, diagram_plan.edges, config)
    xml = render_drawio_xml(positioned, diagram_plan.edges, cloud_provider, config)
    scene = render_excalidraw_scene(positioned, diagram_plan.edges, rng=rng, clock=clock, config=config)
    return RenderedArtifacts(
        drawio_xml=xml,
        excalidraw_scene=scene,
        share_url=drawio_editor_url(xml),
        viewer_url=drawio_viewer_url(xml),
    )


class ArchitectureWorkflow:
    """Run the full generate and refine pipelines on top of an ArchitectAgent."""

    def __init__(
        self,
        agent: ArchitectAgent,
        *,
        config: Optional[LayoutConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.agent = agent
        self.config = config or DEFAULT_LAYOUT
        self._rng = rng
        self._clock = clock

    def _finish(self, plan: ArchitecturePlan, cloud_provider: str) -> WorkflowResult:
        diagram_plan = derive_diagram_plan(plan)
        artifacts = render(diagram_plan, cloud_provider, config=self.config, rng=self._rng, clock=self._clock)
        return WorkflowResult(
            architecture_plan=plan,
            diagram_plan=diagram_plan,
            artifacts=artifacts,
            cloud_provider=cloud_provider,
        )

    def generate(
        self,
        description: str,
        cloud_provider: Optional[str] = None,
        style: Optional[str | ArchitectureStyle] = None,
    ) -> WorkflowResult:
        provider = normalize_provider(cloud_provider)
        plan = self.agent.extract(description, provider)
        plan = apply_style_override(plan, style)
        return self._finish(plan, provider)

    def refine(
        self,
        existing_plan: ArchitecturePlan,
        instruction: str,
        cloud_provider: Optional[str] = None,
    ) -> WorkflowResult:
        provider = normalize_provider(cloud_provider)
        plan = self.agent.refine(existing_plan, instruction)
        return self._finish(plan, provider)
