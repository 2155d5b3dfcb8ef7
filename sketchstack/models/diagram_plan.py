"""Graph form of an ArchitecturePlan: nodes, edges and positioned nodes."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from sketchstack.models.architecture_plan import ComponentType


class Layer(str, Enum):
    SECURITY = "Security"
    APPLICATION = "Application"
    DATA = "Data"
    INFRA = "Infra"
    OBSERVABILITY = "Observability"


# Top to bottom.
LAYER_ORDER = (
    Layer.SECURITY,
    Layer.APPLICATION,
    Layer.DATA,
    Layer.INFRA,
    Layer.OBSERVABILITY,
)

DEFAULT_LAYER = Layer.APPLICATION


class DiagramNode(BaseModel):
    id: str
    label: str
    type: ComponentType
    layer: Optional[Layer] = None


class DiagramEdge(BaseModel):
    from_: str = Field(..., alias="from")
    to: str
    label: str = ""
    protocol: str = ""

    model_config = ConfigDict(populate_by_name=True)


class DiagramPlan(BaseModel):
    nodes: List[DiagramNode] = Field(default_factory=list)
    edges: List[DiagramEdge] = Field(default_factory=list)


@dataclass(frozen=True)
class PositionedNode:
    """A DiagramNode with its top-left corner, rank (layer row) and order in the row."""

    id: str
    label: str
    type: ComponentType
    layer: Layer
    x: int
    y: int
    rank: int
    order: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "type": self.type.value,
            "layer": self.layer.value,
            "x": self.x,
            "y": self.y,
        }
