"""Component type → architectural layer lookup."""
from __future__ import annotations

from typing import Any, Iterable, List

from sketchstack.models.architecture_plan import ComponentType
from sketchstack.models.diagram_plan import DEFAULT_LAYER, LAYER_ORDER, Layer


LAYER_BY_TYPE = {
    ComponentType.AUTH: Layer.SECURITY,
    ComponentType.WAF: Layer.SECURITY,
    ComponentType.SECRET_MANAGER: Layer.SECURITY,
    ComponentType.FRONTEND: Layer.APPLICATION,
    ComponentType.BACKEND: Layer.APPLICATION,
    ComponentType.API_GATEWAY: Layer.APPLICATION,
    ComponentType.LOAD_BALANCER: Layer.APPLICATION,
    ComponentType.SERVERLESS_FUNCTION: Layer.APPLICATION,
    ComponentType.CONTAINER: Layer.APPLICATION,
    ComponentType.PROXY: Layer.APPLICATION,
    ComponentType.SERVICE_MESH: Layer.APPLICATION,
    ComponentType.ML_MODEL: Layer.APPLICATION,
    ComponentType.SCHEDULER: Layer.APPLICATION,
    ComponentType.DATABASE: Layer.DATA,
    ComponentType.CACHE: Layer.DATA,
    ComponentType.QUEUE: Layer.DATA,
    ComponentType.VECTOR_DB: Layer.DATA,
    ComponentType.SEARCH: Layer.DATA,
    ComponentType.STREAM_PROCESSOR: Layer.DATA,
    ComponentType.STORAGE: Layer.INFRA,
    ComponentType.CDN: Layer.INFRA,
    ComponentType.DNS: Layer.INFRA,
    ComponentType.MONITORING: Layer.OBSERVABILITY,
    ComponentType.LOGGING: Layer.OBSERVABILITY,
    ComponentType.NOTIFICATION: Layer.OBSERVABILITY,
    ComponentType.OTHER: DEFAULT_LAYER,
}


def layer_of(component_type: Any) -> Layer:
    """Return the layer for a component type. Never fails; unknown types land in Application."""
    return LAYER_BY_TYPE.get(ComponentType.coerce(component_type), DEFAULT_LAYER)


def active_layers(nodes: Iterable[Any]) -> List[Layer]:
    present = {Layer(node.layer) for node in nodes}
    return [layer for layer in LAYER_ORDER if layer in present]
