"""Core ArchitecturePlan model (framework-agnostic)."""
from __future__ import annotations

from enum import Enum
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ComponentType(str, Enum):
    FRONTEND = "frontend"
    BACKEND = "backend"
    API_GATEWAY = "api_gateway"
    LOAD_BALANCER = "load_balancer"
    DATABASE = "database"
    CACHE = "cache"
    QUEUE = "queue"
    STORAGE = "storage"
    CDN = "cdn"
    AUTH = "auth"
    SERVERLESS_FUNCTION = "serverless_function"
    CONTAINER = "container"
    SEARCH = "search"
    ML_MODEL = "ml_model"
    VECTOR_DB = "vector_db"
    STREAM_PROCESSOR = "stream_processor"
    MONITORING = "monitoring"
    LOGGING = "logging"
    NOTIFICATION = "notification"
    SCHEDULER = "scheduler"
    PROXY = "proxy"
    SERVICE_MESH = "service_mesh"
    SECRET_MANAGER = "secret_manager"
    DNS = "dns"
    WAF = "waf"
    OTHER = "other"

    @classmethod
    def coerce(cls, value: Any) -> "ComponentType":
        """Map any input to a known kind; unrecognized values become OTHER."""
        if isinstance(value, cls):
            return value
        token = str(value or "").strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(token)
        except ValueError:
            return cls.OTHER


class ArchitectureStyle(str, Enum):
    MICROSERVICES = "microservices"
    SERVERLESS = "serverless"
    MONOLITH = "monolith"
    EVENT_DRIVEN = "event-driven"
    RAG_PIPELINE = "rag-pipeline"
    DATA_PIPELINE = "data-pipeline"
    AGENT_WORKFLOW = "agent-workflow"
    LAYERED = "layered"
    HEXAGONAL = "hexagonal"


COMPONENT_TYPES = [t.value for t in ComponentType]
ARCHITECTURE_STYLES = [s.value for s in ArchitectureStyle]


def normalize_style(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower().replace("_", "-").replace(" ", "-")
    return value


class Component(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: ComponentType
    description: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> ComponentType:
        if not isinstance(value, (str, ComponentType)):
            raise ValueError("type must be a string")
        return ComponentType.coerce(value)


class Relationship(BaseModel):
    from_: str = Field(..., alias="from", min_length=1)
    to: str = Field(..., min_length=1)
    label: str = ""
    protocol: str = ""

    model_config = ConfigDict(populate_by_name=True)


class DataFlow(BaseModel):
    from_: str = Field(..., alias="from", min_length=1)
    to: str = Field(..., min_length=1)
    data: str = ""

    model_config = ConfigDict(populate_by_name=True)


class InfraElement(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: str = ""


class ArchitecturePlan(BaseModel):
    components: List[Component] = Field(..., min_length=1)
    relationships: List[Relationship] = Field(default_factory=list)
    data_flows: List[DataFlow] = Field(default_factory=list)
    infra: List[InfraElement] = Field(default_factory=list)
    constraints: List[str] = Field(default_factory=list)
    architecture_style: ArchitectureStyle = ArchitectureStyle.LAYERED

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("architecture_style", mode="before")
    @classmethod
    def _normalize_style(cls, value: Any) -> Any:
        return normalize_style(value)
