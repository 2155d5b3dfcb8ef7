"""draw.io style strings per component type and cloud provider."""
from __future__ import annotations

from typing import Any, Dict

from sketchstack.models.architecture_plan import ComponentType as T


CLOUD_PROVIDERS = ["aws", "gcp", "azure", "neutral"]
NEUTRAL = "neutral"

AWS_ICONS: Dict[T, str] = {
    T.SERVERLESS_FUNCTION: "shape=mxgraph.aws4.lambda_function;",
    T.STORAGE: "shape=mxgraph.aws4.s3;",
    T.DATABASE: "shape=mxgraph.aws4.dynamodb;",
    T.API_GATEWAY: "shape=mxgraph.aws4.api_gateway;",
    T.QUEUE: "shape=mxgraph.aws4.sqs;",
    T.MONITORING: "shape=mxgraph.aws4.cloudwatch;",
    T.CACHE: "shape=mxgraph.aws4.elasticache;",
    T.CDN: "shape=mxgraph.aws4.cloudfront;",
    T.LOAD_BALANCER: "shape=mxgraph.aws4.elastic_load_balancing;",
    T.CONTAINER: "shape=mxgraph.aws4.ecs;",
    T.AUTH: "shape=mxgraph.aws4.cognito;",
    T.SEARCH: "shape=mxgraph.aws4.opensearch;",
    T.NOTIFICATION: "shape=mxgraph.aws4.sns;",
    T.STREAM_PROCESSOR: "shape=mxgraph.aws4.kinesis;",
    T.SECRET_MANAGER: "shape=mxgraph.aws4.secrets_manager;",
    T.DNS: "shape=mxgraph.aws4.route_53;",
    T.WAF: "shape=mxgraph.aws4.waf;",
    T.LOGGING: "shape=mxgraph.aws4.cloudwatch;",
}

GCP_ICONS: Dict[T, str] = {
    T.SERVERLESS_FUNCTION: "shape=mxgraph.gcp2.cloud_functions;",
    T.CONTAINER: "shape=mxgraph.gcp2.cloud_run;",
    T.QUEUE: "shape=mxgraph.gcp2.cloud_pubsub;",
    T.DATABASE: "shape=mxgraph.gcp2.cloud_sql;",
    T.STORAGE: "shape=mxgraph.gcp2.cloud_storage;",
    T.API_GATEWAY: "shape=mxgraph.gcp2.cloud_endpoints;",
    T.MONITORING: "shape=mxgraph.gcp2.cloud_monitoring;",
    T.LOGGING: "shape=mxgraph.gcp2.cloud_logging;",
    T.CACHE: "shape=mxgraph.gcp2.memorystore;",
    T.LOAD_BALANCER: "shape=mxgraph.gcp2.cloud_load_balancing;",
    T.CDN: "shape=mxgraph.gcp2.cloud_cdn;",
    T.SEARCH: "shape=mxgraph.gcp2.cloud_search;",
    T.STREAM_PROCESSOR: "shape=mxgraph.gcp2.cloud_dataflow;",
    T.AUTH: "shape=mxgraph.gcp2.cloud_iam;",
}

AZURE_ICONS: Dict[T, str] = {
    T.SERVERLESS_FUNCTION: "shape=mxgraph.azure.azure_function;",
    T.QUEUE: "shape=mxgraph.azure.service_bus;",
    T.DATABASE: "shape=mxgraph.azure.cosmos_db;",
    T.STORAGE: "shape=mxgraph.azure.blob_storage;",
    T.API_GATEWAY: "shape=mxgraph.azure.api_management;",
    T.MONITORING: "shape=mxgraph.azure.monitor;",
    T.CACHE: "shape=mxgraph.azure.redis_cache;",
    T.CONTAINER: "shape=mxgraph.azure.container_instances;",
    T.LOAD_BALANCER: "shape=mxgraph.azure.load_balancer;",
    T.CDN: "shape=mxgraph.azure.cdn;",
    T.AUTH: "shape=mxgraph.azure.active_directory;",
    T.LOGGING: "shape=mxgraph.azure.log_analytics;",
    T.NOTIFICATION: "shape=mxgraph.azure.notification_hubs;",
}

_BOX = "shape=mxgraph.basic.rect;rounded=1;fillColor={fill};strokeColor={stroke};fontStyle=1;"
_CYLINDER = "shape=cylinder3;fillColor={fill};strokeColor={stroke};whiteSpace=wrap;fontStyle=1;size=15;"

_GREEN = {"fill": "#D5E8D4", "stroke": "#82B366"}
_BLUE = {"fill": "#DAE8FC", "stroke": "#6C8EBF"}
_PURPLE = {"fill": "#E1D5E7", "stroke": "#9673A6"}
_YELLOW = {"fill": "#FFF2CC", "stroke": "#D6B656"}
_RED = {"fill": "#F8CECC", "stroke": "#B85450"}
_ORANGE = {"fill": "#FFE6CC", "stroke": "#D79B00"}
_GREY = {"fill": "#F5F5F5", "stroke": "#666666"}

# Total over ComponentType.
NEUTRAL_ICONS: Dict[T, str] = {
    T.FRONTEND: _BOX.format(**_GREEN),
    T.BACKEND: _BOX.format(**_BLUE),
    T.API_GATEWAY: _BOX.format(**_PURPLE),
    T.LOAD_BALANCER: _BOX.format(**_YELLOW),
    T.DATABASE: _CYLINDER.format(**_RED),
    T.CACHE: _CYLINDER.format(**_ORANGE),
    T.QUEUE: _BOX.format(**_YELLOW),
    T.STORAGE: _CYLINDER.format(**_PURPLE),
    T.CDN: _BOX.format(**_GREEN),
    T.AUTH: _BOX.format(**_RED),
    T.SERVERLESS_FUNCTION: _BOX.format(**_BLUE),
    T.CONTAINER: _BOX.format(**_BLUE),
    T.SEARCH: _BOX.format(**_BLUE),
    T.ML_MODEL: "shape=hexagon;perimeter=hexagonPerimeter2;fillColor=#E1D5E7;strokeColor=#9673A6;fontStyle=1;size=0.25;",
    T.VECTOR_DB: _CYLINDER.format(**_PURPLE),
    T.STREAM_PROCESSOR: _BOX.format(**_YELLOW),
    T.MONITORING: _BOX.format(**_GREEN),
    T.LOGGING: _BOX.format(**_GREEN),
    T.NOTIFICATION: _BOX.format(**_YELLOW),
    T.SCHEDULER: _BOX.format(**_YELLOW),
    T.PROXY: _BOX.format(**_BLUE),
    T.SERVICE_MESH: _BOX.format(**_BLUE),
    T.SECRET_MANAGER: _BOX.format(**_RED),
    T.DNS: _BOX.format(**_GREEN),
    T.WAF: _BOX.format(**_RED),
    T.OTHER: _BOX.format(**_GREY),
}

PROVIDER_ICONS: Dict[str, Dict[T, str]] = {
    "aws": AWS_ICONS,
    "gcp": GCP_ICONS,
    "azure": AZURE_ICONS,
    NEUTRAL: NEUTRAL_ICONS,
}


def normalize_provider(cloud_provider: Any) -> str:
    token = str(cloud_provider or NEUTRAL).strip().lower()
    return token if token in PROVIDER_ICONS else NEUTRAL


def icon_style(component_type: Any, cloud_provider: Any = NEUTRAL) -> str:
    """Style string for a node. Provider shapes win only for non-neutral providers that define one."""
    kind = T.coerce(component_type)
    provider = normalize_provider(cloud_provider)
    cloud_style = PROVIDER_ICONS[provider].get(kind)
    if cloud_style and provider != NEUTRAL:
        return f"{cloud_style}aspect=fixed;resizable=0;fontStyle=1;"
    return NEUTRAL_ICONS.get(kind, NEUTRAL_ICONS[T.OTHER])


def is_provider_shape(component_type: Any, cloud_provider: Any) -> bool:
    """True when the node is drawn as a fixed-size provider icon rather than a neutral box."""
    provider = normalize_provider(cloud_provider)
    return provider != NEUTRAL and T.coerce(component_type) in PROVIDER_ICONS[provider]
