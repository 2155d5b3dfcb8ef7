"""Demo presets: ready-made descriptions for common architecture patterns."""
from __future__ import annotations

from typing import Any, Dict, List

from sketchstack.errors import PresetNotFoundError


PRESETS: Dict[str, Dict[str, str]] = {
    "rag-pipeline": {
        "name": "RAG Pipeline",
        "description": (
            "A Retrieval-Augmented Generation pipeline that ingests PDF documents, splits them into semantic "
            "chunks, computes vector embeddings and stores them in a vector database (Pinecone or Weaviate). "
            "User questions are answered by retrieving the most relevant chunks and passing them as context to "
            "an LLM. A FastAPI backend serves a React chat UI; logging and monitoring cover the whole pipeline."
        ),
        "cloudProvider": "aws",
        "architectureStyle": "rag-pipeline",
    },
    "microservices": {
        "name": "Microservices E-Commerce",
        "description": (
            "A microservices e-commerce backend: an API Gateway routes traffic to an Auth Service issuing JWT "
            "tokens, a Product Catalog service backed by PostgreSQL, an Order Service using event sourcing, a "
            "Payment Service integrated with Stripe and a Notification Service for email and push. Services talk "
            "asynchronously through a message queue (RabbitMQ or SQS). Product listings are cached in Redis, "
            "static assets are served from a CDN and logs are centralized in an ELK stack. Every service runs in "
            "its own Docker container."
        ),
        "cloudProvider": "aws",
        "architectureStyle": "microservices",
    },
    "agent-system": {
        "name": "Multi-Agent AI System",
        "description": (
            "A multi-agent AI workflow where an Orchestrator Agent takes user tasks and delegates them to a "
            "Research Agent (web search and summaries), a Code Agent (writes and reviews code) and a Data Agent "
            "(queries databases and builds reports). Agents exchange messages over a queue and share memory in a "
            "vector database. An LLM gateway fronts OpenAI and a local Ollama server. A REST API feeds a React "
            "dashboard of agent activity, and monitoring tracks token usage, latency and errors."
        ),
        "cloudProvider": "neutral",
        "architectureStyle": "agent-workflow",
    },
    "event-driven-orders": {
        "name": "Event-Driven Order System",
        "description": (
            "An event-driven order system: customers order through a web app, requests pass an API Gateway to an "
            "Order Service, and order events are published to Kafka or EventBridge. A Payment Processor, an "
            "Inventory Service and a Shipping Service consume the events, and a Notification Service sends email "
            "and SMS updates. Failed events land in a dead letter queue. CQRS keeps separate read and write "
            "databases, and CloudWatch or Datadog handles monitoring."
        ),
        "cloudProvider": "aws",
        "architectureStyle": "event-driven",
    },
    "streaming-analytics": {
        "name": "Streaming Analytics Pipeline",
        "description": (
            "A real-time streaming analytics pipeline: IoT sensors publish over MQTT to an ingestion gateway, data "
            "flows through Kafka or Kinesis into a stream processor (Flink or Spark Streaming) for aggregations and "
            "anomaly detection, and results land in a data lake (S3 or GCS) and a time-series database (InfluxDB "
            "or TimescaleDB). A nightly Spark batch layer computes daily aggregates. A REST API serves results to "
            "a Grafana dashboard. Includes a schema registry, data quality checks and alerting."
        ),
        "cloudProvider": "aws",
        "architectureStyle": "data-pipeline",
    },
}


def list_presets() -> List[Dict[str, str]]:
    return [{"id": preset_id, "name": preset["name"]} for preset_id, preset in PRESETS.items()]


def get_preset(name: str) -> Dict[str, Any]:
    preset = PRESETS.get(name)
    if preset is None:
        raise PresetNotFoundError(name)
    return {"id": name, **preset}
