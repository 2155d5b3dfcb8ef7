"""Architect agent: turns descriptions and refinement instructions into ArchitecturePlans."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Protocol

from sketchstack.models.architecture_plan import ARCHITECTURE_STYLES, COMPONENT_TYPES, ArchitecturePlan
from sketchstack.tools.schema_validator import validate_and_repair
from sketchstack.utils.config import settings


logger = logging.getLogger(__name__)

REPAIR_ERROR_LIMIT = 500

PLAN_SCHEMA_TEXT = (
    "{\n"
    "  \"components\": [\n"
    "    {\"id\": \"unique snake_case id\", \"name\": \"human-readable name\", "
    f"\"type\": \"{'|'.join(COMPONENT_TYPES)}\", \"description\": \"brief purpose\"}}\n"
    "  ],\n"
    "  \"relationships\": [\n"
    "    {\"from\": \"component id\", \"to\": \"component id\", \"label\": \"what happens\", "
    "\"protocol\": \"REST|gRPC|WebSocket|AMQP|Kafka|HTTP|TCP|UDP|custom\"}\n"
    "  ],\n"
    "  \"data_flows\": [{\"from\": \"component id\", \"to\": \"component id\", \"data\": \"what data flows\"}],\n"
    "  \"infra\": [{\"id\": \"string\", \"name\": \"string\", \"type\": \"vpc|subnet|cluster|region|namespace\"}],\n"
    "  \"constraints\": [\"e.g. highly available, low latency, GDPR compliant\"],\n"
    f"  \"architecture_style\": \"{'|'.join(ARCHITECTURE_STYLES)}\"\n"
    "}\n"
)

REFINEMENT_INSTRUCTION = (
    "You are a senior cloud architect. "
    "You are given an existing architecture plan as JSON and a user instruction to modify it.\n"
    "Rules:\n"
    "- Modify ONLY the parts affected by the instruction.\n"
    "- Keep all existing component IDs stable when possible.\n"
    "- Add new components with new unique IDs.\n"
    "- Remove components only if explicitly requested.\n"
    "- Preserve existing relationships that are not affected.\n"
    "- Return the FULL updated JSON (not a diff).\n"
    "- Return ONLY valid JSON, no prose, no markdown.\n"
    "The JSON schema is the same as the original:\n"
    + PLAN_SCHEMA_TEXT
)

REPAIR_INSTRUCTION = (
    "You are a JSON repair assistant. Fix the JSON below so it matches the required schema. "
    "Return ONLY the corrected JSON, no prose."
)


class ChatCollaborator(Protocol):
    def chat(self, messages: List[Dict[str, str]]) -> str: ...


def build_extraction_instruction(cloud_provider: str) -> str:
    return (
        "You are a senior cloud architect. "
        "Extract the system components and their relationships from the user's architecture description. "
        f"Cloud preference: {cloud_provider}. "
        "Return ONLY valid JSON, no prose, no markdown, matching this exact schema:\n"
        + PLAN_SCHEMA_TEXT
    )


def build_extraction_messages(description: str, cloud_provider: str = "neutral") -> List[Dict[str, str]]:
    user = (
        "Analyze the following system architecture description and extract all components, relationships, "
        "data flows, infrastructure, constraints, and architecture style.\n\n"
        f"Description:\n{description}\n\n"
        "Return ONLY the JSON object. No prose."
    )
    return [
        {"role": "system", "content": build_extraction_instruction(cloud_provider)},
        {"role": "user", "content": user},
    ]


def build_refinement_messages(existing_plan: ArchitecturePlan | Dict[str, Any], instruction: str) -> List[Dict[str, str]]:
    if isinstance(existing_plan, ArchitecturePlan):
        existing_plan = existing_plan.model_dump(mode="json", by_alias=True)
    user = (
        "Here is the current architecture plan:\n\n"
        f"{json.dumps(existing_plan, indent=2)}\n\n"
        f"User instruction:\n{instruction}\n\n"
        "Return the FULL updated JSON. No prose."
    )
    return [
        {"role": "system", "content": REFINEMENT_INSTRUCTION},
        {"role": "user", "content": user},
    ]


def build_repair_messages(error_message: str, raw_text: str) -> List[Dict[str, str]]:
    user = (
        "The following JSON failed validation.\n\n"
        f"Error: {error_message[:REPAIR_ERROR_LIMIT]}\n\n"
        f"Original JSON:\n{raw_text}\n\n"
        "Fix the JSON and return ONLY the corrected JSON."
    )
    return [
        {"role": "system", "content": REPAIR_INSTRUCTION},
        {"role": "user", "content": user},
    ]


class ArchitectAgent:
    """Extract and refine ArchitecturePlans through a chat collaborator, with schema repair."""

    def __init__(self, chat_client: ChatCollaborator, *, max_repair_attempts: Optional[int] = None) -> None:
        self.chat_client = chat_client
        self.max_repair_attempts = settings.repair_max_attempts if max_repair_attempts is None else max_repair_attempts

    def repair(self, error_message: str, raw_text: str) -> str:
        return self.chat_client.chat(build_repair_messages(error_message, raw_text))

    def _validated(self, raw: str) -> ArchitecturePlan:
        return validate_and_repair(raw, ArchitecturePlan, self.max_repair_attempts, self.repair)

    def extract(self, description: str, cloud_provider: str = "neutral") -> ArchitecturePlan:
        logger.info("Extracting requirements (cloud=%s)", cloud_provider)
        raw = self.chat_client.chat(build_extraction_messages(description, cloud_provider))
        plan = self._validated(raw)
        logger.info("Extracted %d components, %d relationships", len(plan.components), len(plan.relationships))
        return plan

    def refine(self, existing_plan: ArchitecturePlan, instruction: str) -> ArchitecturePlan:
        logger.info("Refining architecture plan")
        raw = self.chat_client.chat(build_refinement_messages(existing_plan, instruction))
        plan = self._validated(raw)
        logger.info("Refined: %d components, %d relationships", len(plan.components), len(plan.relationships))
        return plan
