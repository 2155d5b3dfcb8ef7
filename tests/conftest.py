from __future__ import annotations

import json
import random

import pytest

from sketchstack.models.architecture_plan import ArchitecturePlan


class ScriptedChat:
    """Chat collaborator that replays canned replies and records every request."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def chat(self, messages):
        self.calls.append(messages)
        if not self.replies:
            raise AssertionError("unexpected chat call")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def _plan_dict():
    return {
        "components": [
            {"id": "web", "name": "Web App", "type": "frontend", "description": "React UI"},
            {"id": "api", "name": "API", "type": "backend"},
            {"id": "db", "name": "Postgres", "type": "database"},
        ],
        "relationships": [
            {"from": "web", "to": "api", "label": "calls", "protocol": "REST"},
            {"from": "api", "to": "db", "label": "reads", "protocol": "TCP"},
        ],
        "architecture_style": "layered",
    }


@pytest.fixture
def plan_dict():
    return _plan_dict()


@pytest.fixture
def plan_json(plan_dict):
    return json.dumps(plan_dict)


@pytest.fixture
def plan(plan_dict):
    return ArchitecturePlan.model_validate(plan_dict)


@pytest.fixture
def scripted_chat():
    return ScriptedChat


@pytest.fixture
def seeded_rng():
    return random.Random(1234)


@pytest.fixture
def fixed_clock():
    return lambda: 1_700_000_000_000
