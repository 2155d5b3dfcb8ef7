import json

from sketchstack.agents.architect_agent import (
    REPAIR_ERROR_LIMIT,
    ArchitectAgent,
    build_extraction_messages,
    build_refinement_messages,
    build_repair_messages,
)


def test_extraction_prompt_mentions_provider_and_description():
    system, user = build_extraction_messages("A shop with a cart", "gcp")
    assert system["role"] == "system"
    assert "Cloud preference: gcp" in system["content"]
    assert '"components"' in system["content"]
    assert "A shop with a cart" in user["content"]


def test_refinement_prompt_carries_full_plan_with_aliases(plan):
    system, user = build_refinement_messages(plan, "add a cache")
    assert "Return the FULL updated JSON" in system["content"]
    assert '"from": "web"' in user["content"]
    assert "add a cache" in user["content"]


def test_repair_prompt_truncates_error():
    _, user = build_repair_messages("x" * (REPAIR_ERROR_LIMIT + 100), "{}")
    assert "x" * REPAIR_ERROR_LIMIT in user["content"]
    assert "x" * (REPAIR_ERROR_LIMIT + 1) not in user["content"]


def test_extract_repairs_invalid_output(scripted_chat, plan_json):
    chat = scripted_chat('{"relationships": []}', plan_json)
    agent = ArchitectAgent(chat, max_repair_attempts=2)
    plan = agent.extract("three tier app", "aws")
    assert [c.id for c in plan.components] == ["web", "api", "db"]
    assert len(chat.calls) == 2
    assert "components" in chat.calls[1][1]["content"]


def test_refine_sends_existing_plan(scripted_chat, plan, plan_dict):
    plan_dict["components"].append({"id": "cache", "name": "Redis", "type": "cache"})
    chat = scripted_chat(json.dumps(plan_dict))
    refined = ArchitectAgent(chat, max_repair_attempts=0).refine(plan, "add a redis cache")
    assert [c.id for c in refined.components][-1] == "cache"
    assert '"id": "api"' in chat.calls[0][1]["content"]
