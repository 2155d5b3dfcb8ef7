import pytest

from sketchstack.errors import PlanValidationError, UpstreamUnavailableError
from sketchstack.models.architecture_plan import ArchitecturePlan, ComponentType
from sketchstack.tools.schema_validator import (
    clean_json_text,
    extract_json,
    run_repair_loop,
    validate_and_repair,
    validate_architecture_plan,
)


def _never_called(error, raw):
    raise AssertionError("repair should not run")


def test_fenced_output_validates_on_first_attempt(plan_json):
    raw = f"```json\n{plan_json}\n```"
    outcome = run_repair_loop(raw, ArchitecturePlan, 2, _never_called)
    assert outcome.ok
    assert outcome.attempts == 1
    assert outcome.repairs == 0
    assert [c.id for c in outcome.value.components] == ["web", "api", "db"]


def test_missing_components_triggers_single_repair(plan_json):
    seen = []

    def repair(error, raw):
        seen.append((error, raw))
        return plan_json

    plan = validate_and_repair('{"relationships": []}', ArchitecturePlan, 2, repair)

    assert len(seen) == 1
    error, raw = seen[0]
    assert "components" in error
    assert "Field required" in error
    assert raw == '{"relationships": []}'
    assert len(plan.components) == 3


@pytest.mark.parametrize("budget", [0, 1, 3])
def test_repair_budget_is_bounded(budget):
    calls = []

    def repair(error, raw):
        calls.append(error)
        return "still not json"

    outcome = run_repair_loop("not json", ArchitecturePlan, budget, repair)

    assert not outcome.ok
    assert outcome.attempts == budget + 1
    assert outcome.repairs == budget
    assert len(calls) == budget
    assert outcome.error.startswith("Invalid JSON:")


def test_validate_and_repair_raises_with_attempt_count():
    with pytest.raises(PlanValidationError) as excinfo:
        validate_and_repair("{}", ArchitecturePlan, 1, lambda error, raw: "{}")
    assert excinfo.value.attempts == 2
    assert str(excinfo.value).startswith("Validation failed after 2 attempts:")
    assert "components" in excinfo.value.last_error


def test_repair_collaborator_errors_propagate():
    def repair(error, raw):
        raise UpstreamUnavailableError("chat endpoint down", attempts=3)

    with pytest.raises(UpstreamUnavailableError):
        validate_and_repair("oops", ArchitecturePlan, 2, repair)


def test_prose_around_json_is_stripped():
    raw = 'Sure! Here is the plan: {"components": []} Hope that helps.'
    assert clean_json_text(raw) == '{"components": []}'


def test_trailing_commas_are_removed():
    assert extract_json('{"a": [1, 2,], "b": {"c": 1,},}') == {"a": [1, 2], "b": {"c": 1}}


def test_single_quotes_rewritten_only_without_double_quotes():
    assert extract_json("{'a': 'b'}") == {"a": "b"}
    # Mixed quoting is left alone, so the apostrophe survives.
    assert extract_json('{"a": "it\'s"}') == {"a": "it's"}


def test_unknown_component_type_becomes_other(plan_dict):
    plan_dict["components"][0]["type"] = "Quantum Computer"
    plan = validate_architecture_plan(plan_dict)
    assert plan.components[0].type is ComponentType.OTHER


def test_component_type_spelling_is_normalized(plan_dict):
    plan_dict["components"][0]["type"] = "API-Gateway"
    assert validate_architecture_plan(plan_dict).components[0].type is ComponentType.API_GATEWAY


def test_unknown_style_fails_validation(plan_dict):
    plan_dict["architecture_style"] = "spaghetti"
    with pytest.raises(ValueError):
        validate_architecture_plan(plan_dict)


def test_style_spelling_is_normalized(plan_dict):
    plan_dict["architecture_style"] = "Event_Driven"
    assert validate_architecture_plan(plan_dict).architecture_style.value == "event-driven"
