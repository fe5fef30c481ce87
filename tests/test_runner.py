"""Tests for scenario execution."""

import asyncio

import pytest

from cucumis.config.schema import CucumisConfig
from cucumis.core.gherkin.errors import StepDefinitionError
from cucumis.core.gherkin.models import StepStatus
from cucumis.core.gherkin.registry import StepRegistry
from cucumis.core.gherkin.runner import run, run_sync


def _registry_with(*definitions):
    registry = StepRegistry()
    for step_type, pattern, implementation in definitions:
        registry.register(step_type, pattern, implementation)
    return registry


def _fail(world):
    raise ValueError("boom")


def test_end_to_end_ping(stub_server):
    feature = (
        "Scenario: ok\n"
        '  When I send a GET request to "/ping"\n'
        "  Then the response status code should be 200\n"
    )

    async def scenario():
        async with stub_server() as base_url:
            return await run({"ping.feature": feature}, {"API_URL": base_url})

    results = asyncio.run(scenario())

    assert len(results) == 1
    result = results[0]
    assert result.status == StepStatus.PASSED
    assert [s.status for s in result.steps] == [StepStatus.PASSED, StepStatus.PASSED]
    assert result.error is None


def test_builtin_steps_with_doc_string_and_table(stub_server, sample_feature):
    async def scenario():
        async with stub_server() as base_url:
            return await run({"users.feature": sample_feature}, f"API_URL={base_url}\n")

    results = asyncio.run(scenario())

    assert [r.scenario for r in results] == ["Fetch a user", "Create a user"]
    assert all(r.status == StepStatus.PASSED for r in results), [r.error for r in results]


def test_error_status_can_be_asserted(stub_server):
    feature = (
        "Scenario: missing user\n"
        '  When I send a GET request to "/users/42"\n'
        "  Then the response status code should be 404\n"
        '  And the response should contain "error" with value "not found"\n'
    )

    async def scenario():
        async with stub_server() as base_url:
            return await run({"f": feature}, base_url=base_url)

    result = asyncio.run(scenario())[0]

    assert result.status == StepStatus.PASSED


def test_fail_fast_drops_remaining_steps():
    # Steps after a failure are not executed and not recorded.
    calls = []
    registry = _registry_with(
        ("Given", "step one", lambda world: calls.append(1)),
        ("When", "step two", _fail),
        ("Then", "step three", lambda world: calls.append(3)),
    )
    feature = "Scenario: s\n  Given step one\n  When step two\n  Then step three\n"

    result = run_sync({"f": feature}, registry=registry)[0]

    assert calls == [1]
    assert [s.status for s in result.steps] == [StepStatus.PASSED, StepStatus.FAILED]
    assert result.steps[1].error == "boom"
    assert result.status == StepStatus.FAILED
    assert result.error == "boom"


def test_record_skipped_steps_option():
    registry = _registry_with(
        ("When", "step two", _fail),
        ("Then", "step three", lambda world: None),
    )
    config = CucumisConfig(runner={"record_skipped_steps": True})
    feature = "Scenario: s\n  When step two\n  Then step three\n"

    result = run_sync({"f": feature}, registry=registry, config=config)[0]

    assert [s.status for s in result.steps] == [StepStatus.FAILED, StepStatus.SKIPPED]
    assert result.status == StepStatus.FAILED


def test_no_matching_definition_fails_step_not_run():
    registry = _registry_with(("Given", "known", lambda world: None))
    feature = "Scenario: a\n  Given unknown step\nScenario: b\n  Given known\n"

    results = run_sync({"f": feature}, registry=registry)

    assert results[0].status == StepStatus.FAILED
    assert "No matching step definition found for:" in results[0].steps[0].error
    assert results[0].steps[0].error.endswith("Given unknown step")
    assert results[1].status == StepStatus.PASSED


def test_type_mismatch_is_no_match():
    registry = _registry_with(("Then", "it works", lambda world: None))

    result = run_sync({"f": "Scenario: s\n  Given it works\n"}, registry=registry)[0]

    assert result.status == StepStatus.FAILED


def test_scenario_without_steps_is_skipped():
    result = run_sync({"f": "Scenario: empty\n"}, registry=StepRegistry())[0]

    assert result.status == StepStatus.SKIPPED
    assert result.steps == []


def test_arguments_order_params_doc_string_table():
    received = []

    def capture(world, name, body, table):
        received.append((world, name, body, table.rows_hash()))

    registry = _registry_with(("When", "I submit {string} with:", capture))
    feature = (
        "Scenario: s\n"
        '  When I submit "form" with:\n'
        '    """\n'
        "\n  payload  \n\n"
        '    """\n'
        "    | a | 1 |\n"
        "    | b | 2 |\n"
    )

    result = run_sync({"f": feature}, registry=registry)[0]

    assert result.status == StepStatus.PASSED
    world, name, body, rows = received[0]
    assert world is not None
    assert name == "form"
    assert body == "payload"
    assert rows == {"a": "1", "b": "2"}


def test_async_implementation_is_awaited():
    events = []

    async def slow(world):
        await asyncio.sleep(0)
        world.data["done"] = True
        events.append("slow")

    def check(world):
        assert world.data.get("done"), "async step did not finish"
        events.append("check")

    registry = _registry_with(("When", "slow", slow), ("Then", "check", check))

    result = run_sync({"f": "Scenario: s\n  When slow\n  Then check\n"}, registry=registry)[0]

    assert events == ["slow", "check"]
    assert result.status == StepStatus.PASSED


def test_world_is_shared_across_scenarios_by_default():
    registry = _registry_with(
        ("Given", "I remember {word}", lambda world, v: world.data.__setitem__("v", v)),
        ("Then", "I recall {word}", _recall),
    )
    feature = "Scenario: a\n  Given I remember x\nScenario: b\n  Then I recall x\n"

    shared = run_sync({"f": feature}, registry=registry)
    reset = run_sync(
        {"f": feature},
        registry=registry,
        config=CucumisConfig(runner={"reset_world_per_scenario": True}),
    )

    assert shared[1].status == StepStatus.PASSED
    assert reset[1].status == StepStatus.FAILED


def _recall(world, value):
    assert world.data.get("v") == value, f"expected {value!r}, got {world.data.get('v')!r}"


def test_result_ids_and_feature_order():
    registry = _registry_with(("Given", "x", lambda world: None))
    features = {
        "b.feature": "Scenario: same\n  Given x\n",
        "a.feature": "Scenario: same\n  Given x\n  Given x\n",
    }

    results = run_sync(features, registry=registry)

    assert [r.id for r in results] == ["b.feature-same", "a.feature-same"]
    assert [s.id for s in results[1].steps] == ["a.feature-same-1", "a.feature-same-2"]
    assert results[1].steps[0].keyword == "Given"
    assert results[0].timestamp.tzinfo is not None


def test_exception_without_message_uses_class_name():
    def bare(world):
        raise KeyError()

    registry = _registry_with(("Given", "bare", bare))

    result = run_sync({"f": "Scenario: s\n  Given bare\n"}, registry=registry)[0]

    assert result.error == "KeyError"


def test_transport_error_fails_step():
    feature = 'Scenario: s\n  When I send a GET request to "/ping"\n'

    result = run_sync({"f": feature}, {"API_URL": "http://127.0.0.1:1"})[0]

    assert result.status == StepStatus.FAILED
    assert result.steps[0].error


def test_step_source_setup_error_aborts_run():
    with pytest.raises(StepDefinitionError):
        run_sync({"f": "Scenario: s\n  Given x\n"}, step_source="Given('x'")


def test_repeated_runs_are_deterministic(stub_server, sample_feature):
    async def scenario():
        async with stub_server() as base_url:
            first = await run({"users": sample_feature}, {"API_URL": base_url})
            second = await run({"users": sample_feature}, {"API_URL": base_url})
            return first, second

    first, second = asyncio.run(scenario())

    def strip_timing(results):
        out = []
        for r in results:
            data = r.to_dict()
            data.pop("timestamp")
            data.pop("duration")
            for step in data["steps"]:
                step.pop("duration")
            out.append(data)
        return out

    assert strip_timing(first) == strip_timing(second)


def test_callbacks_are_invoked():
    seen_steps = []
    seen_scenarios = []
    registry = _registry_with(("Given", "x", lambda world: None))

    run_sync(
        {"f": "Scenario: s\n  Given x\n"},
        registry=registry,
        on_step_complete=lambda step, result: seen_steps.append((step.text, result.status)),
        on_scenario_complete=lambda result: seen_scenarios.append(result.scenario),
    )

    assert seen_steps == [("x", StepStatus.PASSED)]
    assert seen_scenarios == ["s"]


def test_binary_response_passes_builtin_steps(stub_server):
    feature = (
        "Scenario: image\n"
        '  When I send a GET request to "/img"\n'
        "  Then the response status code should be 200\n"
    )

    async def scenario():
        async with stub_server() as base_url:
            return await run({"img.feature": feature}, {"API_URL": base_url})

    result = asyncio.run(scenario())[0]

    assert result.status == StepStatus.PASSED, result.error


def test_http_timeout_fails_step(stub_server):
    feature = (
        "Scenario: slow\n"
        '  When I send a GET request to "/slow"\n'
        "  Then the response status code should be 200\n"
    )
    config = CucumisConfig(http={"timeout": 0.1})

    async def scenario():
        async with stub_server() as base_url:
            return await run({"slow.feature": feature}, {"API_URL": base_url}, config=config)

    result = asyncio.run(scenario())[0]

    assert result.status == StepStatus.FAILED
    assert [s.status for s in result.steps] == [StepStatus.FAILED]
    assert result.steps[0].error


def test_default_headers_are_sent(stub_server):
    feature = (
        "Scenario: headers\n"
        '  When I send a GET request to "/headers"\n'
        '  Then the response should contain "token" with value "abc"\n'
    )
    config = CucumisConfig(http={"default_headers": {"X-Token": "abc"}})

    async def scenario():
        async with stub_server() as base_url:
            return await run({"headers.feature": feature}, {"API_URL": base_url}, config=config)

    result = asyncio.run(scenario())[0]

    assert result.status == StepStatus.PASSED, result.error
