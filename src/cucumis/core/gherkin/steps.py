"""Built-in HTTP step library.

Registered when a run is started without its own step definitions.
"""

from __future__ import annotations

import json
from typing import Any

from cucumis.core.gherkin.errors import StepAssertionError
from cucumis.core.gherkin.parser import StepType
from cucumis.core.gherkin.registry import DataTable, StepRegistry
from cucumis.core.gherkin.world import Response, World


def _require_response(world: World) -> Response:
    if world.response is None:
        raise StepAssertionError("No response received")
    return world.response


def _field(response: Response, name: str) -> Any:
    if isinstance(response.data, dict):
        return response.data.get(name)
    return None


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def set_header(world: World, key: str, value: str) -> None:
    world.set_header(key, value)


async def send_get(world: World, path: str) -> None:
    await world.send_request("GET", path)


async def send_post(world: World, path: str, body: str) -> None:
    await world.send_request("POST", path, json.loads(body))


async def send_put(world: World, path: str, body: str) -> None:
    await world.send_request("PUT", path, json.loads(body))


async def send_delete(world: World, path: str) -> None:
    await world.send_request("DELETE", path)


def status_code_should_be(world: World, status_code: int) -> None:
    response = _require_response(world)
    if response.status != status_code:
        raise StepAssertionError(
            f"Expected status code {status_code} but got {response.status}"
        )


def response_should_have_data(world: World, table: DataTable) -> None:
    response = _require_response(world)
    for key, expected in table.rows_hash().items():
        actual = _field(response, key)
        if actual is None or _as_text(actual) != expected:
            raise StepAssertionError(f"Expected {key} to be {expected} but got {actual}")


def response_should_contain(world: World, name: str, value: str) -> None:
    response = _require_response(world)
    actual = _field(response, name)
    if actual is None or _as_text(actual) != value:
        raise StepAssertionError(f"Expected {name} to be {value} but got {actual}")


BUILTIN_STEPS = [
    (StepType.GIVEN, "I set header {string} to {string}", set_header),
    (StepType.WHEN, "I send a GET request to {string}", send_get),
    (StepType.WHEN, "I send a POST request to {string} with:", send_post),
    (StepType.WHEN, "I send a PUT request to {string} with:", send_put),
    (StepType.WHEN, "I send a DELETE request to {string}", send_delete),
    (StepType.THEN, "the response status code should be {int}", status_code_should_be),
    (StepType.THEN, "the response should have the following data:", response_should_have_data),
    (StepType.THEN, "the response should contain {string} with value {string}", response_should_contain),
]


def register_builtin_steps(registry: StepRegistry) -> StepRegistry:
    """Add the built-in steps to a registry."""
    for step_type, pattern, implementation in BUILTIN_STEPS:
        registry.register(step_type, pattern, implementation)
    return registry
