"""Load step definitions from Python source text.

Step sources are evaluated once, before any scenario runs, in a namespace
providing ``Given``, ``When`` and ``Then`` registration functions, the
run's World as both ``world`` and ``http``, and the ``expect`` helper::

    @When("I fetch user {int}")
    async def fetch_user(world, user_id):
        await world.get(f"/users/{user_id}")

Implementations always receive the World as their first argument.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from cucumis.core.gherkin.assertions import expect
from cucumis.core.gherkin.errors import StepDefinitionError
from cucumis.core.gherkin.parser import StepType
from cucumis.core.gherkin.registry import DataTable, StepRegistry
from cucumis.core.gherkin.world import World

logger = logging.getLogger(__name__)


def build_namespace(registry: StepRegistry, world: Optional[World] = None) -> dict[str, Any]:
    """Names visible to a step definition source."""
    return {
        "__name__": "cucumis_steps",
        "Given": registry.decorator(StepType.GIVEN),
        "When": registry.decorator(StepType.WHEN),
        "Then": registry.decorator(StepType.THEN),
        "DataTable": DataTable,
        "expect": expect,
        "world": world,
        "http": world,
    }


def load_step_source(
    source: str,
    registry: StepRegistry,
    world: Optional[World] = None,
    filename: str = "<steps>",
) -> int:
    """Evaluate step definition source into a registry.

    Args:
        source: Python source registering steps
        registry: Registry receiving the definitions
        world: World exposed to the source as ``world``/``http``
        filename: Name used in tracebacks

    Returns:
        Number of definitions registered

    Raises:
        StepDefinitionError: If the source fails to compile or execute
    """
    before = len(registry)
    namespace = build_namespace(registry, world)

    try:
        code = compile(source, filename, "exec")
        exec(code, namespace)
    except StepDefinitionError:
        raise
    except Exception as e:
        raise StepDefinitionError(
            f"Failed to load step definitions from {filename}: {type(e).__name__}: {e}"
        ) from e

    count = len(registry) - before
    logger.info(f"Loaded {count} step definitions from {filename}")
    return count


def load_step_file(path: Path, registry: StepRegistry, world: Optional[World] = None) -> int:
    """Evaluate a step definition file into a registry."""
    if not path.exists():
        raise StepDefinitionError(f"Step definition file not found: {path}")

    return load_step_source(
        path.read_text(encoding="utf-8"), registry, world, filename=str(path)
    )
