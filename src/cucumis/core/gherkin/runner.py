"""Scenario runner - matches steps to definitions and executes them."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Union

from cucumis.config.loader import parse_environment
from cucumis.config.schema import CucumisConfig
from cucumis.core.gherkin.errors import NoMatchingStepError
from cucumis.core.gherkin.loader import load_step_source
from cucumis.core.gherkin.models import StepResult, StepStatus, TestResult
from cucumis.core.gherkin.parser import Scenario, Step, parse
from cucumis.core.gherkin.registry import DataTable, StepMatch, StepRegistry
from cucumis.core.gherkin.results import ResultAggregator
from cucumis.core.gherkin.steps import register_builtin_steps
from cucumis.core.gherkin.world import World

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _error_text(error: BaseException) -> str:
    return str(error) or type(error).__name__


def build_arguments(step: Step, match: StepMatch) -> list[Any]:
    """Matched parameters, then the doc-string, then the data table."""
    args = list(match.params)
    if step.has_doc_string:
        args.append(step.doc_string.strip())
    if step.has_data_table and step.data_table:
        args.append(DataTable(step.data_table))
    return args


class ScenarioRunner:
    """Executes parsed scenarios against a registry and a World.

    Handles:
    - Step lookup and argument assembly
    - Fail-fast within a scenario
    - Per-step and per-scenario timing
    - Progress callbacks for UI updates

    Steps after a failing step are not executed. They are left out of the
    result unless ``record_skipped_steps`` is set, in which case they are
    recorded as skipped.
    """

    def __init__(
        self,
        registry: StepRegistry,
        world: World,
        record_skipped_steps: bool = False,
        reset_world_per_scenario: bool = False,
        on_step_complete: Optional[Callable[[Step, StepResult], None]] = None,
        on_scenario_complete: Optional[Callable[[TestResult], None]] = None,
    ):
        self.registry = registry
        self.world = world
        self.record_skipped_steps = record_skipped_steps
        self.reset_world_per_scenario = reset_world_per_scenario

        # Callbacks
        self.on_step_complete = on_step_complete
        self.on_scenario_complete = on_scenario_complete

    async def run_step(self, step: Step, step_id: str) -> StepResult:
        """Run a single step, capturing any failure in the result."""
        result = StepResult(
            id=step_id,
            text=step.text,
            keyword=step.type.value,
            status=StepStatus.RUNNING,
        )
        start = time.monotonic()

        try:
            match = self.registry.find(step.type, step.text)
            if match is None:
                raise NoMatchingStepError(step.type.value, step.text)

            logger.debug(f"Matched '{step.text}' to '{match.definition.pattern}'")
            outcome = match.implementation(self.world, *build_arguments(step, match))
            if inspect.isawaitable(outcome):
                await outcome
            result.status = StepStatus.PASSED

        except Exception as e:
            result.status = StepStatus.FAILED
            result.error = _error_text(e)
            logger.error(f"Step failed: {step.type.value} {step.text}: {result.error}")
            logger.debug("Step failure details", exc_info=True)

        result.duration_ms = _elapsed_ms(start)

        if self.on_step_complete:
            self.on_step_complete(step, result)

        return result

    async def run_scenario(self, feature: str, scenario: Scenario) -> TestResult:
        """Run every step of a scenario until the first failure."""
        logger.info(f"Running scenario: {scenario.name}")

        if self.reset_world_per_scenario:
            self.world.reset()

        result = TestResult(
            id=f"{feature}-{scenario.name}",
            timestamp=datetime.now(timezone.utc),
            feature=feature,
            scenario=scenario.name,
            status=StepStatus.RUNNING,
        )
        start = time.monotonic()

        for step in scenario.steps:
            step_id = f"{result.id}-{len(result.steps) + 1}"

            if result.failed_count:
                if not self.record_skipped_steps:
                    break
                result.steps.append(StepResult(
                    id=step_id,
                    text=step.text,
                    keyword=step.type.value,
                    status=StepStatus.SKIPPED,
                ))
                continue

            result.steps.append(await self.run_step(step, step_id))

        result.finalize(_elapsed_ms(start))
        logger.info(f"Scenario '{scenario.name}' {result.status.value}")

        if self.on_scenario_complete:
            self.on_scenario_complete(result)

        return result

    async def run_feature(self, feature: str, content: str) -> list[TestResult]:
        """Parse feature text and run its scenarios in order."""
        results = []
        for scenario in parse(content):
            results.append(await self.run_scenario(feature, scenario))
        return results

    async def run_all(self, features: Mapping[str, str]) -> ResultAggregator:
        """Run features in mapping order."""
        aggregator = ResultAggregator()
        for name, content in features.items():
            logger.info(f"Running feature: {name}")
            aggregator.extend(await self.run_feature(name, content))
        return aggregator


async def run(
    features: Mapping[str, str],
    environment: Union[Mapping[str, str], str, None] = None,
    step_source: Optional[str] = None,
    config: Optional[CucumisConfig] = None,
    registry: Optional[StepRegistry] = None,
    base_url: Optional[str] = None,
    on_step_complete: Optional[Callable[[Step, StepResult], None]] = None,
    on_scenario_complete: Optional[Callable[[TestResult], None]] = None,
) -> list[TestResult]:
    """Run feature files and return one result per scenario.

    Args:
        features: Feature name to feature text, run in mapping order
        environment: Variables as a map or ``KEY=VALUE`` text
        step_source: Python source registering step definitions
        config: Runner configuration, defaults when omitted
        registry: Pre-populated registry; step source definitions are appended
        base_url: Base URL override
        on_step_complete: Called after every executed step
        on_scenario_complete: Called after every scenario

    Returns:
        TestResult list in feature then scenario order

    Raises:
        StepDefinitionError: If the step source cannot be loaded; no
            scenario is run in that case
    """
    config = config or CucumisConfig.get_default()
    if isinstance(environment, str):
        environment = parse_environment(environment)

    world = World(
        environment=environment,
        base_url=base_url,
        default_headers=config.http.default_headers,
        timeout=config.http.timeout,
        base_url_vars=config.environment.base_url_vars,
    )
    registry = registry if registry is not None else StepRegistry()

    async with world:
        if step_source and step_source.strip():
            load_step_source(step_source, registry, world)
        if not len(registry) and config.runner.use_builtin_steps:
            register_builtin_steps(registry)

        logger.info(
            f"Starting run: {len(features)} features, {len(registry)} step definitions, "
            f"base URL '{world.base_url}'"
        )

        runner = ScenarioRunner(
            registry=registry,
            world=world,
            record_skipped_steps=config.runner.record_skipped_steps,
            reset_world_per_scenario=config.runner.reset_world_per_scenario,
            on_step_complete=on_step_complete,
            on_scenario_complete=on_scenario_complete,
        )
        aggregator = await runner.run_all(features)

    summary = aggregator.summary()
    logger.info(
        f"Run finished: {summary['passed']} passed, {summary['failed']} failed, "
        f"{summary['skipped']} skipped"
    )
    return aggregator.results


def run_sync(
    features: Mapping[str, str],
    environment: Union[Mapping[str, str], str, None] = None,
    step_source: Optional[str] = None,
    **kwargs: Any,
) -> list[TestResult]:
    """Synchronous run."""
    return asyncio.run(run(features, environment, step_source, **kwargs))
