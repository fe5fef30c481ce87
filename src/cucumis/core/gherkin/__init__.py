"""Gherkin interpreter for Cucumis."""

from cucumis.core.gherkin.parser import FeatureParser, Feature, Scenario, Step, StepType, parse
from cucumis.core.gherkin.patterns import CompiledPattern, ParamKind, compile_pattern
from cucumis.core.gherkin.registry import (
    DataTable,
    StepDefinition,
    StepMatch,
    StepRegistry,
)
from cucumis.core.gherkin.errors import (
    CucumisError,
    NoMatchingStepError,
    StepAssertionError,
    StepDefinitionError,
)
from cucumis.core.gherkin.models import StepResult, StepStatus, TestResult
from cucumis.core.gherkin.world import Response, World
from cucumis.core.gherkin.assertions import expect
from cucumis.core.gherkin.loader import load_step_file, load_step_source
from cucumis.core.gherkin.steps import register_builtin_steps
from cucumis.core.gherkin.results import ResultAggregator, save_results
from cucumis.core.gherkin.runner import ScenarioRunner, run, run_sync

__all__ = [
    # Parser
    "FeatureParser",
    "Feature",
    "Scenario",
    "Step",
    "StepType",
    "parse",
    # Patterns and registry
    "CompiledPattern",
    "ParamKind",
    "compile_pattern",
    "DataTable",
    "StepDefinition",
    "StepMatch",
    "StepRegistry",
    # Errors
    "CucumisError",
    "NoMatchingStepError",
    "StepAssertionError",
    "StepDefinitionError",
    # Models
    "StepResult",
    "StepStatus",
    "TestResult",
    # Execution
    "Response",
    "World",
    "expect",
    "load_step_file",
    "load_step_source",
    "register_builtin_steps",
    "ResultAggregator",
    "save_results",
    "ScenarioRunner",
    "run",
    "run_sync",
]
