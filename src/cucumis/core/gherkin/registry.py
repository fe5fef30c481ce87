"""Step definition registry and matching."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from cucumis.core.gherkin.errors import StepDefinitionError
from cucumis.core.gherkin.parser import StepType
from cucumis.core.gherkin.patterns import CompiledPattern, compile_pattern

logger = logging.getLogger(__name__)

StepImplementation = Callable[..., Any]


@dataclass
class StepDefinition:
    """A pattern bound to the callable that implements it."""
    type: StepType
    pattern: str
    implementation: StepImplementation
    lenient: bool = True
    compiled: CompiledPattern = field(init=False, repr=False)

    def __post_init__(self):
        self.compiled = compile_pattern(self.pattern, self.lenient)


@dataclass
class StepMatch:
    """Definition found for a step, with its coerced parameters."""
    definition: StepDefinition
    params: list[Any]

    @property
    def implementation(self) -> StepImplementation:
        return self.definition.implementation


class DataTable:
    """Data table argument handed to step implementations."""

    def __init__(self, rows: list[list[str]]):
        self.rows = [list(row) for row in rows]

    def raw(self) -> list[list[str]]:
        return [list(row) for row in self.rows]

    def rows_hash(self) -> dict[str, str]:
        """Map first column to second column.

        Rows with fewer than two cells are ignored, extra cells are dropped.
        """
        return {row[0]: row[1] for row in self.rows if len(row) >= 2}

    def hashes(self) -> list[dict[str, str]]:
        """Use the first row as header and map every other row onto it."""
        if not self.rows:
            return []
        header, *body = self.rows
        return [dict(zip(header, row)) for row in body]

    def __len__(self) -> int:
        return len(self.rows)

    def __repr__(self) -> str:
        return f"DataTable({self.rows!r})"


def _coerce_type(step_type: Union[StepType, str]) -> StepType:
    try:
        return StepType(step_type)
    except ValueError:
        raise StepDefinitionError(f"Unknown step type: {step_type!r}") from None


class StepRegistry:
    """Ordered collection of step definitions.

    Registration order is match priority: the first definition of the right
    type whose pattern matches the whole step text wins.
    """

    def __init__(self):
        self.definitions: list[StepDefinition] = []

    def register(
        self,
        step_type: Union[StepType, str],
        pattern: str,
        implementation: StepImplementation,
        lenient: bool = True,
    ) -> StepDefinition:
        """Register a step definition.

        Raises:
            StepDefinitionError: If the type is unknown or the
                implementation is not callable
        """
        if not isinstance(pattern, str):
            raise StepDefinitionError(f"Step pattern must be a string, got {pattern!r}")
        if not callable(implementation):
            raise StepDefinitionError(f"Step implementation for '{pattern}' is not callable")

        definition = StepDefinition(
            type=_coerce_type(step_type),
            pattern=pattern,
            implementation=implementation,
            lenient=lenient,
        )
        self.definitions.append(definition)
        logger.debug(f"Registered step: {definition.type.value} {pattern}")
        return definition

    def decorator(self, step_type: Union[StepType, str]) -> Callable:
        """Build a ``Given``/``When``/``Then`` registration function.

        The result works both as ``Given("pattern", fn)`` and as a
        ``@Given("pattern")`` decorator.
        """
        def register(pattern: str, implementation: Optional[StepImplementation] = None):
            if implementation is not None:
                self.register(step_type, pattern, implementation)
                return implementation

            def wrap(fn: StepImplementation) -> StepImplementation:
                self.register(step_type, pattern, fn)
                return fn

            return wrap

        return register

    def find(self, step_type: Union[StepType, str], text: str) -> Optional[StepMatch]:
        """Find the first definition matching a step."""
        step_type = StepType(step_type)
        for definition in self.definitions:
            if definition.type != step_type:
                continue
            params = definition.compiled.match(text)
            if params is not None:
                return StepMatch(definition=definition, params=params)
        return None

    def __len__(self) -> int:
        return len(self.definitions)
