"""Assertion helper injected into step definition sources."""

from __future__ import annotations

import re
from typing import Any

from cucumis.core.gherkin.errors import StepAssertionError

_MISSING = object()


class Expectation:
    """Fluent assertions on a single value.

    Every failing check raises StepAssertionError, which fails the step.
    """

    def __init__(self, actual: Any, negate: bool = False):
        self.actual = actual
        self._negate = negate

    @property
    def not_(self) -> "Expectation":
        return Expectation(self.actual, negate=not self._negate)

    def _check(self, passed: bool, message: str) -> "Expectation":
        if passed == self._negate:
            prefix = "Did not expect" if self._negate else "Expected"
            raise StepAssertionError(f"{prefix} {message}")
        return self

    def to_equal(self, expected: Any) -> "Expectation":
        return self._check(
            self.actual == expected,
            f"{expected!r} but got {self.actual!r}",
        )

    to_be = to_equal

    def to_be_truthy(self) -> "Expectation":
        return self._check(bool(self.actual), f"{self.actual!r} to be truthy")

    def to_contain(self, item: Any) -> "Expectation":
        try:
            contained = item in self.actual
        except TypeError:
            contained = False
        return self._check(contained, f"{self.actual!r} to contain {item!r}")

    def to_match(self, pattern: str) -> "Expectation":
        matched = isinstance(self.actual, str) and re.search(pattern, self.actual) is not None
        return self._check(matched, f"{self.actual!r} to match /{pattern}/")

    def to_have_property(self, name: str, value: Any = _MISSING) -> "Expectation":
        has = isinstance(self.actual, dict) and name in self.actual
        if value is _MISSING or not has:
            return self._check(has, f"{self.actual!r} to have property {name!r}")
        return self._check(
            self.actual[name] == value,
            f"property {name!r} to be {value!r} but got {self.actual[name]!r}",
        )

    def to_have_length(self, length: int) -> "Expectation":
        try:
            actual_length = len(self.actual)
        except TypeError:
            actual_length = None
        return self._check(
            actual_length == length,
            f"length {length} but got {actual_length}",
        )


def expect(actual: Any) -> Expectation:
    """Start an assertion on a value."""
    return Expectation(actual)
