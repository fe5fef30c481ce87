"""Exceptions raised by the Gherkin interpreter."""


class CucumisError(Exception):
    """Base class for interpreter errors."""


class StepDefinitionError(CucumisError):
    """Step definitions could not be loaded or registered.

    This is a setup failure: a run cannot proceed without a registry.
    """


class NoMatchingStepError(CucumisError):
    """No registered definition matches a step."""

    def __init__(self, step_type: str, text: str):
        self.step_type = step_type
        self.text = text
        super().__init__(f"No matching step definition found for: {step_type} {text}")


class StepAssertionError(AssertionError):
    """An expectation inside a step did not hold."""
