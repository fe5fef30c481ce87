"""Cucumis - a lightweight Gherkin interpreter for HTTP API scenarios."""

__version__ = "0.1.0"
