"""Configuration loading for Cucumis."""
