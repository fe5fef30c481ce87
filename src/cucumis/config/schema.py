"""Configuration schema for Cucumis using Pydantic."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class EnvironmentConfig(BaseModel):
    """Environment variable handling."""

    env_file: str = ".env"
    base_url_vars: List[str] = Field(default_factory=lambda: ["API_URL", "BASE_URL"])


class HttpConfig(BaseModel):
    """HTTP client used by the World."""

    default_headers: Dict[str, str] = Field(default_factory=dict)
    timeout: Optional[float] = None  # Seconds; None leaves requests unbounded


class RunnerConfig(BaseModel):
    """Scenario execution behaviour."""

    reset_world_per_scenario: bool = False
    record_skipped_steps: bool = False  # Record steps after a failure as skipped
    use_builtin_steps: bool = True  # Fall back to built-in steps without a step source


class OutputConfig(BaseModel):
    """JSON report output."""

    directory: str = "reports"
    filename: str = "results.json"


class CucumisConfig(BaseModel):
    """Root configuration model for Cucumis."""

    version: int = 1
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def get_default(cls) -> "CucumisConfig":
        """Return default configuration."""
        return cls()
