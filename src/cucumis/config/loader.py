"""Configuration and environment loading for Cucumis."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from cucumis.config.schema import CucumisConfig


CONFIG_FILENAMES = [".cucumis.yaml", ".cucumis.yml", "cucumis.yaml", "cucumis.yml"]
GLOBAL_CONFIG_DIR = Path.home() / ".config" / "cucumis"
GLOBAL_CONFIG_FILE = GLOBAL_CONFIG_DIR / "config.yaml"


def find_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find configuration file in current or parent directories."""
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    # Search upward for config file
    while current != current.parent:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.exists():
                return config_path
        current = current.parent

    return None


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load YAML configuration file."""
    if not path.exists():
        return {}

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
        return data if data else {}


def parse_environment(text: str) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` lines into a flat map.

    Blank lines, ``#`` comments and lines without a key are skipped.
    """
    env: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        value = value.strip()
        # one matching pair of surrounding quotes
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        env[key] = value
    return env


def load_environment_file(path: Path) -> Dict[str, str]:
    """Read environment variables from a ``.env`` style file."""
    if not path.exists():
        return {}

    return parse_environment(path.read_text(encoding="utf-8"))


def load_config(
    config_file: Optional[Path] = None,
    project_dir: Optional[Path] = None,
) -> CucumisConfig:
    """Load and merge configuration from all sources.

    Priority (later overrides earlier):
    1. Built-in defaults
    2. Global config (~/.config/cucumis/config.yaml)
    3. Project config (.cucumis.yaml)
    4. Explicit config file (if provided)
    """
    config_data: Dict[str, Any] = {}

    if GLOBAL_CONFIG_FILE.exists():
        global_data = load_yaml_file(GLOBAL_CONFIG_FILE)
        config_data = _deep_merge(config_data, global_data)

    project_file = find_config_file(project_dir)
    if project_file and project_file.exists():
        config_data = _deep_merge(config_data, load_yaml_file(project_file))

    if config_file is not None:
        config_data = _deep_merge(config_data, load_yaml_file(config_file))

    return CucumisConfig(**config_data) if config_data else CucumisConfig()


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
