"""Configuration file loader.

Reads a JSON or YAML file, substitutes ``${VAR}`` references from the
environment and validates the result against ``DelegateConfig``.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import ValidationError

from delegateAgent.utils.error_handler import ConfigError

from .schema import DelegateConfig

LOGGER = logging.getLogger(__name__)

_ENV_PATTERN = re.compile(r"\$\{([a-zA-Z_][a-zA-Z0-9_]*)\}")


def substitute_env_vars(value: Any) -> Any:
    """Recursively replace ``${VAR}`` in strings, lists and dicts.

    Raises:
        ConfigError: If a referenced variable is not set
    """
    if isinstance(value, str):
        def _replace(match: re.Match) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ConfigError(f"Environment variable not found: {var_name}")
            return env_value

        return _ENV_PATTERN.sub(_replace, value)

    if isinstance(value, list):
        return [substitute_env_vars(item) for item in value]

    if isinstance(value, dict):
        return {key: substitute_env_vars(item) for key, item in value.items()}

    return value


def _format_validation_error(error: ValidationError) -> str:
    issues = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue["loc"]) or "<root>"
        issues.append(f"  - {location}: {issue['msg']}")
    return "\n".join(issues)


def load_config(config_path: Union[str, Path]) -> DelegateConfig:
    """Load and validate configuration from a JSON or YAML file.

    Args:
        config_path: Path to the config file (.json, .yaml or .yml)

    Returns:
        Validated configuration

    Raises:
        ConfigError: On missing file, parse error, substitution error or
            validation failure
    """
    config_path = Path(config_path)
    LOGGER.debug(f"Loading configuration: {config_path}")

    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {e}") from e

    # JSON is a subset of YAML, so one parser covers both formats
    try:
        raw = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid config syntax in {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping: {config_path}")

    try:
        substituted = substitute_env_vars(raw)
    except ConfigError as e:
        raise ConfigError(f"Configuration substitution failed: {e}") from e

    try:
        config = DelegateConfig.model_validate(substituted)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed:\n{_format_validation_error(e)}") from e

    LOGGER.info(f"Configuration loaded: {len(config.mcps)} MCP server(s), {len(config.tools)} tool(s)")
    return config
