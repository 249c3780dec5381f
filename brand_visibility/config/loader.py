"""
Configuration loader for the Brand Visibility Engine.

This module loads YAML configuration files, validates them with Pydantic
models and resolves the assist model API key from environment variables.

Declared configuration (EngineConfig from YAML) is kept separate from
runtime secrets (RuntimeAssistModel with a resolved API key), so keys never
get committed to version control.

Functions:
    load_config: Load and validate engine.config.yaml
    resolve_assist_model: Resolve the assist model API key from the environment
"""

import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from brand_visibility.exceptions import (
    APIKeyMissingError,
    ConfigFileNotFoundError,
    ConfigValidationError,
)

from .schema import EngineConfig, ExtractionSettings, RuntimeAssistModel


def format_validation_error(error: ValidationError) -> str:
    """
    Format a Pydantic ValidationError as one "  - loc: msg" line per problem.

    Args:
        error: ValidationError raised by model_validate

    Returns:
        Multi-line string suitable for CLI output
    """
    error_messages = []
    for item in error.errors():
        loc = ".".join(str(x) for x in item["loc"])
        msg = item["msg"]
        error_messages.append(f"  - {loc}: {msg}" if loc else f"  - {msg}")
    return "\n".join(error_messages)


def load_config(config_path: str | Path) -> EngineConfig:
    """
    Load and validate engine.config.yaml.

    This function:
    1. Loads YAML from the specified path
    2. Validates structure using the EngineConfig Pydantic model
    3. Returns the validated config (API keys are resolved separately, only
       when the assisted strategy actually runs)

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Validated EngineConfig

    Raises:
        ConfigFileNotFoundError: If the file doesn't exist
        ConfigValidationError: If YAML is invalid or validation fails

    Example:
        >>> config = load_config("examples/engine.config.yaml")
        >>> config.org_name
        'Acme Corp'

    Security:
        Uses yaml.safe_load() to prevent code injection.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigFileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigValidationError(
            f"Failed to read configuration file {config_path}: {e}"
        ) from e

    if raw_config is None:
        raise ConfigValidationError(f"Configuration file is empty: {config_path}")

    if not isinstance(raw_config, dict):
        raise ConfigValidationError(
            f"Configuration file must contain a mapping at the top level: {config_path}"
        )

    try:
        return EngineConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigValidationError(
            f"Configuration validation failed in {config_path}:\n"
            + format_validation_error(e)
        ) from e


def resolve_assist_model(extraction: ExtractionSettings) -> RuntimeAssistModel:
    """
    Resolve the assist model's API key from its environment variable.

    Args:
        extraction: Extraction settings with an assist_model configured

    Returns:
        RuntimeAssistModel with the API key filled in

    Raises:
        ConfigValidationError: If no assist_model is configured
        APIKeyMissingError: If the environment variable is unset or empty

    Example:
        >>> os.environ["OPENAI_API_KEY"] = "sk-test"
        >>> runtime = resolve_assist_model(config.settings.extraction)
        >>> runtime.model_name
        'gpt-4o-mini'
    """
    model = extraction.assist_model
    if model is None:
        raise ConfigValidationError(
            "settings.extraction.assist_model is required for the assisted strategy"
        )

    api_key = os.environ.get(model.env_api_key)
    if not api_key or api_key.strip() == "":
        raise APIKeyMissingError(
            f"Environment variable '{model.env_api_key}' not set "
            f"(required by assist model {model.provider}/{model.model_name})"
        )

    return RuntimeAssistModel(
        provider=model.provider,
        model_name=model.model_name,
        api_key=api_key,
        base_url=model.base_url,
        temperature=model.temperature,
    )
