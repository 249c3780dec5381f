"""
Custom exceptions for the Brand Visibility Engine.

This module provides a hierarchy of exceptions that enable type-safe error
handling throughout the engine. All exceptions inherit from the base
BrandVisibilityError for consistent catching.

Exception Hierarchy:
    BrandVisibilityError (base)
    ├── ConfigurationError
    │   ├── ConfigFileNotFoundError
    │   ├── ConfigValidationError
    │   └── APIKeyMissingError
    ├── InputError
    ├── CompletionError
    │   ├── CompletionAuthenticationError
    │   └── CompletionResponseError
    └── ExternalAssistFailure
        ├── ExternalAssistTimeoutError
        └── ExternalAssistResponseError

Catalog collisions (two entries sharing a normalized variant) are NOT an
exception: they are resolved by the org-brand priority rule, recorded on the
gazetteer and logged as warnings.

Usage:
    from brand_visibility.exceptions import InputError

    try:
        result = analyze_response(response_text, prompt_text, org_name, catalog)
    except InputError as e:
        logger.warning(f"Skipping analysis: {e}")
"""


class BrandVisibilityError(Exception):
    """
    Base exception for all Brand Visibility Engine errors.

    All custom exceptions in this package inherit from this class.
    This enables catching every engine-specific error with a single except clause.

    Example:
        try:
            result = analyze_response(...)
        except BrandVisibilityError as e:
            logger.error(f"Engine error: {e}")
    """

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(BrandVisibilityError):
    """
    Base class for configuration-related errors.

    Raised when configuration loading, parsing, or validation fails.
    Results in exit code 1 from the CLI.
    """

    pass


class ConfigFileNotFoundError(ConfigurationError):
    """
    Configuration file does not exist at the specified path.

    Example:
        raise ConfigFileNotFoundError("Configuration file not found: engine.yaml")
    """

    pass


class ConfigValidationError(ConfigurationError):
    """
    Configuration file failed validation.

    Raised on invalid YAML syntax, missing required fields, or values that
    fail Pydantic validation (e.g. a non-monotonic scoring table).

    Example:
        raise ConfigValidationError("settings.scoring.max_score: must exceed min_score")
    """

    pass


class APIKeyMissingError(ConfigurationError):
    """
    Required API key environment variable is not set.

    Only raised when the assisted extraction strategy is configured, since
    the deterministic strategy never needs credentials.

    Example:
        raise APIKeyMissingError("Environment variable 'OPENAI_API_KEY' not set")
    """

    pass


# ============================================================================
# Input Errors
# ============================================================================


class InputError(BrandVisibilityError):
    """
    Missing or empty analysis input.

    Raised when response_text or prompt_text is missing or whitespace-only.
    No partial result is produced; callers must not persist a record for
    this case.

    Example:
        raise InputError("response_text cannot be empty")
    """

    pass


# ============================================================================
# Completion Client Errors
# ============================================================================


class CompletionError(BrandVisibilityError):
    """
    Base class for errors raised by external text-completion clients.

    Example:
        raise CompletionError("Completion request failed after 3 attempts")
    """

    pass


class CompletionAuthenticationError(CompletionError):
    """
    Authentication with the completion provider failed (401/403).

    Never retried.
    """

    pass


class CompletionResponseError(CompletionError):
    """
    The completion provider returned an error or an unexpected payload.

    Example:
        raise CompletionResponseError("Response missing 'choices' array")
    """

    pass


# ============================================================================
# External Assist Errors
# ============================================================================


class ExternalAssistFailure(BrandVisibilityError):
    """
    Base class for failures of the assisted extraction strategy.

    Always recovered locally: the analysis falls back to the deterministic
    strategy and records the reason in the result metadata.

    Example:
        try:
            outcome = assisted.extract(...)
        except ExternalAssistFailure as e:
            outcome = deterministic.extract(...)
    """

    pass


class ExternalAssistTimeoutError(ExternalAssistFailure):
    """
    The external completion call did not return within the configured timeout.
    """

    pass


class ExternalAssistResponseError(ExternalAssistFailure):
    """
    The external completion call raised, or returned content that could not
    be parsed into a list of names.

    Example:
        raise ExternalAssistResponseError("Expected text output, got NoneType")
    """

    pass
