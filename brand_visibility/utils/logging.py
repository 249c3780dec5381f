"""
Structured JSON logging for the Brand Visibility Engine.

Provides standardized logging with:
- JSON formatted output to stderr
- UTC timestamps with timezone info
- Structured context fields (e.g. analysis summaries)
- Secret redaction (never log completion API keys in full)

The engine itself only ever calls logging.getLogger(__name__); handler setup
is the job of the embedding service or of the CLI via setup_logging().

Examples:
    >>> from brand_visibility.utils.logging import setup_logging, get_logger
    >>> setup_logging(verbose=True)
    >>> logger = get_logger("extractor.gazetteer")
    >>> logger.info("Gazetteer built", extra={"context": {"keys": 42}})

Security:
    - NEVER log full API keys
    - Only stderr is used (stdout reserved for CLI output)
"""

import json
import logging
import re
import sys
from typing import Any

from brand_visibility.utils.time import utc_timestamp


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs logs as JSON with structured fields.

    Each log record becomes a JSON object with:
    - timestamp: ISO 8601 UTC timestamp
    - level: Log level name
    - component: Logger name
    - message: Human-readable log message
    - context: Additional structured data (from 'context' in extra)
    - analysis_id: Caller-supplied correlation id (from 'analysis_id' in extra)
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": utc_timestamp(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "context") and isinstance(record.context, dict):
            log_entry["context"] = record.context

        if hasattr(record, "analysis_id"):
            log_entry["analysis_id"] = record.analysis_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class SecretRedactingFilter(logging.Filter):
    """
    Logging filter that redacts potential secrets from log records.

    Replaces API keys and bearer tokens with redacted versions showing only
    the last 4 characters:
    "sk-proj-abcdef123456..." -> "sk-...3456"
    "Bearer abc123xyz789..." -> "Bearer ***z789"
    """

    SECRET_PATTERNS = [
        (re.compile(r"\bsk-[a-zA-Z0-9_-]{20,}\b"), "sk-...{last4}"),
        (re.compile(r"\bBearer\s+[a-zA-Z0-9_-]{20,}\b"), "Bearer ***{last4}"),
        (re.compile(r"\b[a-zA-Z0-9_-]{32,}\b"), "***{last4}"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Redact secrets from the record message, args and context.

        Args:
            record: LogRecord to filter

        Returns:
            True (the record is always emitted, with redacted content)
        """
        record.msg = self._redact_secrets(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self._redact_secrets(str(v)) for k, v in record.args.items()
                }
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self._redact_secrets(str(arg)) for arg in record.args
                )

        if hasattr(record, "context") and isinstance(record.context, dict):
            record.context = self._redact_dict(record.context)

        return True

    def _redact_secrets(self, text: str) -> str:
        for pattern, template in self.SECRET_PATTERNS:

            def redact_match(match: re.Match) -> str:
                return template.format(last4=match.group(0)[-4:])

            text = pattern.sub(redact_match, text)

        return text

    def _redact_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        result = {}
        for key, value in data.items():
            if isinstance(value, str):
                result[key] = self._redact_secrets(value)
            elif isinstance(value, dict):
                result[key] = self._redact_dict(value)
            elif isinstance(value, list):
                result[key] = [
                    self._redact_secrets(v) if isinstance(v, str) else v for v in value
                ]
            else:
                result[key] = value
        return result


def setup_logging(verbose: bool = False, quiet_logs: bool = False) -> None:
    """
    Configure structured JSON logging on the root logger.

    Sets up:
    - JSON formatter for structured output
    - Secret redaction filter
    - stderr output (stdout reserved for user-facing content)
    - Log level: DEBUG if verbose, WARNING if quiet_logs, INFO otherwise

    Args:
        verbose: If True, log at DEBUG level. Takes precedence over quiet_logs.
        quiet_logs: If True, only WARNING and above are emitted. The CLI uses
            this in human mode so JSON lines don't interleave with Rich output.

    Example:
        >>> setup_logging(verbose=True)
        >>> get_logger("extractor").debug("Debug message")  # Will appear
    """
    if verbose:
        level = logging.DEBUG
    elif quiet_logs:
        level = logging.WARNING
    else:
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers (prevents duplicate logs)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(SecretRedactingFilter())

    root_logger.addHandler(handler)


def get_logger(component: str) -> logging.Logger:
    """
    Get a logger instance for a specific component.

    Args:
        component: Component name (e.g., "extractor.gazetteer")

    Returns:
        Logger instance sharing the configuration set by setup_logging()
    """
    return logging.getLogger(component)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    context: dict[str, Any] | None = None,
    analysis_id: str | None = None,
) -> None:
    """
    Log a message with structured context and optional analysis_id.

    Equivalent to logger.log(level, message, extra={'context': {...},
    'analysis_id': '...'}).

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, logging.WARNING, etc.)
        message: Human-readable log message
        context: Optional dict with additional structured data
        analysis_id: Optional correlation id supplied by the caller

    Example:
        >>> log_with_context(
        ...     logger,
        ...     logging.INFO,
        ...     "Analysis completed",
        ...     context={"score": 8, "method": "deterministic"},
        ... )
    """
    extra = {}

    if context is not None:
        extra["context"] = context

    if analysis_id is not None:
        extra["analysis_id"] = analysis_id

    logger.log(level, message, extra=extra if extra else None)
