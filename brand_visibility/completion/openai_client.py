"""
OpenAI Chat Completions client for the assisted extraction strategy.

Synchronous HTTP client (httpx.Client) with bounded retries and
fail-fast handling of permanent errors. Works against api.openai.com or any
OpenAI-compatible endpoint via base_url.

Key features:
- Retry on transient failures (429, 5xx) with capped exponential backoff
- Fail fast on permanent errors (400, 401, 403, 404)
- Deterministic sampling by default (temperature 0)
- Security: NEVER logs API keys

Example:
    >>> client = OpenAIChatClient("gpt-4o-mini", api_key="sk-...")
    >>> client.complete("List brand names, one per line.", "Answer text: ...")
    'Zendesk\\nFreshdesk'
"""

import logging
from typing import Any

import httpx

from brand_visibility.completion.retry_config import (
    NO_RETRY_STATUS_CODES,
    REQUEST_TIMEOUT,
    create_retry_decorator,
)
from brand_visibility.exceptions import (
    CompletionAuthenticationError,
    CompletionResponseError,
)

# Suppress HTTPX request logging so request lines never reach the JSON logs
httpx_logger = logging.getLogger("httpx")
httpx_logger.setLevel(logging.WARNING)

OPENAI_BASE_URL = "https://api.openai.com/v1"
CHAT_COMPLETIONS_PATH = "/chat/completions"

logger = logging.getLogger(__name__)


class OpenAIChatClient:
    """
    OpenAI Chat Completions client implementing CompletionClient.

    Attributes:
        model_name: Model identifier (e.g., "gpt-4o-mini")
        api_key: API key (NEVER logged)
        base_url: API base URL
        temperature: Sampling temperature
        timeout: Per-request timeout in seconds

    Retry behavior:
        - Retries on: 429, 500, 502, 503, 504, connection errors, timeouts
        - Fails immediately on: 400, 401, 403, 404
        - Max attempts: 3 (retry_config.MAX_ATTEMPTS)
    """

    def __init__(
        self,
        model_name: str,
        api_key: str,
        base_url: str | None = None,
        temperature: float = 0.0,
        timeout: float | None = None,
    ):
        """
        Initialize the client.

        Args:
            model_name: Model identifier
            api_key: API key for authentication
            base_url: Optional OpenAI-compatible base URL
            temperature: Sampling temperature
            timeout: Per-request timeout in seconds (default REQUEST_TIMEOUT)

        Raises:
            ValueError: If model_name or api_key is empty
        """
        # Validate inputs (never log api_key)
        if not model_name or model_name.isspace():
            raise ValueError("model_name cannot be empty")

        if not api_key or api_key.isspace():
            raise ValueError("api_key cannot be empty")

        self.model_name = model_name
        self.api_key = api_key
        self.base_url = (base_url or OPENAI_BASE_URL).rstrip("/")
        self.temperature = temperature
        self.timeout = timeout if timeout is not None else REQUEST_TIMEOUT

        logger.info(f"Initialized OpenAI completion client for model: {model_name}")

    @property
    def endpoint(self) -> str:
        return self.base_url + CHAT_COMPLETIONS_PATH

    @create_retry_decorator()
    def complete(self, system_instruction: str, user_content: str) -> str:
        """
        Run one chat completion and return the assistant text.

        Args:
            system_instruction: System message
            user_content: User message

        Returns:
            Assistant message content ("" when the model returns no content)

        Raises:
            ValueError: If user_content is empty
            CompletionAuthenticationError: On 401/403 (not retried)
            CompletionResponseError: On 400/404 or an unexpected payload
            httpx.HTTPStatusError: On 429/5xx after retries are exhausted
            httpx.ConnectError: On connection failures after retries
            httpx.TimeoutException: On timeouts after retries
        """
        if not user_content or user_content.isspace():
            raise ValueError("user_content cannot be empty")

        payload = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": user_content},
            ],
            "temperature": self.temperature,
        }

        # Build headers (NEVER log api_key)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        logger.debug(f"Sending completion request: model={self.model_name}")

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.endpoint, json=payload, headers=headers)

                # Permanent errors fail immediately without retry
                if response.status_code in NO_RETRY_STATUS_CODES:
                    error_detail = self._extract_error_detail(response)
                    message = (
                        f"OpenAI API error (non-retryable): "
                        f"status={response.status_code}, "
                        f"model={self.model_name}, "
                        f"detail={error_detail}"
                    )
                    if response.status_code in (401, 403):
                        raise CompletionAuthenticationError(message)
                    raise CompletionResponseError(message)

                # Retryable errors (429, 5xx) are retried by the decorator
                response.raise_for_status()

        except httpx.HTTPStatusError as e:
            logger.error(
                f"OpenAI API HTTP error: "
                f"status={e.response.status_code}, "
                f"model={self.model_name}, "
                f"detail={self._extract_error_detail(e.response)}"
            )
            raise

        except httpx.ConnectError as e:
            logger.error(f"OpenAI API connection error: model={self.model_name}, error={e}")
            raise

        except httpx.TimeoutException as e:
            logger.error(f"OpenAI API timeout: model={self.model_name}, error={e}")
            raise

        try:
            data = response.json()
        except ValueError as e:
            raise CompletionResponseError(f"Failed to parse OpenAI response JSON: {e}") from e

        return self._extract_content(data)

    def _extract_content(self, data: dict[str, Any]) -> str:
        """
        Extract the assistant message content from a Chat Completions payload.

        Raises:
            CompletionResponseError: If the payload has no choices/message
        """
        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices or not isinstance(choices, list):
            raise CompletionResponseError("OpenAI response missing 'choices' array")

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not isinstance(message, dict):
            raise CompletionResponseError("OpenAI response missing 'message' in first choice")

        content = message.get("content")
        if content is None:
            return ""
        if not isinstance(content, str):
            raise CompletionResponseError(
                f"OpenAI response content has unexpected type {type(content).__name__}"
            )
        return content

    def _extract_error_detail(self, response: httpx.Response) -> str:
        """Extract a short error message from an error response body."""
        try:
            error_data = response.json()
            if isinstance(error_data, dict) and "error" in error_data:
                error = error_data["error"]
                if isinstance(error, dict):
                    return str(error.get("message", error))
                return str(error)
            return str(error_data)
        except ValueError:
            return response.text[:200] if response.text else "No error details"
