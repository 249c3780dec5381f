"""
Completion client interface for the assisted extraction strategy.

This module defines:
- CompletionClient: Protocol for a single request/response text-completion call
- build_client: Factory creating a provider client from configuration

The engine only needs `complete(system_instruction, user_content) -> str`.
Anything satisfying that Protocol (an HTTP client, a mock, a caller-owned
adapter around another SDK) can drive the assisted strategy.
"""

from typing import Protocol, runtime_checkable

from brand_visibility.config.schema import RuntimeAssistModel


@runtime_checkable
class CompletionClient(Protocol):
    """
    Provider-agnostic interface for text-completion calls.

    Example implementation:
        >>> class EchoClient:
        ...     def complete(self, system_instruction: str, user_content: str) -> str:
        ...         return "Zendesk"

    Note:
        Implementations MUST:
        - Never log API keys or sensitive credentials
        - Raise (rather than return an error string) on failure; the
          assisted extractor turns any exception into a fallback
        - Keep retries bounded (capped exponential backoff)
    """

    def complete(self, system_instruction: str, user_content: str) -> str:
        """
        Run one completion and return the generated text.

        Args:
            system_instruction: Instruction describing the extraction task
            user_content: Prompt text and response text to extract from

        Returns:
            Generated text (one name per line for the extraction task)
        """
        ...


def build_client(
    provider: str,
    model_name: str,
    api_key: str,
    base_url: str | None = None,
    temperature: float = 0.0,
    timeout: float | None = None,
) -> CompletionClient:
    """
    Factory function to create a completion client for a provider.

    Supported providers:
    - "openai": OpenAI Chat Completions API (or any OpenAI-compatible base_url)

    Args:
        provider: Provider identifier (lowercase string)
        model_name: Model identifier (e.g., "gpt-4o-mini")
        api_key: API key for authentication (NEVER logged or persisted)
        base_url: Optional OpenAI-compatible API base URL
        temperature: Sampling temperature
        timeout: Per-request timeout in seconds (defaults to REQUEST_TIMEOUT)

    Returns:
        CompletionClient implementation

    Raises:
        ValueError: If provider is not supported

    Example:
        >>> client = build_client("openai", "gpt-4o-mini", "sk-...")
        >>> isinstance(client, CompletionClient)
        True
    """
    if provider == "openai":
        # Import here to keep httpx/tenacity off the deterministic import path
        from brand_visibility.completion.openai_client import OpenAIChatClient

        return OpenAIChatClient(
            model_name=model_name,
            api_key=api_key,
            base_url=base_url,
            temperature=temperature,
            timeout=timeout,
        )

    raise ValueError(
        f"Unsupported completion provider: '{provider}'. Supported providers: openai"
    )


def build_client_from_runtime(
    runtime: RuntimeAssistModel, timeout: float | None = None
) -> CompletionClient:
    """
    Create a completion client from a resolved RuntimeAssistModel.

    Args:
        runtime: Assist model with API key resolved from the environment
        timeout: Per-request timeout in seconds

    Returns:
        CompletionClient implementation
    """
    return build_client(
        provider=runtime.provider,
        model_name=runtime.model_name,
        api_key=runtime.api_key,
        base_url=runtime.base_url,
        temperature=runtime.temperature,
        timeout=timeout,
    )
