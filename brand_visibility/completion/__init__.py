"""
Completion clients for the assisted extraction strategy.

Public API:
    - CompletionClient: Protocol with complete(system_instruction, user_content) -> str
    - build_client: Factory for provider clients
    - build_client_from_runtime: Factory from a resolved RuntimeAssistModel
    - MockCompletionClient: Offline client for tests and demos
"""

from brand_visibility.completion.mock_client import MockCompletionClient
from brand_visibility.completion.models import (
    CompletionClient,
    build_client,
    build_client_from_runtime,
)

__all__ = [
    "CompletionClient",
    "MockCompletionClient",
    "build_client",
    "build_client_from_runtime",
]
