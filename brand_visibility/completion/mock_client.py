"""
Mock completion client for tests and offline demos.

MockCompletionClient implements the CompletionClient protocol without any
network access. It can return canned text, compute a reply from the request,
sleep to simulate a slow provider, or raise to simulate a failure.

Example:
    >>> client = MockCompletionClient(output="Zendesk\\nFreshdesk")
    >>> client.complete("instruction", "content")
    'Zendesk\\nFreshdesk'
    >>> len(client.calls)
    1
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class MockCompletionClient:
    """
    Deterministic CompletionClient for tests.

    Attributes:
        output: Value returned by complete(). Deliberately typed Any so tests
            can simulate malformed (non-string) provider output.
        responder: Optional callable (system_instruction, user_content) -> output;
            takes precedence over `output`
        delay_seconds: Sleep before answering (simulates a slow provider)
        error: Exception raised instead of answering
        calls: Recorded (system_instruction, user_content) pairs
    """

    output: Any = ""
    responder: Callable[[str, str], Any] | None = None
    delay_seconds: float = 0.0
    error: Exception | None = None
    calls: list[tuple[str, str]] = field(default_factory=list)

    def complete(self, system_instruction: str, user_content: str) -> Any:
        """Record the call, then sleep, raise or answer as configured."""
        self.calls.append((system_instruction, user_content))
        logger.debug(f"Mock completion call #{len(self.calls)}")

        if self.delay_seconds > 0:
            time.sleep(self.delay_seconds)

        if self.error is not None:
            raise self.error

        if self.responder is not None:
            return self.responder(system_instruction, user_content)

        return self.output
