"""Reasoning capabilities agents think with.

``LLMReasoner`` adapts a chat-style ``LLMProvider`` into the prompt-in,
text-out ``ReasoningCapability`` agents consume. ``EchoReasoner`` and
``StubReasoner`` are offline capabilities for development and tests.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Type

from agent_orchestrator.llm.base import (
    LLMProvider,
    LLMResponse,
    Message,
    RetryConfig,
)
from agent_orchestrator.llm.errors import (
    MalformedResponseError,
    ProviderError,
    RateLimitError,
    TransportError,
)
from agent_orchestrator.observability.logging import get_logger

logger = get_logger(__name__)

STUB_RESPONSE = "This is a stubbed response for testing purposes."


class LLMReasoner:
    """Adapt an ``LLMProvider`` to the ``ReasoningCapability`` contract.

    Example:
        reasoner = LLMReasoner(provider, system_prompt="You are helpful.")
        text = await reasoner.generate("Summarize the report", {})
    """

    retryable_errors: Tuple[Type[ProviderError], ...] = (RateLimitError, TransportError)

    def __init__(
        self,
        provider: LLMProvider,
        model: Optional[str] = None,
        system_prompt: Optional[str] = None,
        retry: Optional[RetryConfig] = None,
    ):
        """Initialize the reasoner.

        Args:
            provider: Chat-style provider to delegate to.
            model: Model override passed to the provider.
            system_prompt: Optional system message sent with every prompt.
            retry: Backoff settings for rate-limit and transport failures.
        """
        self.provider = provider
        self.model = model
        self.system_prompt = system_prompt
        self.retry = retry or RetryConfig()

    def _build_messages(self, prompt: str) -> List[Message]:
        if self.system_prompt:
            return [Message.system(self.system_prompt), Message.user(prompt)]
        return [Message.user(prompt)]

    async def generate(self, prompt: str, context: Dict[str, Any]) -> str:
        """Generate text for ``prompt``.

        Raises:
            ProviderError: When the provider fails after retries, or returns
                an empty response.
        """
        kwargs: Dict[str, Any] = {}
        if self.model:
            kwargs["model"] = self.model

        response = await self._call_with_retries(self._build_messages(prompt), **kwargs)
        if response.is_empty:
            raise MalformedResponseError(
                "Provider returned an empty response",
                response=response,
            )
        return response.content

    async def _call_with_retries(
        self, messages: List[Message], **kwargs: Any
    ) -> LLMResponse:
        """Call the provider, retrying rate-limit and transport errors.

        Raises:
            The last retryable error once the retry delays are used up.
        """
        delays = self.retry.delays()
        attempt = 0
        while True:
            attempt += 1
            try:
                return await self.provider.generate(messages, **kwargs)
            except self.retryable_errors as e:
                delay = next(delays, None)
                if delay is None:
                    raise
                logger.warning(
                    "reasoning_retry",
                    attempt=attempt,
                    delay=round(delay, 3),
                    error=str(e),
                )
                await asyncio.sleep(delay)
            except ProviderError:
                raise
            except Exception as e:
                raise TransportError(f"Provider call failed: {e}") from e


@dataclass
class EchoReasoner:
    """Offline reasoner that echoes the prompt back.

    Every call is recorded as a ``(prompt, context)`` pair in ``calls``.
    """

    prefix: str = "[echo]"
    calls: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)

    async def generate(self, prompt: str, context: Dict[str, Any]) -> str:
        self.calls.append((prompt, dict(context)))
        return f"{self.prefix} {prompt}"


class StubReasoner:
    """Reasoner that always returns the fixed stub placeholder."""

    async def generate(self, prompt: str, context: Dict[str, Any]) -> str:
        return STUB_RESPONSE
