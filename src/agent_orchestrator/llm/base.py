"""Base types and protocols for the reasoning boundary.

The orchestration core consumes a single capability: turn a prompt (plus
context) into text. ``ReasoningCapability`` is that contract. Chat-style
providers that speak in messages are adapted to it by
``agent_orchestrator.llm.reasoner.LLMReasoner``.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Protocol, runtime_checkable


class MessageRole(str, Enum):
    """Who a chat message is attributed to."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Message:
    """One chat message sent to a provider."""

    role: MessageRole
    content: str

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(MessageRole.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(MessageRole.USER, content)

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass
class LLMResponse:
    """What a provider hands back for one call."""

    content: Optional[str]
    model: str
    finish_reason: Optional[str] = None
    usage: Dict[str, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not isinstance(self.content, str) or not self.content.strip()


@dataclass
class RetryConfig:
    """Exponential backoff for retryable provider failures.

    Attributes:
        max_retries: Retries after the first attempt.
        base_delay: Delay before the first retry, in seconds.
        max_delay: Upper bound on any single delay.
        exponential_base: Growth factor between retries.
        jitter: Scale each delay by a random factor in [0.5, 1.5).
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: bool = True

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay < 0:
            raise ValueError("base_delay must be >= 0")

    def get_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt + 1``."""
        delay = min(self.base_delay * self.exponential_base**attempt, self.max_delay)
        if self.jitter:
            delay *= 0.5 + random.random()
        return delay

    def delays(self) -> Iterator[float]:
        """Yield the delay before each retry, ``max_retries`` in total."""
        for attempt in range(self.max_retries):
            yield self.get_delay(attempt)


@dataclass
class LLMConfig:
    """Settings a chat provider was built with."""

    model: str
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    timeout: float = 60.0
    extra_params: Dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class LLMProvider(Protocol):
    """Chat-style provider, supplied by the caller.

    Anything with this shape can be wrapped in an ``LLMReasoner``. Failures
    should be raised as ``ProviderError`` subclasses; anything else is
    treated as a transport failure.
    """

    config: LLMConfig

    async def generate(self, messages: List[Message], **kwargs: Any) -> LLMResponse: ...


@runtime_checkable
class ReasoningCapability(Protocol):
    """The text-generation capability agents think with.

    Implementations raise ``ProviderError`` (or a subclass) for auth,
    rate-limit, transport and malformed-response failures.
    """

    async def generate(self, prompt: str, context: Dict[str, Any]) -> str:
        """Generate a completion for ``prompt``.

        Args:
            prompt: The fully built prompt.
            context: Structured context the prompt was built from.

        Returns:
            The generated text.
        """
        ...
