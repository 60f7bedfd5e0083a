"""Reasoning boundary: provider protocols, errors and reasoners."""

from agent_orchestrator.llm.base import (
    LLMConfig,
    LLMProvider,
    LLMResponse,
    Message,
    MessageRole,
    ReasoningCapability,
    RetryConfig,
)
from agent_orchestrator.llm.errors import (
    AuthenticationError,
    MalformedResponseError,
    ProviderError,
    RateLimitError,
    TransportError,
)
from agent_orchestrator.llm.reasoner import (
    STUB_RESPONSE,
    EchoReasoner,
    LLMReasoner,
    StubReasoner,
)

__all__ = [
    # Base types
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "Message",
    "MessageRole",
    "ReasoningCapability",
    "RetryConfig",
    # Errors
    "AuthenticationError",
    "MalformedResponseError",
    "ProviderError",
    "RateLimitError",
    "TransportError",
    # Reasoners
    "STUB_RESPONSE",
    "EchoReasoner",
    "LLMReasoner",
    "StubReasoner",
]
