"""Local fixtures for reasoning boundary tests."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Tuple, Union

import pytest

from agent_orchestrator.llm import LLMConfig, LLMResponse, Message, RetryConfig


class MockLLMProvider:
    """Provider that replays scripted responses or errors."""

    def __init__(self, script: Iterable[Union[LLMResponse, BaseException]]):
        self.config = LLMConfig(model="mock-model")
        self.script: List[Union[LLMResponse, BaseException]] = list(script)
        self.calls: List[Tuple[List[Message], Dict[str, Any]]] = []

    async def generate(self, messages: List[Message], **kwargs: Any) -> LLMResponse:
        self.calls.append((messages, kwargs))
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


def response(content: str) -> LLMResponse:
    return LLMResponse(content=content, model="mock-model", finish_reason="stop")


# ============================================================================
# Provider Fixtures
# ============================================================================


@pytest.fixture
def make_provider():
    """Factory for scripted providers."""
    return MockLLMProvider


@pytest.fixture
def make_response():
    """Factory for provider responses."""
    return response


@pytest.fixture
def fast_retry() -> RetryConfig:
    """Create a retry config without delays."""
    return RetryConfig(max_retries=2, base_delay=0.0, jitter=False)
