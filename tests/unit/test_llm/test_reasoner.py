"""Unit tests for reasoners and the retry policy."""

from __future__ import annotations

import pytest

from agent_orchestrator.llm import (
    STUB_RESPONSE,
    AuthenticationError,
    EchoReasoner,
    LLMProvider,
    LLMReasoner,
    MalformedResponseError,
    MessageRole,
    ProviderError,
    RateLimitError,
    ReasoningCapability,
    RetryConfig,
    StubReasoner,
    TransportError,
)


# ============================================================================
# RetryConfig Tests
# ============================================================================


class TestRetryConfig:
    """Tests for the backoff schedule."""

    def test_exponential_delay(self):
        """Test exponential growth without jitter."""
        config = RetryConfig(base_delay=1.0, exponential_base=2.0, jitter=False)

        assert [config.get_delay(i) for i in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_delay_is_capped(self):
        """Test that delays never exceed max_delay."""
        config = RetryConfig(base_delay=10.0, max_delay=15.0, jitter=False)

        assert config.get_delay(5) == 15.0

    def test_delays_schedule(self):
        """Test that one delay is yielded per retry."""
        config = RetryConfig(max_retries=3, base_delay=0.5, jitter=False)

        assert list(config.delays()) == [0.5, 1.0, 2.0]
        assert list(RetryConfig(max_retries=0).delays()) == []

    def test_jitter_stays_in_range(self):
        """Test that jitter keeps the delay within half to one and a half times."""
        config = RetryConfig(base_delay=2.0, jitter=True)

        for _ in range(20):
            assert 1.0 <= config.get_delay(0) <= 3.0

    def test_negative_retries_rejected(self):
        """Test that a negative retry count is rejected."""
        with pytest.raises(ValueError):
            RetryConfig(max_retries=-1)


# ============================================================================
# LLMReasoner Tests
# ============================================================================


class TestLLMReasoner:
    """Tests for adapting a provider into a reasoning capability."""

    @pytest.mark.asyncio
    async def test_generate_returns_content(self, make_provider, make_response):
        """Test a successful generation."""
        provider = make_provider([make_response("Paris")])
        reasoner = LLMReasoner(provider, model="big-model", system_prompt="Be brief.")

        assert await reasoner.generate("Capital of France?", {}) == "Paris"

        messages, kwargs = provider.calls[0]
        assert [m.role for m in messages] == [MessageRole.SYSTEM, MessageRole.USER]
        assert messages[1].content == "Capital of France?"
        assert kwargs == {"model": "big-model"}

    @pytest.mark.asyncio
    async def test_retries_rate_limit(self, make_provider, make_response, fast_retry):
        """Test that rate limits are retried until success."""
        provider = make_provider([RateLimitError("slow down"), make_response("done")])
        reasoner = LLMReasoner(provider, retry=fast_retry)

        assert await reasoner.generate("go", {}) == "done"
        assert len(provider.calls) == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, make_provider, fast_retry):
        """Test that the last transport error is raised once retries run out."""
        provider = make_provider([TransportError(f"down {i}") for i in range(3)])
        reasoner = LLMReasoner(provider, retry=fast_retry)

        with pytest.raises(TransportError, match="down 2"):
            await reasoner.generate("go", {})
        assert len(provider.calls) == 3

    @pytest.mark.asyncio
    async def test_authentication_error_not_retried(self, make_provider, fast_retry):
        """Test that non-retryable provider errors propagate immediately."""
        provider = make_provider([AuthenticationError("bad key", provider="mock")])
        reasoner = LLMReasoner(provider, retry=fast_retry)

        with pytest.raises(AuthenticationError):
            await reasoner.generate("go", {})
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_unexpected_errors_become_transport_errors(self, make_provider):
        """Test that arbitrary client failures are wrapped."""
        provider = make_provider([ConnectionResetError("reset by peer")])
        reasoner = LLMReasoner(provider)

        with pytest.raises(TransportError) as exc_info:
            await reasoner.generate("go", {})
        assert isinstance(exc_info.value.__cause__, ConnectionResetError)
        assert isinstance(exc_info.value, ProviderError)

    @pytest.mark.asyncio
    async def test_empty_response_is_malformed(self, make_provider, make_response):
        """Test that blank content is reported as malformed."""
        provider = make_provider([make_response("   ")])
        reasoner = LLMReasoner(provider)

        with pytest.raises(MalformedResponseError):
            await reasoner.generate("go", {})

    def test_protocols(self, make_provider):
        """Test that the adapters satisfy the runtime protocols."""
        provider = make_provider([])

        assert isinstance(provider, LLMProvider)
        assert isinstance(LLMReasoner(provider), ReasoningCapability)


# ============================================================================
# Offline Reasoner Tests
# ============================================================================


class TestOfflineReasoners:
    """Tests for the echo and stub reasoners."""

    @pytest.mark.asyncio
    async def test_echo_records_calls(self):
        """Test that the echo reasoner echoes and records each call."""
        reasoner = EchoReasoner()

        assert await reasoner.generate("hello", {"k": 1}) == "[echo] hello"
        assert reasoner.calls == [("hello", {"k": 1})]

    @pytest.mark.asyncio
    async def test_stub_returns_fixed_text(self):
        """Test that the stub reasoner always returns the placeholder."""
        assert await StubReasoner().generate("anything", {}) == STUB_RESPONSE

    def test_offline_reasoners_are_capabilities(self):
        """Test that offline reasoners satisfy the reasoning protocol."""
        assert isinstance(EchoReasoner(), ReasoningCapability)
        assert isinstance(StubReasoner(), ReasoningCapability)
