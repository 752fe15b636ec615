"""
Unit tests for the local assistant substitute.
"""

import random
import time

import pytest

from ai_chat_guard.core.cancellation import CancellationToken
from ai_chat_guard.core.errors import CompletionCancelled, InvalidInputError
from ai_chat_guard.sdk.local_assistant import (
    LOCAL_COST,
    LOCAL_MODEL,
    LocalAssistant,
)
from ai_chat_guard.sdk.types import ConversationTurn


class TestLocalResponses:
    """Test canned response selection."""

    def setup_method(self):
        self.assistant = LocalAssistant(delay_window=(0, 0), rng=random.Random(7))

    def test_greeting(self):
        """Test greetings get the greeting reply."""
        assert self.assistant.respond_to("hey there").startswith("Hello")
        assert self.assistant.respond_to("HELLO").startswith("Hello")

    def test_export(self):
        """Test export questions get the export reply."""
        assert "export" in self.assistant.respond_to("How do I Download this chat?").lower()

    def test_demo(self):
        """Test demo questions get the demo reply."""
        assert "demo" in self.assistant.respond_to("is this a DEMO?").lower()

    def test_keywords_match_whole_words(self):
        """Test 'hi' inside another word is not a greeting."""
        reply = self.assistant.respond_to("this is something else")
        assert not reply.startswith("Hello!")
        assert "this is something else" in reply

    def test_generic_replies_echo_message(self):
        """Test every generic reply contains the message verbatim."""
        message = "What is the capital of France?"
        for seed in range(20):
            assistant = LocalAssistant(delay_window=(0, 0), rng=random.Random(seed))
            assert message in assistant.respond_to(message)

    def test_invalid_delay_window(self):
        """Test the delay window is validated."""
        with pytest.raises(ValueError, match="delay_window"):
            LocalAssistant(delay_window=(2, 1))


class TestLocalComplete:
    """Test LocalAssistant.complete."""

    @pytest.mark.asyncio
    async def test_hello_within_delay_window(self):
        """Test 'Hello' is echoed after a delay in the declared window."""
        assistant = LocalAssistant()

        start = time.monotonic()
        result = await assistant.complete("Hello")
        elapsed = time.monotonic() - start

        assert "Hello" in result.response_text
        assert 0.45 <= elapsed <= 1.7
        assert result.model == LOCAL_MODEL
        assert result.estimated_cost == LOCAL_COST
        assert result.estimated_cost > 0

    @pytest.mark.asyncio
    async def test_accepts_history(self):
        """Test history is accepted and the message echoed."""
        assistant = LocalAssistant(delay_window=(0, 0))
        history = [
            ConversationTurn("user", "Hi"),
            {"role": "assistant", "content": "Hello!"},
        ]

        result = await assistant.complete("How are you?", history)

        assert "How are you?" in result.response_text

    @pytest.mark.asyncio
    async def test_cancellation_during_delay(self):
        """Test cancellation 50ms in returns well before the delay window."""
        assistant = LocalAssistant()
        token = CancellationToken()
        token.cancel_after(0.05)

        start = time.monotonic()
        with pytest.raises(CompletionCancelled):
            await assistant.complete("Hello", cancellation=token)
        elapsed = time.monotonic() - start

        assert elapsed < 0.4
        assert assistant.usage_statistics() == []

    @pytest.mark.asyncio
    async def test_empty_message(self):
        """Test whitespace-only input is rejected."""
        assistant = LocalAssistant(delay_window=(0, 0))
        with pytest.raises(InvalidInputError):
            await assistant.complete("   ")

    @pytest.mark.asyncio
    async def test_usage_statistics(self):
        """Test completions are counted under the local model."""
        assistant = LocalAssistant(delay_window=(0, 0))
        assert assistant.usage_statistics() == []

        await assistant.complete("one")
        await assistant.complete("two")

        stats = assistant.usage_statistics()
        assert len(stats) == 1
        assert stats[0].model == LOCAL_MODEL
        assert stats[0].count == 2
        assert stats[0].percentage == 100.0
