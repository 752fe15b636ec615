"""
Local assistant substitute.

Produces canned responses after a simulated delay. Used for demos,
offline work, tests, and as a fallback for the live client.
"""

import asyncio
import logging
import random
import re
from typing import Optional, Sequence, Tuple

from ..core.cancellation import CancellationToken
from ..core.errors import CompletionCancelled
from ..core.usage import UsageTracker
from .types import Assistant, CompletionResult, HistoryItem

logger = logging.getLogger(__name__)

LOCAL_MODEL = "local-mock"
LOCAL_COST = 0.00001

DEFAULT_DELAY_WINDOW: Tuple[float, float] = (0.5, 1.5)

# Checked in order; first category with a whole-word match wins
KEYWORD_RESPONSES = (
    (
        "greeting",
        ("hello", "hi", "hey", "greetings"),
        "Hello! I'm running in local mode. Ask me anything and I'll do my best to help.",
    ),
    (
        "export",
        ("export", "download", "pdf", "csv", "markdown"),
        "You can export this conversation from the chat menu as Markdown, PDF or CSV.",
    ),
    (
        "demo",
        ("demo", "mock", "test", "offline"),
        "This is the demo assistant. Responses are generated locally and no API key is used.",
    ),
)

# Each template echoes the user's message verbatim
GENERIC_RESPONSES = (
    'You said: "{message}". I\'m a local assistant, so this is a simulated reply.',
    'Thanks for your message: "{message}". Connect an API key for real answers.',
    'Interesting question: "{message}". In local mode I can only echo it back.',
)


def _matches(keywords: Sequence[str], text: str) -> bool:
    pattern = r"\b(" + "|".join(re.escape(k) for k in keywords) + r")\b"
    return re.search(pattern, text, flags=re.IGNORECASE) is not None


class LocalAssistant(Assistant):
    """Assistant that never touches the network."""

    def __init__(
        self,
        delay_window: Tuple[float, float] = DEFAULT_DELAY_WINDOW,
        rng: Optional[random.Random] = None,
        usage: Optional[UsageTracker] = None,
    ):
        """Initialize the local assistant.

        Args:
            delay_window: (min, max) simulated latency in seconds
            rng: Random source for delays and generic replies
            usage: Usage tracker (a fresh one by default)

        Raises:
            ValueError: If the delay window is invalid
        """
        super().__init__(usage)
        low, high = delay_window
        if low < 0 or high < low:
            raise ValueError("delay_window must satisfy 0 <= min <= max")
        self.delay_window = (low, high)
        self.rng = rng or random.Random()

    def respond_to(self, user_message: str) -> str:
        """Pick the canned response for a message."""
        for category, keywords, response in KEYWORD_RESPONSES:
            if _matches(keywords, user_message):
                logger.debug("Local assistant matched category %s", category)
                return response
        template = self.rng.choice(GENERIC_RESPONSES)
        return template.format(message=user_message)

    async def complete(
        self,
        user_message: str,
        history: Sequence[HistoryItem] = (),
        cancellation: Optional[CancellationToken] = None,
    ) -> CompletionResult:
        self._validate_message(user_message)
        self._check_cancelled(cancellation)

        delay = self.rng.uniform(*self.delay_window)
        if cancellation is None:
            await asyncio.sleep(delay)
        elif await cancellation.wait_for(delay):
            raise CompletionCancelled(cancellation.reason or "cancelled by caller")

        result = CompletionResult(
            response_text=self.respond_to(user_message),
            model=LOCAL_MODEL,
            estimated_cost=LOCAL_COST
        )
        self.usage.record(result.model, result.estimated_cost)
        return result
