"""
Live OpenRouter assistant.

Wraps the OpenAI-compatible chat completions endpoint with a timeout,
cooperative cancellation, retry with exponential backoff, cost estimation
and per-model usage counting. Provider failures never escape complete();
they come back as an error CompletionResult.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from openai import AsyncOpenAI

from ..core.cancellation import CancellationToken
from ..core.errors import (
    CompletionCancelled,
    FailureCategory,
    ProviderFailure,
    classify_exception,
)
from ..core.model_policy import FixedModelPolicy, ModelPolicy, select_model
from ..core.pricing import PRICING_TABLE, PricingTable, calculate_cost
from ..core.retry import RetryPolicy, RetryState
from ..core.usage import UsageTracker
from .types import (
    ERROR_MODEL,
    Assistant,
    CompletionResult,
    HistoryItem,
    normalize_history,
)

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_SITE_NAME = "My Chat App"
DEFAULT_REFERER = "http://localhost:3000"
DEFAULT_TIMEOUT_SECONDS = 90.0
TEMPERATURE = 0.7
MAX_TOKENS = 1000


class LiveAssistant(Assistant):
    """Assistant backed by the OpenRouter chat completions API.

    Retries transient failures (rate limits, 5xx, network errors, internal
    timeouts) and returns a user-safe error result for everything else.
    """

    def __init__(
        self,
        api_key: str,
        site_name: str = DEFAULT_SITE_NAME,
        model_policy: Optional[ModelPolicy] = None,
        model: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retry_policy: Optional[RetryPolicy] = None,
        fallback: Optional[Assistant] = None,
        pricing: PricingTable = PRICING_TABLE,
        referer: str = DEFAULT_REFERER,
        base_url: str = OPENROUTER_BASE_URL,
        client: Optional[Any] = None,
        usage: Optional[UsageTracker] = None,
    ):
        """Initialize the live assistant.

        Args:
            api_key: OpenRouter API key (required)
            site_name: Display name sent as the X-Title header
            model_policy: Policy used when no explicit model is set
            model: Explicit model override
            timeout: Per-attempt timeout in seconds
            retry_policy: Backoff policy (3 attempts, 1s/2s by default)
            fallback: Assistant used once retries are exhausted
            pricing: Cost table for estimates
            referer: Value of the HTTP-Referer header
            base_url: API base URL
            client: Pre-built AsyncOpenAI-compatible client
            usage: Usage tracker (a fresh one by default)

        Raises:
            ValueError: If api_key is missing or timeout is not positive
        """
        if not api_key or not api_key.strip():
            raise ValueError("api_key is required and cannot be empty")
        if timeout <= 0:
            raise ValueError("timeout must be > 0")

        super().__init__(usage)
        self.site_name = site_name or DEFAULT_SITE_NAME
        self.model_policy = model_policy or FixedModelPolicy()
        self.model = model
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self.fallback = fallback
        self.pricing = pricing
        self.client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            default_headers={
                "HTTP-Referer": referer,
                "X-Title": self.site_name,
            },
        )

    def resolve_model(self) -> str:
        """Explicit override first, then the configured policy."""
        if self.model:
            return self.model
        return select_model(self.model_policy)

    @staticmethod
    def build_messages(user_message: str, history: Sequence[HistoryItem] = ()) -> List[Dict[str, str]]:
        """History in the given order, followed by the new user turn."""
        messages = [turn.to_message() for turn in normalize_history(history)]
        messages.append({"role": "user", "content": user_message})
        return messages

    async def complete(
        self,
        user_message: str,
        history: Sequence[HistoryItem] = (),
        cancellation: Optional[CancellationToken] = None,
    ) -> CompletionResult:
        self._validate_message(user_message)
        self._check_cancelled(cancellation)

        model = self.resolve_model()
        payload = {
            "model": model,
            "messages": self.build_messages(user_message, history),
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        }

        state = RetryState.ATTEMPTING
        attempt = 0
        failure: Optional[ProviderFailure] = None
        response_text = ""

        while True:
            if state is RetryState.ATTEMPTING:
                attempt += 1
                try:
                    response_text = await self._attempt(payload, cancellation)
                except ProviderFailure as exc:
                    failure = exc
                    state = self.retry_policy.next_state(attempt, exc.retryable)
                    logger.warning(
                        "OpenRouter attempt %d/%d failed (%s): %s",
                        attempt, self.retry_policy.max_attempts, exc.category.value, exc
                    )
                else:
                    state = RetryState.SUCCEEDED

            elif state is RetryState.BACKING_OFF:
                delay = self.retry_policy.delay_for(attempt)
                logger.info("Retrying OpenRouter request in %.1fs", delay)
                await self._pause(delay, cancellation)
                state = RetryState.ATTEMPTING

            elif state is RetryState.SUCCEEDED:
                if not self.pricing.is_known(model):
                    logger.warning("No listed price for %s, estimating at the default rate", model)
                cost = calculate_cost(model, response_text, self.pricing)
                self.usage.record(model, cost)
                return CompletionResult(response_text=response_text, model=model, estimated_cost=cost)

            else:
                return await self._exhausted(failure, user_message, history, cancellation)

    async def _attempt(self, payload: Dict[str, Any], cancellation: Optional[CancellationToken]) -> str:
        """One provider call, classified and validated."""
        self._check_cancelled(cancellation)
        try:
            response = await self._send(payload, cancellation)
        except (CompletionCancelled, ProviderFailure):
            raise
        except Exception as exc:
            raise classify_exception(exc) from exc
        return self._extract_text(response)

    async def _send(self, payload: Dict[str, Any], cancellation: Optional[CancellationToken]) -> Any:
        """Issue the request, aborting on timeout or caller cancellation."""
        request = asyncio.ensure_future(self.client.chat.completions.create(**payload))
        waiters = {request}
        stop = None
        if cancellation is not None:
            stop = asyncio.ensure_future(cancellation.wait())
            waiters.add(stop)

        try:
            done, pending = await asyncio.wait(
                waiters, timeout=self.timeout, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            for task in waiters:
                task.cancel()
            raise

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        if request in done:
            return request.result()
        if stop is not None and stop in done:
            raise CompletionCancelled(cancellation.reason or "cancelled by caller")
        raise ProviderFailure(
            f"Request timed out after {self.timeout}s", FailureCategory.TIMEOUT
        )

    @staticmethod
    def _extract_text(response: Any) -> str:
        """First choice's message content; anything else is malformed."""
        choices = getattr(response, "choices", None)
        if not choices:
            raise ProviderFailure("Response contained no choices", FailureCategory.MALFORMED_RESPONSE)
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise ProviderFailure("Response choice had no text", FailureCategory.MALFORMED_RESPONSE)
        return content

    async def _pause(self, delay: float, cancellation: Optional[CancellationToken]) -> None:
        if cancellation is None:
            await asyncio.sleep(delay)
        elif await cancellation.wait_for(delay):
            raise CompletionCancelled(cancellation.reason or "cancelled by caller")

    async def _exhausted(
        self,
        failure: ProviderFailure,
        user_message: str,
        history: Sequence[HistoryItem],
        cancellation: Optional[CancellationToken],
    ) -> CompletionResult:
        """Resolve a failed completion to a fallback or error result."""
        if failure.retryable and self.fallback is not None:
            logger.warning("OpenRouter retries exhausted, using fallback assistant")
            try:
                return await self.fallback.complete(user_message, history, cancellation)
            except CompletionCancelled:
                raise
            except Exception:
                logger.exception("Fallback assistant failed")

        logger.error(
            "OpenRouter completion failed (%s, status=%s): %s",
            failure.category.value, failure.status_code, failure
        )
        return CompletionResult(
            response_text=failure.user_message,
            model=ERROR_MODEL,
            estimated_cost=0.0
        )
