"""
Failure taxonomy for assistant completions.

Classifies provider failures as retryable or terminal and maps each
category to a short message that can be shown to the user as-is.
"""

import asyncio
from enum import Enum
from typing import Dict, Optional

import openai


class FailureCategory(Enum):
    """Why a provider call failed."""
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    INSUFFICIENT_QUOTA = "insufficient_quota"
    MALFORMED_RESPONSE = "malformed_response"
    UNKNOWN = "unknown"


RETRYABLE_CATEGORIES = frozenset({
    FailureCategory.TIMEOUT,
    FailureCategory.RATE_LIMIT,
    FailureCategory.SERVER,
    FailureCategory.NETWORK,
})


USER_MESSAGES: Dict[FailureCategory, str] = {
    FailureCategory.TIMEOUT: "The assistant took too long to respond. Please try again.",
    FailureCategory.RATE_LIMIT: "The assistant is receiving too many requests right now. Please wait a moment and try again.",
    FailureCategory.AUTHENTICATION: "The assistant is unavailable due to a configuration issue. Please contact support.",
    FailureCategory.INSUFFICIENT_QUOTA: "The assistant's usage quota has been reached. Please try again later.",
    FailureCategory.NETWORK: "Unable to reach the assistant. Please check your connection and try again.",
}

GENERIC_MESSAGE = "Sorry, I encountered an error. Please try again."


def user_message_for(category: FailureCategory) -> str:
    """Get the user-facing message for a failure category."""
    return USER_MESSAGES.get(category, GENERIC_MESSAGE)


class AssistantError(Exception):
    """Base class for assistant errors."""


class InvalidInputError(AssistantError, ValueError):
    """Raised when a completion is requested for an empty message."""


class CompletionCancelled(AssistantError):
    """Raised when the caller cancels a completion."""


class ProviderFailure(AssistantError):
    """A classified failure of one provider call."""

    def __init__(self, message: str, category: FailureCategory, status_code: Optional[int] = None):
        super().__init__(message)
        self.category = category
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.category in RETRYABLE_CATEGORIES

    @property
    def user_message(self) -> str:
        return user_message_for(self.category)


def category_for_status(status_code: int) -> FailureCategory:
    """Map an HTTP status code to a failure category."""
    if status_code == 401:
        return FailureCategory.AUTHENTICATION
    if status_code == 402:
        return FailureCategory.INSUFFICIENT_QUOTA
    if status_code == 429:
        return FailureCategory.RATE_LIMIT
    if status_code >= 500:
        return FailureCategory.SERVER
    return FailureCategory.UNKNOWN


def classify_exception(exc: BaseException) -> ProviderFailure:
    """Turn an exception raised by a provider call into a ProviderFailure.

    Order matters: APITimeoutError is a subclass of APIConnectionError.

    Args:
        exc: Exception raised while calling the provider

    Returns:
        ProviderFailure carrying the category and HTTP status, if any
    """
    if isinstance(exc, ProviderFailure):
        return exc
    if isinstance(exc, (openai.APITimeoutError, asyncio.TimeoutError)):
        return ProviderFailure(str(exc) or "Request timed out", FailureCategory.TIMEOUT)
    if isinstance(exc, openai.APIConnectionError):
        return ProviderFailure(str(exc), FailureCategory.NETWORK)
    if isinstance(exc, openai.APIStatusError):
        return ProviderFailure(
            str(exc),
            category_for_status(exc.status_code),
            status_code=exc.status_code
        )
    if isinstance(exc, openai.APIResponseValidationError):
        return ProviderFailure(str(exc), FailureCategory.MALFORMED_RESPONSE)
    return ProviderFailure(f"{type(exc).__name__}: {exc}", FailureCategory.UNKNOWN)
