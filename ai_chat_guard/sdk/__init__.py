"""
SDK for AI Chat Guard.

Provides the assistant interface, its live and local implementations,
and the factory that chooses between them.
"""

from ..core.cancellation import CancellationToken
from ..core.errors import CompletionCancelled, InvalidInputError
from .factory import create_assistant
from .local_assistant import LocalAssistant
from .openrouter_client import LiveAssistant
from .types import Assistant, CompletionResult, ConversationTurn

__all__ = [
    "Assistant",
    "CancellationToken",
    "CompletionCancelled",
    "CompletionResult",
    "ConversationTurn",
    "InvalidInputError",
    "LiveAssistant",
    "LocalAssistant",
    "create_assistant",
]
