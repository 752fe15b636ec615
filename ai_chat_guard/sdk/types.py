"""
Shared types and the assistant interface.

Both the live client and the local substitute implement Assistant and
always return a CompletionResult, so callers never inspect result shapes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from ..core.cancellation import CancellationToken
from ..core.errors import CompletionCancelled, InvalidInputError
from ..core.usage import UsageStatistic, UsageTracker

ERROR_MODEL = "error"

ROLES = ("user", "assistant")


@dataclass(frozen=True)
class ConversationTurn:
    """One prior message of a conversation."""
    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"role must be one of {list(ROLES)}, got {self.role!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConversationTurn":
        """Build a turn from a message record, ignoring extra keys."""
        return cls(role=data["role"], content=data["content"])

    def to_message(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


HistoryItem = Union[ConversationTurn, Mapping[str, Any]]


@dataclass(frozen=True)
class CompletionResult:
    """Result of one completion, successful or degraded."""
    response_text: str
    model: str
    estimated_cost: float

    @property
    def is_error(self) -> bool:
        return self.model == ERROR_MODEL


def normalize_history(history: Optional[Iterable[HistoryItem]]) -> List[ConversationTurn]:
    """Coerce caller history into turns, preserving order."""
    if not history:
        return []
    return [
        item if isinstance(item, ConversationTurn) else ConversationTurn.from_dict(item)
        for item in history
    ]


class Assistant(ABC):
    """Capability interface shared by every assistant implementation."""

    def __init__(self, usage: Optional[UsageTracker] = None):
        self.usage = usage or UsageTracker()

    @abstractmethod
    async def complete(
        self,
        user_message: str,
        history: Sequence[HistoryItem] = (),
        cancellation: Optional[CancellationToken] = None,
    ) -> CompletionResult:
        """Turn a user message plus prior turns into a response.

        Raises:
            InvalidInputError: If user_message is empty or whitespace
            CompletionCancelled: If cancellation fires first
        """

    def usage_statistics(self) -> List[UsageStatistic]:
        """Per-model share of successful completions on this instance."""
        return self.usage.statistics()

    @staticmethod
    def _validate_message(user_message: str) -> None:
        if not isinstance(user_message, str) or not user_message.strip():
            raise InvalidInputError("user_message is required and cannot be empty")

    @staticmethod
    def _check_cancelled(cancellation: Optional[CancellationToken]) -> None:
        if cancellation is not None and cancellation.cancelled:
            raise CompletionCancelled(cancellation.reason or "cancelled by caller")
