"""
Model selection policies.

Two named policies are supported:
- fixed: always the same model (reproducible, cheapest by default)
- weighted: one uniform draw picks a model by cumulative probability
"""

import math
import random
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

DEFAULT_MODEL = "deepseek-chat"

# 60% DeepSeek, 40% Claude Haiku
DEFAULT_WEIGHTS: Tuple[Tuple[str, float], ...] = (
    ("deepseek-chat", 0.6),
    ("anthropic/claude-3-haiku", 0.4),
)


@dataclass(frozen=True)
class FixedModelPolicy:
    """Always select the same model."""
    model: str = DEFAULT_MODEL

    def __post_init__(self):
        if not self.model or not self.model.strip():
            raise ValueError("model is required and cannot be empty")


@dataclass(frozen=True)
class WeightedModelPolicy:
    """Select a model by weighted random draw."""
    choices: Tuple[Tuple[str, float], ...] = DEFAULT_WEIGHTS

    def __post_init__(self):
        if not self.choices:
            raise ValueError("weighted policy needs at least one model")
        # Normalise lists of lists coming from YAML
        object.__setattr__(self, "choices", tuple((m, float(p)) for m, p in self.choices))
        for model, probability in self.choices:
            if not model:
                raise ValueError("weighted policy model cannot be empty")
            if probability <= 0:
                raise ValueError(f"probability for {model} must be > 0")
        total = sum(p for _, p in self.choices)
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"probabilities must sum to 1, got {total}")


ModelPolicy = Union[FixedModelPolicy, WeightedModelPolicy]


def select_model(policy: ModelPolicy, rng: Optional[random.Random] = None) -> str:
    """Resolve a policy to a model identifier.

    Args:
        policy: Fixed or weighted policy
        rng: Random source for weighted draws (defaults to the module RNG)

    Returns:
        Model identifier
    """
    if isinstance(policy, FixedModelPolicy):
        return policy.model

    sample = (rng or random).random()
    cumulative = 0.0
    for model, probability in policy.choices:
        cumulative += probability
        if sample < cumulative:
            return model
    # Float rounding can leave sample just above the last bucket
    return policy.choices[-1][0]


def policy_from_name(name: str, weights: Optional[Sequence[Tuple[str, float]]] = None) -> ModelPolicy:
    """Build a named policy ("fixed" or "weighted")."""
    normalized = (name or "").strip().lower()
    if normalized == "fixed":
        return FixedModelPolicy()
    if normalized == "weighted":
        return WeightedModelPolicy(tuple(weights) if weights else DEFAULT_WEIGHTS)
    raise ValueError(f"Unknown model policy: {name}. Must be one of: ['fixed', 'weighted']")
