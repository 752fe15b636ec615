"""
Pricing calculations and rate management.

Per-token rates for the models served through the completion endpoint.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List

from .token_counter import estimate_tokens


@dataclass(frozen=True)
class ModelPricing:
    """Per-token pricing for a specific model."""
    display_name: str
    cost_per_token: Decimal

    @property
    def cost_per_million(self) -> Decimal:
        """Cost per 1M tokens, the unit providers quote."""
        return self.cost_per_token * Decimal("1000000")


# Unknown models are charged at this conservative rate rather than rejected
DEFAULT_PRICING = ModelPricing(
    display_name="Unknown model",
    cost_per_token=Decimal("0.000001")
)


@dataclass(frozen=True)
class PricingTable:
    """Fixed pricing table for known models."""
    prices: Dict[str, ModelPricing]
    default: ModelPricing = DEFAULT_PRICING

    def get_pricing(self, model: str) -> ModelPricing:
        """Get pricing for a specific model.

        Args:
            model: Model identifier

        Returns:
            ModelPricing for the model, or the default pricing when unknown
        """
        return self.prices.get(model, self.default)

    def is_known(self, model: str) -> bool:
        return model in self.prices


PRICING_TABLE = PricingTable({
    "deepseek-chat": ModelPricing(
        display_name="DeepSeek Chat",
        cost_per_token=Decimal("0.0000001")  # $0.10 per 1M tokens
    ),
    "anthropic/claude-3-haiku": ModelPricing(
        display_name="Claude 3 Haiku",
        cost_per_token=Decimal("0.00000025")  # $0.25 per 1M tokens
    ),
    "anthropic/claude-3-sonnet": ModelPricing(
        display_name="Claude 3 Sonnet",
        cost_per_token=Decimal("0.000003")
    ),
    "anthropic/claude-3-opus": ModelPricing(
        display_name="Claude 3 Opus",
        cost_per_token=Decimal("0.000015")
    ),
})


@dataclass(frozen=True)
class ModelInfo:
    """Catalog entry describing a selectable model."""
    id: str
    name: str
    cost_per_million: float


def list_models(table: PricingTable = PRICING_TABLE) -> List[ModelInfo]:
    """List the models in the pricing table, cheapest first."""
    models = [
        ModelInfo(
            id=model_id,
            name=pricing.display_name,
            cost_per_million=float(pricing.cost_per_million)
        )
        for model_id, pricing in table.prices.items()
    ]
    return sorted(models, key=lambda info: info.cost_per_million)


def calculate_cost(model: str, response_text: str, table: PricingTable = PRICING_TABLE) -> float:
    """Estimate the cost of a completion from its response text.

    Args:
        model: Model identifier
        response_text: Text returned by the model

    Returns:
        Estimated tokens multiplied by the model's per-token rate
    """
    pricing = table.get_pricing(model)
    tokens = estimate_tokens(response_text)
    return float(Decimal(tokens) * pricing.cost_per_token)
