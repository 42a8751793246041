"""Cost estimates from token usage and per-model pricing."""

from dataclasses import dataclass
from typing import Optional

from ai_commit_msg.config import Config
from ai_commit_msg.llm.base import Usage

TOKENS_PER_PRICE_UNIT = 1_000_000


@dataclass(frozen=True)
class CostInfo:
    input_tokens: int
    output_tokens: int
    input_cost: float
    output_cost: float

    @property
    def total(self) -> float:
        return self.input_cost + self.output_cost


def calculate_cost(usage: Optional[Usage], config: Config) -> Optional[CostInfo]:
    """Estimate the USD cost of a call. None when usage or pricing is unknown."""
    if usage is None or usage.input_tokens is None or usage.output_tokens is None:
        return None
    prices = config.pricing.get(config.model)
    if not isinstance(prices, dict) or "input" not in prices or "output" not in prices:
        return None
    return CostInfo(
        input_tokens=usage.input_tokens,
        output_tokens=usage.output_tokens,
        input_cost=usage.input_tokens * prices["input"] / TOKENS_PER_PRICE_UNIT,
        output_cost=usage.output_tokens * prices["output"] / TOKENS_PER_PRICE_UNIT,
    )


def _dollars(amount: float) -> str:
    if amount >= 0.01:
        return f"${amount:.4f}"
    return f"${amount:.6f}"


def format_cost(cost: CostInfo, mode: str) -> str:
    if mode == "compact":
        return _dollars(cost.total)
    if mode == "verbose":
        return f"{cost.input_tokens} in / {cost.output_tokens} out tokens, {_dollars(cost.total)}"
    return ""


def format_duration_cost(duration: float, cost: Optional[CostInfo], mode: str) -> str:
    """Duration plus, when enabled and known, the cost: '1.23s · $0.0001'."""
    duration_str = f"{duration:.2f}s"
    cost_str = format_cost(cost, mode) if cost else ""
    return f"{duration_str} · {cost_str}" if cost_str else duration_str
