"""
Swap intent models.

SwapIntent is raw input as received from a CLI, dashboard or test; its
fields are untyped on purpose. The Normalized* forms are only ever produced
by ParameterAggregator and are the only shape later stages accept.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass(frozen=True)
class SwapIntent:
    """Raw exact-input single-pool swap request."""
    token_in: Any = None
    token_out: Any = None
    fee: Any = None
    amount_in: Any = None
    amount_out_minimum: Any = None
    recipient: Any = None
    deadline: Any = None
    slippage_bps: Any = None
    sqrt_price_limit_x96: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SwapIntent":
        """Accept either camelCase (router ABI names) or snake_case keys."""
        return cls(
            token_in=_pick(data, "token_in", "tokenIn"),
            token_out=_pick(data, "token_out", "tokenOut"),
            fee=_pick(data, "fee", "fee_tier", "feeTier"),
            amount_in=_pick(data, "amount_in", "amountIn"),
            amount_out_minimum=_pick(data, "amount_out_minimum", "amountOutMinimum"),
            recipient=_pick(data, "recipient"),
            deadline=_pick(data, "deadline"),
            slippage_bps=_pick(data, "slippage_bps", "slippageBps"),
            sqrt_price_limit_x96=_pick(
                data, "sqrt_price_limit_x96", "sqrtPriceLimitX96", "price_limit", "priceLimit"
            ),
        )


@dataclass(frozen=True)
class PathSwapIntent:
    """Raw multi-address path swap request (swapExactTokensForTokens style)."""
    amount_in: Any = None
    amount_out_min: Any = None
    path: Any = None
    to: Any = None
    deadline: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PathSwapIntent":
        return cls(
            amount_in=_pick(data, "amount_in", "amountIn"),
            amount_out_min=_pick(data, "amount_out_min", "amountOutMin"),
            path=_pick(data, "path"),
            to=_pick(data, "to"),
            deadline=_pick(data, "deadline"),
        )


@dataclass(frozen=True)
class NormalizedSwapIntent:
    """Validated exact-input single swap: lowercase addresses, base units."""
    token_in: str
    token_out: str
    fee: int
    recipient: str
    deadline: int
    amount_in: int
    amount_out_minimum: int = 0
    sqrt_price_limit_x96: int = 0
    slippage_bps: Optional[int] = None

    @property
    def has_slippage_protection(self) -> bool:
        return self.amount_out_minimum > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token_in": self.token_in,
            "token_out": self.token_out,
            "fee": self.fee,
            "recipient": self.recipient,
            "deadline": self.deadline,
            "amount_in": str(self.amount_in),
            "amount_out_minimum": str(self.amount_out_minimum),
            "sqrt_price_limit_x96": str(self.sqrt_price_limit_x96),
            "slippage_bps": self.slippage_bps,
        }


@dataclass(frozen=True)
class NormalizedPathSwapIntent:
    amount_in: int
    amount_out_min: int
    path: Tuple[str, ...]
    to: str
    deadline: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount_in": str(self.amount_in),
            "amount_out_min": str(self.amount_out_min),
            "path": list(self.path),
            "to": self.to,
            "deadline": self.deadline,
        }


@dataclass(frozen=True)
class FieldValidationResult:
    """Outcome of validating one field."""
    is_valid: bool
    error: Optional[str] = None
    normalized_value: Any = None
    suggested_fee: Optional[int] = None

    @classmethod
    def valid(cls, normalized_value: Any = None) -> "FieldValidationResult":
        return cls(is_valid=True, normalized_value=normalized_value)

    @classmethod
    def invalid(cls, error: str, suggested_fee: Optional[int] = None) -> "FieldValidationResult":
        return cls(is_valid=False, error=error, suggested_fee=suggested_fee)


NormalizedParams = Union[NormalizedSwapIntent, NormalizedPathSwapIntent]


@dataclass(frozen=True)
class ValidationReport:
    """All field errors for one validation attempt."""
    errors: Tuple[str, ...] = ()
    normalized_params: Optional[NormalizedParams] = None
    suggested_fee: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        if self.errors and self.normalized_params is not None:
            raise ValueError("normalized_params must be None when errors are present")

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "normalized_params": self.normalized_params.to_dict() if self.normalized_params else None,
            "suggested_fee": self.suggested_fee,
        }
