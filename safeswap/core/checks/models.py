"""
Result types for the read-only pre-swap checks.

Every check produces a StateCheck with the same tagged shape: either
success with a typed payload, or failure with an error message.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar


T = TypeVar("T")


class CheckName(str, Enum):
    BALANCE = "balance"
    ALLOWANCE = "allowance"
    POOL = "pool"
    QUOTE = "quote"
    GAS = "gas"


@dataclass(frozen=True)
class StateCheck(Generic[T]):
    name: CheckName
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, name: CheckName, data: T) -> "StateCheck[T]":
        return cls(name=name, success=True, data=data)

    @classmethod
    def fail(cls, name: CheckName, error: str, **details: Any) -> "StateCheck[T]":
        return cls(name=name, success=False, error=error, details=details)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"name": self.name.value, "success": self.success}
        if self.success and self.data is not None:
            data = _stringify(asdict(self.data))
            for flag in ("has_balance", "has_allowance", "needs_approval"):
                if hasattr(self.data, flag):
                    data[flag] = getattr(self.data, flag)
            payload["data"] = data
        if not self.success:
            payload["error"] = self.error
        if self.details:
            payload["details"] = _stringify(self.details)
        return payload


def _stringify(value: Any) -> Any:
    """Render big integers as strings so reports survive JSON round trips."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, dict):
        return {k: _stringify(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_stringify(v) for v in value]
    return value


@dataclass(frozen=True)
class BalanceData:
    balance: int
    required: int
    decimals: int
    symbol: str
    balance_formatted: str
    required_formatted: str

    @property
    def has_balance(self) -> bool:
        return self.balance >= self.required


@dataclass(frozen=True)
class AllowanceData:
    allowance: int
    required: int
    decimals: int
    symbol: str
    allowance_formatted: str
    required_formatted: str

    @property
    def has_allowance(self) -> bool:
        return self.allowance >= self.required

    @property
    def needs_approval(self) -> bool:
        return not self.has_allowance


@dataclass(frozen=True)
class LiquidityInfo:
    liquidity: Optional[int] = None
    error: Optional[str] = None

    @property
    def has_liquidity(self) -> Optional[bool]:
        if self.liquidity is None:
            return None
        return self.liquidity > 0


@dataclass(frozen=True)
class PoolData:
    pool_address: str
    pool_exists: bool
    fee: int
    token_a: str
    token_b: str
    liquidity_info: Optional[LiquidityInfo] = None


@dataclass(frozen=True)
class QuoteData:
    amount_out: int
    sqrt_price_x96_after: int
    initialized_ticks_crossed: int
    gas_estimate: int
    amount_out_formatted: Optional[str] = None


@dataclass(frozen=True)
class GasData:
    gas_price: int
    gas_price_gwei: str
    block_number: int
    gas_used: int
    gas_limit: int
    utilization: int


BalanceCheck = StateCheck[BalanceData]
AllowanceCheck = StateCheck[AllowanceData]
PoolCheck = StateCheck[PoolData]
QuoteCheck = StateCheck[QuoteData]
GasCheck = StateCheck[GasData]


@dataclass(frozen=True)
class CheckSet:
    balance: BalanceCheck
    allowance: AllowanceCheck
    pool: PoolCheck
    quote: QuoteCheck
    gas: GasCheck

    def to_dict(self) -> Dict[str, Any]:
        return {
            "balance": self.balance.to_dict(),
            "allowance": self.allowance.to_dict(),
            "pool": self.pool.to_dict(),
            "quote": self.quote.to_dict(),
            "gas": self.gas.to_dict(),
        }


@dataclass(frozen=True)
class CheckSummary:
    critical_issues: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()

    @property
    def all_passed(self) -> bool:
        # Warnings never block a swap
        return len(self.critical_issues) == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "all_passed": self.all_passed,
            "critical_issues": list(self.critical_issues),
            "warnings": list(self.warnings),
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class CheckReport:
    """Findings of one comprehensive check; built fresh per swap attempt."""
    timestamp: float
    wallet_address: str
    router_address: str
    swap_params: Dict[str, Any]
    checks: CheckSet
    summary: CheckSummary

    @property
    def needs_approval(self) -> bool:
        allowance = self.checks.allowance
        return bool(allowance.success and allowance.data and allowance.data.needs_approval)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "wallet_address": self.wallet_address,
            "router_address": self.router_address,
            "swap_params": self.swap_params,
            "checks": self.checks.to_dict(),
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class QuickValidationResult:
    issues: Tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.issues
