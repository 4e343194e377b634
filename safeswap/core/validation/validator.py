"""
Per-field validation and normalization of swap parameters.

Every method returns a FieldValidationResult and never raises, so callers
can collect every problem with an intent in one pass.
"""

import re
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Optional, Sequence

from ...config import DEFAULT_FEE_TIERS, DeploymentConfig
from ..abi import ZERO_ADDRESS, parse_units
from .models import FieldValidationResult


ADDRESS_PREFIX = "0x"
ADDRESS_LENGTH = 42
MAX_UINT160 = 2**160 - 1

_HEX_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_INTEGER_RE = re.compile(r"^-?\d+$")


def _as_int(value: Any) -> Optional[int]:
    """Interpret ints and integer strings; None for anything else."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER_RE.match(value.strip()):
        return int(value.strip())
    return None


class ParameterValidator:
    """Stateless field validators bound to one deployment's limits."""

    def __init__(
        self,
        fee_tiers: Sequence[int] = DEFAULT_FEE_TIERS,
        max_slippage_bps: int = 5000,
        default_slippage_bps: int = 50,
        default_deadline_minutes: int = 30,
        min_plausible_deadline: int = 1704067200,
        amount_decimals: int = 18,
        clock: Callable[[], float] = time.time,
    ):
        self.fee_tiers = tuple(sorted(fee_tiers))
        self.max_slippage_bps = max_slippage_bps
        self.default_slippage_bps = default_slippage_bps
        self.default_deadline_minutes = default_deadline_minutes
        self.min_plausible_deadline = min_plausible_deadline
        self.amount_decimals = amount_decimals
        self._clock = clock

    @classmethod
    def from_config(cls, config: DeploymentConfig, clock: Callable[[], float] = time.time) -> "ParameterValidator":
        return cls(
            fee_tiers=config.fee_tiers,
            max_slippage_bps=config.max_slippage_bps,
            default_slippage_bps=config.default_slippage_bps,
            default_deadline_minutes=config.default_deadline_minutes,
            min_plausible_deadline=config.min_plausible_deadline,
            amount_decimals=config.amount_decimals,
            clock=clock,
        )

    def now(self) -> int:
        return int(self._clock())

    # ---------- addresses ----------

    def validate_address(self, address: Any) -> FieldValidationResult:
        if not address or not isinstance(address, str):
            return FieldValidationResult.invalid("Address is required and must be a string")

        if not address.startswith(ADDRESS_PREFIX):
            return FieldValidationResult.invalid(f"Address must start with {ADDRESS_PREFIX}")

        if len(address) != ADDRESS_LENGTH:
            return FieldValidationResult.invalid(
                f"Address has invalid length: {len(address)}, expected {ADDRESS_LENGTH}"
            )

        if not _HEX_ADDRESS_RE.match(address):
            return FieldValidationResult.invalid("Address contains invalid hex characters")

        normalized = address.lower()
        if normalized == ZERO_ADDRESS:
            return FieldValidationResult.invalid("Zero address not allowed")

        return FieldValidationResult.valid(normalized)

    # ---------- amounts ----------

    def validate_amount(
        self,
        amount: Any,
        allow_zero: bool = False,
        decimals: Optional[int] = None,
    ) -> FieldValidationResult:
        """
        Normalize an amount to integer base units.

        A string containing "." is a human-readable quantity scaled by the
        token decimals; any other integer string or int is already in base
        units.
        """
        if amount is None or amount == "" or isinstance(amount, bool):
            return FieldValidationResult.invalid("Amount is required")

        scale = self.amount_decimals if decimals is None else decimals
        try:
            if isinstance(amount, int):
                normalized = amount
            elif isinstance(amount, Decimal):
                normalized = parse_units(format(amount, "f"), scale)
            elif isinstance(amount, str) and "." in amount:
                normalized = parse_units(amount, scale)
            elif isinstance(amount, str) and _INTEGER_RE.match(amount.strip()):
                normalized = int(amount.strip())
            else:
                return FieldValidationResult.invalid(f"Invalid amount format: {amount!r}")
        except ValueError as e:
            return FieldValidationResult.invalid(f"Invalid amount format: {e}")

        if normalized < 0:
            return FieldValidationResult.invalid("Amount cannot be negative")
        if normalized == 0 and not allow_zero:
            return FieldValidationResult.invalid("Amount cannot be zero")

        return FieldValidationResult.valid(normalized)

    # ---------- deadline ----------

    def validate_deadline(self, deadline: Any, now: Optional[int] = None) -> FieldValidationResult:
        current = self.now() if now is None else now

        if deadline is None:
            return FieldValidationResult.invalid(
                f"Deadline is expired. Current time: {current}, provided: none"
            )

        value = _as_int(deadline)
        if value is None:
            return FieldValidationResult.invalid(
                f"Deadline must be a unix timestamp in seconds, got {deadline!r}"
            )

        if value <= current:
            return FieldValidationResult.invalid(
                f"Deadline is expired. Current time: {current}, provided: {value}"
            )

        if value < self.min_plausible_deadline:
            stamp = datetime.fromtimestamp(value, tz=timezone.utc).isoformat()
            return FieldValidationResult.invalid(f"Deadline appears to be from the past ({stamp})")

        return FieldValidationResult.valid(value)

    def generate_deadline(self, minutes_from_now: Optional[int] = None, now: Optional[int] = None) -> int:
        minutes = self.default_deadline_minutes if minutes_from_now is None else minutes_from_now
        if minutes <= 0:
            raise ValueError("minutes_from_now must be positive")
        current = self.now() if now is None else now
        return current + minutes * 60

    # ---------- fee tier ----------

    def validate_fee_tier(self, fee: Any) -> FieldValidationResult:
        value = _as_int(fee)
        tiers = ", ".join(str(t) for t in self.fee_tiers)
        if value is None:
            return FieldValidationResult.invalid(
                f"Fee tier must be an integer, got {fee!r}. Valid tiers: {tiers}"
            )

        if value not in self.fee_tiers:
            # min() keeps the first of equally distant tiers, i.e. the lower one
            closest = min(self.fee_tiers, key=lambda tier: abs(tier - value))
            return FieldValidationResult.invalid(
                f"Invalid fee tier: {value}. Valid tiers: {tiers}",
                suggested_fee=closest,
            )

        return FieldValidationResult.valid(value)

    # ---------- slippage ----------

    def validate_slippage(self, slippage_bps: Any) -> FieldValidationResult:
        value = _as_int(slippage_bps)
        if value is None:
            return FieldValidationResult.invalid(
                f"Slippage must be an integer number of basis points, got {slippage_bps!r}"
            )

        if value < 0:
            return FieldValidationResult.invalid("Slippage cannot be negative")

        if value > self.max_slippage_bps:
            return FieldValidationResult.invalid(
                f"Slippage too high: {value / 100:g}%, maximum allowed: {self.max_slippage_bps / 100:g}%"
            )

        return FieldValidationResult.valid(value)

    def default_slippage(self) -> int:
        return self.default_slippage_bps

    # ---------- price limit ----------

    def validate_price_limit(self, sqrt_price_limit_x96: Any) -> FieldValidationResult:
        if sqrt_price_limit_x96 is None:
            return FieldValidationResult.valid(0)

        value = _as_int(sqrt_price_limit_x96)
        if value is None or value < 0 or value > MAX_UINT160:
            return FieldValidationResult.invalid(
                f"Price limit must be an integer in [0, 2**160), got {sqrt_price_limit_x96!r}"
            )

        return FieldValidationResult.valid(value)
