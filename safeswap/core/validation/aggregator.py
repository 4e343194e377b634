"""
Whole-intent validation.

Runs every field validator regardless of earlier failures and reports all
errors at once, each prefixed with the field name.
"""

import logging
from dataclasses import replace
from typing import Any, List, Mapping, Optional, Union

from .models import (
    NormalizedPathSwapIntent,
    NormalizedSwapIntent,
    PathSwapIntent,
    SwapIntent,
    ValidationReport,
)
from .validator import ParameterValidator


logger = logging.getLogger(__name__)

DEFAULT_FEE_TIER = 3000


def _as_intent(intent: Union[SwapIntent, Mapping[str, Any]]) -> SwapIntent:
    return intent if isinstance(intent, SwapIntent) else SwapIntent.from_dict(intent)


def _as_path_intent(intent: Union[PathSwapIntent, Mapping[str, Any]]) -> PathSwapIntent:
    return intent if isinstance(intent, PathSwapIntent) else PathSwapIntent.from_dict(intent)


class ParameterAggregator:
    """Validates complete swap intents with a ParameterValidator."""

    def __init__(self, validator: ParameterValidator, require_slippage_protection: bool = False):
        self.validator = validator
        self.require_slippage_protection = require_slippage_protection

    def validate_exact_input_single(
        self, intent: Union[SwapIntent, Mapping[str, Any]]
    ) -> ValidationReport:
        intent = _as_intent(intent)
        v = self.validator
        errors: List[str] = []
        values = {}

        def collect(name: str, result) -> None:
            if result.is_valid:
                values[name] = result.normalized_value
            else:
                errors.append(f"{name}: {result.error}")

        collect("token_in", v.validate_address(intent.token_in))
        collect("token_out", v.validate_address(intent.token_out))

        fee_result = v.validate_fee_tier(intent.fee)
        collect("fee", fee_result)

        collect("recipient", v.validate_address(intent.recipient))
        collect("deadline", v.validate_deadline(intent.deadline))
        collect("amount_in", v.validate_amount(intent.amount_in))

        # A missing minimum is derived from slippage_bps by the pipeline when given
        if intent.amount_out_minimum is None and (
            not self.require_slippage_protection or intent.slippage_bps is not None
        ):
            values["amount_out_minimum"] = 0
        else:
            collect(
                "amount_out_minimum",
                v.validate_amount(
                    intent.amount_out_minimum,
                    allow_zero=not self.require_slippage_protection,
                ),
            )

        collect("sqrt_price_limit_x96", v.validate_price_limit(intent.sqrt_price_limit_x96))

        if intent.slippage_bps is not None:
            collect("slippage_bps", v.validate_slippage(intent.slippage_bps))
        else:
            values["slippage_bps"] = None

        if "token_in" in values and values.get("token_in") == values.get("token_out"):
            errors.append("token_out: Cannot swap a token for itself")

        if errors:
            logger.info(f"Swap parameters rejected with {len(errors)} error(s)")
            return ValidationReport(errors=tuple(errors), suggested_fee=fee_result.suggested_fee)

        return ValidationReport(normalized_params=NormalizedSwapIntent(**values))

    def validate_path_swap(
        self, intent: Union[PathSwapIntent, Mapping[str, Any]]
    ) -> ValidationReport:
        intent = _as_path_intent(intent)
        v = self.validator
        errors: List[str] = []
        values = {}

        amount_in = v.validate_amount(intent.amount_in)
        if amount_in.is_valid:
            values["amount_in"] = amount_in.normalized_value
        else:
            errors.append(f"amount_in: {amount_in.error}")

        amount_out_min = v.validate_amount(
            intent.amount_out_min,
            allow_zero=not self.require_slippage_protection,
        )
        if amount_out_min.is_valid:
            values["amount_out_min"] = amount_out_min.normalized_value
        else:
            errors.append(f"amount_out_min: {amount_out_min.error}")

        path = intent.path
        if not isinstance(path, (list, tuple)) or len(path) < 2:
            errors.append("path: Must be an array with at least 2 addresses")
        else:
            normalized_path = []
            for i, hop in enumerate(path):
                hop_result = v.validate_address(hop)
                if hop_result.is_valid:
                    normalized_path.append(hop_result.normalized_value)
                else:
                    errors.append(f"path[{i}]: {hop_result.error}")
            if len(normalized_path) == len(path):
                values["path"] = tuple(normalized_path)

        to_result = v.validate_address(intent.to)
        if to_result.is_valid:
            values["to"] = to_result.normalized_value
        else:
            errors.append(f"to: {to_result.error}")

        deadline = v.validate_deadline(intent.deadline)
        if deadline.is_valid:
            values["deadline"] = deadline.normalized_value
        else:
            errors.append(f"deadline: {deadline.error}")

        if errors:
            return ValidationReport(errors=tuple(errors))

        return ValidationReport(normalized_params=NormalizedPathSwapIntent(**values))

    # ---------- deadline substitution ----------

    def _fresh_deadline(self, deadline: Any) -> Optional[int]:
        """A generated deadline when the supplied one is missing or expired."""
        current = self.validator.now()
        if deadline is None:
            return self.validator.generate_deadline(now=current)
        value = self.validator.validate_deadline(deadline, now=current)
        if not value.is_valid and "expired" in (value.error or ""):
            return self.validator.generate_deadline(now=current)
        return None

    def prepare_exact_input_single(
        self, intent: Union[SwapIntent, Mapping[str, Any]]
    ) -> ValidationReport:
        """Validate after replacing a missing or expired deadline."""
        intent = _as_intent(intent)
        fresh = self._fresh_deadline(intent.deadline)
        if fresh is not None:
            logger.info(f"Substituting generated deadline {fresh}")
            intent = replace(intent, deadline=fresh)
        return self.validate_exact_input_single(intent)

    def prepare_path_swap(
        self, intent: Union[PathSwapIntent, Mapping[str, Any]]
    ) -> ValidationReport:
        intent = _as_path_intent(intent)
        fresh = self._fresh_deadline(intent.deadline)
        if fresh is not None:
            intent = replace(intent, deadline=fresh)
        return self.validate_path_swap(intent)

    def minimal_intent(
        self,
        token_in: str,
        token_out: str,
        amount_in: Union[str, int],
        recipient: str,
        fee: int = DEFAULT_FEE_TIER,
    ) -> SwapIntent:
        """
        Build a complete intent from the minimum user input.

        The minimum output is left at zero; apply slippage protection from a
        quote before executing.
        """
        return SwapIntent(
            token_in=token_in,
            token_out=token_out,
            fee=fee,
            amount_in=amount_in,
            amount_out_minimum=0,
            recipient=recipient,
            deadline=self.validator.generate_deadline(),
            sqrt_price_limit_x96=0,
        )
