"""
Swap Parameter Validation

- ParameterValidator: per-field checks that never raise
- ParameterAggregator: whole-intent validation reporting every error at once

Usage:
    from safeswap.core.validation import ParameterAggregator, ParameterValidator

    aggregator = ParameterAggregator(ParameterValidator.from_config(config))
    report = aggregator.prepare_exact_input_single({"tokenIn": "0x...", ...})
    if not report.is_valid:
        print(report.errors)
"""

from .models import (
    FieldValidationResult,
    NormalizedPathSwapIntent,
    NormalizedSwapIntent,
    PathSwapIntent,
    SwapIntent,
    ValidationReport,
)

from .validator import ParameterValidator

from .aggregator import ParameterAggregator

__all__ = [
    # Models
    "FieldValidationResult",
    "NormalizedPathSwapIntent",
    "NormalizedSwapIntent",
    "PathSwapIntent",
    "SwapIntent",
    "ValidationReport",
    # Validators
    "ParameterValidator",
    "ParameterAggregator",
]
