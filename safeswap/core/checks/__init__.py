"""
Pre-swap On-chain Checks

Read-only checks that predict whether a swap would succeed:
- OnChainStateChecker: balance, allowance, pool, quote and gas checks
- CheckReport: joined findings classified into critical issues, warnings
  and recommendations

Usage:
    from safeswap.core.checks import OnChainStateChecker

    checker = OnChainStateChecker(chain, config)
    report = await checker.comprehensive_check(params, wallet)
    if not report.summary.all_passed:
        print(report.summary.critical_issues)
"""

from .models import (
    AllowanceData,
    BalanceData,
    CheckName,
    CheckReport,
    CheckSet,
    CheckSummary,
    GasData,
    LiquidityInfo,
    PoolData,
    QuickValidationResult,
    QuoteData,
    StateCheck,
)

from .checker import OnChainStateChecker

__all__ = [
    # Models
    "AllowanceData",
    "BalanceData",
    "CheckName",
    "CheckReport",
    "CheckSet",
    "CheckSummary",
    "GasData",
    "LiquidityInfo",
    "PoolData",
    "QuickValidationResult",
    "QuoteData",
    "StateCheck",
    # Checker
    "OnChainStateChecker",
]
