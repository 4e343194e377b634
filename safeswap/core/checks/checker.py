"""
Read-only on-chain checks that predict whether a swap would succeed.

Each individual check catches its own failures and reports them as a failed
StateCheck; none of them raise. The comprehensive check fans the five reads
out concurrently and classifies the joined results.
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional

from ...config import DeploymentConfig
from ...providers.chain import ChainClient
from ...providers.rpc import RpcError
from ..abi import ZERO_ADDRESS, decode_revert_reason, format_units
from ..validation.models import NormalizedSwapIntent
from .models import (
    AllowanceCheck,
    AllowanceData,
    BalanceCheck,
    BalanceData,
    CheckName,
    CheckReport,
    CheckSet,
    CheckSummary,
    GasCheck,
    GasData,
    LiquidityInfo,
    PoolCheck,
    PoolData,
    QuickValidationResult,
    QuoteCheck,
    QuoteData,
    StateCheck,
)


logger = logging.getLogger(__name__)


class OnChainStateChecker:
    """Pre-swap state checks against one deployment."""

    def __init__(
        self,
        chain: ChainClient,
        config: DeploymentConfig,
        clock: Callable[[], float] = time.time,
    ):
        self.chain = chain
        self.config = config
        self._clock = clock

    # ---------- individual checks ----------

    async def check_balance(self, token: str, wallet: str, required: int) -> BalanceCheck:
        """Compare the wallet's token balance with the amount to spend."""
        try:
            balance, meta = await asyncio.gather(
                self.chain.token_balance(token, wallet),
                self.chain.token_metadata(token),
            )
            return StateCheck.ok(
                CheckName.BALANCE,
                BalanceData(
                    balance=balance,
                    required=required,
                    decimals=meta.decimals,
                    symbol=meta.symbol,
                    balance_formatted=format_units(balance, meta.decimals),
                    required_formatted=format_units(required, meta.decimals),
                ),
            )
        except Exception as e:
            logger.warning(f"Balance check failed for {token}: {e}")
            return StateCheck.fail(CheckName.BALANCE, f"Balance check failed: {e}")

    async def check_allowance(
        self, token: str, owner: str, spender: str, required: int
    ) -> AllowanceCheck:
        """Compare the router's spending authorization with the amount to spend."""
        try:
            allowance, meta = await asyncio.gather(
                self.chain.token_allowance(token, owner, spender),
                self.chain.token_metadata(token),
            )
            return StateCheck.ok(
                CheckName.ALLOWANCE,
                AllowanceData(
                    allowance=allowance,
                    required=required,
                    decimals=meta.decimals,
                    symbol=meta.symbol,
                    allowance_formatted=format_units(allowance, meta.decimals),
                    required_formatted=format_units(required, meta.decimals),
                ),
            )
        except Exception as e:
            logger.warning(f"Allowance check failed for {token}: {e}")
            return StateCheck.fail(CheckName.ALLOWANCE, f"Allowance check failed: {e}")

    async def check_pool(self, token_a: str, token_b: str, fee: int) -> PoolCheck:
        """Resolve the pool for the pair and fee tier, then read its liquidity."""
        try:
            pool_address = await self.chain.get_pool(
                self.config.factory_address, token_a, token_b, fee
            )
        except Exception as e:
            logger.warning(f"Pool lookup failed for {token_a}/{token_b} fee {fee}: {e}")
            return StateCheck.fail(CheckName.POOL, f"Pool existence check failed: {e}")

        pool_exists = pool_address.lower() != ZERO_ADDRESS
        liquidity_info = None
        if pool_exists:
            try:
                liquidity_info = LiquidityInfo(liquidity=await self.chain.pool_liquidity(pool_address))
            except Exception as e:
                # Pool exists but can't read liquidity
                liquidity_info = LiquidityInfo(error=f"Could not read liquidity: {e}")

        return StateCheck.ok(
            CheckName.POOL,
            PoolData(
                pool_address=pool_address.lower(),
                pool_exists=pool_exists,
                fee=fee,
                token_a=token_a,
                token_b=token_b,
                liquidity_info=liquidity_info,
            ),
        )

    async def get_quote(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        fee: int,
        sqrt_price_limit_x96: int = 0,
    ) -> QuoteCheck:
        """Simulate the exact swap on the quoter; a revert predicts a failed swap."""
        try:
            quote = await self.chain.quote_exact_input_single(
                self.config.quoter_address,
                token_in,
                token_out,
                amount_in,
                fee,
                sqrt_price_limit_x96,
            )
        except RpcError as e:
            return StateCheck.fail(
                CheckName.QUOTE,
                f"Quote failed: {e.message}",
                revert_data=e.revert_data,
                revert_reason=decode_revert_reason(e.revert_data),
            )
        except Exception as e:
            return StateCheck.fail(CheckName.QUOTE, f"Quote failed: {e}")

        formatted = None
        try:
            meta = await self.chain.token_metadata(token_out)
            formatted = f"{format_units(quote.amount_out, meta.decimals)} {meta.symbol}"
        except Exception as e:
            logger.debug(f"Could not format quote output for {token_out}: {e}")

        return StateCheck.ok(
            CheckName.QUOTE,
            QuoteData(
                amount_out=quote.amount_out,
                sqrt_price_x96_after=quote.sqrt_price_x96_after,
                initialized_ticks_crossed=quote.initialized_ticks_crossed,
                gas_estimate=quote.gas_estimate,
                amount_out_formatted=formatted,
            ),
        )

    async def check_gas_conditions(self) -> GasCheck:
        """Current gas price and latest block utilization."""
        try:
            gas_price, block = await asyncio.gather(
                self.chain.gas_price(),
                self.chain.latest_block(),
            )
            return StateCheck.ok(
                CheckName.GAS,
                GasData(
                    gas_price=gas_price,
                    gas_price_gwei=format_units(gas_price, 9),
                    block_number=block.number,
                    gas_used=block.gas_used,
                    gas_limit=block.gas_limit,
                    utilization=block.utilization_pct,
                ),
            )
        except Exception as e:
            return StateCheck.fail(CheckName.GAS, f"Gas condition check failed: {e}")

    # ---------- aggregate checks ----------

    async def comprehensive_check(
        self,
        params: NormalizedSwapIntent,
        wallet_address: str,
        router_address: Optional[str] = None,
    ) -> CheckReport:
        """Run all five checks concurrently and classify the findings."""
        router = (router_address or self.config.router_address).lower()
        logger.info(
            f"Comprehensive pre-swap check: {params.token_in} -> {params.token_out} "
            f"fee={params.fee} amount_in={params.amount_in}"
        )

        balance, allowance, pool, quote, gas = await asyncio.gather(
            self.check_balance(params.token_in, wallet_address, params.amount_in),
            self.check_allowance(params.token_in, wallet_address, router, params.amount_in),
            self.check_pool(params.token_in, params.token_out, params.fee),
            self.get_quote(
                params.token_in,
                params.token_out,
                params.amount_in,
                params.fee,
                params.sqrt_price_limit_x96,
            ),
            self.check_gas_conditions(),
        )
        checks = CheckSet(balance=balance, allowance=allowance, pool=pool, quote=quote, gas=gas)
        summary = self._classify(params, checks)

        report = CheckReport(
            timestamp=self._clock(),
            wallet_address=wallet_address.lower(),
            router_address=router,
            swap_params=params.to_dict(),
            checks=checks,
            summary=summary,
        )
        self._log_summary(summary)
        return report

    def _classify(self, params: NormalizedSwapIntent, checks: CheckSet) -> CheckSummary:
        critical: List[str] = []
        warnings: List[str] = []
        recommendations: List[str] = []
        config = self.config

        # 1. Balance
        balance = checks.balance
        if not balance.success:
            critical.append("Balance check failed")
        elif not balance.data.has_balance:
            critical.append("Insufficient token balance")
            recommendations.append(
                f"Fund the wallet: balance {balance.data.balance_formatted} {balance.data.symbol}, "
                f"required {balance.data.required_formatted} {balance.data.symbol}"
            )

        # 2. Allowance
        allowance = checks.allowance
        if not allowance.success:
            critical.append("Allowance check failed")
        elif allowance.data.needs_approval:
            warnings.append("Token approval required before swap")
            recommendations.append("Approve the router for the swap amount before swapping")

        # 3. Pool
        pool = checks.pool
        tiers = ", ".join(str(t) for t in config.fee_tiers)
        if not pool.success:
            critical.append("Pool check failed")
        elif not pool.data.pool_exists:
            critical.append(f"No pool exists for fee tier {params.fee}")
            recommendations.append(f"Try different fee tiers: {tiers}")
        else:
            info = pool.data.liquidity_info
            if info is not None and info.has_liquidity is False:
                warnings.append("Pool has zero liquidity")
                recommendations.append(f"Try different fee tiers: {tiers}")
            elif info is not None and info.error:
                warnings.append("Could not read pool liquidity")

        # 4. Quote
        quote = checks.quote
        if not quote.success:
            critical.append("Quote failed - swap likely to fail")
        elif params.amount_out_minimum > 0 and quote.data.amount_out < params.amount_out_minimum:
            critical.append(
                f"Quoted output {quote.data.amount_out} is below amountOutMinimum "
                f"{params.amount_out_minimum} - swap would revert"
            )
            recommendations.append("Lower amountOutMinimum or raise the slippage tolerance")

        # 5. Gas
        gas = checks.gas
        if not gas.success:
            warnings.append("Could not check gas conditions")
        else:
            if float(gas.data.gas_price_gwei) > config.high_gas_price_gwei:
                warnings.append("High gas price detected")
            if gas.data.utilization > config.high_utilization_pct:
                warnings.append("High network congestion")

        # 6. Parameters
        if params.deadline <= int(self._clock()):
            critical.append("Deadline is expired")

        if not params.has_slippage_protection:
            message = "No slippage protection (amountOutMinimum = 0)"
            if config.require_slippage_protection:
                critical.append(message)
            else:
                warnings.append(message)
            recommendations.append("Set amountOutMinimum from a quote and a slippage tolerance")

        # Same fee-tier hint can come from two findings
        recommendations = list(dict.fromkeys(recommendations))

        return CheckSummary(
            critical_issues=tuple(critical),
            warnings=tuple(warnings),
            recommendations=tuple(recommendations),
        )

    def _log_summary(self, summary: CheckSummary) -> None:
        if summary.all_passed:
            logger.info("All critical pre-swap checks passed")
        else:
            logger.warning(f"Critical pre-swap issues: {', '.join(summary.critical_issues)}")
        for warning in summary.warnings:
            logger.warning(f"Pre-swap warning: {warning}")
        for rec in summary.recommendations:
            logger.info(f"Recommendation: {rec}")

    async def quick_validation(
        self,
        params: NormalizedSwapIntent,
        wallet_address: str,
        router_address: Optional[str] = None,
    ) -> QuickValidationResult:
        """Balance, allowance and deadline only."""
        router = router_address or self.config.router_address
        issues: List[str] = []

        balance, allowance = await asyncio.gather(
            self.check_balance(params.token_in, wallet_address, params.amount_in),
            self.check_allowance(params.token_in, wallet_address, router, params.amount_in),
        )

        if not balance.success:
            issues.append(balance.error)
        elif not balance.data.has_balance:
            issues.append("Insufficient balance")

        if not allowance.success:
            issues.append(allowance.error)
        elif allowance.data.needs_approval:
            issues.append("Approval required")

        if params.deadline <= int(self._clock()):
            issues.append("Deadline expired")

        return QuickValidationResult(issues=tuple(issues))
