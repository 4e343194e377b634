"""
Safe swap orchestration.

Runs one swap attempt through every stage in order:

    validate -> pre-check -> approve (if needed) -> simulate -> execute -> verify

and stops at the first fatal condition. Stage exceptions are caught here,
once, and turned into a failed SwapOutcome; nothing above this layer needs
a try/except to use it.
"""

import logging
import secrets
import time
import traceback
from dataclasses import replace
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ... import config as config_module
from ...config import DeploymentConfig, Settings
from ...logging_config import swap_log_context
from ...providers.chain import ChainClient
from ...providers.rpc import JsonRpcClient
from ...providers.signer import Signer
from ..checks.checker import OnChainStateChecker
from ..errors import ErrorCategory, classify_error
from ..execution.approval import ApprovalManager
from ..execution.executor import SwapExecutor
from ..execution.sender import TransactionSender
from ..execution.verifier import ResultVerifier
from ..validation.aggregator import ParameterAggregator
from ..validation.models import NormalizedSwapIntent, SwapIntent
from ..validation.validator import ParameterValidator
from .models import EmergencyValidation, PipelineStage, SwapOutcome


logger = logging.getLogger(__name__)

BPS_DENOMINATOR = 10_000


class SwapOrchestrator:
    """
    Composes the pipeline stages against one deployment.

    Every component receives the same ChainClient and DeploymentConfig, so
    the whole stack can be pointed at another chain or at a fake.
    """

    def __init__(
        self,
        chain: ChainClient,
        config: DeploymentConfig,
        chain_id: int,
        sender: Optional[TransactionSender] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.chain = chain
        self.config = config
        self.chain_id = chain_id

        self.validator = ParameterValidator.from_config(config, clock=clock)
        self.aggregator = ParameterAggregator(
            self.validator,
            require_slippage_protection=config.require_slippage_protection,
        )
        self.checker = OnChainStateChecker(chain, config, clock=clock)
        self.sender = sender or TransactionSender(chain, config, chain_id)
        self.approvals = ApprovalManager(chain, config, self.sender)
        self.executor = SwapExecutor(chain, config, self.sender)
        self.verifier = ResultVerifier(chain)

    async def safe_swap(
        self,
        intent: Union[SwapIntent, Mapping[str, Any]],
        signer: Signer,
    ) -> SwapOutcome:
        """
        Run one swap attempt end to end.

        Returns a SwapOutcome in every case; `stage` tells how far it got.
        """
        attempt_id = f"swap_{secrets.token_hex(8)}"
        wallet = signer.address.lower()

        with swap_log_context(attempt_id, wallet):
            stage = PipelineStage.VALIDATION
            stages: Dict[str, Any] = {}

            try:
                # 1. Validate, with a generated deadline if missing or expired
                validation = self.aggregator.prepare_exact_input_single(intent)
                stages["validation"] = validation
                if not validation.is_valid:
                    logger.warning(f"Swap rejected: {'; '.join(validation.errors)}")
                    return SwapOutcome.failed(
                        attempt_id,
                        stage,
                        error=f"Parameter validation failed: {'; '.join(validation.errors)}",
                        error_category=ErrorCategory.VALIDATION,
                        **stages,
                    )
                params: NormalizedSwapIntent = validation.normalized_params

                if not params.has_slippage_protection and params.slippage_bps is not None:
                    params = await self.add_slippage_protection(params, params.slippage_bps)

                # 2. On-chain state
                stage = PipelineStage.PRE_CHECKS
                report = await self.checker.comprehensive_check(params, wallet)
                stages["pre_checks"] = report
                if not report.summary.all_passed:
                    issues = "; ".join(report.summary.critical_issues)
                    return SwapOutcome.failed(
                        attempt_id,
                        stage,
                        error=f"Pre-swap checks failed: {issues}",
                        error_category=ErrorCategory.PRE_CHECK,
                        **stages,
                    )

                # 3. Approval
                stage = PipelineStage.APPROVAL
                if report.needs_approval:
                    stages["approval"] = await self.approvals.ensure_allowance(
                        params.token_in, params.amount_in, signer
                    )

                # 4. Dry run
                stage = PipelineStage.SIMULATION
                stages["simulation"] = await self.executor.simulate(params, wallet)
                before = await self.verifier.snapshot(params, wallet)

                # 5. Execute
                stage = PipelineStage.EXECUTION
                result = await self.executor.execute(params, signer)
                stages["transaction"] = result

                # 6. Verify
                stage = PipelineStage.VERIFICATION
                stages["verification"] = await self.verifier.verify(result, params, wallet, before)

                logger.info(f"Swap attempt {attempt_id} completed: {result.tx_hash}")
                return SwapOutcome.succeeded(attempt_id, **stages)

            except Exception as e:
                context = classify_error(e)
                logger.error(f"Swap failed at {stage.value}: {e}", exc_info=True)
                return SwapOutcome.failed(
                    attempt_id,
                    stage,
                    error=str(e),
                    error_category=context.category,
                    tx_hash=context.tx_hash,
                    stack=traceback.format_exc(),
                    **stages,
                )

    async def emergency_validation(
        self,
        intent: Union[SwapIntent, Mapping[str, Any]],
        wallet_address: str,
    ) -> EmergencyValidation:
        """Parameter validation plus balance, allowance and deadline checks."""
        try:
            validation = self.aggregator.validate_exact_input_single(intent)
            if not validation.is_valid:
                return EmergencyValidation(safe=False, issues=validation.errors)

            quick = await self.checker.quick_validation(validation.normalized_params, wallet_address)
            return EmergencyValidation(safe=quick.is_valid, issues=quick.issues)
        except Exception as e:
            logger.error(f"Emergency validation failed: {e}", exc_info=True)
            return EmergencyValidation(safe=False, issues=(f"Emergency validation failed: {e}",))

    async def add_slippage_protection(
        self,
        params: NormalizedSwapIntent,
        slippage_bps: Optional[int] = None,
    ) -> NormalizedSwapIntent:
        """
        Derive amount_out_minimum from a fresh quote and a slippage tolerance.

        Params are returned unchanged when the quote fails; the pre-swap
        check reports the failed quote.
        """
        bps = self.validator.default_slippage() if slippage_bps is None else slippage_bps
        checked = self.validator.validate_slippage(bps)
        if not checked.is_valid:
            raise ValueError(checked.error)

        quote = await self.checker.get_quote(
            params.token_in,
            params.token_out,
            params.amount_in,
            params.fee,
            params.sqrt_price_limit_x96,
        )
        if not quote.success:
            logger.warning(f"Could not derive minimum output: {quote.error}")
            return params

        minimum = quote.data.amount_out * (BPS_DENOMINATOR - checked.normalized_value) // BPS_DENOMINATOR
        logger.info(
            f"Derived amountOutMinimum {minimum} from quote {quote.data.amount_out} "
            f"at {checked.normalized_value} bps"
        )
        return replace(params, amount_out_minimum=minimum, slippage_bps=checked.normalized_value)

    async def close(self) -> None:
        await self.chain.close()


def build_orchestrator(settings: Optional[Settings] = None) -> SwapOrchestrator:
    """Construct the full stack from environment settings."""
    settings = settings or config_module.settings
    rpc = JsonRpcClient(settings.rpc_url, timeout=settings.request_timeout_seconds)
    return SwapOrchestrator(
        chain=ChainClient(rpc),
        config=settings.deployment_config(),
        chain_id=settings.chain_id,
    )
