"""
Swap simulation and execution.

Handles the swap transaction lifecycle:
- Dry run against the router (nothing committed, no gas spent)
- Gas estimation with safety margins
- Nonce assignment, signing and submission
- Confirmation monitoring

Nothing here retries; every failure ends the attempt.
"""

import logging
from datetime import datetime, timezone

from ...config import DeploymentConfig
from ...providers.chain import ChainClient
from ...providers.rpc import RpcError
from ...providers.signer import Signer
from ..abi import decode_revert_reason, decode_uint, format_units
from ..errors import ExecutionRevertedError, SimulationError
from ..validation.models import NormalizedSwapIntent
from .models import SimulationResult, TransactionResult
from .sender import TransactionSender
from .tx_builder import TransactionBuilder


logger = logging.getLogger(__name__)


class SwapExecutor:
    """
    Executes exactInputSingle swaps through the configured router.

    Responsibilities:
    - Simulate the swap and compare the predicted output with the minimum
    - Build, price and submit the swap transaction
    - Turn a reverted receipt into ExecutionRevertedError
    """

    def __init__(self, chain: ChainClient, config: DeploymentConfig, sender: TransactionSender):
        self.chain = chain
        self.config = config
        self.sender = sender

    def _build(self, params: NormalizedSwapIntent, from_address: str):
        return TransactionBuilder.build_exact_input_single(
            chain_id=self.sender.chain_id,
            from_address=from_address,
            router_address=self.config.router_address,
            params=params,
        )

    async def simulate(self, params: NormalizedSwapIntent, wallet_address: str) -> SimulationResult:
        """
        Run the swap as a state-simulating call from the wallet.

        Raises:
            SimulationError: the call reverted, or the predicted output is
                below amount_out_minimum
        """
        tx = self._build(params, wallet_address)

        try:
            data = await self.chain.call(tx.to_address, tx.data, from_address=tx.from_address)
        except RpcError as e:
            reason = decode_revert_reason(e.revert_data) or e.message
            logger.warning(f"Swap simulation reverted: {reason}")
            raise SimulationError(
                f"Swap simulation failed: {reason}",
                revert_data=e.revert_data,
                amount_out_minimum=params.amount_out_minimum,
            ) from e

        amount_out = decode_uint(data)

        if amount_out < params.amount_out_minimum:
            raise SimulationError(
                f"Predicted output {amount_out} is below amountOutMinimum {params.amount_out_minimum}",
                predicted_amount_out=amount_out,
                amount_out_minimum=params.amount_out_minimum,
            )

        try:
            meta = await self.chain.token_metadata(params.token_out)
            formatted = f"{format_units(amount_out, meta.decimals)} {meta.symbol}"
        except Exception as e:
            logger.debug(f"Could not format simulated output: {e}")
            formatted = str(amount_out)

        logger.info(f"Simulation passed: expected output {formatted}")
        return SimulationResult(
            amount_out=amount_out,
            formatted_output=formatted,
            amount_out_minimum=params.amount_out_minimum,
        )

    async def execute(self, params: NormalizedSwapIntent, signer: Signer) -> TransactionResult:
        """
        Submit the swap and wait for it to be mined.

        Raises:
            GasEstimationError: estimation failed; nothing was broadcast
            TransactionTimeoutError: no receipt within the timeout
            ReceiptUnavailableError: the receipt could not be read after broadcast
            ExecutionRevertedError: mined with a failure status
        """
        tx = self._build(params, signer.address)
        tx.gas_estimate = await self.sender.estimate_gas(tx)

        submitted_at = datetime.now(timezone.utc)
        tx_hash = await self.sender.send(tx, signer)
        receipt = await self.sender.wait_for_confirmation(tx, tx_hash)
        confirmed_at = datetime.now(timezone.utc)

        if not receipt.succeeded:
            logger.error(f"Swap {tx_hash} reverted in block {receipt.block_number}")
            raise ExecutionRevertedError(
                f"Swap transaction {tx_hash} reverted",
                tx_hash=tx_hash,
                receipt=receipt.raw,
            )

        logger.info(
            f"Swap confirmed in block {receipt.block_number}: {tx_hash} "
            f"(gas used {receipt.gas_used} of {tx.gas_estimate.gas_limit})"
        )
        return TransactionResult(
            tx_hash=tx_hash,
            receipt=receipt,
            gas_limit=tx.gas_estimate.gas_limit,
            gas_price_wei=tx.gas_estimate.gas_price_wei,
            submitted_at=submitted_at,
            confirmed_at=confirmed_at,
        )
