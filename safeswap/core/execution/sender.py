"""
Gas pricing, nonce assignment, signing, broadcast and confirmation.

Shared by the approval and swap stages so both follow the same gas policy
and the same per-account submission discipline.
"""

import logging
from typing import Optional

from ...config import DeploymentConfig
from ...providers.chain import ChainClient, TransactionReceipt
from ...providers.signer import Signer
from ..errors import GasEstimationError, ReceiptUnavailableError, TransactionTimeoutError
from .models import GasEstimate, PreparedTransaction
from .nonce_manager import NonceManager


logger = logging.getLogger(__name__)


class TransactionSender:
    """Prices, signs and broadcasts PreparedTransactions for one chain."""

    def __init__(
        self,
        chain: ChainClient,
        config: DeploymentConfig,
        chain_id: int,
        nonce_manager: Optional[NonceManager] = None,
    ):
        self.chain = chain
        self.config = config
        self.chain_id = chain_id
        self.nonce_manager = nonce_manager or NonceManager(chain, chain_id)

    async def estimate_gas(self, tx: PreparedTransaction) -> GasEstimate:
        """
        Estimate gas for a transaction and apply the safety margins.

        Raises:
            GasEstimationError: the node refused to estimate; nothing was sent
        """
        try:
            raw_estimate = await self.chain.estimate_gas(tx.to_call_dict())
            network_price = await self.chain.gas_price()
        except Exception as e:
            logger.error(f"Gas estimation failed for {tx.tx_id}: {e}")
            raise GasEstimationError(f"Failed to estimate gas: {e}") from e

        estimate = GasEstimate(
            gas_limit=raw_estimate * self.config.gas_limit_multiplier_pct // 100,
            gas_price_wei=network_price * self.config.gas_price_premium_pct // 100,
            raw_gas_estimate=raw_estimate,
            network_gas_price_wei=network_price,
        )
        logger.info(
            f"Gas for {tx.tx_type.value} {tx.tx_id}: limit={estimate.gas_limit} "
            f"(estimate {raw_estimate}), price={estimate.gas_price_wei} wei"
        )
        return estimate

    async def send(self, tx: PreparedTransaction, signer: Signer) -> str:
        """
        Assign a nonce, sign and broadcast while holding the account lock.

        The nonce is released again if signing or broadcast fails.

        Returns:
            The transaction hash
        """
        if signer.address.lower() != tx.from_address.lower():
            raise ValueError(
                f"Signer {signer.address} cannot send transaction from {tx.from_address}"
            )

        if tx.gas_estimate is None:
            tx.gas_estimate = await self.estimate_gas(tx)

        address = tx.from_address
        async with self.nonce_manager.account_lock(address):
            tx.nonce = await self.nonce_manager.get_next_nonce(address)
            try:
                raw_tx = signer.sign_transaction(tx.to_signable_dict())
                tx_hash = await self.chain.send_raw_transaction(raw_tx)
            except Exception:
                await self.nonce_manager.release_nonce(address, tx.nonce)
                raise

        logger.info(f"Submitted {tx.tx_type.value} {tx.tx_id} as {tx_hash} (nonce {tx.nonce})")
        return tx_hash

    async def wait_for_confirmation(self, tx: PreparedTransaction, tx_hash: str) -> TransactionReceipt:
        """
        Wait for the receipt of a broadcast transaction.

        Raises:
            TransactionTimeoutError: no receipt within the configured timeout
            ReceiptUnavailableError: polling for the receipt failed
        """
        timeout = self.config.confirmation_timeout_seconds
        try:
            receipt = await self.chain.wait_for_receipt(
                tx_hash,
                timeout=timeout,
                poll_interval=self.config.receipt_poll_interval_seconds,
            )
        except Exception as e:
            logger.error(f"Receipt polling for {tx_hash} failed: {e}")
            raise ReceiptUnavailableError(
                f"Transaction {tx_hash} was broadcast but its receipt could not be read: {e}",
                tx_hash=tx_hash,
                cause=str(e),
            ) from e

        if receipt is None:
            logger.warning(f"No receipt for {tx_hash} after {timeout}s")
            raise TransactionTimeoutError(
                f"Transaction {tx_hash} not confirmed within {timeout}s",
                tx_hash=tx_hash,
                timeout_seconds=timeout,
            )

        # Mined transactions consume their nonce even when they revert
        if tx.nonce is not None:
            await self.nonce_manager.confirm_nonce(tx.from_address, tx.nonce)
        return receipt
