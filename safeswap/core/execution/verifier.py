"""
Post-swap verification from balance deltas.

Verification runs after the swap is already mined, so it reports instead of
raising: read failures land in `error` and suspicious deltas in `anomalies`.
"""

import asyncio
import logging
from typing import List, Optional

from ...providers.chain import ChainClient
from ..validation.models import NormalizedSwapIntent
from .models import BalanceSnapshot, SwapVerification, TransactionResult


logger = logging.getLogger(__name__)


class ResultVerifier:
    def __init__(self, chain: ChainClient):
        self.chain = chain

    async def _read(self, params: NormalizedSwapIntent, wallet_address: str) -> BalanceSnapshot:
        token_in_balance, token_out_balance, token_in, token_out = await asyncio.gather(
            self.chain.token_balance(params.token_in, wallet_address),
            self.chain.token_balance(params.token_out, params.recipient),
            self.chain.token_metadata(params.token_in),
            self.chain.token_metadata(params.token_out),
        )
        return BalanceSnapshot(
            token_in_balance=token_in_balance,
            token_out_balance=token_out_balance,
            token_in=token_in,
            token_out=token_out,
        )

    async def snapshot(
        self, params: NormalizedSwapIntent, wallet_address: str
    ) -> Optional[BalanceSnapshot]:
        """Pre-swap balances, or None when they can't be read."""
        try:
            return await self._read(params, wallet_address)
        except Exception as e:
            logger.warning(f"Could not snapshot balances before swap: {e}")
            return None

    async def verify(
        self,
        result: TransactionResult,
        params: NormalizedSwapIntent,
        wallet_address: str,
        before: Optional[BalanceSnapshot] = None,
    ) -> SwapVerification:
        transaction = result.to_dict()
        try:
            after = await self._read(params, wallet_address)
        except Exception as e:
            logger.warning(f"Could not read balances after swap {result.tx_hash}: {e}")
            return SwapVerification(
                transaction=transaction,
                before=before,
                error=f"Balance verification failed: {e}",
            )

        verification = SwapVerification(transaction=transaction, before=before, after=after)
        if before is None:
            return verification

        anomalies: List[str] = []
        spent = verification.token_in_spent
        received = verification.token_out_received

        if spent != params.amount_in:
            anomalies.append(f"Input spent {spent} differs from amount_in {params.amount_in}")
        if received <= 0:
            anomalies.append("No output tokens received")
        elif received < params.amount_out_minimum:
            anomalies.append(
                f"Output received {received} is below amountOutMinimum {params.amount_out_minimum}"
            )

        for anomaly in anomalies:
            logger.warning(f"Swap {result.tx_hash}: {anomaly}")
        logger.info(f"Swap {result.tx_hash} verified: spent {spent}, received {received}")

        return SwapVerification(
            transaction=transaction,
            before=before,
            after=after,
            anomalies=tuple(anomalies),
        )
