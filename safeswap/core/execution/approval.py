"""
Exact-amount ERC20 approval for the swap router.
"""

import logging
from typing import Optional

from ...config import DeploymentConfig
from ...providers.chain import ChainClient
from ...providers.signer import Signer
from ..errors import ApprovalError
from .models import ApprovalResult
from .sender import TransactionSender
from .tx_builder import TransactionBuilder


logger = logging.getLogger(__name__)


class ApprovalManager:
    """
    Ensures the router may spend the swap's input amount.

    Approvals are always for the exact amount the swap needs; an allowance
    that already covers it is left untouched.
    """

    def __init__(self, chain: ChainClient, config: DeploymentConfig, sender: TransactionSender):
        self.chain = chain
        self.config = config
        self.sender = sender

    async def ensure_allowance(
        self,
        token: str,
        amount: int,
        signer: Signer,
        spender: Optional[str] = None,
    ) -> ApprovalResult:
        """
        Approve `spender` for exactly `amount` of `token` if needed.

        Returns:
            ApprovalResult; `submitted` is False when no transaction was sent

        Raises:
            ApprovalError: the approval was mined with a failure status
        """
        spender = (spender or self.config.router_address).lower()
        owner = signer.address.lower()
        token = token.lower()

        current = await self.chain.token_allowance(token, owner, spender)
        if current >= amount:
            logger.info(f"Allowance {current} of {token} already covers {amount}")
            return ApprovalResult(
                token=token,
                spender=spender,
                required_amount=amount,
                allowance_before=current,
                submitted=False,
            )

        tx = TransactionBuilder.build_erc20_approve(
            chain_id=self.sender.chain_id,
            owner_address=owner,
            token_address=token,
            spender_address=spender,
            amount=amount,
        )
        logger.info(f"Approving {spender} for {amount} of {token} (current allowance {current})")

        tx_hash = await self.sender.send(tx, signer)
        receipt = await self.sender.wait_for_confirmation(tx, tx_hash)

        if not receipt.succeeded:
            logger.error(f"Approval {tx_hash} failed with status {receipt.status}")
            raise ApprovalError(
                f"Token approval failed in transaction {tx_hash}",
                tx_hash=tx_hash,
                token=token,
                amount=amount,
            )

        logger.info(f"Approval confirmed in block {receipt.block_number}: {tx_hash}")
        return ApprovalResult(
            token=token,
            spender=spender,
            required_amount=amount,
            allowance_before=current,
            submitted=True,
            tx_hash=tx_hash,
            block_number=receipt.block_number,
        )
