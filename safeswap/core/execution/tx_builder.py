"""
Transaction builder for the approval and swap transactions.
"""

import secrets

from ..abi import APPROVE_SELECTOR, EXACT_INPUT_SINGLE_SELECTOR, encode_call
from ..validation.models import NormalizedSwapIntent
from .models import PreparedTransaction, TransactionType


class TransactionBuilder:
    """
    Builds unsigned transactions for the swap pipeline.

    Handles:
    - ERC20 approvals for an exact amount
    - SwapRouter.exactInputSingle swaps
    """

    @staticmethod
    def generate_tx_id() -> str:
        """Generate a unique transaction ID."""
        return f"tx_{secrets.token_hex(16)}"

    @staticmethod
    def build_erc20_approve(
        chain_id: int,
        owner_address: str,
        token_address: str,
        spender_address: str,
        amount: int,
        description: str = "",
    ) -> PreparedTransaction:
        """
        Build an ERC20 approval transaction.

        Args:
            chain_id: The chain ID
            owner_address: The token owner (sender)
            token_address: The ERC20 token contract
            spender_address: The address being approved to spend
            amount: The exact amount to approve
            description: Human-readable description

        Returns:
            PreparedTransaction ready for gas, nonce and signing
        """
        # Encode: approve(address spender, uint256 amount)
        calldata = encode_call(APPROVE_SELECTOR, spender_address, amount)

        return PreparedTransaction(
            tx_id=TransactionBuilder.generate_tx_id(),
            tx_type=TransactionType.APPROVE,
            chain_id=chain_id,
            from_address=owner_address.lower(),
            to_address=token_address.lower(),
            data=calldata,
            value=0,
            description=description or f"Approve {spender_address[:10]}... to spend {amount}",
        )

    @staticmethod
    def build_exact_input_single(
        chain_id: int,
        from_address: str,
        router_address: str,
        params: NormalizedSwapIntent,
        description: str = "",
    ) -> PreparedTransaction:
        """
        Build a SwapRouter.exactInputSingle transaction.

        The parameter tuple is static, so it encodes as eight consecutive
        words in ABI field order.
        """
        calldata = encode_call(
            EXACT_INPUT_SINGLE_SELECTOR,
            params.token_in,
            params.token_out,
            params.fee,
            params.recipient,
            params.deadline,
            params.amount_in,
            params.amount_out_minimum,
            params.sqrt_price_limit_x96,
        )

        return PreparedTransaction(
            tx_id=TransactionBuilder.generate_tx_id(),
            tx_type=TransactionType.SWAP,
            chain_id=chain_id,
            from_address=from_address.lower(),
            to_address=router_address.lower(),
            data=calldata,
            value=0,
            description=description or (
                f"Swap {params.amount_in} of {params.token_in[:10]}... "
                f"for {params.token_out[:10]}... (fee {params.fee})"
            ),
        )
