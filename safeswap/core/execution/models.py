"""
Transaction execution models and types.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ...providers.chain import TokenMetadata, TransactionReceipt
from ..abi import format_units


class TransactionType(str, Enum):
    """Types of transactions the pipeline broadcasts."""
    SWAP = "swap"
    APPROVE = "approve"


@dataclass(frozen=True)
class GasEstimate:
    """Gas settings for a transaction, after safety margins."""
    gas_limit: int
    gas_price_wei: int
    raw_gas_estimate: int = 0                   # Node estimate before margin
    network_gas_price_wei: int = 0              # Network price before premium

    @property
    def estimated_cost_wei(self) -> int:
        return self.gas_limit * self.gas_price_wei


@dataclass
class PreparedTransaction:
    """A transaction ready to be signed and broadcast."""
    tx_id: str                                  # Internal tracking ID
    tx_type: TransactionType
    chain_id: int
    from_address: str
    to_address: str
    data: str                                   # Encoded calldata (hex)
    value: int = 0                              # Wei to send
    gas_estimate: Optional[GasEstimate] = None
    nonce: Optional[int] = None

    description: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_call_dict(self) -> Dict[str, Any]:
        """Hex-encoded call object for eth_call / eth_estimateGas."""
        call = {
            "from": self.from_address,
            "to": self.to_address,
            "data": self.data,
        }
        if self.value > 0:
            call["value"] = hex(self.value)
        return call

    def to_signable_dict(self) -> Dict[str, Any]:
        """Legacy (type 0) transaction fields for signing."""
        if self.nonce is None or self.gas_estimate is None:
            raise ValueError(f"Transaction {self.tx_id} needs nonce and gas before signing")
        return {
            "from": self.from_address,
            "to": self.to_address,
            "data": self.data,
            "value": self.value,
            "chainId": self.chain_id,
            "nonce": self.nonce,
            "gas": self.gas_estimate.gas_limit,
            "gasPrice": self.gas_estimate.gas_price_wei,
        }


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of the non-committing dry run of a swap."""
    amount_out: int
    formatted_output: str
    amount_out_minimum: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount_out": str(self.amount_out),
            "formatted_output": self.formatted_output,
            "amount_out_minimum": str(self.amount_out_minimum),
        }


@dataclass(frozen=True)
class TransactionResult:
    """A mined, successful swap transaction."""
    tx_hash: str
    receipt: TransactionReceipt
    gas_limit: int
    gas_price_wei: int
    submitted_at: datetime
    confirmed_at: datetime

    @property
    def gas_used(self) -> int:
        return self.receipt.gas_used

    @property
    def block_number(self) -> int:
        return self.receipt.block_number

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.tx_hash,
            "gas_used": str(self.gas_used),
            "block_number": self.block_number,
            "gas_limit": str(self.gas_limit),
            "gas_price_wei": str(self.gas_price_wei),
            "submitted_at": self.submitted_at.isoformat(),
            "confirmed_at": self.confirmed_at.isoformat(),
        }


@dataclass(frozen=True)
class ApprovalResult:
    """What the approval stage did (possibly nothing)."""
    token: str
    spender: str
    required_amount: int
    allowance_before: int
    submitted: bool
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "spender": self.spender,
            "required_amount": str(self.required_amount),
            "allowance_before": str(self.allowance_before),
            "submitted": self.submitted,
            "tx_hash": self.tx_hash,
            "block_number": self.block_number,
        }


def _display(amount: Optional[int], token: Optional[TokenMetadata]) -> Optional[str]:
    if amount is None or token is None:
        return None
    return f"{format_units(amount, token.decimals)} {token.symbol}"


@dataclass(frozen=True)
class BalanceSnapshot:
    """Input-token balance of the wallet and output-token balance of the recipient."""
    token_in_balance: int
    token_out_balance: int
    token_in: Optional[TokenMetadata] = None
    token_out: Optional[TokenMetadata] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token_in": str(self.token_in_balance),
            "token_out": str(self.token_out_balance),
            "token_in_formatted": _display(self.token_in_balance, self.token_in),
            "token_out_formatted": _display(self.token_out_balance, self.token_out),
        }


@dataclass(frozen=True)
class SwapVerification:
    """Post-swap balance comparison. Anomalies are warnings, never failures."""
    transaction: Dict[str, Any]
    before: Optional[BalanceSnapshot] = None
    after: Optional[BalanceSnapshot] = None
    anomalies: Tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def token_in_spent(self) -> Optional[int]:
        if self.before is None or self.after is None:
            return None
        return self.before.token_in_balance - self.after.token_in_balance

    @property
    def token_out_received(self) -> Optional[int]:
        if self.before is None or self.after is None:
            return None
        return self.after.token_out_balance - self.before.token_out_balance

    def to_dict(self) -> Dict[str, Any]:
        spent, received = self.token_in_spent, self.token_out_received
        tokens = self.after or self.before
        return {
            "transaction": self.transaction,
            "balances": {
                "before": self.before.to_dict() if self.before else None,
                "after": self.after.to_dict() if self.after else None,
            },
            "deltas": {
                "token_in_spent": str(spent) if spent is not None else None,
                "token_out_received": str(received) if received is not None else None,
                "token_in_spent_formatted": _display(spent, tokens.token_in if tokens else None),
                "token_out_received_formatted": _display(
                    received, tokens.token_out if tokens else None
                ),
            },
            "anomalies": list(self.anomalies),
            "error": self.error,
        }
