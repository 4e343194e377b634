"""
Error Classification

Stage failures that abort a swap attempt. Field and on-chain state problems
are never raised; they travel as data in ValidationReport and CheckReport.
Everything here is raised at its stage and caught once by the orchestrator.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """Categories of pipeline failures."""

    VALIDATION = "validation"             # Bad swap parameters
    PRE_CHECK = "pre_check"               # On-chain state predicts a revert
    APPROVAL = "approval"                 # Approval transaction failed
    SIMULATION = "simulation"             # Dry run reverted (no gas spent)
    GAS_ESTIMATION = "gas_estimation"     # Node refused to estimate (no gas spent)
    TRANSACTION_REVERTED = "transaction_reverted"  # Broadcast and reverted
    TIMEOUT = "timeout"                   # Receipt never arrived
    NETWORK = "network"                   # RPC connectivity
    INSUFFICIENT_FUNDS = "insufficient_funds"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Additional context about an error."""

    category: ErrorCategory = ErrorCategory.UNKNOWN
    gas_spent: bool = False
    suggested_action: Optional[str] = None
    tx_hash: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class SwapPipelineError(Exception):
    """
    Base class for irrecoverable stage failures.

    The attempt is over once one of these is raised; the caller decides
    whether to resubmit as a new attempt.
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message)
        self.message = message
        self.tx_hash = tx_hash
        self.context = context or ErrorContext(category=self.category, tx_hash=tx_hash)


class ApprovalError(SwapPipelineError):
    """Approval transaction was mined with a non-success status."""

    category = ErrorCategory.APPROVAL

    def __init__(
        self,
        message: str = "Token approval failed",
        tx_hash: Optional[str] = None,
        token: Optional[str] = None,
        amount: Optional[int] = None,
    ):
        super().__init__(
            message,
            tx_hash=tx_hash,
            context=ErrorContext(
                category=ErrorCategory.APPROVAL,
                gas_spent=tx_hash is not None,
                tx_hash=tx_hash,
                suggested_action="Inspect the approval transaction before retrying",
                details={"token": token, "amount": amount},
            ),
        )


class SimulationError(SwapPipelineError):
    """
    Dry-run of the swap predicted failure.

    Nothing was broadcast, so no gas was spent.
    """

    category = ErrorCategory.SIMULATION

    def __init__(
        self,
        message: str = "Swap simulation failed",
        revert_data: Optional[str] = None,
        predicted_amount_out: Optional[int] = None,
        amount_out_minimum: Optional[int] = None,
    ):
        super().__init__(
            message,
            context=ErrorContext(
                category=ErrorCategory.SIMULATION,
                gas_spent=False,
                suggested_action="Adjust amount, fee tier or minimum output",
                details={
                    "revert_data": revert_data,
                    "predicted_amount_out": predicted_amount_out,
                    "amount_out_minimum": amount_out_minimum,
                },
            ),
        )
        self.revert_data = revert_data
        self.predicted_amount_out = predicted_amount_out


class GasEstimationError(SwapPipelineError):
    """Gas estimation failed before broadcast."""

    category = ErrorCategory.GAS_ESTIMATION


class ExecutionRevertedError(SwapPipelineError):
    """Swap transaction was broadcast, mined and reverted on-chain."""

    category = ErrorCategory.TRANSACTION_REVERTED

    def __init__(
        self,
        message: str = "Swap transaction reverted",
        tx_hash: Optional[str] = None,
        receipt: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message,
            tx_hash=tx_hash,
            context=ErrorContext(
                category=ErrorCategory.TRANSACTION_REVERTED,
                gas_spent=True,
                tx_hash=tx_hash,
                suggested_action="Inspect the transaction on a block explorer",
                details={"receipt": receipt} if receipt else {},
            ),
        )


class TransactionTimeoutError(SwapPipelineError):
    """Transaction was broadcast but no receipt arrived in time."""

    category = ErrorCategory.TIMEOUT

    def __init__(
        self,
        message: str = "Timed out waiting for transaction receipt",
        tx_hash: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        super().__init__(
            message,
            tx_hash=tx_hash,
            context=ErrorContext(
                category=ErrorCategory.TIMEOUT,
                gas_spent=True,
                tx_hash=tx_hash,
                suggested_action="Check whether the transaction was mined before resubmitting",
                details={"timeout_seconds": timeout_seconds},
            ),
        )


class ReceiptUnavailableError(SwapPipelineError):
    """
    Transaction was broadcast but reading its receipt failed.

    The transaction may still be mined; the hash is kept so it can be looked up.
    """

    category = ErrorCategory.NETWORK

    def __init__(
        self,
        message: str = "Could not read transaction receipt",
        tx_hash: Optional[str] = None,
        cause: Optional[str] = None,
    ):
        super().__init__(
            message,
            tx_hash=tx_hash,
            context=ErrorContext(
                category=ErrorCategory.NETWORK,
                gas_spent=True,
                tx_hash=tx_hash,
                suggested_action="Look up the transaction hash before resubmitting",
                details={"cause": cause},
            ),
        )


def classify_error(error: Exception) -> ErrorContext:
    """
    Classify an exception and return its error context.

    Pipeline errors carry their own context; anything else is matched on
    its message.
    """
    if isinstance(error, SwapPipelineError):
        return error.context

    message = str(error).lower()

    network_patterns = [
        "connection",
        "network",
        "unreachable",
        "refused",
        "dns",
        "socket",
        "ssl",
    ]
    if any(p in message for p in network_patterns):
        return ErrorContext(
            category=ErrorCategory.NETWORK,
            suggested_action="Check RPC connectivity",
        )

    timeout_patterns = ["timeout", "timed out"]
    if any(p in message for p in timeout_patterns):
        return ErrorContext(
            category=ErrorCategory.TIMEOUT,
            suggested_action="Retry with a longer RPC timeout",
        )

    funds_patterns = [
        "insufficient funds",
        "not enough",
        "exceeds balance",
    ]
    if any(p in message for p in funds_patterns):
        return ErrorContext(
            category=ErrorCategory.INSUFFICIENT_FUNDS,
            suggested_action="Add funds to wallet",
        )

    revert_patterns = ["revert", "out of gas"]
    if any(p in message for p in revert_patterns):
        return ErrorContext(
            category=ErrorCategory.TRANSACTION_REVERTED,
            suggested_action="Review swap parameters",
        )

    return ErrorContext(category=ErrorCategory.UNKNOWN)
