"""
Transaction Execution Layer

Provides the infrastructure for executing the swap on-chain:
- SwapExecutor: simulates and executes exactInputSingle swaps
- ApprovalManager: exact-amount router approvals
- ResultVerifier: post-swap balance deltas
- TransactionSender: gas margins, nonce assignment, signing and broadcast
- NonceManager: per-account nonce reservation
- TransactionBuilder: builds approve and swap transactions

Usage:
    from safeswap.core.execution import (
        ApprovalManager,
        SwapExecutor,
        TransactionSender,
    )

    sender = TransactionSender(chain, config, chain_id=998)
    executor = SwapExecutor(chain, config, sender)

    simulation = await executor.simulate(params, signer.address)
    result = await executor.execute(params, signer)
"""

from .models import (
    ApprovalResult,
    BalanceSnapshot,
    GasEstimate,
    PreparedTransaction,
    SimulationResult,
    SwapVerification,
    TransactionResult,
    TransactionType,
)

from .nonce_manager import (
    NonceManager,
    NonceState,
)

from .tx_builder import (
    TransactionBuilder,
)

from .sender import (
    TransactionSender,
)

from .approval import (
    ApprovalManager,
)

from .executor import (
    SwapExecutor,
)

from .verifier import (
    ResultVerifier,
)

__all__ = [
    # Models
    "ApprovalResult",
    "BalanceSnapshot",
    "GasEstimate",
    "PreparedTransaction",
    "SimulationResult",
    "SwapVerification",
    "TransactionResult",
    "TransactionType",
    # Nonce Manager
    "NonceManager",
    "NonceState",
    # Transaction Builder
    "TransactionBuilder",
    # Sender
    "TransactionSender",
    # Stages
    "ApprovalManager",
    "SwapExecutor",
    "ResultVerifier",
]
