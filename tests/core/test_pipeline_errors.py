"""
Tests for pipeline error classification.
"""

import pytest

from safeswap.core.errors import (
    ApprovalError,
    ErrorCategory,
    ExecutionRevertedError,
    GasEstimationError,
    ReceiptUnavailableError,
    SimulationError,
    SwapPipelineError,
    TransactionTimeoutError,
    classify_error,
)


# =============================================================================
# Pipeline errors carry their own context
# =============================================================================


class TestPipelineErrors:
    def test_all_are_pipeline_errors(self):
        for error in (
            ApprovalError(),
            SimulationError(),
            GasEstimationError("no estimate"),
            ExecutionRevertedError(),
            TransactionTimeoutError(),
            ReceiptUnavailableError(),
        ):
            assert isinstance(error, SwapPipelineError)

    def test_gas_spent_only_after_broadcast(self):
        assert not SimulationError().context.gas_spent
        assert not GasEstimationError("no estimate").context.gas_spent
        assert ExecutionRevertedError(tx_hash="0x1").context.gas_spent
        assert TransactionTimeoutError(tx_hash="0x1").context.gas_spent
        assert ReceiptUnavailableError(tx_hash="0x1").context.gas_spent

    def test_classify_uses_own_context(self):
        error = ExecutionRevertedError("reverted", tx_hash="0xabc", receipt={"status": "0x0"})

        context = classify_error(error)

        assert context.category == ErrorCategory.TRANSACTION_REVERTED
        assert context.tx_hash == "0xabc"
        assert context.details["receipt"] == {"status": "0x0"}

    def test_receipt_read_failure_is_network_with_hash(self):
        error = ReceiptUnavailableError(tx_hash="0xabc", cause="connection dropped")

        context = classify_error(error)

        assert context.category == ErrorCategory.NETWORK
        assert context.tx_hash == "0xabc"
        assert context.details == {"cause": "connection dropped"}

    def test_base_error_uses_class_category(self):
        assert GasEstimationError("x").context.category == ErrorCategory.GAS_ESTIMATION

    def test_approval_error_details(self):
        error = ApprovalError(tx_hash="0x1", token="0xtoken", amount=5)

        assert error.context.details == {"token": "0xtoken", "amount": 5}
        assert error.tx_hash == "0x1"


# =============================================================================
# Foreign exceptions are matched on message
# =============================================================================


class TestClassifyForeignErrors:
    @pytest.mark.parametrize(
        "message, category",
        [
            ("Connection refused", ErrorCategory.NETWORK),
            ("Read timed out", ErrorCategory.TIMEOUT),
            ("insufficient funds for gas * price + value", ErrorCategory.INSUFFICIENT_FUNDS),
            ("execution reverted", ErrorCategory.TRANSACTION_REVERTED),
            ("something odd", ErrorCategory.UNKNOWN),
        ],
    )
    def test_message_patterns(self, message, category):
        assert classify_error(RuntimeError(message)).category == category
