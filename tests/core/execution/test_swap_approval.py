"""
Tests for exact-amount router approvals.
"""

import pytest

from safeswap.core import abi
from safeswap.core.checks.checker import OnChainStateChecker
from safeswap.core.errors import ApprovalError, ErrorCategory, TransactionTimeoutError
from safeswap.core.execution.approval import ApprovalManager
from safeswap.core.execution.sender import TransactionSender

from conftest import NOW, ONE, ROUTER, TOKEN_IN, WALLET


@pytest.fixture
def manager(chain, deployment):
    sender = TransactionSender(chain, deployment, chain_id=998)
    return ApprovalManager(chain, deployment, sender)


class TestEnsureAllowance:
    @pytest.mark.asyncio
    async def test_noop_when_allowance_covers_amount(self, manager, chain, signer):
        chain.set_allowance(TOKEN_IN, WALLET, ROUTER, 5 * ONE)

        result = await manager.ensure_allowance(TOKEN_IN, ONE, signer)

        assert not result.submitted
        assert result.tx_hash is None
        assert result.allowance_before == 5 * ONE
        assert chain.sent == []

    @pytest.mark.asyncio
    async def test_approves_exact_amount(self, manager, chain, signer):
        result = await manager.ensure_allowance(TOKEN_IN, ONE, signer)

        assert result.submitted
        assert result.tx_hash == chain.sent[0].tx_hash
        assert result.block_number is not None
        assert result.spender == ROUTER

        approve = chain.sent[0]
        assert approve.to == TOKEN_IN
        assert approve.data == abi.encode_call(abi.APPROVE_SELECTOR, ROUTER, ONE)
        assert abi.decode_uint("0x" + approve.data[10:], 1) == ONE
        assert abi.decode_uint("0x" + approve.data[10:], 1) != abi.MAX_UINT256

    @pytest.mark.asyncio
    async def test_second_call_is_idempotent(self, manager, chain, signer):
        await manager.ensure_allowance(TOKEN_IN, ONE, signer)
        second = await manager.ensure_allowance(TOKEN_IN, ONE, signer)

        assert not second.submitted
        assert len(chain.sent) == 1

    @pytest.mark.asyncio
    async def test_allowance_check_flips_after_approval(self, manager, chain, deployment, signer):
        checker = OnChainStateChecker(chain, deployment, clock=lambda: NOW)

        before = await checker.check_allowance(TOKEN_IN, WALLET, ROUTER, ONE)
        await manager.ensure_allowance(TOKEN_IN, ONE, signer)
        after = await checker.check_allowance(TOKEN_IN, WALLET, ROUTER, ONE)

        assert before.data.needs_approval
        assert not after.data.needs_approval
        assert after.data.allowance == ONE

    @pytest.mark.asyncio
    async def test_failed_approval_raises_with_hash(self, manager, chain, signer):
        chain.revert_approvals = True

        with pytest.raises(ApprovalError) as exc_info:
            await manager.ensure_allowance(TOKEN_IN, ONE, signer)

        assert exc_info.value.tx_hash == chain.sent[0].tx_hash
        assert exc_info.value.context.category == ErrorCategory.APPROVAL
        assert exc_info.value.context.gas_spent

    @pytest.mark.asyncio
    async def test_missing_receipt_times_out(self, manager, chain, signer):
        chain.drop_receipts = True

        with pytest.raises(TransactionTimeoutError) as exc_info:
            await manager.ensure_allowance(TOKEN_IN, ONE, signer)

        assert exc_info.value.tx_hash == chain.sent[0].tx_hash
