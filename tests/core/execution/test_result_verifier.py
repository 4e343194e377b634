"""
Tests for post-swap balance verification.
"""

from datetime import datetime, timezone

import pytest

from safeswap.core.execution.models import TransactionResult
from safeswap.core.execution.verifier import ResultVerifier
from safeswap.core.validation.models import NormalizedSwapIntent
from safeswap.providers.chain import TransactionReceipt
from safeswap.providers.rpc import RpcError

from conftest import NOW, ONE, RECIPIENT, TOKEN_IN, TOKEN_OUT, WALLET


PARAMS = NormalizedSwapIntent(
    token_in=TOKEN_IN,
    token_out=TOKEN_OUT,
    fee=3000,
    recipient=RECIPIENT,
    deadline=NOW + 600,
    amount_in=ONE,
    amount_out_minimum=ONE,
)


def make_result() -> TransactionResult:
    now = datetime.now(timezone.utc)
    return TransactionResult(
        tx_hash="0x" + "ab" * 32,
        receipt=TransactionReceipt(tx_hash="0x" + "ab" * 32, status=1, block_number=10, gas_used=90_000),
        gas_limit=108_000,
        gas_price_wei=1,
        submitted_at=now,
        confirmed_at=now,
    )


@pytest.fixture
def verifier(chain):
    return ResultVerifier(chain)


class TestResultVerifier:
    @pytest.mark.asyncio
    async def test_snapshot(self, verifier):
        snapshot = await verifier.snapshot(PARAMS, WALLET)

        assert snapshot.token_in_balance == 10 * ONE
        assert snapshot.token_out_balance == 0
        assert (snapshot.token_in.symbol, snapshot.token_out.symbol) == ("WHYPE", "USDT0")

    @pytest.mark.asyncio
    async def test_snapshot_failure_returns_none(self, verifier, chain):
        chain.balance_error = RpcError("connection refused")

        assert await verifier.snapshot(PARAMS, WALLET) is None

    @pytest.mark.asyncio
    async def test_clean_swap_has_no_anomalies(self, verifier, chain):
        before = await verifier.snapshot(PARAMS, WALLET)
        chain.set_balance(TOKEN_IN, WALLET, 9 * ONE)
        chain.set_balance(TOKEN_OUT, RECIPIENT, 2 * ONE)

        verification = await verifier.verify(make_result(), PARAMS, WALLET, before)

        assert verification.error is None
        assert verification.anomalies == ()
        assert verification.token_in_spent == ONE
        assert verification.token_out_received == 2 * ONE
        assert verification.to_dict()["deltas"] == {
            "token_in_spent": str(ONE),
            "token_out_received": str(2 * ONE),
            "token_in_spent_formatted": "1 WHYPE",
            "token_out_received_formatted": "2 USDT0",
        }

    @pytest.mark.asyncio
    async def test_balances_formatted_with_token_decimals(self, verifier, chain):
        chain.add_token(TOKEN_OUT, "USDT0", decimals=6)
        before = await verifier.snapshot(PARAMS, WALLET)
        chain.set_balance(TOKEN_IN, WALLET, 9 * ONE + ONE // 2)
        chain.set_balance(TOKEN_OUT, RECIPIENT, 1_250_000)

        data = (await verifier.verify(make_result(), PARAMS, WALLET, before)).to_dict()

        assert data["balances"]["before"]["token_in_formatted"] == "10 WHYPE"
        assert data["balances"]["after"]["token_in_formatted"] == "9.5 WHYPE"
        assert data["balances"]["after"]["token_out_formatted"] == "1.25 USDT0"
        assert data["deltas"]["token_in_spent_formatted"] == "0.5 WHYPE"
        assert data["deltas"]["token_out_received_formatted"] == "1.25 USDT0"

    @pytest.mark.asyncio
    async def test_anomalies_are_reported_not_raised(self, verifier, chain):
        before = await verifier.snapshot(PARAMS, WALLET)
        chain.set_balance(TOKEN_IN, WALLET, 8 * ONE)
        chain.set_balance(TOKEN_OUT, RECIPIENT, ONE // 2)

        verification = await verifier.verify(make_result(), PARAMS, WALLET, before)

        assert len(verification.anomalies) == 2
        assert verification.anomalies[0].startswith("Input spent")
        assert "below amountOutMinimum" in verification.anomalies[1]

    @pytest.mark.asyncio
    async def test_nothing_received(self, verifier, chain):
        before = await verifier.snapshot(PARAMS, WALLET)
        chain.set_balance(TOKEN_IN, WALLET, 9 * ONE)

        verification = await verifier.verify(make_result(), PARAMS, WALLET, before)

        assert verification.anomalies == ("No output tokens received",)

    @pytest.mark.asyncio
    async def test_read_failure_lands_in_error(self, verifier, chain):
        before = await verifier.snapshot(PARAMS, WALLET)
        chain.balance_error = RpcError("connection refused")

        verification = await verifier.verify(make_result(), PARAMS, WALLET, before)

        assert verification.error.startswith("Balance verification failed")
        assert verification.after is None
        assert verification.transaction["hash"] == "0x" + "ab" * 32

    @pytest.mark.asyncio
    async def test_without_snapshot_reports_balances_only(self, verifier):
        verification = await verifier.verify(make_result(), PARAMS, WALLET)

        assert verification.after is not None
        assert verification.token_in_spent is None
        assert verification.anomalies == ()
