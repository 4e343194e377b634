"""
Tests for local-key transaction signing.
"""

import pytest
from eth_account import Account

from safeswap.core.execution.models import GasEstimate
from safeswap.core.execution.tx_builder import TransactionBuilder
from safeswap.providers.signer import LocalAccountSigner, Signer

from conftest import ONE, ROUTER, TOKEN_IN


# Well-known development key (anvil/hardhat account 0)
DEV_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_ADDRESS = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"


@pytest.fixture
def local_signer():
    return LocalAccountSigner.from_key(DEV_KEY)


def prepared_approval(owner: str):
    tx = TransactionBuilder.build_erc20_approve(
        chain_id=998,
        owner_address=owner,
        token_address=TOKEN_IN,
        spender_address=ROUTER,
        amount=ONE,
    )
    tx.nonce = 3
    tx.gas_estimate = GasEstimate(
        gas_limit=60_000,
        gas_price_wei=1_100_000_000,
        raw_gas_estimate=50_000,
        network_gas_price_wei=1_000_000_000,
    )
    return tx


class TestLocalAccountSigner:
    def test_address_is_lowercase(self, local_signer):
        assert local_signer.address == DEV_ADDRESS

    def test_satisfies_signer_protocol(self, local_signer):
        assert isinstance(local_signer, Signer)

    def test_raw_transaction_recovers_to_signer(self, local_signer):
        tx = prepared_approval(local_signer.address)

        raw_tx = local_signer.sign_transaction(tx.to_signable_dict())

        assert raw_tx.startswith("0x")
        assert Account.recover_transaction(raw_tx).lower() == DEV_ADDRESS

    def test_signing_does_not_mutate_input(self, local_signer):
        payload = prepared_approval(local_signer.address).to_signable_dict()
        original = dict(payload)

        local_signer.sign_transaction(payload)

        assert payload == original

    def test_unsigned_transaction_needs_nonce_and_gas(self, local_signer):
        tx = prepared_approval(local_signer.address)
        tx.nonce = None

        with pytest.raises(ValueError):
            tx.to_signable_dict()
