"""
Shared fixtures: an in-memory chain and a signer that needs no private key.

FakeChain implements the ChainClient surface the pipeline uses. Transactions
"signed" by FakeSigner are JSON, so the fake chain can decode them and apply
approve / exactInputSingle effects to its balance and allowance tables.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import pytest

from safeswap.config import DeploymentConfig
from safeswap.core import abi
from safeswap.providers.chain import BlockInfo, QuoteResult, TokenMetadata, TransactionReceipt
from safeswap.providers.rpc import RpcError


NOW = 1_750_000_000

WALLET = "0x" + "a1" * 20
RECIPIENT = WALLET
TOKEN_IN = "0x" + "11" * 20
TOKEN_OUT = "0x" + "22" * 20
ROUTER = "0x" + "e0" * 20
FACTORY = "0x" + "f0" * 20
QUOTER = "0x" + "c0" * 20
POOL = "0x" + "b0" * 20

ONE = 10**18


def encode_error_string(message: str) -> str:
    """ABI-encode an Error(string) revert payload."""
    raw = message.encode()
    padded = raw.hex().ljust(((len(raw) + 31) // 32) * 64, "0")
    return abi.ERROR_STRING_SELECTOR + format(32, "064x") + format(len(raw), "064x") + padded


def _word_address(word: int) -> str:
    return "0x" + format(word, "040x")


class FakeSigner:
    def __init__(self, address: str = WALLET):
        self._address = address.lower()

    @property
    def address(self) -> str:
        return self._address

    def sign_transaction(self, tx: Dict[str, Any]) -> str:
        return "0x" + json.dumps(tx).encode().hex()


@dataclass
class SentTransaction:
    tx_hash: str
    to: str
    data: str
    nonce: int
    gas: int
    gas_price: int


class FakeChain:
    """In-memory stand-in for ChainClient."""

    def __init__(self):
        self.balances: Dict[Tuple[str, str], int] = {}
        self.allowances: Dict[Tuple[str, str, str], int] = {}
        self.metadata: Dict[str, TokenMetadata] = {}
        self.pools: Dict[Tuple[frozenset, int], str] = {}
        self.liquidity: Dict[str, int] = {}

        # Output per unit of input, as a fraction
        self.rate = (2, 1)

        self.gas_price_wei = 1_000_000_000
        self.block = BlockInfo(number=1000, gas_used=5_000_000, gas_limit=30_000_000)
        self.gas_estimate = 150_000
        self.nonce = 7

        # Failure switches
        self.quote_revert: Optional[str] = None
        self.simulation_revert: Optional[str] = None
        self.estimate_error: Optional[Exception] = None
        self.balance_error: Optional[Exception] = None
        self.liquidity_error: Optional[Exception] = None
        self.gas_error: Optional[Exception] = None
        self.send_error: Optional[Exception] = None
        self.revert_approvals = False
        self.revert_swaps = False
        self.drop_receipts = False
        # Output actually delivered on-chain, when it should differ from the quote
        self.delivered_out: Optional[int] = None

        self.sent: List[SentTransaction] = []
        self.receipts: Dict[str, TransactionReceipt] = {}
        self.calls: List[str] = []

    # ---------- setup helpers ----------

    def add_token(self, address: str, symbol: str, decimals: int = 18) -> None:
        self.metadata[address.lower()] = TokenMetadata(address.lower(), decimals, symbol)

    def set_balance(self, token: str, owner: str, amount: int) -> None:
        self.balances[(token.lower(), owner.lower())] = amount

    def set_allowance(self, token: str, owner: str, spender: str, amount: int) -> None:
        self.allowances[(token.lower(), owner.lower(), spender.lower())] = amount

    def add_pool(self, token_a: str, token_b: str, fee: int, address: str, liquidity: int) -> None:
        self.pools[(frozenset((token_a.lower(), token_b.lower())), fee)] = address.lower()
        self.liquidity[address.lower()] = liquidity

    def quote_amount(self, amount_in: int) -> int:
        numerator, denominator = self.rate
        return amount_in * numerator // denominator

    def sent_selectors(self) -> List[str]:
        return [tx.data[:10] for tx in self.sent]

    # ---------- ChainClient surface ----------

    async def token_balance(self, token: str, owner: str) -> int:
        self.calls.append("balance")
        if self.balance_error:
            raise self.balance_error
        return self.balances.get((token.lower(), owner.lower()), 0)

    async def token_allowance(self, token: str, owner: str, spender: str) -> int:
        self.calls.append("allowance")
        return self.allowances.get((token.lower(), owner.lower(), spender.lower()), 0)

    async def token_metadata(self, token: str) -> TokenMetadata:
        meta = self.metadata.get(token.lower())
        if meta is None:
            raise RpcError("execution reverted")
        return meta

    async def get_pool(self, factory: str, token_a: str, token_b: str, fee: int) -> str:
        self.calls.append("pool")
        key = (frozenset((token_a.lower(), token_b.lower())), fee)
        return self.pools.get(key, abi.ZERO_ADDRESS)

    async def pool_liquidity(self, pool: str) -> int:
        if self.liquidity_error:
            raise self.liquidity_error
        return self.liquidity.get(pool.lower(), 0)

    async def quote_exact_input_single(
        self, quoter, token_in, token_out, amount_in, fee, sqrt_price_limit_x96=0
    ) -> QuoteResult:
        self.calls.append("quote")
        if self.quote_revert is not None:
            raise RpcError("execution reverted", code=3, data=encode_error_string(self.quote_revert))
        return QuoteResult(
            amount_out=self.quote_amount(amount_in),
            sqrt_price_x96_after=2**96,
            initialized_ticks_crossed=1,
            gas_estimate=90_000,
        )

    async def gas_price(self) -> int:
        if self.gas_error:
            raise self.gas_error
        return self.gas_price_wei

    async def latest_block(self) -> BlockInfo:
        if self.gas_error:
            raise self.gas_error
        return self.block

    async def call(self, to: str, data: str, from_address: Optional[str] = None) -> str:
        self.calls.append("simulate")
        if self.simulation_revert is not None:
            raise RpcError(
                "execution reverted", code=3, data=encode_error_string(self.simulation_revert)
            )
        words = abi.decode_words("0x" + data[10:])
        return "0x" + format(self.quote_amount(words[5]), "064x")

    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        if self.estimate_error:
            raise self.estimate_error
        return self.gas_estimate

    async def transaction_count(self, address: str) -> int:
        return self.nonce

    async def send_raw_transaction(self, raw_tx: str) -> str:
        if self.send_error:
            raise self.send_error

        tx = json.loads(bytes.fromhex(raw_tx[2:]).decode())
        tx_hash = "0x" + format(len(self.sent) + 1, "064x")
        self.sent.append(SentTransaction(
            tx_hash=tx_hash,
            to=tx["to"].lower(),
            data=tx["data"],
            nonce=tx["nonce"],
            gas=tx["gas"],
            gas_price=tx["gasPrice"],
        ))
        self.nonce = max(self.nonce, tx["nonce"] + 1)

        status = self._apply(tx)
        self.receipts[tx_hash] = TransactionReceipt(
            tx_hash=tx_hash,
            status=status,
            block_number=self.block.number + len(self.sent),
            gas_used=min(tx["gas"], 120_000),
            effective_gas_price=tx["gasPrice"],
            raw={"transactionHash": tx_hash, "status": hex(status)},
        )
        return tx_hash

    def _apply(self, tx: Dict[str, Any]) -> int:
        selector, words = tx["data"][:10], abi.decode_words("0x" + tx["data"][10:])
        sender = tx["from"].lower()
        token = tx["to"].lower()

        if selector == abi.APPROVE_SELECTOR:
            if self.revert_approvals:
                return 0
            self.set_allowance(token, sender, _word_address(words[0]), words[1])
            return 1

        if selector == abi.EXACT_INPUT_SINGLE_SELECTOR:
            token_in, token_out = _word_address(words[0]), _word_address(words[1])
            recipient, amount_in, minimum = _word_address(words[3]), words[5], words[6]
            out = self.quote_amount(amount_in) if self.delivered_out is None else self.delivered_out
            allowance_key = (token_in, sender, token)
            if (
                self.revert_swaps
                or out < minimum
                or self.allowances.get(allowance_key, 0) < amount_in
                or self.balances.get((token_in, sender), 0) < amount_in
            ):
                return 0
            self.allowances[allowance_key] -= amount_in
            self.balances[(token_in, sender)] -= amount_in
            self.balances[(token_out, recipient)] = self.balances.get((token_out, recipient), 0) + out
            return 1

        return 0

    async def wait_for_receipt(self, tx_hash: str, timeout: float = 300.0, poll_interval: float = 2.0):
        if self.drop_receipts:
            return None
        return self.receipts.get(tx_hash)

    async def close(self) -> None:
        pass


@pytest.fixture
def deployment() -> DeploymentConfig:
    return DeploymentConfig(
        router_address=ROUTER,
        factory_address=FACTORY,
        quoter_address=QUOTER,
        confirmation_timeout_seconds=1.0,
        receipt_poll_interval_seconds=0.01,
    )


@pytest.fixture
def chain() -> FakeChain:
    """A funded wallet, no allowance yet, and one liquid 0.3% pool."""
    fake = FakeChain()
    fake.add_token(TOKEN_IN, "WHYPE")
    fake.add_token(TOKEN_OUT, "USDT0")
    fake.set_balance(TOKEN_IN, WALLET, 10 * ONE)
    fake.add_pool(TOKEN_IN, TOKEN_OUT, 3000, POOL, 10**20)
    return fake


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def intent() -> Dict[str, Any]:
    """A valid exactInputSingle intent in router (camelCase) field names."""
    return {
        "tokenIn": TOKEN_IN,
        "tokenOut": TOKEN_OUT,
        "fee": 3000,
        "recipient": RECIPIENT,
        "deadline": NOW + 600,
        "amountIn": str(ONE),
        "amountOutMinimum": str(ONE),
        "sqrtPriceLimitX96": 0,
    }
