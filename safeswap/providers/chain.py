"""
Contract-level read/write surface over the JSON-RPC transport.

Everything the swap pipeline needs from the chain goes through ChainClient,
so tests can substitute an in-memory implementation of the same methods.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..core import abi
from .rpc import JsonRpcClient


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenMetadata:
    address: str
    decimals: int
    symbol: str


@dataclass(frozen=True)
class BlockInfo:
    number: int
    gas_used: int
    gas_limit: int
    base_fee_per_gas: Optional[int] = None

    @property
    def utilization_pct(self) -> int:
        if self.gas_limit <= 0:
            return 0
        return self.gas_used * 100 // self.gas_limit


@dataclass(frozen=True)
class QuoteResult:
    """Decoded QuoterV2.quoteExactInputSingle output."""
    amount_out: int
    sqrt_price_x96_after: int
    initialized_ticks_crossed: int
    gas_estimate: int


@dataclass(frozen=True)
class TransactionReceipt:
    tx_hash: str
    status: int
    block_number: int
    gas_used: int
    effective_gas_price: Optional[int] = None
    block_hash: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    @classmethod
    def from_rpc(cls, receipt: Dict[str, Any]) -> "TransactionReceipt":
        return cls(
            tx_hash=receipt["transactionHash"],
            status=int(receipt.get("status", "0x0"), 16),
            block_number=int(receipt["blockNumber"], 16),
            gas_used=int(receipt["gasUsed"], 16),
            effective_gas_price=int(receipt.get("effectiveGasPrice", "0x0"), 16),
            block_hash=receipt.get("blockHash"),
            raw=dict(receipt),
        )


class ChainClient:
    """
    Reads and writes needed by the swap pipeline.

    Token metadata is immutable on-chain and cached per token; balances,
    allowances, liquidity, quotes and gas data are always read fresh.
    """

    def __init__(self, rpc: JsonRpcClient):
        self.rpc = rpc
        self._metadata: Dict[str, TokenMetadata] = {}

    # ---------- reads ----------

    async def native_balance(self, address: str) -> int:
        return await self.rpc.get_balance(address)

    async def token_balance(self, token: str, owner: str) -> int:
        data = await self.rpc.eth_call(token, abi.encode_call(abi.BALANCE_OF_SELECTOR, owner))
        return abi.decode_uint(data)

    async def token_allowance(self, token: str, owner: str, spender: str) -> int:
        data = await self.rpc.eth_call(
            token, abi.encode_call(abi.ALLOWANCE_SELECTOR, owner, spender)
        )
        return abi.decode_uint(data)

    async def token_metadata(self, token: str) -> TokenMetadata:
        key = token.lower()
        cached = self._metadata.get(key)
        if cached:
            return cached

        decimals_raw, symbol_raw = await asyncio.gather(
            self.rpc.eth_call(token, abi.DECIMALS_SELECTOR),
            self.rpc.eth_call(token, abi.SYMBOL_SELECTOR),
        )
        metadata = TokenMetadata(
            address=key,
            decimals=abi.decode_uint(decimals_raw),
            symbol=abi.decode_string(symbol_raw),
        )
        self._metadata[key] = metadata
        return metadata

    async def get_pool(self, factory: str, token_a: str, token_b: str, fee: int) -> str:
        data = await self.rpc.eth_call(
            factory, abi.encode_call(abi.GET_POOL_SELECTOR, token_a, token_b, fee)
        )
        return abi.decode_address(data)

    async def pool_liquidity(self, pool: str) -> int:
        data = await self.rpc.eth_call(pool, abi.LIQUIDITY_SELECTOR)
        return abi.decode_uint(data)

    async def quote_exact_input_single(
        self,
        quoter: str,
        token_in: str,
        token_out: str,
        amount_in: int,
        fee: int,
        sqrt_price_limit_x96: int = 0,
    ) -> QuoteResult:
        calldata = abi.encode_call(
            abi.QUOTE_EXACT_INPUT_SINGLE_SELECTOR,
            token_in,
            token_out,
            amount_in,
            fee,
            sqrt_price_limit_x96,
        )
        words = abi.decode_words(await self.rpc.eth_call(quoter, calldata))
        if len(words) < 4:
            raise ValueError(f"Unexpected quoter response length: {len(words)} words")
        return QuoteResult(
            amount_out=words[0],
            sqrt_price_x96_after=words[1],
            initialized_ticks_crossed=words[2],
            gas_estimate=words[3],
        )

    async def gas_price(self) -> int:
        return await self.rpc.gas_price()

    async def latest_block(self) -> BlockInfo:
        block = await self.rpc.get_block("latest")
        base_fee = block.get("baseFeePerGas")
        return BlockInfo(
            number=int(block["number"], 16),
            gas_used=int(block["gasUsed"], 16),
            gas_limit=int(block["gasLimit"], 16),
            base_fee_per_gas=int(base_fee, 16) if base_fee else None,
        )

    async def call(self, to: str, data: str, from_address: Optional[str] = None) -> str:
        """State-simulating call; nothing is committed."""
        return await self.rpc.eth_call(to, data, from_address=from_address)

    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        return await self.rpc.estimate_gas(tx)

    async def transaction_count(self, address: str) -> int:
        return await self.rpc.get_transaction_count(address, "pending")

    # ---------- writes ----------

    async def send_raw_transaction(self, raw_tx: str) -> str:
        return await self.rpc.send_raw_transaction(raw_tx)

    async def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = 300.0,
        poll_interval: float = 2.0,
    ) -> Optional[TransactionReceipt]:
        """Poll for a receipt; returns None if none arrives within `timeout`."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        while True:
            receipt = await self.rpc.get_transaction_receipt(tx_hash)
            if receipt:
                parsed = TransactionReceipt.from_rpc(receipt)
                logger.info(
                    f"Receipt for {tx_hash}: status={parsed.status} "
                    f"block={parsed.block_number} gasUsed={parsed.gas_used}"
                )
                return parsed

            if loop.time() >= deadline:
                return None
            await asyncio.sleep(poll_interval)

    async def close(self) -> None:
        await self.rpc.close()
