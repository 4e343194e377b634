"""Async JSON-RPC transport for EVM nodes."""

import itertools
import logging
from typing import Any, Dict, List, Optional

import httpx


logger = logging.getLogger(__name__)


class RpcError(Exception):
    """The node answered with a JSON-RPC error object."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data

    @property
    def revert_data(self) -> Optional[str]:
        """Hex revert payload, when the node attached one."""
        if isinstance(self.data, str) and self.data.startswith("0x"):
            return self.data
        if isinstance(self.data, dict):
            inner = self.data.get("data")
            if isinstance(inner, str) and inner.startswith("0x"):
                return inner
        return None


class JsonRpcClient:
    """
    Thin async wrapper over an EVM JSON-RPC endpoint.

    Timeouts are owned by the underlying httpx client; nothing here retries.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    async def call(self, method: str, params: List[Any]) -> Any:
        """Make an RPC call and return its `result`."""
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }

        response = await self._client.post(self.rpc_url, json=payload)
        response.raise_for_status()
        result = response.json()

        if "error" in result:
            error = result["error"] or {}
            logger.debug(f"RPC {method} returned error: {error}")
            raise RpcError(
                error.get("message", f"RPC error: {error}"),
                code=error.get("code"),
                data=error.get("data"),
            )

        return result.get("result")

    async def eth_call(
        self,
        to: str,
        data: str,
        from_address: Optional[str] = None,
        block: str = "latest",
    ) -> str:
        call_obj: Dict[str, Any] = {"to": to, "data": data}
        if from_address:
            call_obj["from"] = from_address
        return await self.call("eth_call", [call_obj, block])

    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        return int(await self.call("eth_estimateGas", [tx]), 16)

    async def gas_price(self) -> int:
        return int(await self.call("eth_gasPrice", []), 16)

    async def get_block(self, tag: str = "latest") -> Dict[str, Any]:
        return await self.call("eth_getBlockByNumber", [tag, False])

    async def get_balance(self, address: str, tag: str = "latest") -> int:
        return int(await self.call("eth_getBalance", [address, tag]), 16)

    async def get_transaction_count(self, address: str, tag: str = "pending") -> int:
        return int(await self.call("eth_getTransactionCount", [address, tag]), 16)

    async def send_raw_transaction(self, raw_tx: str) -> str:
        tx_hash = await self.call("eth_sendRawTransaction", [raw_tx])
        logger.info(f"Transaction submitted: {tx_hash}")
        return tx_hash

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        return await self.call("eth_getTransactionReceipt", [tx_hash])

    async def chain_id(self) -> int:
        return int(await self.call("eth_chainId", []), 16)

    async def close(self) -> None:
        """Close HTTP client."""
        await self._client.aclose()
