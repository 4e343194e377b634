"""
Nonce management for transactions sent from one account.

Handles nonce tracking so that two swap attempts for the same wallet never
reuse a nonce, even when their transactions are prepared concurrently.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Set

from ...providers.chain import ChainClient


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class NonceState:
    """Tracks nonce state for an address on a chain."""
    address: str
    chain_id: int
    confirmed_nonce: int                        # Last confirmed on-chain
    pending_nonce: int                          # Next available for use
    reserved_nonces: Set[int] = field(default_factory=set)
    last_updated: datetime = field(default_factory=_utcnow)


class NonceManager:
    """
    Manages nonces for one chain.

    Features:
    - Tracks reserved nonces to avoid conflicts
    - Syncs with the pending on-chain transaction count
    - Releases nonces of transactions that were never broadcast
    - Exposes the per-account lock so submission can be serialized
    """

    def __init__(self, chain: ChainClient, chain_id: int):
        self.chain = chain
        self.chain_id = chain_id
        self._states: Dict[str, NonceState] = {}  # key: "{chain_id}:{address}"
        self._locks: Dict[str, asyncio.Lock] = {}
        self._submission_locks: Dict[str, asyncio.Lock] = {}

    def _get_key(self, address: str) -> str:
        return f"{self.chain_id}:{address.lower()}"

    def _get_lock(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def account_lock(self, address: str) -> asyncio.Lock:
        """Lock held across reserve, sign and broadcast for one account."""
        key = self._get_key(address)
        if key not in self._submission_locks:
            self._submission_locks[key] = asyncio.Lock()
        return self._submission_locks[key]

    async def get_next_nonce(self, address: str, sync: bool = True) -> int:
        """
        Get the next available nonce for an address.

        Args:
            address: The wallet address
            sync: Whether to sync with on-chain state first

        Returns:
            The next available nonce (already reserved)
        """
        key = self._get_key(address)
        lock = self._get_lock(key)

        async with lock:
            if key not in self._states or sync:
                on_chain_nonce = await self.chain.transaction_count(address)

                if key not in self._states:
                    self._states[key] = NonceState(
                        address=address.lower(),
                        chain_id=self.chain_id,
                        confirmed_nonce=on_chain_nonce,
                        pending_nonce=on_chain_nonce,
                    )
                else:
                    # Update confirmed nonce, but don't decrease pending
                    state = self._states[key]
                    state.confirmed_nonce = on_chain_nonce
                    if on_chain_nonce > state.pending_nonce:
                        state.pending_nonce = on_chain_nonce
                    state.last_updated = _utcnow()

            state = self._states[key]

            nonce = state.pending_nonce
            while nonce in state.reserved_nonces:
                nonce += 1

            state.reserved_nonces.add(nonce)
            state.pending_nonce = nonce + 1

            return nonce

    async def release_nonce(self, address: str, nonce: int) -> None:
        """Release a reserved nonce (transaction failed before broadcast)."""
        key = self._get_key(address)
        lock = self._get_lock(key)

        async with lock:
            if key in self._states:
                state = self._states[key]
                state.reserved_nonces.discard(nonce)

                # If we released the highest nonce, we can reduce pending
                if nonce == state.pending_nonce - 1:
                    while state.pending_nonce > state.confirmed_nonce:
                        if state.pending_nonce - 1 not in state.reserved_nonces:
                            state.pending_nonce -= 1
                        else:
                            break

    async def confirm_nonce(self, address: str, nonce: int) -> None:
        """Mark a nonce as confirmed (transaction included in a block)."""
        key = self._get_key(address)
        lock = self._get_lock(key)

        async with lock:
            if key in self._states:
                state = self._states[key]
                state.reserved_nonces.discard(nonce)

                if nonce >= state.confirmed_nonce:
                    state.confirmed_nonce = nonce + 1

    def get_state(self, address: str) -> Optional[NonceState]:
        """Get the current nonce state for an address."""
        return self._states.get(self._get_key(address))
