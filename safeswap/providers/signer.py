"""Signing credentials for outgoing transactions."""

from typing import Any, Dict, Protocol, runtime_checkable

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address


@runtime_checkable
class Signer(Protocol):
    """An already-unlocked account able to sign transactions."""

    @property
    def address(self) -> str: ...

    def sign_transaction(self, tx: Dict[str, Any]) -> str:
        """Sign a transaction dict and return the raw transaction as 0x-hex."""
        ...


class LocalAccountSigner:
    """Signer backed by an in-process eth_account key."""

    def __init__(self, account: LocalAccount):
        self._account = account

    @classmethod
    def from_key(cls, private_key: str) -> "LocalAccountSigner":
        return cls(Account.from_key(private_key))

    @property
    def address(self) -> str:
        return self._account.address.lower()

    def sign_transaction(self, tx: Dict[str, Any]) -> str:
        payload = dict(tx)
        payload.pop("from", None)
        if payload.get("to"):
            payload["to"] = to_checksum_address(payload["to"])
        signed = self._account.sign_transaction(payload)
        return "0x" + bytes(signed.raw_transaction).hex()
