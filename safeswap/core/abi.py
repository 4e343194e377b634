"""
Minimal ABI encoding for the calls the swap pipeline makes.

Only static argument types are needed (addresses, uints and flat tuples of
them), which encode as consecutive 32-byte words.
"""

import re
from decimal import Decimal, InvalidOperation, localcontext
from typing import List, Optional, Union


# ERC20
BALANCE_OF_SELECTOR = "0x70a08231"       # balanceOf(address)
ALLOWANCE_SELECTOR = "0xdd62ed3e"        # allowance(address,address)
DECIMALS_SELECTOR = "0x313ce567"         # decimals()
SYMBOL_SELECTOR = "0x95d89b41"           # symbol()
APPROVE_SELECTOR = "0x095ea7b3"          # approve(address,uint256)

# Uniswap V3 style factory / pool
GET_POOL_SELECTOR = "0x1698ee82"         # getPool(address,address,uint24)
LIQUIDITY_SELECTOR = "0x1a686502"        # liquidity()

# QuoterV2.quoteExactInputSingle((address,address,uint256,uint24,uint160))
QUOTE_EXACT_INPUT_SINGLE_SELECTOR = "0xc6a5026a"

# SwapRouter.exactInputSingle((address,address,uint24,address,uint256,uint256,uint256,uint160))
EXACT_INPUT_SINGLE_SELECTOR = "0x414bf389"

# Revert payloads
ERROR_STRING_SELECTOR = "0x08c379a0"     # Error(string)
PANIC_SELECTOR = "0x4e487b71"            # Panic(uint256)

ZERO_ADDRESS = "0x" + "0" * 40
MAX_UINT256 = 2**256 - 1

_DECIMAL_RE = re.compile(r"^-?\d+(\.\d+)?$")
_WORD = 64


def _encode_uint256(value: int) -> str:
    """Encode a uint256 as a 32-byte hex string (without 0x prefix)."""
    if value < 0 or value > MAX_UINT256:
        raise ValueError(f"Value out of uint256 range: {value}")
    return format(value, "064x")


def _encode_address(address: str) -> str:
    """Encode an address as a 32-byte hex string (without 0x prefix)."""
    addr = address.lower().replace("0x", "")
    return addr.zfill(64)


def encode_call(selector: str, *args: Union[int, str]) -> str:
    """Encode a call with static arguments; str args are addresses."""
    encoded = selector
    for arg in args:
        if isinstance(arg, str):
            encoded += _encode_address(arg)
        else:
            encoded += _encode_uint256(int(arg))
    return encoded


def _strip(data: str) -> str:
    return data[2:] if data.startswith("0x") else data


def decode_words(data: str) -> List[int]:
    """Split return data into 32-byte words decoded as uint256."""
    raw = _strip(data or "")
    if not raw or len(raw) % _WORD:
        raise ValueError(f"Malformed ABI return data: {data!r}")
    return [int(raw[i:i + _WORD], 16) for i in range(0, len(raw), _WORD)]


def decode_uint(data: str, index: int = 0) -> int:
    words = decode_words(data)
    if index >= len(words):
        raise ValueError(f"Return data has {len(words)} words, wanted index {index}")
    return words[index]


def decode_address(data: str, index: int = 0) -> str:
    value = decode_uint(data, index)
    return "0x" + format(value, "040x")[-40:]


def decode_string(data: str) -> str:
    """Decode a `string` return value, tolerating legacy bytes32 symbols."""
    raw = _strip(data or "")
    if len(raw) == _WORD:
        # bytes32 (e.g. MKR-style tokens)
        return bytes.fromhex(raw).rstrip(b"\x00").decode("utf-8", errors="replace")
    offset = int(raw[:_WORD], 16) * 2
    length = int(raw[offset:offset + _WORD], 16) * 2
    start = offset + _WORD
    return bytes.fromhex(raw[start:start + length]).decode("utf-8", errors="replace")


def decode_revert_reason(data: Optional[str]) -> Optional[str]:
    """Best-effort decoding of Error(string) / Panic(uint256) revert data."""
    if not data or not isinstance(data, str) or len(data) < 10:
        return None
    selector, body = data[:10].lower(), "0x" + data[10:]
    try:
        if selector == ERROR_STRING_SELECTOR:
            return decode_string(body)
        if selector == PANIC_SELECTOR:
            return f"panic code {hex(decode_uint(body))}"
    except (ValueError, IndexError):
        return None
    return None


def parse_units(amount: str, decimals: int) -> int:
    """Scale a human-readable decimal string to integer base units.

    Raises ValueError when the text is not a plain decimal number or carries
    more fractional digits than the token supports.
    """
    text = amount.strip()
    if not _DECIMAL_RE.match(text):
        raise ValueError(f"invalid decimal value {amount!r}")
    with localcontext() as ctx:
        ctx.prec = 100
        try:
            scaled = Decimal(text).scaleb(decimals)
        except InvalidOperation as e:
            raise ValueError(f"invalid decimal value {amount!r}") from e
        if scaled != scaled.to_integral_value():
            raise ValueError(f"fractional component exceeds {decimals} decimals")
        return int(scaled)


def format_units(value: int, decimals: int) -> str:
    """Render base units as a plain decimal string (no exponent)."""
    with localcontext() as ctx:
        ctx.prec = 100
        quantity = Decimal(int(value)).scaleb(-decimals).normalize()
        return format(quantity, "f")
