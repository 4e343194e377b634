"""
Tests for the static ABI helpers and unit conversion.
"""

import pytest

from safeswap.core import abi


ADDRESS = "0x" + "ab" * 20


class TestEncoding:
    def test_approve_calldata(self):
        data = abi.encode_call(abi.APPROVE_SELECTOR, ADDRESS.upper().replace("0X", "0x"), 10**18)

        assert data == (
            "0x095ea7b3"
            + "000000000000000000000000" + "ab" * 20
            + format(10**18, "064x")
        )

    def test_uint_out_of_range(self):
        with pytest.raises(ValueError):
            abi.encode_call(abi.APPROVE_SELECTOR, ADDRESS, abi.MAX_UINT256 + 1)
        with pytest.raises(ValueError):
            abi.encode_call(abi.APPROVE_SELECTOR, ADDRESS, -1)


class TestDecoding:
    def test_words_and_addresses(self):
        data = "0x" + format(5, "064x") + "0" * 24 + "ab" * 20

        assert abi.decode_words(data) == [5, int("ab" * 20, 16)]
        assert abi.decode_uint(data, 0) == 5
        assert abi.decode_address(data, 1) == ADDRESS

    def test_malformed_data(self):
        with pytest.raises(ValueError):
            abi.decode_words("0x1234")
        with pytest.raises(ValueError):
            abi.decode_uint("0x")

    def test_bytes32_symbol(self):
        data = "0x" + "MKR".encode().hex().ljust(64, "0")

        assert abi.decode_string(data) == "MKR"

    def test_panic_reason(self):
        data = abi.PANIC_SELECTOR + format(0x11, "064x")

        assert abi.decode_revert_reason(data) == "panic code 0x11"

    def test_unknown_revert_payload(self):
        assert abi.decode_revert_reason(None) is None
        assert abi.decode_revert_reason("0xdeadbeef") is None


class TestUnits:
    @pytest.mark.parametrize(
        "text, decimals, expected",
        [
            ("1", 18, 10**18),
            ("1.5", 6, 1_500_000),
            ("0.000001", 6, 1),
            ("123456789.123456789", 9, 123456789123456789),
        ],
    )
    def test_parse_units(self, text, decimals, expected):
        assert abi.parse_units(text, decimals) == expected

    @pytest.mark.parametrize("text", ["1e18", "abc", "1.", ".5", "1.0000001"])
    def test_parse_units_rejects(self, text):
        with pytest.raises(ValueError):
            abi.parse_units(text, 6)

    @pytest.mark.parametrize(
        "value, decimals, expected",
        [
            (10**18, 18, "1"),
            (1_500_000, 6, "1.5"),
            (0, 18, "0"),
            (1, 18, "0.000000000000000001"),
            (25 * 10**9, 9, "25"),
        ],
    )
    def test_format_units(self, value, decimals, expected):
        assert abi.format_units(value, decimals) == expected
