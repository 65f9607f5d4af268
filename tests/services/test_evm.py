from decimal import Decimal

from eth_abi import decode

from hfvbridge.services.evm import (
    encode_call,
    from_raw_amount,
    is_native_address,
    is_valid_address,
    selector_from_signature,
    to_raw_amount,
)


def test_balance_of_selector():
    assert selector_from_signature("balanceOf(address)") == "0x70a08231"


def test_encode_call_accepts_mixed_case_addresses():
    owner = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
    data = encode_call("balanceOf(address)", ["address"], [owner])

    assert data.startswith("0x70a08231")
    (decoded,) = decode(["address"], bytes.fromhex(data[10:]))
    assert decoded.lower() == owner.lower()


def test_amount_conversions_truncate():
    assert to_raw_amount("12.5", 6) == 12_500_000
    assert to_raw_amount("0.1234567", 6) == 123_456
    assert from_raw_amount(12_500_000, 6) == Decimal("12.5")


def test_address_helpers():
    assert is_valid_address("0x" + "11" * 20)
    assert not is_valid_address("0x1234")
    assert not is_valid_address(None)
    assert is_native_address("0x0000000000000000000000000000000000000000")
