"""Utilities for working with EVM-compatible chains."""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Any, Sequence, Tuple, Union

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_utils import is_address, keccak, to_checksum_address

from ..core.chains import NATIVE_PLACEHOLDER


def selector_from_signature(signature: str) -> str:
    """``balanceOf(address)`` -> ``0x70a08231``."""

    return "0x" + keccak(text=signature)[:4].hex()


def strip_0x(value: str) -> str:
    return value[2:] if value.startswith(("0x", "0X")) else value


def encode_call(signature: str, arg_types: Sequence[str], args: Sequence[Any]) -> str:
    """Calldata hex for ``signature`` applied to ``args``.

    Address arguments are lowercased first; eth-abi rejects mixed-case
    addresses whose checksum does not validate.
    """

    normalized = [
        arg.lower() if kind == "address" and isinstance(arg, str) else arg
        for kind, arg in zip(arg_types, args)
    ]
    return selector_from_signature(signature) + abi_encode(list(arg_types), normalized).hex()


def decode_result(result_types: Sequence[str], data: Union[str, bytes]) -> Tuple[Any, ...]:
    raw = bytes.fromhex(strip_0x(data)) if isinstance(data, str) else data
    return tuple(abi_decode(list(result_types), raw))


def normalize_address(address: str) -> str:
    """Lowercase key form used for merging and caching."""

    return address.strip().lower()


def checksum(address: str) -> str:
    return to_checksum_address(address)


def is_valid_address(address: Any) -> bool:
    return isinstance(address, str) and is_address(address)


def is_native_address(address: str) -> bool:
    return normalize_address(address) == NATIVE_PLACEHOLDER


def to_raw_amount(amount: Union[str, int, float, Decimal], decimals: int) -> int:
    """Human amount -> integer base units, truncating extra precision."""

    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    scaled = (value * (Decimal(10) ** decimals)).quantize(Decimal(1), rounding=ROUND_DOWN)
    return int(scaled)


def from_raw_amount(raw: Union[int, str], decimals: int) -> Decimal:
    return Decimal(int(raw)) / (Decimal(10) ** decimals)


__all__ = [
    "selector_from_signature",
    "strip_0x",
    "encode_call",
    "decode_result",
    "normalize_address",
    "checksum",
    "is_valid_address",
    "is_native_address",
    "to_raw_amount",
    "from_raw_amount",
]
