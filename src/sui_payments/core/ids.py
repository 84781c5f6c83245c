"""
Helpers for Sui addresses and object ids (32-byte, ``0x``-prefixed hex).
"""

from __future__ import annotations

from eth_utils import add_0x_prefix, encode_hex, is_hexstr, remove_0x_prefix
from hexbytes import HexBytes

__all__ = [
    "SUI_ADDRESS_LENGTH",
    "address_from_bytes",
    "address_to_bytes",
    "normalize_sui_address",
]

SUI_ADDRESS_LENGTH = 32


def normalize_sui_address(value: str) -> str:
    """
    Return ``value`` as ``0x`` followed by 64 lowercase hex characters.

    Short forms such as ``0x2`` are left-padded with zeros.
    """
    raw = remove_0x_prefix(value.strip()).lower()
    if not raw or len(raw) > SUI_ADDRESS_LENGTH * 2 or not is_hexstr(raw):
        raise ValueError(f"'{value}' is not a valid Sui address or object id")
    return add_0x_prefix(raw.rjust(SUI_ADDRESS_LENGTH * 2, "0"))


def address_to_bytes(value: str) -> bytes:
    return bytes(HexBytes(normalize_sui_address(value)))


def address_from_bytes(data: bytes) -> str:
    if len(data) != SUI_ADDRESS_LENGTH:
        raise ValueError(f"Sui addresses are {SUI_ADDRESS_LENGTH} bytes, got {len(data)}")
    return encode_hex(data)
