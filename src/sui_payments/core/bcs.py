"""
Minimal BCS (Binary Canonical Serialization) writer.

Only the primitives needed to encode Sui ``TransactionData`` are supported.
"""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

import base58

from .ids import address_to_bytes

__all__ = ["BcsWriter", "encode_string", "encode_u64"]

T = TypeVar("T")

_U8_MAX = 0xFF
_U16_MAX = 0xFFFF
_U64_MAX = 0xFFFFFFFFFFFFFFFF
_DIGEST_LENGTH = 32


class BcsWriter:
    def __init__(self) -> None:
        self._buffer = bytearray()

    def to_bytes(self) -> bytes:
        return bytes(self._buffer)

    def uleb128(self, value: int) -> "BcsWriter":
        if value < 0:
            raise ValueError("ULEB128 values must be non-negative")
        while True:
            byte = value & 0x7F
            value >>= 7
            if value:
                self._buffer.append(byte | 0x80)
            else:
                self._buffer.append(byte)
                return self

    def u8(self, value: int) -> "BcsWriter":
        _check_range(value, _U8_MAX, "u8")
        self._buffer.append(value)
        return self

    def u16(self, value: int) -> "BcsWriter":
        _check_range(value, _U16_MAX, "u16")
        self._buffer += value.to_bytes(2, "little")
        return self

    def u64(self, value: int) -> "BcsWriter":
        _check_range(value, _U64_MAX, "u64")
        self._buffer += value.to_bytes(8, "little")
        return self

    def boolean(self, value: bool) -> "BcsWriter":
        self._buffer.append(1 if value else 0)
        return self

    def raw(self, data: bytes) -> "BcsWriter":
        self._buffer += data
        return self

    def byte_vector(self, data: bytes) -> "BcsWriter":
        self.uleb128(len(data))
        self._buffer += data
        return self

    def string(self, value: str) -> "BcsWriter":
        return self.byte_vector(value.encode("utf-8"))

    def address(self, value: str) -> "BcsWriter":
        return self.raw(address_to_bytes(value))

    def digest(self, value: str) -> "BcsWriter":
        """Object digests travel as base58 text and are encoded as 32 length-prefixed bytes."""
        decoded = base58.b58decode(value)
        if len(decoded) != _DIGEST_LENGTH:
            raise ValueError(f"Object digest '{value}' does not decode to 32 bytes")
        return self.byte_vector(decoded)

    def vector(self, items: Iterable[T], write_item: Callable[["BcsWriter", T], object]) -> "BcsWriter":
        items = list(items)
        self.uleb128(len(items))
        for item in items:
            write_item(self, item)
        return self


def _check_range(value: int, maximum: int, kind: str) -> None:
    if not 0 <= value <= maximum:
        raise ValueError(f"{value} does not fit in {kind}")


def encode_u64(value: int) -> bytes:
    return BcsWriter().u64(value).to_bytes()


def encode_string(value: str) -> bytes:
    return BcsWriter().string(value).to_bytes()
