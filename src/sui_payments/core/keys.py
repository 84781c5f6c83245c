"""
Signer identity for Sui transactions.

Secrets use the Sui keystore encoding: base64 of a one-byte signature scheme
flag followed by the 32-byte private key.
"""

from __future__ import annotations

import base64
import binascii
import hashlib

from eth_keys import keys as secp256k1
from nacl.signing import SigningKey

from .errors import ConfigError
from .ids import address_from_bytes

__all__ = [
    "ED25519_FLAG",
    "KeyDecodeError",
    "SECP256K1_FLAG",
    "SignerIdentity",
    "transaction_digest",
]

ED25519_FLAG = 0x00
SECP256K1_FLAG = 0x01

# IntentScope::TransactionData, IntentVersion::V0, AppId::Sui
_TRANSACTION_INTENT = bytes([0, 0, 0])

_SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class KeyDecodeError(ConfigError):
    """Raised when the secret cannot be turned into a signer."""


def _blake2b_256(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


def transaction_digest(tx_bytes: bytes) -> bytes:
    """Digest of the intent message that is actually signed."""
    return _blake2b_256(_TRANSACTION_INTENT + tx_bytes)


class SignerIdentity:
    """
    An address plus the ability to sign transaction bytes for it.
    """

    def __init__(self, scheme_flag: int, secret: bytes) -> None:
        if len(secret) != 32:
            raise KeyDecodeError(f"Private key must be 32 bytes, got {len(secret)}")

        if scheme_flag == ED25519_FLAG:
            self._ed25519 = SigningKey(secret)
            self._secp256k1 = None
            public_key = self._ed25519.verify_key.encode()
        elif scheme_flag == SECP256K1_FLAG:
            self._ed25519 = None
            try:
                self._secp256k1 = secp256k1.PrivateKey(secret)
            except Exception as exc:  # noqa: BLE001
                raise KeyDecodeError(f"Invalid secp256k1 private key: {exc}") from exc
            public_key = self._secp256k1.public_key.to_compressed_bytes()
        else:
            raise KeyDecodeError(f"Unsupported signature scheme flag 0x{scheme_flag:02x}")

        self._flag = scheme_flag
        self._public_key = public_key
        self._address = address_from_bytes(_blake2b_256(bytes([scheme_flag]) + public_key))

    @classmethod
    def from_secret(cls, encoded: str) -> "SignerIdentity":
        """
        Decode a base64 keystore secret.

        A bare 32-byte key (no flag) is accepted as Ed25519.
        """
        value = encoded.strip()
        if not value:
            raise KeyDecodeError("Private key must not be empty")
        try:
            raw = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise KeyDecodeError("Private key is not valid base64") from exc

        if len(raw) == 33:
            return cls(raw[0], raw[1:])
        if len(raw) == 32:
            return cls(ED25519_FLAG, raw)
        raise KeyDecodeError(
            f"Private key must decode to 33 bytes (flag + key), got {len(raw)}"
        )

    @property
    def address(self) -> str:
        return self._address

    @property
    def scheme_flag(self) -> int:
        return self._flag

    @property
    def public_key(self) -> bytes:
        return self._public_key

    def sign_transaction(self, tx_bytes: bytes) -> str:
        """
        Sign BCS transaction bytes and return the serialized Sui signature
        (``flag || signature || public key``, base64).
        """
        digest = transaction_digest(tx_bytes)
        if self._ed25519 is not None:
            signature = self._ed25519.sign(digest).signature
        else:
            signed = self._secp256k1.sign_msg_hash(hashlib.sha256(digest).digest())
            s = signed.s
            if s > _SECP256K1_ORDER // 2:
                s = _SECP256K1_ORDER - s
            signature = signed.r.to_bytes(32, "big") + s.to_bytes(32, "big")

        serialized = bytes([self._flag]) + signature + self._public_key
        return base64.b64encode(serialized).decode("ascii")

    def __repr__(self) -> str:
        return f"SignerIdentity(address={self._address!r}, scheme_flag={self._flag})"
