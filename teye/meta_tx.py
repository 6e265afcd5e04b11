"""Canonical messages and ed25519 checks for access-grant meta-transactions."""

from __future__ import annotations

import struct

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

_PREFIX = b"grant_access"


class SignatureError(Exception):
    """Raised when a meta-transaction signature does not verify."""


def _fixed(value: bytes, size: int, what: str) -> bytes:
    data = bytes(value)
    if len(data) != size:
        raise ValueError(f"{what} must be {size} bytes, got {len(data)}")
    return data


def build_grant_message(
    patient_pubkey: bytes, grantee_id: bytes, level: int, expires_at: int, nonce: int
) -> bytes:
    """Build ``"grant_access" || pubkey(32) || grantee(32) || level(u32 BE) || expires_at(u64 BE) || nonce(u64 BE)``."""
    if not 0 <= level < 2**32:
        raise ValueError("level must fit in 32 bits")
    if not 0 <= expires_at < 2**64 or not 0 <= nonce < 2**64:
        raise ValueError("expires_at and nonce must fit in 64 bits")
    return (
        _PREFIX
        + _fixed(patient_pubkey, 32, "patient_pubkey")
        + _fixed(grantee_id, 32, "grantee_id")
        + struct.pack(">IQQ", level, expires_at, nonce)
    )


def verify_meta_signature(public_key: bytes, message: bytes, signature: bytes) -> bytes:
    """Verify an ed25519 signature; returns the message or raises SignatureError."""
    key = VerifyKey(_fixed(public_key, 32, "public_key"))
    try:
        return key.verify(bytes(message), _fixed(signature, 64, "signature"))
    except BadSignatureError as exc:
        raise SignatureError("invalid signature") from exc