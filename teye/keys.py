"""Master and data key management with an audit trail of rotations."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

_U64_MAX = 2**64 - 1


def _now() -> int:
    return int(time.time())


@dataclass
class AuditEntry:
    actor: str = ""
    action: str = ""
    target: str = ""
    timestamp: int = 0


@dataclass
class AuditLog:
    entries: list[AuditEntry] = field(default_factory=list)

    def record(self, actor: str, action: str, target: str) -> None:
        self.entries.append(AuditEntry(actor, action, target, _now()))

    def query(self) -> tuple[AuditEntry, ...]:
        return tuple(self.entries)


@dataclass
class DataKey:
    key_id: str
    key: bytes
    created: int
    expires: int | None = None


def _xor(data: bytes, mask: bytes) -> bytes:
    if not data:
        return bytes(data)
    if not mask:
        raise ValueError("master key must not be empty")
    return bytes(b ^ mask[i % len(mask)] for i, b in enumerate(data))


class KeyManager:
    """Holds a master key and the data keys encrypted under it."""

    def __init__(self, master: bytes = b"") -> None:
        self.master = bytearray(master)
        self.data_keys: dict[str, DataKey] = {}
        self.old_master: bytes | None = None

    def create_data_key(self, key_id: str, key: bytes, ttl: int | None = None) -> None:
        now = _now()
        expires = now + ttl if ttl is not None and now + ttl <= _U64_MAX else None
        self.data_keys[key_id] = DataKey(key_id, bytes(key), now, expires)

    def rotate_master(self, new_master: bytes) -> None:
        self.master = bytearray(new_master)

    def rotate_master_secure(self, new_master: bytes, audit: AuditLog, actor: str) -> None:
        """Re-encrypt every data key under ``new_master``, zero the old master and log it."""
        old = bytes(self.master)
        new = bytes(new_master)
        rekeyed = {kid: _xor(_xor(dk.key, old), new) for kid, dk in self.data_keys.items()}
        self.old_master = old
        for kid, key in rekeyed.items():
            self.data_keys[kid].key = key
        self.master[:] = bytes(len(self.master))
        self.master = bytearray(new)
        audit.record(actor, "rotate_master_secure", "master_key")

    def get_key(self, key_id: str) -> DataKey | None:
        return self.data_keys.get(key_id)