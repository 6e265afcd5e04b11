"""In-memory ledger environment: addresses, keyed storage, auth and events."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Hashable

_WHOLE = object()


@dataclass(frozen=True, order=True)
class Address:
    """An opaque account or contract address."""

    value: str

    def __str__(self) -> str:
        return self.value


class Storage:
    """A key/value store whose entries carry a time-to-live in ledgers."""

    def __init__(self) -> None:
        self._data: dict[Hashable, Any] = {}
        self._ttl: dict[Any, int] = {}

    def get(self, key: Hashable, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: Hashable, value: Any) -> None:
        self._data[key] = value
        self._ttl.setdefault(key, 0)

    def has(self, key: Hashable) -> bool:
        return key in self._data

    def remove(self, key: Hashable) -> None:
        self._data.pop(key, None)
        self._ttl.pop(key, None)

    def extend_ttl(self, threshold: int, extend_to: int, key: Hashable = None) -> None:
        """Raise the TTL to ``extend_to`` when it is below ``threshold``.

        Without a key the TTL of the storage as a whole is extended.
        """
        slot = _WHOLE if key is None else key
        if slot is not _WHOLE and key not in self._data:
            raise KeyError(key)
        if self._ttl.get(slot, 0) < threshold:
            self._ttl[slot] = max(self._ttl.get(slot, 0), extend_to)

    def ttl(self, key: Hashable = None) -> int:
        slot = _WHOLE if key is None else key
        if slot is not _WHOLE and key not in self._data:
            raise KeyError(key)
        return self._ttl.get(slot, 0)

    def __contains__(self, key: Hashable) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        return len(self._data)


@dataclass
class Env:
    """Execution environment holding storage, ledger time, auth and events."""

    timestamp: int = 0
    instance: Storage = field(default_factory=Storage)
    persistent: Storage = field(default_factory=Storage)
    events: list[tuple[tuple[Any, ...], Any]] = field(default_factory=list)
    auths: list[Address] = field(default_factory=list)
    _mock_auths: bool = field(default=False, repr=False)
    _counter: itertools.count = field(default_factory=lambda: itertools.count(1), repr=False)

    def generate_address(self) -> Address:
        return Address(f"G{next(self._counter):055d}")

    def require_auth(self, address: Address) -> None:
        """Require that ``address`` authorised the current call."""
        if not self._mock_auths:
            raise PermissionError(f"authorisation missing for {address}")
        self.auths.append(address)

    def mock_all_auths(self) -> None:
        self._mock_auths = True

    def publish(self, topics: Any, data: Any) -> None:
        self.events.append((tuple(topics), data))