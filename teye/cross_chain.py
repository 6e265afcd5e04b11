"""Bridge that accepts relayed messages from foreign chains and maps identities."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from teye.env import Address, Env

ADMIN = "ADMIN"
INITIALIZED = "INIT"
RELAYER = "RELAYER"
ID_MAP = "ID_MAP"
PROC_MSG = "PROC_MSG"
GRANT = "GRANT"

TTL_THRESHOLD = 17_280
TTL_EXTEND_TO = 518_400


@dataclass(frozen=True)
class CrossChainMessage:
    """A validated message from a foreign chain."""

    source_chain: str
    source_address: str
    target_action: str
    payload: bytes = b""


class CrossChainErrorCode(enum.IntEnum):
    NOT_INITIALIZED = 1
    ALREADY_INITIALIZED = 2
    UNAUTHORIZED = 3
    ALREADY_PROCESSED = 4
    UNKNOWN_IDENTITY = 5
    UNSUPPORTED_ACTION = 6


class CrossChainError(Exception):
    """Raised by the cross-chain bridge; ``code`` says why."""

    def __init__(self, code: CrossChainErrorCode) -> None:
        super().__init__(f"{code.name} ({int(code)})")
        self.code = code


class CrossChainContract:
    """Relayer registry, identity map and replay-protected message processing."""

    def __init__(self, env: Env | None = None) -> None:
        self.env = env if env is not None else Env()

    def initialize(self, admin: Address) -> None:
        store = self.env.instance
        if store.has(INITIALIZED):
            raise CrossChainError(CrossChainErrorCode.ALREADY_INITIALIZED)
        self.env.require_auth(admin)
        store.set(ADMIN, admin)
        store.set(INITIALIZED, True)
        self.env.publish((INITIALIZED,), admin)

    def add_relayer(self, caller: Address, relayer: Address) -> None:
        """Trust ``relayer`` to submit cross-chain messages; admin only."""
        self._require_admin(caller)
        key = (RELAYER, relayer)
        self.env.persistent.set(key, True)
        self.env.persistent.extend_ttl(TTL_THRESHOLD, TTL_EXTEND_TO, key)
        self.env.publish((RELAYER,), relayer)

    def is_relayer(self, address: Address) -> bool:
        key = (RELAYER, address)
        trusted = bool(self.env.persistent.get(key, False))
        if trusted:
            self.env.persistent.extend_ttl(TTL_THRESHOLD, TTL_EXTEND_TO, key)
        return trusted

    def map_identity(
        self,
        caller: Address,
        foreign_chain: str,
        foreign_address: str,
        local_address: Address,
    ) -> None:
        """Map a foreign identity to a local address; admin only."""
        self._require_admin(caller)
        key = (ID_MAP, foreign_chain, foreign_address)
        self.env.persistent.set(key, local_address)
        self.env.persistent.extend_ttl(TTL_THRESHOLD, TTL_EXTEND_TO, key)
        self.env.publish((ID_MAP, foreign_chain, foreign_address), local_address)

    def get_local_address(self, foreign_chain: str, foreign_address: str) -> Address | None:
        key = (ID_MAP, foreign_chain, foreign_address)
        local = self.env.persistent.get(key)
        if local is not None:
            self.env.persistent.extend_ttl(TTL_THRESHOLD, TTL_EXTEND_TO, key)
        return local

    def process_message(
        self,
        caller: Address,
        message_id: bytes,
        message: CrossChainMessage,
        vision_contract: Address,
    ) -> None:
        """Process a relayed message once; only the GRANT action is supported."""
        self.env.require_auth(caller)
        if not self.is_relayer(caller):
            raise CrossChainError(CrossChainErrorCode.UNAUTHORIZED)

        message_id = bytes(message_id)
        processed_key = (PROC_MSG, message_id)
        if self.env.persistent.get(processed_key, False):
            self.env.persistent.extend_ttl(TTL_THRESHOLD, TTL_EXTEND_TO, processed_key)
            raise CrossChainError(CrossChainErrorCode.ALREADY_PROCESSED)

        patient = self.get_local_address(message.source_chain, message.source_address)
        if patient is None:
            raise CrossChainError(CrossChainErrorCode.UNKNOWN_IDENTITY)

        if message.target_action != GRANT:
            raise CrossChainError(CrossChainErrorCode.UNSUPPORTED_ACTION)

        self.env.persistent.set(processed_key, True)
        self.env.persistent.extend_ttl(TTL_THRESHOLD, TTL_EXTEND_TO, processed_key)
        self.env.publish((PROC_MSG, message.source_chain, message_id), True)

    def _require_admin(self, caller: Address) -> None:
        self.env.require_auth(caller)
        admin = self.env.instance.get(ADMIN)
        if admin is None:
            raise CrossChainError(CrossChainErrorCode.NOT_INITIALIZED)
        if caller != admin:
            raise CrossChainError(CrossChainErrorCode.UNAUTHORIZED)