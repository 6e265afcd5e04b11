"""M-of-N signing policies and pending transactions awaiting signatures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class MultisigPolicy:
    m: int
    keys: list[str]


@dataclass
class PendingTx:
    id: str = ""
    signer_set: set[str] = field(default_factory=set)
    required: int = 0

    @property
    def executable(self) -> bool:
        return len(self.signer_set) >= self.required


@dataclass
class MultisigManager:
    policies: dict[str, MultisigPolicy] = field(default_factory=dict)
    pending: dict[str, PendingTx] = field(default_factory=dict)

    def add_policy(self, name: str, m: int, keys: list[str]) -> None:
        self.policies[name] = MultisigPolicy(m, list(keys))

    def create_pending(self, tx_id: str, required: int) -> None:
        self.pending[tx_id] = PendingTx(tx_id, set(), required)

    def sign(self, tx_id: str, signer: str) -> bool:
        """Add a signature; returns whether the transaction is now executable."""
        tx = self.pending.get(tx_id)
        if tx is None:
            return False
        tx.signer_set.add(signer)
        return tx.executable

    def is_executable(self, tx_id: str) -> bool:
        tx = self.pending.get(tx_id)
        return tx is not None and tx.executable