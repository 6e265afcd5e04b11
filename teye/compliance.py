"""Compliance helpers: role permissions, audit log, BAA template and retention."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field


def _now() -> int:
    return int(time.time())


class Role(enum.Enum):
    ADMIN = "admin"
    CLINICIAN = "clinician"
    RESEARCHER = "researcher"
    AUDITOR = "auditor"
    PATIENT = "patient"


@dataclass(frozen=True)
class PermissionSet:
    can_read: bool
    can_write: bool
    can_audit: bool


def _default_permissions() -> dict[Role, PermissionSet]:
    return {
        Role.ADMIN: PermissionSet(True, True, True),
        Role.CLINICIAN: PermissionSet(True, True, False),
        Role.RESEARCHER: PermissionSet(True, False, False),
        Role.AUDITOR: PermissionSet(True, False, True),
        Role.PATIENT: PermissionSet(True, False, False),
    }


@dataclass
class AccessControl:
    """Maps roles to read/write/audit permissions."""

    role_permissions: dict[Role, PermissionSet] = field(default_factory=_default_permissions)

    def check(self, role: Role, permission: str) -> bool:
        perms = self.role_permissions.get(role)
        if perms is None:
            return False
        return {
            "read": perms.can_read,
            "write": perms.can_write,
            "audit": perms.can_audit,
        }.get(permission, False)


@dataclass
class AuditEntry:
    actor: str
    action: str
    target: str
    timestamp: int


@dataclass
class AuditLog:
    entries: list[AuditEntry] = field(default_factory=list)

    def record(self, actor: str, action: str, target: str) -> None:
        """Append an entry stamped with the current time."""
        self.entries.append(AuditEntry(actor, action, target, _now()))

    def query(self) -> tuple[AuditEntry, ...]:
        return tuple(self.entries)


@dataclass
class BAATemplate:
    provider: str
    covered_data: str
    terms: str

    @classmethod
    def default_template(cls) -> "BAATemplate":
        return cls(
            provider="Provider",
            covered_data="PHI",
            terms="Standard BAA terms placeholder",
        )


@dataclass
class RetentionPolicy:
    id: str
    retention_seconds: int


@dataclass
class RetentionManager:
    policies: list[RetentionPolicy] = field(default_factory=list)
    created_at: int = field(default_factory=_now)

    def add_policy(self, policy_id: str, seconds: int) -> None:
        self.policies.append(RetentionPolicy(policy_id, seconds))

    def should_purge(self, created: int, policy_id: str) -> bool:
        """Whether data created at ``created`` has outlived the named policy."""
        policy = next((p for p in self.policies if p.id == policy_id), None)
        if policy is None:
            return False
        return min(created + policy.retention_seconds, 2**64 - 1) <= _now()