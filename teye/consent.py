"""Patient consent grants with optional expiry."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

_U64_MAX = 2**64 - 1


class ConsentType(enum.Enum):
    TREATMENT = "treatment"
    RESEARCH = "research"
    SHARING = "sharing"


@dataclass
class ConsentRecord:
    subject: str
    grantee: str
    consent_type: ConsentType
    granted_at: int
    expires_at: int | None = None
    revoked: bool = False


@dataclass
class ConsentManager:
    """Stores consent records by identifier; callers supply the current time."""

    records: dict[str, ConsentRecord] = field(default_factory=dict)

    def grant(
        self,
        consent_id: str,
        subject: str,
        grantee: str,
        consent_type: ConsentType,
        now: int,
        ttl_secs: int | None = None,
    ) -> None:
        expires = None
        if ttl_secs is not None and now + ttl_secs <= _U64_MAX:
            expires = now + ttl_secs
        self.records[consent_id] = ConsentRecord(
            subject=subject,
            grantee=grantee,
            consent_type=consent_type,
            granted_at=now,
            expires_at=expires,
        )

    def revoke(self, consent_id: str) -> None:
        record = self.records.get(consent_id)
        if record is not None:
            record.revoked = True

    def is_active(self, consent_id: str, now: int) -> bool:
        """False when the record is missing, revoked or expired at ``now``."""
        record = self.records.get(consent_id)
        if record is None or record.revoked:
            return False
        if record.expires_at is not None:
            return now < record.expires_at
        return True