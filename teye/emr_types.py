"""Data types for exchanging records with external EMR/EHR systems."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from teye.env import Address


class EmrSystem(enum.Enum):
    """Supported EMR/EHR system types."""

    EPIC_FHIR = "epic_fhir"
    CERNER_MILLENNIUM = "cerner_millennium"
    ALLSCRIPTS = "allscripts"
    ATHENAHEALTH = "athenahealth"
    CUSTOM = "custom"


class ProviderStatus(enum.Enum):
    """Status of an EMR provider registration."""

    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    REVOKED = "revoked"


class DataFormat(enum.Enum):
    """Data exchange protocol format."""

    FHIR_R4 = "fhir_r4"
    HL7_V2 = "hl7_v2"
    CCD_A = "ccd_a"
    CUSTOM = "custom"


class SyncStatus(enum.Enum):
    """Status of a sync operation."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    PARTIAL_SUCCESS = "partial_success"


class ExchangeDirection(enum.Enum):
    """Direction of a data exchange."""

    IMPORT = "import"
    EXPORT = "export"


@dataclass(frozen=True)
class EmrProvider:
    """A registered EMR provider."""

    provider_id: str
    name: str
    emr_system: EmrSystem
    endpoint_url: str
    data_format: DataFormat
    status: ProviderStatus
    registered_by: Address
    registered_at: int


@dataclass(frozen=True)
class FieldMapping:
    """Maps a field of an EMR system onto an internal field."""

    mapping_id: str
    provider_id: str
    source_field: str
    target_field: str
    transform_rule: str


@dataclass(frozen=True)
class DataExchangeRecord:
    """A record of data sent to or received from an EMR system."""

    exchange_id: str
    provider_id: str
    patient_id: str
    direction: ExchangeDirection
    data_format: DataFormat
    resource_type: str
    record_hash: str
    timestamp: int
    status: SyncStatus


@dataclass(frozen=True)
class SyncVerification:
    """Outcome of comparing source and target data after a sync."""

    verification_id: str
    exchange_id: str
    source_hash: str
    target_hash: str
    is_consistent: bool
    verified_at: int
    discrepancies: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "discrepancies", tuple(self.discrepancies))