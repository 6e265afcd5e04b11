"""Bridge to external EMR systems: provider onboarding, data exchange, mapping and sync checks."""

from __future__ import annotations

import enum
from dataclasses import replace
from typing import Iterable

from teye.emr_types import (
    DataExchangeRecord,
    DataFormat,
    EmrProvider,
    EmrSystem,
    ExchangeDirection,
    FieldMapping,
    ProviderStatus,
    SyncStatus,
    SyncVerification,
)
from teye.env import Address, Env

ADMIN = "ADMIN"
INITIALIZED = "INIT"
PROVIDER = "PROVIDER"
PROVIDER_LIST = "PRV_LIST"
EXCHANGE = "EXCHANGE"
PATIENT_EXCHANGES = "PAT_EX"
MAPPING = "MAPPING"
PROVIDER_MAPPINGS = "PRV_MAP"
VERIFY = "VERIFY"

EVENT_INIT = "EMR_INIT"
EVENT_PROVIDER_REGISTERED = "PRV_REG"
EVENT_PROVIDER_STATUS = "PRV_STS"
EVENT_DATA_EXCHANGED = "DATA_EX"
EVENT_MAPPING_CREATED = "MAP_ADD"
EVENT_SYNC_VERIFIED = "SYNC_VF"

STATUS_CODE_ACTIVE = 1
STATUS_CODE_SUSPENDED = 2

TTL_THRESHOLD = 17_280
TTL_EXTEND_TO = 518_400


class EmrErrorCode(enum.IntEnum):
    NOT_INITIALIZED = 1
    ALREADY_INITIALIZED = 2
    UNAUTHORIZED = 3
    PROVIDER_NOT_FOUND = 4
    PROVIDER_ALREADY_EXISTS = 5
    PROVIDER_NOT_ACTIVE = 6
    INVALID_MAPPING = 7
    EXCHANGE_NOT_FOUND = 8
    EXCHANGE_ALREADY_EXISTS = 9
    SYNC_FAILED = 10
    INVALID_DATA_FORMAT = 11
    MAPPING_ALREADY_EXISTS = 12
    VERIFICATION_NOT_FOUND = 13
    VERIFICATION_ALREADY_EXISTS = 14


class EmrBridgeError(Exception):
    """Raised by the EMR bridge; ``code`` says why."""

    def __init__(self, code: EmrErrorCode) -> None:
        super().__init__(f"{code.name} ({int(code)})")
        self.code = code


class EmrBridgeContract:
    """Tracks EMR providers, the data exchanged with them and sync verifications."""

    def __init__(self, env: Env | None = None) -> None:
        self.env = env if env is not None else Env()

    # ── initialisation ──────────────────────────────────────────────────

    def initialize(self, admin: Address) -> None:
        store = self.env.instance
        if store.has(INITIALIZED):
            raise EmrBridgeError(EmrErrorCode.ALREADY_INITIALIZED)
        self.env.require_auth(admin)
        store.set(ADMIN, admin)
        store.set(INITIALIZED, True)
        store.extend_ttl(TTL_THRESHOLD, TTL_EXTEND_TO)
        self.env.publish((EVENT_INIT,), admin)

    def get_admin(self) -> Address:
        admin = self.env.instance.get(ADMIN)
        if admin is None:
            raise EmrBridgeError(EmrErrorCode.NOT_INITIALIZED)
        return admin

    # ── provider onboarding ─────────────────────────────────────────────

    def register_provider(
        self,
        caller: Address,
        provider_id: str,
        name: str,
        emr_system: EmrSystem,
        endpoint_url: str,
        data_format: DataFormat,
    ) -> EmrProvider:
        """Register a provider in the pending state; admin only."""
        self._require_admin(caller)
        key = (PROVIDER, provider_id)
        if self.env.persistent.has(key):
            raise EmrBridgeError(EmrErrorCode.PROVIDER_ALREADY_EXISTS)

        provider = EmrProvider(
            provider_id=provider_id,
            name=name,
            emr_system=emr_system,
            endpoint_url=endpoint_url,
            data_format=data_format,
            status=ProviderStatus.PENDING,
            registered_by=caller,
            registered_at=self.env.timestamp,
        )
        self._save(key, provider)
        self._append(PROVIDER_LIST, provider_id)
        self.env.publish((EVENT_PROVIDER_REGISTERED, provider_id), caller)
        return provider

    def activate_provider(self, caller: Address, provider_id: str) -> None:
        self._set_provider_status(
            caller, provider_id, ProviderStatus.ACTIVE, STATUS_CODE_ACTIVE
        )

    def suspend_provider(self, caller: Address, provider_id: str) -> None:
        self._set_provider_status(
            caller, provider_id, ProviderStatus.SUSPENDED, STATUS_CODE_SUSPENDED
        )

    def get_provider(self, provider_id: str) -> EmrProvider:
        return self._load(
            (PROVIDER, provider_id), EmrErrorCode.PROVIDER_NOT_FOUND
        )

    def list_providers(self) -> list[str]:
        return self._list(PROVIDER_LIST)

    # ── data exchange ───────────────────────────────────────────────────

    def record_data_exchange(
        self,
        caller: Address,
        exchange_id: str,
        provider_id: str,
        patient_id: str,
        direction: ExchangeDirection,
        data_format: DataFormat,
        resource_type: str,
        record_hash: str,
    ) -> DataExchangeRecord:
        """Record an import or export with an active provider; admin only."""
        self._require_admin(caller)
        self._require_active_provider(provider_id)

        key = (EXCHANGE, exchange_id)
        if self.env.persistent.has(key):
            raise EmrBridgeError(EmrErrorCode.EXCHANGE_ALREADY_EXISTS)

        record = DataExchangeRecord(
            exchange_id=exchange_id,
            provider_id=provider_id,
            patient_id=patient_id,
            direction=direction,
            data_format=data_format,
            resource_type=resource_type,
            record_hash=record_hash,
            timestamp=self.env.timestamp,
            status=SyncStatus.PENDING,
        )
        self._save(key, record)
        self._append((PATIENT_EXCHANGES, patient_id), exchange_id)
        self.env.publish((EVENT_DATA_EXCHANGED, exchange_id, provider_id), None)
        return record

    def update_exchange_status(
        self, caller: Address, exchange_id: str, new_status: SyncStatus
    ) -> None:
        self._require_admin(caller)
        key = (EXCHANGE, exchange_id)
        record = self._load(key, EmrErrorCode.EXCHANGE_NOT_FOUND, touch=False)
        self._save(key, replace(record, status=new_status))

    def get_exchange(self, exchange_id: str) -> DataExchangeRecord:
        return self._load((EXCHANGE, exchange_id), EmrErrorCode.EXCHANGE_NOT_FOUND)

    def get_patient_exchanges(self, patient_id: str) -> list[str]:
        return self._list((PATIENT_EXCHANGES, patient_id))

    # ── field mappings ──────────────────────────────────────────────────

    def create_field_mapping(
        self,
        caller: Address,
        mapping_id: str,
        provider_id: str,
        source_field: str,
        target_field: str,
        transform_rule: str,
    ) -> FieldMapping:
        """Map an EMR field onto an internal field for a registered provider."""
        self._require_admin(caller)
        if not self.env.persistent.has((PROVIDER, provider_id)):
            raise EmrBridgeError(EmrErrorCode.PROVIDER_NOT_FOUND)
        if not source_field or not target_field:
            raise EmrBridgeError(EmrErrorCode.INVALID_MAPPING)

        key = (MAPPING, mapping_id)
        if self.env.persistent.has(key):
            raise EmrBridgeError(EmrErrorCode.MAPPING_ALREADY_EXISTS)

        mapping = FieldMapping(
            mapping_id=mapping_id,
            provider_id=provider_id,
            source_field=source_field,
            target_field=target_field,
            transform_rule=transform_rule,
        )
        self._save(key, mapping)
        self._append((PROVIDER_MAPPINGS, provider_id), mapping_id)
        self.env.publish((EVENT_MAPPING_CREATED, mapping_id), provider_id)
        return mapping

    def get_field_mapping(self, mapping_id: str) -> FieldMapping:
        return self._load((MAPPING, mapping_id), EmrErrorCode.INVALID_MAPPING)

    def get_provider_mappings(self, provider_id: str) -> list[str]:
        return self._list((PROVIDER_MAPPINGS, provider_id))

    # ── sync verification ───────────────────────────────────────────────

    def verify_sync(
        self,
        caller: Address,
        verification_id: str,
        exchange_id: str,
        source_hash: str,
        target_hash: str,
        discrepancies: Iterable[str],
    ) -> SyncVerification:
        """Compare source and target after a sync and update the exchange status."""
        self._require_admin(caller)
        exchange_key = (EXCHANGE, exchange_id)
        if not self.env.persistent.has(exchange_key):
            raise EmrBridgeError(EmrErrorCode.EXCHANGE_NOT_FOUND)

        verify_key = (VERIFY, verification_id)
        if self.env.persistent.has(verify_key):
            raise EmrBridgeError(EmrErrorCode.VERIFICATION_ALREADY_EXISTS)

        found = tuple(discrepancies)
        is_consistent = source_hash == target_hash and not found
        verification = SyncVerification(
            verification_id=verification_id,
            exchange_id=exchange_id,
            source_hash=source_hash,
            target_hash=target_hash,
            is_consistent=is_consistent,
            verified_at=self.env.timestamp,
            discrepancies=found,
        )
        self._save(verify_key, verification)

        record = self._load(exchange_key, EmrErrorCode.EXCHANGE_NOT_FOUND, touch=False)
        status = SyncStatus.COMPLETED if is_consistent else SyncStatus.PARTIAL_SUCCESS
        self._save(exchange_key, replace(record, status=status))

        self.env.publish((EVENT_SYNC_VERIFIED, verification_id), is_consistent)
        return verification

    def get_verification(self, verification_id: str) -> SyncVerification:
        return self._load(
            (VERIFY, verification_id), EmrErrorCode.VERIFICATION_NOT_FOUND
        )

    # ── helpers ─────────────────────────────────────────────────────────

    def _require_admin(self, caller: Address) -> None:
        self.env.require_auth(caller)
        admin = self.env.instance.get(ADMIN)
        if admin is None:
            raise EmrBridgeError(EmrErrorCode.NOT_INITIALIZED)
        if caller != admin:
            raise EmrBridgeError(EmrErrorCode.UNAUTHORIZED)
        self.env.instance.extend_ttl(TTL_THRESHOLD, TTL_EXTEND_TO)

    def _require_active_provider(self, provider_id: str) -> None:
        provider = self._load(
            (PROVIDER, provider_id), EmrErrorCode.PROVIDER_NOT_FOUND, touch=False
        )
        if provider.status is not ProviderStatus.ACTIVE:
            raise EmrBridgeError(EmrErrorCode.PROVIDER_NOT_ACTIVE)

    def _set_provider_status(
        self, caller: Address, provider_id: str, status: ProviderStatus, code: int
    ) -> None:
        self._require_admin(caller)
        key = (PROVIDER, provider_id)
        provider = self._load(key, EmrErrorCode.PROVIDER_NOT_FOUND, touch=False)
        if provider.status is status:
            return
        self._save(key, replace(provider, status=status))
        self.env.publish((EVENT_PROVIDER_STATUS, provider_id), code)

    def _save(self, key, value) -> None:
        self.env.persistent.set(key, value)
        self.env.persistent.extend_ttl(TTL_THRESHOLD, TTL_EXTEND_TO, key)

    def _load(self, key, missing: EmrErrorCode, touch: bool = True):
        value = self.env.persistent.get(key)
        if value is None:
            raise EmrBridgeError(missing)
        if touch:
            self.env.persistent.extend_ttl(TTL_THRESHOLD, TTL_EXTEND_TO, key)
        return value

    def _append(self, key, item: str) -> None:
        items = self.env.persistent.get(key, ())
        self._save(key, (*items, item))

    def _list(self, key) -> list[str]:
        items = self.env.persistent.get(key, ())
        if items:
            self.env.persistent.extend_ttl(TTL_THRESHOLD, TTL_EXTEND_TO, key)
        return list(items)