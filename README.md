# teye

Python building blocks for vision-care record systems. The contracts run
against an in-memory ledger environment (`teye.env.Env`) that provides
keyed storage with time-to-live bookkeeping, a ledger timestamp, caller
authorisation and an event log.

## Modules

- `teye.env` – `Env`, `Storage` and `Address`. `Env` holds an `instance`
  and a `persistent` `Storage`, a `timestamp`, and the published `events`.
  `Env.require_auth` raises `PermissionError` unless `mock_all_auths()` has
  been called.
- `teye.analytics` – `AnalyticsContract`: an authorised aggregator records
  pre-aggregated counts and sums per metric kind and `MetricDimensions`
  (region, age band, condition, time bucket); `get_trend` returns one
  `TrendPoint` per bucket of a closed interval and `get_population_metrics`
  returns the anonymous bucket.
- `teye.cross_chain` – `CrossChainContract`: trusted relayers, mapping of
  foreign identities to local addresses and replay-protected processing of
  `CrossChainMessage`s (only the `"GRANT"` action is accepted).
- `teye.emr_bridge` and `teye.emr_types` – `EmrBridgeContract`: EMR provider
  onboarding (pending, active, suspended), data-exchange records per
  patient, field mappings per provider and sync verification, which marks
  an exchange `COMPLETED` or `PARTIAL_SUCCESS`.
- `teye.whitelist` – address whitelisting stored in an `Env`.
- `teye.consent` – `ConsentManager`: consent grants with optional expiry and
  revocation; callers supply the current time.
- `teye.keys` – `KeyManager` and `AuditLog`: data keys under a master key;
  `rotate_master_secure` re-keys every data key, zeroes the old master and
  records the rotation.
- `teye.multisig` – `MultisigManager`: m-of-n policies and pending
  transactions that become executable once enough distinct signers sign.
- `teye.rate_limit` – `RateLimiterConfig` and `RateLimiterState`: a
  fixed-window rate limiter.
- `teye.meta_tx` – `build_grant_message` builds the canonical access-grant
  message and `verify_meta_signature` checks an ed25519 signature over it,
  raising `SignatureError` when it does not verify.
- `teye.compliance` – `AccessControl` (read/write/audit per `Role`),
  `AuditLog`, `BAATemplate.default_template()` and `RetentionManager`.

## Installation

```
pip install .
```

## Example

```python
from teye.env import Env
from teye.emr_bridge import EmrBridgeContract
from teye.emr_types import DataFormat, EmrSystem, ExchangeDirection, SyncStatus

env = Env()
env.mock_all_auths()
bridge = EmrBridgeContract(env)

admin = env.generate_address()
bridge.initialize(admin)

bridge.register_provider(
    admin, "epic-001", "City Hospital", EmrSystem.EPIC_FHIR,
    "https://emr.example.com/fhir", DataFormat.FHIR_R4,
)
bridge.activate_provider(admin, "epic-001")

bridge.record_data_exchange(
    admin, "ex-001", "epic-001", "pat-123",
    ExchangeDirection.IMPORT, DataFormat.FHIR_R4, "Patient", "abc123hash",
)
result = bridge.verify_sync(admin, "ver-001", "ex-001", "hash_abc", "hash_abc", [])
assert result.is_consistent
assert bridge.get_exchange("ex-001").status is SyncStatus.COMPLETED
```

Contract errors are raised as exceptions carrying a `code`: `AnalyticsError`,
`CrossChainError` and `EmrBridgeError`.

## What the package does not do

- All state lives in memory inside an `Env`; nothing is written to disk or
  shared between processes.
- There is no command-line tool, server or network access. Cross-chain
  messages are recorded as processed but no further action is carried out
  on the target records.
- There is no contract for storing the vision records themselves or for
  tracking AI analysis of them.

## Running the tests

```
pip install ".[test]"
pytest
```