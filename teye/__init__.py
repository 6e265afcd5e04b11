"""In-memory ledger contracts and helpers for vision-care record systems: analytics, cross-chain identity, EMR bridging, consent, keys, multisig, rate limiting and compliance."""

__version__ = "1.2.2"