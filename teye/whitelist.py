"""Contract-wide address whitelist kept in environment storage."""

from __future__ import annotations

from teye.env import Address, Env

WL_ENABLED = "WL_EN"
WL_ADDR = "WL_ADR"
WL_TTL_THRESHOLD = 5_184_000
WL_TTL_EXTEND_TO = 10_368_000


def _key(address: Address) -> tuple[str, Address]:
    return (WL_ADDR, address)


def set_whitelist_enabled(env: Env, enabled: bool) -> None:
    """Enable or disable whitelist enforcement."""
    env.instance.set(WL_ENABLED, enabled)
    env.instance.extend_ttl(WL_TTL_THRESHOLD, WL_TTL_EXTEND_TO)


def is_whitelist_enabled(env: Env) -> bool:
    enabled = bool(env.instance.get(WL_ENABLED, False))
    if enabled:
        env.instance.extend_ttl(WL_TTL_THRESHOLD, WL_TTL_EXTEND_TO)
    return enabled


def add_to_whitelist(env: Env, address: Address) -> None:
    key = _key(address)
    env.persistent.set(key, True)
    env.persistent.extend_ttl(WL_TTL_THRESHOLD, WL_TTL_EXTEND_TO, key)


def remove_from_whitelist(env: Env, address: Address) -> None:
    env.persistent.remove(_key(address))


def is_whitelisted(env: Env, address: Address) -> bool:
    key = _key(address)
    listed = bool(env.persistent.get(key, False))
    if listed:
        env.persistent.extend_ttl(WL_TTL_THRESHOLD, WL_TTL_EXTEND_TO, key)
    return listed


def check_whitelist_access(env: Env, address: Address) -> bool:
    """Whether ``address`` may call guarded functions; all may when disabled."""
    return not is_whitelist_enabled(env) or is_whitelisted(env, address)