import pytest

from teye.cross_chain import (
    TTL_EXTEND_TO,
    CrossChainContract,
    CrossChainError,
    CrossChainErrorCode,
    CrossChainMessage,
)
from teye.env import Env


def _contract():
    env = Env()
    env.mock_all_auths()
    return env, CrossChainContract(env)


@pytest.fixture
def bridge():
    env, client = _contract()
    admin = env.generate_address()
    relayer = env.generate_address()
    vision = env.generate_address()
    client.initialize(admin)
    client.add_relayer(admin, relayer)
    patient = env.generate_address()
    client.map_identity(admin, "ethereum", "0xabc123", patient)
    return env, client, relayer, vision, admin, patient


def _msg(chain="ethereum", addr="0xabc123", action="GRANT"):
    return CrossChainMessage(chain, addr, action, b"")


def test_initialization():
    env, client = _contract()
    admin = env.generate_address()
    assert client.initialize(admin) is None
    assert env.instance.get("ADMIN") == admin
    assert env.events[-1] == (("INIT",), admin)


def test_double_initialization_fails():
    env, client = _contract()
    admin = env.generate_address()
    client.initialize(admin)
    with pytest.raises(CrossChainError) as err:
        client.initialize(admin)
    assert err.value.code is CrossChainErrorCode.ALREADY_INITIALIZED


def test_initialize_requires_auth():
    env = Env()
    client = CrossChainContract(env)
    with pytest.raises(PermissionError):
        client.initialize(env.generate_address())
    assert not env.instance.has("INIT")


def test_add_relayer():
    env, client = _contract()
    admin = env.generate_address()
    relayer = env.generate_address()
    client.initialize(admin)
    assert client.add_relayer(admin, relayer) is None
    assert client.is_relayer(relayer) is True
    assert env.persistent.ttl(("RELAYER", relayer)) == TTL_EXTEND_TO


def test_is_relayer_false_for_unknown():
    env, client = _contract()
    client.initialize(env.generate_address())
    assert client.is_relayer(env.generate_address()) is False


def test_add_relayer_non_admin_fails():
    env, client = _contract()
    admin = env.generate_address()
    non_admin = env.generate_address()
    relayer = env.generate_address()
    client.initialize(admin)
    with pytest.raises(CrossChainError) as err:
        client.add_relayer(non_admin, relayer)
    assert err.value.code is CrossChainErrorCode.UNAUTHORIZED


def test_add_relayer_before_initialize_fails():
    env, client = _contract()
    with pytest.raises(CrossChainError) as err:
        client.add_relayer(env.generate_address(), env.generate_address())
    assert err.value.code is CrossChainErrorCode.NOT_INITIALIZED


def test_map_identity():
    env, client = _contract()
    admin = env.generate_address()
    client.initialize(admin)
    patient = env.generate_address()
    assert client.map_identity(admin, "ethereum", "0x12345", patient) is None
    assert client.get_local_address("ethereum", "0x12345") == patient
    assert env.events[-1] == (("ID_MAP", "ethereum", "0x12345"), patient)


def test_get_local_address_unmapped_is_none():
    env, client = _contract()
    client.initialize(env.generate_address())
    assert client.get_local_address("ethereum", "0xnothing") is None


def test_map_identity_non_admin_fails():
    env, client = _contract()
    admin = env.generate_address()
    non_admin = env.generate_address()
    client.initialize(admin)
    with pytest.raises(CrossChainError) as err:
        client.map_identity(non_admin, "ethereum", "0x12345", env.generate_address())
    assert err.value.code is CrossChainErrorCode.UNAUTHORIZED


def test_process_message_grant_success(bridge):
    env, client, relayer, vision, _admin, _patient = bridge
    assert client.process_message(relayer, bytes([1, 2, 3, 4]), _msg(), vision) is None
    assert env.persistent.get(("PROC_MSG", bytes([1, 2, 3, 4]))) is True
    assert env.events[-1] == (("PROC_MSG", "ethereum", bytes([1, 2, 3, 4])), True)


def test_process_message_replay_fails(bridge):
    _env, client, relayer, vision, _admin, _patient = bridge
    mid = bytes([1, 2, 3, 4])
    client.process_message(relayer, mid, _msg(), vision)
    with pytest.raises(CrossChainError) as err:
        client.process_message(relayer, mid, _msg(), vision)
    assert err.value.code is CrossChainErrorCode.ALREADY_PROCESSED


def test_process_message_unknown_identity_fails(bridge):
    _env, client, relayer, vision, _admin, _patient = bridge
    with pytest.raises(CrossChainError) as err:
        client.process_message(relayer, bytes([5, 6, 7, 8]), _msg("polygon", "0xunknown"), vision)
    assert err.value.code is CrossChainErrorCode.UNKNOWN_IDENTITY


def test_process_message_unknown_identity_not_permanently_blocked(bridge):
    env, client, relayer, vision, admin, _patient = bridge
    mid = bytes([9, 10, 11, 12])
    message = _msg("polygon", "0xnewuser")
    with pytest.raises(CrossChainError) as err:
        client.process_message(relayer, mid, message, vision)
    assert err.value.code is CrossChainErrorCode.UNKNOWN_IDENTITY

    client.map_identity(admin, "polygon", "0xnewuser", env.generate_address())
    assert client.process_message(relayer, mid, message, vision) is None
    assert env.persistent.get(("PROC_MSG", mid)) is True


def test_process_message_unsupported_action_fails(bridge):
    env, client, relayer, vision, _admin, _patient = bridge
    mid = bytes([13, 14, 15, 16])
    with pytest.raises(CrossChainError) as err:
        client.process_message(relayer, mid, _msg(action="REVOKE"), vision)
    assert err.value.code is CrossChainErrorCode.UNSUPPORTED_ACTION
    assert not env.persistent.has(("PROC_MSG", mid))


def test_process_message_non_relayer_fails(bridge):
    env, client, _relayer, vision, _admin, _patient = bridge
    with pytest.raises(CrossChainError) as err:
        client.process_message(env.generate_address(), bytes([17, 18, 19, 20]), _msg(), vision)
    assert err.value.code is CrossChainErrorCode.UNAUTHORIZED


def test_error_message_names_code():
    err = CrossChainError(CrossChainErrorCode.ALREADY_PROCESSED)
    assert str(err) == "ALREADY_PROCESSED (4)"