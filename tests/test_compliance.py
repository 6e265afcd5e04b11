from teye.compliance import (
    AccessControl,
    AuditLog,
    BAATemplate,
    PermissionSet,
    RetentionManager,
    Role,
)


def test_access_control_defaults():
    ac = AccessControl()
    assert ac.check(Role.ADMIN, "write")
    assert not ac.check(Role.RESEARCHER, "write")


def test_access_control_matrix():
    ac = AccessControl()
    assert ac.check(Role.AUDITOR, "audit")
    assert not ac.check(Role.CLINICIAN, "audit")
    assert ac.check(Role.CLINICIAN, "write")
    assert all(ac.check(role, "read") for role in Role)
    assert not ac.check(Role.ADMIN, "delete")


def test_access_control_missing_role():
    ac = AccessControl(role_permissions={Role.ADMIN: PermissionSet(True, True, True)})
    assert not ac.check(Role.PATIENT, "read")


def test_audit_record():
    log = AuditLog()
    log.record("user1", "read", "record:1")
    assert len(log.query()) == 1
    assert log.query()[0].target == "record:1"


def test_retention():
    rm = RetentionManager()
    rm.add_policy("phi", 1)
    now = rm.created_at
    assert not rm.should_purge(now, "phi")


def test_retention_old_data_and_unknown_policy():
    rm = RetentionManager()
    rm.add_policy("phi", 1)
    assert rm.should_purge(0, "phi")
    assert not rm.should_purge(0, "unknown")


def test_baa_default_template():
    baa = BAATemplate.default_template()
    assert baa.provider == "Provider"
    assert baa.covered_data == "PHI"
    assert baa.terms == "Standard BAA terms placeholder"