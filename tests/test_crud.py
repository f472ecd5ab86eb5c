import pytest

from intranet_platform.auth.crud import (
    bootstrap_admin_if_needed,
    create_account,
    create_session,
    get_account_by_name,
    get_session,
    public_account,
    purge_expired_sessions,
    require_account,
    revoke_account_sessions,
    revoke_session,
    set_account_active,
)
from intranet_platform.auth.security import verify_password
from intranet_platform.db import connect
from intranet_platform.errors import NotFoundError


def test_create_account_normalizes_name_and_hides_hash(db):
    with connect(db.DB_DSN) as conn:
        a = create_account(conn, name="  Alice ", password="Secret123")
        assert a["name"] == "alice"
        assert a["role"] == "user"
        assert a["is_active"] is True
        assert "password_hash" not in a

        row = get_account_by_name(conn, "ALICE")
        assert verify_password("Secret123", row["password_hash"])


@pytest.mark.parametrize(
    "name,role,error",
    [("", "user", "name_blank"), ("bob", "root", "invalid_role")],
)
def test_create_account_validation(db, name, role, error):
    with connect(db.DB_DSN) as conn:
        with pytest.raises(ValueError, match=error):
            create_account(conn, name=name, password="Secret123", role=role)


def test_duplicate_name(db):
    with connect(db.DB_DSN) as conn:
        create_account(conn, name="bob", password="Secret123")
        with pytest.raises(ValueError, match="name_exists"):
            create_account(conn, name="BOB", password="Other1234")


def test_require_account_unknown_id(db):
    with connect(db.DB_DSN) as conn:
        with pytest.raises(NotFoundError) as ei:
            require_account(conn, 404)
    assert ei.value.status_code == 404
    assert ei.value.detail == "Could not find id : 404"


def test_set_account_active_unknown_id(db):
    with connect(db.DB_DSN) as conn:
        with pytest.raises(NotFoundError):
            set_account_active(conn, 99, False)


def test_bootstrap_admin_only_once(db):
    boot = bootstrap_admin_if_needed(db)
    assert boot is not None
    assert boot["role"] == "admin"
    assert boot["is_admin"] is True
    assert bootstrap_admin_if_needed(db) is None


def test_bootstrap_skipped_when_password_cleared(db):
    cfg = type(db)(**{**db.__dict__, "AUTH_BOOTSTRAP_ADMIN_PASSWORD": ""})
    assert bootstrap_admin_if_needed(cfg) is None


def test_session_lifecycle(db):
    with connect(db.DB_DSN) as conn:
        a = create_account(conn, name="carol", password="Secret123")
        create_session(conn, session_id="s1", account_id=a["account_id"], expires_at="2999-01-01T00:00:00Z")
        create_session(conn, session_id="s2", account_id=a["account_id"], expires_at="2999-01-01T00:00:00Z")
        create_session(conn, session_id="old", account_id=a["account_id"], expires_at="2000-01-01T00:00:00Z")

        assert revoke_session(conn, "s1") is True
        assert revoke_session(conn, "s1") is False
        assert revoke_session(conn, "unknown") is False
        assert get_session(conn, "s1")["revoked_at"] is not None

        assert revoke_account_sessions(conn, a["account_id"]) == 2  # s2 + old
        assert purge_expired_sessions(conn) == 1
        assert get_session(conn, "old") is None
        assert get_session(conn, "") is None


def test_public_account_flags():
    d = public_account({"account_id": 1, "name": "x", "role": "admin", "is_active": 1, "password_hash": "h"})
    assert d == {"account_id": 1, "name": "x", "role": "admin", "is_active": True, "is_admin": True}
