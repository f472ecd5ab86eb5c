from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from intranet_platform.config import Config
from intranet_platform.db import connect
from intranet_platform.errors import raise_not_found
from intranet_platform.util.time import utcnow_iso

from .security import hash_password


logger = logging.getLogger(__name__)

ROLES = ("admin", "user")


def normalize_name(name: str) -> str:
    return (name or "").strip().lower()


def public_account(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    d = dict(row)
    d.pop("password_hash", None)
    d["is_active"] = bool(d.get("is_active"))
    d["is_admin"] = d.get("role") == "admin"
    return d


# -----------------------------
# Accounts
# -----------------------------


def get_account_by_name(conn: Any, name: str) -> Optional[Any]:
    n = normalize_name(name)
    if not n:
        return None
    return conn.execute(
        "SELECT * FROM accounts WHERE name=?",
        (n,),
    ).fetchone()


def get_account_by_id(conn: Any, account_id: int) -> Optional[Any]:
    return conn.execute(
        "SELECT * FROM accounts WHERE account_id=?",
        (int(account_id),),
    ).fetchone()


def require_account(conn: Any, account_id: int) -> Any:
    row = get_account_by_id(conn, account_id)
    if row is None:
        raise_not_found(account_id)
    return row


def create_account(
    conn: Any,
    *,
    name: str,
    password: str,
    role: str = "user",
    is_active: bool = True,
) -> Dict[str, Any]:
    n = normalize_name(name)
    if not n:
        raise ValueError("name_blank")
    if role not in ROLES:
        raise ValueError("invalid_role")

    existing = conn.execute("SELECT 1 FROM accounts WHERE name=?", (n,)).fetchone()
    if existing is not None:
        raise ValueError("name_exists")

    now = utcnow_iso()
    conn.execute(
        """
        INSERT INTO accounts (name, password_hash, role, is_active, created_at, updated_at)
        VALUES (?,?,?,?,?,?)
        """,
        (n, hash_password(password), role, 1 if is_active else 0, now, now),
    )
    row = get_account_by_name(conn, n)
    assert row is not None
    return public_account(row)


def set_account_active(conn: Any, account_id: int, is_active: bool) -> None:
    require_account(conn, account_id)
    conn.execute(
        "UPDATE accounts SET is_active=?, updated_at=? WHERE account_id=?",
        (1 if is_active else 0, utcnow_iso(), int(account_id)),
    )


def touch_last_login(conn: Any, account_id: int) -> None:
    now = utcnow_iso()
    conn.execute(
        "UPDATE accounts SET last_login_at=?, updated_at=? WHERE account_id=?",
        (now, now, int(account_id)),
    )


def bootstrap_admin_if_needed(cfg: Config) -> Optional[Dict[str, Any]]:
    """Create the first admin account if the accounts table is empty.

    Controlled via environment variables so a new clone has a deterministic way to log in.

    - AUTH_BOOTSTRAP_ADMIN_NAME (default: admin)
    - AUTH_BOOTSTRAP_ADMIN_PASSWORD

    This only runs when there are 0 rows in `accounts`.
    """

    with connect(cfg.DB_DSN) as conn:
        n = conn.execute("SELECT COUNT(*) AS n FROM accounts").fetchone()["n"]
        if int(n) > 0:
            return None

        name = normalize_name(cfg.AUTH_BOOTSTRAP_ADMIN_NAME)
        password = cfg.AUTH_BOOTSTRAP_ADMIN_PASSWORD

        # If env explicitly clears these, don't create anything.
        if not name or not password:
            return None

        return create_account(conn, name=name, password=password, role="admin")


# -----------------------------
# Sessions
# -----------------------------


def create_session(conn: Any, *, session_id: str, account_id: int, expires_at: str) -> None:
    conn.execute(
        "INSERT INTO sessions (session_id, account_id, created_at, expires_at) VALUES (?,?,?,?)",
        (session_id, int(account_id), utcnow_iso(), expires_at),
    )


def get_session(conn: Any, session_id: str) -> Optional[Any]:
    if not session_id:
        return None
    return conn.execute(
        "SELECT * FROM sessions WHERE session_id=?",
        (session_id,),
    ).fetchone()


def revoke_session(conn: Any, session_id: str) -> bool:
    """Mark a session as terminated. Returns False if it was unknown or already revoked."""
    cur = conn.execute(
        "UPDATE sessions SET revoked_at=? WHERE session_id=? AND revoked_at IS NULL",
        (utcnow_iso(), session_id),
    )
    return int(cur.rowcount or 0) > 0


def revoke_account_sessions(conn: Any, account_id: int) -> int:
    cur = conn.execute(
        "UPDATE sessions SET revoked_at=? WHERE account_id=? AND revoked_at IS NULL",
        (utcnow_iso(), int(account_id)),
    )
    return int(cur.rowcount or 0)


def purge_expired_sessions(conn: Any) -> int:
    cur = conn.execute("DELETE FROM sessions WHERE expires_at <= ?", (utcnow_iso(),))
    n = int(cur.rowcount or 0)
    if n:
        logger.info("Purged %d expired sessions", n)
    return n
