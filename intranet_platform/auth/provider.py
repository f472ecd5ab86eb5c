from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import jwt

from intranet_platform.config import Config
from intranet_platform.db import connect
from intranet_platform.errors import UnauthorizedError
from intranet_platform.util.time import utc_iso, utcnow_iso, utcnow_plus_minutes

from .crud import (
    create_session,
    get_account_by_id,
    get_account_by_name,
    get_session,
    public_account,
    revoke_session,
    touch_last_login,
)
from .security import (
    create_access_token,
    decode_access_token,
    dummy_password_hash,
    new_session_id,
    verify_password,
)


logger = logging.getLogger(__name__)


class AccountAuthProvider:
    """Turns credentials (or a session token) into an authenticated account.

    Every failure raises UnauthorizedError. Bad name and bad password share a
    single detail string, and an unknown name still pays for one bcrypt check,
    so callers can't enumerate accounts.
    """

    def __init__(self, cfg: Config):
        self.cfg = cfg

    def authenticate(self, name: str, password: str) -> Dict[str, Any]:
        with connect(self.cfg.DB_DSN) as conn:
            row = get_account_by_name(conn, name)
            password_hash = str(row["password_hash"]) if row is not None else dummy_password_hash()
            password_ok = verify_password(password, password_hash)
            if row is None or int(row["is_active"] or 0) != 1 or not password_ok:
                logger.info("Login refused for name=%r", name)
                raise UnauthorizedError("bad_credentials")

            touch_last_login(conn, int(row["account_id"]))
            row = get_account_by_id(conn, int(row["account_id"]))
            return public_account(row)

    def open_session(self, account: Dict[str, Any]) -> str:
        """Record a new session and return its signed token."""
        session_id = new_session_id()
        expires_at = utcnow_plus_minutes(self.cfg.AUTH_TOKEN_EXPIRE_MINUTES)
        token = create_access_token(
            secret=self.cfg.AUTH_JWT_SECRET,
            session_id=session_id,
            account_id=int(account["account_id"]),
            name=str(account["name"]),
            role=str(account["role"]),
            expires_at=expires_at,
        )
        with connect(self.cfg.DB_DSN) as conn:
            create_session(
                conn,
                session_id=session_id,
                account_id=int(account["account_id"]),
                expires_at=utc_iso(expires_at),
            )
        return token

    def authenticate_token(self, token: Optional[str]) -> Dict[str, Any]:
        if not token:
            raise UnauthorizedError("missing_token")

        try:
            payload = decode_access_token(token=token, secret=self.cfg.AUTH_JWT_SECRET)
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("token_expired")
        except jwt.InvalidTokenError:
            raise UnauthorizedError("token_invalid")

        try:
            account_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise UnauthorizedError("token_invalid")

        with connect(self.cfg.DB_DSN) as conn:
            session = get_session(conn, str(payload["jti"]))
            if session is None or session["revoked_at"] is not None:
                raise UnauthorizedError("session_revoked")
            if str(session["expires_at"]) <= utcnow_iso():
                raise UnauthorizedError("token_expired")
            if int(session["account_id"]) != account_id:
                raise UnauthorizedError("token_invalid")

            row = get_account_by_id(conn, account_id)
            if row is None:
                raise UnauthorizedError("account_not_found")
            if int(row["is_active"] or 0) != 1:
                raise UnauthorizedError("account_inactive")
            return public_account(row)

    def close_session(self, token: Optional[str]) -> bool:
        """Terminate the session behind `token`. Unknown or garbage tokens are ignored."""
        if not token:
            return False
        try:
            payload = decode_access_token(token=token, secret=self.cfg.AUTH_JWT_SECRET, verify_exp=False)
        except jwt.InvalidTokenError:
            return False
        with connect(self.cfg.DB_DSN) as conn:
            closed = revoke_session(conn, str(payload["jti"]))
        if closed:
            logger.info("Session closed for account_id=%s", payload.get("sub"))
        return closed
