from __future__ import annotations

import uuid
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict

import jwt
from passlib.context import CryptContext


_pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")
_JWT_ALG = "HS256"


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return _pwd.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _pwd.verify(password, password_hash)
    except ValueError:
        # Malformed / unknown hash format.
        return False


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """A bcrypt hash of a random secret; verifying against it costs the same as a real account."""
    return _pwd.hash(uuid.uuid4().hex)


def new_session_id() -> str:
    return uuid.uuid4().hex


def create_access_token(
    *,
    secret: str,
    session_id: str,
    account_id: int,
    name: str,
    role: str,
    expires_at: datetime,
) -> str:
    if not secret:
        raise ValueError("jwt_secret_blank")

    now = datetime.now(timezone.utc)

    payload: Dict[str, Any] = {
        "sub": str(account_id),
        "jti": session_id,
        "name": name,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALG)


def decode_access_token(*, token: str, secret: str, verify_exp: bool = True) -> Dict[str, Any]:
    if not token:
        raise ValueError("token_blank")
    if not secret:
        raise ValueError("jwt_secret_blank")
    return jwt.decode(
        token,
        secret,
        algorithms=[_JWT_ALG],
        options={"verify_exp": verify_exp, "require": ["sub", "jti", "exp"]},
    )
