from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from intranet_platform.config import Config
from intranet_platform.errors import ForbiddenError, UnauthorizedError


_bearer = HTTPBearer(auto_error=False)


def token_from_request(request: Request, cfg: Config) -> Optional[str]:
    """Extract the session token.

    Prefers `Authorization: Bearer <jwt>` and falls back to the httpOnly
    session cookie set by the login endpoint.
    """
    auth = request.headers.get("authorization") or ""
    scheme, _, value = auth.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return request.cookies.get(cfg.AUTH_COOKIE_NAME) or None


def get_current_account(
    request: Request,
    _credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Dict[str, Any]:
    """Return the account the auth gate attached to this request.

    The bearer dependency is only here so the OpenAPI schema advertises the scheme.
    """
    account = getattr(request.state, "account", None)
    if account is None:
        raise UnauthorizedError("missing_token")
    return account


def require_admin(account: Dict[str, Any] = Depends(get_current_account)) -> Dict[str, Any]:
    if account.get("role") != "admin":
        raise ForbiddenError("admin_required")
    return account
