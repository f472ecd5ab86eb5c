from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import FileResponse, RedirectResponse
from pydantic import BaseModel

from intranet_platform import __version__
from intranet_platform.api.cors import CorsPolicy, CorsPolicyProvider, install_cors
from intranet_platform.api.middleware import LoggingMiddleware
from intranet_platform.auth import (
    AccountAuthProvider,
    AuthGateMiddleware,
    RouteClassifier,
    bootstrap_admin_if_needed,
    create_account,
    get_current_account,
    require_admin,
)
from intranet_platform.auth.crud import (
    public_account,
    purge_expired_sessions,
    require_account,
    revoke_account_sessions,
    set_account_active,
)
from intranet_platform.auth.deps import token_from_request
from intranet_platform.config import Config, load_config
from intranet_platform.db import connect, init_db
from intranet_platform.errors import NotFoundError


logger = logging.getLogger(__name__)


# -----------------------------
# Session cookie
# -----------------------------

def _cookie_secure(cfg: Config) -> bool:
    """Return whether the session cookie should be marked Secure."""
    # Browsers require Secure when SameSite=None
    if str(cfg.AUTH_COOKIE_SAMESITE or "lax").lower() == "none":
        return True
    return bool(cfg.AUTH_COOKIE_SECURE)


def _set_session_cookie(response: Response, *, token: str, cfg: Config) -> None:
    response.set_cookie(
        key=cfg.AUTH_COOKIE_NAME,
        value=str(token),
        httponly=True,
        samesite=str(cfg.AUTH_COOKIE_SAMESITE or "lax").lower(),
        secure=_cookie_secure(cfg),
        max_age=int(cfg.AUTH_TOKEN_EXPIRE_MINUTES) * 60,
        path=cfg.AUTH_COOKIE_PATH or "/",
        domain=cfg.AUTH_COOKIE_DOMAIN,
    )


def _clear_session_cookie(response: Response, cfg: Config) -> None:
    response.delete_cookie(key=cfg.AUTH_COOKIE_NAME, path=cfg.AUTH_COOKIE_PATH or "/", domain=cfg.AUTH_COOKIE_DOMAIN)


# -----------------------------
# Request bodies
# -----------------------------

class LoginRequest(BaseModel):
    name: str
    password: str


class CreateAccountRequest(BaseModel):
    name: str
    password: str
    role: str = "user"  # admin|user


class UpdateAccountRequest(BaseModel):
    is_active: bool


def _validate_new_account(cfg: Config, name: str, password: str) -> None:
    """Apply the same rules the login form gets from the metadata endpoint."""
    n = (name or "").strip()
    if not (cfg.TEXT_SHORT_MIN <= len(n) <= cfg.TEXT_SHORT_MAX):
        raise HTTPException(status_code=400, detail="name_length")
    if not (cfg.PASSWORD_MIN <= len(password or "") <= cfg.PASSWORD_MAX):
        raise HTTPException(status_code=400, detail="password_length")
    if not (
        re.search(r"[a-z]", password)
        and re.search(r"[A-Z]", password)
        and re.search(r"[0-9]", password)
    ):
        raise HTTPException(status_code=400, detail="password_too_weak")


def create_app(cfg: Optional[Config] = None) -> FastAPI:
    cfg = cfg or load_config()

    app = FastAPI(title="Intranet Platform", version=__version__)

    classifier = RouteClassifier.from_config(cfg)
    provider = AccountAuthProvider(cfg)
    cors = CorsPolicyProvider(CorsPolicy.from_config(cfg))

    app.state.cfg = cfg
    app.state.route_classifier = classifier
    app.state.auth_provider = provider
    app.state.cors = cors

    # Starlette runs the last-added middleware first:
    # CORS (answers preflights) -> request logging -> auth gate -> routes.
    app.add_middleware(AuthGateMiddleware, cfg=cfg, classifier=classifier, provider=provider)
    app.add_middleware(LoggingMiddleware)
    install_cors(app, cors.policy_for(None))

    @app.on_event("startup")
    def _on_startup() -> None:
        init_db(cfg.DB_DSN)
        with connect(cfg.DB_DSN) as conn:
            purge_expired_sessions(conn)

        # Bootstrap first admin if needed (only when accounts table is empty)
        boot = bootstrap_admin_if_needed(cfg)
        if boot:
            logger.info("Bootstrapped initial admin account: name=%s", boot.get("name"))

    # -----------------------------
    # Public
    # -----------------------------

    @app.get(cfg.PATH_ROOT)
    def root() -> Dict[str, Any]:
        return {
            "name": "Intranet Platform",
            "version": __version__,
            "apiPrefix": cfg.API_PREFIX,
        }

    @app.get(cfg.PATH_STATIC)
    def static_index() -> FileResponse:
        index = Path(cfg.STATIC_INDEX_FILE) if cfg.STATIC_INDEX_FILE else None
        if index is None or not index.is_file():
            raise NotFoundError("static_not_found")
        return FileResponse(index)

    @app.get(cfg.PATH_METADATA)
    def metadata() -> Dict[str, Any]:
        return {
            "apiPrefix": cfg.API_PREFIX,
            "rules": {
                "text_short": {"min": cfg.TEXT_SHORT_MIN, "max": cfg.TEXT_SHORT_MAX},
                "text_short#_": {"min": cfg.PASSWORD_MIN, "max": cfg.PASSWORD_MAX},
            },
        }

    @app.post(cfg.path_login)
    def login(payload: LoginRequest, response: Response) -> Dict[str, Any]:
        account = provider.authenticate(payload.name, payload.password)
        token = provider.open_session(account)
        _set_session_cookie(response, token=token, cfg=cfg)
        return {"access_token": token, "token_type": "bearer", "account": account}

    # -----------------------------
    # Logout (reachable with or without a valid session)
    # -----------------------------

    @app.post(cfg.path_logout)
    def logout(request: Request) -> RedirectResponse:
        provider.close_session(token_from_request(request, cfg))
        response = RedirectResponse(url=cfg.PATH_ROOT, status_code=303)
        _clear_session_cookie(response, cfg)
        return response

    # -----------------------------
    # Authenticated
    # -----------------------------

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok"}

    prefix = cfg.API_PREFIX.rstrip("/")

    @app.get(f"{prefix}/accounts/me")
    def accounts_me(account: Dict[str, Any] = Depends(get_current_account)) -> Dict[str, Any]:
        return {"account": account}

    @app.get(f"{prefix}/accounts/{{account_id}}")
    def accounts_get(account_id: int) -> Dict[str, Any]:
        with connect(cfg.DB_DSN) as conn:
            return {"account": public_account(require_account(conn, account_id))}

    @app.post(f"{prefix}/accounts")
    def accounts_create(
        payload: CreateAccountRequest,
        _admin: Dict[str, Any] = Depends(require_admin),
    ) -> Dict[str, Any]:
        _validate_new_account(cfg, payload.name, payload.password)
        with connect(cfg.DB_DSN) as conn:
            try:
                account = create_account(conn, name=payload.name, password=payload.password, role=payload.role)
            except ValueError as e:
                detail = str(e)
                if detail == "name_exists":
                    raise HTTPException(status_code=409, detail=detail)
                raise HTTPException(status_code=400, detail=detail)
        logger.info("Account created: name=%s role=%s", account["name"], account["role"])
        return {"account": account}

    @app.put(f"{prefix}/accounts/{{account_id}}")
    def accounts_update(
        account_id: int,
        payload: UpdateAccountRequest,
        _admin: Dict[str, Any] = Depends(require_admin),
    ) -> Dict[str, Any]:
        with connect(cfg.DB_DSN) as conn:
            set_account_active(conn, account_id, payload.is_active)
            if not payload.is_active:
                n = revoke_account_sessions(conn, account_id)
                logger.info("Account %s deactivated, %d session(s) revoked", account_id, n)
            return {"account": public_account(require_account(conn, account_id))}

    return app


app = create_app()
