from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from intranet_platform.config import Config
from intranet_platform.errors import UnauthorizedError

from .deps import token_from_request
from .provider import AccountAuthProvider
from .routes import RouteClassifier


logger = logging.getLogger(__name__)


class AuthGateMiddleware(BaseHTTPMiddleware):
    """Authenticate every request whose path is not public.

    The logout path is let through unauthenticated so a stale or missing
    session can still be cleared.
    """

    def __init__(self, app, *, cfg: Config, classifier: RouteClassifier, provider: AccountAuthProvider):
        super().__init__(app)
        self.cfg = cfg
        self.classifier = classifier
        self.provider = provider

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if self.classifier.is_public(path) or path == self.cfg.path_logout:
            return await call_next(request)

        token = token_from_request(request, self.cfg)
        try:
            account = await run_in_threadpool(self.provider.authenticate_token, token)
        except UnauthorizedError as e:
            logger.info("Unauthorized %s %s: %s", request.method, path, e.detail)
            return JSONResponse(status_code=e.status_code, content={"detail": e.detail}, headers=e.headers)

        request.state.account = account
        return await call_next(request)
