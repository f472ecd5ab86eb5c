"""CORS policy.

One fixed policy for the whole process. It is built from config at startup and
handed to Starlette's CORSMiddleware, which does the actual header work.

Origin patterns are matched against the origin *host*: `192.168.*` accepts
`192.168.1.5`, `http://192.168.1.5` and `http://192.168.1.5:3000`. A `*` only
stands for IPv4 octets, so `192.168.evil.example` is refused.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cached_property
from typing import Dict, Optional, Tuple

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from intranet_platform.config import Config


# A wildcard stands for one or more IPv4 octets, never for DNS labels.
_OCTETS_WILDCARD = r"\d{1,3}(?:\.\d{1,3})*"


def _pattern_to_regex(pattern: str) -> str:
    return _OCTETS_WILDCARD.join(re.escape(part) for part in pattern.strip().lower().split("*"))


@dataclass(frozen=True)
class CorsPolicy:
    allowed_methods: Tuple[str, ...]
    allowed_origin_patterns: Tuple[str, ...]
    allow_credentials: bool = True
    allowed_headers: Tuple[str, ...] = ()

    @cached_property
    def origin_regex(self) -> str:
        hosts = "|".join(_pattern_to_regex(p) for p in self.allowed_origin_patterns if p.strip())
        if not hosts:
            # Matches nothing.
            return r"(?!)"
        # Inline flag: CORSMiddleware compiles this string itself.
        return rf"(?i)(?:https?://)?(?:{hosts})(?::\d+)?"

    @cached_property
    def _origin_re(self) -> "re.Pattern[str]":
        return re.compile(self.origin_regex)

    def allows_origin(self, origin: Optional[str]) -> bool:
        if not origin:
            return False
        return self._origin_re.fullmatch(origin.strip()) is not None

    def allows_method(self, method: str) -> bool:
        return (method or "").upper() in self.allowed_methods

    def response_headers(self, origin: Optional[str]) -> Dict[str, str]:
        """Headers a preflight response for `origin` carries under this policy."""
        headers = {"Access-Control-Allow-Methods": ",".join(self.allowed_methods)}
        if self.allow_credentials:
            headers["Access-Control-Allow-Credentials"] = "true"
        if self.allows_origin(origin):
            headers["Access-Control-Allow-Origin"] = str(origin).strip()
        return headers

    @classmethod
    def from_config(cls, cfg: Config) -> "CorsPolicy":
        return cls(
            allowed_methods=tuple(m.upper() for m in cfg.CORS_ALLOWED_METHODS),
            allowed_origin_patterns=tuple(cfg.CORS_ALLOWED_ORIGIN_PATTERNS),
            allow_credentials=bool(cfg.CORS_ALLOW_CREDENTIALS),
            allowed_headers=tuple(cfg.CORS_ALLOWED_HEADERS),
        )


class CorsPolicyProvider:
    """Hands out the process-wide CORS policy. The requesting origin does not change it."""

    def __init__(self, policy: CorsPolicy):
        self._policy = policy

    def policy_for(self, origin: Optional[str]) -> CorsPolicy:
        return self._policy


def install_cors(app: FastAPI, policy: CorsPolicy) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=policy.origin_regex,
        allow_credentials=policy.allow_credentials,
        allow_methods=list(policy.allowed_methods),
        allow_headers=list(policy.allowed_headers),
    )
