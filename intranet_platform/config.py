import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

# Load a local .env file if present. Real environment variables win.
load_dotenv()


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Parse a boolean environment variable.

    Returns:
      - True/False if the env var is set to a recognizable value
      - default if unset or unrecognized

    Accepted truthy: 1, true, yes, y, on
    Accepted falsy:  0, false, no, n, off
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


def _env_list(name: str, default: str) -> Tuple[str, ...]:
    """Parse a comma-separated environment variable into a tuple of non-blank items."""
    raw = os.environ.get(name, default)
    return tuple(p.strip() for p in (raw or "").split(",") if p.strip())


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    Everything here is read once at startup. The public path set and the CORS
    policy are derived from it and never change while the server runs.

    IMPORTANT: Provide secrets via environment variables or a .env file.
    """

    # -----------------
    # Core
    # -----------------
    DB_DSN: str = os.environ.get("INTRANET_DB_PATH", "./intranet_platform.sqlite")

    # -----------------
    # Paths
    # -----------------
    API_PREFIX: str = os.environ.get("API_PREFIX", "/api")
    PATH_ROOT: str = os.environ.get("PATH_ROOT", "/")
    PATH_STATIC: str = os.environ.get("PATH_STATIC", "/static")
    PATH_METADATA: str = os.environ.get("PATH_METADATA", "/metadata")

    # File served at PATH_STATIC (typically the SPA bundle's index.html).
    STATIC_INDEX_FILE: str | None = (os.environ.get("STATIC_INDEX_FILE") or "").strip() or None

    # -----------------
    # Auth (JWT sessions)
    # -----------------
    # NOTE: In dev, this defaults to a fixed string so you can get started.
    # In production, you MUST set AUTH_JWT_SECRET to a strong random value.
    AUTH_JWT_SECRET: str = os.environ.get("AUTH_JWT_SECRET", "dev_change_me_dev_change_me_dev_change_me")
    AUTH_TOKEN_EXPIRE_MINUTES: int = int(os.environ.get("AUTH_TOKEN_EXPIRE_MINUTES", "480"))  # 8 hours

    # Bootstrap first admin account if the accounts table is empty
    AUTH_BOOTSTRAP_ADMIN_NAME: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_NAME", "admin")
    AUTH_BOOTSTRAP_ADMIN_PASSWORD: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_PASSWORD", "Admin1234")

    AUTH_COOKIE_NAME: str = os.environ.get("AUTH_COOKIE_NAME", "intranet_session")
    AUTH_COOKIE_DOMAIN: str | None = (os.environ.get("AUTH_COOKIE_DOMAIN") or "").strip() or None
    AUTH_COOKIE_PATH: str = os.environ.get("AUTH_COOKIE_PATH", "/")
    AUTH_COOKIE_SAMESITE: str = os.environ.get("AUTH_COOKIE_SAMESITE", "lax")  # lax|strict|none
    AUTH_COOKIE_SECURE: bool = _env_bool("AUTH_COOKIE_SECURE", False) is True

    # -----------------
    # CORS
    # -----------------
    # Origin patterns match the origin host; '*' matches any run of host characters.
    CORS_ALLOWED_METHODS: Tuple[str, ...] = field(
        default_factory=lambda: _env_list("CORS_ALLOWED_METHODS", "GET,POST,PUT,DELETE")
    )
    CORS_ALLOWED_ORIGIN_PATTERNS: Tuple[str, ...] = field(
        default_factory=lambda: _env_list("CORS_ALLOWED_ORIGIN_PATTERNS", "127.0.0.1,localhost,192.168.*")
    )
    CORS_ALLOWED_HEADERS: Tuple[str, ...] = field(
        default_factory=lambda: _env_list("CORS_ALLOWED_HEADERS", "")
    )
    CORS_ALLOW_CREDENTIALS: bool = _env_bool("CORS_ALLOW_CREDENTIALS", True) is True

    # -----------------
    # Form validation rules (published on PATH_METADATA)
    # -----------------
    TEXT_SHORT_MIN: int = int(os.environ.get("TEXT_SHORT_MIN", "3"))
    TEXT_SHORT_MAX: int = int(os.environ.get("TEXT_SHORT_MAX", "50"))
    PASSWORD_MIN: int = int(os.environ.get("PASSWORD_MIN", "8"))
    PASSWORD_MAX: int = int(os.environ.get("PASSWORD_MAX", "64"))

    # -----------------
    # Logging
    # -----------------
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    @property
    def path_login(self) -> str:
        return f"{self.API_PREFIX.rstrip('/')}/login"

    @property
    def path_logout(self) -> str:
        return f"{self.API_PREFIX.rstrip('/')}/logout"


def load_config() -> Config:
    return Config()
