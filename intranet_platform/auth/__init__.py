"""Authentication / authorization.

- Accounts table (name / bcrypt password hash + role)
- Server-side sessions, handed to clients as JWTs whose `jti` is the session id

The API accepts both:

- `Authorization: Bearer <token>` (scripts / API clients)
- A secure httpOnly cookie (set by the login endpoint)

Every path except the public ones (root, static, metadata, login) goes through
`AuthGateMiddleware`. Logout revokes the session row, so a replayed token stops
working immediately.
"""

from .crud import bootstrap_admin_if_needed, create_account
from .deps import get_current_account, require_admin
from .gate import AuthGateMiddleware
from .provider import AccountAuthProvider
from .routes import RouteClassifier

__all__ = [
    "AccountAuthProvider",
    "AuthGateMiddleware",
    "RouteClassifier",
    "bootstrap_admin_if_needed",
    "create_account",
    "get_current_account",
    "require_admin",
]
