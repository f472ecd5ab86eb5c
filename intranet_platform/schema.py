"""Database schema for the Intranet Platform.

Timestamps are ISO-8601 TEXT (UTC, with 'Z'). ISO strings sort lexicographically in
time order, so comparisons like `expires_at > now_iso` behave correctly.
"""

from __future__ import annotations


SCHEMA_SQLITE = r"""
PRAGMA foreign_keys = ON;

-- Accounts
-- NOTE: Only bcrypt hashes are stored, never plaintext passwords.
CREATE TABLE IF NOT EXISTS accounts (
    account_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    role TEXT NOT NULL CHECK (role IN ('admin','user')),
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    last_login_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_accounts_role_active ON accounts (role, is_active);

-- Sessions
-- One row per issued token (session_id is the JWT 'jti').
-- Logout sets revoked_at; the auth gate refuses revoked sessions even if the JWT is still valid.
CREATE TABLE IF NOT EXISTS sessions (
    session_id TEXT PRIMARY KEY,
    account_id INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    expires_at TEXT NOT NULL,
    revoked_at TEXT,
    FOREIGN KEY (account_id) REFERENCES accounts(account_id)
);
CREATE INDEX IF NOT EXISTS idx_sessions_account ON sessions (account_id, revoked_at);
"""


def get_schema_sql() -> str:
    return SCHEMA_SQLITE
