"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and routes do
the work.

Layer rule: no imports from api/, inventory/, contact/, or media/.
"""

from __future__ import annotations

from dataclasses import dataclass

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = frozenset({ROLE_USER, ROLE_ADMIN})


@dataclass
class Principal:
    """A user or admin account.

    email is always stored normalized (stripped, lowercase); see
    auth.roles.normalize_email. role is derived from the email domain at
    signup and never changes afterwards.

    id is None before the record is written to the database.
    """

    name: str
    email: str
    role: str  # "user" | "admin"
    hashed_password: str
    id: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class TokenClaims:
    """Identity resolved from a verified access token.

    This is what the authorization gate attaches to the request. It is built
    from the token alone -- no store lookup -- so it reflects the principal as
    of token issue time.
    """

    subject_id: str
    role: str
