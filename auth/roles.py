"""
auth/roles.py -- Role resolution and the per-operation role check.

Two flat roles exist: "user" and "admin". A principal's role is derived once,
at signup, from the domain of its email address.

Normalization policy: every email is stripped and lowercased before it is
compared, stored, or looked up. "Bob@ADMIN.com" and "bob@admin.com" are the
same address and both resolve to admin. Applying the same rule on signup and
login closes the case-variation bypass.

require_role() is the single authorization predicate. The gate in
auth/dependencies.py only authenticates; routes that need a specific role
compose require_role() on top of it.
"""

from __future__ import annotations

from auth.models import ROLE_ADMIN, ROLE_USER, TokenClaims
from core.config import get_settings
from core.errors import PermissionDeniedError


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_admin_email(email: str, suffix: str | None = None) -> bool:
    """Return True if the normalized email belongs to the admin domain.

    The local part must be non-empty -- a bare "@admin.com" is not an address.
    """
    suffix = (suffix or get_settings().admin_email_suffix).lower()
    normalized = normalize_email(email)
    return normalized.endswith(suffix) and len(normalized) > len(suffix)


def resolve_role(email: str, suffix: str | None = None) -> str:
    """Return "admin" for admin-domain emails, "user" for everything else."""
    return ROLE_ADMIN if is_admin_email(email, suffix) else ROLE_USER


def require_role(principal: TokenClaims, role: str) -> TokenClaims:
    """Raise PermissionDeniedError unless the principal holds the given role."""
    if principal.role != role:
        raise PermissionDeniedError(f"{role.capitalize()} access required.")
    return principal
