"""
auth/tokens.py -- JWT issue/verify and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry the
       subject id ("sub"), role, and expiry. Verification returns None on any
       failure -- the authorization gate turns that into a 403.

       Tokens are stateless: nothing is stored server-side, so there is no
       revocation. A token stays valid until its "exp" even if the account's
       password changes. This is an accepted limitation.

  Passwords: bcrypt, work factor from Settings.bcrypt_rounds (default 12).
       bcrypt.checkpw compares digests in constant time. The _DUMMY_HASH
       constant enables timing equalization in authenticate_principal() so
       response time does not reveal whether an email is registered.

  SECRET_KEY: sourced from core.config.get_settings(). See core/config.py for
       the dev/production key policy.

Layer rule: no imports from api/, inventory/, contact/, or media/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from auth.models import ROLES, Principal, TokenClaims
from auth.roles import normalize_email
from core.config import get_settings

if TYPE_CHECKING:
    from auth.store import PrincipalStore

logger = logging.getLogger("carrental.auth")

_settings = get_settings()

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt silently truncates input beyond 72 bytes. The API layer caps
    password length well below that (Pydantic max_length).
    """
    salt = bcrypt.gensalt(rounds=_settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext matches the hash. Never raises.

    A malformed or truncated digest makes bcrypt raise ValueError; that is
    reported as a mismatch.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("carrental_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(subject_id: str, role: str, expires_delta: timedelta | None = None) -> str:
    """Encode a signed JWT carrying the subject id, role and expiry.

    Args:
        subject_id:    Store id of the principal, used as the "sub" claim.
        role:          "user" or "admin".
        expires_delta: Token lifetime. Defaults to Settings.token_expire_seconds.
    """
    if expires_delta is None:
        expires_delta = timedelta(seconds=_settings.token_expire_seconds)
    payload = {
        "sub": subject_id,
        "role": role,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> TokenClaims | None:
    """Verify a JWT and return its claims, or None on any failure.

    Covers bad signatures, malformed tokens, expired tokens, and tokens that
    decode but lack a usable subject or role.
    """
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
    except JWTError as exc:
        logger.debug("Rejected access token: %s", exc)
        return None
    subject_id = payload.get("sub")
    role = payload.get("role")
    if not subject_id or role not in ROLES:
        return None
    return TokenClaims(subject_id=subject_id, role=role)


def issue_token_for(principal: Principal) -> str:
    return create_access_token(principal.id, principal.role)


# ---------------------------------------------------------------------------
# Principal authentication (constant-time)
# ---------------------------------------------------------------------------


def authenticate_principal(store: PrincipalStore, email: str, password: str) -> Principal | None:
    """Authenticate an email/password login with timing equalization.

    Always runs bcrypt whether or not the account exists:
    - Unknown email: bcrypt runs against _DUMMY_HASH (same cost as a real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    Returns the Principal on success, None on any failure.
    """
    principal = store.find_by_email(normalize_email(email))
    if principal is None:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, principal.hashed_password):
        return None
    return principal
