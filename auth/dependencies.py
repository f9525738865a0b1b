"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The authorization gate reads an "Authorization: Bearer <token>" header and
moves each request through four states:

  NoToken                -> AuthenticationError (401) before the route runs
  TokenPresentUnverified -> decode_access_token()
  Verified               -> TokenClaims attached to request.state.principal
  Rejected               -> InvalidTokenError (403): bad signature, malformed,
                            or expired

The 401/403 split between "missing" and "invalid" is part of the public
contract and must be preserved.

The gate authenticates only. Role checks are composed on top of it:
require_admin() = get_current_principal() + auth.roles.require_role().

Layer rule: no imports from api/, inventory/, contact/, or media/.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import ROLE_ADMIN, TokenClaims
from auth.roles import require_role
from auth.tokens import decode_access_token
from core.errors import AuthenticationError, InvalidTokenError


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def get_current_principal(request: Request) -> TokenClaims:
    """Require a valid access token. Raises 401 if absent, 403 if invalid.

    Use as a FastAPI dependency:
        @router.put("/update/{car_id}")
        def route(principal: TokenClaims = Depends(get_current_principal)): ...
    """
    token = _bearer_token(request)
    if token is None:
        raise AuthenticationError("Authentication required.")

    claims = decode_access_token(token)
    if claims is None:
        raise InvalidTokenError("Invalid or expired token.")

    request.state.principal = claims
    return claims


def require_admin(request: Request) -> TokenClaims:
    """Require an admin token. 401 if unauthenticated, 403 if invalid or not admin."""
    return require_role(get_current_principal(request), ROLE_ADMIN)
