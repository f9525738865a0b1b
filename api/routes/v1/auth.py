"""
api/routes/v1/auth.py -- Signup and login endpoints for users and admins.

Routes (user router, mounted at "" and "/api/user"):
  POST /signup   -- create user account; role resolved from email domain; 201 + token
  POST /login    -- password login; token

Routes (admin router, mounted at "/api/admin"):
  POST /signup   -- create admin account; @admin.com emails only (400 otherwise)
  POST /login    -- admin login; non-admin email is refused with 403

Security:
  POST /login endpoints are rate-limited per IP (LOGIN_RATE_LIMIT).
  authenticate_principal() provides timing equalization -- use it, never inline
  find_by_email() + verify_password().
  Cache-Control: no-store on every response that carries a token.
  Wrong email and wrong password produce the same 401 so account existence
  does not leak.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import AdminSignupRequest, AuthResponse, LoginRequest, PrincipalOut, SignupRequest
from auth.models import ROLE_ADMIN, Principal
from auth.roles import is_admin_email, resolve_role
from auth.store import PrincipalStore
from auth.tokens import authenticate_principal, hash_password, issue_token_for
from core.config import get_settings
from core.errors import AuthenticationError, PermissionDeniedError

# Auth policy: every route in this module is public -- these are the routes
# that hand out tokens in the first place.
router = APIRouter()
admin_router = APIRouter()

_settings = get_settings()


def _principal_out(principal: Principal) -> PrincipalOut:
    return PrincipalOut(id=principal.id, name=principal.name, email=principal.email, role=principal.role)


def _token_response(status_code: int, body: AuthResponse) -> JSONResponse:
    resp = JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True, exclude_none=True))
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@router.post("/signup", response_model=AuthResponse, status_code=201)
def signup(request: Request, body: SignupRequest) -> JSONResponse:
    """Create a user account and return a token for it.

    The role comes from the email domain (auth.roles.resolve_role). A duplicate
    email surfaces as DuplicateError (409) from the store's UNIQUE constraint.
    """
    user_store: PrincipalStore = request.app.state.user_store
    user = user_store.create(
        Principal(
            name=body.name,
            email=body.email,
            role=resolve_role(body.email),
            hashed_password=hash_password(body.password),
        )
    )
    return _token_response(
        201,
        AuthResponse(
            message="User created successfully",
            token=issue_token_for(user),
            role=user.role,
            name=user.name,
            user=_principal_out(user),
        ),
    )


@router.post("/login", response_model=AuthResponse)
@limiter.limit(_settings.login_rate_limit)  # inner: FastAPI must register the limiting wrapper
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a token."""
    user_store: PrincipalStore = request.app.state.user_store
    user = authenticate_principal(user_store, body.email, body.password)
    if user is None:
        raise AuthenticationError("Invalid credentials")
    return _token_response(
        200,
        AuthResponse(
            message="Login successful",
            token=issue_token_for(user),
            role=user.role,
            name=user.name,
            user=_principal_out(user),
        ),
    )


# ---------------------------------------------------------------------------
# Admins
# ---------------------------------------------------------------------------


@admin_router.post("/signup", response_model=AuthResponse, status_code=201)
def admin_signup(request: Request, body: AdminSignupRequest) -> JSONResponse:
    """Register an admin. The admin-domain check happens in AdminSignupRequest (400).

    No token is issued here; admins log in through /api/admin/login.
    """
    admin_store: PrincipalStore = request.app.state.admin_store
    admin = admin_store.create(
        Principal(
            name=body.name,
            email=body.email,
            role=ROLE_ADMIN,
            hashed_password=hash_password(body.password),
        )
    )
    return _token_response(
        201,
        AuthResponse(
            message="Admin registered successfully",
            role=admin.role,
            name=admin.name,
            user=_principal_out(admin),
        ),
    )


@admin_router.post("/login", response_model=AuthResponse)
@limiter.limit(_settings.login_rate_limit)
def admin_login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate an admin. Emails outside the admin domain are refused with 403."""
    if not is_admin_email(body.email):
        raise PermissionDeniedError("Access denied: Not an admin email")
    admin_store: PrincipalStore = request.app.state.admin_store
    admin = authenticate_principal(admin_store, body.email, body.password)
    if admin is None:
        raise AuthenticationError("Invalid credentials")
    return _token_response(
        200,
        AuthResponse(
            message="Login successful",
            token=issue_token_for(admin),
            role=admin.role,
            name=admin.name,
            user=_principal_out(admin),
        ),
    )
