"""
API request and response models for the rental backend REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py,
inventory/models.py and contact/models.py, which own the internal domain
representation. Route handlers map between the two.

Wire format: JSON field names are camelCase (pricePerDay, gearType, ...).
_ApiModel applies the alias generator; populate_by_name lets Python code build
models with snake_case names. FastAPI serializes response_model by alias.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from auth.models import TokenClaims
from auth.roles import is_admin_email, normalize_email
from contact.models import ContactMessage
from core.config import get_settings
from inventory.models import Car

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# One "@", no whitespace, and a dot in the domain part.
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class GearTypeEnum(str, Enum):
    automatic = "automatic"
    manual = "manual"


class FuelTypeEnum(str, Enum):
    petrol = "petrol"
    diesel = "diesel"
    electric = "electric"
    hybrid = "hybrid"


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Request body for POST /signup and POST /api/admin/signup.

    The email is normalized (stripped, lowercased) before the pattern check,
    so role resolution and the uniqueness constraint always see one canonical
    form.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    # bcrypt truncates beyond 72 bytes; cap well below that.
    password: str = Field(min_length=6, max_length=64)

    @field_validator("email", mode="before")
    @classmethod
    def normalize(cls, value):
        return normalize_email(value) if isinstance(value, str) else value


class AdminSignupRequest(SignupRequest):
    @field_validator("email")
    @classmethod
    def admin_domain_only(cls, value: str) -> str:
        if not is_admin_email(value):
            raise ValueError(f"Email must end with {get_settings().admin_email_suffix}")
        return value


class LoginRequest(BaseModel):
    """Request body for the user and admin login endpoints."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1, max_length=64)

    @field_validator("email", mode="before")
    @classmethod
    def normalize(cls, value):
        return normalize_email(value) if isinstance(value, str) else value


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class PrincipalOut(_ApiModel):
    id: str
    name: str
    email: str
    role: str


class AuthResponse(_ApiModel):
    """Response for signup and login. token is absent on admin signup."""

    success: bool = True
    message: str
    role: str
    token: Optional[str] = None
    name: Optional[str] = None
    user: Optional[PrincipalOut] = None


class ClaimsOut(_ApiModel):
    subject_id: str
    role: str

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "ClaimsOut":
        return cls(subject_id=claims.subject_id, role=claims.role)


class ProtectedResponse(_ApiModel):
    success: bool = True
    message: str
    principal: ClaimsOut


# ---------------------------------------------------------------------------
# Inventory -- request models
# ---------------------------------------------------------------------------


class CarCreate(_ApiModel):
    """Validated fields for POST /api/car/add (sent as multipart form fields)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )

    name: str = Field(min_length=1, max_length=255)
    brand: str = Field(min_length=1, max_length=255)
    seats: int = Field(ge=2, le=100)
    price_per_day: float = Field(ge=0, allow_inf_nan=False)
    gear_type: GearTypeEnum
    fuel_type: FuelTypeEnum
    ac: bool = True

    def to_car(self) -> Car:
        return Car(
            name=self.name,
            brand=self.brand,
            seats=self.seats,
            price_per_day=self.price_per_day,
            gear_type=self.gear_type,
            fuel_type=self.fuel_type,
            ac=self.ac,
        )


class CarUpdate(_ApiModel):
    """Request body for PUT /api/car/update/{id}.

    Any subset of fields, each held to the same constraints as CarCreate.
    Unknown fields (including image and id) and explicit nulls are rejected,
    so a partial update can never leave a record in a state add() would refuse.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
        extra="forbid",
    )

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    brand: Optional[str] = Field(default=None, min_length=1, max_length=255)
    seats: Optional[int] = Field(default=None, ge=2, le=100)
    price_per_day: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    gear_type: Optional[GearTypeEnum] = None
    fuel_type: Optional[FuelTypeEnum] = None
    ac: Optional[bool] = None
    available: Optional[bool] = None

    @model_validator(mode="after")
    def reject_nulls(self) -> "CarUpdate":
        for field_name in self.model_fields_set:
            if getattr(self, field_name) is None:
                raise ValueError(f"{to_camel(field_name)} cannot be null")
        return self

    def changes(self) -> dict:
        """Return only the fields the client sent, keyed by store column name."""
        return self.model_dump(exclude_unset=True)


# ---------------------------------------------------------------------------
# Inventory -- response models
# ---------------------------------------------------------------------------


class CarOut(_ApiModel):
    id: str
    name: str
    brand: str
    seats: int
    price_per_day: float
    gear_type: str
    fuel_type: str
    ac: bool
    image: str
    available: bool
    created_at: str
    updated_at: str

    @classmethod
    def from_car(cls, car: Car) -> "CarOut":
        """Factory Method: the domain -> wire mapping lives with the output model."""
        return cls(
            id=car.id,
            name=car.name,
            brand=car.brand,
            seats=car.seats,
            price_per_day=car.price_per_day,
            gear_type=car.gear_type,
            fuel_type=car.fuel_type,
            ac=car.ac,
            image=car.image,
            available=car.available,
            created_at=car.created_at,
            updated_at=car.updated_at,
        )


class CarResponse(_ApiModel):
    success: bool = True
    message: str
    car: CarOut


class CarListResponse(_ApiModel):
    success: bool = True
    cars: list[CarOut]


# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------


class ContactCreate(BaseModel):
    """Request body for POST /api/contact."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    message: str = Field(min_length=1, max_length=5000)

    @field_validator("email", mode="before")
    @classmethod
    def normalize(cls, value):
        return normalize_email(value) if isinstance(value, str) else value


class ContactMessageOut(_ApiModel):
    id: str
    name: str
    email: str
    message: str
    created_at: str

    @classmethod
    def from_message(cls, msg: ContactMessage) -> "ContactMessageOut":
        return cls(id=msg.id, name=msg.name, email=msg.email, message=msg.message, created_at=msg.created_at)


class ContactListResponse(_ApiModel):
    success: bool = True
    messages: list[ContactMessageOut]


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response."""

    model_config = ConfigDict(frozen=True)

    success: bool = False
    code: str
    message: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]


def describe_validation_errors(errors: list[dict]) -> str:
    """Collapse Pydantic error dicts into the single message clients see.

    Only the first error is reported, prefixed with the offending field name.
    Pydantic prefixes messages from custom validators with "Value error, ";
    that prefix is dropped.
    """
    if not errors:
        return "Invalid request."
    first = errors[0]
    msg = str(first.get("msg", "Invalid value")).removeprefix("Value error, ")
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "form")]
    return f"{loc[-1]}: {msg}" if loc else msg
