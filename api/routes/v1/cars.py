"""
api/routes/v1/cars.py -- Car inventory routes.

Routes (mounted at /api/car):
  POST   /add            -- public; multipart form fields + "image" file; 201
  GET    /all            -- public; every car, insertion order
  PUT    /update/{id}    -- requires auth; partial JSON update
  DELETE /delete/{id}    -- requires auth; removes the car and its image

File uploads:
  /add accepts multipart/form-data. The image is capped at MAX_UPLOAD_BYTES
  (5 MB) and must declare an image/* content type. Form fields arrive as
  strings and are validated through CarCreate, the same constraints the JSON
  update path uses.

Update and delete use the authorization gate only: any valid token (user or
admin) may call them.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import ValidationError as PydanticValidationError

from api.models import (
    CarCreate,
    CarListResponse,
    CarOut,
    CarResponse,
    CarUpdate,
    MessageResponse,
    describe_validation_errors,
)
from auth.dependencies import get_current_principal
from auth.models import TokenClaims
from core.config import get_settings
from core.errors import PayloadTooLargeError, ValidationError
from inventory.service import InventoryService

router = APIRouter()

_settings = get_settings()


# ---------------------------------------------------------------------------
# POST /add -- create a car with its image
# ---------------------------------------------------------------------------


@router.post("/add", response_model=CarResponse, status_code=201)
async def add_car(
    request: Request,
    name: Optional[str] = Form(None),
    brand: Optional[str] = Form(None),
    seats: Optional[str] = Form(None),
    price_per_day: Optional[str] = Form(None, alias="pricePerDay"),
    gear_type: Optional[str] = Form(None, alias="gearType"),
    fuel_type: Optional[str] = Form(None, alias="fuelType"),
    ac: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
) -> CarResponse:
    """Validate the form, store the image, and persist the car as available."""
    fields = {
        "name": name,
        "brand": brand,
        "seats": seats,
        "pricePerDay": price_per_day,
        "gearType": gear_type,
        "fuelType": fuel_type,
    }
    if any(v is None or not v.strip() for v in fields.values()):
        raise ValidationError("All fields are required")
    if ac is not None:
        fields["ac"] = ac
    try:
        draft = CarCreate.model_validate(fields)
    except PydanticValidationError as exc:
        raise ValidationError(describe_validation_errors(exc.errors())) from exc

    if image is None or not image.filename:
        raise ValidationError("Car image is required")
    if not (image.content_type or "").startswith("image/"):
        raise ValidationError("Car image must be an image file")

    # Size guard -- read up to the limit + 1 byte; reject if over
    blob = await image.read(_settings.max_upload_bytes + 1)
    if len(blob) > _settings.max_upload_bytes:
        raise PayloadTooLargeError(f"Image must be {_settings.max_upload_bytes // (1024 * 1024)} MB or smaller.")
    if not blob:
        raise ValidationError("Car image is empty")

    inventory: InventoryService = request.app.state.inventory
    car = inventory.add(draft.to_car(), blob, image.filename)
    return CarResponse(message="Car added successfully", car=CarOut.from_car(car))


# ---------------------------------------------------------------------------
# GET /all -- list every car
# ---------------------------------------------------------------------------


@router.get("/all", response_model=CarListResponse)
def list_cars(request: Request) -> CarListResponse:
    inventory: InventoryService = request.app.state.inventory
    return CarListResponse(cars=[CarOut.from_car(c) for c in inventory.list()])


# ---------------------------------------------------------------------------
# PUT /update/{car_id} -- partial update (authenticated)
# ---------------------------------------------------------------------------


@router.put("/update/{car_id}", response_model=CarResponse)
def update_car(
    request: Request,
    car_id: str,
    body: CarUpdate,
    principal: TokenClaims = Depends(get_current_principal),
) -> CarResponse:
    """Update any subset of a car's fields. 404 if the car does not exist."""
    inventory: InventoryService = request.app.state.inventory
    car = inventory.update(car_id, body.changes())
    return CarResponse(message="Car updated successfully", car=CarOut.from_car(car))


# ---------------------------------------------------------------------------
# DELETE /delete/{car_id} -- remove car and image (authenticated)
# ---------------------------------------------------------------------------


@router.delete("/delete/{car_id}", response_model=MessageResponse)
def delete_car(
    request: Request,
    car_id: str,
    principal: TokenClaims = Depends(get_current_principal),
) -> MessageResponse:
    inventory: InventoryService = request.app.state.inventory
    inventory.delete(car_id)
    return MessageResponse(message="Car deleted successfully")
