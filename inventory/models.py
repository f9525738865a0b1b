"""
inventory/models.py -- Domain dataclasses for the car inventory.

Pure data containers with zero logic. Validation lives in the API models
(api/models.py); persistence lives in inventory/store.py; orchestration with
the image store lives in inventory/service.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Car:
    """A rentable car.

    image is the reference returned by media.store.ImageStore.store(), e.g.
    "/uploads/1718000000000-swift.jpg". It is released when the car is deleted.

    id, created_at and updated_at are set by the store on insert.
    """

    name: str
    brand: str
    seats: int  # >= 2
    price_per_day: float  # >= 0
    gear_type: str  # "automatic" | "manual"
    fuel_type: str  # "petrol" | "diesel" | "electric" | "hybrid"
    ac: bool = True
    image: str = ""
    available: bool = True
    id: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""
