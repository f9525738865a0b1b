"""
inventory/service.py -- Car inventory operations that span the store and the image store.

The car record and its image live in two places (database row, file on disk)
with no shared transaction. add() records a compensating action for each
side effect on a contextlib.ExitStack; if a later step fails the stack runs
them in reverse order, and on success pop_all() discards them. A process
crash between the two writes can still leave an orphaned file -- this is a
known limitation, not something the service tries to solve.

Inputs are expected to be validated already (api/models.py); the service
enforces the rules that depend on stored state: existence, non-empty
updates.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import replace

from core.errors import NotFoundError, ValidationError
from inventory.models import Car
from inventory.store import CarStore
from media.store import ImageStore

logger = logging.getLogger("carrental.inventory")


class InventoryService:
    def __init__(self, cars: CarStore, images: ImageStore) -> None:
        self.cars = cars
        self.images = images

    def add(self, draft: Car, image: bytes, filename: str) -> Car:
        """Store the image, then persist the car as available.

        If persisting fails, the stored image is deleted before the error
        propagates.
        """
        with ExitStack() as compensations:
            ref = self.images.store(image, filename)
            compensations.callback(self.images.delete, ref)

            car = self.cars.create_car(replace(draft, image=ref, available=True))

            compensations.pop_all()
        logger.info("Added car %s (%s %s)", car.id, car.brand, car.name)
        return car

    def list(self) -> list[Car]:
        return self.cars.list_cars()

    def update(self, car_id: str, fields: dict) -> Car:
        """Apply a validated partial update. Raises NotFoundError if car_id is unknown."""
        if not fields:
            raise ValidationError("No fields to update.")
        car = self.cars.update_car(car_id, **fields)
        if car is None:
            raise NotFoundError("Car not found")
        logger.info("Updated car %s fields=%s", car_id, sorted(fields))
        return car

    def delete(self, car_id: str) -> Car:
        """Delete the car record, then release its image."""
        car = self.cars.delete_car(car_id)
        if car is None:
            raise NotFoundError("Car not found")
        self.images.delete(car.image)
        logger.info("Deleted car %s", car_id)
        return car
