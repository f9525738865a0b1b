"""
inventory/store.py -- SQLAlchemy-backed persistence layer for cars.

Uses SQLAlchemy Core (not ORM) so the dataclass in inventory/models.py stays
the authoritative domain representation.

Pattern: Repository + Data Mapper. CarStore is the repository; _row_to_car is
the mapper. Route handlers and the inventory service never touch SQL directly.

Each mutating method runs in a single transaction (engine.begin()), so an
update or delete and the read that reports its result see the same row.

Usage:
    cars = CarStore(db)
    car = cars.create_car(Car(name="Swift", brand="Maruti", ...))
    cars.update_car(car.id, price_per_day=45.0)
    cars.delete_car(car.id)
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, Column, Float, Integer, MetaData, String, Table

from core.db import Database, storage_errors
from inventory.models import Car

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_cars = Table(
    "cars",
    _metadata,
    # seq fixes listing order; id is the public identifier.
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("id", String(32), nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("brand", String(255), nullable=False),
    Column("seats", Integer, nullable=False),
    Column("price_per_day", Float, nullable=False),
    Column("gear_type", String(20), nullable=False),
    Column("fuel_type", String(20), nullable=False),
    Column("ac", Boolean, nullable=False, default=True),
    Column("image", String(512), nullable=False),
    Column("available", Boolean, nullable=False, default=True),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

# Columns a partial update may touch. id, image and timestamps are owned by
# the store and the service.
_UPDATABLE = frozenset({"name", "brand", "seats", "price_per_day", "gear_type", "fuel_type", "ac", "available"})


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class CarStore:
    """Repository for Car records."""

    def __init__(self, db: Database) -> None:
        self._db = db
        _metadata.create_all(db.engine)

    def create_car(self, car: Car) -> Car:
        """Insert a car and return the stored record with id and timestamps."""
        now = _now_iso()
        car_id = uuid.uuid4().hex
        with storage_errors("create car"):
            with self._db.engine.begin() as conn:
                conn.execute(
                    _cars.insert().values(
                        id=car_id,
                        name=car.name,
                        brand=car.brand,
                        seats=car.seats,
                        price_per_day=car.price_per_day,
                        gear_type=car.gear_type,
                        fuel_type=car.fuel_type,
                        ac=car.ac,
                        image=car.image,
                        available=car.available,
                        created_at=now,
                        updated_at=now,
                    )
                )
                row = conn.execute(_cars.select().where(_cars.c.id == car_id)).fetchone()
        return _row_to_car(row)

    def list_cars(self) -> list[Car]:
        """Return every car in insertion order (by seq). No pagination."""
        with storage_errors("list cars"):
            with self._db.engine.connect() as conn:
                rows = conn.execute(_cars.select().order_by(_cars.c.seq)).fetchall()
        return [_row_to_car(r) for r in rows]

    def get_car(self, car_id: str) -> Optional[Car]:
        with storage_errors("get car"):
            with self._db.engine.connect() as conn:
                row = conn.execute(_cars.select().where(_cars.c.id == car_id)).fetchone()
        return _row_to_car(row) if row is not None else None

    def update_car(self, car_id: str, **fields) -> Optional[Car]:
        """Apply a partial update. Returns the updated car, or None if car_id is unknown.

        Only keys in _UPDATABLE are accepted. Unknown keys raise ValueError
        rather than being silently ignored.
        """
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unknown car fields: {sorted(unknown)!r}")
        with storage_errors("update car"):
            with self._db.engine.begin() as conn:
                result = conn.execute(
                    _cars.update().where(_cars.c.id == car_id).values(updated_at=_now_iso(), **fields)
                )
                if result.rowcount == 0:
                    return None
                row = conn.execute(_cars.select().where(_cars.c.id == car_id)).fetchone()
        return _row_to_car(row)

    def delete_car(self, car_id: str) -> Optional[Car]:
        """Delete a car and return the removed record, or None if it did not exist.

        The removed record is returned so the caller can release its image.
        """
        with storage_errors("delete car"):
            with self._db.engine.begin() as conn:
                row = conn.execute(_cars.select().where(_cars.c.id == car_id)).fetchone()
                if row is None:
                    return None
                conn.execute(_cars.delete().where(_cars.c.id == car_id))
        return _row_to_car(row)


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_car(row) -> Car:
    return Car(
        id=row.id,
        name=row.name,
        brand=row.brand,
        seats=row.seats,
        price_per_day=row.price_per_day,
        gear_type=row.gear_type,
        fuel_type=row.fuel_type,
        ac=bool(row.ac),
        image=row.image,
        available=bool(row.available),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
