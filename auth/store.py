"""
auth/store.py -- SQLAlchemy Core persistence layer for principals.

Pattern: Repository + Data Mapper (same as inventory/store.py).
PrincipalStore is the repository; _row_to_principal is the mapper. Route and
dependency code never touches SQL directly.

Users and admins live in two tables with identical shape. Email uniqueness is
per table and enforced by a UNIQUE constraint, which is the only source of
DuplicateError. There is deliberately no find-then-insert pre-check: two
concurrent signups for the same email both reach the INSERT and the database
lets exactly one of them through.

Security:
  All queries use bound parameters. No f-strings in SQL.

Layer rule: no imports from api/, inventory/, contact/, or media/.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text
from sqlalchemy.exc import IntegrityError

from auth.models import ROLE_ADMIN, ROLE_USER, Principal
from core.db import Database, storage_errors
from core.errors import DuplicateError

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()


def _principal_table(name: str) -> Table:
    return Table(
        name,
        _metadata,
        Column("id", String(32), primary_key=True),
        Column("name", String(255), nullable=False),
        Column("email", String(255), nullable=False, unique=True),
        Column("hashed_password", Text, nullable=False),
        Column("role", String(10), nullable=False),
        Column("created_at", String(32), nullable=False),
    )


_TABLES: dict[str, Table] = {
    ROLE_USER: _principal_table("users"),
    ROLE_ADMIN: _principal_table("admins"),
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class PrincipalStore:
    """Repository for one principal collection ("user" or "admin").

    Usage:
        users = PrincipalStore(db, "user")
        created = users.create(Principal(name="Ann", email="ann@x.com", role="user", hashed_password=h))
        found = users.find_by_email("ann@x.com")
    """

    def __init__(self, db: Database, kind: str) -> None:
        if kind not in _TABLES:
            raise ValueError(f"Unknown principal kind: {kind!r}")
        self.kind = kind
        self._db = db
        self._table = _TABLES[kind]
        _metadata.create_all(db.engine)

    def create(self, principal: Principal) -> Principal:
        """Insert a new principal and return it with id and created_at filled in.

        Raises DuplicateError if the email already exists in this collection.
        The caller is expected to pass an already-normalized email.
        """
        record = Principal(
            id=uuid.uuid4().hex,
            name=principal.name,
            email=principal.email,
            role=principal.role,
            hashed_password=principal.hashed_password,
            created_at=_now_iso(),
        )
        with storage_errors(f"create {self.kind}"):
            try:
                with self._db.engine.begin() as conn:
                    conn.execute(
                        self._table.insert().values(
                            id=record.id,
                            name=record.name,
                            email=record.email,
                            hashed_password=record.hashed_password,
                            role=record.role,
                            created_at=record.created_at,
                        )
                    )
            except IntegrityError as exc:
                raise DuplicateError(f"{self.kind.capitalize()} email already exists") from exc
        return record

    def find_by_email(self, email: str) -> Principal | None:
        """Look up a principal by exact (normalized) email. Returns None if not found."""
        with storage_errors(f"find {self.kind} by email"):
            with self._db.engine.connect() as conn:
                row = conn.execute(self._table.select().where(self._table.c.email == email)).fetchone()
        return _row_to_principal(row) if row is not None else None

    def get_by_id(self, principal_id: str) -> Principal | None:
        with storage_errors(f"get {self.kind}"):
            with self._db.engine.connect() as conn:
                row = conn.execute(self._table.select().where(self._table.c.id == principal_id)).fetchone()
        return _row_to_principal(row) if row is not None else None


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_principal(row) -> Principal:
    return Principal(
        id=row.id,
        name=row.name,
        email=row.email,
        role=row.role,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
    )
