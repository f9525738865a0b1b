"""
contact/store.py -- SQLAlchemy Core persistence for contact messages.

Append-only: the store exposes insert and read, nothing else.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text

from contact.models import ContactMessage
from core.db import Database, storage_errors

_metadata = MetaData()

_messages = Table(
    "contact_messages",
    _metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("id", String(32), nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False),
    Column("message", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ContactStore:
    def __init__(self, db: Database) -> None:
        self._db = db
        _metadata.create_all(db.engine)

    def create_message(self, message: ContactMessage) -> ContactMessage:
        record = ContactMessage(
            id=uuid.uuid4().hex,
            name=message.name,
            email=message.email,
            message=message.message,
            created_at=_now_iso(),
        )
        with storage_errors("create contact message"):
            with self._db.engine.begin() as conn:
                conn.execute(
                    _messages.insert().values(
                        id=record.id,
                        name=record.name,
                        email=record.email,
                        message=record.message,
                        created_at=record.created_at,
                    )
                )
        return record

    def list_messages(self) -> list[ContactMessage]:
        """Return all messages, newest first."""
        with storage_errors("list contact messages"):
            with self._db.engine.connect() as conn:
                rows = conn.execute(_messages.select().order_by(_messages.c.seq.desc())).fetchall()
        return [
            ContactMessage(id=r.id, name=r.name, email=r.email, message=r.message, created_at=r.created_at)
            for r in rows
        ]
