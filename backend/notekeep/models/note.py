"""
NoteKeep Backend — Note SQLAlchemy Model
========================================

What:  ORM model representing the `notes` table.
Why:   Maps Python objects to database rows for type-safe database operations.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by NoteService for CRUD operations and by Alembic for schema management.

Table Design Rationale:
    - title VARCHAR(100), content VARCHAR(8000): same bounds as the request schemas
    - created_at: set once by the service when the note is inserted
    - modified_at: NULL until the first successful update
    - owner_id: immutable foreign key to users.id; every query filters on it

    Index on owner_id:
        Every read is "notes WHERE owner_id = :caller", so the index backs
        both the list query and the id + owner lookups.
"""

from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notekeep.database import Base

if TYPE_CHECKING:
    from notekeep.models.user import User

TITLE_MIN_LENGTH = 2
TITLE_MAX_LENGTH = 100
CONTENT_MAX_LENGTH = 8000


class Note(Base):
    """
    A personal text note.

    Lifecycle:
        1. Created by its owner (created_at set, modified_at NULL)
        2. Updated in place by its owner (modified_at set on every update)
        3. Deleted by its owner (hard delete, no audit trail)
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)

    content: Mapped[str] = mapped_column(String(CONTENT_MAX_LENGTH), nullable=False)

    # ── Timestamps ────────────────────────────────────────────────────────
    # Always UTC. SQLite returns these naive; NoteService normalises them.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When this note was created (UTC)",
    )

    modified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        comment="When this note was last updated (UTC); NULL if never",
    )

    # ── Ownership ─────────────────────────────────────────────────────────
    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    owner: Mapped["User"] = relationship(back_populates="notes")

    __table_args__ = (
        Index("idx_notes_owner_id", "owner_id"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, owner_id={self.owner_id}, title='{self.title}')>"
