"""
NoteKeep Backend — User SQLAlchemy Model
========================================

What:  ORM model representing the `users` table.
Why:   The Token Issuer looks users up by username; notes reference users as owners.
Who:   Created by the external registration flow; read by TokenService.

Table Design Rationale:
    - Integer surrogate key: referenced by notes.owner_id and embedded in tokens
    - username: stored as typed; username_normalized holds its lower-cased
      form, computed in Python so the same rule applies on every database.
      Lookups and the uniqueness guarantee both go through it, so "Bob" and
      "bob" cannot coexist and "ÉMILE" finds "Émile".
    - email: unique
    - password_hash: passlib hash string (scheme, salt and digest together)
    - first_name / last_name: optional; used for the token display name
"""

from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from notekeep.database import Base

if TYPE_CHECKING:
    from notekeep.models.note import Note


def normalize_username(username: str) -> str:
    return username.lower()


class User(Base):
    """An account that owns notes and can request bearer tokens."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="Login name as entered",
    )

    username_normalized: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        unique=True,
        comment="Lower-cased username; case-insensitive lookup key",
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # Never the raw password
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Salted one-way hash in passlib format",
    )

    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    notes: Mapped[List["Note"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @validates("username")
    def _sync_normalized_username(self, key: str, value: str) -> str:
        self.username_normalized = normalize_username(value)
        return value

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
