"""
NoteKeep Backend — Note Request/Response Schemas
================================================

What:  Pydantic models defining the notes API contract.
Why:   Strict input validation, automatic serialization, and OpenAPI doc generation.
How:   FastAPI validates request bodies against NoteCreate/NoteUpdate before
       NoteService is called, and serializes NoteListItem/NoteDetail responses.

Design Decision:
    Schemas are separate from SQLAlchemy models so that owner_id and other
    internal columns are never exposed to API consumers.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from notekeep.models.note import CONTENT_MAX_LENGTH, TITLE_MAX_LENGTH, TITLE_MIN_LENGTH


# ══════════════════════════════════════════════════════════════════════════
# Request Models: what clients send
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """Body of POST /api/notes."""
    title: str = Field(
        min_length=TITLE_MIN_LENGTH,
        max_length=TITLE_MAX_LENGTH,
        description="Note title (2-100 characters)",
    )
    content: str = Field(
        max_length=CONTENT_MAX_LENGTH,
        description="Note body (at most 8000 characters)",
    )


class NoteUpdate(NoteCreate):
    """Body of PUT /api/notes/{id}; title and content are both replaced."""


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns
# ══════════════════════════════════════════════════════════════════════════


class NoteListItem(BaseModel):
    """
    What:  Compact note summary.
    Who:   Returned by POST /api/notes and as items of GET /api/notes.
    """
    id: int = Field(description="Note identifier")
    title: str = Field(description="Note title")
    created_at: datetime = Field(description="When the note was created (UTC)")

    model_config = {"from_attributes": True}


class NoteDetail(BaseModel):
    """
    What:  Full representation of a note.
    Who:   Returned by GET /api/notes/{id}.
    """
    id: int = Field(description="Note identifier")
    title: str = Field(description="Note title")
    content: str = Field(description="Note body")
    created_at: datetime = Field(description="When the note was created (UTC)")
    modified_at: Optional[datetime] = Field(
        default=None,
        description="When the note was last updated (UTC); null if never",
    )

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    message: str
