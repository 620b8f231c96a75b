"""
NoteKeep Backend — Note Service (Note Store)
============================================

What:  Create/list/get/update/delete over Note records, scoped to one owner.
Why:   Per-user data isolation lives here and nowhere else: every query and
       every write filters on the caller's user id.
How:   Each operation takes the database session and an AuthenticatedUser
       explicitly. The service holds no per-request state.
Who:   Called by the /api/notes route handlers.

Ownership rule:
    A note owned by somebody else is indistinguishable from a note that
    does not exist. get → None, update/delete → WriteResult.NOT_FOUND.

Write rule:
    Every mutation must affect exactly one row. Any other count is a
    ROW_COUNT_ANOMALY (create → None), reported as a value rather than
    raised, so the caller decides the HTTP semantics. Nothing is retried:
    a retried create could duplicate a note.
"""

import enum
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeep.auth import AuthenticatedUser
from notekeep.exceptions import DatabaseError, ValidationError
from notekeep.models.note import (
    CONTENT_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
    Note,
)
from notekeep.schemas.note import NoteDetail, NoteListItem

logger = logging.getLogger(__name__)


class WriteResult(enum.Enum):
    """Outcome of an update or delete."""
    OK = "ok"
    NOT_FOUND = "not_found"
    ROW_COUNT_ANOMALY = "row_count_anomaly"

    @property
    def succeeded(self) -> bool:
        return self is WriteResult.OK


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from stores without tz support."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def next_modified_time(
    created_at: datetime,
    previous_modified: Optional[datetime],
    now: datetime,
) -> datetime:
    """Never earlier than creation, always strictly after the last update."""
    candidate = max(now, created_at)
    if previous_modified is not None and candidate <= previous_modified:
        candidate = previous_modified + timedelta(microseconds=1)
    return candidate


def validate_note_fields(title: str, content: str) -> None:
    """
    Reject note states the request schemas would never let through.

    Raises:
        ValidationError: title outside 2-100 characters or content over 8000.
    """
    if title is None or not TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
        raise ValidationError(
            message=f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters.",
            field="title",
        )
    if content is None or len(content) > CONTENT_MAX_LENGTH:
        raise ValidationError(
            message=f"Content must contain no more than {CONTENT_MAX_LENGTH} characters.",
            field="content",
        )


class NoteService:
    """
    Business logic layer for note operations.

    Error Handling Strategy:
        Business outcomes (not found, row-count anomaly) are return values.
        SQLAlchemy errors are logged and wrapped in DatabaseError.
        Direct calls with out-of-range fields raise ValidationError.
    """

    async def create_note(
        self,
        db: AsyncSession,
        owner: AuthenticatedUser,
        title: str,
        content: str,
    ) -> Optional[NoteListItem]:
        """
        Insert a note owned by `owner`, timestamped now.

        Returns:
            NoteListItem for the new note, or None when the insert did not
            produce exactly one row.
        """
        validate_note_fields(title, content)
        created_at = utcnow()

        try:
            result = await db.execute(
                insert(Note)
                .values(
                    title=title,
                    content=content,
                    created_at=created_at,
                    owner_id=owner.user_id,
                )
                .returning(Note.id, Note.title, Note.created_at)
            )
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error creating note for user %s: %s", owner.user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the note. Please try again.",
                context={"owner_id": owner.user_id, "error_type": type(e).__name__},
            )

        if len(rows) != 1:
            logger.error(
                "Note insert for user %s affected %d rows; expected 1", owner.user_id, len(rows)
            )
            return None

        row = rows[0]
        logger.info("Note %s created for user %s", row.id, owner.user_id)
        return NoteListItem(id=row.id, title=row.title, created_at=as_utc(row.created_at))

    async def list_notes(
        self, db: AsyncSession, owner: AuthenticatedUser
    ) -> List[NoteListItem]:
        """All of the owner's notes as summaries; empty list when there are none."""
        try:
            result = await db.execute(
                select(Note.id, Note.title, Note.created_at)
                .where(Note.owner_id == owner.user_id)
                .order_by(Note.id)
            )
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing notes for user %s: %s", owner.user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"owner_id": owner.user_id, "error_type": type(e).__name__},
            )

        return [
            NoteListItem(id=row.id, title=row.title, created_at=as_utc(row.created_at))
            for row in rows
        ]

    async def get_note(
        self, db: AsyncSession, owner: AuthenticatedUser, note_id: int
    ) -> Optional[NoteDetail]:
        """
        Full detail of one note.

        Query plan:
            SELECT ... FROM notes WHERE id = :id AND owner_id = :owner

        Returns:
            NoteDetail, or None if the note is missing or owned by someone else.
        """
        # Plain columns, not entities: a Note already in the identity map
        # would hide changes made by the bulk UPDATE in update_note
        try:
            result = await db.execute(
                select(
                    Note.id, Note.title, Note.content, Note.created_at, Note.modified_at
                ).where(Note.id == note_id, Note.owner_id == owner.user_id)
            )
            note = result.first()
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": note_id},
            )

        if note is None:
            return None

        return NoteDetail(
            id=note.id,
            title=note.title,
            content=note.content,
            created_at=as_utc(note.created_at),
            modified_at=as_utc(note.modified_at),
        )

    async def update_note(
        self,
        db: AsyncSession,
        owner: AuthenticatedUser,
        note_id: int,
        title: str,
        content: str,
    ) -> WriteResult:
        """
        Replace title and content and stamp the modified time.

        Steps:
            1. Load (owner_id, created_at, modified_at) by id
            2. Missing or foreign-owned → NOT_FOUND
            3. UPDATE ... WHERE id = :id AND owner_id = :owner
            4. Exactly one row changed → OK, otherwise ROW_COUNT_ANOMALY
        """
        validate_note_fields(title, content)

        try:
            current = (
                await db.execute(
                    select(Note.owner_id, Note.created_at, Note.modified_at).where(
                        Note.id == note_id
                    )
                )
            ).first()

            if current is None or current.owner_id != owner.user_id:
                return WriteResult.NOT_FOUND

            modified_at = next_modified_time(
                as_utc(current.created_at), as_utc(current.modified_at), utcnow()
            )

            result = await db.execute(
                update(Note)
                .where(Note.id == note_id, Note.owner_id == owner.user_id)
                .values(title=title, content=content, modified_at=modified_at)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            logger.error("Database error updating note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the note. Please try again.",
                context={"note_id": note_id, "error_type": type(e).__name__},
            )

        if result.rowcount != 1:
            logger.error("Update of note %s affected %s rows; expected 1", note_id, result.rowcount)
            return WriteResult.ROW_COUNT_ANOMALY

        logger.info("Note %s updated by user %s", note_id, owner.user_id)
        return WriteResult.OK

    async def delete_note(
        self, db: AsyncSession, owner: AuthenticatedUser, note_id: int
    ) -> WriteResult:
        """Remove an owned note. Same ownership gate and row-count rule as update."""
        try:
            current_owner = (
                await db.execute(select(Note.owner_id).where(Note.id == note_id))
            ).scalar_one_or_none()

            if current_owner is None or current_owner != owner.user_id:
                return WriteResult.NOT_FOUND

            result = await db.execute(
                delete(Note)
                .where(Note.id == note_id, Note.owner_id == owner.user_id)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the note. Please try again.",
                context={"note_id": note_id, "error_type": type(e).__name__},
            )

        if result.rowcount != 1:
            logger.error("Delete of note %s affected %s rows; expected 1", note_id, result.rowcount)
            return WriteResult.ROW_COUNT_ANOMALY

        logger.info("Note %s deleted by user %s", note_id, owner.user_id)
        return WriteResult.OK


# ── Singleton Instance ────────────────────────────────────────────────────
# Stateless: the owner is an argument of every call
note_service = NoteService()
