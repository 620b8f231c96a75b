"""
NoteKeep Backend — Notes Route Handlers
=======================================

What:  CRUD endpoints under /api/notes for the authenticated caller.
How:   Every handler depends on get_current_user, passes the resulting
       AuthenticatedUser to NoteService, and maps service results to HTTP:

       None / WriteResult.NOT_FOUND       → 404 (also for other users' notes)
       create → None                      → 500
       WriteResult.ROW_COUNT_ANOMALY      → 500
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from notekeep.auth import AuthenticatedUser, get_current_user
from notekeep.database import get_db_session
from notekeep.exceptions import DatabaseError, NotFoundError
from notekeep.schemas.common import ErrorResponse
from notekeep.schemas.note import (
    MessageResponse,
    NoteCreate,
    NoteDetail,
    NoteListItem,
    NoteUpdate,
)
from notekeep.services.note_service import WriteResult, note_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])

_AUTH_RESPONSES = {
    401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


def _raise_for_write(result: WriteResult, note_id: int, action: str) -> None:
    if result is WriteResult.NOT_FOUND:
        raise NotFoundError(resource="note", resource_id=str(note_id))
    if result is WriteResult.ROW_COUNT_ANOMALY:
        raise DatabaseError(
            message=f"Note could not be {action}.",
            context={"note_id": note_id, "reason": result.value},
        )


@router.post(
    "/notes",
    response_model=NoteListItem,
    status_code=status.HTTP_201_CREATED,
    responses=_AUTH_RESPONSES,
    summary="Create a note",
)
async def create_note(
    payload: NoteCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteListItem:
    note = await note_service.create_note(
        db=db, owner=user, title=payload.title, content=payload.content
    )
    if note is None:
        raise DatabaseError(message="Note could not be created.", context={"owner_id": user.user_id})
    return note


@router.get(
    "/notes",
    response_model=List[NoteListItem],
    responses=_AUTH_RESPONSES,
    summary="List the caller's notes",
)
async def list_notes(
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[NoteListItem]:
    return await note_service.list_notes(db=db, owner=user)


@router.get(
    "/notes/{note_id}",
    response_model=NoteDetail,
    responses={404: {"description": "Note not found", "model": ErrorResponse}, **_AUTH_RESPONSES},
    summary="Get one of the caller's notes",
)
async def get_note(
    note_id: int,
    response: Response,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteDetail:
    note = await note_service.get_note(db=db, owner=user, note_id=note_id)
    if note is None:
        raise NotFoundError(resource="note", resource_id=str(note_id))

    # User-specific and mutable: never cache in shared caches
    response.headers["Cache-Control"] = "private, no-cache"
    return note


@router.put(
    "/notes/{note_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Note not found", "model": ErrorResponse}, **_AUTH_RESPONSES},
    summary="Replace a note's title and content",
)
async def update_note(
    note_id: int,
    payload: NoteUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    result = await note_service.update_note(
        db=db, owner=user, note_id=note_id, title=payload.title, content=payload.content
    )
    _raise_for_write(result, note_id, "updated")
    return MessageResponse(message="Note updated successfully")


@router.delete(
    "/notes/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Note not found", "model": ErrorResponse}, **_AUTH_RESPONSES},
    summary="Delete a note",
)
async def delete_note(
    note_id: int,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    result = await note_service.delete_note(db=db, owner=user, note_id=note_id)
    _raise_for_write(result, note_id, "deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
