"""
NoteKeep Backend — Token Route Handler
======================================

What:  POST /api/token exchanges a username/password for a bearer token.
Why:   Unauthenticated by necessity: the caller has no token yet.

Rejections (unknown user or wrong password) produce one and the same 401.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from notekeep.database import get_db_session
from notekeep.exceptions import AuthenticationError
from notekeep.schemas.common import ErrorResponse
from notekeep.schemas.token import TokenRequest, TokenResponse
from notekeep.services.token_service import token_service

router = APIRouter(prefix="/api", tags=["Token"])

INVALID_CREDENTIALS = "Invalid username or password"


@router.post(
    "/token",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Issue a bearer token",
    description="Returns a signed token valid for 14 days.",
)
async def issue_token(
    credentials: TokenRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    response = await token_service.issue_token(db=db, request=credentials)
    if response is None:
        raise AuthenticationError(message=INVALID_CREDENTIALS)
    return response
