"""
NoteKeep Backend — Token Request/Response Schemas
=================================================

What:  The POST /api/token contract.
Who:   TokenRequest is validated by FastAPI; TokenResponse is returned by
       TokenService.issue_token().
"""

from datetime import datetime

from pydantic import BaseModel, Field


class TokenRequest(BaseModel):
    """Credentials presented at login. The password is never logged or stored."""
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=1024)


class TokenResponse(BaseModel):
    """
    A freshly minted bearer token.

    expires - issued_at is exactly 14 days; both match the token's
    iat/exp claims to the second.
    """
    token: str = Field(description="Signed bearer token (JWT)")
    issued_at: datetime = Field(description="Issued-at time (UTC)")
    expires: datetime = Field(description="Expiry time (UTC)")
