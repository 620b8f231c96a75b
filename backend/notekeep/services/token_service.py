"""
NoteKeep Backend — Token Service (Credential & Token Issuer)
============================================================

What:  Turns a username/password pair into a signed bearer token, or refuses.
Why:   Login is the only place a password is checked; every later request
       proves identity with the token instead.
How:   Look up the user by lower-cased username, verify the password hash with
       passlib, then sign identity claims with PyJWT (HMAC-SHA-2).
Who:   Called by POST /api/token. Has no dependency on NoteService.

Flow (per call, no persisted state):
    Start → LookupUser ──not found──▶ Reject
                │
                ▼
         VerifyPassword ──mismatch──▶ Reject
                │
                ▼
           IssueToken ──────────────▶ Accept

    Both rejections return None. The caller cannot tell "unknown user" from
    "wrong password"; an unknown user still pays for one hash verification.

Token contents:
    {id_claim_type}: user id (decimal string), Username, Email, Name,
    iss, aud, iat, nbf, exp  (exp = iat + 14 days)
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import jwt
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeep.auth import EMAIL_CLAIM, NAME_CLAIM, USERNAME_CLAIM, signing_key
from notekeep.config import settings
from notekeep.exceptions import DatabaseError
from notekeep.models.user import User, normalize_username
from notekeep.schemas.token import TokenRequest, TokenResponse
from notekeep.services.passwords import (
    PasswordHasher,
    PasswordVerification,
    password_hasher,
)

logger = logging.getLogger(__name__)

TOKEN_LIFETIME = timedelta(days=14)


def display_name(user: User) -> str:
    """'first last' trimmed, or the username when both parts are blank."""
    full_name = f"{user.first_name or ''} {user.last_name or ''}".strip()
    return full_name if full_name else user.username


class TokenService:
    """
    Verify-and-issue, one synchronous step with nothing to roll back.

    Error Handling Strategy:
        Invalid credentials are a return value (None). Only store failures
        raise (DatabaseError), and a missing signing key raises
        ConfigurationError from notekeep.auth.signing_key().
    """

    def __init__(
        self,
        hasher: PasswordHasher = password_hasher,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.hasher = hasher
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._dummy_hash: Optional[str] = None

    async def issue_token(
        self, db: AsyncSession, request: TokenRequest
    ) -> Optional[TokenResponse]:
        """
        Return a signed token for valid credentials, else None.

        Args:
            db: Async database session
            request: Username (any case) and password
        """
        user = await self._get_valid_user(db, request.username, request.password)
        if user is None:
            logger.info("Token request rejected")
            return None

        response = self.generate_token(user)
        logger.info("Token issued for user %s (expires %s)", user.id, response.expires.isoformat())
        return response

    async def _get_valid_user(
        self, db: AsyncSession, username: str, password: str
    ) -> Optional[User]:
        try:
            result = await db.execute(
                select(User).where(User.username_normalized == normalize_username(username))
            )
            user = result.scalars().first()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not verify credentials. Please try again.",
                context={"error_type": type(e).__name__},
            )

        if user is None:
            # Same hashing cost as a real mismatch
            self.hasher.verify(password, self._get_dummy_hash())
            return None

        outcome = self.hasher.verify(password, user.password_hash)
        if outcome is PasswordVerification.FAILED:
            return None
        if outcome is PasswordVerification.SUCCESS_REHASH_NEEDED:
            logger.info("Password hash for user %s uses a deprecated scheme", user.id)

        return user

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.hasher.hash("notekeep-dummy-password")
        return self._dummy_hash

    def build_claims(self, user: User) -> Dict[str, Any]:
        return {
            # Decimal string; PyJWT rejects a non-string "sub"
            settings.id_claim_type: str(user.id),
            USERNAME_CLAIM: user.username,
            EMAIL_CLAIM: user.email,
            NAME_CLAIM: display_name(user),
        }

    def generate_token(self, user: User) -> TokenResponse:
        """
        Sign the user's claims.

        issued_at is truncated to whole seconds so the returned timestamps
        equal the encoded iat/exp claims exactly.
        """
        issued_at = self._clock().astimezone(timezone.utc).replace(microsecond=0)
        expires = issued_at + TOKEN_LIFETIME

        payload = self.build_claims(user)
        payload.update(
            {
                "iss": settings.jwt_issuer,
                "aud": settings.jwt_audience,
                "iat": issued_at,
                "nbf": issued_at,
                "exp": expires,
            }
        )
        token = jwt.encode(payload, signing_key(), algorithm=settings.jwt_algorithm)

        return TokenResponse(token=token, issued_at=issued_at, expires=expires)


# ── Singleton Instance ────────────────────────────────────────────────────
token_service = TokenService()
