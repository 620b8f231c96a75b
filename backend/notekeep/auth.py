"""
NoteKeep Backend — Bearer Token Authentication
==============================================

What:  Resolves an inbound bearer token into a verified AuthenticatedUser.
Why:   NoteService trusts the identity it is given and never looks at raw
       request data; this module is the only place tokens are verified.
How:   PyJWT verifies signature, expiry, issuer and audience with the same
       symmetric key TokenService signs with. The numeric user id is read from
       the configured claim name (settings.id_claim_type, default "Id").
Who:   `get_current_user` is a FastAPI dependency of every /api/notes route.

Failure modes:
    - No/invalid/expired token      → AuthenticationError (401)
    - Valid token without a usable
      numeric id claim              → ConfigurationError (500, fatal)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from notekeep.config import PROFILE_CLAIMS, settings
from notekeep.exceptions import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

USERNAME_CLAIM, EMAIL_CLAIM, NAME_CLAIM = PROFILE_CLAIMS

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedUser:
    """
    An identity whose token has already been verified.

    Passed explicitly into every NoteService operation as the note owner.
    """
    user_id: int
    username: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_claims(cls, claims: Dict[str, Any], id_claim_type: str) -> "AuthenticatedUser":
        """
        Build an identity from verified token claims.

        Raises:
            ConfigurationError: the id claim is missing or not an integer.
                A verified token that lacks it means issuer and verifier
                disagree about the claim name, which no client can fix.
        """
        raw = claims.get(id_claim_type)
        user_id: Optional[int] = None
        if isinstance(raw, int) and not isinstance(raw, bool):
            user_id = raw
        elif isinstance(raw, str) and raw.strip().isdigit():
            user_id = int(raw)

        if user_id is None:
            logger.critical(
                "Verified token has no numeric user id under claim '%s'", id_claim_type
            )
            raise ConfigurationError(
                message="Attempted to resolve a user without a numeric user id claim.",
                context={"claim": id_claim_type},
            )

        return cls(
            user_id=user_id,
            username=claims.get(USERNAME_CLAIM),
            email=claims.get(EMAIL_CLAIM),
            name=claims.get(NAME_CLAIM),
        )


def signing_key() -> str:
    """Return the configured symmetric key, failing loudly when absent."""
    if not settings.jwt_key:
        raise ConfigurationError(
            message="Bearer token signing key is not configured.",
            context={"setting": "JWT_KEY"},
        )
    return settings.jwt_key


def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify a bearer token and return its claims.

    Raises:
        AuthenticationError: bad signature, expired, wrong issuer/audience,
            or missing registered claims.
    """
    try:
        return jwt.decode(
            token,
            signing_key(),
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iat", "iss", "aud"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError(message="Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected bearer token: %s", type(exc).__name__)
        raise AuthenticationError() from exc


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
    """FastAPI dependency: Authorization: Bearer <token> → AuthenticatedUser."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError(message="Not authenticated")

    claims = decode_token(credentials.credentials)
    return AuthenticatedUser.from_claims(claims, settings.id_claim_type)
