"""
NoteKeep Backend — Authentication Unit Tests
============================================

What:  Tests for bearer token verification and identity resolution.

What we test:
    ✅ Tokens minted by TokenService verify and resolve to the user id
    ✅ Tampered, expired, wrong-audience tokens → AuthenticationError
    ✅ Missing / non-numeric id claim → ConfigurationError (fatal)
    ✅ PasswordHasher outcomes
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from notekeep.auth import AuthenticatedUser, decode_token
from notekeep.config import settings
from notekeep.exceptions import AuthenticationError, ConfigurationError
from notekeep.models.user import User
from notekeep.services.passwords import PasswordHasher, PasswordVerification
from notekeep.services.token_service import TokenService


def _user() -> User:
    return User(id=42, username="ada", email="ada@example.com", password_hash="x",
                first_name="Ada", last_name="Lovelace")


class TestDecodeToken:
    """Tests for decode_token."""

    def test_round_trip_resolves_identity(self, hasher):
        response = TokenService(hasher=hasher).generate_token(_user())

        claims = decode_token(response.token)
        identity = AuthenticatedUser.from_claims(claims, settings.id_claim_type)

        assert identity == AuthenticatedUser(
            user_id=42, username="ada", email="ada@example.com", name="Ada Lovelace"
        )

    def test_tampered_token_rejected(self, hasher):
        token = TokenService(hasher=hasher).generate_token(_user()).token
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])

        with pytest.raises(AuthenticationError):
            decode_token(tampered)

    def test_expired_token_rejected(self, hasher):
        long_ago = datetime.now(timezone.utc) - timedelta(days=15)
        token = TokenService(hasher=hasher, clock=lambda: long_ago).generate_token(_user()).token

        with pytest.raises(AuthenticationError, match="expired"):
            decode_token(token)

    def test_wrong_audience_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "Id": 42,
                "iss": settings.jwt_issuer,
                "aud": "someone-else",
                "iat": now,
                "exp": now + timedelta(days=1),
            },
            settings.jwt_key,
            algorithm=settings.jwt_algorithm,
        )

        with pytest.raises(AuthenticationError):
            decode_token(token)

    def test_foreign_key_rejected(self, hasher):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "Id": 42,
                "iss": settings.jwt_issuer,
                "aud": settings.jwt_audience,
                "iat": now,
                "exp": now + timedelta(days=1),
            },
            "a-completely-different-key-0123456789abcdef",
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError):
            decode_token(token)


class TestIdentityResolution:
    """Tests for AuthenticatedUser.from_claims."""

    def test_numeric_string_claim_accepted(self):
        assert AuthenticatedUser.from_claims({"Id": "17"}, "Id").user_id == 17

    def test_custom_claim_name(self):
        assert AuthenticatedUser.from_claims({"uid": 3}, "uid").user_id == 3

    @pytest.mark.parametrize("claims", [{}, {"Id": None}, {"Id": "abc"}, {"Id": True}, {"Id": 1.5}])
    def test_unusable_id_is_configuration_error(self, claims):
        with pytest.raises(ConfigurationError):
            AuthenticatedUser.from_claims(claims, "Id")


class TestPasswordHasher:
    """Tests for PasswordHasher.verify outcomes."""

    def setup_method(self):
        self.hasher = PasswordHasher(schemes=["pbkdf2_sha256", "sha256_crypt"])

    def test_hash_is_salted(self):
        assert self.hasher.hash("secret") != self.hasher.hash("secret")

    def test_current_scheme_success(self):
        stored = self.hasher.hash("secret")
        assert self.hasher.verify("secret", stored) is PasswordVerification.SUCCESS

    def test_mismatch_failed(self):
        stored = self.hasher.hash("secret")
        result = self.hasher.verify("Secret", stored)
        assert result is PasswordVerification.FAILED
        assert not result.succeeded

    @pytest.mark.parametrize("stored", [None, "", "plaintext-password"])
    def test_unusable_stored_hash_failed(self, stored):
        assert self.hasher.verify("secret", stored) is PasswordVerification.FAILED
