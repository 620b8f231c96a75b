"""
NoteKeep Backend — Token Service Unit Tests
===========================================

What:  Tests for credential verification and token issuance.
How:   Users live in an in-memory SQLite database; tokens are decoded with
       PyJWT using the test signing key.

What we test:
    ✅ Any-case username + correct password → token, exp = iat + 14 days
    ✅ Wrong password and unknown user → identical None outcome
    ✅ Claim set and display-name fallback
    ✅ Rehash-needed hashes are accepted
    ✅ Configurable id claim name and missing signing key
"""

from datetime import datetime, timedelta, timezone

import jwt
import pydantic
import pytest
from passlib.hash import sha256_crypt
from sqlalchemy.exc import IntegrityError

from notekeep.auth import AuthenticatedUser, decode_token
from notekeep.config import Settings, settings
from notekeep.exceptions import ConfigurationError
from notekeep.models.user import User, normalize_username
from notekeep.schemas.token import TokenRequest
from notekeep.services.passwords import PasswordVerification
from notekeep.services.token_service import TOKEN_LIFETIME, TokenService, display_name


def _decode(token: str) -> dict:
    return jwt.decode(
        token,
        settings.jwt_key,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
    )


class TestTokenIssue:
    """Tests for issue_token."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username", ["Alice", "alice", "ALICE", "aLiCe"])
    async def test_any_case_username_gets_token(
        self, db_session, token_service, alice, username, default_password
    ):
        response = await token_service.issue_token(
            db_session, TokenRequest(username=username, password=default_password)
        )

        assert response is not None
        assert response.expires - response.issued_at == timedelta(days=14)

        claims = _decode(response.token)
        assert claims["exp"] - claims["iat"] == int(TOKEN_LIFETIME.total_seconds())
        assert claims["iat"] == int(response.issued_at.timestamp())
        assert claims["exp"] == int(response.expires.timestamp())

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username", ["émile", "ÉMILE", "Émile"])
    async def test_non_ascii_username_any_case(
        self, db_session, token_service, make_user, username, default_password
    ):
        user = await make_user("Émile")

        response = await token_service.issue_token(
            db_session, TokenRequest(username=username, password=default_password)
        )

        assert response is not None
        assert _decode(response.token)["Username"] == "Émile"
        assert _decode(response.token)["Id"] == str(user.id)

    @pytest.mark.asyncio
    async def test_usernames_differing_only_in_case_cannot_coexist(self, bob, make_user):
        with pytest.raises(IntegrityError):
            await make_user("BOB", email="robert@example.com")

    @pytest.mark.asyncio
    async def test_claims(self, db_session, token_service, alice, default_password):
        response = await token_service.issue_token(
            db_session, TokenRequest(username="alice", password=default_password)
        )

        claims = _decode(response.token)
        assert claims["Id"] == str(alice.id)
        assert claims["Username"] == "Alice"
        assert claims["Email"] == "alice@example.com"
        assert claims["Name"] == "Alice Liddell"
        assert claims["iss"] == settings.jwt_issuer
        assert claims["aud"] == settings.jwt_audience

    @pytest.mark.asyncio
    async def test_rejections_are_indistinguishable(
        self, db_session, token_service, alice, default_password
    ):
        wrong_password = await token_service.issue_token(
            db_session, TokenRequest(username="alice", password="not the password")
        )
        unknown_user = await token_service.issue_token(
            db_session, TokenRequest(username="mallory", password=default_password)
        )
        unknown_cased = await token_service.issue_token(
            db_session, TokenRequest(username="MALLORY", password=default_password)
        )

        assert wrong_password is None
        assert unknown_user is None
        assert unknown_cased is None

    @pytest.mark.asyncio
    async def test_rehash_needed_still_accepted(self, db_session, token_service, hasher, make_user):
        legacy_hash = sha256_crypt.using(rounds=5000).hash("old-school")
        user = await make_user("legacy", password_hash=legacy_hash)

        assert hasher.verify("old-school", legacy_hash) is PasswordVerification.SUCCESS_REHASH_NEEDED

        response = await token_service.issue_token(
            db_session, TokenRequest(username="LEGACY", password="old-school")
        )
        assert response is not None
        assert _decode(response.token)["Id"] == str(user.id)

    @pytest.mark.asyncio
    async def test_corrupt_stored_hash_is_rejected(self, db_session, token_service, make_user):
        await make_user("broken", password_hash="not-a-passlib-hash")

        response = await token_service.issue_token(
            db_session, TokenRequest(username="broken", password="anything")
        )
        assert response is None


class TestTokenClaims:
    """Tests for claim construction and signing."""

    def _user(self, **kwargs) -> User:
        defaults = dict(id=7, username="grace", email="grace@example.com",
                        password_hash="x", first_name=None, last_name=None)
        defaults.update(kwargs)
        return User(**defaults)

    @pytest.mark.parametrize(
        "first,last,expected",
        [
            (None, None, "grace"),
            ("", "", "grace"),
            ("   ", None, "grace"),
            ("Grace", "Hopper", "Grace Hopper"),
            ("Grace", None, "Grace"),
            (None, "Hopper", "Hopper"),
        ],
    )
    def test_display_name(self, first, last, expected):
        assert display_name(self._user(first_name=first, last_name=last)) == expected

    def test_configurable_id_claim(self, monkeypatch, hasher):
        monkeypatch.setattr(settings, "id_claim_type", "uid")
        response = TokenService(hasher=hasher).generate_token(self._user())

        claims = _decode(response.token)
        assert claims["uid"] == "7"
        assert "Id" not in claims

    def test_issued_at_from_clock(self, hasher):
        fixed = datetime(2026, 3, 1, 12, 30, 15, 987654, tzinfo=timezone.utc)
        response = TokenService(hasher=hasher, clock=lambda: fixed).generate_token(self._user())

        assert response.issued_at == fixed.replace(microsecond=0)
        assert response.expires == datetime(2026, 3, 15, 12, 30, 15, tzinfo=timezone.utc)

    def test_missing_signing_key_is_fatal(self, monkeypatch, hasher):
        monkeypatch.setattr(settings, "jwt_key", "")
        with pytest.raises(ConfigurationError):
            TokenService(hasher=hasher).generate_token(self._user())

    def test_sub_as_id_claim_round_trips(self, monkeypatch, hasher):
        monkeypatch.setattr(settings, "id_claim_type", "sub")
        token = TokenService(hasher=hasher).generate_token(self._user()).token

        claims = decode_token(token)

        assert claims["sub"] == "7"
        assert AuthenticatedUser.from_claims(claims, "sub").user_id == 7

    @pytest.mark.parametrize("name", ["iss", "aud", "iat", "nbf", "exp", "Username", "Email", "Name"])
    def test_id_claim_cannot_reuse_a_taken_name(self, name):
        with pytest.raises(pydantic.ValidationError):
            Settings(id_claim_type=name)

    @pytest.mark.parametrize("blank", ["", "   "])
    def test_blank_id_claim_falls_back_to_default(self, blank):
        assert Settings(id_claim_type=blank).id_claim_type == "Id"

    def test_username_normalized_on_assignment(self):
        user = self._user(username="Émile")
        assert user.username_normalized == normalize_username("Émile") == "émile"

        user.username = "ZOË"
        assert user.username_normalized == "zoë"
