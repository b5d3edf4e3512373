"""Unit tests for TokenCodec."""

import base64
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from feedgate.core.exceptions import (
    InvalidSignatureError,
    MalformedTokenError,
    NotAuthenticatedError,
    TokenExpiredError,
    TokenVerificationError,
)
from feedgate.infrastructure.auth import SessionClaims, TokenCodec

SECRET = "codec-test-secret-0123456789abcdef0123456789"
OTHER_SECRET = "another-secret-0123456789abcdef0123456789ab"

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(T0)


@pytest.fixture
def frozen_codec(clock: FrozenClock) -> TokenCodec:
    return TokenCodec(secret=SECRET, key_id="k1", clock=clock)


def _flip_signature(token: str) -> str:
    header, payload, signature = token.split(".")
    raw = bytearray(base64.urlsafe_b64decode(signature + "=" * (-len(signature) % 4)))
    raw[0] ^= 0x01
    flipped = base64.urlsafe_b64encode(bytes(raw)).rstrip(b"=").decode("ascii")
    return f"{header}.{payload}.{flipped}"


class TestIssue:
    """Tests for TokenCodec.issue."""

    def test_token_has_three_segments(self, frozen_codec):
        token = frozen_codec.issue(email="alice@example.com", user_id="u1")

        assert token.count(".") == 2

    def test_claims_and_header(self, frozen_codec):
        token = frozen_codec.issue(email="alice@example.com", user_id="u1")

        header = jwt.get_unverified_header(token)
        payload = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False})

        assert header["alg"] == "HS256"
        assert header["kid"] == "k1"
        assert payload["email"] == "alice@example.com"
        assert payload["userId"] == "u1"
        assert payload["sub"] == "u1"
        assert payload["iat"] == int(T0.timestamp())
        assert payload["exp"] == int(T0.timestamp()) + 3600

    def test_custom_ttl(self, frozen_codec):
        token = frozen_codec.issue(email="alice@example.com", user_id="u1", ttl=timedelta(minutes=5))

        claims = frozen_codec.verify(token)
        assert claims.expires_at - claims.issued_at == 300

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenCodec(secret="")


class TestVerify:
    """Tests for TokenCodec.verify."""

    def test_round_trip(self, frozen_codec):
        token = frozen_codec.issue(email="alice@example.com", user_id="u1")

        claims = frozen_codec.verify(token)

        assert isinstance(claims, SessionClaims)
        assert claims.email == "alice@example.com"
        assert claims.user_id == "u1"
        assert claims.expires_at_datetime == T0 + timedelta(hours=1)

    def test_flipped_signature_byte(self, frozen_codec):
        token = frozen_codec.issue(email="alice@example.com", user_id="u1")

        with pytest.raises(InvalidSignatureError):
            frozen_codec.verify(_flip_signature(token))

    def test_tampered_payload(self, frozen_codec):
        token = frozen_codec.issue(email="alice@example.com", user_id="u1")
        forged_payload = jwt.encode(
            {"email": "mallory@example.com", "userId": "u2", "iat": 0, "exp": 2**40},
            OTHER_SECRET,
            algorithm="HS256",
        ).split(".")[1]
        header, _, signature = token.split(".")

        with pytest.raises(InvalidSignatureError):
            frozen_codec.verify(f"{header}.{forged_payload}.{signature}")

    def test_signed_with_other_secret(self, clock):
        foreign = TokenCodec(secret=OTHER_SECRET, key_id="k1", clock=clock)
        codec = TokenCodec(secret=SECRET, key_id="k1", clock=clock)

        with pytest.raises(InvalidSignatureError):
            codec.verify(foreign.issue(email="alice@example.com", user_id="u1"))

    def test_valid_at_59_minutes(self, frozen_codec, clock):
        token = frozen_codec.issue(email="alice@example.com", user_id="u1")
        clock.advance(timedelta(minutes=59))

        assert frozen_codec.verify(token).user_id == "u1"

    def test_expired_at_61_minutes(self, frozen_codec, clock):
        token = frozen_codec.issue(email="alice@example.com", user_id="u1")
        clock.advance(timedelta(minutes=61))

        with pytest.raises(TokenExpiredError):
            frozen_codec.verify(token)

    def test_expired_exactly_at_exp(self, frozen_codec, clock):
        token = frozen_codec.issue(email="alice@example.com", user_id="u1")
        clock.advance(timedelta(hours=1))

        with pytest.raises(TokenExpiredError):
            frozen_codec.verify(token)

    @pytest.mark.parametrize(
        "token",
        ["", "garbage", "a.b", "a.b.c.d", "a.b.c", "!!!.###.$$$"],
    )
    def test_malformed(self, frozen_codec, token):
        with pytest.raises(MalformedTokenError):
            frozen_codec.verify(token)

    def test_missing_exp_claim(self, frozen_codec):
        token = jwt.encode(
            {"email": "alice@example.com", "userId": "u1", "iat": int(T0.timestamp())},
            SECRET,
            algorithm="HS256",
            headers={"kid": "k1"},
        )

        with pytest.raises(MalformedTokenError):
            frozen_codec.verify(token)

    def test_missing_user_id_claim(self, frozen_codec):
        now = int(T0.timestamp())
        token = jwt.encode(
            {"email": "alice@example.com", "iat": now, "exp": now + 60},
            SECRET,
            algorithm="HS256",
            headers={"kid": "k1"},
        )

        with pytest.raises(MalformedTokenError):
            frozen_codec.verify(token)

    def test_other_algorithm_rejected(self, frozen_codec):
        now = int(T0.timestamp())
        token = jwt.encode(
            {"email": "alice@example.com", "userId": "u1", "iat": now, "exp": now + 60},
            SECRET,
            algorithm="HS512",
            headers={"kid": "k1"},
        )

        with pytest.raises(TokenVerificationError):
            frozen_codec.verify(token)

    def test_verification_errors_are_authentication_failures(self):
        for error in (MalformedTokenError, InvalidSignatureError, TokenExpiredError):
            assert issubclass(error, NotAuthenticatedError)
            assert error.status_code == 401


class TestKeyRotation:
    """Tokens signed with a retired key keep verifying while it is listed."""

    def test_previous_key_accepted(self, clock):
        old = TokenCodec(secret=SECRET, key_id="k1", clock=clock)
        rotated = TokenCodec(
            secret=OTHER_SECRET,
            key_id="k2",
            previous_keys={"k1": SECRET},
            clock=clock,
        )
        token = old.issue(email="alice@example.com", user_id="u1")

        assert rotated.verify(token).user_id == "u1"

    def test_new_tokens_use_current_key(self, clock):
        rotated = TokenCodec(
            secret=OTHER_SECRET,
            key_id="k2",
            previous_keys={"k1": SECRET},
            clock=clock,
        )
        token = rotated.issue(email="alice@example.com", user_id="u1")

        assert jwt.get_unverified_header(token)["kid"] == "k2"
        jwt.decode(token, OTHER_SECRET, algorithms=["HS256"], options={"verify_exp": False})

    def test_dropped_key_rejected(self, clock):
        old = TokenCodec(secret=SECRET, key_id="k1", clock=clock)
        rotated = TokenCodec(secret=OTHER_SECRET, key_id="k2", clock=clock)

        with pytest.raises(InvalidSignatureError):
            rotated.verify(old.issue(email="alice@example.com", user_id="u1"))

    def test_from_settings(self, settings):
        codec = TokenCodec.from_settings(settings)

        assert codec.key_id == settings.secret_key_id
        assert codec.ttl == timedelta(minutes=settings.access_token_expire_minutes)
        token = codec.issue(email="alice@example.com", user_id="u1")
        assert codec.verify(token).email == "alice@example.com"
