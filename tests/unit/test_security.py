"""
Unit Tests for identity token verification
"""
import time

import pytest
from jose import jwt

from campusbuddy.core.exceptions import (
    AuthenticationError,
    MalformedTokenError,
    TokenExpiredError,
    TokenRevokedError,
)
from campusbuddy.core.security import JWTIdentityVerifier, VerifiedIdentity, extract_bearer_token

SECRET = "unit-test-secret"


def encode(claims: dict, secret: str = SECRET) -> str:
    now = int(time.time())
    payload = {"iat": now, "exp": now + 3600, **claims}
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def verifier() -> JWTIdentityVerifier:
    return JWTIdentityVerifier(secret=SECRET)


class TestJWTIdentityVerifier:

    def test_valid_token(self, verifier):
        identity = verifier.verify(encode({"sub": "u1", "email": "u1@campus.test"}))

        assert identity.uid == "u1"
        assert identity.email == "u1@campus.test"

    def test_expired_token(self, verifier):
        token = encode({"sub": "u1", "exp": int(time.time()) - 10})

        with pytest.raises(TokenExpiredError) as exc_info:
            verifier.verify(token)

        assert exc_info.value.reason == "expired"
        assert exc_info.value.status_code == 401

    @pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b"])
    def test_malformed_token(self, verifier, token):
        with pytest.raises(MalformedTokenError) as exc_info:
            verifier.verify(token)

        assert exc_info.value.reason == "malformed"

    def test_wrong_signature(self, verifier):
        with pytest.raises(MalformedTokenError):
            verifier.verify(encode({"sub": "u1"}, secret="someone-else"))

    def test_revoked_token(self, verifier):
        token = encode({"sub": "u1", "jti": "session-9"})
        verifier.revoke("session-9")

        with pytest.raises(TokenRevokedError) as exc_info:
            verifier.verify(token)

        assert exc_info.value.reason == "revoked"

    def test_missing_subject(self, verifier):
        with pytest.raises(AuthenticationError) as exc_info:
            verifier.verify(encode({"email": "x@campus.test"}))

        assert exc_info.value.reason == "unknown"

    def test_audience_checked_when_configured(self):
        verifier = JWTIdentityVerifier(secret=SECRET, audience="campusbuddy")

        assert verifier.verify(encode({"sub": "u1", "aud": "campusbuddy"})).uid == "u1"
        with pytest.raises(AuthenticationError):
            verifier.verify(encode({"sub": "u1", "aud": "other-app"}))


class TestVerifiedIdentity:

    def test_display_name_prefers_name_claim(self):
        identity = VerifiedIdentity(uid="u1", claims={"name": "Ayesha Khan", "email": "ayesha@campus.test"})

        assert identity.display_name == "Ayesha Khan"

    def test_display_name_from_email(self):
        identity = VerifiedIdentity(uid="u1", claims={"email": "bilal.ahmed@campus.test"})

        assert identity.display_name == "bilal.ahmed"

    def test_display_name_fallback(self):
        assert VerifiedIdentity(uid="u1").display_name == "User"


class TestExtractBearerToken:

    @pytest.mark.parametrize("header,expected", [
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("bearer   token  ", "token"),
        ("Basic abc", None),
        ("Bearer ", None),
        (None, None),
    ])
    def test_extract(self, header, expected):
        assert extract_bearer_token(header) == expected
