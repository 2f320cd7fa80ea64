"""
Identity verification

Bearer tokens are issued by the external identity provider. The application
only checks them: `IdentityVerifier` is the seam, `JWTIdentityVerifier` is the
default implementation backed by python-jose.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Set

from jose import jwt, ExpiredSignatureError, JWTError
from jose.exceptions import JWTClaimsError

from campusbuddy.core.config import settings
from campusbuddy.core.exceptions import (
    AuthenticationError,
    TokenExpiredError,
    TokenRevokedError,
    MalformedTokenError,
)


@dataclass(frozen=True)
class VerifiedIdentity:
    """A token the identity provider vouches for"""
    uid: str
    claims: Dict[str, Any] = field(default_factory=dict)

    @property
    def email(self) -> str:
        return self.claims.get("email") or ""

    @property
    def display_name(self) -> str:
        name = self.claims.get("name")
        if name:
            return name
        return self.email.split("@")[0] or "User"


class IdentityVerifier(Protocol):
    def verify(self, token: str) -> VerifiedIdentity:
        ...


class JWTIdentityVerifier:
    """
    Verifies provider-issued JWTs.

    Raises one of the AuthenticationError subclasses so callers can report
    the sub-reason (expired / revoked / malformed / unknown).
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience
        self.issuer = issuer
        self._revoked: Set[str] = set()

    def revoke(self, jti: str) -> None:
        """Reject any further token carrying this `jti`"""
        self._revoked.add(jti)

    def verify(self, token: str) -> VerifiedIdentity:
        if not token or token.count(".") != 2:
            raise MalformedTokenError()

        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None},
            )
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTClaimsError as e:
            raise AuthenticationError(f"Authentication failed: {e}")
        except JWTError:
            raise MalformedTokenError()

        jti = claims.get("jti")
        if jti and jti in self._revoked:
            raise TokenRevokedError()

        uid = claims.get("uid") or claims.get("sub") or claims.get("user_id")
        if not uid:
            raise AuthenticationError("Authentication failed: token has no subject")

        return VerifiedIdentity(uid=str(uid), claims=claims)


_verifier: Optional[IdentityVerifier] = None


def get_identity_verifier() -> IdentityVerifier:
    """Process-wide verifier built from settings"""
    global _verifier
    if _verifier is None:
        _verifier = JWTIdentityVerifier(
            secret=settings.IDENTITY_TOKEN_SECRET,
            algorithm=settings.IDENTITY_TOKEN_ALGORITHM,
            audience=settings.IDENTITY_PROJECT_ID,
            issuer=settings.IDENTITY_ISSUER,
        )
    return _verifier


def set_identity_verifier(verifier: Optional[IdentityVerifier]) -> None:
    """Swap the verifier (another provider, or tests). None resets to the default."""
    global _verifier
    _verifier = verifier


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an `Authorization: Bearer <token>` header value"""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
