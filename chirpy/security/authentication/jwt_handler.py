"""
JWT Handler - Signed session tokens

Module: security.authentication.jwt_handler
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - HS256 tokens carrying subject, issued-at, expiry, a type tag and a
    unique token id
  - Verification with mandatory type tag check
  - Typed errors for invalid and expired tokens

ARCHITECTURE:
JWTHandler provides:
  - make_token(): sign one token of a given type and lifetime
  - verify(): check signature, required claims, expiry and type tag
  The type tag travels in the "iss" claim ("chirpy-access" or
  "chirpy-refresh"), so a token of one type never validates as the other.

SECURITY NOTES:
- Secret key must be 32+ characters
- Only the configured algorithm is accepted on decode
- All times in UTC
"""

import binascii
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from jwt.utils import base64url_decode, base64url_encode

from ...core.constants import (
    JWT_ALGORITHM,
    MIN_SECRET_LENGTH,
    TOKEN_TYPE_ACCESS,
    TOKEN_TYPE_REFRESH,
)
from ...core.errors import ChirpyError


TOKEN_TYPES = (TOKEN_TYPE_ACCESS, TOKEN_TYPE_REFRESH)


class TokenError(ChirpyError):
    """Base token error"""
    status = 401


class TokenInvalid(TokenError):
    """Token is malformed, badly signed or of the wrong type"""
    pass


class TokenExpired(TokenError):
    """Token is past its expiry"""
    pass


class TokenRevoked(TokenError):
    """Refresh token has been revoked"""
    pass


@dataclass(frozen=True)
class TokenClaims:
    """Verified token claims"""
    subject: str
    token_type: str
    issued_at: datetime
    expires_at: datetime

    @property
    def user_id(self) -> int:
        """Subject as a user id"""
        try:
            user_id = int(self.subject)
        except ValueError as e:
            raise TokenInvalid(f"Subject is not a user id: {self.subject!r}") from e
        if user_id <= 0:
            raise TokenInvalid(f"Subject is not a user id: {self.subject!r}")
        return user_id


class JWTHandler:
    """
    Signs and verifies HS256 tokens.

    Stateless: revocation is checked by the session manager against the
    store, never here.
    """

    def __init__(self, secret_key: str, algorithm: str = JWT_ALGORITHM):
        """
        Initialize JWT handler

        Args:
            secret_key: Secret key for signing (32+ characters)
            algorithm: JWT algorithm (default HS256)

        Raises:
            ValueError: If secret_key too short
        """
        if not secret_key or len(secret_key) < MIN_SECRET_LENGTH:
            raise ValueError(f"Secret key must be at least {MIN_SECRET_LENGTH} characters")

        self.logger = logging.getLogger("security.jwt_handler")
        self.secret_key = secret_key
        self.algorithm = algorithm

        self.logger.info(f"JWT Handler initialized (algo={algorithm})")

    def make_token(self, user_id: int, token_type: str, expires_in: timedelta) -> str:
        """
        Sign a token for a user

        Args:
            user_id: Subject of the token
            token_type: TOKEN_TYPE_ACCESS or TOKEN_TYPE_REFRESH
            expires_in: Lifetime from now

        Returns:
            Encoded JWT
        """
        if token_type not in TOKEN_TYPES:
            raise ValueError(f"Unknown token type: {token_type}")

        now = datetime.now(timezone.utc)
        claims = {
            "iss": token_type,
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + expires_in).timestamp()),
            "jti": str(uuid.uuid4()),  # Two logins in one second get distinct tokens
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str, expected_type: str) -> TokenClaims:
        """
        Verify JWT signature, expiry and type tag

        Args:
            token: JWT token string
            expected_type: Type tag the token must carry

        Returns:
            TokenClaims with extracted data

        Raises:
            TokenInvalid: If token malformed, bad signature or wrong type
            TokenExpired: If token expired
        """
        if not token or not isinstance(token, str):
            raise TokenInvalid("Token must be non-empty string")

        self._check_canonical_signature(token)

        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=expected_type,
                options={"require": ["iss", "sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired(f"Token expired: {e}") from e
        except jwt.InvalidIssuerError as e:
            raise TokenInvalid(f"Expected a {expected_type} token") from e
        except jwt.InvalidSignatureError as e:
            raise TokenInvalid(f"Invalid signature: {e}") from e
        except jwt.DecodeError as e:
            raise TokenInvalid(f"Decode error: {e}") from e
        except jwt.InvalidTokenError as e:
            raise TokenInvalid(f"Invalid token: {e}") from e

        try:
            issued_at = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)
            expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        except (ValueError, TypeError, OverflowError) as e:
            raise TokenInvalid(f"Invalid timestamp: {e}") from e

        return TokenClaims(
            subject=str(payload["sub"]),
            token_type=payload["iss"],
            issued_at=issued_at,
            expires_at=expires_at,
        )

    @staticmethod
    def _check_canonical_signature(token: str) -> None:
        """
        Reject signature segments that only decode loosely

        The last base64url character of a signature can carry unused bits.
        Older PyJWT releases ignore them, so several spellings of one
        signature would verify. Header and payload need no such check: the
        signature covers their exact text.

        Raises:
            TokenInvalid: If the signature does not re-encode to itself
        """
        signature = token.rsplit(".", 1)[-1]
        try:
            canonical = base64url_encode(base64url_decode(signature)).decode("ascii")
        except (ValueError, TypeError, binascii.Error) as e:
            raise TokenInvalid(f"Decode error: {e}") from e
        if canonical != signature:
            raise TokenInvalid("Invalid signature encoding")
