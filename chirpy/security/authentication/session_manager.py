"""
Session Manager - Login, token issuance, refresh and revocation

Module: security.authentication.session_manager
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Access/refresh token pair per login
  - Refresh of access tokens gated by the revocation set
  - Idempotent refresh token revocation
  - Bearer header parsing for the HTTP layer

ARCHITECTURE:
SessionManager provides:
  - authenticate() / login(): password check against the stored user
  - issue_session(): one access token (short TTL) and one refresh token
    (long TTL) for a user id
  - validate_access_token(): signature, expiry and type tag only
  - refresh_access_token(): refresh token type tag, expiry, then revocation
  - revoke_session() / is_revoked(): delegate to ChirpDatabase

SESSION STATES:
  Issued -> Active -> Refreshed (access only) | Revoked | Expired
  Revoked and Expired are terminal. Only refresh tokens can be revoked.
  Access tokens are not checked against the revocation set: they live one
  hour and are never recorded there.

SECURITY NOTES:
- Revocation checks fail closed: a store error propagates, it is never
  treated as "not revoked"
- Unknown email and wrong password raise the same InvalidCredentials
- The refresh token is never extended or rotated by a refresh
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

from ...core.config import ChirpyConfig
from ...core.constants import (
    BEARER_SCHEME,
    TOKEN_TYPE_ACCESS,
    TOKEN_TYPE_REFRESH,
)
from ...core.errors import NotFound
from ...persistence.database import ChirpDatabase, User
from .jwt_handler import JWTHandler, TokenInvalid, TokenRevoked
from .passwords import PasswordHasher, InvalidCredentials


@dataclass(frozen=True)
class SessionTokens:
    """Access and refresh token pair"""
    access_token: str
    refresh_token: str
    access_expires_in: timedelta
    refresh_expires_in: timedelta
    token_type: str = BEARER_SCHEME


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header value

    Raises:
        TokenInvalid: If the header is missing or not a bearer credential
    """
    if not authorization:
        raise TokenInvalid("No Authorization header")

    parts = authorization.split()
    if len(parts) != 2 or parts[0] != BEARER_SCHEME:
        raise TokenInvalid("Invalid Authorization header")
    return parts[1]


class SessionManager:
    """
    Password custody and session token lifecycle.

    The database is the only collaborator: users are read at login and
    refresh tokens are checked against (and added to) its revocation set.
    """

    def __init__(
        self,
        database: ChirpDatabase,
        config: ChirpyConfig,
        hasher: Optional[PasswordHasher] = None,
        jwt_handler: Optional[JWTHandler] = None,
    ):
        """
        Initialize session manager

        Args:
            database: Store holding users and revocations
            config: Signing secret and token lifetimes
            hasher: Password hasher (defaults to bcrypt with config rounds)
            jwt_handler: Token signer (defaults to HS256 with config secret)
        """
        self.logger = logging.getLogger("security.session_manager")
        self.database = database
        self.access_token_ttl = config.access_token_ttl
        self.refresh_token_ttl = config.refresh_token_ttl
        self.hasher = hasher or PasswordHasher(config.bcrypt_rounds)
        self.jwt_handler = jwt_handler or JWTHandler(config.jwt_secret)

        self.logger.info(
            f"SessionManager initialized (access_expires={self.access_token_ttl}, "
            f"refresh_expires={self.refresh_token_ttl})"
        )

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    def hash_password(self, password: str) -> str:
        return self.hasher.hash_password(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        return self.hasher.verify_password(password, password_hash)

    def authenticate(self, email: str, password: str) -> User:
        """
        Check an email/password pair

        Returns:
            The matching User

        Raises:
            InvalidCredentials: Unknown email or wrong password
        """
        try:
            user = self.database.get_user_by_email(email)
        except NotFound:
            self.logger.warning("Authentication failed: unknown email")
            raise InvalidCredentials("Invalid email or password")

        try:
            self.hasher.verify_password(password, user.hashed_password)
        except InvalidCredentials:
            self.logger.warning(f"Authentication failed for user {user.id}")
            raise

        return user

    def login(self, email: str, password: str) -> Tuple[User, SessionTokens]:
        """Authenticate and issue a session"""
        user = self.authenticate(email, password)
        tokens = self.issue_session(user.id)
        self.logger.info(f"User {user.id} logged in")
        return user, tokens

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def issue_session(self, user_id: int) -> SessionTokens:
        """
        Mint an access/refresh token pair for a user

        Args:
            user_id: Subject of both tokens

        Returns:
            SessionTokens
        """
        access_token = self.jwt_handler.make_token(
            user_id, TOKEN_TYPE_ACCESS, self.access_token_ttl
        )
        refresh_token = self.jwt_handler.make_token(
            user_id, TOKEN_TYPE_REFRESH, self.refresh_token_ttl
        )
        return SessionTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_in=self.access_token_ttl,
            refresh_expires_in=self.refresh_token_ttl,
        )

    def validate_access_token(self, token: str) -> int:
        """
        Verify an access token

        Does not consult the revocation set.

        Returns:
            User id from the subject claim

        Raises:
            TokenInvalid: Bad signature, malformed, or not an access token
            TokenExpired: Past expiry
        """
        claims = self.jwt_handler.verify(token, TOKEN_TYPE_ACCESS)
        return claims.user_id

    def refresh_access_token(self, refresh_token: str) -> str:
        """
        Mint a new access token from a refresh token

        Returns:
            New access token (the refresh token is unchanged)

        Raises:
            TokenInvalid: Bad signature, malformed, or not a refresh token
            TokenExpired: Refresh token past expiry
            TokenRevoked: Refresh token is in the revocation set
            StoreIOError: Revocation set could not be read
        """
        claims = self.jwt_handler.verify(refresh_token, TOKEN_TYPE_REFRESH)
        user_id = claims.user_id

        if self.database.is_token_revoked(refresh_token):
            self.logger.warning(f"Revoked refresh token presented for user {user_id}")
            raise TokenRevoked("Token has been revoked")

        access_token = self.jwt_handler.make_token(
            user_id, TOKEN_TYPE_ACCESS, self.access_token_ttl
        )
        self.logger.info(f"Access token refreshed for user {user_id}")
        return access_token

    def revoke_session(self, refresh_token: str) -> datetime:
        """
        Add a refresh token to the revocation set (idempotent)

        The token is recorded as presented; it need not be valid or unexpired.

        Returns:
            When the token was (first) revoked
        """
        if not refresh_token:
            raise TokenInvalid("Token must be non-empty string")
        revocation = self.database.revoke_token(refresh_token)
        return revocation.revoked_at

    def is_revoked(self, refresh_token: str) -> bool:
        return self.database.is_token_revoked(refresh_token)
