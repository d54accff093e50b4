"""
Chirp Service - Request-level rules over the store and session manager

Module: services.chirp_service
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Chirp validation and profanity masking
  - Registration, login and credential updates
  - Author-only chirp deletion
  - Billing webhook handling (Chirpy Red upgrade)

ARCHITECTURE:
ChirpService is the seam an HTTP layer calls. It takes plain values
(bearer tokens, ids, bodies) and returns records or raises ChirpyError
subclasses; it never builds responses.
"""

import hmac
import logging
from typing import List, Optional, Tuple

from ..core.config import ChirpyConfig
from ..core.constants import (
    BCRYPT_MAX_PASSWORD_BYTES,
    PROFANITY_MASK,
    SORT_ASC,
    SORT_DESC,
    EVENT_USER_UPGRADED,
)
from ..core.errors import ValidationError, AuthorizationError
from ..persistence.database import ChirpDatabase, Chirp, User
from ..security.authentication import SessionManager, SessionTokens


class ChirpService:
    """
    Chirp, user and session operations for the HTTP layer.

    Typical usage:
        database = ChirpDatabase(config.db_path)
        service = ChirpService(database, SessionManager(database, config), config)
        user = service.register("a@b.com", "pw")
        user, tokens = service.login("a@b.com", "pw")
        chirp = service.post_chirp(tokens.access_token, "hello world")
    """

    def __init__(
        self,
        database: ChirpDatabase,
        sessions: SessionManager,
        config: ChirpyConfig,
    ):
        self.logger = logging.getLogger("services.chirp_service")
        self.database = database
        self.sessions = sessions
        self.max_chirp_length = config.max_chirp_length
        self.profane_words = frozenset(w.lower() for w in config.profane_words)
        self.polka_key = config.polka_key

    # ------------------------------------------------------------------
    # Chirps
    # ------------------------------------------------------------------

    def validate_chirp(self, body: str) -> str:
        """
        Check length and mask profanity

        Args:
            body: Raw chirp text

        Returns:
            Cleaned body

        Raises:
            ValidationError: Empty or longer than the limit
        """
        if not isinstance(body, str) or not body:
            raise ValidationError("Chirp body is required")
        if len(body) > self.max_chirp_length:
            raise ValidationError("Chirp is too long")
        return self._mask_profanity(body)

    def post_chirp(self, access_token: str, body: str) -> Chirp:
        """
        Validate and store a chirp as the token's user

        Raises:
            TokenInvalid, TokenExpired: Bad access token
            ValidationError: Bad body (nothing is stored)
        """
        author_id = self.sessions.validate_access_token(access_token)
        cleaned = self.validate_chirp(body)
        return self.database.create_chirp(cleaned, author_id)

    def get_chirp(self, chirp_id: int) -> Chirp:
        return self.database.get_chirp(chirp_id)

    def list_chirps(self, author_id: Optional[int] = None, sort: str = SORT_ASC) -> List[Chirp]:
        """
        List chirps, optionally for one author

        Args:
            author_id: Only this user's chirps
            sort: "asc" or "desc" by id; anything else means "asc"
        """
        if author_id is None:
            chirps = self.database.get_chirps()
        else:
            chirps = self.database.get_chirps_by_author(author_id)
        return sorted(chirps, key=lambda c: c.id, reverse=(sort == SORT_DESC))

    def delete_chirp(self, access_token: str, chirp_id: int) -> Chirp:
        """
        Delete a chirp owned by the token's user

        Raises:
            TokenInvalid, TokenExpired: Bad access token
            NotFound: No such chirp
            AuthorizationError: Caller is not the author
        """
        user_id = self.sessions.validate_access_token(access_token)
        chirp = self.database.get_chirp(chirp_id)
        if chirp.author_id != user_id:
            self.logger.warning(f"User {user_id} tried to delete chirp {chirp_id} of user {chirp.author_id}")
            raise AuthorizationError("Not authorized to delete this chirp")
        # Ids are never reused, so the chirp read above is the one deleted
        return self.database.delete_chirp(chirp_id)

    # ------------------------------------------------------------------
    # Users and sessions
    # ------------------------------------------------------------------

    def register(self, email: str, password: str) -> User:
        """
        Create a user (idempotent on email)

        Raises:
            ValidationError: Missing email or password, or password too long
            CryptoError: Password cannot be hashed
        """
        self._require_credentials(email, password)
        self._require_storable_password(password)
        return self.database.create_user(email, self.sessions.hash_password(password))

    def login(self, email: str, password: str) -> Tuple[User, SessionTokens]:
        """
        Raises:
            InvalidCredentials: Unknown email or wrong password
        """
        self._require_credentials(email, password)
        return self.sessions.login(email, password)

    def update_credentials(self, access_token: str, email: str, password: str) -> User:
        """
        Change the token user's email and password

        Raises:
            TokenInvalid, TokenExpired: Bad access token
            ValidationError: Missing email or password, or password too long
            NotFound: Token user no longer exists
            ConflictError: Email belongs to another user
        """
        user_id = self.sessions.validate_access_token(access_token)
        self._require_credentials(email, password)
        self._require_storable_password(password)
        return self.database.update_user(user_id, email, self.sessions.hash_password(password))

    def refresh(self, refresh_token: str) -> str:
        return self.sessions.refresh_access_token(refresh_token)

    def revoke(self, refresh_token: str) -> None:
        self.sessions.revoke_session(refresh_token)

    # ------------------------------------------------------------------
    # Billing
    # ------------------------------------------------------------------

    def handle_billing_event(self, api_key: Optional[str], user_id: int, event: str) -> bool:
        """
        Apply a billing webhook event

        Args:
            api_key: Key presented by the billing provider
            user_id: User the event refers to
            event: Event name; only "user.upgraded" has an effect

        Returns:
            True if the user was upgraded, False if the event was ignored

        Raises:
            AuthorizationError: Missing or wrong API key
            NotFound: Unknown user
        """
        if not self.polka_key or not api_key or not hmac.compare_digest(
            api_key.encode("utf-8"), self.polka_key.encode("utf-8")
        ):
            self.logger.warning("Billing webhook rejected: bad API key")
            raise AuthorizationError("Unauthorized webhook")

        if event != EVENT_USER_UPGRADED:
            self.logger.info(f"Billing event ignored: {event}")
            return False

        self.database.upgrade_user(user_id)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _mask_profanity(self, body: str) -> str:
        words = body.split(" ")
        return " ".join(
            PROFANITY_MASK if word.lower() in self.profane_words else word
            for word in words
        )

    @staticmethod
    def _require_credentials(email: str, password: str) -> None:
        if not email or not password:
            raise ValidationError("Email and password are required")

    @staticmethod
    def _require_storable_password(password: str) -> None:
        # bcrypt only reads the first 72 bytes
        if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password longer than {BCRYPT_MAX_PASSWORD_BYTES} bytes"
            )
