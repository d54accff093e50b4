"""
Password Hasher - bcrypt password custody

Module: security.authentication.passwords
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Salted bcrypt hashing with configurable cost
  - Verification raising on mismatch

SECURITY NOTES:
- Plaintext passwords are never logged or stored
- bcrypt ignores input past 72 bytes, longer passwords are rejected
"""

import bcrypt

from ...core.constants import DEFAULT_BCRYPT_ROUNDS, BCRYPT_MAX_PASSWORD_BYTES
from ...core.errors import ChirpyError


class CryptoError(ChirpyError):
    """Password hashing failed"""
    status = 500


class InvalidCredentials(ChirpyError):
    """Email or password is incorrect"""
    status = 401


class PasswordHasher:
    """Hashes and verifies passwords with bcrypt"""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        """
        Args:
            rounds: Cost factor for bcrypt (10-12 recommended)
        """
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        """
        Hash password using bcrypt

        Args:
            password: Plaintext password

        Returns:
            bcrypt hash (bytes decoded to string)

        Raises:
            CryptoError: If the password cannot be hashed
        """
        if not isinstance(password, str):
            raise CryptoError("Password must be a string")

        encoded = password.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
            raise CryptoError(
                f"Password longer than {BCRYPT_MAX_PASSWORD_BYTES} bytes"
            )

        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            return bcrypt.hashpw(encoded, salt).decode("ascii")
        except ValueError as e:
            raise CryptoError(f"Failed to hash password: {e}") from e

    def verify_password(self, password: str, password_hash: str) -> bool:
        """
        Verify password against hash

        Args:
            password: Plaintext password
            password_hash: bcrypt hash

        Returns:
            True if password matches

        Raises:
            InvalidCredentials: If password does not match or hash is unusable
        """
        try:
            encoded = password.encode("utf-8")
            # Some bcrypt releases truncate at 72 bytes instead of refusing
            if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
                matches = False
            else:
                matches = bcrypt.checkpw(encoded, password_hash.encode("ascii"))
        except (ValueError, TypeError, AttributeError, UnicodeEncodeError):
            matches = False

        if not matches:
            raise InvalidCredentials("Invalid password")
        return True
