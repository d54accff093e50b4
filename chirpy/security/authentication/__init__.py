"""
Authentication module - passwords, JWT and sessions

Provides:
- PasswordHasher: bcrypt password hashing
- JWTHandler: HS256 token signing and verification
- SessionManager: Login, access/refresh tokens and revocation
"""

from .passwords import PasswordHasher, CryptoError, InvalidCredentials
from .jwt_handler import (
    JWTHandler,
    TokenClaims,
    TokenError,
    TokenInvalid,
    TokenExpired,
    TokenRevoked,
)
from .session_manager import SessionManager, SessionTokens, extract_bearer_token

__all__ = [
    "PasswordHasher",
    "CryptoError",
    "InvalidCredentials",
    "JWTHandler",
    "TokenClaims",
    "TokenError",
    "TokenInvalid",
    "TokenExpired",
    "TokenRevoked",
    "SessionManager",
    "SessionTokens",
    "extract_bearer_token",
]
