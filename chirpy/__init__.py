"""
Chirpy - Identity, sessions and storage for a short-post service

Users register, log in and post short "chirps". This package holds the
session/identity subsystem and the single-file store it depends on; the
HTTP layer lives elsewhere and calls in through ChirpService.

CHANGELOG:
[2026-10-17 v0.1.0] Initial release
  - Single-file JSON store with readers-writer locking
  - bcrypt passwords, HS256 access/refresh tokens
  - Refresh token revocation
  - Chirp service facade

ARCHITECTURE:
- Layer 1 : Persistence (JSONStore, ChirpDatabase)
- Layer 2 : Security (PasswordHasher, JWTHandler, SessionManager)
- Layer 3 : Services (ChirpService)
"""

__version__ = "0.1.0"

from .core.config import ChirpyConfig
from .core.errors import (
    ChirpyError,
    NotFound,
    ConflictError,
    ValidationError,
    AuthorizationError,
)
from .persistence import ChirpDatabase, Chirp, User, Revocation, StoreIOError
from .security.authentication import (
    SessionManager,
    SessionTokens,
    CryptoError,
    InvalidCredentials,
    TokenInvalid,
    TokenExpired,
    TokenRevoked,
)
from .services import ChirpService

__all__ = [
    "ChirpyConfig",
    "ChirpyError",
    "NotFound",
    "ConflictError",
    "ValidationError",
    "AuthorizationError",
    "ChirpDatabase",
    "Chirp",
    "User",
    "Revocation",
    "StoreIOError",
    "SessionManager",
    "SessionTokens",
    "CryptoError",
    "InvalidCredentials",
    "TokenInvalid",
    "TokenExpired",
    "TokenRevoked",
    "ChirpService",
]
