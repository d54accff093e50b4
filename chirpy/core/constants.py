"""
Constants for Chirpy

Module: core.constants
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial constants definition
  - Store defaults
  - Token type tags and lifetimes
  - Chirp validation limits
  - Billing webhook events

SECURITY NOTES:
- Token lifetimes are defaults only, every deploy may override them
- Secrets never have a production default
"""

from typing import Final

# ============================================================================
# Service Identity
# ============================================================================

SERVICE_NAME: Final[str] = "chirpy"
SERVICE_VERSION: Final[str] = "0.1.0"

# ============================================================================
# Persistence
# ============================================================================

DEFAULT_DB_PATH: Final[str] = "./database.json"
DB_FILE_MODE: Final[int] = 0o600

# Top-level snapshot sections
SECTION_CHIRPS: Final[str] = "chirps"
SECTION_USERS: Final[str] = "users"
SECTION_REVOCATIONS: Final[str] = "revocations"
SECTION_SEQUENCES: Final[str] = "sequences"

# ============================================================================
# Tokens
# ============================================================================

JWT_ALGORITHM: Final[str] = "HS256"
MIN_SECRET_LENGTH: Final[int] = 32

# Carried in the "iss" claim
TOKEN_TYPE_ACCESS: Final[str] = "chirpy-access"
TOKEN_TYPE_REFRESH: Final[str] = "chirpy-refresh"

ACCESS_TOKEN_TTL_SECONDS: Final[int] = 60 * 60
REFRESH_TOKEN_TTL_DAYS: Final[int] = 180

BEARER_SCHEME: Final[str] = "Bearer"

# ============================================================================
# Passwords
# ============================================================================

DEFAULT_BCRYPT_ROUNDS: Final[int] = 10
BCRYPT_MAX_PASSWORD_BYTES: Final[int] = 72

# ============================================================================
# Chirps
# ============================================================================

MAX_CHIRP_LENGTH: Final[int] = 140
PROFANE_WORDS: Final[frozenset] = frozenset({"kerfuffle", "sharbert", "fornax"})
PROFANITY_MASK: Final[str] = "****"

SORT_ASC: Final[str] = "asc"
SORT_DESC: Final[str] = "desc"

# ============================================================================
# Billing Webhook
# ============================================================================

EVENT_USER_UPGRADED: Final[str] = "user.upgraded"

# ============================================================================
# Environment variables (read by the entry point only)
# ============================================================================

ENV_DB_PATH: Final[str] = "CHIRPY_DB_PATH"
ENV_JWT_SECRET: Final[str] = "JWT_SECRET"
ENV_POLKA_KEY: Final[str] = "POLKA_KEY"
ENV_REFRESH_TTL_DAYS: Final[str] = "CHIRPY_REFRESH_TTL_DAYS"

# ============================================================================
# Logging
# ============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_default_config() -> dict:
    """
    Get default service configuration

    Returns:
        dict: Default configuration (no secrets)
    """
    return {
        "service": {
            "name": SERVICE_NAME,
            "version": SERVICE_VERSION,
        },
        "store": {
            "db_path": DEFAULT_DB_PATH,
            "file_mode": DB_FILE_MODE,
        },
        "tokens": {
            "algorithm": JWT_ALGORITHM,
            "access_ttl_seconds": ACCESS_TOKEN_TTL_SECONDS,
            "refresh_ttl_days": REFRESH_TOKEN_TTL_DAYS,
        },
        "passwords": {
            "bcrypt_rounds": DEFAULT_BCRYPT_ROUNDS,
        },
        "chirps": {
            "max_length": MAX_CHIRP_LENGTH,
            "profane_words": sorted(PROFANE_WORDS),
        },
    }
