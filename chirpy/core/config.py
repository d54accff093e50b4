"""
Service configuration

Module: core.config
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Explicit configuration passed to store and session manager
  - Environment loading for the process entry point only

SECURITY NOTES:
- The signing secret must be 32+ characters
- No component below the entry point reads os.environ
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Mapping, Optional

from .constants import (
    DEFAULT_DB_PATH,
    ACCESS_TOKEN_TTL_SECONDS,
    REFRESH_TOKEN_TTL_DAYS,
    DEFAULT_BCRYPT_ROUNDS,
    MAX_CHIRP_LENGTH,
    MIN_SECRET_LENGTH,
    PROFANE_WORDS,
    ENV_DB_PATH,
    ENV_JWT_SECRET,
    ENV_POLKA_KEY,
    ENV_REFRESH_TTL_DAYS,
)


@dataclass(frozen=True)
class ChirpyConfig:
    """Configuration for the store, session manager and chirp service"""
    jwt_secret: str
    db_path: str = DEFAULT_DB_PATH
    polka_key: Optional[str] = None
    access_token_ttl: timedelta = timedelta(seconds=ACCESS_TOKEN_TTL_SECONDS)
    refresh_token_ttl: timedelta = timedelta(days=REFRESH_TOKEN_TTL_DAYS)
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    max_chirp_length: int = MAX_CHIRP_LENGTH
    profane_words: frozenset = field(default=PROFANE_WORDS)

    def __post_init__(self):
        if not self.jwt_secret or len(self.jwt_secret) < MIN_SECRET_LENGTH:
            raise ValueError(
                f"JWT secret must be at least {MIN_SECRET_LENGTH} characters"
            )
        if self.access_token_ttl <= timedelta(0):
            raise ValueError("Access token TTL must be positive")
        if self.refresh_token_ttl <= self.access_token_ttl:
            raise ValueError("Refresh token TTL must exceed access token TTL")
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ChirpyConfig":
        """
        Build configuration from environment variables

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            ChirpyConfig

        Raises:
            ValueError: If JWT_SECRET is missing or a value is malformed
        """
        env = os.environ if environ is None else environ

        secret = env.get(ENV_JWT_SECRET)
        if not secret:
            raise ValueError(f"{ENV_JWT_SECRET} is not set")

        kwargs = {
            "jwt_secret": secret,
            "db_path": env.get(ENV_DB_PATH, DEFAULT_DB_PATH),
            "polka_key": env.get(ENV_POLKA_KEY) or None,
        }

        refresh_days = env.get(ENV_REFRESH_TTL_DAYS)
        if refresh_days:
            try:
                kwargs["refresh_token_ttl"] = timedelta(days=int(refresh_days))
            except ValueError:
                raise ValueError(
                    f"{ENV_REFRESH_TTL_DAYS} must be an integer, got {refresh_days!r}"
                )

        return cls(**kwargs)
