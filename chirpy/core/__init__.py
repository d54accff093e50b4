"""
Core module - constants, configuration and error taxonomy
"""

from .config import ChirpyConfig
from .errors import (
    ChirpyError,
    NotFound,
    ConflictError,
    ValidationError,
    AuthorizationError,
)

__all__ = [
    "ChirpyConfig",
    "ChirpyError",
    "NotFound",
    "ConflictError",
    "ValidationError",
    "AuthorizationError",
]
