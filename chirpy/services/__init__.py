"""
Services module - request-level operations for the HTTP layer

Provides:
- ChirpService: Chirps, users, sessions and billing events
"""

from .chirp_service import ChirpService

__all__ = ["ChirpService"]
