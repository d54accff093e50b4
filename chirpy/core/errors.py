"""
Error taxonomy shared by every Chirpy layer

Module: core.errors
Date: 2026-10-17
Version: 0.1.0

Each error carries a ``status`` hint so the HTTP layer can map it to a
response code without inspecting messages. The core itself never builds
responses.
"""


class ChirpyError(Exception):
    """Base Chirpy error"""
    status = 500


class NotFound(ChirpyError):
    """Entity does not exist"""
    status = 404


class ConflictError(ChirpyError):
    """Write would break a uniqueness constraint"""
    status = 409


class ValidationError(ChirpyError):
    """Input rejected before reaching the store"""
    status = 400


class AuthorizationError(ChirpyError):
    """Caller is authenticated but not allowed to act"""
    status = 403
