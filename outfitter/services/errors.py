"""Domain exceptions shared by services and the HTTP layer."""

from __future__ import annotations


class OutfitterError(RuntimeError):
    """Base class for errors surfaced to API callers."""

    status_code = 500


class ValidationError(OutfitterError):
    """Raised when required fields are missing or malformed."""

    status_code = 422


class UnauthenticatedError(OutfitterError):
    """Raised when a write is attempted without a caller identity."""

    status_code = 401


class AuthorizationError(OutfitterError):
    """Raised when the caller does not own the target record."""

    status_code = 403


class NotFoundError(OutfitterError):
    """Raised when the target record does not exist."""

    status_code = 404


class RemoteServiceError(OutfitterError):
    """Raised when an AI, background-removal or storage call fails."""

    status_code = 502


class GenerationFailedError(RemoteServiceError):
    """Raised when outfit suggestion could not produce a valid batch."""

    def __init__(self, message: str = "Failed to generate outfit. Please try again.") -> None:
        super().__init__(message)
