"""
Error taxonomy shared by the services and the HTTP boundary.

Every error carries the message shown to the caller and the HTTP status the
API layer responds with.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict, List, Optional


class DnsEditorError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_errors(self) -> List[Dict[str, Any]]:
        return [{"message": self.message}]


class ConfigurationError(DnsEditorError):
    """No storage backend is bound, or stored data cannot be read with the current config."""

    status_code = HTTPStatus.SERVICE_UNAVAILABLE


class StorageError(DnsEditorError):
    """Raised when no configured storage backend accepted a write."""

    status_code = HTTPStatus.SERVICE_UNAVAILABLE


class AuthError(DnsEditorError):
    """Missing or invalid credentials."""

    status_code = HTTPStatus.UNAUTHORIZED


class MissingCredentials(AuthError):
    def __init__(self, message: str = "Missing authentication credentials.") -> None:
        super().__init__(message)


class TokenNotFound(AuthError):
    def __init__(self, message: str = "Invalid token (not found).") -> None:
        super().__init__(message)


class TokenExpired(AuthError):
    def __init__(self, message: str = "Token has expired.") -> None:
        super().__init__(message)


class ValidationError(DnsEditorError):
    """Malformed caller input, rejected before any remote call."""

    status_code = HTTPStatus.BAD_REQUEST


class ProviderError(DnsEditorError):
    """The remote DNS provider rejected a call."""

    status_code = HTTPStatus.BAD_GATEWAY

    def __init__(
        self, message: str, errors: Optional[List[Dict[str, Any]]] = None
    ) -> None:
        super().__init__(message)
        self.errors = errors or [{"message": message}]

    def to_errors(self) -> List[Dict[str, Any]]:
        return list(self.errors)


class TransportError(DnsEditorError):
    """The provider could not be reached."""

    status_code = HTTPStatus.BAD_GATEWAY


__all__ = [
    "AuthError",
    "ConfigurationError",
    "DnsEditorError",
    "MissingCredentials",
    "ProviderError",
    "StorageError",
    "TokenExpired",
    "TokenNotFound",
    "TransportError",
    "ValidationError",
]
