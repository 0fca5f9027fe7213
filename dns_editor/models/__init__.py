"""Domain models."""

from .token import NEVER_EXPIRES, DelegatedToken

__all__ = ["DelegatedToken", "NEVER_EXPIRES"]
