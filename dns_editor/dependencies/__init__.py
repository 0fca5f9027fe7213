"""Expose dependency helpers for FastAPI routers."""

from .auth import get_identity, get_provider, presented_credentials
from .clients import (
    get_auth_resolver,
    get_blob_store,
    get_credential_store,
    get_delegated_token_service,
    get_provider_factory,
    get_token_cipher_service,
    get_token_codec,
    get_token_table,
)

__all__ = [
    "get_auth_resolver",
    "get_blob_store",
    "get_credential_store",
    "get_delegated_token_service",
    "get_identity",
    "get_provider",
    "get_provider_factory",
    "get_token_cipher_service",
    "get_token_codec",
    "get_token_table",
    "presented_credentials",
]
