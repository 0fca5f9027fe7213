"""
Factory functions to provide shared stores and services as FastAPI dependencies.
"""

from functools import lru_cache
from typing import Annotated, Callable, Optional

from fastapi import Depends

from dns_editor.clients import (
    CloudflareClient,
    DynamoDBBlobStore,
    SQLiteBlobStore,
    SQLiteTokenTable,
)
from dns_editor.core.config import get_settings
from dns_editor.core.errors import ConfigurationError
from dns_editor.services import (
    AuthResolver,
    CredentialStore,
    DelegatedTokenService,
    Identity,
    TokenCipherService,
    TokenCodec,
)
from dns_editor.services.credential_store import BlobStore

ProviderFactory = Callable[[Identity], CloudflareClient]


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_token_table() -> Optional[SQLiteTokenTable]:
    """Provide the primary token table when a database path is configured."""
    storage = _settings().storage
    if not storage.sqlite_path:
        return None
    return SQLiteTokenTable(storage.sqlite_path)


@lru_cache()
def get_blob_store() -> Optional[BlobStore]:
    """Provide the secondary blob store selected by ``TOKEN_BLOB_BACKEND``."""
    storage = _settings().storage
    if storage.blob_backend == "sqlite":
        if not storage.blob_sqlite_path:
            raise ConfigurationError(
                "TOKEN_BLOB_SQLITE_PATH is required when TOKEN_BLOB_BACKEND=sqlite."
            )
        return SQLiteBlobStore(storage.blob_sqlite_path)
    if storage.blob_backend == "dynamodb":
        if not storage.dynamodb_table_name:
            raise ConfigurationError(
                "TOKEN_BLOB_DYNAMODB_TABLE is required when TOKEN_BLOB_BACKEND=dynamodb."
            )
        return DynamoDBBlobStore(storage)
    return None


@lru_cache()
def get_token_cipher_service() -> Optional[TokenCipherService]:
    """Provide symmetric encryption for bound credentials when a secret is set."""
    secret = _settings().security.token_encryption_secret
    if not secret:
        return None
    return TokenCipherService(secret=secret)


@lru_cache()
def get_credential_store() -> CredentialStore:
    """Provide the shared credential store wired to whichever backends exist."""
    return CredentialStore(
        primary=get_token_table(),
        secondary=get_blob_store(),
        blob_key=_settings().storage.blob_key,
        cipher=get_token_cipher_service(),
    )


@lru_cache()
def get_token_codec() -> TokenCodec:
    return TokenCodec()


def get_auth_resolver(
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> AuthResolver:
    """Build a resolver over the shared credential store."""
    return AuthResolver(store)


def get_delegated_token_service(
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> DelegatedTokenService:
    """Build the token administration service."""
    return DelegatedTokenService(
        store=store,
        codec=get_token_codec(),
        security_settings=_settings().security,
    )


def get_provider_factory() -> ProviderFactory:
    """Return a callable that builds a Cloudflare client for a resolved identity."""
    settings = _settings()

    def build(identity: Identity) -> CloudflareClient:
        return CloudflareClient(identity.api_token, settings.cloudflare)

    return build


__all__ = [
    "ProviderFactory",
    "get_auth_resolver",
    "get_blob_store",
    "get_credential_store",
    "get_delegated_token_service",
    "get_provider_factory",
    "get_token_cipher_service",
    "get_token_codec",
    "get_token_table",
]
