"""
Durable storage of delegated tokens across two backends.

The primary backend is a queryable table keyed by token id. The secondary
backend only holds the whole token list as one JSON blob under a fixed key;
it needs no schema setup and is kept in step by rewriting the blob on every
mutation. Reads prefer the primary and fall back to the blob, copying blob
rows into the primary on the way so that adding a primary to a blob-only
deployment migrates the existing tokens without any manual step.

The blob rewrite is not guarded against concurrent writers: two mutations
racing on the blob can lose one of them.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from dns_editor.core.errors import ConfigurationError, StorageError
from dns_editor.models import DelegatedToken
from dns_editor.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)

DEFAULT_BLOB_KEY = "user_tokens_list"

Row = Dict[str, Any]


class TokenTable(Protocol):
    def select_all(self) -> List[Row]: ...

    def upsert(self, row: Row) -> None: ...

    def insert_if_absent(self, row: Row) -> None: ...

    def delete(self, token_id: str) -> None: ...


class BlobStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def put(self, key: str, value: Any) -> None: ...


def _by_creation(rows: List[Row]) -> List[Row]:
    return sorted(rows, key=lambda row: row.get("created") or 0)


class CredentialStore:
    """Persist ``DelegatedToken`` records with primary/secondary fallback."""

    def __init__(
        self,
        primary: Optional[TokenTable] = None,
        secondary: Optional[BlobStore] = None,
        *,
        blob_key: str = DEFAULT_BLOB_KEY,
        cipher: Optional[TokenCipherService] = None,
    ) -> None:
        self._primary = primary
        self._secondary = secondary
        self._blob_key = blob_key
        self._cipher = cipher

    @property
    def is_configured(self) -> bool:
        return self._primary is not None or self._secondary is not None

    def require_configured(self) -> None:
        if not self.is_configured:
            raise ConfigurationError(
                "No token storage is bound; set TOKEN_DB_PATH or TOKEN_BLOB_BACKEND."
            )

    def list_all(self) -> List[DelegatedToken]:
        """Return every stored token in creation order."""
        tokens: List[DelegatedToken] = []
        for row in self._list_rows():
            try:
                token = DelegatedToken.model_validate(row)
            except PydanticValidationError:
                logger.warning("Skipping malformed token row %r", row.get("id"))
                continue
            tokens.append(self._decode(token))
        return tokens

    def save(self, token: DelegatedToken) -> None:
        """Insert or replace ``token`` keyed by its id."""
        self.require_configured()
        row = self._encode(token)
        accepted = False

        if self._primary is not None:
            try:
                self._primary.upsert(row)
                accepted = True
            except Exception:
                logger.warning("Primary token store rejected save of %s", token.id, exc_info=True)

        if self._secondary is not None:

            def upsert_row(rows: List[Row]) -> List[Row]:
                for index, existing in enumerate(rows):
                    if existing.get("id") == token.id:
                        rows[index] = row
                        return rows
                rows.append(row)
                return rows

            accepted = self._mirror(upsert_row) or accepted

        if not accepted:
            raise StorageError("Token could not be saved to any storage backend.")

    def delete_by_id(self, token_id: str) -> None:
        """Remove the token with ``token_id`` from both backends."""
        self.require_configured()
        accepted = False

        if self._primary is not None:
            try:
                self._primary.delete(token_id)
                accepted = True
            except Exception:
                logger.warning("Primary token store rejected delete of %s", token_id, exc_info=True)

        if self._secondary is not None:
            accepted = self._mirror(
                lambda rows: [row for row in rows if row.get("id") != token_id]
            ) or accepted

        if not accepted:
            raise StorageError("Token could not be deleted from any storage backend.")

    def _list_rows(self, *, backfill: bool = True) -> List[Row]:
        primary_reachable = False
        if self._primary is not None:
            try:
                rows = self._primary.select_all()
                primary_reachable = True
            except Exception:
                logger.warning("Primary token store read failed", exc_info=True)
                rows = []
            if rows:
                return list(rows)

        if self._secondary is None:
            return []

        blob = self._secondary.get(self._blob_key) or []
        if not isinstance(blob, list):
            raise ConfigurationError(
                f"Stored token blob {self._blob_key!r} is not a list."
            )
        rows = _by_creation([row for row in blob if isinstance(row, dict)])
        if rows and primary_reachable and backfill:
            self._backfill(rows)
        return rows

    def _backfill(self, rows: List[Row]) -> None:
        copied = 0
        for row in rows:
            try:
                self._primary.insert_if_absent(row)
                copied += 1
            except Exception:
                logger.warning("Backfill of token %r failed", row.get("id"), exc_info=True)
        logger.info("Backfilled %s of %s tokens into the primary store", copied, len(rows))

    def _mirror(self, mutate: Callable[[List[Row]], List[Row]]) -> bool:
        """Rewrite the blob with ``mutate`` applied to the current full list."""
        try:
            # A deleted last primary row is still in the blob; never copy it back.
            rows = self._list_rows(backfill=False)
            self._secondary.put(self._blob_key, mutate(rows))
        except Exception:
            logger.warning("Secondary token store rejected write", exc_info=True)
            return False
        return True

    def _encode(self, token: DelegatedToken) -> Row:
        row = token.to_row()
        if self._cipher is not None:
            row["boundApiToken"] = self._cipher.seal(token.bound_api_token)
        return row

    def _decode(self, token: DelegatedToken) -> DelegatedToken:
        stored = token.bound_api_token
        if not TokenCipherService.is_sealed(stored):
            return token
        if self._cipher is None:
            raise ConfigurationError(
                "Stored tokens are encrypted but TOKEN_ENCRYPTION_SECRET is not set."
            )
        return token.model_copy(update={"bound_api_token": self._cipher.unseal(stored)})


__all__ = ["BlobStore", "CredentialStore", "DEFAULT_BLOB_KEY", "TokenTable"]
