"""Issue, list and revoke delegated tokens."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from dns_editor.core.config import SecuritySettings
from dns_editor.core.errors import ValidationError
from dns_editor.models import NEVER_EXPIRES, DelegatedToken
from dns_editor.models.token import now_millis
from dns_editor.schemas import TokenSummary
from dns_editor.services.auth_resolver import Identity
from dns_editor.services.credential_store import CredentialStore
from dns_editor.services.token_codec import TokenCodec

logger = logging.getLogger(__name__)

DAY_MILLIS = 24 * 60 * 60 * 1000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DelegatedTokenService:
    """Token administration available to any authenticated caller."""

    def __init__(
        self,
        store: CredentialStore,
        codec: TokenCodec,
        security_settings: SecuritySettings,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._codec = codec
        self._security = security_settings
        self._clock = clock

    def issue(self, identity: Identity, expiry_days: Optional[int] = None) -> DelegatedToken:
        """
        Create a token bound to the caller's effective identity.

        A delegated caller can only hand out tokens for the identity its own
        token is bound to, never a different one.
        """
        self._store.require_configured()
        days = expiry_days if expiry_days is not None else NEVER_EXPIRES
        if days > self._security.max_token_expiry_days:
            raise ValidationError(
                f"Token lifetime cannot exceed {self._security.max_token_expiry_days} days."
            )

        created = now_millis(self._clock())
        expiry = created + days * DAY_MILLIS if days > 0 else NEVER_EXPIRES
        token = DelegatedToken(
            id=self._codec.new_id(),
            token=self._codec.generate(),
            created=created,
            expiry=expiry,
            bound_account_id=identity.account_id,
            bound_api_token=identity.api_token,
        )
        self._store.save(token)
        logger.info("Issued delegated token %s (role=%s)", token.id, identity.role.value)
        return token

    def list_tokens(self) -> List[TokenSummary]:
        self._store.require_configured()
        now = self._clock()
        return [
            TokenSummary.from_token(token, expired=token.is_expired(now))
            for token in self._store.list_all()
        ]

    def revoke(self, token_id: str) -> None:
        self._store.require_configured()
        if not token_id or not token_id.strip():
            raise ValidationError("A token id is required.")
        self._store.delete_by_id(token_id)
        logger.info("Revoked delegated token %s", token_id)


__all__ = ["DAY_MILLIS", "DelegatedTokenService"]
