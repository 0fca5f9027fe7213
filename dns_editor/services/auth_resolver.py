"""
Resolution of presented credentials into the effective provider identity.

Callers authenticate either as root (Cloudflare account id plus API token,
accepted as presented) or with a delegated token, which is looked up in the
credential store and replaced by the identity it was bound to at issue time.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from dns_editor.core.errors import MissingCredentials, TokenExpired, TokenNotFound
from dns_editor.services.credential_store import CredentialStore
from dns_editor.services.token_codec import TokenCodec

logger = logging.getLogger(__name__)


class Role(str, Enum):
    ROOT = "root"
    DELEGATED = "token"


@dataclass(frozen=True)
class PresentedCredentials:
    """Raw credentials taken from an inbound request."""

    account_id: Optional[str] = None
    api_token: Optional[str] = field(default=None, repr=False)
    login_token: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class Identity:
    """Effective provider identity used to authorize provider calls."""

    account_id: str
    api_token: str = field(repr=False)
    role: Role
    token_id: Optional[str] = None

    @property
    def is_root(self) -> bool:
        return self.role is Role.ROOT


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthResolver:
    """Turn ``PresentedCredentials`` into an ``Identity`` or raise ``AuthError``."""

    def __init__(
        self,
        store: CredentialStore,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._clock = clock

    def resolve(self, presented: PresentedCredentials) -> Identity:
        # A delegated token takes precedence over root credentials sent alongside it.
        if presented.login_token:
            return self._resolve_delegated(presented.login_token)

        if presented.account_id and presented.api_token:
            return Identity(
                account_id=presented.account_id,
                api_token=presented.api_token,
                role=Role.ROOT,
            )
        raise MissingCredentials()

    def _resolve_delegated(self, secret: str) -> Identity:
        self._store.require_configured()
        if not TokenCodec.looks_like_token(secret):
            raise TokenNotFound()

        presented = secret.encode("utf-8")
        match = next(
            (
                token
                for token in self._store.list_all()
                if hmac.compare_digest(token.token.encode("utf-8"), presented)
            ),
            None,
        )
        if match is None:
            raise TokenNotFound()
        if match.is_expired(self._clock()):
            logger.info("Rejected expired delegated token %s", match.id)
            raise TokenExpired()

        return Identity(
            account_id=match.bound_account_id,
            api_token=match.bound_api_token,
            role=Role.DELEGATED,
            token_id=match.id,
        )


__all__ = ["AuthResolver", "Identity", "PresentedCredentials", "Role"]
