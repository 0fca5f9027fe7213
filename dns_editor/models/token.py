"""
Domain model for delegated access tokens.

Rows use the camelCase field names the token list has always been stored
with, so blobs written by earlier deployments keep loading.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

NEVER_EXPIRES = -1


def now_millis(now: Optional[datetime] = None) -> int:
    moment = now or datetime.now(timezone.utc)
    return int(moment.timestamp() * 1000)


class DelegatedToken(BaseModel):
    """A bearer token bound to one root provider identity."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., description="Stable unique identifier.")
    token: str = Field(..., description="Opaque bearer secret.")
    created: int = Field(..., description="Creation time in epoch milliseconds.")
    expiry: int = Field(
        NEVER_EXPIRES,
        description="Expiry in epoch milliseconds, or -1 when the token never expires.",
    )
    bound_account_id: str = Field(
        ...,
        serialization_alias="boundAccountId",
        validation_alias=AliasChoices(
            "boundAccountId", "boundaccountid", "bound_account_id"
        ),
    )
    bound_api_token: str = Field(
        ...,
        serialization_alias="boundApiToken",
        validation_alias=AliasChoices(
            "boundApiToken", "boundapitoken", "bound_api_token"
        ),
    )

    @property
    def never_expires(self) -> bool:
        return self.expiry == NEVER_EXPIRES

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.created / 1000, tz=timezone.utc)

    @property
    def expires_at(self) -> Optional[datetime]:
        if self.never_expires:
            return None
        return datetime.fromtimestamp(self.expiry / 1000, tz=timezone.utc)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Return True once the current time is strictly past the expiry."""
        if self.never_expires:
            return False
        return now_millis(now) > self.expiry

    def to_row(self) -> Dict[str, Any]:
        """Serialize to the storage row shape shared by both backends."""
        return self.model_dump(by_alias=True)


__all__ = ["DelegatedToken", "NEVER_EXPIRES", "now_millis"]
