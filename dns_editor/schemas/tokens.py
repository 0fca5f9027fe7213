"""Schemas exposed by the delegated token endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from dns_editor.models import DelegatedToken

MASKED_CREDENTIAL = "***"


class TokenIssueRequest(BaseModel):
    """Payload for issuing a new delegated token."""

    expiry_days: Optional[int] = Field(
        None,
        description="Lifetime in days. Zero, negative or omitted means the token never expires.",
    )


class TokenSummary(BaseModel):
    """Listing view of a stored token with the bound credential masked."""

    id: str
    token: str
    created: int
    expiry: int
    bound_account_id: str = Field(..., serialization_alias="boundAccountId")
    bound_api_token: str = Field(MASKED_CREDENTIAL, serialization_alias="boundApiToken")
    is_expired: bool = Field(..., serialization_alias="isExpired")

    @classmethod
    def from_token(cls, token: DelegatedToken, *, expired: bool) -> "TokenSummary":
        return cls(
            id=token.id,
            token=token.token,
            created=token.created,
            expiry=token.expiry,
            bound_account_id=token.bound_account_id,
            is_expired=expired,
        )


__all__ = ["MASKED_CREDENTIAL", "TokenIssueRequest", "TokenSummary"]
