"""Request-scoped identity resolution."""

from __future__ import annotations

from typing import Annotated, Any, Optional

from fastapi import Depends, Header, Query

from dns_editor.services import AuthResolver, Identity, PresentedCredentials, TokenCodec

from .clients import ProviderFactory, get_auth_resolver, get_provider_factory

_BEARER_PREFIX = "bearer "


def presented_credentials(
    x_account_id: Annotated[Optional[str], Header()] = None,
    x_api_token: Annotated[Optional[str], Header()] = None,
    x_login_token: Annotated[Optional[str], Header()] = None,
    authorization: Annotated[Optional[str], Header()] = None,
    login_token: Annotated[
        Optional[str], Query(description="Delegated token, for links and scripts.")
    ] = None,
) -> PresentedCredentials:
    """Collect credentials from headers, a bearer token or the query string."""
    api_token = x_api_token
    delegated = x_login_token or login_token
    if authorization and authorization.lower().startswith(_BEARER_PREFIX):
        bearer = authorization[len(_BEARER_PREFIX):].strip()
        if TokenCodec.looks_like_token(bearer):
            delegated = delegated or bearer
        else:
            api_token = api_token or bearer
    return PresentedCredentials(
        account_id=x_account_id,
        api_token=api_token,
        login_token=delegated,
    )


def get_identity(
    presented: Annotated[PresentedCredentials, Depends(presented_credentials)],
    resolver: Annotated[AuthResolver, Depends(get_auth_resolver)],
) -> Identity:
    """FastAPI dependency resolving the caller's effective identity."""
    return resolver.resolve(presented)


def get_provider(
    identity: Annotated[Identity, Depends(get_identity)],
    factory: Annotated[ProviderFactory, Depends(get_provider_factory)],
) -> Any:
    """Provider client authorized with the caller's effective credential."""
    return factory(identity)


__all__ = ["get_identity", "get_provider", "presented_credentials"]
