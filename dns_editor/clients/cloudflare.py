"""
Thin async client for the Cloudflare v4 DNS API.

Remote rejections never raise: every call returns a ``ProviderResponse`` that
carries the success flag and the provider's ordered error list, so callers
can decide whether a failure is fatal or just one entry in a batch report.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from dns_editor.core.config import CloudflareSettings
from dns_editor.core.errors import ProviderError, TransportError
from dns_editor.utils.http import RetryConfig, send_with_retry

logger = logging.getLogger(__name__)

PERMISSION_MESSAGE = "API token is invalid or lacks DNS edit permission."
NON_JSON_AUTH_MESSAGE = "API token is invalid or lacks permission (Zone:Edit required)."

_PERMISSION_PATTERN = re.compile(r"invalid access token|permission", re.IGNORECASE)


@dataclass
class ProviderResponse:
    """Outcome of one provider call."""

    ok: bool
    status_code: Optional[int]
    success: bool
    result: Any = None
    errors: List[Dict[str, Any]] = field(default_factory=list)
    transport_failed: bool = False

    @property
    def succeeded(self) -> bool:
        return self.ok and self.success

    @property
    def message(self) -> str:
        """Primary error message, i.e. the first entry."""
        if self.errors:
            return str(self.errors[0].get("message") or "Unknown provider error.")
        return "Unknown provider error."

    def raise_for_failure(self) -> None:
        if self.succeeded:
            return
        if self.transport_failed:
            raise TransportError(self.message)
        raise ProviderError(self.message, errors=self.errors)


def _normalize_errors(raw: Any) -> List[Dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    errors: List[Dict[str, Any]] = []
    for entry in raw:
        if isinstance(entry, dict):
            errors.append({**entry, "message": str(entry.get("message") or "")})
        else:
            errors.append({"message": str(entry)})
    return errors


def _rewrite_permission_error(errors: List[Dict[str, Any]]) -> None:
    if errors and _PERMISSION_PATTERN.search(errors[0]["message"]):
        errors[0] = {**errors[0], "message": PERMISSION_MESSAGE}


def interpret_response(response: httpx.Response) -> ProviderResponse:
    """Convert a raw HTTP response into a ``ProviderResponse``."""
    status_code = response.status_code
    ok = response.is_success
    try:
        data = response.json()
    except ValueError:
        data = None

    if not isinstance(data, dict):
        if status_code in (HTTPStatus.BAD_REQUEST, HTTPStatus.FORBIDDEN):
            message = NON_JSON_AUTH_MESSAGE
        else:
            message = f"Unexpected API response: {response.text[:50]}"
        return ProviderResponse(
            ok=ok, status_code=status_code, success=False, errors=[{"message": message}]
        )

    success = bool(data.get("success"))
    errors = _normalize_errors(data.get("errors"))
    if not success:
        if not errors:
            errors = [{"message": f"Provider request failed with HTTP {status_code}."}]
        _rewrite_permission_error(errors)
    return ProviderResponse(
        ok=ok,
        status_code=status_code,
        success=success,
        result=data.get("result"),
        errors=errors,
    )


class CloudflareClient:
    """Issue DNS calls on behalf of one resolved API credential."""

    def __init__(
        self,
        api_token: str,
        settings: CloudflareSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_token = api_token
        self._settings = settings
        self._transport = transport
        self._read_retry = RetryConfig(attempts=settings.read_attempts)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> ProviderResponse:
        headers = {"Authorization": f"Bearer {self._api_token}"}
        try:
            async with httpx.AsyncClient(
                base_url=self._settings.api_base_url,
                headers=headers,
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                if method == "GET":
                    response = await send_with_retry(
                        client.request,
                        method,
                        path,
                        params=params,
                        retry_config=self._read_retry,
                    )
                else:
                    response = await client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            detail = str(exc) or exc.__class__.__name__
            logger.warning("Cloudflare %s %s failed: %s", method, path, detail)
            return ProviderResponse(
                ok=False,
                status_code=None,
                success=False,
                errors=[{"message": f"Network request failed: {detail}"}],
                transport_failed=True,
            )
        return interpret_response(response)

    async def verify(self, account_id: str) -> ProviderResponse:
        """Check that the credential can read zones of ``account_id``."""
        return await self._request(
            "GET", "/zones", params={"account.id": account_id, "per_page": 1}
        )

    async def list_zones(self, account_id: str) -> ProviderResponse:
        return await self._request(
            "GET",
            "/zones",
            params={"account.id": account_id, "per_page": self._settings.page_size},
        )

    async def list_records(self, zone_id: str) -> ProviderResponse:
        return await self._request(
            "GET",
            f"/zones/{quote(zone_id, safe='')}/dns_records",
            params={"per_page": self._settings.page_size},
        )

    async def create_record(self, zone_id: str, payload: Dict[str, Any]) -> ProviderResponse:
        return await self._request(
            "POST", f"/zones/{quote(zone_id, safe='')}/dns_records", json=payload
        )

    async def update_record(
        self, zone_id: str, record_id: str, payload: Dict[str, Any]
    ) -> ProviderResponse:
        return await self._request(
            "PUT",
            f"/zones/{quote(zone_id, safe='')}/dns_records/{quote(record_id, safe='')}",
            json=payload,
        )

    async def delete_record(self, zone_id: str, record_id: str) -> ProviderResponse:
        return await self._request(
            "DELETE",
            f"/zones/{quote(zone_id, safe='')}/dns_records/{quote(record_id, safe='')}",
        )


__all__ = [
    "CloudflareClient",
    "NON_JSON_AUTH_MESSAGE",
    "PERMISSION_MESSAGE",
    "ProviderResponse",
    "interpret_response",
]
