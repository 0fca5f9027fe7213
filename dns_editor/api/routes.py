"""
FastAPI routes for the DNS editor.
"""

from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from dns_editor.core.errors import ValidationError
from dns_editor.dependencies import (
    get_delegated_token_service,
    get_identity,
    get_provider,
)
from dns_editor.schemas import TokenIssueRequest
from dns_editor.services import DelegatedTokenService, Identity, ReconciliationEngine

router = APIRouter()
logger = logging.getLogger(__name__)


def _desired_from_body(body: Any) -> Any:
    """Accept a bare record array, ``{"records": [...]}`` or the editor's ``{"code": "<json>"}``."""
    if isinstance(body, dict):
        if "code" in body:
            code = body["code"]
            if not isinstance(code, str):
                raise ValidationError("'code' must be a JSON string.")
            try:
                return json.loads(code)
            except json.JSONDecodeError as exc:
                raise ValidationError(
                    f"JSON parse failed, check the syntax: {exc.msg} (line {exc.lineno})."
                ) from exc
        if "records" in body:
            return body["records"]
    return body


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.post("/auth/verify", status_code=HTTPStatus.OK)
async def verify_login(
    identity: Annotated[Identity, Depends(get_identity)],
    provider: Annotated[Any, Depends(get_provider)],
) -> dict:
    """Confirm the effective credential can read the bound account's zones."""
    response = await provider.verify(identity.account_id)
    if not response.ok:
        response.raise_for_failure()
    return {"success": True, "role": identity.role.value}


@router.get("/zones", status_code=HTTPStatus.OK)
async def list_zones(
    identity: Annotated[Identity, Depends(get_identity)],
    provider: Annotated[Any, Depends(get_provider)],
) -> dict:
    response = await provider.list_zones(identity.account_id)
    response.raise_for_failure()
    return {"success": True, "result": response.result or []}


@router.get("/zones/{zone_id}/records", status_code=HTTPStatus.OK)
async def fetch_records(
    zone_id: str,
    provider: Annotated[Any, Depends(get_provider)],
) -> dict:
    """Return the zone's current records in editable form."""
    records = await ReconciliationEngine(provider).fetch_current(zone_id)
    return {"success": True, "result": [record.listing() for record in records]}


@router.post("/zones/{zone_id}/deploy")
async def deploy_records(
    zone_id: str,
    provider: Annotated[Any, Depends(get_provider)],
    body: Annotated[Any, Body()],
) -> JSONResponse:
    """
    Converge the zone onto the submitted record set.

    Partial failures are reported with 207 so callers see both what was
    applied and what was not.
    """
    outcome = await ReconciliationEngine(provider).reconcile(
        zone_id, _desired_from_body(body)
    )
    content = {
        "success": outcome.succeeded,
        "message": outcome.summary(),
        "result": outcome.to_dict(),
    }
    if outcome.succeeded:
        return JSONResponse(status_code=HTTPStatus.OK, content=content)
    content["errors"] = [{"message": outcome.summary()}]
    return JSONResponse(status_code=HTTPStatus.MULTI_STATUS, content=content)


@router.post("/tokens", status_code=HTTPStatus.CREATED)
async def issue_token(
    identity: Annotated[Identity, Depends(get_identity)],
    service: Annotated[DelegatedTokenService, Depends(get_delegated_token_service)],
    payload: Annotated[Optional[TokenIssueRequest], Body()] = None,
) -> dict:
    expiry_days = payload.expiry_days if payload else None
    token = service.issue(identity, expiry_days)
    return {"success": True, "result": token.to_row()}


@router.get("/tokens", status_code=HTTPStatus.OK)
async def list_tokens(
    identity: Annotated[Identity, Depends(get_identity)],
    service: Annotated[DelegatedTokenService, Depends(get_delegated_token_service)],
) -> dict:
    return {
        "success": True,
        "result": [summary.model_dump(by_alias=True) for summary in service.list_tokens()],
    }


@router.delete("/tokens/{token_id}", status_code=HTTPStatus.OK)
async def revoke_token(
    token_id: str,
    identity: Annotated[Identity, Depends(get_identity)],
    service: Annotated[DelegatedTokenService, Depends(get_delegated_token_service)],
) -> dict:
    service.revoke(token_id)
    return {"success": True}


__all__ = ["router"]
