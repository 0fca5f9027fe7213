"""
Reconciliation of a desired record set against the records a zone holds.

A pass always starts from a fresh listing of the zone, deletes every remote
record whose id the desired set no longer mentions, then walks the desired
set in order creating records without a known id and updating records whose
normalized fields differ. Calls are issued one at a time. A failed call is
recorded and the pass moves on; only the initial listing aborts a pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from dns_editor.clients.cloudflare import ProviderResponse
from dns_editor.schemas.dns import DesiredRecord, DnsRecord, parse_desired_records

logger = logging.getLogger(__name__)

_ACTION_VERBS = {"create": "Create", "update": "Update", "delete": "Delete"}


class RecordProvider(Protocol):
    async def list_records(self, zone_id: str) -> ProviderResponse: ...

    async def create_record(self, zone_id: str, payload: Dict[str, Any]) -> ProviderResponse: ...

    async def update_record(
        self, zone_id: str, record_id: str, payload: Dict[str, Any]
    ) -> ProviderResponse: ...

    async def delete_record(self, zone_id: str, record_id: str) -> ProviderResponse: ...


@dataclass
class ReconcileError:
    """One provider call that failed during a pass."""

    action: str
    name: str
    message: str
    record_id: Optional[str] = None

    def describe(self) -> str:
        return f"{_ACTION_VERBS[self.action]} {self.name} failed: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "name": self.name,
            "record_id": self.record_id,
            "message": self.describe(),
        }


@dataclass
class Outcome:
    """Result of one reconciliation pass."""

    created: int = 0
    updated: int = 0
    deleted: int = 0
    unchanged: int = 0
    errors: List[ReconcileError] = field(default_factory=list)

    @property
    def applied(self) -> int:
        return self.created + self.updated + self.deleted

    @property
    def succeeded(self) -> bool:
        return not self.errors

    def summary(self) -> str:
        if self.errors:
            lines = "\n".join(error.describe() for error in self.errors)
            return f"Sync finished with errors:\n{lines}"
        return f"DNS sync complete: {self.applied} change(s) applied."

    def to_dict(self) -> Dict[str, Any]:
        return {
            "applied": self.applied,
            "created": self.created,
            "updated": self.updated,
            "deleted": self.deleted,
            "unchanged": self.unchanged,
            "errors": [error.to_dict() for error in self.errors],
        }


def _coerce_desired(desired: Any) -> List[DesiredRecord]:
    if isinstance(desired, tuple):
        desired = list(desired)
    if isinstance(desired, list):
        desired = [
            record.model_dump() if isinstance(record, DnsRecord) else record
            for record in desired
        ]
    return parse_desired_records(desired)


class ReconciliationEngine:
    """Converge a zone onto a desired record set through a ``RecordProvider``."""

    def __init__(self, provider: RecordProvider) -> None:
        self._provider = provider

    async def fetch_current(self, zone_id: str) -> List[DnsRecord]:
        """List the zone's records, raising if the provider cannot supply them."""
        response = await self._provider.list_records(zone_id)
        response.raise_for_failure()
        return [DnsRecord.model_validate(item) for item in response.result or []]

    async def reconcile(self, zone_id: str, desired: Any) -> Outcome:
        records = _coerce_desired(desired)
        current = await self.fetch_current(zone_id)

        current_by_id = {record.id: record for record in current if record.id}
        desired_ids = {record.id for record in records if record.id}
        outcome = Outcome()

        for record_id, record in current_by_id.items():
            if record_id in desired_ids:
                continue
            response = await self._provider.delete_record(zone_id, record_id)
            if self._record(outcome, "delete", record, response):
                outcome.deleted += 1

        for record in records:
            payload = record.payload()
            existing = current_by_id.get(record.id) if record.id else None
            if existing is not None:
                if existing.payload() == payload:
                    outcome.unchanged += 1
                    continue
                response = await self._provider.update_record(zone_id, record.id, payload)
                if self._record(outcome, "update", record, response):
                    outcome.updated += 1
            else:
                response = await self._provider.create_record(zone_id, payload)
                if self._record(outcome, "create", record, response):
                    outcome.created += 1

        logger.info(
            "Reconciled zone %s: %s created, %s updated, %s deleted, %s unchanged, %s failed",
            zone_id,
            outcome.created,
            outcome.updated,
            outcome.deleted,
            outcome.unchanged,
            len(outcome.errors),
        )
        return outcome

    @staticmethod
    def _record(
        outcome: Outcome, action: str, record: DnsRecord, response: ProviderResponse
    ) -> bool:
        if response.succeeded:
            return True
        logger.warning("%s of %s failed: %s", action, record.name, response.message)
        outcome.errors.append(
            ReconcileError(
                action=action,
                name=record.name,
                message=response.message,
                record_id=record.id,
            )
        )
        return False


__all__ = [
    "Outcome",
    "ReconcileError",
    "ReconciliationEngine",
    "RecordProvider",
]
