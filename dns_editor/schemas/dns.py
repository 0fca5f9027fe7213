"""Schemas describing DNS records on both sides of a reconciliation."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from dns_editor.core.errors import ValidationError

AUTO_TTL = 1

RECORD_TYPES = frozenset(
    {
        "A",
        "AAAA",
        "CAA",
        "CERT",
        "CNAME",
        "DNSKEY",
        "DS",
        "HTTPS",
        "LOC",
        "MX",
        "NAPTR",
        "NS",
        "OPENPGPKEY",
        "PTR",
        "SMIMEA",
        "SRV",
        "SSHFP",
        "SVCB",
        "TLSA",
        "TXT",
        "URI",
    }
)


class DnsRecord(BaseModel):
    """A record as returned by the provider or edited by an operator."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = Field(None, description="Provider-assigned identifier.")
    type: str
    name: str
    content: str = ""
    ttl: Optional[int] = Field(None, description="Seconds; 1 means automatic.")
    proxied: Optional[bool] = None
    comment: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _blank_id_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def payload(self) -> Dict[str, Any]:
        """Return the normalized body sent to the provider and used for comparison."""
        return {
            "type": self.type,
            "name": self.name,
            "content": self.content,
            "ttl": self.ttl or AUTO_TTL,
            "proxied": bool(self.proxied),
            "comment": self.comment or "",
        }

    def listing(self) -> Dict[str, Any]:
        """Shape handed back to editors when records are fetched."""
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "content": self.content,
            "proxied": bool(self.proxied),
            "ttl": self.ttl,
            "comment": self.comment or "",
        }


class DesiredRecord(DnsRecord):
    """Operator-supplied record, validated before any remote call."""

    content: str

    @field_validator("type", mode="before")
    @classmethod
    def _known_type(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        normalized = value.strip().upper()
        if normalized not in RECORD_TYPES:
            raise ValueError(f"unsupported record type {value!r}")
        return normalized

    @field_validator("name", "content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("ttl")
    @classmethod
    def _non_negative_ttl(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("must not be negative")
        return value


_DESIRED_ADAPTER = TypeAdapter(List[DesiredRecord])


def parse_desired_records(raw: Any) -> List[DesiredRecord]:
    """Validate a caller-supplied record list, raising ``ValidationError`` on bad input."""
    if not isinstance(raw, list):
        raise ValidationError("Desired records must be a JSON array.")
    try:
        return _DESIRED_ADAPTER.validate_python(raw)
    except PydanticValidationError as exc:
        problems = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"])
            problems.append(f"record {location}: {error['msg']}")
        raise ValidationError("Invalid DNS records: " + "; ".join(problems)) from exc


__all__ = [
    "AUTO_TTL",
    "DesiredRecord",
    "DnsRecord",
    "RECORD_TYPES",
    "parse_desired_records",
]
