"""Public schema exports."""

from .dns import RECORD_TYPES, DesiredRecord, DnsRecord, parse_desired_records
from .tokens import TokenIssueRequest, TokenSummary

__all__ = [
    "DesiredRecord",
    "DnsRecord",
    "RECORD_TYPES",
    "TokenIssueRequest",
    "TokenSummary",
    "parse_desired_records",
]
