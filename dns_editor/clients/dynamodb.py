"""
DynamoDB-backed blob store for the delegated token list.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import boto3

from dns_editor.core.config import StorageSettings


class DynamoDBBlobStore:
    """Keep one JSON document per key in a DynamoDB table with a ``pk`` hash key."""

    def __init__(self, settings: StorageSettings, table: Any = None) -> None:
        self._settings = settings
        if table is None:
            resource = boto3.resource("dynamodb", region_name=settings.region_name)
            table = resource.Table(settings.dynamodb_table_name)
        self._table = table

    def get(self, key: str) -> Optional[Any]:
        """Return the decoded document stored under ``key``."""
        response = self._table.get_item(Key={"pk": key})
        item = response.get("Item")
        if not item:
            return None
        return json.loads(item["data"])

    def put(self, key: str, value: Any) -> None:
        """Replace the document stored under ``key``."""
        self._table.put_item(Item={"pk": key, "data": json.dumps(value)})


__all__ = ["DynamoDBBlobStore"]
