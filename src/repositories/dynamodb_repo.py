"""DynamoDB repository for shared rate-limit counters."""

from typing import Any, Optional

import boto3


class DynamoDbRepository:
    """Provide basic counter helpers keyed by (pk, sk)."""

    def __init__(self, table_name: str, resource: Optional[Any] = None):
        self.table = (resource or boto3.resource("dynamodb")).Table(table_name)

    def get_count(self, pk: str, sk: str) -> int:
        """Read a counter, treating a missing item as zero."""
        resp = self.table.get_item(Key={"pk": pk, "sk": sk}, ConsistentRead=True)
        item = resp.get("Item") or {}
        return int(item.get("count", 0))

    def increment(self, pk: str, sk: str, expires_at: int) -> int:
        """Atomically add one to a counter and refresh its TTL."""
        resp = self.table.update_item(
            Key={"pk": pk, "sk": sk},
            UpdateExpression="ADD #count :one SET expires_at = :expires_at",
            ExpressionAttributeNames={"#count": "count"},
            ExpressionAttributeValues={":one": 1, ":expires_at": expires_at},
            ReturnValues="UPDATED_NEW",
        )
        return int(resp.get("Attributes", {}).get("count", 0))
