"""Persistence for cached AI insights."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Attr, Key

from spendwise.db.dynamo import DynamoTable
from spendwise.utils.timeutils import to_iso

logger = logging.getLogger(__name__)

# Sorts after any ISO timestamp character.
_KEY_CEILING = "~"


def insight_key(insight_type: str, created_at: datetime, insight_id: str) -> str:
    return f"{insight_type}#{to_iso(created_at)}#{insight_id[:8]}"


class InsightStore:
    """
    Insights keyed by (user_id, insight_key). Entries accumulate; removal is
    driven by the ``ttl`` attribute (DynamoDB TTL) and ``purge_expired``.
    """

    def __init__(self, table: DynamoTable):
        self.table = table

    def put(self, insight: Dict[str, Any]) -> Dict[str, Any]:
        self.table.put_item(insight)
        return insight

    def latest(
        self,
        user_id: str,
        insight_type: str,
        created_after: datetime,
        now: datetime,
    ) -> Optional[Dict[str, Any]]:
        """Most recent entry of a type created at or after ``created_after`` and expiring after ``now``."""
        key_condition = Key("user_id").eq(user_id) & Key("insight_key").between(
            f"{insight_type}#{to_iso(created_after)}",
            f"{insight_type}#{_KEY_CEILING}",
        )
        items = self.table.query_all(
            key_condition,
            filter_expression=Attr("expires_at").gt(to_iso(now)),
            scan_forward=False,
        )
        return items[0] if items else None

    def active(self, user_id: str, now: datetime, limit: int = 10) -> List[Dict[str, Any]]:
        items = self.table.query_all(
            Key("user_id").eq(user_id),
            filter_expression=Attr("expires_at").gt(to_iso(now)),
        )
        items.sort(key=lambda item: item["created_at"], reverse=True)
        return items[:limit]

    def purge_expired(self, now: datetime) -> int:
        expired = self.table.scan_all(Attr("expires_at").lte(to_iso(now)))
        if expired:
            self.table.batch_delete(
                [{"user_id": item["user_id"], "insight_key": item["insight_key"]} for item in expired]
            )
        return len(expired)
