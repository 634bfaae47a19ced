"""
Time-windowed cache of generated insight text, keyed by user and insight type.

An entry may be served only while both hold:
    now - created_at <= max_age   (per insight type)
    now < expires_at              (created_at + ttl)
Entries are never overwritten; expired ones are removed by the reaper job
and by DynamoDB TTL on the ``ttl`` attribute.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from spendwise.core.config import Settings
from spendwise.db.insights import InsightStore, insight_key
from spendwise.models.insight import MAX_RESPONSE_LENGTH, CachedInsight, InsightType
from spendwise.utils.timeutils import from_iso, to_iso, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachePolicy:
    max_age_hours: float
    ttl_hours: float


def policies_from_settings(settings: Settings) -> Dict[InsightType, CachePolicy]:
    return {
        InsightType.SPENDING_ANALYSIS: CachePolicy(
            settings.SPENDING_ANALYSIS_MAX_AGE_HOURS, settings.SPENDING_ANALYSIS_TTL_HOURS
        ),
        InsightType.BUDGET_OPTIMIZATION: CachePolicy(
            settings.BUDGET_OPTIMIZATION_MAX_AGE_HOURS, settings.BUDGET_OPTIMIZATION_TTL_HOURS
        ),
    }


def is_servable(insight: CachedInsight, max_age_hours: float, now: datetime) -> bool:
    created_at = from_iso(insight.created_at)
    expires_at = from_iso(insight.expires_at)
    return now - created_at <= timedelta(hours=max_age_hours) and now < expires_at


class InsightCache:

    def __init__(
        self,
        store: InsightStore,
        policies: Dict[InsightType, CachePolicy],
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.policies = policies
        self.clock = clock

    def policy(self, insight_type: InsightType) -> CachePolicy:
        return self.policies[insight_type]

    def find_recent(
        self,
        user_id: str,
        insight_type: InsightType,
        max_age_hours: Optional[float] = None,
    ) -> Optional[CachedInsight]:
        """Newest servable entry for the user and type, or None.

        ``max_age_hours=0`` only matches an entry created at the same clock instant.
        """
        if max_age_hours is None:
            max_age_hours = self.policy(insight_type).max_age_hours
        now = self.clock()
        record = self.store.latest(
            user_id,
            insight_type.value,
            created_after=now - timedelta(hours=max_age_hours),
            now=now,
        )
        if not record:
            return None
        insight = CachedInsight.from_record(record)
        return insight if is_servable(insight, max_age_hours, now) else None

    def store_insight(
        self,
        user_id: str,
        insight_type: InsightType,
        data_snapshot: Dict[str, Any],
        response: str,
        ttl_hours: Optional[float] = None,
    ) -> CachedInsight:
        if ttl_hours is None:
            ttl_hours = self.policy(insight_type).ttl_hours
        now = self.clock()
        expires_at = now + timedelta(hours=ttl_hours)
        insight_id = str(uuid.uuid4())

        record = {
            "user_id": user_id,
            "insight_key": insight_key(insight_type.value, now, insight_id),
            "insight_id": insight_id,
            "insight_type": insight_type.value,
            "data_snapshot": data_snapshot,
            "response": response[:MAX_RESPONSE_LENGTH],
            "created_at": to_iso(now),
            "expires_at": to_iso(expires_at),
            # DynamoDB TTL attribute, epoch seconds
            "ttl": int((expires_at - datetime(1970, 1, 1)).total_seconds()),
        }
        self.store.put(record)
        logger.info(f"Cached {insight_type.value} insight {insight_id} for user {user_id} ({ttl_hours}h)")
        return CachedInsight.from_record(record)

    def list_active(self, user_id: str, limit: int = 10) -> List[CachedInsight]:
        return [CachedInsight.from_record(r) for r in self.store.active(user_id, self.clock(), limit=limit)]

    def purge_expired(self) -> int:
        removed = self.store.purge_expired(self.clock())
        if removed:
            logger.info(f"Purged {removed} expired insights")
        return removed
