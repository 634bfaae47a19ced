from enum import Enum
from typing import Any, Dict

from pydantic import ConfigDict

from spendwise.models.common import CamelModel

MAX_RESPONSE_LENGTH = 5000


class InsightType(str, Enum):
    SPENDING_ANALYSIS = "spending_analysis"
    BUDGET_OPTIMIZATION = "budget_optimization"
    PREDICTION = "prediction"
    GENERAL = "general"


class CachedInsight(CamelModel):
    # response text is returned exactly as stored
    model_config = ConfigDict(str_strip_whitespace=False)

    id: str
    insight_type: InsightType
    data_snapshot: Dict[str, Any]
    response: str
    created_at: str
    expires_at: str

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CachedInsight":
        return cls(
            id=record["insight_id"],
            insight_type=record["insight_type"],
            data_snapshot=record.get("data_snapshot") or {},
            response=record["response"],
            created_at=record["created_at"],
            expires_at=record["expires_at"],
        )
