"""Budget persistence. The sort key "<month>#<category>" makes
(user, category, month) unique at the storage layer."""

import logging
import uuid
from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Attr, Key

from spendwise.core.exceptions import ConflictError, NotFoundError
from spendwise.db.dynamo import ConditionFailed, DynamoTable
from spendwise.utils.timeutils import to_iso, utcnow

logger = logging.getLogger(__name__)


def budget_key(month: str, category: str) -> str:
    return f"{month}#{category}"


class BudgetStore:

    def __init__(self, table: DynamoTable):
        self.table = table

    def get(self, user_id: str, category: str, month: str) -> Optional[Dict[str, Any]]:
        return self.table.get_item({"user_id": user_id, "budget_key": budget_key(month, category)})

    def insert(self, user_id: str, category: str, month: str, monthly_limit: float) -> Dict[str, Any]:
        """Create a budget; raises ConflictError if one already exists for the month and category."""
        now = to_iso(utcnow())
        budget = {
            "user_id": user_id,
            "budget_key": budget_key(month, category),
            "budget_id": str(uuid.uuid4()),
            "category": category,
            "month": month,
            "monthly_limit": monthly_limit,
            "created_at": now,
            "updated_at": now,
        }
        try:
            self.table.put_item(budget, condition=Attr("budget_key").not_exists())
        except ConditionFailed:
            raise ConflictError(f"Budget for {category} in {month} already exists")
        logger.info(f"Created budget {budget['budget_id']} ({category}, {month}) for user {user_id}")
        return budget

    def update_limit(self, user_id: str, key: str, monthly_limit: float) -> Dict[str, Any]:
        try:
            updated = self.table.update_item(
                {"user_id": user_id, "budget_key": key},
                {"monthly_limit": monthly_limit, "updated_at": to_iso(utcnow())},
                condition=Attr("budget_key").exists(),
            )
        except ConditionFailed:
            raise NotFoundError("Budget not found")
        logger.info(f"Updated budget {key} for user {user_id}")
        return updated

    def list(self, user_id: str, month: Optional[str] = None) -> List[Dict[str, Any]]:
        """Budgets sorted by month (newest first) then category."""
        key_condition = Key("user_id").eq(user_id)
        if month:
            key_condition = key_condition & Key("budget_key").begins_with(f"{month}#")
        budgets = self.table.query_all(key_condition)
        budgets.sort(key=lambda b: b["category"])
        budgets.sort(key=lambda b: b["month"], reverse=True)
        return budgets

    def find_by_id(self, user_id: str, budget_id: str) -> Dict[str, Any]:
        matches = self.table.query_all(
            Key("user_id").eq(user_id),
            filter_expression=Attr("budget_id").eq(budget_id),
        )
        if not matches:
            raise NotFoundError("Budget not found")
        return matches[0]

    def delete(self, user_id: str, key: str) -> None:
        try:
            self.table.delete_item(
                {"user_id": user_id, "budget_key": key},
                condition=Attr("budget_key").exists(),
            )
        except ConditionFailed:
            raise NotFoundError("Budget not found")
        logger.info(f"Deleted budget {key} for user {user_id}")
