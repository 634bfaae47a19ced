"""Expense persistence."""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Attr, Key

from spendwise.core.exceptions import NotFoundError
from spendwise.db.dynamo import ConditionFailed, DynamoTable
from spendwise.utils.timeutils import to_iso, utcnow

logger = logging.getLogger(__name__)

DATE_INDEX = "user-date-index"


class ExpenseStore:
    """Expenses keyed by (user_id, expense_id) with a (user_id, date) index for range reads."""

    def __init__(self, table: DynamoTable):
        self.table = table

    def create(self, user_id: str, amount: float, category: str, description: str, date: datetime) -> Dict[str, Any]:
        now = to_iso(utcnow())
        expense = {
            "user_id": user_id,
            "expense_id": str(uuid.uuid4()),
            "amount": amount,
            "category": category,
            "description": description,
            "date": to_iso(date),
            "created_at": now,
            "updated_at": now,
        }
        self.table.put_item(expense)
        logger.info(f"Created expense {expense['expense_id']} for user {user_id}")
        return expense

    def get(self, user_id: str, expense_id: str) -> Dict[str, Any]:
        expense = self.table.get_item({"user_id": user_id, "expense_id": expense_id})
        if not expense:
            raise NotFoundError("Expense not found")
        return expense

    def list(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        category: Optional[str] = None,
        newest_first: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        All of a user's expenses ordered by date, optionally limited to [start, end]
        (inclusive) and a single category.
        """
        key_condition = Key("user_id").eq(user_id)
        if start and end:
            key_condition = key_condition & Key("date").between(to_iso(start), to_iso(end))
        elif start:
            key_condition = key_condition & Key("date").gte(to_iso(start))
        elif end:
            key_condition = key_condition & Key("date").lte(to_iso(end))

        filter_expression = Attr("category").eq(category) if category else None

        return self.table.query_all(
            key_condition,
            filter_expression=filter_expression,
            index_name=DATE_INDEX,
            scan_forward=not newest_first,
        )

    def update(self, user_id: str, expense_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        fields = dict(updates)
        if isinstance(fields.get("date"), datetime):
            fields["date"] = to_iso(fields["date"])
        fields["updated_at"] = to_iso(utcnow())
        try:
            updated = self.table.update_item(
                {"user_id": user_id, "expense_id": expense_id},
                fields,
                condition=Attr("expense_id").exists(),
            )
        except ConditionFailed:
            raise NotFoundError("Expense not found")
        logger.info(f"Updated expense {expense_id}")
        return updated

    def delete(self, user_id: str, expense_id: str) -> None:
        try:
            self.table.delete_item(
                {"user_id": user_id, "expense_id": expense_id},
                condition=Attr("expense_id").exists(),
            )
        except ConditionFailed:
            raise NotFoundError("Expense not found")
        logger.info(f"Deleted expense {expense_id}")
