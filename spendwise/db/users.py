import logging
import uuid
from typing import Any, Dict, Optional

from boto3.dynamodb.conditions import Attr, Key

from spendwise.core.exceptions import ConflictError, NotFoundError
from spendwise.db.dynamo import ConditionFailed, DynamoTable
from spendwise.utils.timeutils import to_iso, utcnow

logger = logging.getLogger(__name__)


class UserStore:

    def __init__(self, table: DynamoTable):
        self.table = table

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Query the users table by email (GSI email-index)."""
        items = self.table.query_all(Key("email").eq(email.lower()), index_name="email-index")
        return items[0] if items else None

    def get(self, user_id: str) -> Dict[str, Any]:
        user = self.table.get_item({"user_id": user_id})
        if not user:
            raise NotFoundError("User not found")
        return user

    def create(self, name: str, email: str, password_hash: str) -> Dict[str, Any]:
        if self.get_by_email(email):
            raise ConflictError("User with this email already exists")
        user = {
            "user_id": str(uuid.uuid4()),
            "name": name,
            "email": email.lower(),
            "password_hash": password_hash,
            "created_at": to_iso(utcnow()),
        }
        try:
            self.table.put_item(user, condition=Attr("user_id").not_exists())
        except ConditionFailed:
            raise ConflictError("User already exists")
        logger.info(f"Registered user {user['user_id']}")
        return user

    def set_refresh_token(self, user_id: str, refresh_token: Optional[str]) -> None:
        self.table.update_item({"user_id": user_id}, {"refresh_token": refresh_token})
