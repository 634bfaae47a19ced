import logging
from decimal import Decimal
from functools import lru_cache
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError

from spendwise.core.config import settings
from spendwise.core.exceptions import DatabaseError

logger = logging.getLogger(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


class ConditionFailed(Exception):
    """A conditional write was rejected by DynamoDB."""


@lru_cache
def get_dynamodb():
    """Shared DynamoDB resource (a local endpoint can be configured for development)."""
    kwargs: Dict[str, Any] = {"region_name": settings.DYNAMO_REGION}
    if settings.DYNAMO_ENDPOINT_URL:
        kwargs["endpoint_url"] = settings.DYNAMO_ENDPOINT_URL
    return boto3.resource("dynamodb", **kwargs)


class DynamoTable:
    """Thin wrapper over a boto3 Table: numeric conversion, pagination, error mapping."""

    def __init__(self, table):
        self.table = table
        self.name = table.name

    def put_item(self, item: Dict[str, Any], condition: Optional[Any] = None) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"Item": _convert_for_dynamo(item)}
        if condition is not None:
            kwargs["ConditionExpression"] = condition
        self._call("put_item", **kwargs)
        return item

    def get_item(self, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        response = self._call("get_item", Key=key)
        item = response.get("Item")
        return _from_dynamo(item) if item else None

    def update_item(self, key: Dict[str, Any], updates: Dict[str, Any], condition: Optional[Any] = None) -> Dict[str, Any]:
        """Apply a SET of the given fields and return the full updated item."""
        update_expression_parts = []
        expression_attribute_values = {}
        expression_attribute_names = {}

        for idx, (field, value) in enumerate(updates.items()):
            placeholder = f"#f{idx}"
            value_placeholder = f":v{idx}"
            update_expression_parts.append(f"{placeholder} = {value_placeholder}")
            expression_attribute_names[placeholder] = field
            expression_attribute_values[value_placeholder] = value

        kwargs: Dict[str, Any] = {
            "Key": key,
            "UpdateExpression": "SET " + ", ".join(update_expression_parts),
            "ExpressionAttributeNames": expression_attribute_names,
            "ExpressionAttributeValues": _convert_for_dynamo(expression_attribute_values),
            "ReturnValues": "ALL_NEW",
        }
        if condition is not None:
            kwargs["ConditionExpression"] = condition

        response = self._call("update_item", **kwargs)
        return _from_dynamo(response.get("Attributes", {}))

    def delete_item(self, key: Dict[str, Any], condition: Optional[Any] = None) -> None:
        kwargs: Dict[str, Any] = {"Key": key}
        if condition is not None:
            kwargs["ConditionExpression"] = condition
        self._call("delete_item", **kwargs)

    def query_all(
        self,
        key_condition: Any,
        filter_expression: Optional[Any] = None,
        index_name: Optional[str] = None,
        scan_forward: bool = True,
    ) -> List[Dict[str, Any]]:
        """Run a query and follow LastEvaluatedKey until the result set is exhausted."""
        kwargs: Dict[str, Any] = {
            "KeyConditionExpression": key_condition,
            "ScanIndexForward": scan_forward,
        }
        if filter_expression is not None:
            kwargs["FilterExpression"] = filter_expression
        if index_name:
            kwargs["IndexName"] = index_name
        return self._paginate("query", kwargs)

    def scan_all(self, filter_expression: Optional[Any] = None) -> List[Dict[str, Any]]:
        kwargs: Dict[str, Any] = {}
        if filter_expression is not None:
            kwargs["FilterExpression"] = filter_expression
        return self._paginate("scan", kwargs)

    def batch_delete(self, keys: List[Dict[str, Any]]) -> None:
        try:
            with self.table.batch_writer() as batch:
                for key in keys:
                    batch.delete_item(Key=key)
        except ClientError as e:
            logger.error(f"[{self.name}] batch_delete failed: {e.response['Error']['Message']}")
            raise DatabaseError(f"Failed to batch delete items: {e.response['Error']['Message']}")

    def _paginate(self, operation: str, kwargs: Dict[str, Any]) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        while True:
            response = self._call(operation, **kwargs)
            items.extend(_from_dynamo(item) for item in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    def _call(self, operation: str, **kwargs) -> Dict[str, Any]:
        try:
            return getattr(self.table, operation)(**kwargs)
        except ClientError as e:
            if e.response["Error"]["Code"] == CONDITIONAL_CHECK_FAILED:
                raise ConditionFailed(operation)
            logger.error(f"[{self.name}] {operation} failed: {e.response['Error']['Message']}")
            raise DatabaseError(f"Failed to {operation.replace('_', ' ')}: {e.response['Error']['Message']}")


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal for DynamoDB compatibility.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_convert_for_dynamo(v) for v in obj]
    return obj


def _from_dynamo(obj: Any):
    """
    Recursively convert Decimal instances back to native Python numeric types.
    """
    if isinstance(obj, list):
        return [_from_dynamo(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj


TABLE_DEFINITIONS: Dict[str, Dict[str, Any]] = {
    "users": {
        "KeySchema": [{"AttributeName": "user_id", "KeyType": "HASH"}],
        "AttributeDefinitions": [
            {"AttributeName": "user_id", "AttributeType": "S"},
            {"AttributeName": "email", "AttributeType": "S"},
        ],
        "GlobalSecondaryIndexes": [
            {
                "IndexName": "email-index",
                "KeySchema": [{"AttributeName": "email", "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
    },
    "expenses": {
        "KeySchema": [
            {"AttributeName": "user_id", "KeyType": "HASH"},
            {"AttributeName": "expense_id", "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "user_id", "AttributeType": "S"},
            {"AttributeName": "expense_id", "AttributeType": "S"},
            {"AttributeName": "date", "AttributeType": "S"},
        ],
        "GlobalSecondaryIndexes": [
            {
                "IndexName": "user-date-index",
                "KeySchema": [
                    {"AttributeName": "user_id", "KeyType": "HASH"},
                    {"AttributeName": "date", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
    },
    # budget_key = "<YYYY-MM>#<category>": one budget per user, month and category
    "budgets": {
        "KeySchema": [
            {"AttributeName": "user_id", "KeyType": "HASH"},
            {"AttributeName": "budget_key", "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "user_id", "AttributeType": "S"},
            {"AttributeName": "budget_key", "AttributeType": "S"},
        ],
    },
    # insight_key = "<insight_type>#<created_at ISO>#<short id>"
    "insights": {
        "KeySchema": [
            {"AttributeName": "user_id", "KeyType": "HASH"},
            {"AttributeName": "insight_key", "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "user_id", "AttributeType": "S"},
            {"AttributeName": "insight_key", "AttributeType": "S"},
        ],
        "TimeToLiveAttribute": "ttl",
    },
}


def table_names() -> Dict[str, str]:
    return {
        "users": settings.DYNAMO_USERS_TABLE,
        "expenses": settings.DYNAMO_EXPENSES_TABLE,
        "budgets": settings.DYNAMO_BUDGETS_TABLE,
        "insights": settings.DYNAMO_INSIGHTS_TABLE,
    }


def get_table(kind: str) -> DynamoTable:
    return DynamoTable(get_dynamodb().Table(table_names()[kind]))


def ensure_tables() -> List[str]:
    """
    Create any missing tables (local development and tests).
    Returns the names of the tables that were created.
    """
    dynamodb = get_dynamodb()
    client = dynamodb.meta.client
    existing = set(client.list_tables().get("TableNames", []))
    created = []

    for kind, table_name in table_names().items():
        if table_name in existing:
            continue
        definition = dict(TABLE_DEFINITIONS[kind])
        ttl_attribute = definition.pop("TimeToLiveAttribute", None)
        table = dynamodb.create_table(TableName=table_name, BillingMode="PAY_PER_REQUEST", **definition)
        table.wait_until_exists()
        if ttl_attribute:
            client.update_time_to_live(
                TableName=table_name,
                TimeToLiveSpecification={"Enabled": True, "AttributeName": ttl_attribute},
            )
        logger.info(f"Created DynamoDB table {table_name}")
        created.append(table_name)

    return created
