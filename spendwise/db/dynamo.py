import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from spendwise.core.config import settings

logger = logging.getLogger(__name__)

EMAIL_INDEX = "email-index"

_dynamodb = None


def get_resource():
    """Lazily create the DynamoDB resource so tests can swap the backend."""
    global _dynamodb
    if _dynamodb is None:
        _dynamodb = boto3.resource(
            "dynamodb",
            region_name=settings.DYNAMO_REGION,
            endpoint_url=settings.DYNAMO_ENDPOINT_URL,
        )
    return _dynamodb


def reset_resource():
    global _dynamodb
    _dynamodb = None


def users_table():
    return get_resource().Table(settings.DYNAMO_USERS_TABLE)


def expenses_table():
    return get_resource().Table(settings.DYNAMO_EXPENSES_TABLE)


def _error_message(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Message", str(e))


def _is_condition_failure(e: ClientError) -> bool:
    return e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

def get_user_by_email(email: str):
    """Query the Users table by (lower-cased) email through the email GSI."""
    try:
        response = users_table().query(
            IndexName=EMAIL_INDEX,
            KeyConditionExpression=Key("email").eq(email.strip().lower()),
        )
        return _from_dynamo(response["Items"][0]) if response["Items"] else None
    except ClientError as e:
        logger.error(f"get_user_by_email failed: {_error_message(e)}")
        return None


def get_user_by_id(user_id: str):
    """Get user by user_id from the Users table."""
    try:
        response = users_table().get_item(Key={"user_id": user_id})
        item = response.get("Item")
        return _from_dynamo(item) if item else None
    except ClientError as e:
        logger.error(f"get_user_by_id failed: {_error_message(e)}")
        return None


def put_user(user_item: dict) -> bool:
    """Insert a new user. Never overwrites an existing user_id."""
    try:
        users_table().put_item(
            Item=_convert_for_dynamo(user_item),
            ConditionExpression="attribute_not_exists(user_id)",
        )
        return True
    except ClientError as e:
        logger.error(f"put_user failed: {_error_message(e)}")
        return False


def update_user(user_id: str, updates: dict):
    """Apply partial updates to an existing user. Returns the updated item or None."""
    return _update_item(users_table(), {"user_id": user_id}, updates, "user_id")


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------

def put_expense(expense_item: dict) -> bool:
    """Insert a new expense for a user."""
    try:
        expenses_table().put_item(
            Item=_convert_for_dynamo(expense_item),
            ConditionExpression="attribute_not_exists(expense_id)",
        )
        return True
    except ClientError as e:
        logger.error(f"put_expense failed: {_error_message(e)}")
        return False


def get_expense(user_id: str, expense_id: str):
    """Fetch a single expense item owned by user_id."""
    try:
        response = expenses_table().get_item(Key={"user_id": user_id, "expense_id": expense_id})
        item = response.get("Item")
        return _from_dynamo(item) if item else None
    except ClientError as e:
        logger.error(f"get_expense failed: {_error_message(e)}")
        return None


def query_expenses(user_id: str, filter_condition=None) -> List[Dict[str, Any]]:
    """
    Return every expense of a user, optionally narrowed by a boto3 filter
    condition. Follows LastEvaluatedKey until the partition is exhausted.
    """
    kwargs: Dict[str, Any] = {"KeyConditionExpression": Key("user_id").eq(user_id)}
    if filter_condition is not None:
        kwargs["FilterExpression"] = filter_condition

    # ClientError propagates: a partial list would corrupt stats and pagination.
    items: List[Dict[str, Any]] = []
    while True:
        response = expenses_table().query(**kwargs)
        items.extend(response.get("Items", []))
        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            break
        kwargs["ExclusiveStartKey"] = last_key
    return [_from_dynamo(item) for item in items]


def update_expense(user_id: str, expense_id: str, updates: dict):
    """
    Apply partial updates to an expense. Returns the updated item, or None
    when the expense no longer exists.
    """
    return _update_item(
        expenses_table(),
        {"user_id": user_id, "expense_id": expense_id},
        updates,
        "expense_id",
    )


def delete_expense(user_id: str, expense_id: str) -> bool:
    """Delete a specific expense item. False when nothing was deleted."""
    try:
        response = expenses_table().delete_item(
            Key={"user_id": user_id, "expense_id": expense_id},
            ReturnValues="ALL_OLD",
        )
        return "Attributes" in response
    except ClientError as e:
        logger.error(f"delete_expense failed: {_error_message(e)}")
        return False


def _update_item(table, key: dict, updates: dict, exists_attr: str):
    if not updates:
        return None

    update_expression_parts = []
    expression_attribute_values = {}
    expression_attribute_names = {"#key": exists_attr}

    for idx, (name, value) in enumerate(updates.items()):
        placeholder = f"#f{idx}"
        value_placeholder = f":v{idx}"
        update_expression_parts.append(f"{placeholder} = {value_placeholder}")
        expression_attribute_names[placeholder] = name
        expression_attribute_values[value_placeholder] = value

    update_expression = "SET " + ", ".join(update_expression_parts)

    try:
        response = table.update_item(
            Key=key,
            UpdateExpression=update_expression,
            ConditionExpression="attribute_exists(#key)",
            ExpressionAttributeNames=expression_attribute_names,
            ExpressionAttributeValues=_convert_for_dynamo(expression_attribute_values),
            ReturnValues="ALL_NEW",
        )
        attributes = response.get("Attributes")
        return _from_dynamo(attributes) if attributes else None
    except ClientError as e:
        if _is_condition_failure(e):
            # Item was removed between the read and this write.
            return None
        logger.error(f"update on {table.name} failed: {_error_message(e)}")
        return None


# ---------------------------------------------------------------------------
# Setup / status
# ---------------------------------------------------------------------------

def create_tables():
    """
    Create the Users and Expenses tables if they do not exist yet.
    Used for DynamoDB Local and the test-suite; production tables are
    provisioned outside the app.
    """
    client = get_resource().meta.client
    existing = set(client.list_tables().get("TableNames", []))

    if settings.DYNAMO_USERS_TABLE not in existing:
        logger.info(f"Creating table {settings.DYNAMO_USERS_TABLE}")
        client.create_table(
            TableName=settings.DYNAMO_USERS_TABLE,
            KeySchema=[{"AttributeName": "user_id", "KeyType": "HASH"}],
            AttributeDefinitions=[
                {"AttributeName": "user_id", "AttributeType": "S"},
                {"AttributeName": "email", "AttributeType": "S"},
            ],
            GlobalSecondaryIndexes=[
                {
                    "IndexName": EMAIL_INDEX,
                    "KeySchema": [{"AttributeName": "email", "KeyType": "HASH"}],
                    "Projection": {"ProjectionType": "ALL"},
                }
            ],
            BillingMode="PAY_PER_REQUEST",
        )

    if settings.DYNAMO_EXPENSES_TABLE not in existing:
        logger.info(f"Creating table {settings.DYNAMO_EXPENSES_TABLE}")
        client.create_table(
            TableName=settings.DYNAMO_EXPENSES_TABLE,
            KeySchema=[
                {"AttributeName": "user_id", "KeyType": "HASH"},
                {"AttributeName": "expense_id", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "user_id", "AttributeType": "S"},
                {"AttributeName": "expense_id", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )


def table_status() -> Dict[str, Dict[str, Any]]:
    """Reachability of each table, keyed by logical name."""
    status: Dict[str, Dict[str, Any]] = {}
    for name, table in (("users", users_table()), ("expenses", expenses_table())):
        try:
            table.scan(Limit=1)
            status[name] = {"name": table.name, "status": "accessible"}
        except ClientError as e:
            logger.error(f"Table check for {table.name} failed: {_error_message(e)}")
            status[name] = {"name": table.name, "status": "error", "error": _error_message(e)}
    return status


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal for DynamoDB compatibility.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
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
