"""Shared plumbing for the DynamoDB repositories."""

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from menu_import_service.errors import PersistenceError

logger = logging.getLogger(__name__)

RESTAURANT_INDEX = "restaurant_id-index"


class DynamoDBRepository:
    """Base class holding the table handle.

    Lookups return None or an empty list on DynamoDB or transport errors.
    Writes and counts raise PersistenceError instead.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def _put(self, item: dict[str, Any]) -> None:
        try:
            self.table.put_item(Item=item, ConditionExpression="attribute_not_exists(id)")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to write to {self.table_name}: {e}")
            raise PersistenceError(f"Failed to write to {self.table_name}: {e}") from e

    def _query_all(self, index_name: str, key_name: str, key_value: str) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {
            "IndexName": index_name,
            "KeyConditionExpression": f"{key_name} = :key",
            "ExpressionAttributeValues": {":key": key_value},
        }
        while True:
            response = self.table.query(**kwargs)
            items.extend(response.get("Items", []))
            if "LastEvaluatedKey" not in response:
                return items
            kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

    def _count(self, index_name: str, key_name: str, key_value: str) -> int:
        kwargs: dict[str, Any] = {
            "IndexName": index_name,
            "KeyConditionExpression": f"{key_name} = :key",
            "ExpressionAttributeValues": {":key": key_value},
            "Select": "COUNT",
        }
        total = 0
        try:
            while True:
                response = self.table.query(**kwargs)
                total += response.get("Count", 0)
                if "LastEvaluatedKey" not in response:
                    return total
                kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to count rows in {self.table_name}: {e}")
            raise PersistenceError(f"Failed to count rows in {self.table_name}: {e}") from e
