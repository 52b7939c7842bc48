"""DynamoDB ledger of menu extraction attempts.

Each import run owns exactly one record: created as processing, then written
once to completed or failed. The terminal write is conditional on the record
still being processing, so a second terminal write is rejected by DynamoDB
rather than silently overwriting the first outcome.
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from menu_import_service.errors import PersistenceError, RecordAlreadyTerminalError
from menu_import_service.models.extraction_models import ExtractionRecord, ExtractionStatus
from menu_import_service.repositories.base import RESTAURANT_INDEX, DynamoDBRepository

logger = logging.getLogger(__name__)


class ExtractionRecordRepository(DynamoDBRepository):
    """Repository for extraction records, keyed by id."""

    def create(self, restaurant_id: str, file_url: str) -> ExtractionRecord:
        """Insert a new processing record.

        Args:
            restaurant_id: Owning restaurant
            file_url: Public URL of the uploaded image

        Returns:
            The stored record, including its generated id

        Raises:
            PersistenceError: If the insert fails
        """
        now = datetime.now(UTC)
        record = ExtractionRecord(
            id=str(uuid.uuid4()),
            restaurant_id=restaurant_id,
            file_url=file_url,
            status=ExtractionStatus.PROCESSING,
            created_at=now,
            updated_at=now,
        )
        self._put(record.to_dynamodb_item())
        logger.info(f"Created extraction record {record.id} for restaurant {restaurant_id}")
        return record

    def complete(self, record_id: str, extracted_data: dict[str, Any]) -> ExtractionRecord:
        """Mark a record completed and attach the parsed menu.

        Raises:
            RecordAlreadyTerminalError: If the record is not processing
            PersistenceError: If the update fails for any other reason
        """
        return self._terminal_update(
            record_id, ExtractionStatus.COMPLETED, "extracted_data", extracted_data
        )

    def fail(self, record_id: str, error_message: str) -> ExtractionRecord:
        """Mark a record failed with the given reason.

        Raises:
            RecordAlreadyTerminalError: If the record is not processing
            PersistenceError: If the update fails for any other reason
        """
        return self._terminal_update(
            record_id, ExtractionStatus.FAILED, "error_message", error_message
        )

    def get(self, record_id: str) -> ExtractionRecord | None:
        """Retrieve a record by id.

        Returns:
            ExtractionRecord if found, None otherwise
        """
        try:
            response = self.table.get_item(Key={"id": record_id})

            if "Item" not in response:
                return None

            return ExtractionRecord.from_dynamodb_item(response["Item"])

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to get extraction record: {e}")  # pragma: no cover
            return None

    def list_for_restaurant(self, restaurant_id: str, limit: int = 50) -> list[ExtractionRecord]:
        """List recent extraction records for a restaurant, newest first.

        Uses a Global Secondary Index on restaurant_id sorted by created_at.

        Returns:
            list: ExtractionRecord objects (empty list if none found)
        """
        try:
            response = self.table.query(
                IndexName=RESTAURANT_INDEX,
                KeyConditionExpression="restaurant_id = :rid",
                ExpressionAttributeValues={":rid": restaurant_id},
                Limit=limit,
                ScanIndexForward=False,
            )

            return [ExtractionRecord.from_dynamodb_item(item) for item in response.get("Items", [])]

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to list extraction records: {e}")  # pragma: no cover
            return []

    def _terminal_update(
        self,
        record_id: str,
        status: ExtractionStatus,
        field: str,
        value: Any,
    ) -> ExtractionRecord:
        try:
            response = self.table.update_item(
                Key={"id": record_id},
                UpdateExpression="SET #status = :status, #field = :value, updated_at = :now",
                ConditionExpression="#status = :processing",
                ExpressionAttributeNames={"#status": "status", "#field": field},
                ExpressionAttributeValues={
                    ":status": status.value,
                    ":value": value,
                    ":now": datetime.now(UTC).isoformat(),
                    ":processing": ExtractionStatus.PROCESSING.value,
                },
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise RecordAlreadyTerminalError(
                    f"Extraction record {record_id} is not processing"
                ) from e
            logger.error(f"Failed to update extraction record {record_id}: {e}")
            raise PersistenceError(f"Failed to update extraction record {record_id}: {e}") from e
        except BotoCoreError as e:
            logger.error(f"Failed to update extraction record {record_id}: {e}")
            raise PersistenceError(f"Failed to update extraction record {record_id}: {e}") from e

        logger.info(f"Extraction record {record_id} marked {status.value}")
        return ExtractionRecord.from_dynamodb_item(response["Attributes"])
