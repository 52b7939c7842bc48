"""Menu import pipeline: upload, extract, materialize, record."""

import logging
import time
from dataclasses import dataclass, field

from menu_import_service.errors import (
    MenuImportError,
    RestaurantNotFoundError,
    UnsupportedFormatError,
)
from menu_import_service.models.extraction_models import ExtractedMenu
from menu_import_service.models.menu_models import MenuCategory, MenuItem
from menu_import_service.observability.decorators import traced
from menu_import_service.observability.metrics import (
    record_extraction_duration,
    record_extraction_failure,
    record_extraction_success,
)
from menu_import_service.repositories.extraction_repository import ExtractionRecordRepository
from menu_import_service.repositories.menu_repositories import (
    MenuCategoryRepository,
    MenuItemRepository,
    RestaurantRepository,
)
from menu_import_service.services.file_intake import PDF, FileIntakeService
from menu_import_service.services.import_materializer import ImportMaterializer
from menu_import_service.services.vision_client import VisionExtractionClient

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Outcome of a successful import.

    Attributes:
        extraction_id: Ledger record for this run
        new_categories: Categories created, for immediate merge into the dashboard
        new_items: Items created, for immediate merge into the dashboard
        extracted_menu: The parsed menu the rows were built from
    """

    extraction_id: str
    new_categories: list[MenuCategory] = field(default_factory=list)
    new_items: list[MenuItem] = field(default_factory=list)
    extracted_menu: ExtractedMenu | None = None


class MenuImportPipeline:
    """Orchestrates one menu import from an uploaded file.

    The flow is linear: validate and store the file, open a ledger record,
    call the vision model once, write the rows, close the ledger record.
    Failures before the ledger record exists leave no trace in the ledger;
    failures after it are written to the record and re-raised. Nothing is
    retried and imports are not deduplicated.
    """

    def __init__(
        self,
        file_intake: FileIntakeService,
        extraction_repository: ExtractionRecordRepository,
        vision_client: VisionExtractionClient,
        materializer: ImportMaterializer,
        restaurant_repository: RestaurantRepository,
        category_repository: MenuCategoryRepository,
        item_repository: MenuItemRepository,
    ) -> None:
        self.file_intake = file_intake
        self.extraction_repository = extraction_repository
        self.vision_client = vision_client
        self.materializer = materializer
        self.restaurant_repository = restaurant_repository
        self.category_repository = category_repository
        self.item_repository = item_repository

    @traced("import_menu_from_file", service_name="menu-import-svc")
    async def import_menu_from_file(
        self,
        restaurant_id: str,
        filename: str | None,
        content: bytes,
        content_type: str | None,
        declared_type: str,
    ) -> ImportResult:
        """Import a menu from an uploaded file.

        Args:
            restaurant_id: Restaurant receiving the menu
            filename: Client filename, used in the storage key
            content: File bytes
            content_type: MIME type reported for the upload
            declared_type: "image" or "pdf"

        Returns:
            ImportResult with the created rows

        Raises:
            RestaurantNotFoundError: If the restaurant does not exist
            ValidationError: If the file does not match the declared type
            UnsupportedFormatError: For PDF uploads
            StorageError: If the file cannot be stored
            ExternalServiceError: If the vision API call fails
            MalformedResponseError: If the vision answer holds no usable menu
            PartialImportError: If writing rows fails partway
        """
        restaurant = self.restaurant_repository.get(restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundError(f"Restaurant {restaurant_id} not found")

        self.file_intake.validate(declared_type, content_type, size=len(content))

        if declared_type == PDF:
            record_extraction_failure(UnsupportedFormatError.__name__)
            raise UnsupportedFormatError(
                "PDF menus are not supported; please upload a photo or screenshot of the menu"
            )

        file_url = self.file_intake.store(restaurant_id, filename, content, content_type or "")
        record = self.extraction_repository.create(restaurant_id, file_url)
        started = time.perf_counter()

        try:
            extracted_menu = await self.vision_client.extract(file_url, file_format=declared_type)

            existing_category_count = self.category_repository.count_for_restaurant(restaurant_id)
            existing_item_count = self.item_repository.count_for_restaurant(restaurant_id)

            materialized = await self.materializer.materialize(
                restaurant_id=restaurant_id,
                extracted_menu=extracted_menu,
                existing_category_count=existing_category_count,
                existing_item_count=existing_item_count,
                currency=restaurant.default_currency,
            )

            self.extraction_repository.complete(
                record.id, extracted_menu.model_dump(mode="json")
            )

        except Exception as e:
            logger.error(f"Menu import {record.id} for restaurant {restaurant_id} failed: {e}")
            record_extraction_failure(type(e).__name__)
            self._record_failure(record.id, e)
            raise

        finally:
            record_extraction_duration(time.perf_counter() - started)

        record_extraction_success(len(materialized.new_categories), len(materialized.new_items))
        logger.info(
            f"Menu import {record.id} for restaurant {restaurant_id} completed: "
            f"{len(materialized.new_categories)} categories, {len(materialized.new_items)} items"
        )

        return ImportResult(
            extraction_id=record.id,
            new_categories=materialized.new_categories,
            new_items=materialized.new_items,
            extracted_menu=extracted_menu,
        )

    def _record_failure(self, record_id: str, error: Exception) -> None:
        try:
            self.extraction_repository.fail(record_id, str(error) or type(error).__name__)
        except MenuImportError as ledger_error:
            logger.error(f"Could not mark extraction {record_id} failed: {ledger_error}")
