"""Turns an extracted menu into persisted category and item rows."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from menu_import_service.errors import PartialImportError, PersistenceError
from menu_import_service.models.extraction_models import ExtractedMenu
from menu_import_service.models.menu_models import MenuCategory, MenuItem
from menu_import_service.repositories.menu_repositories import (
    MenuCategoryRepository,
    MenuItemRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class MaterializedImport:
    """Rows created by one import, in insertion order.

    Attributes:
        new_categories: Categories created by this import
        new_items: Items created by this import
    """

    new_categories: list[MenuCategory] = field(default_factory=list)
    new_items: list[MenuItem] = field(default_factory=list)


class ImportMaterializer:
    """Writes extracted categories and items in display order.

    Writes are sequential and not wrapped in a transaction: if one fails, the
    rows already written stay and PartialImportError reports them.
    """

    def __init__(
        self,
        category_repository: MenuCategoryRepository,
        item_repository: MenuItemRepository,
    ) -> None:
        """Initialize the materializer.

        Args:
            category_repository: Repository for category rows
            item_repository: Repository for item rows
        """
        self.category_repository = category_repository
        self.item_repository = item_repository

    async def materialize(
        self,
        restaurant_id: str,
        extracted_menu: ExtractedMenu,
        existing_category_count: int,
        existing_item_count: int,
        currency: str,
    ) -> MaterializedImport:
        """Persist an extracted menu for a restaurant.

        Category display_order continues from existing_category_count. Item
        display_order is one running counter across the whole import, seeded
        at existing_item_count. Each category is written before its items.

        Args:
            restaurant_id: Restaurant receiving the rows
            extracted_menu: Validated menu from the vision model
            existing_category_count: Categories the restaurant already has
            existing_item_count: Items the restaurant already has
            currency: The restaurant's default currency

        Returns:
            MaterializedImport with the rows that were created

        Raises:
            PartialImportError: If any insert fails
        """
        result = MaterializedImport()
        item_order = existing_item_count

        try:
            for index, extracted_category in enumerate(extracted_menu.categories):
                category = self.category_repository.create(
                    MenuCategory(
                        id=str(uuid.uuid4()),
                        restaurant_id=restaurant_id,
                        name=extracted_category.name,
                        description=extracted_category.description,
                        display_order=existing_category_count + index,
                        created_at=datetime.now(UTC),
                    )
                )
                result.new_categories.append(category)

                for extracted_item in extracted_category.items:
                    item = self.item_repository.create(
                        MenuItem(
                            id=str(uuid.uuid4()),
                            restaurant_id=restaurant_id,
                            category_id=category.id,
                            name=extracted_item.name,
                            description=extracted_item.description,
                            price=extracted_item.price,
                            currency=currency,
                            is_special=extracted_item.is_special,
                            is_available=extracted_item.is_available,
                            display_order=item_order,
                            created_at=datetime.now(UTC),
                        )
                    )
                    result.new_items.append(item)
                    item_order += 1

        except PersistenceError as e:
            logger.error(
                f"Import for restaurant {restaurant_id} stopped after "
                f"{len(result.new_categories)} categories and {len(result.new_items)} items: {e}"
            )
            raise PartialImportError(
                f"Import stopped after {len(result.new_categories)} categories and "
                f"{len(result.new_items)} items: {e}",
                categories_created=len(result.new_categories),
                items_created=len(result.new_items),
                new_categories=result.new_categories,
                new_items=result.new_items,
            ) from e

        logger.info(
            f"Materialized {len(result.new_categories)} categories and "
            f"{len(result.new_items)} items for restaurant {restaurant_id}"
        )
        return result
