"""DynamoDB repositories for restaurants, menu categories and menu items."""

import logging

from botocore.exceptions import BotoCoreError, ClientError

from menu_import_service.models.menu_models import MenuCategory, MenuItem, Restaurant
from menu_import_service.repositories.base import RESTAURANT_INDEX, DynamoDBRepository

logger = logging.getLogger(__name__)

OWNER_INDEX = "owner_id-index"


class RestaurantRepository(DynamoDBRepository):
    """Read access to restaurants, keyed by id with an owner_id-index GSI."""

    def get(self, restaurant_id: str) -> Restaurant | None:
        """Retrieve a restaurant by id.

        Returns:
            Restaurant if found, None otherwise
        """
        try:
            response = self.table.get_item(Key={"id": restaurant_id})

            if "Item" not in response:
                return None

            return Restaurant.from_dynamodb_item(response["Item"])

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to get restaurant: {e}")  # pragma: no cover
            return None

    def list_for_owner(self, owner_id: str) -> list[Restaurant]:
        """List the restaurants an owner has created.

        Returns:
            list: Restaurant objects (empty list if none found)
        """
        try:
            items = self._query_all(OWNER_INDEX, "owner_id", owner_id)
            return [Restaurant.from_dynamodb_item(item) for item in items]

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to list restaurants: {e}")  # pragma: no cover
            return []


class MenuCategoryRepository(DynamoDBRepository):
    """Repository for menu categories."""

    def create(self, category: MenuCategory) -> MenuCategory:
        """Insert a category row.

        Raises:
            PersistenceError: If the insert fails
        """
        self._put(category.to_dynamodb_item())
        return category

    def count_for_restaurant(self, restaurant_id: str) -> int:
        """Count a restaurant's categories.

        Raises:
            PersistenceError: If the query fails
        """
        return self._count(RESTAURANT_INDEX, "restaurant_id", restaurant_id)


class MenuItemRepository(DynamoDBRepository):
    """Repository for menu items."""

    def create(self, item: MenuItem) -> MenuItem:
        """Insert an item row.

        Raises:
            PersistenceError: If the insert fails
        """
        self._put(item.to_dynamodb_item())
        return item

    def count_for_restaurant(self, restaurant_id: str) -> int:
        """Count a restaurant's items.

        Raises:
            PersistenceError: If the query fails
        """
        return self._count(RESTAURANT_INDEX, "restaurant_id", restaurant_id)
