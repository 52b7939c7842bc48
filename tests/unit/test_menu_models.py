"""Unit tests for menu and quota models."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from menu_import_service.models.menu_models import MenuCategory, MenuItem, Restaurant
from menu_import_service.models.quota_models import TierLimits


@pytest.mark.unit
class TestRestaurant:
    """Tests for Restaurant."""

    def test_from_dynamodb_item(self, sample_restaurant_item: dict) -> None:
        """Test parsing a restaurant row."""
        restaurant = Restaurant.from_dynamodb_item(sample_restaurant_item)

        assert restaurant.owner_id == "owner_1"
        assert restaurant.default_currency == "EUR"

    def test_missing_currency_defaults_to_usd(self) -> None:
        """Test that restaurants without a currency fall back to USD."""
        restaurant = Restaurant.from_dynamodb_item({"id": "r", "owner_id": "o", "name": "Diner"})
        assert restaurant.default_currency == "USD"


@pytest.mark.unit
class TestMenuCategory:
    """Tests for MenuCategory."""

    def test_round_trip(self) -> None:
        """Test conversion to and from a DynamoDB item."""
        category = MenuCategory(
            id="cat_1",
            restaurant_id="rest_1",
            name="Salads",
            description="Fresh",
            display_order=3,
            created_at=datetime.now(UTC),
        )

        assert MenuCategory.from_dynamodb_item(category.to_dynamodb_item()) == category

    def test_negative_display_order_rejected(self) -> None:
        """Test that display_order cannot be negative."""
        with pytest.raises(ValidationError):
            MenuCategory(id="cat_1", restaurant_id="rest_1", name="Salads", display_order=-1)


@pytest.mark.unit
class TestMenuItem:
    """Tests for MenuItem."""

    def test_to_dynamodb_item_keeps_decimal_price(self) -> None:
        """Test that prices are stored as Decimal for DynamoDB."""
        item = MenuItem(
            id="item_1",
            restaurant_id="rest_1",
            category_id="cat_1",
            name="Caesar Salad",
            price=Decimal("9.99"),
        )

        stored = item.to_dynamodb_item()

        assert stored["price"] == Decimal("9.99")
        assert stored["category_id"] == "cat_1"
        assert "description" not in stored
        assert "image_url" not in stored

    def test_from_dynamodb_item(self) -> None:
        """Test parsing an item row with DynamoDB number types."""
        item = MenuItem.from_dynamodb_item(
            {
                "id": "item_1",
                "restaurant_id": "rest_1",
                "name": "Caesar Salad",
                "price": Decimal("9.99"),
                "display_order": Decimal("4"),
            }
        )

        assert item.price == Decimal("9.99")
        assert item.display_order == 4
        assert item.currency == "USD"
        assert item.category_id is None

    def test_json_serializes_price_as_number(self) -> None:
        """Test that API responses carry prices as numbers."""
        item = MenuItem(id="item_1", restaurant_id="rest_1", name="Tea", price=Decimal("2.50"))

        assert item.model_dump(mode="json")["price"] == 2.5
        assert item.model_dump()["price"] == Decimal("2.50")


@pytest.mark.unit
class TestTierLimits:
    """Tests for TierLimits."""

    def test_unlimited_items(self) -> None:
        """Test that max_menu_items may be None."""
        assert TierLimits(max_restaurants=2).max_menu_items is None
