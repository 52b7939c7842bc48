"""Unit tests for extraction models."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from menu_import_service.models.extraction_models import (
    ExtractedCategory,
    ExtractedItem,
    ExtractedMenu,
    ExtractionRecord,
    ExtractionStatus,
    coerce_price,
)


@pytest.mark.unit
class TestCoercePrice:
    """Tests for price coercion."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (12.99, Decimal("12.99")),
            (8, Decimal("8")),
            ("12.99", Decimal("12.99")),
            ("$12.99", Decimal("12.99")),
            ("€ 7,50", Decimal("7.50")),
            ("1,250.00", Decimal("1250.00")),
        ],
    )
    def test_parses_numbers_and_strings(self, raw: object, expected: Decimal) -> None:
        """Test that numeric values and price strings are parsed."""
        assert coerce_price(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "market price", True, -3, "-2.50", float("nan"), [1]])
    def test_unusable_values_become_zero(self, raw: object) -> None:
        """Test that missing, unparseable or negative prices become 0."""
        assert coerce_price(raw) == Decimal("0")


@pytest.mark.unit
class TestExtractedItem:
    """Tests for ExtractedItem validation."""

    def test_defaults(self) -> None:
        """Test that only a name is required."""
        item = ExtractedItem(name="Fries")

        assert item.price == Decimal("0")
        assert item.description is None
        assert item.is_special is False
        assert item.is_available is True

    def test_name_is_stripped_and_required(self) -> None:
        """Test that names are stripped and blank names are rejected."""
        assert ExtractedItem(name="  Soup  ").name == "Soup"

        with pytest.raises(ValidationError):
            ExtractedItem(name="   ")

        with pytest.raises(ValidationError):
            ExtractedItem.model_validate({"price": 3})

    def test_blank_description_becomes_none(self) -> None:
        """Test that an empty description is dropped."""
        assert ExtractedItem(name="Soup", description="  ").description is None

    def test_flags_accept_loose_values(self) -> None:
        """Test that availability and special flags tolerate strings and nulls."""
        item = ExtractedItem.model_validate(
            {"name": "Lobster", "is_available": "sold out", "is_special": "yes"}
        )
        assert item.is_available is False
        assert item.is_special is True

        item = ExtractedItem.model_validate({"name": "Lobster", "is_available": None, "is_special": None})
        assert item.is_available is True
        assert item.is_special is False


@pytest.mark.unit
class TestExtractedMenu:
    """Tests for ExtractedMenu."""

    def test_counts(self, sample_menu_payload: dict) -> None:
        """Test category and item counts."""
        menu = ExtractedMenu.model_validate(sample_menu_payload)

        assert menu.category_count == 2
        assert menu.item_count == 3
        assert menu.categories[0].items[1].price == Decimal("8.50")

    def test_categories_required(self) -> None:
        """Test that a payload without categories is rejected."""
        with pytest.raises(ValidationError):
            ExtractedMenu.model_validate({"items": []})

    def test_null_items_become_empty(self) -> None:
        """Test that a category with null items is kept with no items."""
        category = ExtractedCategory.model_validate({"name": "Drinks", "items": None})
        assert category.items == []

    def test_numeric_category_name_becomes_string(self) -> None:
        """Test that a category printed as a number is kept as text."""
        menu = ExtractedMenu.model_validate(
            {"categories": [{"name": 2024, "items": [{"name": 7, "price": 5}]}]}
        )

        assert menu.categories[0].name == "2024"
        assert menu.categories[0].items[0].name == "7"

    def test_json_dump_keeps_prices_as_strings(self, sample_menu_payload: dict) -> None:
        """Test that the JSON dump stored in the ledger holds no floats."""
        dumped = ExtractedMenu.model_validate(sample_menu_payload).model_dump(mode="json")

        assert dumped["categories"][0]["items"][0]["price"] == "9.99"


@pytest.mark.unit
class TestExtractionRecord:
    """Tests for ExtractionRecord."""

    def test_to_dynamodb_item_omits_empty_fields(self) -> None:
        """Test that a processing record carries no payload or error."""
        now = datetime.now(UTC)
        record = ExtractionRecord(
            id="ext_1",
            restaurant_id="rest_1",
            file_url="https://cdn.example.com/menu.jpg",
            created_at=now,
            updated_at=now,
        )

        item = record.to_dynamodb_item()

        assert item["status"] == "processing"
        assert item["created_at"] == now.isoformat()
        assert "extracted_data" not in item
        assert "error_message" not in item

    def test_from_dynamodb_item(self) -> None:
        """Test parsing a failed record from DynamoDB."""
        record = ExtractionRecord.from_dynamodb_item(
            {
                "id": "ext_1",
                "restaurant_id": "rest_1",
                "file_url": "https://cdn.example.com/menu.jpg",
                "status": "failed",
                "error_message": "Vision API error: 429 - rate limited",
                "created_at": "2024-01-15T10:30:00+00:00",
                "updated_at": "2024-01-15T10:30:05+00:00",
            }
        )

        assert record.status == ExtractionStatus.FAILED
        assert record.error_message == "Vision API error: 429 - rate limited"
        assert record.extracted_data is None
        assert record.updated_at > record.created_at
