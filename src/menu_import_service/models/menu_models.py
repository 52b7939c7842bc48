"""Menu data models.

Restaurants, categories and items as persisted in DynamoDB. Only the fields
the import pipeline reads or writes are modelled here; branding, templates and
translations live elsewhere.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_serializer

DEFAULT_CURRENCY = "USD"


class Restaurant(BaseModel):
    """Restaurant (tenant) record."""

    id: str = Field(..., description="Unique identifier for the restaurant")
    owner_id: str = Field(..., description="User who owns the restaurant")
    name: str = Field(..., description="Restaurant name")
    default_currency: str = Field(default=DEFAULT_CURRENCY, description="Currency for new items")

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Restaurant":
        return cls(
            id=item["id"],
            owner_id=item["owner_id"],
            name=item["name"],
            default_currency=item.get("default_currency") or DEFAULT_CURRENCY,
        )


class MenuCategory(BaseModel):
    """Menu category model."""

    id: str = Field(..., description="Unique identifier for the category")
    restaurant_id: str = Field(..., min_length=1, description="Restaurant this category belongs to")
    name: str = Field(..., description="Category name")
    description: str | None = Field(None, description="Category description")
    display_order: int = Field(default=0, description="Zero-based display position", ge=0)
    created_at: datetime | None = Field(None, description="Creation timestamp")

    def to_dynamodb_item(self) -> dict[str, Any]:
        item: dict[str, Any] = {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "name": self.name,
            "display_order": self.display_order,
        }

        if self.description is not None:
            item["description"] = self.description

        if self.created_at is not None:
            item["created_at"] = self.created_at.isoformat()

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "MenuCategory":
        created_at = item.get("created_at")
        return cls(
            id=item["id"],
            restaurant_id=item["restaurant_id"],
            name=item["name"],
            description=item.get("description"),
            display_order=int(item.get("display_order", 0)),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )


class MenuItem(BaseModel):
    """Menu item model."""

    id: str = Field(..., description="Unique identifier for the menu item")
    restaurant_id: str = Field(..., min_length=1, description="Restaurant this item belongs to")
    category_id: str | None = Field(None, description="Category this item belongs to")
    name: str = Field(..., description="Item name")
    description: str | None = Field(None, description="Item description")
    price: Decimal = Field(..., description="Item price", ge=0)
    currency: str = Field(default="USD", description="ISO currency code")
    is_special: bool = Field(default=False, description="Highlighted as a special")
    is_available: bool = Field(default=True, description="Whether item is currently available")
    display_order: int = Field(default=0, description="Position in the restaurant's item list", ge=0)
    image_url: str | None = Field(None, description="URL to item image")
    created_at: datetime | None = Field(None, description="Creation timestamp")

    @field_serializer("price", when_used="json")
    def serialize_price(self, price: Decimal) -> float:
        """Emit prices as JSON numbers for the dashboard."""
        return float(price)

    def to_dynamodb_item(self) -> dict[str, Any]:
        item: dict[str, Any] = {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "name": self.name,
            "price": self.price,
            "currency": self.currency,
            "is_special": self.is_special,
            "is_available": self.is_available,
            "display_order": self.display_order,
        }

        if self.category_id is not None:
            item["category_id"] = self.category_id

        if self.description is not None:
            item["description"] = self.description

        if self.image_url is not None:
            item["image_url"] = self.image_url

        if self.created_at is not None:
            item["created_at"] = self.created_at.isoformat()

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "MenuItem":
        created_at = item.get("created_at")
        return cls(
            id=item["id"],
            restaurant_id=item["restaurant_id"],
            category_id=item.get("category_id"),
            name=item["name"],
            description=item.get("description"),
            price=Decimal(str(item["price"])),
            currency=item.get("currency") or DEFAULT_CURRENCY,
            is_special=item.get("is_special", False),
            is_available=item.get("is_available", True),
            display_order=int(item.get("display_order", 0)),
            image_url=item.get("image_url"),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )
