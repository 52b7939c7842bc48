"""Extraction ledger and extracted-menu models.

ExtractedMenu and its children are the strict parse boundary for the vision
model output: anything that does not validate here never reaches the
materializer. ExtractionRecord is the persisted audit row for one import
attempt, stored in DynamoDB with id as partition key.
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

_FALSE_STRINGS = {"false", "no", "0", "n", "sold out", "unavailable"}
_TRUE_STRINGS = {"true", "yes", "1", "y"}
_DECIMAL_COMMA = re.compile(r"^-?\d+,\d{1,2}$")


def coerce_price(value: Any) -> Decimal:
    """Parse a price from whatever the model produced.

    Numbers pass through, strings are stripped of currency symbols and
    thousands separators. Anything unparseable, negative or non-finite is 0.
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")

    if isinstance(value, (int, float, Decimal)):
        raw = str(value)
    elif isinstance(value, str):
        raw = re.sub(r"[^\d.,\-]", "", value)
        if _DECIMAL_COMMA.match(raw):
            raw = raw.replace(",", ".")
        else:
            raw = raw.replace(",", "")
    else:
        return Decimal("0")

    try:
        price = Decimal(raw)
    except (InvalidOperation, ValueError):
        return Decimal("0")

    if not price.is_finite() or price < 0:
        return Decimal("0")
    return price


def _coerce_flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _FALSE_STRINGS:
            return False
        if normalized in _TRUE_STRINGS:
            return True
    return default


def _clean_optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class ExtractionStatus(str, Enum):
    """Lifecycle states of an extraction record."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ExtractedItem(BaseModel):
    """One menu item as read from the image."""

    name: str = Field(..., min_length=1, description="Item name as printed")
    description: str | None = Field(None, description="Item description, if printed")
    price: Decimal = Field(default=Decimal("0"), description="Price, 0 when missing", ge=0)
    is_special: bool = Field(default=False, description="Flagged as special or signature")
    is_available: bool = Field(default=True, description="False only when marked sold out")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        """Strip whitespace around names; numbers become strings."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v.strip() if isinstance(v, str) else v

    @field_validator("description", mode="before")
    @classmethod
    def clean_description(cls, v: Any) -> str | None:
        return _clean_optional_text(v)

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v: Any) -> Decimal:
        return coerce_price(v)

    @field_validator("is_special", mode="before")
    @classmethod
    def parse_is_special(cls, v: Any) -> bool:
        return _coerce_flag(v, default=False)

    @field_validator("is_available", mode="before")
    @classmethod
    def parse_is_available(cls, v: Any) -> bool:
        return _coerce_flag(v, default=True)


class ExtractedCategory(BaseModel):
    """A category and the items listed under it, in printed order."""

    name: str = Field(..., min_length=1, description="Category name")
    description: str | None = Field(None, description="Category description")
    items: list[ExtractedItem] = Field(default_factory=list, description="Items in display order")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v.strip() if isinstance(v, str) else v

    @field_validator("description", mode="before")
    @classmethod
    def clean_description(cls, v: Any) -> str | None:
        return _clean_optional_text(v)

    @field_validator("items", mode="before")
    @classmethod
    def default_items(cls, v: Any) -> Any:
        return [] if v is None else v


class ExtractedMenu(BaseModel):
    """Structured menu returned by the vision model.

    Category order is significant and becomes display_order on import.
    """

    categories: list[ExtractedCategory] = Field(..., description="Categories in display order")

    @property
    def category_count(self) -> int:
        return len(self.categories)

    @property
    def item_count(self) -> int:
        return sum(len(category.items) for category in self.categories)


class ExtractionRecord(BaseModel):
    """Audit row for one import attempt.

    Starts in processing and is written exactly once more, to completed or
    failed. Stored in DynamoDB with id as partition key and a
    restaurant_id-index GSI (sort key created_at).
    """

    id: str = Field(..., description="Unique extraction identifier")
    restaurant_id: str = Field(..., min_length=1, description="Owning restaurant")
    file_url: str = Field(..., description="Public URL of the source image")
    status: ExtractionStatus = Field(default=ExtractionStatus.PROCESSING, description="Lifecycle state")
    extracted_data: dict[str, Any] | None = Field(None, description="Parsed menu, on completion")
    error_message: str | None = Field(None, description="Failure reason, on failure")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last write timestamp")

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "file_url": self.file_url,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if self.extracted_data is not None:
            item["extracted_data"] = self.extracted_data

        if self.error_message is not None:
            item["error_message"] = self.error_message

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "ExtractionRecord":
        """Create ExtractionRecord from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            ExtractionRecord: Parsed model instance
        """
        return cls(
            id=item["id"],
            restaurant_id=item["restaurant_id"],
            file_url=item["file_url"],
            status=ExtractionStatus(item.get("status", ExtractionStatus.PROCESSING.value)),
            extracted_data=item.get("extracted_data"),
            error_message=item.get("error_message"),
            created_at=datetime.fromisoformat(item["created_at"]),
            updated_at=datetime.fromisoformat(item["updated_at"]),
        )
