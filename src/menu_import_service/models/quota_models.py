"""Subscription tier and usage models."""

from enum import Enum

from pydantic import BaseModel, Field


class SubscriptionTier(str, Enum):
    """Subscription plans."""

    FREE = "free"
    PREMIUM = "premium"
    AGENCY = "agency"


class TierLimits(BaseModel):
    """Quota ceilings for a tier. None means unlimited."""

    max_restaurants: int = Field(..., ge=0)
    max_menu_items: int | None = Field(None, ge=0)


class QuotaSnapshot(BaseModel):
    """Usage counts for one owner, computed on demand."""

    owner_id: str
    restaurant_count: int = Field(default=0, ge=0)
    menu_item_count: int = Field(default=0, ge=0)


class UsageReport(BaseModel):
    """Usage counts evaluated against a tier."""

    tier: SubscriptionTier
    limits: TierLimits
    usage: QuotaSnapshot
    can_create_restaurant: bool
    can_create_menu_item: bool
