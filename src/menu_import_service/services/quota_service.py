"""Subscription quota checks.

The check functions are pure lookups over a static tier table. They are
consulted before creating restaurants or items and before offering a menu
import; the import pipeline itself does not call them, so a bulk import can
take a tenant past its item ceiling.
"""

import logging

from menu_import_service.models.quota_models import (
    QuotaSnapshot,
    SubscriptionTier,
    TierLimits,
    UsageReport,
)
from menu_import_service.repositories.menu_repositories import (
    MenuItemRepository,
    RestaurantRepository,
)

logger = logging.getLogger(__name__)

TIER_LIMITS: dict[SubscriptionTier, TierLimits] = {
    SubscriptionTier.FREE: TierLimits(max_restaurants=1, max_menu_items=20),
    SubscriptionTier.PREMIUM: TierLimits(max_restaurants=2, max_menu_items=None),
    SubscriptionTier.AGENCY: TierLimits(max_restaurants=100, max_menu_items=None),
}


def resolve_tier(tier: str | SubscriptionTier | None) -> SubscriptionTier:
    """Map a tier name to a SubscriptionTier, defaulting to free."""
    if isinstance(tier, SubscriptionTier):
        return tier
    try:
        return SubscriptionTier((tier or "").strip().lower())
    except ValueError:
        return SubscriptionTier.FREE


def get_tier_limits(tier: str | SubscriptionTier | None) -> TierLimits:
    return TIER_LIMITS[resolve_tier(tier)]


def check_restaurant_quota(tier: str | SubscriptionTier | None, current_count: int) -> bool:
    """Whether another restaurant may be created."""
    return current_count < get_tier_limits(tier).max_restaurants


def check_item_quota(tier: str | SubscriptionTier | None, current_count: int) -> bool:
    """Whether another menu item may be created."""
    max_items = get_tier_limits(tier).max_menu_items
    return max_items is None or current_count < max_items


def can_import_more_items(tier: str | SubscriptionTier | None, current_item_count: int) -> bool:
    """Whether the import affordance should be offered."""
    return check_item_quota(tier, current_item_count)


class QuotaService:
    """Computes usage snapshots for an owner and evaluates them against a tier."""

    def __init__(
        self,
        restaurant_repository: RestaurantRepository,
        item_repository: MenuItemRepository,
    ) -> None:
        """Initialize the QuotaService.

        Args:
            restaurant_repository: Repository used to find an owner's restaurants
            item_repository: Repository used to count menu items
        """
        self.restaurant_repository = restaurant_repository
        self.item_repository = item_repository

    async def get_usage(self, owner_id: str) -> QuotaSnapshot:
        """Count an owner's restaurants and their menu items across all of them."""
        restaurants = self.restaurant_repository.list_for_owner(owner_id)
        item_count = sum(
            self.item_repository.count_for_restaurant(restaurant.id) for restaurant in restaurants
        )
        return QuotaSnapshot(
            owner_id=owner_id,
            restaurant_count=len(restaurants),
            menu_item_count=item_count,
        )

    async def evaluate(self, owner_id: str, tier: str | SubscriptionTier | None) -> UsageReport:
        """Evaluate an owner's current usage against a tier."""
        resolved = resolve_tier(tier)
        usage = await self.get_usage(owner_id)
        report = UsageReport(
            tier=resolved,
            limits=TIER_LIMITS[resolved],
            usage=usage,
            can_create_restaurant=check_restaurant_quota(resolved, usage.restaurant_count),
            can_create_menu_item=check_item_quota(resolved, usage.menu_item_count),
        )
        logger.debug(f"Usage for owner {owner_id} on {resolved.value}: {usage.model_dump()}")
        return report
