"""
Subscription Repository Interface.
"""

from datetime import datetime
from typing import List, Optional, Protocol

from allertify.domain.models.subscription import Subscription, TierPlan


class SubscriptionRepository(Protocol):
    """Tier plans and user subscriptions."""

    def get_active(self, user_id: int, now: datetime) -> Optional[Subscription]:
        """The ACTIVE subscription whose end_date is not in the past."""
        ...

    def list_tier_plans(self) -> List[TierPlan]:
        ...

    def get_tier_plan(self, tier_plan_id: int) -> Optional[TierPlan]:
        ...

    def get_tier_plan_by_name(self, name: str) -> Optional[TierPlan]:
        ...

    def create_tier_plan(self, data: dict) -> TierPlan:
        ...

    def replace_active(
        self, user_id: int, tier_plan_id: int, start_date: datetime, end_date: datetime
    ) -> Subscription:
        """Expire any ACTIVE subscription and create the new one atomically."""
        ...
