"""Pydantic schemas for tier plans and subscriptions."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from allertify.domain.schemas.common import CamelModel


class TierPlanCreate(CamelModel):
    name: str = Field(min_length=1, max_length=50)
    description: Optional[str] = None
    scan_count_limit: int = Field(ge=0)
    saved_product_limit: int = Field(ge=0)


class TierPlanRead(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    scan_count_limit: int
    saved_product_limit: int


class SubscriptionCreate(CamelModel):
    tier_plan_id: int = Field(gt=0)
    duration_months: int = Field(default=1, ge=1, le=24)


class SubscriptionRead(CamelModel):
    id: int
    user_id: int
    tier_plan_id: int
    start_date: datetime
    end_date: datetime
    status: str
    tier_plan: TierPlanRead
