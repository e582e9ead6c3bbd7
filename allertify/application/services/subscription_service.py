"""Tier plans and user subscriptions."""

import calendar
from datetime import datetime
from typing import Callable, Optional

import structlog

from allertify.core.exceptions import BusinessRuleViolationException, EntityNotFoundException
from allertify.core.timezone import utc_now
from allertify.domain.models.subscription import Subscription, TierPlan
from allertify.domain.repositories.subscription_repository import SubscriptionRepository
from allertify.domain.schemas.subscription import SubscriptionCreate, TierPlanCreate

logger = structlog.get_logger(__name__)

DEFAULT_TIER_PLANS = [
    {
        "name": "FREE",
        "description": "Free plan",
        "scan_count_limit": 100,
        "saved_product_limit": 20,
    },
    {
        "name": "PREMIUM",
        "description": "Premium plan with more daily scans and saved products",
        "scan_count_limit": 500,
        "saved_product_limit": 200,
    },
]


def add_months(moment: datetime, months: int) -> datetime:
    """Same day-of-month `months` later, clamped to the month's last day."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def seed_tier_plans(repo: SubscriptionRepository) -> None:
    for plan in DEFAULT_TIER_PLANS:
        if repo.get_tier_plan_by_name(plan["name"]) is None:
            repo.create_tier_plan(dict(plan))
            logger.info("Tier plan created", name=plan["name"])


def create_tier_plan(repo: SubscriptionRepository, body: TierPlanCreate) -> TierPlan:
    if repo.get_tier_plan_by_name(body.name) is not None:
        raise BusinessRuleViolationException(f"Tier plan '{body.name}' already exists")
    return repo.create_tier_plan(body.model_dump())


def get_current_subscription(
    repo: SubscriptionRepository,
    user_id: int,
    clock: Optional[Callable[[], datetime]] = None,
) -> Subscription:
    subscription = repo.get_active(user_id, (clock or utc_now)())
    if subscription is None:
        raise EntityNotFoundException("No active subscription")
    return subscription


def subscribe(
    repo: SubscriptionRepository,
    user_id: int,
    body: SubscriptionCreate,
    clock: Optional[Callable[[], datetime]] = None,
) -> Subscription:
    """Switch the user to a tier plan. Any current ACTIVE subscription is expired."""
    plan = repo.get_tier_plan(body.tier_plan_id)
    if plan is None:
        raise EntityNotFoundException(f"Tier plan with ID {body.tier_plan_id} not found")

    start = (clock or utc_now)()
    end = add_months(start, body.duration_months)
    subscription = repo.replace_active(user_id, plan.id, start, end)
    logger.info("Subscription started", user_id=user_id, plan=plan.name, end_date=end.isoformat())
    return subscription
