"""Subscription API routes — tier plans and the current user's subscription."""

from datetime import datetime
from typing import Callable, List

from fastapi import APIRouter, Depends, status

from allertify.application.services import subscription_service
from allertify.domain.models.user import User
from allertify.domain.repositories.subscription_repository import SubscriptionRepository
from allertify.domain.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionRead,
    TierPlanCreate,
    TierPlanRead,
)
from allertify.interfaces.api.deps import get_current_user, require_admin
from allertify.interfaces.deps import get_clock, get_subscription_repository

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.get("/plans", response_model=List[TierPlanRead])
def list_plans(
    repo: SubscriptionRepository = Depends(get_subscription_repository),
    user: User = Depends(get_current_user),
):
    return [TierPlanRead.model_validate(p) for p in repo.list_tier_plans()]


@router.post("/plans", response_model=TierPlanRead, status_code=status.HTTP_201_CREATED)
def create_plan(
    body: TierPlanCreate,
    repo: SubscriptionRepository = Depends(get_subscription_repository),
    admin: User = Depends(require_admin),
):
    return TierPlanRead.model_validate(subscription_service.create_tier_plan(repo, body))


@router.get("/me", response_model=SubscriptionRead)
def my_subscription(
    repo: SubscriptionRepository = Depends(get_subscription_repository),
    clock: Callable[[], datetime] = Depends(get_clock),
    user: User = Depends(get_current_user),
):
    return SubscriptionRead.model_validate(
        subscription_service.get_current_subscription(repo, user.id, clock)
    )


@router.post("", response_model=SubscriptionRead, status_code=status.HTTP_201_CREATED)
def subscribe(
    body: SubscriptionCreate,
    repo: SubscriptionRepository = Depends(get_subscription_repository),
    clock: Callable[[], datetime] = Depends(get_clock),
    user: User = Depends(get_current_user),
):
    return SubscriptionRead.model_validate(subscription_service.subscribe(repo, user.id, body, clock))
