"""
SQLAlchemy Implementation of Subscription Repository.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from allertify.domain.models.subscription import (
    STATUS_ACTIVE,
    STATUS_EXPIRED,
    Subscription,
    TierPlan,
)
from allertify.domain.repositories.subscription_repository import SubscriptionRepository


class SQLAlchemySubscriptionRepository(SubscriptionRepository):
    """Subscription repository implementation using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def get_active(self, user_id: int, now: datetime) -> Optional[Subscription]:
        try:
            return (
                self.db.query(Subscription)
                .filter(
                    Subscription.user_id == user_id,
                    Subscription.status == STATUS_ACTIVE,
                    Subscription.end_date >= now,
                )
                .order_by(Subscription.start_date.desc())
                .first()
            )
        except Exception:
            self.db.rollback()
            raise

    def list_tier_plans(self) -> List[TierPlan]:
        return self.db.query(TierPlan).order_by(TierPlan.scan_count_limit.asc()).all()

    def get_tier_plan(self, tier_plan_id: int) -> Optional[TierPlan]:
        return self.db.get(TierPlan, tier_plan_id)

    def get_tier_plan_by_name(self, name: str) -> Optional[TierPlan]:
        return self.db.query(TierPlan).filter(TierPlan.name == name).first()

    def create_tier_plan(self, data: dict) -> TierPlan:
        plan = TierPlan(**data)
        self.db.add(plan)
        self.db.commit()
        self.db.refresh(plan)
        return plan

    def replace_active(
        self, user_id: int, tier_plan_id: int, start_date: datetime, end_date: datetime
    ) -> Subscription:
        try:
            (
                self.db.query(Subscription)
                .filter(Subscription.user_id == user_id, Subscription.status == STATUS_ACTIVE)
                .update(
                    {Subscription.status: STATUS_EXPIRED, Subscription.end_date: start_date},
                    synchronize_session=False,
                )
            )
            subscription = Subscription(
                user_id=user_id,
                tier_plan_id=tier_plan_id,
                start_date=start_date,
                end_date=end_date,
                status=STATUS_ACTIVE,
            )
            self.db.add(subscription)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(subscription)
        return subscription
