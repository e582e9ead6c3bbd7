"""Tier plans and user subscriptions."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from allertify.infrastructure.database import Base

STATUS_ACTIVE = "ACTIVE"
STATUS_EXPIRED = "EXPIRED"
STATUS_CANCELLED = "CANCELLED"


class TierPlan(Base):
    __tablename__ = "tier_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False)  # FREE, PREMIUM, ...
    description = Column(String(500), nullable=True)
    scan_count_limit = Column(Integer, nullable=False)
    saved_product_limit = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<TierPlan {self.name} scans={self.scan_count_limit}>"


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    tier_plan_id = Column(Integer, ForeignKey("tier_plans.id"), nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE, index=True)

    tier_plan = relationship("TierPlan", lazy="joined")

    def __repr__(self):
        return f"<Subscription user={self.user_id} plan={self.tier_plan_id} {self.status}>"
