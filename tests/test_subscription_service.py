from datetime import datetime, timezone

from allertify.application.services.subscription_service import add_months, seed_tier_plans
from allertify.infrastructure.repositories.subscription_repository import SQLAlchemySubscriptionRepository

UTC = timezone.utc


def test_add_months_clamps_to_month_end():
    assert add_months(datetime(2025, 1, 31, tzinfo=UTC), 1) == datetime(2025, 2, 28, tzinfo=UTC)
    assert add_months(datetime(2025, 11, 15, tzinfo=UTC), 3) == datetime(2026, 2, 15, tzinfo=UTC)
    assert add_months(datetime(2024, 2, 29, tzinfo=UTC), 12) == datetime(2025, 2, 28, tzinfo=UTC)


def test_seed_tier_plans_is_idempotent(db):
    repo = SQLAlchemySubscriptionRepository(db)
    seed_tier_plans(repo)
    seed_tier_plans(repo)
    assert [p.name for p in repo.list_tier_plans()] == ["FREE", "PREMIUM"]
