"""Daily scan quota tracker.

Usage is counted per user per local calendar day in the configured timezone.
Rows are keyed by the UTC instant of local midnight. Check and increment are
separate round-trips, so simultaneous requests from one user can overshoot
the limit slightly.
"""

from datetime import datetime, timedelta
from typing import Callable, List, Optional

import structlog

from allertify.config import ScanConfig
from allertify.core.timezone import local_date, local_midnight_utc, start_of_day_utc, utc_now
from allertify.domain.models.scan_usage import DailyScanUsage
from allertify.domain.repositories.subscription_repository import SubscriptionRepository
from allertify.domain.repositories.usage_repository import ScanUsageRepository
from allertify.domain.schemas.scan import ScanLimitStatus, ScanPermission

logger = structlog.get_logger(__name__)


class DailyQuotaTracker:
    def __init__(
        self,
        usage_repo: ScanUsageRepository,
        subscription_repo: SubscriptionRepository,
        config: ScanConfig,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.usage_repo = usage_repo
        self.subscription_repo = subscription_repo
        self.config = config
        self.clock = clock or utc_now

    def today_start(self) -> datetime:
        return start_of_day_utc(self.clock(), self.config.timezone)

    def get_daily_limit(self, user_id: int) -> int:
        """Limit from the active, non-expired subscription's tier plan, else the default."""
        subscription = self.subscription_repo.get_active(user_id, self.clock())
        if subscription is not None and subscription.tier_plan is not None:
            return subscription.tier_plan.scan_count_limit
        return self.config.default_daily_limit

    def get_usage_today(self, user_id: int) -> int:
        return self.usage_repo.get_count(user_id, self.today_start())

    def get_status(self, user_id: int) -> ScanLimitStatus:
        daily_limit = self.get_daily_limit(user_id)
        current_usage = self.get_usage_today(user_id)
        return ScanLimitStatus(
            user_id=user_id,
            current_usage=current_usage,
            daily_limit=daily_limit,
            remaining_scans=max(0, daily_limit - current_usage),
            is_limit_exceeded=current_usage >= daily_limit,
        )

    def can_scan_today(self, user_id: int) -> ScanPermission:
        """Fails open: a broken quota lookup never blocks the user."""
        try:
            status = self.get_status(user_id)
        except Exception as e:
            fallback = self.config.fallback_daily_limit
            logger.error("Quota check failed, allowing scan", user_id=user_id, error=str(e))
            return ScanPermission(can_scan=True, remaining_scans=fallback, daily_limit=fallback)

        return ScanPermission(
            can_scan=not status.is_limit_exceeded,
            remaining_scans=status.remaining_scans,
            daily_limit=status.daily_limit,
        )

    def increment_usage(self, user_id: int) -> int:
        """Record one completed scan. Call only after the scan row is persisted."""
        count = self.usage_repo.increment(user_id, self.today_start())
        logger.debug("Scan usage incremented", user_id=user_id, scan_count=count)
        return count

    def reset_usage(self, user_id: int) -> None:
        deleted = self.usage_repo.delete(user_id, self.today_start())
        logger.info("Daily usage reset", user_id=user_id, deleted=deleted)

    def get_usage_history(self, user_id: int, days: int = 7) -> List[DailyScanUsage]:
        """Usage rows for today and the previous `days - 1` local days, newest first."""
        today = local_date(self.clock(), self.config.timezone)
        since = local_midnight_utc(today - timedelta(days=max(days, 1) - 1), self.config.timezone)
        return self.usage_repo.list_since(user_id, since)
