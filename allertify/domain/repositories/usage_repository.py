"""
Daily Scan Usage Repository Interface.
"""

from datetime import datetime
from typing import List, Protocol

from allertify.domain.models.scan_usage import DailyScanUsage


class ScanUsageRepository(Protocol):
    """Per-(user, usage_date) scan counters."""

    def get_count(self, user_id: int, usage_date: datetime) -> int:
        """Scan count for the day, 0 if no row exists."""
        ...

    def increment(self, user_id: int, usage_date: datetime) -> int:
        """Upsert: add one to the day's counter, creating it at 1. Returns the new count."""
        ...

    def delete(self, user_id: int, usage_date: datetime) -> int:
        """Delete the day's row. Returns number of rows removed."""
        ...

    def list_since(self, user_id: int, since: datetime) -> List[DailyScanUsage]:
        """Rows with usage_date >= since, newest first."""
        ...
