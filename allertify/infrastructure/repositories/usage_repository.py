"""
SQLAlchemy Implementation of Daily Scan Usage Repository.
"""

from datetime import datetime
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from allertify.domain.models.scan_usage import DailyScanUsage
from allertify.domain.repositories.usage_repository import ScanUsageRepository


class SQLAlchemyScanUsageRepository(ScanUsageRepository):
    """Usage counters keyed by the (user_id, usage_date) unique constraint."""

    def __init__(self, db: Session):
        self.db = db

    def _row_query(self, user_id: int, usage_date: datetime):
        return self.db.query(DailyScanUsage).filter(
            DailyScanUsage.user_id == user_id,
            DailyScanUsage.usage_date == usage_date,
        )

    def get_count(self, user_id: int, usage_date: datetime) -> int:
        try:
            row = self._row_query(user_id, usage_date).first()
        except Exception:
            self.db.rollback()
            raise
        return row.scan_count if row else 0

    def _bump(self, user_id: int, usage_date: datetime) -> int:
        return self._row_query(user_id, usage_date).update(
            {DailyScanUsage.scan_count: DailyScanUsage.scan_count + 1},
            synchronize_session=False,
        )

    def increment(self, user_id: int, usage_date: datetime) -> int:
        try:
            # Single-statement increment when the row exists, insert otherwise.
            if not self._bump(user_id, usage_date):
                self.db.add(DailyScanUsage(user_id=user_id, usage_date=usage_date, scan_count=1))
                try:
                    self.db.commit()
                    return 1
                except IntegrityError:
                    # A concurrent request created the row first
                    self.db.rollback()
                    self._bump(user_id, usage_date)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self.get_count(user_id, usage_date)

    def delete(self, user_id: int, usage_date: datetime) -> int:
        deleted = self._row_query(user_id, usage_date).delete(synchronize_session=False)
        self.db.commit()
        return deleted

    def list_since(self, user_id: int, since: datetime) -> List[DailyScanUsage]:
        return (
            self.db.query(DailyScanUsage)
            .filter(DailyScanUsage.user_id == user_id, DailyScanUsage.usage_date >= since)
            .order_by(DailyScanUsage.usage_date.desc())
            .all()
        )
