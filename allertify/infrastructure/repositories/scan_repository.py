"""
SQLAlchemy Implementation of Product Scan Repository.
"""

from typing import List, Optional

from allertify.domain.models.product_scan import ProductScan
from allertify.domain.repositories.scan_repository import ScanRepository
from allertify.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyScanRepository(SQLAlchemyRepository[ProductScan], ScanRepository):
    """ProductScan repository implementation using SQLAlchemy."""

    def _user_query(self, user_id: int, saved_only: bool):
        query = self.db.query(ProductScan).filter(ProductScan.user_id == user_id)
        if saved_only:
            query = query.filter(ProductScan.is_saved.is_(True))
        return query

    def get_owned(self, scan_id: int, user_id: int) -> Optional[ProductScan]:
        return (
            self.db.query(ProductScan)
            .filter(ProductScan.id == scan_id, ProductScan.user_id == user_id)
            .first()
        )

    def list_for_user(
        self, user_id: int, saved_only: bool = False, limit: int = 20, offset: int = 0
    ) -> List[ProductScan]:
        return (
            self._user_query(user_id, saved_only)
            .order_by(ProductScan.scan_date.desc(), ProductScan.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
