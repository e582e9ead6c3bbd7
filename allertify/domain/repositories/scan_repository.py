"""
Product Scan Repository Interface.
"""

from typing import List, Optional

from allertify.domain.models.product_scan import ProductScan
from allertify.domain.repositories.base import BaseRepository


class ScanRepository(BaseRepository[ProductScan]):
    """Interface for ProductScan-specific operations."""

    def get_owned(self, scan_id: int, user_id: int) -> Optional[ProductScan]:
        """Get a scan only if it belongs to the user."""
        ...

    def list_for_user(
        self, user_id: int, saved_only: bool = False, limit: int = 20, offset: int = 0
    ) -> List[ProductScan]:
        """Scans of a user, newest first."""
        ...
