"""
Product Repository Interface.
"""

from typing import Optional

from allertify.domain.models.product import Product
from allertify.domain.repositories.base import BaseRepository


class ProductRepository(BaseRepository[Product]):
    """Interface for Product-specific operations."""

    def get_by_barcode(self, barcode: str) -> Optional[Product]:
        """Get a product by its unique barcode (or minted key)."""
        ...

    def find_by_name(self, name: str) -> Optional[Product]:
        """Case-insensitive contains match on product name."""
        ...
