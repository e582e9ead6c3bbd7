"""
SQLAlchemy Implementation of Product Repository.
"""

from typing import Optional

from sqlalchemy import func

from allertify.domain.models.product import Product
from allertify.domain.repositories.product_repository import ProductRepository
from allertify.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyProductRepository(SQLAlchemyRepository[Product], ProductRepository):
    """Product repository implementation using SQLAlchemy."""

    def get_by_barcode(self, barcode: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.barcode == barcode).first()

    def find_by_name(self, name: str) -> Optional[Product]:
        pattern = f"%{name.lower()}%"
        return (
            self.db.query(Product)
            .filter(func.lower(Product.name).like(pattern))
            .order_by(Product.id.asc())
            .first()
        )
