"""Product domain model — maps to the 'products' table."""

from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func

from allertify.infrastructure.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Real barcode, or a minted IMG_/NAME_ key for products without one
    barcode = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(500), nullable=False)
    image_url = Column(Text, nullable=True)
    ingredients = Column(Text, nullable=True)
    nutritional_score = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Product {self.barcode} - {self.name}>"
