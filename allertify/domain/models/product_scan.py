"""Product scan — one persisted allergen risk evaluation."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from allertify.infrastructure.database import Base


class ProductScan(Base):
    __tablename__ = "product_scans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    scan_date = Column(DateTime(timezone=True), nullable=False, index=True)
    risk_level = Column(String(20), nullable=False)  # SAFE, CAUTION, RISKY
    risk_explanation = Column(Text, nullable=True)
    matched_allergens = Column(Text, nullable=True)  # comma-joined names
    is_saved = Column(Boolean, nullable=False, default=False)

    product = relationship("Product", lazy="joined")

    def __repr__(self):
        return f"<ProductScan {self.id} user={self.user_id} {self.risk_level}>"
