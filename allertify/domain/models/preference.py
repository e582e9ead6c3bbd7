"""User product preference — RED/GREEN list classification of a product."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from allertify.infrastructure.database import Base


class UserProductPreference(Base):
    __tablename__ = "user_product_preferences"
    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_user_product_preference"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    list_type = Column(String(10), nullable=False)  # RED, GREEN
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<UserProductPreference user={self.user_id} product={self.product_id} {self.list_type}>"
