"""Allergen catalog and the user ↔ allergen link table."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from allertify.infrastructure.database import Base


class Allergen(Base):
    __tablename__ = "allergens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(String(500), nullable=True)
    is_custom = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Allergen {self.name}>"


class UserAllergen(Base):
    __tablename__ = "user_allergens"
    __table_args__ = (UniqueConstraint("user_id", "allergen_id", name="uq_user_allergen"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    allergen_id = Column(Integer, ForeignKey("allergens.id"), nullable=False)
    security_level = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    allergen = relationship("Allergen", lazy="joined")

    def __repr__(self):
        return f"<UserAllergen user={self.user_id} allergen={self.allergen_id}>"
