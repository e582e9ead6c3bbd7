"""
SQLAlchemy Implementation of Allergen Repository.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from allertify.domain.models.allergen import Allergen, UserAllergen
from allertify.domain.repositories.allergen_repository import AllergenRepository


class SQLAlchemyAllergenRepository(AllergenRepository):
    """Allergen repository implementation using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[Allergen]:
        return self.db.query(Allergen).order_by(Allergen.name.asc()).all()

    def list_for_user(self, user_id: int) -> List[UserAllergen]:
        return (
            self.db.query(UserAllergen)
            .filter(UserAllergen.user_id == user_id)
            .order_by(UserAllergen.id.asc())
            .all()
        )

    def list_names_for_user(self, user_id: int) -> List[str]:
        return [link.allergen.name for link in self.list_for_user(user_id)]

    def _get_or_create(self, name: str, is_custom: bool) -> Allergen:
        allergen = self.db.query(Allergen).filter(func.lower(Allergen.name) == name.lower()).first()
        if allergen is None:
            allergen = Allergen(name=name, is_custom=is_custom)
            self.db.add(allergen)
            self.db.flush()
        return allergen

    def ensure(self, name: str, description: Optional[str] = None) -> Allergen:
        existing = self.db.query(Allergen).filter(func.lower(Allergen.name) == name.lower()).first()
        if existing is not None:
            return existing
        allergen = Allergen(name=name, description=description, is_custom=False)
        self.db.add(allergen)
        self.db.commit()
        self.db.refresh(allergen)
        return allergen

    def replace_for_user(self, user_id: int, items: List[dict]) -> List[UserAllergen]:
        try:
            self.db.query(UserAllergen).filter(UserAllergen.user_id == user_id).delete(
                synchronize_session=False
            )
            linked = set()
            for item in items:
                allergen = self._get_or_create(item["name"].strip(), item.get("is_custom", False))
                if allergen.id in linked:
                    continue
                linked.add(allergen.id)
                self.db.add(
                    UserAllergen(
                        user_id=user_id,
                        allergen_id=allergen.id,
                        security_level=item.get("security_level", 1),
                    )
                )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self.list_for_user(user_id)
