"""
SQLAlchemy Implementation of User Product Preference Repository.
"""

from typing import Dict, Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from allertify.domain.models.preference import UserProductPreference
from allertify.domain.repositories.preference_repository import PreferenceRepository


class SQLAlchemyPreferenceRepository(PreferenceRepository):
    """Preference repository implementation using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int, product_id: int) -> Optional[UserProductPreference]:
        return (
            self.db.query(UserProductPreference)
            .filter(
                UserProductPreference.user_id == user_id,
                UserProductPreference.product_id == product_id,
            )
            .first()
        )

    def get_list_types(self, user_id: int, product_ids: Iterable[int]) -> Dict[int, str]:
        ids = list(set(product_ids))
        if not ids:
            return {}
        rows = (
            self.db.query(UserProductPreference.product_id, UserProductPreference.list_type)
            .filter(
                UserProductPreference.user_id == user_id,
                UserProductPreference.product_id.in_(ids),
            )
            .all()
        )
        return {r.product_id: r.list_type for r in rows}

    def upsert(self, user_id: int, product_id: int, list_type: str) -> UserProductPreference:
        pref = self.get(user_id, product_id)
        if pref is None:
            pref = UserProductPreference(user_id=user_id, product_id=product_id, list_type=list_type)
            self.db.add(pref)
        else:
            pref.list_type = list_type
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent request created the row first
            self.db.rollback()
            pref = self.get(user_id, product_id)
            pref.list_type = list_type
            self.db.commit()
        self.db.refresh(pref)
        return pref

    def delete(self, user_id: int, product_id: int) -> int:
        deleted = (
            self.db.query(UserProductPreference)
            .filter(
                UserProductPreference.user_id == user_id,
                UserProductPreference.product_id == product_id,
            )
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted
