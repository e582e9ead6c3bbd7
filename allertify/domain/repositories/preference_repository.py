"""
User Product Preference Repository Interface.
"""

from typing import Dict, Iterable, Optional, Protocol

from allertify.domain.models.preference import UserProductPreference


class PreferenceRepository(Protocol):
    """RED/GREEN list classifications, unique per (user, product)."""

    def get(self, user_id: int, product_id: int) -> Optional[UserProductPreference]:
        ...

    def get_list_types(self, user_id: int, product_ids: Iterable[int]) -> Dict[int, str]:
        """product_id -> list_type for the given products."""
        ...

    def upsert(self, user_id: int, product_id: int, list_type: str) -> UserProductPreference:
        ...

    def delete(self, user_id: int, product_id: int) -> int:
        ...
