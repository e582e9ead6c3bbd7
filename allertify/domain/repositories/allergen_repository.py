"""
Allergen Repository Interface.
"""

from typing import List, Optional, Protocol

from allertify.domain.models.allergen import Allergen, UserAllergen


class AllergenRepository(Protocol):
    """Global allergen catalog and per-user allergen links."""

    def list_all(self) -> List[Allergen]:
        ...

    def ensure(self, name: str, description: Optional[str] = None) -> Allergen:
        """Get the catalog allergen by name (case-insensitive), creating it if missing."""
        ...

    def list_names_for_user(self, user_id: int) -> List[str]:
        """Allergen names linked to the user, in link order."""
        ...

    def list_for_user(self, user_id: int) -> List[UserAllergen]:
        ...

    def replace_for_user(self, user_id: int, items: List[dict]) -> List[UserAllergen]:
        """All-or-nothing: drop the user's links, upsert allergens by name, relink.

        Each item is {"name", "security_level", "is_custom"}.
        """
        ...
