"""Allergen catalog and user allergen profile."""

from typing import List

import structlog

from allertify.domain.repositories.allergen_repository import AllergenRepository
from allertify.domain.schemas.allergen import UserAllergenItem, UserAllergenRead

logger = structlog.get_logger(__name__)

STANDARD_ALLERGENS = [
    ("Milk", "Milk and dairy products, including lactose and casein"),
    ("Eggs", "Eggs and egg-derived ingredients"),
    ("Fish", "Finned fish such as salmon, tuna and cod"),
    ("Shellfish", "Crustaceans and molluscs such as shrimp, crab and lobster"),
    ("Tree Nuts", "Almonds, walnuts, cashews, hazelnuts and other tree nuts"),
    ("Peanuts", "Peanuts and peanut-derived ingredients"),
    ("Wheat", "Wheat and gluten-containing grains"),
    ("Soybeans", "Soy and soy-derived ingredients"),
    ("Sesame", "Sesame seeds and sesame oil"),
]


def seed_standard_allergens(repo: AllergenRepository) -> int:
    """Make sure the standard catalog exists. Returns the catalog size afterwards."""
    for name, description in STANDARD_ALLERGENS:
        repo.ensure(name, description)
    total = len(repo.list_all())
    logger.info("Allergen catalog verified", total=total)
    return total


def get_user_allergens(repo: AllergenRepository, user_id: int) -> List[UserAllergenRead]:
    return [
        UserAllergenRead(
            allergen_id=link.allergen_id,
            name=link.allergen.name,
            security_level=link.security_level,
            is_custom=bool(link.allergen.is_custom),
        )
        for link in repo.list_for_user(user_id)
    ]


def set_user_allergens(
    repo: AllergenRepository, user_id: int, items: List[UserAllergenItem]
) -> List[UserAllergenRead]:
    """Replace the user's allergen profile with `items`."""
    repo.replace_for_user(user_id, [item.model_dump() for item in items])
    logger.info("User allergens updated", user_id=user_id, count=len(items))
    return get_user_allergens(repo, user_id)
