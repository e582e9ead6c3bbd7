"""Pydantic schemas for allergens."""

from typing import Optional

from pydantic import Field

from allertify.domain.schemas.common import CamelModel


class AllergenRead(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    is_custom: bool = False


class UserAllergenItem(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    security_level: int = Field(default=1, ge=1, le=5)
    is_custom: bool = False


class UserAllergenRead(CamelModel):
    allergen_id: int
    name: str
    security_level: int
    is_custom: bool = False


class UserAllergensUpdate(CamelModel):
    allergens: list[UserAllergenItem]
