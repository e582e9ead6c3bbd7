"""Allergen API routes — catalog and the current user's allergen profile."""

from typing import List

from fastapi import APIRouter, Depends

from allertify.application.services.allergen_service import get_user_allergens, set_user_allergens
from allertify.domain.models.user import User
from allertify.domain.repositories.allergen_repository import AllergenRepository
from allertify.domain.schemas.allergen import AllergenRead, UserAllergenRead, UserAllergensUpdate
from allertify.interfaces.api.deps import get_current_user
from allertify.interfaces.deps import get_allergen_repository

router = APIRouter(tags=["Allergens"])


@router.get("/allergens", response_model=List[AllergenRead])
def list_allergens(
    repo: AllergenRepository = Depends(get_allergen_repository),
    user: User = Depends(get_current_user),
):
    return [AllergenRead.model_validate(a) for a in repo.list_all()]


@router.get("/users/me/allergens", response_model=List[UserAllergenRead])
def my_allergens(
    repo: AllergenRepository = Depends(get_allergen_repository),
    user: User = Depends(get_current_user),
):
    return get_user_allergens(repo, user.id)


@router.put("/users/me/allergens", response_model=List[UserAllergenRead])
def update_my_allergens(
    body: UserAllergensUpdate,
    repo: AllergenRepository = Depends(get_allergen_repository),
    user: User = Depends(get_current_user),
):
    return set_user_allergens(repo, user.id, body.allergens)
