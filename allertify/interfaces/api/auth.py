"""Auth API routes — login, register, me."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from allertify.application.services.auth_service import (
    authenticate_user,
    create_access_token,
    create_user,
    get_user_by_email,
)
from allertify.core.exceptions import UnauthorizedException, ValidationException
from allertify.domain.models.user import User
from allertify.domain.schemas.auth import LoginRequest, TokenResponse, UserCreate, UserRead
from allertify.infrastructure.database import get_db
from allertify.interfaces.api.deps import get_current_user

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, body.email, body.password)
    if not user:
        raise UnauthorizedException("Incorrect email or password")

    access_token = create_access_token(data={"sub": user.email, "role": user.role})

    return TokenResponse(
        access_token=access_token,
        user=UserRead.model_validate(user),
    )


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register(body: UserCreate, db: Session = Depends(get_db)):
    if get_user_by_email(db, body.email):
        raise ValidationException("Email already registered", {"field": "email"})

    user = create_user(
        db=db,
        full_name=body.full_name,
        email=body.email,
        password=body.password,
        phone_number=body.phone_number,
    )
    return UserRead.model_validate(user)


@router.get("/me", response_model=UserRead)
def get_me(user: User = Depends(get_current_user)):
    return UserRead.model_validate(user)
