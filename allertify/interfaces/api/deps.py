"""FastAPI dependency — JWT auth."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from allertify.application.services.auth_service import decode_access_token, get_user_by_email
from allertify.core.exceptions import ForbiddenException, UnauthorizedException
from allertify.domain.models.user import User
from allertify.infrastructure.database import get_db

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Extract and validate the current user from the bearer token."""
    if credentials is None:
        raise UnauthorizedException("Authentication required")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedException("Invalid or expired token")

    email: Optional[str] = payload.get("sub")
    if email is None:
        raise UnauthorizedException("Invalid token")

    user = get_user_by_email(db, email)
    if user is None:
        raise UnauthorizedException("User not found")

    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise ForbiddenException("Only administrators can access this resource")
    return user
