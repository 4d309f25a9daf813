"""User API routes — read-only listing."""

from typing import List

from fastapi import APIRouter, Depends

from app.application.services.user_service import list_users
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.user import UserRead
from app.interfaces.deps import get_user_repository

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=List[UserRead])
def read_users(repo: UserRepository = Depends(get_user_repository)):
    """List all users with decrypted ID card numbers."""
    return list_users(repo)
