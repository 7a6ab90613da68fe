"""User administration routes."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session as DbSession

from api.database import get_db
from api.dependencies.auth import get_current_user
from api.errors import AuthorizationError, NotFoundError
from api.models.auth import UserResponse
from api.models.db.user import User
from api.services.auth_service import approve_user, get_user_by_id

router = APIRouter(prefix="/api/users", tags=["users"])


def _require_admin(user: User) -> None:
    if not user.is_admin:
        raise AuthorizationError("Only admins can manage users")


@router.get("/pending", response_model=list[UserResponse])
async def list_pending_users(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> list[User]:
    """List accounts waiting for approval."""
    _require_admin(current_user)
    stmt = select(User).where(User.approved.is_(False)).order_by(User.created_at, User.id)
    return list(db.execute(stmt).scalars())


@router.post("/{user_id}/approve", response_model=UserResponse)
async def approve(
    user_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[DbSession, Depends(get_db)],
) -> User:
    """Approve a pending account so it can log in."""
    _require_admin(current_user)
    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return approve_user(db, user)
