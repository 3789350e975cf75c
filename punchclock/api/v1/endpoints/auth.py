"""
Auth endpoints — login (OAuth2 password flow) & user registration.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from punchclock.api.v1.deps import get_db, require_manager
from punchclock.core.config import settings
from punchclock.core.exceptions import ValidationError
from punchclock.core.security import (create_access_token, get_password_hash,
                                      verify_password)
from punchclock.models.user import User
from punchclock.schemas.token import Token
from punchclock.schemas.user import UserCreate, UserRead
from punchclock.services.directory import get_user

# Rate limiter, keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=Token)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login_for_access_token(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
) -> Token:
    """Authenticate with email/password and return a bearer token."""
    result = await db.execute(
        select(User).where(User.email == form_data.username.lower().strip())
    )
    user = result.scalar_one_or_none()

    if user is None or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive",
        )

    return Token(access_token=create_access_token(user.id))


@router.post("/register", response_model=UserRead, status_code=201)
async def register_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    manager: User = Depends(require_manager),
) -> User:
    """Create a user account (ADMIN / MANAGER only)."""
    existing = await db.execute(select(User).where(User.email == body.email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="Email already exists")

    if body.manager_id is not None and await get_user(db, body.manager_id) is None:
        raise ValidationError(f"Unknown manager_id '{body.manager_id}'")

    user = User(
        email=body.email,
        hashed_password=get_password_hash(body.password),
        full_name=body.full_name,
        role=body.role,
        manager_id=body.manager_id,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User %s (%s) registered by %s", user.email, user.role, manager.id)
    return user
