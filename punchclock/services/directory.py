"""Directory lookups — role-based visibility over the users table."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from punchclock.core.exceptions import AuthorizationDenied, RecordNotFound
from punchclock.db.session import store_errors
from punchclock.models.user import User

FULL_VISIBILITY_ROLES = frozenset({"ADMIN", "MANAGER"})


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    with store_errors():
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()


async def visible_employee_ids(db: AsyncSession, viewer: User) -> list[str] | None:
    """Employees whose records *viewer* may see; ``None`` means everyone.

    ADMIN / MANAGER see all, TEAM_LEAD sees self plus direct reportees,
    everyone else sees only themselves.
    """
    if viewer.role in FULL_VISIBILITY_ROLES:
        return None
    if viewer.role == "TEAM_LEAD":
        with store_errors():
            result = await db.execute(select(User.id).where(User.manager_id == viewer.id))
            return [viewer.id, *result.scalars().all()]
    return [viewer.id]


async def list_visible_users(
    db: AsyncSession, viewer: User, *, skip: int, limit: int
) -> tuple[int, list[User]]:
    """Page through the users *viewer* may see, newest first."""
    allowed = await visible_employee_ids(db, viewer)
    query = select(User)
    count_query = select(func.count(User.id))
    if allowed is not None:
        query = query.where(User.id.in_(allowed))
        count_query = count_query.where(User.id.in_(allowed))
    with store_errors():
        total = (await db.execute(count_query)).scalar() or 0
        result = await db.execute(
            query.order_by(User.created_at.desc()).offset(skip).limit(limit)
        )
        return total, list(result.scalars().all())


async def get_visible_user(db: AsyncSession, viewer: User, user_id: str) -> User:
    """Look up one user, checking *viewer*'s scope before existence."""
    allowed = await visible_employee_ids(db, viewer)
    if allowed is not None and user_id not in allowed:
        raise AuthorizationDenied("Forbidden: cannot access this user")
    user = await get_user(db, user_id)
    if user is None:
        raise RecordNotFound("User not found")
    return user
