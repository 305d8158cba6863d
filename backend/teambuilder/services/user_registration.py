"""Create a user and place them into teams as one unit of work."""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teambuilder.core.errors import ConflictError
from teambuilder.logging_config import log_context
from teambuilder.models.user import User
from teambuilder.schemas.user import UserCreateRequest
from teambuilder.services import record_store
from teambuilder.services.team_assignment import assign_user_to_teams

logger = logging.getLogger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalars().first()


async def register_user(db: AsyncSession, request: UserCreateRequest) -> User:
    """Insert the user, take a join position and run team assignment.

    Everything happens inside one SAVEPOINT: if the company is unknown, the
    email is taken or assignment fails, no user, team or membership row is kept.
    """
    if await get_user_by_email(db, request.email):
        raise ConflictError(f"A user with email {request.email} already exists")

    async with db.begin_nested():
        join_position = None
        if request.company_id is not None:
            join_position = await record_store.allocate_join_position(db, request.company_id)

        user = User(
            first_name=request.first_name,
            last_name=request.last_name,
            email=str(request.email),
            phone=request.phone,
            address=request.address,
            company_id=request.company_id,
            join_position=join_position,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError as e:
            raise ConflictError(f"A user with email {request.email} already exists") from e

        if user.company_id is not None:
            await assign_user_to_teams(db, user.id, user.company_id)

    logger.info(
        f"Registered user {user.id}",
        extra=log_context(company_id=user.company_id, user_id=user.id),
    )
    return user
