"""Persistence primitives used by team assignment.

Writes that can hit a uniqueness constraint run inside a SAVEPOINT, so a
conflict only undoes that statement and the caller's transaction stays usable.
Conflicts are reported as ConflictError; callers decide whether that is fatal.
"""

import logging
import uuid

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teambuilder.core.errors import ConflictError, NotFoundError
from teambuilder.models.company import Company
from teambuilder.models.partnership import (
    Partnership,
    PartnershipHistory,
    PartnershipMember,
    TeamStatus,
)
from teambuilder.models.user import User

logger = logging.getLogger(__name__)


async def get_company(
    db: AsyncSession, company_id: uuid.UUID, *, for_update: bool = False
) -> Company:
    stmt = select(Company).where(Company.id == company_id)
    if for_update:
        stmt = stmt.with_for_update()
    company = (await db.execute(stmt)).scalar_one_or_none()
    if company is None:
        raise NotFoundError(f"Company {company_id} not found")
    return company


async def allocate_join_position(db: AsyncSession, company_id: uuid.UUID) -> int:
    """Atomically take the next 1-based join position for a company.

    The UPDATE holds the company row lock until the surrounding transaction
    ends, so concurrent registrations for one company get distinct, gap-free
    positions.
    """
    result = await db.execute(
        update(Company)
        .where(Company.id == company_id)
        .values(member_seq=Company.member_seq + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError(f"Company {company_id} not found")

    position = (
        await db.execute(select(Company.member_seq).where(Company.id == company_id))
    ).scalar_one()
    return position


async def list_company_user_ids(db: AsyncSession, company_id: uuid.UUID) -> list[uuid.UUID]:
    """User ids of a company in join order.

    Rows without a join position sort by creation time, with the id as a
    final tiebreaker so the order is total.
    """
    result = await db.execute(
        select(User.id)
        .where(User.company_id == company_id)
        .order_by(User.join_position.asc().nulls_last(), User.created_at.asc(), User.id.asc())
    )
    return list(result.scalars().all())


async def get_team_by_number(
    db: AsyncSession, company_id: uuid.UUID, team_number: int
) -> Partnership | None:
    result = await db.execute(
        select(Partnership).where(
            Partnership.company_id == company_id,
            Partnership.team_number == team_number,
        )
    )
    return result.scalar_one_or_none()


async def create_team(
    db: AsyncSession,
    company_id: uuid.UUID,
    team_number: int,
    group_id: str,
    leader_id: uuid.UUID,
    status: TeamStatus,
) -> Partnership:
    team = Partnership(
        group_id=group_id,
        company_id=company_id,
        team_number=team_number,
        leader_id=leader_id,
        status=status,
    )
    try:
        async with db.begin_nested():
            db.add(team)
            await db.flush()
    except IntegrityError as e:
        raise ConflictError(
            f"Team {team_number} already exists for company {company_id}"
        ) from e
    return team


async def add_membership(
    db: AsyncSession, team_id: uuid.UUID, user_id: uuid.UUID
) -> PartnershipMember:
    member = PartnershipMember(partnership_id=team_id, user_id=user_id)
    try:
        async with db.begin_nested():
            db.add(member)
            await db.flush()
    except IntegrityError as e:
        raise ConflictError(f"User {user_id} is already a member of team {team_id}") from e
    return member


async def list_team_member_ids(db: AsyncSession, team_id: uuid.UUID) -> list[uuid.UUID]:
    result = await db.execute(
        select(PartnershipMember.user_id)
        .where(PartnershipMember.partnership_id == team_id)
        .order_by(PartnershipMember.created_at.asc(), PartnershipMember.id.asc())
    )
    return list(result.scalars().all())


async def add_partnership_history(
    db: AsyncSession, user1_id: uuid.UUID, user2_id: uuid.UUID, team_id: uuid.UUID
) -> None:
    db.add(PartnershipHistory(user1_id=user1_id, user2_id=user2_id, partnership_id=team_id))
    await db.flush()


async def complete_filling_teams(
    db: AsyncSession, company_id: uuid.UUID, *, except_team_number: int
) -> None:
    """Mark every filling team of the company complete, except one."""
    await db.execute(
        update(Partnership)
        .where(
            Partnership.company_id == company_id,
            Partnership.status == TeamStatus.FILLING,
            Partnership.team_number != except_team_number,
        )
        .values(status=TeamStatus.COMPLETE)
        .execution_options(synchronize_session="fetch")
    )


async def mark_team_filling(
    db: AsyncSession, company_id: uuid.UUID, team_number: int
) -> None:
    """Make `team_number` the company's filling team.

    The team may be leader-only (inactive) or, after the team size was raised,
    already marked complete. Other filling teams must be completed first.
    """
    await db.execute(
        update(Partnership)
        .where(
            Partnership.company_id == company_id,
            Partnership.team_number == team_number,
            Partnership.status != TeamStatus.FILLING,
        )
        .values(status=TeamStatus.FILLING)
        .execution_options(synchronize_session="fetch")
    )
