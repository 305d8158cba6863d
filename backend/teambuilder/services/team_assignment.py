"""Place a newly joined company member into teams.

Every user leads the team numbered by their join position, and every user
after the first also joins an earlier team as a member. Team k is led by the
k-th joiner and takes the next G - 1 joiners once team k - 1 is full, so each
team ends up with exactly G people:

    G = 4:  team 1 = {1, 2, 3, 4}   team 2 = {2, 5, 6, 7}   team 3 = {3, 8, 9, 10}

The one team per company currently taking members is "filling"; teams before
it are "complete" and teams after it (leader only so far) are "inactive".
"""

import logging
import re
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from teambuilder.config import GROUP_ID_PREFIX_LENGTH, MAX_TEAM_NUMBER, MIN_GROUP_SIZE
from teambuilder.core.errors import ConfigurationError, ConflictError, NotFoundError
from teambuilder.logging_config import log_context
from teambuilder.models.company import Company
from teambuilder.models.partnership import Partnership, TeamStatus
from teambuilder.models.user import User
from teambuilder.services import record_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentPlan:
    position: int
    leadership_team_number: int
    membership_team_number: int | None
    filling_team_number: int


@dataclass(frozen=True)
class AssignmentResult:
    user_id: uuid.UUID
    position: int
    leader_of: Partnership
    member_of: Partnership | None


def _check_group_size(group_size: int) -> None:
    if group_size < MIN_GROUP_SIZE:
        raise ConfigurationError(
            f"Team size must be at least {MIN_GROUP_SIZE}, got {group_size}"
        )


def membership_team_number(position: int, group_size: int) -> int | None:
    """Earlier team the user at `position` joins as a non-leading member."""
    _check_group_size(group_size)
    if position < 2:
        return None
    return (position - 2) // (group_size - 1) + 1


def filling_team_number(member_count: int, group_size: int) -> int:
    """Team that the next joiner will be placed in, once `member_count` have joined."""
    _check_group_size(group_size)
    return max(member_count - 1, 0) // (group_size - 1) + 1


def plan_assignment(position: int, group_size: int) -> AssignmentPlan:
    if position < 1:
        raise ValueError(f"Join position must be 1-based, got {position}")
    if position > MAX_TEAM_NUMBER:
        raise ConfigurationError(f"Company is full: position {position} exceeds {MAX_TEAM_NUMBER}")
    return AssignmentPlan(
        position=position,
        leadership_team_number=position,
        membership_team_number=membership_team_number(position, group_size),
        filling_team_number=filling_team_number(position, group_size),
    )


def build_group_id(company_name: str, team_number: int) -> str:
    """Human-readable team id, e.g. "MakeCents Group" team 3 -> "MAKECENTSGRO-T3"."""
    prefix = re.sub(r"[^A-Za-z0-9]", "", company_name).upper()[:GROUP_ID_PREFIX_LENGTH]
    return f"{prefix or 'TEAM'}-T{team_number}"


async def _resolve_position(db: AsyncSession, user: User, company_id: uuid.UUID) -> int:
    if user.join_position is not None:
        return user.join_position

    # Rows created before join positions existed: rank by join order
    user_ids = await record_store.list_company_user_ids(db, company_id)
    try:
        return user_ids.index(user.id) + 1
    except ValueError:
        raise NotFoundError(f"User {user.id} does not belong to company {company_id}") from None


async def ensure_team_membership(
    db: AsyncSession,
    company: Company,
    team_number: int,
    user_id: uuid.UUID,
    *,
    status: TeamStatus = TeamStatus.FILLING,
) -> Partnership:
    """Make `user_id` a member of the company's team `team_number`.

    Creates the team with `user_id` as leader when it does not exist yet.
    Safe to repeat: an existing membership is left untouched.
    """
    team = await record_store.get_team_by_number(db, company.id, team_number)
    if team is None:
        try:
            team = await record_store.create_team(
                db,
                company_id=company.id,
                team_number=team_number,
                group_id=build_group_id(company.name, team_number),
                leader_id=user_id,
                status=status,
            )
            logger.info(
                f"Created team {team.group_id} ({status.value}) led by {user_id}",
                extra=log_context(company_id=company.id, team_number=team_number),
            )
        except ConflictError:
            # Another registration created it first
            team = await record_store.get_team_by_number(db, company.id, team_number)
            if team is None:
                raise
            logger.info(
                f"Team {team_number} created concurrently, reusing {team.group_id}",
                extra=log_context(company_id=company.id, team_number=team_number),
            )

    existing_member_ids = await record_store.list_team_member_ids(db, team.id)
    try:
        await record_store.add_membership(db, team.id, user_id)
    except ConflictError:
        logger.info(
            f"User {user_id} already a member of team {team_number}",
            extra=log_context(company_id=company.id, team_number=team_number),
        )
        return team

    for partner_id in existing_member_ids:
        if partner_id != user_id:
            await record_store.add_partnership_history(db, user_id, partner_id, team.id)

    return team


async def assign_user_to_teams(
    db: AsyncSession, user_id: uuid.UUID, company_id: uuid.UUID
) -> AssignmentResult:
    """Run team assignment for a user who just joined `company_id`.

    Must run in the transaction that created the user; any error leaves the
    caller to roll back the whole registration.
    """
    company = await record_store.get_company(db, company_id, for_update=True)
    _check_group_size(company.group_size)

    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")

    position = await _resolve_position(db, user, company_id)
    plan = plan_assignment(position, company.group_size)

    await record_store.complete_filling_teams(
        db, company.id, except_team_number=plan.filling_team_number
    )

    member_of = None
    if (
        plan.membership_team_number is not None
        and plan.membership_team_number < plan.leadership_team_number
    ):
        member_status = (
            TeamStatus.FILLING
            if plan.membership_team_number == plan.filling_team_number
            else TeamStatus.COMPLETE
        )
        member_of = await ensure_team_membership(
            db, company, plan.membership_team_number, user_id, status=member_status
        )

    leader_status = (
        TeamStatus.FILLING
        if plan.leadership_team_number == plan.filling_team_number
        else TeamStatus.INACTIVE
    )
    leader_of = await ensure_team_membership(
        db, company, plan.leadership_team_number, user_id, status=leader_status
    )

    await record_store.mark_team_filling(db, company.id, plan.filling_team_number)

    logger.info(
        f"Assigned user {user_id} at position {position}: leads team "
        f"{plan.leadership_team_number}, member of team {plan.membership_team_number}",
        extra=log_context(company_id=company_id, user_id=user_id),
    )
    return AssignmentResult(
        user_id=user_id,
        position=position,
        leader_of=leader_of,
        member_of=member_of,
    )
