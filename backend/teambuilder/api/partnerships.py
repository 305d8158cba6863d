import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from teambuilder.database import get_db
from teambuilder.models.company import Company
from teambuilder.models.partnership import Partnership, PartnershipMember
from teambuilder.models.user import User
from teambuilder.schemas.partnership import (
    CompanyTeamResponse,
    PartnershipResponse,
    PartnershipWithMembers,
    TeamMember,
)

router = APIRouter(tags=["partnerships"])


@router.get("/partnerships", response_model=list[PartnershipWithMembers], summary="List all teams")
async def list_partnerships(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Partnership)
        .options(selectinload(Partnership.members).selectinload(PartnershipMember.user))
        .order_by(Partnership.team_number, Partnership.company_id)
    )
    return result.scalars().all()


@router.get(
    "/partnerships/user/{user_id}",
    response_model=list[PartnershipResponse],
    summary="List a user's teams",
)
async def list_user_partnerships(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Partnership)
        .join(PartnershipMember, PartnershipMember.partnership_id == Partnership.id)
        .where(PartnershipMember.user_id == user_id)
        .order_by(Partnership.created_at.desc(), Partnership.team_number.desc())
    )
    return result.scalars().all()


@router.get(
    "/teams/company/{company_id}",
    response_model=list[CompanyTeamResponse],
    summary="List a company's teams with members",
)
async def list_company_teams(company_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Teams ordered by number, members in the order they joined."""
    if not await db.get(Company, company_id):
        raise HTTPException(status_code=404, detail="Company not found")

    teams_result = await db.execute(
        select(Partnership)
        .where(Partnership.company_id == company_id)
        .order_by(Partnership.team_number)
    )
    teams = teams_result.scalars().all()

    response = []
    for team in teams:
        members_result = await db.execute(
            select(User)
            .join(PartnershipMember, PartnershipMember.user_id == User.id)
            .where(PartnershipMember.partnership_id == team.id)
            .order_by(User.join_position, PartnershipMember.created_at)
        )
        members = [
            TeamMember(
                name=user.full_name,
                email=user.email,
                phone=user.phone,
                address=user.address,
                is_leader=user.id == team.leader_id,
            )
            for user in members_result.scalars().all()
        ]
        response.append(
            CompanyTeamResponse(
                **PartnershipResponse.model_validate(team).model_dump(),
                members=members,
                member_count=len(members),
            )
        )

    return response
