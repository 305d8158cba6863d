import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from teambuilder.database import get_db
from teambuilder.models.partnership import Partnership, PartnershipMember
from teambuilder.models.user import User
from teambuilder.schemas.partnership import PartnershipResponse, UserStatusResponse
from teambuilder.schemas.user import (
    UserContact,
    UserCreateRequest,
    UserEnvelope,
    UserResponse,
    UserStatusRequest,
)
from teambuilder.services.user_registration import get_user_by_email, register_user

router = APIRouter(tags=["users"])


async def _partnerships_for_user(db: AsyncSession, user_id: uuid.UUID) -> list[Partnership]:
    result = await db.execute(
        select(Partnership)
        .join(PartnershipMember, PartnershipMember.partnership_id == Partnership.id)
        .where(PartnershipMember.user_id == user_id)
        .order_by(Partnership.created_at.desc(), Partnership.team_number.desc())
    )
    return list(result.scalars().all())


@router.post("/users", response_model=UserEnvelope, summary="Register user")
async def create_user(request: UserCreateRequest, db: AsyncSession = Depends(get_db)):
    """Create a user; users with a company are placed into teams immediately."""
    user = await register_user(db, request)
    await db.refresh(user)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.get("/users", response_model=list[UserResponse], summary="List users")
async def list_users(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).order_by(User.created_at, User.join_position))
    return result.scalars().all()


@router.get("/users/email/{email}", response_model=UserResponse, summary="Get user by email")
async def get_user_by_email_route(email: str, db: AsyncSession = Depends(get_db)):
    user = await get_user_by_email(db, email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/users/{user_id}", response_model=UserResponse, summary="Get user")
async def get_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("/user-status", response_model=UserStatusResponse, summary="Check user status")
async def user_status(request: UserStatusRequest, db: AsyncSession = Depends(get_db)):
    """Look a user up by email, or by first (and optionally last) name."""
    user = None
    if request.email:
        user = await get_user_by_email(db, request.email)
    elif request.first_name:
        stmt = select(User).where(func.lower(User.first_name) == request.first_name.lower())
        if request.last_name:
            stmt = stmt.where(func.lower(User.last_name) == request.last_name.lower())
        result = await db.execute(stmt.order_by(User.created_at))
        user = result.scalars().first()

    if not user:
        return UserStatusResponse(exists=False)

    partnerships = await _partnerships_for_user(db, user.id)
    return UserStatusResponse(
        exists=True,
        user=UserContact.model_validate(user),
        partnerships=len(partnerships),
        partnership_details=[PartnershipResponse.model_validate(p) for p in partnerships],
    )
