import uuid
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from teambuilder.config import MAX_GROUP_SIZE, MIN_GROUP_SIZE
from teambuilder.database import get_db
from teambuilder.models.company import Company
from teambuilder.schemas.company import (
    CompanyCreateRequest,
    CompanyEnvelope,
    CompanyResponse,
    GroupSizeUpdateRequest,
)

router = APIRouter(prefix="/companies", tags=["companies"])


@router.post("", response_model=CompanyEnvelope, summary="Create company")
async def create_company(
    request: CompanyCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    company = Company(
        name=request.name,
        description=request.description,
        group_size=request.group_size,
        group_size_changed_at=datetime.now(UTC),
        is_active=True,
    )
    db.add(company)
    await db.flush()
    await db.refresh(company)
    return CompanyEnvelope(company=CompanyResponse.model_validate(company))


@router.get("", response_model=list[CompanyResponse], summary="List active companies")
async def list_companies(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Company)
        .where(Company.is_active.is_(True))
        .order_by(Company.created_at.desc(), Company.name)
    )
    return result.scalars().all()


@router.get("/name/{name}", response_model=CompanyResponse, summary="Find company by name")
async def get_company_by_name(name: str, db: AsyncSession = Depends(get_db)):
    """Case-insensitive substring match; returns the first hit."""
    result = await db.execute(
        select(Company)
        .where(func.lower(Company.name).contains(name.lower(), autoescape=True))
        .order_by(Company.created_at)
    )
    company = result.scalars().first()
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return company


@router.get("/{company_id}", response_model=CompanyResponse, summary="Get company")
async def get_company(company_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    company = await db.get(Company, company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return company


@router.patch("/{company_id}/group-size", response_model=CompanyEnvelope, summary="Update team size")
async def update_group_size(
    company_id: uuid.UUID,
    request: GroupSizeUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Change the team size used for future joins. Existing teams are left as they are."""
    group_size = request.group_size
    if not group_size or group_size < MIN_GROUP_SIZE or group_size > MAX_GROUP_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"Group size must be between {MIN_GROUP_SIZE} and {MAX_GROUP_SIZE}",
        )

    company = await db.get(Company, company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")

    company.group_size = group_size
    company.group_size_changed_at = datetime.now(UTC)
    await db.flush()
    return CompanyEnvelope(company=CompanyResponse.model_validate(company))
