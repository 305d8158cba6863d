import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teambuilder.config import database_target
from teambuilder.database import get_db
from teambuilder.models.admin import Administrator, AdminUser
from teambuilder.models.data_migration import AppDataMigration
from teambuilder.schemas.admin import (
    AdminInfo,
    AdministratorCreateRequest,
    AdministratorEnvelope,
    AdministratorResponse,
    AdminVerifyRequest,
    AdminVerifyResponse,
    DatabaseDiagnostics,
    DataMigrationCreateRequest,
    DataMigrationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


async def _get_active_administrator(db: AsyncSession) -> Administrator | None:
    result = await db.execute(
        select(Administrator)
        .where(Administrator.is_active.is_(True))
        .order_by(Administrator.created_at.desc())
    )
    return result.scalars().first()


@router.post("/setup", response_model=AdministratorEnvelope, summary="Set up administrator")
async def setup_administrator(
    request: AdministratorCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Make the given person the only active administrator."""
    await db.execute(
        update(Administrator)
        .where(Administrator.is_active.is_(True))
        .values(is_active=False)
        .execution_options(synchronize_session="fetch")
    )

    email = str(request.email)
    result = await db.execute(
        select(Administrator).where(func.lower(Administrator.email) == email.lower())
    )
    admin = result.scalars().first()
    if admin is None:
        admin = Administrator(name=request.name, email=email, group_size=request.group_size)
        db.add(admin)
    else:
        admin.name = request.name
        if admin.group_size != request.group_size:
            admin.group_size = request.group_size
            admin.group_size_changed_at = datetime.now(UTC)
    admin.is_active = True

    await db.flush()
    await db.refresh(admin)
    logger.info(f"Administrator set to {admin.email}")
    return AdministratorEnvelope(admin=AdministratorResponse.model_validate(admin))


@router.get("/current", response_model=AdministratorResponse, summary="Get active administrator")
async def get_current_administrator(db: AsyncSession = Depends(get_db)):
    admin = await _get_active_administrator(db)
    if not admin:
        raise HTTPException(status_code=404, detail="No active administrator found")
    return admin


@router.post("/verify", response_model=AdminVerifyResponse, summary="Verify admin email")
async def verify_admin(request: AdminVerifyRequest, db: AsyncSession = Depends(get_db)):
    """Email-equality check against the active administrator and admin users."""
    if not request.email:
        raise HTTPException(status_code=400, detail="Email is required")

    email = request.email.strip().lower()
    admin = await _get_active_administrator(db)
    if admin and admin.email.lower() == email:
        return AdminVerifyResponse(is_admin=True, admin_info=AdminInfo(name=admin.name, email=admin.email))

    result = await db.execute(
        select(AdminUser).where(
            func.lower(AdminUser.email) == email,
            AdminUser.is_active.is_(True),
        )
    )
    admin_user = result.scalars().first()
    if admin_user:
        return AdminVerifyResponse(
            is_admin=True, admin_info=AdminInfo(name=admin_user.name, email=admin_user.email)
        )

    return AdminVerifyResponse(is_admin=False)


@router.get("/database", response_model=DatabaseDiagnostics, summary="Database connection info")
async def database_diagnostics():
    return DatabaseDiagnostics(
        source=database_target.source,
        host=database_target.host,
        masked_url=database_target.masked_url,
    )


@router.get(
    "/data-migrations",
    response_model=list[DataMigrationResponse],
    summary="List data migration records",
)
async def list_data_migrations(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(AppDataMigration).order_by(AppDataMigration.executed_at.desc(), AppDataMigration.name)
    )
    return result.scalars().all()


@router.post(
    "/data-migrations",
    response_model=DataMigrationResponse,
    status_code=201,
    summary="Record a data migration",
)
async def record_data_migration(
    request: DataMigrationCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Bookkeeping only: store that a migration ran in an environment."""
    record = AppDataMigration(**request.model_dump())
    try:
        async with db.begin_nested():
            db.add(record)
            await db.flush()
    except IntegrityError:
        raise HTTPException(
            status_code=409,
            detail=f"Migration {request.name} already recorded for {request.environment}",
        )

    await db.refresh(record)
    return record
