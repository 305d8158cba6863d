import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from teambuilder.config import MAX_GROUP_SIZE, MIN_GROUP_SIZE
from teambuilder.models.data_migration import DataMigrationStatus


class AdministratorCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    group_size: int = Field(ge=MIN_GROUP_SIZE, le=MAX_GROUP_SIZE)


class AdministratorResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    group_size: int
    group_size_changed_at: datetime | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class AdministratorEnvelope(BaseModel):
    success: bool = True
    admin: AdministratorResponse


class AdminVerifyRequest(BaseModel):
    email: str | None = None


class AdminInfo(BaseModel):
    name: str
    email: str


class AdminVerifyResponse(BaseModel):
    success: bool = True
    is_admin: bool
    admin_info: AdminInfo | None = None


class DatabaseDiagnostics(BaseModel):
    source: str
    host: str
    masked_url: str


class DataMigrationCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    checksum: str = Field(min_length=1, max_length=128)
    environment: str = Field(pattern="^(development|production)$")
    status: DataMigrationStatus = DataMigrationStatus.COMPLETED
    executed_by: str | None = None
    description: str | None = None


class DataMigrationResponse(BaseModel):
    id: uuid.UUID
    name: str
    checksum: str
    environment: str
    status: DataMigrationStatus
    executed_by: str | None
    description: str | None
    executed_at: datetime
    created_at: datetime

    model_config = {"from_attributes": True}
