import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from teambuilder.config import MAX_GROUP_SIZE, MIN_GROUP_SIZE, settings


class CompanyCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    group_size: int = Field(
        default=settings.default_group_size, ge=MIN_GROUP_SIZE, le=MAX_GROUP_SIZE
    )


class GroupSizeUpdateRequest(BaseModel):
    # Range is checked in the route to answer 400, not 422
    group_size: int | None = None


class CompanyResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None
    group_size: int
    group_size_changed_at: datetime | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class CompanyEnvelope(BaseModel):
    success: bool = True
    company: CompanyResponse
