import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class UserCreateRequest(BaseModel):
    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(min_length=1, max_length=64)
    address: str = Field(min_length=1, max_length=1024)
    company_id: uuid.UUID | None = None


class UserResponse(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    company_id: uuid.UUID | None
    join_position: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserEnvelope(BaseModel):
    success: bool = True
    user: UserResponse


class UserStatusRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None


class UserContact(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str

    model_config = {"from_attributes": True}
