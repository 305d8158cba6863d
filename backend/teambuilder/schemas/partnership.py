import uuid
from datetime import datetime

from pydantic import BaseModel

from teambuilder.models.partnership import TeamStatus
from teambuilder.schemas.user import UserContact, UserResponse


class PartnershipResponse(BaseModel):
    id: uuid.UUID
    group_id: str
    company_id: uuid.UUID
    team_number: int
    leader_id: uuid.UUID
    status: TeamStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class PartnershipMemberResponse(BaseModel):
    id: uuid.UUID
    partnership_id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    user: UserResponse

    model_config = {"from_attributes": True}


class PartnershipWithMembers(PartnershipResponse):
    members: list[PartnershipMemberResponse]


class TeamMember(BaseModel):
    name: str
    email: str
    phone: str
    address: str
    is_leader: bool


class CompanyTeamResponse(PartnershipResponse):
    members: list[TeamMember]
    member_count: int


class UserStatusResponse(BaseModel):
    exists: bool
    user: UserContact | None = None
    partnerships: int = 0
    partnership_details: list[PartnershipResponse] = []
