from pydantic import BaseModel, EmailStr

from app.core.roles import Role
from app.models.invite import InviteStatus
from app.schemas.common import UtcDatetime

class InviteCreateRequest(BaseModel):
    email: EmailStr
    role: Role

class InvitedBy(BaseModel):
    user_id: int
    email: str

class InvitePublic(BaseModel):
    id: int
    trip_id: int
    email: str
    role: Role
    status: InviteStatus
    token: str
    expires_at: UtcDatetime
    invited_by: InvitedBy
    created_at: UtcDatetime
    responded_at: UtcDatetime | None = None

class MyInvite(BaseModel):
    id: int
    trip_id: int
    trip_title: str
    role: Role
    status: InviteStatus
    invited_by_email: str
    expires_at: UtcDatetime
    created_at: UtcDatetime

class InviteDecision(BaseModel):
    trip_id: int
    status: InviteStatus
    role: Role | None = None
