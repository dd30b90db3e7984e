from pydantic import BaseModel

from app.core.roles import Role
from app.models.membership import MemberStatus

class MemberPublic(BaseModel):
    user_id: int
    email: str
    name: str | None = None
    role: Role
    status: MemberStatus

class MemberRoleUpdate(BaseModel):
    role: Role
