from pydantic import BaseModel, EmailStr, Field

from app.schemas.common import UtcDatetime

class UserPublic(BaseModel):
    id: int
    email: EmailStr
    name: str | None = None
    created_at: UtcDatetime | None = None

    class Config:
        from_attributes = True

class UpdateMeRequest(BaseModel):
    name: str | None = Field(default=None, max_length=120)
