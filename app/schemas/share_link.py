from pydantic import BaseModel, Field

from app.schemas.common import UtcDatetime

class ShareLinkCreateRequest(BaseModel):
    expires_at: UtcDatetime | None = None  # si None, no expira
    max_uses: int | None = Field(default=None, ge=1)  # si None, usos ilimitados
    note: str | None = Field(default=None, max_length=140)

class ShareLinkPublic(BaseModel):
    id: int
    trip_id: int
    slug: str
    is_active: bool
    expires_at: UtcDatetime | None
    max_uses: int | None
    uses: int
    note: str | None
    created_at: UtcDatetime
    revoked_at: UtcDatetime | None

    class Config:
        from_attributes = True
