from typing import Literal

from pydantic import BaseModel, Field

from app.models.trip import Visibility
from app.schemas.common import IanaTimezone, UtcDatetime

class TripCreate(BaseModel):
    title: str = Field(min_length=1, max_length=140)
    description: str | None = Field(default=None, max_length=2000)
    start_date: UtcDatetime
    end_date: UtcDatetime
    timezone: IanaTimezone
    visibility: Visibility = Visibility.PRIVATE

class TripUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=140)
    description: str | None = Field(default=None, max_length=2000)
    start_date: UtcDatetime | None = None
    end_date: UtcDatetime | None = None
    timezone: IanaTimezone | None = None
    visibility: Visibility | None = None

class TripPublic(BaseModel):
    id: int
    owner_id: int
    title: str
    description: str | None = None
    start_date: UtcDatetime
    end_date: UtcDatetime
    timezone: str
    visibility: Visibility
    created_at: UtcDatetime
    updated_at: UtcDatetime

    class Config:
        from_attributes = True

class TripListQuery(BaseModel):
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)
    sort_field: Literal["created_at", "start_date", "end_date"] = "created_at"
    sort_dir: Literal["asc", "desc"] = "desc"
