from datetime import datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, Field

from app.models.item import ItemType
from app.schemas.common import IanaTimezone, UtcDatetime


def _calendar_day(value: str | None) -> str | None:
    # el patrón solo mira la forma; 2030-13-45 también encaja
    if value is not None:
        try:
            datetime.strptime(value, "%Y-%m-%d")
        except ValueError:
            raise ValueError("date must be a valid calendar day (YYYY-MM-DD)")
    return value


class ItemCreate(BaseModel):
    type: ItemType
    title: str = Field(min_length=1, max_length=140)
    notes: str | None = Field(default=None, max_length=4000)

    start_at: UtcDatetime | None = None
    end_at: UtcDatetime | None = None
    timezone: IanaTimezone

    location_name: str | None = Field(default=None, max_length=200)
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    url: str | None = Field(default=None, max_length=500)

    cost_cents: int | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, pattern=r"^[A-Z]{3}$")
    order: int = 0


class ItemUpdate(BaseModel):
    type: ItemType | None = None
    title: str | None = Field(default=None, min_length=1, max_length=140)
    notes: str | None = Field(default=None, max_length=4000)

    start_at: UtcDatetime | None = None
    end_at: UtcDatetime | None = None
    timezone: IanaTimezone | None = None

    location_name: str | None = Field(default=None, max_length=200)
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    url: str | None = Field(default=None, max_length=500)

    cost_cents: int | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, pattern=r"^[A-Z]{3}$")
    order: int | None = None


class ItemPublic(BaseModel):
    id: int
    trip_id: int
    created_by: int
    type: ItemType
    title: str
    notes: str | None = None
    start_at: UtcDatetime | None = None
    end_at: UtcDatetime | None = None
    timezone: str
    location_name: str | None = None
    lat: float | None = None
    lng: float | None = None
    url: str | None = None
    cost_cents: int | None = None
    currency: str | None = None
    order: int
    votes_count: int = 0
    created_at: UtcDatetime
    updated_at: UtcDatetime


class ItemListQuery(BaseModel):
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)
    sort_field: Literal["created_at", "start_at", "votes"] = "start_at"
    sort_dir: Literal["asc", "desc"] = "asc"
    # filtro de día (UTC)
    date: Annotated[str | None, AfterValidator(_calendar_day)] = Field(
        default=None, pattern=r"^\d{4}-\d{2}-\d{2}$"
    )


class VoteResult(BaseModel):
    item_id: int
    votes_count: int
