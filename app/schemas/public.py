from pydantic import BaseModel

from app.models.item import ItemType
from app.schemas.common import UtcDatetime


class PublicTripSummary(BaseModel):
    id: int
    title: str
    description: str | None = None
    start_date: UtcDatetime
    end_date: UtcDatetime
    timezone: str


class PublicItem(BaseModel):
    id: int
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
    order: int
    votes_count: int


class PublicTripPayload(BaseModel):
    trip: PublicTripSummary
    items: list[PublicItem]
