from datetime import datetime
from typing import Annotated, Generic, TypeVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AfterValidator, BaseModel, PlainSerializer

from app.core.clock import iso_z_from_utc_naive, to_utc_naive

T = TypeVar("T")


def _iana_timezone(value: str) -> str:
    if len(value) < 3:
        raise ValueError("timezone must be a valid IANA time zone (e.g., Europe/Madrid)")
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError("timezone must be a valid IANA time zone (e.g., Europe/Madrid)")
    return value


# entrada: cualquier ISO -> UTC naive; salida: ISO con Z
UtcDatetime = Annotated[
    datetime,
    AfterValidator(to_utc_naive),
    PlainSerializer(iso_z_from_utc_naive, return_type=str | None, when_used="json"),
]
IanaTimezone = Annotated[str, AfterValidator(_iana_timezone)]


class PaginationMeta(BaseModel):
    page: int
    page_size: int
    total: int


class Page(BaseModel, Generic[T]):
    data: list[T]
    pagination: PaginationMeta
