import hashlib
import json

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import ErrorCode, Failure, Ok, Result
from app.models.item import Item
from app.models.trip import Trip
from app.models.vote import ItemVote
from app.schemas.public import PublicItem, PublicTripPayload, PublicTripSummary
from app.services.public_cache import public_cache, trip_key
from app.services.share_links import resolve_slug


def weak_etag(payload: dict) -> str:
    body = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return 'W/"%s"' % hashlib.sha1(body.encode("utf-8")).hexdigest()


def build_public_payload(db: Session, trip_id: int) -> Result[PublicTripPayload]:
    trip = db.get(Trip, trip_id)
    if not trip:
        return Failure(ErrorCode.TRIP_NOT_FOUND, "Trip not found")

    votes_count = func.count(ItemVote.id).label("votes_count")
    rows = db.execute(
        select(Item, votes_count)
        .outerjoin(ItemVote, ItemVote.item_id == Item.id)
        .where(Item.trip_id == trip_id)
        .group_by(Item.id)
        .order_by(Item.start_at.asc(), Item.created_at.asc(), Item.id.asc())
    ).all()

    return Ok(
        PublicTripPayload(
            trip=PublicTripSummary(
                id=trip.id,
                title=trip.title,
                description=trip.description,
                start_date=trip.start_date,
                end_date=trip.end_date,
                timezone=trip.timezone,
            ),
            items=[
                PublicItem(
                    id=it.id,
                    type=it.type,
                    title=it.title,
                    notes=it.notes,
                    start_at=it.start_at,
                    end_at=it.end_at,
                    timezone=it.timezone,
                    location_name=it.location_name,
                    lat=it.lat,
                    lng=it.lng,
                    url=it.url,
                    order=it.order,
                    votes_count=count,
                )
                for (it, count) in rows
            ],
        )
    )


def public_trip_by_slug(db: Session, slug: str) -> Result[dict]:
    """Resolve ``slug`` (spending a use) and return the JSON-ready public payload."""
    res = resolve_slug(db, slug)
    if isinstance(res, Failure):
        return res
    trip_id = res.value

    key = trip_key(trip_id)
    payload = public_cache.get(key)
    if payload is None:
        built = build_public_payload(db, trip_id)
        if isinstance(built, Failure):
            return built
        payload = built.value.model_dump(mode="json")
        public_cache.set(key, payload)
    return Ok(payload)
