"""Itinerary items. Reads need membership, writes need EDITOR or authorship."""
from datetime import datetime, time

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import ErrorCode, Failure, Ok, Result, invalid
from app.core.roles import Role, at_least
from app.models.item import Item
from app.models.vote import ItemVote
from app.schemas.item import ItemCreate, ItemListQuery, ItemUpdate
from app.services.access import get_trip, require_member, require_min_role
from app.services.public_cache import public_cache

# el autor de un item puede editarlo/borrarlo aunque sea VIEWER
AUTHOR_CAN_EDIT_DELETE = True


def votes_count(db: Session, item_id: int) -> int:
    return db.execute(
        select(func.count()).select_from(ItemVote).where(ItemVote.item_id == item_id)
    ).scalar_one()


def _check_dates(start_at: datetime | None, end_at: datetime | None) -> Failure | None:
    if start_at and end_at and start_at > end_at:
        return invalid("startAt must be before or equal to endAt")
    return None


def _check_within_trip(db: Session, trip_id: int, start_at: datetime | None, end_at: datetime | None) -> Failure | None:
    if not start_at and not end_at:
        return None
    res = get_trip(db, trip_id)
    if isinstance(res, Failure):
        return res
    trip = res.value
    for value in (start_at, end_at):
        if value and not (trip.start_date <= value <= trip.end_date):
            return invalid(
                "Item datetime must be within trip range",
                trip_start=trip.start_date.isoformat(),
                trip_end=trip.end_date.isoformat(),
            )
    return None


def create_item(db: Session, trip_id: int, user_id: int, payload: ItemCreate) -> Result[Item]:
    res = require_min_role(db, trip_id, user_id, Role.EDITOR)
    if isinstance(res, Failure):
        return res

    bad = _check_dates(payload.start_at, payload.end_at) or _check_within_trip(
        db, trip_id, payload.start_at, payload.end_at
    )
    if bad:
        return bad

    item = Item(trip_id=trip_id, created_by=user_id, **payload.model_dump())
    db.add(item)
    db.commit()
    db.refresh(item)
    public_cache.invalidate_trip(trip_id)
    return Ok(item)


def list_items(db: Session, trip_id: int, user_id: int, q: ItemListQuery) -> Result[tuple[list, int]]:
    res = require_member(db, trip_id, user_id)
    if isinstance(res, Failure):
        return res

    count_col = func.count(ItemVote.id).label("votes_count")
    conditions = [Item.trip_id == trip_id]
    if q.date:
        day = datetime.strptime(q.date, "%Y-%m-%d").date()
        day_start = datetime.combine(day, time.min)
        day_end = datetime.combine(day, time.max)
        conditions += [Item.start_at <= day_end, Item.end_at >= day_start]

    sort_col = count_col if q.sort_field == "votes" else getattr(Item, q.sort_field)
    order = sort_col.desc() if q.sort_dir == "desc" else sort_col.asc()

    rows = db.execute(
        select(Item, count_col)
        .outerjoin(ItemVote, ItemVote.item_id == Item.id)
        .where(*conditions)
        .group_by(Item.id)
        .order_by(order, Item.id.asc())
        .offset((q.page - 1) * q.page_size)
        .limit(q.page_size)
    ).all()
    total = db.execute(select(func.count()).select_from(Item).where(*conditions)).scalar_one()
    return Ok(([(it, n) for (it, n) in rows], total))


def _require_item(db: Session, trip_id: int, item_id: int) -> Result[Item]:
    item = db.execute(
        select(Item).where(Item.id == item_id, Item.trip_id == trip_id)
    ).scalar_one_or_none()
    if not item:
        return Failure(ErrorCode.ITEM_NOT_FOUND, "Item not found")
    return Ok(item)


def get_item(db: Session, trip_id: int, user_id: int, item_id: int) -> Result[Item]:
    res = require_member(db, trip_id, user_id)
    if isinstance(res, Failure):
        return res
    return _require_item(db, trip_id, item_id)


def _editable_item(db: Session, trip_id: int, user_id: int, item_id: int) -> Result[Item]:
    res = require_member(db, trip_id, user_id)
    if isinstance(res, Failure):
        return res
    member = res.value

    res = _require_item(db, trip_id, item_id)
    if isinstance(res, Failure):
        return res
    item = res.value

    if at_least(member.role, Role.EDITOR):
        return res
    if AUTHOR_CAN_EDIT_DELETE and item.created_by == user_id:
        return res
    return Failure(ErrorCode.ITEM_FORBIDDEN, "Not allowed to edit this item")


def update_item(db: Session, trip_id: int, user_id: int, item_id: int, payload: ItemUpdate) -> Result[Item]:
    res = _editable_item(db, trip_id, user_id, item_id)
    if isinstance(res, Failure):
        return res
    item = res.value

    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    start_at = data.get("start_at", item.start_at)
    end_at = data.get("end_at", item.end_at)
    bad = _check_dates(start_at, end_at) or _check_within_trip(db, trip_id, start_at, end_at)
    if bad:
        return bad

    for field, value in data.items():
        setattr(item, field, value)
    db.commit()
    db.refresh(item)
    public_cache.invalidate_trip(trip_id)
    return Ok(item)


def delete_item(db: Session, trip_id: int, user_id: int, item_id: int) -> Result[None]:
    res = _editable_item(db, trip_id, user_id, item_id)
    if isinstance(res, Failure):
        return res

    db.delete(res.value)
    db.commit()
    public_cache.invalidate_trip(trip_id)
    return Ok(None)
