from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import Failure, Ok, Result, invalid
from app.core.roles import Role
from app.models.membership import MemberStatus, TripMember
from app.models.trip import Trip
from app.schemas.trip import TripCreate, TripListQuery, TripUpdate
from app.services.access import require_owner
from app.services.public_cache import public_cache


def _check_range(start, end) -> Failure | None:
    if start > end:
        return invalid(
            "startDate must be before or equal to endDate",
            start_date=start.isoformat(),
            end_date=end.isoformat(),
        )
    return None


def create_trip(db: Session, owner_id: int, payload: TripCreate) -> Result[Trip]:
    bad = _check_range(payload.start_date, payload.end_date)
    if bad:
        return bad

    trip = Trip(
        owner_id=owner_id,
        title=payload.title.strip(),
        description=payload.description,
        start_date=payload.start_date,
        end_date=payload.end_date,
        timezone=payload.timezone,
        visibility=payload.visibility,
    )
    db.add(trip)
    db.flush()

    # el owner entra como miembro OWNER en la misma transacción
    db.add(TripMember(trip_id=trip.id, user_id=owner_id, role=Role.OWNER, status=MemberStatus.ACCEPTED))
    db.commit()
    db.refresh(trip)
    return Ok(trip)


def list_trips(db: Session, owner_id: int, q: TripListQuery) -> tuple[list[Trip], int]:
    column = getattr(Trip, q.sort_field)
    order = column.desc() if q.sort_dir == "desc" else column.asc()
    where = Trip.owner_id == owner_id

    trips = db.execute(
        select(Trip)
        .where(where)
        .order_by(order, Trip.id.asc())
        .offset((q.page - 1) * q.page_size)
        .limit(q.page_size)
    ).scalars().all()
    total = db.execute(select(func.count()).select_from(Trip).where(where)).scalar_one()
    return list(trips), total


def get_trip(db: Session, trip_id: int, user_id: int) -> Result[Trip]:
    return require_owner(db, trip_id, user_id)


def update_trip(db: Session, trip_id: int, user_id: int, payload: TripUpdate) -> Result[Trip]:
    res = require_owner(db, trip_id, user_id)
    if isinstance(res, Failure):
        return res
    trip = res.value

    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    bad = _check_range(data.get("start_date", trip.start_date), data.get("end_date", trip.end_date))
    if bad:
        return bad

    for field, value in data.items():
        setattr(trip, field, value.strip() if field == "title" else value)
    db.commit()
    db.refresh(trip)
    public_cache.invalidate_trip(trip.id)
    return Ok(trip)


def delete_trip(db: Session, trip_id: int, user_id: int) -> Result[None]:
    res = require_owner(db, trip_id, user_id)
    if isinstance(res, Failure):
        return res

    db.delete(res.value)
    db.commit()
    public_cache.invalidate_trip(trip_id)
    return Ok(None)
