"""
Membership directory and trip access guard.

Every trip-scoped operation asks this module first. "Trip missing" and
"caller is not a member" are different outcomes on purpose: the first is
TRIP_NOT_FOUND, the second TRIP_FORBIDDEN, and the caller decides which
check runs first depending on whether existence may leak to non-members.
"""
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import ErrorCode, Failure, Ok, Result
from app.core.roles import Role, at_least
from app.models.membership import TripMember
from app.models.trip import Trip


def get_membership(db: Session, trip_id: int, user_id: int) -> TripMember | None:
    return db.execute(
        select(TripMember).where(
            TripMember.trip_id == trip_id,
            TripMember.user_id == user_id,
        )
    ).scalar_one_or_none()


def require_member(db: Session, trip_id: int, user_id: int) -> Result[TripMember]:
    m = get_membership(db, trip_id, user_id)
    if not m:
        return Failure(ErrorCode.TRIP_FORBIDDEN, "Not a member of this trip")
    return Ok(m)


def require_min_role(db: Session, trip_id: int, user_id: int, min_role: Role) -> Result[TripMember]:
    res = require_member(db, trip_id, user_id)
    if isinstance(res, Failure):
        return res
    if not at_least(res.value.role, min_role):
        return Failure(ErrorCode.TRIP_FORBIDDEN, f"Requires role {min_role.value}")
    return res


def get_trip(db: Session, trip_id: int) -> Result[Trip]:
    trip = db.get(Trip, trip_id)
    if not trip:
        return Failure(ErrorCode.TRIP_NOT_FOUND, "Trip not found")
    return Ok(trip)


def require_owner(db: Session, trip_id: int, user_id: int) -> Result[Trip]:
    """
    Trip detail/update/delete. A missing trip and a trip owned by someone
    else look the same to the caller, so ids of other people's trips can't
    be enumerated.
    """
    trip = db.get(Trip, trip_id)
    if not trip or trip.owner_id != user_id:
        return Failure(ErrorCode.TRIP_NOT_FOUND, "Trip not found")
    return Ok(trip)
