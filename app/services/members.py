from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import ErrorCode, Failure, Ok, Result
from app.core.roles import Role
from app.models.membership import TripMember
from app.models.user import User
from app.services.access import require_min_role


def list_members(db: Session, trip_id: int, requester_id: int) -> Result[list[tuple[TripMember, User]]]:
    res = require_min_role(db, trip_id, requester_id, Role.EDITOR)
    if isinstance(res, Failure):
        return res

    rows = db.execute(
        select(TripMember, User)
        .join(User, User.id == TripMember.user_id)
        .where(TripMember.trip_id == trip_id)
        .order_by(TripMember.created_at.asc(), TripMember.id.asc())
    ).all()
    return Ok([(m, u) for (m, u) in rows])


def _require_target(db: Session, trip_id: int, user_id: int) -> Result[TripMember]:
    target = db.execute(
        select(TripMember).where(
            TripMember.trip_id == trip_id,
            TripMember.user_id == user_id,
        )
    ).scalar_one_or_none()
    if not target:
        return Failure(ErrorCode.MEMBER_NOT_FOUND, "Member not found")
    return Ok(target)


def update_member_role(
    db: Session, trip_id: int, target_user_id: int, new_role: Role, requester_id: int
) -> Result[TripMember]:
    # el OWNER no se asigna ni se cambia por aquí
    if new_role == Role.OWNER:
        return Failure(ErrorCode.TRIP_FORBIDDEN, "Cannot assign OWNER via this endpoint")

    res = require_min_role(db, trip_id, requester_id, Role.OWNER)
    if isinstance(res, Failure):
        return Failure(ErrorCode.TRIP_FORBIDDEN, "Only owner can change roles")

    res = _require_target(db, trip_id, target_user_id)
    if isinstance(res, Failure):
        return res
    target = res.value
    if target.role == Role.OWNER:
        return Failure(ErrorCode.TRIP_FORBIDDEN, "Cannot change role of an OWNER")

    target.role = new_role
    db.commit()
    db.refresh(target)
    return Ok(target)


def remove_member(db: Session, trip_id: int, target_user_id: int, requester_id: int) -> Result[None]:
    res = require_min_role(db, trip_id, requester_id, Role.OWNER)
    if isinstance(res, Failure):
        return Failure(ErrorCode.TRIP_FORBIDDEN, "Only owner can remove members")

    res = _require_target(db, trip_id, target_user_id)
    if isinstance(res, Failure):
        return res
    target = res.value
    if target.role == Role.OWNER:
        return Failure(ErrorCode.TRIP_FORBIDDEN, "Cannot remove an OWNER")

    db.delete(target)
    db.commit()
    return Ok(None)
