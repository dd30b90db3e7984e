"""
Invite lifecycle.

One row per (trip, email) ever exists. Creating an invite for a pair that
already has a row either fails (row is PENDING and not expired) or recycles
the row: back to PENDING with a fresh token, expiry, inviter and role.
Accept and decline are single transitions guarded on ``status = PENDING``
at the storage level, so concurrent callers cannot both win.
"""
import logging
import secrets
from datetime import timedelta

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from app.core.clock import utc_now_naive
from app.core.config import settings
from app.core.database import commit_or_conflict, insert_or_conflict
from app.core.errors import ErrorCode, Failure, Ok, Result, conflict
from app.core.roles import Role
from app.models.invite import InviteStatus, TripInvite
from app.models.membership import MemberStatus, TripMember
from app.models.trip import Trip
from app.models.user import User
from app.services.access import get_membership, require_min_role

logger = logging.getLogger(__name__)


def _invite_pending() -> Failure:
    return conflict("Invite already pending", email="invite_pending")


def generate_token() -> str:
    return secrets.token_urlsafe(24)


def is_expired(invite: TripInvite, now=None) -> bool:
    return invite.expires_at < (now or utc_now_naive())


def is_live(invite: TripInvite, now=None) -> bool:
    return invite.status == InviteStatus.PENDING and not is_expired(invite, now)


def create_invite(db: Session, trip_id: int, requester_id: int, email: str, role: Role) -> Result[TripInvite]:
    res = require_min_role(db, trip_id, requester_id, Role.EDITOR)
    if isinstance(res, Failure):
        return res
    member = res.value

    if role == Role.OWNER:
        return Failure(ErrorCode.TRIP_FORBIDDEN, "Cannot invite as OWNER")
    if member.role == Role.EDITOR and role != Role.VIEWER:
        return Failure(ErrorCode.TRIP_FORBIDDEN, "Editors can only invite as VIEWER")

    email = email.strip().lower()

    # ¿ya es miembro?
    already_member = db.execute(
        select(TripMember.id)
        .join(User, User.id == TripMember.user_id)
        .where(TripMember.trip_id == trip_id, func.lower(User.email) == email)
    ).first()
    if already_member:
        return conflict("User is already a member", email="already_member")

    now = utc_now_naive()
    token = generate_token()
    expires_at = now + timedelta(days=settings.INVITE_TTL_DAYS)

    existing = db.execute(
        select(TripInvite).where(TripInvite.trip_id == trip_id, TripInvite.email == email)
    ).scalar_one_or_none()

    if existing:
        if is_live(existing, now):
            return _invite_pending()

        # reciclar: solo si sigue sin estar pendiente-vigente al escribir
        recycled = db.execute(
            update(TripInvite)
            .where(
                TripInvite.id == existing.id,
                or_(TripInvite.status != InviteStatus.PENDING, TripInvite.expires_at < now),
            )
            .values(
                status=InviteStatus.PENDING,
                token=token,
                expires_at=expires_at,
                responded_at=None,
                invited_by_id=requester_id,
                role=role,
            )
            .execution_options(synchronize_session=False)
        ).rowcount
        if recycled != 1 or not commit_or_conflict(db):
            db.rollback()
            return _invite_pending()

        db.refresh(existing)
        logger.info("invite %s recycled for trip %s (%s as %s)", existing.id, trip_id, email, role.value)
        return Ok(existing)

    invite = TripInvite(
        trip_id=trip_id,
        email=email,
        role=role,
        status=InviteStatus.PENDING,
        token=token,
        invited_by_id=requester_id,
        created_at=now,
        expires_at=expires_at,
    )
    # carrera: otro request creó la misma (trip, email) entre el SELECT y el INSERT
    if not insert_or_conflict(db, invite):
        return _invite_pending()

    logger.info("invite %s created for trip %s (%s as %s)", invite.id, trip_id, email, role.value)
    return Ok(invite)


def list_trip_invites(db: Session, trip_id: int, requester_id: int) -> Result[list[TripInvite]]:
    res = require_min_role(db, trip_id, requester_id, Role.EDITOR)
    if isinstance(res, Failure):
        return res
    invites = db.execute(
        select(TripInvite)
        .where(TripInvite.trip_id == trip_id)
        .order_by(TripInvite.created_at.desc(), TripInvite.id.desc())
    ).scalars().all()
    return Ok(list(invites))


def my_invites(db: Session, email: str, page: int, page_size: int) -> tuple[list, int]:
    """Invites addressed to ``email`` with the trip title and the inviter's email."""
    where = TripInvite.email == email.strip().lower()
    rows = db.execute(
        select(TripInvite, Trip.title, User.email)
        .join(Trip, Trip.id == TripInvite.trip_id)
        .join(User, User.id == TripInvite.invited_by_id)
        .where(where)
        .order_by(TripInvite.created_at.desc(), TripInvite.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).all()
    total = db.execute(select(func.count()).select_from(TripInvite).where(where)).scalar_one()
    return list(rows), total


def _load_for_response(db: Session, invite_id: int, user: User) -> Result[TripInvite]:
    invite = db.get(TripInvite, invite_id)
    if not invite:
        return Failure(ErrorCode.INVITE_NOT_FOUND, "Invite not found")

    # el usuario autenticado debe tener el mismo email que la invitación
    if user.email.lower() != invite.email.lower():
        return Failure(ErrorCode.INVITE_FORBIDDEN, "Invite email does not match authenticated user")

    if invite.status == InviteStatus.ACCEPTED:
        return Failure(ErrorCode.INVITE_ALREADY_ACCEPTED, "Invite already accepted")
    if invite.status == InviteStatus.DECLINED:
        return conflict("Invite already declined")
    if is_expired(invite):
        return conflict("Invite expired")
    return Ok(invite)


def _lost_transition(db: Session, invite: TripInvite) -> Failure:
    db.rollback()
    db.refresh(invite)
    if invite.status == InviteStatus.ACCEPTED:
        return Failure(ErrorCode.INVITE_ALREADY_ACCEPTED, "Invite already accepted")
    return conflict("Invite already declined")


def _respond(db: Session, invite: TripInvite, new_status: InviteStatus) -> int:
    return db.execute(
        update(TripInvite)
        .where(TripInvite.id == invite.id, TripInvite.status == InviteStatus.PENDING)
        .values(status=new_status, responded_at=utc_now_naive())
        .execution_options(synchronize_session=False)
    ).rowcount


def accept_invite(db: Session, invite_id: int, user: User) -> Result[TripInvite]:
    res = _load_for_response(db, invite_id, user)
    if isinstance(res, Failure):
        return res
    invite = res.value

    # membresía + estado del invite en la misma transacción
    for _ in range(2):
        if _respond(db, invite, InviteStatus.ACCEPTED) != 1:
            return _lost_transition(db, invite)

        if not get_membership(db, invite.trip_id, user.id):
            db.add(
                TripMember(
                    trip_id=invite.trip_id,
                    user_id=user.id,
                    role=invite.role,
                    status=MemberStatus.ACCEPTED,
                )
            )
        if commit_or_conflict(db):
            break
        # otra petición creó la membresía a la vez: repetimos sin insertarla
    else:
        return conflict("Could not accept invite, try again")

    db.refresh(invite)
    logger.info("invite %s accepted by user %s (trip %s)", invite.id, user.id, invite.trip_id)
    return Ok(invite)


def decline_invite(db: Session, invite_id: int, user: User) -> Result[TripInvite]:
    res = _load_for_response(db, invite_id, user)
    if isinstance(res, Failure):
        return res
    invite = res.value

    if _respond(db, invite, InviteStatus.DECLINED) != 1:
        return _lost_transition(db, invite)
    db.commit()
    db.refresh(invite)
    logger.info("invite %s declined by user %s (trip %s)", invite.id, user.id, invite.trip_id)
    return Ok(invite)
