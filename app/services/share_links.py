"""
Share links: anonymous, quota- and expiry-bounded read capability on a trip.

The slug is the whole credential. ``resolve_slug`` checks validity and spends
one use in a single conditional UPDATE, so concurrent resolutions can never
push ``uses`` past ``max_uses``.
"""
import logging
import secrets
from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from app.core.clock import utc_now_naive
from app.core.config import settings
from app.core.database import insert_or_conflict
from app.core.errors import ErrorCode, Failure, Ok, Result, conflict, invalid
from app.core.roles import Role
from app.models.share_link import ShareLink
from app.services.access import require_min_role
from app.services.public_cache import public_cache

logger = logging.getLogger(__name__)

_SLUG_ATTEMPTS = 3


def generate_slug() -> str:
    return secrets.token_urlsafe(settings.SHARE_SLUG_BYTES)


def create_share_link(
    db: Session,
    trip_id: int,
    requester_id: int,
    expires_at: datetime | None = None,
    max_uses: int | None = None,
    note: str | None = None,
) -> Result[ShareLink]:
    res = require_min_role(db, trip_id, requester_id, Role.OWNER)
    if isinstance(res, Failure):
        return res

    if expires_at is not None and expires_at <= utc_now_naive():
        return invalid("expiresAt must be in the future", expires_at="past")
    if max_uses is not None and max_uses < 1:
        return invalid("maxUses must be a positive integer", max_uses="not_positive")

    for _ in range(_SLUG_ATTEMPTS):
        link = ShareLink(
            trip_id=trip_id,
            slug=generate_slug(),
            created_by=requester_id,
            expires_at=expires_at,
            is_active=True,
            max_uses=max_uses,
            uses=0,
            note=note.strip() if note else None,
            revoked_at=None,
        )
        if insert_or_conflict(db, link):
            logger.info("share link %s created for trip %s", link.id, trip_id)
            return Ok(link)

    return conflict("Could not allocate a unique slug")


def list_share_links(db: Session, trip_id: int, requester_id: int) -> Result[list[ShareLink]]:
    res = require_min_role(db, trip_id, requester_id, Role.OWNER)
    if isinstance(res, Failure):
        return res
    links = db.execute(
        select(ShareLink)
        .where(ShareLink.trip_id == trip_id)
        .order_by(ShareLink.created_at.desc(), ShareLink.id.desc())
    ).scalars().all()
    return Ok(list(links))


def revoke_share_link(db: Session, trip_id: int, requester_id: int, link_id: int) -> Result[ShareLink]:
    res = require_min_role(db, trip_id, requester_id, Role.OWNER)
    if isinstance(res, Failure):
        return res

    link = db.execute(
        select(ShareLink).where(ShareLink.id == link_id, ShareLink.trip_id == trip_id)
    ).scalar_one_or_none()
    if not link:
        return Failure(ErrorCode.NOT_FOUND, "ShareLink not found")

    # revocar dos veces no es error
    if not link.is_active:
        return Ok(link)

    link.is_active = False
    link.revoked_at = utc_now_naive()
    db.commit()
    db.refresh(link)
    public_cache.invalidate_trip(trip_id)
    logger.info("share link %s revoked (trip %s)", link.id, trip_id)
    return Ok(link)


def resolve_slug(db: Session, slug: str) -> Result[int]:
    """Validate ``slug`` and count one use. Returns the trip id."""
    now = utc_now_naive()
    spent = db.execute(
        update(ShareLink)
        .where(
            ShareLink.slug == slug,
            ShareLink.is_active.is_(True),
            or_(ShareLink.expires_at.is_(None), ShareLink.expires_at > now),
            or_(ShareLink.max_uses.is_(None), ShareLink.uses < ShareLink.max_uses),
        )
        .values(uses=ShareLink.uses + 1)
        .execution_options(synchronize_session=False)
    ).rowcount

    if spent == 1:
        db.commit()
        trip_id = db.execute(select(ShareLink.trip_id).where(ShareLink.slug == slug)).scalar_one()
        return Ok(trip_id)

    db.rollback()
    link = db.execute(select(ShareLink).where(ShareLink.slug == slug)).scalar_one_or_none()
    if not link or not link.is_active:
        return Failure(ErrorCode.SHARE_INVALID, "Share link not found")
    if link.expires_at is not None and link.expires_at <= now:
        return Failure(ErrorCode.SHARE_EXPIRED, "Share link expired")
    # lo único que queda: se agotó (quizá por otra petición concurrente)
    return Failure(ErrorCode.SHARE_MAXED, "Share link usage exceeded")
