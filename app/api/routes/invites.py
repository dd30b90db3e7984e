from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.auth import get_current_user
from app.core.errors import unwrap
from app.core.rate_limit import limit_by_user, write_limiter
from app.models.invite import InviteStatus, TripInvite
from app.models.user import User
from app.schemas.common import Page, PaginationMeta
from app.schemas.invite import InviteCreateRequest, InviteDecision, InvitePublic, InvitedBy, MyInvite
from app.services import invites as invites_service

router = APIRouter(tags=["invites"])


def _invite_out(inv: TripInvite) -> InvitePublic:
    return InvitePublic(
        id=inv.id,
        trip_id=inv.trip_id,
        email=inv.email,
        role=inv.role,
        status=inv.status,
        token=inv.token,
        expires_at=inv.expires_at,
        invited_by=InvitedBy(user_id=inv.invited_by.id, email=inv.invited_by.email),
        created_at=inv.created_at,
        responded_at=inv.responded_at,
    )


@router.post(
    "/trips/{trip_id}/invites",
    response_model=InvitePublic,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(limit_by_user(write_limiter))],
)
def create_invite(
    trip_id: int,
    payload: InviteCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    email = payload.email.strip().lower()
    invite = unwrap(invites_service.create_invite(db, trip_id, current_user.id, email, payload.role))
    return _invite_out(invite)


@router.get("/trips/{trip_id}/invites", response_model=list[InvitePublic])
def list_trip_invites(
    trip_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invites = unwrap(invites_service.list_trip_invites(db, trip_id, current_user.id))
    return [_invite_out(inv) for inv in invites]


@router.get("/me/invites", response_model=Page[MyInvite])
def my_invites(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows, total = invites_service.my_invites(db, current_user.email, page, page_size)
    return Page[MyInvite](
        data=[
            MyInvite(
                id=inv.id,
                trip_id=inv.trip_id,
                trip_title=trip_title,
                role=inv.role,
                status=inv.status,
                invited_by_email=inviter_email,
                expires_at=inv.expires_at,
                created_at=inv.created_at,
            )
            for (inv, trip_title, inviter_email) in rows
        ],
        pagination=PaginationMeta(page=page, page_size=page_size, total=total),
    )


@router.post("/invites/{invite_id}/accept", response_model=InviteDecision)
def accept_invite(
    invite_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invite = unwrap(invites_service.accept_invite(db, invite_id, current_user))
    return InviteDecision(trip_id=invite.trip_id, status=InviteStatus.ACCEPTED, role=invite.role)


@router.post("/invites/{invite_id}/decline", response_model=InviteDecision)
def decline_invite(
    invite_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    invite = unwrap(invites_service.decline_invite(db, invite_id, current_user))
    return InviteDecision(trip_id=invite.trip_id, status=InviteStatus.DECLINED)
