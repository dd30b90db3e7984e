from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.auth import get_current_user
from app.core.errors import unwrap
from app.models.user import User
from app.schemas.member import MemberPublic, MemberRoleUpdate
from app.services import members as members_service

router = APIRouter(prefix="/trips/{trip_id}/members", tags=["members"])


@router.get("", response_model=list[MemberPublic])
def list_members(
    trip_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = unwrap(members_service.list_members(db, trip_id, current_user.id))
    return [
        MemberPublic(user_id=u.id, email=u.email, name=u.name, role=m.role, status=m.status)
        for (m, u) in rows
    ]


@router.patch("/{user_id}", response_model=MemberPublic)
def update_member_role(
    trip_id: int,
    user_id: int,
    payload: MemberRoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    member = unwrap(
        members_service.update_member_role(db, trip_id, user_id, payload.role, current_user.id)
    )
    u = member.user
    return MemberPublic(user_id=u.id, email=u.email, name=u.name, role=member.role, status=member.status)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    trip_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    unwrap(members_service.remove_member(db, trip_id, user_id, current_user.id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
