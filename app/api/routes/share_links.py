from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.auth import get_current_user
from app.core.errors import unwrap
from app.core.rate_limit import limit_by_user, write_limiter
from app.models.user import User
from app.schemas.share_link import ShareLinkCreateRequest, ShareLinkPublic
from app.services import share_links as share_links_service

router = APIRouter(prefix="/trips/{trip_id}/share-links", tags=["share-links"])


@router.post(
    "",
    response_model=ShareLinkPublic,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(limit_by_user(write_limiter))],
)
def create_share_link(
    trip_id: int,
    payload: ShareLinkCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return unwrap(
        share_links_service.create_share_link(
            db,
            trip_id,
            current_user.id,
            expires_at=payload.expires_at,
            max_uses=payload.max_uses,
            note=payload.note,
        )
    )


@router.get("", response_model=list[ShareLinkPublic])
def list_share_links(
    trip_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return unwrap(share_links_service.list_share_links(db, trip_id, current_user.id))


@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_share_link(
    trip_id: int,
    link_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    unwrap(share_links_service.revoke_share_link(db, trip_id, current_user.id, link_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
