from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.auth import get_current_user
from app.core.errors import unwrap
from app.models.item import Item
from app.models.user import User
from app.schemas.common import Page, PaginationMeta
from app.schemas.item import ItemCreate, ItemListQuery, ItemPublic, ItemUpdate, VoteResult
from app.services import items as items_service
from app.services import votes as votes_service

router = APIRouter(prefix="/trips/{trip_id}/items", tags=["items"])


def _to_public(item: Item, votes_count: int) -> ItemPublic:
    return ItemPublic(
        id=item.id,
        trip_id=item.trip_id,
        created_by=item.created_by,
        type=item.type,
        title=item.title,
        notes=item.notes,
        start_at=item.start_at,
        end_at=item.end_at,
        timezone=item.timezone,
        location_name=item.location_name,
        lat=item.lat,
        lng=item.lng,
        url=item.url,
        cost_cents=item.cost_cents,
        currency=item.currency,
        order=item.order,
        votes_count=votes_count,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


@router.post("", response_model=ItemPublic, status_code=status.HTTP_201_CREATED)
def create_item(
    trip_id: int,
    payload: ItemCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = unwrap(items_service.create_item(db, trip_id, current_user.id, payload))
    return _to_public(item, 0)


@router.get("", response_model=Page[ItemPublic])
def list_items(
    trip_id: int,
    q: Annotated[ItemListQuery, Query()],
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows, total = unwrap(items_service.list_items(db, trip_id, current_user.id, q))
    return Page[ItemPublic](
        data=[_to_public(it, n) for (it, n) in rows],
        pagination=PaginationMeta(page=q.page, page_size=q.page_size, total=total),
    )


@router.get("/{item_id}", response_model=ItemPublic)
def get_item(
    trip_id: int,
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = unwrap(items_service.get_item(db, trip_id, current_user.id, item_id))
    return _to_public(item, items_service.votes_count(db, item.id))


@router.patch("/{item_id}", response_model=ItemPublic)
def update_item(
    trip_id: int,
    item_id: int,
    payload: ItemUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = unwrap(items_service.update_item(db, trip_id, current_user.id, item_id, payload))
    return _to_public(item, items_service.votes_count(db, item.id))


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    trip_id: int,
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    unwrap(items_service.delete_item(db, trip_id, current_user.id, item_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{item_id}/votes", response_model=VoteResult, status_code=status.HTTP_201_CREATED)
def add_vote(
    trip_id: int,
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    count = unwrap(votes_service.add_vote(db, trip_id, item_id, current_user.id))
    return VoteResult(item_id=item_id, votes_count=count)


@router.delete("/{item_id}/votes", status_code=status.HTTP_204_NO_CONTENT)
def remove_vote(
    trip_id: int,
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    unwrap(votes_service.remove_vote(db, trip_id, item_id, current_user.id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
