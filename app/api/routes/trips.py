from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.auth import get_current_user
from app.core.errors import unwrap
from app.models.user import User
from app.schemas.common import Page, PaginationMeta
from app.schemas.trip import TripCreate, TripListQuery, TripPublic, TripUpdate
from app.services import trips as trips_service

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post("", response_model=TripPublic, status_code=status.HTTP_201_CREATED)
def create_trip(
    payload: TripCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return unwrap(trips_service.create_trip(db, current_user.id, payload))


@router.get("", response_model=Page[TripPublic])
def list_trips(
    q: Annotated[TripListQuery, Query()],
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    trips, total = trips_service.list_trips(db, current_user.id, q)
    return Page[TripPublic](
        data=[TripPublic.model_validate(t) for t in trips],
        pagination=PaginationMeta(page=q.page, page_size=q.page_size, total=total),
    )


@router.get("/{trip_id}", response_model=TripPublic)
def get_trip(
    trip_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return unwrap(trips_service.get_trip(db, trip_id, current_user.id))


@router.patch("/{trip_id}", response_model=TripPublic)
def update_trip(
    trip_id: int,
    payload: TripUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return unwrap(trips_service.update_trip(db, trip_id, current_user.id, payload))


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_trip(
    trip_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    unwrap(trips_service.delete_trip(db, trip_id, current_user.id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
