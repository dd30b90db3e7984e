from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.core.database import insert_or_conflict
from app.core.errors import ErrorCode, Failure, Ok, Result
from app.models.vote import ItemVote
from app.services.items import get_item, votes_count
from app.services.public_cache import public_cache


def add_vote(db: Session, trip_id: int, item_id: int, user_id: int) -> Result[int]:
    """Returns the item's vote count after voting."""
    res = get_item(db, trip_id, user_id, item_id)
    if isinstance(res, Failure):
        return res

    # UNIQUE (item_id, user_id): el segundo voto, o el perdedor de una carrera, es conflicto
    if not insert_or_conflict(db, ItemVote(item_id=item_id, user_id=user_id)):
        return Failure(ErrorCode.VOTE_CONFLICT, "Already voted")

    public_cache.invalidate_trip(trip_id)
    return Ok(votes_count(db, item_id))


def remove_vote(db: Session, trip_id: int, item_id: int, user_id: int) -> Result[None]:
    res = get_item(db, trip_id, user_id, item_id)
    if isinstance(res, Failure):
        return res

    removed = db.execute(
        delete(ItemVote)
        .where(ItemVote.item_id == item_id, ItemVote.user_id == user_id)
        .execution_options(synchronize_session=False)
    ).rowcount
    if removed != 1:
        db.rollback()
        return Failure(ErrorCode.VOTE_NOT_FOUND, "Vote not found")

    db.commit()
    public_cache.invalidate_trip(trip_id)
    return Ok(None)
