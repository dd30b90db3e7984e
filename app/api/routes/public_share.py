from fastapi import APIRouter, Depends, Header, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.config import settings
from app.core.errors import unwrap
from app.core.rate_limit import limit_public_share
from app.services.public import public_trip_by_slug, weak_etag

router = APIRouter(prefix="/public/share", tags=["public"])


@router.get("/{slug}/trip", dependencies=[Depends(limit_public_share)])
def public_trip(
    slug: str,
    if_none_match: str | None = Header(default=None),
    db: Session = Depends(get_db),
):
    payload = unwrap(public_trip_by_slug(db, slug))

    etag = weak_etag(payload)
    headers = {
        "ETag": etag,
        "Cache-Control": f"public, max-age={settings.PUBLIC_SHARE_CACHE_TTL_SECONDS}",
    }
    if if_none_match and etag in [t.strip() for t in if_none_match.split(",")]:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)
    return JSONResponse(content=payload, headers=headers)
