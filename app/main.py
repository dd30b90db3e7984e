from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import Base, engine
from app.core.errors import install_error_handlers
from app.core.logging_config import setup_logging
from app.models.user import User  # noqa: F401
from app.models.trip import Trip  # noqa: F401
from app.models.membership import TripMember  # noqa: F401
from app.models.invite import TripInvite  # noqa: F401
from app.models.share_link import ShareLink  # noqa: F401
from app.models.item import Item  # noqa: F401
from app.models.vote import ItemVote  # noqa: F401

from app.api.routes.auth import router as auth_router
from app.api.routes.users import router as users_router
from app.api.routes.trips import router as trips_router
from app.api.routes.members import router as members_router
from app.api.routes.invites import router as invites_router
from app.api.routes.share_links import router as share_links_router
from app.api.routes.items import router as items_router
from app.api.routes.public_share import router as public_share_router


setup_logging()
Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION)

# CORS primero
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["ETag", "Retry-After"],
    allow_credentials=False,
)

install_error_handlers(app)

# Routers después
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(trips_router)
app.include_router(members_router)
app.include_router(invites_router)
app.include_router(share_links_router)
app.include_router(items_router)
app.include_router(public_share_router)


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/version")
def version():
    return {"name": settings.APP_NAME, "version": settings.APP_VERSION}
