from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker, DeclarativeBase

from app.core.config import settings

DATABASE_URL = settings.DATABASE_URL

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


# ✅ Dependency para FastAPI: inyecta Session en endpoints
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_conflict(db: Session) -> bool:
    """
    Commit. If the database rejects it on a UNIQUE constraint the whole
    transaction is rolled back and False is returned, so callers can turn the
    violation into their own domain conflict.
    """
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return False
    return True


def insert_or_conflict(db: Session, *objs) -> bool:
    db.add_all(objs)
    if not commit_or_conflict(db):
        return False
    for obj in objs:
        db.refresh(obj)
    return True
