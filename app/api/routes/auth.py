from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.database import insert_or_conflict
from app.core.errors import ApiError, ErrorCode, Failure, conflict, invalid
from app.core.rate_limit import limit_by_ip, login_limiter, register_limiter
from app.core.security import hash_password, verify_password, create_access_token
from app.models.user import User
from app.schemas.auth import RegisterRequest, LoginRequest, TokenResponse
from app.core.auth import get_current_user
from app.schemas.user import UserPublic


router = APIRouter(prefix="/auth", tags=["auth"])

@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(limit_by_ip(register_limiter))],
)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    try:
        hashed = hash_password(payload.password)
    except ValueError as e:
        # 72 caracteres pueden pasar de 72 bytes con UTF-8
        raise ApiError(invalid(str(e), password="too_long"))
    user = User(email=email, hashed_password=hashed, name=payload.name)

    # email UNIQUE: el duplicado (o la carrera) sale como conflicto
    if not insert_or_conflict(db, user):
        raise ApiError(conflict("Email already exists", email="taken"))

    token = create_access_token(str(user.id), user.email)
    return TokenResponse(access_token=token, user=UserPublic.model_validate(user))

@router.post("/login", response_model=TokenResponse, dependencies=[Depends(limit_by_ip(login_limiter))])
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise ApiError(Failure(ErrorCode.AUTH_INVALID_CREDENTIALS, "Invalid credentials"))

    token = create_access_token(str(user.id), user.email)
    return TokenResponse(access_token=token, user=UserPublic.model_validate(user))

@router.get("/me", response_model=UserPublic)
def me(user=Depends(get_current_user)):
    return user
