import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from app.common.cache import RedisStore
from app.common.deps import get_current_user, get_db, get_store, require_admin
from app.core.config import Settings, get_settings
from app.features.users.models import User, UserRole
from app.features.users.repository import DuplicateEmailError, user_repository
from .schemas import (
    AdminRegisterRequest,
    AuthResponse,
    LoginRequest,
    MessageResponse,
    ProfileOut,
    ProfileResponse,
    RegisterRequest,
    UserOut,
)
from .service import (
    clear_auth_cookie,
    create_access_token,
    hash_password,
    set_auth_cookie,
    token_expiry,
    verify_password,
)

logger = logging.getLogger("auth")

router = APIRouter(prefix="/user", tags=["auth"])


def _issue(resp: Response, user: User, settings: Settings) -> str:
    token = create_access_token(settings, email_id=user.email_id, role=user.role.value)
    set_auth_cookie(resp, token, settings)
    return token


def _create_user(db: Session, payload: RegisterRequest, role: UserRole) -> User:
    try:
        return user_repository.create(
            db,
            name=payload.name,
            email_id=payload.email_id,
            password_hash=hash_password(payload.password),
            role=role,
            age=payload.age,
        )
    except DuplicateEmailError as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(exc))


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=AuthResponse)
def register(
    payload: RegisterRequest,
    resp: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    # Self-registration always creates a regular user.
    user = _create_user(db, payload, UserRole.user)
    _issue(resp, user, settings)
    logger.info("user.registered id=%s", user.id)
    return AuthResponse(user=UserOut.model_validate(user), message="User registered successfully")


@router.post("/admin/register", status_code=status.HTTP_201_CREATED, response_model=AuthResponse)
def admin_register(
    payload: AdminRegisterRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = _create_user(db, payload, payload.role)
    logger.info("user.registered id=%s role=%s by_admin=%s", user.id, user.role.value, admin.id)
    return AuthResponse(user=UserOut.model_validate(user), message="User registered successfully")


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    resp: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = user_repository.get_by_email(db, payload.email_id)
    if user is None or not verify_password(payload.password, user.password):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid Credentials")
    _issue(resp, user, settings)
    return AuthResponse(user=UserOut.model_validate(user), message="Login successful")


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    resp: Response,
    user: User = Depends(get_current_user),
    store: RedisStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    token = request.state.token
    try:
        await store.block_token(token, token_expiry(token))
    except Exception as exc:  # noqa: BLE001
        logger.error("logout blocklist write failed user_id=%s: %s", user.id, exc)
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "Logout failed, try again") from exc
    clear_auth_cookie(resp, settings)
    return MessageResponse(message="Logout successful")


@router.get("/profile", response_model=ProfileResponse)
def profile(user: User = Depends(get_current_user)):
    data = ProfileOut(
        id=user.id,
        name=user.name,
        email_id=user.email_id,
        role=user.role,
        age=user.age,
        problems_solved=[p.id for p in user.problems_solved],
        created_at=user.created_at,
    )
    return ProfileResponse(data=data)


@router.delete("/deleteProfile", response_model=MessageResponse)
def delete_profile(
    resp: Response,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user_repository.delete_with_submissions(db, user)
    clear_auth_cookie(resp, settings)
    return MessageResponse(message="Profile deleted successfully")


@router.get("/checkAuth", response_model=AuthResponse)
def check_auth(user: User = Depends(get_current_user)):
    return AuthResponse(user=UserOut.model_validate(user), message="User is authenticated")
