"""
Authentication router.
Handles registration, email verification, login and the caller's profile
and avatar.
"""

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from sqlalchemy.orm import Session

from food_api.services.domain import UserService
from food_shared.config.constants import Limits
from food_shared.config.settings import settings
from food_shared.infrastructure.blob_store import BlobStore, get_blob_store
from food_shared.infrastructure.db import get_db
from food_shared.infrastructure.deadline import Deadline, request_deadline
from food_shared.infrastructure.notifier import Notifier, get_notifier
from food_shared.security.auth import current_user_context, get_user_id
from food_shared.security.rate_limit import limiter
from food_shared.utils.schemas import (
    LoginRequest,
    LoginResponse,
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    RegisterResponse,
    UserOutput,
    VerifyRequest,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.register_rate_limit)
def register(
    request: Request,
    body: RegisterRequest,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    notifier: Notifier = Depends(get_notifier),
) -> RegisterResponse:
    """
    Create an unverified account and email its verification code.
    If the email cannot be sent, no account is created.
    """
    user = UserService(db, deadline).register(body, notifier)
    return RegisterResponse(user=user)


@router.post("/verify", response_model=UserOutput)
def verify(
    body: VerifyRequest,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
) -> UserOutput:
    return UserService(db, deadline).verify(body.email, body.verification_code)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.login_rate_limit)
def login(
    request: Request,
    body: LoginRequest,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
) -> LoginResponse:
    """
    Authenticate a verified user and return an access token.

    The token carries: sub (user id), email, role, branch_id.
    """
    return UserService(db, deadline).login(body.email, body.password)


@router.get("/me", response_model=UserOutput)
def me(
    db: Session = Depends(get_db),
    user: dict = Depends(current_user_context),
) -> UserOutput:
    return UserService(db).get(get_user_id(user))


@router.put("/me", response_model=UserOutput)
def update_me(
    body: ProfileUpdate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(current_user_context),
) -> UserOutput:
    return UserService(db, deadline).update_profile(get_user_id(user), body)


@router.put("/me/password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(
    body: PasswordChange,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(current_user_context),
) -> None:
    UserService(db, deadline).change_password(get_user_id(user), body)


@router.put("/me/avatar", response_model=UserOutput)
def upload_avatar(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    blob_store: BlobStore = Depends(get_blob_store),
    user: dict = Depends(current_user_context),
) -> UserOutput:
    """Replace the caller's avatar. JPEG, PNG or WebP, up to 5 MB."""
    data = file.file.read(Limits.MAX_UPLOAD_BYTES + 1)
    return UserService(db, deadline).upload_avatar(get_user_id(user), blob_store, data, file.content_type)


@router.delete("/me/avatar", response_model=UserOutput)
def delete_avatar(
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    blob_store: BlobStore = Depends(get_blob_store),
    user: dict = Depends(current_user_context),
) -> UserOutput:
    return UserService(db, deadline).delete_avatar(get_user_id(user), blob_store)
