"""
User Domain Service.

Covers self-registration with email verification, login, the caller's own
profile and avatar, and user administration (role grants, deletion).
"""

import secrets
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from food_api.models import Branch, User
from food_api.repositories import RepositoryFilters, UserRepository
from food_api.services.permissions import can_grant
from food_shared.config.constants import Limits, Roles
from food_shared.config.logging import auth_logger as logger, mask_email
from food_shared.config.settings import settings
from food_shared.infrastructure.blob_store import BlobStore
from food_shared.infrastructure.db import safe_commit, store_step
from food_shared.infrastructure.deadline import Deadline
from food_shared.infrastructure.notifier import Notifier
from food_shared.security.auth import sign_jwt
from food_shared.security.password import hash_password, verify_password
from food_shared.utils.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidBranchError,
    NotFoundError,
    ValidationError,
)
from food_shared.utils.schemas import (
    LoginResponse,
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    RoleUpdate,
    UserCreate,
    UserOutput,
)
from .cover_images import remove_cover, replace_cover

VERIFICATION_SUBJECT = "Your nano-food verification code"


def generate_verification_code() -> str:
    """Random numeric code, zero padded."""
    digits = Limits.VERIFICATION_CODE_DIGITS
    return f"{secrets.randbelow(10 ** digits):0{digits}d}"


def verification_email(name: str, code: str) -> str:
    return (
        f"<p>Hello {name},</p>"
        f"<p>Your verification code is <strong>{code}</strong>.</p>"
        "<p>Enter it in the app to activate your account.</p>"
    )


class UserService:
    def __init__(self, db: Session, deadline: Deadline | None = None):
        self._db = db
        self._deadline = deadline
        self._repo = UserRepository(db)

    # =========================================================================
    # Registration and login
    # =========================================================================

    def register(self, body: RegisterRequest, notifier: Notifier) -> UserOutput:
        """
        Create an unverified STAFF account and email its verification code.

        The account is only committed once the email went out; a notifier
        failure aborts registration.
        """
        self._ensure_email_free(body.email)
        if body.branch_id is not None:
            self._ensure_branch(body.branch_id)

        code = generate_verification_code()
        user = User(
            name=body.name,
            email=body.email.lower(),
            password=hash_password(body.password),
            role=Roles.STAFF,
            branch_id=body.branch_id,
            verification_code=code,
            is_verified=False,
        )
        try:
            with store_step(self._db, "insert user", self._deadline, write=True):
                self._db.add(user)
                self._db.flush()
            notifier.send(user.email, VERIFICATION_SUBJECT, verification_email(user.name, code))
            with store_step(self._db, "commit user", self._deadline, write=True):
                safe_commit(self._db)
        except Exception:
            self._db.rollback()
            raise

        output = self._reloaded(user)
        logger.info("User registered", user_id=output.id, email=mask_email(output.email))
        return output

    def verify(self, email: str, code: str) -> UserOutput:
        user = self._by_email(email)
        if user is None:
            raise NotFoundError("User")
        if user.is_verified:
            raise ConflictError("Account already verified", user_id=user.id)
        if not user.verification_code or not secrets.compare_digest(user.verification_code, code):
            raise ValidationError("Invalid verification code", user_id=user.id)

        user.is_verified = True
        user.verification_code = None
        with store_step(self._db, "verify user", self._deadline, write=True):
            safe_commit(self._db)

        output = self._reloaded(user)
        logger.info("User verified", user_id=output.id)
        return output

    def login(self, email: str, password: str) -> LoginResponse:
        user = self._by_email(email)

        if user is None or not verify_password(password, user.password):
            logger.warning("LOGIN_FAILED", email=mask_email(email))
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            )

        if not user.is_verified:
            logger.warning("LOGIN_FAILED: Unverified account", user_id=user.id)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account not verified",
            )

        expires_in = settings.jwt_access_token_expire_minutes * 60
        token = sign_jwt(
            {
                "sub": str(user.id),
                "email": user.email,
                "role": user.role,
                "branch_id": user.branch_id,
            },
            ttl_seconds=expires_in,
        )
        logger.info("LOGIN_SUCCESS", user_id=user.id, role=user.role)
        return LoginResponse(
            access_token=token,
            expires_in=expires_in,
            user=UserOutput.model_validate(user),
        )

    # =========================================================================
    # Own profile
    # =========================================================================

    def get(self, user_id: int) -> UserOutput:
        return UserOutput.model_validate(self._load(user_id))

    def update_profile(self, user_id: int, body: ProfileUpdate) -> UserOutput:
        user = self._load(user_id)
        for field_name, value in body.model_dump(exclude_unset=True).items():
            if field_name == "name" and value is None:
                continue
            setattr(user, field_name, value)
        with store_step(self._db, "update profile", self._deadline, write=True):
            safe_commit(self._db)
        return self._reloaded(user)

    def change_password(self, user_id: int, body: PasswordChange) -> None:
        user = self._load(user_id)
        if not verify_password(body.old_password, user.password):
            raise ValidationError("Current password is incorrect", user_id=user_id)
        user.password = hash_password(body.new_password)
        with store_step(self._db, "update password", self._deadline, write=True):
            safe_commit(self._db)
        logger.info("Password changed", user_id=user_id)

    def upload_avatar(
        self, user_id: int, blob_store: BlobStore, data: bytes, content_type: str | None
    ) -> UserOutput:
        user = self._load(user_id)
        replace_cover(
            self._db, blob_store, user, "avatars", data, content_type, self._deadline, field="avatar_url"
        )
        return self._reloaded(user)

    def delete_avatar(self, user_id: int, blob_store: BlobStore) -> UserOutput:
        user = self._load(user_id)
        remove_cover(self._db, blob_store, user, self._deadline, field="avatar_url")
        return self._reloaded(user)

    # =========================================================================
    # Administration
    # =========================================================================

    def list_users(self, filters: RepositoryFilters) -> list[UserOutput]:
        with store_step(self._db, "list users", self._deadline):
            users = self._repo.find_all(filters)
        return [UserOutput.model_validate(u) for u in users]

    def create_user(self, caller: dict[str, Any], body: UserCreate) -> UserOutput:
        """Create a verified account with a role the caller may grant."""
        if not can_grant(caller.get("role"), body.role):
            raise ForbiddenError(f"grant role {body.role}", role=caller.get("role"))
        self._ensure_email_free(body.email)
        if body.branch_id is not None:
            self._ensure_branch(body.branch_id)

        user = User(
            name=body.name,
            email=body.email.lower(),
            password=hash_password(body.password),
            role=body.role,
            branch_id=body.branch_id,
            is_verified=True,
        )
        with store_step(self._db, "insert user", self._deadline, write=True):
            self._db.add(user)
            safe_commit(self._db)

        output = self._reloaded(user)
        logger.info("User created", user_id=output.id, role=output.role, created_by=caller.get("sub"))
        return output

    def change_role(self, caller: dict[str, Any], user_id: int, body: RoleUpdate) -> UserOutput:
        caller_role = caller.get("role")
        if int(caller["sub"]) == user_id:
            raise ForbiddenError("change your own role")

        user = self._load(user_id)
        # Both the current and the new role must be within the caller's grant
        if not can_grant(caller_role, user.role) or not can_grant(caller_role, body.role):
            raise ForbiddenError(f"grant role {body.role}", role=caller_role, target_user_id=user_id)

        user.role = body.role
        with store_step(self._db, "update role", self._deadline, write=True):
            safe_commit(self._db)

        logger.info("Role changed", user_id=user_id, role=body.role, changed_by=caller.get("sub"))
        return self._reloaded(user)

    def delete_user(self, caller: dict[str, Any], user_id: int) -> None:
        if int(caller["sub"]) == user_id:
            raise ConflictError("Cannot delete your own account")
        user = self._load(user_id)
        with store_step(self._db, "delete user", self._deadline, write=True):
            self._repo.delete(user)
            safe_commit(self._db)
        logger.info("User deleted", user_id=user_id, deleted_by=caller.get("sub"))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _reloaded(self, user: User) -> UserOutput:
        with store_step(self._db, "reload user", self._deadline, committed=True):
            self._db.refresh(user)
            return UserOutput.model_validate(user)

    def _by_email(self, email: str) -> User | None:
        with store_step(self._db, "load user", self._deadline):
            return self._repo.find_by_email(email)

    def _load(self, user_id: int) -> User:
        with store_step(self._db, "load user", self._deadline):
            user = self._repo.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def _ensure_email_free(self, email: str) -> None:
        if self._by_email(email) is not None:
            raise ConflictError("Email already registered", email=mask_email(email))

    def _ensure_branch(self, branch_id: int) -> None:
        with store_step(self._db, "validate branch", self._deadline):
            branch = self._db.get(Branch, branch_id)
        if branch is None:
            raise InvalidBranchError(branch_id)
