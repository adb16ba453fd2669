# jobboard/services/identity.py
"""
Identity and credential manager: registration, login, sessions, password
reset and admin approval.

Hash cost, signing secret and TTLs come from the ``SecurityConfig`` passed
to ``IdentityService``; nothing here reads ``settings`` for them.
"""
import logging
import re
from datetime import timedelta
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import UploadFile
from pymongo.errors import DuplicateKeyError

from jobboard.core.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    PendingApprovalError,
    ServerError,
    ValidationError,
)
from jobboard.core.security import (
    PasswordHasher,
    SecurityConfig,
    TokenSigner,
    generate_reset_token,
    hash_reset_token,
)
from jobboard.core.validation import parse_model
from jobboard.models.common import Page, page_meta, utcnow
from jobboard.models.user import (
    ResetPassword,
    Role,
    UpdateDetails,
    UpdatePassword,
    UserCreate,
    normalize_email,
    sanitize_user,
)
from jobboard.repositories import users as users_repo
from jobboard.services import mailer, storage
from jobboard.services.policy import Principal, authorize_resource, require_role

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
LISTABLE_ROLES = (Role.USER.value, Role.EMPLOYER.value)

SendEmail = Callable[[str, str, str], Awaitable[Any]]


def _reset_email(reset_url: str, minutes: int) -> str:
    return (
        "<p>You are receiving this email because you (or someone else) requested a password reset.</p>"
        f'<p>Follow <a href="{reset_url}">{reset_url}</a> to choose a new password. '
        f"The link expires in {minutes} minutes.</p>"
    )


class IdentityService:
    def __init__(self, config: SecurityConfig, send_email: Optional[SendEmail] = None):
        self.config = config
        self.hasher = PasswordHasher(config.password_hash_rounds)
        self.signer = TokenSigner(config.secret_key, config.algorithm, config.access_token_expire_minutes)
        self._send_email = send_email

    # sessions

    def issue_session(self, user: Dict[str, Any]) -> Dict[str, Any]:
        return {"token": self.signer.sign(user["id"]), "user": sanitize_user(user)}

    async def authenticate(self, token: str) -> Dict[str, Any]:
        """
        Resolve a bearer token to its (sanitized) user or raise AuthError.

        Approval is checked on every request, so revoking it locks out
        tokens that were already issued.
        """
        user_id = self.signer.verify(token)
        user = await users_repo.get_user(user_id)
        if user is None:
            raise AuthError()
        self._check_approved(user)
        return sanitize_user(user)

    @staticmethod
    def _check_approved(user: Dict[str, Any]) -> None:
        if user.get("role") != Role.ADMIN.value and not user.get("is_approved"):
            raise PendingApprovalError()

    # registration / login

    async def register(self, profile: Dict[str, Any], cv: Optional[UploadFile] = None,
                       model=UserCreate, approved: bool = False) -> Dict[str, Any]:
        """
        Create an account and return ``{"token", "user"}``.

        Job seekers (role ``user``) must attach a CV. Admin accounts are
        always approved; everyone else starts pending unless ``approved``.
        """
        missing_cv = profile.get("role") == Role.USER.value and (cv is None or not cv.filename)
        try:
            data = parse_model(model, profile)
        except ValidationError as exc:
            if missing_cv:
                exc.errors.append({"field": "cv", "message": "CV is required for job seekers"})
            raise ValidationError(errors=exc.errors) from None
        if missing_cv:
            raise ValidationError.for_field("cv", "CV is required for job seekers")

        email = normalize_email(data.email)
        if await users_repo.get_user_by_email(email):
            raise ConflictError("User already exists")

        doc = data.model_dump()
        doc["email"] = email
        doc["password"] = self.hasher.hash(data.password)
        doc["is_approved"] = approved or data.role == Role.ADMIN.value
        doc["cv_url"] = await storage.store_cv(cv) if data.role == Role.USER.value else None
        doc["photo_url"] = None
        try:
            user = await users_repo.create_user(doc)
        except DuplicateKeyError:
            if doc["cv_url"]:
                logger.warning("registration for %s lost a duplicate race; orphaned upload %s", email, doc["cv_url"])
            raise ConflictError("User already exists") from None
        logger.info("registered %s account %s", user["role"], user["id"])
        return self.issue_session(user)

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        if not email or not password:
            raise ValidationError("Please provide an email and password")
        user = await users_repo.get_user_by_email(normalize_email(email))
        # same message for unknown email and wrong password
        if user is None or not self.hasher.verify(password, user.get("password")):
            logger.warning("failed login for %s", normalize_email(email))
            raise AuthError(INVALID_CREDENTIALS)
        self._check_approved(user)
        return self.issue_session(user)

    # self service

    async def get_me(self, user_id: str) -> Dict[str, Any]:
        user = await users_repo.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return sanitize_user(user)

    async def update_details(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        changes = parse_model(UpdateDetails, fields).model_dump(exclude_none=True)
        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])
            other = await users_repo.get_user_by_email(changes["email"])
            if other is not None and other["id"] != user_id:
                raise ConflictError("Email is already in use")
        try:
            user = await users_repo.update_user(user_id, changes)
        except DuplicateKeyError:
            raise ConflictError("Email is already in use") from None
        if user is None:
            raise NotFoundError("User not found")
        return sanitize_user(user)

    async def update_password(self, user_id: str, current_password: str, new_password: str) -> Dict[str, Any]:
        data = parse_model(UpdatePassword, {"current_password": current_password, "new_password": new_password})
        user = await users_repo.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not self.hasher.verify(data.current_password, user.get("password")):
            raise AuthError("Password is incorrect")
        user = await users_repo.update_user(user_id, {"password": self.hasher.hash(data.new_password)})
        return self.issue_session(user)

    async def update_photo(self, user_id: str, image: Optional[UploadFile]) -> Dict[str, Any]:
        if await users_repo.get_user(user_id) is None:
            raise NotFoundError("User not found")
        url = await storage.store_image(image)
        user = await users_repo.update_user(user_id, {"photo_url": url})
        return sanitize_user(user)

    # password reset

    async def request_password_reset(self, email: str, reset_url_base: str) -> None:
        user = await users_repo.get_user_by_email(normalize_email(email))
        if user is None:
            raise NotFoundError("There is no user with that email")

        raw, hashed = generate_reset_token()
        minutes = self.config.reset_token_expire_minutes
        await users_repo.set_reset_token(user["id"], hashed, utcnow() + timedelta(minutes=minutes))

        reset_url = f"{reset_url_base.rstrip('/')}/{raw}"
        send = self._send_email or mailer.send_email
        try:
            await send(user["email"], "Password reset token", _reset_email(reset_url, minutes))
        except Exception as exc:
            # never leave a usable token behind when the user cannot receive it
            await users_repo.clear_reset_token(user["id"])
            logger.exception("reset email to user %s failed; token rolled back", user["id"])
            raise ServerError("Email could not be sent") from exc
        logger.info("password reset token issued for user %s", user["id"])

    async def reset_password(self, raw_token: str, new_password: str) -> Dict[str, Any]:
        data = parse_model(ResetPassword, {"password": new_password})
        user = await users_repo.find_by_reset_token(hash_reset_token(raw_token or ""), utcnow())
        if user is None:
            raise ValidationError.for_field("token", "Invalid token")
        user = await users_repo.update_user(user["id"], {
            "password": self.hasher.hash(data.password),
            "reset_password_token": None,
            "reset_password_expire": None,
        })
        logger.info("password reset completed for user %s", user["id"])
        return self.issue_session(user)

    # admin

    async def approve(self, principal: Principal, user_id: str, approved: bool) -> Dict[str, Any]:
        await authorize_resource(users_repo.get_user, user_id, principal,
                                 allowed_roles=[Role.ADMIN], label="User")
        user = await users_repo.update_user(user_id, {"is_approved": bool(approved)})
        logger.info("admin %s set is_approved=%s on user %s", principal.user_id, bool(approved), user_id)
        return sanitize_user(user)

    async def list_pending(self, principal: Principal):
        require_role(principal, [Role.ADMIN])
        users = await users_repo.list_users({"is_approved": False, "role": {"$ne": Role.ADMIN.value}})
        return [sanitize_user(u) for u in users]

    async def list_by_role(self, principal: Principal, role: str, search: Optional[str] = None,
                           page: Optional[Page] = None) -> Dict[str, Any]:
        require_role(principal, [Role.ADMIN])
        if role not in LISTABLE_ROLES:
            raise ValidationError.for_field("role", "Invalid role type")
        page = page or Page()
        query: Dict[str, Any] = {"role": role}
        if search:
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            query["$or"] = [{"first_name": pattern}, {"last_name": pattern}, {"email": pattern}]
        total = await users_repo.count_users(query)
        users = await users_repo.list_users(query, skip=page.skip, limit=page.limit)
        return {"items": [sanitize_user(u) for u in users], "pagination": page_meta(page, total)}
