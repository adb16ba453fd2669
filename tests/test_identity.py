# tests/test_identity.py
import logging
import re
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from pymongo.errors import DuplicateKeyError

from conftest import make_upload
from jobboard.core.errors import (
    AuthError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PendingApprovalError,
    ServerError,
    ValidationError,
)
from jobboard.core.config import settings
from jobboard.core.security import SecurityConfig, hash_reset_token
from jobboard.models.common import Page, utcnow
from jobboard.repositories import users as users_repo
from jobboard.services.identity import IdentityService

SEEKER = {
    "first_name": "Sara",
    "last_name": "Ahmed",
    "email": "Sara@Example.com",
    "password": "secret123",
    "role": "user",
}


class Outbox:
    """Stand-in for the mailer: records messages, optionally fails."""

    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def __call__(self, to, subject, html):
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return {"id": "x"}

    def last_token(self):
        return re.search(r"/resetpassword/([0-9a-f]{40})", self.sent[-1]["html"]).group(1)


async def identity_user(identity):
    session = await identity.register(
        {**SEEKER, "email": "reset@example.com", "role": "employer"}, approved=True
    )
    return session["user"]["id"], session["token"]


@pytest.mark.asyncio
async def test_register_user_requires_cv(identity):
    with pytest.raises(ValidationError) as exc:
        await identity.register(dict(SEEKER))
    assert exc.value.fields == ["cv"]


@pytest.mark.asyncio
async def test_register_reports_every_bad_field(identity):
    with pytest.raises(ValidationError) as exc:
        await identity.register({"role": "user", "email": "nope"})
    fields = set(exc.value.fields)
    assert {"first_name", "last_name", "email", "password", "cv"} <= fields


@pytest.mark.asyncio
async def test_register_strips_secrets_and_normalises_email(identity):
    session = await identity.register(dict(SEEKER), make_upload())
    user = session["user"]
    assert session["token"]
    assert user["email"] == "sara@example.com"
    assert user["is_approved"] is False
    assert user["cv_url"].startswith("/uploads/cvs/")
    assert "password" not in user
    assert "reset_password_token" not in user

    stored = await users_repo.get_user(user["id"])
    assert stored["password"] != "secret123"


@pytest.mark.asyncio
async def test_employer_does_not_need_cv(identity):
    session = await identity.register({**SEEKER, "role": "employer"})
    assert session["user"]["cv_url"] is None


@pytest.mark.asyncio
async def test_duplicate_email_conflicts_case_insensitively(identity):
    await identity.register(dict(SEEKER), make_upload())
    with pytest.raises(ConflictError):
        await identity.register({**SEEKER, "email": "SARA@example.com"}, make_upload())


@pytest.mark.asyncio
async def test_login_uses_same_message_for_unknown_email_and_bad_password(identity, make_user):
    await make_user(role="employer", email="boss@example.com")

    with pytest.raises(AuthError) as unknown:
        await identity.login("ghost@example.com", "secret123")
    with pytest.raises(AuthError) as wrong:
        await identity.login("boss@example.com", "not-it")

    assert unknown.type is AuthError and wrong.type is AuthError
    assert unknown.value.message == wrong.value.message == "Invalid credentials"
    assert unknown.value.status_code == 401


@pytest.mark.asyncio
async def test_pending_account_gets_distinct_error(identity, make_user):
    await make_user(role="employer", email="new@example.com", approved=False)
    with pytest.raises(PendingApprovalError) as exc:
        await identity.login("new@example.com", "secret123")
    assert exc.value.status_code == 403
    assert exc.value.message != "Invalid credentials"


@pytest.mark.asyncio
async def test_admin_login_ignores_approval_flag(identity, make_user):
    await make_user(role="admin", email="root@example.com", approved=False)
    session = await identity.login("ROOT@example.com", "secret123")
    assert session["user"]["role"] == "admin"


@pytest.mark.asyncio
async def test_approve_false_blocks_login(identity, make_user):
    admin, _ = await make_user(role="admin")
    employer, _ = await make_user(role="employer", email="e@example.com", approved=False)

    user = await identity.approve(admin, employer.user_id, True)
    assert user["is_approved"] is True
    await identity.login("e@example.com", "secret123")

    await identity.approve(admin, employer.user_id, False)
    # idempotent
    await identity.approve(admin, employer.user_id, False)
    with pytest.raises(PendingApprovalError):
        await identity.login("e@example.com", "secret123")


@pytest.mark.asyncio
async def test_approve_is_admin_only_and_checks_existence_first(identity, make_user):
    employer, _ = await make_user(role="employer")
    seeker, _ = await make_user(role="user")
    with pytest.raises(ForbiddenError):
        await identity.approve(seeker, employer.user_id, True)
    with pytest.raises(NotFoundError):
        await identity.approve(seeker, "64b000000000000000000000", True)


@pytest.mark.asyncio
async def test_authenticate_resolves_token(identity, make_user):
    principal, token = await make_user(role="employer")
    user = await identity.authenticate(token)
    assert user["id"] == principal.user_id
    with pytest.raises(AuthError):
        await identity.authenticate("bogus")


@pytest.mark.asyncio
async def test_reset_password_roundtrip_and_single_use(db):
    outbox = Outbox()
    identity = IdentityService(SecurityConfig.from_settings(settings), send_email=outbox)
    user_id, _ = await identity_user(identity)

    await identity.request_password_reset("reset@example.com", "http://testserver/api/v1/auth/resetpassword")
    raw = outbox.last_token()

    stored = await users_repo.get_user(user_id)
    # only the digest is persisted
    assert stored["reset_password_token"] == hash_reset_token(raw)
    assert stored["reset_password_expire"] > utcnow()

    session = await identity.reset_password(raw, "brand-new")
    assert session["token"]
    await identity.login("reset@example.com", "brand-new")

    cleared = await users_repo.get_user(user_id)
    assert cleared["reset_password_token"] is None
    assert cleared["reset_password_expire"] is None

    with pytest.raises(ValidationError):
        await identity.reset_password(raw, "again-new")


@pytest.mark.asyncio
async def test_expired_reset_token_rejected(db, identity):
    user_id, _ = await identity_user(identity)
    raw = "ab" * 20
    await users_repo.set_reset_token(user_id, hash_reset_token(raw), utcnow() - timedelta(minutes=1))
    with pytest.raises(ValidationError):
        await identity.reset_password(raw, "whatever1")


@pytest.mark.asyncio
async def test_reset_token_rolled_back_when_email_fails(db):
    identity = IdentityService(SecurityConfig.from_settings(settings), send_email=Outbox(fail=True))
    user_id, _ = await identity_user(identity)

    with pytest.raises(ServerError):
        await identity.request_password_reset("reset@example.com", "http://x/resetpassword")

    stored = await users_repo.get_user(user_id)
    assert stored["reset_password_token"] is None
    assert stored["reset_password_expire"] is None


@pytest.mark.asyncio
async def test_reset_request_for_unknown_email(identity):
    with pytest.raises(NotFoundError):
        await identity.request_password_reset("ghost@example.com", "http://x/resetpassword")


@pytest.mark.asyncio
async def test_update_password(identity, make_user):
    principal, _ = await make_user(role="employer", email="pw@example.com")
    with pytest.raises(AuthError) as exc:
        await identity.update_password(principal.user_id, "wrong-one", "newpass1")
    assert exc.value.message == "Password is incorrect"

    session = await identity.update_password(principal.user_id, "secret123", "newpass1")
    assert session["token"]
    await identity.login("pw@example.com", "newpass1")


@pytest.mark.asyncio
async def test_update_details_rechecks_email(identity, make_user):
    first, _ = await make_user(role="employer", email="first@example.com")
    await make_user(role="employer", email="taken@example.com")

    user = await identity.update_details(first.user_id, {"city": "Karachi", "email": "First@Example.com"})
    assert user["city"] == "Karachi"
    assert user["email"] == "first@example.com"

    with pytest.raises(ConflictError):
        await identity.update_details(first.user_id, {"email": "taken@example.com"})


@pytest.mark.asyncio
async def test_update_photo_requires_image(identity, make_user):
    principal, _ = await make_user(role="employer")
    with pytest.raises(ValidationError) as exc:
        await identity.update_photo(principal.user_id, make_upload(filename="cv.pdf"))
    assert exc.value.fields == ["photo"]

    user = await identity.update_photo(principal.user_id, make_upload(b"\x89PNG", "me.png", "image/png"))
    assert user["photo_url"].startswith("/uploads/images/")


@pytest.mark.asyncio
async def test_admin_listings(identity, make_user):
    admin, _ = await make_user(role="admin")
    await make_user(role="employer", first_name="Zara", approved=False)
    await make_user(role="employer", first_name="Omar")
    await make_user(role="user", approved=False)

    pending = await identity.list_pending(admin)
    assert len(pending) == 2
    assert all(u["is_approved"] is False for u in pending)

    result = await identity.list_by_role(admin, "employer", search="zar", page=Page(page=1, limit=10))
    assert [u["first_name"] for u in result["items"]] == ["Zara"]
    assert result["pagination"]["total"] == 1

    with pytest.raises(ValidationError):
        await identity.list_by_role(admin, "admin")
    seeker, _ = await make_user(role="user")
    with pytest.raises(ForbiddenError):
        await identity.list_pending(seeker)


@pytest.mark.asyncio
async def test_authenticate_rejects_pending_and_revoked_tokens(identity, make_user):
    admin, admin_token = await make_user(role="admin", approved=False)
    pending, pending_token = await make_user(role="employer", approved=False)
    with pytest.raises(PendingApprovalError):
        await identity.authenticate(pending_token)

    await identity.approve(admin, pending.user_id, True)
    assert (await identity.authenticate(pending_token))["id"] == pending.user_id

    await identity.approve(admin, pending.user_id, False)
    with pytest.raises(PendingApprovalError):
        await identity.authenticate(pending_token)
    # admins are never gated
    assert (await identity.authenticate(admin_token))["role"] == "admin"


@pytest.mark.asyncio
async def test_registration_race_logs_orphaned_cv(identity, monkeypatch, caplog):
    monkeypatch.setattr(users_repo, "create_user", AsyncMock(side_effect=DuplicateKeyError("dup")))
    with caplog.at_level(logging.WARNING, logger="jobboard.services.identity"):
        with pytest.raises(ConflictError):
            await identity.register(dict(SEEKER), make_upload())
    assert any("orphaned upload /uploads/cvs/" in r.getMessage() for r in caplog.records)
