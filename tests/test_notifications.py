# tests/test_notifications.py
import pytest

from jobboard.core.errors import ForbiddenError, NotFoundError
from jobboard.repositories import notifications as repo
from jobboard.services import notifications as notification_service
from jobboard.services.policy import Principal

alice = Principal(user_id="64b0000000000000000000a1", role="user")
bob = Principal(user_id="64b0000000000000000000b2", role="user")


@pytest.mark.asyncio
async def test_list_is_newest_first_and_capped(db):
    for i in range(55):
        await repo.create_notification(alice.user_id, f"n{i}", "msg", "general")
    items = await notification_service.list_notifications(alice)
    assert len(items) == 50
    assert items[0]["title"] == "n54"
    assert await notification_service.list_notifications(bob) == []


@pytest.mark.asyncio
async def test_mark_read_and_delete_require_owner(db):
    nid = await repo.create_notification(alice.user_id, "hello", "msg", "general")

    with pytest.raises(ForbiddenError):
        await notification_service.mark_read(bob, nid)
    with pytest.raises(ForbiddenError):
        await notification_service.delete_notification(bob, nid)
    with pytest.raises(NotFoundError):
        await notification_service.mark_read(alice, "64b000000000000000000000")
    with pytest.raises(NotFoundError):
        await notification_service.delete_notification(alice, "garbage")

    await notification_service.mark_read(alice, nid)
    assert (await repo.get_notification(nid))["is_read"] is True
    await notification_service.delete_notification(alice, nid)
    assert await repo.get_notification(nid) is None


@pytest.mark.asyncio
async def test_unread_count_and_mark_all_are_caller_scoped(db):
    for _ in range(3):
        await repo.create_notification(alice.user_id, "a", "msg", "general")
    await repo.create_notification(bob.user_id, "b", "msg", "general")

    assert await notification_service.unread_count(alice) == 3
    assert await notification_service.mark_all_read(alice) == 3
    assert await notification_service.unread_count(alice) == 0
    assert await notification_service.unread_count(bob) == 1


def test_status_message_mapping():
    title, message = notification_service.status_message("shortlisted", "Designer")
    assert "Shortlisted" in title and "Designer" in message
    title, _ = notification_service.status_message("rejected", "Designer")
    assert "Rejected" in title
    title, message = notification_service.status_message("pending", "Designer")
    assert title == "Application Status Updated"
    assert "pending" in message


@pytest.mark.asyncio
async def test_emit_swallows_storage_errors(db, monkeypatch):
    async def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(repo, "create_notification", broken)
    assert await notification_service.emit(alice.user_id, "t", "m") is None
