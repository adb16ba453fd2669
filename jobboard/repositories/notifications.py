# jobboard/repositories/notifications.py
from typing import Any, Dict, List, Optional

from jobboard.db.mongo import NOTIFICATIONS_COLLECTION, get_db, to_id, to_object_id
from jobboard.models.common import utcnow


async def create_notification(user_id: str, title: str, message: str, type_: str,
                              data: Optional[Dict[str, Any]] = None) -> str:
    payload = {
        "user": user_id,
        "title": title,
        "message": message,
        "type": type_,
        "is_read": False,
        "data": data or {},
        "created_at": utcnow(),
    }
    res = await get_db()[NOTIFICATIONS_COLLECTION].insert_one(payload)
    return str(res.inserted_id)


async def get_notification(notification_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(notification_id)
    if oid is None:
        return None
    return to_id(await get_db()[NOTIFICATIONS_COLLECTION].find_one({"_id": oid}))


async def list_for_user(user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    cur = get_db()[NOTIFICATIONS_COLLECTION].find({"user": user_id}).sort([("created_at", -1), ("_id", -1)]).limit(limit)
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def mark_read(notification_id: str) -> None:
    await get_db()[NOTIFICATIONS_COLLECTION].update_one(
        {"_id": to_object_id(notification_id)}, {"$set": {"is_read": True}}
    )


async def mark_all_read(user_id: str) -> int:
    res = await get_db()[NOTIFICATIONS_COLLECTION].update_many(
        {"user": user_id, "is_read": False}, {"$set": {"is_read": True}}
    )
    return res.modified_count


async def count_unread(user_id: str) -> int:
    return await get_db()[NOTIFICATIONS_COLLECTION].count_documents({"user": user_id, "is_read": False})


async def delete_notification(notification_id: str) -> bool:
    res = await get_db()[NOTIFICATIONS_COLLECTION].delete_one({"_id": to_object_id(notification_id)})
    return res.deleted_count > 0
