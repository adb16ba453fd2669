# jobboard/repositories/users.py
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pymongo import ReturnDocument

from jobboard.db.mongo import USERS_COLLECTION, get_db, to_id, to_object_id
from jobboard.models.common import utcnow

# projection used when a user is embedded into another document
PUBLIC_PROFILE = {"first_name": 1, "last_name": 1, "email": 1}


async def create_user(data: Dict[str, Any]) -> Dict[str, Any]:
    db = get_db()
    payload = dict(data)
    payload.setdefault("saved_jobs", [])
    payload.setdefault("reset_password_token", None)
    payload.setdefault("reset_password_expire", None)
    payload["created_at"] = utcnow()
    payload["updated_at"] = payload["created_at"]
    res = await db[USERS_COLLECTION].insert_one(payload)
    payload["_id"] = res.inserted_id
    return to_id(payload)


async def get_user(user_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(user_id)
    if oid is None:
        return None
    doc = await get_db()[USERS_COLLECTION].find_one({"_id": oid})
    return to_id(doc)


async def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    doc = await get_db()[USERS_COLLECTION].find_one({"email": email})
    return to_id(doc)


async def update_user(user_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    oid = to_object_id(user_id)
    if oid is None:
        return None
    changes = dict(fields)
    changes["updated_at"] = utcnow()
    doc = await get_db()[USERS_COLLECTION].find_one_and_update(
        {"_id": oid},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )
    return to_id(doc)


async def set_reset_token(user_id: str, hashed_token: str, expires_at: datetime) -> None:
    await update_user(user_id, {"reset_password_token": hashed_token, "reset_password_expire": expires_at})


async def clear_reset_token(user_id: str) -> None:
    await update_user(user_id, {"reset_password_token": None, "reset_password_expire": None})


async def find_by_reset_token(hashed_token: str, now: datetime) -> Optional[Dict[str, Any]]:
    doc = await get_db()[USERS_COLLECTION].find_one(
        {"reset_password_token": hashed_token, "reset_password_expire": {"$gt": now}}
    )
    return to_id(doc)


async def list_users(query: Dict[str, Any], skip: int = 0, limit: int = 0) -> List[Dict[str, Any]]:
    cur = get_db()[USERS_COLLECTION].find(query).sort([("created_at", -1), ("_id", -1)]).skip(skip)
    if limit:
        cur = cur.limit(limit)
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def count_users(query: Dict[str, Any]) -> int:
    return await get_db()[USERS_COLLECTION].count_documents(query)


async def get_users_by_ids(user_ids: Iterable[str], projection: Optional[Dict[str, int]] = None) -> Dict[str, Dict[str, Any]]:
    oids = [o for o in (to_object_id(u) for u in set(user_ids)) if o is not None]
    if not oids:
        return {}
    out = {}
    async for d in get_db()[USERS_COLLECTION].find({"_id": {"$in": oids}}, projection):
        doc = to_id(d)
        out[doc["id"]] = doc
    return out


async def add_saved_job(user_id: str, job_id: str) -> None:
    # $addToSet keeps saved_jobs a set even under concurrent saves
    await get_db()[USERS_COLLECTION].update_one(
        {"_id": to_object_id(user_id)}, {"$addToSet": {"saved_jobs": job_id}}
    )


async def remove_saved_job(user_id: str, job_id: str) -> None:
    await get_db()[USERS_COLLECTION].update_one(
        {"_id": to_object_id(user_id)}, {"$pull": {"saved_jobs": job_id}}
    )
