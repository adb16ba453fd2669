# jobboard/repositories/categories.py
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from jobboard.db.mongo import CATEGORIES_COLLECTION, get_db, to_id, to_object_id
from jobboard.models.common import utcnow


async def create_category(data: Dict[str, Any]) -> Dict[str, Any]:
    payload = dict(data)
    payload.setdefault("is_active", True)
    payload["created_at"] = utcnow()
    payload["updated_at"] = payload["created_at"]
    res = await get_db()[CATEGORIES_COLLECTION].insert_one(payload)
    payload["_id"] = res.inserted_id
    return to_id(payload)


async def get_category(category_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(category_id)
    if oid is None:
        return None
    return to_id(await get_db()[CATEGORIES_COLLECTION].find_one({"_id": oid}))


async def get_category_by_name(name: str) -> Optional[Dict[str, Any]]:
    return to_id(await get_db()[CATEGORIES_COLLECTION].find_one({"name": name}))


async def list_categories(query: Dict[str, Any], skip: int = 0, limit: int = 0) -> List[Dict[str, Any]]:
    cur = get_db()[CATEGORIES_COLLECTION].find(query).sort("name", 1).skip(skip)
    if limit:
        cur = cur.limit(limit)
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def count_categories(query: Dict[str, Any]) -> int:
    return await get_db()[CATEGORIES_COLLECTION].count_documents(query)


async def update_category(category_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    changes = dict(fields)
    changes["updated_at"] = utcnow()
    doc = await get_db()[CATEGORIES_COLLECTION].find_one_and_update(
        {"_id": to_object_id(category_id)}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    return to_id(doc)


async def delete_category(category_id: str) -> bool:
    res = await get_db()[CATEGORIES_COLLECTION].delete_one({"_id": to_object_id(category_id)})
    return res.deleted_count > 0
