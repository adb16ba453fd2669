# jobboard/repositories/applications.py
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from jobboard.db.mongo import APPLICATIONS_COLLECTION, get_db, to_id, to_object_id
from jobboard.models.common import utcnow


async def create_application(data: Dict[str, Any]) -> Dict[str, Any]:
    """Insert; a second (job, applicant) pair raises pymongo's DuplicateKeyError."""
    payload = dict(data)
    payload["created_at"] = utcnow()
    payload["updated_at"] = payload["created_at"]
    res = await get_db()[APPLICATIONS_COLLECTION].insert_one(payload)
    payload["_id"] = res.inserted_id
    return to_id(payload)


async def get_application(application_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(application_id)
    if oid is None:
        return None
    return to_id(await get_db()[APPLICATIONS_COLLECTION].find_one({"_id": oid}))


async def find_for_pair(job_id: str, applicant_id: str) -> Optional[Dict[str, Any]]:
    doc = await get_db()[APPLICATIONS_COLLECTION].find_one({"job": job_id, "applicant": applicant_id})
    return to_id(doc)


async def find_applications(query: Dict[str, Any]) -> List[Dict[str, Any]]:
    cur = get_db()[APPLICATIONS_COLLECTION].find(query).sort([("created_at", -1), ("_id", -1)])
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def count_applications(query: Dict[str, Any]) -> int:
    return await get_db()[APPLICATIONS_COLLECTION].count_documents(query)


async def set_status(application_id: str, status: str) -> Optional[Dict[str, Any]]:
    doc = await get_db()[APPLICATIONS_COLLECTION].find_one_and_update(
        {"_id": to_object_id(application_id)},
        {"$set": {"status": status, "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    return to_id(doc)
