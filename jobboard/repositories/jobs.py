# jobboard/repositories/jobs.py
from typing import Any, Dict, Iterable, List, Optional

from pymongo import ReturnDocument

from jobboard.db.mongo import JOBS_COLLECTION, get_db, to_id, to_object_id
from jobboard.models.common import utcnow

NEWEST_FIRST = [("created_at", -1), ("_id", -1)]


async def create_job(data: Dict[str, Any]) -> Dict[str, Any]:
    db = get_db()
    payload = dict(data)
    payload["applications_count"] = 0
    payload["views_count"] = 0
    payload["created_at"] = utcnow()
    payload["updated_at"] = payload["created_at"]
    res = await db[JOBS_COLLECTION].insert_one(payload)
    payload["_id"] = res.inserted_id
    return to_id(payload)


async def get_job(job_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(job_id)
    if oid is None:
        return None
    return to_id(await get_db()[JOBS_COLLECTION].find_one({"_id": oid}))


async def find_jobs(query: Dict[str, Any], skip: int = 0, limit: int = 0,
                    projection: Optional[Dict[str, int]] = None) -> List[Dict[str, Any]]:
    cur = get_db()[JOBS_COLLECTION].find(query, projection).sort(NEWEST_FIRST).skip(skip)
    if limit:
        cur = cur.limit(limit)
    out = []
    async for d in cur:
        out.append(to_id(d))
    return out


async def count_jobs(query: Dict[str, Any]) -> int:
    return await get_db()[JOBS_COLLECTION].count_documents(query)


async def get_jobs_by_ids(job_ids: Iterable[str], projection: Optional[Dict[str, int]] = None) -> Dict[str, Dict[str, Any]]:
    oids = [o for o in (to_object_id(j) for j in set(job_ids)) if o is not None]
    if not oids:
        return {}
    out = {}
    async for d in get_db()[JOBS_COLLECTION].find({"_id": {"$in": oids}}, projection):
        doc = to_id(d)
        out[doc["id"]] = doc
    return out


async def job_ids_for_employer(employer_id: str) -> List[str]:
    out = []
    async for d in get_db()[JOBS_COLLECTION].find({"employer": employer_id}, {"_id": 1}):
        out.append(str(d["_id"]))
    return out


async def update_job(job_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    oid = to_object_id(job_id)
    if oid is None:
        return None
    changes = dict(fields)
    changes["updated_at"] = utcnow()
    doc = await get_db()[JOBS_COLLECTION].find_one_and_update(
        {"_id": oid}, {"$set": changes}, return_document=ReturnDocument.AFTER
    )
    return to_id(doc)


async def increment_views(job_id: str) -> Optional[Dict[str, Any]]:
    oid = to_object_id(job_id)
    if oid is None:
        return None
    doc = await get_db()[JOBS_COLLECTION].find_one_and_update(
        {"_id": oid}, {"$inc": {"views_count": 1}}, return_document=ReturnDocument.AFTER
    )
    return to_id(doc)


async def increment_applications(job_id: str) -> None:
    await get_db()[JOBS_COLLECTION].update_one(
        {"_id": to_object_id(job_id)}, {"$inc": {"applications_count": 1}}
    )


async def delete_job(job_id: str) -> bool:
    oid = to_object_id(job_id)
    if oid is None:
        return False
    res = await get_db()[JOBS_COLLECTION].delete_one({"_id": oid})
    return res.deleted_count > 0
