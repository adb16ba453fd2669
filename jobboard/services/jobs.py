# jobboard/services/jobs.py
import logging
import re
from typing import Any, Dict, List, Optional

from jobboard.core.errors import NotFoundError, ValidationError
from jobboard.core.validation import parse_model
from jobboard.models.application import ApplicationStatus
from jobboard.models.common import Page, page_meta
from jobboard.models.job import JOB_STATUSES, JobCreate, JobFilters, JobStatus, JobUpdate
from jobboard.models.user import Role
from jobboard.repositories import applications as applications_repo
from jobboard.repositories import jobs as jobs_repo
from jobboard.repositories import users as users_repo
from jobboard.services.policy import Principal, authorize_resource, require_role

logger = logging.getLogger(__name__)

EXACT_FILTERS = ("category", "job_type", "experience_level", "gender")
# free-text fields: plain case-insensitive containment, not numeric ranges
CONTAINS_FILTERS = ("location", "salary", "age")


def _contains(value: str) -> Dict[str, str]:
    return {"$regex": re.escape(value), "$options": "i"}


def build_query(filters: JobFilters, principal: Optional[Principal]) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    for name in EXACT_FILTERS:
        value = getattr(filters, name)
        if value:
            query[name] = value
    for name in CONTAINS_FILTERS:
        value = getattr(filters, name)
        if value:
            query[name] = _contains(value)
    if principal is not None and principal.is_admin:
        if filters.status:
            query["status"] = filters.status
    else:
        query["status"] = JobStatus.ACTIVE.value
    return query


def _check_status(status: Optional[str]) -> str:
    if status not in JOB_STATUSES:
        raise ValidationError.for_field("status", "Invalid status")
    return status


async def attach_employers(jobs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Replace each job's employer id with ``{id, first_name, last_name, email}``."""
    employers = await users_repo.get_users_by_ids(
        [j["employer"] for j in jobs if j.get("employer")], projection=users_repo.PUBLIC_PROFILE
    )
    for job in jobs:
        job["employer"] = employers.get(job.get("employer"))
    return jobs


async def create_job(principal: Principal, fields: Dict[str, Any]) -> Dict[str, Any]:
    require_role(principal, [Role.EMPLOYER])
    data = parse_model(JobCreate, fields).model_dump()
    data["employer"] = principal.user_id
    job = await jobs_repo.create_job(data)
    logger.info("employer %s created job %s", principal.user_id, job["id"])
    return job


async def list_jobs(filters: JobFilters, page: Page, principal: Optional[Principal] = None) -> Dict[str, Any]:
    query = build_query(filters, principal)
    total = await jobs_repo.count_jobs(query)
    jobs = await jobs_repo.find_jobs(query, skip=page.skip, limit=page.limit)
    return {"items": await attach_employers(jobs), "pagination": page_meta(page, total)}


async def get_job(job_id: str) -> Dict[str, Any]:
    """Public single-job read; every call counts as one view."""
    job = await jobs_repo.increment_views(job_id)
    if job is None:
        raise NotFoundError("Job not found")
    return (await attach_employers([job]))[0]


async def update_job(principal: Principal, job_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    await authorize_resource(jobs_repo.get_job, job_id, principal, owner_field="employer", label="Job")
    changes = parse_model(JobUpdate, fields).model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        return await jobs_repo.get_job(job_id)
    return await jobs_repo.update_job(job_id, changes)


async def update_job_status(principal: Principal, job_id: str, status: Optional[str]) -> Dict[str, Any]:
    status = _check_status(status)
    job = await authorize_resource(jobs_repo.get_job, job_id, principal, owner_field="employer", label="Job")
    updated = await jobs_repo.update_job(job_id, {"status": status})
    logger.info("job %s status %s -> %s", job_id, job.get("status"), status)
    return updated


async def delete_job(principal: Principal, job_id: str) -> None:
    await authorize_resource(jobs_repo.get_job, job_id, principal, owner_field="employer",
                             admin_bypass=True, label="Job")
    await jobs_repo.delete_job(job_id)
    logger.info("job %s deleted by %s", job_id, principal.user_id)


async def list_my_jobs(principal: Principal, page: Page, status: Optional[str] = None) -> Dict[str, Any]:
    require_role(principal, [Role.EMPLOYER])
    query: Dict[str, Any] = {"employer": principal.user_id}
    if status:
        query["status"] = _check_status(status)
    total = await jobs_repo.count_jobs(query)
    jobs = await jobs_repo.find_jobs(query, skip=page.skip, limit=page.limit)
    return {"items": jobs, "pagination": page_meta(page, total)}


# saved jobs

async def save_job(principal: Principal, job_id: str) -> List[str]:
    await authorize_resource(jobs_repo.get_job, job_id, principal, allowed_roles=[Role.USER], label="Job")
    await users_repo.add_saved_job(principal.user_id, job_id)
    user = await users_repo.get_user(principal.user_id)
    return user.get("saved_jobs", []) if user else []


async def unsave_job(principal: Principal, job_id: str) -> List[str]:
    require_role(principal, [Role.USER])
    await users_repo.remove_saved_job(principal.user_id, job_id)
    user = await users_repo.get_user(principal.user_id)
    return user.get("saved_jobs", []) if user else []


async def list_saved_jobs(principal: Principal) -> List[Dict[str, Any]]:
    require_role(principal, [Role.USER])
    user = await users_repo.get_user(principal.user_id)
    saved = (user or {}).get("saved_jobs", [])
    found = await jobs_repo.get_jobs_by_ids(saved)
    # keep bookmark order, drop jobs deleted since
    jobs = [found[j] for j in saved if j in found]
    return await attach_employers(jobs)


async def employer_stats(principal: Principal) -> Dict[str, int]:
    require_role(principal, [Role.EMPLOYER])
    jobs = await jobs_repo.find_jobs({"employer": principal.user_id},
                                     projection={"status": 1, "views_count": 1})
    job_ids = [j["id"] for j in jobs]
    by_job = {"job": {"$in": job_ids}}
    return {
        "total_jobs": len(jobs),
        "active_jobs": sum(1 for j in jobs if j.get("status") == JobStatus.ACTIVE.value),
        "total_views": sum(j.get("views_count", 0) for j in jobs),
        "total_applicants": await applications_repo.count_applications(by_job),
        "shortlisted": await applications_repo.count_applications(
            {**by_job, "status": ApplicationStatus.SHORTLISTED.value}),
        "hired": await applications_repo.count_applications(
            {**by_job, "status": ApplicationStatus.HIRED.value}),
    }
