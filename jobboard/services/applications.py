# jobboard/services/applications.py
import logging
from typing import Any, Dict, List, Optional

from fastapi import UploadFile
from pymongo.errors import DuplicateKeyError

from jobboard.core.errors import ConflictError, NotFoundError, ValidationError
from jobboard.core.validation import parse_model
from jobboard.models.application import APPLICATION_STATUSES, ApplicationCreate, ApplicationStatus
from jobboard.models.user import Role
from jobboard.repositories import applications as repo
from jobboard.repositories import jobs as jobs_repo
from jobboard.repositories import users as users_repo
from jobboard.services import notifications, storage
from jobboard.services.policy import Principal, authorize_resource, require_ownership, require_role

logger = logging.getLogger(__name__)

# job fields embedded into an applicant's own application list
JOB_SUMMARY = {"position": 1, "category": 1, "location": 1, "job_type": 1, "salary": 1, "status": 1, "employer": 1}

ALREADY_APPLIED = "You have already applied for this job"


def _check_status(status: Optional[str]) -> str:
    if status not in APPLICATION_STATUSES:
        raise ValidationError.for_field("status", "Invalid status")
    return status


async def _attach_applicants(apps: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    applicants = await users_repo.get_users_by_ids([a["applicant"] for a in apps],
                                                    projection=users_repo.PUBLIC_PROFILE)
    for app in apps:
        app["applicant"] = applicants.get(app["applicant"])
    return apps


async def submit(principal: Principal, job_id: str, profile: Dict[str, Any],
                 cv: Optional[UploadFile]) -> Dict[str, Any]:
    """
    Apply to ``job_id``. Checks run in order: job exists (404), not applied
    before (409), profile and CV present (400 listing every bad field).
    """
    job = await authorize_resource(jobs_repo.get_job, job_id, principal,
                                   allowed_roles=[Role.USER], label="Job")
    if await repo.find_for_pair(job["id"], principal.user_id):
        raise ConflictError(ALREADY_APPLIED)

    errors: List[Dict[str, str]] = []
    data = None
    try:
        data = parse_model(ApplicationCreate, profile)
    except ValidationError as exc:
        errors.extend(exc.errors)
    if cv is None or not cv.filename:
        errors.append({"field": "cv", "message": "Please upload your CV"})
    if errors:
        raise ValidationError(errors=errors)

    cv_url = await storage.store_cv(cv)
    doc = data.model_dump()
    doc.update({
        "job": job["id"],
        "applicant": principal.user_id,
        "cv_url": cv_url,
        "status": ApplicationStatus.PENDING.value,
    })
    try:
        application = await repo.create_application(doc)
    except DuplicateKeyError:
        # a concurrent submission won the unique (job, applicant) index
        logger.warning("duplicate application by %s for job %s; orphaned upload %s",
                       principal.user_id, job["id"], cv_url)
        raise ConflictError(ALREADY_APPLIED) from None
    await jobs_repo.increment_applications(job["id"])
    logger.info("user %s applied to job %s", principal.user_id, job["id"])
    return application


async def list_mine(principal: Principal) -> List[Dict[str, Any]]:
    require_role(principal, [Role.USER])
    apps = await repo.find_applications({"applicant": principal.user_id})
    jobs = await jobs_repo.get_jobs_by_ids([a["job"] for a in apps], projection=JOB_SUMMARY)
    employers = await users_repo.get_users_by_ids([j.get("employer") for j in jobs.values() if j.get("employer")],
                                                   projection=users_repo.PUBLIC_PROFILE)
    for job in jobs.values():
        job["employer"] = employers.get(job.get("employer"))
    for app in apps:
        app["job"] = jobs.get(app["job"])
    return apps


async def list_for_employer(principal: Principal, job_id: Optional[str] = None,
                            status: Optional[str] = None) -> List[Dict[str, Any]]:
    require_role(principal, [Role.EMPLOYER])
    job_ids = await jobs_repo.job_ids_for_employer(principal.user_id)
    if job_id:
        # never widen the scope past the employer's own jobs
        job_ids = [j for j in job_ids if j == job_id]
    query: Dict[str, Any] = {"job": {"$in": job_ids}}
    if status:
        query["status"] = _check_status(status)
    apps = await repo.find_applications(query)
    jobs = await jobs_repo.get_jobs_by_ids(job_ids, projection={"position": 1, "category": 1})
    for app in apps:
        app["job"] = jobs.get(app["job"])
    return await _attach_applicants(apps)


async def list_for_job(principal: Principal, job_id: str) -> List[Dict[str, Any]]:
    await authorize_resource(jobs_repo.get_job, job_id, principal, owner_field="employer", label="Job")
    apps = await repo.find_applications({"job": job_id})
    return await _attach_applicants(apps)


async def update_status(principal: Principal, application_id: str, status: Optional[str]) -> Dict[str, Any]:
    status = _check_status(status)
    application = await repo.get_application(application_id)
    if application is None:
        raise NotFoundError("Application not found")
    job = await jobs_repo.get_job(application["job"])
    require_ownership(job or {}, principal, "employer")

    if application.get("status") == status:
        return application
    updated = await repo.set_status(application_id, status)
    logger.info("application %s status %s -> %s", application_id, application.get("status"), status)
    await notifications.emit_status_change(updated, job, status)
    return updated


async def check_status(principal: Principal, job_id: str) -> Dict[str, Any]:
    require_role(principal, [Role.USER])
    application = await repo.find_for_pair(job_id, principal.user_id)
    return {"has_applied": application is not None, "application": application}
