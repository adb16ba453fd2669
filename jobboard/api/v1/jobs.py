# jobboard/api/v1/jobs.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from jobboard.api.v1.deps import get_current_principal, get_optional_principal, get_page
from jobboard.models.common import Page
from jobboard.models.job import JobFilters, StatusUpdate
from jobboard.services import jobs as job_service
from jobboard.services.policy import Principal

router = APIRouter(prefix="/jobs", tags=["jobs"])


def get_filters(
    category: Optional[str] = Query(None),
    job_type: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    experience_level: Optional[str] = Query(None),
    gender: Optional[str] = Query(None),
    salary: Optional[str] = Query(None),
    age: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
) -> JobFilters:
    return JobFilters(
        category=category, job_type=job_type, location=location, experience_level=experience_level,
        gender=gender, salary=salary, age=age, status=status,
    )


@router.get("")
async def list_jobs(
    filters: JobFilters = Depends(get_filters),
    page: Page = Depends(get_page),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    result = await job_service.list_jobs(filters, page, principal)
    return {"success": True, "count": len(result["items"]), "data": result["items"], "pagination": result["pagination"]}


@router.post("", status_code=201)
async def create_job(payload: Dict[str, Any] = Body(...), principal: Principal = Depends(get_current_principal)):
    job = await job_service.create_job(principal, payload)
    return {"success": True, "message": "Job created successfully", "data": job}


# fixed paths first so they are not captured by /{job_id}

@router.get("/saved")
async def saved_jobs(principal: Principal = Depends(get_current_principal)):
    jobs = await job_service.list_saved_jobs(principal)
    return {"success": True, "count": len(jobs), "data": jobs}


@router.get("/my/jobs")
async def my_jobs(
    status: Optional[str] = Query(None),
    page: Page = Depends(get_page),
    principal: Principal = Depends(get_current_principal),
):
    result = await job_service.list_my_jobs(principal, page, status=status)
    return {"success": True, "data": result["items"], "pagination": result["pagination"]}


@router.get("/my/stats")
async def my_stats(principal: Principal = Depends(get_current_principal)):
    return {"success": True, "data": await job_service.employer_stats(principal)}


@router.get("/{job_id}")
async def get_job(job_id: str):
    return {"success": True, "data": await job_service.get_job(job_id)}


@router.put("/{job_id}")
async def update_job(job_id: str, payload: Dict[str, Any] = Body(...), principal: Principal = Depends(get_current_principal)):
    job = await job_service.update_job(principal, job_id, payload)
    return {"success": True, "message": "Job updated successfully", "data": job}


@router.patch("/{job_id}/status")
async def update_job_status(job_id: str, payload: StatusUpdate, principal: Principal = Depends(get_current_principal)):
    job = await job_service.update_job_status(principal, job_id, payload.status)
    return {"success": True, "message": "Job status updated successfully", "data": job}


@router.delete("/{job_id}")
async def delete_job(job_id: str, principal: Principal = Depends(get_current_principal)):
    await job_service.delete_job(principal, job_id)
    return {"success": True, "message": "Job deleted successfully"}


@router.post("/{job_id}/save")
async def save_job(job_id: str, principal: Principal = Depends(get_current_principal)):
    saved = await job_service.save_job(principal, job_id)
    return {"success": True, "message": "Job saved", "saved_jobs": saved}


@router.delete("/{job_id}/save")
async def unsave_job(job_id: str, principal: Principal = Depends(get_current_principal)):
    saved = await job_service.unsave_job(principal, job_id)
    return {"success": True, "message": "Job removed from saved jobs", "saved_jobs": saved}
