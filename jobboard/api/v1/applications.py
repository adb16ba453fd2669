# jobboard/api/v1/applications.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from jobboard.api.v1.deps import get_current_principal
from jobboard.models.job import StatusUpdate
from jobboard.services import applications as application_service
from jobboard.services.policy import Principal

router = APIRouter(prefix="/applications", tags=["applications"])


@router.get("/my")
async def my_applications(principal: Principal = Depends(get_current_principal)):
    apps = await application_service.list_mine(principal)
    return {"success": True, "count": len(apps), "data": apps}


@router.get("/check/{job_id}")
async def check_application(job_id: str, principal: Principal = Depends(get_current_principal)):
    result = await application_service.check_status(principal, job_id)
    return {"success": True, **result}


@router.get("")
async def employer_applications(
    job_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    principal: Principal = Depends(get_current_principal),
):
    apps = await application_service.list_for_employer(principal, job_id=job_id, status=status)
    return {"success": True, "count": len(apps), "data": apps}


@router.get("/job/{job_id}")
async def job_applications(job_id: str, principal: Principal = Depends(get_current_principal)):
    apps = await application_service.list_for_job(principal, job_id)
    return {"success": True, "count": len(apps), "data": apps}


@router.post("/{job_id}", status_code=201)
async def apply(
    job_id: str,
    first_name: Optional[str] = Form(None),
    last_name: Optional[str] = Form(None),
    cnic: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    country: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    experience: Optional[str] = Form(None),
    expected_salary: Optional[str] = Form(None),
    cv: Optional[UploadFile] = File(None),
    principal: Principal = Depends(get_current_principal),
):
    form = {
        "first_name": first_name, "last_name": last_name, "cnic": cnic, "city": city,
        "country": country, "address": address, "experience": experience, "expected_salary": expected_salary,
    }
    profile = {k: v for k, v in form.items() if v is not None}
    application = await application_service.submit(principal, job_id, profile, cv)
    return {"success": True, "message": "Application submitted successfully", "data": application}


@router.patch("/{application_id}/status")
async def update_status(application_id: str, payload: StatusUpdate, principal: Principal = Depends(get_current_principal)):
    application = await application_service.update_status(principal, application_id, payload.status)
    return {"success": True, "message": "Application status updated successfully", "data": application}
