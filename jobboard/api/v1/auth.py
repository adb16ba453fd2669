# jobboard/api/v1/auth.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from jobboard.api.v1.deps import get_current_principal, get_current_user, get_identity_service
from jobboard.models.user import (
    ApprovalRequest,
    ForgotPassword,
    LoginRequest,
    RegisterForm,
    ResetPassword,
    UpdateDetails,
    UpdatePassword,
)
from jobboard.services.identity import IdentityService
from jobboard.services.policy import Principal

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
async def register(
    first_name: Optional[str] = Form(None),
    last_name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    role: Optional[str] = Form(None),
    mobile_no: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    cv: Optional[UploadFile] = File(None),
    identity: IdentityService = Depends(get_identity_service),
):
    form = {
        "first_name": first_name, "last_name": last_name, "email": email, "password": password,
        "role": role, "mobile_no": mobile_no, "address": address, "city": city,
    }
    # let the model report every missing field
    profile = {k: v for k, v in form.items() if v is not None}
    session = await identity.register(profile, cv, model=RegisterForm)
    return {"success": True, **session}


@router.post("/login")
async def login(payload: LoginRequest, identity: IdentityService = Depends(get_identity_service)):
    session = await identity.login(payload.email, payload.password)
    return {"success": True, **session}


@router.get("/me")
async def me(user: Dict[str, Any] = Depends(get_current_user)):
    return {"success": True, "data": user}


@router.get("/logout")
async def logout():
    # bearer tokens are stateless; clients just drop theirs
    return {"success": True, "message": "Logged out"}


@router.put("/updatedetails")
async def update_details(
    payload: UpdateDetails,
    principal: Principal = Depends(get_current_principal),
    identity: IdentityService = Depends(get_identity_service),
):
    user = await identity.update_details(principal.user_id, payload.model_dump(exclude_unset=True))
    return {"success": True, "data": user}


@router.put("/updatepassword")
async def update_password(
    payload: UpdatePassword,
    principal: Principal = Depends(get_current_principal),
    identity: IdentityService = Depends(get_identity_service),
):
    session = await identity.update_password(principal.user_id, payload.current_password, payload.new_password)
    return {"success": True, **session}


@router.put("/updatephoto")
async def update_photo(
    photo: Optional[UploadFile] = File(None),
    principal: Principal = Depends(get_current_principal),
    identity: IdentityService = Depends(get_identity_service),
):
    user = await identity.update_photo(principal.user_id, photo)
    return {"success": True, "data": user}


@router.post("/forgetpassword")
async def forget_password(
    payload: ForgotPassword,
    request: Request,
    identity: IdentityService = Depends(get_identity_service),
):
    # sibling route: .../auth/forgetpassword -> .../auth/resetpassword/<token>
    reset_url_base = str(request.url.replace(query="")).rsplit("/", 1)[0] + "/resetpassword"
    await identity.request_password_reset(payload.email, reset_url_base)
    return {"success": True, "message": "Email sent"}


@router.put("/resetpassword/{token}")
async def reset_password(token: str, payload: ResetPassword, identity: IdentityService = Depends(get_identity_service)):
    session = await identity.reset_password(token, payload.password)
    return {"success": True, **session}


@router.get("/pending-applications")
async def pending_applications(
    principal: Principal = Depends(get_current_principal),
    identity: IdentityService = Depends(get_identity_service),
):
    users = await identity.list_pending(principal)
    return {"success": True, "count": len(users), "data": users}


@router.patch("/approve/{user_id}")
async def approve_user(
    user_id: str,
    payload: ApprovalRequest,
    principal: Principal = Depends(get_current_principal),
    identity: IdentityService = Depends(get_identity_service),
):
    user = await identity.approve(principal, user_id, payload.is_approved)
    verb = "approved" if payload.is_approved else "rejected"
    return {"success": True, "message": f"User application {verb} successfully", "data": user}
