# jobboard/api/v1/users.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from jobboard.api.v1.deps import get_current_principal, get_identity_service, get_page
from jobboard.models.common import Page
from jobboard.services.identity import IdentityService
from jobboard.services.policy import Principal

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{role}")
async def users_by_role(
    role: str,
    search: Optional[str] = Query(None),
    page: Page = Depends(get_page),
    principal: Principal = Depends(get_current_principal),
    identity: IdentityService = Depends(get_identity_service),
):
    result = await identity.list_by_role(principal, role, search=search, page=page)
    return {"success": True, "data": result["items"], "pagination": result["pagination"]}
