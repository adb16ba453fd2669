# jobboard/api/v1/categories.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from jobboard.api.v1.deps import get_current_principal, get_page
from jobboard.models.common import MAX_PAGE_SIZE, Page
from jobboard.services import categories as category_service
from jobboard.services.policy import Principal

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
async def list_categories(
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(category_service.DEFAULT_CATEGORY_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1, le=MAX_PAGE_SIZE),
):
    result = await category_service.list_categories(is_active, Page(page=page, limit=page_size or limit))
    return {"success": True, "data": result["items"], "pagination": result["pagination"]}


@router.get("/active")
async def active_categories():
    items = await category_service.list_active()
    return {"success": True, "count": len(items), "data": items}


@router.get("/{category_id}")
async def get_category(category_id: str):
    return {"success": True, "data": await category_service.get_category(category_id)}


@router.get("/{category_id}/jobs")
async def category_jobs(category_id: str, page: Page = Depends(get_page)):
    result = await category_service.jobs_in_category(category_id, page)
    return {"success": True, **result}


@router.post("", status_code=201)
async def create_category(payload: Dict[str, Any] = Body(...), principal: Principal = Depends(get_current_principal)):
    category = await category_service.create_category(principal, payload)
    return {"success": True, "message": "Category created successfully", "data": category}


@router.put("/{category_id}")
async def update_category(category_id: str, payload: Dict[str, Any] = Body(...),
                          principal: Principal = Depends(get_current_principal)):
    category = await category_service.update_category(principal, category_id, payload)
    return {"success": True, "message": "Category updated successfully", "data": category}


@router.patch("/{category_id}/toggle")
async def toggle_category(category_id: str, principal: Principal = Depends(get_current_principal)):
    category = await category_service.toggle_category(principal, category_id)
    state = "activated" if category["is_active"] else "deactivated"
    return {"success": True, "message": f"Category {state} successfully", "data": category}


@router.delete("/{category_id}")
async def delete_category(category_id: str, principal: Principal = Depends(get_current_principal)):
    await category_service.delete_category(principal, category_id)
    return {"success": True, "message": "Category deleted successfully"}
