# jobboard/services/categories.py
import logging
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from jobboard.core.errors import ConflictError, NotFoundError, ValidationError
from jobboard.core.validation import parse_model
from jobboard.models.category import CategoryCreate, CategoryUpdate
from jobboard.models.common import Page, page_meta
from jobboard.models.job import JobStatus
from jobboard.models.user import Role
from jobboard.repositories import categories as repo
from jobboard.repositories import jobs as jobs_repo
from jobboard.services.jobs import attach_employers
from jobboard.services.policy import Principal, authorize_resource, require_role

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_PAGE_SIZE = 20
ALREADY_EXISTS = "Category already exists"


async def _get_or_404(category_id: str) -> Dict[str, Any]:
    category = await repo.get_category(category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


async def create_category(principal: Principal, fields: Dict[str, Any]) -> Dict[str, Any]:
    require_role(principal, [Role.ADMIN])
    data = parse_model(CategoryCreate, fields)
    if await repo.get_category_by_name(data.name):
        raise ConflictError(ALREADY_EXISTS)
    try:
        category = await repo.create_category({**data.model_dump(), "created_by": principal.user_id})
    except DuplicateKeyError:
        raise ConflictError(ALREADY_EXISTS) from None
    logger.info("category %r created by %s", category["name"], principal.user_id)
    return category


async def list_categories(is_active: Optional[bool] = None, page: Optional[Page] = None) -> Dict[str, Any]:
    page = page or Page(limit=DEFAULT_CATEGORY_PAGE_SIZE)
    query: Dict[str, Any] = {}
    if is_active is not None:
        query["is_active"] = is_active
    total = await repo.count_categories(query)
    items = await repo.list_categories(query, skip=page.skip, limit=page.limit)
    return {"items": items, "pagination": page_meta(page, total)}


async def list_active() -> List[Dict[str, Any]]:
    return await repo.list_categories({"is_active": True})


async def get_category(category_id: str) -> Dict[str, Any]:
    return await _get_or_404(category_id)


async def update_category(principal: Principal, category_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    category = await authorize_resource(repo.get_category, category_id, principal,
                                        allowed_roles=[Role.ADMIN], label="Category")
    changes = parse_model(CategoryUpdate, fields).model_dump(exclude_none=True)
    # uniqueness only matters when the name actually changes
    if "name" in changes and changes["name"] != category["name"]:
        if await repo.get_category_by_name(changes["name"]):
            raise ConflictError("Category name already exists")
    if not changes:
        return category
    try:
        return await repo.update_category(category_id, changes)
    except DuplicateKeyError:
        raise ConflictError("Category name already exists") from None


async def toggle_category(principal: Principal, category_id: str) -> Dict[str, Any]:
    category = await authorize_resource(repo.get_category, category_id, principal,
                                        allowed_roles=[Role.ADMIN], label="Category")
    return await repo.update_category(category_id, {"is_active": not category.get("is_active", True)})


async def delete_category(principal: Principal, category_id: str) -> None:
    category = await authorize_resource(repo.get_category, category_id, principal,
                                        allowed_roles=[Role.ADMIN], label="Category")
    # jobs keep a copy of the category name, not a reference
    job_count = await jobs_repo.count_jobs({"category": category["name"]})
    if job_count > 0:
        raise ValidationError(f"Cannot delete category. It has {job_count} job(s) associated with it.")
    await repo.delete_category(category_id)
    logger.info("category %r deleted by %s", category["name"], principal.user_id)


async def jobs_in_category(category_id: str, page: Page) -> Dict[str, Any]:
    category = await _get_or_404(category_id)
    query = {"category": category["name"], "status": JobStatus.ACTIVE.value}
    total = await jobs_repo.count_jobs(query)
    jobs = await jobs_repo.find_jobs(query, skip=page.skip, limit=page.limit)
    return {
        "category": {"id": category["id"], "name": category["name"], "description": category.get("description", "")},
        "items": await attach_employers(jobs),
        "pagination": page_meta(page, total),
    }
