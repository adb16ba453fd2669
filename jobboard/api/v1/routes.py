# jobboard/api/v1/routes.py
from fastapi import APIRouter

from jobboard.api.v1.applications import router as applications_router
from jobboard.api.v1.auth import router as auth_router
from jobboard.api.v1.categories import router as categories_router
from jobboard.api.v1.jobs import router as jobs_router
from jobboard.api.v1.notifications import router as notifications_router
from jobboard.api.v1.users import router as users_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(users_router)
router.include_router(jobs_router)
router.include_router(applications_router)
router.include_router(categories_router)
router.include_router(notifications_router)
