# jobboard/api/v1/deps.py
from typing import Any, Dict, Optional

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from jobboard.core.config import settings
from jobboard.core.errors import AuthError
from jobboard.core.security import SecurityConfig
from jobboard.models.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, Page
from jobboard.services.identity import IdentityService
from jobboard.services.policy import Principal

# auto_error=False: missing credentials are reported through our own AuthError
security = HTTPBearer(auto_error=False)

_identity_service: Optional[IdentityService] = None


def get_identity_service() -> IdentityService:
    global _identity_service
    if _identity_service is None:
        _identity_service = IdentityService(SecurityConfig.from_settings(settings))
    return _identity_service


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    identity: IdentityService = Depends(get_identity_service),
) -> Dict[str, Any]:
    if credentials is None or not credentials.credentials:
        raise AuthError()
    return await identity.authenticate(credentials.credentials)


async def get_current_principal(user: Dict[str, Any] = Depends(get_current_user)) -> Principal:
    return Principal(user_id=user["id"], role=user["role"])


async def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    identity: IdentityService = Depends(get_identity_service),
) -> Optional[Principal]:
    """Public routes: a missing or bad token just means an anonymous caller."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        user = await identity.authenticate(credentials.credentials)
    except AuthError:
        return None
    return Principal(user_id=user["id"], role=user["role"])


def get_page(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1, le=MAX_PAGE_SIZE),
) -> Page:
    # pageSize wins when both are given
    return Page(page=page, limit=page_size or limit)
