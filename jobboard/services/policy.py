# jobboard/services/policy.py
"""
Authorization guards shared by every mutating operation.

The order is always: resolve the resource (404 when absent), then check
role/ownership (403). ``authorize_resource`` bundles both steps so services
do not re-derive them per endpoint.
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

from jobboard.core.errors import ForbiddenError, NotFoundError
from jobboard.models.user import Role


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def _role_value(role: Any) -> str:
    return role.value if isinstance(role, Role) else str(role)


def require_role(principal: Principal, allowed: Iterable[Any]) -> None:
    allowed_values = {_role_value(r) for r in allowed}
    if principal.role not in allowed_values:
        raise ForbiddenError(f"User role {principal.role} is not authorized to access this route")


def require_ownership(resource: Dict[str, Any], principal: Principal, owner_field: str,
                      admin_bypass: bool = False) -> None:
    if admin_bypass and principal.is_admin:
        return
    if resource.get(owner_field) != principal.user_id:
        raise ForbiddenError()


async def authorize_resource(
    fetch: Callable[[str], Awaitable[Optional[Dict[str, Any]]]],
    resource_id: str,
    principal: Principal,
    owner_field: Optional[str] = None,
    allowed_roles: Optional[Iterable[Any]] = None,
    admin_bypass: bool = False,
    label: str = "Resource",
) -> Dict[str, Any]:
    """Fetch ``resource_id`` and apply role then ownership checks; returns the document."""
    doc = await fetch(resource_id)
    if doc is None:
        raise NotFoundError(f"{label} not found")
    if allowed_roles is not None:
        require_role(principal, allowed_roles)
    if owner_field is not None:
        require_ownership(doc, principal, owner_field, admin_bypass=admin_bypass)
    return doc
