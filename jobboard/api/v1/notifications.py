# jobboard/api/v1/notifications.py
from fastapi import APIRouter, Depends

from jobboard.api.v1.deps import get_current_principal
from jobboard.services import notifications as notification_service
from jobboard.services.policy import Principal

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(principal: Principal = Depends(get_current_principal)):
    items = await notification_service.list_notifications(principal)
    return {"success": True, "data": items}


@router.get("/unread-count")
async def unread_count(principal: Principal = Depends(get_current_principal)):
    return {"success": True, "count": await notification_service.unread_count(principal)}


@router.patch("/read-all")
async def mark_all_read(principal: Principal = Depends(get_current_principal)):
    await notification_service.mark_all_read(principal)
    return {"success": True, "message": "All notifications marked as read"}


@router.patch("/{notification_id}/read")
async def mark_read(notification_id: str, principal: Principal = Depends(get_current_principal)):
    await notification_service.mark_read(principal, notification_id)
    return {"success": True, "message": "Notification marked as read"}


@router.delete("/{notification_id}")
async def delete_notification(notification_id: str, principal: Principal = Depends(get_current_principal)):
    await notification_service.delete_notification(principal, notification_id)
    return {"success": True, "message": "Notification deleted"}
