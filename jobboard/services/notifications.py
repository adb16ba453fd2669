# jobboard/services/notifications.py
import logging
from typing import Any, Dict, Optional, Tuple

from jobboard.models.application import ApplicationStatus
from jobboard.models.notification import MAX_LISTED_NOTIFICATIONS, NotificationType
from jobboard.repositories import notifications as repo
from jobboard.services.policy import Principal, authorize_resource

logger = logging.getLogger(__name__)

# new application status -> (title, message template)
STATUS_MESSAGES = {
    ApplicationStatus.REVIEWED.value: (
        "Application Reviewed",
        "Your application for {position} has been reviewed by the employer.",
    ),
    ApplicationStatus.SHORTLISTED.value: (
        "Application Shortlisted",
        "Congratulations! You have been shortlisted for {position}.",
    ),
    ApplicationStatus.REJECTED.value: (
        "Application Rejected",
        "Thank you for applying to {position}. Unfortunately, the employer has decided not to move forward.",
    ),
    ApplicationStatus.HIRED.value: (
        "Application Hired",
        "Congratulations! You have been hired for {position}.",
    ),
}
GENERIC_MESSAGE = ("Application Status Updated", "The status of your application for {position} is now {status}.")


def status_message(status: str, position: str) -> Tuple[str, str]:
    title, template = STATUS_MESSAGES.get(status, GENERIC_MESSAGE)
    return title, template.format(position=position or "the job", status=status)


async def emit(user_id: str, title: str, message: str, type_: str = NotificationType.GENERAL.value,
               data: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """
    Best-effort notification write. Never raises: a failed insert is logged
    and the caller's operation carries on.
    """
    try:
        return await repo.create_notification(user_id, title, message, type_, data)
    except Exception:
        logger.exception("could not create notification for user %s (%s)", user_id, title)
        return None


async def emit_status_change(application: Dict[str, Any], job: Dict[str, Any], new_status: str) -> Optional[str]:
    title, message = status_message(new_status, job.get("position"))
    return await emit(
        application["applicant"],
        title,
        message,
        NotificationType.STATUS.value,
        {"application_id": application["id"], "job_id": job["id"], "status": new_status},
    )


async def list_notifications(principal: Principal):
    return await repo.list_for_user(principal.user_id, limit=MAX_LISTED_NOTIFICATIONS)


async def mark_read(principal: Principal, notification_id: str) -> None:
    await authorize_resource(repo.get_notification, notification_id, principal,
                             owner_field="user", label="Notification")
    await repo.mark_read(notification_id)


async def mark_all_read(principal: Principal) -> int:
    return await repo.mark_all_read(principal.user_id)


async def unread_count(principal: Principal) -> int:
    return await repo.count_unread(principal.user_id)


async def delete_notification(principal: Principal, notification_id: str) -> None:
    await authorize_resource(repo.get_notification, notification_id, principal,
                             owner_field="user", label="Notification")
    await repo.delete_notification(notification_id)
