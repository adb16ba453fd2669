# jobboard/models/notification.py
from enum import Enum

MAX_LISTED_NOTIFICATIONS = 50


class NotificationType(str, Enum):
    APPLICATION = "application"
    JOB = "job"
    STATUS = "status"
    MESSAGE = "message"
    GENERAL = "general"
