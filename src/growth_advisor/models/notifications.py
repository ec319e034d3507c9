"""Events emitted to the external notification sink."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class NotificationKind(str, Enum):
    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"
    AI = "ai"


class NotificationCategory(str, Enum):
    ASSIGNMENTS = "Assignments"
    EXAMS = "Exams"
    AI_TIPS = "AITips"
    ANNOUNCEMENTS = "Announcements"
    GENERAL = "General"


class NotificationEvent(BaseModel):
    """A fire-and-forget notification; there is no acknowledgement path."""
    title: str
    message: str
    kind: NotificationKind = NotificationKind.INFO
    category: NotificationCategory = NotificationCategory.GENERAL
    link_ref: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
