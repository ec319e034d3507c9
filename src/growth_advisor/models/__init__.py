"""
Core data models for the growth advisor.

This package contains:
- Student record models served by the repository ports
- The StudentSummary fed to report generation
- The GrowthReport output schema
- Widget configuration and notification event models
"""

from .records import (
    AttendanceStatus,
    StudentProfile,
    DailyAttendance,
    Assignment,
    AssignmentSubmission,
    SubjectGrade,
    ReportCard,
)
from .summary import (
    StudentSummary,
    AttendanceEntry,
    AssignmentEntry,
    TermEntry,
    SubjectResult,
)
from .report import (
    GrowthReport,
    SubjectInsight,
    Suggestion,
    Resource,
    ActionableStep,
    CareerPathway,
    ElectiveSuggestion,
    StudyDay,
    StudyTask,
    PerformanceOutlook,
    SubjectCorrelation,
    RevisionScheduleOutline,
    MotivationalQuote,
)
from .widgets import WidgetConfig, WidgetId, MoveDirection, default_widget_map, default_widgets
from .notifications import NotificationEvent, NotificationKind, NotificationCategory

__all__ = [
    # Records
    "AttendanceStatus",
    "StudentProfile",
    "DailyAttendance",
    "Assignment",
    "AssignmentSubmission",
    "SubjectGrade",
    "ReportCard",

    # Summary
    "StudentSummary",
    "AttendanceEntry",
    "AssignmentEntry",
    "TermEntry",
    "SubjectResult",

    # Report schema
    "GrowthReport",
    "SubjectInsight",
    "Suggestion",
    "Resource",
    "ActionableStep",
    "CareerPathway",
    "ElectiveSuggestion",
    "StudyDay",
    "StudyTask",
    "PerformanceOutlook",
    "SubjectCorrelation",
    "RevisionScheduleOutline",
    "MotivationalQuote",

    # Widgets
    "WidgetConfig",
    "WidgetId",
    "MoveDirection",
    "default_widget_map",
    "default_widgets",

    # Notifications
    "NotificationEvent",
    "NotificationKind",
    "NotificationCategory",
]
