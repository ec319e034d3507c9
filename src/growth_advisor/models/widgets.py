"""Report-section widget configuration and the default widget map."""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field


class WidgetId(str, Enum):
    """Stable keys of the report sections."""
    GROWTH_SNAPSHOT = "growthSnapshot"
    ATTENDANCE_SUMMARY = "attendanceSummary"
    ASSIGNMENT_SUMMARY = "assignmentSummary"
    STRENGTHS_FOCUS = "strengthsFocus"
    SUBJECT_INSIGHTS = "subjectInsights"
    ACTION_PLAN = "actionPlan"
    STUDY_PLAN = "studyPlan"
    ELECTIVE_SUGGESTIONS = "electiveSuggestions"
    PERFORMANCE_OUTLOOK = "performanceOutlook"
    SUBJECT_CORRELATIONS = "subjectCorrelations"
    CAREER_PATHWAYS = "careerPathways"
    MOTIVATIONAL_GOAL = "motivationalGoal"
    GAMIFIED_SCOREBOARD = "gamifiedScoreboard"


class MoveDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class WidgetConfig(BaseModel):
    """Visibility and position of one report section."""
    id: str
    display_name: str
    is_visible: bool = True
    order: int = Field(ge=1)
    icon_ref: str = ""


# (id, display name, visible, icon), listed in default order
_DEFAULT_WIDGETS = [
    (WidgetId.GROWTH_SNAPSHOT, "Growth Snapshot", True, "TrendingUp"),
    (WidgetId.ATTENDANCE_SUMMARY, "Attendance Overview", True, "CalendarDays"),
    (WidgetId.ASSIGNMENT_SUMMARY, "Assignment Summary", True, "Assignments"),
    (WidgetId.STRENGTHS_FOCUS, "Strengths & Focus Areas", True, "Target"),
    (WidgetId.SUBJECT_INSIGHTS, "Subject Insights", True, "BrainCircuit"),
    (WidgetId.ACTION_PLAN, "Action Plan", True, "CheckCircle"),
    (WidgetId.STUDY_PLAN, "Weekly Study Plan", True, "Timetable"),
    (WidgetId.ELECTIVE_SUGGESTIONS, "Elective Suggestions", True, "Lightbulb"),
    (WidgetId.PERFORMANCE_OUTLOOK, "Performance Outlook", True, "TrendingUp"),
    (WidgetId.SUBJECT_CORRELATIONS, "Subject Synergies", True, "BrainCircuit"),
    (WidgetId.CAREER_PATHWAYS, "Career Pathways", True, "Reports"),
    (WidgetId.MOTIVATIONAL_GOAL, "Motivation & Goals", True, "Speech"),
    (WidgetId.GAMIFIED_SCOREBOARD, "Gamified Scoreboard", False, "Grades"),
]


def default_widget_map() -> Dict[str, WidgetConfig]:
    """Return a fresh copy of the hard-coded default widget map, keyed by id."""
    return {
        widget_id.value: WidgetConfig(
            id=widget_id.value,
            display_name=name,
            is_visible=visible,
            order=position,
            icon_ref=icon,
        )
        for position, (widget_id, name, visible, icon) in enumerate(_DEFAULT_WIDGETS, start=1)
    }


def default_widgets() -> List[WidgetConfig]:
    """Default widgets in ascending order."""
    return sorted(default_widget_map().values(), key=lambda w: w.order)
