"""
Report lifecycle for one student's advisor session.

    IDLE -> GENERATING -> READY | FAILED(kind)

GENERATING may be entered from any other state and always clears the previous
report, error and action plan first, so a failure never leaves stale content
next to the new error. Only one generation is in flight per session; asking
for another while GENERATING raises GenerationInProgressError.

Each generation carries its own CancellationToken. close() cancels it, and a
result arriving for a cancelled token is discarded without touching state.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from ..errors import (
    AdvisorError,
    FailureKind,
    GenerationCancelledError,
    GenerationInProgressError,
)
from ..models import (
    GrowthReport,
    NotificationCategory,
    NotificationEvent,
    NotificationKind,
    StudentSummary,
    WidgetId,
)
from .action_plan import ActionableStepState, ActionPlanTracker
from .aggregator import DataAggregator
from .goals import GoalStore
from .notifications import NotificationSink
from .overrides import OverrideField, OverrideStore, OverrideValue
from .report_generator import CancellationToken, ReportGenerator
from .widgets import WidgetLayoutStore


logger = logging.getLogger(__name__)


ADVISOR_LINK = "/student/growth-advisor"

PLACEHOLDER_TEXT = "No growth advice available at the moment."

FAILURE_MESSAGES: Dict[FailureKind, str] = {
    FailureKind.NOT_FOUND: "Student profile not found.",
    FailureKind.CONFIGURATION: "AI Advisor service is not configured. Please contact support.",
    FailureKind.SCHEMA: (
        "Received an invalid format from the AI Advisor. Please try refreshing. "
        "If the issue persists, contact support."
    ),
    FailureKind.QUOTA: (
        "The AI Advisor is receiving too many requests right now. Please try again in a few minutes."
    ),
    FailureKind.SERVICE: "An error occurred while generating your growth advice. Please try again later.",
}


class SessionState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class ReportSection:
    """One visible widget with its resolved content, ready for an external renderer."""
    widget_id: str
    display_name: str
    icon_ref: str
    order: int
    content: Any


class AdvisorSession:
    """Orchestrates aggregation, generation, layout and overrides for one student."""

    def __init__(
        self,
        student_id: str,
        aggregator: DataAggregator,
        generator: ReportGenerator,
        layout: WidgetLayoutStore,
        overrides: OverrideStore,
        goals: Optional[GoalStore] = None,
        notifications: Optional[NotificationSink] = None,
        action_plan: Optional[ActionPlanTracker] = None
    ):
        self.student_id = student_id
        self.aggregator = aggregator
        self.generator = generator
        self.layout = layout
        self.overrides = overrides
        self.goals = goals
        self.notifications = notifications
        self.action_plan = action_plan or ActionPlanTracker()

        self.state = SessionState.IDLE
        self.report: Optional[GrowthReport] = None
        self.summary: Optional[StudentSummary] = None
        self.error: Optional[Exception] = None
        self.failure_kind: Optional[FailureKind] = None
        self._cancel_token: Optional[CancellationToken] = None

        self._resolvers: Dict[str, Callable[[], Any]] = {
            WidgetId.GROWTH_SNAPSHOT.value: lambda: self.display_value(OverrideField.GROWTH_SUMMARY),
            WidgetId.ATTENDANCE_SUMMARY.value: self._attendance_content,
            WidgetId.ASSIGNMENT_SUMMARY.value: self._assignment_content,
            WidgetId.STRENGTHS_FOCUS.value: self._strengths_focus_content,
            WidgetId.SUBJECT_INSIGHTS.value: lambda: self._report_field("subject_insights", []),
            WidgetId.ACTION_PLAN.value: lambda: self.action_plan.steps,
            WidgetId.STUDY_PLAN.value: lambda: self._report_field("weekly_study_plan", []),
            WidgetId.ELECTIVE_SUGGESTIONS.value: lambda: self._report_field("elective_suggestions", []),
            WidgetId.PERFORMANCE_OUTLOOK.value: lambda: self._report_field("performance_outlook", None),
            WidgetId.SUBJECT_CORRELATIONS.value: lambda: self._report_field("subject_correlations", []),
            WidgetId.CAREER_PATHWAYS.value: lambda: self._report_field("career_pathways", []),
            WidgetId.MOTIVATIONAL_GOAL.value: self._motivation_content,
            WidgetId.GAMIFIED_SCOREBOARD.value: self._scoreboard_content,
        }

    @property
    def error_message(self) -> Optional[str]:
        """User-facing message for the current failure, keyed by kind."""
        if self.failure_kind is None:
            return None
        return FAILURE_MESSAGES[self.failure_kind]

    async def start(self) -> SessionState:
        """Load the student's layout and generate a report."""
        if self.state == SessionState.GENERATING:
            raise GenerationInProgressError("A growth report is already being generated")
        if self.layout.student_id != self.student_id:
            self.layout.load(self.student_id)
        return await self._generate()

    async def regenerate(self) -> SessionState:
        """Explicit, user-triggered re-generation."""
        return await self._generate()

    async def _generate(self) -> SessionState:
        if self.state == SessionState.GENERATING:
            raise GenerationInProgressError("A growth report is already being generated")

        token = CancellationToken()
        self._cancel_token = token
        self.state = SessionState.GENERATING
        self.report = None
        self.summary = None
        self.error = None
        self.failure_kind = None
        self.action_plan.clear()
        logger.info(f"Generating growth report for {self.student_id}")

        try:
            self.summary = self.aggregator.compile(self.student_id)
            report = await self.generator.generate(self.summary, token)
        except GenerationCancelledError:
            logger.info(f"Discarded stale generation result for {self.student_id}")
            return self.state
        except asyncio.CancelledError:
            if token is self._cancel_token and self.state == SessionState.GENERATING:
                self.state = SessionState.IDLE
            raise
        except AdvisorError as e:
            if token.cancelled:
                return self.state
            self._fail(e.kind or FailureKind.SERVICE, e)
            return self.state
        except Exception as e:
            logger.exception(f"Unexpected error generating report for {self.student_id}")
            if token.cancelled:
                return self.state
            self._fail(FailureKind.SERVICE, e)
            return self.state

        if token.cancelled:
            return self.state

        self.report = report
        self.action_plan.init_from(report)
        self.state = SessionState.READY
        logger.info(f"Growth report ready for {self.student_id}")
        self._notify_ready(report)
        return self.state

    def close(self):
        """End the session: cancel any in-flight generation and detach the layout."""
        if self._cancel_token is not None:
            self._cancel_token.cancel()
        if self.state == SessionState.GENERATING:
            self.state = SessionState.IDLE
        self.layout.close()

    def toggle_step(self, step_id: str) -> ActionableStepState:
        return self.action_plan.toggle(step_id)

    def display_value(self, field: Union[str, OverrideField]) -> OverrideValue:
        """Override if set, else the generated value if a report exists, else a placeholder."""
        override = self.overrides.get(self.student_id, field)
        if override is not None:
            return override

        field = OverrideField(field)
        if self.report is not None:
            if field == OverrideField.GROWTH_SUMMARY:
                return self.report.growth_summary
            if field == OverrideField.STRENGTHS:
                return list(self.report.identified_strengths)
            return list(self.report.areas_for_focus)

        return PLACEHOLDER_TEXT if field == OverrideField.GROWTH_SUMMARY else []

    def sections(self) -> List[ReportSection]:
        """Visible widgets in order, each with its resolved content."""
        return [
            ReportSection(
                widget_id=widget.id,
                display_name=widget.display_name,
                icon_ref=widget.icon_ref,
                order=widget.order,
                content=self._resolvers[widget.id](),
            )
            for widget in self.layout.visible_widgets()
        ]

    def _fail(self, kind: FailureKind, error: Exception):
        self.report = None
        self.action_plan.clear()
        self.error = error
        self.failure_kind = kind
        self.state = SessionState.FAILED
        logger.error(
            f"Growth report generation failed for {self.student_id}: {error}",
            extra={"failure_kind": kind.value}
        )

    def _notify_ready(self, report: GrowthReport):
        if self.notifications is None:
            return

        events = [NotificationEvent(
            title="Growth Plan Ready!",
            message="Your personalized growth advice is here.",
            kind=NotificationKind.SUCCESS,
            category=NotificationCategory.AI_TIPS,
            link_ref=ADVISOR_LINK,
        )]
        if report.areas_for_focus:
            events.append(NotificationEvent(
                title="Focus Area Tip",
                message=f"AI suggests focusing on {report.areas_for_focus[0]}. Check your plan!",
                kind=NotificationKind.AI,
                category=NotificationCategory.AI_TIPS,
                link_ref=ADVISOR_LINK,
            ))

        for event in events:
            try:
                self.notifications.emit(event)
            except Exception as e:
                logger.error(f"Notification sink failed for '{event.title}': {e}")

    def _report_field(self, name: str, default: Any) -> Any:
        if self.report is None:
            return default
        return getattr(self.report, name)

    def _attendance_content(self) -> Dict[str, Any]:
        if self.summary is None:
            return {"attendance_percentage": None, "recent": []}
        return {
            "attendance_percentage": self.summary.attendance_percentage,
            "recent": list(self.summary.recent_attendance),
        }

    def _assignment_content(self) -> Dict[str, Any]:
        entries = list(self.summary.recent_assignments) if self.summary else []
        return {
            "submitted": sum(1 for entry in entries if entry.submitted),
            "pending": sum(1 for entry in entries if not entry.submitted),
            "recent": entries,
        }

    def _strengths_focus_content(self) -> Dict[str, Any]:
        return {
            "strengths": self.display_value(OverrideField.STRENGTHS),
            "focus_areas": self.display_value(OverrideField.FOCUS_AREAS),
        }

    def _motivation_content(self) -> Dict[str, Any]:
        return {
            "quote": self.report.motivational_quote if self.report else None,
            "goal": self.goals.get(self.student_id) if self.goals else None,
        }

    def _scoreboard_content(self) -> Dict[str, Any]:
        return {
            "completed_steps": self.action_plan.completed_count,
            "total_steps": len(self.action_plan.steps),
            "progress": self.action_plan.progress,
        }
