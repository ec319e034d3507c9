"""
Growth advisory report engine.

This package contains:
- DataAggregator: student records -> bounded StudentSummary
- ReportGenerator: StudentSummary -> GrowthReport via the generation service
- WidgetLayoutStore, OverrideStore, GoalStore, FeatureToggleStore: persisted local state
- ActionPlanTracker: session-scoped step completion
- AdvisorSession: the report lifecycle tying them together
"""

from .aggregator import DataAggregator
from .report_generator import (
    ReportGenerator,
    CancellationToken,
    parse_report,
    strip_code_fence
)
from .templates import (
    PromptTemplate,
    PromptVariable,
    TemplateManager,
    FileTemplateLoader,
    InMemoryTemplateLoader,
    GROWTH_REPORT_TEMPLATE
)
from .widgets import WidgetLayoutStore
from .overrides import OverrideStore, OverrideField, split_items
from .action_plan import ActionPlanTracker, ActionableStepState
from .feature_toggles import FeatureToggleStore, DEFAULT_FEATURE_TOGGLES
from .goals import GoalStore
from .notifications import NotificationSink, InMemoryNotificationSink, LoggingNotificationSink
from .session import AdvisorSession, SessionState, ReportSection, FAILURE_MESSAGES

__all__ = [
    # Generation pipeline
    'DataAggregator',
    'ReportGenerator',
    'CancellationToken',
    'parse_report',
    'strip_code_fence',

    # Templates
    'PromptTemplate',
    'PromptVariable',
    'TemplateManager',
    'FileTemplateLoader',
    'InMemoryTemplateLoader',
    'GROWTH_REPORT_TEMPLATE',

    # Local state
    'WidgetLayoutStore',
    'OverrideStore',
    'OverrideField',
    'split_items',
    'ActionPlanTracker',
    'ActionableStepState',
    'FeatureToggleStore',
    'DEFAULT_FEATURE_TOGGLES',
    'GoalStore',

    # Notifications
    'NotificationSink',
    'InMemoryNotificationSink',
    'LoggingNotificationSink',

    # Session
    'AdvisorSession',
    'SessionState',
    'ReportSection',
    'FAILURE_MESSAGES',
]
