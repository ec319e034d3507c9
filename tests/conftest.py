"""Shared fixtures for the growth advisor tests."""

import copy
import json
from unittest.mock import AsyncMock, Mock

import pytest

from growth_advisor.advisor import (
    DataAggregator,
    FeatureToggleStore,
    GoalStore,
    InMemoryNotificationSink,
    OverrideStore,
    ReportGenerator,
    WidgetLayoutStore,
)
from growth_advisor.database import InMemoryKeyValueStore, load_demo_repository
from growth_advisor.utils.llm import LLMClient, LLMResponse


SAMPLE_REPORT = {
    "growthSummary": "Jane is a consistent high achiever with a real curiosity for technology.",
    "subjectInsights": [
        {
            "subjectName": "Physics",
            "currentPerformance": "Good",
            "trend": "Improving Steadily",
            "suggestions": [{"text": "Work through optics problems weekly.", "explanation": "Practice builds intuition."}],
            "resources": [{"name": "Khan Academy - Physics", "type": "course", "url": "https://www.khanacademy.org/science/physics"}],
        }
    ],
    "identifiedStrengths": ["Mathematics", "Lab reports"],
    "areasForFocus": ["Chemistry revision", "Calculation speed"],
    "actionableSteps": [
        {"id": "step1", "task": "Review one Chemistry chapter each week", "category": "Revision", "explanation": "Spaced review improves retention."},
        {"id": "step2", "task": "Timed algebra drills", "category": "Practice"},
        {"id": "step3", "task": "Build a small robotics project", "category": "Exploration"},
    ],
    "careerPathways": [{"name": "Robotics Engineer", "relevance": "Combines coding and physics interests."}],
    "electiveSuggestions": [{"name": "Introduction to Programming", "reason": "Matches the interest in coding."}],
    "weeklyStudyPlan": [
        {"day": "Monday", "focus": "Chemistry", "tasks": [{"time": "5-6 PM", "activity": "Chapter review", "subject": "Chemistry"}]}
    ],
    "performanceOutlook": {
        "outlookStatement": "Strong potential for further improvement next term.",
        "keySupportingActions": ["Keep up weekly revision."],
    },
    "subjectCorrelations": [
        {"subjectA": "Math", "subjectB": "Physics", "correlationType": "positive", "description": "Math skills support Physics."}
    ],
    "motivationalQuote": {"quote": "The journey of a thousand miles begins with a single step.", "author": "Lao Tzu"},
}


@pytest.fixture
def report_data():
    """A fresh, valid growth report payload."""
    return copy.deepcopy(SAMPLE_REPORT)


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def repository():
    return load_demo_repository()


@pytest.fixture
def overrides(kv_store):
    return OverrideStore(kv_store)


@pytest.fixture
def toggles(kv_store):
    return FeatureToggleStore(kv_store)


@pytest.fixture
def goals(kv_store):
    return GoalStore(kv_store)


@pytest.fixture
def layout(kv_store, overrides, toggles):
    store = WidgetLayoutStore(kv_store, overrides, toggles)
    yield store
    store.close()


@pytest.fixture
def sink():
    return InMemoryNotificationSink()


@pytest.fixture
def llm_client(report_data):
    """LLM client mock answering with the sample report."""
    client = Mock(spec=LLMClient)
    client.call = AsyncMock(return_value=LLMResponse(content=json.dumps(report_data), latency_ms=12.0))
    return client


@pytest.fixture
def generator(llm_client):
    return ReportGenerator(llm_client)


@pytest.fixture
def aggregator(repository):
    return DataAggregator(repository)
