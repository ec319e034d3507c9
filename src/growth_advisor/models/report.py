"""
Growth report JSON output schema.

The generation service is asked to return a JSON document with camelCase keys
matching the aliases below. The older aiSuggestions, suggestedResources and
detailedExplanation spellings are accepted as well. Once validated, a GrowthReport is frozen: a new
generation replaces it wholesale rather than merging into it.
"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, validator


class ReportModel(BaseModel):
    """Base for report schema models: camelCase JSON keys, immutable."""

    class Config:
        populate_by_name = True
        frozen = True


class Suggestion(ReportModel):
    text: str
    explanation: Optional[str] = Field(None, validation_alias=AliasChoices("explanation", "detailedExplanation"))


class Resource(ReportModel):
    name: str
    type: Optional[str] = None  # video, article, book, interactive, course, practice
    url: Optional[str] = None


class SubjectInsight(ReportModel):
    """Per-subject performance insight."""
    subject_name: str = Field(alias="subjectName")
    current_performance: Optional[str] = Field(None, alias="currentPerformance")
    trend: Optional[str] = None
    suggestions: List[Suggestion] = Field(
        default_factory=list, validation_alias=AliasChoices("suggestions", "aiSuggestions")
    )
    resources: List[Resource] = Field(
        default_factory=list, validation_alias=AliasChoices("resources", "suggestedResources")
    )


class ActionableStep(ReportModel):
    """One discrete recommended task."""
    id: str
    task: str
    category: str  # Revision, Practice, Exploration, Skill Development
    explanation: Optional[str] = Field(None, validation_alias=AliasChoices("explanation", "detailedExplanation"))


class CareerPathway(ReportModel):
    name: str
    relevance: Optional[str] = None


class ElectiveSuggestion(ReportModel):
    name: str
    reason: str = ""


class StudyTask(ReportModel):
    time: str
    activity: str
    subject: Optional[str] = None
    resources: List[Resource] = Field(
        default_factory=list, validation_alias=AliasChoices("resources", "suggestedResources")
    )


class StudyDay(ReportModel):
    day: str
    focus: Optional[str] = None
    tasks: List[StudyTask] = Field(default_factory=list)


class PerformanceOutlook(ReportModel):
    outlook_statement: str = Field(alias="outlookStatement")
    key_supporting_actions: List[str] = Field(default_factory=list, alias="keySupportingActions")


class SubjectCorrelation(ReportModel):
    subject_a: str = Field(alias="subjectA")
    subject_b: str = Field(alias="subjectB")
    correlation_type: str = Field("neutral", alias="correlationType")  # positive/negative/neutral
    description: str
    suggestion: Optional[str] = None


class RevisionSlot(ReportModel):
    day: str
    activity: str


class RevisionScheduleOutline(ReportModel):
    focus_area: str = Field(alias="focusArea")
    schedule: List[RevisionSlot] = Field(default_factory=list)


class MotivationalQuote(ReportModel):
    quote: str
    author: Optional[str] = None

    @validator('quote')
    def validate_quote(cls, v):
        """Quote text must be non-empty."""
        if not v or not v.strip():
            raise ValueError("quote must be a non-empty string")
        return v


class GrowthReport(ReportModel):
    """Structured, AI-generated personalized report for one student."""
    growth_summary: str = Field(alias="growthSummary")
    subject_insights: List[SubjectInsight] = Field(alias="subjectInsights")
    identified_strengths: List[str] = Field(alias="identifiedStrengths")
    areas_for_focus: List[str] = Field(alias="areasForFocus")
    actionable_steps: List[ActionableStep] = Field(alias="actionableSteps")
    career_pathways: List[CareerPathway] = Field(alias="careerPathways")
    motivational_quote: MotivationalQuote = Field(alias="motivationalQuote")

    # Advanced insights; the service may omit them
    elective_suggestions: List[ElectiveSuggestion] = Field(default_factory=list, alias="electiveSuggestions")
    weekly_study_plan: List[StudyDay] = Field(default_factory=list, alias="weeklyStudyPlan")
    performance_outlook: Optional[PerformanceOutlook] = Field(None, alias="performanceOutlook")
    subject_correlations: List[SubjectCorrelation] = Field(default_factory=list, alias="subjectCorrelations")
    revision_schedule_outline: Optional[RevisionScheduleOutline] = Field(None, alias="revisionScheduleOutline")

    @validator('growth_summary')
    def validate_growth_summary(cls, v):
        """Summary must carry text."""
        if not v or not v.strip():
            raise ValueError("growthSummary must be a non-empty string")
        return v

    @validator('actionable_steps')
    def validate_unique_step_ids(cls, v):
        """Step ids key the action plan, so they must be unique."""
        ids = [step.id for step in v]
        duplicates = sorted({step_id for step_id in ids if ids.count(step_id) > 1})
        if duplicates:
            raise ValueError(f"duplicate actionable step ids: {duplicates}")
        return v
