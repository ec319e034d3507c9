"""Prompt template system for growth report generation."""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from string import Template
from typing import Any, Dict, List, Optional, Union

import yaml


logger = logging.getLogger(__name__)


GROWTH_REPORT_TEMPLATE = "growth_report"

GROWTH_REPORT_SCHEMA = """{
  "growthSummary": "string, 2-3 sentences on overall growth and key positive attributes (required, non-empty)",
  "subjectInsights": [
    {
      "subjectName": "string",
      "currentPerformance": "string, e.g. Good, Needs Focus",
      "trend": "string, e.g. Improving Steadily, Stable",
      "suggestions": [ { "text": "string", "explanation": "string" } ],
      "resources": [ { "name": "string", "type": "video|article|book|interactive|course|practice", "url": "string" } ]
    }
  ],
  "identifiedStrengths": [ "string" ],
  "areasForFocus": [ "string" ],
  "actionableSteps": [
    { "id": "string, unique within the report", "task": "string", "category": "Revision|Practice|Exploration|Skill Development", "explanation": "string" }
  ],
  "careerPathways": [ { "name": "string", "relevance": "string" } ],
  "electiveSuggestions": [ { "name": "string", "reason": "string" } ],
  "weeklyStudyPlan": [
    { "day": "string", "focus": "string", "tasks": [ { "time": "string", "activity": "string", "subject": "string", "resources": [ { "name": "string", "url": "string" } ] } ] }
  ],
  "performanceOutlook": { "outlookStatement": "string", "keySupportingActions": [ "string" ] },
  "subjectCorrelations": [
    { "subjectA": "string", "subjectB": "string", "correlationType": "positive|negative|neutral", "description": "string", "suggestion": "string" }
  ],
  "revisionScheduleOutline": { "focusArea": "string", "schedule": [ { "day": "string", "activity": "string" } ] },
  "motivationalQuote": { "quote": "string (required, non-empty)", "author": "string" }
}"""

DEFAULT_INSTRUCTIONS = """Provide detailed insights for subjectCorrelations, weeklyStudyPlan, and performanceOutlook.
The weeklyStudyPlan should cover 3-5 days. Every array of objects must have objects separated by commas.
Respond with valid JSON only."""


class TemplateFormat(Enum):
    """Supported template formats."""
    STRING = "string"
    YAML = "yaml"
    JSON = "json"


@dataclass
class PromptVariable:
    """Represents a variable in a prompt template."""
    name: str
    description: str
    required: bool = True
    default_value: Optional[Any] = None


@dataclass
class PromptTemplate:
    """Represents a prompt template with variables and metadata."""
    name: str
    template: str
    description: str = ""
    variables: List[PromptVariable] = field(default_factory=list)
    format: TemplateFormat = TemplateFormat.STRING
    version: str = "1.0"

    def render(self, **kwargs) -> str:
        """Render the template with provided variables."""
        required_vars = {var.name for var in self.variables if var.required}
        missing_required = required_vars - set(kwargs.keys())
        if missing_required:
            raise ValueError(f"Missing required variables: {sorted(missing_required)}")

        render_vars = kwargs.copy()
        for var in self.variables:
            if var.name not in render_vars and var.default_value is not None:
                render_vars[var.name] = var.default_value

        # string.Template substitution leaves JSON braces in the template alone
        try:
            return Template(self.template).substitute(render_vars)
        except KeyError as e:
            raise ValueError(f"Template rendering failed: missing variable {e}")


class TemplateLoader(ABC):
    """Abstract base class for template loaders."""

    @abstractmethod
    async def load_template(self, template_name: str) -> PromptTemplate:
        """Load a template by name. Raises KeyError when unknown."""
        pass

    @abstractmethod
    async def list_templates(self) -> List[str]:
        """List all available template names."""
        pass


class FileTemplateLoader(TemplateLoader):
    """Load templates from a directory of YAML, JSON or plain-text files."""

    EXTENSIONS = (".yaml", ".yml", ".json", ".txt")

    def __init__(self, templates_dir: Union[str, Path]):
        self.templates_dir = Path(templates_dir)

    async def load_template(self, template_name: str) -> PromptTemplate:
        for ext in self.EXTENSIONS:
            template_path = self.templates_dir / f"{template_name}{ext}"
            if template_path.exists():
                return self._load_from_file(template_path)

        raise KeyError(f"Template '{template_name}' not found in {self.templates_dir}")

    async def list_templates(self) -> List[str]:
        if not self.templates_dir.is_dir():
            return []
        templates = set()
        for ext in self.EXTENSIONS:
            for template_path in self.templates_dir.glob(f"*{ext}"):
                templates.add(template_path.stem)
        return sorted(templates)

    def _load_from_file(self, template_path: Path) -> PromptTemplate:
        with open(template_path, 'r', encoding='utf-8') as f:
            content = f.read()

        name = template_path.stem
        if template_path.suffix in (".yaml", ".yml"):
            return self._from_mapping(name, yaml.safe_load(content), TemplateFormat.YAML, template_path)
        if template_path.suffix == ".json":
            return self._from_mapping(name, json.loads(content), TemplateFormat.JSON, template_path)
        return PromptTemplate(
            name=name,
            template=content,
            description=f"Plain text template: {name}",
            format=TemplateFormat.STRING
        )

    def _from_mapping(self, name: str, data: Any, fmt: TemplateFormat, path: Path) -> PromptTemplate:
        if not isinstance(data, dict) or "template" not in data:
            raise ValueError(f"{path} must be a mapping with a 'template' key")

        variables = [PromptVariable(**var_data) for var_data in data.get("variables", [])]
        return PromptTemplate(
            name=name,
            template=data["template"],
            description=data.get("description", ""),
            variables=variables,
            format=fmt,
            version=str(data.get("version", "1.0"))
        )


class InMemoryTemplateLoader(TemplateLoader):
    """In-memory template loader for built-in and test templates."""

    def __init__(self):
        self.templates: Dict[str, PromptTemplate] = {}

    def add_template(self, template: PromptTemplate):
        self.templates[template.name] = template

    async def load_template(self, template_name: str) -> PromptTemplate:
        if template_name not in self.templates:
            raise KeyError(f"Template '{template_name}' not found")
        return self.templates[template_name]

    async def list_templates(self) -> List[str]:
        return sorted(self.templates.keys())


class TemplateManager:
    """
    Template lookup with caching.

    Override loaders are consulted first, in the order they were added; the
    default loader, which holds the built-in templates, is the fallback.
    """

    def __init__(self, default_loader: Optional[TemplateLoader] = None):
        self.loaders: Dict[str, TemplateLoader] = {}
        self.template_cache: Dict[str, PromptTemplate] = {}
        self.default_loader = default_loader or InMemoryTemplateLoader()

        self._init_builtin_templates()

    @classmethod
    def with_templates_dir(cls, templates_dir: Optional[Union[str, Path]]) -> "TemplateManager":
        """Create a manager whose file templates override the built-in ones."""
        manager = cls()
        if templates_dir:
            manager.add_loader("files", FileTemplateLoader(templates_dir))
        return manager

    def add_loader(self, name: str, loader: TemplateLoader):
        self.loaders[name] = loader
        self.template_cache.clear()

    async def get_template(self, template_name: str) -> PromptTemplate:
        """Get a template by name, with caching."""
        if template_name in self.template_cache:
            return self.template_cache[template_name]

        template = None
        for loader_name, loader in self.loaders.items():
            try:
                template = await loader.load_template(template_name)
                logger.debug(f"Template {template_name} loaded from {loader_name} loader")
                break
            except KeyError:
                continue

        if template is None:
            template = await self.default_loader.load_template(template_name)

        self.template_cache[template_name] = template
        return template

    async def render_template(self, template_name: str, variables: Dict[str, Any]) -> str:
        """Render a template with variables."""
        template = await self.get_template(template_name)
        return template.render(**variables)

    def clear_cache(self):
        self.template_cache.clear()

    def _init_builtin_templates(self):
        """Initialize the built-in growth report template."""
        if isinstance(self.default_loader, InMemoryTemplateLoader):
            self.default_loader.add_template(PromptTemplate(
                name=GROWTH_REPORT_TEMPLATE,
                template="""You are a supportive and insightful Student Growth Advisor.
Based on the following student data:

$student_summary
Please provide a comprehensive analysis and personalized recommendations as a single JSON object.
Ensure all text is student-friendly and encouraging. Focus on actionable advice.

The JSON object must follow this structure:
$output_schema

$additional_instructions""",
                description="Growth report request embedding the student summary and output schema",
                variables=[
                    PromptVariable("student_summary", "Text rendering of the student's records", True),
                    PromptVariable("output_schema", "Description of the expected JSON output", False, GROWTH_REPORT_SCHEMA),
                    PromptVariable("additional_instructions", "Extra guidance appended to the prompt", False, DEFAULT_INSTRUCTIONS),
                ],
            ))
