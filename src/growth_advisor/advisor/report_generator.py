"""
Growth report generation.

Renders the growth_report prompt from a StudentSummary, makes exactly one call
to the generation service, and parses the reply into a GrowthReport. Every
failure leaves this module as one of the advisor error kinds:

- missing or rejected credential, unusable prompt template -> ConfigurationError
- rate limit or quota exhaustion -> QuotaError
- unparseable or incomplete JSON -> SchemaError
- anything else from the service -> ServiceError

There is no retry; callers re-invoke generate() explicitly.
"""

import json
import logging
import re
import time
from typing import TYPE_CHECKING, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from ..errors import (
    ConfigurationError,
    GenerationCancelledError,
    QuotaError,
    SchemaError,
    ServiceError,
)
from ..models import GrowthReport, StudentSummary
from ..utils.llm import AuthenticationError, LLMClient, LLMError, RateLimitError, create_llm_client
from .templates import GROWTH_REPORT_TEMPLATE, TemplateManager

if TYPE_CHECKING:
    from ..config import LLMConfig


logger = logging.getLogger(__name__)


NOT_CONFIGURED_MESSAGE = "AI Advisor service is not configured. Please contact support."

FENCE_PATTERN = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


class CancellationToken:
    """Marks a generation request as abandoned by the session that issued it."""

    def __init__(self):
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self):
        if self._cancelled:
            raise GenerationCancelledError("Generation result discarded: request was cancelled")


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ``` fence (with optional language tag) if present."""
    stripped = text.strip()
    match = FENCE_PATTERN.match(stripped)
    if match and match.group(2):
        return match.group(2).strip()
    return stripped


def parse_report(text: str) -> GrowthReport:
    """Parse raw service output into a validated GrowthReport."""
    json_str = strip_code_fence(text or "")
    if not json_str:
        raise SchemaError("Received an empty response from the AI Advisor.")

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise SchemaError(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise SchemaError(f"Expected a JSON object, got {type(data).__name__}")

    try:
        return GrowthReport.model_validate(data)
    except PydanticValidationError as e:
        raise SchemaError(f"Response does not match the growth report schema: {e}") from e


class ReportGenerator:
    """Produces a GrowthReport from a StudentSummary through the LLM client."""

    def __init__(
        self,
        llm_client: Optional[LLMClient],
        template_manager: Optional[TemplateManager] = None,
        template_name: str = GROWTH_REPORT_TEMPLATE
    ):
        self.llm_client = llm_client
        self.template_manager = template_manager or TemplateManager()
        self.template_name = template_name

    @classmethod
    def from_settings(cls, llm_config: "LLMConfig", templates_dir: Optional[str] = None) -> "ReportGenerator":
        """
        Build a generator from configuration.

        A missing credential is not an error here: the generator is created
        without a client and every generate() call fails with
        ConfigurationError, so the failure surfaces in the session state.
        """
        template_manager = TemplateManager.with_templates_dir(templates_dir)

        provider = llm_config.resolved_provider()
        api_key = llm_config.api_key_for(provider) if provider else None
        if not provider or not api_key:
            logger.warning("No generation service credential configured")
            return cls(None, template_manager)

        provider_kwargs = {"timeout": llm_config.request_timeout}
        if llm_config.model:
            provider_kwargs["model"] = llm_config.model

        try:
            client = create_llm_client(
                provider_type=provider,
                api_key=api_key,
                temperature=llm_config.temperature,
                max_tokens=llm_config.max_tokens,
                **provider_kwargs
            )
        except ValueError as e:
            logger.error(f"Could not create LLM client: {e}")
            return cls(None, template_manager)

        return cls(client, template_manager)

    async def build_prompt(self, summary: StudentSummary) -> str:
        """Render the generation prompt for a summary."""
        return await self.template_manager.render_template(
            self.template_name,
            {"student_summary": summary.to_prompt_text()}
        )

    async def generate(
        self,
        summary: StudentSummary,
        cancel_token: Optional[CancellationToken] = None
    ) -> GrowthReport:
        """
        Generate a growth report for the summarized student.

        Raises ConfigurationError, QuotaError, SchemaError or ServiceError on
        failure, and GenerationCancelledError if cancel_token was cancelled
        while the request was in flight.
        """
        if self.llm_client is None:
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE)

        try:
            prompt = await self.build_prompt(summary)
        except (KeyError, ValueError, TypeError, OSError, yaml.YAMLError) as e:
            logger.error(f"Could not render prompt template '{self.template_name}': {e}")
            raise ConfigurationError(f"Prompt template '{self.template_name}' is unusable: {e}") from e

        start_time = time.time()

        try:
            response = await self.llm_client.call(
                prompt,
                json_output=True,
                metadata={"student_id": summary.student_id}
            )
        except AuthenticationError as e:
            self._check_cancelled(cancel_token)
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE) from e
        except RateLimitError as e:
            self._check_cancelled(cancel_token)
            raise QuotaError(str(e)) from e
        except LLMError as e:
            self._check_cancelled(cancel_token)
            raise ServiceError(str(e)) from e

        self._check_cancelled(cancel_token)

        report = parse_report(response.content)
        logger.info(
            f"Generated growth report for {summary.student_id}",
            extra={
                "prompt_length": len(prompt),
                "response_length": len(response.content),
                "latency_ms": (time.time() - start_time) * 1000,
                "actionable_steps": len(report.actionable_steps),
            }
        )
        return report

    def _check_cancelled(self, cancel_token: Optional[CancellationToken]):
        if cancel_token is not None and cancel_token.cancelled:
            logger.info("Discarding generation result for cancelled request")
            cancel_token.raise_if_cancelled()
