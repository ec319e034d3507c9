"""LLM client utilities: single-attempt async calls to the generation service."""

import asyncio
import logging
import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp
import google.genai as genai
from google.genai import types as genai_types


logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base exception for LLM-related errors."""
    pass


class RateLimitError(LLMError):
    """Exception raised when the rate limit or quota is exhausted."""
    pass


class AuthenticationError(LLMError):
    """Exception raised when the service rejects the credential."""
    pass


class APIError(LLMError):
    """Exception raised for API-specific errors."""
    pass


@dataclass
class LLMRequest:
    """Represents a single LLM request."""
    prompt: str
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    json_output: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LLMResponse:
    """Represents a single LLM response."""
    content: str
    metadata: Optional[Dict[str, Any]] = None
    latency_ms: Optional[float] = None
    token_usage: Optional[Dict[str, int]] = None


def classify_status(status: Optional[int], message: str) -> LLMError:
    """Map an HTTP status and error text onto the LLM error family."""
    lowered = message.lower()
    if status == 429 or "rate limit" in lowered or "quota" in lowered or "resource_exhausted" in lowered:
        return RateLimitError(message)
    if status in (401, 403) or "api key not valid" in lowered or "permission_denied" in lowered:
        return AuthenticationError(message)
    return APIError(message)


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    async def call_single(self, request: LLMRequest) -> LLMResponse:
        """Make a single LLM call. Failures raise an LLMError subclass."""
        pass


class ClaudeLLMProvider(LLMProvider):
    """Claude API provider implementation."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-20241022",
        base_url: str = "https://api.anthropic.com/v1/messages",
        timeout: float = 60.0
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout

    async def call_single(self, request: LLMRequest) -> LLMResponse:
        """Make a single Claude API call."""
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01"
        }

        payload = {
            "model": self.model,
            "max_tokens": request.max_tokens or 4096,
            "temperature": request.temperature,
            "messages": [
                {"role": "user", "content": request.prompt}
            ]
        }

        start_time = time.time()

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.base_url,
                    headers=headers,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status >= 400:
                        error_text = await response.text()
                        raise classify_status(response.status, f"API error {response.status}: {error_text}")

                    response_data = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise APIError(f"Claude API call failed: {e}") from e

        blocks = response_data.get("content") or [{}]
        content = blocks[0].get("text", "")

        return LLMResponse(
            content=content,
            latency_ms=(time.time() - start_time) * 1000,
            token_usage=response_data.get("usage", {})
        )


class GeminiLLMProvider(LLMProvider):
    """Google Gemini API provider implementation."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        timeout: float = 60.0
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.client = genai.Client(api_key=api_key)

    async def call_single(self, request: LLMRequest) -> LLMResponse:
        """Make a single Gemini API call."""
        start_time = time.time()

        generation_config = {
            "temperature": request.temperature,
        }
        if request.max_tokens:
            generation_config["max_output_tokens"] = request.max_tokens
        if request.json_output:
            generation_config["response_mime_type"] = "application/json"

        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    self.client.models.generate_content,
                    model=self.model,
                    contents=request.prompt,
                    config=genai_types.GenerateContentConfig(**generation_config)
                ),
                timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise APIError(f"Gemini API call timed out after {self.timeout}s") from e
        except Exception as e:
            # google-genai raises errors.APIError carrying the HTTP status in .code
            raise classify_status(getattr(e, "code", None), f"Gemini API error: {e}") from e

        content = response.text or ""

        token_usage = {}
        usage = getattr(response, "usage_metadata", None)
        if usage is not None:
            token_usage = {
                "input_tokens": getattr(usage, "prompt_token_count", 0) or 0,
                "output_tokens": getattr(usage, "candidates_token_count", 0) or 0,
                "total_tokens": getattr(usage, "total_token_count", 0) or 0
            }

        return LLMResponse(
            content=content,
            latency_ms=(time.time() - start_time) * 1000,
            token_usage=token_usage
        )


class LLMClient:
    """High-level client for LLM operations. Makes exactly one attempt per call."""

    def __init__(self, provider: LLMProvider, temperature: float = 0.7, max_tokens: Optional[int] = None):
        self.provider = provider
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def call(
        self,
        prompt: str,
        json_output: bool = False,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> LLMResponse:
        """Make a single LLM call."""
        request = LLMRequest(
            prompt=prompt,
            temperature=self.temperature if temperature is None else temperature,
            max_tokens=max_tokens or self.max_tokens,
            json_output=json_output,
            metadata=metadata or {}
        )

        try:
            response = await self.provider.call_single(request)
        except LLMError as e:
            logger.error(f"LLM call failed: {e}", extra={"error_type": type(e).__name__})
            raise

        logger.info(
            "LLM call completed",
            extra={
                "prompt_length": len(prompt),
                "response_length": len(response.content),
                "latency_ms": response.latency_ms,
                "tokens": response.token_usage
            }
        )
        return response


def create_llm_client(
    provider_type: Optional[str] = None,
    api_key: Optional[str] = None,
    temperature: float = 0.7,
    max_tokens: Optional[int] = None,
    **kwargs
) -> LLMClient:
    """Create an LLM client with the specified provider.

    If provider_type is None, will auto-select based on available environment variables:
    1. Gemini if GEMINI_API_KEY (or API_KEY) is set
    2. Claude if ANTHROPIC_API_KEY is set

    Raises ValueError when no usable credential is found.
    """
    if provider_type is None:
        gemini_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
        if api_key or gemini_key:
            provider_type = "gemini"
            api_key = api_key or gemini_key
        elif os.getenv("ANTHROPIC_API_KEY"):
            provider_type = "claude"
            api_key = os.getenv("ANTHROPIC_API_KEY")
        else:
            raise ValueError(
                "No LLM API key found in environment. Please set one of:\n"
                "- GEMINI_API_KEY or API_KEY (recommended)\n"
                "- ANTHROPIC_API_KEY"
            )

    if api_key is None:
        if provider_type == "gemini":
            api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
        elif provider_type == "claude":
            api_key = os.getenv("ANTHROPIC_API_KEY")

    if provider_type == "claude":
        if not api_key:
            raise ValueError("API key required for Claude provider")
        provider = ClaudeLLMProvider(api_key=api_key, **kwargs)
    elif provider_type == "gemini":
        if not api_key:
            raise ValueError("API key required for Gemini provider")
        provider = GeminiLLMProvider(api_key=api_key, **kwargs)
    else:
        raise ValueError(f"Unknown provider type: {provider_type}. Supported: gemini, claude")

    return LLMClient(provider=provider, temperature=temperature, max_tokens=max_tokens)
