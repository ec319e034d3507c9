"""
Utility modules for the growth advisor.
"""

from .llm import (
    LLMError,
    RateLimitError,
    AuthenticationError,
    APIError,
    LLMRequest,
    LLMResponse,
    LLMProvider,
    ClaudeLLMProvider,
    GeminiLLMProvider,
    LLMClient,
    create_llm_client
)

__all__ = [
    'LLMError',
    'RateLimitError',
    'AuthenticationError',
    'APIError',
    'LLMRequest',
    'LLMResponse',
    'LLMProvider',
    'ClaudeLLMProvider',
    'GeminiLLMProvider',
    'LLMClient',
    'create_llm_client',
]
