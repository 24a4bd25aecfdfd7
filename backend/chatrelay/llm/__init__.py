"""LLM module - provider abstraction, Gemini provider and the generation client."""

from .base import (
    LLMProvider, GenerationOutcome, Reply, Blocked, UpstreamError, MalformedResponse,
)
from .gemini_provider import GeminiProvider
from .factory import create_llm_provider, create_llm_provider_from_settings
from .client import GenerationClient, build_prompt, echo_reply, PLAIN_TEXT_INSTRUCTION

__all__ = [
    'LLMProvider',
    'GenerationOutcome',
    'Reply',
    'Blocked',
    'UpstreamError',
    'MalformedResponse',
    'GeminiProvider',
    'create_llm_provider',
    'create_llm_provider_from_settings',
    'GenerationClient',
    'build_prompt',
    'echo_reply',
    'PLAIN_TEXT_INSTRUCTION',
]
