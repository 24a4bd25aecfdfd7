"""
LLM Provider Base - Abstract base for text-generation providers and the
closed set of outcomes a generation call can produce.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Reply:
    """Plain-text answer extracted from the provider response."""
    text: str


@dataclass(frozen=True)
class Blocked:
    """Provider declined to answer for a disclosed policy reason."""
    reason: str


@dataclass(frozen=True)
class UpstreamError:
    """
    Provider returned a non-success status, or could not be reached
    (``status_code`` is None for timeouts and connection failures).
    ``hint`` is advisory text for humans only.
    """
    status_code: Optional[int]
    raw_body: str
    hint: Optional[str] = None


@dataclass(frozen=True)
class MalformedResponse:
    """Provider succeeded but gave neither text nor a block reason."""
    raw_body: str


GenerationOutcome = Union[Reply, Blocked, UpstreamError, MalformedResponse]


class LLMProvider(ABC):
    """
    Abstract base class for text-generation providers.
    Implementations classify every response, they never raise for
    provider-side failures.
    """

    def __init__(self, api_key: str, model: str, base_url: Optional[str] = None,
                 default_temperature: float = 0.7, default_max_tokens: int = 2048):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens

    @abstractmethod
    async def generate_content(self, prompt: str) -> GenerationOutcome:
        """
        Send a single-turn prompt to the provider.

        Args:
            prompt: Fully constructed prompt text

        Returns:
            GenerationOutcome describing the provider's answer
        """
        pass
