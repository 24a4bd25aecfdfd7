"""
Generation Client - prompt construction in front of the configured provider.
"""

import logging
from typing import Optional

from .base import LLMProvider, GenerationOutcome, Reply

logger = logging.getLogger(__name__)

PLAIN_TEXT_INSTRUCTION = (
    "You are a helpful assistant. Always respond in common, unformatted, plain text only. "
    "Do not use Markdown, symbols like asterisks (*), or hashtags (#) for formatting."
)


def build_prompt(utterance: str) -> str:
    """Prefix the raw user utterance with the plain-text instruction."""
    return f"{PLAIN_TEXT_INSTRUCTION}\n\n{utterance}"


def echo_reply(utterance: str) -> str:
    return f"Echo (dev): {utterance} (set LLM_API_KEY to use the real provider)"


class GenerationClient:
    """
    Turns a user utterance into a GenerationOutcome.

    Without a provider (no credential configured) every call returns a
    deterministic local echo, so the service works without network access.
    """

    def __init__(self, provider: Optional[LLMProvider] = None):
        self.provider = provider
        if provider is None:
            logger.warning("No LLM provider configured, replies will be local echoes")

    @property
    def echo_mode(self) -> bool:
        return self.provider is None

    async def generate(self, prompt_text: str) -> GenerationOutcome:
        if self.provider is None:
            return Reply(echo_reply(prompt_text))
        return await self.provider.generate_content(build_prompt(prompt_text))
