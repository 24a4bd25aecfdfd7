"""
Google Gemini LLM Provider.
Calls the ``generateContent`` REST endpoint directly and classifies the
response into a GenerationOutcome.
"""

import httpx
import json
import logging
import time
from typing import Optional, Dict, Any

from .base import (
    LLMProvider, GenerationOutcome, Reply, Blocked, UpstreamError, MalformedResponse,
)

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """
    Provider for the Gemini API (generativelanguage.googleapis.com).
    The key travels in the ``x-goog-api-key`` header.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        default_temperature: float = 0.7,
        default_max_tokens: int = 2048,
        top_p: float = 0.8,
        top_k: int = 40,
        timeout: Optional[float] = 120.0,
        log_calls: bool = True,
    ):
        super().__init__(api_key, model, base_url.rstrip("/"), default_temperature, default_max_tokens)
        self.top_p = top_p
        self.top_k = top_k
        self.timeout = timeout
        self.log_calls = log_calls

    @property
    def api_version(self) -> str:
        return self.base_url.rsplit("/", 1)[-1]

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

    def _build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": self.default_max_tokens,
                "temperature": self.default_temperature,
                "topP": self.top_p,
                "topK": self.top_k,
            },
        }

    def error_hint(self, status_code: int, body: str) -> Optional[str]:
        """Best-effort diagnostic for a failed call, chosen by status code."""
        if status_code == 404:
            return (
                f"404 Not Found. Check the model name ({self.model}) and API version "
                f"({self.api_version}). Try regenerating your API key."
            )
        if status_code == 403:
            return "403 Forbidden. Your API key may be invalid, or billing/quota limits may be reached."
        if status_code == 400 and "API_KEY_INVALID" in body:
            return "400 Bad Request / API_KEY_INVALID. The API key is likely incorrect or expired."
        if status_code == 429:
            return "429 Too Many Requests. The rate limit or quota for this key is exhausted."
        return None

    def classify(self, status_code: int, body: str) -> GenerationOutcome:
        """Turn a raw HTTP status and body into a GenerationOutcome."""
        if not 200 <= status_code < 300:
            return UpstreamError(status_code, body, self.error_hint(status_code, body))

        try:
            data = json.loads(body)
        except ValueError:
            return MalformedResponse(body)
        if not isinstance(data, dict):
            return MalformedResponse(body)

        text = _first_candidate_text(data)
        if text:
            return Reply(text)

        feedback = data.get("promptFeedback")
        block_reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
        if block_reason:
            return Blocked(str(block_reason))

        return MalformedResponse(body)

    async def generate_content(self, prompt: str) -> GenerationOutcome:
        start_time = time.time()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"LLM API call starting: provider=gemini, model={self.model}, "
                f"prompt_length={len(prompt)}"
            )

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    self.endpoint,
                    json=self._build_payload(prompt),
                    headers=self._get_headers(),
                )
        except httpx.TimeoutException as e:
            self._log_failure(start_time, f"timeout: {e}")
            return UpstreamError(None, "", f"Request to the provider timed out after {self.timeout}s.")
        except httpx.HTTPError as e:
            self._log_failure(start_time, str(e))
            return UpstreamError(None, "", f"Could not reach the provider: {e}")

        outcome = self.classify(resp.status_code, resp.text)
        duration_ms = (time.time() - start_time) * 1000

        if self.log_calls:
            level = logging.INFO if isinstance(outcome, (Reply, Blocked)) else logging.WARNING
            logger.log(
                level,
                f"LLM API call completed: {type(outcome).__name__}",
                extra={"extra_fields": {
                    "provider": "gemini",
                    "model": self.model,
                    "status_code": resp.status_code,
                    "outcome": type(outcome).__name__,
                    "duration_ms": round(duration_ms, 2),
                }}
            )
        return outcome

    def _log_failure(self, start_time: float, error: str) -> None:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(
            f"LLM API call failed: {error}",
            extra={"extra_fields": {
                "provider": "gemini",
                "model": self.model,
                "duration_ms": round(duration_ms, 2),
                "error": error,
            }}
        )


def _first_candidate_text(data: Dict[str, Any]) -> Optional[str]:
    """``candidates[0].content.parts[0].text``, or None if any step is missing."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None
