"""Abstract base class for LLM providers and shared response parsing."""

import json
import re
from abc import ABC, abstractmethod
from typing import Any


def parse_json_response(raw_text: str) -> Any:
    """Parse an LLM response body as JSON.

    Handles markdown-wrapped JSON (```json ... ```) and plain JSON.
    Raises ValueError on anything else.
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        msg = "Empty response from LLM"
        raise ValueError(msg)

    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", raw_text.strip(), flags=re.IGNORECASE)
    cleaned = re.sub(r"\n?```\s*$", "", cleaned).strip()

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse LLM response as JSON: {e}"
        raise ValueError(msg) from e


class LLMProvider(ABC):
    """Base class that every LLM provider must implement.

    ``complete`` is blocking; async callers run it in a worker thread.
    """

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'openai')."""

    @abstractmethod
    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
    ) -> str:
        """Send a prompt to the LLM and return the raw response text.

        Args:
            prompt: User message content.
            model: Override the provider's default model. None uses default.
            system: System prompt describing the task and output format.
            temperature: Sampling temperature. None leaves the API default.
            max_tokens: Response length limit. None uses the provider default.
            timeout: Per-request HTTP timeout in seconds, applied to the SDK
                client so a stalled call ends in its own thread. None keeps
                the SDK default.

        Returns:
            Raw text response from the LLM (expected to be JSON).
        """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""
