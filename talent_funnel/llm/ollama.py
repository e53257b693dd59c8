"""Ollama local LLM provider (OpenAI-compatible API)."""

import logging
import os

from talent_funnel.llm.base import LLMProvider
from talent_funnel.llm.openai import _chat_completion

logger = logging.getLogger(__name__)

_OLLAMA_BASE_URL = "http://localhost:11434/v1"


class OllamaProvider(LLMProvider):
    """LLM provider using a local Ollama instance via OpenAI-compatible API.

    The server address can be overridden with OLLAMA_BASE_URL.
    """

    @property
    def provider_id(self) -> str:
        return "ollama"

    @property
    def default_model(self) -> str:
        return "llama3"

    @property
    def env_var(self) -> None:
        return None

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
        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for Ollama (OpenAI-compatible API). "
                "Install with: pip install talent-funnel"
            )
            raise ImportError(msg) from None

        base_url = os.environ.get("OLLAMA_BASE_URL", _OLLAMA_BASE_URL)
        client_kwargs: dict[str, object] = {"base_url": base_url, "api_key": "ollama"}
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        client = openai.OpenAI(**client_kwargs)
        return _chat_completion(
            client, model or self.default_model, system, prompt, temperature, max_tokens,
        )
