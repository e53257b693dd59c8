"""OpenAI chat-completions provider."""

import logging
import os

from talent_funnel.llm.base import LLMProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """LLM provider using the OpenAI API."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

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
        api_key = os.environ.get(self.env_var)
        if not api_key:
            msg = f"{self.env_var} environment variable is required"
            raise ValueError(msg)

        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for this provider. "
                "Install with: pip install talent-funnel"
            )
            raise ImportError(msg) from None

        client_kwargs: dict[str, object] = {"api_key": api_key}
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        client = openai.OpenAI(**client_kwargs)
        return _chat_completion(
            client, model or self.default_model, system, prompt, temperature, max_tokens,
        )


def _chat_completion(
    client: object,
    model: str,
    system: str,
    prompt: str,
    temperature: float | None,
    max_tokens: int | None,
) -> str:
    """Run one chat completion; shared with the OpenAI-compatible Ollama provider."""
    kwargs: dict[str, object] = {}
    if temperature is not None:
        kwargs["temperature"] = temperature
    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens

    logger.debug("Chat completion request (%s), %d prompt chars", model, len(prompt))
    response = client.chat.completions.create(  # type: ignore[attr-defined]
        model=model,
        messages=[
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ],
        **kwargs,
    )

    content = response.choices[0].message.content if response.choices else None
    if not content:
        msg = f"No response content from model '{model}'"
        raise ValueError(msg)
    return content  # type: ignore[no-any-return]
