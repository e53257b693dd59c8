"""Anthropic Claude LLM provider."""

import logging
import os

from talent_funnel.llm.base import LLMProvider

logger = logging.getLogger(__name__)

_DEFAULT_MAX_TOKENS = 1024


class AnthropicProvider(LLMProvider):
    """LLM provider using the Anthropic Messages API."""

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

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
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for this provider. "
                "Install with: pip install 'talent-funnel[anthropic]'"
            )
            raise ImportError(msg) from None

        client_kwargs: dict[str, object] = {"api_key": api_key}
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        client = anthropic.Anthropic(**client_kwargs)
        use_model = model or self.default_model
        kwargs: dict[str, object] = {}
        if temperature is not None:
            kwargs["temperature"] = temperature

        logger.debug("Anthropic request (%s), %d prompt chars", use_model, len(prompt))
        message = client.messages.create(
            model=use_model,
            max_tokens=max_tokens or _DEFAULT_MAX_TOKENS,
            system=system,
            messages=[{"role": "user", "content": prompt}],
            **kwargs,
        )

        texts = [block.text for block in message.content if getattr(block, "type", "") == "text"]
        if not texts:
            msg = f"No text content in response from '{use_model}'"
            raise ValueError(msg)
        return "".join(texts)
