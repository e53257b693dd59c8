"""Google Gemini LLM provider (google-genai SDK)."""

import logging
import os

from talent_funnel.llm.base import LLMProvider

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """LLM provider using the Google Gemini API (google-genai SDK)."""

    @property
    def provider_id(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return "gemini-2.5-flash"

    @property
    def env_var(self) -> str:
        return "GOOGLE_API_KEY"

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
            from google import genai
            from google.genai import types as genai_types
        except ImportError:
            msg = (
                "google-genai is required for this provider. "
                "Install with: pip install 'talent-funnel[gemini]'"
            )
            raise ImportError(msg) from None

        use_model = model or self.default_model
        logger.debug("Gemini request (%s), %d prompt chars", use_model, len(prompt))
        client_kwargs: dict[str, object] = {"api_key": api_key}
        if timeout is not None:
            # HttpOptions takes milliseconds
            client_kwargs["http_options"] = genai_types.HttpOptions(timeout=int(timeout * 1000))
        client = genai.Client(**client_kwargs)
        response = client.models.generate_content(
            model=use_model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=system,
                temperature=temperature,
                max_output_tokens=max_tokens,
                response_mime_type="application/json",
            ),
        )

        if not response.text:
            msg = f"No text content in response from '{use_model}'"
            raise ValueError(msg)
        return response.text  # type: ignore[no-any-return]
