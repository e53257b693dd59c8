"""LLM provider registry with lazy loading.

Usage:
    from talent_funnel.llm import get_provider, parse_json_response

    provider = get_provider("openai")
    raw = provider.complete(prompt, system=system_prompt)
    data = parse_json_response(raw)
"""

import importlib

from talent_funnel.llm.base import LLMProvider, parse_json_response

__all__ = ["LLMProvider", "available_providers", "get_provider", "parse_json_response"]

# Lazy registry: maps provider name → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "anthropic": ("talent_funnel.llm.anthropic", "AnthropicProvider"),
    "openai": ("talent_funnel.llm.openai", "OpenAIProvider"),
    "gemini": ("talent_funnel.llm.gemini", "GeminiProvider"),
    "ollama": ("talent_funnel.llm.ollama", "OllamaProvider"),
}


def get_provider(name: str) -> LLMProvider:
    """Instantiate and return an LLM provider by name.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if name not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown LLM provider '{name}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[name]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls()  # type: ignore[no-any-return]


def available_providers() -> list[str]:
    """Return sorted list of registered provider names."""
    return sorted(_REGISTRY)
