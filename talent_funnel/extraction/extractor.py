"""LLM-based entity extraction from free-text candidate search queries."""

import logging

from talent_funnel.core.config import LLMConfig
from talent_funnel.core.schemas import CriteriaModel
from talent_funnel.extraction.base import EntityExtractor
from talent_funnel.extraction.rules import RuleBasedExtractor
from talent_funnel.llm import get_provider
from talent_funnel.llm.base import LLMProvider, parse_json_response

logger = logging.getLogger(__name__)

_EXTRACTION_SYSTEM_PROMPT = (
    "You are an expert at extracting structured information from healthcare "
    "recruitment search queries.\n\n"
    "Return ONLY a JSON object (no markdown, no explanation) with these fields:\n"
    "- jobTitles (list[str]): job titles mentioned or implied, including "
    "variations and related roles\n"
    "- locations (list[str]): locations mentioned, including expanded forms\n"
    '- experienceRange (object): {"min": int or null, "max": int or null}\n'
    "- skills (list[str]): skills, specializations or competencies mentioned\n"
    "- industries (list[str]): industries mentioned\n"
    "- education (string or null): education requirements if mentioned\n\n"
    "Be comprehensive but accurate: expand related terms but do not invent "
    "requirements the query does not state."
)

# LLM JSON key → CriteriaModel field
_FIELD_ALIASES = {
    "jobTitles": "job_titles",
    "locations": "locations",
    "experienceRange": "experience_range",
    "skills": "skills",
    "industries": "industries",
    "education": "education",
}


def _parse_criteria(raw_text: str, query: str) -> CriteriaModel:
    """Parse an extraction response into CriteriaModel.

    Accepts camelCase or snake_case keys; null fields become empty.
    Raises ValueError on malformed response.
    """
    data = parse_json_response(raw_text)
    if not isinstance(data, dict):
        msg = "LLM extraction response is not a JSON object"
        raise ValueError(msg)

    fields: dict[str, object] = {}
    for key, value in data.items():
        name = _FIELD_ALIASES.get(key, key)
        if name in _FIELD_ALIASES.values():
            fields[name] = value

    rng = fields.get("experience_range")
    if isinstance(rng, dict):
        fields["experience_range"] = {k: v for k, v in rng.items() if v is not None}

    return CriteriaModel.model_validate({**fields, "original_query": query})


class LLMEntityExtractor(EntityExtractor):
    """Extract criteria by asking an LLM provider for structured JSON."""

    def __init__(
        self,
        provider: LLMProvider,
        config: LLMConfig | None = None,
        timeout_s: float | None = None,
    ) -> None:
        self._provider = provider
        self._config = config or LLMConfig()
        self._timeout_s = timeout_s

    @classmethod
    def from_config(
        cls, config: LLMConfig, timeout_s: float | None = None,
    ) -> "LLMEntityExtractor":
        return cls(get_provider(config.provider), config, timeout_s)

    def extract(self, text: str) -> CriteriaModel:
        logger.info("Extracting search criteria with %s", self._provider.provider_id)
        raw = self._provider.complete(
            text,
            self._config.extraction_model,
            system=_EXTRACTION_SYSTEM_PROMPT,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
            timeout=self._timeout_s,
        )
        return _parse_criteria(raw, text)


def extract_criteria(
    text: str,
    extractor: EntityExtractor | None = None,
    fallback: EntityExtractor | None = None,
) -> CriteriaModel:
    """Extract criteria, never raising.

    Falls back to rule-based extraction when ``extractor`` fails, and to
    empty criteria when that fails too.
    """
    fallback = fallback or RuleBasedExtractor()
    if extractor is not None:
        try:
            criteria = extractor.extract(text)
            logger.info("Extracted criteria: %s", criteria.model_dump(exclude={"original_query"}))
            return criteria
        except Exception:
            logger.warning("Entity extraction failed; falling back to rules", exc_info=True)

    try:
        return fallback.extract(text)
    except Exception:
        logger.warning("Rule-based extraction failed; searching with empty criteria", exc_info=True)
        return CriteriaModel.empty(text)
