"""Deep scorers: the expensive per-candidate relevance judgment.

``LLMDeepScorer`` asks an LLM provider for a recruiter-style assessment;
``FallbackDeepScorer`` runs the deterministic rules when no LLM is used.
Both raise on failure. Recovery is the orchestrator's job.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

from talent_funnel.core.config import LLMConfig, ScoringConfig, VocabularyConfig
from talent_funnel.core.schemas import Candidate, CriteriaModel, MatchExplanation
from talent_funnel.llm import get_provider
from talent_funnel.llm.base import LLMProvider, parse_json_response
from talent_funnel.pipeline.fallback_scorer import score_candidate

logger = logging.getLogger(__name__)

_SCORING_SYSTEM_PROMPT = (
    "You are an expert healthcare recruiter evaluating candidate matches.\n\n"
    "Analyze how well a candidate matches the search criteria and provide a "
    "detailed assessment.\n\n"
    "Return ONLY a JSON object (no markdown, no explanation) with this structure:\n"
    '{"score": <number 0-100>, "reasons": ["<specific reason>", ...], '
    '"category": "excellent" | "good" | "potential"}\n\n'
    "SCORING GUIDELINES:\n"
    "  90-100: Excellent match: meets all or most key criteria\n"
    "  70-89:  Good match: meets most criteria with minor gaps\n"
    "  50-69:  Potential match: meets some criteria, could grow into the role\n"
    "  30-49:  Weak match: significant gaps but some relevance\n"
    "  0-29:   Poor match: minimal relevance\n\n"
    "WEIGHTING:\n"
    "  1. Job title alignment (40%)\n"
    "  2. Location match (25%)\n"
    "  3. Experience level (20%)\n"
    "  4. Skills and specializations (15%)"
)


def _join_or(values: list[str], default: str) -> str:
    return ", ".join(values) if values else default


def _describe_experience(criteria: CriteriaModel) -> str:
    rng = criteria.experience_range
    if rng.min is not None and rng.max is not None:
        return f"{rng.min}-{rng.max} years"
    if rng.min is not None:
        return f"{rng.min}+ years"
    if rng.max is not None:
        return f"up to {rng.max} years"
    return "Not specified"


def _build_user_prompt(candidate: Candidate, criteria: CriteriaModel) -> str:
    """Assemble the user prompt from the query criteria and candidate profile."""
    criteria_section = (
        f'SEARCH QUERY: "{criteria.original_query}"\n\n'
        "EXTRACTED CRITERIA:\n"
        f"- Job Titles: {_join_or(criteria.job_titles, 'None specified')}\n"
        f"- Locations: {_join_or(criteria.locations, 'None specified')}\n"
        f"- Experience Range: {_describe_experience(criteria)}\n"
        f"- Skills: {_join_or(criteria.skills, 'None specified')}\n"
        f"- Industries: {_join_or(criteria.industries, 'None specified')}\n"
        f"- Education: {criteria.education or 'Not specified'}\n"
    )

    experience = (
        f"{candidate.experience} years" if candidate.experience is not None else "Unknown"
    )
    candidate_section = (
        "CANDIDATE PROFILE:\n"
        f"- Name: {candidate.name or 'Unknown'}\n"
        f"- Job Title: {candidate.job_title or 'Unknown'}\n"
        f"- Location: {candidate.location or 'Unknown'}\n"
        f"- Experience: {experience}\n"
        f"- Skills: {_join_or(candidate.skills, 'None listed')}\n"
        f"- Industry: {candidate.industry or 'Unknown'}\n"
        f"- Education: {candidate.education or 'Not specified'}\n"
        f"- Summary: {candidate.summary or 'No summary available'}\n"
        f"- Availability: {candidate.availability.value}\n"
    )

    return (
        f"{criteria_section}\n{candidate_section}\n"
        "Evaluate this match and provide detailed scoring with specific reasons."
    )


def _parse_match_response(raw_text: str) -> MatchExplanation:
    """Parse an LLM JSON response into a MatchExplanation.

    Handles markdown-wrapped JSON. Clamps score to 0-100, defaults missing
    reasons. Raises ValueError on malformed response.
    """
    data = parse_json_response(raw_text)
    if not isinstance(data, dict):
        msg = "LLM match response is not a JSON object"
        raise ValueError(msg)
    if "score" not in data:
        msg = "LLM response missing 'score' field"
        raise ValueError(msg)

    # pydantic's ValidationError is a ValueError subclass
    return MatchExplanation(score=data["score"], reasons=data.get("reasons"), source="deep")


class DeepScorer(ABC):
    """Asynchronous per-candidate scoring collaborator."""

    @abstractmethod
    async def score(
        self,
        candidate: Candidate,
        criteria: CriteriaModel,
        sequence_hint: int,
    ) -> MatchExplanation:
        """Judge one candidate. ``sequence_hint`` is for diagnostics only."""


class LLMDeepScorer(DeepScorer):
    """Score candidates with an LLM provider.

    The blocking provider call runs in a worker thread and is bounded by
    ``timeout_s`` twice: the SDK client gets it as its request timeout so the
    thread ends, and the await gives up after it with ``TimeoutError``.
    """

    def __init__(
        self,
        provider: LLMProvider,
        config: LLMConfig | None = None,
        timeout_s: float = 30.0,
    ) -> None:
        self._provider = provider
        self._config = config or LLMConfig()
        self._timeout_s = timeout_s

    @classmethod
    def from_config(cls, config: LLMConfig, timeout_s: float = 30.0) -> "LLMDeepScorer":
        return cls(get_provider(config.provider), config, timeout_s)

    async def score(
        self,
        candidate: Candidate,
        criteria: CriteriaModel,
        sequence_hint: int,
    ) -> MatchExplanation:
        prompt = _build_user_prompt(candidate, criteria)
        logger.debug("Deep scoring #%d: %s", sequence_hint, candidate.name or candidate.id)
        raw = await asyncio.wait_for(
            asyncio.to_thread(
                self._provider.complete,
                prompt,
                self._config.scoring_model,
                system=_SCORING_SYSTEM_PROMPT,
                temperature=self._config.temperature,
                max_tokens=self._config.max_tokens,
                timeout=self._timeout_s,
            ),
            timeout=self._timeout_s,
        )
        explanation = _parse_match_response(raw)
        logger.debug(
            "Deep score #%d %s: %.0f (%s)",
            sequence_hint, candidate.id, explanation.score, explanation.category.value,
        )
        return explanation


class FallbackDeepScorer(DeepScorer):
    """Deep-scorer stand-in that applies the rule-based scorer."""

    def __init__(
        self,
        config: ScoringConfig | None = None,
        vocabulary: VocabularyConfig | None = None,
    ) -> None:
        self._config = config or ScoringConfig()
        self._vocabulary = vocabulary or VocabularyConfig()

    async def score(
        self,
        candidate: Candidate,
        criteria: CriteriaModel,
        sequence_hint: int,
    ) -> MatchExplanation:
        return score_candidate(candidate, criteria, self._config, self._vocabulary)
