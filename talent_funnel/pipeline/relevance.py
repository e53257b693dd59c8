"""Cheap keyword relevance pass that orders candidates for deep scoring.

Points per query token: title word overlap +15, skills text +10, summary +5,
location +12. Each criteria skill overlapping a candidate skill adds +8 and
availability adds +5 (available) or +3 (passive). Zero-point candidates are
dropped; the rest are stable-sorted by points descending.
"""

import logging

from talent_funnel.core.config import ScoringConfig, VocabularyConfig
from talent_funnel.core.schemas import Availability, Candidate, CriteriaModel
from talent_funnel.pipeline.fallback_scorer import matched_skills

logger = logging.getLogger(__name__)


def tokenize_query(
    query: str,
    stopwords: list[str] | None = None,
    min_length: int = 3,
) -> list[str]:
    """Split a query on whitespace, dropping short tokens and stopwords."""
    stop = set(stopwords if stopwords is not None else VocabularyConfig().stopwords)
    return [
        token for token in query.lower().split()
        if len(token) >= min_length and token not in stop
    ]


def keyword_score(
    candidate: Candidate,
    tokens: list[str],
    criteria: CriteriaModel,
    config: ScoringConfig,
) -> float:
    """Accumulate keyword points for one candidate."""
    points = 0.0

    title_words = candidate.job_title.lower().split()
    skills_text = " ".join(candidate.skills).lower()
    summary_text = candidate.summary.lower()
    location_text = candidate.location.lower()

    for token in tokens:
        if any(token in word or word in token for word in title_words):
            points += config.keyword_title_points
        if skills_text and token in skills_text:
            points += config.keyword_skills_points
        if summary_text and token in summary_text:
            points += config.keyword_summary_points
        if location_text and token in location_text:
            points += config.keyword_location_points

    points += len(matched_skills(candidate, criteria)) * config.keyword_criteria_skill_points

    if candidate.availability is Availability.AVAILABLE:
        points += config.available_bonus
    elif candidate.availability is Availability.PASSIVE:
        points += config.passive_bonus

    return points


def rank_candidates(
    filtered: list[Candidate],
    criteria: CriteriaModel,
    query_text: str,
    config: ScoringConfig | None = None,
    vocabulary: VocabularyConfig | None = None,
) -> list[Candidate]:
    """Order candidates by keyword points, dropping those with none.

    Ties keep their input order. A candidate id seen twice keeps only its
    first occurrence.
    """
    config = config or ScoringConfig()
    vocabulary = vocabulary or VocabularyConfig()
    tokens = tokenize_query(query_text, vocabulary.stopwords, config.min_token_length)
    logger.debug("Query tokens: %s", tokens)

    seen: set[str] = set()
    scored: list[tuple[float, Candidate]] = []
    for candidate in filtered:
        if candidate.id in seen:
            continue
        seen.add(candidate.id)
        points = keyword_score(candidate, tokens, criteria, config)
        if points > 0:
            scored.append((points, candidate))

    scored.sort(key=lambda item: item[0], reverse=True)
    for position, (points, candidate) in enumerate(scored[:8], start=1):
        logger.debug("  %d. %s: %.0f points", position, candidate.name or candidate.id, points)

    logger.info("Keyword ranking: %d -> %d candidates", len(filtered), len(scored))
    return [candidate for _, candidate in scored]


def select_top(ranked: list[Candidate], top_k: int) -> list[Candidate]:
    """Bound the deep-scoring work queue to the first ``top_k`` candidates."""
    return ranked[:top_k]
