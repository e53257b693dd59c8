"""Deterministic rule-based scoring used when deep scoring is unavailable.

Score range: 0-100, floored at ``ScoringConfig.fallback_floor`` (30). Weights:
title 40 (20 baseline), location 25 (15 baseline), experience 20 (10 when
close, 15 baseline), skills up to 15 (5 baseline), default industry +10,
availability +5 available / +3 passive.
"""

import logging

from talent_funnel.core.config import ScoringConfig, VocabularyConfig
from talent_funnel.core.schemas import (
    Availability,
    Candidate,
    CriteriaModel,
    MatchExplanation,
    clamp_score,
)
from talent_funnel.pipeline.hard_filter import location_matches, title_matches, widened_bounds

logger = logging.getLogger(__name__)

GENERIC_REASON = "Candidate profile reviewed"


def skill_overlaps(candidate_skill: str, criterion_skill: str) -> bool:
    cand = candidate_skill.lower().strip()
    crit = criterion_skill.lower().strip()
    if not cand or not crit:
        return False
    return crit in cand or cand in crit


def matched_skills(candidate: Candidate, criteria: CriteriaModel) -> list[str]:
    """Return the criteria skills that overlap any of the candidate's skills."""
    return [
        skill for skill in criteria.skills
        if any(skill_overlaps(cs, skill) for cs in candidate.skills)
    ]


def score_candidate(
    candidate: Candidate,
    criteria: CriteriaModel,
    config: ScoringConfig | None = None,
    vocabulary: VocabularyConfig | None = None,
) -> MatchExplanation:
    """Score a candidate against criteria without any external call.

    Pure: the same inputs always yield an equal MatchExplanation.
    """
    config = config or ScoringConfig()
    vocabulary = vocabulary or VocabularyConfig()
    score = 0.0
    reasons: list[str] = []

    # Job title
    if criteria.job_titles:
        if any(title_matches(candidate.job_title, t, vocabulary) for t in criteria.job_titles):
            score += config.title_match_points
            reasons.append(f"Job title alignment: {candidate.job_title}")
    else:
        score += config.title_baseline_points
        reasons.append(f"Professional role: {candidate.job_title or 'Unknown'}")

    # Location
    if criteria.locations:
        if any(location_matches(candidate.location, loc) for loc in criteria.locations):
            score += config.location_match_points
            reasons.append(f"Located in target area: {candidate.location}")
    else:
        score += config.location_baseline_points
        reasons.append(f"Available location: {candidate.location or 'Unknown'}")

    # Experience
    years = candidate.experience or 0
    if criteria.experience_range.is_set:
        low, high = widened_bounds(criteria.experience_range, config.experience_tolerance_years)
        if years >= low and (high is None or years <= high):
            score += config.experience_match_points
            reasons.append(f"Experience level: {years} years meets requirements")
        elif years >= low - config.experience_tolerance_years:
            score += config.experience_close_points
            reasons.append(f"Close experience match: {years} years")
    else:
        score += config.experience_baseline_points
        reasons.append(f"{years} years of experience")

    # Skills
    skills = matched_skills(candidate, criteria)
    if skills:
        score += min(config.skill_match_cap, len(skills) * config.skill_match_points)
        reasons.append(f"Relevant skills: {', '.join(skills)}")
    elif candidate.skills:
        score += config.skill_baseline_points
        reasons.append(f"Professional skills: {', '.join(candidate.skills[:2])}")

    if candidate.industry.strip().lower() == vocabulary.default_industry.lower():
        score += config.industry_points
        reasons.append(f"{vocabulary.default_industry} industry experience")

    if candidate.availability is Availability.AVAILABLE:
        score += config.available_bonus
        reasons.append("Currently available")
    elif candidate.availability is Availability.PASSIVE:
        score += config.passive_bonus
        reasons.append("Open to opportunities")

    if not reasons:
        reasons.append(GENERIC_REASON)

    final = max(clamp_score(score), config.fallback_floor)
    return MatchExplanation(score=final, reasons=reasons, source="fallback")
