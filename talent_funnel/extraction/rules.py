"""Rule-based entity extraction used when no LLM is available or it fails."""

import logging
import re

from talent_funnel.core.schemas import CriteriaModel, ExperienceRange
from talent_funnel.extraction.base import EntityExtractor

logger = logging.getLogger(__name__)

JOB_TITLE_EXPANSIONS: dict[str, list[str]] = {
    "registered nurse": ["Registered Nurse", "RN", "Staff Nurse", "Bedside Nurse"],
    "rn": ["Registered Nurse", "RN", "Staff Nurse"],
    "nurse practitioner": ["Nurse Practitioner", "NP", "Advanced Practice Nurse"],
    "emergency room nurse": ["Emergency Room Nurse", "ER Nurse", "Emergency Nurse"],
    "clinical nurse specialist": ["Clinical Nurse Specialist", "CNS"],
    "licensed practical nurse": ["Licensed Practical Nurse", "LPN"],
    "healthcare administrator": ["Healthcare Administrator", "Medical Administrator"],
    "director of nursing": ["Director of Nursing", "DON", "Nursing Director"],
    "physical therapist": ["Physical Therapist", "PT", "Physiotherapist"],
    "occupational therapist": ["Occupational Therapist", "OT"],
    "respiratory therapist": ["Respiratory Therapist", "RT"],
}

LOCATION_EXPANSIONS: dict[str, list[str]] = {
    "new york": ["New York", "NY", "New York City", "NYC"],
    "ny": ["New York", "NY"],
    "los angeles": ["Los Angeles", "LA", "California"],
    "la": ["Los Angeles", "LA"],
    "london": ["London", "UK", "United Kingdom"],
    "toronto": ["Toronto", "Canada"],
    "chicago": ["Chicago", "IL", "Illinois"],
    "miami": ["Miami", "FL", "Florida"],
}

SKILL_MAPPINGS: dict[str, list[str]] = {
    "pediatric": ["Pediatric Care", "Pediatric Nursing", "Child Healthcare"],
    "oncology": ["Oncology", "Cancer Care", "Chemotherapy"],
    "icu": ["ICU", "Intensive Care", "Critical Care"],
    "emergency": ["Emergency Medicine", "Trauma Care", "Emergency Response"],
    "spanish": ["Spanish Language", "Bilingual", "Spanish Fluency"],
    "bilingual": ["Bilingual", "Multilingual"],
    "ehr": ["Electronic Health Records", "EHR", "Medical Records"],
    "surgery": ["Surgical", "Operating Room", "Perioperative Care"],
    "physical therapy": ["Physical Therapy", "Rehabilitation", "PT"],
    "occupational therapy": ["Occupational Therapy", "Rehabilitation", "OT"],
    "respiratory therapy": ["Respiratory Therapy", "Pulmonary Care", "RT"],
}

INDUSTRY_KEYWORDS = (
    "healthcare", "hospital", "clinic", "medical", "nursing", "therapy", "rehabilitation",
)

# (pattern, has_upper_bound)
_EXPERIENCE_PATTERNS: list[tuple[re.Pattern[str], bool]] = [
    (re.compile(r"(\d+)\s*\+\s*years?", re.IGNORECASE), False),
    (re.compile(r"(\d+)\s*to\s*(\d+)\s*years?", re.IGNORECASE), True),
    (re.compile(r"(\d+)\s*-\s*(\d+)\s*years?", re.IGNORECASE), True),
    (re.compile(r"at least\s*(\d+)\s*years?", re.IGNORECASE), False),
    (re.compile(r"minimum\s*(\d+)\s*years?", re.IGNORECASE), False),
]


def _contains_key(text: str, key: str) -> bool:
    # Short keys ("rn", "la", "ny") only count as whole words.
    if len(key) <= 3:
        return re.search(rf"\b{re.escape(key)}\b", text) is not None
    return key in text


def _expand(text: str, table: dict[str, list[str]]) -> list[str]:
    found: dict[str, None] = {}
    for key, values in table.items():
        if _contains_key(text, key):
            for value in values:
                found.setdefault(value, None)
    return list(found)


def extract_job_titles(query: str) -> list[str]:
    return _expand(query.lower(), JOB_TITLE_EXPANSIONS)


def extract_locations(query: str) -> list[str]:
    return _expand(query.lower(), LOCATION_EXPANSIONS)


def extract_skills(query: str) -> list[str]:
    return _expand(query.lower(), SKILL_MAPPINGS)


def extract_industries(query: str, default_industry: str = "Healthcare") -> list[str]:
    """Every keyword names the default industry, so any hit maps onto it."""
    lowered = query.lower()
    if any(keyword in lowered for keyword in INDUSTRY_KEYWORDS):
        return [default_industry]
    return []


def extract_experience(query: str) -> ExperienceRange:
    """Return the first experience requirement found, or an open range."""
    for pattern, bounded in _EXPERIENCE_PATTERNS:
        match = pattern.search(query)
        if match is None:
            continue
        low = int(match.group(1))
        if not bounded:
            return ExperienceRange(min=low)
        high = int(match.group(2))
        return ExperienceRange(min=min(low, high), max=max(low, high))
    return ExperienceRange()


class RuleBasedExtractor(EntityExtractor):
    """Keyword-table extraction over the healthcare vocabulary."""

    def __init__(self, default_industry: str = "Healthcare") -> None:
        self._default_industry = default_industry

    def extract(self, text: str) -> CriteriaModel:
        criteria = CriteriaModel(
            original_query=text,
            job_titles=extract_job_titles(text),
            locations=extract_locations(text),
            experience_range=extract_experience(text),
            skills=extract_skills(text),
            industries=extract_industries(text, self._default_industry),
        )
        logger.debug("Rule-based extraction: %s", criteria.model_dump())
        return criteria
