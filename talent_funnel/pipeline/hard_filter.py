"""Lenient hard filters applied before any scoring.

Each filter is a no-op when its criterion is absent. Active filters run
conjunctively, in order:
  1. JobTitleFilter:   containment either way, anchor words, abbreviations
  2. LocationFilter:   containment either way, case-insensitive
  3. ExperienceFilter: range widened by the tolerance (default 2 years)
  4. IndustryFilter:   only when industries other than the default are named

A candidate missing the field an active filter inspects is excluded.
"""

import logging
from collections.abc import Callable

from talent_funnel.core.config import VocabularyConfig
from talent_funnel.core.schemas import Candidate, CriteriaModel, ExperienceRange

logger = logging.getLogger(__name__)

# A filter is a callable that takes candidates and returns a subset.
Filter = Callable[[list[Candidate]], list[Candidate]]


def title_matches(candidate_title: str, criterion_title: str, vocabulary: VocabularyConfig) -> bool:
    """Lenient job-title comparison shared by the filter and the fallback scorer."""
    cand = candidate_title.lower().strip()
    crit = criterion_title.lower().strip()
    if not cand or not crit:
        return False
    if crit in cand or cand in crit:
        return True
    if any(anchor in crit and anchor in cand for anchor in vocabulary.title_anchors):
        return True
    expanded = vocabulary.abbreviations.get(crit)
    return expanded is not None and expanded in cand


def location_matches(candidate_location: str, criterion_location: str) -> bool:
    cand = candidate_location.lower().strip()
    crit = criterion_location.lower().strip()
    if not cand or not crit:
        return False
    return crit in cand or cand in crit


def widened_bounds(experience: ExperienceRange, tolerance: int) -> tuple[int, int | None]:
    """Return (min, max) widened by ``tolerance``; max is None when unbounded."""
    low = max(0, (experience.min or 0) - tolerance)
    high = experience.max + tolerance if experience.max is not None else None
    return low, high


class JobTitleFilter:
    """Keep candidates whose title leniently matches any criterion title."""

    def __init__(self, titles: list[str], vocabulary: VocabularyConfig) -> None:
        self._titles = [t for t in titles if t.strip()]
        self._vocabulary = vocabulary

    def __call__(self, candidates: list[Candidate]) -> list[Candidate]:
        if not self._titles:
            return candidates
        result = [c for c in candidates if self._matches(c)]
        logger.debug("JobTitleFilter: %d -> %d candidates", len(candidates), len(result))
        return result

    def _matches(self, candidate: Candidate) -> bool:
        if not candidate.job_title.strip():
            return False
        return any(title_matches(candidate.job_title, t, self._vocabulary) for t in self._titles)


class LocationFilter:
    """Keep candidates whose location overlaps any criterion location."""

    def __init__(self, locations: list[str]) -> None:
        self._locations = [loc for loc in locations if loc.strip()]

    def __call__(self, candidates: list[Candidate]) -> list[Candidate]:
        if not self._locations:
            return candidates
        result = [
            c for c in candidates
            if any(location_matches(c.location, loc) for loc in self._locations)
        ]
        logger.debug("LocationFilter: %d -> %d candidates", len(candidates), len(result))
        return result


class ExperienceFilter:
    """Keep candidates whose years of experience fall in the widened range."""

    def __init__(self, experience: ExperienceRange, tolerance: int = 2) -> None:
        self._active = experience.is_set
        self._low, self._high = widened_bounds(experience, tolerance)

    def __call__(self, candidates: list[Candidate]) -> list[Candidate]:
        if not self._active:
            return candidates
        result = [c for c in candidates if self._in_range(c.experience)]
        logger.debug(
            "ExperienceFilter (%d-%s): %d -> %d candidates",
            self._low, self._high if self._high is not None else "", len(candidates), len(result),
        )
        return result

    def _in_range(self, years: int | None) -> bool:
        if years is None:
            return False
        if years < self._low:
            return False
        return self._high is None or years <= self._high


class IndustryFilter:
    """Keep candidates whose industry contains a requested industry.

    Skipped entirely when the criteria include the default industry, since
    the whole pool is assumed to belong to it.
    """

    def __init__(self, industries: list[str], default_industry: str) -> None:
        requested = [i.lower().strip() for i in industries if i.strip()]
        if default_industry.lower() in requested:
            requested = []
        self._industries = requested

    def __call__(self, candidates: list[Candidate]) -> list[Candidate]:
        if not self._industries:
            return candidates
        result = [c for c in candidates if self._matches(c.industry)]
        logger.debug("IndustryFilter: %d -> %d candidates", len(candidates), len(result))
        return result

    def _matches(self, industry: str) -> bool:
        industry = industry.lower().strip()
        if not industry:
            return False
        return any(requested in industry for requested in self._industries)


def build_hard_filters(
    criteria: CriteriaModel,
    vocabulary: VocabularyConfig | None = None,
    tolerance: int = 2,
) -> list[Filter]:
    """Build the filter chain for a set of criteria."""
    vocabulary = vocabulary or VocabularyConfig()
    return [
        JobTitleFilter(criteria.job_titles, vocabulary),
        LocationFilter(criteria.locations),
        ExperienceFilter(criteria.experience_range, tolerance),
        IndustryFilter(criteria.industries, vocabulary.default_industry),
    ]


def run_filter_chain(
    candidates: list[Candidate],
    filters: list[Filter],
) -> list[Candidate]:
    """Apply filters in order, returning the surviving candidates."""
    result = candidates
    for f in filters:
        result = f(result)
    return result


def apply_hard_filters(
    pool: list[Candidate],
    criteria: CriteriaModel,
    vocabulary: VocabularyConfig | None = None,
    tolerance: int = 2,
) -> list[Candidate]:
    """Reduce the pool to structurally compatible candidates.

    Pure: the input list is not modified and the output preserves pool order.
    Entries that are not Candidate records are dropped.
    """
    valid = [c for c in pool if isinstance(c, Candidate)]
    if len(valid) != len(pool):
        logger.warning("Dropped %d malformed pool entries", len(pool) - len(valid))
    filtered = run_filter_chain(valid, build_hard_filters(criteria, vocabulary, tolerance))
    logger.info("Hard filters: %d -> %d candidates", len(pool), len(filtered))
    return filtered
