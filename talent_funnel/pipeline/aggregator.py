"""Merge the evolving match set into ordered, thresholded snapshots."""

import logging

from talent_funnel.core.schemas import CandidateMatch, ResultSnapshot

logger = logging.getLogger(__name__)

DEFAULT_INCLUSION_THRESHOLD = 25.0


def merge_matches(
    all_matches: list[CandidateMatch],
    threshold: float = DEFAULT_INCLUSION_THRESHOLD,
    *,
    batches_completed: int = 0,
    total_batches: int = 0,
) -> ResultSnapshot:
    """Build a snapshot: drop matches below ``threshold``, sort by score desc.

    Ties are broken by relevance rank, never by arrival order. Every match in
    the snapshot is a fresh copy, so later in-place updates to ``all_matches``
    are not visible through it.
    """
    kept = [m for m in all_matches if m.explanation.score >= threshold]
    kept.sort(key=lambda m: (-m.explanation.score, m.rank))
    return ResultSnapshot(
        matches=tuple(m.model_copy() for m in kept),
        batches_completed=batches_completed,
        total_batches=total_batches,
    )


class ResultAggregator:
    """Single owner of the match set for one search.

    Matches are registered once, in relevance order. Updates replace a
    match's explanation by candidate id; nothing is ever removed.
    """

    def __init__(self, threshold: float = DEFAULT_INCLUSION_THRESHOLD) -> None:
        self._threshold = threshold
        self._matches: list[CandidateMatch] = []
        self._by_id: dict[str, CandidateMatch] = {}

    def add(self, match: CandidateMatch) -> None:
        if match.candidate.id in self._by_id:
            msg = f"candidate '{match.candidate.id}' is already in the result set"
            raise ValueError(msg)
        self._matches.append(match)
        self._by_id[match.candidate.id] = match

    def get(self, candidate_id: str) -> CandidateMatch:
        return self._by_id[candidate_id]

    @property
    def matches(self) -> list[CandidateMatch]:
        return list(self._matches)

    def snapshot(self, batches_completed: int = 0, total_batches: int = 0) -> ResultSnapshot:
        snap = merge_matches(
            self._matches,
            self._threshold,
            batches_completed=batches_completed,
            total_batches=total_batches,
        )
        logger.debug(
            "Snapshot %d/%d: %d of %d matches above threshold",
            batches_completed, total_batches, len(snap), len(self._matches),
        )
        return snap
