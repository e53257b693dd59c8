"""Tests for result merging and snapshots."""

import pytest

from talent_funnel.core.schemas import Candidate, CandidateMatch, MatchExplanation
from talent_funnel.pipeline.aggregator import ResultAggregator, merge_matches


def _match(id: str, score: float, rank: int) -> CandidateMatch:
    return CandidateMatch(
        candidate=Candidate(id=id, name=f"Candidate {id}"),
        explanation=MatchExplanation(score=score),
        rank=rank,
    )


def _ids(snapshot_matches: tuple[CandidateMatch, ...]) -> list[str]:
    return [m.candidate.id for m in snapshot_matches]


class TestMergeMatches:
    def test_threshold_inclusive(self) -> None:
        matches = [_match("a", 25, 0), _match("b", 24.9, 1), _match("c", 80, 2)]
        snap = merge_matches(matches)
        assert _ids(snap.matches) == ["c", "a"]

    def test_sorted_by_score_desc(self) -> None:
        matches = [_match("a", 40, 0), _match("b", 90, 1), _match("c", 65, 2)]
        assert _ids(merge_matches(matches).matches) == ["b", "c", "a"]

    def test_ties_broken_by_rank_not_input_order(self) -> None:
        matches = [_match("late", 70, 5), _match("early", 70, 1), _match("mid", 70, 3)]
        assert _ids(merge_matches(matches).matches) == ["early", "mid", "late"]

    def test_custom_threshold(self) -> None:
        matches = [_match("a", 50, 0), _match("b", 60, 1)]
        assert _ids(merge_matches(matches, 55).matches) == ["b"]

    def test_batch_progress_recorded(self) -> None:
        snap = merge_matches([], batches_completed=2, total_batches=5)
        assert snap.batches_completed == 2
        assert snap.total_batches == 5
        assert snap.is_final is False

    def test_snapshot_holds_copies(self) -> None:
        original = _match("a", 50, 0)
        snap = merge_matches([original])
        original.explanation = MatchExplanation(score=95)
        assert snap.matches[0].score == 50.0
        assert snap.matches[0] is not original


class TestResultAggregator:
    def test_update_visible_in_next_snapshot_only(self) -> None:
        agg = ResultAggregator()
        agg.add(_match("a", 40, 0))
        agg.add(_match("b", 50, 1))
        first = agg.snapshot(0, 1)

        agg.get("a").explanation = MatchExplanation(score=99)
        second = agg.snapshot(1, 1)

        assert _ids(first.matches) == ["b", "a"]
        assert _ids(second.matches) == ["a", "b"]
        assert first.matches[1].score == 40.0

    def test_duplicate_add_rejected(self) -> None:
        agg = ResultAggregator()
        agg.add(_match("a", 40, 0))
        with pytest.raises(ValueError, match="already in the result set"):
            agg.add(_match("a", 60, 1))

    def test_matches_never_removed(self) -> None:
        agg = ResultAggregator(threshold=50)
        agg.add(_match("a", 40, 0))
        assert len(agg.snapshot()) == 0
        assert len(agg.matches) == 1
