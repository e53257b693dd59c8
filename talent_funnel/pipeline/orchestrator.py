"""Deep-scoring orchestrator: batched fan-out/fan-in with paced batches.

Data flow for one run:
  1. Attach a fallback explanation to every ranked candidate
  2. Emit the initial snapshot (before any deep score exists)
  3. For each batch of ``batch_size`` candidates, in relevance order:
     a. Score all candidates concurrently, each call bounded by a timeout
     b. Replace explanations for successes; failures keep the fallback
     c. Emit a cumulative snapshot
     d. Sleep ``batch_delay_s`` unless this was the last batch
  4. Return the last emitted snapshot
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from talent_funnel.core.config import PipelineConfig, ScoringConfig, VocabularyConfig
from talent_funnel.core.errors import PipelineContractError
from talent_funnel.core.schemas import (
    Candidate,
    CandidateMatch,
    CriteriaModel,
    MatchExplanation,
    ResultSnapshot,
)
from talent_funnel.pipeline.aggregator import ResultAggregator
from talent_funnel.pipeline.events import EventRecorder, StageEvent
from talent_funnel.pipeline.fallback_scorer import score_candidate
from talent_funnel.pipeline.llm_scorer import DeepScorer

logger = logging.getLogger(__name__)

SnapshotSubscriber = Callable[[ResultSnapshot], None]
Sleeper = Callable[[float], Awaitable[Any]]


def _coerce_explanation(result: object) -> MatchExplanation:
    """Validate a deep scorer's return value.

    Raises TypeError or ValueError when the result is unusable.
    """
    if isinstance(result, MatchExplanation):
        return result
    if isinstance(result, dict):
        return MatchExplanation.model_validate({**result, "source": "deep"})
    msg = f"deep scorer returned {type(result).__name__}, expected MatchExplanation"
    raise TypeError(msg)


def partition(candidates: list[Candidate], size: int) -> list[list[Candidate]]:
    """Split into consecutive batches of ``size`` preserving order."""
    return [candidates[i:i + size] for i in range(0, len(candidates), size)]


class DeepScoreOrchestrator:
    """Run the deep scorer over ranked candidates in paced batches.

    Holds configuration only; every ``run`` call owns its own match set, so
    one instance can serve concurrent searches.
    """

    def __init__(
        self,
        scorer: DeepScorer,
        pacing: PipelineConfig | None = None,
        scoring: ScoringConfig | None = None,
        vocabulary: VocabularyConfig | None = None,
        *,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._scorer = scorer
        self._pacing = pacing or PipelineConfig()
        self._scoring = scoring or ScoringConfig()
        self._vocabulary = vocabulary or VocabularyConfig()
        self._sleep = sleep

    async def run(
        self,
        ranked: list[Candidate],
        criteria: CriteriaModel,
        on_batch: SnapshotSubscriber | None = None,
        recorder: EventRecorder | None = None,
    ) -> ResultSnapshot:
        """Deep-score ``ranked`` and return the final snapshot.

        ``on_batch`` receives the initial snapshot and then exactly one
        snapshot per completed batch; the return value is the last of them.

        Raises:
            PipelineContractError: duplicate candidate ids, a non-callable
                subscriber or a batch size below 1.
        """
        if on_batch is not None and not callable(on_batch):
            msg = "on_batch must be callable"
            raise PipelineContractError(msg)
        if self._pacing.batch_size < 1:
            msg = f"batch_size must be >= 1, got {self._pacing.batch_size}"
            raise PipelineContractError(msg)
        _check_unique(ranked)
        recorder = recorder or EventRecorder()

        aggregator = ResultAggregator(self._pacing.inclusion_threshold)
        for rank, candidate in enumerate(ranked):
            provisional = score_candidate(candidate, criteria, self._scoring, self._vocabulary)
            aggregator.add(CandidateMatch(candidate=candidate, explanation=provisional, rank=rank))

        batches = partition(ranked, self._pacing.batch_size)
        total = len(batches)
        logger.info(
            "Deep scoring %d candidates in %d batches of up to %d",
            len(ranked), total, self._pacing.batch_size,
        )

        snapshot = aggregator.snapshot(0, total)
        _publish(on_batch, snapshot)

        for index, batch in enumerate(batches):
            first_sequence = index * self._pacing.batch_size + 1
            logger.info("Processing batch %d/%d (%d candidates)", index + 1, total, len(batch))
            outcomes = await self._score_batch(batch, criteria, first_sequence, index)

            deep_scored = 0
            for candidate, outcome in zip(batch, outcomes):
                if outcome is None:
                    recorder.emit(StageEvent(
                        stage="fallback", count=1, batch_index=index, detail=candidate.id,
                    ))
                    continue
                aggregator.get(candidate.id).explanation = outcome
                deep_scored += 1
            recorder.stats.deep_scored_count += deep_scored
            recorder.emit(StageEvent(
                stage="batch",
                count=len(batch),
                batch_index=index,
                detail=f"{deep_scored} deep-scored",
            ))

            snapshot = aggregator.snapshot(index + 1, total)
            _publish(on_batch, snapshot)

            if index + 1 < total and self._pacing.batch_delay_s > 0:
                logger.debug("Waiting %.2fs before next batch", self._pacing.batch_delay_s)
                await self._sleep(self._pacing.batch_delay_s)

        recorder.emit(StageEvent(stage="complete", count=len(snapshot)))
        logger.info(
            "Deep scoring complete: %d matches at or above %.0f",
            len(snapshot), self._pacing.inclusion_threshold,
        )
        return snapshot

    async def _score_batch(
        self,
        batch: list[Candidate],
        criteria: CriteriaModel,
        first_sequence: int,
        batch_index: int,
    ) -> list[MatchExplanation | None]:
        """Score one batch concurrently; None marks a candidate that failed.

        If the caller is cancelled mid-batch, the in-flight calls are still
        awaited before the cancellation propagates.
        """
        coros = [
            self._score_one(candidate, criteria, first_sequence + offset)
            for offset, candidate in enumerate(batch)
        ]
        gathered = asyncio.gather(*coros)
        try:
            return list(await asyncio.shield(gathered))
        except asyncio.CancelledError:
            logger.info("Search cancelled; waiting for %d in-flight calls", len(batch))
            await asyncio.wait([gathered])
            raise
        except Exception:
            logger.warning(
                "Batch %d failed; using fallback scores for %d candidates",
                batch_index + 1, len(batch), exc_info=True,
            )
            return [None] * len(batch)

    async def _score_one(
        self,
        candidate: Candidate,
        criteria: CriteriaModel,
        sequence: int,
    ) -> MatchExplanation | None:
        try:
            result = await asyncio.wait_for(
                self._scorer.score(candidate, criteria, sequence),
                timeout=self._pacing.call_timeout_s,
            )
            return _coerce_explanation(result)
        except Exception:
            logger.warning(
                "Deep scoring failed for '%s' (%s); keeping fallback score",
                candidate.name or candidate.id,
                candidate.id,
                exc_info=True,
            )
            return None


def _check_unique(ranked: list[Candidate]) -> None:
    seen: set[str] = set()
    for candidate in ranked:
        if candidate.id in seen:
            msg = f"candidate '{candidate.id}' appears more than once in the ranked list"
            raise PipelineContractError(msg)
        seen.add(candidate.id)


def _publish(subscriber: SnapshotSubscriber | None, snapshot: ResultSnapshot) -> None:
    if subscriber is not None:
        subscriber(snapshot)
