"""Top-level candidate search: filter, rank, then deep-score in batches.

Only PipelineContractError (and whatever the caller's own callbacks raise)
escapes from here. Every collaborator failure degrades to a fallback.
"""

import asyncio
import logging
from typing import Literal

from pydantic import BaseModel

from talent_funnel.core.config import Settings
from talent_funnel.core.errors import PipelineContractError
from talent_funnel.core.schemas import Candidate, CriteriaModel, ResultSnapshot
from talent_funnel.extraction.base import EntityExtractor
from talent_funnel.extraction.extractor import LLMEntityExtractor, extract_criteria
from talent_funnel.extraction.rules import RuleBasedExtractor
from talent_funnel.pipeline.events import EventRecorder, EventSink, SearchStats, StageEvent
from talent_funnel.pipeline.hard_filter import apply_hard_filters
from talent_funnel.pipeline.llm_scorer import DeepScorer, FallbackDeepScorer, LLMDeepScorer
from talent_funnel.pipeline.orchestrator import DeepScoreOrchestrator, SnapshotSubscriber
from talent_funnel.pipeline.relevance import rank_candidates, select_top

logger = logging.getLogger(__name__)


class SearchOutcome(BaseModel):
    """Final snapshot of one search together with its criteria and counts."""

    snapshot: ResultSnapshot
    criteria: CriteriaModel
    stats: SearchStats


def build_scorer(settings: Settings) -> DeepScorer:
    """Pick the deep scorer for ``settings``.

    Uses the LLM scorer when enabled, falling back to the rules when the
    configured provider is unknown. Missing keys surface per call and are
    absorbed by the orchestrator.
    """
    if settings.llm.enabled:
        try:
            return LLMDeepScorer.from_config(settings.llm, settings.pipeline.call_timeout_s)
        except (ImportError, ValueError) as e:
            logger.warning("LLM scorer unavailable (%s); using rule-based scoring", e)
    return FallbackDeepScorer(settings.scoring, settings.vocabulary)


def build_extractor(settings: Settings) -> EntityExtractor:
    if settings.llm.enabled:
        try:
            return LLMEntityExtractor.from_config(settings.llm, settings.pipeline.call_timeout_s)
        except (ImportError, ValueError) as e:
            logger.warning("LLM extractor unavailable (%s); using rule-based extraction", e)
    return RuleBasedExtractor(settings.vocabulary.default_industry)


def _exhausted(
    stage: Literal["hard_filter", "relevance"],
    on_snapshot: SnapshotSubscriber | None,
    recorder: EventRecorder,
) -> ResultSnapshot:
    snapshot = ResultSnapshot(exhausted_stage=stage)
    logger.info("No candidates left after %s; search ends with no matches", stage)
    if on_snapshot is not None:
        on_snapshot(snapshot)
    recorder.emit(StageEvent(stage="complete", count=0, detail=f"exhausted at {stage}"))
    return snapshot


async def search_candidates(
    pool: list[Candidate],
    criteria: CriteriaModel,
    scorer: DeepScorer,
    settings: Settings | None = None,
    on_snapshot: SnapshotSubscriber | None = None,
    on_event: EventSink | None = None,
    query_text: str | None = None,
) -> SearchOutcome:
    """Run the staged funnel over ``pool`` for already-extracted criteria.

    ``on_snapshot`` receives an initial snapshot and one per completed batch
    (a single empty snapshot when a stage leaves nothing to score). The
    returned snapshot equals the last one delivered.

    Raises:
        PipelineContractError: a non-callable subscriber or sink.
    """
    if on_snapshot is not None and not callable(on_snapshot):
        msg = "on_snapshot must be callable"
        raise PipelineContractError(msg)
    if on_event is not None and not callable(on_event):
        msg = "on_event must be callable"
        raise PipelineContractError(msg)

    settings = settings or Settings()
    query_text = query_text if query_text is not None else criteria.original_query
    recorder = EventRecorder(on_event)
    recorder.stats.pool_count = len(pool)

    filtered = apply_hard_filters(
        pool,
        criteria,
        settings.vocabulary,
        settings.scoring.experience_tolerance_years,
    )
    recorder.emit(StageEvent(stage="filter", count=len(filtered)))
    if not filtered:
        snapshot = _exhausted("hard_filter", on_snapshot, recorder)
        return SearchOutcome(snapshot=snapshot, criteria=criteria, stats=recorder.stats)

    ranked = rank_candidates(
        filtered, criteria, query_text, settings.scoring, settings.vocabulary,
    )
    recorder.stats.ranked_count = len(ranked)
    forwarded = select_top(ranked, settings.pipeline.top_k)
    recorder.emit(StageEvent(stage="rank", count=len(forwarded)))
    if not forwarded:
        snapshot = _exhausted("relevance", on_snapshot, recorder)
        return SearchOutcome(snapshot=snapshot, criteria=criteria, stats=recorder.stats)

    orchestrator = DeepScoreOrchestrator(
        scorer, settings.pipeline, settings.scoring, settings.vocabulary,
    )
    snapshot = await orchestrator.run(forwarded, criteria, on_snapshot, recorder)
    return SearchOutcome(snapshot=snapshot, criteria=criteria, stats=recorder.stats)


async def run_search(
    query_text: str,
    pool: list[Candidate],
    *,
    extractor: EntityExtractor | None = None,
    scorer: DeepScorer | None = None,
    settings: Settings | None = None,
    on_snapshot: SnapshotSubscriber | None = None,
    on_event: EventSink | None = None,
) -> SearchOutcome:
    """Extract criteria from ``query_text`` and search ``pool``.

    Extraction never fails the search: a failing extractor, or one still
    running after ``call_timeout_s``, degrades to the rule tables and then
    to empty criteria.
    """
    settings = settings or Settings()
    extractor = extractor or build_extractor(settings)
    scorer = scorer or build_scorer(settings)
    fallback = RuleBasedExtractor(settings.vocabulary.default_industry)

    logger.info("Searching %d candidates for '%s'", len(pool), query_text)
    timeout_s = settings.pipeline.call_timeout_s
    try:
        criteria = await asyncio.wait_for(
            asyncio.to_thread(extract_criteria, query_text, extractor, fallback),
            timeout=timeout_s,
        )
    except asyncio.TimeoutError:
        logger.warning(
            "Entity extraction timed out after %.1fs; falling back to rules", timeout_s,
        )
        criteria = extract_criteria(query_text, None, fallback)
    return await search_candidates(
        pool,
        criteria,
        scorer,
        settings,
        on_snapshot=on_snapshot,
        on_event=on_event,
        query_text=query_text,
    )
