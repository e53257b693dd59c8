"""Structured stage events emitted at each pipeline boundary."""

import logging
from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

Stage = Literal["filter", "rank", "batch", "fallback", "complete"]


class StageEvent(BaseModel):
    """One observable stage transition.

    ``count`` is the number of candidates the stage produced or handled:
    survivors for ``filter``, forwarded candidates for ``rank``, batch size
    for ``batch``, 1 per candidate for ``fallback`` and the final snapshot
    size for ``complete``.
    """

    model_config = ConfigDict(frozen=True)

    stage: Stage
    count: int
    batch_index: int | None = None
    detail: str = ""


EventSink = Callable[[StageEvent], None]


class SearchStats(BaseModel):
    """Counts accumulated over one search invocation."""

    pool_count: int = 0
    filtered_count: int = 0
    ranked_count: int = 0
    forwarded_count: int = 0
    batch_count: int = 0
    deep_scored_count: int = 0
    fallback_count: int = 0
    final_count: int = 0


class EventRecorder:
    """Fan stage events out to an optional sink while updating SearchStats."""

    def __init__(self, sink: EventSink | None = None, stats: SearchStats | None = None) -> None:
        self._sink = sink
        self.stats = stats or SearchStats()

    def emit(self, event: StageEvent) -> None:
        if event.stage == "filter":
            self.stats.filtered_count = event.count
        elif event.stage == "rank":
            self.stats.forwarded_count = event.count
        elif event.stage == "batch":
            self.stats.batch_count += 1
        elif event.stage == "fallback":
            self.stats.fallback_count += event.count
        elif event.stage == "complete":
            self.stats.final_count = event.count
        logger.debug("Stage event: %s", event.model_dump())
        if self._sink is not None:
            self._sink(event)
