"""Tests for stage events and the stats recorder."""

import pytest
from pydantic import ValidationError

from talent_funnel.pipeline.events import EventRecorder, SearchStats, StageEvent


class TestStageEvent:
    def test_frozen(self) -> None:
        event = StageEvent(stage="filter", count=3)
        with pytest.raises(ValidationError):
            event.count = 4  # type: ignore[misc]

    def test_unknown_stage_rejected(self) -> None:
        with pytest.raises(ValidationError):
            StageEvent(stage="extract", count=1)  # type: ignore[arg-type]


class TestEventRecorder:
    def test_stats_updated_and_sink_called(self) -> None:
        received: list[StageEvent] = []
        recorder = EventRecorder(received.append)
        for event in (
            StageEvent(stage="filter", count=10),
            StageEvent(stage="rank", count=6),
            StageEvent(stage="fallback", count=1, batch_index=0),
            StageEvent(stage="batch", count=3, batch_index=0),
            StageEvent(stage="batch", count=3, batch_index=1),
            StageEvent(stage="complete", count=5),
        ):
            recorder.emit(event)

        assert len(received) == 6
        assert recorder.stats == SearchStats(
            filtered_count=10,
            forwarded_count=6,
            fallback_count=1,
            batch_count=2,
            final_count=5,
        )

    def test_no_sink(self) -> None:
        recorder = EventRecorder()
        recorder.emit(StageEvent(stage="complete", count=2))
        assert recorder.stats.final_count == 2

    def test_sink_error_propagates(self) -> None:
        def sink(event: StageEvent) -> None:
            msg = "sink down"
            raise RuntimeError(msg)

        with pytest.raises(RuntimeError, match="sink down"):
            EventRecorder(sink).emit(StageEvent(stage="filter", count=0))
