"""Integration test: full search pipeline with mock collaborators (no LLM)."""

import asyncio
import json
import time
from pathlib import Path
from textwrap import dedent

import pytest

from main import export_results_json, main
from talent_funnel.core.config import LLMConfig, PipelineConfig, Settings
from talent_funnel.core.errors import PipelineContractError
from talent_funnel.core.schemas import (
    Availability,
    Candidate,
    CriteriaModel,
    MatchExplanation,
    ResultSnapshot,
)
from talent_funnel.extraction.base import EntityExtractor
from talent_funnel.extraction.rules import RuleBasedExtractor
from talent_funnel.pipeline.events import StageEvent
from talent_funnel.pipeline.llm_scorer import DeepScorer, FallbackDeepScorer
from talent_funnel.pipeline.search import build_scorer, run_search, search_candidates
from talent_funnel.store.seeder import generate_candidates

# ---------------------------------------------------------------------------
# Mock collaborators
# ---------------------------------------------------------------------------


class MockScorer(DeepScorer):
    """Returns pre-configured scores; ids in ``fail`` raise."""

    def __init__(self, scores: dict[str, float] | None = None, fail: set[str] | None = None) -> None:
        self._scores = scores or {}
        self._fail = fail or set()
        self.calls: list[str] = []

    async def score(
        self,
        candidate: Candidate,
        criteria: CriteriaModel,
        sequence_hint: int,
    ) -> MatchExplanation:
        self.calls.append(candidate.id)
        await asyncio.sleep(0)
        if candidate.id in self._fail:
            msg = "scoring service unavailable"
            raise ConnectionError(msg)
        return MatchExplanation(score=self._scores.get(candidate.id, 75.0), reasons=["mock"])


class BrokenExtractor(EntityExtractor):
    def extract(self, text: str) -> CriteriaModel:
        msg = "extraction service down"
        raise RuntimeError(msg)


class StalledExtractor(EntityExtractor):
    """Blocks like a hung LLM request before answering."""

    def __init__(self, delay_s: float) -> None:
        self._delay_s = delay_s

    def extract(self, text: str) -> CriteriaModel:
        time.sleep(self._delay_s)
        return CriteriaModel(job_titles=["Pharmacist"], original_query=text)


def _candidate(
    id: str,
    *,
    job_title: str = "ICU Nurse",
    location: str = "Boston, MA",
    experience: int | None = 7,
    skills: list[str] | None = None,
    availability: Availability = Availability.PASSIVE,
) -> Candidate:
    return Candidate(
        id=id,
        name=f"Candidate {id}",
        job_title=job_title,
        location=location,
        experience=experience,
        skills=skills or [],
        industry="Healthcare",
        availability=availability,
    )


def _settings(**pipeline: object) -> Settings:
    values: dict[str, object] = {"batch_delay_s": 0}
    values.update(pipeline)
    return Settings(
        llm=LLMConfig(enabled=False),
        pipeline=PipelineConfig(**values),  # type: ignore[arg-type]
    )


def _pool() -> list[Candidate]:
    return [
        _candidate("a", skills=["Critical Care"]),
        _candidate("b", job_title="Staff Nurse", experience=3),
        _candidate("c", job_title="Pharmacist", location="Denver, CO", experience=10),
        _candidate("d", location="Chicago, IL", experience=1),
        _candidate("e", job_title="Nurse", experience=None),
    ]


QUERY = "ICU nurse in Boston with 5+ years"

# ---------------------------------------------------------------------------
# End-to-end
# ---------------------------------------------------------------------------


class TestRunSearch:
    async def test_full_pipeline(self) -> None:
        scorer = MockScorer(scores={"a": 92.0, "b": 40.0}, fail={"c"})
        emitted: list[ResultSnapshot] = []

        outcome = await run_search(
            QUERY,
            _pool(),
            extractor=RuleBasedExtractor(),
            scorer=scorer,
            settings=_settings(),
            on_snapshot=emitted.append,
        )

        snapshot = outcome.snapshot
        # d (1 year) and e (unknown experience) fail the widened 3+ range
        assert sorted(scorer.calls) == ["a", "b", "c"]
        assert [m.candidate.id for m in snapshot.matches] == ["a", "c", "b"]
        assert snapshot.matches[1].explanation.source == "fallback"
        assert snapshot.matches[1].score == 68.0
        assert snapshot == emitted[-1]
        assert len(emitted) == 2
        assert snapshot.is_final

        stats = outcome.stats
        assert stats.pool_count == 5
        assert stats.filtered_count == 3
        assert stats.ranked_count == 3
        assert stats.forwarded_count == 3
        assert stats.deep_scored_count == 2
        assert stats.fallback_count == 1
        assert stats.final_count == 3
        assert outcome.criteria.experience_range.min == 5

    async def test_extractor_failure_does_not_abort(self) -> None:
        outcome = await run_search(
            QUERY,
            _pool(),
            extractor=BrokenExtractor(),
            scorer=MockScorer(),
            settings=_settings(),
        )
        assert outcome.criteria.experience_range.min == 5
        assert len(outcome.snapshot) == 3

    async def test_stalled_extractor_falls_back_to_rules(self) -> None:
        emitted_at: list[float] = []
        loop = asyncio.get_running_loop()
        started = loop.time()

        outcome = await run_search(
            QUERY,
            _pool(),
            extractor=StalledExtractor(0.5),
            scorer=MockScorer(),
            settings=_settings(call_timeout_s=0.05),
            on_snapshot=lambda _: emitted_at.append(loop.time() - started),
        )

        assert emitted_at[0] < 0.4
        assert outcome.criteria.experience_range.min == 5
        assert len(outcome.snapshot) == 3

    async def test_stage_events_in_order(self) -> None:
        events: list[StageEvent] = []
        await run_search(
            QUERY,
            _pool(),
            extractor=RuleBasedExtractor(),
            scorer=MockScorer(fail={"b"}),
            settings=_settings(batch_size=2),
            on_event=events.append,
        )
        assert [e.stage for e in events] == [
            "filter", "rank", "fallback", "batch", "batch", "complete",
        ]

    async def test_top_k_bounds_deep_scoring(self) -> None:
        pool = [_candidate(f"n{i:02d}") for i in range(30)]
        scorer = MockScorer()
        outcome = await run_search(
            "nurse",
            pool,
            extractor=RuleBasedExtractor(),
            scorer=scorer,
            settings=_settings(top_k=20, batch_size=4),
        )
        assert len(scorer.calls) == 20
        assert len(outcome.snapshot) == 20
        assert outcome.snapshot.total_batches == 5
        assert outcome.stats.ranked_count == 30

    async def test_rule_only_search_over_seeded_pool(self) -> None:
        settings = _settings()
        outcome = await run_search(
            "nurse",
            generate_candidates(100, seed=11),
            extractor=RuleBasedExtractor(),
            scorer=build_scorer(settings),
            settings=settings,
        )
        scores = [m.score for m in outcome.snapshot.matches]
        assert 0 < len(scores) <= 20
        assert scores == sorted(scores, reverse=True)
        assert all(m.explanation.source == "fallback" for m in outcome.snapshot.matches)

    async def test_concurrent_searches_are_independent(self) -> None:
        high, low = MockScorer(scores={"a": 99.0}), MockScorer(scores={"a": 30.0})
        first, second = await asyncio.gather(
            run_search(QUERY, _pool(), extractor=RuleBasedExtractor(), scorer=high,
                       settings=_settings()),
            run_search(QUERY, _pool(), extractor=RuleBasedExtractor(), scorer=low,
                       settings=_settings()),
        )
        assert first.snapshot.matches[0].score == 99.0
        assert [m.score for m in second.snapshot.matches if m.candidate.id == "a"] == [30.0]


# ---------------------------------------------------------------------------
# Exhaustion and contract
# ---------------------------------------------------------------------------


class TestSearchCandidates:
    async def test_empty_pool(self) -> None:
        emitted: list[ResultSnapshot] = []
        scorer = MockScorer()
        outcome = await search_candidates(
            [], CriteriaModel(), scorer, _settings(), on_snapshot=emitted.append,
        )
        assert outcome.snapshot.no_matches
        assert outcome.snapshot.exhausted_stage == "hard_filter"
        assert emitted == [outcome.snapshot]
        assert scorer.calls == []

    async def test_hard_filter_exhaustion(self) -> None:
        crit = CriteriaModel(job_titles=["Surgeon"])
        outcome = await search_candidates(_pool(), crit, MockScorer(), _settings())
        assert outcome.snapshot.exhausted_stage == "hard_filter"
        assert outcome.stats.final_count == 0

    async def test_relevance_exhaustion(self) -> None:
        pool = [
            _candidate("x", job_title="Pharmacist", location="Denver, CO",
                       availability=Availability.NOT_LOOKING),
        ]
        emitted: list[ResultSnapshot] = []
        outcome = await search_candidates(
            pool, CriteriaModel(), MockScorer(), _settings(),
            on_snapshot=emitted.append, query_text="icu boston",
        )
        assert outcome.snapshot.exhausted_stage == "relevance"
        assert len(emitted) == 1

    async def test_non_callable_subscriber(self) -> None:
        with pytest.raises(PipelineContractError):
            await search_candidates(
                _pool(), CriteriaModel(), MockScorer(), _settings(),
                on_snapshot="print",  # type: ignore[arg-type]
            )


class TestBuildScorer:
    def test_llm_disabled_uses_rules(self) -> None:
        assert isinstance(build_scorer(_settings()), FallbackDeepScorer)

    def test_unknown_provider_uses_rules(self) -> None:
        settings = Settings(llm=LLMConfig(provider="nope"))
        assert isinstance(build_scorer(settings), FallbackDeepScorer)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _write_config(tmp_path: Path) -> Path:
    cfg = tmp_path / "settings.yaml"
    cfg.write_text(dedent(f"""\
        database:
          path: {tmp_path / "candidates.db"}
        llm:
          enabled: false
        pipeline:
          batch_delay_s: 0
    """))
    return cfg


class TestCli:
    def test_seed_then_search_project(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        cfg = _write_config(tmp_path)
        main(["seed", "--project", "demo", "--count", "25", "--seed", "5", "--config", str(cfg)])
        assert "Seeded 25 new candidates" in capsys.readouterr().out

        main(["search", "nurse", "--project", "demo", "--config", str(cfg), "--export", "json"])
        out = capsys.readouterr().out
        assert "Searching 25 candidates" in out
        assert "Search complete" in out

    def test_search_candidates_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        pool = tmp_path / "pool.json"
        pool.write_text(json.dumps([
            {"id": "p1", "name": "Ana Lee", "jobTitle": "Registered Nurse", "location": "Miami, FL",
             "experience": 6, "availability": "available", "industry": "Healthcare"},
        ]))
        main(["search", "registered nurse in Miami", "--candidates", str(pool), "--no-llm"])
        out = capsys.readouterr().out
        assert "Ana Lee" in out

    def test_no_matches(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        pool = tmp_path / "pool.yaml"
        pool.write_text("- id: p1\n  jobTitle: Pharmacist\n  location: Denver, CO\n")
        main(["search", "registered nurse", "--candidates", str(pool), "--no-llm"])
        assert "No matches" in capsys.readouterr().out

    def test_missing_candidates_file_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["search", "nurse", "--candidates", str(tmp_path / "missing.yaml"), "--no-llm"])
        assert exc.value.code == 1

    def test_missing_config_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["seed", "--project", "p", "--config", str(tmp_path / "missing.yaml")])
        assert exc.value.code == 1


class TestExportResultsJson:
    def test_renders_ranked_matches(self) -> None:
        from talent_funnel.core.schemas import CandidateMatch

        snapshot = ResultSnapshot(
            matches=(
                CandidateMatch(
                    candidate=_candidate("a"),
                    explanation=MatchExplanation(score=88, reasons=["ICU"]),
                    rank=0,
                ),
            ),
            batches_completed=1,
            total_batches=1,
        )
        data = json.loads(export_results_json(snapshot))
        assert data == [{
            "position": 1,
            "id": "a",
            "name": "Candidate a",
            "job_title": "ICU Nurse",
            "location": "Boston, MA",
            "experience": 7,
            "availability": "passive",
            "score": 88.0,
            "category": "excellent",
            "source": "deep",
            "reasons": ["ICU"],
        }]
