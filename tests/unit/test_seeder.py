"""Tests for the synthetic candidate generator."""

import pytest

from talent_funnel.store.seeder import JOB_TITLES, generate_candidates


class TestGenerateCandidates:
    def test_count_and_unique_ids(self) -> None:
        pool = generate_candidates(50, seed=1)
        assert len(pool) == 50
        assert len({c.id for c in pool}) == 50
        assert pool[0].id == "cand-0001"

    def test_deterministic_for_seed(self) -> None:
        assert generate_candidates(20, seed=42) == generate_candidates(20, seed=42)

    def test_different_seeds_differ(self) -> None:
        assert generate_candidates(20, seed=1) != generate_candidates(20, seed=2)

    def test_realistic_fields(self) -> None:
        for c in generate_candidates(30, seed=3):
            assert c.job_title in JOB_TITLES
            assert 3 <= (c.experience or 0) <= 17
            assert c.industry == "Healthcare"
            assert len(c.skills) == 5
            assert c.job_title.lower() in c.summary
            assert c.email.endswith("@email.com")

    def test_zero(self) -> None:
        assert generate_candidates(0) == []

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError):
            generate_candidates(-1)
