"""Configuration models and YAML loader for the candidate ranking pipeline."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

_DEFAULT_TITLE_ANCHORS = ["nurse", "administrator", "technologist", "therapist"]

_DEFAULT_ABBREVIATIONS = {
    "rn": "nurse",
    "np": "practitioner",
    "lpn": "practical",
    "cns": "specialist",
}

_DEFAULT_STOPWORDS = ["the", "and", "or", "in", "at", "with", "for", "of", "to", "a", "an"]


class DatabaseConfig(BaseModel):
    """Candidate store configuration."""

    path: str = "data/candidates.db"


class LLMConfig(BaseModel):
    """LLM provider used for entity extraction and deep scoring."""

    enabled: bool = True
    provider: str = "openai"
    extraction_model: str | None = None
    scoring_model: str | None = None
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1)

    @field_validator("provider")
    @classmethod
    def provider_lowercase(cls, v: str) -> str:
        return v.lower().strip()


class PipelineConfig(BaseModel):
    """Pacing policy for the deep-scoring stage."""

    batch_size: int = Field(default=3, ge=1)
    batch_delay_s: float = Field(default=0.3, ge=0.0)
    top_k: int = Field(default=20, ge=1)
    inclusion_threshold: float = Field(default=25.0, ge=0.0, le=100.0)
    call_timeout_s: float = Field(default=30.0, gt=0.0)


class ScoringConfig(BaseModel):
    """Weights for the fallback scorer and the keyword relevance pass."""

    # Fallback scorer
    title_match_points: float = 40.0
    title_baseline_points: float = 20.0
    location_match_points: float = 25.0
    location_baseline_points: float = 15.0
    experience_match_points: float = 20.0
    experience_close_points: float = 10.0
    experience_baseline_points: float = 15.0
    skill_match_points: float = 5.0
    skill_match_cap: float = 15.0
    skill_baseline_points: float = 5.0
    industry_points: float = 10.0
    available_bonus: float = 5.0
    passive_bonus: float = 3.0
    fallback_floor: float = Field(default=30.0, ge=0.0, le=100.0)
    experience_tolerance_years: int = Field(default=2, ge=0)

    # Keyword relevance pass
    keyword_title_points: float = 15.0
    keyword_skills_points: float = 10.0
    keyword_summary_points: float = 5.0
    keyword_location_points: float = 12.0
    keyword_criteria_skill_points: float = 8.0
    min_token_length: int = Field(default=3, ge=1)


class VocabularyConfig(BaseModel):
    """Domain vocabulary for lenient title matching.

    Defaults target healthcare recruiting; override in settings.yaml to
    retarget the filter to another profession family.
    """

    default_industry: str = "Healthcare"
    title_anchors: list[str] = Field(default_factory=lambda: list(_DEFAULT_TITLE_ANCHORS))
    abbreviations: dict[str, str] = Field(default_factory=lambda: dict(_DEFAULT_ABBREVIATIONS))
    stopwords: list[str] = Field(default_factory=lambda: list(_DEFAULT_STOPWORDS))

    @field_validator("title_anchors", "stopwords")
    @classmethod
    def normalise_words(cls, v: list[str]) -> list[str]:
        return [w.lower().strip() for w in v if w.strip()]

    @field_validator("abbreviations")
    @classmethod
    def normalise_abbreviations(cls, v: dict[str, str]) -> dict[str, str]:
        return {k.lower().strip(): val.lower().strip() for k, val in v.items() if k.strip()}


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    vocabulary: VocabularyConfig = Field(default_factory=VocabularyConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
