"""Core data models for the candidate ranking pipeline."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

EXCELLENT_THRESHOLD = 85.0
GOOD_THRESHOLD = 65.0

DEFAULT_REASON = "Match analysis completed"


class Availability(str, Enum):
    AVAILABLE = "available"
    PASSIVE = "passive"
    NOT_LOOKING = "not-looking"


class MatchCategory(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    POTENTIAL = "potential"


def category_for_score(score: float) -> MatchCategory:
    """Map a 0-100 score onto its category (85 excellent, 65 good)."""
    if score >= EXCELLENT_THRESHOLD:
        return MatchCategory.EXCELLENT
    if score >= GOOD_THRESHOLD:
        return MatchCategory.GOOD
    return MatchCategory.POTENTIAL


def clamp_score(score: float) -> float:
    return max(0.0, min(100.0, float(score)))


class Candidate(BaseModel):
    """A candidate record read from the candidate store.

    Frozen: the pipeline never writes candidates. Empty text fields and a
    missing experience value mean "unknown" to the hard filter rules.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    job_title: str = ""
    location: str = ""
    experience: int | None = Field(default=None, ge=0)
    skills: list[str] = Field(default_factory=list)
    industry: str = ""
    education: str = ""
    summary: str = ""
    availability: Availability = Availability.PASSIVE
    last_active: datetime | None = None
    email: str = ""
    phone: str = ""
    source: str = ""

    @field_validator("id")
    @classmethod
    def id_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "candidate id must not be empty"
            raise ValueError(msg)
        return v.strip()

    @field_validator("skills", mode="before")
    @classmethod
    def drop_blank_skills(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [s.strip() for s in v if isinstance(s, str) and s.strip()]
        return v


class ExperienceRange(BaseModel):
    """Requested years of experience; either bound may be absent."""

    model_config = ConfigDict(frozen=True)

    min: int | None = Field(default=None, ge=0)
    max: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def min_not_above_max(self) -> "ExperienceRange":
        if self.min is not None and self.max is not None and self.min > self.max:
            msg = f"experience min ({self.min}) must not exceed max ({self.max})"
            raise ValueError(msg)
        return self

    @property
    def is_set(self) -> bool:
        return self.min is not None or self.max is not None


class CriteriaModel(BaseModel):
    """Structured search criteria derived once per search from free text.

    List fields accept loosely-typed input (e.g. LLM output) and keep only
    non-empty strings, so downstream stages never re-check types.
    """

    model_config = ConfigDict(frozen=True)

    original_query: str = ""
    job_titles: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    industries: list[str] = Field(default_factory=list)
    experience_range: ExperienceRange = Field(default_factory=ExperienceRange)
    education: str | None = None

    @field_validator("job_titles", "locations", "skills", "industries", mode="before")
    @classmethod
    def keep_non_empty_strings(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            msg = "expected a list of strings"
            raise ValueError(msg)
        return [item.strip() for item in v if isinstance(item, str) and item.strip()]

    @field_validator("experience_range", mode="before")
    @classmethod
    def none_means_open_range(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("education", mode="before")
    @classmethod
    def blank_education_is_none(cls, v: Any) -> str | None:
        if not isinstance(v, str) or not v.strip():
            return None
        return v.strip()

    @classmethod
    def empty(cls, original_query: str = "") -> "CriteriaModel":
        """Criteria with no constraints, used when extraction fails."""
        return cls(original_query=original_query)


class MatchExplanation(BaseModel):
    """Scoring result for one candidate. Always complete once constructed.

    The score is clamped into [0, 100] and the category is derived from it,
    overriding whatever category the producer supplied.
    """

    model_config = ConfigDict(frozen=True)

    score: float
    reasons: list[str] = Field(default_factory=list, validate_default=True)
    source: Literal["fallback", "deep"] = "deep"

    @field_validator("score", mode="before")
    @classmethod
    def score_numeric(cls, v: Any) -> float:
        if isinstance(v, bool) or not isinstance(v, (int, float, str)):
            msg = f"score must be numeric, got {type(v).__name__}"
            raise ValueError(msg)
        try:
            value = float(v)
        except ValueError:
            msg = f"score must be numeric, got {v!r}"
            raise ValueError(msg) from None
        if value != value:  # NaN
            msg = "score must not be NaN"
            raise ValueError(msg)
        return clamp_score(value)

    @field_validator("reasons", mode="before")
    @classmethod
    def reasons_non_empty(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            v = []
        reasons = [str(r).strip() for r in v if r is not None and str(r).strip()]
        return reasons or [DEFAULT_REASON]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def category(self) -> MatchCategory:
        return category_for_score(self.score)


class CandidateMatch(BaseModel):
    """A candidate paired with its current explanation.

    Mutable: the orchestrator swaps ``explanation`` in place when a deep
    score arrives. ``rank`` is the relevance order position, used as the
    tie-break key when sorting.
    """

    candidate: Candidate
    explanation: MatchExplanation
    rank: int = Field(ge=0)

    @property
    def score(self) -> float:
        return self.explanation.score


class ResultSnapshot(BaseModel):
    """An ordered, thresholded, read-only view of all matches at one point.

    ``exhausted_stage`` is set when the search ended with no candidates
    because a stage filtered everything out.
    """

    model_config = ConfigDict(frozen=True)

    matches: tuple[CandidateMatch, ...] = ()
    batches_completed: int = 0
    total_batches: int = 0
    exhausted_stage: Literal["hard_filter", "relevance"] | None = None

    @property
    def is_final(self) -> bool:
        return self.batches_completed >= self.total_batches

    @property
    def no_matches(self) -> bool:
        return not self.matches

    def __len__(self) -> int:
        return len(self.matches)
