"""Core data models for the matching engine.

Inputs are plain records supplied by the caller; outputs are frozen so a
result cannot drift from the inputs that produced it.
"""

import unicodedata
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from pillar_match.core.pillars import normalize_vector


class WorkModel(str, Enum):
    REMOTE = "remote"
    HYBRID = "hybrid"
    ONSITE = "onsite"

    @classmethod
    def parse(cls, value: "str | WorkModel") -> "WorkModel":
        """Parse English or Portuguese labels (``Remoto``, ``Híbrido``, ``Presencial``)."""
        if isinstance(value, WorkModel):
            return value
        key = unicodedata.normalize("NFKD", value)
        key = "".join(ch for ch in key if ch.isalpha()).lower()
        try:
            return _WORK_MODEL_ALIASES[key]
        except KeyError:
            msg = f"Unknown work model '{value}'"
            raise ValueError(msg) from None


_WORK_MODEL_ALIASES: dict[str, WorkModel] = {
    "remote": WorkModel.REMOTE,
    "remoto": WorkModel.REMOTE,
    "hybrid": WorkModel.HYBRID,
    "hibrido": WorkModel.HYBRID,
    "onsite": WorkModel.ONSITE,
    "presencial": WorkModel.ONSITE,
    "office": WorkModel.ONSITE,
}


class AssessmentResponse(BaseModel):
    """A single Likert answer. Range is checked by the aggregator."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question_id: str = Field(validation_alias=AliasChoices("question_id", "questionId"))
    score: int


class SalaryRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float = Field(ge=0.0)
    max: float = Field(ge=0.0)

    @model_validator(mode="after")
    def max_not_below_min(self) -> "SalaryRange":
        if self.max < self.min:
            msg = f"salary max ({self.max}) is below min ({self.min})"
            raise ValueError(msg)
        return self


class CultureAlignment(BaseModel):
    """Alignment percentages produced upstream by the cultural assessment."""

    model_config = ConfigDict(frozen=True)

    work_style_alignment: float = Field(ge=0.0, le=100.0)
    value_alignment: float = Field(ge=0.0, le=100.0)


class ResumeScores(BaseModel):
    """Sub-scores produced upstream by resume analysis."""

    model_config = ConfigDict(frozen=True)

    technical_score: float = Field(ge=0.0, le=100.0)
    soft_skills_score: float = Field(ge=0.0, le=100.0)


class SkillRequirement(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    required: bool = True
    proficiency: int | None = Field(default=None, ge=1, le=5)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "skill name must not be empty"
            raise ValueError(msg)
        return v.strip()


def _ratings_in_range(v: dict[str, float]) -> dict[str, float]:
    for name, value in v.items():
        if not 1.0 <= value <= 5.0:
            msg = f"cultural rating '{name}' must lie in [1, 5], got {value}"
            raise ValueError(msg)
    return {name.lower().strip(): value for name, value in v.items()}


class CandidateFacts(BaseModel):
    """Structured resume and preference facts about a candidate."""

    model_config = ConfigDict(frozen=True)

    skills: list[str] = Field(default_factory=list)
    years_experience: float | None = Field(default=None, ge=0.0)
    work_models: list[WorkModel] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    salary: SalaryRange | None = None
    cultural_ratings: dict[str, float] = Field(default_factory=dict)
    culture_alignment: CultureAlignment | None = None
    resume: ResumeScores | None = None

    @field_validator("work_models", mode="before")
    @classmethod
    def parse_work_models(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [v]
        return [WorkModel.parse(item) for item in v]

    @field_validator("locations", mode="before")
    @classmethod
    def locations_as_list(cls, v: Any) -> Any:
        return [v] if isinstance(v, str) else v

    @field_validator("cultural_ratings")
    @classmethod
    def ratings_in_range(cls, v: dict[str, float]) -> dict[str, float]:
        return _ratings_in_range(v)


class JobFacts(BaseModel):
    """Structured requirements of a job posting."""

    model_config = ConfigDict(frozen=True)

    skills: list[SkillRequirement] = Field(default_factory=list)
    min_experience: float | None = Field(default=None, ge=0.0)
    experience_level: str | None = None
    work_model: WorkModel | None = None
    location: str | None = None
    salary: SalaryRange | None = None
    cultural_requirements: dict[str, float] = Field(default_factory=dict)

    @field_validator("skills", mode="before")
    @classmethod
    def skills_from_names(cls, v: Any) -> Any:
        return [{"name": item} if isinstance(item, str) else item for item in v]

    @field_validator("work_model", mode="before")
    @classmethod
    def parse_work_model(cls, v: Any) -> Any:
        return None if v is None else WorkModel.parse(v)

    @field_validator("cultural_requirements")
    @classmethod
    def requirements_in_range(cls, v: dict[str, float]) -> dict[str, float]:
        return _ratings_in_range(v)


class _Profile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    pillar_scores: dict[str, float] = Field(default_factory=dict)

    @field_validator("pillar_scores")
    @classmethod
    def canonical_pillars(cls, v: dict[str, float]) -> dict[str, float]:
        return normalize_vector(v)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Any:
        """Load a single profile record from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Profile file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return cls.model_validate(raw)


class CandidateProfile(_Profile):
    """Candidate record as supplied by the application layer."""

    name: str = ""
    facts: CandidateFacts | None = None


class JobProfile(_Profile):
    """Job posting record as supplied by the application layer."""

    title: str = ""
    facts: JobFacts | None = None

    @classmethod
    def list_from_yaml(cls, path: str | Path) -> list["JobProfile"]:
        """Load a list of job records (top-level ``jobs:`` key or a bare list)."""
        path = Path(path)
        if not path.exists():
            msg = f"Jobs file not found: {path}"
            raise FileNotFoundError(msg)
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or []
        if isinstance(raw, dict):
            raw = raw.get("jobs", [])
        return [cls.model_validate(item) for item in raw]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class ArchetypeResult(BaseModel):
    """Archetype with the pillars that produced it."""

    model_config = ConfigDict(frozen=True)

    archetype: str
    dominant_pillars: list[tuple[str, float]]
    confidence: str


class PillarPairSimilarity(BaseModel):
    model_config = ConfigDict(frozen=True)

    pair: str
    candidate_pillar: str
    job_pillar: str
    candidate_value: float
    job_value: float
    similarity: float = Field(ge=0.0, le=100.0)


class PillarCompatibility(BaseModel):
    """Output of the cross-pillar compatibility scorer."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    base_score: float = Field(ge=0.0, le=100.0)
    boost: int = Field(ge=0)
    breakdown: list[PillarPairSimilarity]


class ScoreBreakdown(BaseModel):
    """Six multi-factor sub-scores; None marks a factor omitted for missing facts."""

    model_config = ConfigDict(frozen=True)

    skills: float | None = None
    experience: float | None = None
    location: float | None = None
    salary: float | None = None
    culture: float | None = None
    resume: float | None = None


class MultiFactorScore(BaseModel):
    """Output of the multi-factor weighted scorer."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    breakdown: ScoreBreakdown
    factors_analyzed: dict[str, dict[str, Any]]
    effective_weights: dict[str, float]
    omitted_factors: list[str] = Field(default_factory=list)
    explanation: str


class MatchResult(BaseModel):
    """Assembled result for one candidate/job pair. Never persisted here."""

    model_config = ConfigDict(frozen=True)

    candidate_id: str
    job_id: str
    match_percentage: int = Field(ge=0, le=100)
    compatibility_score: int | None = Field(default=None, ge=0, le=100)
    qualification_score: int | None = Field(default=None, ge=0, le=100)
    candidate_archetype: str | None = None
    job_archetype: str | None = None
    archetype_boost: int = 0
    pillar_breakdown: list[PillarPairSimilarity] = Field(default_factory=list)
    score_breakdown: ScoreBreakdown | None = None
    factors_analyzed: dict[str, dict[str, Any]] = Field(default_factory=dict)
    explanation: str = ""
    is_demo_match: bool = False
