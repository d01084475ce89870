"""Methodology configuration models and YAML loader.

Every static table the engine consumes (question maps, archetype matrices,
cross-pillar correspondence, archetype adjacency, factor weights) lives here as
data. Defaults reproduce the reference methodology, so ``MethodologyConfig()``
works without a file; ``config/methodology.yaml`` carries the same tables.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pillar_match.core.pillars import (
    CANDIDATE_PILLARS,
    JOB_PILLARS,
    Vocabulary,
    normalize_pillar_name,
    vocabulary_of,
)

logger = logging.getLogger(__name__)

ARCHETYPES: tuple[str, ...] = (
    "Protagonista",
    "Construtor",
    "Visionário",
    "Mobilizador",
    "Guardião",
    "Explorador",
    "Colaborador",
    "Equilibrado",
    "Estrategista",
    "Transformador",
    "Idealista",
    "Pragmático",
    "Proativo",
)
FALLBACK_ARCHETYPE = "Equilibrado"

FACTOR_NAMES: tuple[str, ...] = ("skills", "experience", "location", "salary", "culture", "resume")


def _questions(prefix: str, start: int, stop: int) -> list[str]:
    return [f"{prefix}{i}" for i in range(start, stop + 1)]


def _symmetric(pairs: dict[tuple[str, str], str]) -> dict[str, str]:
    matrix: dict[str, str] = {}
    for (a, b), archetype in pairs.items():
        matrix[f"{a}_{b}"] = archetype
        matrix[f"{b}_{a}"] = archetype
    return matrix


_JOB_MATRIX = _symmetric({
    ("Autonomia", "Liderança"): "Protagonista",
    ("Autonomia", "TrabalhoGrupo"): "Mobilizador",
    ("Risco", "Ambição"): "Transformador",
    ("Liderança", "Ambição"): "Visionário",
    ("TrabalhoGrupo", "Risco"): "Explorador",
    ("Autonomia", "Risco"): "Proativo",
    ("Liderança", "TrabalhoGrupo"): "Idealista",
    ("Risco", "Liderança"): "Estrategista",
    ("Ambição", "TrabalhoGrupo"): "Colaborador",
    ("Autonomia", "Ambição"): "Guardião",
})

# Ambiente/Crescimento and Propósito/Ambiente depend on which pillar leads.
_CANDIDATE_MATRIX = {
    **_symmetric({
        ("Crescimento", "Propósito"): "Protagonista",
        ("Compensation", "Ambiente"): "Guardião",
        ("Compensation", "Crescimento"): "Pragmático",
        ("Compensation", "Propósito"): "Estrategista",
    }),
    "Ambiente_Crescimento": "Construtor",
    "Crescimento_Ambiente": "Mobilizador",
    "Propósito_Ambiente": "Visionário",
    "Ambiente_Propósito": "Idealista",
}


class QuestionsConfig(BaseModel):
    """Question-to-pillar maps for both assessments."""

    model_config = ConfigDict(frozen=True)

    candidate: dict[str, list[str]] = Field(default_factory=lambda: {
        "Compensation": _questions("q", 1, 7),
        "Ambiente": _questions("q", 8, 14),
        "Propósito": _questions("q", 15, 21),
        "Crescimento": _questions("q", 22, 30),
    })
    job: dict[str, list[str]] = Field(default_factory=lambda: {
        "Autonomia": _questions("q", 1, 6),
        "Liderança": _questions("q", 7, 12),
        "TrabalhoGrupo": _questions("q", 13, 18),
        "Risco": _questions("q", 19, 24),
        "Ambição": _questions("q", 25, 30),
    })
    # Contrasting statements, inverted as 6 - score before averaging.
    candidate_reverse_scored: list[str] = Field(
        default_factory=lambda: ["q6", "q14", "q20", "q28"],
    )
    job_reverse_scored: list[str] = Field(default_factory=list)

    @field_validator("candidate", "job")
    @classmethod
    def normalize_pillars(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        normalized = {normalize_pillar_name(k): list(qs) for k, qs in v.items()}
        if len({vocabulary_of(p) for p in normalized}) > 1:
            msg = "a question map must use a single pillar vocabulary"
            raise ValueError(msg)
        return normalized

    def for_vocabulary(self, vocabulary: Vocabulary) -> dict[str, list[str]]:
        return self.candidate if vocabulary is Vocabulary.CANDIDATE else self.job

    def reverse_for(self, vocabulary: Vocabulary) -> list[str]:
        if vocabulary is Vocabulary.CANDIDATE:
            return self.candidate_reverse_scored
        return self.job_reverse_scored


class ArchetypeConfig(BaseModel):
    """Dominant-pair lookup matrices, keyed ``"<first>_<second>"``."""

    model_config = ConfigDict(frozen=True)

    candidate_matrix: dict[str, str] = Field(default_factory=lambda: dict(_CANDIDATE_MATRIX))
    job_matrix: dict[str, str] = Field(default_factory=lambda: dict(_JOB_MATRIX))
    fallback: str = FALLBACK_ARCHETYPE
    # Profiles whose highest and lowest pillars differ by less than this are
    # balanced. None disables the rule for that vocabulary.
    candidate_balanced_spread: float | None = Field(default=0.5, ge=0.0)
    job_balanced_spread: float | None = Field(default=None, ge=0.0)
    high_confidence_gap: float = Field(default=0.7, ge=0.0)
    medium_confidence_gap: float = Field(default=0.3, ge=0.0)

    @field_validator("candidate_matrix", "job_matrix")
    @classmethod
    def normalize_matrix(cls, v: dict[str, str]) -> dict[str, str]:
        matrix: dict[str, str] = {}
        for key, archetype in v.items():
            parts = key.split("_")
            if len(parts) != 2:
                msg = f"matrix key '{key}' must have the form '<pillar>_<pillar>'"
                raise ValueError(msg)
            first, second = (normalize_pillar_name(p) for p in parts)
            if archetype not in ARCHETYPES:
                msg = f"unknown archetype '{archetype}' for pair '{key}'"
                raise ValueError(msg)
            matrix[f"{first}_{second}"] = archetype
        return matrix

    @field_validator("fallback")
    @classmethod
    def fallback_is_archetype(cls, v: str) -> str:
        if v not in ARCHETYPES:
            msg = f"fallback must be one of {list(ARCHETYPES)}, got '{v}'"
            raise ValueError(msg)
        return v

    def matrix_for(self, vocabulary: Vocabulary) -> dict[str, str]:
        return self.candidate_matrix if vocabulary is Vocabulary.CANDIDATE else self.job_matrix

    def balanced_spread_for(self, vocabulary: Vocabulary) -> float | None:
        if vocabulary is Vocabulary.CANDIDATE:
            return self.candidate_balanced_spread
        return self.job_balanced_spread


class CompatibilityConfig(BaseModel):
    """Cross-pillar correspondence, similarity factor and archetype boosts."""

    model_config = ConfigDict(frozen=True)

    correspondence: dict[str, str] = Field(default_factory=lambda: {
        "Compensation": "Ambição",
        "Ambiente": "TrabalhoGrupo",
        "Propósito": "Liderança",
        "Crescimento": "Autonomia",
    })
    include_risk_pair: bool = False
    risk_pair: tuple[str, str] = ("Crescimento", "Risco")
    similarity_factor: float = Field(default=20.0, gt=0.0)
    identical_boost: int = Field(default=10, ge=0)
    adjacent_boost: int = Field(default=5, ge=0)
    adjacency: list[tuple[str, str]] = Field(default_factory=lambda: [
        ("Protagonista", "Transformador"),
        ("Construtor", "Mobilizador"),
        ("Guardião", "Pragmático"),
        ("Visionário", "Estrategista"),
        ("Explorador", "Proativo"),
        ("Idealista", "Colaborador"),
    ])

    @field_validator("correspondence")
    @classmethod
    def correspondence_crosses_vocabularies(cls, v: dict[str, str]) -> dict[str, str]:
        mapping: dict[str, str] = {}
        for candidate_pillar, job_pillar in v.items():
            c = normalize_pillar_name(candidate_pillar)
            j = normalize_pillar_name(job_pillar)
            if c not in CANDIDATE_PILLARS or j not in JOB_PILLARS:
                msg = f"correspondence must map a candidate pillar to a job pillar, got {c} -> {j}"
                raise ValueError(msg)
            mapping[c] = j
        if not mapping:
            msg = "correspondence must not be empty"
            raise ValueError(msg)
        return mapping

    @field_validator("risk_pair")
    @classmethod
    def risk_pair_crosses_vocabularies(cls, v: tuple[str, str]) -> tuple[str, str]:
        c, j = normalize_pillar_name(v[0]), normalize_pillar_name(v[1])
        if c not in CANDIDATE_PILLARS or j not in JOB_PILLARS:
            msg = f"risk_pair must be (candidate pillar, job pillar), got ({c}, {j})"
            raise ValueError(msg)
        return (c, j)

    @field_validator("adjacency")
    @classmethod
    def adjacency_uses_archetypes(cls, v: list[tuple[str, str]]) -> list[tuple[str, str]]:
        for a, b in v:
            for name in (a, b):
                if name not in ARCHETYPES:
                    msg = f"unknown archetype '{name}' in adjacency"
                    raise ValueError(msg)
        return v

    def are_adjacent(self, first: str, second: str) -> bool:
        return frozenset((first, second)) in {frozenset(pair) for pair in self.adjacency}


class FactorWeights(BaseModel):
    """Relative weight of each multi-factor sub-score. Must sum to 1.0."""

    model_config = ConfigDict(frozen=True)

    skills: float = Field(default=0.25, ge=0.0, le=1.0)
    experience: float = Field(default=0.20, ge=0.0, le=1.0)
    location: float = Field(default=0.15, ge=0.0, le=1.0)
    salary: float = Field(default=0.15, ge=0.0, le=1.0)
    culture: float = Field(default=0.15, ge=0.0, le=1.0)
    resume: float = Field(default=0.10, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def weights_sum_to_one(self) -> "FactorWeights":
        total = sum(self.as_dict().values())
        if abs(total - 1.0) > 1e-6:
            msg = f"factor weights must sum to 1.0, got {total:.4f}"
            raise ValueError(msg)
        return self

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in FACTOR_NAMES}


class ExperienceBand(BaseModel):
    """Years of experience expected for a seniority level."""

    model_config = ConfigDict(frozen=True)

    min: float = Field(ge=0.0)
    max: float = Field(ge=0.0)

    @model_validator(mode="after")
    def max_not_below_min(self) -> "ExperienceBand":
        if self.max < self.min:
            msg = f"experience band max ({self.max}) is below min ({self.min})"
            raise ValueError(msg)
        return self


class FactorsConfig(BaseModel):
    """Parameters of the individual multi-factor sub-scores."""

    model_config = ConfigDict(frozen=True)

    experience_levels: dict[str, ExperienceBand] = Field(default_factory=lambda: {
        "Júnior": ExperienceBand(min=0, max=3),
        "Pleno": ExperienceBand(min=2, max=6),
        "Sênior": ExperienceBand(min=5, max=10),
        "Especialista": ExperienceBand(min=7, max=15),
        "Coordenador": ExperienceBand(min=5, max=12),
        "Gerente": ExperienceBand(min=8, max=20),
        "Diretor": ExperienceBand(min=10, max=25),
        "VP/C-Level": ExperienceBand(min=15, max=30),
    })
    overqualified_penalty_per_year: float = Field(default=10.0, ge=0.0)
    overqualified_floor: float = Field(default=40.0, ge=0.0, le=100.0)
    salary_tolerance: float = Field(default=0.25, gt=0.0)
    salary_near_miss_score: float = Field(default=20.0, ge=0.0, le=100.0)
    work_style_dimensions: list[str] = Field(default_factory=lambda: [
        "autonomy", "collaboration", "pace", "structure", "flexibility",
    ])


class ExplanationConfig(BaseModel):
    """Score bands used to label a match in the generated explanation."""

    model_config = ConfigDict(frozen=True)

    excellent: int = Field(default=85, ge=0, le=100)
    strong: int = Field(default=70, ge=0, le=100)
    moderate: int = Field(default=50, ge=0, le=100)

    @model_validator(mode="after")
    def bands_descending(self) -> "ExplanationConfig":
        if not self.excellent >= self.strong >= self.moderate:
            msg = "explanation bands must satisfy excellent >= strong >= moderate"
            raise ValueError(msg)
        return self


class MethodologyConfig(BaseModel):
    """Top-level methodology loaded from YAML."""

    model_config = ConfigDict(frozen=True)

    questions: QuestionsConfig = Field(default_factory=QuestionsConfig)
    archetypes: ArchetypeConfig = Field(default_factory=ArchetypeConfig)
    compatibility: CompatibilityConfig = Field(default_factory=CompatibilityConfig)
    weights: FactorWeights = Field(default_factory=FactorWeights)
    factors: FactorsConfig = Field(default_factory=FactorsConfig)
    explanation: ExplanationConfig = Field(default_factory=ExplanationConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "MethodologyConfig":
        """Load the methodology from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Methodology file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        logger.debug("Loaded methodology from %s", path)
        return cls.model_validate(raw)


_DEFAULT_METHODOLOGY: MethodologyConfig | None = None


def load_methodology(path: str | Path | None = None) -> MethodologyConfig:
    """Return the methodology from ``path``, or the cached default one."""
    global _DEFAULT_METHODOLOGY

    if path is not None:
        return MethodologyConfig.from_yaml(path)
    if _DEFAULT_METHODOLOGY is None:
        _DEFAULT_METHODOLOGY = MethodologyConfig()
    return _DEFAULT_METHODOLOGY
