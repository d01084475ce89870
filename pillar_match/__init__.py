"""Pillar-based candidate/job compatibility matching engine."""

from pillar_match.core import errors, schemas
from pillar_match.core.config import MethodologyConfig, load_methodology
from pillar_match.core.errors import (
    IncompletePillarVector,
    InvalidScoreRange,
    MatchingError,
    MissingFactAvailability,
)
from pillar_match.core.schemas import CandidateProfile, JobProfile, MatchResult
from pillar_match.pipeline.aggregator import (
    aggregate_candidate_pillars,
    aggregate_job_pillars,
    aggregate_pillars,
)
from pillar_match.pipeline.archetype import classify_archetype, describe_archetype
from pillar_match.pipeline.assembler import assemble_match, match_many
from pillar_match.pipeline.compatibility import score_pillar_compatibility
from pillar_match.pipeline.multi_factor import score_multi_factor

__all__ = [
    "CandidateProfile",
    "IncompletePillarVector",
    "InvalidScoreRange",
    "JobProfile",
    "MatchResult",
    "MatchingError",
    "MethodologyConfig",
    "MissingFactAvailability",
    "aggregate_candidate_pillars",
    "aggregate_job_pillars",
    "aggregate_pillars",
    "assemble_match",
    "classify_archetype",
    "describe_archetype",
    "errors",
    "load_methodology",
    "match_many",
    "schemas",
    "score_multi_factor",
    "score_pillar_compatibility",
]
