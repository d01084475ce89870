"""Result assembler: pillar compatibility and/or multi-factor score -> MatchResult.

The behavioural (pillar) score and the qualification (multi-factor) score are
kept as separate numbers. ``match_percentage`` is the pillar score when the
pillar part ran, otherwise the multi-factor score; the two are never averaged.
"""

import logging
from collections.abc import Iterable

from pillar_match.core.config import MethodologyConfig, load_methodology
from pillar_match.core.errors import MissingFactAvailability
from pillar_match.core.pillars import Vocabulary
from pillar_match.core.schemas import (
    CandidateProfile,
    JobProfile,
    MatchResult,
    MultiFactorScore,
    PillarCompatibility,
)
from pillar_match.pipeline.archetype import classify_archetype
from pillar_match.pipeline.compatibility import score_pillar_compatibility
from pillar_match.pipeline.multi_factor import fit_label, score_multi_factor

logger = logging.getLogger(__name__)


def assemble_match(
    candidate: CandidateProfile,
    job: JobProfile,
    config: MethodologyConfig | None = None,
    is_demo_match: bool = False,
) -> MatchResult:
    """Score one candidate against one job with whatever data both carry.

    Args:
        candidate: Candidate record (pillar vector and/or facts).
        job: Job record (pillar vector and/or facts).
        config: Methodology tables; the default methodology when omitted.
        is_demo_match: Provenance flag for results computed on sample data.

    Raises:
        IncompletePillarVector: If a supplied pillar vector is partial.
        MissingFactAvailability: If neither pillars nor facts are available
            on both sides.
    """
    config = config or load_methodology()

    behavioural: PillarCompatibility | None = None
    candidate_archetype: str | None = None
    job_archetype: str | None = None
    if candidate.pillar_scores and job.pillar_scores:
        candidate_archetype = classify_archetype(candidate.pillar_scores, Vocabulary.CANDIDATE, config)
        job_archetype = classify_archetype(job.pillar_scores, Vocabulary.JOB, config)
        behavioural = score_pillar_compatibility(
            candidate.pillar_scores,
            candidate_archetype,
            job.pillar_scores,
            job_archetype,
            config,
        )

    qualification: MultiFactorScore | None = None
    if candidate.facts is not None and job.facts is not None:
        try:
            qualification = score_multi_factor(candidate.facts, job.facts, config.weights, config)
        except MissingFactAvailability:
            if behavioural is None:
                raise
            logger.info("No scorable facts for %s -> %s, using pillar score only", candidate.id, job.id)

    if behavioural is None and qualification is None:
        msg = (
            f"Nothing to score for candidate '{candidate.id}' and job '{job.id}': "
            "both need pillar scores or structured facts"
        )
        raise MissingFactAvailability(msg)

    primary = behavioural.score if behavioural is not None else qualification.score  # type: ignore[union-attr]
    match_percentage = max(0, min(100, primary))

    logger.info(
        "Match %s -> %s: %d%% (pillars=%s, qualification=%s)",
        candidate.id,
        job.id,
        match_percentage,
        behavioural.score if behavioural else "n/a",
        qualification.score if qualification else "n/a",
    )

    return MatchResult(
        candidate_id=candidate.id,
        job_id=job.id,
        match_percentage=match_percentage,
        compatibility_score=behavioural.score if behavioural else None,
        qualification_score=qualification.score if qualification else None,
        candidate_archetype=candidate_archetype,
        job_archetype=job_archetype,
        archetype_boost=behavioural.boost if behavioural else 0,
        pillar_breakdown=behavioural.breakdown if behavioural else [],
        score_breakdown=qualification.breakdown if qualification else None,
        factors_analyzed=qualification.factors_analyzed if qualification else {},
        explanation=_explain(behavioural, qualification, candidate_archetype, job_archetype, config),
        is_demo_match=is_demo_match,
    )


def match_many(
    candidate: CandidateProfile,
    jobs: Iterable[JobProfile],
    config: MethodologyConfig | None = None,
    is_demo_match: bool = False,
) -> list[MatchResult]:
    """Score one candidate against several jobs, independently, in input order."""
    config = config or load_methodology()
    return [assemble_match(candidate, job, config, is_demo_match) for job in jobs]


def _explain(
    behavioural: PillarCompatibility | None,
    qualification: MultiFactorScore | None,
    candidate_archetype: str | None,
    job_archetype: str | None,
    config: MethodologyConfig,
) -> str:
    parts: list[str] = []
    if behavioural is not None:
        sentence = (
            f"Behavioural fit: {fit_label(behavioural.score, config.explanation).lower()} "
            f"({behavioural.score}%), {candidate_archetype} profile for a {job_archetype} role"
        )
        if candidate_archetype == job_archetype:
            sentence += f" (same archetype, +{behavioural.boost})"
        elif behavioural.boost:
            sentence += f" (related archetypes, +{behavioural.boost})"
        parts.append(sentence + ".")
    if qualification is not None:
        parts.append(f"Qualification: {qualification.explanation}")
    return " ".join(parts)
