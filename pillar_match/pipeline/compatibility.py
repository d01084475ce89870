"""Cross-pillar compatibility between a candidate and a job.

Pipeline:
  1. Completeness check on both vectors (a missing pillar is never 0)
  2. Correspondence table: candidate pillar -> job pillar
  3. Per-pair similarity: 100 - |c - j| * factor, clamped to [0, 100]
  4. Base score: mean of the pair similarities
  5. Archetype boost: identical +10, adjacent +5, otherwise 0
  6. Final: min(100, round_half_up(base + boost))
"""

import logging
from collections.abc import Mapping
from decimal import Decimal

from pillar_match.core.config import CompatibilityConfig, MethodologyConfig, load_methodology
from pillar_match.core.numeric import clamp, mean, quantize, round_half_up, to_decimal
from pillar_match.core.pillars import Vocabulary, normalize_vector, require_complete
from pillar_match.core.schemas import PillarCompatibility, PillarPairSimilarity

logger = logging.getLogger(__name__)


def pillar_similarity(candidate_value: float, job_value: float, factor: float = 20.0) -> float:
    """Similarity of two 1-5 scores as a percentage.

    Equal values give 100; the maximal 1 vs 5 divergence gives 20.
    """
    return float(_similarity(to_decimal(candidate_value), to_decimal(job_value), to_decimal(factor)))


def archetype_boost(
    candidate_archetype: str,
    job_archetype: str,
    config: CompatibilityConfig | None = None,
) -> int:
    """Bonus points for archetype affinity: identical, adjacent or none."""
    config = config or load_methodology().compatibility
    if candidate_archetype == job_archetype:
        return config.identical_boost
    if config.are_adjacent(candidate_archetype, job_archetype):
        return config.adjacent_boost
    return 0


def score_pillar_compatibility(
    candidate_pillars: Mapping[str, float],
    candidate_archetype: str,
    job_pillars: Mapping[str, float],
    job_archetype: str,
    config: MethodologyConfig | None = None,
) -> PillarCompatibility:
    """Score how well a candidate's pillars fit a job's pillars.

    Raises:
        IncompletePillarVector: If either vector lacks a required pillar.
    """
    settings = (config or load_methodology()).compatibility

    candidate = require_complete(
        normalize_vector(dict(candidate_pillars)), Vocabulary.CANDIDATE, side="candidate",
    )
    job = require_complete(normalize_vector(dict(job_pillars)), Vocabulary.JOB, side="job")

    pairs = list(settings.correspondence.items())
    if settings.include_risk_pair and settings.risk_pair[1] in job:
        pairs.append(settings.risk_pair)

    factor = to_decimal(settings.similarity_factor)
    breakdown: list[PillarPairSimilarity] = []
    similarities: list[Decimal] = []
    for candidate_pillar, job_pillar in pairs:
        c_value, j_value = candidate[candidate_pillar], job[job_pillar]
        similarity = _similarity(to_decimal(c_value), to_decimal(j_value), factor)
        similarities.append(similarity)
        breakdown.append(PillarPairSimilarity(
            pair=f"{candidate_pillar}_{job_pillar}",
            candidate_pillar=candidate_pillar,
            job_pillar=job_pillar,
            candidate_value=c_value,
            job_value=j_value,
            similarity=float(similarity),
        ))
        logger.debug(
            "Pair %s/%s: %.2f vs %.2f -> %s%%",
            candidate_pillar, job_pillar, c_value, j_value, similarity,
        )

    base = quantize(mean(similarities))
    boost = archetype_boost(candidate_archetype, job_archetype, settings)
    score = min(100, round_half_up(base + boost))

    logger.info(
        "Pillar compatibility: base %s%% + boost %d (%s vs %s) = %d%%",
        base, boost, candidate_archetype, job_archetype, score,
    )
    return PillarCompatibility(
        score=score,
        base_score=float(base),
        boost=boost,
        breakdown=breakdown,
    )


def _similarity(candidate_value: Decimal, job_value: Decimal, factor: Decimal) -> Decimal:
    return clamp(Decimal(100) - abs(candidate_value - job_value) * factor)
