"""Archetype classification from the two dominant pillars.

Ties are broken by each vocabulary's canonical pillar order, so the dominant
pair, and therefore the lookup key, is the same on every run.
"""

import logging
from collections.abc import Mapping

from pillar_match.core.config import MethodologyConfig, load_methodology
from pillar_match.core.pillars import (
    Vocabulary,
    infer_vocabulary,
    normalize_vector,
    pillar_rank,
    require_complete,
)
from pillar_match.core.schemas import ArchetypeResult

logger = logging.getLogger(__name__)


def rank_pillars(scores: Mapping[str, float]) -> list[tuple[str, float]]:
    """Sort canonical pillars by score desc, then by canonical position."""
    return sorted(scores.items(), key=lambda item: (-item[1], pillar_rank(item[0])))


def classify_archetype(
    pillar_scores: Mapping[str, float],
    vocabulary: Vocabulary | str | None = None,
    config: MethodologyConfig | None = None,
) -> str:
    """Return the archetype of a complete pillar vector.

    Args:
        pillar_scores: Pillar name (any accepted alias) -> score in [1, 5].
        vocabulary: Candidate or job side; inferred from the keys when omitted.
        config: Methodology tables; the default methodology when omitted.

    Raises:
        IncompletePillarVector: If a pillar of the vocabulary is missing.
    """
    return describe_archetype(pillar_scores, vocabulary, config).archetype


def describe_archetype(
    pillar_scores: Mapping[str, float],
    vocabulary: Vocabulary | str | None = None,
    config: MethodologyConfig | None = None,
) -> ArchetypeResult:
    """Classify a vector and report its dominant pillars and confidence."""
    config = config or load_methodology()
    settings = config.archetypes

    scores = normalize_vector(dict(pillar_scores))
    vocab = Vocabulary(vocabulary) if vocabulary is not None else infer_vocabulary(scores)
    scores = require_complete(scores, vocab, side=vocab.value)

    ranked = rank_pillars(scores)
    (first, first_score), (second, second_score) = ranked[0], ranked[1]
    dominant = [(first, first_score), (second, second_score)]

    spread = settings.balanced_spread_for(vocab)
    if spread is not None and first_score - ranked[-1][1] < spread:
        logger.debug("Balanced %s profile (spread < %.2f)", vocab.value, spread)
        return ArchetypeResult(
            archetype=settings.fallback,
            dominant_pillars=dominant,
            confidence="high",
        )

    matrix = settings.matrix_for(vocab)
    archetype = matrix.get(f"{first}_{second}") or matrix.get(f"{second}_{first}")
    if archetype is None:
        logger.debug("No archetype for %s/%s, using %s", first, second, settings.fallback)
        archetype = settings.fallback

    gap = first_score - second_score
    if gap > settings.high_confidence_gap:
        confidence = "high"
    elif gap > settings.medium_confidence_gap:
        confidence = "medium"
    else:
        confidence = "low"

    logger.debug("Archetype %s from %s + %s (%s)", archetype, first, second, confidence)
    return ArchetypeResult(archetype=archetype, dominant_pillars=dominant, confidence=confidence)
