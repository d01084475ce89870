"""Pillar aggregation: Likert responses -> averaged score per pillar.

A pillar with no answered questions scores 0, which callers must read as
"unset", never as a low score. Completeness is checked later, before
classification or scoring.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pillar_match.core.config import MethodologyConfig, load_methodology
from pillar_match.core.errors import InvalidScoreRange
from pillar_match.core.pillars import Vocabulary, normalize_pillar_name
from pillar_match.core.schemas import AssessmentResponse

logger = logging.getLogger(__name__)

MIN_LIKERT = 1
MAX_LIKERT = 5

Responses = Mapping[str, int] | Iterable[AssessmentResponse | Mapping[str, Any]]


def aggregate_pillars(
    responses: Responses,
    pillar_question_map: Mapping[str, Iterable[str]],
    reverse_scored: Iterable[str] = (),
) -> dict[str, float]:
    """Average the responses of each pillar's questions.

    Args:
        responses: ``AssessmentResponse`` items, ``{"question_id", "score"}``
            mappings, or a plain ``{question_id: score}`` mapping.
        pillar_question_map: Pillar name -> question ids belonging to it.
        reverse_scored: Question ids whose answer is inverted (6 - score).

    Returns:
        Canonical pillar name -> mean score (0.0 when no question answered).

    Raises:
        InvalidScoreRange: If any response score is not an integer in [1, 5].
    """
    pairs = _as_pairs(responses)
    reversed_ids = set(reverse_scored)

    scores: dict[str, float] = {}
    for pillar, question_ids in pillar_question_map.items():
        members = set(question_ids)
        answered = [
            (MIN_LIKERT + MAX_LIKERT - score) if qid in reversed_ids else score
            for qid, score in pairs
            if qid in members
        ]
        name = normalize_pillar_name(pillar)
        scores[name] = sum(answered) / len(answered) if answered else 0.0
        logger.debug("Pillar %s: %d answers, mean %.3f", name, len(answered), scores[name])
    return scores


def aggregate_candidate_pillars(
    responses: Responses,
    config: MethodologyConfig | None = None,
) -> dict[str, float]:
    """Aggregate the candidate assessment with the configured question map."""
    return _aggregate_side(responses, Vocabulary.CANDIDATE, config)


def aggregate_job_pillars(
    responses: Responses,
    config: MethodologyConfig | None = None,
) -> dict[str, float]:
    """Aggregate the company/job assessment with the configured question map."""
    return _aggregate_side(responses, Vocabulary.JOB, config)


def _aggregate_side(
    responses: Responses,
    vocabulary: Vocabulary,
    config: MethodologyConfig | None,
) -> dict[str, float]:
    questions = (config or load_methodology()).questions
    return aggregate_pillars(
        responses,
        questions.for_vocabulary(vocabulary),
        reverse_scored=questions.reverse_for(vocabulary),
    )


def _as_pairs(responses: Responses) -> list[tuple[str, int]]:
    """Flatten any accepted response shape into validated (question_id, score) pairs."""
    if isinstance(responses, Mapping):
        raw = list(responses.items())
    else:
        raw = []
        for item in responses:
            if isinstance(item, AssessmentResponse):
                raw.append((item.question_id, item.score))
            else:
                qid = item.get("question_id", item.get("questionId"))
                raw.append((str(qid), item.get("score")))

    pairs: list[tuple[str, int]] = []
    for qid, score in raw:
        if (
            isinstance(score, bool)
            or not isinstance(score, int)
            or not MIN_LIKERT <= score <= MAX_LIKERT
        ):
            raise InvalidScoreRange(str(qid), score)
        pairs.append((str(qid), score))
    return pairs
