"""Pillar vocabularies and name normalisation.

Two disjoint vocabularies exist: the candidate side (what a person values in a
job) and the job side (what a position demands). The tuple order of each
vocabulary is the canonical order used to break ties between equal scores.
"""

import unicodedata
from enum import Enum

from pillar_match.core.errors import IncompletePillarVector


class Vocabulary(str, Enum):
    """Which side of the match a pillar vector belongs to."""

    CANDIDATE = "candidate"
    JOB = "job"


CANDIDATE_PILLARS: tuple[str, ...] = ("Compensation", "Ambiente", "Propósito", "Crescimento")
JOB_PILLARS: tuple[str, ...] = ("Autonomia", "Liderança", "TrabalhoGrupo", "Risco", "Ambição")

MIN_SCORE = 1.0
MAX_SCORE = 5.0

PILLARS: dict[Vocabulary, tuple[str, ...]] = {
    Vocabulary.CANDIDATE: CANDIDATE_PILLARS,
    Vocabulary.JOB: JOB_PILLARS,
}

# English labels used by older records and the results UI.
_EXTRA_ALIASES: dict[str, str] = {
    "environment": "Ambiente",
    "purpose": "Propósito",
    "growth": "Crescimento",
    "autonomy": "Autonomia",
    "leadership": "Liderança",
    "teamwork": "TrabalhoGrupo",
    "risk": "Risco",
    "ambition": "Ambição",
}


def _fold(name: str) -> str:
    """Strip accents, case, underscores, hyphens and spaces."""
    decomposed = unicodedata.normalize("NFKD", name)
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return "".join(ch for ch in ascii_only.lower() if ch.isalnum())


_ALIASES: dict[str, str] = {
    _fold(p): p for vocab in PILLARS.values() for p in vocab
}
_ALIASES.update({_fold(k): v for k, v in _EXTRA_ALIASES.items()})


def normalize_pillar_name(name: str) -> str:
    """Return the canonical pillar name for any accepted alias.

    ``"lideranca"``, ``"Liderança"`` and ``"LIDERANCA"`` all map to
    ``"Liderança"``; ``"trabalho_grupo"`` maps to ``"TrabalhoGrupo"``.

    Raises:
        ValueError: If the name is not a pillar of either vocabulary.
    """
    canonical = _ALIASES.get(_fold(name))
    if canonical is None:
        msg = f"Unknown pillar '{name}'"
        raise ValueError(msg)
    return canonical


def normalize_vector(scores: dict[str, float]) -> dict[str, float]:
    """Return a copy of ``scores`` keyed by canonical pillar names.

    Raises:
        ValueError: If two keys are aliases of the same pillar.
    """
    normalized: dict[str, float] = {}
    for name, value in scores.items():
        canonical = normalize_pillar_name(name)
        if canonical in normalized:
            msg = f"Pillar '{canonical}' given more than once (as '{name}')"
            raise ValueError(msg)
        normalized[canonical] = float(value)
    return normalized


def vocabulary_of(pillar: str) -> Vocabulary:
    """Return the vocabulary a canonical pillar name belongs to."""
    for vocab, names in PILLARS.items():
        if pillar in names:
            return vocab
    msg = f"Unknown pillar '{pillar}'"
    raise ValueError(msg)


def infer_vocabulary(scores: dict[str, float]) -> Vocabulary:
    """Infer the vocabulary from the (canonical) keys of a vector.

    Raises:
        ValueError: If the vector is empty or mixes both vocabularies.
    """
    if not scores:
        msg = "Cannot infer vocabulary of an empty pillar vector"
        raise ValueError(msg)
    found = {vocabulary_of(name) for name in scores}
    if len(found) > 1:
        msg = f"Pillar vector mixes candidate and job pillars: {sorted(scores)}"
        raise ValueError(msg)
    return found.pop()


def missing_pillars(scores: dict[str, float], vocabulary: Vocabulary) -> list[str]:
    """List required pillars that are absent or unset (0) in canonical order."""
    return [p for p in PILLARS[vocabulary] if scores.get(p, 0.0) == 0.0]


def pillar_rank(pillar: str) -> int:
    """Position of a pillar in its vocabulary's canonical order."""
    return PILLARS[vocabulary_of(pillar)].index(pillar)


def require_complete(
    scores: dict[str, float],
    vocabulary: Vocabulary,
    side: str,
) -> dict[str, float]:
    """Validate a canonical vector and return only its vocabulary's pillars.

    Raises:
        IncompletePillarVector: If a required pillar is absent or unset.
        ValueError: If a pillar score lies outside [1, 5].
    """
    missing = missing_pillars(scores, vocabulary)
    if missing:
        raise IncompletePillarVector(side, missing)
    for name in PILLARS[vocabulary]:
        value = scores[name]
        if not MIN_SCORE <= value <= MAX_SCORE:
            msg = f"{side} pillar '{name}' must lie in [{MIN_SCORE}, {MAX_SCORE}], got {value}"
            raise ValueError(msg)
    return {name: scores[name] for name in PILLARS[vocabulary]}
