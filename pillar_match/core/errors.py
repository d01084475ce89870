"""Exceptions raised by the matching engine.

All of them are local precondition failures: retrying with the same input
raises the same error. They subclass ``ValueError`` so callers that already
treat bad input as ``ValueError`` keep working.
"""


class MatchingError(Exception):
    """Base class for matching engine errors."""


class IncompletePillarVector(MatchingError, ValueError):
    """A pillar vector lacks one or more required pillars.

    A missing pillar is never treated as a score of 0.
    """

    def __init__(self, side: str, missing: list[str]) -> None:
        self.side = side
        self.missing = list(missing)
        super().__init__(
            f"Incomplete {side} pillar vector: missing {', '.join(self.missing)}"
        )


class InvalidScoreRange(MatchingError, ValueError):
    """An assessment response score lies outside the 1-5 Likert scale."""

    def __init__(self, question_id: str, score: object) -> None:
        self.question_id = question_id
        self.score = score
        super().__init__(
            f"Score for question '{question_id}' must be an integer in [1, 5], got {score!r}"
        )


class MissingFactAvailability(MatchingError, ValueError):
    """No scorable data is available for the requested match."""
