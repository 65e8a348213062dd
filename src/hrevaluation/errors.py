"""Error taxonomy for the evaluation pipeline."""

from __future__ import annotations


class EvaluationError(Exception):
    """Base class for every failure surfaced by the pipeline.

    ``step`` names the pipeline step that failed. It is filled in by the
    orchestrator when the error crosses a step boundary and is left alone
    if a lower layer already set it.
    """

    kind = "evaluation_error"

    def __init__(self, message: str, *, step: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.step = step

    def __str__(self) -> str:
        if self.step:
            return f"{self.step}: {self.message}"
        return self.message


class NotFound(EvaluationError):
    """A referenced vacancy, question, candidate or document is absent."""

    kind = "not_found"


class ScoringFailure(EvaluationError):
    """The LLM call or its response shape failed after all retries."""

    kind = "scoring_failure"

    def __init__(self, message: str, *, step: str | None = None, attempts: int = 0) -> None:
        super().__init__(message, step=step)
        self.attempts = attempts


class ExtractionFailure(EvaluationError):
    """The text-extraction collaborator failed."""

    kind = "extraction_failure"


class PersistenceFailure(EvaluationError):
    """A transaction could not commit; nothing was written."""

    kind = "persistence_failure"


class InvalidState(EvaluationError):
    """The requested transition is not possible from the stored state."""

    kind = "invalid_state"


__all__ = [
    "EvaluationError",
    "NotFound",
    "ScoringFailure",
    "ExtractionFailure",
    "PersistenceFailure",
    "InvalidState",
]
