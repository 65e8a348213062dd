"""Pass/fail policy for screening and interview scores."""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Sequence

from ..errors import InvalidState
from ..schemas import CandidateVacancyStatus

SCREENING_THRESHOLD = 75
INTERVIEW_THRESHOLD = 75


def screening_status(score: int) -> CandidateVacancyStatus:
    if score >= SCREENING_THRESHOLD:
        return CandidateVacancyStatus.SCREENING_OK
    return CandidateVacancyStatus.SCREENING_FAILED


def interview_status(score: int) -> CandidateVacancyStatus:
    if score >= INTERVIEW_THRESHOLD:
        return CandidateVacancyStatus.INTERVIEW_OK
    return CandidateVacancyStatus.INTERVIEW_FAILED


def round_half_up_mean(scores: Sequence[int]) -> int:
    """Arithmetic mean rounded to the nearest integer, ties going up."""
    if not scores:
        raise InvalidState("can't average an empty list of scores")
    return math.floor(Fraction(sum(scores), len(scores)) + Fraction(1, 2))


__all__ = [
    "INTERVIEW_THRESHOLD",
    "SCREENING_THRESHOLD",
    "interview_status",
    "round_half_up_mean",
    "screening_status",
]
