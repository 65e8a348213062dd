"""Candidate/vacancy evaluation status."""

from __future__ import annotations

import enum


class CandidateVacancyStatus(str, enum.Enum):
    """Evaluation state of a candidate for one vacancy.

    A candidate that has not been evaluated yet has no meta row at all,
    so there is no member for that state.
    """

    SCREENING_OK = "screening_ok"
    SCREENING_FAILED = "screening_failed"
    INTERVIEW_OK = "interview_ok"
    INTERVIEW_FAILED = "interview_failed"

    @property
    def is_screening(self) -> bool:
        return self in (self.SCREENING_OK, self.SCREENING_FAILED)

    @property
    def passed(self) -> bool:
        return self in (self.SCREENING_OK, self.INTERVIEW_OK)
