"""Pydantic schema definitions for the evaluation pipeline."""

from __future__ import annotations

from .entities import (
    Answer,
    Candidate,
    CandidateVacancyInfo,
    CandidateVacancyMeta,
    NewCandidate,
    NewQuestion,
    NewVacancy,
    Question,
    QuestionAnswer,
    ResumeScreening,
    Vacancy,
    VacancyWithQuestions,
)
from .scoring import AnswerScoringResult, ResumeScoringResult
from .status import CandidateVacancyStatus

__all__ = [
    "Answer",
    "AnswerScoringResult",
    "Candidate",
    "CandidateVacancyInfo",
    "CandidateVacancyMeta",
    "CandidateVacancyStatus",
    "NewCandidate",
    "NewQuestion",
    "NewVacancy",
    "Question",
    "QuestionAnswer",
    "ResumeScoringResult",
    "ResumeScreening",
    "Vacancy",
    "VacancyWithQuestions",
]
