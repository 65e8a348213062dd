"""Pydantic views of the persisted evaluation entities."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .status import CandidateVacancyStatus


class Vacancy(BaseModel):
    """Job opening with its key requirements."""

    id: UUID
    title: str
    key_requirements: list[str] = Field(default_factory=list)
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class Candidate(BaseModel):
    """Person being evaluated."""

    id: int
    telegram_id: int | None = None
    telegram_username: str | None = None
    full_name: str = ""
    phone: str | None = None
    city: str | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class Question(BaseModel):
    """Interview question with its reference answer."""

    id: int
    vacancy_id: UUID
    position: int
    content: str
    reference: str
    time_limit: int = 0
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class Answer(BaseModel):
    """Scored answer of a candidate to a question."""

    id: int
    candidate_id: int
    question_id: int
    content: str
    time_taken: int = 0
    score: int = Field(ge=0, le=100)
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ResumeScreening(BaseModel):
    """Latest resume screening result for a candidate and vacancy."""

    candidate_id: int
    vacancy_id: UUID
    score: int = Field(ge=0, le=100)
    feedback: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CandidateVacancyMeta(BaseModel):
    """State-machine record for a candidate and vacancy."""

    candidate_id: int
    vacancy_id: UUID
    status: CandidateVacancyStatus | None = None
    interview_score: int | None = None
    is_archived: bool = False
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CandidateVacancyInfo(BaseModel):
    """Everything a reviewer needs about one candidate for one vacancy."""

    candidate: Candidate
    vacancy: Vacancy
    meta: CandidateVacancyMeta | None = None
    resume_screening: ResumeScreening | None = None
    questions: list[Question] = Field(default_factory=list)
    resume_link: str | None = None


class VacancyWithQuestions(BaseModel):
    vacancy: Vacancy
    questions: list[Question] = Field(default_factory=list)


class QuestionAnswer(BaseModel):
    """A candidate answer paired with the question it responds to."""

    question: Question
    answer: Answer


class NewQuestion(BaseModel):
    """Question supplied when a vacancy is created."""

    content: str
    reference: str
    time_limit: int = 0

    model_config = ConfigDict(extra="forbid")


class NewVacancy(BaseModel):
    """Vacancy creation payload; questions keep their list order."""

    id: UUID | None = None
    title: str
    key_requirements: list[str] = Field(default_factory=list)
    questions: list[NewQuestion] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class NewCandidate(BaseModel):
    """Candidate registration payload."""

    telegram_id: int | None = None
    telegram_username: str | None = None
    full_name: str
    phone: str | None = None
    city: str | None = None

    model_config = ConfigDict(extra="forbid")
