"""Evaluation state store.

The two ``record_*_outcome`` methods are the only writes that move the
candidate/vacancy state machine. Each runs inside a single transaction, so
a screening score and the status derived from it become visible together
or not at all. The remaining methods are plain reads and the writes the
command-line tools need to seed vacancies, candidates and answers.
"""

from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator

import pendulum
import structlog
from sqlalchemy import and_, delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..errors import EvaluationError, NotFound, PersistenceFailure
from ..schemas import (
    Answer,
    Candidate,
    CandidateVacancyInfo,
    CandidateVacancyMeta,
    CandidateVacancyStatus,
    NewCandidate,
    NewVacancy,
    Question,
    QuestionAnswer,
    ResumeScreening,
    Vacancy,
    VacancyWithQuestions,
)
from .models import (
    AnswerRow,
    CandidateRow,
    CandidateVacancyMetaRow,
    QuestionRow,
    ResumeScreeningRow,
    VacancyRow,
)
from .session import session_scope

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _utcnow() -> datetime:
    return pendulum.now("UTC")


class EvaluationStore:
    """Relational persistence for vacancies, answers and evaluation outcomes."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._sessions = session_factory
        self._clock = clock or _utcnow
        self._logger = structlog.get_logger(__name__)

    # ----------------- Outcome writes -----------------

    def record_screening_outcome(
        self,
        candidate_id: int,
        vacancy_id: uuid.UUID,
        score: int,
        feedback: str,
        status: CandidateVacancyStatus,
        *,
        abort: threading.Event | None = None,
    ) -> None:
        """Upsert the screening result and the meta status in one transaction.

        If ``abort`` is set before the transaction commits, it rolls back and
        ``PersistenceFailure`` is raised.
        """
        now = self._clock()
        with self._guard("record screening outcome"):
            with session_scope(self._sessions, abort=abort) as session:
                self._upsert_screening(session, candidate_id, vacancy_id, score, feedback, now)
                self._upsert_meta_status(session, candidate_id, vacancy_id, status, now)
        self._logger.info(
            "store.outcome_recorded",
            outcome="screening",
            candidate_id=candidate_id,
            vacancy_id=str(vacancy_id),
            score=score,
            status=status.value,
        )

    def record_interview_outcome(
        self,
        candidate_id: int,
        vacancy_id: uuid.UUID,
        score: int,
        status: CandidateVacancyStatus,
        *,
        abort: threading.Event | None = None,
    ) -> None:
        """Upsert the meta row's interview score and status together."""
        now = self._clock()
        with self._guard("record interview outcome"):
            with session_scope(self._sessions, abort=abort) as session:
                stmt = self._insert(session, CandidateVacancyMetaRow).values(
                    candidate_id=candidate_id,
                    vacancy_id=vacancy_id,
                    interview_score=score,
                    status=status,
                    updated_at=now,
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=["candidate_id", "vacancy_id"],
                    set_={
                        "interview_score": stmt.excluded.interview_score,
                        "status": stmt.excluded.status,
                        "updated_at": stmt.excluded.updated_at,
                    },
                )
                session.execute(stmt)
        self._logger.info(
            "store.outcome_recorded",
            outcome="interview",
            candidate_id=candidate_id,
            vacancy_id=str(vacancy_id),
            score=score,
            status=status.value,
        )

    def _upsert_screening(
        self,
        session: Session,
        candidate_id: int,
        vacancy_id: uuid.UUID,
        score: int,
        feedback: str,
        now: datetime,
    ) -> None:
        stmt = self._insert(session, ResumeScreeningRow).values(
            candidate_id=candidate_id,
            vacancy_id=vacancy_id,
            score=score,
            feedback=feedback,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["candidate_id", "vacancy_id"],
            set_={
                "score": stmt.excluded.score,
                "feedback": stmt.excluded.feedback,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        session.execute(stmt)

    def _upsert_meta_status(
        self,
        session: Session,
        candidate_id: int,
        vacancy_id: uuid.UUID,
        status: CandidateVacancyStatus,
        now: datetime,
    ) -> None:
        # interview_score stays untouched on insert and on update.
        stmt = self._insert(session, CandidateVacancyMetaRow).values(
            candidate_id=candidate_id,
            vacancy_id=vacancy_id,
            status=status,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["candidate_id", "vacancy_id"],
            set_={
                "status": stmt.excluded.status,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        session.execute(stmt)

    @staticmethod
    def _insert(session: Session, table: Any):
        dialect = session.get_bind().dialect.name
        try:
            return _UPSERT_DIALECTS[dialect](table)
        except KeyError as exc:
            raise PersistenceFailure(f"upsert is not supported for dialect {dialect!r}") from exc

    # ----------------- Queries -----------------

    def get_vacancy(self, vacancy_id: uuid.UUID) -> Vacancy:
        with self._guard("get vacancy"), self._sessions() as session:
            row = session.get(VacancyRow, vacancy_id)
            if row is None:
                raise NotFound(f"vacancy {vacancy_id} not found")
            return Vacancy.model_validate(row)

    def get_candidate(self, candidate_id: int) -> Candidate:
        with self._guard("get candidate"), self._sessions() as session:
            row = session.get(CandidateRow, candidate_id)
            if row is None:
                raise NotFound(f"candidate {candidate_id} not found")
            return Candidate.model_validate(row)

    def get_question(self, question_id: int) -> Question:
        with self._guard("get question"), self._sessions() as session:
            row = session.get(QuestionRow, question_id)
            if row is None:
                raise NotFound(f"question {question_id} not found")
            return Question.model_validate(row)

    def list_questions(self, vacancy_id: uuid.UUID) -> list[Question]:
        q = (
            select(QuestionRow)
            .where(QuestionRow.vacancy_id == vacancy_id)
            .order_by(QuestionRow.position)
        )
        with self._guard("list questions"), self._sessions() as session:
            return [Question.model_validate(row) for row in session.execute(q).scalars()]

    def list_answers(self, candidate_id: int, vacancy_id: uuid.UUID) -> list[Answer]:
        q = (
            select(AnswerRow)
            .join(QuestionRow, AnswerRow.question_id == QuestionRow.id)
            .where(AnswerRow.candidate_id == candidate_id, QuestionRow.vacancy_id == vacancy_id)
            .order_by(QuestionRow.position, AnswerRow.id)
        )
        with self._guard("list answers"), self._sessions() as session:
            return [Answer.model_validate(row) for row in session.execute(q).scalars()]

    def get_resume_screening(self, candidate_id: int, vacancy_id: uuid.UUID) -> ResumeScreening:
        q = select(ResumeScreeningRow).where(
            ResumeScreeningRow.candidate_id == candidate_id,
            ResumeScreeningRow.vacancy_id == vacancy_id,
        )
        with self._guard("get resume screening"), self._sessions() as session:
            row = session.execute(q).scalars().first()
            if row is None:
                raise NotFound(f"no resume screening for candidate {candidate_id}, vacancy {vacancy_id}")
            return ResumeScreening.model_validate(row)

    def get_meta(self, candidate_id: int, vacancy_id: uuid.UUID) -> CandidateVacancyMeta:
        q = select(CandidateVacancyMetaRow).where(
            CandidateVacancyMetaRow.candidate_id == candidate_id,
            CandidateVacancyMetaRow.vacancy_id == vacancy_id,
        )
        with self._guard("get meta"), self._sessions() as session:
            row = session.execute(q).scalars().first()
            if row is None:
                raise NotFound(f"no evaluation state for candidate {candidate_id}, vacancy {vacancy_id}")
            return CandidateVacancyMeta.model_validate(row)

    def get_candidate_by_telegram_id(self, telegram_id: int) -> Candidate:
        q = select(CandidateRow).where(CandidateRow.telegram_id == telegram_id)
        with self._guard("get candidate by telegram id"), self._sessions() as session:
            row = session.execute(q).scalars().first()
            if row is None:
                raise NotFound(f"no candidate with telegram id {telegram_id}")
            return Candidate.model_validate(row)

    def list_vacancies(self) -> list[VacancyWithQuestions]:
        """All vacancies, newest first, each with its ordered questions."""
        q = select(VacancyRow).order_by(VacancyRow.created_at.desc(), VacancyRow.title)
        with self._guard("list vacancies"), self._sessions() as session:
            rows = session.execute(q).scalars().all()
            questions = self._questions_by_vacancy(session, {row.id for row in rows})
            return [
                VacancyWithQuestions(vacancy=Vacancy.model_validate(row), questions=questions[row.id])
                for row in rows
            ]

    def list_question_answers(self, candidate_id: int, vacancy_id: uuid.UUID) -> list[QuestionAnswer]:
        q = (
            select(QuestionRow, AnswerRow)
            .join(AnswerRow, AnswerRow.question_id == QuestionRow.id)
            .where(AnswerRow.candidate_id == candidate_id, QuestionRow.vacancy_id == vacancy_id)
            .order_by(QuestionRow.position, AnswerRow.id)
        )
        with self._guard("list question answers"), self._sessions() as session:
            return [
                QuestionAnswer(question=Question.model_validate(question), answer=Answer.model_validate(answer))
                for question, answer in session.execute(q).all()
            ]

    def list_candidate_vacancy_infos(self, *, include_archived: bool = True) -> list[CandidateVacancyInfo]:
        """Evaluation state of every candidate/vacancy pair that has a meta row.

        Resume links are not filled in; they come from the document store.
        """
        q = (
            select(CandidateVacancyMetaRow, CandidateRow, VacancyRow, ResumeScreeningRow)
            .join(CandidateRow, CandidateRow.id == CandidateVacancyMetaRow.candidate_id)
            .join(VacancyRow, VacancyRow.id == CandidateVacancyMetaRow.vacancy_id)
            .outerjoin(
                ResumeScreeningRow,
                and_(
                    ResumeScreeningRow.candidate_id == CandidateVacancyMetaRow.candidate_id,
                    ResumeScreeningRow.vacancy_id == CandidateVacancyMetaRow.vacancy_id,
                ),
            )
            .order_by(CandidateVacancyMetaRow.updated_at.desc(), CandidateVacancyMetaRow.id)
        )
        if not include_archived:
            q = q.where(CandidateVacancyMetaRow.is_archived.is_(False))
        with self._guard("list candidate vacancy infos"), self._sessions() as session:
            rows = session.execute(q).all()
            questions = self._questions_by_vacancy(session, {vacancy.id for _, _, vacancy, _ in rows})
            return [
                CandidateVacancyInfo(
                    candidate=Candidate.model_validate(candidate),
                    vacancy=Vacancy.model_validate(vacancy),
                    meta=CandidateVacancyMeta.model_validate(meta),
                    resume_screening=ResumeScreening.model_validate(screening) if screening else None,
                    questions=questions[vacancy.id],
                )
                for meta, candidate, vacancy, screening in rows
            ]

    @staticmethod
    def _questions_by_vacancy(
        session: Session, vacancy_ids: set[uuid.UUID]
    ) -> dict[uuid.UUID, list[Question]]:
        grouped: dict[uuid.UUID, list[Question]] = {vacancy_id: [] for vacancy_id in vacancy_ids}
        if not vacancy_ids:
            return grouped
        q = (
            select(QuestionRow)
            .where(QuestionRow.vacancy_id.in_(vacancy_ids))
            .order_by(QuestionRow.position)
        )
        for row in session.execute(q).scalars():
            grouped[row.vacancy_id].append(Question.model_validate(row))
        return grouped

    # ----------------- Plain writes -----------------

    def create_vacancy(self, vacancy: NewVacancy) -> uuid.UUID:
        """Insert a vacancy and its questions; positions follow list order from 1."""
        vacancy_id = vacancy.id or uuid.uuid4()
        with self._guard("create vacancy"):
            with session_scope(self._sessions) as session:
                session.add(
                    VacancyRow(
                        id=vacancy_id,
                        title=vacancy.title,
                        key_requirements=list(vacancy.key_requirements),
                    )
                )
                session.flush()
                session.add_all(
                    QuestionRow(
                        vacancy_id=vacancy_id,
                        position=position,
                        content=question.content,
                        reference=question.reference,
                        time_limit=question.time_limit,
                    )
                    for position, question in enumerate(vacancy.questions, start=1)
                )
        return vacancy_id

    def create_candidate(self, candidate: NewCandidate) -> int:
        with self._guard("create candidate"):
            with session_scope(self._sessions) as session:
                row = CandidateRow(**candidate.model_dump())
                session.add(row)
                session.flush()
                return row.id

    def create_answer(
        self,
        candidate_id: int,
        question_id: int,
        content: str,
        time_taken: int,
        score: int,
        *,
        abort: threading.Event | None = None,
    ) -> int:
        with self._guard("create answer"):
            with session_scope(self._sessions, abort=abort) as session:
                row = AnswerRow(
                    candidate_id=candidate_id,
                    question_id=question_id,
                    content=content,
                    time_taken=time_taken,
                    score=score,
                )
                session.add(row)
                session.flush()
                return row.id

    def archive(self, candidate_id: int, vacancy_id: uuid.UUID, *, archived: bool = True) -> None:
        stmt = (
            update(CandidateVacancyMetaRow)
            .where(
                CandidateVacancyMetaRow.candidate_id == candidate_id,
                CandidateVacancyMetaRow.vacancy_id == vacancy_id,
            )
            .values(is_archived=archived, updated_at=self._clock())
        )
        with self._guard("archive"):
            with session_scope(self._sessions) as session:
                if session.execute(stmt).rowcount == 0:
                    raise NotFound(
                        f"no evaluation state for candidate {candidate_id}, vacancy {vacancy_id}"
                    )

    def delete_candidate(self, candidate_id: int) -> None:
        with self._guard("delete candidate"):
            with session_scope(self._sessions) as session:
                result = session.execute(delete(CandidateRow).where(CandidateRow.id == candidate_id))
                if result.rowcount == 0:
                    raise NotFound(f"candidate {candidate_id} not found")

    def delete_vacancy(self, vacancy_id: uuid.UUID) -> None:
        with self._guard("delete vacancy"):
            with session_scope(self._sessions) as session:
                result = session.execute(delete(VacancyRow).where(VacancyRow.id == vacancy_id))
                if result.rowcount == 0:
                    raise NotFound(f"vacancy {vacancy_id} not found")

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except EvaluationError:
            raise
        except SQLAlchemyError as exc:
            self._logger.warning("store.failed", action=action, error=str(exc))
            raise PersistenceFailure(f"can't {action}: {exc}") from exc


__all__ = ["EvaluationStore"]
