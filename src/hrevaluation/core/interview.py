"""Interview answer scoring and aggregation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from uuid import UUID

import structlog

from ..adapters import ScoringClient
from ..db import EvaluationStore
from ..errors import InvalidState, PersistenceFailure, ScoringFailure
from ..schemas import CandidateVacancyStatus
from .audit import AuditLogger
from .policy import interview_status, round_half_up_mean
from .steps import pipeline_step, run_transaction


@dataclass(slots=True)
class InterviewOutcome:
    """Aggregated interview result."""

    candidate_id: int
    vacancy_id: UUID
    score: int
    answer_count: int
    status: CandidateVacancyStatus


class InterviewScoringOrchestrator:
    """Scores answers one at a time and aggregates them once the interview ends."""

    def __init__(
        self,
        *,
        store: EvaluationStore,
        scorer: ScoringClient,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._store = store
        self._scorer = scorer
        self._audit = audit_logger
        self._logger = structlog.get_logger(__name__)

    async def score_answer(
        self,
        candidate_id: int,
        question_id: int,
        content: str,
        time_taken: int,
    ) -> int:
        """Score one answer against the question's reference and store it.

        Returns the new answer id. Repeating the call stores another answer.
        """
        log = self._logger.bind(candidate_id=candidate_id, question_id=question_id)

        with pipeline_step("load_question", PersistenceFailure, log):
            question = await asyncio.to_thread(self._store.get_question, question_id)

        with pipeline_step("score_answer", ScoringFailure, log):
            result = await self._scorer.score_answer(content, question.reference)

        with pipeline_step("create_answer", PersistenceFailure, log):
            answer_id = await run_transaction(
                self._store.create_answer,
                candidate_id,
                question_id,
                content,
                time_taken,
                result.score,
            )

        log.info("answer.scored", answer_id=answer_id, score=result.score)
        return answer_id

    async def score_interview(self, candidate_id: int, vacancy_id: UUID) -> InterviewOutcome:
        """Average the candidate's answer scores and record the interview outcome."""
        log = self._logger.bind(candidate_id=candidate_id, vacancy_id=str(vacancy_id))

        with pipeline_step("load_answers", PersistenceFailure, log):
            answers = await asyncio.to_thread(self._store.list_answers, candidate_id, vacancy_id)
            questions = await asyncio.to_thread(self._store.list_questions, vacancy_id)

        with pipeline_step("aggregate", InvalidState, log):
            if not answers:
                raise InvalidState("candidate has no answers for this vacancy")
            unanswered = {q.id for q in questions} - {a.question_id for a in answers}
            if unanswered:
                raise InvalidState(f"interview is incomplete, unanswered questions: {sorted(unanswered)}")
            score = round_half_up_mean([answer.score for answer in answers])

        status = interview_status(score)

        with pipeline_step("record_interview", PersistenceFailure, log):
            await run_transaction(
                self._store.record_interview_outcome, candidate_id, vacancy_id, score, status
            )

        log.info("interview.scored", score=score, answers=len(answers), status=status.value)
        if self._audit:
            self._audit.append(
                {
                    "event": "interview",
                    "candidate_id": candidate_id,
                    "vacancy_id": str(vacancy_id),
                    "score": score,
                    "answers": len(answers),
                    "status": status.value,
                }
            )

        return InterviewOutcome(
            candidate_id=candidate_id,
            vacancy_id=vacancy_id,
            score=score,
            answer_count=len(answers),
            status=status,
        )
