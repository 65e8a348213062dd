"""Resume screening orchestration."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from uuid import UUID

import structlog

from ..adapters import DocumentStore, ScoringClient, TextExtractor
from ..db import EvaluationStore
from ..errors import ExtractionFailure, PersistenceFailure, ScoringFailure
from ..schemas import CandidateVacancyStatus
from .audit import AuditLogger
from .policy import screening_status
from .steps import pipeline_step, run_transaction


@dataclass(slots=True)
class ScreeningOutcome:
    """Result of one resume screening run."""

    candidate_id: int
    vacancy_id: UUID
    score: int
    feedback: str
    status: CandidateVacancyStatus


class ResumeScreeningOrchestrator:
    """Scores an uploaded resume against its vacancy and records the outcome.

    Nothing is written until the final step, and that step writes the score
    and the status in one transaction. A failure anywhere earlier leaves the
    stored state exactly as it was.
    """

    def __init__(
        self,
        *,
        store: EvaluationStore,
        documents: DocumentStore,
        extractor: TextExtractor,
        scorer: ScoringClient,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._store = store
        self._documents = documents
        self._extractor = extractor
        self._scorer = scorer
        self._audit = audit_logger
        self._logger = structlog.get_logger(__name__)

    async def score_resume(self, candidate_id: int, vacancy_id: UUID) -> ScreeningOutcome:
        log = self._logger.bind(candidate_id=candidate_id, vacancy_id=str(vacancy_id))

        with pipeline_step("load_vacancy", PersistenceFailure, log):
            vacancy = await asyncio.to_thread(self._store.get_vacancy, vacancy_id)

        with pipeline_step("fetch_document", PersistenceFailure, log):
            document = await asyncio.to_thread(
                self._documents.fetch_document, candidate_id, vacancy_id
            )

        with pipeline_step("extract_text", ExtractionFailure, log):
            resume_text = await self._extractor.extract_text(document)
            if not resume_text.strip():
                raise ExtractionFailure("document contains no text")

        with pipeline_step("score_resume", ScoringFailure, log):
            result = await self._scorer.score_resume(
                resume_text, vacancy.title, vacancy.key_requirements
            )

        status = screening_status(result.score)

        with pipeline_step("record_outcome", PersistenceFailure, log):
            await run_transaction(
                self._store.record_screening_outcome,
                candidate_id,
                vacancy_id,
                result.score,
                result.feedback,
                status,
            )

        log.info("screening.scored", score=result.score, status=status.value)
        if self._audit:
            self._audit.append(
                {
                    "event": "screening",
                    "candidate_id": candidate_id,
                    "vacancy_id": str(vacancy_id),
                    "score": result.score,
                    "status": status.value,
                }
            )

        return ScreeningOutcome(
            candidate_id=candidate_id,
            vacancy_id=vacancy_id,
            score=result.score,
            feedback=result.feedback,
            status=status,
        )
