"""Read-side view combining a candidate's evaluation state for one vacancy."""

from __future__ import annotations

import asyncio
from uuid import UUID

from ..adapters import DocumentStore
from ..db import EvaluationStore
from ..errors import NotFound
from ..schemas import CandidateVacancyInfo


class CandidateReportService:
    def __init__(self, *, store: EvaluationStore, documents: DocumentStore) -> None:
        self._store = store
        self._documents = documents

    async def get_candidate_vacancy_info(self, candidate_id: int, vacancy_id: UUID) -> CandidateVacancyInfo:
        candidate = await asyncio.to_thread(self._store.get_candidate, candidate_id)
        vacancy = await asyncio.to_thread(self._store.get_vacancy, vacancy_id)
        questions = await asyncio.to_thread(self._store.list_questions, vacancy_id)
        meta = await self._optional(self._store.get_meta, candidate_id, vacancy_id)
        screening = await self._optional(self._store.get_resume_screening, candidate_id, vacancy_id)
        link = await asyncio.to_thread(self._documents.get_read_link, candidate_id, vacancy_id)
        return CandidateVacancyInfo(
            candidate=candidate,
            vacancy=vacancy,
            meta=meta,
            resume_screening=screening,
            questions=questions,
            resume_link=link,
        )

    @staticmethod
    async def _optional(fetch, *args):
        # Not-yet-evaluated candidates have no meta or screening rows.
        try:
            return await asyncio.to_thread(fetch, *args)
        except NotFound:
            return None
