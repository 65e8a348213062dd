from __future__ import annotations

from pathlib import Path
from uuid import UUID

import pytest

from hrevaluation.db import EvaluationStore, build_engine, build_session_factory, create_schema
from hrevaluation.errors import ExtractionFailure, NotFound
from hrevaluation.schemas import (
    AnswerScoringResult,
    NewCandidate,
    NewQuestion,
    NewVacancy,
    ResumeScoringResult,
)


class StubScorer:
    def __init__(self) -> None:
        self.resume_result = ResumeScoringResult(score=80, feedback="Strong Python background")
        self.answer_scores: list[int] = []
        self.error: Exception | None = None
        self.calls: list[tuple] = []
        self.closed = False

    async def score_resume(self, resume_text, vacancy_title, requirements) -> ResumeScoringResult:
        self.calls.append(("resume", resume_text, vacancy_title, list(requirements)))
        if self.error:
            raise self.error
        return self.resume_result

    async def score_answer(self, answer_text, reference_text) -> AnswerScoringResult:
        self.calls.append(("answer", answer_text, reference_text))
        if self.error:
            raise self.error
        score = self.answer_scores.pop(0) if self.answer_scores else 50
        return AnswerScoringResult(score=score)

    async def aclose(self) -> None:
        self.closed = True


class StubDocuments:
    def __init__(self) -> None:
        self.documents: dict[tuple[int, UUID], bytes] = {}

    def fetch_document(self, candidate_id: int, vacancy_id: UUID) -> bytes:
        try:
            return self.documents[(candidate_id, vacancy_id)]
        except KeyError:
            raise NotFound(f"no resume uploaded for candidate {candidate_id}") from None

    def get_read_link(self, candidate_id: int, vacancy_id: UUID) -> str:
        return f"https://storage.test/resumes/{candidate_id}/{vacancy_id}?X-Amz-Expires=1200"


class StubExtractor:
    def __init__(self, text: str = "Senior Python developer, 6 years of SQL") -> None:
        self.text = text
        self.error: Exception | None = None
        self.calls: list[bytes] = []

    async def extract_text(self, document: bytes) -> str:
        self.calls.append(document)
        if self.error:
            raise self.error
        return self.text


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'evaluation.db'}"


@pytest.fixture
def session_factory(database_url: str):
    engine = build_engine(database_url)
    create_schema(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def store(session_factory) -> EvaluationStore:
    return EvaluationStore(session_factory)


@pytest.fixture
def vacancy_id(store: EvaluationStore) -> UUID:
    return store.create_vacancy(
        NewVacancy(
            title="Backend Engineer",
            key_requirements=["Python", "SQL", "asyncio"],
            questions=[
                NewQuestion(content="What is a transaction?", reference="A unit of work that is atomic.", time_limit=120),
                NewQuestion(content="What is the GIL?", reference="A lock serialising bytecode execution.", time_limit=90),
                NewQuestion(content="What does an index do?", reference="Speeds up lookups by key.", time_limit=60),
            ],
        )
    )


@pytest.fixture
def candidate_id(store: EvaluationStore) -> int:
    return store.create_candidate(
        NewCandidate(telegram_id=1001, telegram_username="jdoe", full_name="Jane Doe", city="Kazan")
    )


@pytest.fixture
def scorer() -> StubScorer:
    return StubScorer()


@pytest.fixture
def documents() -> StubDocuments:
    return StubDocuments()


@pytest.fixture
def extractor() -> StubExtractor:
    return StubExtractor()


@pytest.fixture
def failing_extractor() -> StubExtractor:
    extractor = StubExtractor()
    extractor.error = ExtractionFailure("tika returned 500")
    return extractor
