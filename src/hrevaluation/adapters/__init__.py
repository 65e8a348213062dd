"""Capability interfaces for the pipeline's external collaborators."""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable
from uuid import UUID

from ..schemas import AnswerScoringResult, ResumeScoringResult
from .documents import S3DocumentStore
from .extraction import PdfTextExtractor, TikaTextExtractor


@runtime_checkable
class ScoringClient(Protocol):
    """Turns candidate text into structured LLM scores."""

    async def score_resume(
        self,
        resume_text: str,
        vacancy_title: str,
        requirements: Iterable[str],
    ) -> ResumeScoringResult:
        """Score a resume against a vacancy title and its requirements."""

    async def score_answer(self, answer_text: str, reference_text: str) -> AnswerScoringResult:
        """Score an interview answer against its reference answer."""


@runtime_checkable
class DocumentStore(Protocol):
    """Resume documents keyed by candidate and vacancy."""

    def fetch_document(self, candidate_id: int, vacancy_id: UUID) -> bytes:
        """Return document bytes or raise ``NotFound``."""

    def get_read_link(self, candidate_id: int, vacancy_id: UUID) -> str:
        """Return a time-limited URL for reading the document."""


@runtime_checkable
class TextExtractor(Protocol):
    """Converts document bytes into plain text."""

    async def extract_text(self, document: bytes) -> str:
        """Return extracted text or raise ``ExtractionFailure``."""


__all__ = [
    "DocumentStore",
    "PdfTextExtractor",
    "S3DocumentStore",
    "ScoringClient",
    "TextExtractor",
    "TikaTextExtractor",
]
