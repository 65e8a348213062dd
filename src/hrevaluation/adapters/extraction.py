"""Text extraction from resume documents."""

from __future__ import annotations

import asyncio
from typing import Sequence

import httpx
import structlog

from ..errors import ExtractionFailure
from ..pdf_utils import extract_markdown_from_bytes


class TikaTextExtractor:
    """Plain-text extraction through an Apache Tika server."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = base_url.rstrip("/") + "/tika"
        self._timeout = timeout
        self._http = http_client or httpx.AsyncClient()
        self._logger = structlog.get_logger(__name__)

    async def extract_text(self, document: bytes) -> str:
        try:
            response = await self._http.put(
                self._url,
                content=document,
                headers={"Content-Type": "application/pdf", "Accept": "text/plain"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise ExtractionFailure(f"can't reach text extractor: {exc}") from exc
        if not response.is_success:
            raise ExtractionFailure(
                f"text extractor returned {response.status_code}: {response.text[:200]}"
            )
        self._logger.debug("extraction.done", size=len(document), chars=len(response.text))
        return response.text

    async def aclose(self) -> None:
        await self._http.aclose()


class PdfTextExtractor:
    """Local extraction with pymupdf4llm, for deployments without Tika."""

    def __init__(self, *, exclude_patterns: Sequence[str] | None = None) -> None:
        self._exclude_patterns = exclude_patterns

    async def extract_text(self, document: bytes) -> str:
        try:
            return await asyncio.to_thread(
                extract_markdown_from_bytes,
                document,
                exclude_patterns=self._exclude_patterns,
            )
        except Exception as exc:  # noqa: BLE001
            raise ExtractionFailure(f"can't extract text from PDF: {exc}") from exc

    async def aclose(self) -> None:
        return None


__all__ = ["PdfTextExtractor", "TikaTextExtractor"]
