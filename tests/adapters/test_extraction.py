from __future__ import annotations

import asyncio

import httpx
import pytest

import hrevaluation.pdf_utils as pdf_utils
from hrevaluation.adapters import PdfTextExtractor, TextExtractor, TikaTextExtractor
from hrevaluation.errors import ExtractionFailure


def tika(handler) -> TikaTextExtractor:
    return TikaTextExtractor(
        "http://tika.test:9998/",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def test_tika_returns_plain_text():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text="Jane Doe\nPython developer")

    extractor = tika(handler)
    assert isinstance(extractor, TextExtractor)

    text = asyncio.run(extractor.extract_text(b"%PDF-1.4"))

    assert text == "Jane Doe\nPython developer"
    [request] = requests
    assert request.method == "PUT"
    assert str(request.url) == "http://tika.test:9998/tika"
    assert request.headers["Accept"] == "text/plain"
    assert request.content == b"%PDF-1.4"


def test_tika_error_status_is_extraction_failure():
    extractor = tika(lambda request: httpx.Response(422, text="Unprocessable"))

    with pytest.raises(ExtractionFailure, match="422"):
        asyncio.run(extractor.extract_text(b"garbage"))


def test_tika_unreachable_is_extraction_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ExtractionFailure, match="can't reach"):
        asyncio.run(tika(handler).extract_text(b"%PDF-1.4"))


def test_pdf_extractor_uses_pymupdf4llm(monkeypatch):
    monkeypatch.setattr(pdf_utils.pymupdf4llm, "to_markdown", lambda path: "# Resume\nPage 1 / 2\nPython")

    text = asyncio.run(PdfTextExtractor(exclude_patterns=["Page"]).extract_text(b"%PDF-1.4"))

    assert text == "# Resume\nPython"


def test_pdf_extractor_wraps_failures(monkeypatch):
    def broken(path: str) -> str:
        raise RuntimeError("cannot open broken document")

    monkeypatch.setattr(pdf_utils.pymupdf4llm, "to_markdown", broken)

    with pytest.raises(ExtractionFailure, match="cannot open broken document"):
        asyncio.run(PdfTextExtractor().extract_text(b"not a pdf"))
