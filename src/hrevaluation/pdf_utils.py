"""Utilities for extracting markdown from PDF resumes."""

from __future__ import annotations

import re
import tempfile
from pathlib import Path
from typing import Iterable, Sequence

import pymupdf4llm


def extract_markdown(
    pdf_path: str | Path,
    *,
    exclude_patterns: Sequence[str] | None = None,
) -> str:
    """Return markdown text extracted from a PDF, removing boilerplate lines.

    Parameters
    ----------
    pdf_path:
        Path to the source PDF file.
    exclude_patterns:
        Optional list of string patterns to remove entirely from the output lines.
        Each pattern is matched as a substring (case-sensitive), optionally
        followed by a page counter such as ``1 / 3``; any line containing it
        is dropped.
    """

    pdf_path = Path(pdf_path)
    if not pdf_path.exists():
        raise FileNotFoundError(pdf_path)

    markdown = pymupdf4llm.to_markdown(str(pdf_path))
    patterns = _build_patterns(exclude_patterns or ())
    if not patterns:
        return markdown

    cleaned_lines: list[str] = []
    for line in markdown.splitlines():
        if line.strip() and any(pattern.search(line) for pattern in patterns):
            continue
        cleaned_lines.append(line)
    return "\n".join(cleaned_lines)


def extract_markdown_from_bytes(
    data: bytes,
    *,
    exclude_patterns: Sequence[str] | None = None,
) -> str:
    """Same as :func:`extract_markdown` for an in-memory PDF document."""
    if not data:
        raise ValueError("empty document")
    with tempfile.TemporaryDirectory() as tmp_dir:
        pdf_path = Path(tmp_dir) / "document.pdf"
        pdf_path.write_bytes(data)
        return extract_markdown(pdf_path, exclude_patterns=exclude_patterns)


def _build_patterns(excludes: Iterable[str]) -> list[re.Pattern[str]]:
    patterns: list[re.Pattern[str]] = []
    for text in excludes:
        escaped = re.escape(text)
        pattern = re.compile(rf"{escaped}(?:\s+\d+\s*/\s*\d+)?")
        patterns.append(pattern)
    return patterns


__all__ = ["extract_markdown", "extract_markdown_from_bytes"]
