"""Structured results returned by the scoring client."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ResumeScoringResult(BaseModel):
    """Score and free-text feedback for a resume."""

    score: int = Field(ge=0, le=100)
    feedback: str = ""

    model_config = ConfigDict(extra="ignore")


class AnswerScoringResult(BaseModel):
    """Score for a single interview answer."""

    score: int = Field(ge=0, le=100)

    model_config = ConfigDict(extra="ignore")
