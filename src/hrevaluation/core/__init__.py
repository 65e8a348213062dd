"""Evaluation orchestrators."""

from __future__ import annotations

from .audit import AuditLogger
from .interview import InterviewOutcome, InterviewScoringOrchestrator
from .policy import (
    INTERVIEW_THRESHOLD,
    SCREENING_THRESHOLD,
    interview_status,
    round_half_up_mean,
    screening_status,
)
from .reports import CandidateReportService
from .resume import ResumeScreeningOrchestrator, ScreeningOutcome

__all__ = [
    "AuditLogger",
    "CandidateReportService",
    "INTERVIEW_THRESHOLD",
    "InterviewOutcome",
    "InterviewScoringOrchestrator",
    "ResumeScreeningOrchestrator",
    "SCREENING_THRESHOLD",
    "ScreeningOutcome",
    "interview_status",
    "round_half_up_mean",
    "screening_status",
]
