"""Prompt templates for resume and answer scoring."""

from __future__ import annotations

from typing import Iterable

RESUME_SYSTEM_PROMPT = "You are an HR specialist screening candidate resumes."

RESUME_USER_PROMPT = """Evaluate the resume of a candidate applying for the vacancy "{title}".
Describe the candidate in general terms and rate them on a 100-point scale, where 100 means
an excellent candidate who fits perfectly and 0 means the candidate fails most criteria.
Take a holistic view. Most importantly, weigh the skills and qualities the vacancy requires:
{requirements}.
Your answer must be only a JSON object with exactly two fields:
{{"feedback": "<general description, string>", "score": <rating, integer 0-100>}}
Candidate resume:
{resume}"""

ANSWER_SYSTEM_PROMPT = "You are a specialist reviewing candidates' interview answers."

ANSWER_USER_PROMPT = """Evaluate the candidate's answer on a 100-point scale, where 100 means an
excellent answer that fully matches the reference answer and 0 means a very poor answer that
matches neither the reference nor reality. Take a holistic view.
Your answer must be only a JSON object with exactly one field:
{{"score": <rating, integer 0-100>}}
Candidate answer: {answer}
Reference answer: {reference}"""


def resume_messages(resume_text: str, vacancy_title: str, requirements: Iterable[str]) -> list[dict[str, str]]:
    """Build system and user messages for resume scoring."""
    return [
        {"role": "system", "text": RESUME_SYSTEM_PROMPT},
        {
            "role": "user",
            "text": RESUME_USER_PROMPT.format(
                title=vacancy_title,
                requirements=", ".join(requirements),
                resume=resume_text,
            ),
        },
    ]


def answer_messages(answer_text: str, reference_text: str) -> list[dict[str, str]]:
    """Build system and user messages for answer scoring."""
    return [
        {"role": "system", "text": ANSWER_SYSTEM_PROMPT},
        {
            "role": "user",
            "text": ANSWER_USER_PROMPT.format(answer=answer_text, reference=reference_text),
        },
    ]


__all__ = ["resume_messages", "answer_messages"]
