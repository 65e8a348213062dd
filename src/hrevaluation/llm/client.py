"""YandexGPT completion client producing structured scores."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Iterable, TypeVar

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError

from ..schemas import AnswerScoringResult, ResumeScoringResult
from ..schemas.config import DEFAULT_COMPLETION_URL
from .prompts import answer_messages, resume_messages
from .retry import retry_async

ResultT = TypeVar("ResultT", bound=BaseModel)


class CompletionError(Exception):
    """A single completion attempt failed; the attempt may be retried."""


class ResponseFormatError(CompletionError):
    """Model output could not be parsed into the expected JSON object."""


class _Message(BaseModel):
    text: str


class _Alternative(BaseModel):
    message: _Message


class _CompletionResult(BaseModel):
    alternatives: list[_Alternative] = Field(default_factory=list)


class _CompletionResponse(BaseModel):
    """Envelope of a completion response; unknown fields are ignored."""

    result: _CompletionResult


RETRYABLE_ERRORS: tuple[type[BaseException], ...] = (
    CompletionError,
    httpx.HTTPError,
    TimeoutError,
)


def strip_code_fence(text: str) -> str:
    """Remove surrounding markdown code-fence markers from model output."""
    cleaned = text.strip().strip("`").strip()
    if cleaned[:4].lower() == "json" and cleaned[4:5] in ("", "\n", "\r", " ", "{"):
        cleaned = cleaned[4:].lstrip()
    return cleaned


def parse_result(text: str, result_type: type[ResultT]) -> ResultT:
    """Validate model output as ``result_type`` after trimming code fences."""
    cleaned = strip_code_fence(text)
    try:
        return result_type.model_validate_json(cleaned)
    except ValidationError as exc:
        raise ResponseFormatError(f"can't parse model output {cleaned[:200]!r}: {exc}") from exc


class YandexGPTClient:
    """Scoring client backed by the YandexGPT completion endpoint.

    One instance may be shared by concurrent callers: it keeps no state
    between calls apart from the pooled ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        *,
        api_key: str,
        folder_id: str,
        endpoint: str = DEFAULT_COMPLETION_URL,
        model: str = "yandexgpt/latest",
        temperature: float = 0.2,
        max_tokens: int = 20_000,
        call_timeout: float = 15.0,
        attempts: int = 5,
        retry_delay: float = 1.0,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._api_key = api_key
        self._folder_id = folder_id
        self._endpoint = endpoint
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._call_timeout = call_timeout
        self._attempts = attempts
        self._retry_delay = retry_delay
        self._http = http_client or httpx.AsyncClient()
        self._sleep = sleep
        self._logger = structlog.get_logger(__name__)

    @property
    def model_uri(self) -> str:
        return f"gpt://{self._folder_id}/{self._model}"

    async def score_resume(
        self,
        resume_text: str,
        vacancy_title: str,
        requirements: Iterable[str],
    ) -> ResumeScoringResult:
        messages = resume_messages(resume_text, vacancy_title, requirements)
        return await self._score(messages, ResumeScoringResult, name="score resume")

    async def score_answer(self, answer_text: str, reference_text: str) -> AnswerScoringResult:
        messages = answer_messages(answer_text, reference_text)
        return await self._score(messages, AnswerScoringResult, name="score answer")

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _score(
        self,
        messages: list[dict[str, str]],
        result_type: type[ResultT],
        *,
        name: str,
    ) -> ResultT:
        async def attempt() -> ResultT:
            text = await asyncio.wait_for(self._complete(messages), timeout=self._call_timeout)
            return parse_result(text, result_type)

        result = await retry_async(
            attempt,
            attempts=self._attempts,
            delay=self._retry_delay,
            retry_on=RETRYABLE_ERRORS,
            sleep=self._sleep,
            name=name,
        )
        self._logger.info("llm.scored", operation=name, score=result.score)
        return result

    async def _complete(self, messages: list[dict[str, str]]) -> str:
        body: dict[str, Any] = {
            "modelUri": self.model_uri,
            "completionOptions": {
                "stream": False,
                "temperature": self._temperature,
                "maxTokens": self._max_tokens,
            },
            "messages": messages,
        }
        response = await self._http.post(
            self._endpoint,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Api-Key {self._api_key}",
                "x-folder-id": self._folder_id,
            },
            json=body,
            timeout=self._call_timeout,
        )
        if not response.is_success:
            raise CompletionError(f"non-2xx status {response.status_code}: {response.text[:500]}")

        try:
            envelope = _CompletionResponse.model_validate_json(response.content)
        except ValueError as exc:
            raise ResponseFormatError(f"malformed completion response: {exc}") from exc

        if not envelope.result.alternatives:
            raise CompletionError("no output")
        return envelope.result.alternatives[0].message.text


__all__ = [
    "CompletionError",
    "RETRYABLE_ERRORS",
    "ResponseFormatError",
    "YandexGPTClient",
    "parse_result",
    "strip_code_fence",
]
