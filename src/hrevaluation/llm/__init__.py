"""LLM scoring client."""

from .client import (
    CompletionError,
    ResponseFormatError,
    YandexGPTClient,
    parse_result,
    strip_code_fence,
)
from .retry import retry_async

__all__ = [
    "CompletionError",
    "ResponseFormatError",
    "YandexGPTClient",
    "parse_result",
    "retry_async",
    "strip_code_fence",
]
