"""Async streaming client for the hosted chat-completion endpoint."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
import logging
from typing import Any, Protocol

import httpx
import openai
from openai import AsyncOpenAI

from .config import InferenceSettings
from .exceptions import (
    FailureKind,
    InferenceAuthenticationError,
    InferenceError,
    InferenceTransportError,
    MissingCredentialError,
    ServiceUnavailableError,
)

LOGGER = logging.getLogger(__name__)

AUTH_INDICATORS = (
    "api key",
    "unauthorized",
    "invalid credentials",
    "invalid token",
    "invalid username or password",
)
LOADING_INDICATORS = ("loading",)
CONNECT_TIMEOUT_SECONDS = 10.0

_ERRORS_BY_KIND: dict[FailureKind, type[InferenceError]] = {
    FailureKind.AUTHENTICATION: InferenceAuthenticationError,
    FailureKind.SERVICE_UNAVAILABLE: ServiceUnavailableError,
    FailureKind.TRANSPORT: InferenceTransportError,
}


class InferenceClient(Protocol):
    """Anything that can stream completion fragments for one user message."""

    def stream_completion(self, user_message: str) -> AsyncIterator[str]: ...


def fold_fragments(fragments: Iterable[str]) -> str:
    """Concatenate fragments in arrival order."""
    return "".join(fragments)


def failure_reason(exc: BaseException) -> str:
    """Return a non-empty diagnostic string for an exception."""
    reason = str(exc).strip()
    return reason or type(exc).__name__


def classify_failure(exc: BaseException) -> FailureKind:
    """Map an SDK or transport exception to a failure kind."""
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return FailureKind.AUTHENTICATION
    if isinstance(exc, (openai.APIConnectionError, httpx.TransportError)):
        return FailureKind.TRANSPORT

    lower_message = str(exc).lower()
    if any(indicator in lower_message for indicator in AUTH_INDICATORS):
        return FailureKind.AUTHENTICATION
    if any(indicator in lower_message for indicator in LOADING_INDICATORS):
        return FailureKind.SERVICE_UNAVAILABLE
    if isinstance(exc, openai.APIStatusError) and exc.status_code == 503:
        return FailureKind.SERVICE_UNAVAILABLE
    return FailureKind.TRANSPORT


def map_exception(exc: BaseException) -> InferenceError:
    """Wrap ``exc`` in the typed inference error matching its classification."""
    if isinstance(exc, InferenceError):
        return exc
    error_cls = _ERRORS_BY_KIND[classify_failure(exc)]
    return error_cls(failure_reason(exc))


def build_messages(system_prompt: str, user_message: str) -> list[dict[str, str]]:
    """Build the two-message prompt: fixed system instruction, then the user text."""
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_message},
    ]


def extract_delta_text(chunk: Any) -> str:
    """Return the delta content of a streamed chunk, or an empty string."""
    choices = getattr(chunk, "choices", None)
    if not choices:
        return ""
    delta = getattr(choices[0], "delta", None)
    content = getattr(delta, "content", None)
    return content if isinstance(content, str) else ""


class HuggingFaceInferenceClient:
    """Stream completions from the Hugging Face router's OpenAI-compatible API."""

    def __init__(self, settings: InferenceSettings, client: Any | None = None) -> None:
        if not settings.has_credential:
            raise MissingCredentialError(
                f"No API key configured (checked inference.api_key and ${settings.api_key_env})."
            )
        self.settings = settings
        if client is not None:
            self._client = client
        else:
            self._client = AsyncOpenAI(
                base_url=settings.base_url,
                api_key=settings.api_key,
                timeout=httpx.Timeout(
                    settings.timeout, connect=CONNECT_TIMEOUT_SECONDS
                ),
                max_retries=0,
            )

    @property
    def model(self) -> str:
        return self.settings.model

    async def stream_completion(self, user_message: str) -> AsyncIterator[str]:
        """Yield reply fragments for ``user_message`` in arrival order.

        Any failure, whether raised while opening the stream or mid-stream,
        surfaces as an :class:`InferenceError` subclass.
        """
        LOGGER.info(
            "inference.request.start",
            extra={
                "event": "inference.request.start",
                "model": self.settings.model,
                "max_tokens": self.settings.max_tokens,
                "temperature": self.settings.temperature,
            },
        )
        fragment_count = 0
        try:
            stream = await self._client.chat.completions.create(
                model=self.settings.model,
                messages=build_messages(self.settings.system_prompt, user_message),
                max_tokens=self.settings.max_tokens,
                temperature=self.settings.temperature,
                stream=True,
            )
            async with stream:
                async for chunk in stream:
                    text = extract_delta_text(chunk)
                    if text:
                        fragment_count += 1
                        yield text
        except InferenceError:
            raise
        except Exception as exc:
            mapped = map_exception(exc)
            LOGGER.warning(
                "inference.request.failed",
                extra={
                    "event": "inference.request.failed",
                    "kind": mapped.kind.value,
                    "error_type": type(exc).__name__,
                    "reason": mapped.reason,
                },
            )
            raise mapped from exc

        LOGGER.info(
            "inference.request.complete",
            extra={
                "event": "inference.request.complete",
                "fragments": fragment_count,
            },
        )
