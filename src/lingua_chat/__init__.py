"""Top-level package for lingua-chat-tui."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import LinguaChatApp
    from .config import InferenceSettings, ensure_config_dir, load_config
    from .exceptions import (
        ConfigValidationError,
        FailureKind,
        InferenceAuthenticationError,
        InferenceError,
        InferenceTransportError,
        LinguaChatError,
        MissingCredentialError,
        ServiceUnavailableError,
    )
    from .inference import HuggingFaceInferenceClient
    from .session import ChatSession, SubmitOutcome
    from .transcript import Message, MessageRole, TranscriptStore

_EXPORTS: dict[str, str] = {
    "LinguaChatApp": ".app",
    "InferenceSettings": ".config",
    "ensure_config_dir": ".config",
    "load_config": ".config",
    "ConfigValidationError": ".exceptions",
    "FailureKind": ".exceptions",
    "InferenceAuthenticationError": ".exceptions",
    "InferenceError": ".exceptions",
    "InferenceTransportError": ".exceptions",
    "LinguaChatError": ".exceptions",
    "MissingCredentialError": ".exceptions",
    "ServiceUnavailableError": ".exceptions",
    "HuggingFaceInferenceClient": ".inference",
    "ChatSession": ".session",
    "SubmitOutcome": ".session",
    "Message": ".transcript",
    "MessageRole": ".transcript",
    "TranscriptStore": ".transcript",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> Any:
    """Lazily import symbols to keep the UI and SDK dependencies out of bare imports."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
