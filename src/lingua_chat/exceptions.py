"""Domain exception hierarchy for the LinguaTerm chat application."""

from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    """Classified reason an inference attempt failed."""

    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    SERVICE_UNAVAILABLE = "service_unavailable"
    TRANSPORT = "transport"


class LinguaChatError(RuntimeError):
    """Base class for all domain-level chat errors."""


class ConfigValidationError(LinguaChatError):
    """Raised when configuration cannot be validated safely."""


class MissingCredentialError(LinguaChatError):
    """Raised when no API access token is configured."""

    kind = FailureKind.CONFIGURATION


class InferenceError(LinguaChatError):
    """Raised when the hosted inference endpoint fails a request."""

    kind = FailureKind.TRANSPORT

    def __init__(self, reason: str = "") -> None:
        super().__init__(reason)
        self.reason = reason


class InferenceAuthenticationError(InferenceError):
    """Raised when the remote service rejects the access token."""

    kind = FailureKind.AUTHENTICATION


class ServiceUnavailableError(InferenceError):
    """Raised when the remote model is still loading or temporarily unavailable."""

    kind = FailureKind.SERVICE_UNAVAILABLE


class InferenceTransportError(InferenceError):
    """Raised for any other request or streaming failure."""

    kind = FailureKind.TRANSPORT
