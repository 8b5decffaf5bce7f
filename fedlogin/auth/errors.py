# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Login error classes for fedlogin.

Every recoverable failure of a login attempt is a ``LoginError``. The
orchestrator converts them into ``ErrorRecord`` values at its boundary.
``EntropyUnavailableError`` is the one fatal condition and deliberately
does not derive from ``Exception``.
"""

from typing import Any, Dict, Optional

from ..core.types import ErrorKind, ErrorRecord, ErrorStage


class LoginError(Exception):
    """Base login error."""

    kind = ErrorKind.PROVIDER
    stage = ErrorStage.PROVIDER
    default_code = "LOGIN_ERROR"
    retryable = True

    def __init__(self, message: str, error_code: str = None, details: dict = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

    def is_retryable(self) -> bool:
        """Check if a fresh attempt may succeed."""
        return self.retryable

    def to_record(self) -> ErrorRecord:
        """Convert to the record attached to a failed attempt."""
        return ErrorRecord(
            kind=self.kind,
            stage=self.stage,
            message=self.message,
            error_code=self.error_code,
            details=dict(self.details),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'error': self.error_code,
            'error_description': self.message,
            'kind': self.kind.value,
            'stage': self.stage.value,
            'details': self.details,
        }


class ValidationError(LoginError):
    """Required login fields are missing or malformed."""

    kind = ErrorKind.VALIDATION
    stage = ErrorStage.VALIDATION
    default_code = "VALIDATION_ERROR"


class UnsupportedMethodError(ValidationError):
    """No adapter is registered for the requested login method."""

    def __init__(self, method: Any, details: dict = None):
        name = getattr(method, 'value', method)
        super().__init__(f"Unsupported login method: {name}", "UNSUPPORTED_METHOD", details)


class BusyError(LoginError):
    """Another attempt is still pending."""

    kind = ErrorKind.BUSY
    stage = ErrorStage.VALIDATION
    default_code = "ATTEMPT_IN_PROGRESS"

    def __init__(self, message: str = "A sign-in is already in progress.",
                 error_code: str = None, details: dict = None):
        super().__init__(message, error_code, details)


class ProviderError(LoginError):
    """Failure reported by, or caused by, a federated provider."""

    kind = ErrorKind.PROVIDER
    stage = ErrorStage.PROVIDER
    default_code = "PROVIDER_ERROR"


class ProviderCancelled(ProviderError):
    """The user dismissed the provider's own flow."""

    kind = ErrorKind.PROVIDER_CANCELLED
    default_code = "PROVIDER_CANCELLED"


class ProviderTokenMissing(ProviderError):
    """The provider reported success without a usable token."""

    kind = ErrorKind.PROVIDER_TOKEN_MISSING
    default_code = "PROVIDER_TOKEN_MISSING"


class ProviderRejected(ProviderError):
    """The provider rejected the attempt."""

    kind = ErrorKind.PROVIDER_REJECTED
    default_code = "PROVIDER_REJECTED"


class ChainedExchangeError(ProviderError):
    """Signing in with a credential exchanged from a provider token failed."""

    kind = ErrorKind.CHAINED_EXCHANGE
    stage = ErrorStage.BACKEND
    default_code = "CHAINED_EXCHANGE_FAILED"


class NonceMissing(LoginError):
    """No nonce was recorded on the attempt that received an identity token."""

    kind = ErrorKind.NONCE_MISSING
    stage = ErrorStage.NONCE_CHECK
    default_code = "NONCE_MISSING"


class NonceMismatch(LoginError):
    """The nonce echoed by the provider does not belong to this attempt."""

    kind = ErrorKind.NONCE_MISMATCH
    stage = ErrorStage.NONCE_CHECK
    default_code = "NONCE_MISMATCH"

    def __init__(self, message: str = "Sign-in request could not be verified.",
                 error_code: str = None, details: dict = None):
        super().__init__(message, error_code, details)


class BackendError(LoginError):
    """The identity backend rejected the request or was unreachable."""

    kind = ErrorKind.BACKEND
    stage = ErrorStage.BACKEND
    default_code = "BACKEND_ERROR"


class AttemptTimeout(LoginError):
    """The attempt did not resolve before its deadline."""

    kind = ErrorKind.TIMEOUT
    stage = ErrorStage.BACKEND
    default_code = "ATTEMPT_TIMEOUT"

    def __init__(self, message: str = "Sign-in timed out. Please try again.",
                 error_code: str = None, details: dict = None):
        super().__init__(message, error_code, details)


class EntropyUnavailableError(BaseException):
    """The secure random source failed; nonces cannot be generated safely."""

    def __init__(self, message: str = "Unable to generate nonce.", cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
