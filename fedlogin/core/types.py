"""
Core types and data structures for the federated login flow.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

from datetime import datetime, timezone
from typing import List, Optional, Dict, Any
from dataclasses import dataclass, field
from enum import Enum
import uuid


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class LoginMethod(Enum):
    """Ways a user can sign in"""
    PASSWORD = "password"
    GOOGLE = "google"
    GITHUB = "github"
    FACEBOOK = "facebook"
    APPLE = "apple"

    @property
    def provider_id(self) -> str:
        """Identifier the identity backend uses for this method"""
        return _PROVIDER_IDS[self]

    @property
    def is_federated(self) -> bool:
        return self is not LoginMethod.PASSWORD


_PROVIDER_IDS = {
    LoginMethod.PASSWORD: "password",
    LoginMethod.GOOGLE: "google.com",
    LoginMethod.GITHUB: "github.com",
    LoginMethod.FACEBOOK: "facebook.com",
    LoginMethod.APPLE: "apple.com",
}


class AttemptStatus(Enum):
    """Lifecycle status of a login attempt"""
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ErrorStage(Enum):
    """Stage of the login flow where an error originated"""
    VALIDATION = "validation"
    PROVIDER = "provider"
    BACKEND = "backend"
    NONCE_CHECK = "nonce-check"


class ErrorKind(Enum):
    """Kinds of login failure"""
    VALIDATION = "validation"
    BUSY = "busy"
    PROVIDER = "provider"
    PROVIDER_CANCELLED = "provider_cancelled"
    PROVIDER_TOKEN_MISSING = "provider_token_missing"
    PROVIDER_REJECTED = "provider_rejected"
    CHAINED_EXCHANGE = "chained_exchange"
    NONCE_MISSING = "nonce_missing"
    NONCE_MISMATCH = "nonce_mismatch"
    BACKEND = "backend"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class Credential:
    """Normalized proof of authentication from a federated provider"""
    provider: LoginMethod
    token: str
    raw_nonce: Optional[str] = None

    def __post_init__(self):
        if self.provider is LoginMethod.PASSWORD:
            raise ValueError("Password sign-in does not use a credential")
        if not self.token:
            # Imported here to keep types free of an import cycle with errors
            from ..auth.errors import ProviderTokenMissing
            raise ProviderTokenMissing("Credential requires a non-empty token")

    @property
    def provider_id(self) -> str:
        return self.provider.provider_id

    def __repr__(self) -> str:
        return f"Credential(provider={self.provider.value!r}, token=<redacted>)"


@dataclass
class Session:
    """Session issued by the identity backend"""
    subject_id: str
    method: LoginMethod
    issued_at: datetime = field(default_factory=utcnow)
    display_name: Optional[str] = None
    email: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result = {
            'subject_id': self.subject_id,
            'method': self.method.value,
            'issued_at': self.issued_at.isoformat(),
        }
        if self.display_name is not None:
            result['display_name'] = self.display_name
        if self.email is not None:
            result['email'] = self.email
        return result


@dataclass
class ErrorRecord:
    """Failure attached to a failed attempt"""
    kind: ErrorKind
    stage: ErrorStage
    message: str
    error_code: str = "LOGIN_ERROR"
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'kind': self.kind.value,
            'stage': self.stage.value,
            'message': self.message,
            'error_code': self.error_code,
            'details': self.details,
        }


@dataclass
class LoginAttempt:
    """
    One in-progress or completed authentication try.

    Only the orchestrator mutates an attempt. The nonce is fixed at
    creation; assigning it afterwards raises ``AttributeError``.
    """
    method: LoginMethod
    nonce: Optional[str] = None
    attempt_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: AttemptStatus = AttemptStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    credential: Optional[Credential] = None
    session: Optional[Session] = None
    error: Optional[ErrorRecord] = None

    def __setattr__(self, name, value):
        # attempt_id is assigned after nonce in __init__
        if name == "nonce" and "attempt_id" in self.__dict__:
            raise AttributeError("nonce is fixed when the attempt is created")
        super().__setattr__(name, value)

    @property
    def is_pending(self) -> bool:
        return self.status is AttemptStatus.PENDING

    def succeed(self, session: Session) -> None:
        """Mark the attempt as succeeded"""
        self._require_pending()
        self.session = session
        self.status = AttemptStatus.SUCCEEDED
        self.completed_at = utcnow()

    def fail(self, error: ErrorRecord) -> None:
        """Mark the attempt as failed"""
        self._require_pending()
        self.error = error
        self.status = AttemptStatus.FAILED
        self.completed_at = utcnow()

    def _require_pending(self) -> None:
        if not self.is_pending:
            raise RuntimeError(f"Attempt {self.attempt_id} is already {self.status.value}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary without secret material."""
        result = {
            'attempt_id': self.attempt_id,
            'method': self.method.value,
            'status': self.status.value,
            'created_at': self.created_at.isoformat(),
            'has_nonce': self.nonce is not None,
        }
        if self.completed_at is not None:
            result['completed_at'] = self.completed_at.isoformat()
        if self.session is not None:
            result['session'] = self.session.to_dict()
        if self.error is not None:
            result['error'] = self.error.to_dict()
        return result


@dataclass
class ProviderRequest:
    """Outgoing authorization request handed to a provider's UI"""
    attempt_id: str
    method: LoginMethod
    scopes: List[str] = field(default_factory=list)
    hashed_nonce: Optional[str] = None


@dataclass
class AccessTokenResult:
    """Outcome of an access-token provider flow (Google, GitHub, Facebook)"""
    access_token: Optional[str] = None
    cancelled: bool = False
    error: Optional[str] = None


@dataclass
class IdentityTokenResult:
    """Outcome of an identity-token provider flow (Apple)"""
    identity_token: Optional[str] = None
    nonce: Optional[str] = None  # Nonce echoed by the provider SDK, if any
    error: Optional[str] = None


@dataclass(frozen=True)
class LoginResult:
    """Terminal outcome delivered to the session notifier"""
    method: LoginMethod
    attempt_id: Optional[str] = None
    session: Optional[Session] = None
    error: Optional[ErrorRecord] = None

    @classmethod
    def success(cls, attempt: LoginAttempt, session: Session) -> "LoginResult":
        return cls(method=attempt.method, attempt_id=attempt.attempt_id, session=session)

    @classmethod
    def failure(cls, method: LoginMethod, error: ErrorRecord,
                attempt_id: Optional[str] = None) -> "LoginResult":
        return cls(method=method, attempt_id=attempt_id, error=error)

    @property
    def ok(self) -> bool:
        return self.session is not None

    @property
    def message(self) -> Optional[str]:
        """Short message for the presentation layer"""
        return self.error.message if self.error else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        if self.ok:
            return {'ok': self.session.to_dict(), 'attempt_id': self.attempt_id}
        return {'error': self.error.to_dict(), 'attempt_id': self.attempt_id}


class AuditEventType(Enum):
    """Login lifecycle events recorded in the audit trail"""
    ATTEMPT_STARTED = "attempt_started"
    ATTEMPT_SUCCEEDED = "attempt_succeeded"
    ATTEMPT_FAILED = "attempt_failed"
    ATTEMPT_REJECTED = "attempt_rejected"
    ATTEMPT_EXPIRED = "attempt_expired"
    NONCE_MISMATCH = "nonce_mismatch"
    CALLBACK_IGNORED = "callback_ignored"


@dataclass
class AuditEvent:
    """Audit event for logging and compliance"""
    event_type: AuditEventType
    method: Optional[LoginMethod] = None
    attempt_id: Optional[str] = None
    event_id: str = ""
    timestamp: datetime = field(default_factory=utcnow)
    severity: str = "info"  # info, warning or critical
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.event_id:
            self.event_id = str(uuid.uuid4())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type.value,
            "method": self.method.value if self.method else None,
            "attempt_id": self.attempt_id,
            "timestamp": self.timestamp.isoformat(),
            "severity": self.severity,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditEvent":
        """Create from dictionary."""
        method = data.get("method")
        return cls(
            event_id=data["event_id"],
            event_type=AuditEventType(data["event_type"]),
            method=LoginMethod(method) if method else None,
            attempt_id=data.get("attempt_id"),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            severity=data.get("severity", "info"),
            details=data.get("details", {}),
        )
