"""
fedlogin Python Package

Federated login orchestration: password and OAuth/OpenID provider sign-in
coordinated into one attempt with exactly one outcome.
"""

__version__ = "0.1.0"

from .core.types import (
    LoginMethod,
    AttemptStatus,
    ErrorKind,
    ErrorStage,
    LoginAttempt,
    Credential,
    Session,
    ErrorRecord,
    LoginResult,
    ProviderRequest,
    AccessTokenResult,
    IdentityTokenResult,
)
from .core.config import Config
from .core.orchestrator import AuthOrchestrator
from .backend import BackendAuthClient, InMemoryBackendClient
from .notify import SessionNotifier, CallbackNotifier, MemoryNotifier

__all__ = [
    "AuthOrchestrator",
    "Config",
    "LoginMethod",
    "AttemptStatus",
    "ErrorKind",
    "ErrorStage",
    "LoginAttempt",
    "Credential",
    "Session",
    "ErrorRecord",
    "LoginResult",
    "ProviderRequest",
    "AccessTokenResult",
    "IdentityTokenResult",
    "BackendAuthClient",
    "InMemoryBackendClient",
    "SessionNotifier",
    "CallbackNotifier",
    "MemoryNotifier",
]
