"""
Login orchestrator for fedlogin.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

Protocol Usage Declaration:
  - OAuth 2.0: USED through the provider adapters (see fedlogin.providers)
  - OpenID:    USED for the nonce check on identity-token attempts
  - PKCE:      NOT USED anywhere in this file
"""

import asyncio
import concurrent.futures
import copy
import logging
import threading
from collections import deque
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from .config import Config
from .types import (
    AuditEvent,
    AuditEventType,
    Credential,
    LoginAttempt,
    LoginMethod,
    LoginResult,
    ProviderRequest,
    Session,
    utcnow,
)
from ..auth.errors import (
    AttemptTimeout,
    BackendError,
    BusyError,
    LoginError,
    ProviderError,
    NonceMismatch,
    NonceMissing,
    UnsupportedMethodError,
    ValidationError,
)
from ..auth.nonce import NonceGenerator
from ..audit.logger import AuditLogger, MemoryAuditLogger
from ..backend.client import BackendAuthClient
from ..notify.notifier import LoggingNotifier, SessionNotifier
from ..providers.base import CredentialAdapter
from ..providers.registry import create_default_adapters
from ..util.encoding import secure_compare


class AuthOrchestrator:
    """
    Coordinates one login attempt at a time across password and federated providers.

    States: Idle -> Pending -> Succeeded | Failed -> Idle. Every attempt
    produces exactly one terminal notification. Provider and backend
    completions may arrive from any thread; all transitions of the attempt
    slot happen under one lock and never across an ``await``.
    """

    def __init__(
        self,
        backend: BackendAuthClient,
        notifier: Optional[SessionNotifier] = None,
        config: Optional[Config] = None,
        adapters: Optional[Dict[LoginMethod, CredentialAdapter]] = None,
        nonce_generator: Optional[NonceGenerator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            backend: Identity backend that issues sessions
            notifier: Receives terminal results (defaults to logging them)
            config: Orchestrator configuration
            adapters: Credential adapters keyed by method (defaults to all providers)
            nonce_generator: Nonce source for the default identity-token adapter
            audit_logger: Audit trail (defaults to in-memory)
        """
        self.config = config or Config()
        self.backend = backend
        self.notifier = notifier or LoggingNotifier()
        self.adapters = adapters if adapters is not None else create_default_adapters(
            self.config, nonce_generator
        )
        self.audit_logger = audit_logger or MemoryAuditLogger(max_entries=self.config.audit_max_entries)
        self.logger = logging.getLogger(__name__)

        self._lock = threading.Lock()
        self._pending: Optional[LoginAttempt] = None
        self._resolving = False
        self._history: deque = deque(maxlen=self.config.history_size)

    @classmethod
    def new(
        cls,
        backend: BackendAuthClient,
        notifier: Optional[SessionNotifier] = None,
        config: Optional[Config] = None,
        **kwargs: Any,
    ) -> "AuthOrchestrator":
        """
        Create an orchestrator after validating its configuration.

        Raises:
            ValueError: If configuration is invalid

        Example:
            orchestrator = AuthOrchestrator.new(InMemoryBackendClient(), MemoryNotifier())
        """
        config = config or Config()
        config.validate()
        return cls(backend, notifier, config, **kwargs)

    # Read-only views

    @property
    def is_busy(self) -> bool:
        with self._lock:
            return self._pending is not None

    @property
    def pending_attempt(self) -> Optional[LoginAttempt]:
        """Snapshot of the pending attempt, if any."""
        with self._lock:
            return copy.deepcopy(self._pending) if self._pending else None

    @property
    def history(self) -> List[LoginAttempt]:
        """Snapshots of recently completed attempts, oldest first."""
        with self._lock:
            return [copy.deepcopy(attempt) for attempt in self._history]

    # Triggers

    async def trigger_password(self, email: str, password: str) -> LoginResult:
        """
        Sign in with email and password.

        Empty fields fail with a validation error before any attempt is
        created or the backend is contacted.

        Example:
            result = await orchestrator.trigger_password("a@b.com", "secret")
        """
        email = (email or "").strip()
        if not email or not password:
            return await self._reject(
                LoginMethod.PASSWORD,
                ValidationError("Please enter both email and password.")
            )

        try:
            attempt, expired = self._claim(LoginMethod.PASSWORD, resolving=True)
        except BusyError as e:
            return await self._reject(LoginMethod.PASSWORD, e)

        async def sign_in() -> Session:
            await self._announce(attempt, expired)
            return await self._call_backend(self.backend.sign_in_with_password(email, password))

        return await self._resolve(attempt, sign_in)

    async def begin_provider(self, method: LoginMethod) -> ProviderRequest:
        """
        Start a federated attempt before the provider's UI runs.

        For identity-token providers this generates the attempt's nonce; the
        returned request carries only its digest.

        Raises:
            UnsupportedMethodError: If no adapter handles ``method``
            BusyError: If another attempt is pending
            EntropyUnavailableError: If the secure random source failed
        """
        try:
            adapter = self._adapter_for(method)
        except UnsupportedMethodError as e:
            await self._reject(method, e)
            raise

        nonce = adapter.create_nonce()

        try:
            attempt, expired = self._claim(method, nonce=nonce, resolving=False)
        except BusyError as e:
            await self._reject(method, e)
            raise

        try:
            await self._announce(attempt, expired)
            request = adapter.prepare(attempt)
        except BaseException as e:
            await self._finish(attempt, error=self._as_login_error(e))
            raise

        self.logger.info(f"Started {method.value} attempt {attempt.attempt_id}")
        return request

    async def complete_provider(self, attempt_id: str, result: Any) -> Optional[LoginResult]:
        """
        Provider callback for an attempt started with ``begin_provider``.

        Callbacks for anything other than the pending, not yet resolving
        attempt (duplicates, late or unknown callbacks) are ignored and
        return None without notifying anyone.
        """
        with self._lock:
            attempt = self._pending
            accepted = attempt is not None and attempt.attempt_id == attempt_id and not self._resolving
            if accepted:
                self._resolving = True

        if not accepted:
            self.logger.warning(f"Ignoring provider callback for attempt {attempt_id}: not awaiting a callback")
            await self._audit(AuditEventType.CALLBACK_IGNORED, attempt_id=attempt_id, severity="warning")
            return None

        if self._deadline_passed(attempt):
            return await self._finish(attempt, error=AttemptTimeout(
                details={'reason': 'provider callback arrived after the deadline'}
            ))

        adapter = self.adapters[attempt.method]
        return await self._resolve(attempt, lambda: self._exchange(attempt, adapter, result))

    def complete_provider_threadsafe(
        self,
        attempt_id: str,
        result: Any,
        loop: asyncio.AbstractEventLoop,
    ) -> "concurrent.futures.Future[Optional[LoginResult]]":
        """Schedule ``complete_provider`` on ``loop`` from a provider SDK thread."""
        return asyncio.run_coroutine_threadsafe(self.complete_provider(attempt_id, result), loop)

    async def trigger_provider(self, method: LoginMethod, result: Any) -> LoginResult:
        """
        Sign in with a provider whose UI has already completed.

        No nonce can exist for an attempt created this way, so identity-token
        providers fail with ``NonceMissing`` here; use ``begin_provider`` and
        ``complete_provider`` for them.
        """
        try:
            adapter = self._adapter_for(method)
        except UnsupportedMethodError as e:
            return await self._reject(method, e)

        try:
            attempt, expired = self._claim(method, resolving=True)
        except BusyError as e:
            return await self._reject(method, e)

        async def sign_in() -> Session:
            await self._announce(attempt, expired)
            return await self._exchange(attempt, adapter, result)

        return await self._resolve(attempt, sign_in)

    async def close(self) -> None:
        """Release the backend and audit logger."""
        await self.backend.close()
        await self.audit_logger.close()

    # Attempt slot

    def _adapter_for(self, method: LoginMethod) -> CredentialAdapter:
        adapter = None
        if isinstance(method, LoginMethod) and method.is_federated:
            adapter = self.adapters.get(method)
        if adapter is None:
            raise UnsupportedMethodError(method)
        return adapter

    def _claim(self, method: LoginMethod, nonce: Optional[str] = None,
               resolving: bool = True) -> Tuple[LoginAttempt, Optional[LoginAttempt]]:
        """Create the pending attempt, expiring a stale one first."""
        with self._lock:
            expired = None
            if self._pending is not None:
                if self._resolving or not self._deadline_passed(self._pending):
                    raise BusyError(details={'pending_method': self._pending.method.value})
                expired = self._pending
                expired.fail(AttemptTimeout(
                    details={'reason': 'provider callback never arrived'}
                ).to_record())
                self._history.append(expired)

            attempt = LoginAttempt(method=method, nonce=nonce)
            self._pending = attempt
            self._resolving = resolving
            return attempt, expired

    def _deadline_passed(self, attempt: LoginAttempt) -> bool:
        timeout = self.config.attempt_timeout
        return timeout is not None and utcnow() - attempt.created_at > timeout

    async def _announce(self, attempt: LoginAttempt, expired: Optional[LoginAttempt]) -> None:
        if expired is not None:
            self.logger.warning(f"Attempt {expired.attempt_id} expired without a provider callback")
            await self._publish(expired, AuditEventType.ATTEMPT_EXPIRED)

        await self._audit(AuditEventType.ATTEMPT_STARTED, attempt.method, attempt.attempt_id,
                          details={'has_nonce': attempt.nonce is not None})
        await self.notifier.loading_changed(True)

    # Resolution

    async def _resolve(self, attempt: LoginAttempt,
                       operation: Callable[[], Awaitable[Session]]) -> LoginResult:
        try:
            session = await operation()
        except Exception as e:
            outcome = await self._finish(attempt, error=self._as_login_error(e))
        except BaseException as e:
            await self._finish(attempt, error=self._as_login_error(e))
            raise
        else:
            outcome = await self._finish(attempt, session=session)

        if outcome is not None:
            return outcome
        # Resolved elsewhere first; report what the attempt ended as
        if attempt.session is not None:
            return LoginResult.success(attempt, attempt.session)
        return LoginResult.failure(attempt.method, attempt.error, attempt.attempt_id)

    def _as_login_error(self, error: BaseException) -> LoginError:
        """Error record for a failure that escaped the provider or backend stage."""
        if isinstance(error, LoginError):
            return error
        if not isinstance(error, Exception):
            return BackendError("Sign-in was interrupted.")
        self.logger.error(f"Unexpected {type(error).__name__} during sign-in: {error}")
        return ProviderError(str(error) or type(error).__name__, details={'exception': type(error).__name__})

    async def _exchange(self, attempt: LoginAttempt, adapter: CredentialAdapter, result: Any) -> Session:
        credential = adapter.exchange(attempt, result)
        with self._lock:
            attempt.credential = credential

        if adapter.requires_nonce:
            self._verify_nonce(attempt, credential)

        try:
            return await self._call_backend(self.backend.sign_in_with_credential(credential))
        except LoginError as e:
            wrapped = adapter.wrap_backend_error(e)
            if wrapped is None:
                raise
            raise wrapped from e

    def _verify_nonce(self, attempt: LoginAttempt, credential: Credential) -> None:
        if attempt.nonce is None:
            raise NonceMissing("Invalid sign-in request.")
        if not secure_compare(credential.raw_nonce, attempt.nonce):
            raise NonceMismatch(details={
                'echoed': 'absent' if credential.raw_nonce is None else 'different',
            })

    async def _call_backend(self, call: Awaitable[Session]) -> Session:
        timeout = self.config.attempt_timeout
        try:
            if timeout is None:
                return await call
            return await asyncio.wait_for(call, timeout.total_seconds())
        except asyncio.TimeoutError:
            raise AttemptTimeout(details={'stage': 'backend'})
        except LoginError:
            raise
        except Exception as e:
            self.logger.error(f"Identity backend call failed: {e}")
            raise BackendError(str(e) or type(e).__name__) from e

    async def _finish(self, attempt: LoginAttempt, session: Optional[Session] = None,
                      error: Optional[LoginError] = None) -> Optional[LoginResult]:
        """Apply the terminal transition once; later calls return None."""
        with self._lock:
            if self._pending is not attempt or not attempt.is_pending:
                return None
            if error is None:
                attempt.succeed(session)
            else:
                attempt.fail(error.to_record())
            self._pending = None
            self._resolving = False
            self._history.append(attempt)

        if isinstance(error, NonceMismatch):
            self.logger.warning(f"Nonce mismatch on attempt {attempt.attempt_id}; backend not contacted")
            await self._audit(AuditEventType.NONCE_MISMATCH, attempt.method, attempt.attempt_id,
                              severity="critical", details=dict(error.details))
        elif error is not None:
            self.logger.info(f"Attempt {attempt.attempt_id} failed at {error.stage.value}: {error.message}")
        else:
            self.logger.info(f"Attempt {attempt.attempt_id} succeeded for subject {session.subject_id}")

        event_type = AuditEventType.ATTEMPT_SUCCEEDED if error is None else AuditEventType.ATTEMPT_FAILED
        return await self._publish(attempt, event_type)

    async def _publish(self, attempt: LoginAttempt, event_type: AuditEventType) -> LoginResult:
        if attempt.session is not None:
            result = LoginResult.success(attempt, attempt.session)
            details = {'subject_id': attempt.session.subject_id}
        else:
            result = LoginResult.failure(attempt.method, attempt.error, attempt.attempt_id)
            details = {'kind': attempt.error.kind.value, 'stage': attempt.error.stage.value}

        await self._audit(event_type, attempt.method, attempt.attempt_id,
                          severity="info" if result.ok else "warning", details=details)
        try:
            await self.notifier.loading_changed(False)
        finally:
            await self.notifier.notify(result)
        return result

    async def _reject(self, method: LoginMethod, error: LoginError) -> LoginResult:
        """Surface a failure that never created an attempt."""
        self.logger.info(f"Rejected {getattr(method, 'value', method)} sign-in: {error.message}")
        result = LoginResult.failure(method, error.to_record())
        await self._audit(AuditEventType.ATTEMPT_REJECTED,
                          method if isinstance(method, LoginMethod) else None,
                          severity="warning",
                          details={'kind': error.kind.value, 'error_code': error.error_code})
        await self.notifier.notify(result)
        return result

    async def _audit(self, event_type: AuditEventType, method: Optional[LoginMethod] = None,
                     attempt_id: Optional[str] = None, severity: str = "info",
                     details: Optional[Dict[str, Any]] = None) -> None:
        event = AuditEvent(
            event_type=event_type,
            method=method,
            attempt_id=attempt_id,
            severity=severity,
            details=details or {},
        )
        try:
            await self.audit_logger.log(event)
        except Exception as e:
            self.logger.error(f"Failed to write audit event {event_type.value}: {e}")
