# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Bridge from callback-style backend SDKs to awaitables.

SDK completion handlers may fire on any thread and, in buggy SDKs, more
than once. ``SingleCompletion`` accepts the first completion, hands it to
the owning event loop and ignores the rest.
"""

import asyncio
import logging
import threading
from typing import Any, Callable, Optional

from .client import BackendAuthClient
from ..auth.errors import BackendError
from ..core.types import Credential, LoginMethod, Session

logger = logging.getLogger(__name__)


class SingleCompletion:
    """One-shot completion signal that is safe to complete from any thread."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None, name: str = "completion"):
        self.name = name
        self._loop = loop or asyncio.get_running_loop()
        self._future = self._loop.create_future()
        self._lock = threading.Lock()
        self._completed = False

    @property
    def completed(self) -> bool:
        return self._completed

    def complete(self, value: Any = None, error: Optional[BaseException] = None) -> bool:
        """
        Deliver the outcome. Returns False if a completion was already delivered.
        """
        with self._lock:
            if self._completed:
                logger.warning(f"Duplicate completion for {self.name} ignored")
                return False
            self._completed = True

        self._loop.call_soon_threadsafe(self._resolve, value, error)
        return True

    def _resolve(self, value: Any, error: Optional[BaseException]) -> None:
        if self._future.done():
            return
        if error is not None:
            self._future.set_exception(error)
        else:
            self._future.set_result(value)

    async def wait(self) -> Any:
        """Wait for the first completion."""
        return await self._future

    def __await__(self):
        return self._future.__await__()


class CallbackBackendClient(BackendAuthClient):
    """
    Adapts an SDK whose sign-in calls report through ``completion(user, error)``.

    The SDK must provide ``sign_in_with_password(email, password, completion)``
    and ``sign_in_with_credential(provider_id, token, raw_nonce, completion)``.
    ``user`` is a ``Session`` or any object with a ``uid`` attribute.
    """

    def __init__(self, sdk: Any):
        self.sdk = sdk

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        """Sign in with email and password through the SDK."""
        completion = SingleCompletion(name=f"password sign-in for {email}")
        self.sdk.sign_in_with_password(email, password, self._handler(completion))
        user = await completion
        return self._to_session(user, LoginMethod.PASSWORD)

    async def sign_in_with_credential(self, credential: Credential) -> Session:
        """Sign in with a provider credential through the SDK."""
        completion = SingleCompletion(name=f"{credential.provider_id} sign-in")
        self.sdk.sign_in_with_credential(
            credential.provider_id, credential.token, credential.raw_nonce,
            self._handler(completion)
        )
        user = await completion
        return self._to_session(user, credential.provider)

    @staticmethod
    def _handler(completion: SingleCompletion) -> Callable[[Any, Any], None]:
        def handle(user: Any, error: Any) -> None:
            if error is not None:
                completion.complete(error=error if isinstance(error, BackendError) else BackendError(str(error)))
            elif user is None:
                completion.complete(error=BackendError("Identity backend returned no user."))
            else:
                completion.complete(user)
        return handle

    @staticmethod
    def _to_session(user: Any, method: LoginMethod) -> Session:
        if isinstance(user, Session):
            return user
        uid = getattr(user, 'uid', None)
        if not uid:
            raise BackendError("Identity backend returned a user without an id.")
        return Session(
            subject_id=uid,
            method=method,
            display_name=getattr(user, 'display_name', None),
            email=getattr(user, 'email', None),
        )
