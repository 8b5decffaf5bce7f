# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Identity backend boundary.

The orchestrator only ever talks to ``BackendAuthClient``. Each call
completes exactly once, either returning a ``Session`` or raising
``BackendError``; the wire protocol is up to the implementation.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..auth.errors import BackendError
from ..auth.nonce import sha256_hex
from ..core.types import Credential, LoginMethod, Session
from ..util.encoding import extract_jwt_claims, secure_compare

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "The supplied auth credential is incorrect, malformed or has expired."


class BackendAuthClient(ABC):
    """Abstract identity backend client."""

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> Session:
        """Sign in with an email and password."""
        pass

    @abstractmethod
    async def sign_in_with_credential(self, credential: Credential) -> Session:
        """Sign in with a federated provider credential."""
        pass

    async def close(self) -> None:
        """Release resources held by the client."""
        pass


@dataclass
class _Account:
    subject_id: str
    password_hash: str
    display_name: Optional[str] = None


class InMemoryBackendClient(BackendAuthClient):
    """In-memory identity backend for development and testing"""

    def __init__(self, response_delay: float = 0.0):
        self.response_delay = response_delay
        self.calls: List[Tuple[str, Any]] = []
        self._accounts: Dict[str, _Account] = {}
        self._identities: Dict[Tuple[str, str], str] = {}
        self._error: Optional[Exception] = None

    def register_user(self, email: str, password: str, subject_id: str,
                      display_name: Optional[str] = None) -> None:
        """Register a password account."""
        self._accounts[email.lower()] = _Account(subject_id, sha256_hex(password), display_name)

    def register_identity(self, provider: LoginMethod, token: str, subject_id: str) -> None:
        """Accept ``token`` from ``provider`` as proof of ``subject_id``."""
        self._identities[(provider.provider_id, token)] = subject_id

    def set_error(self, error: Optional[Exception]) -> None:
        """Make every following call raise ``error`` (None to clear)."""
        self._error = error

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        """Sign in against the registered accounts."""
        self.calls.append(("password", email))
        await self._simulate()

        account = self._accounts.get(email.lower())
        if account is None or not secure_compare(account.password_hash, sha256_hex(password)):
            raise BackendError(INVALID_CREDENTIALS_MESSAGE, "INVALID_LOGIN_CREDENTIALS")

        return Session(
            subject_id=account.subject_id,
            method=LoginMethod.PASSWORD,
            display_name=account.display_name,
            email=email,
        )

    async def sign_in_with_credential(self, credential: Credential) -> Session:
        """Sign in against the registered federated identities."""
        self.calls.append(("credential", credential))
        await self._simulate()

        if credential.raw_nonce is not None:
            self._check_nonce(credential)

        subject_id = self._identities.get((credential.provider_id, credential.token))
        if subject_id is None:
            raise BackendError(INVALID_CREDENTIALS_MESSAGE, "INVALID_IDP_RESPONSE")

        return Session(subject_id=subject_id, method=credential.provider)

    def _check_nonce(self, credential: Credential) -> None:
        claims = extract_jwt_claims(credential.token) or {}
        claimed = claims.get('nonce')
        if claimed is None:
            return
        if not (secure_compare(claimed, credential.raw_nonce)
                or secure_compare(claimed, sha256_hex(credential.raw_nonce))):
            raise BackendError("Nonce in the identity token does not match the supplied nonce.",
                               "MISSING_OR_INVALID_NONCE")

    async def _simulate(self) -> None:
        if self.response_delay:
            await asyncio.sleep(self.response_delay)
        if self._error is not None:
            raise self._error
