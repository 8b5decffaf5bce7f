# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Credential adapter interface for federated providers.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ..core.types import Credential, LoginAttempt, LoginMethod, ProviderRequest


class CredentialAdapter(ABC):
    """
    Converts a provider-specific authorization outcome into a ``Credential``.

    Adapters are stateless; anything that belongs to one attempt (such as
    the nonce) lives on the ``LoginAttempt`` passed in.
    """

    method: LoginMethod
    display_name: str = ""
    requires_nonce = False

    def __init__(self, method: LoginMethod, display_name: Optional[str] = None,
                 scopes: Optional[List[str]] = None):
        self.method = method
        self.display_name = display_name or method.value.capitalize()
        self.scopes = list(scopes or [])

    def create_nonce(self) -> Optional[str]:
        """Nonce to store on a newly begun attempt, if this provider uses one."""
        return None

    def prepare(self, attempt: LoginAttempt) -> ProviderRequest:
        """Build the authorization request handed to the provider's UI."""
        return ProviderRequest(
            attempt_id=attempt.attempt_id,
            method=self.method,
            scopes=list(self.scopes),
        )

    @abstractmethod
    def exchange(self, attempt: LoginAttempt, result: Any) -> Credential:
        """
        Convert the provider outcome for ``attempt`` into a credential.

        Raises:
            ProviderError: If the provider cancelled, failed or gave no token
            NonceMissing: If a nonce-bearing attempt has no recorded nonce
        """
        pass

    def wrap_backend_error(self, error: Exception) -> Optional[Exception]:
        """Hook for adapters that report backend-stage failures themselves."""
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(method={self.method.value!r})"
