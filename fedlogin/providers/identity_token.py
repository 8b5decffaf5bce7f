# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Adapter for identity-token providers protected by a nonce (Apple).

Protocol Usage Declaration:
  - OpenID:  USED for the identity token and its ``nonce`` claim
  - OAuth 2.0: USED for the scope list in the authorization request

The attempt keeps the raw nonce; the request carries its SHA-256 digest.
The provider echoes the nonce back, either through its SDK result or in
the identity token's ``nonce`` claim. An echo of the digest is mapped
back to the raw nonce it was computed from. Whether the echo matches
the attempt is decided by the orchestrator, not here.
"""

import logging
from typing import Any, Optional

from .base import CredentialAdapter
from ..auth.errors import NonceMissing, ProviderRejected, ProviderTokenMissing
from ..auth.nonce import NonceGenerator, DEFAULT_NONCE_LENGTH
from ..core.types import Credential, IdentityTokenResult, LoginAttempt, ProviderRequest
from ..util.encoding import extract_jwt_claims, secure_compare

logger = logging.getLogger(__name__)


class NonceCredentialAdapter(CredentialAdapter):
    """Identity-token adapter with replay protection."""

    requires_nonce = True

    def __init__(self, method, display_name=None, scopes=None,
                 nonce_generator: Optional[NonceGenerator] = None,
                 nonce_length: int = DEFAULT_NONCE_LENGTH):
        super().__init__(method, display_name, scopes)
        self.nonce_generator = nonce_generator or NonceGenerator()
        self.nonce_length = nonce_length

    def create_nonce(self) -> str:
        """Fresh raw nonce for a new attempt."""
        return self.nonce_generator.generate(self.nonce_length)

    def prepare(self, attempt: LoginAttempt) -> ProviderRequest:
        """Request carrying the digest of the attempt's nonce."""
        if attempt.nonce is None:
            raise NonceMissing(f"Invalid {self.display_name} Sign-In request.")

        request = super().prepare(attempt)
        request.hashed_nonce = self.nonce_generator.hash(attempt.nonce)
        return request

    def exchange(self, attempt: LoginAttempt, result: Any) -> Credential:
        """Build a credential from the identity token and the echoed nonce."""
        if not isinstance(result, IdentityTokenResult):
            raise ProviderRejected(
                f"Unexpected {self.display_name} result: {type(result).__name__}",
                details={'expected': 'IdentityTokenResult'}
            )

        if result.error:
            raise ProviderRejected(f"{self.display_name} Sign-In failed: {result.error}")

        if attempt.nonce is None:
            logger.warning(f"Identity token for attempt {attempt.attempt_id} arrived with no recorded nonce")
            raise NonceMissing(f"Invalid {self.display_name} Sign-In request.")

        token = (result.identity_token or "").strip()
        if not token:
            raise ProviderTokenMissing(f"Invalid {self.display_name} Sign-In request.")

        claims = extract_jwt_claims(token)
        if claims is None:
            raise ProviderTokenMissing(
                f"Invalid {self.display_name} Sign-In request.",
                details={'reason': 'identity token is not a JWT'}
            )

        echoed = result.nonce if result.nonce is not None else claims.get('nonce')
        return Credential(
            provider=self.method,
            token=token,
            raw_nonce=self._resolve_raw_nonce(attempt.nonce, echoed),
        )

    def _resolve_raw_nonce(self, stored: str, echoed: Any) -> Optional[str]:
        if not isinstance(echoed, str) or not echoed:
            return None
        if secure_compare(echoed, self.nonce_generator.hash(stored)):
            return stored
        return echoed
