# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Two-stage adapter for providers whose SDK token is exchanged for a
backend credential (Facebook).

Stage one failures (cancel, missing token, provider error) are raised by
``exchange``. Stage two failures come from the backend and are reported
through ``wrap_backend_error`` as ``ChainedExchangeError`` so the two
stages stay distinguishable.
"""

import logging
from typing import Any, Optional

from .access_token import read_access_token
from .base import CredentialAdapter
from ..auth.errors import AttemptTimeout, BackendError, ChainedExchangeError
from ..core.types import Credential, LoginAttempt
from ..util.encoding import mask_sensitive_data

logger = logging.getLogger(__name__)


class ChainedCredentialAdapter(CredentialAdapter):
    """Provider token -> provider credential -> backend sign-in."""

    def exchange(self, attempt: LoginAttempt, result: Any) -> Credential:
        """Stage one: turn the provider-native access token into a credential."""
        token = read_access_token(
            self.display_name,
            result,
            cancelled_message=f"{self.display_name} login was cancelled.",
            missing_message="Failed to get access token.",
        )
        logger.debug(f"{self.display_name} token exchanged for credential: {mask_sensitive_data(token)}")
        return Credential(provider=self.method, token=token)

    def wrap_backend_error(self, error: Exception) -> Optional[Exception]:
        """Stage two: report a rejected exchanged credential distinctly."""
        if isinstance(error, AttemptTimeout):
            return None

        reason = error.message if isinstance(error, BackendError) else str(error)
        details = {'backend_error_code': getattr(error, 'error_code', type(error).__name__)}
        return ChainedExchangeError(
            f"Sign-in with {self.display_name} credential failed: {reason}",
            details=details,
        )
