# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Adapters for OAuth-style providers that hand back an access token.
"""

import logging
from typing import Any

from .base import CredentialAdapter
from ..auth.errors import ProviderCancelled, ProviderRejected, ProviderTokenMissing
from ..core.types import AccessTokenResult, Credential, LoginAttempt
from ..util.encoding import mask_sensitive_data

logger = logging.getLogger(__name__)


def read_access_token(display_name: str, result: Any,
                      cancelled_message: str = None,
                      missing_message: str = None) -> str:
    """
    Pull the access token out of a provider result.

    Raises:
        ProviderRejected: The provider reported an error
        ProviderCancelled: The user dismissed the provider flow
        ProviderTokenMissing: Success without a usable token
    """
    if not isinstance(result, AccessTokenResult):
        raise ProviderRejected(
            f"Unexpected {display_name} result: {type(result).__name__}",
            details={'expected': 'AccessTokenResult'}
        )

    if result.error:
        raise ProviderRejected(f"{display_name} login failed: {result.error}")

    if result.cancelled:
        raise ProviderCancelled(cancelled_message or f"{display_name} login was cancelled.")

    token = (result.access_token or "").strip()
    if not token:
        raise ProviderTokenMissing(missing_message or f"Failed to get {display_name} access token.")

    return token


class SimpleOAuthAdapter(CredentialAdapter):
    """Maps a provider access token straight onto a credential (Google, GitHub)."""

    def exchange(self, attempt: LoginAttempt, result: Any) -> Credential:
        """Exchange a provider access token for a credential."""
        token = read_access_token(self.display_name, result)
        logger.debug(f"{self.display_name} access token received: {mask_sensitive_data(token)}")
        return Credential(provider=self.method, token=token)
