# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package providers normalizes federated provider outcomes into credentials.

Protocol Usage Declaration:
  - OAuth 2.0: USED for access-token providers (Google, GitHub, Facebook)
  - OpenID:    USED for the identity-token provider (Apple)
  - PKCE:      NOT USED anywhere in this package
"""

from .base import CredentialAdapter
from .access_token import SimpleOAuthAdapter, read_access_token
from .chained import ChainedCredentialAdapter
from .identity_token import NonceCredentialAdapter
from .registry import create_default_adapters

__all__ = [
    'CredentialAdapter',
    'SimpleOAuthAdapter',
    'read_access_token',
    'ChainedCredentialAdapter',
    'NonceCredentialAdapter',
    'create_default_adapters',
]
