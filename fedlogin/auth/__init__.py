# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package auth provides the error taxonomy and nonce handling for login attempts.

This package implements:
- The login error hierarchy (validation, busy, provider, nonce, backend)
- Secure nonce generation and hashing for identity-token providers
"""

from .errors import (
    # Login errors
    LoginError,
    ValidationError,
    UnsupportedMethodError,
    BusyError,
    ProviderError,
    ProviderCancelled,
    ProviderTokenMissing,
    ProviderRejected,
    ChainedExchangeError,
    NonceMissing,
    NonceMismatch,
    BackendError,
    AttemptTimeout,

    # Fatal
    EntropyUnavailableError,
)

from .nonce import (
    NonceGenerator,
    NONCE_ALPHABET,
    DEFAULT_NONCE_LENGTH,
    random_nonce_string,
    sha256_hex,
)

__all__ = [
    # Errors
    'LoginError',
    'ValidationError',
    'UnsupportedMethodError',
    'BusyError',
    'ProviderError',
    'ProviderCancelled',
    'ProviderTokenMissing',
    'ProviderRejected',
    'ChainedExchangeError',
    'NonceMissing',
    'NonceMismatch',
    'BackendError',
    'AttemptTimeout',
    'EntropyUnavailableError',

    # Nonce
    'NonceGenerator',
    'NONCE_ALPHABET',
    'DEFAULT_NONCE_LENGTH',
    'random_nonce_string',
    'sha256_hex',
]
